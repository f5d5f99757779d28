"""Main CLI entry point for storage-gateway commands."""

import click

from storage_gateway import __version__
from storage_gateway.cli.commands import storage
from storage_gateway.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="storage-gateway")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Storage Gateway CLI.

    \b
    Command Groups:
      storage    Buckets, listing, folder upload and purge

    \b
    Quick Start:
      storage-gateway storage buckets
      storage-gateway storage ls reports --prefix daily/
      storage-gateway storage upload-folder ./out reports --prefix daily/
      storage-gateway storage purge reports --extension .log
      storage-gateway --server          # run the HTTP API
    """
    ctx.ensure_object(dict)


cli.add_command(storage.storage)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
