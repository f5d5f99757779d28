"""Prometheus metrics registry shared by all instrumented modules."""

from storage_gateway.infra.metrics.prometheus import REGISTRY

__all__ = ["REGISTRY"]
