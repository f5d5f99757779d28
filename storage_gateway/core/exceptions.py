"""Application exception root.

Anything raised as an AppException is rendered by the application exception
handler as an RFC 7807 problem details body with the exception's status code.
"""

from __future__ import annotations

from typing import Any

from storage_gateway.core.schemas.problem_details import ProblemDetail


class AppException(Exception):
    """Error that maps onto an HTTP problem details response.

    Attributes:
        status_code: HTTP status of the response.
        detail: Message shown to the caller.
        type: Problem type slug, e.g. ``storage-bucket-not-found``.
        title: Summary of the problem type; the status phrase by default.
        instance: Path of the failing request, filled in by the handler when unset.
        extra: Members merged into the response body.

    Example:
        raise AppException(
            status_code=404,
            detail="Bucket reports does not exist.",
            type="storage-bucket-not-found",
            extra={"bucket": "reports"},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or ProblemDetail.default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
