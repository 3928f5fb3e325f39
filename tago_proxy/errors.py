"""Error taxonomy for the bus location proxy.

Every error carries the HTTP status the proxy answers with and renders to a
JSON body holding at least an ``error`` message.
"""
from typing import Any, Dict, Optional


class TagoProxyError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = {k: v for k, v in extra.items() if v is not None}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class InvalidRequest(TagoProxyError):
    """Required query parameters are missing."""

    status_code = 400
    default_message = "cityCode and routeId query parameters are required"


class MisconfiguredService(TagoProxyError):
    """The TAGO service key is not configured on the server."""

    status_code = 500
    default_message = "TAGO service key is not configured on the server"


class UpstreamError(TagoProxyError):
    """The TAGO API failed, timed out or answered with a non-success status."""

    status_code = 500
    default_message = "TAGO API error"

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None, **extra: Any):
        super().__init__(message, status=status, **extra)
        self.status = status


class ParseError(UpstreamError):
    """The TAGO API returned a payload that could not be decoded."""

    default_message = "Malformed response from TAGO API"
