# File: html_scout/fetch/__init__.py
"""html_scout.fetch: building and sending single GET requests."""

from .cookies import ABSENT_COOKIE, Cookie, parse_cookie
from .fetcher import Fetcher
from .models import (
    Address,
    FetchError,
    FetchErrorCause,
    FetchResult,
    InvalidAddress,
    RequestOptions,
    ResponseSet,
)
from .transport import (
    AiohttpTransport,
    HttpxTransport,
    PreparedRequest,
    TransportError,
    TransportResponse,
    build_transport,
)

__all__ = [
    "ABSENT_COOKIE",
    "Address",
    "AiohttpTransport",
    "Cookie",
    "FetchError",
    "FetchErrorCause",
    "FetchResult",
    "HttpxTransport",
    "Fetcher",
    "InvalidAddress",
    "PreparedRequest",
    "RequestOptions",
    "ResponseSet",
    "TransportError",
    "TransportResponse",
    "build_transport",
    "parse_cookie",
]
