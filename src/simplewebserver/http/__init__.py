"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST READING (request.py)                                        │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Consumes request lines until the blank line, finds the GET target   │
    │ and classifies it (.html page, .ico icon, other)                    │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ PATH RESOLUTION (resolver.py)                                       │
    │ ─────────────────────────────────────────────────────────────────── │
    │ root + target → file on disk, 200 or 404, fallback error page       │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE HEADER (response.py)                                       │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Status, Date, Server, Connection: close, Content-Type, blank line   │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ STATUS CODES (status_codes.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ 200 OK and 404 Not Found, nothing else                              │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import RequestLine, ParsedRequest, RequestParser, parse_request
from .resolver import Resolution, PathResolver, NOT_FOUND
from .response import ResponseHeader, write_header, format_http_date
from .status_codes import HTTPStatus

__all__ = [
    # Request reading
    "RequestLine",
    "ParsedRequest",
    "RequestParser",
    "parse_request",

    # Path resolution
    "Resolution",
    "PathResolver",
    "NOT_FOUND",

    # Response header
    "ResponseHeader",
    "write_header",
    "format_http_date",

    # Status codes
    "HTTPStatus",
]
