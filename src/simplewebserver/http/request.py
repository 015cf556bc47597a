"""
=============================================================================
HTTP REQUEST READING
=============================================================================

Reads the request header block from a connection, one line at a time, and
works out which file the response will be about.

=============================================================================
WHAT WE ACTUALLY LOOK AT
=============================================================================

    GET /index.html HTTP/1.1\r\n     ← request line: method + target
    Host: localhost:8080\r\n         ← ignored
    User-Agent: curl/8.0\r\n         ← ignored
    \r\n                             ← blank line: stop reading

Only the request line matters. Headers are consumed and thrown away, and
the body (if a client sends one) is never read.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    TARGET CLASSIFICATION                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   target ends with ".html"  →  HTML page, resolve it on disk        │
    │   target ends with ".ico"   →  icon, noted in the log, stays 404    │
    │   anything else             →  unclassified, stays 404              │
    │                                                                     │
    │   Suffix checks are case-sensitive: "/INDEX.HTML" is unclassified.  │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
NEVER FAIL THE RESPONSE
=============================================================================

Whatever happens while reading (client hangs up, read timeout, garbage
bytes) the caller still has to write a response. So read() never raises
for I/O problems: it stops, records the error on the result, and hands
back whatever it found. With nothing found, that is a plain 404.

=============================================================================
"""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .resolver import NOT_FOUND, PathResolver, Resolution


logger = logging.getLogger(__name__)


HTML_SUFFIX = ".html"
ICON_SUFFIX = ".ico"

MAX_REQUEST_SIZE = 64 * 1024  # bytes, blank line included


@dataclass(frozen=True)
class RequestLine:
    """
    The parsed first line of a request.

    Attributes:
        method: Method token exactly as sent ("GET", "POST", ...).
        target: Requested path exactly as sent ("/index.html").
        version: Protocol token if present ("HTTP/1.1"), else None.
    """

    method: str
    target: str
    version: Optional[str] = None

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_html_target(self) -> bool:
        # endswith() never indexes out of range, so "/a" is simply False
        return self.target.endswith(HTML_SUFFIX)

    @property
    def is_icon_target(self) -> bool:
        return self.target.endswith(ICON_SUFFIX)

    @classmethod
    def parse(cls, line: str) -> Optional["RequestLine"]:
        """
        Split a line into method, target and optional version.

        Returns None when the line has fewer than two tokens.
        """
        tokens = line.split()
        if len(tokens) < 2:
            return None
        version = tokens[2] if len(tokens) > 2 else None
        return cls(method=tokens[0], target=tokens[1], version=version)


@dataclass
class ParsedRequest:
    """
    Everything the reader learned about one request.

    Attributes:
        request_line: The first GET line found, or None.
        resolution: Path/status decision. Defaults to not found.
        lines_read: Number of lines consumed, blank terminator included.
        bytes_read: Raw bytes consumed from the stream.
        complete: True if the blank line ending the headers was seen.
        too_large: True if reading stopped at the size limit.
        error: The I/O error that cut reading short, if any.
    """

    request_line: Optional[RequestLine] = None
    resolution: Resolution = NOT_FOUND
    lines_read: int = 0
    bytes_read: int = 0
    complete: bool = False
    too_large: bool = False
    error: Optional[OSError] = None

    @property
    def method(self) -> str:
        return self.request_line.method if self.request_line else "-"

    @property
    def target(self) -> str:
        return self.request_line.target if self.request_line else "-"


class RequestParser:
    """
    Reads a request header block and resolves its target.

    Usage:
        parser = RequestParser(PathResolver("/srv/www"))
        parsed = parser.read(conn.reader)
        parsed.resolution.status_line   # "HTTP/1.1 200 OK"
    """

    def __init__(self, resolver: PathResolver, max_request_size: int = MAX_REQUEST_SIZE):
        """
        Args:
            resolver: Resolver for the document root.
            max_request_size: Bytes read before the request is abandoned.
                              An oversized request gets the default 404.
        """
        self.resolver = resolver
        self.max_request_size = max_request_size

    def read(self, stream: BinaryIO) -> ParsedRequest:
        """
        Consume lines from stream until the blank line or end of stream.

        =====================================================================
        READ LOOP
        =====================================================================

            while True:
                readline()            blocks until a full line arrives
                                      (bounded by the socket timeout)
                  │
                  ├── b""             end of stream  → stop
                  ├── OSError         reset/timeout  → record, stop
                  ├── over the limit  too large      → 404, stop
                  ├── first GET line  → classify target, maybe resolve
                  └── ""              blank line     → stop

        =====================================================================

        Args:
            stream: Readable binary stream (socket file or BytesIO).

        Returns:
            ParsedRequest. Never raises for I/O errors.
        """
        parsed = ParsedRequest()

        while True:
            # One byte past the budget is enough to tell the request is too big
            remaining = self.max_request_size - parsed.bytes_read + 1
            try:
                raw = stream.readline(remaining)
            except OSError as e:
                parsed.error = e
                break

            if not raw:
                # Peer closed without sending the blank line
                break

            parsed.bytes_read += len(raw)
            if parsed.bytes_read > self.max_request_size:
                parsed.too_large = True
                parsed.resolution = NOT_FOUND
                break

            parsed.lines_read += 1
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            logger.debug(f"Request line: ({line})")

            if parsed.request_line is None:
                request_line = RequestLine.parse(line)
                if request_line is not None and request_line.is_get:
                    parsed.request_line = request_line
                    parsed.resolution = self._classify(request_line)

            if len(line) == 0:
                parsed.complete = True
                break

        return parsed

    def _classify(self, request_line: RequestLine) -> Resolution:
        target = request_line.target

        if request_line.is_html_target:
            logger.debug(f"Web page requested: {target}")
            return self.resolver.resolve(target)

        if request_line.is_icon_target:
            logger.debug(f"Icon requested: {target}")

        return NOT_FOUND


def parse_request(data: bytes, resolver: PathResolver) -> ParsedRequest:
    """
    Convenience function to parse a complete request held in memory.

    Args:
        data: Raw request bytes.
        resolver: Resolver for the document root.

    Returns:
        ParsedRequest.
    """
    return RequestParser(resolver).read(io.BytesIO(data))
