"""
=============================================================================
HTTP RESPONSE HEADER
=============================================================================

Builds and writes the header block that precedes every response body.

=============================================================================
THE HEADER, LINE BY LINE
=============================================================================

    HTTP/1.1 200 OK\n                        ← status line
    Date: Mon, 19 Oct 2026 16:45:00 GMT\n    ← when the response was made
    Server: Josh G's very own server\n       ← fixed identifier
    Connection: close\n                      ← one request per connection
    Content-Type: text/html\n                ← fixed content type
    \n                                       ← end of header block

The order never changes and each line ends with a single "\n".

=============================================================================
WHY NO CONTENT-LENGTH?
=============================================================================

The body is streamed line by line while tags are being substituted, so
its size is unknown when the header goes out. Instead the server closes
the connection after the body, and the client reads until EOF:

    Client                                  Server
      │  GET /index.html ──────────────────► │
      │ ◄────────────────── header block     │
      │ ◄────────────────── body line 1      │
      │ ◄────────────────── body line N      │
      │ ◄────────────────── FIN              │  ← this marks end of body

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from .status_codes import HTTPStatus


HEADER_ENCODING = "utf-8"


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Mon, 19 Oct 2026 16:45:00 GMT

    Names are spelled out here rather than via strftime so the result
    does not depend on the process locale.

    Args:
        dt: Datetime to format. Aware datetimes are converted to UTC.

    Returns:
        Formatted date string.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


@dataclass
class ResponseHeader:
    """
    The header block of one response.

    Attributes:
        status: OK or NOT_FOUND. Defaults to NOT_FOUND.
        content_type: Value of the Content-Type line.
        server: Value of the Server line.
        date: Time for the Date line. None means "now" at serialization.
    """

    status: HTTPStatus = HTTPStatus.NOT_FOUND
    content_type: str = "text/html"
    server: str = "Josh G's very own server"
    date: Optional[datetime] = field(default=None)

    def lines(self) -> list[str]:
        """Header lines in wire order, without terminators."""
        date = self.date or datetime.now(timezone.utc)
        return [
            self.status.status_line,
            f"Date: {format_http_date(date)}",
            f"Server: {self.server}",
            "Connection: close",
            f"Content-Type: {self.content_type}",
        ]

    def to_bytes(self) -> bytes:
        """Serialize the header block, blank line included."""
        return ("\n".join(self.lines()) + "\n\n").encode(HEADER_ENCODING)


def write_header(
    stream: BinaryIO,
    status: HTTPStatus,
    content_type: str,
    server: str = "Josh G's very own server",
    date: Optional[datetime] = None,
) -> int:
    """
    Write a response header block to stream.

    The whole block goes out in a single write so a partial failure
    cannot leave a half-written status line.

    Args:
        stream: Writable binary stream.
        status: Status decided while reading the request.
        content_type: MIME type string.
        server: Server header value.
        date: Override for the Date line (tests).

    Returns:
        Number of bytes written.

    Raises:
        OSError: If the stream write fails.
    """
    data = ResponseHeader(
        status=status,
        content_type=content_type,
        server=server,
        date=date,
    ).to_bytes()
    stream.write(data)
    return len(data)
