"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with two statuses:

    HTTP/1.1 200 OK           the requested .html page exists
    HTTP/1.1 404 Not Found    everything else (the default)

There is no 400, 405 or 500. A malformed or non-GET request simply never
gets resolved, so it falls through to 404 along with missing pages.

=============================================================================
"""

from enum import IntEnum


HTTP_VERSION = "HTTP/1.1"


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.status_line
        'HTTP/1.1 404 Not Found'
    """

    OK = 200             # Page found, content follows
    NOT_FOUND = 404      # Page missing or request never resolved

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]

    @property
    def status_line(self) -> str:
        """Full status line without the trailing newline."""
        return f"{HTTP_VERSION} {int(self)} {self.phrase}"

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
