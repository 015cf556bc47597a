"""
=============================================================================
CONTENT STREAMING WITH TEMPLATE TAGS
=============================================================================

Copies a file to the client line by line, filling in two placeholder tags
on the way.

=============================================================================
TEMPLATE TAGS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  TAG              REPLACED WITH                                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │  <cs371date>      current time, e.g. 2026-10-19T16:45:00.123456     │
    │  <cs371server>    server identifier, e.g. Josh G's CS371 Web Server │
    └─────────────────────────────────────────────────────────────────────┘

Both tags are case-sensitive and replaced on every occurrence, every
time a page is served. Each <cs371date> gets its own clock reading at the
moment it is written, so two tags on the same page can differ.

Replacement happens per line. A tag split across two lines is just text.

=============================================================================
STREAMING, NOT BUFFERING
=============================================================================

    file ──readline──► substitute ──write──► socket
      ▲                                        │
      └────────────── next line ◄──────────────┘

Lines are read in binary mode and keep their own terminators. Nothing is
added or stripped, so a page without tags reaches the client byte for
byte. Memory use stays at one line regardless of file size.

=============================================================================
FAILURE
=============================================================================

The header has already been sent by the time we get here, so there is no
way to change the status. On failure we stop writing and report it in the
StreamResult:

    - cannot open the file      → empty body
    - error halfway through     → body truncated, earlier lines stay sent

No error text is ever injected into the body.

=============================================================================
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Callable, Optional


DATE_TAG = b"<cs371date>"
SERVER_TAG = b"<cs371server>"

_DATE_TAG_PATTERN = re.compile(re.escape(DATE_TAG))


def local_timestamp() -> str:
    """Local wall-clock time as ISO-8601."""
    return datetime.now().isoformat()


@dataclass
class StreamResult:
    """
    What happened while streaming one file.

    Attributes:
        path: File that was (or should have been) streamed.
        opened: Whether the file could be opened at all.
        lines_written: Lines fully written to the client.
        bytes_written: Body bytes written to the client.
        date_tags: <cs371date> occurrences substituted.
        server_tags: <cs371server> occurrences substituted.
        error: The error that stopped streaming, if any.
    """

    path: str
    opened: bool = False
    lines_written: int = 0
    bytes_written: int = 0
    date_tags: int = 0
    server_tags: int = 0
    error: Optional[OSError] = None

    @property
    def ok(self) -> bool:
        return self.opened and self.error is None


class TagRenderer:
    """
    Substitutes template tags within a single line.

    Args:
        server_id: Replacement for <cs371server>.
        clock: Called once per <cs371date> occurrence.
    """

    def __init__(
        self,
        server_id: str = "Josh G's CS371 Web Server",
        clock: Callable[[], str] = local_timestamp,
    ):
        self.server_id = server_id
        self.clock = clock
        self._server_id_bytes = server_id.encode("utf-8")

    def render(self, line: bytes) -> bytes:
        if DATE_TAG in line:
            line = _DATE_TAG_PATTERN.sub(self._timestamp, line)
        if SERVER_TAG in line:
            line = line.replace(SERVER_TAG, self._server_id_bytes)
        return line

    def _timestamp(self, match: "re.Match[bytes]") -> bytes:
        return self.clock().encode("utf-8")


class ContentStreamer:
    """
    Streams a file to a writable stream, rendering tags line by line.

    Usage:
        streamer = ContentStreamer(TagRenderer("My Server"))
        result = streamer.stream(conn.writer, "/srv/www/index.html")
        if not result.ok:
            logger.warning(result.error)

    Pass renderer=None to stream the file untouched.
    """

    def __init__(self, renderer: Optional[TagRenderer] = None):
        self.renderer = renderer

    def stream(self, writer: BinaryIO, path: str) -> StreamResult:
        """
        Write the content of path to writer.

        Args:
            writer: Writable binary stream. Must already hold the header.
            path: File to serve.

        Returns:
            StreamResult. Never raises for I/O errors.
        """
        result = StreamResult(path=path)

        try:
            source = open(path, "rb")
        except OSError as e:
            result.error = e
            return result

        result.opened = True

        # The with block releases the file even if a write fails mid-way
        with source:
            try:
                for line in source:
                    if self.renderer is not None:
                        result.date_tags += line.count(DATE_TAG)
                        result.server_tags += line.count(SERVER_TAG)
                        line = self.renderer.render(line)
                    writer.write(line)
                    result.lines_written += 1
                    result.bytes_written += len(line)
            except OSError as e:
                result.error = e

        return result
