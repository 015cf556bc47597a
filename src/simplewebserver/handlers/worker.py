"""
=============================================================================
WEB WORKER
=============================================================================

Handles exactly one client connection from start to finish. The web server
runs one of these calls per accepted connection, each in its own thread.

=============================================================================
ONE CONNECTION, FOUR STEPS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   1. READ REQUEST      request lines until the blank line           │
    │          │             → RequestLine + Resolution (200/404)         │
    │          ▼                                                          │
    │   2. RESOLVE FILE      the page itself, or res/acc/error404.html    │
    │          │                                                          │
    │          ▼                                                          │
    │   3. WRITE HEADER      status, Date, Server, Connection, type       │
    │          │                                                          │
    │          ▼                                                          │
    │   4. WRITE BODY        file lines with template tags filled in      │
    │          │                                                          │
    │          ▼                                                          │
    │      flush + close     always, even after an error                  │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

The steps never overlap or reorder: the status must be known before the
header goes out, and the header must be complete before the body starts.

=============================================================================
ERRORS STAY INSIDE THE CONNECTION
=============================================================================

Each step reports trouble as a value (ParsedRequest.error,
StreamResult.error, Exchange.error) and the worker logs it. An I/O error
skips whatever steps are left. Nothing propagates to the thread or to
other connections, and the socket is closed on every path.

=============================================================================
"""

import json
import time
import logging
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from ..config import ServerConfig
from ..core.connection import Connection, ConnectionState
from ..http.request import ParsedRequest, RequestParser
from ..http.resolver import PathResolver
from ..http.response import write_header
from ..http.status_codes import HTTPStatus
from .template import ContentStreamer, StreamResult, TagRenderer, local_timestamp


logger = logging.getLogger(__name__)

# Separate logger so access lines can be routed to their own file:
#   logging.getLogger("simplewebserver.access").addHandler(file_handler)
access_logger = logging.getLogger("simplewebserver.access")


@dataclass
class Exchange:
    """
    Outcome of answering one request.

    Attributes:
        parsed: What was read from the client.
        served_file: File chosen as the body source, once decided.
        header_bytes: Size of the header block written.
        body: Streaming result, None if the header write failed.
        error: Header or flush failure that ended the response early.
    """

    parsed: ParsedRequest
    served_file: Optional[str] = None
    header_bytes: int = 0
    body: Optional[StreamResult] = None
    error: Optional[OSError] = None

    @property
    def status(self) -> HTTPStatus:
        return self.parsed.resolution.status

    @property
    def body_bytes(self) -> int:
        return self.body.bytes_written if self.body else 0


@dataclass
class AccessLogEntry:
    """
    One access log record per connection.

    Attributes:
        connection_id: Connection identifier (matches other log lines).
        client_ip: Client's IP address.
        method: Request method, "-" if no request line was found.
        target: Request target, "-" if no request line was found.
        status_code: Status sent to the client.
        body_bytes: Body bytes actually written.
        duration_ms: Time from accept to close.
        timestamp: When the connection finished.
    """

    connection_id: str
    client_ip: str
    method: str
    target: str
    status_code: int
    body_bytes: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON logs."""
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "method": self.method,
            "target": self.target,
            "status_code": self.status_code,
            "body_bytes": self.body_bytes,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Apache-style access line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.body_bytes} {self.duration_ms:.2f}ms'
        )


class WebWorker:
    """
    Answers a single HTTP request per connection.

    The worker only holds configuration and stateless helpers, so one
    instance is shared by every connection thread. All per-request state
    lives in local values (ParsedRequest, Exchange).

    Usage:
        worker = WebWorker(ServerConfig(root="/srv/www"))
        worker.handle(conn)                    # real connection
        worker.respond(reader, writer)         # any pair of binary streams
    """

    def __init__(
        self,
        config: ServerConfig,
        clock: Callable[[], str] = local_timestamp,
    ):
        """
        Args:
            config: Server configuration.
            clock: Timestamp source for <cs371date> tags.
        """
        self.config = config
        self.resolver = PathResolver(
            root=config.root,
            error_page=config.error_page,
            confine_to_root=config.confine_to_root,
        )
        self.parser = RequestParser(self.resolver, config.max_request_size)

        renderer = TagRenderer(config.server_id, clock) if config.substitute_tags else None
        self.streamer = ContentStreamer(renderer)

    # =========================================================================
    # CONNECTION ENTRY POINT
    # =========================================================================

    def handle(self, conn: Connection) -> None:
        """
        Handle one connection (runs in its own thread).

        Never raises: anything unexpected is logged and the connection is
        closed by the with block.
        """
        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip}")
        exchange: Optional[Exchange] = None

        with conn:
            try:
                conn.state = ConnectionState.READING
                parsed = self.read_request(conn.reader, conn.id)

                conn.state = ConnectionState.WRITING
                exchange = self.write_response(conn.writer, parsed, conn.id)
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")

        if exchange is not None:
            self._log_access(conn, exchange)
        logger.debug(f"[{conn.id}] Done handling connection")

    def respond(self, reader: BinaryIO, writer: BinaryIO, log_id: str = "-") -> Exchange:
        """Read a request from reader and write the response to writer."""
        parsed = self.read_request(reader, log_id)
        return self.write_response(writer, parsed, log_id)

    # =========================================================================
    # STEPS
    # =========================================================================

    def read_request(self, reader: BinaryIO, log_id: str = "-") -> ParsedRequest:
        """Step 1: read the request and decide the status."""
        parsed = self.parser.read(reader)

        if parsed.error is not None:
            logger.warning(f"[{log_id}] Request error: {parsed.error}")
        elif parsed.too_large:
            logger.warning(
                f"[{log_id}] Request too large: over {self.parser.max_request_size} bytes"
            )
        elif not parsed.complete:
            logger.debug(f"[{log_id}] Request ended without a blank line")

        return parsed

    def write_response(
        self,
        writer: BinaryIO,
        parsed: ParsedRequest,
        log_id: str = "-",
    ) -> Exchange:
        """
        Steps 2-4: pick the body file, write header, stream body, flush.

        An OSError ends the response where it happened. It is recorded on
        the returned Exchange and logged, never raised.
        """
        exchange = Exchange(parsed=parsed)

        try:
            exchange.header_bytes = write_header(
                writer,
                status=exchange.status,
                content_type=self.config.content_type,
                server=self.config.server_header,
            )

            exchange.served_file = self.resolver.served_file(parsed.resolution)
            exchange.body = self.streamer.stream(writer, exchange.served_file)
            self._report_body(exchange.body, log_id)

            if exchange.body.opened and exchange.body.error is not None:
                # Client is gone mid-body, a flush would fail the same way
                return exchange

            writer.flush()
        except OSError as e:
            exchange.error = e
            logger.warning(f"[{log_id}] Output error: {e}")

        return exchange

    # =========================================================================
    # REPORTING
    # =========================================================================

    def _report_body(self, result: StreamResult, log_id: str) -> None:
        if not result.opened:
            logger.error(f"[{log_id}] Cannot open {result.path}: {result.error}")
        elif result.error is not None:
            logger.warning(
                f"[{log_id}] Body truncated after {result.lines_written} lines: {result.error}"
            )
        else:
            logger.debug(
                f"[{log_id}] Sent {result.path} ({result.bytes_written} bytes, "
                f"{result.date_tags} date tags, {result.server_tags} server tags)"
            )

    def _log_access(self, conn: Connection, exchange: Exchange) -> None:
        entry = AccessLogEntry(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=exchange.parsed.method,
            target=exchange.parsed.target,
            status_code=int(exchange.status),
            body_bytes=exchange.body_bytes,
            duration_ms=conn.age * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.config.log_format == "json":
            access_logger.info(json.dumps(entry.to_dict()))
        else:
            access_logger.info(entry.to_text())
