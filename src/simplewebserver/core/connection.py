"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket with a pair of buffered binary streams:
one to read the request from, one to write the response to.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. The client may send

    "GET /index.html HTTP/1.1\r\nHost: x\r\n\r\n"

and we may receive it as "GET /ind", "ex.html HTTP/1.1\r\nHo", ...

Rather than collect chunks by hand, we let socket.makefile("rb") do the
buffering. Its readline() blocks until a full line (or EOF) is there:

    ┌───────────────┐  recv()   ┌──────────────────┐  readline()  ┌────────┐
    │  TCP socket   │ ────────► │  BufferedReader  │ ───────────► │ parser │
    └───────────────┘           └──────────────────┘              └────────┘

    ┌───────────────┐  send()   ┌──────────────────┐  write()     ┌────────┐
    │  TCP socket   │ ◄──────── │  BufferedWriter  │ ◄─────────── │ writer │
    └───────────────┘           └──────────────────┘              └────────┘

A socket timeout bounds every blocking readline(). That replaces
busy-polling for "is data ready yet?".

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

    NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED
     │         │           │                      ▲
     └─────────┴───────────┴──── (any error) ─────┘

One request per connection: after the response, we always close.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)

# Upper bounds on reading leftovers from the client at close time
DRAIN_TIMEOUT = 0.5  # seconds, total
DRAIN_LIMIT = 64 * 1024  # bytes


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Used for logging and to make close() idempotent.
    """
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Reading request lines
    WRITING = "writing"      # Sending header and body
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents one client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used to correlate log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout for blocking reads/writes. None = no limit.
        reader: Buffered binary stream for reading the request.
        writer: Buffered binary stream for writing the response.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = 30.0

    # Streams (built from the socket, not shown in repr)
    reader: BinaryIO = field(init=False, repr=False)
    writer: BinaryIO = field(init=False, repr=False)

    def __post_init__(self):
        """
        Configure the socket and open the stream pair.

        Called automatically by dataclass after __init__.
        """
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

        self.reader = self.socket.makefile("rb")
        self.writer = self.socket.makefile("wb")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0] if self.address else ""

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1] if self.address else 0

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. Flush and close the writer (pending body bytes go out)
        2. Close the reader
        3. shutdown(SHUT_WR): send FIN so the client sees end of body
        4. Drain what the client still sends, bounded in time and bytes
        5. close(): release the file descriptor

        Every step tolerates a peer that already went away.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.writer.close()
        except OSError as e:
            logger.debug(f"[{self.id}] Flush on close failed: {e}")

        try:
            self.reader.close()
        except OSError:
            pass

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self) -> int:
        """Read and discard client bytes until EOF, DRAIN_TIMEOUT or DRAIN_LIMIT."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                left = deadline - time.monotonic()
                if left <= 0:
                    break
                self.socket.settimeout(left)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timeout or reset, closing anyway

        if drained:
            logger.debug(f"[{self.id}] Discarded {drained} bytes on close")
        return drained

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows using Connection with a 'with' statement:

            with conn:
                parsed = parser.read(conn.reader)
                ...
            # Connection closed here, whatever happened above
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
