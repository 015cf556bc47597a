"""
=============================================================================
WEB SERVER
=============================================================================

Ties the pieces together: a SocketServer accepts connections and every
connection gets its own thread running WebWorker.handle().

=============================================================================
THREAD PER CONNECTION
=============================================================================

    ┌──────────────┐   accept()   ┌──────────────┐
    │ SocketServer │ ───────────► │  Connection  │
    └──────────────┘              └──────┬───────┘
                                         │ threading.Thread(target=worker.handle)
                     ┌───────────────────┼───────────────────┐
                     ▼                   ▼                   ▼
               ┌──────────┐        ┌──────────┐        ┌──────────┐
               │ thread 1 │        │ thread 2 │        │ thread 3 │
               │ 1 request│        │ 1 request│        │ 1 request│
               └──────────┘        └──────────┘        └──────────┘

Each thread handles exactly one request and exits. Threads share no
mutable state: the worker holds only configuration, and every connection
owns its own socket and streams. No locks are needed.

The server only keeps a set of live threads so shutdown can wait for
in-flight responses. That set is touched from the accept thread and
from finishing workers, so it has a lock.

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional

from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import WebWorker, local_timestamp


logger = logging.getLogger(__name__)


class WebServer:
    """
    Concurrent one-request-per-connection file server.

    Usage:
        server = WebServer(ServerConfig(root="/srv/www", port=8080))
        server.run()   # Blocks until Ctrl+C / SIGTERM
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        clock: Callable[[], str] = local_timestamp,
    ):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.
            clock: Timestamp source for <cs371date> tags.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._worker = WebWorker(self.config, clock=clock)

        self._threads: set[threading.Thread] = set()
        self._threads_lock = threading.Lock()

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port) once running."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the logging module from config.
                           Pass False when the caller already did.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(f"Serving {self.config.root}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._join_workers()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Stop accepting connections. run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("simplewebserver").setLevel(level)

    def _join_workers(self):
        """Give in-flight connections a bounded time to finish."""
        with self._threads_lock:
            pending = list(self._threads)

        if pending:
            logger.info(f"Waiting for {len(pending)} connection(s) to finish...")

        for thread in pending:
            thread.join(timeout=self.config.join_timeout)
            if thread.is_alive():
                logger.warning(f"{thread.name} still running after shutdown")

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION DISPATCH
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Spawn a thread for a new connection (called by SocketServer).
        """
        thread = threading.Thread(
            target=self._run_worker,
            args=(conn,),
            name=f"worker-{conn.id}",
            daemon=True,
        )

        with self._threads_lock:
            self._threads.add(thread)

        try:
            thread.start()
        except RuntimeError as e:
            # Thread limit reached
            logger.error(f"[{conn.id}] Cannot start worker thread: {e}")
            with self._threads_lock:
                self._threads.discard(thread)
            conn.close()

    def _run_worker(self, conn: Connection):
        try:
            self._worker.handle(conn)
        finally:
            with self._threads_lock:
                self._threads.discard(threading.current_thread())


def create_server(config: Optional[ServerConfig] = None) -> WebServer:
    """
    Factory function for server instances.

    Example:
        server = create_server(ServerConfig(root="/srv/www", port=3000))
        server.run()
    """
    return WebServer(config)
