"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from simplewebserver import WebServer, ServerConfig
from simplewebserver.handlers import WebWorker


FIXED_TIMESTAMP = "2026-10-19T16:45:00"
SERVER_ID = "Josh G's CS371 Web Server"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample browser-style GET request for an existing page."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def docroot(tmp_path: Path) -> str:
    """
    Document root with a tagged index page and the 404 fallback page.

        <root>/index.html              "Hello <cs371server>\n"
        <root>/about.html              two date tags, CRLF line endings
        <root>/plain.txt               not an .html target
        <root>/res/acc/error404.html   "Not found"
    """
    root = tmp_path / "www"
    (root / "res" / "acc").mkdir(parents=True)

    (root / "index.html").write_bytes(b"Hello <cs371server>\n")
    (root / "about.html").write_bytes(
        b"<p>Served at <cs371date></p>\r\n"
        b"<p>Again: <cs371date> by <cs371server></p>\r\n"
    )
    (root / "plain.txt").write_bytes(b"just text\n")
    (root / "res" / "acc" / "error404.html").write_bytes(b"Not found")

    return str(root)


@pytest.fixture
def config(docroot: str) -> ServerConfig:
    """Test configuration rooted at the fixture document root."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root=docroot,
        read_timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def worker(config: ServerConfig) -> WebWorker:
    """Worker with a fixed clock so date tags are predictable."""
    return WebWorker(config, clock=lambda: FIXED_TIMESTAMP)


def split_response(data: bytes) -> tuple[list[str], bytes]:
    """Split raw response bytes into header lines and body."""
    head, _, body = data.partition(b"\n\n")
    return head.decode("utf-8").split("\n"), body


def fetch(port: int, request: bytes, timeout: float = 5.0) -> bytes:
    """Send a raw request and read the response until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(request)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class BackgroundServer:
    """Runs a WebServer in a background thread."""

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[BackgroundServer, None, None]:
    """A live server on a free port, serving the fixture document root."""
    server = WebServer(config, clock=lambda: FIXED_TIMESTAMP)

    background = BackgroundServer(server)
    background.start()

    yield background

    background.stop()
