"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server.

Everything a connection handler needs to know about its surroundings lives
here: where the document root is, how long a read may block, which strings
identify the server. The handler itself never looks at the environment or
the command line.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m simplewebserver --port 3000                      │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── WEB_PORT=3000 python -m simplewebserver                    │
    │                                                                     │
    │   3. Default values (in this dataclass)                             │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def default_root() -> str:
    """Working directory with Windows separators turned into '/'."""
    return os.getcwd().replace("\\", "/")


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, read_timeout, max_request_size

    CONTENT SETTINGS
    - root, error_page, content_type, confine_to_root, substitute_tags

    SERVER IDENTITY
    - server_header, server_id

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Maximum number of queued connections."""

    read_timeout: Optional[float] = 30.0
    """
    Seconds a request read may block before the request is treated as
    ended. None = wait forever for the blank line.
    """

    join_timeout: float = 5.0
    """Seconds to wait for in-flight connections on shutdown."""

    max_request_size: int = 64 * 1024  # 64 KB
    """
    Bytes of request header read before giving up. Larger requests get
    the default 404 without resolving their target.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    root: str = field(default_factory=default_root)
    """
    Document root. Request targets are appended to this string as-is,
    so it should not end with a slash.
    """

    error_page: str = "/res/acc/error404.html"
    """Fallback page (relative to root) served for any 404."""

    content_type: str = "text/html"
    """Content-Type sent with every response."""

    confine_to_root: bool = False
    """
    Refuse targets whose real path escapes the document root.
    Off by default: "/../x.html" is resolved literally.
    """

    substitute_tags: bool = True
    """Replace <cs371date> and <cs371server> while streaming."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_header: str = "Josh G's very own server"
    """Value of the Server header line."""

    server_id: str = "Josh G's CS371 Web Server"
    """Replacement text for the <cs371server> tag."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'json' or 'text'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEB_HOST        Server host (default: 127.0.0.1)
        WEB_PORT        Server port (default: 8080)
        WEB_ROOT        Document root (default: current directory)
        WEB_TIMEOUT     Read timeout in seconds, 0 = none (default: 30)
        WEB_LOG_LEVEL   Logging level (default: INFO)
        WEB_LOG_FORMAT  Access log format (default: text)
        WEB_CONFINE     "1" to confine targets to the root (default: off)

        =====================================================================
        """
        timeout = float(os.getenv("WEB_TIMEOUT", "30"))
        return cls(
            host=os.getenv("WEB_HOST", "127.0.0.1"),
            port=int(os.getenv("WEB_PORT", "8080")),
            root=os.getenv("WEB_ROOT") or default_root(),
            read_timeout=timeout or None,
            log_level=os.getenv("WEB_LOG_LEVEL", "INFO"),
            log_format=os.getenv("WEB_LOG_FORMAT", "text"),
            confine_to_root=os.getenv("WEB_CONFINE", "") in ("1", "true", "yes"),
        )

    @property
    def error_page_path(self) -> str:
        """Absolute path of the fallback page."""
        return self.root + self.error_page

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead of
        on the first connection.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0 or None")

        if self.max_request_size < 1:
            raise ValueError("max_request_size must be >= 1")

        if not os.path.isdir(self.root):
            raise ValueError(f"Document root is not a directory: {self.root}")

        if not self.error_page.startswith("/"):
            raise ValueError(f"error_page must start with '/': {self.error_page}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")
