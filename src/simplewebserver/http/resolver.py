"""
=============================================================================
PATH RESOLUTION
=============================================================================

Maps a request target onto the filesystem and decides the response status.

=============================================================================
HOW A TARGET BECOMES A FILE
=============================================================================

    root   = "/srv/www"
    target = "/docs/index.html"

    resolved_path = root + target = "/srv/www/docs/index.html"

    ┌──────────────────────────┐      yes     ┌──────────────────────────┐
    │ readable regular file?   │ ───────────► │ 200 OK, serve that file  │
    └────────────┬─────────────┘              └──────────────────────────┘
                 │ no
                 ▼
    ┌──────────────────────────────────────────────────────────────────┐
    │ 404 Not Found, serve root + "/res/acc/error404.html"             │
    └──────────────────────────────────────────────────────────────────┘

There is exactly one fallback. If error404.html is itself missing, the
body is simply empty (see handlers/template.py).

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The join is plain string concatenation. Nothing is normalized, so

    GET /../secret.html HTTP/1.1   →   /srv/www/../secret.html

is opened exactly as written. This keeps the classic behavior that
existing course material and clients rely on. Such targets are logged as
warnings, and ServerConfig.confine_to_root turns on a containment check
that treats anything resolving outside the root as missing.

The existence check and the later read are not atomic. A file deleted
in between surfaces as an open error while streaming, never as a crash.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving one request target.

    The default instance (no path, not existing) is what a connection gets
    when no GET target was ever identified.
    """

    resolved_path: Optional[str] = None
    exists: bool = False

    @property
    def status(self) -> HTTPStatus:
        return HTTPStatus.OK if self.exists else HTTPStatus.NOT_FOUND

    @property
    def status_line(self) -> str:
        return self.status.status_line


NOT_FOUND = Resolution()


class PathResolver:
    """
    Resolves request targets against a document root.

    Holds only configuration, so one instance can be shared by every
    connection thread.

    Usage:
        resolver = PathResolver("/srv/www")
        resolution = resolver.resolve("/index.html")
        path = resolver.served_file(resolution)
    """

    def __init__(
        self,
        root: str,
        error_page: str = "/res/acc/error404.html",
        confine_to_root: bool = False,
    ):
        """
        Args:
            root: Document root. Targets are appended to it unchanged.
            error_page: Fallback page, relative to root.
            confine_to_root: Treat targets escaping root as missing.
        """
        self.root = root
        self.error_page = error_page
        self.confine_to_root = confine_to_root

    @property
    def error_page_path(self) -> str:
        return self.root + self.error_page

    def resolve(self, target: str) -> Resolution:
        """
        Resolve a request target.

        Args:
            target: Path as sent on the request line, e.g. "/index.html".

        Returns:
            Resolution with the joined path and whether it can be served.
        """
        resolved_path = self.root + target

        if ".." in target.split("/"):
            logger.warning(f"Target contains '..', resolving literally: {target}")

        # Symlinks can escape too, so this runs for every target
        if self.confine_to_root and not self._is_inside_root(resolved_path):
            logger.warning(f"Path outside document root refused: {target}")
            return Resolution(resolved_path=resolved_path, exists=False)

        exists = self._is_readable_file(resolved_path)
        logger.debug(f"Resolved {target} -> {resolved_path} (exists={exists})")
        return Resolution(resolved_path=resolved_path, exists=exists)

    def served_file(self, resolution: Resolution) -> str:
        """
        Pick the file whose content becomes the response body.

        The resolved page if it exists, otherwise the fallback page.
        """
        if resolution.exists and resolution.resolved_path is not None:
            return resolution.resolved_path
        return self.error_page_path

    def _is_inside_root(self, path: str) -> bool:
        real_root = os.path.realpath(self.root)
        real_path = os.path.realpath(path)
        try:
            return os.path.commonpath([real_root, real_path]) == real_root
        except ValueError:
            # Different drives on Windows
            return False

    @staticmethod
    def _is_readable_file(path: str) -> bool:
        return os.path.isfile(path) and os.access(path, os.R_OK)
