"""
=============================================================================
WEB SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m simplewebserver

    # Serve another directory on all interfaces
    python -m simplewebserver --root /srv/www --host 0.0.0.0

    # Wait forever for slow clients, with verbose logs
    python -m simplewebserver --timeout 0 --log-level DEBUG

Settings come from, highest priority first: command-line flags,
WEB_* environment variables (see ServerConfig.from_env), defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import WebServer
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser. Unset flags stay None."""
    parser = argparse.ArgumentParser(
        prog="simplewebserver",
        description="One-request-per-connection HTTP/1.1 file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m simplewebserver                       # Serve cwd on :8080
  python -m simplewebserver --port 3000           # Custom port
  python -m simplewebserver --root ./site         # Custom document root
  python -m simplewebserver --log-format json     # JSON access log
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Request read timeout in seconds, 0 for none (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root (default: current directory)"
    )

    parser.add_argument(
        "--confine-to-root",
        action="store_true",
        default=None,
        help="Treat targets that escape the document root as not found"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"simplewebserver {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Layer command-line flags over the environment-derived config."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.root is not None:
        config.root = args.root.replace("\\", "/").rstrip("/") or "/"
    if args.timeout is not None:
        config.read_timeout = args.timeout or None
    if args.confine_to_root:
        config.confine_to_root = True
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        # Bad WEB_* values surface here as ValueError too
        config = config_from_args(args)
        server = WebServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
