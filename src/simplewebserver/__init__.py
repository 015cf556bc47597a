"""
=============================================================================
SIMPLEWEBSERVER - One Request Per Connection HTTP/1.1 File Server
=============================================================================

A small threaded web server on raw sockets. Each connection carries one
GET request for an .html page under a document root. The page is sent
back with two template tags filled in, and the connection is closed.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    simplewebserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m simplewebserver)
    ├── server.py            # WebServer: accept loop + thread per connection
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop, signals
    │   └── connection.py    # Client socket + reader/writer streams
    ├── http/
    │   ├── request.py       # Request line reading and classification
    │   ├── resolver.py      # root + target → file, 200/404, fallback
    │   ├── response.py      # Response header block
    │   └── status_codes.py  # 200 / 404
    └── handlers/
        ├── worker.py        # Per-connection pipeline + access log
        └── template.py      # Line streaming with tag substitution

=============================================================================
QUICK START
=============================================================================

    from simplewebserver import WebServer, ServerConfig

    server = WebServer(ServerConfig(root="/srv/www", port=8080))
    server.run()

    $ curl http://127.0.0.1:8080/index.html

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer, create_server
from .config import ServerConfig

__all__ = ["WebServer", "ServerConfig", "create_server", "__version__"]
