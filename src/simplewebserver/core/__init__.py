"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

Low-level plumbing underneath the HTTP handling:

    SocketServer   listening socket + accept loop
    Connection     accepted client socket + buffered reader/writer pair

Concurrency is one thread per connection (see server.py). Each thread
owns its Connection outright, so nothing here needs a lock.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Wraps one client socket
    "ConnectionState",  # Connection lifecycle states
]
