"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    WebWorker        answers one request per connection
                     (read → resolve → header → body → close)

    ContentStreamer  copies a file to the client line by line
    TagRenderer      fills in <cs371date> and <cs371server>

=============================================================================
"""

from .template import ContentStreamer, StreamResult, TagRenderer, local_timestamp
from .worker import WebWorker, Exchange, AccessLogEntry

__all__ = [
    "WebWorker",
    "Exchange",
    "AccessLogEntry",
    "ContentStreamer",
    "StreamResult",
    "TagRenderer",
    "local_timestamp",
]
