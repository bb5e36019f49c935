"""
=============================================================================
WEBWORKER - One Thread, One Connection, One Request
=============================================================================

A small HTTP/1.1 file server. Every accepted connection is handed to its
own WebWorker, which reads a single GET request, answers with 200 or 404,
streams the requested file with two tags substituted, and closes.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webworker)
    ├── server.py            # WebServer: listener + thread per connection
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # RequestReadError, ResourceOpenError, IOWriteError
    ├── access.py            # Logging setup and access log entries
    ├── core/
    │   ├── socket_server.py # TCP listener
    │   ├── connection.py    # Socket as rfile/wfile + lifecycle state
    │   └── worker.py        # WebWorker: the per-connection state machine
    ├── http/
    │   ├── request.py       # Request line reading
    │   ├── response.py      # Status decision and header block
    │   └── status_codes.py  # 200 / 404
    └── handlers/
        └── content.py       # Body streaming with tag substitution

=============================================================================
QUICK START
=============================================================================

    from webworker import WebServer, ServerConfig

    WebServer(ServerConfig(port=8080, root_dir="./public")).run()

    # or
    python -m webworker --port 8080 --root ./public

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig
from .core import Connection, WebWorker

__all__ = ["WebServer", "ServerConfig", "Connection", "WebWorker", "__version__"]
