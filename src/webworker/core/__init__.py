"""
=============================================================================
CORE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ── accept() ──► Connection ──► WebWorker.run()        │
    │   (listener)                   (streams)      (one thread each)      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

THREAD-PER-CONNECTION MODEL
   Each accepted connection gets a brand-new thread that runs one
   WebWorker and exits. Workers share nothing but the read-only config,
   so no locks are needed anywhere on the request path.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .worker import WebWorker, HandlingOutcome

__all__ = [
    "SocketServer",     # TCP listener - accepts connections
    "Connection",       # Client socket as rfile/wfile streams
    "ConnectionState",  # Enum for connection lifecycle states
    "WebWorker",        # Handles one request on one connection
    "HandlingOutcome",  # What a WebWorker did
]
