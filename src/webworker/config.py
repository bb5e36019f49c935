"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the listener and for every worker.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m webworker --port 3000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBWORKER_PORT=3000 python -m webworker                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A single ServerConfig instance is shared by all workers. Workers only ever
READ it, so no locking is needed.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the listener and the per-connection workers.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, read_timeout, linger_timeout

    RESOURCES
    - root_dir, encoding

    RESPONSE IDENTITY
    - server_name, content_type

    SUBSTITUTION
    - date_tag, server_tag, greeting

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
    """The port number to listen on. 0 lets the OS pick one."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    read_timeout: Optional[float] = None
    """
    Seconds to wait for the next request line.
    None = block until the client sends a line or hangs up.
    A hung client then keeps its thread forever; set a value to bound it.
    """

    linger_timeout: float = 0.5
    """Seconds spent draining unread client input before closing a socket."""

    # ─────────────────────────────────────────────────────────────────────
    # RESOURCES
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """
    Root marker prefixed to every request path.
    The request path is appended as-is: "." + "/index.html" → "./index.html".
    No normalization and no traversal checks are applied.
    """

    encoding: str = "utf-8"
    """Text encoding for request lines, header bytes, and resource content."""

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "WebWorker/1.0"
    """Value of the Server header."""

    content_type: str = "text/html"
    """Value of the Content-Type header. Fixed for every response."""

    # ─────────────────────────────────────────────────────────────────────
    # SUBSTITUTION
    # ─────────────────────────────────────────────────────────────────────

    date_tag: str = "<cs371date>"
    """Replaced by the current date (MM/DD/YYYY) in served content."""

    server_tag: str = "<cs371server>"
    """Replaced by `greeting` in served content."""

    greeting: str = "Hello, World! Server"

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (one line) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST          Server host (default: 127.0.0.1)
        WEBWORKER_PORT          Server port (default: 8080)
        WEBWORKER_ROOT          Root marker (default: .)
        WEBWORKER_SERVER_NAME   Server header (default: WebWorker/1.0)
        WEBWORKER_READ_TIMEOUT  Request read timeout, seconds (default: none)
        WEBWORKER_LOG_LEVEL     Logging level (default: INFO)
        WEBWORKER_LOG_FORMAT    Access log format (default: text)

        =====================================================================
        """
        read_timeout = os.getenv("WEBWORKER_READ_TIMEOUT")
        return cls(
            host=os.getenv("WEBWORKER_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBWORKER_PORT", "8080")),
            root_dir=os.getenv("WEBWORKER_ROOT", "."),
            server_name=os.getenv("WEBWORKER_SERVER_NAME", "WebWorker/1.0"),
            read_timeout=float(read_timeout) if read_timeout else None,
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", "INFO"),
            log_format=os.getenv("WEBWORKER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by WebServer at startup so a bad value fails immediately,
        not on the first connection.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0 or None")

        if self.linger_timeout < 0:
            raise ValueError("linger_timeout must be >= 0")

        if not self.date_tag or not self.server_tag:
            raise ValueError("substitution tags must not be empty")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")

    def resolve(self, path: str) -> str:
        """Join the root marker and a request path exactly as received."""
        return self.root_dir + path
