"""
=============================================================================
LOGGING
=============================================================================

Logging setup for the process and one access log entry per connection.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [19/Oct/2026:04:48:12 +0000] "GET /index.html" 200    │
    │ 1.52ms [a1b2c3d4]                                                   │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"connection_id": "a1b2c3d4", "method": "GET",                      │
    │  "path": "/index.html", "status_code": 200, "errors": [], ...}      │
    └─────────────────────────────────────────────────────────────────────┘

A connection that failed before its header was written has no status; it
is logged with "-" (text) or null (JSON).

=============================================================================
"""

import json
import time
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .core.connection import Connection
    from .core.worker import HandlingOutcome


# Namespaced so it can be routed separately:
#   logging.getLogger("webworker.access").addHandler(file_handler)
logger = logging.getLogger("webworker.access")


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger and the webworker logger level."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    logging.getLogger("webworker").setLevel(numeric_level)


def printable(value: str) -> str:
    """
    Render request text for a log line.

    Raw bytes carried as surrogates are shown as \\xNN escapes:

        "/caf\\udce9.html"  →  "/caf\\\\xe9.html"
    """
    return value.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


@dataclass
class AccessLog:
    """
    Structured log entry for one connection.

    Attributes:
        connection_id: Short id shared with the worker's own log lines.
        client_ip:     Client address ("" for in-memory connections).
        method:        Request method ("" if none was read).
        path:          Captured request path ("" if none).
        status_code:   200/404, or None if no header was written.
        errors:        Names of the errors handled on this connection.
        duration_ms:   Time from first read to close.
        timestamp:     When the entry was produced.
    """

    connection_id: str
    client_ip: str
    method: str
    path: str
    status_code: Optional[int]
    duration_ms: float
    errors: list[str] = field(default_factory=list)
    timestamp: str = field(
        default_factory=lambda: time.strftime("%d/%b/%Y:%H:%M:%S %z")
    )

    @classmethod
    def from_outcome(
        cls,
        conn: "Connection",
        outcome: "HandlingOutcome",
        duration_ms: float,
    ) -> "AccessLog":
        request = outcome.request
        context = outcome.context
        return cls(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=printable(request.method) if request else "",
            path=printable(request.path) if request else "",
            status_code=int(context.status) if context else None,
            duration_ms=duration_ms,
            errors=outcome.error_names(),
        )

    def to_dict(self) -> dict:
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "method": self.method,
            "path": self.path,
            "status_code": self.status_code,
            "errors": self.errors,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Apache-style line, with the connection id and any errors appended."""
        status = self.status_code if self.status_code is not None else "-"
        line = (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {status} '
            f'{self.duration_ms:.2f}ms [{self.connection_id}]'
        )
        if self.errors:
            line += f" errors={','.join(self.errors)}"
        return line


def log_access(entry: AccessLog, log_format: str = "text") -> None:
    """Emit an access log entry in the configured format."""
    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())
