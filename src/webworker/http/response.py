"""
=============================================================================
HTTP RESPONSE HEADER
=============================================================================

Decides the status and writes the header block.

=============================================================================
HEADER ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\n                      ← status line                │
    │  Date: Mon Oct 19 04:48:12 2026\n       ← now, GMT, locale format   │
    │  Server: WebWorker/1.0\n                                             │
    │  Connection: close\n                    ← one request per connection │
    │  Content-Type: text/html\n                                           │
    │  \n                                     ← end of header block        │
    └─────────────────────────────────────────────────────────────────────┘

There is no Content-Length: the body is streamed line by line after the
header is gone, and the connection close marks its end.

=============================================================================
STATUS IS DECIDED ONCE
=============================================================================

The status comes from os.path.exists() at header time. The content phase
opens the file later and does NOT revisit the status, so a resource that
disappears in between (or is a directory) gets "200 OK" followed by the
fallback 404 body.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from .request import Request
from .status_codes import HTTPStatus
from ..config import ServerConfig
from ..errors import IOWriteError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseContext:
    """
    What the header phase decided, handed to the content phase.

    Attributes:
        status:        200 or 404.
        resource_path: Root marker + request path, exactly as resolved.
    """

    status: HTTPStatus
    resource_path: str

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.status.value} {self.status.phrase}"


def determine_status(resource_path: str) -> HTTPStatus:
    """OK when anything exists at resource_path (file or directory)."""
    if os.path.exists(resource_path):
        return HTTPStatus.OK
    return HTTPStatus.NOT_FOUND


def format_header_date(dt: datetime) -> str:
    """
    Format a timestamp for the Date header.

    Converted to GMT and rendered with the locale's default date-time
    representation (%c), e.g. "Mon Oct 19 04:48:12 2026" in the C locale.
    """
    return dt.astimezone(timezone.utc).strftime("%c")


def build_header(
    context: ResponseContext,
    config: ServerConfig,
    now: Optional[datetime] = None,
) -> bytes:
    """
    Serialize the header block for a response context.

    Args:
        context: Status and resource decided for this response.
        config: Supplies the Server and Content-Type values.
        now: Timestamp for the Date header (default: current time).

    Returns:
        Header bytes, ending with the blank line.
    """
    now = now or datetime.now(timezone.utc)
    lines = [
        context.status_line,
        f"Date: {format_header_date(now)}",
        f"Server: {config.server_name}",
        "Connection: close",
        f"Content-Type: {config.content_type}",
    ]
    # Header block ends with an empty line
    return ("\n".join(lines) + "\n\n").encode(config.encoding)


def write_header(
    wfile: BinaryIO,
    request: Request,
    config: ServerConfig,
    now: Optional[datetime] = None,
) -> ResponseContext:
    """
    Resolve the resource, decide the status, and write the header.

    Args:
        wfile: Output side of the connection.
        request: Result of the read phase.
        config: Root marker and header values.
        now: Timestamp for the Date header.

    Returns:
        The ResponseContext for the content phase.

    Raises:
        IOWriteError: The output side rejected the bytes.
    """
    resource_path = config.resolve(request.path)
    context = ResponseContext(
        status=determine_status(resource_path),
        resource_path=resource_path,
    )
    logger.debug(f"Resolved {resource_path!r} → {context.status_line}")

    try:
        wfile.write(build_header(context, config, now))
    except (OSError, ValueError) as e:
        raise IOWriteError(f"Header write failed: {e}", e) from e

    return context
