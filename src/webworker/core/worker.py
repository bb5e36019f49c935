"""
=============================================================================
WEB WORKER: ONE CONNECTION, START TO FINISH
=============================================================================

A WebWorker drives exactly one client connection through four phases and
then closes it. It is created by the server for each accepted connection,
runs in its own thread, and is discarded when run() returns.

=============================================================================
PHASES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   1. READ REQUEST     RequestReader   → Request(method, path)        │
    │          │                                                           │
    │          ▼                                                           │
    │   2. WRITE HEADER     write_header()  → ResponseContext(status, path)│
    │          │                                                           │
    │          ▼                                                           │
    │   3. WRITE CONTENT    ContentWriter   → body bytes, output closed    │
    │          │                                                           │
    │          ▼                                                           │
    │   4. FINISH           flush + close the connection                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Each phase hands an immutable value to the next; the worker keeps no
request state of its own between phases.

=============================================================================
FAILURE BOUNDARIES
=============================================================================

    RequestReadError   → absorbed by the reader, phase 2 runs with what was read
    ResourceOpenError  → absorbed by the content writer, fallback body sent
    IOWriteError       → caught here, logged, connection closed
    anything else      → caught here, logged with traceback, connection closed

Nothing escapes run(): a broken client never takes down the listener or
another connection.

=============================================================================
"""

import time
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from .connection import Connection, ConnectionState
from ..access import AccessLog, log_access
from ..config import ServerConfig
from ..errors import IOWriteError, RequestReadError, ResourceOpenError
from ..handlers.content import ContentWriter
from ..http.request import Request, RequestReader
from ..http.response import ResponseContext, write_header


logger = logging.getLogger(__name__)


@dataclass
class HandlingOutcome:
    """
    What happened on one connection.

    Attributes:
        request: Result of the read phase (None if it never ran).
        context: Result of the header phase (None if it never ran).
        state:   Last state reached before closing.
        errors:  Every error handled along the way, in order.
    """

    request: Optional[Request] = None
    context: Optional[ResponseContext] = None
    state: ConnectionState = ConnectionState.IDLE
    errors: list[Exception] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        """True when the body phase ran and every error was recovered."""
        return self.state == ConnectionState.WRITING_CONTENT and all(
            isinstance(e, (RequestReadError, ResourceOpenError)) for e in self.errors
        )

    def error_names(self) -> list[str]:
        return [type(e).__name__ for e in self.errors]


class WebWorker:
    """
    Handles one HTTP request on one connection.

    =========================================================================
    USAGE
    =========================================================================

        conn = Connection.from_socket(client_socket, client_address)
        worker = WebWorker(conn, config)
        threading.Thread(target=worker.run).start()

    =========================================================================
    """

    def __init__(
        self,
        connection: Connection,
        config: Optional[ServerConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Bind the worker to an open connection.

        Args:
            connection: The client connection. Must be open; not validated.
            config: Server configuration (defaults if not provided).
            clock: Returns the current local time. Used for the date tag
                   and, converted to GMT, the Date header.
        """
        self.connection = connection
        self.config = config or ServerConfig()
        self.clock = clock or datetime.now
        self._reader = RequestReader(connection.rfile, self.config.encoding)
        self._content = ContentWriter(self.config, self.clock)

    def run(self) -> HandlingOutcome:
        """
        Run all phases and close the connection.

        Returns:
            A HandlingOutcome describing what happened. Never raises.
        """
        conn = self.connection
        outcome = HandlingOutcome()
        start_time = time.time()

        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip or '-'}")

        try:
            outcome.request = self.read_request(outcome)
            outcome.context = self.write_header(outcome.request)
            self.write_content(outcome.context, outcome)
            conn.flush()

        except IOWriteError as e:
            logger.error(f"[{conn.id}] Output error: {e}")
            outcome.errors.append(e)

        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
            outcome.errors.append(e)

        finally:
            outcome.state = conn.state
            conn.close()

        duration_ms = (time.time() - start_time) * 1000
        log_access(
            AccessLog.from_outcome(conn, outcome, duration_ms),
            self.config.log_format,
        )
        logger.debug(f"[{conn.id}] Done handling connection.")
        return outcome

    # =========================================================================
    # PHASES
    # =========================================================================

    def read_request(self, outcome: HandlingOutcome) -> Request:
        """Phase 1: read the request line and skip the header block."""
        self.connection.advance(ConnectionState.READING_REQUEST)
        request = self._reader.read_request()
        if self._reader.error is not None:
            outcome.errors.append(self._reader.error)
        return request

    def write_header(self, request: Request) -> ResponseContext:
        """Phase 2: resolve the resource, decide the status, send the header."""
        self.connection.advance(ConnectionState.WRITING_HEADER)
        now = self.clock().astimezone(timezone.utc)
        return write_header(self.connection.wfile, request, self.config, now)

    def write_content(self, context: ResponseContext, outcome: HandlingOutcome) -> None:
        """Phase 3: stream the body (or the fallback) and close the output side."""
        self.connection.advance(ConnectionState.WRITING_CONTENT)
        open_error = self._content.write(self.connection.wfile, context)
        if open_error is not None:
            outcome.errors.append(open_error)
