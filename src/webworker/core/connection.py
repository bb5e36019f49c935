"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket as a pair of buffered binary streams and
guarantees it is closed exactly once.

=============================================================================
ONE CONNECTION, ONE REQUEST
=============================================================================

Every response carries "Connection: close". After the body is written the
connection is torn down; there is no keep-alive loop.

    ┌─────────────────────────────────────────────────────────────────┐
    │   TCP Connect → Read request → Write header → Write body → Close │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    IDLE ──► READING_REQUEST ──► WRITING_HEADER ──► WRITING_CONTENT ──┐
     │             │                   │                  │           │
     │             │                   │                  │           ▼
     └─────────────┴───────────────────┴──────────────────┴──────► CLOSED

Strictly linear. Any failure jumps straight to CLOSED.

=============================================================================
STREAMS
=============================================================================

socket.makefile() gives file objects over the socket:

    rfile = sock.makefile("rb")   ← buffered reads, readline() blocks
    wfile = sock.makefile("wb")   ← buffered writes, close() flushes

A Connection can also be built from any two binary streams, which is how
the unit tests drive a worker without a network.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """
    Connection lifecycle states, advanced by the worker.
    """
    IDLE = "idle"                        # Accepted, nothing read yet
    READING_REQUEST = "reading_request"  # Reading request line and headers
    WRITING_HEADER = "writing_header"    # Status decided, header going out
    WRITING_CONTENT = "writing_content"  # Body streaming
    CLOSED = "closed"                    # Streams and socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        rfile: Input side (readable binary stream).
        wfile: Output side (writable binary stream).
        address: Client's (ip, port) tuple.
        sock: Underlying socket, if the streams came from one.
        id: Short identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        linger_timeout: Seconds spent draining unread input on close.
    """

    rfile: BinaryIO
    wfile: BinaryIO
    address: tuple[str, int] = ("", 0)
    sock: Optional[socket.socket] = field(default=None, repr=False)

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.IDLE
    created_at: float = field(default_factory=time.time)
    linger_timeout: float = 0.5

    @classmethod
    def from_socket(
        cls,
        sock: socket.socket,
        address: tuple[str, int],
        read_timeout: Optional[float] = None,
        linger_timeout: float = 0.5,
    ) -> "Connection":
        """
        Wrap an accepted client socket.

        Args:
            sock: The socket returned by accept().
            address: Client (ip, port).
            read_timeout: Seconds a read may block. None = forever.
            linger_timeout: Seconds to drain unread input on close.
        """
        sock.setblocking(True)
        sock.settimeout(read_timeout)
        return cls(
            rfile=sock.makefile("rb"),
            wfile=sock.makefile("wb"),
            address=address,
            sock=sock,
            linger_timeout=linger_timeout,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    def advance(self, state: ConnectionState) -> None:
        """Move to the next lifecycle state."""
        logger.debug(f"[{self.id}] {self.state.value} → {state.value}")
        self.state = state

    # =========================================================================
    # CLOSING
    # =========================================================================

    def flush(self) -> None:
        """Flush the output side if it is still open."""
        if self.wfile.closed:
            return
        try:
            self.wfile.flush()
        except OSError as e:
            logger.debug(f"[{self.id}] Flush failed: {e}")

    def close(self):
        """
        Close the connection. Safe to call more than once.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    Close Sequence                                │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   1. flush + close wfile   (skipped if the body writer did it)   │
        │   2. close rfile           (skipped if already closed)           │
        │   3. shutdown(SHUT_WR)     → FIN to the client                   │
        │   4. drain unread input    → avoid RST wiping our response       │
        │   5. close socket          → release the file descriptor         │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        self.flush()
        for stream in (self.wfile, self.rfile):
            if stream.closed:
                continue
            try:
                stream.close()
            except OSError:
                pass  # Peer gone, nothing left to release

        if self.sock is not None:
            self._close_socket()

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _close_socket(self):
        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            # Unread input at close() makes the kernel send RST
            self._drain(time.monotonic() + self.linger_timeout)
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.sock.close()
        except OSError:
            pass

    def _drain(self, deadline: float) -> None:
        """Discard input until EOF or `deadline` (time.monotonic()), whichever comes first."""
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            self.sock.settimeout(remaining)
            if not self.sock.recv(1024):
                return

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
