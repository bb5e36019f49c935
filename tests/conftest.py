"""
pytest configuration and fixtures.
"""

import io
import socket
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import WebServer, ServerConfig, Connection, WebWorker


FIXED_NOW = datetime(2026, 10, 19, 12, 30, 45, tzinfo=timezone.utc)

INDEX_HTML = (
    "<html>\n"
    "<head><title>Home</title></head>\n"
    "<body>\n"
    "<p>Today is <cs371date></p>\n"
    "<p><cs371server></p>\n"
    "</body>\n"
    "</html>\n"
)


class CapturingStream(io.BytesIO):
    """BytesIO that keeps its contents after close(), like a socket peer would."""

    def __init__(self, initial: bytes = b""):
        super().__init__(initial)
        self.captured = b""
        self.close_count = 0

    def close(self):
        if not self.closed:
            self.captured = self.getvalue()
        self.close_count += 1
        super().close()

    @property
    def data(self) -> bytes:
        return self.captured if self.closed else self.getvalue()


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """Document root holding index.html (with tags) and plain.html."""
    (tmp_path / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (tmp_path / "plain.html").write_text("<p>no tags here</p>\n", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    return tmp_path


@pytest.fixture
def config(docroot: Path) -> ServerConfig:
    """Test configuration rooted at the temporary document root."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=str(docroot),
        server_name="TestServer/1.0",
        linger_timeout=0.1,
        log_level="WARNING",
    )


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_connection() -> Callable[..., Connection]:
    """Build an in-memory Connection from raw request bytes."""
    def _make(request: bytes = b"", wfile: Optional[io.BytesIO] = None) -> Connection:
        return Connection(
            rfile=io.BytesIO(request),
            wfile=wfile if wfile is not None else CapturingStream(),
            address=("127.0.0.1", 54321),
        )
    return _make


@pytest.fixture
def run_worker(config: ServerConfig, fixed_clock, make_connection):
    """Run one WebWorker over an in-memory connection; return (outcome, response bytes)."""
    def _run(request: bytes, cfg: Optional[ServerConfig] = None):
        conn = make_connection(request)
        outcome = WebWorker(conn, cfg or config, fixed_clock).run()
        return outcome, conn.wfile.data
    return _run


@pytest.fixture
def socket_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    """Connected (server side, client side) socket pair."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for s in (server_side, client_side):
        try:
            s.close()
        except OSError:
            pass


def recv_all(sock: socket.socket, timeout: float = 5.0) -> bytes:
    """Read from sock until the peer closes."""
    sock.settimeout(timeout)
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> tuple[str, int]:
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logs": False},
            daemon=True
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def fetch(self, raw_request: bytes, shut_write: bool = False) -> bytes:
        """Send raw bytes on a new connection and read until the server closes."""
        with socket.create_connection(self.address, timeout=5.0) as s:
            s.sendall(raw_request)
            if shut_write:
                s.shutdown(socket.SHUT_WR)
            return recv_all(s)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Running server on an OS-assigned port, serving the temporary docroot."""
    test_srv = TestServer(WebServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
