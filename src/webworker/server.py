"""
=============================================================================
WEB SERVER
=============================================================================

Ties the listener to the workers.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts the TCP connection, wraps it in Connection

    2. SPAWN
       └── A new thread is started for this connection only

    3. HANDLE (worker thread)
       └── WebWorker: read request → header → content → close

    4. EXIT
       └── run() returns, the thread ends; nothing is reused

=============================================================================
"""

import logging
import threading
from typing import Optional

from .access import configure_logging
from .config import ServerConfig
from .core import SocketServer, Connection, WebWorker


logger = logging.getLogger(__name__)


class WebServer:
    """
    Thread-per-connection file server.

    =========================================================================
    USAGE
    =========================================================================

        server = WebServer(ServerConfig(port=8080, root_dir="./public"))
        server.run()          # blocks until Ctrl+C or server.shutdown()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the server.

        Args:
            config: Server configuration. Uses defaults if not provided.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._connection_count = 0

    @property
    def address(self) -> tuple[str, int]:
        return self._socket_server.address

    @property
    def connection_count(self) -> int:
        """Connections accepted since start."""
        return self._connection_count

    def run(self, configure_logs: bool = True):
        """
        Start the server (blocking).

        Args:
            configure_logs: Set up root logging from config.log_level.
                            Pass False when embedding in an app that
                            configures logging itself.
        """
        if configure_logs:
            configure_logging(self.config.log_level)

        logger.info(
            f"Serving {self.config.root_dir!r} on "
            f"{self.config.host}:{self.config.port} as {self.config.server_name!r}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight workers finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _handle_connection(self, conn: Connection):
        """
        Start a dedicated thread for a new connection.

        Called by SocketServer on the accept thread, so it only spawns.
        """
        self._connection_count += 1
        worker = WebWorker(conn, self.config)
        thread = threading.Thread(
            target=worker.run,
            name=f"WebWorker-{conn.id}",
            daemon=True,
        )
        thread.start()
        logger.debug(f"[{conn.id}] Started {thread.name} for {conn.client_ip}")
