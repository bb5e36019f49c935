"""
=============================================================================
WEBWORKER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # Custom port and document root
    python -m webworker --port 3000 --root ./public

    # Listen on all interfaces (for containers)
    python -m webworker --host 0.0.0.0

    # Give up on clients that stall mid-request
    python -m webworker --read-timeout 10

Defaults come from ServerConfig.from_env(), so every flag can also be set
with a WEBWORKER_* environment variable.

=============================================================================
"""

import argparse
import sys
from dataclasses import replace

from . import __version__
from .server import WebServer
from .config import ServerConfig, LOG_FORMATS


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Thread-per-connection HTTP file server with tag substitution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                        # Serve . on 127.0.0.1:8080
  python -m webworker --port 3000            # Custom port
  python -m webworker --root ./public        # Custom document root
  python -m webworker --log-level DEBUG      # Log every request line
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--read-timeout",
        type=float,
        default=defaults.read_timeout,
        help="Seconds to wait for a request line (default: wait forever)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.root_dir,
        help=f"Prefix joined to every request path (default: {defaults.root_dir})"
    )

    parser.add_argument(
        "--server-name",
        default=defaults.server_name,
        help=f"Server header value (default: {defaults.server_name})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webworker {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace, defaults: ServerConfig) -> ServerConfig:
    """Overlay parsed CLI arguments on the environment defaults."""
    return replace(
        defaults,
        host=args.host,
        port=args.port,
        read_timeout=args.read_timeout,
        root_dir=args.root,
        server_name=args.server_name,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv=None):
    """Parse arguments, build the server, and run it until interrupted."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    try:
        server = WebServer(config_from_args(args, defaults))
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
