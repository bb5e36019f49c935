"""
=============================================================================
CONTENT WRITER
=============================================================================

Streams the resolved resource to the client, substituting two tags.

=============================================================================
TAG SUBSTITUTION
=============================================================================

Served pages may contain two marker tokens:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  <p>Today is <cs371date></p>       →  <p>Today is 10/19/2026</p>    │
    │  <p><cs371server></p>              →  <p>Hello, World! Server</p>   │
    └─────────────────────────────────────────────────────────────────────┘

Every occurrence on a line is replaced. Everything else passes through
unchanged, including bytes that are not valid in the configured encoding
(Latin-1 pages, stray bytes): they are carried through as surrogates and
written back as the same bytes. The date is the local calendar date,
computed once per response.

=============================================================================
LINE ENDINGS
=============================================================================

The resource is read line by line and each line's terminator is dropped.
Nothing is put back, so a multi-line file reaches the client as one long
line. Browsers render HTML the same either way.

=============================================================================
MISSING RESOURCES
=============================================================================

If the resource cannot be opened (absent, a directory, unreadable) the
fixed FALLBACK_BODY is written instead, whatever status line was already
sent. Only opening is guarded; a failure while reading an opened file
propagates to the worker.

=============================================================================
"""

import logging
from datetime import datetime
from typing import BinaryIO, Callable, Optional

from ..config import ServerConfig
from ..errors import IOWriteError, ResourceOpenError
from ..http.response import ResponseContext


logger = logging.getLogger(__name__)


FALLBACK_BODY = b"<html><head></head><body><h3>404 Page not found</h3></body></html>"

DATE_FORMAT = "%m/%d/%Y"

# Bytes invalid in the configured encoding round-trip unchanged
CONTENT_ERRORS = "surrogateescape"


class TagSubstituter:
    """
    Replaces the date and server tags in a line of content.

    Usage:
        sub = TagSubstituter.from_config(config, today=datetime(2026, 10, 19))
        sub.substitute("<cs371date>")   # → "10/19/2026"
    """

    def __init__(self, replacements: dict[str, str]):
        self.replacements = replacements

    @classmethod
    def from_config(cls, config: ServerConfig, today: datetime) -> "TagSubstituter":
        return cls({
            config.date_tag: today.strftime(DATE_FORMAT),
            config.server_tag: config.greeting,
        })

    def substitute(self, line: str) -> str:
        for tag, value in self.replacements.items():
            if tag in line:
                line = line.replace(tag, value)
        return line


class ContentWriter:
    """
    Writes the body of one response.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      write() Flow                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   open(resource_path)                                               │
    │       │                                                              │
    │       ├── OK ──► for line in file:                                   │
    │       │             strip terminator → substitute tags → write      │
    │       │                                                              │
    │       └── OSError ──► write FALLBACK_BODY                            │
    │                                                                      │
    │   finally: close the output side                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(
        self,
        config: ServerConfig,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.clock = clock or datetime.now

    def write(self, wfile: BinaryIO, context: ResponseContext) -> Optional[ResourceOpenError]:
        """
        Write the body for `context` and close `wfile`.

        Args:
            wfile: Output side of the connection.
            context: Resource path from the header phase.

        Returns:
            The ResourceOpenError that triggered the fallback body, or None
            when the resource was served.

        Raises:
            IOWriteError: The output side rejected the bytes.
        """
        try:
            return self._write_body(wfile, context.resource_path)
        finally:
            self._close(wfile)

    def _write_body(self, wfile: BinaryIO, resource_path: str) -> Optional[ResourceOpenError]:
        substituter = TagSubstituter.from_config(self.config, self.clock())

        try:
            resource = open(
                resource_path, "r",
                encoding=self.config.encoding,
                errors=CONTENT_ERRORS,
            )
        except OSError as e:
            error = ResourceOpenError(resource_path, e)
            logger.info(f"Serving fallback body: {error}")
            self._send(wfile, FALLBACK_BODY)
            return error

        with resource:
            for line in resource:
                line = substituter.substitute(line.rstrip("\n"))
                self._send(wfile, line.encode(self.config.encoding, CONTENT_ERRORS))

        return None

    def _send(self, wfile: BinaryIO, data: bytes) -> None:
        try:
            wfile.write(data)
        except (OSError, ValueError) as e:
            raise IOWriteError(f"Content write failed: {e}", e) from e

    def _close(self, wfile: BinaryIO) -> None:
        if wfile.closed:
            return
        try:
            wfile.close()
        except OSError as e:
            # Client already gone; the worker closes the connection next
            logger.warning(f"Output close failed: {e}")
