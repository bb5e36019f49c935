"""
=============================================================================
HTTP REQUEST READING
=============================================================================

Turns the input side of a connection into a Request value.

=============================================================================
WHAT WE READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /index.html HTTP/1.1\r\n     ← request line: method + path  │
    │  Host: localhost:8080\r\n         ← read and ignored             │
    │  User-Agent: curl/8.0\r\n         ← read and ignored             │
    │  \r\n                             ← empty line: stop reading     │
    └─────────────────────────────────────────────────────────────────┘

Only the first line carries information. Its first whitespace-separated
token is the method and its second is the path. The path is kept only when
the method is exactly "GET" and is never URL-decoded:

    "GET /a%20b.html HTTP/1.1"   →  Request(method="GET",  path="/a%20b.html")
    "POST /index.html HTTP/1.1"  →  Request(method="POST", path="")
    "GET"                        →  Request(method="GET",  path="")
    ""                           →  Request(method="",     path="")

Bytes that are not valid in the configured encoding are kept as
surrogates, so b"GET /caf\\xe9.html" still resolves to the file whose name
holds that exact byte.

=============================================================================
WAITING FOR INPUT
=============================================================================

readline() on a socket file BLOCKS until a whole line (or end of stream)
is available. TCP may deliver "GET /ind" and "ex.html HTTP/1.1\r\n" in two
chunks; the buffered reader joins them for us, so a half-arrived line is
never parsed. Blocking in recv() releases the GIL, so a slow client only
holds its own thread.

=============================================================================
"""

import logging
from dataclasses import dataclass, replace
from typing import BinaryIO, Optional

from ..errors import RequestReadError


logger = logging.getLogger(__name__)


# Undecodable bytes become surrogates; os.path and open() map them back
REQUEST_ERRORS = "surrogateescape"


@dataclass(frozen=True)
class Request:
    """
    The request as far as a worker cares about it.

    Attributes:
        method:   First token of the request line ("" if there was none).
        path:     Second token when method == "GET", otherwise "".
        complete: True when the terminating empty line was read. False when
                  the stream ended or failed first.
    """

    method: str = ""
    path: str = ""
    complete: bool = False

    @property
    def has_path(self) -> bool:
        return bool(self.path)


def parse_request_line(line: str) -> Request:
    """
    Parse the first line of a request.

    Never raises: a malformed line simply yields no path.

    Args:
        line: The request line without its terminator.

    Returns:
        Request with method and (for GET) path.
    """
    tokens = line.split()
    if not tokens:
        return Request()

    method = tokens[0]
    if method == "GET" and len(tokens) > 1:
        return Request(method=method, path=tokens[1])
    return Request(method=method)


def strip_line_terminator(raw: bytes) -> bytes:
    """Remove one trailing \\r\\n, \\n or \\r."""
    if raw.endswith(b"\r\n"):
        return raw[:-2]
    if raw.endswith(b"\n") or raw.endswith(b"\r"):
        return raw[:-1]
    return raw


class RequestReader:
    """
    Reads one request from a binary input stream.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    read_request() Flow                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   first line ──► parse_request_line() ──► Request(method, path)     │
    │       │                                                              │
    │       ▼                                                              │
    │   while line != "":        ← discard header lines                    │
    │       readline()                                                     │
    │                                                                      │
    │   Stops on: empty line │ end of stream │ RequestReadError           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    A read error never leaves this class: it is logged, kept in `error`,
    and the request parsed so far is returned.
    """

    def __init__(self, rfile: BinaryIO, encoding: str = "utf-8"):
        self.rfile = rfile
        self.encoding = encoding
        self.error: Optional[RequestReadError] = None
        self.lines_read = 0

    def read_request(self) -> Request:
        """
        Read the request line and skip the header block.

        Returns:
            The parsed Request. `complete` tells whether the empty line
            was seen.
        """
        request: Optional[Request] = None

        while True:
            try:
                line = self._read_line()
            except RequestReadError as e:
                logger.warning(f"Request error: {e}")
                self.error = e
                break

            if line is None:
                logger.debug("Request stream ended before an empty line")
                break

            logger.debug(f"Request line: ({line!r})")

            if request is None:
                request = parse_request_line(line)

            if not line:
                request = replace(request, complete=True)
                break

        return request or Request()

    def _read_line(self) -> Optional[str]:
        """
        Block until one full line is available.

        Returns:
            The decoded line without its terminator, or None at end of
            stream.

        Raises:
            RequestReadError: The stream failed or timed out.
        """
        try:
            raw = self.rfile.readline()
        except (OSError, ValueError) as e:
            # socket.timeout is an OSError; ValueError covers a closed file
            raise RequestReadError(f"{type(e).__name__}: {e}", e) from e

        if not raw:
            return None

        self.lines_read += 1
        return strip_line_terminator(raw).decode(self.encoding, REQUEST_ERRORS)
