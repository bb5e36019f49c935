"""
HTTP protocol pieces used by a worker: request reading, status codes,
and the response header.
"""

from .status_codes import HTTPStatus
from .request import Request, RequestReader, parse_request_line
from .response import (
    ResponseContext,
    build_header,
    determine_status,
    format_header_date,
    write_header,
)

__all__ = [
    "HTTPStatus",
    "Request",
    "RequestReader",
    "parse_request_line",
    "ResponseContext",
    "build_header",
    "determine_status",
    "format_header_date",
    "write_header",
]
