"""
Unit tests for request line parsing and reading.
"""

import io

import pytest

from webworker.errors import RequestReadError
from webworker.http.request import (
    Request,
    RequestReader,
    parse_request_line,
    strip_line_terminator,
)


class FailingReader(io.BytesIO):
    """Input side that yields some lines, then fails like a reset socket."""

    def __init__(self, lines: list[bytes], error: Exception):
        super().__init__()
        self._lines = list(lines)
        self._error = error

    def readline(self, size=-1):
        if self._lines:
            return self._lines.pop(0)
        raise self._error


class TestParseRequestLine:
    """Tests for parse_request_line()."""

    def test_get_captures_path(self):
        """GET keeps the second token as the path."""
        request = parse_request_line("GET /index.html HTTP/1.1")

        assert request.method == "GET"
        assert request.path == "/index.html"
        assert request.has_path

    def test_path_is_not_decoded(self):
        """Percent-escapes and query strings are kept verbatim."""
        request = parse_request_line("GET /a%20b.html?x=1 HTTP/1.1")
        assert request.path == "/a%20b.html?x=1"

    def test_whitespace_runs_separate_tokens(self):
        """Multiple spaces or tabs count as one separator."""
        request = parse_request_line("GET   \t/page.html   HTTP/1.1")
        assert request.path == "/page.html"

    @pytest.mark.parametrize("line", [
        "POST /index.html HTTP/1.1",
        "HEAD /index.html HTTP/1.1",
        "get /index.html HTTP/1.1",
    ])
    def test_other_methods_leave_path_empty(self, line):
        """Only an exact, case-sensitive GET captures a path."""
        request = parse_request_line(line)

        assert request.method == line.split()[0]
        assert request.path == ""
        assert not request.has_path

    def test_get_without_path(self):
        """A lone method token does not raise."""
        assert parse_request_line("GET") == Request(method="GET")

    @pytest.mark.parametrize("line", ["", "   ", "\t"])
    def test_blank_line(self, line):
        """No tokens gives an empty request."""
        assert parse_request_line(line) == Request()

    def test_http_version_is_optional(self):
        """Two tokens are enough for GET."""
        assert parse_request_line("GET /x").path == "/x"


class TestStripLineTerminator:
    """Tests for strip_line_terminator()."""

    @pytest.mark.parametrize("raw,expected", [
        (b"GET / HTTP/1.1\r\n", b"GET / HTTP/1.1"),
        (b"GET / HTTP/1.1\n", b"GET / HTTP/1.1"),
        (b"GET / HTTP/1.1\r", b"GET / HTTP/1.1"),
        (b"GET / HTTP/1.1", b"GET / HTTP/1.1"),
        (b"\r\n", b""),
    ])
    def test_strips_one_terminator(self, raw, expected):
        """Exactly one trailing terminator is removed."""
        assert strip_line_terminator(raw) == expected

    def test_only_last_terminator(self):
        """Inner line breaks are left alone."""
        assert strip_line_terminator(b"a\n\n") == b"a\n"


class TestRequestReader:
    """Tests for RequestReader."""

    def test_reads_until_blank_line(self):
        """Header lines are consumed; nothing after the blank line is read."""
        rfile = io.BytesIO(
            b"GET /index.html HTTP/1.1\r\n"
            b"Host: localhost:8080\r\n"
            b"User-Agent: pytest\r\n"
            b"\r\n"
            b"leftover body"
        )
        reader = RequestReader(rfile)
        request = reader.read_request()

        assert request == Request(method="GET", path="/index.html", complete=True)
        assert reader.error is None
        assert reader.lines_read == 4
        assert rfile.read() == b"leftover body"

    def test_bare_lf_lines(self):
        """LF-only clients are handled like CRLF ones."""
        reader = RequestReader(io.BytesIO(b"GET /a.html HTTP/1.0\nHost: x\n\n"))
        request = reader.read_request()

        assert request.path == "/a.html"
        assert request.complete

    def test_header_lines_are_not_parsed(self):
        """A header that looks like a request line does not replace the first."""
        reader = RequestReader(io.BytesIO(
            b"POST /form HTTP/1.1\r\nGET /other.html HTTP/1.1\r\n\r\n"
        ))
        request = reader.read_request()

        assert request.method == "POST"
        assert request.path == ""

    def test_empty_first_line_ends_reading(self):
        """An empty first line stops the loop at once."""
        rfile = io.BytesIO(b"\r\nGET /index.html HTTP/1.1\r\n\r\n")
        reader = RequestReader(rfile)
        request = reader.read_request()

        assert request == Request(complete=True)
        assert reader.lines_read == 1

    def test_end_of_stream_before_blank_line(self):
        """EOF after the request line keeps the captured path."""
        reader = RequestReader(io.BytesIO(b"GET /index.html HTTP/1.1\r\nHost: x\r\n"))
        request = reader.read_request()

        assert request.path == "/index.html"
        assert not request.complete
        assert reader.error is None

    def test_last_line_without_terminator(self):
        """A final unterminated line is still read."""
        reader = RequestReader(io.BytesIO(b"GET /index.html"))
        assert reader.read_request().path == "/index.html"

    def test_empty_stream(self):
        """No input at all gives an empty, incomplete request."""
        reader = RequestReader(io.BytesIO(b""))
        request = reader.read_request()

        assert request == Request()
        assert reader.lines_read == 0

    def test_read_error_is_absorbed(self):
        """A socket failure mid-headers ends the phase with what was read."""
        rfile = FailingReader(
            [b"GET /index.html HTTP/1.1\r\n"],
            ConnectionResetError("reset by peer"),
        )
        reader = RequestReader(rfile)
        request = reader.read_request()

        assert request.path == "/index.html"
        assert not request.complete
        assert isinstance(reader.error, RequestReadError)
        assert isinstance(reader.error.cause, ConnectionResetError)

    def test_read_error_on_first_line(self):
        """A failure before any line gives an empty request."""
        reader = RequestReader(FailingReader([], TimeoutError("timed out")))

        assert reader.read_request() == Request()
        assert isinstance(reader.error, RequestReadError)

    def test_closed_stream_is_a_read_error(self):
        """Reading a closed file is reported, not raised."""
        rfile = io.BytesIO(b"GET / HTTP/1.1\r\n")
        rfile.close()
        reader = RequestReader(rfile)

        assert reader.read_request() == Request()
        assert isinstance(reader.error.cause, ValueError)

    def test_undecodable_path_is_kept_verbatim(self):
        """Bytes invalid in the configured encoding survive in the path."""
        reader = RequestReader(io.BytesIO(b"GET /caf\xe9.html HTTP/1.1\r\n\r\n"))
        request = reader.read_request()

        assert reader.error is None
        assert request.complete
        assert request.path == "/caf\udce9.html"
        assert request.path.encode("utf-8", "surrogateescape") == b"/caf\xe9.html"

    def test_undecodable_header_is_skipped(self):
        """Odd bytes in a discarded header line do not affect the request."""
        reader = RequestReader(io.BytesIO(b"GET /a.html HTTP/1.1\r\nX-Name: \xff\r\n\r\n"))
        request = reader.read_request()

        assert request == Request(method="GET", path="/a.html", complete=True)
        assert reader.error is None

    def test_custom_encoding(self):
        """Latin-1 accepts every byte."""
        reader = RequestReader(io.BytesIO(b"GET /caf\xe9.html HTTP/1.1\r\n\r\n"), "latin-1")
        assert reader.read_request().path == "/café.html"

    def test_read_error_is_logged(self, caplog):
        """Read errors are logged as warnings."""
        reader = RequestReader(FailingReader([], ConnectionResetError("reset")))

        with caplog.at_level("WARNING", logger="webworker"):
            reader.read_request()

        assert "Request error" in caplog.text
