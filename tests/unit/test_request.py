"""
Unit tests for request reading and target classification.
"""

import io

import pytest

from simplewebserver.http.request import (
    RequestLine,
    RequestParser,
    parse_request,
)
from simplewebserver.http.resolver import PathResolver, NOT_FOUND
from simplewebserver.http.status_codes import HTTPStatus


class FailingStream:
    """Yields the given lines, then raises like a reset socket."""

    def __init__(self, lines: list[bytes], error: OSError):
        self._lines = list(lines)
        self._error = error

    def readline(self, size: int = -1) -> bytes:
        if self._lines:
            return self._lines.pop(0)
        raise self._error


@pytest.fixture
def resolver(docroot: str) -> PathResolver:
    return PathResolver(docroot)


class TestRequestLine:
    """Tests for RequestLine parsing and suffix checks."""

    def test_parse_with_version(self):
        """Test method, target and version are split out."""
        line = RequestLine.parse("GET /index.html HTTP/1.1")

        assert line.method == "GET"
        assert line.target == "/index.html"
        assert line.version == "HTTP/1.1"
        assert line.is_get

    def test_parse_without_version(self):
        """Test the version token is optional."""
        line = RequestLine.parse("GET /index.html")

        assert line.target == "/index.html"
        assert line.version is None

    def test_parse_single_token(self):
        """Test a line with one token is not a request line."""
        assert RequestLine.parse("GET") is None
        assert RequestLine.parse("") is None

    def test_html_suffix(self):
        """Test .html detection."""
        assert RequestLine("GET", "/index.html").is_html_target
        assert not RequestLine("GET", "/index.htm").is_html_target
        assert not RequestLine("GET", "/style.css").is_html_target

    def test_html_suffix_is_case_sensitive(self):
        """Test upper-case suffixes are not classified."""
        assert not RequestLine("GET", "/INDEX.HTML").is_html_target
        assert not RequestLine("GET", "/favicon.ICO").is_icon_target

    def test_icon_suffix(self):
        """Test .ico detection."""
        assert RequestLine("GET", "/favicon.ico").is_icon_target
        assert not RequestLine("GET", "/favicon.ico").is_html_target

    @pytest.mark.parametrize("target", ["/", "/a", "/a.h", ".ic", ""])
    def test_short_targets_do_not_match(self, target):
        """Test targets shorter than the suffixes are simply unclassified."""
        line = RequestLine("GET", target)

        assert not line.is_html_target
        assert not line.is_icon_target


class TestRequestParser:
    """Tests for RequestParser.read()."""

    def test_existing_page(self, resolver, sample_get_request):
        """Test an existing .html target resolves to 200."""
        parsed = parse_request(sample_get_request, resolver)

        assert parsed.request_line.target == "/index.html"
        assert parsed.resolution.status == HTTPStatus.OK
        assert parsed.resolution.resolved_path == resolver.root + "/index.html"
        assert parsed.complete is True
        assert parsed.error is None

    def test_missing_page(self, resolver):
        """Test a missing .html target resolves to 404."""
        parsed = parse_request(b"GET /missing.html HTTP/1.1\r\n\r\n", resolver)

        assert parsed.resolution.status == HTTPStatus.NOT_FOUND
        assert parsed.resolution.exists is False
        assert parsed.resolution.resolved_path == resolver.root + "/missing.html"

    def test_icon_stays_not_found(self, resolver):
        """Test icon requests are observed but never resolved."""
        parsed = parse_request(b"GET /favicon.ico HTTP/1.1\r\n\r\n", resolver)

        assert parsed.request_line.is_icon_target
        assert parsed.resolution is NOT_FOUND

    def test_other_suffix_stays_not_found(self, resolver):
        """Test an existing non-.html file still gets the default 404."""
        parsed = parse_request(b"GET /plain.txt HTTP/1.1\r\n\r\n", resolver)

        assert parsed.resolution is NOT_FOUND

    def test_four_character_target(self, resolver):
        """Test a target shorter than '.html' does not crash."""
        parsed = parse_request(b"GET /a.h HTTP/1.1\r\n\r\n", resolver)

        assert parsed.request_line.target == "/a.h"
        assert parsed.resolution.status == HTTPStatus.NOT_FOUND

    def test_non_get_method_is_ignored(self, resolver):
        """Test other methods never trigger resolution."""
        parsed = parse_request(b"POST /index.html HTTP/1.1\r\n\r\n", resolver)

        assert parsed.request_line is None
        assert parsed.resolution.status == HTTPStatus.NOT_FOUND
        assert parsed.complete is True

    def test_malformed_line_keeps_reading(self, resolver):
        """Test a one-token first line does not stop line consumption."""
        parsed = parse_request(b"GET\r\nHost: x\r\n\r\n", resolver)

        assert parsed.request_line is None
        assert parsed.lines_read == 3
        assert parsed.complete is True

    def test_only_first_get_line_counts(self, resolver):
        """Test a later GET-looking header line does not re-resolve."""
        raw = (
            b"GET /missing.html HTTP/1.1\r\n"
            b"GET /index.html HTTP/1.1\r\n"
            b"\r\n"
        )
        parsed = parse_request(raw, resolver)

        assert parsed.request_line.target == "/missing.html"
        assert parsed.resolution.status == HTTPStatus.NOT_FOUND

    def test_stops_at_blank_line(self, resolver):
        """Test bytes after the blank line are left unread."""
        stream = io.BytesIO(b"GET /index.html HTTP/1.1\r\n\r\nBODY")
        parsed = RequestParser(resolver).read(stream)

        assert parsed.lines_read == 2
        assert stream.read() == b"BODY"

    def test_bare_newlines(self, resolver):
        """Test LF-only line endings are accepted."""
        parsed = parse_request(b"GET /index.html HTTP/1.1\nHost: x\n\n", resolver)

        assert parsed.resolution.status == HTTPStatus.OK
        assert parsed.complete is True

    def test_end_of_stream_without_blank_line(self, resolver):
        """Test a truncated request returns what was found so far."""
        parsed = parse_request(b"GET /index.html HTTP/1.1\r\nHost: x\r\n", resolver)

        assert parsed.complete is False
        assert parsed.error is None
        assert parsed.resolution.status == HTTPStatus.OK

    def test_empty_stream(self, resolver):
        """Test a client that sends nothing gets the default."""
        parsed = parse_request(b"", resolver)

        assert parsed.request_line is None
        assert parsed.lines_read == 0
        assert parsed.resolution is NOT_FOUND
        assert parsed.method == "-"
        assert parsed.target == "-"

    def test_read_error_is_recorded(self, resolver):
        """Test an I/O error ends reading without raising."""
        error = ConnectionResetError("reset by peer")
        stream = FailingStream([b"GET /index.html HTTP/1.1\r\n"], error)

        parsed = RequestParser(resolver).read(stream)

        assert parsed.error is error
        assert parsed.complete is False
        assert parsed.resolution.status == HTTPStatus.OK

    def test_timeout_is_recorded(self, resolver):
        """Test a read timeout behaves like end of stream."""
        stream = FailingStream([], TimeoutError("timed out"))

        parsed = RequestParser(resolver).read(stream)

        assert isinstance(parsed.error, TimeoutError)
        assert parsed.resolution.status == HTTPStatus.NOT_FOUND

    def test_undecodable_bytes(self, resolver):
        """Test invalid UTF-8 in headers is tolerated."""
        raw = b"GET /index.html HTTP/1.1\r\nX-Junk: \xff\xfe\r\n\r\n"
        parsed = parse_request(raw, resolver)

        assert parsed.resolution.status == HTTPStatus.OK


class TestRequestSizeLimit:
    """Tests for the max_request_size guard."""

    def test_endless_request_line(self, resolver):
        """Test a line without a newline is cut off at the limit."""
        stream = io.BytesIO(b"GET /" + b"a" * 100_000)
        parsed = RequestParser(resolver, max_request_size=1024).read(stream)

        assert parsed.too_large is True
        assert parsed.request_line is None
        assert parsed.resolution is NOT_FOUND
        assert parsed.bytes_read == 1025
        assert len(stream.read()) == 100_005 - 1025

    def test_endless_header_lines(self, resolver):
        """Test many short header lines add up to the limit."""
        raw = b"GET /index.html HTTP/1.1\r\n" + b"X-Pad: 0123456789\r\n" * 1000 + b"\r\n"
        parsed = RequestParser(resolver, max_request_size=512).read(io.BytesIO(raw))

        assert parsed.too_large is True
        assert parsed.complete is False
        assert parsed.request_line.target == "/index.html"
        assert parsed.resolution.status == HTTPStatus.NOT_FOUND

    def test_request_at_the_limit(self, resolver):
        """Test a request exactly as big as the limit is accepted."""
        raw = b"GET /index.html HTTP/1.1\r\n\r\n"
        parsed = RequestParser(resolver, max_request_size=len(raw)).read(io.BytesIO(raw))

        assert parsed.too_large is False
        assert parsed.complete is True
        assert parsed.resolution.status == HTTPStatus.OK

    def test_default_limit(self, resolver, sample_get_request):
        """Test an ordinary request fits the default limit."""
        parsed = parse_request(sample_get_request, resolver)

        assert parsed.too_large is False
        assert parsed.bytes_read == len(sample_get_request)
