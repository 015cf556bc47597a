"""
Unit tests for the response header block.
"""

import io
from datetime import datetime, timedelta, timezone

import pytest

from simplewebserver.http.response import (
    ResponseHeader,
    write_header,
    format_http_date,
)
from simplewebserver.http.status_codes import HTTPStatus


FIXED_DATE = datetime(2026, 10, 19, 16, 45, 0, tzinfo=timezone.utc)


class TestResponseHeader:
    """Tests for ResponseHeader."""

    def test_line_order(self):
        """Test the header lines come out in fixed order."""
        header = ResponseHeader(
            status=HTTPStatus.OK,
            content_type="text/html",
            server="Josh G's very own server",
            date=FIXED_DATE,
        )

        assert header.lines() == [
            "HTTP/1.1 200 OK",
            "Date: Mon, 19 Oct 2026 16:45:00 GMT",
            "Server: Josh G's very own server",
            "Connection: close",
            "Content-Type: text/html",
        ]

    def test_defaults_to_not_found(self):
        """Test an unset status is 404."""
        assert ResponseHeader().lines()[0] == "HTTP/1.1 404 Not Found"

    def test_to_bytes_terminates_block(self):
        """Test each line ends with one newline plus a blank line."""
        data = ResponseHeader(status=HTTPStatus.OK, date=FIXED_DATE).to_bytes()

        assert data.startswith(b"HTTP/1.1 200 OK\n")
        assert data.endswith(b"Content-Type: text/html\n\n")
        assert b"\r" not in data

    @pytest.mark.parametrize("status", [HTTPStatus.OK, HTTPStatus.NOT_FOUND])
    def test_connection_close_no_content_length(self, status):
        """Test every header has one Connection: close and no Content-Length."""
        lines = ResponseHeader(status=status).lines()

        assert lines.count("Connection: close") == 1
        assert not any(line.startswith("Content-Length") for line in lines)

    def test_date_defaults_to_now(self):
        """Test the Date line is filled in when no date is given."""
        date_line = ResponseHeader().lines()[1]

        assert date_line.startswith("Date: ")
        assert date_line.endswith(" GMT")


class TestWriteHeader:
    """Tests for write_header()."""

    def test_writes_block(self):
        """Test the header is written and its size returned."""
        stream = io.BytesIO()
        written = write_header(stream, HTTPStatus.NOT_FOUND, "text/html", date=FIXED_DATE)

        data = stream.getvalue()
        assert written == len(data)
        assert data.startswith(b"HTTP/1.1 404 Not Found\n")
        assert b"Content-Type: text/html\n\n" in data

    def test_custom_content_type_and_server(self):
        """Test content type and server strings pass through."""
        stream = io.BytesIO()
        write_header(stream, HTTPStatus.OK, "text/plain", server="Test/1.0")

        data = stream.getvalue()
        assert b"Server: Test/1.0\n" in data
        assert b"Content-Type: text/plain\n" in data

    def test_write_error_propagates(self):
        """Test write failures surface as OSError."""

        class BrokenStream:
            def write(self, data):
                raise BrokenPipeError("gone")

        with pytest.raises(OSError):
            write_header(BrokenStream(), HTTPStatus.OK, "text/html")


class TestHTTPStatus:
    """Tests for HTTPStatus."""

    def test_status_lines(self):
        """Test the two fixed status lines."""
        assert HTTPStatus.OK.status_line == "HTTP/1.1 200 OK"
        assert HTTPStatus.NOT_FOUND.status_line == "HTTP/1.1 404 Not Found"

    def test_is_success(self):
        """Test the success helper."""
        assert HTTPStatus.OK.is_success
        assert not HTTPStatus.NOT_FOUND.is_success


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        """Test HTTP date format."""
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"

    def test_converts_to_gmt(self):
        """Test aware datetimes in other zones are rendered in GMT."""
        plus_two = timezone(timedelta(hours=2))
        dt = datetime(2026, 1, 15, 14, 30, 45, tzinfo=plus_two)

        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"
