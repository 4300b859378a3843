"""
Unit tests for the line protocol helpers.
"""

import io

import pytest

from echoserver.protocol import (
    LineTooLongError,
    format_record,
    read_line,
    encode_line,
)


class TestFormatRecord:
    """Tests for format_record()."""

    def test_record_format(self):
        assert format_record(1, "127.0.0.1", "hello") == "[session#1 127.0.0.1] hello"

    def test_empty_line(self):
        """An empty line still gets the prefix and trailing space."""
        assert format_record(7, "10.0.0.2", "") == "[session#7 10.0.0.2] "

    def test_line_kept_verbatim(self):
        line = "  spaced  [session#9 x] "
        assert format_record(3, "::1", line) == f"[session#3 ::1] {line}"


class TestReadLine:
    """Tests for read_line()."""

    def test_reads_lines_in_order(self):
        reader = io.BytesIO(b"one\ntwo\n")

        assert read_line(reader) == "one"
        assert read_line(reader) == "two"
        assert read_line(reader) is None

    def test_strips_crlf(self):
        """Windows line endings are accepted."""
        reader = io.BytesIO(b"dos line\r\n")

        assert read_line(reader) == "dos line"

    def test_unterminated_final_line(self):
        """A fragment before EOF is still a line."""
        reader = io.BytesIO(b"first\nlast")

        assert read_line(reader) == "first"
        assert read_line(reader) == "last"
        assert read_line(reader) is None

    def test_blank_line_is_not_eof(self):
        reader = io.BytesIO(b"\n")

        assert read_line(reader) == ""
        assert read_line(reader) is None

    def test_utf8(self):
        reader = io.BytesIO("héllo wörld ✓\n".encode("utf-8"))

        assert read_line(reader) == "héllo wörld ✓"

    def test_invalid_utf8_is_replaced(self):
        reader = io.BytesIO(b"bad \xff byte\n")

        assert read_line(reader) == "bad � byte"


class TestReadLineLimit:
    """Tests for read_line() with a maximum line length."""

    def test_line_at_limit(self):
        reader = io.BytesIO(b"12345\n12345\r\n")

        assert read_line(reader, 5) == "12345"
        assert read_line(reader, 5) == "12345"
        assert read_line(reader, 5) is None

    def test_line_over_limit(self):
        reader = io.BytesIO(b"123456\n")

        with pytest.raises(LineTooLongError):
            read_line(reader, 5)

    def test_unterminated_flood(self):
        """A peer that never sends a newline is cut off at the limit."""
        reader = io.BytesIO(b"x" * 1000)

        with pytest.raises(LineTooLongError):
            read_line(reader, 5)

        # Only the limit plus room for "\r\n" was consumed
        assert reader.tell() == 7

    def test_short_lines_unaffected(self):
        reader = io.BytesIO(b"a\nbb\r\n")

        assert read_line(reader, 5) == "a"
        assert read_line(reader, 5) == "bb"


class TestEncodeLine:
    """Tests for encode_line()."""

    def test_appends_newline(self):
        assert encode_line("hello") == b"hello\n"

    def test_utf8(self):
        assert encode_line("ü") == "ü\n".encode("utf-8")
