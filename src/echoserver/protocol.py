"""
Line protocol shared by the server sessions and the interactive client.

One unit on the wire is one UTF-8 line terminated by "\\n". The server
answers each line with exactly one record line:

    client ──► "hello\\n"
    server ◄── "[session#1 127.0.0.1] hello\\n"

Both sides read through a buffered binary file (socket.makefile("rb")), so
TCP chunking never splits or merges lines from the caller's point of view.
"""

from typing import BinaryIO, Optional


ENCODING = "utf-8"
NEWLINE = "\n"

# Default cap on one incoming line, terminator excluded
MAX_LINE_LENGTH = 64 * 1024


class LineTooLongError(ValueError):
    """A peer sent more than the allowed number of bytes without a newline."""


def format_record(session_id: int, address: str, line: str) -> str:
    """Build the record echoed back for ``line`` received on a session."""
    return f"[session#{session_id} {address}] {line}"


def read_line(reader: BinaryIO, max_length: Optional[int] = None) -> Optional[str]:
    """
    Read one line from a buffered binary stream.

    The trailing "\\n" (and a "\\r" right before it) is removed. A final
    fragment without a terminator is still returned as a line. Bytes that
    are not valid UTF-8 are replaced rather than raising.

    Args:
        reader: Binary file object, typically from socket.makefile("rb").
        max_length: Largest accepted line in bytes, terminator excluded.
                    None reads lines of any length.

    Returns:
        The decoded line, or None when the peer has closed the stream.

    Raises:
        LineTooLongError: If the line is longer than ``max_length``.
    """
    # Room for the content plus "\r\n", never more: a peer that never
    # sends a newline cannot grow the buffer past the limit.
    limit = -1 if max_length is None else max_length + 2
    raw = reader.readline(limit)
    if not raw:
        return None

    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]

    if max_length is not None and len(raw) > max_length:
        raise LineTooLongError(f"Line too long: more than {max_length} bytes")

    return raw.decode(ENCODING, errors="replace")


def encode_line(text: str) -> bytes:
    """Encode ``text`` as one newline-terminated wire line."""
    return (text + NEWLINE).encode(ENCODING)
