"""
=============================================================================
CONNECTION SESSION
=============================================================================

A Session is everything the server knows about ONE accepted connection,
plus the loop that serves it. Each session runs on its own thread and owns
its socket exclusively. The only things it touches that other sessions also
touch are the process log and the shared HistoryLedger.

=============================================================================
SESSION LIFECYCLE
=============================================================================

    ┌───────────┐   run()    ┌───────────┐
    │ CONNECTED │ ─────────► │  ECHOING  │ ◄──┐ one line in,
    └───────────┘            └─────┬─────┘ ───┘ one record out
     log "connected"               │
                                   │ EOF, OSError (reset, broken pipe...)
                                   │ or a line over max_line_length
                                   ▼
                             ┌───────────┐
                             │  CLOSING  │  log "disconnected"
                             └─────┬─────┘  release socket (exactly once)
                                   ▼
                             ┌───────────┐
                             │  CLOSED   │
                             └───────────┘

Whatever path leads out of ECHOING, the disconnect is logged and the socket
is released. A failure while releasing is logged too, and the thread simply
ends: the listener and the other sessions never hear about it.

=============================================================================
PER-LINE PIPELINE
=============================================================================

    read_line()  ──►  format_record()  ──►  log  ──►  ledger.append()
                                                            │
                                        sendall(record+\\n) ◄┘

Within one session these steps happen strictly in line order. Across
sessions there is no ordering at all.

=============================================================================
"""

import socket
import time
import logging
from datetime import datetime
from enum import Enum
from typing import Optional, BinaryIO

from .history import HistoryLedger
from ..protocol import (
    MAX_LINE_LENGTH,
    LineTooLongError,
    encode_line,
    format_record,
    read_line,
)


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Session lifecycle states."""
    CONNECTED = "connected"  # Accepted, connect event not yet processed
    ECHOING = "echoing"      # Steady state: reading lines and echoing them
    CLOSING = "closing"      # Stream ended or failed, releasing the socket
    CLOSED = "closed"        # Socket released, terminal


class Session:
    """
    Serves a single client connection.

    Usage (normally done by EchoServer on a fresh thread):

        session = Session(client_socket, ("127.0.0.1", 54321), 1, ledger)
        session.run()   # Blocks until the client goes away

    Attributes:
        session_id: Identifier assigned at accept time (>= 1, immutable).
        address: Client IP address.
        port: Client port.
        connected_at: When the connection was accepted.
        state: Current SessionState.
        lines_echoed: Number of records sent back so far.
    """

    def __init__(
        self,
        transport: socket.socket,
        address: tuple,
        session_id: int,
        history: HistoryLedger,
        max_line_length: int = MAX_LINE_LENGTH,
    ):
        self._transport = transport
        self._session_id = session_id
        self._history = history
        self._max_line_length = max_line_length
        self._reader: Optional[BinaryIO] = None

        self.address: str = address[0]
        self.port: int = address[1]
        self.connected_at = datetime.now()
        self.state = SessionState.CONNECTED
        self.lines_echoed = 0

        self._started = time.monotonic()

        # Accepted sockets may inherit the listener's accept timeout.
        # A session waits on its client for as long as the client likes.
        self._transport.settimeout(None)

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def duration(self) -> float:
        """Seconds since the connection was accepted."""
        return time.monotonic() - self._started

    def __repr__(self) -> str:
        return (
            f"Session(id={self._session_id}, peer={self.address}:{self.port}, "
            f"state={self.state.value})"
        )

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    def run(self) -> None:
        """
        Serve the connection until the client disconnects or I/O fails.

        Never raises for socket errors: they are logged and end the session.
        """
        logger.info(
            f"{self.connected_at.isoformat()} - session#{self._session_id} "
            f"connected from {self.address}:{self.port}"
        )

        try:
            self.state = SessionState.ECHOING
            self._reader = self._transport.makefile("rb")

            while True:
                line = read_line(self._reader, self._max_line_length)
                if line is None:
                    break  # Client closed its side
                self._echo(line)

        except OSError as e:
            # ConnectionResetError, BrokenPipeError, ... all land here
            logger.error(f"I/O error with session#{self._session_id}: {e}")

        except LineTooLongError as e:
            logger.error(f"Dropping session#{self._session_id}: {e}")

        finally:
            self.close()

    def _echo(self, line: str) -> None:
        """Record, remember and send back one line."""
        record = format_record(self._session_id, self.address, line)

        logger.info(record)
        self._history.append(record)

        # sendall() returns only once every byte is handed to the kernel,
        # so a partial write cannot leave half a record behind silently.
        self._transport.sendall(encode_line(record))
        self.lines_echoed += 1

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Log the disconnect and release the socket.

        Safe to call more than once; only the first call does anything.
        """
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            return

        self.state = SessionState.CLOSING

        logger.info(
            f"{datetime.now().isoformat()} - session#{self._session_id} "
            f"disconnected: {self.address}:{self.port}"
        )

        # The reader holds a reference to the socket; the file descriptor
        # is only released once both are closed.
        if self._reader is not None:
            try:
                self._reader.close()
            except OSError as e:
                logger.error(f"Error closing reader for session#{self._session_id}: {e}")
            self._reader = None

        try:
            self._transport.close()
        except OSError as e:
            logger.error(f"Error closing socket for session#{self._session_id}: {e}")

        self.state = SessionState.CLOSED

        logger.debug(
            f"session#{self._session_id} closed after {self.lines_echoed} lines "
            f"in {self.duration:.2f}s"
        )
