"""
=============================================================================
INTERACTIVE ECHO CLIENT
=============================================================================

    python -m echoserver.client <host> <port>

Reads lines from the console, sends each one to the server and prints the
echo before asking for the next line:

    > hello
    Server: [session#1 127.0.0.1] hello
    > /quit
    Closing connection and exiting client.

    ┌──────────────────────────────────────────────────────────────────┐
    │                        Client Loop                                │
    ├──────────────────────────────────────────────────────────────────┤
    │   prompt "> "                                                     │
    │     ├── console EOF        → exit                                 │
    │     ├── blank line         → prompt again                         │
    │     ├── /quit (any case)   → exit, nothing sent                   │
    │     └── anything else      → send, wait for ONE reply line        │
    │                                ├── reply  → print "Server: ..."   │
    │                                └── EOF    → exit                  │
    └──────────────────────────────────────────────────────────────────┘

The client never retries. Connection problems are reported on stderr,
distinguishing an unknown host from a refused connection from anything
else.

=============================================================================
"""

import argparse
import socket
import sys
import logging
from typing import Optional, Sequence, TextIO

from .protocol import read_line, encode_line


logger = logging.getLogger(__name__)


QUIT_COMMAND = "/quit"

# Trimmed from both ends of console input: ASCII control characters and
# space only. Other Unicode whitespace (e.g. U+00A0) is sent as typed.
TRIM_CHARS = "".join(chr(c) for c in range(0x21))


class EchoClient:
    """
    Console client for the echo server.

    The console streams default to the process's own but can be swapped
    for in-memory ones:

        client = EchoClient("127.0.0.1", 9090, stdin=io.StringIO("hi\\n"))
        client.run()
    """

    def __init__(
        self,
        host: str,
        port: int,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        connect_timeout: Optional[float] = None,
    ):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout

        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._stderr = stderr if stderr is not None else sys.stderr

    def _say(self, message: str) -> None:
        print(message, file=self._stdout, flush=True)

    def _complain(self, message: str) -> None:
        print(message, file=self._stderr, flush=True)

    def run(self) -> int:
        """
        Connect and run the console loop.

        Returns:
            0 when the session ended normally (quit, console EOF, server
            closed), 1 when connecting or talking to the server failed.
        """
        self._say(f"Connecting to server {self.host}:{self.port}...")

        try:
            sock = socket.create_connection(
                (self.host, self.port), timeout=self.connect_timeout
            )
        except socket.gaierror:
            self._complain(f"Unknown host: {self.host}")
            return 1
        except ConnectionRefusedError as e:
            self._complain(f"Cannot connect to {self.host}:{self.port} - {e}")
            return 1
        except OSError as e:
            self._complain(f"I/O error in client: {e}")
            return 1

        # Once connected, wait on the server as long as it takes
        sock.settimeout(None)

        try:
            with sock, sock.makefile("rb") as reader:
                self._say("Connected to server.")
                self._say("Type message and press Enter.")
                self._say(f"Type {QUIT_COMMAND} to exit.")
                self._loop(sock, reader)
        except OSError as e:
            self._complain(f"I/O error in client: {e}")
            return 1

        return 0

    def _loop(self, sock: socket.socket, reader) -> None:
        while True:
            self._stdout.write("> ")
            self._stdout.flush()

            user_input = self._stdin.readline()
            if not user_input:
                self._say("Console input closed. Exiting client.")
                return

            user_input = user_input.strip(TRIM_CHARS)
            if not user_input:
                continue

            if user_input.lower() == QUIT_COMMAND:
                self._say("Closing connection and exiting client.")
                return

            sock.sendall(encode_line(user_input))
            logger.debug(f"Sent {len(user_input)} characters, waiting for echo")

            response = read_line(reader)
            if response is None:
                self._say("Server closed the connection.")
                return

            self._say(f"Server: {response}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="echo-client",
        description="Interactive client for the line echo server",
    )
    parser.add_argument("host", help="Server host name or IP address")
    parser.add_argument("port", help="Server port")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Client CLI entry point.

    Missing arguments print the usage line on stdout; a port that is not a
    number is reported on stderr. Neither case opens a connection.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()

    if len(argv) < 2:
        parser.print_usage(sys.stdout)
        return 1

    # Taken positionally; arguments after <host> <port> are ignored
    host, port_arg = argv[0], argv[1]

    try:
        port = int(port_arg)
    except ValueError:
        port = None

    if port is None or not 0 < port < 65536:
        print(f"Invalid port: {port_arg}", file=sys.stderr)
        return 1

    return EchoClient(host, port).run()


if __name__ == "__main__":
    sys.exit(main())
