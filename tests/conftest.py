"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Callable, Generator, List
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from echoserver import EchoServer, ServerConfig
from echoserver.protocol import read_line, encode_line


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` runs out."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


class LineClient:
    """Minimal blocking line client used to drive the server in tests."""

    def __init__(self, port: int):
        self.sock = socket.create_connection(('127.0.0.1', port), timeout=5.0)
        self.reader = self.sock.makefile("rb")

    def send(self, line: str):
        self.sock.sendall(encode_line(line))

    def receive(self):
        return read_line(self.reader)

    def echo(self, line: str):
        self.send(line)
        return self.receive()

    def close(self):
        self.reader.close()
        self.sock.close()


class ServerThread:
    """Echo server running in a background thread."""

    def __init__(self, server: EchoServer):
        self.server = server
        self._thread: threading.Thread = None
        self._clients: List[LineClient] = []

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def connect(self) -> LineClient:
        client = LineClient(self.port)
        self._clients.append(client)
        return client

    def stop(self):
        """Stop the server and any clients still open."""
        for client in self._clients:
            try:
                client.close()
            except OSError:
                pass

        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        accept_timeout=0.1,
        log_level="INFO",
    )


@pytest.fixture
def echo_server(config: ServerConfig) -> Generator[ServerThread, None, None]:
    """A running echo server on a free port."""
    test_srv = ServerThread(EchoServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
