"""
=============================================================================
ECHO SERVER
=============================================================================

Ties the core components together:

    EchoServer.run()
        └──► Listener.start(self._handle_connection)      (blocks)
                 │
                 └──► for each accepted socket:
                         ids.next()            → session number
                         Session(...)          → shares the ledger
                         Thread(session.run)   → started, not joined

=============================================================================
THREAD-PER-CONNECTION
=============================================================================

Every connection gets its own thread and keeps it until the client leaves.
There is no pool and no connection limit: a thousand clients means a
thousand threads. That keeps each session a plain blocking loop, which is
all an echo service needs.

Session threads are daemon threads. When the process is killed they die
with it; nothing is flushed or drained on the way out.

=============================================================================
"""

import sys
import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import HistoryLedger, Listener, Session, SessionIdGenerator


logger = logging.getLogger(__name__)


class EchoServer:
    """
    Multi-client line echo server.

    Usage:
        server = EchoServer(ServerConfig(port=9090))
        server.run()  # Blocks until Ctrl+C or a fatal socket error

    The identifier generator and the history ledger can be injected, which
    is handy for tests that want to inspect them.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        ids: Optional[SessionIdGenerator] = None,
        history: Optional[HistoryLedger] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self._ids = ids if ids is not None else SessionIdGenerator()
        self._history = history if history is not None else HistoryLedger(self.config.max_history)

        self._listener = Listener(
            host=self.config.host,
            port=self.config.port,
            backlog=self.config.backlog,
            accept_timeout=self.config.accept_timeout,
        )

        self._running = False

    def __repr__(self) -> str:
        return f"EchoServer(port={self.config.port}, running={self._running})"

    @property
    def running(self) -> bool:
        return self._running

    @property
    def history(self) -> HistoryLedger:
        return self._history

    @property
    def ids(self) -> SessionIdGenerator:
        return self._ids

    @property
    def address(self) -> Tuple[str, int]:
        return self._listener.address

    @property
    def error(self) -> Optional[OSError]:
        """The accept error that stopped the server, if any."""
        return self._listener.error

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self) -> None:
        """
        Start the server (blocking).

        Raises:
            OSError: If the port cannot be bound.
        """
        self._setup_logging()

        logger.info(f"Starting echo server on port {self.config.port}...")
        self._running = True
        logger.info(f"Server state: {self!r}")

        try:
            self._print_startup_banner()
            self._listener.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped.")

    def shutdown(self) -> None:
        """Stop accepting connections. Running sessions are not interrupted."""
        self._listener.shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        return self._listener.wait_until_listening(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._listener.wait_for_shutdown(timeout)

    def _print_startup_banner(self):
        """Print server startup information."""
        print()
        print("+--------------------------------------------------------------+")
        print(f"|  {self.config.server_name} on {self.config.host}:{self.config.port}")
        print(f"|  History: last {self._history.capacity} records")
        print("|  Press Ctrl+C to stop")
        print("+--------------------------------------------------------------+")
        print()
        sys.stdout.flush()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("echoserver").setLevel(level)

    # =========================================================================
    # CONNECTION DISPATCH
    # =========================================================================

    def _handle_connection(self, client_socket, address: Tuple[str, int]):
        """
        Start a session for a freshly accepted socket.

        Called on the listener thread, so it must return quickly: the
        session itself runs on a new thread.
        """
        session_id = self._ids.next()

        try:
            session = Session(
                client_socket,
                address,
                session_id,
                self._history,
                max_line_length=self.config.max_line_length,
            )
        except OSError as e:
            # The client vanished between accept() and now
            logger.error(f"I/O error with session#{session_id}: {e}")
            client_socket.close()
            return

        thread = threading.Thread(
            target=session.run,
            name=f"session-{session_id}",
            daemon=True,
        )
        thread.start()
