"""
=============================================================================
LISTENER / DISPATCH LOOP
=============================================================================

The listener binds the server port and accepts connections. It does NOT
serve them: every accepted socket is handed to a callback that starts a
session elsewhere and returns immediately, so the next accept() is never
delayed by a slow or chatty client.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create the listening socket
    2. bind()      Reserve HOST:PORT           ── fails? fatal, re-raised
    3. listen()    Start queueing connections
    4. accept()    Wait for a client           ── fails? fatal, loop ends
                   └─ Returns a NEW socket just for that client
    5. close()     Release the listening socket (always, on any exit)

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    session#1               session#2               session#3
    (own thread)            (own thread)            (own thread)

=============================================================================
STOPPING
=============================================================================

There is no shutdown command on the wire. The loop ends when:

- accept() raises (treated as fatal, like bind errors)
- shutdown() is called from another thread (tests, embedding code)
- the process receives Ctrl+C (KeyboardInterrupt propagates out of start())

accept() polls with a short timeout so that shutdown() is noticed. Stopping
the listener does not touch sessions that are already running.

=============================================================================
"""

import socket
import logging
import threading
from typing import Optional, Callable, Tuple


logger = logging.getLogger(__name__)


ConnectionHandler = Callable[[socket.socket, Tuple[str, int]], None]


class Listener:
    """
    Accepts TCP connections and dispatches them to a handler.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      Listener Internals                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(handler)                                                    │
    │        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY, timeout   │
    │        ├──► bind() / listen()                                        │
    │        └──► _accept_loop()     while running: accept → handler      │
    │                                                                      │
    │    shutdown()        running = False                                 │
    │    _cleanup()        close listening socket, set shutdown event      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle(client_socket, address):
            threading.Thread(target=serve, args=(client_socket,)).start()

        listener = Listener("0.0.0.0", 8080)
        listener.start(handle)  # Blocks until the loop ends

    Attributes:
        error: The OSError that ended the accept loop, if any.
    """

    def __init__(
        self,
        host: str,
        port: int,
        backlog: int = 128,
        accept_timeout: float = 1.0,
    ):
        self.host = host
        self.port = port
        self.backlog = backlog
        self.accept_timeout = accept_timeout

        self.error: Optional[OSError] = None

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None
        self._running = False

        self._listening_event = threading.Event()
        self._shutdown_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        Differs from (host, port) when port 0 asked the OS for a free port.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.host, self.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Echoes are tiny; send each one right away instead of letting
        # Nagle's algorithm batch them. Accepted sockets inherit this.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.accept_timeout)
        return sock

    def start(self, connection_handler: ConnectionHandler) -> None:
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until the loop ends.

        Args:
            connection_handler: Called with (client_socket, (ip, port)) for
                                every accepted connection. Must not block
                                for the lifetime of the connection.

        Raises:
            OSError: If the port cannot be bound or listened on.
        """
        self.error = None
        self._shutdown_event.clear()
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.host, self.port))
            self._socket.listen(self.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.host}:{self.port}: {e}")
            self._cleanup()
            raise

        self._bound_address = self._socket.getsockname()[:2]
        self._running = True
        self._listening_event.set()

        logger.info(f"Server is listening on port {self._bound_address[1]}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: ConnectionHandler) -> None:
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: gives us a chance to look at self._running
                continue
            except OSError as e:
                # A failed accept ends the loop, same as the reference server
                if self._running:
                    logger.error(f"Server I/O error: {e}")
                    self.error = e
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")
            connection_handler(client_socket, client_address[:2])

    def shutdown(self) -> None:
        """
        Ask the accept loop to stop.

        Safe to call from any thread and more than once. Sessions that are
        already running are left alone.
        """
        if self._running:
            logger.info("Stopping listener...")
        self._running = False

    def _cleanup(self) -> None:
        self._running = False
        self._listening_event.clear()

        if self._socket:
            try:
                self._socket.close()
            except OSError as e:
                logger.error(f"Error closing listening socket: {e}")
            self._socket = None

        self._shutdown_event.set()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is bound and accepting.

        Returns:
            True if listening, False on timeout.
        """
        return self._listening_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the accept loop has exited and the socket is closed.

        Returns:
            True if the loop has ended, False on timeout.
        """
        return self._shutdown_event.wait(timeout)
