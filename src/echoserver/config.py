"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the echo server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line port argument                                     │
    │      └── python -m echoserver 9090                                  │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── ECHO_PORT=9090 ECHO_LOG_LEVEL=DEBUG python -m echoserver   │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The server CLI deliberately takes only the port. Everything else is read
from the environment so the same command line works in every deployment.

=============================================================================
"""

import os
from dataclasses import dataclass

from .core.history import MAX_HISTORY
from .protocol import MAX_LINE_LENGTH


DEFAULT_PORT = 8080


@dataclass
class ServerConfig:
    """
    Configuration for the echo server.

    NETWORK SETTINGS
    - host, port, backlog, accept_timeout

    HISTORY
    - max_history, max_line_length

    LOGGING
    - log_level
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = DEFAULT_PORT
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections waiting for accept().
    """

    accept_timeout: float = 1.0
    """
    How long a single accept() call may block before the loop re-checks
    whether it has been asked to stop.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HISTORY
    # ─────────────────────────────────────────────────────────────────────

    max_history: int = MAX_HISTORY
    """
    Number of most recent records kept in the shared history ledger.
    """

    max_line_length: int = MAX_LINE_LENGTH
    """
    Longest incoming line in bytes (terminator excluded). A client that
    goes past it without sending a newline is disconnected.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    INFO shows connect/disconnect events and every echoed record.
    """

    server_name: str = "EchoServer/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        ECHO_HOST         Bind address (default: 0.0.0.0)
        ECHO_PORT         Listen port (default: 8080)
        ECHO_BACKLOG      Accept queue size (default: 128)
        ECHO_MAX_HISTORY  History ledger capacity (default: 10)
        ECHO_MAX_LINE_LENGTH  Longest accepted line in bytes (default: 65536)
        ECHO_LOG_LEVEL    Logging level (default: INFO)

        Malformed numeric values raise ValueError (fail fast).
        """
        return cls(
            host=os.getenv("ECHO_HOST", "0.0.0.0"),
            port=int(os.getenv("ECHO_PORT", str(DEFAULT_PORT))),
            backlog=int(os.getenv("ECHO_BACKLOG", "128")),
            max_history=int(os.getenv("ECHO_MAX_HISTORY", str(MAX_HISTORY))),
            max_line_length=int(os.getenv("ECHO_MAX_LINE_LENGTH", str(MAX_LINE_LENGTH))),
            log_level=os.getenv("ECHO_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        We validate at startup, not at first use, so a bad value stops the
        server before it binds anything.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.max_history < 1:
            raise ValueError("max_history must be >= 1")

        if self.max_line_length < 1:
            raise ValueError("max_line_length must be >= 1")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")
