"""
=============================================================================
ECHOSERVER - Multi-Client Line Echo Service
=============================================================================

A small TCP service built on raw Python sockets. Clients send lines; the
server sends every line straight back, tagged with the sender's session:

    client 1 ──► "hello"
    client 1 ◄── "[session#1 127.0.0.1] hello"

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    echoserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # Server CLI (python -m echoserver [port])
    ├── server.py            # EchoServer: wires listener, sessions, state
    ├── config.py            # ServerConfig dataclass
    ├── protocol.py          # Line encoding and record format
    ├── client.py            # Interactive console client
    └── core/
        ├── listener.py      # Accept loop
        ├── session.py       # One connection, one thread
        ├── identifiers.py   # Session number generator
        └── history.py       # Shared bounded history of records

=============================================================================
QUICK START
=============================================================================

    from echoserver import EchoServer, ServerConfig

    server = EchoServer(ServerConfig(port=9090))
    server.run()

Then, in another terminal:

    python -m echoserver.client 127.0.0.1 9090

=============================================================================
"""

__version__ = "1.0.0"

from .server import EchoServer
from .config import ServerConfig
from .client import EchoClient

__all__ = ["EchoServer", "ServerConfig", "EchoClient", "__version__"]
