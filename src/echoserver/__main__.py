"""
=============================================================================
ECHO SERVER CLI ENTRY POINT
=============================================================================

    # Run on the default port (8080)
    python -m echoserver

    # Custom port
    python -m echoserver 9090

    # Everything else comes from the environment
    ECHO_LOG_LEVEL=DEBUG ECHO_HOST=127.0.0.1 python -m echoserver 9090

The port argument is forgiving on purpose: a bad value prints a warning and
the server starts on 8080 anyway. The client CLI, by contrast, refuses to
guess (see echoserver.client).

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from .config import ServerConfig, DEFAULT_PORT
from .server import EchoServer


def parse_port(value: Optional[str], default: int = DEFAULT_PORT) -> int:
    """
    Turn the optional port argument into a usable port.

    Args:
        value: Raw argument, or None when it was not given.
        default: Port to fall back to.

    Returns:
        The parsed port, or ``default`` (with a warning on stderr) when the
        value is not a number between 1 and 65535.
    """
    if value is None:
        return default

    try:
        port = int(value)
    except ValueError:
        port = None

    if port is None or not 0 < port < 65536:
        print(f"Invalid port '{value}', using default {default}", file=sys.stderr)
        return default

    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="echo-server",
        description="Multi-client line echo server",
    )
    parser.add_argument(
        "port",
        nargs="?",
        default=None,
        help=f"Port to listen on (default: {DEFAULT_PORT})",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status: 0 after a normal stop, 1 if the server could
        not start or its accept loop failed.
    """
    if argv is None:
        argv = sys.argv[1:]

    # Only the first argument counts and extra ones are ignored. argparse
    # is still consulted so that --help works, but a bad first token
    # ("-x", "abc") goes through parse_port for the warning and fallback.
    build_parser().parse_known_args(argv)
    port_arg = argv[0] if argv else None

    try:
        config = ServerConfig.from_env()
        config.port = parse_port(port_arg, default=config.port)
        server = EchoServer(config)
        server.run()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # The accept loop died on a socket error rather than being stopped
    return 1 if server.error else 0


if __name__ == "__main__":
    sys.exit(main())
