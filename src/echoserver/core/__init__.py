"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                            LISTENER                                  │
    │  • Binds the port, runs the accept() loop                           │
    │  • Hands each new socket off and immediately accepts again          │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one thread per connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                            SESSION                                   │
    │  • Reads lines, echoes "[session#N ip] line" back                   │
    │  • Logs connect/disconnect, always releases its socket              │
    └─────────────────────────────────────────────────────────────────────┘
                  │                                     │
                  ▼                                     ▼
    ┌──────────────────────────────┐     ┌──────────────────────────────┐
    │      SESSION ID GENERATOR    │     │        HISTORY LEDGER        │
    │  • 1, 2, 3, ... under a lock │     │  • Last N records, all       │
    │                              │     │    sessions, under a lock    │
    └──────────────────────────────┘     └──────────────────────────────┘

The generator and the ledger are the only shared state. They are created
once per server and passed to whoever needs them, never reached through
module globals.

=============================================================================
"""

from .history import HistoryLedger, MAX_HISTORY
from .identifiers import SessionIdGenerator
from .session import Session, SessionState
from .listener import Listener

__all__ = [
    "HistoryLedger",       # Bounded record buffer shared by all sessions
    "MAX_HISTORY",         # Default ledger capacity
    "SessionIdGenerator",  # Unique, increasing session numbers
    "Session",             # One connection, one thread
    "SessionState",        # Session lifecycle states
    "Listener",            # Accept loop
]
