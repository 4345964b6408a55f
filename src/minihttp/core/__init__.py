"""
=============================================================================
CORE NETWORKING
=============================================================================

The transport side of the server, below HTTP:

    socket_server.py   listening socket and accept loop
    connection.py      one client socket: single read, single write, close

    ┌──────────────────┐  accept()  ┌──────────────┐  read / write  ┌────────┐
    │   SocketServer   │───────────►│  Connection  │◄──────────────►│ Client │
    └──────────────────┘            └──────────────┘                └────────┘

These modules move bytes. They know nothing about HTTP.
=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
]
