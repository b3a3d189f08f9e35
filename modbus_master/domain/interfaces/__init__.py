"""Domain interfaces for the Modbus/TCP master.

The transaction executor depends on ``IConnection`` only, so tests can run it
against an in-memory fake instead of a socket.
"""

from .i_connection import IConnection

__all__ = [
    "IConnection",
]
