"""Test doubles for unit testing.

Test doubles are fake implementations of interfaces used for testing.
They're faster and more reliable than mocking, and they implement the
actual interface contracts.

- FakeConnection: in-memory IConnection with scripted responses
- FakeSlave: loopback TCP peer speaking just enough Modbus/TCP to exercise
  the real TcpConnection

Example:
    >>> from tests.doubles import FakeConnection
    >>> connection = FakeConnection()
    >>> connection.add_response(response_bytes)
    >>> executor = TransactionExecutor(connection)
    >>> payload = executor.execute(frame)
    >>> assert connection.sent == [frame.to_bytes()]
"""

from .fake_connection import FakeConnection
from .fake_slave import FakeSlave, response_frame

__all__ = [
    "FakeConnection",
    "FakeSlave",
    "response_frame",
]
