"""IConnection interface for the TCP connection the master runs over."""

from abc import ABC, abstractmethod


class IConnection(ABC):
    """Interface for a single Modbus/TCP connection.

    The connection owns one socket and offers each I/O operation in a
    blocking form and an asyncio form. Both forms act on the same socket, so
    a connection opened with ``connect`` can be used from ``send_async`` and
    vice versa.

    Connection lifecycle:
        1. connect(host, port) / await connect_async(host, port)
        2. send(data) + receive(n), repeated per transaction
        3. disconnect() → always safe, never raises

    Example:
        >>> connection = TcpConnection(timeout_ms=500)
        >>> connection.connect("192.168.1.10", 502)
        >>> connection.send(frame)
        >>> chunk = connection.receive(6)
        >>> connection.disconnect()
    """

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Check if the connection currently holds a live socket."""

    @property
    @abstractmethod
    def timeout(self) -> int:
        """Send/receive timeout in milliseconds."""

    @abstractmethod
    def connect(self, host: str, port: int) -> None:
        """Open the TCP connection, blocking the calling thread.

        Raises:
            OSError: If the connection cannot be established
        """

    @abstractmethod
    async def connect_async(self, host: str, port: int) -> None:
        """Open the TCP connection from a coroutine.

        Raises:
            OSError: If the connection cannot be established
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Shut down and release the socket.

        Idempotent: calling it while disconnected is a no-op.
        """

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Write all of ``data``, blocking up to the timeout.

        Raises:
            NotConnectedError: If there is no socket
            ModbusTimeoutError: If the send does not complete in time
        """

    @abstractmethod
    def receive(self, max_bytes: int) -> bytes:
        """Read up to ``max_bytes``, blocking up to the timeout.

        Returns:
            Received bytes, or ``b""`` if the peer closed the connection

        Raises:
            NotConnectedError: If there is no socket
            ModbusTimeoutError: If nothing arrives in time
        """

    @abstractmethod
    async def send_async(self, data: bytes) -> None:
        """Coroutine form of :meth:`send`."""

    @abstractmethod
    async def receive_async(self, max_bytes: int) -> bytes:
        """Coroutine form of :meth:`receive`."""
