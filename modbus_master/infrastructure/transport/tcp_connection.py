"""TCP transport implementation for the Modbus/TCP master.

This module implements the IConnection interface over a single stream
socket. The socket is shared by the blocking and the asyncio code paths:
blocking calls rely on the socket timeout, coroutine calls switch the socket
to non-blocking mode for their duration and bound the wait with
``asyncio.wait_for``.
"""

import asyncio
import logging
import socket
from contextlib import contextmanager
from typing import Iterator, Optional

from ...const import DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_TIMEOUT_MS, MAX_TIMEOUT_MS
from ...domain.exceptions import ModbusTimeoutError, NotConnectedError
from ...domain.helpers import validate_range
from ...domain.interfaces import IConnection
from ..decorators import handle_transport_errors

_LOGGER = logging.getLogger(__name__)


class TcpConnection(IConnection):
    """TCP connection to a Modbus/TCP slave.

    This implementation handles:
    - Blocking and asyncio connect on the same socket object
    - Nagle disabled (TCP_NODELAY) so small requests go out immediately
    - Send/receive timeouts, reapplied to the live socket when changed
    - Idempotent shutdown and close

    Attributes:
        _socket: Connected socket, None while disconnected
        _timeout_ms: Send/receive timeout in milliseconds
        _connect_timeout_ms: Timeout for establishing the connection

    Example:
        >>> connection = TcpConnection(timeout_ms=500)
        >>> connection.connect("192.168.1.10", 502)
        >>> connection.send(request)
        >>> header = connection.receive(6)
        >>> connection.disconnect()
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
    ):
        """Initialize TCP connection.

        Args:
            timeout_ms: Send/receive timeout in milliseconds (1-65535)
            connect_timeout_ms: Connect timeout in milliseconds

        Raises:
            ValidationError: If a timeout is out of range
        """
        self._timeout_ms = validate_range(timeout_ms, 1, MAX_TIMEOUT_MS, "timeout")
        self._connect_timeout_ms = validate_range(
            connect_timeout_ms, 1, 10 * MAX_TIMEOUT_MS, "connect_timeout"
        )
        self._socket: Optional[socket.socket] = None
        self._peer: Optional[str] = None
        self._non_blocking_depth = 0

    @property
    def connected(self) -> bool:
        """Check if a live socket is held."""
        return self._socket is not None and self._socket.fileno() >= 0

    @property
    def timeout(self) -> int:
        """Send/receive timeout in milliseconds."""
        return self._timeout_ms

    @timeout.setter
    def timeout(self, value: int) -> None:
        self._timeout_ms = validate_range(value, 1, MAX_TIMEOUT_MS, "timeout")
        if self._socket is not None and self._non_blocking_depth == 0:
            self._socket.settimeout(self._timeout_s)
        _LOGGER.debug("Timeout set to %d ms", self._timeout_ms)

    @property
    def _timeout_s(self) -> float:
        return self._timeout_ms / 1000

    def connect(self, host: str, port: int) -> None:
        """Open the connection, blocking up to the connect timeout.

        An existing connection is closed first.

        Raises:
            OSError: If the host cannot be resolved or reached
            TimeoutError: If the connect timeout expires
        """
        self.disconnect()
        _LOGGER.debug("Connecting to %s:%d", host, port)
        sock = socket.create_connection(
            (host, port), timeout=self._connect_timeout_ms / 1000
        )
        self._attach(sock, host, port)

    async def connect_async(self, host: str, port: int) -> None:
        """Open the connection without blocking the event loop.

        Tries each resolved address in turn, as ``socket.create_connection``
        does.

        Raises:
            OSError: If the host cannot be resolved or reached
            TimeoutError: If the connect timeout expires
        """
        self.disconnect()
        _LOGGER.debug("Connecting to %s:%d (async)", host, port)

        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        if not infos:
            raise OSError(f"getaddrinfo returned no addresses for {host}")

        last_error: Optional[BaseException] = None
        for family, sock_type, proto, _, address in infos:
            sock = socket.socket(family, sock_type, proto)
            sock.setblocking(False)
            try:
                await asyncio.wait_for(
                    loop.sock_connect(sock, address),
                    self._connect_timeout_ms / 1000,
                )
            except (OSError, asyncio.TimeoutError) as err:
                sock.close()
                last_error = err
                _LOGGER.debug("Connect to %s failed: %s", address, err)
                continue
            except asyncio.CancelledError:
                sock.close()
                raise

            self._attach(sock, host, port)
            return

        if isinstance(last_error, OSError):
            raise last_error
        raise TimeoutError(
            f"Connect to {host}:{port} timed out after {self._connect_timeout_ms} ms"
        ) from last_error

    @handle_transport_errors("Disconnect", reraise=False)
    def disconnect(self) -> None:
        """Shut down and close the socket. Safe to call at any time."""
        sock, self._socket = self._socket, None
        if sock is None:
            return

        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as err:
            # Peer already gone or socket never fully connected
            _LOGGER.debug("Shutdown of %s failed: %s", self._peer, err)
        finally:
            sock.close()

        _LOGGER.info("Disconnected from %s", self._peer)

    def send(self, data: bytes) -> None:
        """Write all of ``data`` within the timeout."""
        sock = self._require_socket()
        try:
            sock.sendall(data)
        except socket.timeout as err:
            raise ModbusTimeoutError(
                f"Send timed out after {self._timeout_ms} ms"
            ) from err
        self._log_traffic("TX", data)

    def receive(self, max_bytes: int) -> bytes:
        """Read up to ``max_bytes`` within the timeout."""
        sock = self._require_socket()
        try:
            chunk = sock.recv(max_bytes)
        except socket.timeout as err:
            raise ModbusTimeoutError(
                f"No response within {self._timeout_ms} ms"
            ) from err
        self._log_traffic("RX", chunk)
        return chunk

    async def send_async(self, data: bytes) -> None:
        """Coroutine form of :meth:`send`."""
        sock = self._require_socket()
        loop = asyncio.get_running_loop()
        with self._non_blocking(sock):
            try:
                await asyncio.wait_for(loop.sock_sendall(sock, data), self._timeout_s)
            except asyncio.TimeoutError as err:
                raise ModbusTimeoutError(
                    f"Send timed out after {self._timeout_ms} ms"
                ) from err
        self._log_traffic("TX", data)

    async def receive_async(self, max_bytes: int) -> bytes:
        """Coroutine form of :meth:`receive`."""
        sock = self._require_socket()
        loop = asyncio.get_running_loop()
        with self._non_blocking(sock):
            try:
                chunk = await asyncio.wait_for(
                    loop.sock_recv(sock, max_bytes), self._timeout_s
                )
            except asyncio.TimeoutError as err:
                raise ModbusTimeoutError(
                    f"No response within {self._timeout_ms} ms"
                ) from err
        self._log_traffic("RX", chunk)
        return chunk

    def _attach(self, sock: socket.socket, host: str, port: int) -> None:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(self._timeout_s)
        self._socket = sock
        self._peer = f"{host}:{port}"
        _LOGGER.info(
            "Connected to %s (timeout %d ms)", self._peer, self._timeout_ms
        )

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise NotConnectedError("Not connected")
        return self._socket

    @contextmanager
    def _non_blocking(self, sock: socket.socket) -> Iterator[socket.socket]:
        """Put the socket in non-blocking mode for an event loop call."""
        self._non_blocking_depth += 1
        sock.setblocking(False)
        try:
            yield sock
        finally:
            self._non_blocking_depth -= 1
            # Socket may have been closed while the coroutine was suspended
            if self._socket is sock and self._non_blocking_depth == 0:
                sock.settimeout(self._timeout_s)

    @staticmethod
    def _log_traffic(direction: str, data: bytes) -> None:
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("%s %d bytes: %s", direction, len(data), data.hex(" "))
