"""Modbus/TCP master facade.

``ModbusMaster`` ties the frame encoder, the TCP connection and the
transaction executor together and exposes one method per supported
function, each in a blocking and an ``_async`` form.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .config import MasterConfig
from .const import DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_PORT, DEFAULT_TIMEOUT_MS
from .domain.exceptions import ModbusProtocolError, ValidationError
from .domain.interfaces import IConnection
from .domain.value_objects import FunctionCode, ModbusFrame
from .infrastructure.protocol import FrameEncoder
from .infrastructure.transaction import TransactionExecutor
from .infrastructure.transport import TcpConnection

_LOGGER = logging.getLogger(__name__)

ExceptionCallback = Callable[[int, int, int, int], None]


class ModbusMaster:
    """Client for a single Modbus/TCP slave connection.

    Every request takes a caller-supplied transaction id and unit id and
    returns the raw payload bytes of the response:
        - reads return the data bytes announced by the response byte count
        - single and multiple writes return the 2-byte echo at offsets 10-11
        - read device identifiers returns the MEI payload (see
          ``unpack_device_identification``)

    The master never retries or reconnects. A failed transaction leaves the
    connection closed and the caller decides whether to ``connect()`` again.

    Attributes:
        on_exception: Optional callback ``(transaction_id, unit_id,
            function, exception_code)`` invoked before a device exception
            response is raised as ``ModbusProtocolError``

    Example:
        >>> with ModbusMaster("192.168.1.10") as master:
        ...     data = master.read_holding_registers(1, 1, 0, 2)
        >>> unpack_registers(data)
        [1, 10]
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: int = DEFAULT_PORT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        *,
        connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
        connection: Optional[IConnection] = None,
        on_exception: Optional[ExceptionCallback] = None,
        auto_connect: bool = True,
    ):
        """Initialize master, connecting right away when a host is given.

        Args:
            host: Slave host name or IP address
            port: TCP port
            timeout_ms: Send/receive timeout in milliseconds
            connect_timeout_ms: Connect timeout in milliseconds
            connection: Connection to use instead of a new ``TcpConnection``
                (the timeout arguments are then ignored)
            on_exception: Callback for device exception responses
            auto_connect: Connect in the constructor when ``host`` is given

        Raises:
            ValidationError: If a timeout is out of range
            OSError: If the initial connect fails
        """
        self._host = host
        self._port = port
        self._connection = (
            connection
            if connection is not None
            else TcpConnection(timeout_ms, connect_timeout_ms)
        )
        self._encoder = FrameEncoder()
        self._executor = TransactionExecutor(self._connection)
        self.on_exception = on_exception

        if host is not None and auto_connect:
            self.connect()

    @classmethod
    def from_config(cls, config: MasterConfig, **kwargs) -> ModbusMaster:
        """Build an unconnected master from validated settings.

        Connect with ``connect()``, ``connect_async()`` or a ``with`` /
        ``async with`` block.
        """
        return cls(
            config.host,
            config.port,
            config.timeout_ms,
            connect_timeout_ms=config.connect_timeout_ms,
            auto_connect=False,
            **kwargs,
        )

    @property
    def connected(self) -> bool:
        """Check if the connection is live."""
        return self._connection.connected

    @property
    def timeout(self) -> int:
        """Send/receive timeout in milliseconds, reapplied live when set."""
        return self._connection.timeout

    @timeout.setter
    def timeout(self, value: int) -> None:
        self._connection.timeout = value

    def connect(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """Connect to ``host:port``, or to the address given earlier.

        Raises:
            ValidationError: If no host is known
            OSError: If the connection cannot be established
        """
        host, port = self._resolve_endpoint(host, port)
        self._connection.connect(host, port)

    async def connect_async(
        self, host: Optional[str] = None, port: Optional[int] = None
    ) -> None:
        """Coroutine form of :meth:`connect`."""
        host, port = self._resolve_endpoint(host, port)
        await self._connection.connect_async(host, port)

    def disconnect(self) -> None:
        """Close the connection. Safe to call when already disconnected."""
        self._connection.disconnect()

    close = disconnect

    def __enter__(self) -> ModbusMaster:
        if not self.connected and self._host is not None:
            self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    async def __aenter__(self) -> ModbusMaster:
        if not self.connected and self._host is not None:
            await self.connect_async()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_coils(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        """Read 1-2000 coils (function 1).

        Returns:
            Packed coil states, LSB first (see ``unpack_bits``)
        """
        return self._execute(
            self._encoder.build_read_request(
                transaction_id, unit_id, FunctionCode.READ_COILS, start_address, quantity
            )
        )

    async def read_coils_async(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_read_request(
                transaction_id, unit_id, FunctionCode.READ_COILS, start_address, quantity
            )
        )

    def read_discrete_inputs(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        """Read 1-2000 discrete inputs (function 2)."""
        return self._execute(
            self._encoder.build_read_request(
                transaction_id,
                unit_id,
                FunctionCode.READ_DISCRETE_INPUTS,
                start_address,
                quantity,
            )
        )

    async def read_discrete_inputs_async(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_read_request(
                transaction_id,
                unit_id,
                FunctionCode.READ_DISCRETE_INPUTS,
                start_address,
                quantity,
            )
        )

    def read_holding_registers(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        """Read 1-125 holding registers (function 3).

        Returns:
            Register words, high byte first (see ``unpack_registers``)

        Raises:
            ValidationError: If ``quantity`` is outside 1-125. Nothing is sent.
        """
        return self._execute(
            self._encoder.build_read_request(
                transaction_id,
                unit_id,
                FunctionCode.READ_HOLDING_REGISTERS,
                start_address,
                quantity,
            )
        )

    async def read_holding_registers_async(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_read_request(
                transaction_id,
                unit_id,
                FunctionCode.READ_HOLDING_REGISTERS,
                start_address,
                quantity,
            )
        )

    def read_input_registers(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        """Read 1-125 input registers (function 4)."""
        return self._execute(
            self._encoder.build_read_request(
                transaction_id,
                unit_id,
                FunctionCode.READ_INPUT_REGISTERS,
                start_address,
                quantity,
            )
        )

    async def read_input_registers_async(
        self, transaction_id: int, unit_id: int, start_address: int, quantity: int
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_read_request(
                transaction_id,
                unit_id,
                FunctionCode.READ_INPUT_REGISTERS,
                start_address,
                quantity,
            )
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write_single_coil(
        self, transaction_id: int, unit_id: int, address: int, on: bool
    ) -> bytes:
        """Switch one coil on or off (function 5)."""
        return self._execute(
            self._encoder.build_write_single_coil(transaction_id, unit_id, address, on)
        )

    async def write_single_coil_async(
        self, transaction_id: int, unit_id: int, address: int, on: bool
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_write_single_coil(transaction_id, unit_id, address, on)
        )

    def write_single_register(
        self, transaction_id: int, unit_id: int, address: int, values: bytes
    ) -> bytes:
        """Write one register from exactly two bytes (function 6)."""
        return self._execute(
            self._encoder.build_write_single_register(
                transaction_id, unit_id, address, values
            )
        )

    async def write_single_register_async(
        self, transaction_id: int, unit_id: int, address: int, values: bytes
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_write_single_register(
                transaction_id, unit_id, address, values
            )
        )

    def write_multiple_coils(
        self,
        transaction_id: int,
        unit_id: int,
        start_address: int,
        num_bits: int,
        values: bytes,
    ) -> bytes:
        """Write ``num_bits`` coils from packed bytes (function 15).

        Args:
            values: Coil states packed LSB first, e.g. from ``pack_bits``
        """
        return self._execute(
            self._encoder.build_write_multiple_coils(
                transaction_id, unit_id, start_address, num_bits, values
            )
        )

    async def write_multiple_coils_async(
        self,
        transaction_id: int,
        unit_id: int,
        start_address: int,
        num_bits: int,
        values: bytes,
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_write_multiple_coils(
                transaction_id, unit_id, start_address, num_bits, values
            )
        )

    def write_multiple_registers(
        self, transaction_id: int, unit_id: int, start_address: int, values: bytes
    ) -> bytes:
        """Write consecutive registers (function 16).

        Args:
            values: Register words, high byte first, e.g. from
                ``pack_registers``. An odd length is padded with 0x00.
        """
        return self._execute(
            self._encoder.build_write_multiple_registers(
                transaction_id, unit_id, start_address, values
            )
        )

    async def write_multiple_registers_async(
        self, transaction_id: int, unit_id: int, start_address: int, values: bytes
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_write_multiple_registers(
                transaction_id, unit_id, start_address, values
            )
        )

    def read_write_multiple_registers(
        self,
        transaction_id: int,
        unit_id: int,
        read_address: int,
        read_quantity: int,
        write_address: int,
        values: bytes,
    ) -> bytes:
        """Write registers, then read registers, in one request (function 23).

        Returns:
            Register words read after the write
        """
        return self._execute(
            self._encoder.build_read_write_multiple_registers(
                transaction_id,
                unit_id,
                read_address,
                read_quantity,
                write_address,
                values,
            )
        )

    async def read_write_multiple_registers_async(
        self,
        transaction_id: int,
        unit_id: int,
        read_address: int,
        read_quantity: int,
        write_address: int,
        values: bytes,
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_read_write_multiple_registers(
                transaction_id,
                unit_id,
                read_address,
                read_quantity,
                write_address,
                values,
            )
        )

    def read_device_identifiers(
        self, transaction_id: int, unit_id: int, object_id: int = 0
    ) -> bytes:
        """Read basic device identification objects (function 43 / MEI 14).

        Returns:
            MEI payload, decodable with ``unpack_device_identification``
        """
        return self._execute(
            self._encoder.build_read_device_identifiers(
                transaction_id, unit_id, object_id
            )
        )

    async def read_device_identifiers_async(
        self, transaction_id: int, unit_id: int, object_id: int = 0
    ) -> bytes:
        return await self._execute_async(
            self._encoder.build_read_device_identifiers(
                transaction_id, unit_id, object_id
            )
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(self, frame: ModbusFrame) -> bytes:
        try:
            return self._executor.execute(frame)
        except ModbusProtocolError as err:
            self._notify_exception(frame, err)
            raise

    async def _execute_async(self, frame: ModbusFrame) -> bytes:
        try:
            return await self._executor.execute_async(frame)
        except ModbusProtocolError as err:
            self._notify_exception(frame, err)
            raise

    def _notify_exception(self, frame: ModbusFrame, err: ModbusProtocolError) -> None:
        if self.on_exception is None:
            return
        try:
            self.on_exception(
                frame.transaction_id,
                frame.unit_id,
                int(frame.function_code),
                err.raw_code,
            )
        except Exception as callback_err:
            _LOGGER.error("Error in exception callback: %s", callback_err)

    def _resolve_endpoint(
        self, host: Optional[str], port: Optional[int]
    ) -> tuple[str, int]:
        if host is not None:
            self._host = host
        if port is not None:
            self._port = port
        if self._host is None:
            raise ValidationError("No host given to connect to")
        return self._host, self._port

    def __repr__(self) -> str:
        return (
            f"ModbusMaster(host={self._host!r}, port={self._port}, "
            f"connected={self.connected})"
        )
