"""Modbus/TCP request frame encoder.

This module builds request frames for every function the master supports.
All range checks run before a frame is returned, so a request that violates
a protocol limit never reaches the connection.
"""

import logging
import struct

from ...const import (
    COIL_OFF,
    COIL_ON,
    MAX_READ_BITS,
    MAX_READ_REGISTERS,
    MAX_WRITE_BITS,
    MAX_WRITE_BYTES,
    MEI_READ_DEVICE_ID,
    READ_DEVICE_ID_BASIC,
)
from ...domain.exceptions import ValidationError
from ...domain.helpers import (
    validate_address,
    validate_payload,
    validate_range,
    validate_transaction_id,
    validate_unit_id,
)
from ...domain.value_objects import FunctionCode, ModbusFrame

_LOGGER = logging.getLogger(__name__)

_READ_LIMITS = {
    FunctionCode.READ_COILS: MAX_READ_BITS,
    FunctionCode.READ_DISCRETE_INPUTS: MAX_READ_BITS,
    FunctionCode.READ_HOLDING_REGISTERS: MAX_READ_REGISTERS,
    FunctionCode.READ_INPUT_REGISTERS: MAX_READ_REGISTERS,
}


class FrameEncoder:
    """Stateless builder for Modbus/TCP request frames.

    Each ``build_*`` method validates its arguments and returns a
    ``ModbusFrame``; call ``to_bytes()`` on it for the wire form.

    Request layout (offsets into the wire frame):
        0-1  transaction id      6   unit id
        2-3  protocol id (0)     7   function code
        4-5  length              8+  function specific data

    Example:
        >>> encoder = FrameEncoder()
        >>> frame = encoder.build_read_request(
        ...     1, 1, FunctionCode.READ_HOLDING_REGISTERS, 0, 2
        ... )
        >>> frame.to_bytes().hex(" ")
        '00 01 00 00 00 06 01 03 00 00 00 02'
    """

    def build_read_request(
        self,
        transaction_id: int,
        unit_id: int,
        function: FunctionCode,
        start_address: int,
        quantity: int,
    ) -> ModbusFrame:
        """Build a coil, discrete input, holding or input register read.

        Args:
            transaction_id: Correlation id echoed by the unit
            unit_id: Target unit
            function: One of the four read function codes
            start_address: First address to read (0x0000 - 0xFFFF)
            quantity: Number of bits (1-2000) or registers (1-125)

        Returns:
            12-byte request frame

        Raises:
            ValidationError: If any argument is out of range
        """
        if function not in _READ_LIMITS:
            raise ValidationError(f"{function!r} is not a read function")
        function = FunctionCode(function)

        self._validate_header(transaction_id, unit_id)
        validate_address(start_address, "start_address")
        validate_range(quantity, 1, _READ_LIMITS[function], "quantity")

        return self._frame(
            transaction_id,
            unit_id,
            function,
            struct.pack(">HH", start_address, quantity),
        )

    def build_write_single_coil(
        self, transaction_id: int, unit_id: int, address: int, on: bool
    ) -> ModbusFrame:
        """Build a write single coil request.

        The coil value is ``FF 00`` for on and ``00 00`` for off.
        """
        self._validate_header(transaction_id, unit_id)
        validate_address(address)

        return self._frame(
            transaction_id,
            unit_id,
            FunctionCode.WRITE_SINGLE_COIL,
            struct.pack(">HH", address, COIL_ON if on else COIL_OFF),
        )

    def build_write_single_register(
        self, transaction_id: int, unit_id: int, address: int, values: bytes
    ) -> ModbusFrame:
        """Build a write single register request.

        Args:
            values: Exactly two bytes, high byte first

        Raises:
            ValidationError: If ``values`` is not exactly two bytes
        """
        self._validate_header(transaction_id, unit_id)
        validate_address(address)
        payload = validate_payload(values, 2)
        if len(payload) != 2:
            raise ValidationError(
                f"Single register write needs exactly 2 bytes, got {len(payload)}"
            )

        return self._frame(
            transaction_id,
            unit_id,
            FunctionCode.WRITE_SINGLE_REGISTER,
            struct.pack(">H", address) + payload,
        )

    def build_write_multiple_coils(
        self,
        transaction_id: int,
        unit_id: int,
        start_address: int,
        num_bits: int,
        values: bytes,
    ) -> ModbusFrame:
        """Build a write multiple coils request.

        Args:
            num_bits: Number of coils to write (1-2000)
            values: Packed coil states, LSB first (at most 250 bytes)

        Raises:
            ValidationError: If the payload is too long, or does not hold
                ``num_bits`` bits
        """
        self._validate_header(transaction_id, unit_id)
        validate_address(start_address, "start_address")
        validate_range(num_bits, 1, MAX_WRITE_BITS, "num_bits")
        payload = validate_payload(values, MAX_WRITE_BYTES)
        if len(payload) * 8 < num_bits:
            raise ValidationError(
                f"{len(payload)} bytes cannot hold {num_bits} coil states"
            )

        return self._frame(
            transaction_id,
            unit_id,
            FunctionCode.WRITE_MULTIPLE_COILS,
            struct.pack(">HHB", start_address, num_bits, len(payload)) + payload,
        )

    def build_write_multiple_registers(
        self,
        transaction_id: int,
        unit_id: int,
        start_address: int,
        values: bytes,
    ) -> ModbusFrame:
        """Build a write multiple registers request.

        Args:
            values: Register words, high byte first (at most 250 bytes).
                An odd-length payload is padded with one 0x00 byte and the
                register count rounds up.
        """
        self._validate_header(transaction_id, unit_id)
        validate_address(start_address, "start_address")
        payload = self._pad_to_words(validate_payload(values, MAX_WRITE_BYTES))

        return self._frame(
            transaction_id,
            unit_id,
            FunctionCode.WRITE_MULTIPLE_REGISTERS,
            struct.pack(">HHB", start_address, len(payload) // 2, len(payload))
            + payload,
        )

    def build_read_write_multiple_registers(
        self,
        transaction_id: int,
        unit_id: int,
        read_address: int,
        read_quantity: int,
        write_address: int,
        values: bytes,
    ) -> ModbusFrame:
        """Build a combined read/write multiple registers request.

        The unit performs the write before the read.

        Args:
            read_address: First register to read
            read_quantity: Registers to read (1-125)
            write_address: First register to write
            values: Register words to write (at most 250 bytes, odd
                lengths padded as for ``build_write_multiple_registers``)
        """
        self._validate_header(transaction_id, unit_id)
        validate_address(read_address, "read_address")
        validate_range(read_quantity, 1, MAX_READ_REGISTERS, "read_quantity")
        validate_address(write_address, "write_address")
        payload = self._pad_to_words(validate_payload(values, MAX_WRITE_BYTES))

        return self._frame(
            transaction_id,
            unit_id,
            FunctionCode.READ_WRITE_MULTIPLE_REGISTERS,
            struct.pack(
                ">HHHHB",
                read_address,
                read_quantity,
                write_address,
                len(payload) // 2,
                len(payload),
            )
            + payload,
        )

    def build_read_device_identifiers(
        self, transaction_id: int, unit_id: int, object_id: int
    ) -> ModbusFrame:
        """Build a read device identification request.

        The frame is a fixed 12 bytes: MEI type 0x0E, read device id code
        0x01 (basic stream), the object id and one 0x00 pad byte.
        """
        self._validate_header(transaction_id, unit_id)
        validate_range(object_id, 0, 0xFF, "object_id")

        return self._frame(
            transaction_id,
            unit_id,
            FunctionCode.READ_DEVICE_IDENTIFIERS,
            bytes([MEI_READ_DEVICE_ID, READ_DEVICE_ID_BASIC, object_id, 0x00]),
        )

    @staticmethod
    def _validate_header(transaction_id: int, unit_id: int) -> None:
        validate_transaction_id(transaction_id)
        validate_unit_id(unit_id)

    @staticmethod
    def _pad_to_words(payload: bytes) -> bytes:
        if len(payload) % 2:
            return payload + b"\x00"
        return payload

    @staticmethod
    def _frame(
        transaction_id: int, unit_id: int, function: FunctionCode, data: bytes
    ) -> ModbusFrame:
        frame = ModbusFrame(
            transaction_id=transaction_id,
            unit_id=unit_id,
            function_code=function,
            data=data,
        )

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Built %s request: %s", function.name, frame.to_bytes().hex())

        return frame
