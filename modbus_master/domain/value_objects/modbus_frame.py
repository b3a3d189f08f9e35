"""ModbusFrame value object.

Represents a complete Modbus/TCP application data unit (MBAP header + PDU).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ...const import EXCEPTION_FLAG, MAX_TRANSACTION_ID, MAX_UNIT_ID
from .exception_code import ExceptionCode
from .function_code import FunctionCode
from .mbap_header import MbapHeader


@dataclass(frozen=True)
class ModbusFrame:
    """Immutable Modbus/TCP frame.

    Can represent both requests and responses.

    Modbus/TCP Frame Structure:
        Request:  [MBAP header][Function][Data...]
        Response: [MBAP header][Function][Data...]
        Error:    [MBAP header][Function+0x80][Exception Code]

    The MBAP length field is derived from the data, so a frame built here
    always satisfies "length equals the number of bytes following it".

    Attributes:
        transaction_id: Caller supplied correlation id (0-65535)
        unit_id: Target unit behind the TCP endpoint (0-255)
        function_code: Modbus function code (with 0x80 set for errors)
        data: PDU bytes following the function code

    Example:
        >>> frame = ModbusFrame(
        ...     transaction_id=1,
        ...     unit_id=1,
        ...     function_code=FunctionCode.READ_HOLDING_REGISTERS,
        ...     data=bytes([0x00, 0x00, 0x00, 0x02]),
        ... )
        >>> frame.to_bytes().hex(" ")
        '00 01 00 00 00 06 01 03 00 00 00 02'
    """

    transaction_id: int
    unit_id: int
    function_code: Union[FunctionCode, int]
    data: bytes = b""

    def __post_init__(self) -> None:
        """Validate frame components.

        Raises:
            ValueError: If any component is invalid
            TypeError: If data is not bytes
        """
        if not 0 <= self.transaction_id <= MAX_TRANSACTION_ID:
            raise ValueError(
                f"Transaction ID must be 0-65535, got {self.transaction_id}"
            )

        if not 0 <= self.unit_id <= MAX_UNIT_ID:
            raise ValueError(f"Unit ID must be 0-255, got {self.unit_id}")

        if not isinstance(self.function_code, int) or not (
            0 < self.function_code <= 0xFF
        ):
            raise ValueError(
                f"Function code must be 1-255, got {self.function_code!r}"
            )

        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError(f"Data must be bytes, got {type(self.data).__name__}")

    @property
    def header(self) -> MbapHeader:
        """MBAP header for this frame."""
        return MbapHeader(
            transaction_id=self.transaction_id,
            length=len(self.data) + 2,  # unit id + function code + data
            unit_id=self.unit_id,
        )

    @property
    def is_error(self) -> bool:
        """Check if frame is an exception response."""
        return (self.function_code & EXCEPTION_FLAG) == EXCEPTION_FLAG

    @property
    def exception_code(self) -> Optional[ExceptionCode]:
        """Get exception code if frame is an exception response.

        Returns:
            Known exception code, or None for non-error frames and
            unrecognized codes
        """
        if self.is_error and len(self.data) >= 1:
            try:
                return ExceptionCode(self.data[0])
            except ValueError:
                return None
        return None

    def to_bytes(self) -> bytes:
        """Convert frame to its wire representation."""
        return self.header.to_bytes() + bytes([self.function_code]) + bytes(self.data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "ModbusFrame":
        """Parse ModbusFrame from raw bytes.

        Only the bytes announced by the MBAP length field are consumed.

        Raises:
            ValueError: If data is shorter than the header announces
        """
        header = MbapHeader.from_bytes(data)
        if header.length < 2:
            raise ValueError(f"MBAP length {header.length} leaves no function code")
        if len(data) < header.frame_size:
            raise ValueError(
                f"Frame declares {header.frame_size} bytes, got {len(data)}"
            )

        function_code = data[MbapHeader.SIZE]
        try:
            function_code = FunctionCode(function_code)
        except ValueError:
            pass  # error responses and unsupported functions stay plain ints

        return cls(
            transaction_id=header.transaction_id,
            unit_id=header.unit_id,
            function_code=function_code,
            data=bytes(data[MbapHeader.SIZE + 1 : header.frame_size]),
        )

    def __str__(self) -> str:
        """String representation for logging."""
        error_str = " (ERROR)" if self.is_error else ""
        return (
            f"ModbusFrame(tid={self.transaction_id}, unit={self.unit_id}, "
            f"func={self.function_code:#04x}{error_str}, "
            f"data={len(self.data)} bytes)"
        )
