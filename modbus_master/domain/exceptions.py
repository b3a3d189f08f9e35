"""Exceptions raised by the Modbus/TCP master.

Every error derives from ``ModbusError``. Where a builtin exception already
describes the condition (``ValueError``, ``ConnectionError``,
``TimeoutError``) the Modbus error also derives from it, so callers can catch
either.

Device-reported errors are a single ``ModbusProtocolError`` tagged with a
``ProtocolErrorKind`` rather than one subclass per exception code.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .value_objects.exception_code import ExceptionCode
from .value_objects.function_code import FunctionCode


class ModbusError(Exception):
    """Base class for all Modbus master errors."""


class ValidationError(ModbusError, ValueError):
    """Request parameters are outside the protocol's range.

    Always raised before anything is written to the connection.
    """


class NotConnectedError(ModbusError, ConnectionError):
    """A transaction was attempted without a live connection."""


class ModbusTimeoutError(ModbusError, TimeoutError):
    """Send or receive exceeded the configured timeout.

    Also raised when the peer answers with zero bytes (closed connection),
    which is never reported as an empty success.
    """


class MalformedResponseError(ModbusError):
    """Response is truncated or declares more bytes than were received."""


class TransactionInProgressError(ModbusError):
    """Another transaction already occupies the connection."""


class ProtocolErrorKind(Enum):
    """Structured kind of a device-reported exception."""

    ILLEGAL_FUNCTION = "illegal_function"
    ILLEGAL_DATA_ADDRESS = "illegal_data_address"
    ILLEGAL_DATA_VALUE = "illegal_data_value"
    SLAVE_DEVICE_FAILURE = "slave_device_failure"
    SLAVE_IS_BUSY = "slave_is_busy"
    UNKNOWN_CODE = "unknown_code"


class ModbusProtocolError(ModbusError):
    """Unit answered with an exception response.

    Attributes:
        kind: Structured error kind
        raw_code: Exception code byte exactly as received
        function: Function code of the rejected request (high bit cleared)

    Example:
        >>> err = ModbusProtocolError(ProtocolErrorKind.ILLEGAL_DATA_ADDRESS, 2, 3)
        >>> err.exception_code
        <ExceptionCode.ILLEGAL_DATA_ADDRESS: 2>
    """

    def __init__(
        self,
        kind: ProtocolErrorKind,
        raw_code: int,
        function: Optional[int] = None,
    ) -> None:
        self.kind = kind
        self.raw_code = raw_code
        self.function = function
        super().__init__(self._format_message())

    @property
    def exception_code(self) -> Optional[ExceptionCode]:
        """Known exception code, or None for an unrecognized code."""
        if self.kind is ProtocolErrorKind.UNKNOWN_CODE:
            return None
        return ExceptionCode(self.raw_code)

    def _format_message(self) -> str:
        description = self.kind.value.replace("_", " ")
        if self.function is None:
            return f"Modbus exception {self.raw_code:#04x} ({description})"
        try:
            function_name = FunctionCode(self.function).name
        except ValueError:
            function_name = f"function {self.function:#04x}"
        return (
            f"{function_name} rejected with exception "
            f"{self.raw_code:#04x} ({description})"
        )
