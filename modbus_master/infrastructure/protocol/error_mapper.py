"""Mapping from raw exception codes to structured protocol errors."""

from typing import Optional

from ...domain.exceptions import ModbusProtocolError, ProtocolErrorKind
from ...domain.value_objects import ExceptionCode

_KIND_BY_CODE = {
    ExceptionCode.ILLEGAL_FUNCTION: ProtocolErrorKind.ILLEGAL_FUNCTION,
    ExceptionCode.ILLEGAL_DATA_ADDRESS: ProtocolErrorKind.ILLEGAL_DATA_ADDRESS,
    ExceptionCode.ILLEGAL_DATA_VALUE: ProtocolErrorKind.ILLEGAL_DATA_VALUE,
    ExceptionCode.SLAVE_DEVICE_FAILURE: ProtocolErrorKind.SLAVE_DEVICE_FAILURE,
    ExceptionCode.SLAVE_IS_BUSY: ProtocolErrorKind.SLAVE_IS_BUSY,
}


def map_exception_code(code: int) -> ProtocolErrorKind:
    """Map a raw exception code byte to its error kind.

    Total over all byte values: anything not in the known set maps to
    ``ProtocolErrorKind.UNKNOWN_CODE``.

    Example:
        >>> map_exception_code(2)
        <ProtocolErrorKind.ILLEGAL_DATA_ADDRESS: 'illegal_data_address'>
        >>> map_exception_code(0x0B)
        <ProtocolErrorKind.UNKNOWN_CODE: 'unknown_code'>
    """
    return _KIND_BY_CODE.get(code, ProtocolErrorKind.UNKNOWN_CODE)


def to_protocol_error(
    code: int, function: Optional[int] = None
) -> ModbusProtocolError:
    """Build the error to raise for an exception response.

    Args:
        code: Exception code byte from the response
        function: Function code of the rejected request (high bit cleared)

    Returns:
        ModbusProtocolError carrying the mapped kind and the raw code
    """
    return ModbusProtocolError(map_exception_code(code), code, function)
