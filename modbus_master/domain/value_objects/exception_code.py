"""Modbus exception codes."""

from enum import IntEnum


class ExceptionCode(IntEnum):
    """Exception codes a unit returns in an exception response.

    Only the codes the master maps to a named error kind are listed here.
    Anything else is carried as a raw integer.
    """

    ILLEGAL_FUNCTION = 0x01  # Function not supported by the unit
    ILLEGAL_DATA_ADDRESS = 0x02  # Address (or address + quantity) out of range
    ILLEGAL_DATA_VALUE = 0x03  # Value in the request not acceptable
    SLAVE_DEVICE_FAILURE = 0x04  # Unrecoverable error while performing the action
    SLAVE_IS_BUSY = 0x06  # Unit busy with a long-running command, or booting

    @property
    def description(self) -> str:
        """Human readable description for log messages."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ExceptionCode.ILLEGAL_FUNCTION: "illegal function",
    ExceptionCode.ILLEGAL_DATA_ADDRESS: "illegal data address",
    ExceptionCode.ILLEGAL_DATA_VALUE: "illegal data value",
    ExceptionCode.SLAVE_DEVICE_FAILURE: "slave device failure",
    ExceptionCode.SLAVE_IS_BUSY: "slave is busy",
}
