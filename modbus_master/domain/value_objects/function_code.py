"""Modbus function codes."""

from enum import IntEnum


class FunctionCode(IntEnum):
    """Modbus function codes supported by the master."""

    READ_COILS = 0x01
    READ_DISCRETE_INPUTS = 0x02
    READ_HOLDING_REGISTERS = 0x03
    READ_INPUT_REGISTERS = 0x04
    WRITE_SINGLE_COIL = 0x05
    WRITE_SINGLE_REGISTER = 0x06
    WRITE_MULTIPLE_COILS = 0x0F
    WRITE_MULTIPLE_REGISTERS = 0x10
    READ_WRITE_MULTIPLE_REGISTERS = 0x17
    READ_DEVICE_IDENTIFIERS = 0x2B

    @property
    def is_write(self) -> bool:
        """True for functions whose response echoes address/quantity."""
        return self in WRITE_FUNCTIONS

    @property
    def error_response(self) -> int:
        """Function byte a device answers with when it rejects this function."""
        return int(self) | 0x80


WRITE_FUNCTIONS = frozenset(
    {
        FunctionCode.WRITE_SINGLE_COIL,
        FunctionCode.WRITE_SINGLE_REGISTER,
        FunctionCode.WRITE_MULTIPLE_COILS,
        FunctionCode.WRITE_MULTIPLE_REGISTERS,
    }
)
