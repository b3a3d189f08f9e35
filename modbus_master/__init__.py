"""Modbus/TCP master (client).

Reads and writes coils, discrete inputs and registers on a remote unit over
a single TCP connection, in blocking or asyncio style.
"""

from .config import MasterConfig, load_config
from .domain.exceptions import (
    MalformedResponseError,
    ModbusError,
    ModbusProtocolError,
    ModbusTimeoutError,
    NotConnectedError,
    ProtocolErrorKind,
    TransactionInProgressError,
    ValidationError,
)
from .domain.helpers import (
    DeviceIdentification,
    pack_bits,
    pack_registers,
    unpack_bits,
    unpack_device_identification,
    unpack_registers,
)
from .domain.value_objects import ExceptionCode, FunctionCode
from .master import ModbusMaster

__version__ = "1.0.0"

__all__ = [
    "ModbusMaster",
    "MasterConfig",
    "load_config",
    # Codes
    "FunctionCode",
    "ExceptionCode",
    # Errors
    "ModbusError",
    "ValidationError",
    "NotConnectedError",
    "ModbusTimeoutError",
    "MalformedResponseError",
    "TransactionInProgressError",
    "ModbusProtocolError",
    "ProtocolErrorKind",
    # Payload helpers
    "pack_bits",
    "unpack_bits",
    "pack_registers",
    "unpack_registers",
    "DeviceIdentification",
    "unpack_device_identification",
]
