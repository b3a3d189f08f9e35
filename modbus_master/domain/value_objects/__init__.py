"""Value Objects for the Modbus/TCP master.

Value Objects are immutable domain primitives that:
- Have no identity (equality based on value, not reference)
- Are immutable (cannot be changed after creation)
- Validate their invariants at construction
"""

from .function_code import FunctionCode, WRITE_FUNCTIONS
from .exception_code import ExceptionCode
from .mbap_header import MbapHeader
from .modbus_frame import ModbusFrame

__all__ = [
    "FunctionCode",
    "WRITE_FUNCTIONS",
    "ExceptionCode",
    "MbapHeader",
    "ModbusFrame",
]
