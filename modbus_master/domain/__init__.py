"""Domain layer for the Modbus/TCP master.

This layer contains:
- Value Objects: function codes, exception codes, MBAP header, frames
- Exceptions: the master's error taxonomy
- Interfaces: the connection contract the transaction executor runs against
- Helpers: payload packing for coils and registers

The domain layer has ZERO dependencies on external libraries (except Python stdlib).
"""
