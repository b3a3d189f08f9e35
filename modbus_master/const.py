"""Constants for the Modbus/TCP master.

Protocol limits follow the Modbus Application Protocol specification.
Timeouts are expressed in milliseconds throughout the public API.
"""

from __future__ import annotations

# Network defaults
DEFAULT_PORT = 502
DEFAULT_TIMEOUT_MS = 500
DEFAULT_CONNECT_TIMEOUT_MS = 5000
MAX_TIMEOUT_MS = 0xFFFF

# Configuration keys
CONF_HOST = "host"
CONF_PORT = "port"
CONF_TIMEOUT_MS = "timeout_ms"
CONF_CONNECT_TIMEOUT_MS = "connect_timeout_ms"

# MBAP header layout
MBAP_HEADER_SIZE = 7
MBAP_LENGTH_OFFSET = 4
MBAP_PREFIX_SIZE = 6  # transaction id + protocol id + length field
PROTOCOL_ID = 0x0000
MAX_ADU_SIZE = 260

# Response offsets
FUNCTION_CODE_OFFSET = 7
EXCEPTION_CODE_OFFSET = 8
BYTE_COUNT_OFFSET = 8
READ_DATA_OFFSET = 9
WRITE_ECHO_OFFSET = 10
WRITE_ECHO_SIZE = 2

# Function code high bit marks an exception response
EXCEPTION_FLAG = 0x80

# Request limits
MAX_READ_BITS = 2000
MAX_READ_REGISTERS = 125
MAX_WRITE_BITS = 2000
MAX_WRITE_BYTES = 250
MAX_ADDRESS = 0xFFFF
MAX_TRANSACTION_ID = 0xFFFF
MAX_UNIT_ID = 0xFF

# Single coil values
COIL_ON = 0xFF00
COIL_OFF = 0x0000

# Encapsulated interface transport (function 43)
MEI_READ_DEVICE_ID = 0x0E
READ_DEVICE_ID_BASIC = 0x01
