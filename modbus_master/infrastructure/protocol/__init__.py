"""Modbus/TCP protocol implementations.

Pure encode/decode logic: nothing in this package touches a socket.
"""

from .error_mapper import map_exception_code, to_protocol_error
from .frame_encoder import FrameEncoder
from .response_decoder import ResponseDecoder

__all__ = [
    "FrameEncoder",
    "ResponseDecoder",
    "map_exception_code",
    "to_protocol_error",
]
