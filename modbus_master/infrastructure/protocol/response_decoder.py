"""Modbus/TCP response decoder.

Interprets a complete response frame and returns the raw payload the caller
asked for, or raises the structured error for an exception response.
"""

import logging
from typing import Optional

from ...const import (
    BYTE_COUNT_OFFSET,
    EXCEPTION_CODE_OFFSET,
    EXCEPTION_FLAG,
    FUNCTION_CODE_OFFSET,
    READ_DATA_OFFSET,
    WRITE_ECHO_OFFSET,
    WRITE_ECHO_SIZE,
)
from ...domain.exceptions import MalformedResponseError
from ...domain.value_objects import ExceptionCode, FunctionCode, MbapHeader, WRITE_FUNCTIONS
from .error_mapper import to_protocol_error

_LOGGER = logging.getLogger(__name__)


class ResponseDecoder:
    """Decoder for Modbus/TCP responses.

    Branches on the function byte at offset 7:
        - high bit set: exception response, the exception code at offset 8
          is mapped and raised
        - write functions (5, 6, 15, 16): returns the 2-byte echo at
          offsets 10-11
        - read device identification (43): returns the MEI payload
          announced by the MBAP length, starting at offset 8
        - everything else: returns the byte count at offset 8 worth of
          bytes starting at offset 9

    Decoding never reads past a declared length. A response shorter than
    what it declares raises ``MalformedResponseError``.

    Example:
        >>> decoder = ResponseDecoder()
        >>> decoder.decode(bytes.fromhex("0001000000070103040001000a"))
        b'\\x00\\x01\\x00\\n'
    """

    def decode(self, response: bytes, request_function: Optional[int] = None) -> bytes:
        """Decode a response frame.

        Args:
            response: Complete response frame including the MBAP header
            request_function: Function code of the request, used only to
                flag mismatched responses in the log

        Returns:
            Raw payload bytes

        Raises:
            ModbusProtocolError: If the unit returned an exception response
            MalformedResponseError: If the response is truncated
        """
        if len(response) <= FUNCTION_CODE_OFFSET:
            raise MalformedResponseError(
                f"Response too short: {len(response)} bytes"
            )

        header = MbapHeader.from_bytes(response)
        if header.length < 2:
            raise MalformedResponseError(
                f"MBAP length {header.length} leaves no function code"
            )
        if len(response) < header.frame_size:
            raise MalformedResponseError(
                f"Response declares {header.frame_size} bytes, "
                f"received {len(response)}"
            )
        response = response[: header.frame_size]

        function = response[FUNCTION_CODE_OFFSET]

        if (
            request_function is not None
            and function & ~EXCEPTION_FLAG != request_function
        ):
            _LOGGER.warning(
                "Response function 0x%02X does not match request function 0x%02X",
                function,
                request_function,
            )

        if function & EXCEPTION_FLAG:
            return self._raise_exception(response, function)

        if function in WRITE_FUNCTIONS:
            return self._slice(response, WRITE_ECHO_OFFSET, WRITE_ECHO_SIZE)

        if function == FunctionCode.READ_DEVICE_IDENTIFIERS:
            return self._slice(
                response, BYTE_COUNT_OFFSET, header.frame_size - BYTE_COUNT_OFFSET
            )

        if len(response) <= BYTE_COUNT_OFFSET:
            raise MalformedResponseError("Read response is missing its byte count")

        return self._slice(response, READ_DATA_OFFSET, response[BYTE_COUNT_OFFSET])

    @staticmethod
    def _raise_exception(response: bytes, function: int) -> bytes:
        if len(response) <= EXCEPTION_CODE_OFFSET:
            raise MalformedResponseError(
                f"Exception response 0x{function:02X} is missing its exception code"
            )

        code = response[EXCEPTION_CODE_OFFSET]
        if _LOGGER.isEnabledFor(logging.DEBUG):
            try:
                description = ExceptionCode(code).description
            except ValueError:
                description = "unknown exception code"
            _LOGGER.debug(
                "Modbus exception: func=0x%02X, code=0x%02X (%s)",
                function,
                code,
                description,
            )

        raise to_protocol_error(code, function & ~EXCEPTION_FLAG)

    @staticmethod
    def _slice(response: bytes, offset: int, size: int) -> bytes:
        end = offset + size
        if end > len(response):
            raise MalformedResponseError(
                f"Response declares {size} bytes at offset {offset}, "
                f"only {max(len(response) - offset, 0)} received"
            )

        payload = bytes(response[offset:end])
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Decoded payload: %d bytes, %s", len(payload), payload.hex())
        return payload
