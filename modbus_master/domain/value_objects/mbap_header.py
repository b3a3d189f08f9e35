"""MbapHeader value object.

Represents the 7-byte Modbus Application Protocol header that prefixes every
Modbus/TCP frame.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from ...const import (
    MAX_TRANSACTION_ID,
    MAX_UNIT_ID,
    MBAP_HEADER_SIZE,
    PROTOCOL_ID,
)

_HEADER = struct.Struct(">HHHB")


@dataclass(frozen=True)
class MbapHeader:
    """Immutable MBAP header.

    Layout (all fields big-endian):
        [Transaction ID: 2][Protocol ID: 2][Length: 2][Unit ID: 1]

    ``length`` counts every byte following the length field, unit id
    included.

    Example:
        >>> header = MbapHeader(transaction_id=1, length=6, unit_id=1)
        >>> header.to_bytes().hex()
        '00010000000601'
    """

    transaction_id: int
    length: int
    unit_id: int
    protocol_id: int = PROTOCOL_ID

    SIZE = MBAP_HEADER_SIZE

    def __post_init__(self) -> None:
        """Validate header fields.

        Raises:
            ValueError: If any field is out of range
        """
        if not 0 <= self.transaction_id <= MAX_TRANSACTION_ID:
            raise ValueError(
                f"Transaction ID must be 0-65535, got {self.transaction_id}"
            )
        if not 0 <= self.protocol_id <= 0xFFFF:
            raise ValueError(f"Protocol ID must be 0-65535, got {self.protocol_id}")
        if not 0 <= self.length <= 0xFFFF:
            raise ValueError(f"Length must be 0-65535, got {self.length}")
        if not 0 <= self.unit_id <= MAX_UNIT_ID:
            raise ValueError(f"Unit ID must be 0-255, got {self.unit_id}")

    @property
    def frame_size(self) -> int:
        """Total frame size announced by this header."""
        return self.SIZE - 1 + self.length

    def to_bytes(self) -> bytes:
        """Encode header to its 7-byte wire form."""
        return _HEADER.pack(
            self.transaction_id, self.protocol_id, self.length, self.unit_id
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "MbapHeader":
        """Parse the header at the start of ``data``.

        Raises:
            ValueError: If fewer than 7 bytes are available
        """
        if len(data) < cls.SIZE:
            raise ValueError(
                f"MBAP header needs {cls.SIZE} bytes, got {len(data)}"
            )
        transaction_id, protocol_id, length, unit_id = _HEADER.unpack_from(data)
        return cls(
            transaction_id=transaction_id,
            length=length,
            unit_id=unit_id,
            protocol_id=protocol_id,
        )
