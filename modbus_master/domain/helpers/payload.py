"""Payload packing helpers.

The master exchanges raw payload bytes. These helpers convert between those
bytes and Python values for callers that want coil states or 16-bit register
words. They do no scaling or unit conversion.

Coil/discrete input bytes are LSB-first: bit 0 of the first byte is the
first addressed coil. Register words are big-endian.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..exceptions import MalformedResponseError, ValidationError
from ...const import MEI_READ_DEVICE_ID


def pack_bits(values: Iterable[bool]) -> bytes:
    """Pack coil states into Modbus bit order.

    Examples:
        >>> pack_bits([True, False, True, True]).hex()
        '0d'
        >>> pack_bits([True] * 9).hex()
        'ff01'
    """
    packed = bytearray()
    for index, value in enumerate(values):
        if index % 8 == 0:
            packed.append(0)
        if value:
            packed[-1] |= 1 << (index % 8)
    return bytes(packed)


def unpack_bits(data: bytes, count: Optional[int] = None) -> List[bool]:
    """Unpack coil/discrete input bytes into booleans.

    Args:
        data: Payload returned by a coil or discrete input read
        count: Number of bits requested; trailing padding bits are dropped

    Raises:
        ValidationError: If ``count`` needs more bits than ``data`` holds

    Examples:
        >>> unpack_bits(b"\\x0d", 4)
        [True, False, True, True]
    """
    available = len(data) * 8
    if count is None:
        count = available
    elif count > available:
        raise ValidationError(
            f"Cannot unpack {count} bits from {len(data)} bytes"
        )
    return [bool(data[i // 8] >> (i % 8) & 1) for i in range(count)]


def pack_registers(values: Sequence[int]) -> bytes:
    """Pack 16-bit register values as big-endian words.

    Raises:
        ValidationError: If any value is outside 0-65535

    Examples:
        >>> pack_registers([1, 0x1234]).hex()
        '00011234'
    """
    for value in values:
        if not 0 <= value <= 0xFFFF:
            raise ValidationError(f"Register value {value} out of range [0, 65535]")
    return struct.pack(f">{len(values)}H", *values)


def unpack_registers(data: bytes) -> List[int]:
    """Unpack a register read payload into 16-bit values.

    Raises:
        ValidationError: If ``data`` has an odd length

    Examples:
        >>> unpack_registers(bytes([0x01, 0xE6, 0x00, 0xFA]))
        [486, 250]
    """
    if len(data) % 2:
        raise ValidationError(
            f"Register payload must have even length, got {len(data)} bytes"
        )
    return list(struct.unpack(f">{len(data) // 2}H", data))


@dataclass(frozen=True)
class DeviceIdentification:
    """Decoded read-device-identification response.

    Attributes:
        read_device_id_code: Access type echoed by the unit
        conformity_level: Identification conformity level of the unit
        more_follows: True if another request is needed for remaining objects
        next_object_id: Object id to request next when ``more_follows``
        objects: Object id → raw object value
    """

    read_device_id_code: int
    conformity_level: int
    more_follows: bool
    next_object_id: int
    objects: Dict[int, bytes] = field(default_factory=dict)


def unpack_device_identification(payload: bytes) -> DeviceIdentification:
    """Decode the payload returned by a read-device-identifiers request.

    Payload layout:
        [MEI type][ReadDevId code][Conformity][More follows][Next object id]
        [Number of objects]([Object id][Object length][Object value...])*

    Raises:
        MalformedResponseError: If the payload is truncated or not a
            read-device-identification response
    """
    if len(payload) < 6:
        raise MalformedResponseError(
            f"Device identification payload too short: {len(payload)} bytes"
        )
    if payload[0] != MEI_READ_DEVICE_ID:
        raise MalformedResponseError(
            f"Unexpected MEI type 0x{payload[0]:02X} in device identification"
        )

    objects: Dict[int, bytes] = {}
    position = 6
    for _ in range(payload[5]):
        if position + 2 > len(payload):
            raise MalformedResponseError("Device identification object header truncated")
        object_id, length = payload[position], payload[position + 1]
        position += 2
        if position + length > len(payload):
            raise MalformedResponseError(
                f"Device identification object 0x{object_id:02X} truncated"
            )
        objects[object_id] = bytes(payload[position : position + length])
        position += length

    return DeviceIdentification(
        read_device_id_code=payload[1],
        conformity_level=payload[2],
        more_follows=payload[3] == 0xFF,
        next_object_id=payload[4],
        objects=objects,
    )
