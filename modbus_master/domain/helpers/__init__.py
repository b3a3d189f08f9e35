"""Domain helper functions."""

from .payload import (
    DeviceIdentification,
    pack_bits,
    pack_registers,
    unpack_bits,
    unpack_device_identification,
    unpack_registers,
)
from .validators import (
    validate_address,
    validate_payload,
    validate_range,
    validate_transaction_id,
    validate_unit_id,
)

__all__ = [
    # Payload packing
    "pack_bits",
    "unpack_bits",
    "pack_registers",
    "unpack_registers",
    "DeviceIdentification",
    "unpack_device_identification",
    # Validators
    "validate_range",
    "validate_address",
    "validate_transaction_id",
    "validate_unit_id",
    "validate_payload",
]
