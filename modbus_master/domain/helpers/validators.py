"""Validation helper functions.

Standardized checks for request parameters. All validators raise
``ValidationError`` (a ``ValueError`` subclass) so a bad request is rejected
before any frame reaches the connection.
"""

from typing import Union

from ..exceptions import ValidationError
from ...const import MAX_ADDRESS, MAX_TRANSACTION_ID, MAX_UNIT_ID


def validate_range(
    value: int,
    min_value: int,
    max_value: int,
    name: str = "value",
) -> int:
    """Validate an integer is within an inclusive range.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive)
        name: Parameter name for error message

    Returns:
        Validated value

    Raises:
        ValidationError: If value is not an integer or is out of range

    Examples:
        >>> validate_range(50, 0, 100)
        50
        >>> validate_range(150, 0, 100)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValidationError: value 150 out of range [0, 100]
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"Invalid {name}: must be integer, got {type(value).__name__}"
        )

    if not min_value <= value <= max_value:
        raise ValidationError(f"{name} {value} out of range [{min_value}, {max_value}]")
    return value


def validate_address(address: int, name: str = "address") -> int:
    """Validate a data address is in range (0x0000-0xFFFF).

    Examples:
        >>> validate_address(0x1234)
        4660
    """
    return validate_range(address, 0, MAX_ADDRESS, name)


def validate_transaction_id(transaction_id: int) -> int:
    """Validate a transaction id fits the 2-byte MBAP field."""
    return validate_range(transaction_id, 0, MAX_TRANSACTION_ID, "transaction_id")


def validate_unit_id(unit_id: int) -> int:
    """Validate a unit id fits the 1-byte MBAP field."""
    return validate_range(unit_id, 0, MAX_UNIT_ID, "unit_id")


def validate_payload(
    values: Union[bytes, bytearray],
    max_size: int,
    name: str = "values",
) -> bytes:
    """Validate a write payload is non-empty bytes no longer than ``max_size``.

    Returns:
        Payload as immutable bytes

    Raises:
        ValidationError: If payload is not bytes, empty or too long
    """
    if not isinstance(values, (bytes, bytearray, memoryview)):
        raise ValidationError(
            f"Invalid {name}: must be bytes, got {type(values).__name__}"
        )

    payload = bytes(values)
    if not payload:
        raise ValidationError(f"Invalid {name}: payload is empty")

    if len(payload) > max_size:
        raise ValidationError(
            f"Invalid {name}: {len(payload)} bytes exceeds maximum of {max_size}"
        )

    return payload
