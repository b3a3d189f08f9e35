"""Tests for ModbusFrame and MbapHeader value objects."""

import pytest

from modbus_master.domain.value_objects import (
    ExceptionCode,
    FunctionCode,
    MbapHeader,
    ModbusFrame,
)


class TestMbapHeader:
    """Test MbapHeader value object."""

    def test_to_bytes_is_big_endian(self):
        """Test all header fields are written high byte first."""
        header = MbapHeader(transaction_id=0x1234, length=6, unit_id=0x11)
        assert header.to_bytes() == bytes.fromhex("12 34 00 00 00 06 11")

    def test_from_bytes(self):
        """Test parsing the 7 header bytes."""
        header = MbapHeader.from_bytes(bytes.fromhex("00 07 00 00 00 05 02 03"))
        assert header.transaction_id == 7
        assert header.protocol_id == 0
        assert header.length == 5
        assert header.unit_id == 2
        assert header.frame_size == 11

    def test_from_bytes_too_short(self):
        """Test fewer than 7 bytes are rejected."""
        with pytest.raises(ValueError, match="7 bytes"):
            MbapHeader.from_bytes(b"\x00\x01\x00")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"transaction_id": -1, "length": 6, "unit_id": 1},
            {"transaction_id": 0x10000, "length": 6, "unit_id": 1},
            {"transaction_id": 1, "length": 6, "unit_id": 256},
            {"transaction_id": 1, "length": -1, "unit_id": 1},
        ],
    )
    def test_invalid_fields(self, kwargs):
        """Test out-of-range header fields are rejected."""
        with pytest.raises(ValueError):
            MbapHeader(**kwargs)

    def test_immutable(self):
        """Test header is frozen."""
        header = MbapHeader(transaction_id=1, length=6, unit_id=1)
        with pytest.raises(AttributeError):
            header.length = 7


class TestModbusFrame:
    """Test ModbusFrame value object."""

    def test_read_holding_registers_wire_form(self):
        """Test the canonical 12-byte read request."""
        frame = ModbusFrame(
            transaction_id=1,
            unit_id=1,
            function_code=FunctionCode.READ_HOLDING_REGISTERS,
            data=bytes([0x00, 0x00, 0x00, 0x02]),
        )
        assert frame.to_bytes() == bytes.fromhex("00 01 00 00 00 06 01 03 00 00 00 02")

    def test_length_counts_bytes_after_length_field(self):
        """Test MBAP length equals the number of bytes that follow it."""
        frame = ModbusFrame(1, 1, FunctionCode.WRITE_MULTIPLE_REGISTERS, b"\x00" * 9)
        wire = frame.to_bytes()
        assert int.from_bytes(wire[4:6], "big") == len(wire) - 6

    def test_from_bytes_recovers_header_fields(self):
        """Test parsing a built frame gives back tid, unit and function."""
        frame = ModbusFrame(0xBEEF, 0x22, FunctionCode.READ_INPUT_REGISTERS, b"\x00\x10\x00\x01")
        parsed = ModbusFrame.from_bytes(frame.to_bytes())
        assert parsed == frame
        assert parsed.function_code is FunctionCode.READ_INPUT_REGISTERS

    def test_from_bytes_ignores_trailing_bytes(self):
        """Test only the bytes announced by the length field are consumed."""
        wire = bytes.fromhex("00 02 00 00 00 06 01 05 00 0a ff 00") + b"\xAA\xBB"
        parsed = ModbusFrame.from_bytes(wire)
        assert parsed.data == bytes.fromhex("00 0a ff 00")

    def test_from_bytes_truncated(self):
        """Test a frame shorter than declared is rejected."""
        with pytest.raises(ValueError, match="declares"):
            ModbusFrame.from_bytes(bytes.fromhex("00 01 00 00 00 07 01 03 04 00"))

    def test_error_frame(self):
        """Test exception response detection."""
        frame = ModbusFrame.from_bytes(bytes.fromhex("00 01 00 00 00 03 01 83 02"))
        assert frame.is_error
        assert frame.function_code == 0x83
        assert frame.exception_code is ExceptionCode.ILLEGAL_DATA_ADDRESS

    def test_error_frame_with_unknown_code(self):
        """Test unknown exception codes give None."""
        frame = ModbusFrame(1, 1, 0x83, b"\x0b")
        assert frame.is_error
        assert frame.exception_code is None

    def test_normal_frame_has_no_exception_code(self):
        """Test non-error frames report no exception code."""
        frame = ModbusFrame(1, 1, FunctionCode.READ_COILS, b"\x01\x01")
        assert not frame.is_error
        assert frame.exception_code is None

    @pytest.mark.parametrize(
        "kwargs,error",
        [
            ({"transaction_id": 0x10000, "unit_id": 1, "function_code": 3}, ValueError),
            ({"transaction_id": 1, "unit_id": -1, "function_code": 3}, ValueError),
            ({"transaction_id": 1, "unit_id": 1, "function_code": 0}, ValueError),
            ({"transaction_id": 1, "unit_id": 1, "function_code": 0x100}, ValueError),
            (
                {"transaction_id": 1, "unit_id": 1, "function_code": 3, "data": "abc"},
                TypeError,
            ),
        ],
    )
    def test_invalid_components(self, kwargs, error):
        """Test invalid frame components are rejected."""
        with pytest.raises(error):
            ModbusFrame(**kwargs)

    def test_str(self):
        """Test log representation."""
        frame = ModbusFrame(5, 2, 0x83, b"\x02")
        text = str(frame)
        assert "tid=5" in text
        assert "0x83" in text
        assert "ERROR" in text
