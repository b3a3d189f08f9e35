"""Tests for the Modbus/TCP frame encoder."""

import pytest

from modbus_master.domain.exceptions import ValidationError
from modbus_master.domain.value_objects import FunctionCode, ModbusFrame
from modbus_master.infrastructure.protocol import FrameEncoder


@pytest.fixture
def encoder():
    """Create encoder."""
    return FrameEncoder()


class TestReadRequests:
    """Test read function encoding."""

    def test_read_holding_registers(self, encoder):
        """Test ReadHoldingRegisters(id=1, unit=1, start=0, count=2)."""
        frame = encoder.build_read_request(1, 1, FunctionCode.READ_HOLDING_REGISTERS, 0, 2)
        assert frame.to_bytes() == bytes.fromhex("00 01 00 00 00 06 01 03 00 00 00 02")

    @pytest.mark.parametrize(
        "function",
        [
            FunctionCode.READ_COILS,
            FunctionCode.READ_DISCRETE_INPUTS,
            FunctionCode.READ_HOLDING_REGISTERS,
            FunctionCode.READ_INPUT_REGISTERS,
        ],
    )
    def test_read_layout(self, encoder, function):
        """Test start address and quantity are big-endian at offsets 8-11."""
        wire = encoder.build_read_request(0x0102, 0x11, function, 0x1234, 0x0007).to_bytes()
        assert len(wire) == 12
        assert wire[0:2] == b"\x01\x02"
        assert wire[6] == 0x11
        assert wire[7] == function
        assert wire[8:12] == bytes.fromhex("12 34 00 07")

    def test_transaction_id_is_big_endian(self, encoder):
        """Test the transaction id high byte comes first."""
        wire = encoder.build_read_request(0xABCD, 1, FunctionCode.READ_COILS, 0, 1).to_bytes()
        assert wire[0:2] == b"\xab\xcd"

    @pytest.mark.parametrize(
        "function,limit",
        [
            (FunctionCode.READ_COILS, 2000),
            (FunctionCode.READ_DISCRETE_INPUTS, 2000),
            (FunctionCode.READ_HOLDING_REGISTERS, 125),
            (FunctionCode.READ_INPUT_REGISTERS, 125),
        ],
    )
    def test_quantity_limits(self, encoder, function, limit):
        """Test quantity up to the limit is accepted and above it rejected."""
        encoder.build_read_request(1, 1, function, 0, limit)
        with pytest.raises(ValidationError):
            encoder.build_read_request(1, 1, function, 0, limit + 1)

    def test_zero_quantity(self, encoder):
        """Test quantity 0 is rejected."""
        with pytest.raises(ValidationError):
            encoder.build_read_request(1, 1, FunctionCode.READ_COILS, 0, 0)

    def test_plain_int_function(self, encoder):
        """Test a raw function number is accepted."""
        frame = encoder.build_read_request(1, 1, 4, 0, 1)
        assert frame.function_code is FunctionCode.READ_INPUT_REGISTERS

    def test_non_read_function_rejected(self, encoder):
        """Test write functions cannot be built as reads."""
        with pytest.raises(ValidationError, match="not a read function"):
            encoder.build_read_request(1, 1, FunctionCode.WRITE_SINGLE_COIL, 0, 1)

    @pytest.mark.parametrize(
        "tid,unit,start",
        [(0x10000, 1, 0), (-1, 1, 0), (1, 256, 0), (1, 1, 0x10000)],
    )
    def test_header_fields_validated(self, encoder, tid, unit, start):
        """Test transaction id, unit id and address ranges."""
        with pytest.raises(ValidationError):
            encoder.build_read_request(tid, unit, FunctionCode.READ_COILS, start, 1)

    def test_parse_recovers_header(self, encoder):
        """Test parsing an encoded frame gives back tid, unit and function."""
        frame = encoder.build_read_request(777, 9, FunctionCode.READ_DISCRETE_INPUTS, 3, 4)
        parsed = ModbusFrame.from_bytes(frame.to_bytes())
        assert (parsed.transaction_id, parsed.unit_id, parsed.function_code) == (
            777,
            9,
            FunctionCode.READ_DISCRETE_INPUTS,
        )


class TestSingleWrites:
    """Test single coil and register writes."""

    def test_write_single_coil_on(self, encoder):
        """Test WriteSingleCoil(id=2, unit=1, address=10, on=True)."""
        wire = encoder.build_write_single_coil(2, 1, 10, True).to_bytes()
        assert wire == bytes.fromhex("00 02 00 00 00 06 01 05 00 0a ff 00")
        assert wire[7] == 0x05
        assert wire[10:12] == b"\xff\x00"

    def test_write_single_coil_off(self, encoder):
        """Test coil off encodes 00 00."""
        wire = encoder.build_write_single_coil(2, 1, 10, False).to_bytes()
        assert wire[10:12] == b"\x00\x00"

    def test_write_single_register(self, encoder):
        """Test register value bytes are copied as given."""
        wire = encoder.build_write_single_register(3, 1, 0x0100, b"\x12\x34").to_bytes()
        assert wire == bytes.fromhex("00 03 00 00 00 06 01 06 01 00 12 34")

    @pytest.mark.parametrize("values", [b"\x01", b"\x01\x02\x03", b""])
    def test_write_single_register_needs_two_bytes(self, encoder, values):
        """Test anything but two bytes is rejected."""
        with pytest.raises(ValidationError):
            encoder.build_write_single_register(3, 1, 0, values)


class TestMultipleWrites:
    """Test multiple coil and register writes."""

    def test_write_multiple_coils(self, encoder):
        """Test quantity, byte count and payload layout."""
        wire = encoder.build_write_multiple_coils(4, 1, 0x0013, 10, b"\xcd\x01").to_bytes()
        assert wire == bytes.fromhex("00 04 00 00 00 09 01 0f 00 13 00 0a 02 cd 01")

    def test_write_multiple_coils_payload_must_hold_bits(self, encoder):
        """Test 9 coils do not fit in one byte."""
        with pytest.raises(ValidationError, match="cannot hold"):
            encoder.build_write_multiple_coils(4, 1, 0, 9, b"\xff")

    def test_write_multiple_coils_limits(self, encoder):
        """Test 2000 coils maximum and 250 bytes maximum."""
        encoder.build_write_multiple_coils(4, 1, 0, 2000, b"\x00" * 250)
        with pytest.raises(ValidationError):
            encoder.build_write_multiple_coils(4, 1, 0, 2001, b"\x00" * 251)
        with pytest.raises(ValidationError):
            encoder.build_write_multiple_coils(4, 1, 0, 8, b"\x00" * 251)

    def test_write_multiple_registers(self, encoder):
        """Test register count and byte count fields."""
        wire = encoder.build_write_multiple_registers(5, 1, 1, b"\x00\x0a\x01\x02").to_bytes()
        assert wire == bytes.fromhex("00 05 00 00 00 0b 01 10 00 01 00 02 04 00 0a 01 02")

    def test_write_multiple_registers_odd_length_padded(self, encoder):
        """Test odd payload rounds the counts up and pads with 0x00."""
        wire = encoder.build_write_multiple_registers(5, 1, 1, b"\x00\x0a\x01").to_bytes()
        assert wire[10:13] == bytes.fromhex("00 02 04")
        assert wire[13:] == bytes.fromhex("00 0a 01 00")
        assert int.from_bytes(wire[4:6], "big") == len(wire) - 6

    def test_write_multiple_registers_limit(self, encoder):
        """Test 250 bytes accepted, 251 rejected before any frame exists."""
        frame = encoder.build_write_multiple_registers(5, 1, 0, b"\x00" * 250)
        assert frame.to_bytes()[10:13] == bytes.fromhex("00 7d fa")
        with pytest.raises(ValidationError):
            encoder.build_write_multiple_registers(5, 1, 0, b"\x00" * 251)

    def test_read_write_multiple_registers(self, encoder):
        """Test combined read and write fields."""
        wire = encoder.build_read_write_multiple_registers(
            6, 1, 0x0003, 6, 0x000E, b"\x00\xff\x00\xff\x00\xff"
        ).to_bytes()
        assert len(wire) == 17 + 6
        assert int.from_bytes(wire[4:6], "big") == 11 + 6
        assert wire[7] == 0x17
        assert wire[8:17] == bytes.fromhex("00 03 00 06 00 0e 00 03 06")

    def test_read_write_multiple_registers_read_limit(self, encoder):
        """Test read quantity is limited to 125 registers."""
        with pytest.raises(ValidationError, match="read_quantity"):
            encoder.build_read_write_multiple_registers(6, 1, 0, 126, 0, b"\x00\x01")


class TestDeviceIdentifiers:
    """Test read device identification encoding."""

    def test_read_device_identifiers(self, encoder):
        """Test fixed 12-byte frame with MEI 0x0E and code 0x01."""
        wire = encoder.build_read_device_identifiers(7, 1, 0x00).to_bytes()
        assert len(wire) == 12
        assert wire[7:11] == bytes.fromhex("2b 0e 01 00")
        assert int.from_bytes(wire[4:6], "big") == len(wire) - 6

    def test_object_id_range(self, encoder):
        """Test object id must fit a byte."""
        with pytest.raises(ValidationError):
            encoder.build_read_device_identifiers(7, 1, 0x100)
