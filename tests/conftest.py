"""Pytest configuration and fixtures for Modbus/TCP master tests."""

from __future__ import annotations

import sys
from pathlib import Path

# Add parent directory to Python path so we can import modbus_master
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from tests.doubles import FakeConnection, FakeSlave


@pytest.fixture
def fake_connection() -> FakeConnection:
    """Return a connected in-memory connection."""
    return FakeConnection()


@pytest.fixture
def fake_slave():
    """Run a loopback Modbus/TCP peer for the duration of a test."""
    with FakeSlave() as slave:
        yield slave


@pytest.fixture
def holding_registers_response() -> bytes:
    """Response to ReadHoldingRegisters(tid=1, unit=1, count=2): [1, 10]."""
    return bytes.fromhex("00 01 00 00 00 07 01 03 04 00 01 00 0a")


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line("markers", "asyncio: mark test as an asyncio test")
