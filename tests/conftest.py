"""Shared test fixtures for pyGattProfiles tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from gattprofiles.protocol.crc import mcrf4xx


def append_crc(payload: bytes) -> bytes:
    """Return payload followed by its little-endian E2E-CRC (CRC-16/MCRF4XX)."""
    return payload + mcrf4xx(payload, 0, len(payload)).to_bytes(2, "little")


def corrupt_crc(value: bytes) -> bytes:
    """Flip one bit of the trailing E2E-CRC of value."""
    return value[:-1] + bytes([value[-1] ^ 0x01])


@pytest.fixture
def with_crc() -> Callable[[bytes], bytes]:
    """Append a valid E2E-CRC to a payload."""
    return append_crc


@pytest.fixture
def with_bad_crc() -> Callable[[bytes], bytes]:
    """Append an E2E-CRC that does not match the payload."""
    return lambda payload: corrupt_crc(append_crc(payload))


@pytest.fixture
def check_string() -> bytes:
    """Input of the CRC catalogue check values."""
    return b"123456789"


# Test markers for different test types
def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test (fast, pure)")
