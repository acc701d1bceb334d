"""Generic parameterized CRC-16 computation.

This module implements a bit-serial (table-free) CRC-16 engine and the named
parameter sets built on it. It provides:

Functions:
    - crc16: CRC over a byte range with explicit parameters
    - mcrf4xx: CRC-16/MCRF4XX, the Bluetooth E2E-CRC used by CGMS and friends

Classes:
    - CRC16Preset: Named CRC-16 parameter sets from the CRC catalogue

Every preset is defined by (poly, init, refin, refout, xorout). Check values
are the CRC of the ASCII string "123456789":

    Preset        poly    init    refin  refout  xorout  check
    CCITT_KERMIT  0x1021  0x0000  yes    yes     0x0000  0x2189
    CCITT_FALSE   0x1021  0xFFFF  no     no      0x0000  0x29B1
    MCRF4XX       0x1021  0xFFFF  yes    yes     0x0000  0x6F91
    AUG_CCITT     0x1021  0x1D0F  no     no      0x0000  0xE5CC
    ARC           0x8005  0x0000  yes    yes     0x0000  0xBB3D
    MAXIM         0x8005  0x0000  yes    yes     0xFFFF  0x44C2

Reference: https://reveng.sourceforge.net/crc-catalogue/16.htm;
    Bluetooth Continuous Glucose Monitoring Service 1.0.1, section 2.9 (E2E-CRC)
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

CRC16_MASK = 0xFFFF
CRC16_TOP_BIT_SHIFT = 15


def _reflect16(value: int) -> int:
    """Reverse the bit order of a 16-bit value."""
    result = 0
    for _ in range(16):
        result = (result << 1) | (value & 1)
        value >>= 1
    return result


def crc16(
    poly: int,
    init: int,
    data: bytes | bytearray | memoryview,
    offset: int,
    length: int,
    reflect_in: bool,
    reflect_out: bool,
    xor_out: int,
) -> int:
    """Calculate a CRC-16 over data[offset:offset + length].

    The range is clipped to the end of data, so a length running past the
    buffer only covers the bytes that exist.

    Args:
        poly: Generator polynomial (normal representation, e.g. 0x1021)
        init: Initial register value
        data: Input bytes
        offset: Offset of the first byte to include
        length: Number of bytes to include
        reflect_in: Feed each byte least significant bit first
        reflect_out: Reverse the 16-bit register before the final XOR
        xor_out: Value XORed into the final CRC

    Returns:
        CRC value in range 0x0000-0xFFFF

    Raises:
        ValueError: If offset or length is negative
    """
    if offset < 0 or length < 0:
        raise ValueError(f"Offset and length must not be negative, got offset={offset}, length={length}")

    view = memoryview(data).cast("B")
    end = min(offset + length, len(view))

    crc = init & CRC16_MASK
    for index in range(offset, end):
        byte = view[index]
        for bit_index in range(8):
            shift = bit_index if reflect_in else 7 - bit_index
            input_bit = (byte >> shift) & 1
            top_bit = (crc >> CRC16_TOP_BIT_SHIFT) & 1
            crc = (crc << 1) & CRC16_MASK
            if top_bit ^ input_bit:
                crc ^= poly

    if reflect_out:
        crc = _reflect16(crc)

    return (crc ^ xor_out) & CRC16_MASK


class _CRC16Parameters(NamedTuple):
    """Parameter set of a CRC-16 algorithm."""

    poly: int
    init: int
    reflect_in: bool
    reflect_out: bool
    xor_out: int


class CRC16Preset(Enum):
    """Named CRC-16 algorithms from the CRC catalogue.

    Each member carries its parameter set; compute() runs the shared engine.
    """

    CCITT_KERMIT = _CRC16Parameters(poly=0x1021, init=0x0000, reflect_in=True, reflect_out=True, xor_out=0x0000)
    CCITT_FALSE = _CRC16Parameters(poly=0x1021, init=0xFFFF, reflect_in=False, reflect_out=False, xor_out=0x0000)
    MCRF4XX = _CRC16Parameters(poly=0x1021, init=0xFFFF, reflect_in=True, reflect_out=True, xor_out=0x0000)
    AUG_CCITT = _CRC16Parameters(poly=0x1021, init=0x1D0F, reflect_in=False, reflect_out=False, xor_out=0x0000)
    ARC = _CRC16Parameters(poly=0x8005, init=0x0000, reflect_in=True, reflect_out=True, xor_out=0x0000)
    MAXIM = _CRC16Parameters(poly=0x8005, init=0x0000, reflect_in=True, reflect_out=True, xor_out=0xFFFF)

    def compute(self, data: bytes | bytearray | memoryview, offset: int = 0, length: int | None = None) -> int:
        """Calculate this CRC over data[offset:offset + length].

        Args:
            data: Input bytes
            offset: Offset of the first byte to include (default 0)
            length: Number of bytes to include (default: up to the end of data)

        Returns:
            CRC value in range 0x0000-0xFFFF
        """
        if length is None:
            length = max(len(memoryview(data).cast("B")) - offset, 0)

        parameters = self.value
        return crc16(
            parameters.poly,
            parameters.init,
            data,
            offset,
            length,
            parameters.reflect_in,
            parameters.reflect_out,
            parameters.xor_out,
        )


def mcrf4xx(data: bytes | bytearray | memoryview, offset: int, length: int) -> int:
    """Calculate CRC-16/MCRF4XX, the E2E-CRC of Bluetooth health profiles."""
    return CRC16Preset.MCRF4XX.compute(data, offset, length)
