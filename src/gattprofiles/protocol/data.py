"""Byte buffer views and IEEE-11073 numeric decoding.

This module implements the numeric codec every profile decoder is built on.
It provides:

Classes:
    - ByteData: Read-only view over a characteristic value with typed getters
    - MutableData: Writable buffer used to build control point requests

Functions:
    - unsigned_to_signed: Two's complement sign extension for any bit width

The getters never raise for short buffers. A field that does not fit entirely
inside the buffer yields None, leaving the caller to decide what a missing
field means for the record being decoded. Negative offsets are caller bugs and
raise ValueError.

IEEE-11073 float types:
    SFLOAT (16 bit): bits 0-11 mantissa, bits 12-15 exponent (both signed)
    FLOAT  (32 bit): bits 0-23 mantissa, bits 24-31 exponent (both signed)
    value = mantissa * 10^exponent, except for the reserved special values

Reference: ISO/IEEE 11073-20601:2022, section 8.1.2 and 8.1.3;
    Bluetooth Personal Health Devices Transcoding White Paper, section 2.2
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Self

from ..exceptions import GattEncodeError
from .format import FloatFormat, IntFormat, LongFormat, ValueFormat

# =============================================================================
# IEEE-11073 Constants
# =============================================================================


SFLOAT_MANTISSA_MASK = 0x0FFF  # Bits 0-11
SFLOAT_EXPONENT_SHIFT = 12  # Bits 12-15
SFLOAT_MANTISSA_BITS = 12
SFLOAT_EXPONENT_BITS = 4

FLOAT_MANTISSA_MASK = 0x00FFFFFF  # Bits 0-23
FLOAT_EXPONENT_SHIFT = 24  # Bits 24-31
FLOAT_MANTISSA_BITS = 24
FLOAT_EXPONENT_BITS = 8

# Reserved raw SFLOAT values (exponent 0)
_SFLOAT_SPECIAL_VALUES: Mapping[int, float] = {
    0x07FE: math.inf,  # +INFINITY
    0x07FF: math.nan,  # NaN (Not a Number)
    0x0800: math.nan,  # NRes (Not at this Resolution)
    0x0801: math.nan,  # Reserved for future use
    0x0802: -math.inf,  # -INFINITY
}

# Reserved FLOAT mantissas, only when the exponent byte is 0
_FLOAT_SPECIAL_VALUES: Mapping[int, float] = {
    0x7FFFFE: math.inf,  # +INFINITY
    0x7FFFFF: math.nan,  # NaN (Not a Number)
    0x800000: math.nan,  # NRes (Not at this Resolution)
    0x800001: math.nan,  # Reserved for future use
    0x800002: -math.inf,  # -INFINITY
}


# =============================================================================
# Numeric Helpers
# =============================================================================


def unsigned_to_signed(unsigned: int, size: int) -> int:
    """Convert an unsigned value to its two's complement signed value.

    Args:
        unsigned: Unsigned value holding at least ``size`` significant bits
        size: Bit width of the encoded value (e.g. 4, 8, 12, 16, 24, 32)

    Returns:
        Signed integer in range [-2^(size-1), 2^(size-1) - 1]
    """
    sign_bit = 1 << (size - 1)
    if unsigned & sign_bit == 0:
        return unsigned & (sign_bit - 1)
    return -(sign_bit - (unsigned & (sign_bit - 1)))


def _scale(mantissa: int, exponent: int) -> float:
    """Return mantissa * 10^exponent with a single rounding step."""
    if exponent >= 0:
        return float(mantissa * 10**exponent)
    return mantissa / 10**-exponent


def _decode_sfloat(raw: int) -> float:
    """Decode a 16-bit IEEE-11073 SFLOAT from its little-endian raw value."""
    special = _SFLOAT_SPECIAL_VALUES.get(raw)
    if special is not None:
        return special

    mantissa = unsigned_to_signed(raw & SFLOAT_MANTISSA_MASK, SFLOAT_MANTISSA_BITS)
    exponent = unsigned_to_signed(raw >> SFLOAT_EXPONENT_SHIFT, SFLOAT_EXPONENT_BITS)

    return _scale(mantissa, exponent)


def _decode_float(raw: int) -> float:
    """Decode a 32-bit IEEE-11073 FLOAT from its little-endian raw value."""
    raw_exponent = raw >> FLOAT_EXPONENT_SHIFT
    raw_mantissa = raw & FLOAT_MANTISSA_MASK

    if raw_exponent == 0:
        special = _FLOAT_SPECIAL_VALUES.get(raw_mantissa)
        if special is not None:
            return special

    mantissa = unsigned_to_signed(raw_mantissa, FLOAT_MANTISSA_BITS)
    exponent = unsigned_to_signed(raw_exponent, FLOAT_EXPONENT_BITS)

    return _scale(mantissa, exponent)


# =============================================================================
# Byte Buffer Views
# =============================================================================


class ByteData:
    """Read-only view over a single characteristic value.

    Wraps the bytes delivered by the transport and exposes offset-bounded
    typed getters. The backing bytes are copied on construction and never
    modified afterwards, so a ByteData can be shared freely between threads.

    Attributes:
        value: The wrapped bytes
    """

    __slots__ = ("_value",)

    _value: bytes

    def __init__(self, value: bytes | bytearray | memoryview = b"") -> None:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"ByteData requires a bytes-like value, got {type(value).__name__}")

        self._value = bytes(value)

    @classmethod
    def wrap(cls, data: ByteData | bytes | bytearray | memoryview) -> ByteData:
        """Return data as a ByteData, wrapping raw bytes if needed.

        Raises:
            TypeError: If data is neither a ByteData nor bytes-like
        """
        if isinstance(data, ByteData):
            return data
        return cls(data)

    @classmethod
    def from_hex(cls, hex_string: str) -> Self:
        """Create a view from a hex string (whitespace and ':' separators allowed)."""
        cleaned = "".join(hex_string.replace(":", " ").split())
        return cls(bytes.fromhex(cleaned))

    @property
    def value(self) -> bytes:
        return self._value

    @property
    def size(self) -> int:
        return len(self._value)

    def __len__(self) -> int:
        return len(self._value)

    def __bytes__(self) -> bytes:
        return self._value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ByteData):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"ByteData({self._value.hex(' ', 1) or '<empty>'})"

    def copy_of_range(self, from_index: int, to_index: int) -> ByteData:
        """Return a new view over bytes [from_index, to_index)."""
        return ByteData(self._value[from_index:to_index])

    def _check_offset(self, offset: int) -> None:
        if offset < 0:
            raise ValueError(f"Offset must not be negative, got {offset}")

    def _read_unsigned(self, value_format: ValueFormat, offset: int) -> int | None:
        """Read the raw unsigned field, or None if it does not fit."""
        self._check_offset(offset)

        length = value_format.length
        if offset + length > len(self._value):
            return None

        return int.from_bytes(self._value[offset : offset + length], byteorder=value_format.byte_order)

    def get_byte(self, offset: int) -> int | None:
        """Return the unsigned byte at offset, or None if out of range."""
        self._check_offset(offset)

        if offset >= len(self._value):
            return None
        return self._value[offset]

    def get_int(self, value_format: IntFormat, offset: int) -> int | None:
        """Return an integer field.

        Args:
            value_format: Width, signedness and byte order of the field
            offset: Offset of the first byte of the field

        Returns:
            The decoded integer, or None if the field exceeds the buffer

        Raises:
            ValueError: If offset is negative
        """
        raw = self._read_unsigned(value_format.value_format, offset)
        if raw is None:
            return None

        if value_format.signed:
            return unsigned_to_signed(raw, value_format.bit_width)
        return raw

    def get_long(self, value_format: LongFormat, offset: int) -> int | None:
        """Return a 32-bit integer field (see get_int)."""
        raw = self._read_unsigned(value_format.value_format, offset)
        if raw is None:
            return None

        if value_format.signed:
            return unsigned_to_signed(raw, value_format.bit_width)
        return raw

    def get_float(self, value_format: FloatFormat, offset: int) -> float | None:
        """Return an IEEE-11073 SFLOAT or FLOAT field.

        Reserved bit patterns decode to math.inf, -math.inf or math.nan.

        Args:
            value_format: FloatFormat.SFLOAT or FloatFormat.FLOAT
            offset: Offset of the first byte of the field

        Returns:
            The decoded value, or None if the field exceeds the buffer

        Raises:
            ValueError: If offset is negative
        """
        raw = self._read_unsigned(value_format.value_format, offset)
        if raw is None:
            return None

        if value_format is FloatFormat.SFLOAT:
            return _decode_sfloat(raw)
        return _decode_float(raw)


class MutableData:
    """Fixed-size writable buffer for building characteristic values.

    Used to encode control point requests. Every setter validates that the
    value fits the requested format.
    """

    __slots__ = ("_buffer",)

    _buffer: bytearray

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"Size must not be negative, got {size}")

        self._buffer = bytearray(size)

    def __len__(self) -> int:
        return len(self._buffer)

    def _check_range(self, offset: int, length: int) -> None:
        if offset < 0:
            raise ValueError(f"Offset must not be negative, got {offset}")

        if offset + length > len(self._buffer):
            raise GattEncodeError(
                f"Field of {length} bytes at offset {offset} exceeds buffer of {len(self._buffer)} bytes"
            )

    def set_byte(self, value: int, offset: int) -> None:
        """Write one byte (0-255)."""
        self.set_value(value, IntFormat.UINT8, offset)

    def set_value(self, value: int, value_format: IntFormat, offset: int) -> None:
        """Write an integer field.

        Args:
            value: Integer to encode
            value_format: Width, signedness and byte order of the field
            offset: Offset of the first byte of the field

        Raises:
            GattEncodeError: If the value does not fit the format or the buffer
        """
        length = value_format.length
        self._check_range(offset, length)

        try:
            encoded = value.to_bytes(length, byteorder=value_format.byte_order, signed=value_format.signed)
        except OverflowError as e:
            raise GattEncodeError(f"Value {value} does not fit {value_format.name}") from e

        self._buffer[offset : offset + length] = encoded

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)

    def to_byte_data(self) -> ByteData:
        return ByteData(self._buffer)
