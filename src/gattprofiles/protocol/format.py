"""Value format definitions for GATT characteristic fields.

This module describes how a field inside a characteristic value is laid out.
It provides:

Classes:
    - ValueFormat: Every field format known to the codec (integers and IEEE-11073 floats)
    - IntFormat: Integer formats accepted by ByteData.get_int
    - LongFormat: 32-bit formats accepted by ByteData.get_long
    - FloatFormat: IEEE-11073 medical float formats accepted by ByteData.get_float

Format code layout (one packed integer per format):
    - Bits 0-3: Field length in bytes
    - Bits 4-7: Kind (0x1 = unsigned, 0x2 = signed, 0x3 = IEEE-11073 float)
    - Bit 8:    Byte order (0 = little-endian, 1 = big-endian)

    Example: SINT24_BE = 0x123 -> big-endian, signed, 3 bytes

Reference: Bluetooth Core Specification, Vol 3, Part G, 3.3.3.5 (Format);
    ISO/IEEE 11073-20601, 8.1.2 (FLOAT-Type) and 8.1.3 (SFLOAT-Type)
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

# =============================================================================
# Format Code Constants
# =============================================================================


FORMAT_LENGTH_MASK = 0b000001111  # Bits 0-3: field length in bytes
FORMAT_KIND_MASK = 0b011110000  # Bits 4-7: unsigned / signed / float
FORMAT_BIG_ENDIAN_BIT = 0b100000000  # Bit 8: big-endian byte order

FORMAT_KIND_UNSIGNED = 0x10
FORMAT_KIND_SIGNED = 0x20
FORMAT_KIND_FLOAT = 0x30


class ValueFormat(Enum):
    """All field formats understood by the codec.

    Each member value is the packed format code described in the module
    docstring. Length, signedness and byte order are derived from the code.
    """

    # ==========================================================================
    # Unsigned integers
    # ==========================================================================
    UINT8 = 0x11
    UINT16_LE = 0x12
    UINT16_BE = 0x112
    UINT24_LE = 0x13
    UINT24_BE = 0x113
    UINT32_LE = 0x14
    UINT32_BE = 0x114

    # ==========================================================================
    # Signed integers (two's complement)
    # ==========================================================================
    SINT8 = 0x21
    SINT16_LE = 0x22
    SINT16_BE = 0x122
    SINT24_LE = 0x23
    SINT24_BE = 0x123
    SINT32_LE = 0x24
    SINT32_BE = 0x124

    # ==========================================================================
    # IEEE-11073 medical floats (always little-endian)
    # ==========================================================================
    SFLOAT = 0x32  # 16-bit: 4-bit exponent, 12-bit mantissa
    FLOAT = 0x34  # 32-bit: 8-bit exponent, 24-bit mantissa

    @property
    def length(self) -> int:
        """Field length in bytes."""
        return self.value & FORMAT_LENGTH_MASK

    @property
    def bit_width(self) -> int:
        """Field length in bits."""
        return self.length * 8

    @property
    def signed(self) -> bool:
        """True for two's complement integer formats."""
        return self.value & FORMAT_KIND_MASK == FORMAT_KIND_SIGNED

    @property
    def is_float(self) -> bool:
        """True for IEEE-11073 SFLOAT/FLOAT formats."""
        return self.value & FORMAT_KIND_MASK == FORMAT_KIND_FLOAT

    @property
    def byte_order(self) -> Literal["little", "big"]:
        """Byte order of the field."""
        return "big" if self.value & FORMAT_BIG_ENDIAN_BIT else "little"


class _FormatView:
    """Delegates format properties to the wrapped ValueFormat member."""

    value: ValueFormat

    @property
    def value_format(self) -> ValueFormat:
        return self.value

    @property
    def length(self) -> int:
        return self.value.length

    @property
    def bit_width(self) -> int:
        return self.value.bit_width

    @property
    def signed(self) -> bool:
        return self.value.signed

    @property
    def byte_order(self) -> Literal["little", "big"]:
        return self.value.byte_order


class IntFormat(_FormatView, Enum):
    """Integer formats (1 to 4 bytes, both byte orders)."""

    UINT8 = ValueFormat.UINT8
    UINT16_LE = ValueFormat.UINT16_LE
    UINT16_BE = ValueFormat.UINT16_BE
    UINT24_LE = ValueFormat.UINT24_LE
    UINT24_BE = ValueFormat.UINT24_BE
    UINT32_LE = ValueFormat.UINT32_LE
    UINT32_BE = ValueFormat.UINT32_BE
    SINT8 = ValueFormat.SINT8
    SINT16_LE = ValueFormat.SINT16_LE
    SINT16_BE = ValueFormat.SINT16_BE
    SINT24_LE = ValueFormat.SINT24_LE
    SINT24_BE = ValueFormat.SINT24_BE
    SINT32_LE = ValueFormat.SINT32_LE
    SINT32_BE = ValueFormat.SINT32_BE


class LongFormat(_FormatView, Enum):
    """32-bit integer formats."""

    UINT32_LE = ValueFormat.UINT32_LE
    UINT32_BE = ValueFormat.UINT32_BE
    SINT32_LE = ValueFormat.SINT32_LE
    SINT32_BE = ValueFormat.SINT32_BE


class FloatFormat(_FormatView, Enum):
    """IEEE-11073 medical float formats."""

    SFLOAT = ValueFormat.SFLOAT
    FLOAT = ValueFormat.FLOAT
