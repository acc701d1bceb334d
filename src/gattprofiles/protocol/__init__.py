"""Protocol layer primitives shared by all profile decoders.

This package contains the byte buffer codec, IEEE-11073 float decoding,
the CRC-16 engine and the Bluetooth Date Time field.

Reference: Bluetooth GATT Specification Supplement; ISO/IEEE 11073-20601
"""

from .common import CodedEnum
from .crc import CRC16Preset, crc16, mcrf4xx
from .data import ByteData, MutableData, unsigned_to_signed
from .date_time import DateTime, parse_date_time
from .format import FloatFormat, IntFormat, LongFormat, ValueFormat

__all__ = [
    # Common types
    "CodedEnum",
    # Value formats
    "ValueFormat",
    "IntFormat",
    "LongFormat",
    "FloatFormat",
    # Byte buffers
    "ByteData",
    "MutableData",
    "unsigned_to_signed",
    # CRC
    "CRC16Preset",
    "crc16",
    "mcrf4xx",
    # Date Time
    "DateTime",
    "parse_date_time",
]
