"""Common types shared across profile decoders.

This module contains the enumeration base used for every one-byte (or
one-nibble) code carried in a characteristic value.

Reference: Bluetooth GATT Specification Supplement
"""

from __future__ import annotations

from enum import Enum
from typing import Self


class CodedEnum(Enum):
    """Enum whose members are decoded from a numeric code in a characteristic value.

    Devices may send reserved or future codes. Decoders map those to None
    instead of failing the whole value.
    """

    @classmethod
    def from_code(cls, code: int | None) -> Self | None:
        """Return the member for code, or None for reserved or missing values."""
        if code is None:
            return None
        try:
            return cls(code)
        except ValueError:
            return None
