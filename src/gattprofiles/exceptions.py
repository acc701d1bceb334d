"""GATT profile exception classes."""

from __future__ import annotations


class GattProfileError(Exception):
    """Base exception for all GATT profile errors."""


class GattDecodeError(GattProfileError):
    """A characteristic value could not be decoded into a profile record."""


class GattEncodeError(GattProfileError):
    """A value does not fit the field it should be encoded into."""
