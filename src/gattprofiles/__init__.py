"""
pyGattProfiles: Decoders for Bluetooth SIG GATT characteristic values.

This library turns raw characteristic values (Continuous Glucose Monitoring,
Glucose, Running Speed and Cadence, Blood Pressure, Heart Rate, Health
Thermometer and others) into immutable Python records. It performs no I/O,
so it can sit behind any Bluetooth LE stack.
"""

from __future__ import annotations

from .exceptions import GattDecodeError, GattEncodeError, GattProfileError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "GattProfileError",
    "GattDecodeError",
    "GattEncodeError",
]
