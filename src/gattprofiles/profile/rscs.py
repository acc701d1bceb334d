"""Running Speed and Cadence (RSCS) measurement decoder.

RSC Measurement characteristic (0x2A53) layout:
    Offset  Size  Field                           Present if
    0       1     Flags
    1       2     Instantaneous speed (1/256 m/s)
    3       1     Instantaneous cadence (1/min)
    4       2     Instantaneous stride length (cm) flags & 0x01
    ...     4     Total distance (1/10 m)          flags & 0x02

Flag bit 2 reports walking (0) or running (1).

Reference: Bluetooth Running Speed and Cadence Service 1.0, section 3.1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..protocol.data import ByteData
from ..protocol.format import IntFormat, LongFormat

_LOGGER = logging.getLogger(__name__)

RSCS_MINIMUM_LENGTH = 4  # Flags + speed + cadence

RSCS_STRIDE_LENGTH_PRESENT = 0x01
RSCS_TOTAL_DISTANCE_PRESENT = 0x02
RSCS_STATUS_RUNNING = 0x04

RSCS_SPEED_RESOLUTION = 256.0  # Speed is transmitted in 1/256 m/s


@dataclass(frozen=True, kw_only=True)
class RSCSData:
    """Decoded RSC Measurement.

    Attributes:
        status_running: True when running, False when walking
        speed: Instantaneous speed in m/s
        cadence: Steps per minute
        stride_length: Stride length in cm, if present
        total_distance: Total distance in 1/10 m, if present
    """

    status_running: bool
    speed: float
    cadence: int
    stride_length: int | None = None
    total_distance: int | None = None


def parse_rscs_measurement(data: ByteData | bytes | bytearray | memoryview) -> RSCSData | None:
    """Decode an RSC Measurement value.

    Args:
        data: Characteristic value (at least 4 bytes)

    Returns:
        Decoded measurement, or None if the value is too short for its flags
    """
    data = ByteData.wrap(data)

    if data.size < RSCS_MINIMUM_LENGTH:
        return None

    offset = 0
    flags = data.get_int(IntFormat.UINT8, offset)
    offset += 1

    raw_speed = data.get_int(IntFormat.UINT16_LE, offset)
    offset += 2

    cadence = data.get_int(IntFormat.UINT8, offset)
    offset += 1

    if flags is None or raw_speed is None or cadence is None:
        return None

    stride_length_present = bool(flags & RSCS_STRIDE_LENGTH_PRESENT)
    total_distance_present = bool(flags & RSCS_TOTAL_DISTANCE_PRESENT)

    expected_length = RSCS_MINIMUM_LENGTH + (2 if stride_length_present else 0) + (4 if total_distance_present else 0)
    if data.size < expected_length:
        _LOGGER.debug("RSC Measurement rejected: %d bytes, flags 0x%02X need %d", data.size, flags, expected_length)
        return None

    stride_length = None
    if stride_length_present:
        stride_length = data.get_int(IntFormat.UINT16_LE, offset)
        offset += 2

    total_distance = None
    if total_distance_present:
        total_distance = data.get_long(LongFormat.UINT32_LE, offset)

    return RSCSData(
        status_running=bool(flags & RSCS_STATUS_RUNNING),
        speed=raw_speed / RSCS_SPEED_RESOLUTION,
        cadence=cadence,
        stride_length=stride_length,
        total_distance=total_distance,
    )
