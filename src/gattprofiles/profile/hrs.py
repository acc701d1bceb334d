"""Heart Rate (HRS) characteristic decoders.

Heart Rate Measurement (0x2A37) layout:
    Offset  Size  Field                               Present if
    0       1     Flags
    1       1-2   Heart rate (UINT8, or UINT16)       UINT16 if flags & 0x01
    ...     2     Energy expended (kJ)                flags & 0x08
    ...     2*n   RR intervals (1/1024 s each)        flags & 0x10

Flag bits 1-2 carry the sensor contact status:
    0, 1 = contact detection not supported
    2    = supported, contact not detected
    3    = supported, contact detected

Reference: Bluetooth Heart Rate Service 1.0, section 3.1 and 3.2
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..protocol.common import CodedEnum
from ..protocol.data import ByteData
from ..protocol.format import IntFormat

_LOGGER = logging.getLogger(__name__)

HRS_MINIMUM_LENGTH = 2  # Flags + UINT8 heart rate

HRS_HEART_RATE_UINT16 = 0x01
HRS_SENSOR_CONTACT_MASK = 0b00000110  # Bits 1-2: sensor contact status
HRS_SENSOR_CONTACT_SHIFT = 1
HRS_ENERGY_EXPENDED_PRESENT = 0x08
HRS_RR_INTERVALS_PRESENT = 0x10

HRS_SENSOR_CONTACT_NOT_DETECTED = 2
HRS_SENSOR_CONTACT_DETECTED = 3

HRS_RR_INTERVAL_RESOLUTION = 1024.0  # RR intervals are transmitted in 1/1024 s


class BodySensorLocation(CodedEnum):
    OTHER = 0
    CHEST = 1
    WRIST = 2
    FINGER = 3
    HAND = 4
    EAR_LOBE = 5
    FOOT = 6


@dataclass(frozen=True, kw_only=True)
class HRSData:
    """Decoded Heart Rate Measurement.

    Attributes:
        heart_rate: Beats per minute
        sensor_contact_supported: The sensor reports skin contact
        sensor_contact: Skin contact detected (False when not supported)
        energy_expended: Accumulated energy in kJ, if present
        rr_intervals: RR intervals in 1/1024 s units, oldest first
    """

    heart_rate: int
    sensor_contact_supported: bool
    sensor_contact: bool
    energy_expended: int | None = None
    rr_intervals: tuple[int, ...] = ()

    @property
    def rr_intervals_seconds(self) -> tuple[float, ...]:
        return tuple(interval / HRS_RR_INTERVAL_RESOLUTION for interval in self.rr_intervals)


def parse_heart_rate_measurement(data: ByteData | bytes | bytearray | memoryview) -> HRSData | None:
    """Decode a Heart Rate Measurement value.

    Args:
        data: Characteristic value

    Returns:
        Decoded measurement, or None if the value is too short for its flags
    """
    data = ByteData.wrap(data)

    if data.size < HRS_MINIMUM_LENGTH:
        return None

    offset = 0
    flags = data.get_int(IntFormat.UINT8, offset)
    offset += 1
    if flags is None:
        return None

    heart_rate_format = IntFormat.UINT16_LE if flags & HRS_HEART_RATE_UINT16 else IntFormat.UINT8
    sensor_contact_status = (flags & HRS_SENSOR_CONTACT_MASK) >> HRS_SENSOR_CONTACT_SHIFT
    sensor_contact_supported = sensor_contact_status in (HRS_SENSOR_CONTACT_NOT_DETECTED, HRS_SENSOR_CONTACT_DETECTED)
    energy_expended_present = bool(flags & HRS_ENERGY_EXPENDED_PRESENT)
    rr_intervals_present = bool(flags & HRS_RR_INTERVALS_PRESENT)

    expected_length = (
        1 + heart_rate_format.length + (2 if energy_expended_present else 0) + (2 if rr_intervals_present else 0)
    )
    if data.size < expected_length:
        _LOGGER.debug("Heart Rate Measurement rejected: %d bytes, flags 0x%02X need %d", data.size, flags, expected_length)
        return None

    heart_rate = data.get_int(heart_rate_format, offset)
    offset += heart_rate_format.length
    if heart_rate is None:
        return None

    energy_expended = None
    if energy_expended_present:
        energy_expended = data.get_int(IntFormat.UINT16_LE, offset)
        offset += 2

    rr_intervals: list[int] = []
    if rr_intervals_present:
        while (interval := data.get_int(IntFormat.UINT16_LE, offset)) is not None:
            rr_intervals.append(interval)
            offset += 2

    return HRSData(
        heart_rate=heart_rate,
        sensor_contact_supported=sensor_contact_supported,
        sensor_contact=sensor_contact_status == HRS_SENSOR_CONTACT_DETECTED,
        energy_expended=energy_expended,
        rr_intervals=tuple(rr_intervals),
    )


def parse_body_sensor_location(data: ByteData | bytes | bytearray | memoryview) -> BodySensorLocation | None:
    """Decode a Body Sensor Location value (0x2A38) from its first byte."""
    data = ByteData.wrap(data)

    if data.size < 1:
        return None
    return BodySensorLocation.from_code(data.get_byte(0))
