"""Blood Pressure (BPS) characteristic decoders.

Blood Pressure Measurement (0x2A35) and Intermediate Cuff Pressure (0x2A36)
share one layout:

    Offset  Size  Field                          Present if
    0       1     Flags
    1       2     Systolic / cuff pressure (SFLOAT)
    3       2     Diastolic (SFLOAT)
    5       2     Mean arterial pressure (SFLOAT)
    7       7     Time stamp (Date Time)         flags & 0x02
    ...     2     Pulse rate (SFLOAT, 1/min)     flags & 0x04
    ...     1     User ID                        flags & 0x08
    ...     2     Measurement status (UINT16)    flags & 0x10

Flag bit 0 selects the pressure unit: 0 = mmHg, 1 = kPa. Intermediate Cuff
Pressure only uses the first pressure field; the other two are unused.

Reference: Bluetooth Blood Pressure Service 1.1, section 3.1 and 3.2
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..protocol.common import CodedEnum
from ..protocol.data import ByteData
from ..protocol.date_time import DATE_TIME_LENGTH, DateTime, parse_date_time
from ..protocol.format import FloatFormat, IntFormat

_LOGGER = logging.getLogger(__name__)

# =============================================================================
# BPS Constants
# =============================================================================


BPS_MINIMUM_LENGTH = 7  # Flags + three SFLOAT pressures

BPS_UNIT_KPA = 0x01
BPS_TIMESTAMP_PRESENT = 0x02
BPS_PULSE_RATE_PRESENT = 0x04
BPS_USER_ID_PRESENT = 0x08
BPS_MEASUREMENT_STATUS_PRESENT = 0x10

BPS_PULSE_RATE_RANGE_MASK = 0b0000000000011000  # Bits 3-4: pulse rate range
BPS_PULSE_RATE_RANGE_SHIFT = 3


class BloodPressureUnit(Enum):
    MMHG = 0
    KPA = 1


class PulseRateRange(CodedEnum):
    WITHIN_RANGE = 0
    EXCEEDS_UPPER_LIMIT = 1
    BELOW_LOWER_LIMIT = 2


@dataclass(frozen=True, kw_only=True)
class BPMStatus:
    """Measurement Status field of a blood pressure measurement."""

    body_movement_detected: bool
    cuff_too_loose: bool
    irregular_pulse_detected: bool
    pulse_rate_range: PulseRateRange | None  # None for the reserved value 3
    improper_measurement_position: bool

    @classmethod
    def from_value(cls, value: int) -> BPMStatus:
        return cls(
            body_movement_detected=bool(value & 0x0001),
            cuff_too_loose=bool(value & 0x0002),
            irregular_pulse_detected=bool(value & 0x0004),
            pulse_rate_range=PulseRateRange.from_code((value & BPS_PULSE_RATE_RANGE_MASK) >> BPS_PULSE_RATE_RANGE_SHIFT),
            improper_measurement_position=bool(value & 0x0020),
        )

    @property
    def pulse_rate_exceeds_upper_limit(self) -> bool:
        return self.pulse_rate_range is PulseRateRange.EXCEEDS_UPPER_LIMIT

    @property
    def pulse_rate_below_lower_limit(self) -> bool:
        return self.pulse_rate_range is PulseRateRange.BELOW_LOWER_LIMIT


@dataclass(frozen=True, kw_only=True)
class BloodPressureMeasurementData:
    systolic: float
    diastolic: float
    mean_arterial_pressure: float
    unit: BloodPressureUnit
    pulse_rate: float | None = None
    user_id: int | None = None
    status: BPMStatus | None = None
    timestamp: DateTime | None = None


@dataclass(frozen=True, kw_only=True)
class IntermediateCuffPressureData:
    cuff_pressure: float
    unit: BloodPressureUnit
    pulse_rate: float | None = None
    user_id: int | None = None
    status: BPMStatus | None = None
    timestamp: DateTime | None = None


@dataclass(frozen=True, kw_only=True)
class _PressureFields:
    pressures: tuple[float, float, float]
    unit: BloodPressureUnit
    pulse_rate: float | None
    user_id: int | None
    status: BPMStatus | None
    timestamp: DateTime | None


def _parse_pressure_fields(data: ByteData, name: str) -> _PressureFields | None:
    """Decode the layout shared by both blood pressure characteristics."""
    if data.size < BPS_MINIMUM_LENGTH:
        return None

    offset = 0
    flags = data.get_int(IntFormat.UINT8, offset)
    offset += 1
    if flags is None:
        return None

    timestamp_present = bool(flags & BPS_TIMESTAMP_PRESENT)
    pulse_rate_present = bool(flags & BPS_PULSE_RATE_PRESENT)
    user_id_present = bool(flags & BPS_USER_ID_PRESENT)
    status_present = bool(flags & BPS_MEASUREMENT_STATUS_PRESENT)

    expected_length = (
        BPS_MINIMUM_LENGTH
        + (DATE_TIME_LENGTH if timestamp_present else 0)
        + (2 if pulse_rate_present else 0)
        + (1 if user_id_present else 0)
        + (2 if status_present else 0)
    )
    if data.size < expected_length:
        _LOGGER.debug("%s rejected: %d bytes, flags 0x%02X need %d", name, data.size, flags, expected_length)
        return None

    first = data.get_float(FloatFormat.SFLOAT, offset)
    second = data.get_float(FloatFormat.SFLOAT, offset + 2)
    third = data.get_float(FloatFormat.SFLOAT, offset + 4)
    offset += 6
    if first is None or second is None or third is None:
        return None

    timestamp = None
    if timestamp_present:
        timestamp = parse_date_time(data, offset)
        offset += DATE_TIME_LENGTH

    pulse_rate = None
    if pulse_rate_present:
        pulse_rate = data.get_float(FloatFormat.SFLOAT, offset)
        offset += 2

    user_id = None
    if user_id_present:
        user_id = data.get_int(IntFormat.UINT8, offset)
        offset += 1

    status = None
    if status_present:
        status_value = data.get_int(IntFormat.UINT16_LE, offset)
        if status_value is None:
            return None
        status = BPMStatus.from_value(status_value)

    return _PressureFields(
        pressures=(first, second, third),
        unit=BloodPressureUnit.KPA if flags & BPS_UNIT_KPA else BloodPressureUnit.MMHG,
        pulse_rate=pulse_rate,
        user_id=user_id,
        status=status,
        timestamp=timestamp,
    )


def parse_blood_pressure_measurement(
    data: ByteData | bytes | bytearray | memoryview,
) -> BloodPressureMeasurementData | None:
    """Decode a Blood Pressure Measurement value, or None if it is malformed."""
    fields = _parse_pressure_fields(ByteData.wrap(data), "Blood Pressure Measurement")
    if fields is None:
        return None

    systolic, diastolic, mean_arterial_pressure = fields.pressures
    return BloodPressureMeasurementData(
        systolic=systolic,
        diastolic=diastolic,
        mean_arterial_pressure=mean_arterial_pressure,
        unit=fields.unit,
        pulse_rate=fields.pulse_rate,
        user_id=fields.user_id,
        status=fields.status,
        timestamp=fields.timestamp,
    )


def parse_intermediate_cuff_pressure(
    data: ByteData | bytes | bytearray | memoryview,
) -> IntermediateCuffPressureData | None:
    """Decode an Intermediate Cuff Pressure value, or None if it is malformed."""
    fields = _parse_pressure_fields(ByteData.wrap(data), "Intermediate Cuff Pressure")
    if fields is None:
        return None

    return IntermediateCuffPressureData(
        cuff_pressure=fields.pressures[0],
        unit=fields.unit,
        pulse_rate=fields.pulse_rate,
        user_id=fields.user_id,
        status=fields.status,
        timestamp=fields.timestamp,
    )
