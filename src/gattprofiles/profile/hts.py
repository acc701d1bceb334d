"""Health Thermometer (HTS) measurement decoder.

Temperature Measurement characteristic (0x2A1C) layout:
    Offset  Size  Field                     Present if
    0       1     Flags
    1       4     Temperature (FLOAT)
    5       7     Time stamp (Date Time)    flags & 0x02
    ...     1     Temperature type          flags & 0x04

Flag bit 0 selects the unit: 0 = Celsius, 1 = Fahrenheit.

Reference: Bluetooth Health Thermometer Service 1.0, section 3.1
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

HTS_MINIMUM_LENGTH = 5  # Flags + FLOAT temperature

HTS_UNIT_FAHRENHEIT = 0x01
HTS_TIMESTAMP_PRESENT = 0x02
HTS_TEMPERATURE_TYPE_PRESENT = 0x04


class TemperatureUnit(Enum):
    CELSIUS = 0
    FAHRENHEIT = 1


class TemperatureType(CodedEnum):
    ARMPIT = 1
    BODY = 2
    EAR = 3
    FINGER = 4
    GASTRO_INTESTINAL_TRACT = 5
    MOUTH = 6
    RECTUM = 7
    TOE = 8
    TYMPANUM = 9


@dataclass(frozen=True, kw_only=True)
class HTSData:
    """Decoded Temperature Measurement.

    Attributes:
        temperature: Temperature value in unit
        unit: Celsius or Fahrenheit
        timestamp: Time of measurement, if present
        type: Raw temperature type code, if present
    """

    temperature: float
    unit: TemperatureUnit
    timestamp: DateTime | None = None
    type: int | None = None

    @property
    def temperature_type(self) -> TemperatureType | None:
        """Measurement site, None if absent or a reserved value."""
        return TemperatureType.from_code(self.type)


def parse_temperature_measurement(data: ByteData | bytes | bytearray | memoryview) -> HTSData | None:
    """Decode a Temperature Measurement value, or None if it is malformed."""
    data = ByteData.wrap(data)

    if data.size < HTS_MINIMUM_LENGTH:
        return None

    offset = 0
    flags = data.get_int(IntFormat.UINT8, offset)
    offset += 1
    if flags is None:
        return None

    timestamp_present = bool(flags & HTS_TIMESTAMP_PRESENT)
    temperature_type_present = bool(flags & HTS_TEMPERATURE_TYPE_PRESENT)

    expected_length = (
        HTS_MINIMUM_LENGTH + (DATE_TIME_LENGTH if timestamp_present else 0) + (1 if temperature_type_present else 0)
    )
    if data.size < expected_length:
        _LOGGER.debug("Temperature Measurement rejected: %d bytes, flags 0x%02X need %d", data.size, flags, expected_length)
        return None

    temperature = data.get_float(FloatFormat.FLOAT, offset)
    offset += 4
    if temperature is None:
        return None

    timestamp = None
    if timestamp_present:
        timestamp = parse_date_time(data, offset)
        offset += DATE_TIME_LENGTH

    temperature_type = None
    if temperature_type_present:
        temperature_type = data.get_int(IntFormat.UINT8, offset)

    return HTSData(
        temperature=temperature,
        unit=TemperatureUnit.FAHRENHEIT if flags & HTS_UNIT_FAHRENHEIT else TemperatureUnit.CELSIUS,
        timestamp=timestamp,
        type=temperature_type,
    )
