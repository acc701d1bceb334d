"""Glucose (GLS) data model and characteristic decoders.

This module provides:

Classes:
    - GLSRecord: One Glucose Measurement record
    - GLSMeasurementContext: One Glucose Measurement Context record
    - GlucoseStatus: Sensor Status Annunciation of a glucose record
    - RecordType, SampleLocation, ConcentrationUnit: Measurement enumerations
    - Carbohydrate, Meal, Tester, Health, Medication, MedicationUnit: Context enumerations

Functions:
    - parse_glucose_measurement: Glucose Measurement characteristic (0x2A18)
    - parse_glucose_measurement_context: Glucose Measurement Context characteristic (0x2A34)

Glucose Measurement layout:
    Offset  Size  Field                          Present if
    0       1     Flags
    1       2     Sequence number (UINT16)
    3       7     Base time (Date Time)
    10      2     Time offset (SINT16, minutes)  flags & 0x01
    ...     2     Concentration (SFLOAT)         flags & 0x02
    ...     1     Type / sample location         flags & 0x02
    ...     2     Sensor status (UINT16)         flags & 0x08

Glucose Measurement Context layout:
    Offset  Size  Field                          Present if
    0       1     Flags
    1       2     Sequence number (UINT16)
    ...     1     Extended flags (ignored)       flags & 0x80
    ...     3     Carbohydrate ID + SFLOAT grams flags & 0x01
    ...     1     Meal                           flags & 0x02
    ...     1     Tester / health nibbles        flags & 0x04
    ...     3     Exercise duration + intensity  flags & 0x08
    ...     3     Medication ID + SFLOAT amount  flags & 0x10
    ...     2     HbA1c (SFLOAT, percent)        flags & 0x40

Reference: Bluetooth Glucose Service 1.0, section 3.106 (Glucose Measurement)
    and 3.107 (Glucose Measurement Context)
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
# GLS Constants
# =============================================================================


GLS_MEASUREMENT_MINIMUM_LENGTH = 10  # Flags + sequence number + base time

GLS_MEASUREMENT_TIME_OFFSET_PRESENT = 0x01
GLS_MEASUREMENT_CONCENTRATION_PRESENT = 0x02
GLS_MEASUREMENT_UNIT_MOL_PER_L = 0x04
GLS_MEASUREMENT_STATUS_PRESENT = 0x08
GLS_MEASUREMENT_CONTEXT_FOLLOWS = 0x10

GLS_CONTEXT_MINIMUM_LENGTH = 3  # Flags + sequence number

GLS_CONTEXT_CARBOHYDRATE_PRESENT = 0x01
GLS_CONTEXT_MEAL_PRESENT = 0x02
GLS_CONTEXT_TESTER_HEALTH_PRESENT = 0x04
GLS_CONTEXT_EXERCISE_PRESENT = 0x08
GLS_CONTEXT_MEDICATION_PRESENT = 0x10
GLS_CONTEXT_MEDICATION_UNIT_ML = 0x20
GLS_CONTEXT_HBA1C_PRESENT = 0x40
GLS_CONTEXT_EXTENDED_FLAGS_PRESENT = 0x80

GLS_LOW_NIBBLE_MASK = 0x0F
GLS_HIGH_NIBBLE_SHIFT = 4


# =============================================================================
# Measurement Enumerations
# =============================================================================


class RecordType(CodedEnum):
    CAPILLARY_WHOLE_BLOOD = 1
    CAPILLARY_PLASMA = 2
    VENOUS_WHOLE_BLOOD = 3
    VENOUS_PLASMA = 4
    ARTERIAL_WHOLE_BLOOD = 5
    ARTERIAL_PLASMA = 6
    UNDETERMINED_WHOLE_BLOOD = 7
    UNDETERMINED_PLASMA = 8
    INTERSTITIAL_FLUID = 9
    CONTROL_SOLUTION = 10


class SampleLocation(CodedEnum):
    FINGER = 1
    AST = 2  # Alternate Site Test
    EARLOBE = 3
    CONTROL_SOLUTION = 4
    NOT_AVAILABLE = 15


class ConcentrationUnit(Enum):
    KG_PER_L = 0
    MOL_PER_L = 1


# =============================================================================
# Context Enumerations
# =============================================================================


class Carbohydrate(CodedEnum):
    BREAKFAST = 1
    LUNCH = 2
    DINNER = 3
    SNACK = 4
    DRINK = 5
    SUPPER = 6
    BRUNCH = 7


class Meal(CodedEnum):
    PREPRANDIAL = 1  # Before meal
    POSTPRANDIAL = 2  # After meal
    FASTING = 3
    CASUAL = 4  # Snacks, drinks, etc.
    BEDTIME = 5


class Tester(CodedEnum):
    SELF = 1
    HEALTH_CARE_PROFESSIONAL = 2
    LAB_TEST = 3
    NOT_AVAILABLE = 15


class Health(CodedEnum):
    MINOR_HEALTH_ISSUES = 1
    MAJOR_HEALTH_ISSUES = 2
    DURING_MENSES = 3
    UNDER_STRESS = 4
    NO_HEALTH_ISSUES = 5
    NOT_AVAILABLE = 15


class Medication(CodedEnum):
    RAPID_ACTING_INSULIN = 1
    SHORT_ACTING_INSULIN = 2
    INTERMEDIATE_ACTING_INSULIN = 3
    LONG_ACTING_INSULIN = 4
    PRE_MIXED_INSULIN = 5


class MedicationUnit(Enum):
    MG = 0
    ML = 1


# =============================================================================
# GLS Records
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class GlucoseStatus:
    """Sensor Status Annunciation of a glucose measurement (16-bit mask)."""

    device_battery_low: bool
    sensor_malfunction: bool
    sample_size_insufficient: bool
    strip_insertion_error: bool
    strip_type_incorrect: bool
    sensor_result_lower_than_device_can_process: bool
    sensor_result_higher_than_device_can_process: bool
    sensor_temperature_too_high: bool
    sensor_temperature_too_low: bool
    sensor_read_interrupted: bool
    general_device_fault: bool
    time_fault: bool

    @classmethod
    def from_value(cls, value: int) -> GlucoseStatus:
        return cls(
            device_battery_low=bool(value & 0x0001),
            sensor_malfunction=bool(value & 0x0002),
            sample_size_insufficient=bool(value & 0x0004),
            strip_insertion_error=bool(value & 0x0008),
            strip_type_incorrect=bool(value & 0x0010),
            sensor_result_lower_than_device_can_process=bool(value & 0x0020),
            sensor_result_higher_than_device_can_process=bool(value & 0x0040),
            sensor_temperature_too_high=bool(value & 0x0080),
            sensor_temperature_too_low=bool(value & 0x0100),
            sensor_read_interrupted=bool(value & 0x0200),
            general_device_fault=bool(value & 0x0400),
            time_fault=bool(value & 0x0800),
        )


@dataclass(frozen=True, kw_only=True)
class GLSRecord:
    """One glucose measurement record.

    Attributes:
        sequence_number: Record sequence number
        base_time: Base time as reported by the meter
        time_offset: Minutes to add to base_time, if present
        glucose_concentration: Concentration in unit, if present
        unit: kg/L or mol/L, set together with glucose_concentration
        type: Sample type, None if absent or reserved
        sample_location: Sample location, None if absent or reserved
        status: Sensor status annunciation, if present
        context_information_follows: A Measurement Context record will follow
    """

    sequence_number: int
    base_time: DateTime | None = None
    time_offset: int | None = None
    glucose_concentration: float | None = None
    unit: ConcentrationUnit | None = None
    type: RecordType | None = None
    sample_location: SampleLocation | None = None
    status: GlucoseStatus | None = None
    context_information_follows: bool = False

    @property
    def time(self) -> DateTime | None:
        """Measurement time, base time with the time offset applied."""
        if self.base_time is None or self.time_offset is None:
            return self.base_time
        return self.base_time.with_offset(self.time_offset)


@dataclass(frozen=True, kw_only=True)
class GLSMeasurementContext:
    """Additional context for the glucose record with the same sequence number."""

    sequence_number: int
    carbohydrate: Carbohydrate | None = None
    carbohydrate_amount: float | None = None  # Grams
    meal: Meal | None = None
    tester: Tester | None = None
    health: Health | None = None
    exercise_duration: int | None = None  # Seconds
    exercise_intensity: int | None = None  # Percent
    medication: Medication | None = None
    medication_quantity: float | None = None  # In medication_unit
    medication_unit: MedicationUnit | None = None
    hba1c: float | None = None  # Percent


# =============================================================================
# Parsers
# =============================================================================


def parse_glucose_measurement(data: ByteData | bytes | bytearray | memoryview) -> GLSRecord | None:
    """Decode a Glucose Measurement value.

    Args:
        data: Characteristic value

    Returns:
        Decoded record, or None if the value is too short for its flags
    """
    data = ByteData.wrap(data)

    if data.size < GLS_MEASUREMENT_MINIMUM_LENGTH:
        return None

    offset = 0
    flags = data.get_int(IntFormat.UINT8, offset)
    offset += 1
    if flags is None:
        return None

    time_offset_present = bool(flags & GLS_MEASUREMENT_TIME_OFFSET_PRESENT)
    concentration_present = bool(flags & GLS_MEASUREMENT_CONCENTRATION_PRESENT)
    unit_mol_per_l = bool(flags & GLS_MEASUREMENT_UNIT_MOL_PER_L)
    status_present = bool(flags & GLS_MEASUREMENT_STATUS_PRESENT)
    context_follows = bool(flags & GLS_MEASUREMENT_CONTEXT_FOLLOWS)

    expected_length = (
        GLS_MEASUREMENT_MINIMUM_LENGTH
        + (2 if time_offset_present else 0)
        + (3 if concentration_present else 0)
        + (2 if status_present else 0)
    )
    if data.size < expected_length:
        _LOGGER.debug("Glucose Measurement rejected: %d bytes, flags 0x%02X need %d", data.size, flags, expected_length)
        return None

    sequence_number = data.get_int(IntFormat.UINT16_LE, offset)
    offset += 2

    base_time = parse_date_time(data, offset)
    offset += DATE_TIME_LENGTH

    if sequence_number is None or base_time is None:
        return None

    time_offset = None
    if time_offset_present:
        time_offset = data.get_int(IntFormat.SINT16_LE, offset)
        offset += 2

    glucose_concentration = None
    unit = None
    record_type = None
    sample_location = None
    if concentration_present:
        glucose_concentration = data.get_float(FloatFormat.SFLOAT, offset)
        type_and_location = data.get_int(IntFormat.UINT8, offset + 2)
        offset += 3
        if type_and_location is None:
            return None

        record_type = RecordType.from_code(type_and_location & GLS_LOW_NIBBLE_MASK)
        sample_location = SampleLocation.from_code(type_and_location >> GLS_HIGH_NIBBLE_SHIFT)
        unit = ConcentrationUnit.MOL_PER_L if unit_mol_per_l else ConcentrationUnit.KG_PER_L

    status = None
    if status_present:
        status_value = data.get_int(IntFormat.UINT16_LE, offset)
        if status_value is None:
            return None
        status = GlucoseStatus.from_value(status_value)

    return GLSRecord(
        sequence_number=sequence_number,
        base_time=base_time,
        time_offset=time_offset,
        glucose_concentration=glucose_concentration,
        unit=unit,
        type=record_type,
        sample_location=sample_location,
        status=status,
        context_information_follows=context_follows,
    )


def parse_glucose_measurement_context(
    data: ByteData | bytes | bytearray | memoryview,
) -> GLSMeasurementContext | None:
    """Decode a Glucose Measurement Context value.

    Args:
        data: Characteristic value

    Returns:
        Decoded context, or None if the value is too short for its flags
    """
    data = ByteData.wrap(data)

    if data.size < GLS_CONTEXT_MINIMUM_LENGTH:
        return None

    offset = 0
    flags = data.get_int(IntFormat.UINT8, offset)
    offset += 1
    if flags is None:
        return None

    carbohydrate_present = bool(flags & GLS_CONTEXT_CARBOHYDRATE_PRESENT)
    meal_present = bool(flags & GLS_CONTEXT_MEAL_PRESENT)
    tester_health_present = bool(flags & GLS_CONTEXT_TESTER_HEALTH_PRESENT)
    exercise_present = bool(flags & GLS_CONTEXT_EXERCISE_PRESENT)
    medication_present = bool(flags & GLS_CONTEXT_MEDICATION_PRESENT)
    medication_unit_ml = bool(flags & GLS_CONTEXT_MEDICATION_UNIT_ML)
    hba1c_present = bool(flags & GLS_CONTEXT_HBA1C_PRESENT)
    extended_flags_present = bool(flags & GLS_CONTEXT_EXTENDED_FLAGS_PRESENT)

    expected_length = (
        GLS_CONTEXT_MINIMUM_LENGTH
        + (3 if carbohydrate_present else 0)
        + (1 if meal_present else 0)
        + (1 if tester_health_present else 0)
        + (3 if exercise_present else 0)
        + (3 if medication_present else 0)
        + (2 if hba1c_present else 0)
        + (1 if extended_flags_present else 0)
    )
    if data.size < expected_length:
        _LOGGER.debug(
            "Glucose Measurement Context rejected: %d bytes, flags 0x%02X need %d", data.size, flags, expected_length
        )
        return None

    sequence_number = data.get_int(IntFormat.UINT16_LE, offset)
    offset += 2
    if sequence_number is None:
        return None

    if extended_flags_present:
        offset += 1

    carbohydrate = None
    carbohydrate_amount = None
    if carbohydrate_present:
        carbohydrate = Carbohydrate.from_code(data.get_int(IntFormat.UINT8, offset))
        carbohydrate_amount = data.get_float(FloatFormat.SFLOAT, offset + 1)
        offset += 3

    meal = None
    if meal_present:
        meal = Meal.from_code(data.get_int(IntFormat.UINT8, offset))
        offset += 1

    tester = None
    health = None
    if tester_health_present:
        tester_and_health = data.get_int(IntFormat.UINT8, offset)
        offset += 1
        if tester_and_health is None:
            return None

        tester = Tester.from_code(tester_and_health & GLS_LOW_NIBBLE_MASK)
        health = Health.from_code(tester_and_health >> GLS_HIGH_NIBBLE_SHIFT)

    exercise_duration = None
    exercise_intensity = None
    if exercise_present:
        exercise_duration = data.get_int(IntFormat.UINT16_LE, offset)
        exercise_intensity = data.get_int(IntFormat.UINT8, offset + 2)
        offset += 3

    medication = None
    medication_quantity = None
    medication_unit = None
    if medication_present:
        medication = Medication.from_code(data.get_int(IntFormat.UINT8, offset))
        medication_quantity = data.get_float(FloatFormat.SFLOAT, offset + 1)
        medication_unit = MedicationUnit.ML if medication_unit_ml else MedicationUnit.MG
        offset += 3

    hba1c = None
    if hba1c_present:
        hba1c = data.get_float(FloatFormat.SFLOAT, offset)

    return GLSMeasurementContext(
        sequence_number=sequence_number,
        carbohydrate=carbohydrate,
        carbohydrate_amount=carbohydrate_amount,
        meal=meal,
        tester=tester,
        health=health,
        exercise_duration=exercise_duration,
        exercise_intensity=exercise_intensity,
        medication=medication,
        medication_quantity=medication_quantity,
        medication_unit=medication_unit,
        hba1c=hba1c,
    )
