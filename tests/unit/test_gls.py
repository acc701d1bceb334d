"""Unit tests for the Glucose decoders."""

from dataclasses import asdict
from datetime import datetime

import pytest

from gattprofiles.profile.gls import (
    Carbohydrate,
    ConcentrationUnit,
    GlucoseStatus,
    Health,
    Meal,
    Medication,
    MedicationUnit,
    RecordType,
    SampleLocation,
    Tester as GLSTester,
    parse_glucose_measurement,
    parse_glucose_measurement_context,
)
from gattprofiles.protocol.date_time import DateTime

# =============================================================================
# Test Constants
# =============================================================================

TEST_BASE_TIME = b"\xe8\x07\x03\x0f\x0a\x1e\x00"  # 2024-03-15 10:30:00

TEST_MEASUREMENT_FULL = (
    b"\x1b"  # Time offset, concentration, status present, context follows
    + b"\x01\x00"  # Sequence number 1
    + TEST_BASE_TIME
    + b"\xe2\xff"  # Time offset -30 minutes
    + b"\x5f\xb0"  # 0.00095 kg/L (mantissa 95, exponent -5)
    + b"\x11"  # Capillary whole blood, finger
    + b"\x03\x00"  # Device battery low, sensor malfunction
)

TEST_MEASUREMENT_MINIMAL = b"\x00\x2a\x00" + TEST_BASE_TIME  # Sequence number 42

TEST_CONTEXT_FULL = bytes(
    [
        0x5F,  # Carbohydrate, meal, tester/health, exercise, medication, HbA1c
        0x02, 0x00,  # Sequence number 2
        0x01, 0x32, 0x00,  # Breakfast, 50 g
        0x01,  # Preprandial
        0x51,  # Tester self, no health issues
        0x10, 0x0E, 0x32,  # 3600 s at 50 %
        0x01, 0x05, 0x00,  # Rapid acting insulin, 5 mg
        0x41, 0xF0,  # HbA1c 6.5 %
    ]
)  # fmt: skip


class TestParseGlucoseMeasurement:
    """Tests for parse_glucose_measurement."""

    def test_full_record(self) -> None:
        """Test a record with every optional field."""
        record = parse_glucose_measurement(TEST_MEASUREMENT_FULL)
        assert record is not None
        assert record.sequence_number == 1
        assert record.base_time == DateTime(year=2024, month=3, day=15, hour=10, minute=30, second=0)
        assert record.time_offset == -30
        assert record.glucose_concentration == 0.00095
        assert record.unit is ConcentrationUnit.KG_PER_L
        assert record.type is RecordType.CAPILLARY_WHOLE_BLOOD
        assert record.sample_location is SampleLocation.FINGER
        assert record.status is not None
        assert record.status.device_battery_low
        assert record.status.sensor_malfunction
        assert record.context_information_follows

    def test_time_applies_offset(self) -> None:
        """Test the measurement time includes the time offset."""
        record = parse_glucose_measurement(TEST_MEASUREMENT_FULL)
        assert record is not None
        assert record.time is not None
        assert record.time.to_datetime() == datetime(2024, 3, 15, 10, 0, 0)

    def test_minimal_record(self) -> None:
        """Test a record with only sequence number and base time."""
        record = parse_glucose_measurement(TEST_MEASUREMENT_MINIMAL)
        assert record is not None
        assert record.sequence_number == 42
        assert record.time_offset is None
        assert record.glucose_concentration is None
        assert record.unit is None
        assert record.type is None
        assert record.status is None
        assert not record.context_information_follows
        assert record.time == record.base_time

    def test_mol_per_l_and_reserved_codes(self) -> None:
        """Test the unit flag and reserved type and location nibbles."""
        record = parse_glucose_measurement(b"\x06\x02\x00" + TEST_BASE_TIME + b"\x64\x00\xfc")
        assert record is not None
        assert record.unit is ConcentrationUnit.MOL_PER_L
        assert record.glucose_concentration == 100.0
        assert record.type is None
        assert record.sample_location is SampleLocation.NOT_AVAILABLE

    def test_status_only(self) -> None:
        """Test a record with a status but no concentration."""
        record = parse_glucose_measurement(b"\x08\x03\x00" + TEST_BASE_TIME + b"\x00\x0c")
        assert record is not None
        assert record.glucose_concentration is None
        assert record.status is not None
        assert record.status.general_device_fault
        assert record.status.time_fault

    @pytest.mark.parametrize(
        "value",
        [
            b"",
            TEST_MEASUREMENT_MINIMAL[:-1],
            b"\x01" + TEST_MEASUREMENT_MINIMAL[1:],  # Time offset flagged but missing
            TEST_MEASUREMENT_FULL[:-1],
        ],
        ids=["empty", "short_base_time", "missing_time_offset", "truncated_status"],
    )
    def test_too_short(self, value: bytes) -> None:
        """Test values shorter than their flags require."""
        assert parse_glucose_measurement(value) is None


class TestGlucoseStatus:
    """Tests for the glucose status mask."""

    def test_all_bits(self) -> None:
        """Test the twelve defined bits map to twelve fields."""
        assert all(asdict(GlucoseStatus.from_value(0x0FFF)).values())

    def test_reserved_bits(self) -> None:
        """Test bits 12-15 are ignored."""
        assert not any(asdict(GlucoseStatus.from_value(0xF000)).values())


class TestParseGlucoseMeasurementContext:
    """Tests for parse_glucose_measurement_context."""

    def test_full_context(self) -> None:
        """Test a context with every optional field except extended flags."""
        context = parse_glucose_measurement_context(TEST_CONTEXT_FULL)
        assert context is not None
        assert context.sequence_number == 2
        assert context.carbohydrate is Carbohydrate.BREAKFAST
        assert context.carbohydrate_amount == 50.0
        assert context.meal is Meal.PREPRANDIAL
        assert context.tester is GLSTester.SELF
        assert context.health is Health.NO_HEALTH_ISSUES
        assert context.exercise_duration == 3600
        assert context.exercise_intensity == 50
        assert context.medication is Medication.RAPID_ACTING_INSULIN
        assert context.medication_quantity == 5.0
        assert context.medication_unit is MedicationUnit.MG
        assert context.hba1c == 6.5

    def test_extended_flags_skipped(self) -> None:
        """Test the extended flags byte is skipped before the fields."""
        context = parse_glucose_measurement_context(b"\xb0\x03\x00\xff\x02\x0a\x00")
        assert context is not None
        assert context.sequence_number == 3
        assert context.medication is Medication.SHORT_ACTING_INSULIN
        assert context.medication_quantity == 10.0
        assert context.medication_unit is MedicationUnit.ML

    def test_sequence_number_only(self) -> None:
        """Test a context without optional fields."""
        context = parse_glucose_measurement_context(b"\x00\x07\x00")
        assert context is not None
        assert context.sequence_number == 7
        assert context.carbohydrate is None
        assert context.medication_unit is None

    def test_reserved_codes(self) -> None:
        """Test reserved meal, tester and health codes map to None."""
        context = parse_glucose_measurement_context(b"\x06\x01\x00\x09\xe0")
        assert context is not None
        assert context.meal is None
        assert context.tester is None
        assert context.health is None

    @pytest.mark.parametrize(
        "value",
        [b"", b"\x00\x01", b"\x01\x01\x00\x01\x32", TEST_CONTEXT_FULL[:-1]],
        ids=["empty", "short_sequence_number", "truncated_carbohydrate", "truncated_hba1c"],
    )
    def test_too_short(self, value: bytes) -> None:
        """Test values shorter than their flags require."""
        assert parse_glucose_measurement_context(value) is None
