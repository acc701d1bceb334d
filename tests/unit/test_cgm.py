"""Unit tests for the Continuous Glucose Monitoring decoders."""

from collections.abc import Callable
from dataclasses import asdict

import pytest

from gattprofiles.profile.cgm import (
    AlertLevelResponse,
    CalibrationValueResponse,
    CGMErrorCode,
    CGMFeatures,
    CGMOpCode,
    CGMStatus,
    CommunicationIntervalResponse,
    ResponseCodeResponse,
    UnverifiedResponse,
    _find_response_descriptor,
    parse_cgm_features,
    parse_cgm_measurement,
    parse_cgm_specific_ops_control_point,
    parse_cgm_status,
)

# =============================================================================
# Test Constants
# =============================================================================

TEST_FEATURE_E2E_CRC = b"\x00\x10\x00"  # Bit 12: E2E-CRC supported
TEST_FEATURE_CALIBRATION = b"\x01\x00\x00"  # Bit 0: calibration supported
TEST_TYPE_1_LOCATION_2 = b"\x21"
TEST_CRC_NOT_SUPPORTED = b"\xff\xff"

TEST_STATUS_OCTETS = b"\x05\x00\x01\x02\x80"  # Time offset 5, session stopped, cal not allowed, result too high

TEST_RECORD_MINIMAL = b"\x06\x00\x64\x00\x0a\x00"  # Size 6, 100 mg/dL, time offset 10
TEST_RECORD_WITHOUT_CRC = b"\x08\x00\x64\x00\x0b\x00"  # Size 8 (CRC appended in tests), time offset 11
TEST_RECORD_FULL = bytes(
    [
        0x0D,  # Size 13
        0xE3,  # Trend, quality, warning, cal/temp and status octets present
        0x64, 0x00,  # 100 mg/dL
        0x0A, 0x00,  # Time offset 10
        0x01,  # Warning: session stopped
        0x02,  # Cal/temp: calibration not allowed
        0x04,  # Status: result lower than hypo level
        0xFF, 0x0F,  # Trend -1.0
        0x64, 0x00,  # Quality 100 %
    ]
)  # fmt: skip

TEST_CALIBRATION_RESPONSE = bytes(
    [
        0x06,  # Calibration value response
        0x64, 0x00,  # 100 mg/dL
        0x0A, 0x00,  # Calibration time 10
        0x21,  # Type 1, sample location 2
        0x14, 0x00,  # Next calibration time 20
        0x03, 0x00,  # Record number 3
        0x05,  # Rejected, process pending
    ]
)  # fmt: skip

# Bit index -> CGMFeatures field
TEST_FEATURE_BITS = [
    (0, "calibration_supported"),
    (1, "patient_high_low_alerts_supported"),
    (2, "hypo_alerts_supported"),
    (3, "hyper_alerts_supported"),
    (4, "rate_of_increase_decrease_alerts_supported"),
    (5, "device_specific_alert_supported"),
    (6, "sensor_malfunction_detection_supported"),
    (7, "sensor_temp_high_low_detection_supported"),
    (8, "sensor_result_high_low_supported"),
    (9, "low_battery_detection_supported"),
    (10, "sensor_type_error_detection_supported"),
    (11, "general_device_fault_supported"),
    (12, "e2e_crc_supported"),
    (13, "multiple_bond_supported"),
    (14, "multiple_sessions_supported"),
    (15, "cgm_trend_info_supported"),
    (16, "cgm_quality_info_supported"),
]


# =============================================================================
# CGM Feature Tests
# =============================================================================


class TestCGMFeatures:
    """Tests for the feature mask mapping."""

    @pytest.mark.parametrize(
        ("bit", "field_name"),
        TEST_FEATURE_BITS,
        ids=[field_name for _, field_name in TEST_FEATURE_BITS],
    )
    def test_single_bit(self, bit: int, field_name: str) -> None:
        """Test each bit sets exactly its own field."""
        features = asdict(CGMFeatures.from_value(1 << bit))
        assert features == {name: name == field_name for name in features}

    def test_reserved_bits_ignored(self) -> None:
        """Test bits 17-23 do not set any field."""
        features = asdict(CGMFeatures.from_value(0xFE0000))
        assert not any(features.values())


class TestParseCGMFeatures:
    """Tests for parse_cgm_features."""

    def test_with_valid_crc(self, with_crc: Callable[[bytes], bytes]) -> None:
        """Test a secured value with a matching CRC."""
        result = parse_cgm_features(with_crc(TEST_FEATURE_E2E_CRC + TEST_TYPE_1_LOCATION_2))
        assert result is not None
        assert result.features.e2e_crc_supported
        assert result.type == 1
        assert result.sample_location == 2
        assert result.secured
        assert result.crc_valid

    def test_with_invalid_crc(self, with_bad_crc: Callable[[bytes], bytes]) -> None:
        """Test a secured value with a wrong CRC is rejected."""
        assert parse_cgm_features(with_bad_crc(TEST_FEATURE_E2E_CRC + TEST_TYPE_1_LOCATION_2)) is None

    def test_without_crc_support(self) -> None:
        """Test an unsecured value carrying the 0xFFFF placeholder."""
        result = parse_cgm_features(TEST_FEATURE_CALIBRATION + TEST_TYPE_1_LOCATION_2 + TEST_CRC_NOT_SUPPORTED)
        assert result is not None
        assert result.features.calibration_supported
        assert not result.features.e2e_crc_supported
        assert not result.secured
        assert not result.crc_valid

    def test_without_crc_support_wrong_placeholder(self) -> None:
        """Test an unsecured value whose CRC field is not 0xFFFF is rejected."""
        assert parse_cgm_features(TEST_FEATURE_CALIBRATION + TEST_TYPE_1_LOCATION_2 + b"\x34\x12") is None

    @pytest.mark.parametrize(
        "value",
        [b"", b"\x01\x00\x00\x21\xff", b"\x01\x00\x00\x21\xff\xff\x00"],
        ids=["empty", "five_bytes", "seven_bytes"],
    )
    def test_wrong_length(self, value: bytes) -> None:
        """Test values that are not exactly six bytes are rejected."""
        assert parse_cgm_features(value) is None


# =============================================================================
# CGM Status Tests
# =============================================================================


class TestParseCGMStatus:
    """Tests for parse_cgm_status."""

    def test_without_crc(self) -> None:
        """Test a five byte status value."""
        result = parse_cgm_status(TEST_STATUS_OCTETS)
        assert result is not None
        assert result.time_offset == 5
        assert result.status == CGMStatus.from_octets(0x01, 0x02, 0x80)
        assert result.status.session_stopped
        assert result.status.calibration_not_allowed
        assert result.status.sensor_result_higher_than_device_can_process
        assert not result.status.device_battery_low
        assert not result.secured

    def test_with_valid_crc(self, with_crc: Callable[[bytes], bytes]) -> None:
        """Test a seven byte status value with matching CRC."""
        result = parse_cgm_status(with_crc(TEST_STATUS_OCTETS))
        assert result is not None
        assert result.secured
        assert result.crc_valid

    def test_with_invalid_crc(self, with_bad_crc: Callable[[bytes], bytes]) -> None:
        """Test a CRC mismatch rejects the value."""
        assert parse_cgm_status(with_bad_crc(TEST_STATUS_OCTETS)) is None

    @pytest.mark.parametrize(
        "value",
        [b"\x05\x00\x01\x02", b"\x05\x00\x01\x02\x80\x00", b"\x05\x00\x01\x02\x80\x00\x00\x00"],
        ids=["four_bytes", "six_bytes", "eight_bytes"],
    )
    def test_wrong_length(self, value: bytes) -> None:
        """Test only five or seven bytes are accepted."""
        assert parse_cgm_status(value) is None

    def test_status_octet_bits(self) -> None:
        """Test the bit layout of the three status octets."""
        status = CGMStatus.from_octets(0x20, 0x01, 0x40)
        assert status.general_device_fault
        assert status.time_sync_required
        assert status.sensor_result_lower_than_device_can_process
        assert sum(asdict(status).values()) == 3


# =============================================================================
# CGM Measurement Tests
# =============================================================================


class TestParseCGMMeasurement:
    """Tests for parse_cgm_measurement."""

    def test_minimal_record(self) -> None:
        """Test a single record without optional fields."""
        result = parse_cgm_measurement(TEST_RECORD_MINIMAL)
        assert result is not None
        assert len(result) == 1

        record = result[0]
        assert record.glucose_concentration == 100.0
        assert record.time_offset == 10
        assert record.trend is None
        assert record.quality is None
        assert record.status is None
        assert not record.crc_present

    def test_full_record(self) -> None:
        """Test a record with every optional field."""
        result = parse_cgm_measurement(TEST_RECORD_FULL)
        assert result is not None
        assert len(result) == 1

        record = result[0]
        assert record.trend == -1.0
        assert record.quality == 100.0
        assert record.status is not None
        assert record.status.session_stopped
        assert record.status.calibration_not_allowed
        assert record.status.sensor_result_lower_than_hypo_level
        assert sum(asdict(record.status).values()) == 3

    def test_single_status_octet(self) -> None:
        """Test a record carrying only the status octet."""
        result = parse_cgm_measurement(b"\x07\x80\x64\x00\x0a\x00\x08")
        assert result is not None
        assert result[0].status is not None
        assert result[0].status.sensor_result_higher_than_hyper_level
        assert not result[0].status.session_stopped

    def test_record_with_valid_crc(self, with_crc: Callable[[bytes], bytes]) -> None:
        """Test a secured record."""
        result = parse_cgm_measurement(with_crc(TEST_RECORD_WITHOUT_CRC))
        assert result is not None
        assert len(result) == 1
        assert result[0].crc_present
        assert result[0].time_offset == 11

    def test_multiple_records(self, with_crc: Callable[[bytes], bytes]) -> None:
        """Test several records packed into one value keep stream order."""
        result = parse_cgm_measurement(TEST_RECORD_MINIMAL + with_crc(TEST_RECORD_WITHOUT_CRC) + TEST_RECORD_FULL)
        assert result is not None
        assert [record.time_offset for record in result] == [10, 11, 10]
        assert [record.crc_present for record in result] == [False, True, False]

    def test_bad_crc_drops_only_that_record(
        self, with_crc: Callable[[bytes], bytes], with_bad_crc: Callable[[bytes], bytes]
    ) -> None:
        """Test a CRC mismatch skips the record and keeps decoding."""
        result = parse_cgm_measurement(with_crc(TEST_RECORD_WITHOUT_CRC) + with_bad_crc(TEST_RECORD_WITHOUT_CRC))
        assert result is not None
        assert len(result) == 1

        result = parse_cgm_measurement(with_bad_crc(TEST_RECORD_WITHOUT_CRC) + TEST_RECORD_MINIMAL)
        assert result is not None
        assert [record.time_offset for record in result] == [10]

    def test_all_records_bad_crc(self, with_bad_crc: Callable[[bytes], bytes]) -> None:
        """Test every record failing its CRC yields an empty list."""
        assert parse_cgm_measurement(with_bad_crc(TEST_RECORD_WITHOUT_CRC)) == []

    @pytest.mark.parametrize(
        "value",
        [
            b"",
            b"\x05\x00\x64\x00\x0a",  # Size below minimum
            b"\x08\x00\x64\x00\x0a\x00",  # Size past end of value
            b"\x07\x00\x64\x00\x0a\x00\x00",  # Size matches neither flags nor flags + CRC
            TEST_RECORD_MINIMAL + b"\x06\x00",  # Truncated second record
            b"\x00",  # Zero size
        ],
        ids=["empty", "size_too_small", "size_past_end", "size_flags_mismatch", "truncated_second", "zero_size"],
    )
    def test_malformed(self, value: bytes) -> None:
        """Test structural errors reject the whole value."""
        assert parse_cgm_measurement(value) is None

    def test_accepts_memoryview(self) -> None:
        """Test bytes-like inputs other than bytes."""
        result = parse_cgm_measurement(memoryview(TEST_RECORD_MINIMAL))
        assert result is not None
        assert len(result) == 1


# =============================================================================
# CGM Specific Ops Control Point Tests
# =============================================================================


class TestFindResponseDescriptor:
    """Tests for _find_response_descriptor helper function."""

    def test_response_op_code(self) -> None:
        """Test a response op code has a descriptor."""
        descriptor = _find_response_descriptor(CGMOpCode.COMMUNICATION_INTERVAL_RESPONSE.value)
        assert descriptor is not None
        assert descriptor.operand_size == 1

    def test_request_op_code(self) -> None:
        """Test request op codes have no descriptor."""
        assert _find_response_descriptor(CGMOpCode.SET_COMMUNICATION_INTERVAL.value) is None


class TestParseCGMSpecificOpsControlPoint:
    """Tests for parse_cgm_specific_ops_control_point."""

    def test_communication_interval(self) -> None:
        """Test an unsecured communication interval response."""
        result = parse_cgm_specific_ops_control_point(b"\x03\x05")
        assert result == CommunicationIntervalResponse(glucose_communication_interval=5, secured=False, crc_valid=False)
        assert isinstance(result, CommunicationIntervalResponse)
        assert result.request_code is CGMOpCode.SET_COMMUNICATION_INTERVAL
        assert result.is_operation_completed

    def test_communication_interval_with_crc(self, with_crc: Callable[[bytes], bytes]) -> None:
        """Test a secured communication interval response."""
        result = parse_cgm_specific_ops_control_point(with_crc(b"\x03\x05"))
        assert isinstance(result, CommunicationIntervalResponse)
        assert result.secured
        assert result.crc_valid

    def test_bad_crc_yields_unverified(self, with_bad_crc: Callable[[bytes], bytes]) -> None:
        """Test a CRC mismatch produces an UnverifiedResponse."""
        result = parse_cgm_specific_ops_control_point(with_bad_crc(b"\x03\x05"))
        assert isinstance(result, UnverifiedResponse)
        assert result.op_code is CGMOpCode.COMMUNICATION_INTERVAL_RESPONSE
        assert result.secured
        assert not result.crc_valid
        assert not result.is_operation_completed

    def test_calibration_value(self) -> None:
        """Test a calibration value response."""
        result = parse_cgm_specific_ops_control_point(TEST_CALIBRATION_RESPONSE)
        assert isinstance(result, CalibrationValueResponse)
        assert result.glucose_concentration_of_calibration == 100.0
        assert result.calibration_time == 10
        assert result.next_calibration_time == 20
        assert result.type == 1
        assert result.sample_location == 2
        assert result.calibration_data_record_number == 3
        assert result.calibration_status.rejected
        assert not result.calibration_status.data_out_of_range
        assert result.calibration_status.process_pending

    @pytest.mark.parametrize(
        ("op_code", "request_code"),
        [
            (CGMOpCode.PATIENT_HIGH_ALERT_LEVEL_RESPONSE, CGMOpCode.SET_PATIENT_HIGH_ALERT_LEVEL),
            (CGMOpCode.PATIENT_LOW_ALERT_LEVEL_RESPONSE, CGMOpCode.SET_PATIENT_LOW_ALERT_LEVEL),
            (CGMOpCode.HYPO_ALERT_LEVEL_RESPONSE, CGMOpCode.SET_HYPO_ALERT_LEVEL),
            (CGMOpCode.HYPER_ALERT_LEVEL_RESPONSE, CGMOpCode.SET_HYPER_ALERT_LEVEL),
            (CGMOpCode.RATE_OF_DECREASE_ALERT_LEVEL_RESPONSE, CGMOpCode.SET_RATE_OF_DECREASE_ALERT_LEVEL),
            (CGMOpCode.RATE_OF_INCREASE_ALERT_LEVEL_RESPONSE, CGMOpCode.SET_RATE_OF_INCREASE_ALERT_LEVEL),
        ],
        ids=["patient_high", "patient_low", "hypo", "hyper", "rate_of_decrease", "rate_of_increase"],
    )
    def test_alert_level(self, op_code: CGMOpCode, request_code: CGMOpCode) -> None:
        """Test each alert level response maps to its request."""
        result = parse_cgm_specific_ops_control_point(bytes([op_code.value]) + b"\xc8\x00")
        assert isinstance(result, AlertLevelResponse)
        assert result.request_code is request_code
        assert result.alert_level == 200.0

    def test_response_code_success(self) -> None:
        """Test a successful response code."""
        result = parse_cgm_specific_ops_control_point(b"\x1c\x1a\x01")
        assert isinstance(result, ResponseCodeResponse)
        assert result.request_code is CGMOpCode.START_SESSION
        assert result.response_code == 1
        assert result.error_code is None
        assert result.error is None
        assert result.is_operation_completed

    def test_response_code_failure(self) -> None:
        """Test a failed response code carries the error."""
        result = parse_cgm_specific_ops_control_point(b"\x1c\x1b\x04")
        assert isinstance(result, ResponseCodeResponse)
        assert result.request_code is CGMOpCode.STOP_SESSION
        assert result.error_code == 4
        assert result.error is CGMErrorCode.PROCEDURE_NOT_COMPLETED
        assert not result.is_operation_completed

    def test_response_code_reserved_values(self) -> None:
        """Test reserved request and response codes are kept raw."""
        result = parse_cgm_specific_ops_control_point(b"\x1c\x7f\x7f")
        assert isinstance(result, ResponseCodeResponse)
        assert result.request_code is None
        assert result.error_code == 0x7F
        assert result.error is None
        assert not result.is_operation_completed

    @pytest.mark.parametrize(
        "value",
        [
            b"",
            b"\x03",  # Too short
            b"\x01\x05",  # Request op code
            b"\xfe\x05",  # Reserved op code
            b"\x03\x05\x00",  # One byte too many
            b"\x1c\x1a",  # Response code without value
            TEST_CALIBRATION_RESPONSE[:-1],  # Truncated calibration
        ],
        ids=[
            "empty",
            "one_byte",
            "request_op_code",
            "reserved_op_code",
            "extra_byte",
            "short_response",
            "short_calibration",
        ],
    )
    def test_rejected(self, value: bytes) -> None:
        """Test unknown op codes and malformed values return None."""
        assert parse_cgm_specific_ops_control_point(value) is None
