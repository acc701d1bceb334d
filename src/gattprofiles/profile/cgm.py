"""Continuous Glucose Monitoring (CGM) characteristic decoders.

This module decodes the four CGM Service characteristics a collector reads
or receives notifications from. It provides:

Functions:
    - parse_cgm_features: CGM Feature characteristic (0x2AA8)
    - parse_cgm_status: CGM Status characteristic (0x2AA9)
    - parse_cgm_measurement: CGM Measurement characteristic (0x2AA7), multi-record
    - parse_cgm_specific_ops_control_point: CGM Specific Ops Control Point (0x2AAC)

Classes:
    - CGMFeatures, CGMFeaturesEnvelope: Decoded feature mask
    - CGMStatus, CGMStatusEnvelope: Sensor status annunciation
    - CGMRecord: One measurement record
    - CGMCalibrationStatus: Calibration status octet
    - CGMOpCode, CGMErrorCode: Specific Ops Control Point codes
    - CommunicationIntervalResponse, CalibrationValueResponse, AlertLevelResponse,
      ResponseCodeResponse, UnverifiedResponse: Control point response variants

E2E-CRC handling differs per characteristic:
    - Feature: CRC must match when E2E-CRC is supported, else be 0xFFFF
    - Status: a CRC mismatch rejects the value
    - Measurement: a CRC mismatch drops only the affected record
    - Specific Ops Control Point: a CRC mismatch yields UnverifiedResponse

Reference: Bluetooth Continuous Glucose Monitoring Service 1.0.1;
    Bluetooth Continuous Glucose Monitoring Profile 1.0.1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Flag
from functools import lru_cache

from ..protocol.common import CodedEnum
from ..protocol.crc import mcrf4xx
from ..protocol.data import ByteData
from ..protocol.format import FloatFormat, IntFormat

_LOGGER = logging.getLogger(__name__)

# =============================================================================
# CGM Constants
# =============================================================================


CGM_FEATURE_LENGTH = 6  # Features (3) + type/location (1) + E2E-CRC (2)
CGM_FEATURE_CRC_NOT_SUPPORTED = 0xFFFF  # E2E-CRC field value when E2E-CRC is not supported
CGM_FEATURE_MASK = 0x01FFFF  # Bits 0-16, bits 17-23 are reserved

CGM_STATUS_LENGTH = 5  # Time offset (2) + three status octets
CGM_CRC_LENGTH = 2

CGM_TYPE_MASK = 0x0F  # Low nibble: type
CGM_SAMPLE_LOCATION_SHIFT = 4  # High nibble: sample location

CGM_MEASUREMENT_MINIMUM_SIZE = 6  # Size + flags + concentration + time offset

CGM_MEASUREMENT_TREND_PRESENT = 0x01
CGM_MEASUREMENT_QUALITY_PRESENT = 0x02
CGM_MEASUREMENT_WARNING_OCTET_PRESENT = 0x20
CGM_MEASUREMENT_CAL_TEMP_OCTET_PRESENT = 0x40
CGM_MEASUREMENT_STATUS_OCTET_PRESENT = 0x80

CGM_RESPONSE_SUCCESS = 1


# =============================================================================
# Feature and Status Bit Definitions
# =============================================================================


class CGMFeatureFlag(Flag):
    """Bits of the 24-bit CGM Feature field."""

    CALIBRATION = 0x000001
    PATIENT_HIGH_LOW_ALERTS = 0x000002
    HYPO_ALERTS = 0x000004
    HYPER_ALERTS = 0x000008
    RATE_OF_INCREASE_DECREASE_ALERTS = 0x000010
    DEVICE_SPECIFIC_ALERT = 0x000020
    SENSOR_MALFUNCTION_DETECTION = 0x000040
    SENSOR_TEMP_HIGH_LOW_DETECTION = 0x000080
    SENSOR_RESULT_HIGH_LOW_DETECTION = 0x000100
    LOW_BATTERY_DETECTION = 0x000200
    SENSOR_TYPE_ERROR_DETECTION = 0x000400
    GENERAL_DEVICE_FAULT = 0x000800
    E2E_CRC = 0x001000
    MULTIPLE_BOND = 0x002000
    MULTIPLE_SESSIONS = 0x004000
    CGM_TREND_INFORMATION = 0x008000
    CGM_QUALITY = 0x010000


@dataclass(frozen=True, kw_only=True)
class CGMFeatures:
    """Supported features of a CGM sensor."""

    calibration_supported: bool
    patient_high_low_alerts_supported: bool
    hypo_alerts_supported: bool
    hyper_alerts_supported: bool
    rate_of_increase_decrease_alerts_supported: bool
    device_specific_alert_supported: bool
    sensor_malfunction_detection_supported: bool
    sensor_temp_high_low_detection_supported: bool
    sensor_result_high_low_supported: bool
    low_battery_detection_supported: bool
    sensor_type_error_detection_supported: bool
    general_device_fault_supported: bool
    e2e_crc_supported: bool
    multiple_bond_supported: bool
    multiple_sessions_supported: bool
    cgm_trend_info_supported: bool
    cgm_quality_info_supported: bool

    @classmethod
    def from_value(cls, value: int) -> CGMFeatures:
        """Unpack the 24-bit feature mask. Reserved bits are ignored."""
        flags = CGMFeatureFlag(value & CGM_FEATURE_MASK)
        return cls(
            calibration_supported=CGMFeatureFlag.CALIBRATION in flags,
            patient_high_low_alerts_supported=CGMFeatureFlag.PATIENT_HIGH_LOW_ALERTS in flags,
            hypo_alerts_supported=CGMFeatureFlag.HYPO_ALERTS in flags,
            hyper_alerts_supported=CGMFeatureFlag.HYPER_ALERTS in flags,
            rate_of_increase_decrease_alerts_supported=CGMFeatureFlag.RATE_OF_INCREASE_DECREASE_ALERTS in flags,
            device_specific_alert_supported=CGMFeatureFlag.DEVICE_SPECIFIC_ALERT in flags,
            sensor_malfunction_detection_supported=CGMFeatureFlag.SENSOR_MALFUNCTION_DETECTION in flags,
            sensor_temp_high_low_detection_supported=CGMFeatureFlag.SENSOR_TEMP_HIGH_LOW_DETECTION in flags,
            sensor_result_high_low_supported=CGMFeatureFlag.SENSOR_RESULT_HIGH_LOW_DETECTION in flags,
            low_battery_detection_supported=CGMFeatureFlag.LOW_BATTERY_DETECTION in flags,
            sensor_type_error_detection_supported=CGMFeatureFlag.SENSOR_TYPE_ERROR_DETECTION in flags,
            general_device_fault_supported=CGMFeatureFlag.GENERAL_DEVICE_FAULT in flags,
            e2e_crc_supported=CGMFeatureFlag.E2E_CRC in flags,
            multiple_bond_supported=CGMFeatureFlag.MULTIPLE_BOND in flags,
            multiple_sessions_supported=CGMFeatureFlag.MULTIPLE_SESSIONS in flags,
            cgm_trend_info_supported=CGMFeatureFlag.CGM_TREND_INFORMATION in flags,
            cgm_quality_info_supported=CGMFeatureFlag.CGM_QUALITY in flags,
        )


@dataclass(frozen=True, kw_only=True)
class CGMFeaturesEnvelope:
    features: CGMFeatures
    type: int  # Low nibble of the type/sample location octet
    sample_location: int  # High nibble of the type/sample location octet
    secured: bool
    crc_valid: bool


@dataclass(frozen=True, kw_only=True)
class CGMStatus:
    """Sensor Status Annunciation, unpacked from the warning, cal/temp and status octets."""

    # Warning octet
    session_stopped: bool
    device_battery_low: bool
    sensor_type_incorrect_for_device: bool
    sensor_malfunction: bool
    device_specific_alert: bool
    general_device_fault: bool

    # Calibration/temperature octet
    time_sync_required: bool
    calibration_not_allowed: bool
    calibration_recommended: bool
    calibration_required: bool
    sensor_temperature_too_high: bool
    sensor_temperature_too_low: bool

    # Status octet
    sensor_result_lower_than_patient_low_level: bool
    sensor_result_higher_than_patient_high_level: bool
    sensor_result_lower_than_hypo_level: bool
    sensor_result_higher_than_hyper_level: bool
    sensor_rate_of_decrease_exceeded: bool
    sensor_rate_of_increase_exceeded: bool
    sensor_result_lower_than_device_can_process: bool
    sensor_result_higher_than_device_can_process: bool

    @classmethod
    def from_octets(cls, warning: int, calibration_temp: int, sensor: int) -> CGMStatus:
        return cls(
            session_stopped=bool(warning & 0x01),
            device_battery_low=bool(warning & 0x02),
            sensor_type_incorrect_for_device=bool(warning & 0x04),
            sensor_malfunction=bool(warning & 0x08),
            device_specific_alert=bool(warning & 0x10),
            general_device_fault=bool(warning & 0x20),
            time_sync_required=bool(calibration_temp & 0x01),
            calibration_not_allowed=bool(calibration_temp & 0x02),
            calibration_recommended=bool(calibration_temp & 0x04),
            calibration_required=bool(calibration_temp & 0x08),
            sensor_temperature_too_high=bool(calibration_temp & 0x10),
            sensor_temperature_too_low=bool(calibration_temp & 0x20),
            sensor_result_lower_than_patient_low_level=bool(sensor & 0x01),
            sensor_result_higher_than_patient_high_level=bool(sensor & 0x02),
            sensor_result_lower_than_hypo_level=bool(sensor & 0x04),
            sensor_result_higher_than_hyper_level=bool(sensor & 0x08),
            sensor_rate_of_decrease_exceeded=bool(sensor & 0x10),
            sensor_rate_of_increase_exceeded=bool(sensor & 0x20),
            sensor_result_lower_than_device_can_process=bool(sensor & 0x40),
            sensor_result_higher_than_device_can_process=bool(sensor & 0x80),
        )


@dataclass(frozen=True, kw_only=True)
class CGMStatusEnvelope:
    status: CGMStatus
    time_offset: int  # Minutes since session start
    secured: bool
    crc_valid: bool


@dataclass(frozen=True, kw_only=True)
class CGMRecord:
    """One CGM Measurement record.

    Attributes:
        glucose_concentration: Concentration in mg/dL
        trend: Rate of change in mg/dL/min, if present
        quality: Quality in percent, if present
        status: Sensor status annunciation, if any status octet was present
        time_offset: Minutes since session start
        crc_present: True if the record carried a (valid) E2E-CRC
    """

    glucose_concentration: float
    trend: float | None
    quality: float | None
    status: CGMStatus | None
    time_offset: int
    crc_present: bool


@dataclass(frozen=True, kw_only=True)
class CGMCalibrationStatus:
    rejected: bool
    data_out_of_range: bool
    process_pending: bool

    @classmethod
    def from_value(cls, value: int) -> CGMCalibrationStatus:
        return cls(
            rejected=bool(value & 0x01),
            data_out_of_range=bool(value & 0x02),
            process_pending=bool(value & 0x04),
        )


# =============================================================================
# Specific Ops Control Point Codes
# =============================================================================


class CGMOpCode(CodedEnum):
    """CGM Specific Ops Control Point op codes."""

    SET_COMMUNICATION_INTERVAL = 1
    GET_COMMUNICATION_INTERVAL = 2
    COMMUNICATION_INTERVAL_RESPONSE = 3
    SET_CALIBRATION_VALUE = 4
    GET_CALIBRATION_VALUE = 5
    CALIBRATION_VALUE_RESPONSE = 6
    SET_PATIENT_HIGH_ALERT_LEVEL = 7
    GET_PATIENT_HIGH_ALERT_LEVEL = 8
    PATIENT_HIGH_ALERT_LEVEL_RESPONSE = 9
    SET_PATIENT_LOW_ALERT_LEVEL = 10
    GET_PATIENT_LOW_ALERT_LEVEL = 11
    PATIENT_LOW_ALERT_LEVEL_RESPONSE = 12
    SET_HYPO_ALERT_LEVEL = 13
    GET_HYPO_ALERT_LEVEL = 14
    HYPO_ALERT_LEVEL_RESPONSE = 15
    SET_HYPER_ALERT_LEVEL = 16
    GET_HYPER_ALERT_LEVEL = 17
    HYPER_ALERT_LEVEL_RESPONSE = 18
    SET_RATE_OF_DECREASE_ALERT_LEVEL = 19
    GET_RATE_OF_DECREASE_ALERT_LEVEL = 20
    RATE_OF_DECREASE_ALERT_LEVEL_RESPONSE = 21
    SET_RATE_OF_INCREASE_ALERT_LEVEL = 22
    GET_RATE_OF_INCREASE_ALERT_LEVEL = 23
    RATE_OF_INCREASE_ALERT_LEVEL_RESPONSE = 24
    RESET_DEVICE_SPECIFIC_ALERT = 25
    START_SESSION = 26
    STOP_SESSION = 27
    RESPONSE_CODE = 28


class CGMErrorCode(CodedEnum):
    """Response code values of the CGM Specific Ops Control Point."""

    SUCCESS = 1
    OP_CODE_NOT_SUPPORTED = 2
    INVALID_OPERAND = 3
    PROCEDURE_NOT_COMPLETED = 4
    PARAMETER_OUT_OF_RANGE = 5


@dataclass(frozen=True, kw_only=True)
class _ResponseDescriptor:
    op_code: CGMOpCode  # Response op code
    operand_size: int  # Operand length in bytes, excluding op code and E2E-CRC
    request_code: CGMOpCode | None = None  # Request answered by this response


_ResponseTable: tuple[_ResponseDescriptor, ...] = (
    _ResponseDescriptor(
        op_code=CGMOpCode.COMMUNICATION_INTERVAL_RESPONSE,
        operand_size=1,
        request_code=CGMOpCode.SET_COMMUNICATION_INTERVAL,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.CALIBRATION_VALUE_RESPONSE,
        operand_size=10,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.PATIENT_HIGH_ALERT_LEVEL_RESPONSE,
        operand_size=2,
        request_code=CGMOpCode.SET_PATIENT_HIGH_ALERT_LEVEL,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.PATIENT_LOW_ALERT_LEVEL_RESPONSE,
        operand_size=2,
        request_code=CGMOpCode.SET_PATIENT_LOW_ALERT_LEVEL,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.HYPO_ALERT_LEVEL_RESPONSE,
        operand_size=2,
        request_code=CGMOpCode.SET_HYPO_ALERT_LEVEL,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.HYPER_ALERT_LEVEL_RESPONSE,
        operand_size=2,
        request_code=CGMOpCode.SET_HYPER_ALERT_LEVEL,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.RATE_OF_DECREASE_ALERT_LEVEL_RESPONSE,
        operand_size=2,
        request_code=CGMOpCode.SET_RATE_OF_DECREASE_ALERT_LEVEL,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.RATE_OF_INCREASE_ALERT_LEVEL_RESPONSE,
        operand_size=2,
        request_code=CGMOpCode.SET_RATE_OF_INCREASE_ALERT_LEVEL,
    ),
    _ResponseDescriptor(
        op_code=CGMOpCode.RESPONSE_CODE,
        operand_size=2,  # Request op code + response code value
    ),
)


@lru_cache(maxsize=32)
def _find_response_descriptor(op_code: int) -> _ResponseDescriptor | None:
    """Find the response descriptor for an op code, or None if it is not a response."""
    for descriptor in _ResponseTable:
        if descriptor.op_code.value == op_code:
            return descriptor
    return None


# =============================================================================
# Specific Ops Control Point Responses
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class _ControlPointResponse:
    secured: bool
    crc_valid: bool
    is_operation_completed: bool = True


@dataclass(frozen=True, kw_only=True)
class CommunicationIntervalResponse(_ControlPointResponse):
    glucose_communication_interval: int  # Minutes, 0 = disabled, 0xFF = fastest

    request_code: CGMOpCode = CGMOpCode.SET_COMMUNICATION_INTERVAL


@dataclass(frozen=True, kw_only=True)
class CalibrationValueResponse(_ControlPointResponse):
    glucose_concentration_of_calibration: float  # mg/dL
    calibration_time: int  # Minutes since session start
    next_calibration_time: int  # Minutes since session start
    type: int
    sample_location: int
    calibration_data_record_number: int
    calibration_status: CGMCalibrationStatus


@dataclass(frozen=True, kw_only=True)
class AlertLevelResponse(_ControlPointResponse):
    request_code: CGMOpCode  # The SET_*_ALERT_LEVEL request being answered
    alert_level: float


@dataclass(frozen=True, kw_only=True)
class ResponseCodeResponse(_ControlPointResponse):
    """Generic response to a control point request.

    Attributes:
        request_code: The request op code, or None for a reserved value
        response_code: Raw response code value
        error_code: Raw response code when the request failed, None on success
    """

    request_code: CGMOpCode | None
    response_code: int
    error_code: int | None = None

    @property
    def error(self) -> CGMErrorCode | None:
        """The failure reason as CGMErrorCode, if it is a known value."""
        if self.error_code is None:
            return None
        return CGMErrorCode.from_code(self.error_code)


@dataclass(frozen=True, kw_only=True)
class UnverifiedResponse(_ControlPointResponse):
    """A response of known shape whose E2E-CRC did not match."""

    op_code: CGMOpCode
    secured: bool = True
    crc_valid: bool = False
    is_operation_completed: bool = False


CGMSpecificOpsControlPointData = (
    CommunicationIntervalResponse
    | CalibrationValueResponse
    | AlertLevelResponse
    | ResponseCodeResponse
    | UnverifiedResponse
)


# =============================================================================
# Helper Functions
# =============================================================================


def _split_type_and_location(value: int) -> tuple[int, int]:
    return value & CGM_TYPE_MASK, value >> CGM_SAMPLE_LOCATION_SHIFT


def _crc_matches(data: ByteData, length: int) -> bool:
    """Check the E2E-CRC stored right after the first length bytes."""
    expected_crc = data.get_int(IntFormat.UINT16_LE, length)
    return expected_crc is not None and expected_crc == mcrf4xx(data.value, 0, length)


# =============================================================================
# Parsers
# =============================================================================


def parse_cgm_features(data: ByteData | bytes | bytearray | memoryview) -> CGMFeaturesEnvelope | None:
    """Decode a CGM Feature value.

    Layout: features (UINT24) @0, type/sample location @3, E2E-CRC (UINT16) @4.

    When the sensor does not support E2E-CRC the CRC field must hold 0xFFFF.

    Args:
        data: Characteristic value (exactly 6 bytes)

    Returns:
        Decoded features, or None if the value is malformed
    """
    data = ByteData.wrap(data)

    if data.size != CGM_FEATURE_LENGTH:
        _LOGGER.debug("CGM Feature rejected: expected %d bytes, got %d", CGM_FEATURE_LENGTH, data.size)
        return None

    features_value = data.get_int(IntFormat.UINT24_LE, 0)
    type_and_location = data.get_int(IntFormat.UINT8, 3)
    expected_crc = data.get_int(IntFormat.UINT16_LE, 4)
    if features_value is None or type_and_location is None or expected_crc is None:
        return None

    features = CGMFeatures.from_value(features_value)

    if features.e2e_crc_supported:
        actual_crc = mcrf4xx(data.value, 0, 4)
        if actual_crc != expected_crc:
            _LOGGER.debug("CGM Feature rejected: CRC 0x%04X does not match 0x%04X", expected_crc, actual_crc)
            return None
    elif expected_crc != CGM_FEATURE_CRC_NOT_SUPPORTED:
        _LOGGER.debug("CGM Feature rejected: CRC field 0x%04X without E2E-CRC support", expected_crc)
        return None

    cgm_type, sample_location = _split_type_and_location(type_and_location)

    return CGMFeaturesEnvelope(
        features=features,
        type=cgm_type,
        sample_location=sample_location,
        secured=features.e2e_crc_supported,
        crc_valid=features.e2e_crc_supported,
    )


def parse_cgm_status(data: ByteData | bytes | bytearray | memoryview) -> CGMStatusEnvelope | None:
    """Decode a CGM Status value (5 bytes, or 7 bytes with E2E-CRC)."""
    data = ByteData.wrap(data)

    if data.size not in (CGM_STATUS_LENGTH, CGM_STATUS_LENGTH + CGM_CRC_LENGTH):
        _LOGGER.debug("CGM Status rejected: unexpected length %d", data.size)
        return None

    time_offset = data.get_int(IntFormat.UINT16_LE, 0)
    warning = data.get_int(IntFormat.UINT8, 2)
    calibration_temp = data.get_int(IntFormat.UINT8, 3)
    sensor = data.get_int(IntFormat.UINT8, 4)
    if time_offset is None or warning is None or calibration_temp is None or sensor is None:
        return None

    crc_present = data.size == CGM_STATUS_LENGTH + CGM_CRC_LENGTH
    if crc_present and not _crc_matches(data, CGM_STATUS_LENGTH):
        _LOGGER.debug("CGM Status rejected: CRC mismatch")
        return None

    return CGMStatusEnvelope(
        status=CGMStatus.from_octets(warning, calibration_temp, sensor),
        time_offset=time_offset,
        secured=crc_present,
        crc_valid=crc_present,
    )


def parse_cgm_measurement(data: ByteData | bytes | bytearray | memoryview) -> list[CGMRecord] | None:
    """Decode all CGM Measurement records packed into one value.

    Each record starts with its own size byte, so several records may follow
    each other in a single notification. A record whose E2E-CRC does not match
    is dropped and decoding continues with the next one. Any structural error
    (size byte out of range, size not matching the flags) rejects the whole
    value.

    Record layout:
        Offset  Size  Field
        0       1     Size (including this byte and the optional E2E-CRC)
        1       1     Flags
        2       2     Glucose concentration (SFLOAT, mg/dL)
        4       2     Time offset (UINT16, minutes)
        6       0-3   Sensor status annunciation (warning, cal/temp, status)
        ...     0-2   Trend (SFLOAT)
        ...     0-2   Quality (SFLOAT)
        ...     0-2   E2E-CRC

    Args:
        data: Characteristic value

    Returns:
        Records in stream order (possibly empty if every record failed its
        CRC), or None if the value is empty or malformed
    """
    data = ByteData.wrap(data)

    if data.size < 1:
        return None

    records: list[CGMRecord] = []
    offset = 0

    while offset < data.size:
        record_start = offset

        size = data.get_int(IntFormat.UINT8, offset)
        if size is None or size < CGM_MEASUREMENT_MINIMUM_SIZE or offset + size > data.size:
            _LOGGER.debug("CGM Measurement rejected: invalid record size %s at offset %d", size, offset)
            return None

        flags = data.get_int(IntFormat.UINT8, offset + 1)
        if flags is None:
            return None

        trend_present = bool(flags & CGM_MEASUREMENT_TREND_PRESENT)
        quality_present = bool(flags & CGM_MEASUREMENT_QUALITY_PRESENT)
        warning_present = bool(flags & CGM_MEASUREMENT_WARNING_OCTET_PRESENT)
        cal_temp_present = bool(flags & CGM_MEASUREMENT_CAL_TEMP_OCTET_PRESENT)
        status_present = bool(flags & CGM_MEASUREMENT_STATUS_OCTET_PRESENT)

        data_size = (
            CGM_MEASUREMENT_MINIMUM_SIZE
            + (2 if trend_present else 0)
            + (2 if quality_present else 0)
            + (1 if warning_present else 0)
            + (1 if cal_temp_present else 0)
            + (1 if status_present else 0)
        )

        if size not in (data_size, data_size + CGM_CRC_LENGTH):
            _LOGGER.debug("CGM Measurement rejected: size %d does not match flags 0x%02X", size, flags)
            return None

        crc_present = size == data_size + CGM_CRC_LENGTH
        if crc_present:
            expected_crc = data.get_int(IntFormat.UINT16_LE, record_start + data_size)
            actual_crc = mcrf4xx(data.value, record_start, data_size)
            if expected_crc != actual_crc:
                _LOGGER.debug("CGM Measurement record at offset %d skipped: CRC mismatch", record_start)
                offset = record_start + size
                continue

        offset += 2

        glucose_concentration = data.get_float(FloatFormat.SFLOAT, offset)
        offset += 2

        time_offset = data.get_int(IntFormat.UINT16_LE, offset)
        offset += 2

        if glucose_concentration is None or time_offset is None:
            return None

        warning = calibration_temp = sensor = 0
        if warning_present:
            warning = data.get_int(IntFormat.UINT8, offset) or 0
            offset += 1
        if cal_temp_present:
            calibration_temp = data.get_int(IntFormat.UINT8, offset) or 0
            offset += 1
        if status_present:
            sensor = data.get_int(IntFormat.UINT8, offset) or 0
            offset += 1

        status = None
        if warning_present or cal_temp_present or status_present:
            status = CGMStatus.from_octets(warning, calibration_temp, sensor)

        trend = None
        if trend_present:
            trend = data.get_float(FloatFormat.SFLOAT, offset)
            offset += 2

        quality = None
        if quality_present:
            quality = data.get_float(FloatFormat.SFLOAT, offset)
            offset += 2

        if crc_present:
            offset += CGM_CRC_LENGTH

        records.append(
            CGMRecord(
                glucose_concentration=glucose_concentration,
                trend=trend,
                quality=quality,
                status=status,
                time_offset=time_offset,
                crc_present=crc_present,
            )
        )

    return records


def parse_cgm_specific_ops_control_point(
    data: ByteData | bytes | bytearray | memoryview,
) -> CGMSpecificOpsControlPointData | None:
    """Decode a CGM Specific Ops Control Point indication.

    Only response op codes are decoded. The value is op code + operand,
    optionally followed by an E2E-CRC over both.

    Args:
        data: Characteristic value (at least 2 bytes)

    Returns:
        One of the response variants, UnverifiedResponse if the E2E-CRC does
        not match, or None for unknown op codes and malformed values
    """
    data = ByteData.wrap(data)

    if data.size < 2:
        return None

    op_code = data.get_int(IntFormat.UINT8, 0)
    if op_code is None:
        return None

    descriptor = _find_response_descriptor(op_code)
    if descriptor is None:
        _LOGGER.debug("CGM Specific Ops Control Point rejected: unsupported op code %d", op_code)
        return None

    payload_length = 1 + descriptor.operand_size
    if data.size not in (payload_length, payload_length + CGM_CRC_LENGTH):
        _LOGGER.debug(
            "CGM Specific Ops Control Point rejected: length %d invalid for %s", data.size, descriptor.op_code.name
        )
        return None

    crc_present = data.size == payload_length + CGM_CRC_LENGTH
    if crc_present and not _crc_matches(data, payload_length):
        _LOGGER.debug("CGM Specific Ops Control Point %s not verified: CRC mismatch", descriptor.op_code.name)
        return UnverifiedResponse(op_code=descriptor.op_code)

    if descriptor.op_code is CGMOpCode.COMMUNICATION_INTERVAL_RESPONSE:
        interval = data.get_int(IntFormat.UINT8, 1)
        if interval is None:
            return None
        return CommunicationIntervalResponse(
            glucose_communication_interval=interval,
            secured=crc_present,
            crc_valid=crc_present,
        )

    if descriptor.op_code is CGMOpCode.CALIBRATION_VALUE_RESPONSE:
        concentration = data.get_float(FloatFormat.SFLOAT, 1)
        calibration_time = data.get_int(IntFormat.UINT16_LE, 3)
        type_and_location = data.get_int(IntFormat.UINT8, 5)
        next_calibration_time = data.get_int(IntFormat.UINT16_LE, 6)
        record_number = data.get_int(IntFormat.UINT16_LE, 8)
        calibration_status = data.get_int(IntFormat.UINT8, 10)
        if (
            concentration is None
            or calibration_time is None
            or type_and_location is None
            or next_calibration_time is None
            or record_number is None
            or calibration_status is None
        ):
            return None

        calibration_type, sample_location = _split_type_and_location(type_and_location)
        return CalibrationValueResponse(
            glucose_concentration_of_calibration=concentration,
            calibration_time=calibration_time,
            next_calibration_time=next_calibration_time,
            type=calibration_type,
            sample_location=sample_location,
            calibration_data_record_number=record_number,
            calibration_status=CGMCalibrationStatus.from_value(calibration_status),
            secured=crc_present,
            crc_valid=crc_present,
        )

    if descriptor.op_code is CGMOpCode.RESPONSE_CODE:
        request_code = data.get_int(IntFormat.UINT8, 1)
        response_code = data.get_int(IntFormat.UINT8, 2)
        if request_code is None or response_code is None:
            return None

        success = response_code == CGM_RESPONSE_SUCCESS
        return ResponseCodeResponse(
            request_code=CGMOpCode.from_code(request_code),
            response_code=response_code,
            error_code=None if success else response_code,
            is_operation_completed=success,
            secured=crc_present,
            crc_valid=crc_present,
        )

    # Remaining descriptors are the six alert level responses
    alert_level = data.get_float(FloatFormat.SFLOAT, 1)
    if alert_level is None or descriptor.request_code is None:
        return None

    return AlertLevelResponse(
        request_code=descriptor.request_code,
        alert_level=alert_level,
        secured=crc_present,
        crc_valid=crc_present,
    )
