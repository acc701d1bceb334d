"""Profile decoders for Bluetooth SIG GATT characteristics.

Every parse_* function accepts one characteristic value and returns an
immutable record, or None when the value cannot be decoded.

Reference: Bluetooth GATT Specification Supplement
"""

from .basic import AlertLevel, parse_alert_level, parse_battery_level
from .bps import (
    BloodPressureMeasurementData,
    IntermediateCuffPressureData,
    parse_blood_pressure_measurement,
    parse_intermediate_cuff_pressure,
)
from .cgm import (
    CGMFeaturesEnvelope,
    CGMRecord,
    CGMSpecificOpsControlPointData,
    CGMStatusEnvelope,
    parse_cgm_features,
    parse_cgm_measurement,
    parse_cgm_specific_ops_control_point,
    parse_cgm_status,
)
from .gls import GLSMeasurementContext, GLSRecord, parse_glucose_measurement, parse_glucose_measurement_context
from .hrs import BodySensorLocation, HRSData, parse_body_sensor_location, parse_heart_rate_measurement
from .hts import HTSData, parse_temperature_measurement
from .racp import (
    NumberOfRecordsData,
    RecordAccessControlPointData,
    ResponseData,
    parse_record_access_control_point,
)
from .rscs import RSCSData, parse_rscs_measurement

__all__ = [
    # CGM
    "CGMFeaturesEnvelope",
    "CGMRecord",
    "CGMSpecificOpsControlPointData",
    "CGMStatusEnvelope",
    "parse_cgm_features",
    "parse_cgm_measurement",
    "parse_cgm_specific_ops_control_point",
    "parse_cgm_status",
    # GLS
    "GLSMeasurementContext",
    "GLSRecord",
    "parse_glucose_measurement",
    "parse_glucose_measurement_context",
    # RACP
    "NumberOfRecordsData",
    "RecordAccessControlPointData",
    "ResponseData",
    "parse_record_access_control_point",
    # RSCS
    "RSCSData",
    "parse_rscs_measurement",
    # BPS
    "BloodPressureMeasurementData",
    "IntermediateCuffPressureData",
    "parse_blood_pressure_measurement",
    "parse_intermediate_cuff_pressure",
    # HRS
    "BodySensorLocation",
    "HRSData",
    "parse_body_sensor_location",
    "parse_heart_rate_measurement",
    # HTS
    "HTSData",
    "parse_temperature_measurement",
    # Battery and alert level
    "AlertLevel",
    "parse_alert_level",
    "parse_battery_level",
]
