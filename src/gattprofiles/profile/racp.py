"""Record Access Control Point (RACP) requests and responses.

The RACP characteristic (0x2A52) is shared by the Glucose, Continuous Glucose
Monitoring and other record-storing services. A collector writes a request
(op code, operator, optional filter) and the server indicates either the
number of matching records or a response code.

This module provides:

Classes:
    - RACPOpCode, RACPOperator, RACPResponseCode, RACPFilterType: Protocol codes
    - NumberOfRecordsData, ResponseData: Decoded responses

Functions:
    - parse_record_access_control_point: Decode an RACP indication
    - report_*, delete_*, report_number_of_*, abort_operation: Build RACP requests

Request layout:
    Offset  Size  Field
    0       1     Op code
    1       1     Operator
    2       1     Filter type (only for filtered operators)
    3       n     Operand (one value, or two for the range operator)

Reference: Bluetooth Glucose Service 1.0, section 3.109 (Record Access Control Point);
    Bluetooth GATT Specification Supplement, section 3.187
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..protocol.common import CodedEnum
from ..protocol.data import ByteData, MutableData
from ..protocol.format import IntFormat

_LOGGER = logging.getLogger(__name__)

# =============================================================================
# RACP Constants
# =============================================================================


RACP_MINIMUM_RESPONSE_LENGTH = 3  # Op code + operator + operand
RACP_RESPONSE_CODE_LENGTH = 4  # Op code + operator + request op code + response code

RACP_HEADER_LENGTH = 2  # Op code + operator
RACP_FILTER_TYPE_LENGTH = 1

# Width of the Number of Stored Records field depends on the service
_NUMBER_OF_RECORDS_FORMATS: dict[int, IntFormat] = {
    1: IntFormat.UINT8,
    2: IntFormat.UINT16_LE,
    4: IntFormat.UINT32_LE,
}


class RACPOpCode(CodedEnum):
    REPORT_STORED_RECORDS = 1
    DELETE_STORED_RECORDS = 2
    ABORT_OPERATION = 3
    REPORT_NUMBER_OF_STORED_RECORDS = 4
    NUMBER_OF_STORED_RECORDS_RESPONSE = 5
    RESPONSE_CODE = 6


class RACPOperator(CodedEnum):
    NULL = 0
    ALL_RECORDS = 1
    LESS_THAN_OR_EQUAL = 2
    GREATER_THAN_OR_EQUAL = 3
    WITHIN_RANGE = 4
    FIRST_RECORD = 5
    LAST_RECORD = 6


class RACPResponseCode(CodedEnum):
    SUCCESS = 1
    OP_CODE_NOT_SUPPORTED = 2
    INVALID_OPERATOR = 3
    OPERATOR_NOT_SUPPORTED = 4
    INVALID_OPERAND = 5
    NO_RECORDS_FOUND = 6
    ABORT_UNSUCCESSFUL = 7
    PROCEDURE_NOT_COMPLETED = 8
    OPERAND_NOT_SUPPORTED = 9


class RACPFilterType(Enum):
    SEQUENCE_NUMBER = 0x01
    USER_FACING_TIME = 0x02

    # Alias: CGMS filters by time offset using the sequence number filter code
    TIME_OFFSET = 0x01


# Response codes after which the request is finished from the collector's point of view
_COMPLETED_RESPONSE_CODES = frozenset({RACPResponseCode.SUCCESS, RACPResponseCode.NO_RECORDS_FOUND})


# =============================================================================
# RACP Responses
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class NumberOfRecordsData:
    """Response to REPORT_NUMBER_OF_STORED_RECORDS."""

    number_of_records: int

    operation_completed: bool = field(default=True, init=False)


@dataclass(frozen=True, kw_only=True)
class ResponseData:
    """Response code indication for a previous request.

    operation_completed is True for SUCCESS and NO_RECORDS_FOUND and False
    for every error response code.
    """

    request_code: RACPOpCode
    response_code: RACPResponseCode

    @property
    def operation_completed(self) -> bool:
        return self.response_code in _COMPLETED_RESPONSE_CODES


RecordAccessControlPointData = NumberOfRecordsData | ResponseData


def parse_record_access_control_point(
    data: ByteData | bytes | bytearray | memoryview,
) -> RecordAccessControlPointData | None:
    """Decode an RACP indication.

    Args:
        data: Characteristic value (at least 3 bytes)

    Returns:
        NumberOfRecordsData or ResponseData, or None for request op codes,
        a non-null operator, unsupported field widths or unknown codes
    """
    data = ByteData.wrap(data)

    if data.size < RACP_MINIMUM_RESPONSE_LENGTH:
        return None

    op_code = data.get_int(IntFormat.UINT8, 0)
    operator = data.get_int(IntFormat.UINT8, 1)
    if op_code is None or operator is None:
        return None

    if op_code not in (RACPOpCode.NUMBER_OF_STORED_RECORDS_RESPONSE.value, RACPOpCode.RESPONSE_CODE.value):
        _LOGGER.debug("RACP rejected: op code %d is not a response", op_code)
        return None

    if operator != RACPOperator.NULL.value:
        _LOGGER.debug("RACP rejected: operator %d in response", operator)
        return None

    if op_code == RACPOpCode.NUMBER_OF_STORED_RECORDS_RESPONSE.value:
        value_format = _NUMBER_OF_RECORDS_FORMATS.get(data.size - RACP_HEADER_LENGTH)
        if value_format is None:
            _LOGGER.debug("RACP rejected: unsupported number of records width %d", data.size - RACP_HEADER_LENGTH)
            return None

        number_of_records = data.get_int(value_format, RACP_HEADER_LENGTH)
        if number_of_records is None:
            return None
        return NumberOfRecordsData(number_of_records=number_of_records)

    if data.size != RACP_RESPONSE_CODE_LENGTH:
        _LOGGER.debug("RACP rejected: response code length %d", data.size)
        return None

    request_code = RACPOpCode.from_code(data.get_int(IntFormat.UINT8, 2))
    response_code = RACPResponseCode.from_code(data.get_int(IntFormat.UINT8, 3))
    if request_code is None or response_code is None:
        _LOGGER.debug("RACP rejected: unknown request or response code in %r", data)
        return None

    return ResponseData(request_code=request_code, response_code=response_code)


# =============================================================================
# RACP Request Builder
# =============================================================================


def _create(
    op_code: RACPOpCode,
    operator: RACPOperator,
    filter_type: RACPFilterType | None = None,
    value_format: IntFormat = IntFormat.UINT16_LE,
    operands: tuple[int, ...] = (),
) -> bytes:
    """Encode an RACP request.

    Args:
        op_code: Request op code
        operator: Record selection operator
        filter_type: Filter applied to operands (required when operands are given)
        value_format: Encoding of each operand
        operands: Zero, one or two filter values

    Returns:
        The request bytes to write to the RACP characteristic

    Raises:
        ValueError: If operands are given without a filter type
        GattEncodeError: If an operand does not fit value_format
    """
    length = RACP_HEADER_LENGTH
    if operands:
        if filter_type is None:
            raise ValueError("RACP operands require a filter type")
        length += RACP_FILTER_TYPE_LENGTH + len(operands) * value_format.length

    request = MutableData(length)
    request.set_byte(op_code.value, 0)
    request.set_byte(operator.value, 1)

    if operands and filter_type is not None:
        request.set_byte(filter_type.value, RACP_HEADER_LENGTH)

        offset = RACP_HEADER_LENGTH + RACP_FILTER_TYPE_LENGTH
        for operand in operands:
            request.set_value(operand, value_format, offset)
            offset += value_format.length

    return request.to_bytes()


# Report stored records


def report_all_stored_records() -> bytes:
    return _create(RACPOpCode.REPORT_STORED_RECORDS, RACPOperator.ALL_RECORDS)


def report_first_stored_record() -> bytes:
    return _create(RACPOpCode.REPORT_STORED_RECORDS, RACPOperator.FIRST_RECORD)


def report_last_stored_record() -> bytes:
    return _create(RACPOpCode.REPORT_STORED_RECORDS, RACPOperator.LAST_RECORD)


def report_stored_records_less_than_or_equal_to(
    parameter: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    """Request records whose filter value is <= parameter (sequence number by default)."""
    return _create(
        RACPOpCode.REPORT_STORED_RECORDS, RACPOperator.LESS_THAN_OR_EQUAL, filter_type, value_format, (parameter,)
    )


def report_stored_records_greater_than_or_equal_to(
    parameter: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    """Request records whose filter value is >= parameter (sequence number by default)."""
    return _create(
        RACPOpCode.REPORT_STORED_RECORDS, RACPOperator.GREATER_THAN_OR_EQUAL, filter_type, value_format, (parameter,)
    )


def report_stored_records_from_range(
    start: int,
    end: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    """Request records whose filter value lies within [start, end]."""
    return _create(
        RACPOpCode.REPORT_STORED_RECORDS, RACPOperator.WITHIN_RANGE, filter_type, value_format, (start, end)
    )


# Delete stored records


def delete_all_stored_records() -> bytes:
    return _create(RACPOpCode.DELETE_STORED_RECORDS, RACPOperator.ALL_RECORDS)


def delete_first_stored_record() -> bytes:
    return _create(RACPOpCode.DELETE_STORED_RECORDS, RACPOperator.FIRST_RECORD)


def delete_last_stored_record() -> bytes:
    return _create(RACPOpCode.DELETE_STORED_RECORDS, RACPOperator.LAST_RECORD)


def delete_stored_records_less_than_or_equal_to(
    parameter: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    return _create(
        RACPOpCode.DELETE_STORED_RECORDS, RACPOperator.LESS_THAN_OR_EQUAL, filter_type, value_format, (parameter,)
    )


def delete_stored_records_greater_than_or_equal_to(
    parameter: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    return _create(
        RACPOpCode.DELETE_STORED_RECORDS, RACPOperator.GREATER_THAN_OR_EQUAL, filter_type, value_format, (parameter,)
    )


def delete_stored_records_from_range(
    start: int,
    end: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    return _create(
        RACPOpCode.DELETE_STORED_RECORDS, RACPOperator.WITHIN_RANGE, filter_type, value_format, (start, end)
    )


# Report number of stored records


def report_number_of_all_stored_records() -> bytes:
    return _create(RACPOpCode.REPORT_NUMBER_OF_STORED_RECORDS, RACPOperator.ALL_RECORDS)


def report_number_of_stored_records_less_than_or_equal_to(
    parameter: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    return _create(
        RACPOpCode.REPORT_NUMBER_OF_STORED_RECORDS,
        RACPOperator.LESS_THAN_OR_EQUAL,
        filter_type,
        value_format,
        (parameter,),
    )


def report_number_of_stored_records_greater_than_or_equal_to(
    parameter: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    return _create(
        RACPOpCode.REPORT_NUMBER_OF_STORED_RECORDS,
        RACPOperator.GREATER_THAN_OR_EQUAL,
        filter_type,
        value_format,
        (parameter,),
    )


def report_number_of_stored_records_from_range(
    start: int,
    end: int,
    filter_type: RACPFilterType = RACPFilterType.SEQUENCE_NUMBER,
    value_format: IntFormat = IntFormat.UINT16_LE,
) -> bytes:
    return _create(
        RACPOpCode.REPORT_NUMBER_OF_STORED_RECORDS,
        RACPOperator.WITHIN_RANGE,
        filter_type,
        value_format,
        (start, end),
    )


def abort_operation() -> bytes:
    return _create(RACPOpCode.ABORT_OPERATION, RACPOperator.NULL)
