"""Single-byte characteristic decoders.

Functions:
    - parse_battery_level: Battery Level (0x2A19), percent 0-100
    - parse_alert_level: Alert Level (0x2A06), used by Immediate Alert and Link Loss

Reference: Bluetooth Battery Service 1.0, section 3.1;
    Bluetooth Immediate Alert Service 1.0, section 3.1
"""

from __future__ import annotations

import logging

from ..protocol.common import CodedEnum
from ..protocol.data import ByteData
from ..protocol.format import IntFormat

_LOGGER = logging.getLogger(__name__)

BATTERY_LEVEL_MAXIMUM = 100


class AlertLevel(CodedEnum):
    NONE = 0x00
    MEDIUM = 0x01  # Mild alert
    HIGH = 0x02


def parse_battery_level(data: ByteData | bytes | bytearray | memoryview) -> int | None:
    """Decode a Battery Level value.

    Returns:
        Battery level in percent, or None if the value is not exactly one
        byte or exceeds 100
    """
    data = ByteData.wrap(data)

    if data.size != 1:
        return None

    level = data.get_int(IntFormat.UINT8, 0)
    if level is None or level > BATTERY_LEVEL_MAXIMUM:
        _LOGGER.debug("Battery Level rejected: %r", data)
        return None
    return level


def parse_alert_level(data: ByteData | bytes | bytearray | memoryview) -> AlertLevel | None:
    """Decode an Alert Level value, or None for reserved levels and wrong lengths."""
    data = ByteData.wrap(data)

    if data.size != 1:
        return None
    return AlertLevel.from_code(data.get_int(IntFormat.UINT8, 0))
