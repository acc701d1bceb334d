"""Bluetooth Date Time field decoding.

The Date Time field (org.bluetooth.characteristic.date_time) is embedded in
several measurement records (glucose, blood pressure, temperature). It is 7
bytes long:

    Offset  Size  Field    Notes
    0       2     Year     1582-9999, 0 = not known
    2       1     Month    1-12, 0 = not known
    3       1     Day      1-31, 0 = not known
    4       1     Hours    0-23
    5       1     Minutes  0-59
    6       1     Seconds  0-59

Reference: Bluetooth GATT Specification Supplement, section 3.70 (Date Time)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .data import ByteData
from .format import IntFormat

DATE_TIME_LENGTH = 7


@dataclass(frozen=True, kw_only=True)
class DateTime:
    """Decoded Date Time field.

    Date components the device does not know are None. Time components are
    always present. An optional minute offset (e.g. the glucose record time
    offset) is applied by to_datetime().
    """

    year: int | None
    month: int | None
    day: int | None
    hour: int
    minute: int
    second: int

    offset_minutes: int = 0

    @property
    def is_fully_specified(self) -> bool:
        """True if year, month and day are all known."""
        return self.year is not None and self.month is not None and self.day is not None

    def with_offset(self, minutes: int) -> DateTime:
        """Return a copy with an additional minute offset applied."""
        return DateTime(
            year=self.year,
            month=self.month,
            day=self.day,
            hour=self.hour,
            minute=self.minute,
            second=self.second,
            offset_minutes=self.offset_minutes + minutes,
        )

    def to_datetime(self) -> datetime:
        """Convert to a naive Python datetime (device local time).

        Raises:
            ValueError: If a date component is not known or components are out of range
        """
        if self.year is None or self.month is None or self.day is None:
            raise ValueError("Cannot convert DateTime with unknown date components to datetime")

        base = datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)
        return base + timedelta(minutes=self.offset_minutes)


def parse_date_time(data: ByteData, offset: int) -> DateTime | None:
    """Decode a Date Time field starting at offset.

    Args:
        data: Characteristic value
        offset: Offset of the Year field

    Returns:
        Decoded DateTime, or None if fewer than 7 bytes are available
    """
    if data.size < offset + DATE_TIME_LENGTH:
        return None

    year = data.get_int(IntFormat.UINT16_LE, offset)
    month = data.get_int(IntFormat.UINT8, offset + 2)
    day = data.get_int(IntFormat.UINT8, offset + 3)
    hour = data.get_int(IntFormat.UINT8, offset + 4)
    minute = data.get_int(IntFormat.UINT8, offset + 5)
    second = data.get_int(IntFormat.UINT8, offset + 6)

    if year is None or month is None or day is None or hour is None or minute is None or second is None:
        return None

    return DateTime(
        year=year or None,
        month=month or None,
        day=day or None,
        hour=hour,
        minute=minute,
        second=second,
    )
