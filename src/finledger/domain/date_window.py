"""Date window presets and inclusive date-range filtering."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, TypeVar

from finledger.domain.entities import DateWindow
from finledger.domain.errors import InvalidRangeError, UnknownPresetError

T = TypeVar("T")

LAST_DAYS = 30


class DatePreset(str, Enum):
    """Supported date window presets."""

    THIS_MONTH = "this-month"
    LAST_30_DAYS = "last-30-days"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, token: "str | DatePreset") -> "DatePreset":
        """Parse a preset token.

        Raises:
            UnknownPresetError: If the token is not a supported preset
        """
        if isinstance(token, cls):
            return token
        normalized = str(token).strip().lower()
        for preset in cls:
            if preset.value == normalized:
                return preset
        supported = ", ".join(p.value for p in cls)
        raise UnknownPresetError(
            f"Unknown date preset: '{token}'. Supported presets: {supported}"
        )


def resolve_window(
    preset: "str | DatePreset",
    explicit_start: Optional[date] = None,
    explicit_end: Optional[date] = None,
    today: Optional[date] = None,
) -> DateWindow:
    """Get the date window for a preset.

    Args:
        preset: Preset token or DatePreset (this-month, last-30-days, custom)
        explicit_start: Start date, only used by the custom preset
        explicit_end: End date, only used by the custom preset
        today: Reference date, defaults to date.today()

    Returns:
        DateWindow with inclusive bounds

    Raises:
        UnknownPresetError: If preset is not recognized
        InvalidRangeError: If custom bounds are missing or start is after end
    """
    preset = DatePreset.parse(preset)
    if today is None:
        today = date.today()
    elif isinstance(today, datetime):
        today = today.date()

    if preset is DatePreset.THIS_MONTH:
        return DateWindow(start=today.replace(day=1), end=today)

    if preset is DatePreset.LAST_30_DAYS:
        return DateWindow(start=today - timedelta(days=LAST_DAYS), end=today)

    if explicit_start is None or explicit_end is None:
        raise InvalidRangeError("Custom date range requires both a start and an end date")
    if isinstance(explicit_start, datetime):
        explicit_start = explicit_start.date()
    if isinstance(explicit_end, datetime):
        explicit_end = explicit_end.date()
    if explicit_start > explicit_end:
        raise InvalidRangeError(
            f"Start date {explicit_start.isoformat()} is after end date {explicit_end.isoformat()}"
        )
    return DateWindow(start=explicit_start, end=explicit_end)


def filter_by_window(records: Iterable[T], window: DateWindow) -> list[T]:
    """Return the records dated inside the window, keeping their order.

    Records only need a ``date`` attribute.
    """
    return [record for record in records if window.contains(record.date)]
