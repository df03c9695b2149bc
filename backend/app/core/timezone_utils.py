"""
Timezone utilities for the MindBridge platform.

Session dates and slot times are wall-clock values in the platform timezone.
Everything that compares them against "now" goes through these helpers.
"""

from datetime import date, datetime, time
from typing import Optional

import pytz

from app.core.config import settings


def get_platform_timezone() -> pytz.BaseTzInfo:
    """Return the configured platform timezone as a pytz timezone object."""
    return pytz.timezone(settings.platform_timezone)


def platform_now() -> datetime:
    """
    Get current datetime in the platform timezone.

    Returns:
        Timezone-aware datetime
    """
    return datetime.now(get_platform_timezone())


def platform_today() -> date:
    """Get 'today' in the platform timezone."""
    return platform_now().date()


def parse_slot_time(value: str) -> time:
    """Parse an "HH:MM" slot label into a time."""
    return datetime.strptime(value, "%H:%M").time()


def format_slot_time(value: time) -> str:
    """Format a time as an "HH:MM" slot label."""
    return value.strftime("%H:%M")


def to_platform_datetime(
    day: date, slot_time: time | str, tz: Optional[pytz.BaseTzInfo] = None
) -> datetime:
    """
    Combine a session date and wall-clock time into an aware datetime.

    Args:
        day: Session date
        slot_time: time or "HH:MM" label
        tz: Override timezone, defaults to the platform timezone

    Returns:
        Localized datetime
    """
    if isinstance(slot_time, str):
        slot_time = parse_slot_time(slot_time)
    tz = tz or get_platform_timezone()
    return tz.localize(datetime.combine(day, slot_time))
