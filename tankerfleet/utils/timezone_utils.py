"""
Timezone utility functions for the tanker fleet backend.

Timestamps are stored as naive UTC in the database. Monthly payouts and
per-day trip counts are reported in the configured display timezone
(DISPLAY_TIMEZONE, default Asia/Kolkata), so every month/day boundary goes
through the helpers here.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple, Union

import pytz
from flask import current_app, has_app_context

DEFAULT_DISPLAY_TIMEZONE = "Asia/Kolkata"


def get_display_timezone() -> str:
    """
    Get the configured display timezone name.
    Falls back to Asia/Kolkata outside an application context.
    """
    if has_app_context():
        return current_app.config.get('DISPLAY_TIMEZONE', DEFAULT_DISPLAY_TIMEZONE)
    return DEFAULT_DISPLAY_TIMEZONE


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return `dt` as an aware UTC datetime. Naive values are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def as_naive_utc(dt: datetime) -> datetime:
    """Normalise a datetime for storage in a naive UTC DateTime column."""
    return ensure_utc(dt).replace(tzinfo=None)


def convert_utc_to_display(utc_dt: Union[datetime, str]) -> datetime:
    """
    Convert a UTC datetime (or ISO string) to the display timezone.

    Args:
        utc_dt: UTC datetime object or ISO string. Naive values are UTC.

    Returns:
        Datetime object in the display timezone
    """
    if isinstance(utc_dt, str):
        utc_dt = datetime.fromisoformat(utc_dt.replace('Z', '+00:00'))
    display_tz = pytz.timezone(get_display_timezone())
    return ensure_utc(utc_dt).astimezone(display_tz)


def convert_display_to_utc(display_dt: datetime) -> datetime:
    """
    Convert a datetime in the display timezone to UTC.
    Naive values are localized to the display timezone first.
    """
    if display_dt.tzinfo is None:
        display_tz = pytz.timezone(get_display_timezone())
        display_dt = display_tz.localize(display_dt, is_dst=None)
    return display_dt.astimezone(timezone.utc)


def local_date(dt: datetime) -> date:
    """Calendar date of a stored timestamp in the display timezone."""
    return convert_utc_to_display(dt).date()


def month_key(value: Union[date, datetime]) -> str:
    """'YYYY-MM' for a date, or for a stored timestamp in the display timezone."""
    if isinstance(value, datetime):
        value = local_date(value)
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(key: str) -> Tuple[int, int]:
    """
    Parse a 'YYYY-MM' month key.

    Raises:
        ValueError: if the key is malformed or the month is out of range
    """
    try:
        year_str, month_str = key.split('-')
        year, month = int(year_str), int(month_str)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid month key: {key!r}. Expected YYYY-MM.")
    if len(year_str) != 4 or not 1 <= month <= 12:
        raise ValueError(f"Invalid month key: {key!r}. Expected YYYY-MM.")
    return year, month


def shift_month(key: str, offset: int) -> str:
    """Month key `offset` months after (negative: before) `key`."""
    year, month = parse_month_key(key)
    index = year * 12 + (month - 1) + offset
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def month_bounds_utc(key: str) -> Tuple[datetime, datetime]:
    """
    Half-open [start, end) bounds of a display-timezone month, as naive UTC
    datetimes suitable for filtering stored timestamps.
    """
    year, month = parse_month_key(key)
    next_year, next_month = parse_month_key(shift_month(key, 1))
    start = convert_display_to_utc(datetime(year, month, 1))
    end = convert_display_to_utc(datetime(next_year, next_month, 1))
    return as_naive_utc(start), as_naive_utc(end)


def day_bounds_utc(start_day: date, end_day: date) -> Tuple[datetime, datetime]:
    """Half-open naive UTC bounds covering display-timezone days start_day..end_day inclusive."""
    start = convert_display_to_utc(datetime(start_day.year, start_day.month, start_day.day))
    end = convert_display_to_utc(datetime(end_day.year, end_day.month, end_day.day))
    end = end + timedelta(days=1)
    return as_naive_utc(start), as_naive_utc(end)


def parse_datetime_string(dt_string: str) -> Optional[datetime]:
    """
    Parse a datetime string and return a timezone-aware datetime in UTC.
    Naive strings are taken to be in the display timezone.

    Raises:
        ValueError: if the string cannot be parsed
    """
    if not dt_string:
        return None

    try:
        dt = datetime.fromisoformat(dt_string.replace('Z', '+00:00'))
    except ValueError:
        for fmt in ['%Y-%m-%d %H:%M:%S', '%d/%m/%Y %H:%M', '%d/%m/%Y', '%d-%m-%Y']:
            try:
                dt = datetime.strptime(dt_string, fmt)
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"Unable to parse datetime string: {dt_string}")

    if dt.tzinfo is None:
        return convert_display_to_utc(dt)
    return dt.astimezone(timezone.utc)


def format_datetime_for_api(dt: Optional[datetime]) -> str:
    """ISO 8601 UTC string with a trailing Z, or "" for None."""
    if dt is None:
        return ""
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")
