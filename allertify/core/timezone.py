"""Timezone helpers for the daily quota boundary and local scan timestamps."""

from datetime import date, datetime, time, timezone

import pytz


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def local_date(instant: datetime, tz_name: str) -> date:
    """Calendar date of `instant` as seen on a wall clock in `tz_name`."""
    return _as_utc(instant).astimezone(pytz.timezone(tz_name)).date()


def local_midnight_utc(day: date, tz_name: str) -> datetime:
    """UTC instant of 00:00 local time on `day`.

    `localize` applies the offset valid on that local date, so a DST change
    between midnight and "now" does not shift the boundary. In zones that
    skip midnight on a transition day, the standard offset maps 00:00 to the
    first wall-clock instant that exists.
    """
    tz = pytz.timezone(tz_name)
    midnight = tz.localize(datetime.combine(day, time.min), is_dst=False)
    return midnight.astimezone(timezone.utc)


def start_of_day_utc(instant: datetime, tz_name: str) -> datetime:
    """UTC instant of the local midnight that starts the day containing `instant`."""
    return local_midnight_utc(local_date(instant, tz_name), tz_name)


def format_in_timezone(instant: datetime, tz_name: str) -> str:
    """ISO-8601 with offset, e.g. 2025-08-19T15:10:21+07:00."""
    local = _as_utc(instant).astimezone(pytz.timezone(tz_name))
    return local.replace(microsecond=0).isoformat()
