"""
Period ranges and the user's "today"

This is the boundary where instants become local calendar days. The engines
downstream only ever see "YYYY-MM-DD" strings and an injected ``today``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .calendar_keys import month_end, month_key_from_date, month_start, shift_month_key, split_date

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Bogota"

TODAY = "today"
LAST_7_DAYS = "7d"
WEEK = "week"
MONTH = "month"
PREVIOUS_MONTH = "prev_month"
PERIOD_KINDS = (TODAY, LAST_7_DAYS, WEEK, MONTH, PREVIOUS_MONTH)


@dataclass(frozen=True)
class DateRange:
    from_date: str
    to_date: str

    def contains(self, day: str) -> bool:
        return self.from_date <= day <= self.to_date

    def to_dict(self) -> Dict[str, str]:
        return {"from": self.from_date, "to": self.to_date}


def load_zone(name: Optional[str], fallback: str = DEFAULT_TIMEZONE) -> ZoneInfo:
    """Load an IANA zone, falling back (with a warning) when the name is unknown."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            LOGGER.warning(f"Unknown timezone {name!r}, using {fallback}")
    return ZoneInfo(fallback)


def resolve_today(timezone: Optional[str], now: Optional[datetime] = None,
                  fallback: str = DEFAULT_TIMEZONE) -> date:
    """
    Local calendar day for a user

    Args:
        timezone: IANA zone of the user, e.g. "America/Bogota"
        now: Instant to convert; naive values are read as UTC. Defaults to the
            system clock.
        fallback: Zone used when ``timezone`` is missing or unknown

    Returns:
        The user's local date
    """
    zone = load_zone(timezone, fallback)
    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=dt_timezone.utc)
    return now.astimezone(zone).date()


def _iso(day: date) -> str:
    return day.isoformat()


def period_range(kind: str, today: date) -> Optional[DateRange]:
    """Date range for a dashboard period as seen on ``today``; None for unknown kinds."""
    if kind == TODAY:
        return DateRange(_iso(today), _iso(today))

    if kind == LAST_7_DAYS:
        return DateRange(_iso(today - timedelta(days=6)), _iso(today))

    if kind == WEEK:
        monday = today - timedelta(days=today.weekday())
        sunday = monday + timedelta(days=6)
        return DateRange(_iso(monday), _iso(min(sunday, today)))

    if kind == MONTH:
        key = month_key_from_date(today)
        return DateRange(month_start(key), min(month_end(key), _iso(today)))

    if kind == PREVIOUS_MONTH:
        key = shift_month_key(month_key_from_date(today), -1)
        if key is None:
            return None
        return DateRange(month_start(key), month_end(key))

    return None


def _utc_iso(value: datetime) -> str:
    return value.astimezone(dt_timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_range_to_utc(from_date: str, to_date: str,
                       timezone: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Convert a local inclusive day range to UTC instants

    The start is 00:00:00.000 local on ``from_date`` and the end is
    23:59:59.999 local on ``to_date``, so the whole last day is included.
    """
    start_parts = split_date(from_date)
    end_parts = split_date(to_date)
    if start_parts is None or end_parts is None:
        return None

    zone = load_zone(timezone)
    try:
        start = datetime(*start_parts, tzinfo=zone)
        end = datetime(*end_parts, 23, 59, 59, 999000, tzinfo=zone)
    except ValueError:
        # e.g. "2025-02-30"
        return None
    return _utc_iso(start), _utc_iso(end)
