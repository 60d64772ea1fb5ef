#!/usr/bin/env python3
"""
Time utilities for ephemeris calculations.

Provides UTC normalisation, Julian day conversions and weekday helpers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import swisseph as swe


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware and in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def datetime_to_julian_day(dt: datetime) -> float:
    """Convert aware datetime to Julian Day (UT)."""
    dt = ensure_utc(dt)
    h = dt.hour + dt.minute / 60.0 + dt.second / 3600.0 + dt.microsecond / 3_600_000_000.0
    return swe.julday(dt.year, dt.month, dt.day, h, swe.GREG_CAL)


def julian_day_to_datetime(jd: float) -> datetime:
    """Convert Julian Day to aware UTC datetime (microsecond resolution)."""
    y, m, d, h = swe.revjul(jd, swe.GREG_CAL)
    base = datetime(y, m, d, tzinfo=timezone.utc)
    return base + timedelta(microseconds=round(h * 3_600_000_000))


def to_local(dt: datetime, timezone_id: str) -> datetime:
    """Convert a datetime to the given IANA timezone."""
    return ensure_utc(dt).astimezone(ZoneInfo(timezone_id))
