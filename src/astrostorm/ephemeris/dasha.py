#!/usr/bin/env python3
"""
Vimshottari Dasha period calculations.
120-year cycle of planetary periods with nested sub-periods.

This module provides high-precision calculations for:
- Mahadasha (major periods)
- Antardasha (sub-periods)
- Pratyantardasha (sub-sub-periods)
- Sookshma, Prana and Deha (levels 4-6)
- Sandhi (junction) windows around period boundaries

Periods are stored in a flat arena: one tuple of records per level, each
record carrying its parent's index and the [start, stop) range of its
children in the next level.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from astrostorm.config.feature_flags import require_feature
from astrostorm.core.logging import get_engine_logger
from astrostorm.ephemeris.classification import nakshatra_offset
from astrostorm.ephemeris.constants import (
    LORD_INDEX,
    VIMSHOTTARI_LORDS,
    VIMSHOTTARI_TOTAL_YEARS,
    VIMSHOTTARI_YEARS,
    Body,
    Nakshatra,
)
from astrostorm.ephemeris.core_types import VedicChart
from astrostorm.ephemeris.time_utils import ensure_utc

logger = get_engine_logger("dasha")

# Days per year for high-precision calculations
DAYS_PER_YEAR = Decimal("365.25")
TOTAL_CYCLE_YEARS = Decimal(VIMSHOTTARI_TOTAL_YEARS)
TOTAL_CYCLE_DAYS = TOTAL_CYCLE_YEARS * DAYS_PER_YEAR

MAX_DEPTH = 6

LEVEL_NAMES: tuple[str, ...] = (
    "mahadasha",
    "antardasha",
    "pratyantardasha",
    "sookshma",
    "prana",
    "deha",
)

# Sandhi window as a fraction of the shorter neighbouring period, per level
SANDHI_FRACTIONS: tuple[Decimal, ...] = (
    Decimal("0.05"),
    Decimal("0.10"),
    Decimal("0.15"),
    Decimal("0.20"),
    Decimal("0.20"),
    Decimal("0.20"),
)
SANDHI_MIN_DAYS = Decimal(1)
SANDHI_MAX_DAYS = Decimal(30)


def _days(d: Decimal) -> timedelta:
    return timedelta(days=float(d))


@dataclass(frozen=True)
class DashaPeriod:
    """One period of the timeline at any level."""

    level: int  # 1 = mahadasha ... 6 = deha
    index: int  # position within its level
    lord: Body
    start: datetime
    end: datetime
    duration_days: Decimal
    parent: int | None = None
    children: tuple[int, int] = (0, 0)

    @property
    def level_name(self) -> str:
        return LEVEL_NAMES[self.level - 1]

    @property
    def duration_years(self) -> Decimal:
        return self.duration_days / DAYS_PER_YEAR

    def is_active(self, at: datetime) -> bool:
        """Check if period is active at given time"""
        return self.start <= ensure_utc(at) < self.end

    def progress(self, at: datetime) -> float:
        """Elapsed fraction (0..1) of the period at `at`."""
        at = ensure_utc(at)
        if at <= self.start:
            return 0.0
        if at >= self.end:
            return 1.0
        return (at - self.start) / (self.end - self.start)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "level": self.level,
            "level_name": self.level_name,
            "index": self.index,
            "lord": self.lord.value,
            "lord_name": self.lord.display_name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration_days": float(self.duration_days),
            "parent": self.parent,
            "children": list(self.children),
        }


@dataclass(frozen=True)
class SandhiWindow:
    """Junction window centred on the boundary between two periods."""

    level: int
    from_lord: Body
    to_lord: Body
    boundary: datetime
    start: datetime
    end: datetime

    def contains(self, at: datetime) -> bool:
        return self.start <= ensure_utc(at) <= self.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "level_name": LEVEL_NAMES[self.level - 1],
            "from_lord": self.from_lord.value,
            "to_lord": self.to_lord.value,
            "boundary": self.boundary.isoformat(),
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


@dataclass(frozen=True, eq=False)
class DashaTimeline:
    birth_time: datetime
    moon_longitude: float
    birth_nakshatra: Nakshatra
    birth_lord: Body
    elapsed_fraction: Decimal
    balance_days: Decimal
    levels: tuple[tuple[DashaPeriod, ...], ...]

    @property
    def depth(self) -> int:
        return len(self.levels)

    @property
    def mahadashas(self) -> tuple[DashaPeriod, ...]:
        return self.levels[0]

    def periods(self, level: int) -> tuple[DashaPeriod, ...]:
        if not 1 <= level <= self.depth:
            raise ValueError(f"Level must be between 1 and {self.depth}, got {level}")
        return self.levels[level - 1]

    def children(self, period: DashaPeriod) -> tuple[DashaPeriod, ...]:
        if period.level >= self.depth:
            return ()
        lo, hi = period.children
        return self.levels[period.level][lo:hi]

    def parent(self, period: DashaPeriod) -> DashaPeriod | None:
        if period.parent is None:
            return None
        return self.levels[period.level - 2][period.parent]

    def active_chain(self, now: datetime) -> list[DashaPeriod]:
        """Active period at each level for `now`, mahadasha first.

        Empty when `now` falls outside the 120-year cycle.
        """
        chain: list[DashaPeriod] = []
        candidates = self.mahadashas
        while candidates:
            active = next((p for p in candidates if p.is_active(now)), None)
            if active is None:
                break
            chain.append(active)
            candidates = self.children(active)
        return chain

    def active_period(self, now: datetime, level: int = 1) -> DashaPeriod | None:
        chain = self.active_chain(now)
        return chain[level - 1] if len(chain) >= level else None

    def upcoming(self, now: datetime, level: int = 1, count: int = 5) -> list[DashaPeriod]:
        """Periods at `level` starting after `now`, in order."""
        now = ensure_utc(now)
        return [p for p in self.periods(level) if p.start > now][:count]

    def sandhi_windows(self, level: int = 1) -> list[SandhiWindow]:
        """Junction windows between consecutive periods of a level."""
        periods = self.periods(level)
        fraction = SANDHI_FRACTIONS[level - 1]
        windows = []
        for prev, nxt in zip(periods, periods[1:]):
            span = min(prev.duration_days, nxt.duration_days) * fraction
            span = min(max(span, SANDHI_MIN_DAYS), SANDHI_MAX_DAYS)
            half = _days(span / 2)
            windows.append(
                SandhiWindow(
                    level=level,
                    from_lord=prev.lord,
                    to_lord=nxt.lord,
                    boundary=prev.end,
                    start=prev.end - half,
                    end=prev.end + half,
                )
            )
        return windows

    def sandhi_at(self, now: datetime) -> list[SandhiWindow]:
        """Sandhi windows of any level containing `now`."""
        return [
            w
            for level in range(1, self.depth + 1)
            for w in self.sandhi_windows(level)
            if w.contains(now)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "birth_time": self.birth_time.isoformat(),
            "moon_longitude": self.moon_longitude,
            "birth_nakshatra": self.birth_nakshatra.value,
            "birth_lord": self.birth_lord.value,
            "elapsed_fraction": float(self.elapsed_fraction),
            "balance_days": float(self.balance_days),
            "depth": self.depth,
            "levels": [[p.to_dict() for p in lvl] for lvl in self.levels],
        }


def birth_balance(moon_longitude: float) -> tuple[Nakshatra, Body, Decimal]:
    """Birth nakshatra, its lord and the elapsed fraction of the lord's period.

    The elapsed fraction is the Moon's fractional position inside its
    nakshatra, read from the same arcsecond grid the chart classifies on.
    """
    nakshatra, fraction = nakshatra_offset(moon_longitude)
    return nakshatra, nakshatra.lord, fraction


def _subdivide(
    parents: tuple[DashaPeriod, ...], level: int
) -> tuple[tuple[DashaPeriod, ...], tuple[DashaPeriod, ...]]:
    """Children of every parent, rotating from the parent's lord.

    Returns the parents with their child ranges filled in and the new level.
    """
    children: list[DashaPeriod] = []
    linked: list[DashaPeriod] = []

    for parent in parents:
        first = len(children)
        start_index = LORD_INDEX[parent.lord]
        offset = Decimal(0)
        for i in range(9):
            lord = VIMSHOTTARI_LORDS[(start_index + i) % 9]
            duration = parent.duration_days * Decimal(VIMSHOTTARI_YEARS[lord]) / TOTAL_CYCLE_YEARS
            start = parent.start + _days(offset)
            offset += duration
            end = parent.end if i == 8 else parent.start + _days(offset)
            children.append(
                DashaPeriod(
                    level=level,
                    index=len(children),
                    lord=lord,
                    start=start,
                    end=end,
                    duration_days=duration,
                    parent=parent.index,
                )
            )
        linked.append(
            DashaPeriod(
                level=parent.level,
                index=parent.index,
                lord=parent.lord,
                start=parent.start,
                end=parent.end,
                duration_days=parent.duration_days,
                parent=parent.parent,
                children=(first, len(children)),
            )
        )

    return tuple(linked), tuple(children)


@require_feature("dasha")
def build_timeline(
    birth_time: datetime, moon_longitude: float, depth: int = 3
) -> DashaTimeline:
    """Build the Vimshottari timeline for a birth.

    Args:
        birth_time: Birth instant (naive values are read as UTC)
        moon_longitude: Moon's sidereal longitude at birth
        depth: Number of levels to generate (1-6)

    Returns:
        DashaTimeline whose nine mahadashas span exactly 120 years
    """
    if not 1 <= depth <= MAX_DEPTH:
        raise ValueError(f"Depth must be between 1 and {MAX_DEPTH}, got {depth}")

    birth_time = ensure_utc(birth_time)
    nakshatra, birth_lord, elapsed_fraction = birth_balance(moon_longitude)

    lord_days = Decimal(VIMSHOTTARI_YEARS[birth_lord]) * DAYS_PER_YEAR
    elapsed_days = lord_days * elapsed_fraction
    balance_days = lord_days - elapsed_days

    cycle_start = birth_time - _days(elapsed_days)
    start_index = LORD_INDEX[birth_lord]

    mahadashas: list[DashaPeriod] = []
    # Boundaries are offsets from birth so the first period ends at birth + balance
    offset = balance_days - lord_days
    for i in range(9):
        lord = VIMSHOTTARI_LORDS[(start_index + i) % 9]
        days = Decimal(VIMSHOTTARI_YEARS[lord]) * DAYS_PER_YEAR
        start = cycle_start if i == 0 else birth_time + _days(offset)
        offset += days
        end = birth_time + _days(offset)
        mahadashas.append(
            DashaPeriod(level=1, index=i, lord=lord, start=start, end=end, duration_days=days)
        )

    levels: list[tuple[DashaPeriod, ...]] = [tuple(mahadashas)]
    for level in range(2, depth + 1):
        linked, children = _subdivide(levels[-1], level)
        levels[-1] = linked
        levels.append(children)

    logger.debug(
        "Dasha timeline built",
        extra={
            "birth_lord": birth_lord.name,
            "nakshatra": nakshatra.name,
            "elapsed_fraction": float(elapsed_fraction),
            "depth": depth,
        },
    )

    return DashaTimeline(
        birth_time=birth_time,
        moon_longitude=float(moon_longitude),
        birth_nakshatra=nakshatra,
        birth_lord=birth_lord,
        elapsed_fraction=elapsed_fraction,
        balance_days=balance_days,
        levels=tuple(levels),
    )


def timeline_for_chart(chart: VedicChart, depth: int | None = None) -> DashaTimeline:
    """Timeline rooted at the chart's Moon.

    Raises:
        ValueError: the chart has no Moon position
    """
    moon = chart.position(Body.MOON)
    if moon is None:
        raise ValueError("Dasha timeline needs the Moon's position")
    if depth is None:
        from astrostorm.config.settings import get_settings

        depth = get_settings().dasha_depth
    return build_timeline(chart.birth.date_time_utc, moon.sidereal_longitude, depth)
