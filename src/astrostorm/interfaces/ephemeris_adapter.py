#!/usr/bin/env python3
"""
Ephemeris collaborator protocols.

The chart builder depends only on these interfaces; the Swiss Ephemeris
backend is the production implementation and tests supply stubs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from astrostorm.ephemeris.constants import Body
from astrostorm.ephemeris.core_types import BodyPosition


@dataclass(frozen=True)
class ChartAngles:
    """Tropical ascendant and midheaven plus the local sidereal angle."""

    ascendant: float
    midheaven: float
    armc: float  # local sidereal time in degrees
    obliquity: float


@dataclass(frozen=True)
class SunTimes:
    """Sunrise preceding the instant, the following sunset and sunrise (JD UT)."""

    sunrise: float
    sunset: float
    next_sunrise: float


class EphemerisAdapter(Protocol):
    """Source of tropical geocentric positions."""

    def position(self, body: Body, jd: float) -> BodyPosition:
        """Tropical position of a body.

        Raises:
            EphemerisUnavailableError: the body cannot be computed for `jd`
        """
        ...

    def angles(self, jd: float, latitude: float, longitude: float) -> ChartAngles:
        ...

    def sun_times(self, jd: float, latitude: float, longitude: float) -> SunTimes | None:
        """Sunrise/sunset around `jd`, or None where the Sun does not rise or set."""
        ...


class AyanamsaProvider(Protocol):
    @property
    def name(self) -> str:
        ...

    def value(self, jd: float) -> float:
        """Ayanamsa in degrees for a Julian day (UT)."""
        ...


class HouseSystem(Protocol):
    @property
    def name(self) -> str:
        ...

    def cusps(
        self,
        ascendant: float,
        latitude: float,
        lst: float,
        *,
        obliquity: float = 23.4392911,
        ayanamsa: float = 0.0,
    ) -> Sequence[float]:
        """Twelve sidereal cusps; `ascendant` is sidereal, `lst` is ARMC in degrees.

        Raises:
            DegenerateGeometryError: cusps are undefined at `latitude`
        """
        ...
