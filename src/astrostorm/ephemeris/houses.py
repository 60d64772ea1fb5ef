# ephemeris/houses.py
"""
House-system strategies.

Every strategy returns twelve sidereal cusps. Whole-sign and Equal depend
only on the ascendant; the quadrant systems are computed by Swiss Ephemeris
from ARMC, latitude and obliquity and become undefined inside the polar
circles.
"""

from __future__ import annotations

import math

from collections.abc import Sequence
from dataclasses import dataclass

import swisseph as swe

from astrostorm.core.errors import DegenerateGeometryError
from astrostorm.ephemeris.numerics import normalize_angle
from astrostorm.interfaces.ephemeris_adapter import HouseSystem


@dataclass(frozen=True)
class WholeSignHouses:
    name: str = "WHOLE_SIGN"

    def cusps(
        self,
        ascendant: float,
        latitude: float,
        lst: float,
        *,
        obliquity: float = 23.4392911,
        ayanamsa: float = 0.0,
    ) -> list[float]:
        start = math.floor(normalize_angle(ascendant) / 30.0) * 30.0
        return [normalize_angle(start + 30.0 * i) for i in range(12)]


@dataclass(frozen=True)
class EqualHouses:
    name: str = "EQUAL"

    def cusps(
        self,
        ascendant: float,
        latitude: float,
        lst: float,
        *,
        obliquity: float = 23.4392911,
        ayanamsa: float = 0.0,
    ) -> list[float]:
        return [normalize_angle(ascendant + 30.0 * i) for i in range(12)]


# Systems whose construction needs the ecliptic to cross the horizon
_POLAR_SENSITIVE = frozenset({b"P", b"K"})


@dataclass(frozen=True)
class SwissHouses:
    """Quadrant house systems computed by Swiss Ephemeris."""

    name: str
    hsys: bytes

    def cusps(
        self,
        ascendant: float,
        latitude: float,
        lst: float,
        *,
        obliquity: float = 23.4392911,
        ayanamsa: float = 0.0,
    ) -> list[float]:
        polar_limit = 90.0 - obliquity
        if self.hsys in _POLAR_SENSITIVE and abs(latitude) >= polar_limit:
            raise DegenerateGeometryError(
                self.name, latitude, f"undefined beyond ±{polar_limit:.2f}° latitude"
            )
        try:
            tropical, _ascmc = swe.houses_armc(lst, latitude, obliquity, self.hsys)
        except swe.Error as exc:
            raise DegenerateGeometryError(self.name, latitude, str(exc)) from exc

        if len(tropical) < 12 or any(math.isnan(c) for c in tropical[:12]):
            raise DegenerateGeometryError(self.name, latitude, "cusps not finite")

        return [normalize_angle(c - ayanamsa) for c in tropical[:12]]


HOUSE_SYSTEMS: dict[str, HouseSystem] = {
    "PLACIDUS": SwissHouses("PLACIDUS", b"P"),
    "KOCH": SwissHouses("KOCH", b"K"),
    "PORPHYRY": SwissHouses("PORPHYRY", b"O"),
    "REGIOMONTANUS": SwissHouses("REGIOMONTANUS", b"R"),
    "CAMPANUS": SwissHouses("CAMPANUS", b"C"),
    "EQUAL": EqualHouses(),
    "WHOLE_SIGN": WholeSignHouses(),
}


def get_house_system(name: str) -> HouseSystem:
    """Look up a house-system strategy by name (PLACIDUS, WHOLE_SIGN, ...)."""
    key = name.upper().replace("-", "_")
    if key not in HOUSE_SYSTEMS:
        raise ValueError(f"Unknown house system {name!r}; expected one of {', '.join(HOUSE_SYSTEMS)}")
    return HOUSE_SYSTEMS[key]


def validate_cusps(cusps: Sequence[float]) -> list[float]:
    if len(cusps) != 12:
        raise ValueError(f"A house system must return 12 cusps, got {len(cusps)}")
    return [normalize_angle(c) for c in cusps]
