#!/usr/bin/env python3
"""
Sidereal classification of longitudes into sign, nakshatra, pada and house.

Boundary arithmetic runs on exact decimal arcseconds so a longitude written
as a literal boundary (30.0, 13.333333333333334, ...) lands in the segment
that starts there.
"""

from __future__ import annotations

import math

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from astrostorm.ephemeris.constants import (
    NAK_ARCSEC,
    NUM_PADAS,
    PADA_ARCSEC,
    SIGN_ARCSEC,
    TOT_ARCSEC,
    Nakshatra,
    ZodiacSign,
)

_D360 = Decimal(360)
_D3600 = Decimal(3600)
_MIN_CUSP_WIDTH = Decimal("0.001")
_DEFAULT_CUSP_WIDTH = Decimal(30)
# Grid that absorbs the last-digit error of a float literal boundary
_ARCSEC_QUANTUM = Decimal("0.000001")


def _dec(x: float) -> Decimal:
    # repr gives the shortest string that round-trips the float
    return Decimal(repr(float(x)))


def _norm(d: Decimal) -> Decimal:
    r = d % _D360
    return r + _D360 if r < 0 else r


@dataclass(frozen=True)
class Classification:
    sidereal_longitude: float
    sign: ZodiacSign
    degree_in_sign: float
    nakshatra: Nakshatra
    pada: int
    house: int


def _arcsec(lon: Decimal) -> Decimal:
    """Normalised longitude in arcseconds, snapped to the micro-arcsecond grid."""
    return (lon * _D3600).quantize(_ARCSEC_QUANTUM) % TOT_ARCSEC


def _to_float(d: Decimal) -> float:
    x = float(d)
    # Decimal just below 360 can round up to 360.0 as a float
    return math.nextafter(360.0, 0.0) if x >= 360.0 else x


def sidereal_longitude(tropical_longitude: float, ayanamsa: float) -> float:
    """Tropical longitude minus ayanamsa, normalised to [0, 360)."""
    return _to_float(_norm(_dec(tropical_longitude) - _dec(ayanamsa)))


def sign_of(longitude: float) -> ZodiacSign:
    arcsec = _arcsec(_norm(_dec(longitude)))
    return ZodiacSign(int(arcsec // SIGN_ARCSEC) + 1)


def _nakshatra_pada(arcsec: Decimal) -> tuple[Nakshatra, int]:
    nak_idx = int(arcsec // NAK_ARCSEC)
    within = arcsec - nak_idx * NAK_ARCSEC
    pada = min(max(int(within // PADA_ARCSEC) + 1, 1), NUM_PADAS)
    return Nakshatra(nak_idx + 1), pada


def nakshatra_pada_of(longitude: float) -> tuple[Nakshatra, int]:
    """Nakshatra (1-27) and pada (1-4) of a sidereal longitude."""
    return _nakshatra_pada(_arcsec(_norm(_dec(longitude))))


def nakshatra_offset(longitude: float) -> tuple[Nakshatra, Decimal]:
    """Nakshatra of a sidereal longitude and the elapsed fraction inside it.

    Uses the same arcsecond grid as `nakshatra_pada_of`, so both always name
    the same nakshatra.
    """
    arcsec = _arcsec(_norm(_dec(longitude)))
    nak_idx = int(arcsec // NAK_ARCSEC)
    return Nakshatra(nak_idx + 1), (arcsec - nak_idx * NAK_ARCSEC) / NAK_ARCSEC


def snap_longitude(longitude: float) -> float:
    """Longitude in [0, 360) after snapping to the micro-arcsecond grid."""
    return _to_float(_arcsec(_norm(_dec(longitude))) / _D3600)


def house_of(longitude: float, cusps: Sequence[float]) -> int:
    """House (1-12) whose circular cusp interval contains `longitude`.

    An exact cusp belongs to the house starting there. A cusp interval
    narrower than 0.001° is treated as 30° wide. If no interval matches,
    the house of the nearest preceding cusp is returned.
    """
    return _house_of(_norm(_dec(longitude)), cusps)


def _house_of(lon: Decimal, cusps: Sequence[float]) -> int:
    if len(cusps) != 12:
        raise ValueError(f"Expected 12 cusps, got {len(cusps)}")
    starts = [_norm(_dec(c)) for c in cusps]

    for i in range(12):
        start = starts[i]
        width = _norm(starts[(i + 1) % 12] - start)
        if width < _MIN_CUSP_WIDTH:
            width = _DEFAULT_CUSP_WIDTH
        if _norm(lon - start) < width:
            return i + 1

    return min(range(12), key=lambda i: _norm(lon - starts[i])) + 1


def classify_sidereal(longitude: float, cusps: Sequence[float]) -> Classification:
    """Classify an already sidereal longitude."""
    return _classify(_norm(_dec(longitude)), cusps)


def _classify(lon: Decimal, cusps: Sequence[float]) -> Classification:
    arcsec = _arcsec(lon)
    sign_idx = int(arcsec // SIGN_ARCSEC)
    nakshatra, pada = _nakshatra_pada(arcsec)
    return Classification(
        sidereal_longitude=_to_float(lon),
        sign=ZodiacSign(sign_idx + 1),
        degree_in_sign=float((arcsec - sign_idx * SIGN_ARCSEC) / _D3600),
        nakshatra=nakshatra,
        pada=pada,
        house=_house_of(lon, cusps),
    )


def classify(
    tropical_longitude: float, ayanamsa: float, cusps: Sequence[float]
) -> Classification:
    """Classify a tropical longitude against sidereal house cusps.

    Args:
        tropical_longitude: Tropical ecliptic longitude in degrees (any range)
        ayanamsa: Ayanamsa in degrees
        cusps: 12 sidereal house cusps in degrees

    Returns:
        Classification with sign, nakshatra, pada and house
    """
    return _classify(_norm(_dec(tropical_longitude) - _dec(ayanamsa)), cusps)


def pada_boundaries(nakshatra: Nakshatra) -> list[tuple[float, float]]:
    """[start, end) of each pada of a nakshatra in degrees."""
    start = Decimal((nakshatra - 1) * NAK_ARCSEC)
    return [
        (
            float((start + i * PADA_ARCSEC) / _D3600),
            float((start + (i + 1) * PADA_ARCSEC) / _D3600),
        )
        for i in range(NUM_PADAS)
    ]
