"""
Varga (divisional chart) sign calculation.

Classical Parashari schemes for the Saptavarga (D1, D2, D3, D7, D9, D12,
D30) as Numba-compiled kernels plus a registry so further schemes can be
plugged in. Kernels work on sign indices 0 (Aries) to 11 (Pisces) and on
the same micro-arcsecond grid as sign classification.
"""

from __future__ import annotations

import logging

from collections.abc import Callable, Iterable

import numpy as np

from numba import njit

from astrostorm.ephemeris.classification import snap_longitude
from astrostorm.ephemeris.constants import ZodiacSign

__all__ = [
    "SAPTAVARGA",
    "is_vargottama",
    "list_schemes",
    "register_scheme",
    "saptavarga_signs",
    "varga_sign",
    "varga_sign_batch",
]

logger = logging.getLogger(__name__)

SchemeFn = Callable[[float], int]

_SCHEMES: dict[str, SchemeFn] = {}

SAPTAVARGA: tuple[str, ...] = ("D1", "D2", "D3", "D7", "D9", "D12", "D30")


@njit(cache=True)
def _normalize_longitude(longitude: float) -> float:
    lon = longitude % 360.0
    return lon if lon >= 0.0 else lon + 360.0


@njit(cache=True)
def _arcsec_of(longitude: float) -> float:
    """Normalised longitude in arcseconds, rounded to the micro-arcsecond grid."""
    return round(_normalize_longitude(longitude) * 3600.0, 6) % 1_296_000.0


@njit(cache=True)
def _base_sign(longitude: float) -> int:
    """Sign index (0-11) of a longitude."""
    return int(_arcsec_of(longitude) // 108_000.0) % 12


@njit(cache=True)
def _within_sign(longitude: float) -> float:
    """Arcseconds past the start of the sign."""
    return _arcsec_of(longitude) % 108_000.0


@njit(cache=True)
def _part(longitude: float, divisor: int) -> int:
    """Index (0..divisor-1) of the equal division of the sign."""
    idx = int((_within_sign(longitude) * divisor) // 108_000.0)
    return divisor - 1 if idx >= divisor else idx


@njit(cache=True)
def _rasi(longitude: float) -> int:
    return _base_sign(longitude)


@njit(cache=True)
def _hora(longitude: float) -> int:
    """D2: odd signs give Leo then Cancer, even signs Cancer then Leo."""
    sign = _base_sign(longitude)
    first_half = _part(longitude, 2) == 0
    odd = sign % 2 == 0  # index 0 is Aries, an odd sign
    if odd == first_half:
        return 4  # Leo
    return 3  # Cancer


@njit(cache=True)
def _drekkana(longitude: float) -> int:
    """D3: the sign itself, its 5th and its 9th."""
    return (_base_sign(longitude) + 4 * _part(longitude, 3)) % 12


@njit(cache=True)
def _saptamsa(longitude: float) -> int:
    """D7: odd signs count from the sign, even signs from the 7th."""
    sign = _base_sign(longitude)
    start = sign if sign % 2 == 0 else sign + 6
    return (start + _part(longitude, 7)) % 12


@njit(cache=True)
def _navamsa(longitude: float) -> int:
    """D9: movable signs start at the sign, fixed at the 9th, dual at the 5th."""
    sign = _base_sign(longitude)
    modality = sign % 3
    if modality == 0:
        offset = 0
    elif modality == 1:
        offset = 8
    else:
        offset = 4
    return (sign + offset + _part(longitude, 9)) % 12


@njit(cache=True)
def _dwadasamsa(longitude: float) -> int:
    """D12: sequential from the sign itself."""
    return (_base_sign(longitude) + _part(longitude, 12)) % 12


@njit(cache=True)
def _trimsamsa(longitude: float) -> int:
    """D30: unequal portions ruled by Mars, Saturn, Jupiter, Mercury, Venus."""
    sign = _base_sign(longitude)
    deg = _within_sign(longitude) / 3600.0
    if sign % 2 == 0:  # odd sign
        if deg < 5.0:
            return 0  # Aries
        if deg < 10.0:
            return 10  # Aquarius
        if deg < 18.0:
            return 8  # Sagittarius
        if deg < 25.0:
            return 2  # Gemini
        return 1  # Taurus
    if deg < 5.0:
        return 1  # Taurus
    if deg < 12.0:
        return 5  # Virgo
    if deg < 20.0:
        return 11  # Pisces
    if deg < 25.0:
        return 9  # Capricorn
    return 7  # Scorpio


def register_scheme(name: str, fn: SchemeFn) -> None:
    """Register a varga calculation scheme.

    Args:
        name: Scheme identifier (e.g. "D9")
        fn: Function that takes a sidereal longitude and returns a sign index

    Raises:
        ValueError: If name is empty or fn is not callable
    """
    if not name:
        raise ValueError("Scheme name cannot be empty")
    if not callable(fn):
        raise ValueError("Scheme function must be callable")
    _SCHEMES[name] = fn
    logger.debug("Registered varga scheme: %s", name)


def list_schemes() -> list[str]:
    return sorted(_SCHEMES.keys(), key=lambda s: (len(s), s))


def _scheme(name: str) -> SchemeFn:
    fn = _SCHEMES.get(name)
    if fn is None:
        raise KeyError(f"Unknown varga scheme: {name}. Available: {list_schemes()}")
    return fn


def varga_sign(longitude: float, varga: str = "D9") -> ZodiacSign:
    """Sign occupied in a divisional chart.

    Args:
        longitude: Sidereal longitude in degrees
        varga: Registered scheme name

    Returns:
        ZodiacSign in the divisional chart
    """
    return ZodiacSign(int(_scheme(varga)(snap_longitude(longitude))) + 1)


def varga_sign_batch(longitudes: Iterable[float], varga: str = "D9") -> np.ndarray:
    """Sign numbers (1-12) for many longitudes as an int array."""
    fn = _scheme(varga)
    return np.array([fn(snap_longitude(lon)) + 1 for lon in longitudes], dtype=np.int64)


def saptavarga_signs(longitude: float) -> dict[str, ZodiacSign]:
    """Signs of a longitude in each of the seven Saptavarga charts."""
    return {name: varga_sign(longitude, name) for name in SAPTAVARGA}


def is_vargottama(longitude: float) -> bool:
    """Same sign in the rasi and navamsa charts."""
    lon = snap_longitude(longitude)
    return _rasi(lon) == _navamsa(lon)


register_scheme("D1", _rasi)
register_scheme("D2", _hora)
register_scheme("D3", _drekkana)
register_scheme("D7", _saptamsa)
register_scheme("D9", _navamsa)
register_scheme("D12", _dwadasamsa)
register_scheme("D30", _trimsamsa)
