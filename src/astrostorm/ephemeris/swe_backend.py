#!/usr/bin/env python3
"""
Swiss Ephemeris backend interface
Thread-safe tropical position, angle, sunrise and ayanamsa calculations.
"""

from __future__ import annotations

import threading

import swisseph as swe

from astrostorm.core.errors import EphemerisUnavailableError
from astrostorm.core.logging import get_ephemeris_logger
from astrostorm.ephemeris.constants import NODE_IDS, SWE_IDS, Body
from astrostorm.ephemeris.core_types import BodyPosition
from astrostorm.ephemeris.numerics import normalize_angle
from astrostorm.interfaces.ephemeris_adapter import ChartAngles, SunTimes

logger = get_ephemeris_logger("swe_backend")

# ============================================================================
# SWISS EPHEMERIS CONFIGURATION
# ============================================================================

# Swiss Ephemeris keeps global state (ephe path, sidereal mode)
_swe_lock = threading.Lock()

# Tropical geocentric positions with speed
FLAGS = swe.FLG_SWIEPH | swe.FLG_SPEED

AYANAMSA_MODES: dict[str, int] = {
    "LAHIRI": swe.SIDM_LAHIRI,
    "RAMAN": swe.SIDM_RAMAN,
    "KRISHNAMURTI": swe.SIDM_KRISHNAMURTI,
    "TRUE_CHITRAPAKSHA": swe.SIDM_TRUE_CITRA,
    "YUKTESHWAR": swe.SIDM_YUKTESHWAR,
    "FAGAN_BRADLEY": swe.SIDM_FAGAN_BRADLEY,
}


def set_ephemeris_path(path: str | None) -> None:
    """Point Swiss Ephemeris at a directory of .se1 files.

    Without data files the library falls back to its built-in Moshier
    model.
    """
    if path:
        with _swe_lock:
            swe.set_ephe_path(path)
        logger.info("Swiss Ephemeris path set", extra={"ephe_path": path})


# ============================================================================
# EPHEMERIS ADAPTER
# ============================================================================


class SwissEphemeris:
    """EphemerisAdapter backed by pyswisseph."""

    def __init__(self, node_type: str = "MEAN", ephe_path: str | None = None):
        if node_type not in NODE_IDS:
            raise ValueError(f"node_type must be one of {sorted(NODE_IDS)}, got {node_type!r}")
        self.node_type = node_type
        self._node_id = NODE_IDS[node_type]
        set_ephemeris_path(ephe_path)

    def _calc(self, swe_id: int, jd: float, body: Body) -> tuple[float, ...]:
        try:
            with _swe_lock:
                (lon, lat, dist, sp_lon, sp_lat, sp_dist), retflag = swe.calc_ut(
                    jd, swe_id, FLAGS
                )
        except swe.Error as exc:
            raise EphemerisUnavailableError(body, jd, str(exc)) from exc
        return lon, lat, dist, sp_lon

    def position(self, body: Body, jd: float) -> BodyPosition:
        """Tropical position of a body.

        Args:
            body: Body to compute
            jd: Julian day (UT)

        Returns:
            BodyPosition with longitude, latitude, speed and distance
        """
        if body is Body.KETU:
            # Ketu is the point opposite Rahu
            lon, lat, dist, speed = self._calc(self._node_id, jd, Body.RAHU)
            return BodyPosition(normalize_angle(lon + 180.0), -lat, speed, dist)

        swe_id = self._node_id if body is Body.RAHU else SWE_IDS.get(body)
        if swe_id is None:
            raise EphemerisUnavailableError(body, jd, "no Swiss Ephemeris id")
        lon, lat, dist, speed = self._calc(swe_id, jd, body)
        return BodyPosition(normalize_angle(lon), lat, speed, dist)

    def angles(self, jd: float, latitude: float, longitude: float) -> ChartAngles:
        """Tropical ascendant, midheaven, ARMC and true obliquity."""
        with _swe_lock:
            _cusps, ascmc = swe.houses_ex(jd, latitude, longitude, b"E")
            (eps_true, *_rest), _flag = swe.calc_ut(jd, swe.ECL_NUT, 0)
        return ChartAngles(
            ascendant=normalize_angle(ascmc[0]),
            midheaven=normalize_angle(ascmc[1]),
            armc=normalize_angle(ascmc[2]),
            obliquity=eps_true,
        )

    def _next_sun_event(self, jd: float, event: int, latitude: float, longitude: float) -> float | None:
        with _swe_lock:
            res, tret = swe.rise_trans(
                jd, swe.SUN, event | swe.BIT_DISC_CENTER, (longitude, latitude, 0.0)
            )
        # res == -2: circumpolar, the event does not happen
        if res != 0:
            return None
        return tret[0]

    def sun_times(self, jd: float, latitude: float, longitude: float) -> SunTimes | None:
        """Sunrise at or before `jd` with the sunset and sunrise that follow it."""
        rise = self._next_sun_event(jd - 1.0, swe.CALC_RISE, latitude, longitude)
        if rise is not None and rise > jd:
            rise = self._next_sun_event(jd - 2.0, swe.CALC_RISE, latitude, longitude)
        if rise is None:
            return None
        sunset = self._next_sun_event(rise, swe.CALC_SET, latitude, longitude)
        if sunset is None:
            return None
        next_rise = self._next_sun_event(sunset, swe.CALC_RISE, latitude, longitude)
        if next_rise is None:
            return None
        return SunTimes(sunrise=rise, sunset=sunset, next_sunrise=next_rise)


# ============================================================================
# AYANAMSA
# ============================================================================


class SwissAyanamsa:
    """AyanamsaProvider using the Swiss Ephemeris sidereal modes."""

    def __init__(self, name: str = "LAHIRI"):
        key = name.upper()
        if key not in AYANAMSA_MODES:
            raise ValueError(
                f"Unknown ayanamsa {name!r}; expected one of {', '.join(AYANAMSA_MODES)}"
            )
        self._name = key
        self._mode = AYANAMSA_MODES[key]

    @property
    def name(self) -> str:
        return self._name

    def value(self, jd: float) -> float:
        with _swe_lock:
            swe.set_sid_mode(self._mode, 0, 0)
            return swe.get_ayanamsa_ut(jd)
