#!/usr/bin/env python3
"""
Core data types for chart computation.

BirthMoment is validated at construction; every other type here is an
immutable record built once per computation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.functional_validators import AfterValidator

from astrostorm.core.errors import InvalidInputError
from astrostorm.ephemeris.constants import (
    NAKSHATRA_SPAN,
    Body,
    Nakshatra,
    ZodiacSign,
)
from astrostorm.ephemeris.numerics import degrees_to_dms
from astrostorm.ephemeris.time_utils import (
    datetime_to_julian_day,
    ensure_utc,
    julian_day_to_datetime,
    to_local,
)

# --- Validators ---


def validate_latitude(v: float) -> float:
    """Validate latitude is within valid range"""
    if not -90 <= v <= 90:
        raise ValueError(f"Latitude must be between -90 and 90, got {v}")
    return v


def validate_longitude(v: float) -> float:
    """Validate longitude is within valid range"""
    if not -180 <= v <= 180:
        raise ValueError(f"Longitude must be between -180 and 180, got {v}")
    return v


Latitude = Annotated[float, AfterValidator(validate_latitude)]
Longitude = Annotated[float, AfterValidator(validate_longitude)]
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


# ============================================================================
# BIRTH MOMENT
# ============================================================================


class BirthMoment(BaseModel):
    """Birth instant and place.

    Naive datetimes are taken as UTC. Construction fails with a pydantic
    ValidationError (a ValueError) for out-of-range coordinates or an unknown
    timezone; `parse` raises InvalidInputError instead.
    """

    model_config = ConfigDict(frozen=True)

    date_time_utc: UTCDateTime
    latitude: Latitude
    longitude: Longitude
    timezone_id: str = "UTC"

    @field_validator("timezone_id")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v!r}") from exc
        return v

    @classmethod
    def parse(
        cls,
        date_time: str | datetime,
        latitude: float,
        longitude: float,
        timezone_id: str = "UTC",
    ) -> "BirthMoment":
        """Build a BirthMoment from loosely typed input.

        A naive `date_time` (or ISO string without offset) is read as wall
        clock time in `timezone_id`.
        """
        try:
            if isinstance(date_time, str):
                date_time = datetime.fromisoformat(date_time.strip())
            if date_time.tzinfo is None:
                date_time = date_time.replace(tzinfo=ZoneInfo(timezone_id))
            return cls(
                date_time_utc=date_time.astimezone(timezone.utc),
                latitude=latitude,
                longitude=longitude,
                timezone_id=timezone_id,
            )
        except ValidationError as exc:
            raise InvalidInputError(str(exc)) from exc
        except (ValueError, TypeError, ZoneInfoNotFoundError) as exc:
            raise InvalidInputError(f"Invalid birth data: {exc}") from exc

    @property
    def julian_day(self) -> float:
        return datetime_to_julian_day(self.date_time_utc)

    @property
    def local_datetime(self) -> datetime:
        return to_local(self.date_time_utc, self.timezone_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date_time_utc": self.date_time_utc.isoformat(),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone_id": self.timezone_id,
        }


# ============================================================================
# POSITIONS
# ============================================================================


@dataclass(frozen=True)
class BodyPosition:
    """Raw tropical geocentric position as returned by an ephemeris adapter."""

    longitude: float
    latitude: float
    speed: float
    distance: float


@dataclass(frozen=True)
class PlanetPosition:
    """Classified sidereal position of one body."""

    body: Body
    sidereal_longitude: float
    latitude: float
    speed: float
    distance: float
    sign: ZodiacSign
    degree_in_sign: float
    nakshatra: Nakshatra
    pada: int
    house: int
    is_retrograde: bool

    @property
    def nakshatra_fraction(self) -> float:
        """Elapsed fraction (0..1) of the current nakshatra."""
        start = (self.nakshatra - 1) * NAKSHATRA_SPAN
        return min(max((self.sidereal_longitude - start) / NAKSHATRA_SPAN, 0.0), 1.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "body": self.body.value,
            "name": self.body.display_name,
            "sidereal_longitude": round(self.sidereal_longitude, 6),
            "latitude": round(self.latitude, 6),
            "speed": round(self.speed, 6),
            "distance": round(self.distance, 6),
            "sign": self.sign.value,
            "degree_in_sign": round(self.degree_in_sign, 6),
            "degree_in_sign_dms": degrees_to_dms(self.degree_in_sign),
            "nakshatra": self.nakshatra.value,
            "pada": self.pada,
            "house": self.house,
            "is_retrograde": self.is_retrograde,
        }


# ============================================================================
# CHART
# ============================================================================


def _iso_from_jd(jd: float | None) -> str | None:
    return julian_day_to_datetime(jd).isoformat() if jd is not None else None


@dataclass(frozen=True, eq=False)
class VedicChart:
    """Aggregate root of a computed chart.

    sunrise_jd is the last sunrise at or before the birth instant, sunset_jd
    the sunset that follows it and next_sunrise_jd the sunrise after that.

    Compared and hashed by identity: two charts built separately are
    distinct even when their contents match.
    """

    birth: BirthMoment
    julian_day: float
    ayanamsa_value: float
    ayanamsa_name: str
    ascendant: float
    midheaven: float
    house_cusps: tuple[float, ...]
    positions: tuple[PlanetPosition, ...]
    house_system: str
    sunrise_jd: float | None = None
    sunset_jd: float | None = None
    next_sunrise_jd: float | None = None

    @property
    def ascendant_sign(self) -> ZodiacSign:
        return ZodiacSign(int(self.ascendant // 30.0) % 12 + 1)

    @property
    def bodies(self) -> tuple[Body, ...]:
        return tuple(p.body for p in self.positions)

    def position(self, body: Body) -> PlanetPosition | None:
        for p in self.positions:
            if p.body is body:
                return p
        return None

    def positions_by_body(self) -> dict[Body, PlanetPosition]:
        return {p.body: p for p in self.positions}

    def bodies_in_house(self, house: int) -> list[PlanetPosition]:
        return [p for p in self.positions if p.house == house]

    def positions_by_house(self) -> dict[int, list[PlanetPosition]]:
        out: dict[int, list[PlanetPosition]] = {h: [] for h in range(1, 13)}
        for p in self.positions:
            out[p.house].append(p)
        return out

    def sign_of_house(self, house: int) -> ZodiacSign:
        """Sign occupying a house counted from the ascendant sign."""
        return self.ascendant_sign.add(house)

    def house_from(self, reference: ZodiacSign, sign: ZodiacSign) -> int:
        """Whole-sign house number of `sign` counted from `reference`."""
        return ((sign - reference) % 12) + 1

    def lord_of_house(self, house: int) -> Body:
        return self.sign_of_house(house).ruler

    @property
    def is_day_birth(self) -> bool | None:
        if self.sunrise_jd is None or self.sunset_jd is None:
            return None
        return self.sunrise_jd <= self.julian_day < self.sunset_jd

    def to_dict(self) -> dict[str, Any]:
        return {
            "birth": self.birth.to_dict(),
            "julian_day": self.julian_day,
            "ayanamsa": {"name": self.ayanamsa_name, "value": self.ayanamsa_value},
            "ascendant": self.ascendant,
            "ascendant_sign": self.ascendant_sign.value,
            "midheaven": self.midheaven,
            "house_cusps": list(self.house_cusps),
            "house_system": self.house_system,
            "positions": [p.to_dict() for p in self.positions],
            "sunrise_jd": self.sunrise_jd,
            "sunset_jd": self.sunset_jd,
            "next_sunrise_jd": self.next_sunrise_jd,
            "sunrise_utc": _iso_from_jd(self.sunrise_jd),
            "sunset_utc": _iso_from_jd(self.sunset_jd),
        }
