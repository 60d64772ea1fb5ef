#!/usr/bin/env python3
"""
Chart builder - orchestration only.

Turns a BirthMoment plus ephemeris, ayanamsa and house-system collaborators
into a VedicChart. Per-body ephemeris failures and degenerate house geometry
are recorded as issues on the returned PartialResult; only failures that
leave no chart at all are raised.
"""

from __future__ import annotations

from collections.abc import Iterable

from astrostorm.config.settings import EngineSettings, get_settings
from astrostorm.core.errors import (
    ComputationIssue,
    DegenerateGeometryError,
    EphemerisUnavailableError,
    IssueKind,
    PartialResult,
)
from astrostorm.core.logging import get_ephemeris_logger
from astrostorm.ephemeris.classification import classify, sidereal_longitude
from astrostorm.ephemeris.constants import CLASSICAL_BODIES, OUTER_BODIES, Body
from astrostorm.ephemeris.core_types import (
    BirthMoment,
    BodyPosition,
    PlanetPosition,
    VedicChart,
)
from astrostorm.ephemeris.houses import get_house_system, validate_cusps
from astrostorm.ephemeris.numerics import normalize_angle
from astrostorm.interfaces.ephemeris_adapter import (
    AyanamsaProvider,
    ChartAngles,
    EphemerisAdapter,
    HouseSystem,
)

logger = get_ephemeris_logger("chart")


def _house_cusps(
    house_system: HouseSystem,
    fallback: HouseSystem | None,
    angles: ChartAngles,
    sidereal_asc: float,
    latitude: float,
    ayanamsa: float,
    issues: list[ComputationIssue],
) -> tuple[list[float], str]:
    kwargs = {"obliquity": angles.obliquity, "ayanamsa": ayanamsa}
    try:
        cusps = house_system.cusps(sidereal_asc, latitude, angles.armc, **kwargs)
        return validate_cusps(cusps), house_system.name
    except DegenerateGeometryError as exc:
        if fallback is None:
            raise
        logger.warning(
            "House system degenerate, using fallback",
            extra={"house_system": house_system.name, "fallback": fallback.name},
        )
        issues.append(
            ComputationIssue(
                kind=IssueKind.DEGENERATE_GEOMETRY,
                component="houses",
                message=f"{exc}; substituted {fallback.name}",
            )
        )
        cusps = fallback.cusps(sidereal_asc, latitude, angles.armc, **kwargs)
        return validate_cusps(cusps), fallback.name


def _classified(
    body: Body, raw: BodyPosition, ayanamsa: float, cusps: list[float]
) -> PlanetPosition:
    c = classify(raw.longitude, ayanamsa, cusps)
    return PlanetPosition(
        body=body,
        sidereal_longitude=c.sidereal_longitude,
        latitude=raw.latitude,
        speed=raw.speed,
        distance=raw.distance,
        sign=c.sign,
        degree_in_sign=c.degree_in_sign,
        nakshatra=c.nakshatra,
        pada=c.pada,
        house=c.house,
        is_retrograde=raw.speed < 0.0,
    )


def _raw_positions(
    ephemeris: EphemerisAdapter,
    bodies: Iterable[Body],
    jd: float,
    issues: list[ComputationIssue],
) -> dict[Body, BodyPosition]:
    wanted = list(dict.fromkeys(bodies))
    raw: dict[Body, BodyPosition] = {}

    for body in wanted:
        if body is Body.KETU:
            continue
        try:
            raw[body] = ephemeris.position(body, jd)
        except EphemerisUnavailableError as exc:
            logger.warning("Position unavailable", extra={"body": body.name, "jd": jd})
            issues.append(
                ComputationIssue(
                    kind=IssueKind.EPHEMERIS_UNAVAILABLE,
                    component="ephemeris",
                    message=str(exc),
                    body=body.name,
                )
            )

    if Body.KETU in wanted:
        rahu = raw.get(Body.RAHU)
        if rahu is None and Body.RAHU not in wanted:
            try:
                rahu = ephemeris.position(Body.RAHU, jd)
            except EphemerisUnavailableError:
                rahu = None
        if rahu is None:
            issues.append(
                ComputationIssue(
                    kind=IssueKind.EPHEMERIS_UNAVAILABLE,
                    component="ephemeris",
                    message="Ketu derives from Rahu, which is unavailable",
                    body=Body.KETU.name,
                )
            )
        else:
            raw[Body.KETU] = BodyPosition(
                longitude=normalize_angle(rahu.longitude + 180.0),
                latitude=-rahu.latitude,
                speed=rahu.speed,
                distance=rahu.distance,
            )

    return {b: raw[b] for b in wanted if b in raw}


def build_chart(
    birth: BirthMoment,
    ephemeris: EphemerisAdapter,
    ayanamsa: AyanamsaProvider,
    house_system: HouseSystem,
    fallback_house_system: HouseSystem | None = None,
    bodies: Iterable[Body] = CLASSICAL_BODIES,
) -> PartialResult[VedicChart]:
    """Compute a sidereal chart.

    Args:
        birth: Validated birth instant and place
        ephemeris: Tropical position source
        ayanamsa: Ayanamsa provider
        house_system: Primary house-system strategy
        fallback_house_system: Used when the primary system is undefined at
            the birth latitude
        bodies: Bodies to compute (Ketu is always derived from Rahu)

    Returns:
        PartialResult whose value is the chart and whose issues list bodies
        that could not be computed or a house-system substitution

    Raises:
        DegenerateGeometryError: cusps undefined and no fallback given
    """
    issues: list[ComputationIssue] = []
    jd = birth.julian_day
    ayan = ayanamsa.value(jd)

    angles = ephemeris.angles(jd, birth.latitude, birth.longitude)
    sid_asc = sidereal_longitude(angles.ascendant, ayan)
    sid_mc = sidereal_longitude(angles.midheaven, ayan)

    cusps, used_system = _house_cusps(
        house_system,
        fallback_house_system,
        angles,
        sid_asc,
        birth.latitude,
        ayan,
        issues,
    )

    raw = _raw_positions(ephemeris, bodies, jd, issues)
    positions = tuple(_classified(body, pos, ayan, cusps) for body, pos in raw.items())

    sun_times = ephemeris.sun_times(jd, birth.latitude, birth.longitude)
    if sun_times is None:
        logger.info("No sunrise/sunset at birth place", extra={"latitude": birth.latitude})

    chart = VedicChart(
        birth=birth,
        julian_day=jd,
        ayanamsa_value=ayan,
        ayanamsa_name=ayanamsa.name,
        ascendant=sid_asc,
        midheaven=sid_mc,
        house_cusps=tuple(cusps),
        positions=positions,
        house_system=used_system,
        sunrise_jd=sun_times.sunrise if sun_times else None,
        sunset_jd=sun_times.sunset if sun_times else None,
        next_sunrise_jd=sun_times.next_sunrise if sun_times else None,
    )

    logger.debug(
        "Chart built",
        extra={
            "jd": jd,
            "ayanamsa": ayanamsa.name,
            "house_system": used_system,
            "bodies": len(positions),
            "issues": len(issues),
        },
    )
    return PartialResult(value=chart, issues=tuple(issues))


def build_chart_from_settings(
    birth: BirthMoment, settings: EngineSettings | None = None
) -> PartialResult[VedicChart]:
    """Build a chart with the Swiss Ephemeris backend and configured defaults."""
    from astrostorm.ephemeris.swe_backend import SwissAyanamsa, SwissEphemeris

    settings = settings or get_settings()
    bodies: tuple[Body, ...] = CLASSICAL_BODIES
    if settings.include_outer_planets:
        bodies = bodies + OUTER_BODIES

    fallback = None
    if settings.fallback_house_system != settings.house_system:
        fallback = get_house_system(settings.fallback_house_system)

    return build_chart(
        birth,
        SwissEphemeris(node_type=settings.node_type, ephe_path=settings.ephe_path),
        SwissAyanamsa(settings.ayanamsa),
        get_house_system(settings.house_system),
        fallback_house_system=fallback,
        bodies=bodies,
    )
