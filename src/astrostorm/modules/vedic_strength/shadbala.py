"""
Shadbala (Six-fold strength) calculation module.
Based on Brihat Parasara Hora Shastra Chapter 27-28.

All components are in virupas (1 rupa = 60 virupas). Kala bala needs the
sunrise and sunset around the birth; when the chart has none (polar day or
night) the affected parts take a neutral value and the result is flagged
partial.
"""

from __future__ import annotations

import math

from dataclasses import dataclass, field
from typing import Any

from astrostorm.config.feature_flags import require_feature
from astrostorm.constants.relationships import get_dignity
from astrostorm.constants.shadbala_tables import (
    DIG_BALA_HOUSE,
    DRIK_BALA_MAX,
    DRIK_BALA_MIN,
    DRIK_WEIGHTS,
    EXALTATION_DEGREES,
    FIXED_CHESTA_VIRUPAS,
    NAISARGIKA_BALA,
    NEUTRAL_VIRUPAS,
    REQUIRED_RUPAS,
    SAPTAVARGA_WEIGHTS,
    VARGA_DIGNITY_VIRUPAS,
    VIRUPAS_PER_RUPA,
    WAR_BRIGHTNESS_ORDER,
    WAR_ORB,
    YUDDHA_VIRUPAS,
    rating_for_percentage,
)
from astrostorm.core.errors import ComputationIssue, IssueKind, PartialResult
from astrostorm.core.logging import get_engine_logger
from astrostorm.ephemeris.constants import (
    CLASSICAL_BODIES,
    KENDRA_HOUSES,
    NATURAL_BENEFICS,
    Body,
)
from astrostorm.ephemeris.core_types import PlanetPosition, VedicChart
from astrostorm.ephemeris.numerics import angular_distance, clamp_value, normalize_angle
from astrostorm.ephemeris.varga import SAPTAVARGA, varga_sign
from astrostorm.modules.aspects.vedic_drsti import AspectMatrix

logger = get_engine_logger("shadbala")

# Weekday lords, Monday first (JD 0 fell on a Monday)
WEEKDAY_LORDS: tuple[Body, ...] = (
    Body.MOON,
    Body.MARS,
    Body.MERCURY,
    Body.JUPITER,
    Body.VENUS,
    Body.SATURN,
    Body.SUN,
)

# Chaldean hora order
HORA_SEQUENCE: tuple[Body, ...] = (
    Body.SUN,
    Body.VENUS,
    Body.MERCURY,
    Body.MOON,
    Body.SATURN,
    Body.JUPITER,
    Body.MARS,
)

DAY_STRONG = frozenset({Body.SUN, Body.JUPITER, Body.VENUS})
NIGHT_STRONG = frozenset({Body.MOON, Body.MARS, Body.SATURN})

# Lords of the three parts of day and night
DAY_TRIBHAGA: tuple[Body, ...] = (Body.MERCURY, Body.SUN, Body.SATURN)
NIGHT_TRIBHAGA: tuple[Body, ...] = (Body.MOON, Body.VENUS, Body.MARS)

# Decanate of drekkana strength (0 first, 1 second, 2 third)
DREKKANA_PART: dict[Body, int] = {
    Body.SUN: 0,
    Body.MARS: 0,
    Body.JUPITER: 0,
    Body.MERCURY: 1,
    Body.SATURN: 1,
    Body.MOON: 2,
    Body.VENUS: 2,
}

MAX_DECLINATION = 23.45


@dataclass(frozen=True)
class SthanaBala:
    uccha: float
    saptavargaja: float
    oja_yugma: float
    kendradi: float
    drekkana: float

    @property
    def total(self) -> float:
        return self.uccha + self.saptavargaja + self.oja_yugma + self.kendradi + self.drekkana

    def to_dict(self) -> dict[str, float]:
        return {
            "uccha": round(self.uccha, 2),
            "saptavargaja": round(self.saptavargaja, 2),
            "oja_yugma": round(self.oja_yugma, 2),
            "kendradi": round(self.kendradi, 2),
            "drekkana": round(self.drekkana, 2),
            "total": round(self.total, 2),
        }


@dataclass(frozen=True)
class KalaBala:
    nathonnatha: float
    paksha: float
    tribhaga: float
    hora_adi: float
    ayana: float
    yuddha: float

    @property
    def total(self) -> float:
        return (
            self.nathonnatha
            + self.paksha
            + self.tribhaga
            + self.hora_adi
            + self.ayana
            + self.yuddha
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "nathonnatha": round(self.nathonnatha, 2),
            "paksha": round(self.paksha, 2),
            "tribhaga": round(self.tribhaga, 2),
            "hora_adi": round(self.hora_adi, 2),
            "ayana": round(self.ayana, 2),
            "yuddha": round(self.yuddha, 2),
            "total": round(self.total, 2),
        }


@dataclass(frozen=True)
class ShadbalaResult:
    """Shadbala of one body."""

    body: Body
    sthana: SthanaBala
    dig_bala: float
    kala: KalaBala
    chesta_bala: float
    naisargika_bala: float
    drik_bala: float
    required_rupas: float
    issues: tuple[ComputationIssue, ...] = field(default_factory=tuple)

    @property
    def sthana_bala(self) -> float:
        return self.sthana.total

    @property
    def kala_bala(self) -> float:
        return self.kala.total

    @property
    def total_virupas(self) -> float:
        return (
            self.sthana_bala
            + self.dig_bala
            + self.kala_bala
            + self.chesta_bala
            + self.naisargika_bala
            + self.drik_bala
        )

    @property
    def total_rupas(self) -> float:
        return self.total_virupas / VIRUPAS_PER_RUPA

    @property
    def percentage_of_required(self) -> float:
        return self.total_rupas / self.required_rupas * 100.0

    @property
    def rating(self) -> str:
        return rating_for_percentage(self.percentage_of_required)

    @property
    def is_strong(self) -> bool:
        return self.total_rupas >= self.required_rupas

    @property
    def is_partial(self) -> bool:
        return bool(self.issues)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "body": self.body.value,
            "name": self.body.display_name,
            "sthana": self.sthana.to_dict(),
            "dig": round(self.dig_bala, 2),
            "kala": self.kala.to_dict(),
            "chesta": round(self.chesta_bala, 2),
            "naisargika": round(self.naisargika_bala, 2),
            "drik": round(self.drik_bala, 2),
            "total_virupas": round(self.total_virupas, 2),
            "total_rupas": round(self.total_rupas, 3),
            "required_rupas": self.required_rupas,
            "percentage_of_required": round(self.percentage_of_required, 2),
            "rating": self.rating,
            "is_partial": self.is_partial,
            "issues": [i.to_dict() for i in self.issues],
        }


# ============================================================================
# STHANA BALA
# ============================================================================


def calculate_uccha_bala(body: Body, longitude: float) -> float:
    """Distance from the debilitation point scaled to 0..60 virupas."""
    debilitation = normalize_angle(EXALTATION_DEGREES[body] + 180.0)
    return angular_distance(longitude, debilitation) / 180.0 * 60.0


def calculate_saptavargaja_bala(position: PlanetPosition) -> float:
    """Dignity in the seven divisional signs, weighted per varga."""
    total = 0.0
    for name in SAPTAVARGA:
        if name == "D1":
            dignity = get_dignity(position.body, position.sign, position.degree_in_sign)
        else:
            dignity = get_dignity(position.body, varga_sign(position.sidereal_longitude, name))
        total += VARGA_DIGNITY_VIRUPAS[dignity.value] * SAPTAVARGA_WEIGHTS[name]
    return total


def calculate_oja_yugma_bala(position: PlanetPosition) -> float:
    # Moon and Venus gain in even signs, all others in odd signs
    if position.body in (Body.MOON, Body.VENUS):
        return 0.0 if position.sign.is_odd else 15.0
    return 15.0 if position.sign.is_odd else 0.0


def calculate_kendradi_bala(house: int) -> float:
    if house in KENDRA_HOUSES:
        return 60.0
    if house in (2, 5, 8, 11):
        return 30.0
    return 15.0


def calculate_drekkana_bala(position: PlanetPosition) -> float:
    part = DREKKANA_PART.get(position.body)
    if part is None:
        return 0.0
    return 15.0 if int(position.degree_in_sign // 10.0) == part else 0.0


def calculate_sthana_bala(position: PlanetPosition) -> SthanaBala:
    """Calculate positional strength.

    Includes:
    - Uccha Bala (exaltation strength)
    - Sapta Vargaja Bala (divisional strength)
    - Oja-Yugma Bala (odd-even sign strength)
    - Kendradi Bala (angular strength)
    - Drekkana Bala (decanate strength)
    """
    return SthanaBala(
        uccha=calculate_uccha_bala(position.body, position.sidereal_longitude),
        saptavargaja=calculate_saptavargaja_bala(position),
        oja_yugma=calculate_oja_yugma_bala(position),
        kendradi=calculate_kendradi_bala(position.house),
        drekkana=calculate_drekkana_bala(position),
    )


# ============================================================================
# DIG BALA
# ============================================================================


def calculate_dig_bala(body: Body, house: int) -> float:
    """Calculate directional strength.

    Maximum 60 in the body's strong house, 10 less per house away.
    """
    distance = abs(house - DIG_BALA_HOUSE[body])
    if distance > 6:
        distance = 12 - distance
    return (6 - distance) * 10.0


# ============================================================================
# KALA BALA
# ============================================================================


@dataclass(frozen=True)
class _DayContext:
    is_day: bool
    day_lord: Body
    hora_lord: Body
    part: int  # third of the day or night (0-2)


def _day_context(chart: VedicChart) -> _DayContext | None:
    rise, sset, next_rise = chart.sunrise_jd, chart.sunset_jd, chart.next_sunrise_jd
    if rise is None or sset is None or next_rise is None:
        return None

    jd = chart.julian_day
    is_day = rise <= jd < sset
    if is_day:
        start, length = rise, sset - rise
    else:
        start, length = sset, next_rise - sset
    if length <= 0:
        return None
    elapsed = clamp_value((jd - start) / length, 0.0, 1.0)

    # Vedic weekday runs sunrise to sunrise; local mean time for the date
    local_rise = rise + chart.birth.longitude / 360.0
    day_lord = WEEKDAY_LORDS[int(math.floor(local_rise + 0.5)) % 7]

    hora = min(int(elapsed * 12), 11) + (0 if is_day else 12)
    hora_lord = HORA_SEQUENCE[(HORA_SEQUENCE.index(day_lord) + hora) % 7]

    return _DayContext(
        is_day=is_day,
        day_lord=day_lord,
        hora_lord=hora_lord,
        part=min(int(elapsed * 3), 2),
    )


def calculate_nathonnatha_bala(body: Body, is_day: bool) -> float:
    if body is Body.MERCURY:
        return 60.0
    if body in DAY_STRONG:
        return 60.0 if is_day else 0.0
    if body in NIGHT_STRONG:
        return 0.0 if is_day else 60.0
    return NEUTRAL_VIRUPAS


def calculate_paksha_bala(body: Body, sun_longitude: float, moon_longitude: float) -> float:
    """Elongation based strength: benefics gain in the bright half."""
    elongation = normalize_angle(moon_longitude - sun_longitude)
    phase = min(elongation, 360.0 - elongation) / 3.0
    if body in NATURAL_BENEFICS:
        return phase
    return 60.0 - phase


def calculate_tribhaga_bala(body: Body, is_day: bool, part: int) -> float:
    if body is Body.JUPITER:
        return 60.0
    lords = DAY_TRIBHAGA if is_day else NIGHT_TRIBHAGA
    return 60.0 if lords[part] is body else 0.0


def calculate_hora_adi_bala(
    body: Body, day_lord: Body, hora_lord: Body, moon_sign_ruler: Body | None
) -> float:
    bala = 0.0
    if body is day_lord:
        bala += 15.0
    if body is hora_lord:
        bala += 15.0
    if moon_sign_ruler is not None and body is moon_sign_ruler:
        bala += 10.0
    if body is Body.SUN:
        bala += 5.0
    return bala


def calculate_ayana_bala(body: Body, sidereal_longitude: float, ayanamsa: float) -> float:
    """Declination based strength from the tropical longitude."""
    tropical = normalize_angle(sidereal_longitude + ayanamsa)
    declination = MAX_DECLINATION * math.sin(math.radians(tropical))
    if body in (Body.SUN, Body.MARS, Body.JUPITER, Body.VENUS):
        value = 30.0 + declination
    elif body in (Body.MOON, Body.SATURN):
        value = 30.0 - declination
    elif body is Body.MERCURY:
        value = 30.0 + abs(declination)
    else:
        value = NEUTRAL_VIRUPAS
    return clamp_value(value, 0.0, 60.0)


def calculate_yuddha_bala(position: PlanetPosition, chart: VedicChart) -> float:
    """Planetary war: within one degree the brighter body wins."""
    if position.body not in WAR_BRIGHTNESS_ORDER:
        return 0.0
    for other in chart.positions:
        if other.body is position.body or other.body not in WAR_BRIGHTNESS_ORDER:
            continue
        if angular_distance(position.sidereal_longitude, other.sidereal_longitude) <= WAR_ORB:
            wins = WAR_BRIGHTNESS_ORDER.index(position.body) < WAR_BRIGHTNESS_ORDER.index(
                other.body
            )
            return YUDDHA_VIRUPAS if wins else -YUDDHA_VIRUPAS
    return 0.0


def calculate_kala_bala(
    position: PlanetPosition, chart: VedicChart, issues: list[ComputationIssue]
) -> KalaBala:
    """Calculate temporal strength.

    Includes:
    - Nathonnatha Bala (diurnal/nocturnal strength)
    - Paksha Bala (lunar phase strength)
    - Tribhaga Bala (third part of day/night)
    - Hora-adi Bala (day lord, hora lord, Moon-sign ruler)
    - Ayana Bala (declination)
    - Yuddha Bala (planetary war)
    """
    body = position.body
    sun = chart.position(Body.SUN)
    moon = chart.position(Body.MOON)
    ctx = _day_context(chart)

    if ctx is None:
        issues.append(
            ComputationIssue(
                kind=IssueKind.PARTIAL_STRENGTH_INPUT,
                component="kala_bala",
                message="sunrise/sunset undefined; nathonnatha, tribhaga and hora-adi set neutral",
                body=body.name,
            )
        )
        nathonnatha = tribhaga = hora_adi = NEUTRAL_VIRUPAS
    else:
        nathonnatha = calculate_nathonnatha_bala(body, ctx.is_day)
        tribhaga = calculate_tribhaga_bala(body, ctx.is_day, ctx.part)
        hora_adi = calculate_hora_adi_bala(
            body, ctx.day_lord, ctx.hora_lord, moon.sign.ruler if moon else None
        )

    if sun is None or moon is None:
        issues.append(
            ComputationIssue(
                kind=IssueKind.PARTIAL_STRENGTH_INPUT,
                component="kala_bala",
                message="Sun or Moon position unavailable; paksha set neutral",
                body=body.name,
            )
        )
        paksha = NEUTRAL_VIRUPAS
    else:
        paksha = calculate_paksha_bala(body, sun.sidereal_longitude, moon.sidereal_longitude)

    return KalaBala(
        nathonnatha=nathonnatha,
        paksha=paksha,
        tribhaga=tribhaga,
        hora_adi=hora_adi,
        ayana=calculate_ayana_bala(body, position.sidereal_longitude, chart.ayanamsa_value),
        yuddha=calculate_yuddha_bala(position, chart),
    )


# ============================================================================
# CHESTA, NAISARGIKA, DRIK
# ============================================================================


def calculate_chesta_bala(position: PlanetPosition) -> float:
    """Calculate motional strength based on speed and retrogression."""
    if position.body in (Body.SUN, Body.MOON) or position.body.is_node:
        return FIXED_CHESTA_VIRUPAS
    if position.is_retrograde:
        return 60.0
    speed = abs(position.speed)
    if speed < 0.01:
        return 50.0
    if speed < 0.5:
        return 40.0
    if speed < 1.0:
        return 30.0
    return 20.0


def calculate_drik_bala(body: Body, aspects: AspectMatrix) -> float:
    """Calculate aspectual strength.

    Benefic aspects add strength, malefic aspects reduce it.
    """
    strength = sum(DRIK_WEIGHTS.get(a.from_body, 0.0) * a.drishti for a in aspects.received(body))
    return clamp_value(strength, DRIK_BALA_MIN, DRIK_BALA_MAX)


# ============================================================================
# ENTRY POINTS
# ============================================================================


def calculate_shadbala(
    chart: VedicChart, body: Body, aspects: AspectMatrix
) -> ShadbalaResult:
    """Shadbala of a single body.

    Args:
        chart: Computed chart
        body: Classical body present in the chart
        aspects: Aspect matrix of the chart (feeds drik bala)

    Returns:
        ShadbalaResult with every sub-strength in virupas

    Raises:
        ValueError: body is not a classical body or has no position
    """
    if body not in CLASSICAL_BODIES:
        raise ValueError(f"Shadbala is defined for classical bodies only, got {body.name}")
    position = chart.position(body)
    if position is None:
        raise ValueError(f"No position for {body.name} in chart")

    issues: list[ComputationIssue] = []
    result = ShadbalaResult(
        body=body,
        sthana=calculate_sthana_bala(position),
        dig_bala=calculate_dig_bala(body, position.house),
        kala=calculate_kala_bala(position, chart, issues),
        chesta_bala=calculate_chesta_bala(position),
        naisargika_bala=NAISARGIKA_BALA[body],
        drik_bala=calculate_drik_bala(body, aspects),
        required_rupas=REQUIRED_RUPAS[body],
        issues=tuple(issues),
    )

    if result.is_partial:
        logger.warning(
            "Shadbala computed with neutral substitutes",
            extra={"body": body.name, "issues": len(issues)},
        )
    return result


@require_feature("shadbala")
def compute_shadbala(
    chart: VedicChart, aspects: AspectMatrix
) -> PartialResult[dict[Body, ShadbalaResult]]:
    """Compute Shadbala for every classical body in the chart.

    Args:
        chart: Computed chart
        aspects: Aspect matrix of the chart

    Returns:
        PartialResult of per-body results; issues from every body are
        collected on the aggregate
    """
    results: dict[Body, ShadbalaResult] = {}
    issues: list[ComputationIssue] = []
    for position in chart.positions:
        if position.body not in CLASSICAL_BODIES:
            continue
        result = calculate_shadbala(chart, position.body, aspects)
        results[position.body] = result
        issues.extend(result.issues)

    logger.debug("Shadbala computed", extra={"bodies": len(results)})
    return PartialResult(value=results, issues=tuple(issues))


def strength_summary(results: dict[Body, ShadbalaResult]) -> dict[str, Any]:
    """Strongest and weakest bodies by percentage of required strength."""
    if not results:
        return {"strongest": None, "weakest": None, "strong": [], "weak": []}
    ranked = sorted(results.values(), key=lambda r: r.percentage_of_required, reverse=True)
    return {
        "strongest": ranked[0].body.display_name,
        "weakest": ranked[-1].body.display_name,
        "strong": [r.body.display_name for r in ranked if r.is_strong],
        "weak": [r.body.display_name for r in ranked if not r.is_strong],
        "ranking": [(r.body.display_name, round(r.percentage_of_required, 2)) for r in ranked],
    }
