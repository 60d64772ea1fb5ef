"""
Vedic Drishti (Aspects) calculation module.
Implements standard angular aspects and the Parashari special aspects
with body-specific orbs, in sign, degree or hybrid mode.
"""

from __future__ import annotations

from collections.abc import Iterable
from itertools import combinations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from astrostorm.config.feature_flags import require_feature
from astrostorm.constants.vedic_orbs import (
    ASPECT_NATURE,
    ASPECT_STRENGTH,
    DRISHTI_FRACTION,
    SPECIAL_ASPECTS,
    STANDARD_ASPECT_ANGLES,
    STANDARD_ASPECT_SIGNS,
    get_aspect_orb,
)
from astrostorm.core.logging import get_engine_logger
from astrostorm.ephemeris.constants import CLASSICAL_BODIES, NATURAL_MALEFICS, Body
from astrostorm.ephemeris.core_types import PlanetPosition, VedicChart
from astrostorm.ephemeris.numerics import angular_distance, forward_angle

logger = get_engine_logger("aspects")


class AspectMode(str, Enum):
    SIGN = "SIGN"  # whole-sign counting only
    DEGREE = "DEGREE"  # orb only
    HYBRID = "HYBRID"  # sign count, or orb with the adjacent sign


@dataclass(frozen=True)
class AspectInfo:
    """Information about a single aspect."""

    from_body: Body
    to_body: Body
    aspect_type: str
    angle: float  # forward angle from the aspecting body
    exact_orb: float  # deviation from the exact aspect angle
    strength: float  # 0-100
    drishti: float  # 0-1
    is_applying: bool
    is_special: bool
    sign_match: bool

    @property
    def nature(self) -> str:
        return ASPECT_NATURE.get(self.aspect_type, "variable")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "from": self.from_body.value,
            "to": self.to_body.value,
            "type": self.aspect_type,
            "angle": round(self.angle, 2),
            "orb": round(self.exact_orb, 4),
            "strength": round(self.strength, 2),
            "drishti": round(self.drishti, 4),
            "applying": self.is_applying,
            "special": self.is_special,
            "sign_match": self.sign_match,
            "nature": self.nature,
        }


@dataclass
class AspectMatrix:
    """Complete aspect relationships in chart."""

    mode: AspectMode
    aspects: list[AspectInfo] = field(default_factory=list)
    planet_aspects: dict[Body, dict[Body, AspectInfo]] = field(default_factory=dict)
    received_aspects: dict[Body, list[AspectInfo]] = field(default_factory=dict)
    aspect_counts: dict[Body, dict[str, int]] = field(default_factory=dict)

    def add(self, aspect: AspectInfo) -> None:
        self.aspects.append(aspect)
        self.planet_aspects.setdefault(aspect.from_body, {})[aspect.to_body] = aspect
        self.received_aspects.setdefault(aspect.to_body, []).append(aspect)
        counts = self.aspect_counts.setdefault(aspect.from_body, {})
        counts[aspect.aspect_type] = counts.get(aspect.aspect_type, 0) + 1

    def aspect_between(self, from_body: Body, to_body: Body) -> AspectInfo | None:
        return self.planet_aspects.get(from_body, {}).get(to_body)

    def received(self, body: Body) -> list[AspectInfo]:
        return self.received_aspects.get(body, [])

    def aspects_from(self, body: Body) -> list[AspectInfo]:
        return list(self.planet_aspects.get(body, {}).values())

    def mutual_aspects(self) -> list[tuple[AspectInfo, AspectInfo]]:
        """Pairs of bodies that aspect each other, each pair listed once."""
        pairs = []
        for a in self.aspects:
            if a.from_body < a.to_body:
                back = self.aspect_between(a.to_body, a.from_body)
                if back is not None:
                    pairs.append((a, back))
        return pairs

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "mode": self.mode.value,
            "aspects": [a.to_dict() for a in self.aspects],
            "aspect_counts": {b.value: c for b, c in self.aspect_counts.items()},
            "mutual": [[a.from_body.value, a.to_body.value] for a, _ in self.mutual_aspects()],
            "total_aspects": len(self.aspects),
        }


@dataclass(frozen=True)
class _Candidate:
    aspect_type: str
    deviation: float
    sign_match: bool
    sign_adjacent: bool
    is_special: bool
    target: float


def _sign_gap(a: int, b: int) -> int:
    """Circular distance between two sign counts (1-12)."""
    d = abs(a - b) % 12
    return min(d, 12 - d)


def _candidates(from_body: Body, fwd: float, sep: float, sign_count: int) -> list[_Candidate]:
    out = []
    # Special aspects first so they win ties
    for aspect_type, (house_count, angle) in SPECIAL_ASPECTS.get(from_body, {}).items():
        out.append(
            _Candidate(
                aspect_type=aspect_type,
                deviation=angular_distance(fwd, angle),
                sign_match=sign_count == house_count,
                sign_adjacent=_sign_gap(sign_count, house_count) <= 1,
                is_special=True,
                target=angle,
            )
        )
    for aspect_type, angle in STANDARD_ASPECT_ANGLES.items():
        counts = STANDARD_ASPECT_SIGNS[aspect_type]
        out.append(
            _Candidate(
                aspect_type=aspect_type,
                deviation=abs(sep - angle),
                sign_match=sign_count in counts,
                sign_adjacent=min(_sign_gap(sign_count, c) for c in counts) <= 1,
                is_special=False,
                target=angle,
            )
        )
    return out


def _accepted(c: _Candidate, orb: float, mode: AspectMode) -> bool:
    within = c.deviation <= orb
    if mode is AspectMode.SIGN:
        return c.sign_match
    if mode is AspectMode.DEGREE:
        return within
    return c.sign_match or (within and c.sign_adjacent)


def calculate_drishti(aspect_type: str, deviation: float, orb: float, sign_match: bool, mode: AspectMode) -> float:
    """Drishti value (0-1) of an aspect.

    Args:
        aspect_type: Type of aspect
        deviation: Distance from the exact aspect angle
        orb: Allowed orb for the aspecting body
        sign_match: Whether the sign count matches the aspect
        mode: Aspect mode in use

    Returns:
        Classical drishti fraction scaled by closeness
    """
    base = DRISHTI_FRACTION.get(aspect_type, 0.5)
    ratio = deviation / orb if orb > 0 else 0.0
    if mode is AspectMode.SIGN:
        factor = 1.0
    elif mode is AspectMode.DEGREE:
        factor = 1.0 - ratio * 0.5
    elif sign_match:
        factor = 1.0 if deviation <= orb else 0.9
    else:
        factor = 0.8 - ratio * 0.3
    return max(0.0, base * factor)


def calculate_aspect_strength(aspect_type: str, deviation: float, max_orb: float) -> float:
    """Calculate aspect strength based on orb.

    Args:
        aspect_type: Type of aspect
        deviation: Actual orb
        max_orb: Maximum allowed orb

    Returns:
        Strength percentage (0-100)
    """
    base_strength = ASPECT_STRENGTH.get(aspect_type, 50.0)

    # Reduce strength based on orb
    if max_orb > 0:
        orb_factor = max(0.0, 1 - (deviation / max_orb))
    else:
        orb_factor = 1.0

    return base_strength * orb_factor


def _deviation(c: _Candidate, from_lon: float, to_lon: float) -> float:
    if c.is_special:
        return angular_distance(forward_angle(from_lon, to_lon), c.target)
    return abs(angular_distance(from_lon, to_lon) - c.target)


def is_aspect_applying(c: _Candidate, from_pos: PlanetPosition, to_pos: PlanetPosition) -> bool:
    """True when one day of motion brings the pair closer to exactness."""
    later = _deviation(
        c,
        from_pos.sidereal_longitude + from_pos.speed,
        to_pos.sidereal_longitude + to_pos.speed,
    )
    return later < c.deviation


def check_aspect(
    from_pos: PlanetPosition, to_pos: PlanetPosition, mode: AspectMode = AspectMode.HYBRID
) -> AspectInfo | None:
    """Check if one body aspects another.

    Args:
        from_pos: Aspecting body
        to_pos: Aspected body
        mode: Aspect mode

    Returns:
        The closest qualifying aspect, or None
    """
    fwd = forward_angle(from_pos.sidereal_longitude, to_pos.sidereal_longitude)
    sep = angular_distance(from_pos.sidereal_longitude, to_pos.sidereal_longitude)
    sign_count = ((to_pos.sign - from_pos.sign) % 12) + 1

    best: _Candidate | None = None
    for c in _candidates(from_pos.body, fwd, sep, sign_count):
        orb = get_aspect_orb(from_pos.body, c.aspect_type)
        if not _accepted(c, orb, mode):
            continue
        if best is None or c.deviation < best.deviation:
            best = c

    if best is None:
        return None

    orb = get_aspect_orb(from_pos.body, best.aspect_type)
    return AspectInfo(
        from_body=from_pos.body,
        to_body=to_pos.body,
        aspect_type=best.aspect_type,
        angle=fwd,
        exact_orb=best.deviation,
        strength=calculate_aspect_strength(best.aspect_type, best.deviation, orb),
        drishti=calculate_drishti(best.aspect_type, best.deviation, orb, best.sign_match, mode),
        is_applying=is_aspect_applying(best, from_pos, to_pos),
        is_special=best.is_special,
        sign_match=best.sign_match,
    )


@require_feature("vedic_aspects")
def calculate_aspects(
    positions: VedicChart | Iterable[PlanetPosition],
    mode: AspectMode | str | None = None,
) -> AspectMatrix:
    """Calculate all Vedic aspects between classical bodies.

    Args:
        positions: Chart or positions to examine
        mode: SIGN, DEGREE or HYBRID (defaults to configured mode)

    Returns:
        AspectMatrix with one aspect per ordered pair at most
    """
    if mode is None:
        from astrostorm.config.settings import get_settings

        mode = get_settings().aspect_mode
    mode = AspectMode(mode)

    if isinstance(positions, VedicChart):
        positions = positions.positions
    bodies = [p for p in positions if p.body in CLASSICAL_BODIES]

    matrix = AspectMatrix(mode=mode)
    for from_pos in bodies:
        for to_pos in bodies:
            if from_pos.body is to_pos.body:
                continue
            aspect = check_aspect(from_pos, to_pos, mode)
            if aspect is not None:
                matrix.add(aspect)

    logger.debug(
        "Aspects calculated",
        extra={"mode": mode.value, "bodies": len(bodies), "aspects": len(matrix.aspects)},
    )
    return matrix


def analyze_aspects(matrix: AspectMatrix) -> dict[str, Any]:
    """Analyze aspect patterns and provide insights.

    Args:
        matrix: Aspect matrix

    Returns:
        Analysis dictionary
    """
    analysis: dict[str, Any] = {
        "total_aspects": len(matrix.aspects),
        "applying_aspects": sum(1 for a in matrix.aspects if a.is_applying),
        "separating_aspects": sum(1 for a in matrix.aspects if not a.is_applying),
        "special_aspects": sum(1 for a in matrix.aspects if a.is_special),
        "mutual_aspects": len(matrix.mutual_aspects()),
        "strongest_aspects": [],
        "aspect_patterns": [],
        "planetary_stress": {},
    }

    sorted_aspects = sorted(matrix.aspects, key=lambda x: x.strength, reverse=True)
    for aspect in sorted_aspects[:5]:
        analysis["strongest_aspects"].append(
            {
                "from": aspect.from_body.display_name,
                "to": aspect.to_body.display_name,
                "type": aspect.aspect_type,
                "strength": aspect.strength,
            }
        )

    # Planetary stress (malefic aspects received)
    targets = {a.to_body for a in matrix.aspects} | set(matrix.planet_aspects)
    for body in sorted(targets):
        received = matrix.received(body)
        malefic_aspects = sum(1 for a in received if a.from_body in NATURAL_MALEFICS)
        benefic_aspects = len(received) - malefic_aspects

        stress_level = "neutral"
        if malefic_aspects > benefic_aspects + 1:
            stress_level = "high"
        elif malefic_aspects > benefic_aspects:
            stress_level = "moderate"
        elif benefic_aspects > malefic_aspects:
            stress_level = "low"

        analysis["planetary_stress"][body.display_name] = {
            "level": stress_level,
            "malefic_aspects": malefic_aspects,
            "benefic_aspects": benefic_aspects,
        }

    analysis["aspect_patterns"] = detect_aspect_patterns(matrix)
    return analysis


def detect_aspect_patterns(matrix: AspectMatrix) -> list[str]:
    """Detect common aspect patterns.

    Args:
        matrix: Aspect matrix

    Returns:
        List of detected patterns
    """
    patterns = []

    def pairs(aspect_type: str) -> set[frozenset[Body]]:
        return {
            frozenset((a.from_body, a.to_body))
            for a in matrix.aspects
            if a.aspect_type == aspect_type
        }

    trines = pairs("trine")
    squares = pairs("square")
    oppositions = pairs("opposition")
    bodies = sorted({b for pair in trines | squares | oppositions for b in pair})

    # Grand Trine: three bodies mutually in trine
    if any(
        {frozenset((a, b)), frozenset((b, c)), frozenset((a, c))} <= trines
        for a, b, c in combinations(bodies, 3)
    ):
        patterns.append("Grand Trine")

    # T-Square: an opposition whose ends are both squared by a third body
    t_square = any(
        frozenset((x, apex)) in squares and frozenset((y, apex)) in squares
        for x, y in (tuple(p) for p in oppositions)
        for apex in bodies
        if apex not in (x, y)
    )
    if t_square:
        patterns.append("T-Square")

    # Grand Cross: two oppositions whose four ends square each other in a ring
    grand_cross = any(
        {
            frozenset((a, b)),
            frozenset((b, c)),
            frozenset((c, d)),
            frozenset((d, a)),
        }
        <= squares
        for (a, c), (b, d) in combinations([tuple(p) for p in oppositions], 2)
        if not {a, c} & {b, d}
    )
    if grand_cross:
        patterns.append("Grand Cross")

    conjunctions = pairs("conjunction")
    if len(conjunctions) >= 3:
        patterns.append("Stellium Potential")

    return patterns if patterns else ["No major patterns"]
