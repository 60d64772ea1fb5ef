"""
Yoga predicates.

Each predicate is a pure function of (chart, aspects) returning a
YogaMatch, a list of them, or None. Predicates register themselves in
evaluation order; display text lives in catalog.yaml and is attached by
the engine.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import combinations

from astrostorm.constants.combustion_orbs import COMBUSTION_ORBS, RETROGRADE_COMBUSTION_ORBS
from astrostorm.constants.relationships import (
    EXALTATION_SIGNS,
    OWN_SIGNS,
    Relationship,
    is_debilitated,
    is_exalted,
    is_own_sign,
    natural_relationship,
)
from astrostorm.constants.shadbala_tables import DIG_BALA_HOUSE
from astrostorm.ephemeris.constants import (
    DUSTHANA_HOUSES,
    KENDRA_HOUSES,
    SEVEN_PLANETS,
    UPACHAYA_HOUSES,
    Body,
    Nakshatra,
    ZodiacSign,
)
from astrostorm.ephemeris.core_types import PlanetPosition, VedicChart
from astrostorm.ephemeris.numerics import angular_distance, clamp_value, forward_angle
from astrostorm.ephemeris.varga import is_vargottama
from astrostorm.modules.aspects.vedic_drsti import AspectMatrix

B = Body

CONJUNCTION_ORB = 8.0
KENDRA_TRIKONA_HOUSES = frozenset({1, 4, 5, 7, 9, 10})
GAIN_HOUSES = frozenset({2, 11})

# Benefics and malefics as used for hemming and yoga formation
YOGA_BENEFICS: tuple[Body, ...] = (B.JUPITER, B.VENUS, B.MERCURY, B.MOON)
YOGA_MALEFICS: tuple[Body, ...] = (B.SATURN, B.MARS, B.RAHU, B.KETU, B.SUN)

# Reduction applied per aspecting malefic, capped at MAX_AFFLICTION
MALEFIC_AFFLICTION: dict[Body, float] = {
    B.SATURN: 0.25,
    B.MARS: 0.20,
    B.RAHU: 0.18,
    B.KETU: 0.12,
    B.SUN: 0.08,
}
MAX_AFFLICTION = 0.6

# Boost per aspecting benefic, capped at MAX_BENEFIC_BOOST
BENEFIC_BOOST: dict[Body, float] = {
    B.JUPITER: 0.15,
    B.VENUS: 0.10,
    B.MERCURY: 0.08,
    B.MOON: 0.05,
}
MAX_BENEFIC_BOOST = 0.3

DEEP_COMBUSTION_DEGREES = 3.0
NABHASA_STRENGTH = 60.0

DASA_MULA_NAKSHATRAS = frozenset(
    {Nakshatra.ASHWINI, Nakshatra.DHANISHTHA, Nakshatra.MULA, Nakshatra.REVATI}
)

KALA_SARPA_TYPES: dict[int, str] = {
    1: "Anant",
    2: "Kulik",
    3: "Vasuki",
    4: "Shankhpal",
    5: "Padma",
    6: "Mahapadma",
    7: "Takshak",
    8: "Karkotak",
    9: "Shankhachud",
    10: "Ghatak",
    11: "Vishdhar",
    12: "Sheshnag",
}

HOUSE_AFFAIRS: dict[int, str] = {
    1: "self and health",
    2: "wealth and family",
    3: "siblings and courage",
    4: "home, mother and property",
    5: "children and education",
    6: "health and enemies",
    7: "marriage and partnership",
    8: "longevity and inheritance",
    9: "fortune and father",
    10: "career and reputation",
    11: "gains and elder siblings",
    12: "expenses and spirituality",
}


@dataclass(frozen=True)
class YogaMatch:
    """A detected combination before catalog text is attached."""

    key: str
    bodies: tuple[Body, ...]
    houses: tuple[int, ...]
    strength: float
    cancellation_factors: tuple[str, ...] = ()
    params: Mapping[str, str] = field(default_factory=dict)
    variant: str | None = None
    is_auspicious: bool | None = None
    # Conditions checked against the chart that nullify the yoga
    cancelled_by: tuple[str, ...] = ()


PredicateResult = YogaMatch | list[YogaMatch] | None
Predicate = Callable[[VedicChart, AspectMatrix], PredicateResult]

PREDICATES: list[tuple[str, Predicate]] = []


def predicate(name: str) -> Callable[[Predicate], Predicate]:
    """Register a yoga predicate; registration order is evaluation order."""

    def decorator(fn: Predicate) -> Predicate:
        PREDICATES.append((name, fn))
        return fn

    return decorator


def run_predicates(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    matches: list[YogaMatch] = []
    for _, fn in PREDICATES:
        result = fn(chart, aspects)
        if result is None:
            continue
        if isinstance(result, YogaMatch):
            matches.append(result)
        else:
            matches.extend(result)
    return matches


# ============================================================================
# RELATIONSHIP HELPERS
# ============================================================================


def house_from(pos: PlanetPosition, reference: PlanetPosition) -> int:
    """Whole-sign house of `pos` counted from `reference`."""
    return ((pos.sign - reference.sign) % 12) + 1


def are_conjunct(a: PlanetPosition, b: PlanetPosition, orb: float = CONJUNCTION_ORB) -> bool:
    return angular_distance(a.sidereal_longitude, b.sidereal_longitude) <= orb


def aspects_body(aspects: AspectMatrix, from_body: Body, to_body: Body) -> bool:
    """Whether `from_body` casts a non-conjunction aspect on `to_body`."""
    info = aspects.aspect_between(from_body, to_body)
    return info is not None and info.aspect_type != "conjunction"


def mutually_aspecting(aspects: AspectMatrix, a: Body, b: Body) -> bool:
    return aspects_body(aspects, a, b) and aspects_body(aspects, b, a)


def in_exchange(a: PlanetPosition, b: PlanetPosition) -> bool:
    """Parivartana: each occupies a sign ruled by the other."""
    return a.sign.ruler is b.body and b.sign.ruler is a.body


def in_kendra_from(pos: PlanetPosition, reference: PlanetPosition) -> bool:
    return house_from(pos, reference) in KENDRA_HOUSES


def is_in_friend_sign(pos: PlanetPosition) -> bool:
    if is_own_sign(pos.body, pos.sign):
        return False
    return natural_relationship(pos.body, pos.sign.ruler) is Relationship.FRIEND


def is_in_enemy_sign(pos: PlanetPosition) -> bool:
    return natural_relationship(pos.body, pos.sign.ruler) is Relationship.ENEMY


def is_strong_sign(pos: PlanetPosition) -> bool:
    return is_exalted(pos.body, pos.sign) or is_own_sign(pos.body, pos.sign)


def has_dig_bala(pos: PlanetPosition) -> bool:
    return DIG_BALA_HOUSE.get(pos.body) == pos.house


def house_lords(chart: VedicChart) -> dict[int, Body]:
    return {h: chart.lord_of_house(h) for h in range(1, 13)}


def _unique(bodies: Iterable[Body]) -> list[Body]:
    return list(dict.fromkeys(bodies))


def _planets(chart: VedicChart, exclude: Iterable[Body] = ()) -> list[PlanetPosition]:
    skip = set(exclude)
    return [p for p in chart.positions if p.body in SEVEN_PLANETS and p.body not in skip]


def _names(positions: Sequence[PlanetPosition]) -> str:
    return ", ".join(p.body.display_name for p in positions)


# ============================================================================
# STRENGTH
# ============================================================================


def combustion_factor(pos: PlanetPosition, chart: VedicChart) -> float:
    """1.0 when free of the Sun, falling to 0.2 within 3 degrees of it."""
    if pos.body is B.SUN:
        return 1.0
    orbs = COMBUSTION_ORBS.get(pos.body)
    sun = chart.position(B.SUN)
    if orbs is None or sun is None:
        return 1.0
    if pos.is_retrograde and pos.body in RETROGRADE_COMBUSTION_ORBS:
        orbs = RETROGRADE_COMBUSTION_ORBS[pos.body]
    orb = orbs[0]

    distance = angular_distance(pos.sidereal_longitude, sun.sidereal_longitude)
    if distance >= orb:
        return 1.0
    if distance <= DEEP_COMBUSTION_DEGREES:
        return 0.2
    depth = 1.0 - distance / orb
    return 1.0 - depth * 0.6


def is_papakartari(pos: PlanetPosition, chart: VedicChart) -> bool:
    """Hemmed between malefics in the adjacent houses."""
    before = pos.house - 1 if pos.house > 1 else 12
    after = pos.house + 1 if pos.house < 12 else 1
    malefic_houses = {p.house for p in chart.positions if p.body in YOGA_MALEFICS}
    return before in malefic_houses and after in malefic_houses


def malefic_affliction_factor(pos: PlanetPosition, aspects: AspectMatrix) -> float:
    total = sum(
        weight
        for malefic, weight in MALEFIC_AFFLICTION.items()
        if malefic is not pos.body and aspects_body(aspects, malefic, pos.body)
    )
    return 1.0 - min(total, MAX_AFFLICTION)


def moon_phase_strength(chart: VedicChart) -> float:
    """0 at new moon, 1 at full moon."""
    sun = chart.position(B.SUN)
    moon = chart.position(B.MOON)
    if sun is None or moon is None:
        return 0.5
    return angular_distance(moon.sidereal_longitude, sun.sidereal_longitude) / 180.0


def benefic_aspect_boost(pos: PlanetPosition, chart: VedicChart, aspects: AspectMatrix) -> float:
    total = 0.0
    for benefic, weight in BENEFIC_BOOST.items():
        if benefic is pos.body:
            continue
        benefic_pos = chart.position(benefic)
        if benefic_pos is None:
            continue
        # waning Moon and combust Mercury do not help
        if benefic is B.MOON and moon_phase_strength(chart) < 0.5:
            continue
        if benefic is B.MERCURY and combustion_factor(benefic_pos, chart) < 0.6:
            continue
        if aspects_body(aspects, benefic, pos.body):
            total += weight
    return 1.0 + min(total, MAX_BENEFIC_BOOST)


def has_neecha_bhanga(pos: PlanetPosition, chart: VedicChart) -> bool:
    """Debilitation cancelled by a kendra placement of the planet or its dispositor."""
    if pos.house in KENDRA_HOUSES:
        return True
    dispositor = chart.position(pos.sign.ruler)
    return dispositor is not None and dispositor.house in KENDRA_HOUSES


def cancellation_factor(
    positions: Sequence[PlanetPosition], chart: VedicChart, aspects: AspectMatrix
) -> tuple[float, list[str]]:
    """Net multiplier (0.1-1.5) and the reasons that reduced it."""
    reasons: list[str] = []
    net = 1.0

    for pos in positions:
        name = pos.body.display_name

        combust = combustion_factor(pos, chart)
        if combust < 0.9:
            net *= combust
            if combust < 0.5:
                reasons.append(f"{name} is deeply combust")
            elif combust < 0.8:
                reasons.append(f"{name} is combust")

        if is_papakartari(pos, chart):
            net *= 0.7
            reasons.append(f"{name} hemmed between malefics")

        affliction = malefic_affliction_factor(pos, aspects)
        if affliction < 0.9:
            net *= affliction
            if affliction < 0.7:
                reasons.append(f"{name} severely afflicted by malefics")

        if is_debilitated(pos.body, pos.sign) and not has_neecha_bhanga(pos, chart):
            net *= 0.5
            reasons.append(f"{name} debilitated without cancellation")

        if is_in_enemy_sign(pos):
            net *= 0.85
            reasons.append(f"{name} in enemy sign")

        net *= benefic_aspect_boost(pos, chart, aspects)

    return clamp_value(net, 0.1, 1.5), reasons


def yoga_strength(
    chart: VedicChart, aspects: AspectMatrix, positions: Sequence[PlanetPosition]
) -> tuple[float, list[str]]:
    """Strength percentage (10-100) of a yoga formed by `positions`.

    Starts from 50, adds dignity and placement modifiers per planet, then
    applies the cancellation factor.
    """
    base = 50.0
    for pos in positions:
        if is_exalted(pos.body, pos.sign):
            base += 15.0
        if is_own_sign(pos.body, pos.sign):
            base += 12.0
        if is_in_friend_sign(pos):
            base += 6.0
        if pos.house in KENDRA_TRIKONA_HOUSES:
            base += 8.0
        if pos.house in GAIN_HOUSES:
            base += 4.0
        if is_debilitated(pos.body, pos.sign):
            base -= 15.0
        if pos.house in DUSTHANA_HOUSES:
            base -= 10.0
        if pos.is_retrograde:
            if pos.body in (B.JUPITER, B.VENUS, B.MERCURY):
                base += 5.0
            elif pos.body is B.SATURN:
                base += 3.0
            elif pos.body is B.MARS:
                base -= 2.0
        if has_dig_bala(pos):
            base += 7.0

    factor, reasons = cancellation_factor(positions, chart, aspects)
    return clamp_value(base * factor, 10.0, 100.0), reasons


def mahapurusha_strength(
    pos: PlanetPosition, chart: VedicChart, aspects: AspectMatrix
) -> tuple[float, list[str]]:
    """Strength (30-100) of a Pancha Mahapurusha yoga."""
    reasons: list[str] = []
    strength = 70.0 + {1: 15.0, 10: 12.0, 7: 10.0, 4: 8.0}.get(pos.house, 0.0)
    if has_dig_bala(pos):
        strength += 5.0

    combust = combustion_factor(pos, chart)
    if combust < 1.0:
        strength *= combust
        if combust < 0.6:
            reasons.append(f"{pos.body.display_name} is combust")

    strength *= benefic_aspect_boost(pos, chart, aspects)

    affliction = malefic_affliction_factor(pos, aspects)
    if affliction < 0.85:
        strength *= affliction
        reasons.append("Malefic aspects reduce yoga results")

    if is_papakartari(pos, chart):
        strength *= 0.75
        reasons.append("Planet hemmed between malefics")

    moon = chart.position(B.MOON)
    if moon is not None:
        from_moon = house_from(pos, moon)
        if from_moon in DUSTHANA_HOUSES:
            strength *= 0.85
            reasons.append("Weak position from Moon")
        elif from_moon in KENDRA_HOUSES:
            strength *= 1.1

    return clamp_value(strength, 30.0, 100.0), reasons


def _scaled(strength: float, factor: float) -> float:
    return clamp_value(strength * factor, 10.0, 100.0)


# ============================================================================
# RAJA YOGAS
# ============================================================================


@predicate("kendra_trikona")
def kendra_trikona_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Kendra and trikona lords joined by conjunction, mutual aspect or exchange."""
    lords = house_lords(chart)
    kendra_lords = _unique(lords[h] for h in (1, 4, 7, 10))
    trikona_lords = _unique(lords[h] for h in (1, 5, 9))

    out: list[YogaMatch] = []
    seen: set[frozenset[Body]] = set()
    for k in kendra_lords:
        for t in trikona_lords:
            pair = frozenset((k, t))
            if k is t or pair in seen:
                continue
            seen.add(pair)
            kp, tp = chart.position(k), chart.position(t)
            if kp is None or tp is None:
                continue
            params = {"kendra_lord": k.display_name, "trikona_lord": t.display_name}
            strength, reasons = yoga_strength(chart, aspects, [kp, tp])
            houses = (kp.house, tp.house)

            if are_conjunct(kp, tp):
                out.append(
                    YogaMatch(
                        "kendra_trikona_raja", (k, t), houses, strength, tuple(reasons),
                        {**params, "relation": "conjunction"},
                    )
                )
            if mutually_aspecting(aspects, k, t):
                out.append(
                    YogaMatch(
                        "kendra_trikona_raja", (k, t), houses, _scaled(strength, 0.8),
                        tuple(reasons), {**params, "relation": "mutual aspect"},
                    )
                )
            if in_exchange(kp, tp):
                out.append(
                    YogaMatch(
                        "parivartana_raja", (k, t), houses, _scaled(strength, 1.2),
                        tuple(reasons), {"first": k.display_name, "second": t.display_name},
                    )
                )
    return out


@predicate("viparita_raja")
def viparita_raja_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    lords = house_lords(chart)
    dusthana_lords = _unique(lords[h] for h in (6, 8, 12))
    out = []
    for a, b in combinations(dusthana_lords, 2):
        pa, pb = chart.position(a), chart.position(b)
        if pa is None or pb is None:
            continue
        if in_exchange(pa, pb) or are_conjunct(pa, pb):
            strength, reasons = yoga_strength(chart, aspects, [pa, pb])
            for p in (pa, pb):
                if is_strong_sign(p):
                    reasons.append(f"{p.body.display_name} is strong, results may be modified")
            out.append(
                YogaMatch(
                    "viparita_raja", (a, b), (pa.house, pb.house), _scaled(strength, 0.7),
                    tuple(reasons), {"first": a.display_name, "second": b.display_name},
                )
            )
    return out


@predicate("neecha_bhanga")
def neecha_bhanga_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    out = []
    for pos in _planets(chart):
        if is_debilitated(pos.body, pos.sign) and has_neecha_bhanga(pos, chart):
            strength, reasons = yoga_strength(chart, aspects, [pos])
            out.append(
                YogaMatch(
                    "neecha_bhanga_raja", (pos.body,), (pos.house,), strength, tuple(reasons),
                    {"planet": pos.body.display_name},
                )
            )
    return out


@predicate("maha_raja")
def maha_raja_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    """Jupiter and Venus both in kendra from the Moon."""
    moon, jupiter, venus = chart.position(B.MOON), chart.position(B.JUPITER), chart.position(B.VENUS)
    if moon is None or jupiter is None or venus is None:
        return None
    if not (in_kendra_from(jupiter, moon) and in_kendra_from(venus, moon)):
        return None
    strength, reasons = yoga_strength(chart, aspects, [jupiter, venus, moon])
    return YogaMatch(
        "maha_raja", (B.JUPITER, B.VENUS, B.MOON), (jupiter.house, venus.house), strength, tuple(reasons)
    )


# ============================================================================
# DHANA YOGAS
# ============================================================================


@predicate("dhana_lords")
def dhana_lord_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Conjunctions among the lords of 2, 5, 9 and 11."""
    lords = house_lords(chart)
    dhana_lords = _unique(lords[h] for h in (2, 5, 9, 11))
    out = []
    for a, b in combinations(dhana_lords, 2):
        pa, pb = chart.position(a), chart.position(b)
        if pa is None or pb is None or not are_conjunct(pa, pb):
            continue
        strength, reasons = yoga_strength(chart, aspects, [pa, pb])
        out.append(
            YogaMatch(
                "dhana", (a, b), (pa.house, pb.house), strength, tuple(reasons),
                {"first": a.display_name, "second": b.display_name, "affairs": HOUSE_AFFAIRS[pa.house]},
            )
        )
    return out


@predicate("lakshmi")
def lakshmi_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    venus = chart.position(B.VENUS)
    if venus is None or not is_strong_sign(venus) or venus.house not in KENDRA_TRIKONA_HOUSES:
        return None
    strength, reasons = yoga_strength(chart, aspects, [venus])
    return YogaMatch("lakshmi", (B.VENUS,), (venus.house,), _scaled(strength, 1.2), tuple(reasons))


@predicate("kubera")
def kubera_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    jupiter, mercury = chart.position(B.JUPITER), chart.position(B.MERCURY)
    if jupiter is None or mercury is None:
        return None
    if jupiter.house != 2 or not are_conjunct(jupiter, mercury):
        return None
    strength, reasons = yoga_strength(chart, aspects, [jupiter, mercury])
    return YogaMatch("kubera", (B.JUPITER, B.MERCURY), (2,), strength, tuple(reasons))


@predicate("chandra_mangala")
def chandra_mangala_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    moon, mars = chart.position(B.MOON), chart.position(B.MARS)
    if moon is None or mars is None or not are_conjunct(moon, mars):
        return None
    strength, reasons = yoga_strength(chart, aspects, [moon, mars])
    return YogaMatch("chandra_mangala", (B.MOON, B.MARS), (moon.house,), strength, tuple(reasons))


@predicate("labha")
def labha_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    lord = chart.lord_of_house(11)
    pos = chart.position(lord)
    if pos is None or pos.house not in (1, 2, 5, 9, 10, 11):
        return None
    strength, reasons = yoga_strength(chart, aspects, [pos])
    return YogaMatch(
        "labha", (lord,), (pos.house,), strength, tuple(reasons),
        {"lord": lord.display_name, "affairs": HOUSE_AFFAIRS[pos.house]},
    )


# ============================================================================
# PANCHA MAHAPURUSHA YOGAS
# ============================================================================

MAHAPURUSHA_KEYS: dict[Body, str] = {
    B.MARS: "ruchaka",
    B.MERCURY: "bhadra",
    B.JUPITER: "hamsa",
    B.VENUS: "malavya",
    B.SATURN: "sasa",
}


@predicate("mahapurusha")
def mahapurusha_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Mars to Saturn in own or exaltation sign and in a kendra."""
    out = []
    for body, key in MAHAPURUSHA_KEYS.items():
        pos = chart.position(body)
        if pos is None or pos.house not in KENDRA_HOUSES:
            continue
        if pos.sign not in OWN_SIGNS[body] and pos.sign is not EXALTATION_SIGNS[body]:
            continue
        strength, reasons = mahapurusha_strength(pos, chart, aspects)
        out.append(YogaMatch(key, (body,), (pos.house,), strength, tuple(reasons)))
    return out


# ============================================================================
# NABHASA YOGAS
# ============================================================================

MOVABLE = frozenset({ZodiacSign.ARIES, ZodiacSign.CANCER, ZodiacSign.LIBRA, ZodiacSign.CAPRICORN})
FIXED = frozenset({ZodiacSign.TAURUS, ZodiacSign.LEO, ZodiacSign.SCORPIO, ZodiacSign.AQUARIUS})
DUAL = frozenset({ZodiacSign.GEMINI, ZodiacSign.VIRGO, ZodiacSign.SAGITTARIUS, ZodiacSign.PISCES})

# Sankhya yogas by number of occupied signs
SANKHYA_KEYS: dict[int, str] = {
    1: "gola",
    2: "yuga",
    3: "shoola",
    4: "kedara",
    5: "pasha",
    6: "dama",
    7: "veena",
}


def _nabhasa(key: str, planets: Sequence[PlanetPosition]) -> YogaMatch:
    return YogaMatch(
        key,
        tuple(p.body for p in planets),
        tuple(sorted({p.house for p in planets})),
        NABHASA_STRENGTH,
    )


@predicate("nabhasa")
def nabhasa_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Distribution patterns of the seven planets."""
    planets = _planets(chart)
    if not planets:
        return []
    houses = {p.house for p in planets}
    signs = {p.sign for p in planets}
    out = []

    if houses <= {1, 7}:
        out.append(_nabhasa("yava", planets))
    if houses <= {1, 5, 9}:
        out.append(_nabhasa("shringataka", planets))

    kendras = (1, 4, 7, 10)
    for i, first in enumerate(kendras):
        second = kendras[(i + 1) % 4]
        if houses == {first, second}:
            out.append(_nabhasa("gada", planets))
            break

    if houses == {1, 7}:
        out.append(_nabhasa("nabhasa_shakata", planets))

    if signs <= MOVABLE:
        out.append(_nabhasa("rajju", planets))
    if signs <= FIXED:
        out.append(_nabhasa("musala", planets))
    if signs <= DUAL:
        out.append(_nabhasa("nala", planets))

    sankhya = SANKHYA_KEYS.get(len(signs))
    if sankhya is not None:
        out.append(_nabhasa(sankhya, planets))
    return out


# ============================================================================
# CHANDRA YOGAS
# ============================================================================


def _flanking(chart: VedicChart, reference: PlanetPosition, house: int, exclude: Iterable[Body]) -> list[PlanetPosition]:
    return [p for p in _planets(chart, exclude) if house_from(p, reference) == house]


@predicate("chandra")
def chandra_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    moon = chart.position(B.MOON)
    if moon is None:
        return []
    second = _flanking(chart, moon, 2, (B.SUN, B.MOON))
    twelfth = _flanking(chart, moon, 12, (B.SUN, B.MOON))
    out = []

    for key, group in (("sunafa", second), ("anafa", twelfth)):
        if group:
            strength, reasons = yoga_strength(chart, aspects, group)
            out.append(
                YogaMatch(
                    key, tuple(p.body for p in group), tuple(p.house for p in group), strength,
                    tuple(reasons), {"planets": _names(group)},
                )
            )
    if second and twelfth:
        both = second + twelfth
        strength, reasons = yoga_strength(chart, aspects, both)
        out.append(
            YogaMatch(
                "durudhara", tuple(p.body for p in both), tuple(p.house for p in both), strength, tuple(reasons)
            )
        )

    jupiter = chart.position(B.JUPITER)
    if jupiter is not None and in_kendra_from(jupiter, moon):
        strength, reasons = yoga_strength(chart, aspects, [jupiter, moon])
        out.append(
            YogaMatch(
                "gaja_kesari", (B.JUPITER, B.MOON), (jupiter.house, moon.house), strength, tuple(reasons),
                {"house_from_moon": str(house_from(jupiter, moon))},
            )
        )

    benefics = [
        p for p in chart.positions
        if p.body in (B.JUPITER, B.VENUS, B.MERCURY) and house_from(p, moon) in (6, 7, 8)
    ]
    if len(benefics) >= 2:
        strength, reasons = yoga_strength(chart, aspects, benefics)
        out.append(
            YogaMatch(
                "adhi", tuple(p.body for p in benefics), tuple(p.house for p in benefics), strength, tuple(reasons)
            )
        )
    return out


# ============================================================================
# SOLAR YOGAS
# ============================================================================


@predicate("solar")
def solar_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    sun = chart.position(B.SUN)
    if sun is None:
        return []
    second = _flanking(chart, sun, 2, (B.SUN, B.MOON))
    twelfth = _flanking(chart, sun, 12, (B.SUN, B.MOON))
    out = []

    for key, group in (("vesi", second), ("vosi", twelfth)):
        if not group:
            continue
        benefic = any(p.body in (B.JUPITER, B.VENUS, B.MERCURY) for p in group)
        strength, reasons = yoga_strength(chart, aspects, group)
        out.append(
            YogaMatch(
                key, tuple(p.body for p in group), tuple(p.house for p in group), strength, tuple(reasons),
                {"planets": _names(group)},
                variant="benefic" if benefic else "malefic",
                is_auspicious=benefic,
            )
        )
    if second and twelfth:
        both = second + twelfth
        strength, reasons = yoga_strength(chart, aspects, both)
        out.append(
            YogaMatch(
                "ubhayachari", tuple(p.body for p in both), tuple(p.house for p in both), strength, tuple(reasons)
            )
        )
    return out


# ============================================================================
# NEGATIVE YOGAS
# ============================================================================


def _jupiter_touches(chart: VedicChart, aspects: AspectMatrix, target: PlanetPosition) -> bool:
    jupiter = chart.position(B.JUPITER)
    if jupiter is None:
        return False
    return are_conjunct(target, jupiter) or aspects_body(aspects, B.JUPITER, target.body)


@predicate("kemadruma")
def kemadruma_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    """No planet in the 2nd or 12th from the Moon."""
    moon = chart.position(B.MOON)
    if moon is None:
        return None
    if _flanking(chart, moon, 2, (B.SUN, B.MOON)) or _flanking(chart, moon, 12, (B.SUN, B.MOON)):
        return None

    cancellations = []
    if moon.house in KENDRA_HOUSES:
        cancellations.append(f"Moon in kendra (house {moon.house})")
    if _jupiter_touches(chart, aspects, moon):
        cancellations.append("Jupiter aspects or conjoins the Moon")
    if any(house_from(p, moon) in KENDRA_HOUSES for p in _planets(chart, (B.MOON,))):
        cancellations.append("Planets in kendra from the Moon")

    return YogaMatch(
        "kemadruma", (B.MOON,), (moon.house,), 20.0 if cancellations else 80.0, tuple(cancellations),
        variant="cancelled" if cancellations else None,
        cancelled_by=tuple(cancellations),
    )


@predicate("daridra")
def daridra_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    lord = chart.lord_of_house(11)
    pos = chart.position(lord)
    if pos is None or pos.house not in DUSTHANA_HOUSES:
        return None
    return YogaMatch(
        "daridra", (lord,), (pos.house,), 60.0,
        ("Aspect from Jupiter or a strong 11th lord",),
        {"lord": lord.display_name, "house": str(pos.house)},
    )


@predicate("shakata")
def shakata_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    """Moon in the 6th, 8th or 12th from Jupiter."""
    moon, jupiter = chart.position(B.MOON), chart.position(B.JUPITER)
    if moon is None or jupiter is None:
        return None
    from_jupiter = house_from(moon, jupiter)
    if from_jupiter not in DUSTHANA_HOUSES:
        return None
    cancellations = []
    if moon.house in KENDRA_HOUSES:
        cancellations.append("Moon in kendra from the ascendant")
    if is_strong_sign(jupiter):
        cancellations.append("Jupiter is strong")
    return YogaMatch(
        "shakata", (B.MOON, B.JUPITER), (moon.house, jupiter.house), 50.0, tuple(cancellations),
        {"house_from_jupiter": str(from_jupiter)},
    )


@predicate("node_conjunctions")
def node_conjunction_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Guru-Chandal, grahan, Angarak and Shrapit conjunctions with the nodes."""
    rahu, ketu = chart.position(B.RAHU), chart.position(B.KETU)
    sun, moon = chart.position(B.SUN), chart.position(B.MOON)
    jupiter, mars, saturn = chart.position(B.JUPITER), chart.position(B.MARS), chart.position(B.SATURN)
    out = []

    if jupiter is not None and rahu is not None and are_conjunct(jupiter, rahu):
        reasons = []
        if is_strong_sign(jupiter):
            reasons.append("Jupiter in own or exaltation sign")
        out.append(YogaMatch("guru_chandal", (B.JUPITER, B.RAHU), (jupiter.house,), 65.0, tuple(reasons)))

    if sun is not None and rahu is not None and are_conjunct(sun, rahu):
        reasons = []
        if sun.house in UPACHAYA_HOUSES:
            reasons.append("Sun in an upachaya house")
        if is_strong_sign(sun):
            reasons.append("Sun is strong")
        out.append(
            YogaMatch("surya_grahan", (B.SUN, B.RAHU), (sun.house,), 35.0 if reasons else 75.0, tuple(reasons))
        )

    if sun is not None and ketu is not None and are_conjunct(sun, ketu):
        reasons = []
        if is_strong_sign(sun):
            reasons.append("Sun is strong")
        if _jupiter_touches(chart, aspects, sun):
            reasons.append("Jupiter aspects the Sun")
        out.append(YogaMatch("surya_ketu_grahan", (B.SUN, B.KETU), (sun.house,), 55.0, tuple(reasons)))

    if moon is not None and rahu is not None and are_conjunct(moon, rahu):
        reasons = []
        if is_strong_sign(moon):
            reasons.append("Moon is strong")
        if _jupiter_touches(chart, aspects, moon):
            reasons.append("Jupiter aspects or conjoins the Moon")
        out.append(
            YogaMatch("chandra_grahan", (B.MOON, B.RAHU), (moon.house,), 30.0 if reasons else 70.0, tuple(reasons))
        )

    if moon is not None and ketu is not None and are_conjunct(moon, ketu):
        reasons = []
        if is_strong_sign(moon):
            reasons.append("Moon is strong")
        if _jupiter_touches(chart, aspects, moon):
            reasons.append("Jupiter aspects or conjoins the Moon")
        out.append(YogaMatch("chandra_ketu", (B.MOON, B.KETU), (moon.house,), 50.0, tuple(reasons)))

    if mars is not None and rahu is not None and are_conjunct(mars, rahu):
        reasons = []
        if is_strong_sign(mars):
            reasons.append("Mars is strong")
        if mars.house in UPACHAYA_HOUSES:
            reasons.append("Mars in an upachaya house")
        out.append(
            YogaMatch("angarak", (B.MARS, B.RAHU), (mars.house,), 50.0 if reasons else 80.0, tuple(reasons))
        )

    if saturn is not None and rahu is not None and are_conjunct(saturn, rahu):
        reasons = []
        if is_strong_sign(saturn):
            reasons.append("Saturn in own or exaltation sign")
        if _jupiter_touches(chart, aspects, saturn):
            reasons.append("Jupiter aspects Saturn")
        out.append(YogaMatch("shrapit", (B.SATURN, B.RAHU), (saturn.house,), 75.0, tuple(reasons)))

    return out


@predicate("kala_sarpa")
def kala_sarpa_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    """All seven planets on one side of the Rahu-Ketu axis."""
    rahu, ketu = chart.position(B.RAHU), chart.position(B.KETU)
    planets = _planets(chart)
    if rahu is None or ketu is None or not planets:
        return None

    rahu_side = [forward_angle(rahu.sidereal_longitude, p.sidereal_longitude) <= 180.0 for p in planets]
    if all(rahu_side):
        direction = "ascending"
    elif not any(rahu_side):
        direction = "descending"
    else:
        return None

    cancellations = [
        f"{p.body.display_name} closely conjunct a node"
        for p in planets
        if are_conjunct(p, rahu, 3.0) or are_conjunct(p, ketu, 3.0)
    ]
    if aspects_body(aspects, B.JUPITER, B.RAHU) or aspects_body(aspects, B.JUPITER, B.KETU):
        cancellations.append("Jupiter aspects the nodal axis")

    return YogaMatch(
        "kala_sarpa",
        (B.RAHU, B.KETU),
        (rahu.house, ketu.house),
        55.0 if cancellations else 85.0,
        tuple(cancellations),
        {
            "type": KALA_SARPA_TYPES[rahu.house],
            "direction": direction,
            "affairs": HOUSE_AFFAIRS[rahu.house],
        },
    )


def _hemming(chart: VedicChart, group: Sequence[Body]) -> list[Body] | None:
    second = [p.body for p in chart.bodies_in_house(2) if p.body in group]
    twelfth = [p.body for p in chart.bodies_in_house(12) if p.body in group]
    if second and twelfth:
        return _unique(second + twelfth)
    return None


@predicate("papakartari")
def papakartari_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    """Ascendant hemmed between malefics."""
    malefics = _hemming(chart, YOGA_MALEFICS)
    if malefics is None:
        return None
    return YogaMatch(
        "papakartari", tuple(malefics), (1, 2, 12), 60.0,
        ("Strong ascendant lord", "Benefics aspecting the ascendant", "Jupiter in kendra"),
    )


# ============================================================================
# SPECIAL YOGAS
# ============================================================================


@predicate("dasa_mula")
def dasa_mula_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    moon = chart.position(B.MOON)
    if moon is None or moon.nakshatra not in DASA_MULA_NAKSHATRAS:
        return None
    return YogaMatch(
        "dasa_mula", (B.MOON,), (moon.house,), 60.0,
        ("Jupiter aspect", "Strong nakshatra lord", "Benefic in 4th or 7th"),
        {"nakshatra": moon.nakshatra.display_name},
    )


@predicate("vargottama")
def vargottama_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Planets occupying the same sign in rasi and navamsa."""
    out = []
    for pos in _planets(chart):
        if is_vargottama(pos.sidereal_longitude):
            strength, reasons = yoga_strength(chart, aspects, [pos])
            out.append(
                YogaMatch(
                    "vargottama", (pos.body,), (pos.house,), _scaled(strength, 1.1), tuple(reasons),
                    {"planet": pos.body.display_name},
                )
            )
    return out


@predicate("budha_aditya")
def budha_aditya_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    sun, mercury = chart.position(B.SUN), chart.position(B.MERCURY)
    if sun is None or mercury is None or sun.sign is not mercury.sign:
        return None
    if combustion_factor(mercury, chart) < 1.0:
        strength, reasons = 45.0, ["Mercury is combust, effects reduced"]
    else:
        strength, reasons = yoga_strength(chart, aspects, [sun, mercury])
    return YogaMatch("budha_aditya", (B.SUN, B.MERCURY), (sun.house,), strength, tuple(reasons))


@predicate("amala")
def amala_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Natural benefic in the 10th from the ascendant or the Moon."""
    moon = chart.position(B.MOON)
    out = []
    for pos in chart.positions:
        if pos.body not in YOGA_BENEFICS:
            continue
        from_moon = moon is not None and pos.body is not B.MOON and house_from(pos, moon) == 10
        if pos.house == 10 or from_moon:
            strength, reasons = yoga_strength(chart, aspects, [pos])
            out.append(
                YogaMatch(
                    "amala", (pos.body,), (10,), strength, tuple(reasons),
                    {"planet": pos.body.display_name},
                )
            )
    return out


@predicate("saraswati")
def saraswati_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    trio = [chart.position(b) for b in (B.JUPITER, B.VENUS, B.MERCURY)]
    if any(p is None for p in trio):
        return None
    if not all(p.house in KENDRA_TRIKONA_HOUSES for p in trio):
        return None
    strength, reasons = yoga_strength(chart, aspects, trio)
    return YogaMatch(
        "saraswati", (B.JUPITER, B.VENUS, B.MERCURY), tuple(p.house for p in trio), strength, tuple(reasons)
    )


@predicate("parvata")
def parvata_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    """Benefics, and no malefics, in the kendras."""
    in_kendra = [p for p in chart.positions if p.house in KENDRA_HOUSES]
    benefics = [p for p in in_kendra if p.body in (B.JUPITER, B.VENUS, B.MERCURY)]
    if not benefics or any(p.body in (B.SATURN, B.MARS, B.RAHU, B.KETU) for p in in_kendra):
        return None
    strength, reasons = yoga_strength(chart, aspects, benefics)
    return YogaMatch(
        "parvata", tuple(p.body for p in benefics), tuple(p.house for p in benefics), strength, tuple(reasons)
    )


def _connected(chart: VedicChart, aspects: AspectMatrix, a: Body, b: Body) -> tuple[PlanetPosition, PlanetPosition] | None:
    pa, pb = chart.position(a), chart.position(b)
    if pa is None or pb is None:
        return None
    if are_conjunct(pa, pb) or mutually_aspecting(aspects, a, b) or in_exchange(pa, pb):
        return pa, pb
    return None


@predicate("kahala")
def kahala_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    lord4, lord9 = chart.lord_of_house(4), chart.lord_of_house(9)
    if lord4 is lord9:
        return None
    pair = _connected(chart, aspects, lord4, lord9)
    if pair is None:
        return None
    strength, reasons = yoga_strength(chart, aspects, pair)
    return YogaMatch(
        "kahala", (lord4, lord9), (pair[0].house, pair[1].house), strength, tuple(reasons),
        {"lord4": lord4.display_name, "lord9": lord9.display_name},
    )


@predicate("shubhakartari")
def shubhakartari_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    benefics = _hemming(chart, YOGA_BENEFICS)
    if benefics is None:
        return None
    positions = [chart.position(b) for b in benefics]
    strength, reasons = yoga_strength(chart, aspects, positions)
    return YogaMatch("shubhakartari", tuple(benefics), (1, 2, 12), strength, tuple(reasons))


@predicate("sanyasa")
def sanyasa_yogas(chart: VedicChart, aspects: AspectMatrix) -> list[YogaMatch]:
    """Four or more planets in one house."""
    out = []
    for house, occupants in chart.positions_by_house().items():
        group = [p for p in occupants if p.body in SEVEN_PLANETS or p.body.is_node]
        if len(group) < 4:
            continue
        bodies = {p.body for p in group}
        if house in (1, 5, 9, 10, 12) or B.SATURN in bodies or B.KETU in bodies:
            strength, reasons = yoga_strength(chart, aspects, group)
            out.append(
                YogaMatch(
                    "sanyasa", tuple(p.body for p in group), (house,), strength,
                    tuple(reasons) + ("Strong attachment to family or wealth",),
                    {"count": str(len(group)), "house": str(house)},
                )
            )
    return out


@predicate("chamara")
def chamara_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    """Exalted ascendant lord aspected by Jupiter."""
    lord = chart.lord_of_house(1)
    pos, jupiter = chart.position(lord), chart.position(B.JUPITER)
    if pos is None or jupiter is None or not is_exalted(lord, pos.sign):
        return None
    if not aspects_body(aspects, B.JUPITER, lord):
        return None
    strength, reasons = yoga_strength(chart, aspects, [pos, jupiter])
    return YogaMatch(
        "chamara", (lord, B.JUPITER), (pos.house, jupiter.house), strength, tuple(reasons),
        {"lord": lord.display_name},
    )


@predicate("dharma_karmadhipati")
def dharma_karmadhipati_yoga(chart: VedicChart, aspects: AspectMatrix) -> YogaMatch | None:
    lord9, lord10 = chart.lord_of_house(9), chart.lord_of_house(10)
    if lord9 is lord10:
        return None
    pair = _connected(chart, aspects, lord9, lord10)
    if pair is None:
        return None
    strength, reasons = yoga_strength(chart, aspects, pair)
    return YogaMatch(
        "dharma_karmadhipati", (lord9, lord10), (pair[0].house, pair[1].house),
        _scaled(strength, 1.15), tuple(reasons),
        {"lord9": lord9.display_name, "lord10": lord10.display_name},
    )
