"""
Planetary friendship and dignity constants.
Naisargika (natural) relationships and sign dignities per the Parashari
system.
"""

from __future__ import annotations

from enum import Enum

from astrostorm.ephemeris.constants import Body, ZodiacSign

B = Body
Z = ZodiacSign

# Natural planetary friendships (Naisargika Maitri)
NATURAL_FRIENDS: dict[Body, frozenset[Body]] = {
    B.SUN: frozenset({B.MOON, B.MARS, B.JUPITER}),
    B.MOON: frozenset({B.SUN, B.MERCURY}),
    B.MARS: frozenset({B.SUN, B.MOON, B.JUPITER}),
    B.MERCURY: frozenset({B.SUN, B.VENUS}),
    B.JUPITER: frozenset({B.SUN, B.MOON, B.MARS}),
    B.VENUS: frozenset({B.MERCURY, B.SATURN}),
    B.SATURN: frozenset({B.MERCURY, B.VENUS}),
    B.RAHU: frozenset({B.MERCURY, B.VENUS, B.SATURN}),
    B.KETU: frozenset({B.MARS, B.VENUS, B.SATURN}),
}

# Natural planetary enemies (Naisargika Shatru); Moon has none
NATURAL_ENEMIES: dict[Body, frozenset[Body]] = {
    B.SUN: frozenset({B.VENUS, B.SATURN}),
    B.MOON: frozenset(),
    B.MARS: frozenset({B.MERCURY}),
    B.MERCURY: frozenset({B.MOON}),
    B.JUPITER: frozenset({B.MERCURY, B.VENUS}),
    B.VENUS: frozenset({B.SUN, B.MOON}),
    B.SATURN: frozenset({B.SUN, B.MOON, B.MARS}),
    B.RAHU: frozenset({B.SUN, B.MOON, B.MARS}),
    B.KETU: frozenset({B.SUN, B.MOON}),
}

EXALTATION_SIGNS: dict[Body, ZodiacSign] = {
    B.SUN: Z.ARIES,
    B.MOON: Z.TAURUS,
    B.MARS: Z.CAPRICORN,
    B.MERCURY: Z.VIRGO,
    B.JUPITER: Z.CANCER,
    B.VENUS: Z.PISCES,
    B.SATURN: Z.LIBRA,
    B.RAHU: Z.GEMINI,  # some texts use Taurus
    B.KETU: Z.SAGITTARIUS,  # some texts use Scorpio
}

DEBILITATION_SIGNS: dict[Body, ZodiacSign] = {
    B.SUN: Z.LIBRA,
    B.MOON: Z.SCORPIO,
    B.MARS: Z.CANCER,
    B.MERCURY: Z.PISCES,
    B.JUPITER: Z.CAPRICORN,
    B.VENUS: Z.VIRGO,
    B.SATURN: Z.ARIES,
    B.RAHU: Z.SAGITTARIUS,
    B.KETU: Z.GEMINI,
}

OWN_SIGNS: dict[Body, frozenset[ZodiacSign]] = {
    B.SUN: frozenset({Z.LEO}),
    B.MOON: frozenset({Z.CANCER}),
    B.MARS: frozenset({Z.ARIES, Z.SCORPIO}),
    B.MERCURY: frozenset({Z.GEMINI, Z.VIRGO}),
    B.JUPITER: frozenset({Z.SAGITTARIUS, Z.PISCES}),
    B.VENUS: frozenset({Z.TAURUS, Z.LIBRA}),
    B.SATURN: frozenset({Z.CAPRICORN, Z.AQUARIUS}),
    B.RAHU: frozenset({Z.AQUARIUS}),  # co-rulership
    B.KETU: frozenset({Z.SCORPIO}),  # co-rulership
}

# Moolatrikona sign and degree range (inclusive)
MOOLATRIKONA: dict[Body, tuple[ZodiacSign, float, float]] = {
    B.SUN: (Z.LEO, 0.0, 20.0),
    B.MOON: (Z.TAURUS, 4.0, 30.0),
    B.MARS: (Z.ARIES, 0.0, 12.0),
    B.MERCURY: (Z.VIRGO, 16.0, 20.0),
    B.JUPITER: (Z.SAGITTARIUS, 0.0, 10.0),
    B.VENUS: (Z.LIBRA, 0.0, 15.0),
    B.SATURN: (Z.AQUARIUS, 0.0, 20.0),
}


class Relationship(str, Enum):
    FRIEND = "friend"
    NEUTRAL = "neutral"
    ENEMY = "enemy"


class Dignity(str, Enum):
    EXALTED = "exalted"
    MOOLATRIKONA = "moolatrikona"
    OWN_SIGN = "own_sign"
    FRIEND_SIGN = "friend_sign"
    NEUTRAL_SIGN = "neutral_sign"
    ENEMY_SIGN = "enemy_sign"
    DEBILITATED = "debilitated"


def natural_relationship(planet: Body, other: Body) -> Relationship:
    """Naisargika relationship of `planet` towards `other`."""
    if other in NATURAL_FRIENDS.get(planet, frozenset()):
        return Relationship.FRIEND
    if other in NATURAL_ENEMIES.get(planet, frozenset()):
        return Relationship.ENEMY
    return Relationship.NEUTRAL


def is_exalted(planet: Body, sign: ZodiacSign) -> bool:
    return EXALTATION_SIGNS.get(planet) == sign


def is_debilitated(planet: Body, sign: ZodiacSign) -> bool:
    return DEBILITATION_SIGNS.get(planet) == sign


def is_own_sign(planet: Body, sign: ZodiacSign) -> bool:
    return sign in OWN_SIGNS.get(planet, frozenset())


def is_moolatrikona(planet: Body, sign: ZodiacSign, degree_in_sign: float) -> bool:
    rng = MOOLATRIKONA.get(planet)
    if rng is None:
        return False
    mt_sign, start, end = rng
    return sign == mt_sign and start <= degree_in_sign <= end


def get_dignity(planet: Body, sign: ZodiacSign, degree_in_sign: float | None = None) -> Dignity:
    """Dignity of a planet in a sign.

    Moolatrikona is only considered when the degree within the sign is known.
    """
    if is_exalted(planet, sign):
        return Dignity.EXALTED
    if is_debilitated(planet, sign):
        return Dignity.DEBILITATED
    if degree_in_sign is not None and is_moolatrikona(planet, sign, degree_in_sign):
        return Dignity.MOOLATRIKONA
    if is_own_sign(planet, sign):
        return Dignity.OWN_SIGN
    rel = natural_relationship(planet, sign.ruler)
    if rel is Relationship.FRIEND:
        return Dignity.FRIEND_SIGN
    if rel is Relationship.ENEMY:
        return Dignity.ENEMY_SIGN
    return Dignity.NEUTRAL_SIGN
