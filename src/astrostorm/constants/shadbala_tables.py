"""
Shadbala policy tables.

Classical constants and the tunable rating bands used by the strength
engine. Values follow BPHS where the text is explicit; nodes, which the
classical scheme does not rate, carry fixed substitutes.
"""

from __future__ import annotations

from astrostorm.ephemeris.constants import Body

B = Body

VIRUPAS_PER_RUPA = 60.0

# Deep exaltation points (sidereal degrees)
EXALTATION_DEGREES: dict[Body, float] = {
    B.SUN: 10.0,
    B.MOON: 33.0,
    B.MARS: 298.0,
    B.MERCURY: 165.0,
    B.JUPITER: 95.0,
    B.VENUS: 357.0,
    B.SATURN: 200.0,
    B.RAHU: 50.0,
    B.KETU: 230.0,
}

# Naisargika bala in virupas (60 * n / 7 for the seven planets)
NAISARGIKA_BALA: dict[Body, float] = {
    B.SUN: 60.0,
    B.MOON: 51.43,
    B.VENUS: 42.86,
    B.JUPITER: 34.29,
    B.MERCURY: 25.71,
    B.MARS: 17.14,
    B.SATURN: 8.57,
    B.RAHU: 30.0,
    B.KETU: 30.0,
}

REQUIRED_RUPAS: dict[Body, float] = {
    B.SUN: 6.5,
    B.MOON: 6.0,
    B.MARS: 5.0,
    B.MERCURY: 7.0,
    B.JUPITER: 6.5,
    B.VENUS: 5.5,
    B.SATURN: 5.0,
    B.RAHU: 5.0,
    B.KETU: 5.0,
}

# House of maximum directional strength
DIG_BALA_HOUSE: dict[Body, int] = {
    B.SUN: 10,
    B.MARS: 10,
    B.MOON: 4,
    B.VENUS: 4,
    B.MERCURY: 1,
    B.JUPITER: 1,
    B.SATURN: 7,
    B.RAHU: 10,
    B.KETU: 4,
}

# Saptavarga weights (D1, D2, D3, D7, D9, D12, D30)
SAPTAVARGA_WEIGHTS: dict[str, float] = {
    "D1": 5.0,
    "D2": 2.5,
    "D3": 3.0,
    "D7": 2.5,
    "D9": 4.5,
    "D12": 2.0,
    "D30": 1.0,
}

# Virupas per dignity in a varga sign
VARGA_DIGNITY_VIRUPAS: dict[str, float] = {
    "exalted": 20.0,
    "moolatrikona": 22.5,
    "own_sign": 30.0,
    "friend_sign": 15.0,
    "neutral_sign": 10.0,
    "enemy_sign": 7.5,
    "debilitated": 7.5,
}

# Drik bala weight per aspecting body (sign gives benefic/malefic)
DRIK_WEIGHTS: dict[Body, float] = {
    B.JUPITER: 15.0,
    B.VENUS: 15.0,
    B.MOON: 10.0,
    B.MERCURY: 8.0,
    B.SUN: -5.0,
    B.MARS: -10.0,
    B.SATURN: -10.0,
    B.RAHU: -5.0,
    B.KETU: -5.0,
}

DRIK_BALA_MIN = -30.0
DRIK_BALA_MAX = 60.0

# Neutral value used when a kala prerequisite is unavailable
NEUTRAL_VIRUPAS = 30.0

# Chesta substitute for Sun, Moon and the nodes
FIXED_CHESTA_VIRUPAS = 30.0

# Planetary war participants in order of brightness
WAR_BRIGHTNESS_ORDER: tuple[Body, ...] = (B.VENUS, B.JUPITER, B.MERCURY, B.MARS, B.SATURN)
WAR_ORB = 1.0
YUDDHA_VIRUPAS = 30.0

# Rating bands: (minimum percentage of required, label), ascending
RATING_BANDS: tuple[tuple[float, str], ...] = (
    (0.0, "Extremely Weak"),
    (50.0, "Weak"),
    (70.0, "Below Average"),
    (85.0, "Average"),
    (100.0, "Above Average"),
    (115.0, "Strong"),
    (130.0, "Very Strong"),
    (150.0, "Extremely Strong"),
)


def rating_for_percentage(
    percentage: float, bands: tuple[tuple[float, str], ...] = RATING_BANDS
) -> str:
    """Banded qualitative rating of a percentage-of-required value."""
    label = bands[0][1]
    for minimum, name in bands:
        if percentage >= minimum:
            label = name
    return label
