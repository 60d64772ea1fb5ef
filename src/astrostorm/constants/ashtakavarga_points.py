"""
Ashtakavarga benefic point constants.
Based on the Brihat Parashara Hora Shastra tables.
"""

from __future__ import annotations

from astrostorm.ephemeris.constants import Body

# Contributor key for the ascendant
ASCENDANT = 0

B = Body

# Ashtakavarga benefic points
# Format: {table_body: {contributor: places}}
# Places are counted from the contributor's sign, the sign itself being 1.
BENEFIC_POINTS: dict[Body, dict[int, tuple[int, ...]]] = {
    B.SUN: {
        B.SUN: (1, 2, 4, 7, 8, 9, 10, 11),
        B.MOON: (3, 6, 10, 11),
        B.MARS: (1, 2, 4, 7, 8, 9, 10, 11),
        B.MERCURY: (3, 5, 6, 9, 10, 11, 12),
        B.JUPITER: (5, 6, 9, 11),
        B.VENUS: (6, 7, 12),
        B.SATURN: (1, 2, 4, 7, 8, 9, 10, 11),
        ASCENDANT: (3, 4, 6, 10, 11, 12),
    },
    B.MOON: {
        B.SUN: (3, 6, 7, 8, 10, 11),
        B.MOON: (1, 3, 6, 7, 10, 11),
        B.MARS: (2, 3, 5, 6, 9, 10, 11),
        B.MERCURY: (1, 3, 4, 5, 7, 8, 10, 11),
        B.JUPITER: (1, 4, 7, 8, 10, 11, 12),
        B.VENUS: (3, 4, 5, 7, 9, 10, 11),
        B.SATURN: (3, 5, 6, 11),
        ASCENDANT: (3, 6, 10, 11),
    },
    B.MARS: {
        B.SUN: (3, 5, 6, 10, 11),
        B.MOON: (3, 6, 11),
        B.MARS: (1, 2, 4, 7, 8, 10, 11),
        B.MERCURY: (3, 5, 6, 11),
        B.JUPITER: (6, 10, 11, 12),
        B.VENUS: (6, 8, 11, 12),
        B.SATURN: (1, 4, 7, 8, 9, 10, 11),
        ASCENDANT: (1, 3, 6, 10, 11),
    },
    B.MERCURY: {
        B.SUN: (5, 6, 9, 11, 12),
        B.MOON: (2, 4, 6, 8, 10, 11),
        B.MARS: (1, 2, 4, 7, 8, 9, 10, 11),
        B.MERCURY: (1, 3, 5, 6, 9, 10, 11, 12),
        B.JUPITER: (6, 8, 11, 12),
        B.VENUS: (1, 2, 3, 4, 5, 8, 9, 11),
        B.SATURN: (1, 2, 4, 7, 8, 9, 10, 11),
        ASCENDANT: (1, 2, 4, 6, 8, 10, 11),
    },
    B.JUPITER: {
        B.SUN: (1, 2, 3, 4, 7, 8, 9, 10, 11),
        B.MOON: (2, 5, 7, 9, 11),
        B.MARS: (1, 2, 4, 7, 8, 10, 11),
        B.MERCURY: (1, 2, 4, 5, 6, 9, 10, 11),
        B.JUPITER: (1, 2, 3, 4, 7, 8, 10, 11),
        B.VENUS: (2, 5, 6, 9, 10, 11),
        B.SATURN: (3, 5, 6, 12),
        ASCENDANT: (1, 2, 4, 5, 6, 7, 9, 10, 11),
    },
    B.VENUS: {
        B.SUN: (8, 11, 12),
        B.MOON: (1, 2, 3, 4, 5, 8, 9, 11, 12),
        B.MARS: (3, 5, 6, 9, 11, 12),
        B.MERCURY: (3, 5, 6, 9, 11),
        B.JUPITER: (5, 8, 9, 10, 11),
        B.VENUS: (1, 2, 3, 4, 5, 8, 9, 10, 11),
        B.SATURN: (3, 4, 5, 8, 9, 10, 11),
        ASCENDANT: (1, 2, 3, 4, 5, 8, 9, 11),
    },
    B.SATURN: {
        B.SUN: (1, 2, 4, 7, 8, 10, 11),
        B.MOON: (3, 6, 11),
        B.MARS: (3, 5, 6, 10, 11, 12),
        B.MERCURY: (6, 8, 9, 10, 11, 12),
        B.JUPITER: (5, 6, 11, 12),
        B.VENUS: (6, 11, 12),
        B.SATURN: (3, 5, 6, 11),
        ASCENDANT: (1, 3, 4, 6, 10, 11),
    },
}

# Classical bindu totals of each Bhinnashtakavarga
CLASSICAL_TOTALS: dict[Body, int] = {
    B.SUN: 48,
    B.MOON: 49,
    B.MARS: 39,
    B.MERCURY: 54,
    B.JUPITER: 56,
    B.VENUS: 52,
    B.SATURN: 39,
}

SARVA_TOTAL = 337

# Kaksha lords in order within each sign (3°45' each)
KAKSHA_LORDS: tuple[int, ...] = (
    B.SATURN,
    B.JUPITER,
    B.MARS,
    B.SUN,
    B.VENUS,
    B.MERCURY,
    B.MOON,
    ASCENDANT,
)

KAKSHA_SPAN = 30.0 / 8.0

# Sarvashtakavarga sign bands for transit quality
SARVA_STRONG_THRESHOLD = 28
SARVA_WEAK_THRESHOLD = 25

# Bhinna bindus at or above this favour a transit through the sign
BHINNA_FAVOURABLE_THRESHOLD = 4
