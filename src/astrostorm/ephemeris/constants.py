#!/usr/bin/env python3
"""
Centralized Vedic Constants and Body ID Mappings

Body ids are stable across the engine and used as keys in every static
table. Ketu has no Swiss Ephemeris id; it is always derived from Rahu.
"""

from __future__ import annotations

from enum import IntEnum

import swisseph as swe


class Body(IntEnum):
    SUN = 1
    MOON = 2
    JUPITER = 3
    RAHU = 4
    MERCURY = 5
    VENUS = 6
    KETU = 7
    SATURN = 8
    MARS = 9
    URANUS = 10
    NEPTUNE = 11
    PLUTO = 12

    @property
    def display_name(self) -> str:
        return self.name.title()

    @property
    def symbol(self) -> str:
        return BODY_SYMBOLS[self]

    @property
    def is_node(self) -> bool:
        return self in (Body.RAHU, Body.KETU)

    @property
    def is_outer(self) -> bool:
        return self in OUTER_BODIES


CLASSICAL_BODIES: tuple[Body, ...] = (
    Body.SUN,
    Body.MOON,
    Body.MARS,
    Body.MERCURY,
    Body.JUPITER,
    Body.VENUS,
    Body.SATURN,
    Body.RAHU,
    Body.KETU,
)

SEVEN_PLANETS: tuple[Body, ...] = CLASSICAL_BODIES[:7]

OUTER_BODIES: tuple[Body, ...] = (Body.URANUS, Body.NEPTUNE, Body.PLUTO)

# Swiss Ephemeris ids; nodes resolved by configured node type
SWE_IDS: dict[Body, int] = {
    Body.SUN: swe.SUN,
    Body.MOON: swe.MOON,
    Body.MERCURY: swe.MERCURY,
    Body.VENUS: swe.VENUS,
    Body.MARS: swe.MARS,
    Body.JUPITER: swe.JUPITER,
    Body.SATURN: swe.SATURN,
    Body.URANUS: swe.URANUS,
    Body.NEPTUNE: swe.NEPTUNE,
    Body.PLUTO: swe.PLUTO,
}

NODE_IDS: dict[str, int] = {"MEAN": swe.MEAN_NODE, "TRUE": swe.TRUE_NODE}

BODY_SYMBOLS: dict[Body, str] = {
    Body.SUN: "Su",
    Body.MOON: "Mo",
    Body.MARS: "Ma",
    Body.MERCURY: "Me",
    Body.JUPITER: "Ju",
    Body.VENUS: "Ve",
    Body.SATURN: "Sa",
    Body.RAHU: "Ra",
    Body.KETU: "Ke",
    Body.URANUS: "Ur",
    Body.NEPTUNE: "Ne",
    Body.PLUTO: "Pl",
}

NATURAL_BENEFICS: frozenset[Body] = frozenset(
    {Body.JUPITER, Body.VENUS, Body.MERCURY, Body.MOON}
)
NATURAL_MALEFICS: frozenset[Body] = frozenset(
    {Body.SUN, Body.MARS, Body.SATURN, Body.RAHU, Body.KETU}
)


class ZodiacSign(IntEnum):
    ARIES = 1
    TAURUS = 2
    GEMINI = 3
    CANCER = 4
    LEO = 5
    VIRGO = 6
    LIBRA = 7
    SCORPIO = 8
    SAGITTARIUS = 9
    CAPRICORN = 10
    AQUARIUS = 11
    PISCES = 12

    @property
    def display_name(self) -> str:
        return self.name.title()

    @property
    def ruler(self) -> Body:
        return SIGN_LORDS[self]

    @property
    def element(self) -> str:
        return ("Fire", "Earth", "Air", "Water")[(self - 1) % 4]

    @property
    def modality(self) -> str:
        return ("Movable", "Fixed", "Dual")[(self - 1) % 3]

    @property
    def is_odd(self) -> bool:
        return self % 2 == 1

    @property
    def start_degree(self) -> float:
        return (self - 1) * 30.0

    def add(self, houses: int) -> "ZodiacSign":
        """Sign `houses` places from this one, counting this sign as 1."""
        return ZodiacSign(((self - 1 + houses - 1) % 12) + 1)


SIGN_LORDS: dict[ZodiacSign, Body] = {
    ZodiacSign.ARIES: Body.MARS,
    ZodiacSign.TAURUS: Body.VENUS,
    ZodiacSign.GEMINI: Body.MERCURY,
    ZodiacSign.CANCER: Body.MOON,
    ZodiacSign.LEO: Body.SUN,
    ZodiacSign.VIRGO: Body.MERCURY,
    ZodiacSign.LIBRA: Body.VENUS,
    ZodiacSign.SCORPIO: Body.MARS,
    ZodiacSign.SAGITTARIUS: Body.JUPITER,
    ZodiacSign.CAPRICORN: Body.SATURN,
    ZodiacSign.AQUARIUS: Body.SATURN,
    ZodiacSign.PISCES: Body.JUPITER,
}


class Nakshatra(IntEnum):
    ASHWINI = 1
    BHARANI = 2
    KRITTIKA = 3
    ROHINI = 4
    MRIGASHIRA = 5
    ARDRA = 6
    PUNARVASU = 7
    PUSHYA = 8
    ASHLESHA = 9
    MAGHA = 10
    PURVA_PHALGUNI = 11
    UTTARA_PHALGUNI = 12
    HASTA = 13
    CHITRA = 14
    SWATI = 15
    VISHAKHA = 16
    ANURADHA = 17
    JYESHTHA = 18
    MULA = 19
    PURVA_ASHADHA = 20
    UTTARA_ASHADHA = 21
    SHRAVANA = 22
    DHANISHTHA = 23
    SHATABHISHA = 24
    PURVA_BHADRAPADA = 25
    UTTARA_BHADRAPADA = 26
    REVATI = 27

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def lord(self) -> Body:
        return VIMSHOTTARI_LORDS[(self - 1) % 9]

    @property
    def start_degree(self) -> float:
        return (self - 1) * NAKSHATRA_SPAN


# ============================================================================
# VIMSHOTTARI CONSTANTS
# ============================================================================
VIMSHOTTARI_LORDS: tuple[Body, ...] = (
    Body.KETU,
    Body.VENUS,
    Body.SUN,
    Body.MOON,
    Body.MARS,
    Body.RAHU,
    Body.JUPITER,
    Body.SATURN,
    Body.MERCURY,
)

VIMSHOTTARI_YEARS: dict[Body, int] = {
    Body.KETU: 7,
    Body.VENUS: 20,
    Body.SUN: 6,
    Body.MOON: 10,
    Body.MARS: 7,
    Body.RAHU: 18,
    Body.JUPITER: 16,
    Body.SATURN: 19,
    Body.MERCURY: 17,
}

VIMSHOTTARI_TOTAL_YEARS = 120

LORD_INDEX: dict[Body, int] = {b: i for i, b in enumerate(VIMSHOTTARI_LORDS)}

# ============================================================================
# SEGMENT SPANS
# ============================================================================
NAKSHATRA_SPAN = 360.0 / 27.0
NUM_PADAS = 4

# Arcsecond spans for exact boundary arithmetic
TOT_ARCSEC = 1_296_000  # 360 * 3600
SIGN_ARCSEC = 108_000  # 30 * 3600
NAK_ARCSEC = 48_000  # 13°20'
PADA_ARCSEC = 12_000  # 3°20'

# ============================================================================
# HOUSE GROUPS
# ============================================================================
KENDRA_HOUSES = frozenset({1, 4, 7, 10})
DUSTHANA_HOUSES = frozenset({6, 8, 12})
UPACHAYA_HOUSES = frozenset({3, 6, 10, 11})
