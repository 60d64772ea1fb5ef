"""
Vedic aspect orbs and drishti strengths.
Standard angular aspects with body-specific orbs plus the Parashari special
aspects of Mars, Jupiter and Saturn.
"""

from __future__ import annotations

from astrostorm.ephemeris.constants import Body

# Target separations (degrees) of the standard aspects, measured on the
# shorter arc between two bodies
STANDARD_ASPECT_ANGLES: dict[str, float] = {
    "conjunction": 0.0,
    "sextile": 60.0,
    "square": 90.0,
    "trine": 120.0,
    "opposition": 180.0,
}

# Sign counts (inclusive) that correspond to each standard aspect, in either
# direction
STANDARD_ASPECT_SIGNS: dict[str, frozenset[int]] = {
    "conjunction": frozenset({1}),
    "sextile": frozenset({3, 11}),
    "square": frozenset({4, 10}),
    "trine": frozenset({5, 9}),
    "opposition": frozenset({7}),
}

# Parashari special aspects: {body: {aspect_type: (house_count, forward_angle)}}
SPECIAL_ASPECTS: dict[Body, dict[str, tuple[int, float]]] = {
    Body.MARS: {"special_4th": (4, 90.0), "special_8th": (8, 210.0)},
    Body.JUPITER: {"special_5th": (5, 120.0), "special_9th": (9, 240.0)},
    Body.SATURN: {"special_3rd": (3, 60.0), "special_10th": (10, 270.0)},
}

# Planetary aspect orbs in degrees: {body: {aspect_type: orb}}
ASPECT_ORBS: dict[Body, dict[str, float]] = {
    Body.SUN: {
        "conjunction": 8.0,
        "opposition": 8.0,
        "square": 6.0,
        "trine": 6.0,
        "sextile": 4.0,
    },
    Body.MOON: {
        "conjunction": 12.0,
        "opposition": 12.0,
        "square": 9.0,
        "trine": 9.0,
        "sextile": 6.0,
    },
    Body.MARS: {
        "conjunction": 8.0,
        "opposition": 8.0,
        "square": 8.0,
        "trine": 6.0,
        "sextile": 4.0,
        "special_4th": 8.0,
        "special_8th": 8.0,
    },
    Body.MERCURY: {
        "conjunction": 7.0,
        "opposition": 7.0,
        "square": 5.0,
        "trine": 5.0,
        "sextile": 3.0,
    },
    Body.JUPITER: {
        "conjunction": 9.0,
        "opposition": 9.0,
        "square": 7.0,
        "trine": 9.0,
        "sextile": 5.0,
        "special_5th": 9.0,
        "special_9th": 9.0,
    },
    Body.VENUS: {
        "conjunction": 7.0,
        "opposition": 7.0,
        "square": 5.0,
        "trine": 5.0,
        "sextile": 3.0,
    },
    Body.SATURN: {
        "conjunction": 10.0,
        "opposition": 10.0,
        "square": 7.5,
        "trine": 7.5,
        "sextile": 5.0,
        "special_3rd": 10.0,
        "special_10th": 10.0,
    },
    Body.RAHU: {
        "conjunction": 5.0,
        "opposition": 5.0,
        "square": 3.0,
        "trine": 3.0,
        "sextile": 2.0,
    },
    Body.KETU: {
        "conjunction": 5.0,
        "opposition": 5.0,
        "square": 3.0,
        "trine": 3.0,
        "sextile": 2.0,
    },
}

# Classical drishti fraction of each aspect (0..1)
DRISHTI_FRACTION: dict[str, float] = {
    "conjunction": 1.0,
    "opposition": 1.0,
    "square": 0.75,
    "trine": 0.5,
    "sextile": 0.25,
    "special_4th": 0.75,
    "special_8th": 1.0,
    "special_5th": 0.5,
    "special_9th": 1.0,
    "special_3rd": 0.75,
    "special_10th": 1.0,
}

# Aspect strength percentages before orb reduction
ASPECT_STRENGTH: dict[str, float] = {
    "conjunction": 100.0,
    "opposition": 100.0,
    "trine": 75.0,
    "square": 50.0,
    "sextile": 25.0,
    "special_3rd": 100.0,
    "special_4th": 100.0,
    "special_5th": 100.0,
    "special_8th": 100.0,
    "special_9th": 100.0,
    "special_10th": 100.0,
}

# Harmonious / challenging / variable classification
ASPECT_NATURE: dict[str, str] = {
    "conjunction": "variable",
    "opposition": "significant",
    "trine": "harmonious",
    "sextile": "harmonious",
    "square": "challenging",
    "special_4th": "challenging",
    "special_8th": "challenging",
    "special_5th": "harmonious",
    "special_9th": "harmonious",
    "special_3rd": "challenging",
    "special_10th": "challenging",
}

DEFAULT_ORB = 5.0


def get_aspect_orb(body: Body, aspect_type: str) -> float:
    """Get the orb for a body and aspect type.

    Args:
        body: Aspecting body
        aspect_type: Type of aspect (conjunction, special_4th, ...)

    Returns:
        Orb in degrees
    """
    return ASPECT_ORBS.get(body, {}).get(aspect_type, DEFAULT_ORB)
