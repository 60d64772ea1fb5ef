"""
Combustion orbs (distance from the Sun) for planetary states.
Based on traditional Vedic astrology texts.
"""

from __future__ import annotations

from astrostorm.ephemeris.constants import Body

# Format: {body: (combust_orb, deep_combust_orb)}
# Nodes and outer planets never combust.
COMBUSTION_ORBS: dict[Body, tuple[float, float]] = {
    Body.MOON: (12.0, 6.0),
    Body.MARS: (17.0, 8.5),
    Body.MERCURY: (14.0, 7.0),
    Body.JUPITER: (11.0, 5.5),
    Body.VENUS: (10.0, 5.0),
    Body.SATURN: (15.0, 7.5),
}

# Retrograde Mercury and Venus combust at tighter orbs
RETROGRADE_COMBUSTION_ORBS: dict[Body, tuple[float, float]] = {
    Body.MERCURY: (12.0, 6.0),
    Body.VENUS: (8.0, 4.0),
}

# Cazimi (heart of the Sun): 17 minutes of arc
CAZIMI_ORB = 17.0 / 60.0


def get_combustion_state(body: Body, distance_from_sun: float, is_retrograde: bool = False) -> str:
    """Determine combustion state of a body.

    Args:
        body: Body being tested
        distance_from_sun: Shorter angular distance from the Sun in degrees
        is_retrograde: Whether the body is retrograde

    Returns:
        State: 'cazimi', 'deep_combust', 'combust' or 'normal'
    """
    orbs = COMBUSTION_ORBS.get(body)
    if orbs is None:
        return "normal"
    if is_retrograde and body in RETROGRADE_COMBUSTION_ORBS:
        orbs = RETROGRADE_COMBUSTION_ORBS[body]
    combust_orb, deep_orb = orbs

    if distance_from_sun <= CAZIMI_ORB:
        return "cazimi"
    if distance_from_sun <= deep_orb:
        return "deep_combust"
    if distance_from_sun <= combust_orb:
        return "combust"
    return "normal"


def is_combust(body: Body, distance_from_sun: float, is_retrograde: bool = False) -> bool:
    return get_combustion_state(body, distance_from_sun, is_retrograde) in (
        "deep_combust",
        "combust",
    )
