"""
AstroStorm - Vedic astrology computation engine.

Turns ephemeris longitudes into sidereal charts and the classical analytics
derived from them: Shadbala, yogas, Vimshottari dasha, Ashtakavarga,
drishti aspects and the North Indian chart layout.
"""

__version__ = "1.0.0"
