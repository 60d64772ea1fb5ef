"""
North Indian (diamond) chart geometry.

The square is cut by its two diagonals and by the diamond joining the side
midpoints. That gives four kendra diamonds (houses 1, 4, 7, 10) and eight
triangles. House 1 is the top diamond and houses run counter-clockwise.
Polygons are defined on the unit square (y grows downward) and scaled to the
canvas; the output needs no further geometry on the rendering side.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from astrostorm.config.feature_flags import require_feature
from astrostorm.constants.combustion_orbs import is_combust
from astrostorm.constants.relationships import is_debilitated, is_exalted
from astrostorm.core.logging import get_engine_logger
from astrostorm.ephemeris.constants import KENDRA_HOUSES, Body, ZodiacSign
from astrostorm.ephemeris.core_types import PlanetPosition
from astrostorm.ephemeris.numerics import angular_distance
from astrostorm.ephemeris.varga import is_vargottama

logger = get_engine_logger("chart_layout")

Point = tuple[float, float]

# Unit-square reference points
_TL, _TR, _BR, _BL = (0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)
_TOP, _RIGHT, _BOTTOM, _LEFT = (0.5, 0.0), (1.0, 0.5), (0.5, 1.0), (0.0, 0.5)
_CENTER = (0.5, 0.5)
_Q_TL, _Q_TR, _Q_BR, _Q_BL = (0.25, 0.25), (0.75, 0.25), (0.75, 0.75), (0.25, 0.75)

HOUSE_POLYGONS: dict[int, tuple[Point, ...]] = {
    1: (_TOP, _Q_TR, _CENTER, _Q_TL),
    2: (_TL, _TOP, _Q_TL),
    3: (_TL, _Q_TL, _LEFT),
    4: (_LEFT, _Q_TL, _CENTER, _Q_BL),
    5: (_LEFT, _Q_BL, _BL),
    6: (_BL, _Q_BL, _BOTTOM),
    7: (_BOTTOM, _Q_BL, _CENTER, _Q_BR),
    8: (_BOTTOM, _Q_BR, _BR),
    9: (_BR, _Q_BR, _RIGHT),
    10: (_RIGHT, _Q_BR, _CENTER, _Q_TR),
    11: (_RIGHT, _Q_TR, _TR),
    12: (_TR, _Q_TR, _TOP),
}

CORNER_HOUSES = frozenset({2, 6, 8, 12})

# Text metrics as fractions of the canvas size
BASE_TEXT_SIZE = 0.032
HOUSE_NUMBER_TEXT_SIZE = 0.035
CROWDED_TEXT_SCALE = 0.85
LINE_HEIGHT_FACTOR = 1.2
COLUMN_WIDTH = 0.07
# Share of the vertical chord through the centroid that labels may use
LABEL_FILL = 0.8

ASCENDANT_MARKER = "La"

STATUS_MARKS: dict[str, str] = {
    "retrograde": "R",
    "exalted": "↑",
    "debilitated": "↓",
    "combust": "c",
    "vargottama": "V",
}


# ============================================================================
# POLYGON GEOMETRY
# ============================================================================


def polygon_area(points: Sequence[Point]) -> float:
    """Unsigned shoelace area."""
    xs = np.array([p[0] for p in points], dtype=float)
    ys = np.array([p[1] for p in points], dtype=float)
    return float(abs(np.dot(xs, np.roll(ys, -1)) - np.dot(ys, np.roll(xs, -1))) / 2.0)


def polygon_centroid(points: Sequence[Point]) -> Point:
    """Area-weighted centroid of a simple polygon (shoelace formula)."""
    xs = np.array([p[0] for p in points], dtype=float)
    ys = np.array([p[1] for p in points], dtype=float)
    xn, yn = np.roll(xs, -1), np.roll(ys, -1)
    cross = xs * yn - xn * ys
    signed_area = cross.sum() / 2.0
    if signed_area == 0:
        return float(xs.mean()), float(ys.mean())
    cx = ((xs + xn) * cross).sum() / (6.0 * signed_area)
    cy = ((ys + yn) * cross).sum() / (6.0 * signed_area)
    return float(cx), float(cy)


def contains_point(points: Sequence[Point], point: Point, tolerance: float = 1e-9) -> bool:
    """Whether a convex polygon contains the point (edges included)."""
    px, py = point
    sign = 0
    for (x1, y1), (x2, y2) in zip(points, (*points[1:], points[0])):
        cross = (x2 - x1) * (py - y1) - (y2 - y1) * (px - x1)
        if abs(cross) <= tolerance:
            continue
        current = 1 if cross > 0 else -1
        if sign == 0:
            sign = current
        elif current != sign:
            return False
    return True


def vertical_extent(points: Sequence[Point], x: float) -> float:
    """Length of the vertical chord of the polygon at abscissa x."""
    hits: list[float] = []
    for (x1, y1), (x2, y2) in zip(points, (*points[1:], points[0])):
        if x1 == x2:
            if math.isclose(x, x1):
                hits.extend((y1, y2))
            continue
        if min(x1, x2) <= x <= max(x1, x2):
            t = (x - x1) / (x2 - x1)
            hits.append(y1 + t * (y2 - y1))
    return max(hits) - min(hits) if hits else 0.0


def region_sign(ascendant_sign: int, house: int) -> ZodiacSign:
    return ZodiacSign(((int(ascendant_sign) - 1 + house - 1) % 12) + 1)


def region_shape(house: int) -> str:
    if house in KENDRA_HOUSES:
        return "diamond"
    return "corner" if house in CORNER_HOUSES else "side"


# ============================================================================
# LAYOUT TYPES
# ============================================================================


@dataclass(frozen=True)
class HouseRegion:
    """One house polygon in canvas coordinates."""

    house: int
    sign: ZodiacSign
    shape: str
    polygon: tuple[Point, ...]
    centroid: Point
    area: float

    @property
    def is_kendra(self) -> bool:
        return self.house in KENDRA_HOUSES

    def contains(self, point: Point) -> bool:
        return contains_point(self.polygon, point)

    def to_dict(self) -> dict[str, Any]:
        return {
            "house": self.house,
            "sign": self.sign.value,
            "shape": self.shape,
            "polygon": [[round(x, 4), round(y, 4)] for x, y in self.polygon],
            "centroid": [round(self.centroid[0], 4), round(self.centroid[1], 4)],
            "area": round(self.area, 4),
        }


@dataclass(frozen=True)
class TextLabel:
    text: str
    x: float
    y: float
    size: float

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "x": round(self.x, 4), "y": round(self.y, 4), "size": round(self.size, 4)}


@dataclass(frozen=True)
class PlanetLabel:
    """Glyph of one body: symbol, whole degree in sign and status marks."""

    body: Body
    glyph: str
    degree: int
    marks: tuple[str, ...]
    x: float
    y: float
    size: float

    @property
    def text(self) -> str:
        return f"{self.glyph}{self.degree}"

    @property
    def superscript(self) -> str:
        return "".join(STATUS_MARKS[m] for m in self.marks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "body": self.body.value,
            "text": self.text,
            "superscript": self.superscript,
            "marks": list(self.marks),
            "x": round(self.x, 4),
            "y": round(self.y, 4),
            "size": round(self.size, 4),
        }


@dataclass(frozen=True)
class RegionLayout:
    """A region with its packed labels."""

    region: HouseRegion
    sign_label: TextLabel
    ascendant_label: TextLabel | None
    planets: tuple[PlanetLabel, ...]
    columns: int
    shrink: float

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.region.to_dict(),
            "sign_label": self.sign_label.to_dict(),
            "ascendant_label": self.ascendant_label.to_dict() if self.ascendant_label else None,
            "planets": [p.to_dict() for p in self.planets],
            "columns": self.columns,
            "shrink": round(self.shrink, 4),
        }


@dataclass(frozen=True)
class ChartLayout:
    """Drawable North Indian chart."""

    canvas_size: float
    ascendant_sign: ZodiacSign
    regions: tuple[RegionLayout, ...]

    def region(self, house: int) -> RegionLayout:
        return self.regions[house - 1]

    @property
    def lines(self) -> list[tuple[Point, Point]]:
        """Segments of the frame: outer square, both diagonals and the inner diamond."""
        s = self.canvas_size
        unit = [
            (_TL, _TR), (_TR, _BR), (_BR, _BL), (_BL, _TL),
            (_TL, _BR), (_TR, _BL),
            (_TOP, _RIGHT), (_RIGHT, _BOTTOM), (_BOTTOM, _LEFT), (_LEFT, _TOP),
        ]
        return [((a[0] * s, a[1] * s), (b[0] * s, b[1] * s)) for a, b in unit]

    def to_dict(self) -> dict[str, Any]:
        return {
            "canvas_size": self.canvas_size,
            "ascendant_sign": self.ascendant_sign.value,
            "regions": [r.to_dict() for r in self.regions],
            "lines": [[list(a), list(b)] for a, b in self.lines],
        }


# ============================================================================
# LABEL PACKING
# ============================================================================


def status_marks(position: PlanetPosition, sun: PlanetPosition | None = None) -> tuple[str, ...]:
    """Status marks of a body in display order."""
    marks = []
    if position.is_retrograde:
        marks.append("retrograde")
    if is_exalted(position.body, position.sign):
        marks.append("exalted")
    elif is_debilitated(position.body, position.sign):
        marks.append("debilitated")
    if sun is not None and position.body is not Body.SUN:
        distance = angular_distance(position.sidereal_longitude, sun.sidereal_longitude)
        if is_combust(position.body, distance, position.is_retrograde):
            marks.append("combust")
    if is_vargottama(position.sidereal_longitude):
        marks.append("vargottama")
    return tuple(marks)


def uses_two_columns(house: int, count: int) -> bool:
    return count >= 4 or (house not in KENDRA_HOUSES and count >= 3)


def pack_region(
    region: HouseRegion,
    positions: Sequence[PlanetPosition],
    canvas_size: float,
    sun: PlanetPosition | None = None,
    is_ascendant: bool = False,
) -> RegionLayout:
    """Stack the sign number, ascendant marker and planet rows around the centroid.

    The block is centred on the centroid. When the required height exceeds
    the available height every metric is scaled by the same factor.
    """
    count = len(positions)
    columns = 2 if uses_two_columns(region.house, count) else 1
    rows = math.ceil(count / columns) if count else 0

    text_size = BASE_TEXT_SIZE * canvas_size
    if count > 4:
        text_size *= CROWDED_TEXT_SCALE
    number_size = HOUSE_NUMBER_TEXT_SIZE * canvas_size
    line_height = LINE_HEIGHT_FACTOR * text_size
    number_height = LINE_HEIGHT_FACTOR * number_size

    required = number_height + rows * line_height + (line_height if is_ascendant else 0.0)
    cx, cy = region.centroid
    available = vertical_extent(region.polygon, cx) * LABEL_FILL
    shrink = min(1.0, available / required) if required > 0 else 1.0

    text_size *= shrink
    number_size *= shrink
    line_height *= shrink
    number_height *= shrink
    column_width = COLUMN_WIDTH * canvas_size * shrink

    y = cy - required * shrink / 2.0
    sign_label = TextLabel(str(region.sign.value), cx, y + number_height / 2.0, number_size)
    y += number_height

    ascendant_label = None
    if is_ascendant:
        ascendant_label = TextLabel(ASCENDANT_MARKER, cx, y + line_height / 2.0, text_size)
        y += line_height

    labels = []
    for i, pos in enumerate(positions):
        row, col = divmod(i, columns)
        x = cx if columns == 1 else cx + (col - 0.5) * column_width
        labels.append(
            PlanetLabel(
                body=pos.body,
                glyph=pos.body.symbol,
                degree=int(pos.degree_in_sign),
                marks=status_marks(pos, sun),
                x=x,
                y=y + (row + 0.5) * line_height,
                size=text_size,
            )
        )

    return RegionLayout(
        region=region,
        sign_label=sign_label,
        ascendant_label=ascendant_label,
        planets=tuple(labels),
        columns=columns,
        shrink=shrink,
    )


def house_regions(ascendant_sign: int, canvas_size: float = 1.0) -> list[HouseRegion]:
    """The twelve house polygons scaled to the canvas."""
    regions = []
    for house in range(1, 13):
        polygon = tuple((x * canvas_size, y * canvas_size) for x, y in HOUSE_POLYGONS[house])
        regions.append(
            HouseRegion(
                house=house,
                sign=region_sign(ascendant_sign, house),
                shape=region_shape(house),
                polygon=polygon,
                centroid=polygon_centroid(polygon),
                area=polygon_area(polygon),
            )
        )
    return regions


def _find_sun(groups: Iterable[Sequence[PlanetPosition]]) -> PlanetPosition | None:
    for group in groups:
        for pos in group:
            if pos.body is Body.SUN:
                return pos
    return None


@require_feature("chart_layout")
def layout_chart(
    ascendant_sign: int | ZodiacSign,
    positions_by_house: Mapping[int, Sequence[PlanetPosition]],
    canvas_size: float = 1.0,
) -> ChartLayout:
    """Lay out a North Indian chart.

    Args:
        ascendant_sign: Sign (1-12) rising in house 1
        positions_by_house: {house: positions} as returned by VedicChart.positions_by_house()
        canvas_size: Side of the square canvas

    Returns:
        ChartLayout with polygons, centroids and packed labels
    """
    if canvas_size <= 0:
        raise ValueError(f"canvas_size must be positive, got {canvas_size}")
    for house in positions_by_house:
        if not 1 <= house <= 12:
            raise ValueError(f"House must be in 1..12, got {house}")

    ascendant = ZodiacSign(int(ascendant_sign))
    sun = _find_sun(positions_by_house.values())
    regions = tuple(
        pack_region(
            region,
            positions_by_house.get(region.house, ()),
            canvas_size,
            sun=sun,
            is_ascendant=region.house == 1,
        )
        for region in house_regions(ascendant, canvas_size)
    )

    logger.debug(
        "Chart layout computed",
        extra={
            "ascendant_sign": ascendant.value,
            "canvas_size": canvas_size,
            "shrunk_regions": sum(1 for r in regions if r.shrink < 1.0),
        },
    )
    return ChartLayout(canvas_size=canvas_size, ascendant_sign=ascendant, regions=regions)
