"""
Yoga detection engine.
Runs the registered predicates over a chart and attaches the display text
from the YAML catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from astrostorm.config.feature_flags import require_feature
from astrostorm.core.logging import get_engine_logger
from astrostorm.ephemeris.constants import Body
from astrostorm.ephemeris.core_types import VedicChart
from astrostorm.modules.aspects.vedic_drsti import AspectMatrix, calculate_aspects
from astrostorm.modules.yogas.predicates import PREDICATES, YogaMatch, run_predicates

logger = get_engine_logger("yoga")

CATALOG_PATH = Path(__file__).parent / "catalog.yaml"

# Minimum strength for a yoga to count as active
ACTIVE_THRESHOLD = 25.0
NEGATIVE_PENALTY = 0.1


class YogaCategory(str, Enum):
    RAJA = "raja"
    DHANA = "dhana"
    MAHAPURUSHA = "mahapurusha"
    NABHASA = "nabhasa"
    CHANDRA = "chandra"
    SOLAR = "solar"
    NEGATIVE = "negative"
    SPECIAL = "special"

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]


_CATEGORY_NAMES = {
    YogaCategory.RAJA: "Raja Yoga",
    YogaCategory.DHANA: "Dhana Yoga",
    YogaCategory.MAHAPURUSHA: "Pancha Mahapurusha Yoga",
    YogaCategory.NABHASA: "Nabhasa Yoga",
    YogaCategory.CHANDRA: "Chandra Yoga",
    YogaCategory.SOLAR: "Solar Yoga",
    YogaCategory.NEGATIVE: "Negative Yoga",
    YogaCategory.SPECIAL: "Special Yoga",
}


class YogaStrength(str, Enum):
    EXTREMELY_STRONG = "Extremely Strong"
    STRONG = "Strong"
    MODERATE = "Moderate"
    WEAK = "Weak"
    VERY_WEAK = "Very Weak"


# (minimum percentage, band), strongest first
STRENGTH_BANDS: tuple[tuple[float, YogaStrength], ...] = (
    (85.0, YogaStrength.EXTREMELY_STRONG),
    (70.0, YogaStrength.STRONG),
    (50.0, YogaStrength.MODERATE),
    (30.0, YogaStrength.WEAK),
)


def strength_from_percentage(percentage: float) -> YogaStrength:
    for minimum, band in STRENGTH_BANDS:
        if percentage >= minimum:
            return band
    return YogaStrength.VERY_WEAK


@dataclass(frozen=True)
class Yoga:
    """A detected yoga with its catalog text."""

    name: str
    sanskrit_name: str
    category: YogaCategory
    bodies: tuple[Body, ...]
    houses: tuple[int, ...]
    is_auspicious: bool
    strength: YogaStrength
    strength_percentage: float
    description: str
    effects: str
    activation_period: str
    cancellation_factors: tuple[str, ...] = ()
    cancelled_by: tuple[str, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.strength_percentage >= ACTIVE_THRESHOLD

    @property
    def is_cancelled(self) -> bool:
        return bool(self.cancelled_by)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "name": self.name,
            "sanskrit_name": self.sanskrit_name,
            "category": self.category.value,
            "planets": [b.value for b in self.bodies],
            "houses": list(self.houses),
            "auspicious": self.is_auspicious,
            "strength": self.strength.value,
            "strength_percentage": round(self.strength_percentage, 2),
            "active": self.is_active,
            "description": self.description,
            "effects": self.effects,
            "activation_period": self.activation_period,
            "cancellation_factors": list(self.cancellation_factors),
            "cancelled": self.is_cancelled,
            "cancelled_by": list(self.cancelled_by),
        }


@dataclass
class YogaAnalysis:
    """All yogas of a chart grouped by category."""

    yogas: list[Yoga]
    by_category: dict[YogaCategory, list[Yoga]]
    dominant_category: YogaCategory | None
    overall_strength: float
    statistics: dict[str, Any] = field(default_factory=dict)

    def of_category(self, category: YogaCategory | str) -> list[Yoga]:
        return self.by_category.get(YogaCategory(category), [])

    @property
    def auspicious(self) -> list[Yoga]:
        return [y for y in self.yogas if y.is_auspicious]

    @property
    def negative(self) -> list[Yoga]:
        return self.of_category(YogaCategory.NEGATIVE)

    @property
    def strongest(self) -> Yoga | None:
        return max(self.yogas, key=lambda y: y.strength_percentage, default=None)

    def names(self) -> list[str]:
        return [y.name for y in self.yogas]

    def to_dict(self) -> dict[str, Any]:
        strongest = self.strongest
        return {
            "yogas": [y.to_dict() for y in self.yogas],
            "by_category": {
                cat.value: [y.to_dict() for y in yogas] for cat, yogas in self.by_category.items()
            },
            "dominant_category": self.dominant_category.value if self.dominant_category else None,
            "overall_strength": round(self.overall_strength, 2),
            "statistics": self.statistics,
            "strongest": strongest.to_dict() if strongest else None,
        }


class _Params(dict):
    # unknown placeholders stay visible instead of raising
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class CatalogEntry:
    """Display text of one yoga, loaded from the catalog."""

    TEXT_FIELDS = ("name", "sanskrit_name", "description", "effects", "activation_period")

    def __init__(self, key: str, entry: dict):
        missing = [f for f in (*self.TEXT_FIELDS, "category") if f not in entry]
        if missing:
            raise ValueError(f"Catalog entry {key!r} is missing {', '.join(missing)}")
        self.key = key
        self.category = YogaCategory(entry["category"])
        self.is_auspicious = bool(entry.get("auspicious", True))
        self.text = {f: str(entry[f]) for f in self.TEXT_FIELDS}
        self.variants: dict[str, dict[str, str]] = {
            name: {f: str(v) for f, v in fields.items() if f in self.TEXT_FIELDS}
            for name, fields in (entry.get("variants") or {}).items()
        }

    def render(self, match: YogaMatch) -> Yoga:
        text = dict(self.text)
        if match.variant is not None:
            text.update(self.variants.get(match.variant, {}))
        params = _Params(match.params)
        text = {f: v.format_map(params) for f, v in text.items()}

        auspicious = self.is_auspicious if match.is_auspicious is None else match.is_auspicious
        return Yoga(
            name=text["name"],
            sanskrit_name=text["sanskrit_name"],
            category=self.category,
            bodies=match.bodies,
            houses=match.houses,
            is_auspicious=auspicious,
            strength=strength_from_percentage(match.strength),
            strength_percentage=match.strength,
            description=text["description"],
            effects=text["effects"],
            activation_period=text["activation_period"],
            cancellation_factors=match.cancellation_factors,
            cancelled_by=match.cancelled_by,
        )


def overall_yoga_strength(yogas: list[Yoga]) -> float:
    """Average auspicious strength, reduced 10% per negative yoga."""
    positive = [y.strength_percentage for y in yogas if y.is_auspicious]
    if not positive:
        return 50.0
    negatives = sum(1 for y in yogas if y.category is YogaCategory.NEGATIVE)
    average = sum(positive) / len(positive)
    return min(max(average * (1.0 - negatives * NEGATIVE_PENALTY), 0.0), 100.0)


def dominant_category(by_category: dict[YogaCategory, list[Yoga]]) -> YogaCategory | None:
    """Most populated category other than Negative; ties go to the earlier category."""
    best, best_count = None, 0
    for category in YogaCategory:
        if category is YogaCategory.NEGATIVE:
            continue
        count = len(by_category.get(category, []))
        if count > best_count:
            best, best_count = category, count
    return best


class YogaEngine:
    """Main yoga detection engine."""

    def __init__(self, catalog_path: Path | str | None = None):
        self.catalog_path = Path(catalog_path) if catalog_path else CATALOG_PATH
        self.catalog: dict[str, CatalogEntry] = {}
        self.entries_by_category: dict[YogaCategory, list[CatalogEntry]] = {}
        self._load_catalog()

    def _load_catalog(self) -> None:
        """Load yoga text from the YAML catalog."""
        with open(self.catalog_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        for key, entry in (data.get("yogas") or {}).items():
            item = CatalogEntry(key, entry)
            self.catalog[key] = item
            self.entries_by_category.setdefault(item.category, []).append(item)

        logger.debug(
            "Yoga catalog loaded",
            extra={"path": str(self.catalog_path), "entries": len(self.catalog)},
        )

    def render(self, match: YogaMatch) -> Yoga:
        try:
            entry = self.catalog[match.key]
        except KeyError:
            raise KeyError(f"No catalog entry for yoga {match.key!r}") from None
        return entry.render(match)

    @require_feature("yoga_engine")
    def detect(self, chart: VedicChart, aspects: AspectMatrix | None = None) -> YogaAnalysis:
        """Detect all yogas in the chart.

        Args:
            chart: Computed chart
            aspects: Aspect matrix of the chart (calculated when omitted)

        Returns:
            YogaAnalysis with per-category lists and statistics
        """
        if aspects is None:
            aspects = calculate_aspects(chart)

        yogas = [self.render(m) for m in run_predicates(chart, aspects)]

        by_category: dict[YogaCategory, list[Yoga]] = {}
        statistics: dict[str, Any] = {
            "total_evaluated": len(PREDICATES),
            "total_detected": 0,
            "active": 0,
            "cancelled": 0,
            "by_category": {},
        }
        for yoga in yogas:
            by_category.setdefault(yoga.category, []).append(yoga)

            statistics["total_detected"] += 1
            if yoga.is_active:
                statistics["active"] += 1
            if yoga.is_cancelled:
                statistics["cancelled"] += 1

            cat_stats = statistics["by_category"].setdefault(
                yoga.category.value, {"count": 0, "active": 0}
            )
            cat_stats["count"] += 1
            if yoga.is_active:
                cat_stats["active"] += 1

        analysis = YogaAnalysis(
            yogas=yogas,
            by_category=by_category,
            dominant_category=dominant_category(by_category),
            overall_strength=overall_yoga_strength(yogas),
            statistics=statistics,
        )
        logger.debug(
            "Yogas detected",
            extra={
                "detected": statistics["total_detected"],
                "active": statistics["active"],
                "overall_strength": round(analysis.overall_strength, 2),
            },
        )
        return analysis


# Global engine instance
_yoga_engine = None


def get_yoga_engine() -> YogaEngine:
    """Get singleton yoga engine instance."""
    global _yoga_engine
    if _yoga_engine is None:
        _yoga_engine = YogaEngine()
    return _yoga_engine


@require_feature("yoga_engine")
def detect_yogas(chart: VedicChart, aspects: AspectMatrix | None = None) -> YogaAnalysis:
    """Convenience function to detect all yogas.

    Args:
        chart: Computed chart
        aspects: Aspect matrix of the chart

    Returns:
        YogaAnalysis
    """
    return get_yoga_engine().detect(chart, aspects)
