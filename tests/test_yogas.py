from __future__ import annotations

import pytest

from astrostorm.config.feature_flags import reset_feature_flags
from astrostorm.core.errors import FeatureDisabledError
from astrostorm.ephemeris.constants import Body
from astrostorm.modules.aspects.vedic_drsti import calculate_aspects
from astrostorm.modules.yogas.engine import (
    CatalogEntry,
    Yoga,
    YogaCategory,
    YogaEngine,
    YogaStrength,
    detect_yogas,
    dominant_category,
    overall_yoga_strength,
    strength_from_percentage,
)
from astrostorm.modules.yogas.predicates import (
    PREDICATES,
    YogaMatch,
    budha_aditya_yoga,
    chandra_yogas,
    kala_sarpa_yoga,
    kemadruma_yoga,
    mahapurusha_yogas,
    run_predicates,
)

# Seven planets strung out ahead of Rahu
SERPENT_LONGITUDES = {
    Body.SUN: 30.0,
    Body.MOON: 50.0,
    Body.MARS: 70.0,
    Body.MERCURY: 90.0,
    Body.JUPITER: 110.0,
    Body.VENUS: 130.0,
    Body.SATURN: 150.0,
    Body.RAHU: 10.0,
}


def _yoga(category: YogaCategory, strength: float, auspicious: bool = True) -> Yoga:
    return Yoga(
        name="Test",
        sanskrit_name="Test",
        category=category,
        bodies=(),
        houses=(),
        is_auspicious=auspicious,
        strength=strength_from_percentage(strength),
        strength_percentage=strength,
        description="",
        effects="",
        activation_period="",
    )


def test_mahapurusha_in_sample_chart(sample_chart):
    matches = mahapurusha_yogas(sample_chart, calculate_aspects(sample_chart))
    assert {m.key for m in matches} == {"ruchaka", "hamsa", "sasa"}
    for m in matches:
        assert 30.0 <= m.strength <= 100.0


def test_gaja_kesari_with_jupiter_on_moon(sample_chart):
    matches = chandra_yogas(sample_chart, calculate_aspects(sample_chart))
    gaja = next(m for m in matches if m.key == "gaja_kesari")
    assert gaja.bodies == (Body.JUPITER, Body.MOON)
    assert gaja.params["house_from_moon"] == "1"


def test_kemadruma_cancelled_by_kendra_moon(make_chart):
    chart = make_chart({Body.SUN: 280.0, Body.MOON: 100.0, Body.RAHU: 200.0})
    match = kemadruma_yoga(chart, calculate_aspects(chart))

    assert match.variant == "cancelled"
    assert match.strength == 20.0
    assert "Moon in kendra (house 4)" in match.cancellation_factors


def test_kemadruma_absent_when_moon_is_flanked(make_chart):
    # Mars in Leo, the 2nd from a Cancer Moon
    chart = make_chart({Body.SUN: 280.5, Body.MOON: 100.0, Body.MARS: 125.0, Body.RAHU: 200.0})
    assert kemadruma_yoga(chart, calculate_aspects(chart)) is None


def test_budha_aditya_needs_same_sign(make_chart, sample_chart):
    assert budha_aditya_yoga(sample_chart, calculate_aspects(sample_chart)) is None

    chart = make_chart({Body.SUN: 280.5, Body.MERCURY: 285.0, Body.MOON: 100.0, Body.RAHU: 200.0})
    match = budha_aditya_yoga(chart, calculate_aspects(chart))
    assert match.strength == 45.0
    assert "Mercury is combust" in match.cancellation_factors[0]


def test_kala_sarpa_ascending(make_chart):
    chart = make_chart(SERPENT_LONGITUDES, ascendant=0.0)
    match = kala_sarpa_yoga(chart, calculate_aspects(chart))
    assert match.params["direction"] == "ascending"
    assert match.params["type"] == "Anant"
    assert match.houses == (1, 7)


def test_kala_sarpa_descending(make_chart):
    longitudes = {b: lon + 180.0 for b, lon in SERPENT_LONGITUDES.items() if b is not Body.RAHU}
    chart = make_chart({**longitudes, Body.RAHU: 10.0}, ascendant=0.0)
    assert kala_sarpa_yoga(chart, calculate_aspects(chart)).params["direction"] == "descending"


def test_no_kala_sarpa_with_planets_on_both_sides(make_chart):
    chart = make_chart({**SERPENT_LONGITUDES, Body.SATURN: 250.0}, ascendant=0.0)
    assert kala_sarpa_yoga(chart, calculate_aspects(chart)) is None


@pytest.mark.parametrize("longitudes", [None, SERPENT_LONGITUDES])
def test_catalog_covers_every_match(make_chart, longitudes):
    chart = make_chart(longitudes, ascendant=0.0)
    engine = YogaEngine()
    for match in run_predicates(chart, calculate_aspects(chart)):
        assert match.key in engine.catalog


def test_detect_statistics(sample_chart):
    analysis = detect_yogas(sample_chart)

    stats = analysis.statistics
    assert stats["total_detected"] == len(analysis.yogas)
    assert stats["total_evaluated"] == len(PREDICATES)
    assert sum(c["count"] for c in stats["by_category"].values()) == len(analysis.yogas)
    assert analysis.of_category("mahapurusha")
    assert analysis.dominant_category is not YogaCategory.NEGATIVE
    assert 0.0 <= analysis.overall_strength <= 100.0


def test_vesi_variant_follows_benefics(sample_chart):
    # Venus in the 2nd and Mercury in the 12th from the Sun
    analysis = detect_yogas(sample_chart)
    solar = analysis.of_category(YogaCategory.SOLAR)
    names = {y.name for y in solar}
    assert "Ubhayachari Yoga" in names
    assert all(y.is_auspicious for y in solar)


def test_kemadruma_text_uses_variant(make_chart):
    chart = make_chart({Body.SUN: 280.0, Body.MOON: 100.0, Body.RAHU: 200.0})
    kemadruma = [y for y in detect_yogas(chart).negative if y.name == "Kemadruma Yoga"]
    assert len(kemadruma) == 1
    assert kemadruma[0].is_cancelled
    assert "Moon in kendra (house 4)" in kemadruma[0].cancelled_by
    assert "reduced" in kemadruma[0].effects
    assert not kemadruma[0].is_active


def test_daridra_with_descriptive_factors_is_not_cancelled(make_chart):
    # Aries rising, Saturn (11th lord) in Virgo, no Jupiter in the chart
    chart = make_chart(
        {Body.SUN: 280.5, Body.MOON: 100.0, Body.SATURN: 160.0, Body.RAHU: 200.0},
        ascendant=15.0,
    )
    analysis = detect_yogas(chart)
    daridra = [y for y in analysis.yogas if y.name == "Daridra Yoga"]

    assert len(daridra) == 1
    assert daridra[0].cancellation_factors
    assert daridra[0].cancelled_by == ()
    assert not daridra[0].is_cancelled
    assert daridra[0].to_dict()["cancelled"] is False
    assert analysis.statistics["cancelled"] == sum(y.is_cancelled for y in analysis.yogas)


@pytest.mark.parametrize(
    "percentage, band",
    [
        (95.0, YogaStrength.EXTREMELY_STRONG),
        (85.0, YogaStrength.EXTREMELY_STRONG),
        (70.0, YogaStrength.STRONG),
        (55.0, YogaStrength.MODERATE),
        (30.0, YogaStrength.WEAK),
        (10.0, YogaStrength.VERY_WEAK),
    ],
)
def test_strength_bands(percentage, band):
    assert strength_from_percentage(percentage) is band


def test_overall_strength():
    assert overall_yoga_strength([]) == 50.0
    assert overall_yoga_strength([_yoga(YogaCategory.RAJA, 80.0)]) == 80.0
    with_negative = [_yoga(YogaCategory.RAJA, 80.0), _yoga(YogaCategory.NEGATIVE, 70.0, False)]
    assert overall_yoga_strength(with_negative) == pytest.approx(72.0)


def test_dominant_category_ignores_negative():
    by_category = {
        YogaCategory.NEGATIVE: [_yoga(YogaCategory.NEGATIVE, 60.0, False)] * 3,
        YogaCategory.DHANA: [_yoga(YogaCategory.DHANA, 60.0)],
    }
    assert dominant_category(by_category) is YogaCategory.DHANA
    assert dominant_category({}) is None


def test_catalog_entry_requires_text_fields():
    with pytest.raises(ValueError):
        CatalogEntry("broken", {"name": "Broken", "category": "raja"})


def test_unknown_placeholder_stays_visible():
    entry = CatalogEntry(
        "sample",
        {
            "name": "Sample",
            "sanskrit_name": "Sample",
            "category": "special",
            "description": "{planet} with {missing}",
            "effects": "",
            "activation_period": "",
        },
    )
    yoga = entry.render(YogaMatch("sample", (Body.SUN,), (1,), 40.0, params={"planet": "Sun"}))
    assert yoga.description == "Sun with {missing}"
    assert yoga.strength is YogaStrength.WEAK


def test_render_unknown_key():
    with pytest.raises(KeyError):
        YogaEngine().render(YogaMatch("no_such_yoga", (), (), 50.0))


def test_yoga_engine_can_be_disabled(sample_chart, monkeypatch):
    monkeypatch.setenv("ENABLE_YOGA_ENGINE", "off")
    reset_feature_flags()
    with pytest.raises(FeatureDisabledError):
        detect_yogas(sample_chart)
