from __future__ import annotations

import pytest

from astrostorm.config.feature_flags import reset_feature_flags
from astrostorm.core.errors import FeatureDisabledError
from astrostorm.ephemeris.constants import Body
from astrostorm.modules.aspects.vedic_drsti import (
    AspectMode,
    analyze_aspects,
    calculate_aspects,
    detect_aspect_patterns,
)


def test_ten_and_one_thirty_degrees_form_a_trine(make_chart):
    chart = make_chart({Body.SUN: 10.0, Body.MOON: 130.0}, ascendant=0.0)
    matrix = calculate_aspects(chart)

    aspect = matrix.aspect_between(Body.SUN, Body.MOON)
    assert aspect.aspect_type == "trine"
    assert aspect.exact_orb == pytest.approx(0.0, abs=1e-9)
    assert matrix.aspect_between(Body.MOON, Body.SUN).aspect_type == "trine"
    assert len(matrix.mutual_aspects()) == 1


@pytest.mark.parametrize(
    "mode, expected",
    [(AspectMode.SIGN, "trine"), (AspectMode.DEGREE, "square"), (AspectMode.HYBRID, "square")],
)
def test_mode_changes_classification(make_chart, mode, expected):
    # 92 degrees apart but five signs counted inclusively
    chart = make_chart({Body.SUN: 29.0, Body.MOON: 121.0}, ascendant=0.0)
    aspect = calculate_aspects(chart, mode).aspect_between(Body.SUN, Body.MOON)
    assert aspect.aspect_type == expected


def test_mode_defaults_to_settings(make_chart, monkeypatch):
    monkeypatch.setenv("ASTROSTORM_ASPECT_MODE", "degree")
    chart = make_chart({Body.SUN: 10.0, Body.MOON: 130.0}, ascendant=0.0)
    assert calculate_aspects(chart).mode is AspectMode.DEGREE


def test_mars_eighth_house_aspect(make_chart):
    chart = make_chart({Body.MARS: 0.0, Body.MOON: 210.0}, ascendant=0.0)
    aspect = calculate_aspects(chart).aspect_between(Body.MARS, Body.MOON)
    assert aspect.aspect_type == "special_8th"
    assert aspect.is_special
    assert aspect.sign_match


def test_special_aspect_wins_a_tie(make_chart):
    chart = make_chart({Body.JUPITER: 0.0, Body.VENUS: 240.0}, ascendant=0.0)
    matrix = calculate_aspects(chart)
    assert matrix.aspect_between(Body.JUPITER, Body.VENUS).aspect_type == "special_9th"
    assert matrix.aspect_between(Body.VENUS, Body.JUPITER).aspect_type == "trine"


@pytest.mark.parametrize("moon_speed, applying", [(1.0, True), (-1.0, False)])
def test_applying_follows_relative_motion(make_chart, moon_speed, applying):
    chart = make_chart(
        {Body.SUN: 10.0, Body.MOON: 127.0},
        ascendant=0.0,
        speeds={Body.SUN: 0.0, Body.MOON: moon_speed},
    )
    aspect = calculate_aspects(chart).aspect_between(Body.SUN, Body.MOON)
    assert aspect.is_applying is applying


def test_unrelated_bodies_have_no_aspect(make_chart):
    chart = make_chart({Body.SUN: 10.0, Body.MOON: 45.0}, ascendant=0.0)
    assert calculate_aspects(chart).aspect_between(Body.SUN, Body.MOON) is None


def test_grand_trine_pattern(make_chart):
    chart = make_chart({Body.SUN: 0.0, Body.MOON: 120.0, Body.JUPITER: 240.0}, ascendant=0.0)
    assert "Grand Trine" in detect_aspect_patterns(calculate_aspects(chart))


def test_grand_cross_pattern(make_chart):
    chart = make_chart(
        {Body.SUN: 5.0, Body.MOON: 95.0, Body.MERCURY: 185.0, Body.VENUS: 275.0},
        ascendant=0.0,
    )
    patterns = detect_aspect_patterns(calculate_aspects(chart))
    assert "Grand Cross" in patterns
    assert "T-Square" in patterns


def test_separate_t_squares_are_not_a_grand_cross(make_chart):
    # Sun-Mercury opposition squared by the Moon; the nodal axis squared by Venus
    chart = make_chart(
        {
            Body.SUN: 5.0,
            Body.MOON: 95.0,
            Body.MERCURY: 185.0,
            Body.VENUS: 140.0,
            Body.RAHU: 230.0,
        },
        ascendant=0.0,
    )
    matrix = calculate_aspects(chart)
    squares = {frozenset((a.from_body, a.to_body)) for a in matrix.aspects if a.aspect_type == "square"}
    oppositions = {
        frozenset((a.from_body, a.to_body)) for a in matrix.aspects if a.aspect_type == "opposition"
    }
    assert len(oppositions) >= 2
    assert len(squares) >= 4

    patterns = detect_aspect_patterns(matrix)
    assert "T-Square" in patterns
    assert "Grand Cross" not in patterns


def test_analysis_summary(sample_chart):
    matrix = calculate_aspects(sample_chart)
    analysis = analyze_aspects(matrix)
    assert analysis["total_aspects"] == len(matrix.aspects)
    assert analysis["applying_aspects"] + analysis["separating_aspects"] == len(matrix.aspects)
    assert analysis["aspect_patterns"]


def test_to_dict_uses_body_values(sample_chart):
    data = calculate_aspects(sample_chart).to_dict()
    assert data["total_aspects"] == len(data["aspects"])
    assert all(isinstance(a["from"], int) for a in data["aspects"])


def test_aspects_can_be_disabled(sample_chart, monkeypatch):
    monkeypatch.setenv("ENABLE_VEDIC_ASPECTS", "false")
    reset_feature_flags()
    with pytest.raises(FeatureDisabledError):
        calculate_aspects(sample_chart)
