from __future__ import annotations

import pytest

from astrostorm.config.feature_flags import reset_feature_flags
from astrostorm.constants.shadbala_tables import NEUTRAL_VIRUPAS, rating_for_percentage
from astrostorm.core.errors import FeatureDisabledError, IssueKind
from astrostorm.ephemeris.constants import CLASSICAL_BODIES, Body
from astrostorm.modules.aspects.vedic_drsti import calculate_aspects
from astrostorm.modules.vedic_strength.shadbala import (
    calculate_chesta_bala,
    calculate_dig_bala,
    calculate_shadbala,
    compute_shadbala,
    strength_summary,
)


@pytest.fixture
def shadbala(sample_chart):
    return compute_shadbala(sample_chart, calculate_aspects(sample_chart))


def test_every_classical_body_has_a_result(shadbala):
    assert set(shadbala.value) == set(CLASSICAL_BODIES)
    assert not shadbala.is_partial


def test_total_rupas_is_sum_of_components(shadbala):
    for result in shadbala.value.values():
        parts = (
            result.sthana_bala,
            result.dig_bala,
            result.kala_bala,
            result.chesta_bala,
            result.naisargika_bala,
            result.drik_bala,
        )
        assert result.total_rupas == pytest.approx(sum(parts) / 60.0)
        assert result.total_rupas >= 0.0
        assert result.percentage_of_required == pytest.approx(
            result.total_rupas / result.required_rupas * 100.0
        )


def test_repeated_calls_are_identical(sample_chart):
    aspects = calculate_aspects(sample_chart)
    first = compute_shadbala(sample_chart, aspects).value
    second = compute_shadbala(sample_chart, aspects).value
    for body in first:
        assert first[body].percentage_of_required == second[body].percentage_of_required
        assert first[body].to_dict() == second[body].to_dict()


def test_missing_sunrise_flags_partial(make_chart):
    chart = make_chart(polar=True)
    result = compute_shadbala(chart, calculate_aspects(chart))

    assert result.is_partial
    assert result.issues_of(IssueKind.PARTIAL_STRENGTH_INPUT)
    sun = result.value[Body.SUN]
    assert sun.is_partial
    assert sun.kala.nathonnatha == NEUTRAL_VIRUPAS
    assert sun.kala.tribhaga == NEUTRAL_VIRUPAS
    assert sun.to_dict()["is_partial"] is True


def test_dig_bala_peaks_in_strong_house():
    assert calculate_dig_bala(Body.SUN, 10) == 60.0
    assert calculate_dig_bala(Body.SUN, 4) == 0.0
    assert calculate_dig_bala(Body.SATURN, 7) == 60.0
    assert calculate_dig_bala(Body.JUPITER, 12) == 50.0


def test_luminaries_and_nodes_use_fixed_chesta(sample_chart):
    for body in (Body.SUN, Body.MOON, Body.RAHU, Body.KETU):
        assert calculate_chesta_bala(sample_chart.position(body)) == 30.0


def test_retrograde_gains_chesta(make_chart):
    chart = make_chart(speeds={Body.SATURN: -0.05})
    assert calculate_chesta_bala(chart.position(Body.SATURN)) == 60.0


def test_outer_planet_is_rejected(sample_chart):
    with pytest.raises(ValueError):
        calculate_shadbala(sample_chart, Body.URANUS, calculate_aspects(sample_chart))


def test_rating_bands():
    assert rating_for_percentage(10.0) == "Extremely Weak"
    assert rating_for_percentage(100.0) == "Above Average"
    assert rating_for_percentage(200.0) == "Extremely Strong"


def test_strength_summary_ranks_bodies(shadbala):
    summary = strength_summary(shadbala.value)
    assert len(summary["ranking"]) == len(shadbala.value)
    assert summary["strongest"] == summary["ranking"][0][0]


def test_shadbala_can_be_disabled(sample_chart, monkeypatch):
    monkeypatch.setenv("ENABLE_SHADBALA", "0")
    reset_feature_flags()
    with pytest.raises(FeatureDisabledError):
        compute_shadbala(sample_chart, calculate_aspects(sample_chart))
