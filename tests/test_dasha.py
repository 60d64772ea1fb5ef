from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from astrostorm.config.feature_flags import reset_feature_flags
from astrostorm.core.errors import FeatureDisabledError
from astrostorm.ephemeris.classification import nakshatra_offset, nakshatra_pada_of
from astrostorm.ephemeris.constants import Body, Nakshatra
from astrostorm.ephemeris.dasha import (
    TOTAL_CYCLE_DAYS,
    birth_balance,
    build_timeline,
    timeline_for_chart,
)

BIRTH = datetime(1990, 1, 1, tzinfo=timezone.utc)


def test_birth_balance_is_position_within_nakshatra():
    nakshatra, lord, fraction = birth_balance(100.0)
    assert nakshatra is Nakshatra.PUSHYA
    assert lord is Body.SATURN
    assert fraction == Decimal("0.5")


@pytest.mark.parametrize(
    "moon",
    [
        0.0,
        13.333333333333332,
        13.333333333333334,
        26.666666666666664,
        26.666666666666668,
        120.0,
        359.99999999999994,
    ],
)
def test_birth_nakshatra_matches_classifier_at_boundaries(moon):
    timeline = build_timeline(BIRTH, moon, depth=1)
    nakshatra, fraction = nakshatra_offset(moon)
    assert timeline.birth_nakshatra is nakshatra_pada_of(moon)[0]
    assert timeline.birth_nakshatra is nakshatra
    assert timeline.elapsed_fraction == fraction
    assert Decimal(0) <= timeline.elapsed_fraction < Decimal(1)


def test_last_ulp_before_bharani_starts_bharani():
    nakshatra, lord, fraction = birth_balance(13.333333333333332)
    assert nakshatra is Nakshatra.BHARANI
    assert lord is Body.VENUS
    assert fraction == 0
    timeline = build_timeline(BIRTH, 13.333333333333332, depth=1)
    assert timeline.mahadashas[0].start == BIRTH
    assert float(timeline.balance_days) == pytest.approx(20 * 365.25)


def test_chart_moon_and_timeline_agree(make_chart):
    chart = make_chart(
        {
            Body.SUN: 280.5,
            Body.MOON: 13.333333333333332,
            Body.MARS: 5.0,
            Body.MERCURY: 265.0,
            Body.JUPITER: 95.0,
            Body.VENUS: 320.0,
            Body.SATURN: 290.0,
            Body.RAHU: 200.0,
        }
    )
    moon = chart.position(Body.MOON)
    timeline = timeline_for_chart(chart, depth=1)
    assert moon.nakshatra is Nakshatra.BHARANI
    assert timeline.birth_nakshatra is moon.nakshatra
    assert timeline.birth_lord is moon.nakshatra.lord


def test_first_period_elapsed_fraction_matches_moon():
    timeline = build_timeline(BIRTH, 100.0, depth=1)
    first = timeline.mahadashas[0]
    assert first.lord is Body.SATURN
    assert first.duration_years == 19
    assert first.progress(BIRTH) == pytest.approx(0.5, abs=1e-9)
    assert float(timeline.balance_days) == pytest.approx(9.5 * 365.25)


@pytest.mark.parametrize("moon", [0.0, 13.3, 100.0, 187.25, 359.99])
def test_mahadashas_span_the_full_cycle(moon):
    timeline = build_timeline(BIRTH, moon, depth=1)
    periods = timeline.mahadashas
    assert len(periods) == 9
    assert sum(p.duration_days for p in periods) == TOTAL_CYCLE_DAYS
    span = periods[-1].end - periods[0].start
    assert span.total_seconds() == pytest.approx(float(TOTAL_CYCLE_DAYS) * 86400, abs=1.0)
    for prev, nxt in zip(periods, periods[1:]):
        assert prev.end == nxt.start


def test_children_rotate_from_parent_and_fill_it():
    timeline = build_timeline(BIRTH, 187.25, depth=3)
    assert timeline.depth == 3
    for parent in timeline.periods(2):
        children = timeline.children(parent)
        assert len(children) == 9
        assert children[0].lord is parent.lord
        assert children[0].start == parent.start
        assert children[-1].end == parent.end
        assert float(sum(c.duration_days for c in children)) == pytest.approx(
            float(parent.duration_days)
        )
        assert all(timeline.parent(c) == parent for c in children)


def test_active_chain_contains_now():
    timeline = build_timeline(BIRTH, 55.0, depth=4)
    now = BIRTH + timedelta(days=12_345)
    chain = timeline.active_chain(now)
    assert [p.level for p in chain] == [1, 2, 3, 4]
    assert all(p.is_active(now) for p in chain)
    assert timeline.active_period(now, level=2) is chain[1]


def test_active_chain_outside_cycle_is_empty():
    timeline = build_timeline(BIRTH, 55.0, depth=2)
    assert timeline.active_chain(BIRTH + timedelta(days=130 * 366)) == []


def test_upcoming_periods_start_after_now():
    timeline = build_timeline(BIRTH, 55.0, depth=1)
    upcoming = timeline.upcoming(BIRTH, count=3)
    assert len(upcoming) == 3
    assert all(p.start > BIRTH for p in upcoming)


def test_sandhi_windows_centre_on_boundaries():
    timeline = build_timeline(BIRTH, 100.0, depth=2)
    windows = timeline.sandhi_windows(1)
    assert len(windows) == 8
    first = windows[0]
    assert first.from_lord is Body.SATURN
    assert first.to_lord is Body.MERCURY
    assert first.boundary - first.start == first.end - first.boundary
    # 5% of a multi-year period is clamped to 30 days
    assert (first.end - first.start).days == 30
    assert first in timeline.sandhi_at(first.boundary)


@pytest.mark.parametrize("level", [2, 3])
def test_sub_period_sandhi_windows_sit_on_child_boundaries(level):
    timeline = build_timeline(BIRTH, 100.0, depth=3)
    periods = timeline.periods(level)
    windows = timeline.sandhi_windows(level)
    assert len(windows) == len(periods) - 1
    for window, prev, nxt in zip(windows, periods, periods[1:]):
        assert window.level == level
        assert window.boundary == prev.end == nxt.start
        assert (window.from_lord, window.to_lord) == (prev.lord, nxt.lord)
        assert window.boundary - window.start == window.end - window.boundary
        width = (window.end - window.start).total_seconds() / 86400
        assert 1.0 - 1e-6 <= width <= 30.0 + 1e-6


def test_pratyantardasha_sandhi_uses_fifteen_percent():
    timeline = build_timeline(BIRTH, 100.0, depth=3)
    first = timeline.sandhi_windows(3)[0]
    assert first.from_lord is Body.SATURN
    assert first.to_lord is Body.MERCURY
    # Saturn/Saturn/Mercury is the shorter neighbour: 6939.75 * 19/120 * 17/120 days
    expected = 6939.75 * 19 / 120 * 17 / 120 * 0.15
    width = (first.end - first.start).total_seconds() / 86400
    assert width == pytest.approx(expected, abs=1e-5)
    assert first in timeline.sandhi_at(first.boundary)


def test_antardasha_sandhi_is_clamped_to_thirty_days():
    timeline = build_timeline(BIRTH, 100.0, depth=2)
    first = timeline.sandhi_windows(2)[0]
    assert (first.from_lord, first.to_lord) == (Body.SATURN, Body.MERCURY)
    assert (first.end - first.start).total_seconds() == pytest.approx(30 * 86400, abs=1e-3)


def test_depth_is_validated():
    with pytest.raises(ValueError):
        build_timeline(BIRTH, 10.0, depth=7)


def test_timeline_for_chart_uses_configured_depth(sample_chart, monkeypatch):
    monkeypatch.setenv("ASTROSTORM_DASHA_DEPTH", "4")
    assert timeline_for_chart(sample_chart).depth == 4
    assert timeline_for_chart(sample_chart, depth=2).depth == 2


def test_dasha_can_be_disabled(monkeypatch):
    monkeypatch.setenv("ENABLE_DASHA", "0")
    reset_feature_flags()
    with pytest.raises(FeatureDisabledError):
        build_timeline(BIRTH, 10.0)


def test_to_dict_uses_lord_values():
    data = build_timeline(BIRTH, 100.0, depth=2).to_dict()
    assert data["birth_lord"] == Body.SATURN.value
    assert len(data["levels"]) == 2
    assert len(data["levels"][1]) == 81
