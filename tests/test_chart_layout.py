from __future__ import annotations

import pytest

from astrostorm.config.feature_flags import reset_feature_flags
from astrostorm.core.errors import FeatureDisabledError
from astrostorm.ephemeris.constants import Body, ZodiacSign
from astrostorm.modules.chart_layout.north_indian import (
    ASCENDANT_MARKER,
    house_regions,
    layout_chart,
    pack_region,
    polygon_area,
    region_sign,
    status_marks,
    uses_two_columns,
)


@pytest.fixture
def layout(sample_chart):
    return layout_chart(sample_chart.ascendant_sign, sample_chart.positions_by_house())


@pytest.mark.parametrize("canvas", [1.0, 2.0, 480.0])
def test_regions_tile_the_canvas(canvas):
    regions = house_regions(1, canvas)
    assert len(regions) == 12
    assert sum(r.area for r in regions) == pytest.approx(canvas * canvas)
    for r in regions:
        assert r.contains(r.centroid)
        assert r.area == pytest.approx(polygon_area(r.polygon))


def test_kendras_are_the_large_diamonds():
    regions = {r.house: r for r in house_regions(1)}
    for house in (1, 4, 7, 10):
        assert regions[house].is_kendra
        assert regions[house].area == pytest.approx(0.125)
    for house in (2, 3, 5, 6, 8, 9, 11, 12):
        assert regions[house].area == pytest.approx(0.0625)


def test_region_signs_follow_ascendant():
    assert region_sign(5, 1) is ZodiacSign.LEO
    assert region_sign(5, 8) is ZodiacSign.PISCES
    assert [r.sign.value for r in house_regions(12)][:3] == [12, 1, 2]


def test_ascendant_marker_only_in_first_house(layout):
    assert layout.region(1).ascendant_label.text == ASCENDANT_MARKER
    assert all(layout.region(h).ascendant_label is None for h in range(2, 13))
    assert layout.region(1).sign_label.text == str(ZodiacSign.ARIES.value)


def test_planet_labels(layout):
    mars = next(p for p in layout.region(1).planets if p.body is Body.MARS)
    assert mars.degree == 5
    assert mars.text.endswith("5")

    jupiter = next(p for p in layout.region(4).planets if p.body is Body.JUPITER)
    assert "exalted" in jupiter.marks
    assert jupiter.superscript == "↑"


def test_combust_and_retrograde_marks(make_chart):
    chart = make_chart(speeds={Body.SATURN: -0.05})
    sun, saturn = chart.position(Body.SUN), chart.position(Body.SATURN)
    assert status_marks(saturn, sun) == ("retrograde", "combust")
    assert status_marks(sun, sun) == ()
    # Mercury is 15.5 degrees from the Sun
    assert "combust" not in status_marks(chart.position(Body.MERCURY), sun)


def test_column_rule():
    assert not uses_two_columns(1, 3)
    assert uses_two_columns(1, 4)
    assert uses_two_columns(2, 3)
    assert not uses_two_columns(2, 2)


def test_crowded_triangle_stays_inside(sample_chart):
    region = house_regions(1)[1]
    positions = list(sample_chart.positions)[:6]
    packed = pack_region(region, positions, 1.0)

    assert packed.columns == 2
    assert packed.shrink == 1.0
    for label in packed.planets:
        assert region.contains((label.x, label.y))


def test_overfull_region_shrinks_uniformly(sample_chart):
    region = house_regions(1)[1]
    positions = (list(sample_chart.positions) * 2)[:12]
    packed = pack_region(region, positions, 1.0)

    assert 0.0 < packed.shrink < 1.0
    sizes = {round(p.size, 12) for p in packed.planets}
    assert len(sizes) == 1


def test_to_dict(layout):
    data = layout.to_dict()
    assert len(data["regions"]) == 12
    assert len(data["lines"]) == 10
    assert data["regions"][0]["ascendant_label"]["text"] == ASCENDANT_MARKER


@pytest.mark.parametrize("bad", [{0: []}, {13: []}])
def test_rejects_unknown_house(bad):
    with pytest.raises(ValueError):
        layout_chart(1, bad)


def test_rejects_empty_canvas():
    with pytest.raises(ValueError):
        layout_chart(1, {}, canvas_size=0)


def test_layout_can_be_disabled(monkeypatch):
    monkeypatch.setenv("ENABLE_CHART_LAYOUT", "no")
    reset_feature_flags()
    with pytest.raises(FeatureDisabledError):
        layout_chart(1, {})
