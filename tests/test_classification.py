from __future__ import annotations

import pytest

from astrostorm.core.errors import InvalidInputError
from astrostorm.ephemeris.chart import build_chart
from astrostorm.ephemeris.classification import (
    classify,
    classify_sidereal,
    house_of,
    nakshatra_pada_of,
    pada_boundaries,
    sidereal_longitude,
    sign_of,
)
from astrostorm.ephemeris.constants import Body, Nakshatra, ZodiacSign
from astrostorm.ephemeris.core_types import BirthMoment
from astrostorm.ephemeris.houses import WholeSignHouses
from astrostorm.ephemeris.swe_backend import SwissAyanamsa


EQUAL_CUSPS = [30.0 * i for i in range(12)]
EPSILON = 1e-9


@pytest.mark.parametrize("longitude", [0.0, 7.25, 123.456, 200.0, 299.99, 359.5])
@pytest.mark.parametrize("k", [-2, -1, 1, 3])
def test_classification_is_periodic(longitude, k):
    base = classify(longitude, 0.0, EQUAL_CUSPS)
    shifted = classify(longitude + 360.0 * k, 0.0, EQUAL_CUSPS)
    assert (shifted.sign, shifted.nakshatra, shifted.pada, shifted.house) == (
        base.sign,
        base.nakshatra,
        base.pada,
        base.house,
    )


@pytest.mark.parametrize("sign", list(ZodiacSign))
def test_exact_sign_start_belongs_to_that_sign(sign):
    start = sign.start_degree
    assert sign_of(start) is sign
    before = (start - EPSILON) % 360.0
    expected_before = ZodiacSign((sign - 2) % 12 + 1)
    assert sign_of(before) is expected_before


@pytest.mark.parametrize("nakshatra", list(Nakshatra))
def test_exact_nakshatra_start_classifies_into_it(nakshatra):
    nak, pada = nakshatra_pada_of(nakshatra.start_degree)
    assert nak is nakshatra
    assert pada == 1


@pytest.mark.parametrize("nakshatra", list(Nakshatra))
def test_padas_partition_the_nakshatra(nakshatra):
    bounds = pada_boundaries(nakshatra)
    assert len(bounds) == 4
    assert bounds[0][0] == pytest.approx(nakshatra.start_degree)
    assert bounds[-1][1] == pytest.approx(nakshatra.start_degree + 360.0 / 27.0)
    for (_, end), (start, _) in zip(bounds, bounds[1:]):
        assert end == start
    widths = [end - start for start, end in bounds]
    assert widths == pytest.approx([widths[0]] * 4)
    for i, (start, _) in enumerate(bounds, start=1):
        assert nakshatra_pada_of(start) == (nakshatra, i)


def test_literal_boundary_degrees_do_not_drift():
    assert nakshatra_pada_of(13.333333333333334)[0] is Nakshatra.BHARANI
    assert nakshatra_pada_of(26.666666666666668)[0] is Nakshatra.KRITTIKA
    assert classify_sidereal(120.0, EQUAL_CUSPS).nakshatra is Nakshatra.MAGHA
    assert classify_sidereal(3.3333333333333335, EQUAL_CUSPS).pada == 2


def test_sidereal_longitude_wraps_into_range():
    assert sidereal_longitude(10.0, 23.5) == pytest.approx(346.5)
    assert 0.0 <= sidereal_longitude(-720.0, 0.0) < 360.0
    assert sidereal_longitude(360.0, 0.0) == 0.0


def test_house_boundary_belongs_to_house_starting_there():
    assert house_of(30.0, EQUAL_CUSPS) == 2
    assert house_of(30.0 - EPSILON, EQUAL_CUSPS) == 1
    assert house_of(359.9, EQUAL_CUSPS) == 12


def test_house_intervals_wrap_past_zero():
    cusps = [(350.0 + 30.0 * i) % 360.0 for i in range(12)]
    assert house_of(355.0, cusps) == 1
    assert house_of(5.0, cusps) == 1
    assert house_of(20.0, cusps) == 2


def test_house_of_requires_twelve_cusps():
    with pytest.raises(ValueError):
        house_of(10.0, [0.0, 30.0])


def test_lahiri_ayanamsa_for_1990():
    birth = BirthMoment.parse("1990-01-01T00:00:00", 27.7, 85.3)
    assert SwissAyanamsa("LAHIRI").value(birth.julian_day) == pytest.approx(23.71, abs=0.05)


def test_sun_at_280_5_tropical_is_in_sagittarius(birth, stub_ephemeris):
    ephemeris = stub_ephemeris({Body.SUN: 280.5})
    chart = build_chart(
        birth, ephemeris, SwissAyanamsa("LAHIRI"), WholeSignHouses(), bodies=(Body.SUN,)
    ).value

    sun = chart.position(Body.SUN)
    assert chart.ayanamsa_name == "LAHIRI"
    assert sun.sidereal_longitude == pytest.approx(280.5 - chart.ayanamsa_value)
    assert sun.sign is ZodiacSign.SAGITTARIUS
    assert sun.nakshatra is Nakshatra.PURVA_ASHADHA
    assert sun.pada == 2


def test_birth_moment_rejects_out_of_range_coordinates():
    with pytest.raises(ValueError):
        BirthMoment.parse("1990-01-01T00:00:00", 91.0, 0.0)
    with pytest.raises(InvalidInputError):
        BirthMoment.parse("1990-01-01T00:00:00", 0.0, -181.0)


def test_birth_moment_rejects_bad_dates_and_timezones():
    with pytest.raises(InvalidInputError):
        BirthMoment.parse("not-a-date", 10.0, 10.0)
    with pytest.raises(InvalidInputError):
        BirthMoment.parse("1990-01-01T00:00:00", 10.0, 10.0, timezone_id="Mars/Olympus")


def test_birth_moment_reads_naive_time_in_its_timezone():
    birth = BirthMoment.parse("1990-01-01T05:45:00", 27.7, 85.3, timezone_id="Asia/Kathmandu")
    assert birth.date_time_utc.hour == 0
    assert birth.date_time_utc.minute == 0
    assert birth.local_datetime.hour == 5
