from __future__ import annotations

import pytest

from astrostorm.ephemeris.classification import classify_sidereal, nakshatra_pada_of, sign_of
from astrostorm.ephemeris.constants import ZodiacSign
from astrostorm.ephemeris.varga import (
    SAPTAVARGA,
    is_vargottama,
    list_schemes,
    register_scheme,
    saptavarga_signs,
    varga_sign,
    varga_sign_batch,
)


@pytest.mark.parametrize(
    "longitude, expected",
    [
        (1.0, ZodiacSign.ARIES),  # movable sign starts at itself
        (31.0, ZodiacSign.CAPRICORN),  # fixed sign starts at its 9th
        (61.0, ZodiacSign.LIBRA),  # dual sign starts at its 5th
        (29.9, ZodiacSign.SAGITTARIUS),
    ],
)
def test_navamsa(longitude, expected):
    assert varga_sign(longitude, "D9") is expected


@pytest.mark.parametrize("longitude", [1.0, 45.0, 88.0, 181.0, 225.0, 268.0])
def test_vargottama_degrees(longitude):
    assert is_vargottama(longitude)


@pytest.mark.parametrize("longitude", [5.0, 31.0, 100.0])
def test_not_vargottama(longitude):
    assert not is_vargottama(longitude)


def test_hora_alternates_between_leo_and_cancer():
    assert varga_sign(10.0, "D2") is ZodiacSign.LEO
    assert varga_sign(20.0, "D2") is ZodiacSign.CANCER
    assert varga_sign(40.0, "D2") is ZodiacSign.CANCER


def test_drekkana_uses_fifth_and_ninth():
    assert [varga_sign(d, "D3") for d in (5.0, 15.0, 25.0)] == [
        ZodiacSign.ARIES,
        ZodiacSign.LEO,
        ZodiacSign.SAGITTARIUS,
    ]


def test_trimsamsa_even_sign():
    assert varga_sign(32.0, "D30") is ZodiacSign.TAURUS
    assert varga_sign(58.0, "D30") is ZodiacSign.SCORPIO


def test_saptavarga_covers_seven_charts():
    signs = saptavarga_signs(123.4)
    assert tuple(signs) == SAPTAVARGA
    assert signs["D1"] is ZodiacSign.LEO


def test_batch_matches_single():
    lons = [0.0, 77.7, 190.1, 359.9]
    batch = varga_sign_batch(lons, "D12")
    assert batch.tolist() == [int(varga_sign(lon, "D12")) for lon in lons]


def test_unknown_scheme():
    with pytest.raises(KeyError):
        varga_sign(10.0, "D60")


def test_register_scheme_validates():
    with pytest.raises(ValueError):
        register_scheme("", lambda lon: 0)
    assert "D9" in list_schemes()


BOUNDARY_LITERALS = [
    29.999999999999996,
    59.99999999999999,
    89.99999999999999,
    13.333333333333332,
    23.333333333333332,
    26.666666666666664,
    359.99999999999994,
]


@pytest.mark.parametrize("longitude", BOUNDARY_LITERALS)
def test_rasi_agrees_with_classification_at_boundaries(longitude):
    cusps = [30.0 * i for i in range(12)]
    assert varga_sign(longitude, "D1") is sign_of(longitude)
    assert varga_sign(longitude, "D1") is classify_sidereal(longitude, cusps).sign
    assert varga_sign_batch([longitude], "D1").tolist() == [int(sign_of(longitude))]


@pytest.mark.parametrize("longitude", BOUNDARY_LITERALS)
def test_navamsa_follows_pada_at_boundaries(longitude):
    # The n-th pada of the zodiac falls in the n-th navamsa sign counted from Aries
    nakshatra, pada = nakshatra_pada_of(longitude)
    expected = ZodiacSign(((nakshatra - 1) * 4 + pada - 1) % 12 + 1)
    assert varga_sign(longitude, "D9") is expected


def test_one_ulp_below_sign_is_vargottama_like_its_sign_start():
    assert is_vargottama(59.99999999999999) is is_vargottama(60.0)
