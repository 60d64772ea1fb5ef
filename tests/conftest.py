import os
from datetime import datetime, timezone

import pytest

# Ensure tests run without JIT compile overhead
os.environ.setdefault("NUMBA_DISABLE_JIT", "1")

from astrostorm.config.feature_flags import reset_feature_flags  # noqa: E402
from astrostorm.config.settings import reset_settings  # noqa: E402
from astrostorm.core.errors import EphemerisUnavailableError  # noqa: E402
from astrostorm.ephemeris.chart import build_chart  # noqa: E402
from astrostorm.ephemeris.constants import Body  # noqa: E402
from astrostorm.ephemeris.core_types import BirthMoment, BodyPosition  # noqa: E402
from astrostorm.ephemeris.houses import WholeSignHouses  # noqa: E402
from astrostorm.interfaces.ephemeris_adapter import ChartAngles, SunTimes  # noqa: E402


class StubEphemeris:
    """Returns fixed tropical longitudes; bodies not listed are unavailable."""

    def __init__(
        self,
        longitudes: dict[Body, float],
        speeds: dict[Body, float] | None = None,
        ascendant: float = 0.0,
        midheaven: float = 270.0,
        polar: bool = False,
    ):
        self.longitudes = dict(longitudes)
        self.speeds = dict(speeds or {})
        self.ascendant = ascendant
        self.midheaven = midheaven
        self.polar = polar
        self.calls: list[Body] = []

    def position(self, body: Body, jd: float) -> BodyPosition:
        self.calls.append(body)
        if body not in self.longitudes:
            raise EphemerisUnavailableError(body, jd, "not in stub")
        return BodyPosition(
            longitude=self.longitudes[body],
            latitude=0.0,
            speed=self.speeds.get(body, 1.0),
            distance=1.0,
        )

    def angles(self, jd: float, latitude: float, longitude: float) -> ChartAngles:
        return ChartAngles(
            ascendant=self.ascendant, midheaven=self.midheaven, armc=0.0, obliquity=23.44
        )

    def sun_times(self, jd: float, latitude: float, longitude: float) -> SunTimes | None:
        if self.polar:
            return None
        # Birth three hours after sunrise
        return SunTimes(sunrise=jd - 0.125, sunset=jd + 0.375, next_sunrise=jd + 0.875)


class StubAyanamsa:
    def __init__(self, value: float = 0.0):
        self._value = value

    @property
    def name(self) -> str:
        return "STUB"

    def value(self, jd: float) -> float:
        return self._value


# Aries rising; Mars, Jupiter and Saturn in own/exaltation kendras
SAMPLE_LONGITUDES: dict[Body, float] = {
    Body.SUN: 280.5,
    Body.MOON: 100.0,
    Body.MARS: 5.0,
    Body.MERCURY: 265.0,
    Body.JUPITER: 95.0,
    Body.VENUS: 320.0,
    Body.SATURN: 290.0,
    Body.RAHU: 200.0,
}


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """Every test starts from default flags and settings."""
    for name in list(os.environ):
        if name.startswith("ASTROSTORM_") or name.startswith("ENABLE_"):
            monkeypatch.delenv(name, raising=False)
    reset_feature_flags()
    reset_settings()
    yield
    reset_feature_flags()
    reset_settings()


@pytest.fixture
def birth() -> BirthMoment:
    return BirthMoment(
        date_time_utc=datetime(1990, 1, 1, tzinfo=timezone.utc),
        latitude=27.7,
        longitude=85.3,
    )


@pytest.fixture
def make_chart(birth):
    """Build a whole-sign chart from tropical longitudes with zero ayanamsa by default."""

    def _make(
        longitudes: dict[Body, float] | None = None,
        *,
        ascendant: float = 15.0,
        ayanamsa: float = 0.0,
        speeds: dict[Body, float] | None = None,
        polar: bool = False,
    ):
        ephemeris = StubEphemeris(
            SAMPLE_LONGITUDES if longitudes is None else longitudes,
            speeds=speeds,
            ascendant=ascendant,
            polar=polar,
        )
        result = build_chart(birth, ephemeris, StubAyanamsa(ayanamsa), WholeSignHouses())
        return result.value

    return _make


@pytest.fixture
def sample_chart(make_chart):
    return make_chart()


@pytest.fixture
def stub_ephemeris():
    return StubEphemeris


@pytest.fixture
def stub_ayanamsa():
    return StubAyanamsa
