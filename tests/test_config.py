from __future__ import annotations

import pytest

from astrostorm.config.feature_flags import (
    FeatureFlags,
    get_feature_flags,
    is_feature_enabled,
    require_feature,
    reset_feature_flags,
)
from astrostorm.config.settings import get_settings, reset_settings
from astrostorm.core.errors import FeatureDisabledError


def test_defaults():
    settings = get_settings()
    assert settings.ayanamsa == "LAHIRI"
    assert settings.house_system == "PLACIDUS"
    assert settings.fallback_house_system == "WHOLE_SIGN"
    assert settings.node_type == "MEAN"
    assert settings.aspect_mode == "HYBRID"
    assert settings.dasha_depth == 3
    assert settings.include_outer_planets is False
    assert get_settings() is settings


def test_env_overrides_are_normalised(monkeypatch):
    monkeypatch.setenv("ASTROSTORM_HOUSE_SYSTEM", "whole-sign")
    monkeypatch.setenv("ASTROSTORM_NODE_TYPE", "true")
    monkeypatch.setenv("ASTROSTORM_INCLUDE_OUTER_PLANETS", "yes")
    reset_settings()

    settings = get_settings()
    assert settings.house_system == "WHOLE_SIGN"
    assert settings.node_type == "TRUE"
    assert settings.include_outer_planets is True


def test_unknown_choice_is_rejected(monkeypatch):
    monkeypatch.setenv("ASTROSTORM_AYANAMSA", "MADE_UP")
    with pytest.raises(ValueError, match="ASTROSTORM_AYANAMSA"):
        get_settings()


@pytest.mark.parametrize("depth", ["0", "7"])
def test_dasha_depth_bounds(monkeypatch, depth):
    monkeypatch.setenv("ASTROSTORM_DASHA_DEPTH", depth)
    with pytest.raises(ValueError):
        get_settings()


def test_flags_default_on():
    flags = get_feature_flags()
    assert set(flags.enabled_features()) == {f.value for f in FeatureFlags}


def test_flag_off_by_env(monkeypatch):
    monkeypatch.setenv("ENABLE_ASHTAKAVARGA", "false")
    reset_feature_flags()
    assert not is_feature_enabled("ashtakavarga")
    assert not is_feature_enabled(FeatureFlags.ENABLE_ASHTAKAVARGA)
    assert is_feature_enabled("shadbala")


def test_unknown_string_flag_is_disabled():
    assert not is_feature_enabled("telepathy")


def test_require_feature_raises_runtime_error(monkeypatch):
    @require_feature("dasha")
    def gated():
        return "ran"

    assert gated() == "ran"
    monkeypatch.setenv("ENABLE_DASHA", "0")
    reset_feature_flags()
    with pytest.raises(FeatureDisabledError) as exc:
        gated()
    assert isinstance(exc.value, RuntimeError)
    assert "dasha" in str(exc.value)
