#!/usr/bin/env python3
"""
Feature flag utilities and decorators.

Provides a stable interface expected by the analytics engines:
- get_feature_flags() -> returns a state object with boolean flags and helpers
- require_feature(flag) -> decorator to gate engine entry points
- FeatureFlags -> enum-style names for the same switches

Engines gate themselves with short string keys (e.g. "yoga_engine",
"vedic_aspects").
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from functools import wraps
from typing import Any, Callable

from astrostorm.core.errors import FeatureDisabledError


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


class FeatureFlags(Enum):
    ENABLE_SHADBALA = "ENABLE_SHADBALA"
    ENABLE_ASHTAKAVARGA = "ENABLE_ASHTAKAVARGA"
    ENABLE_VEDIC_ASPECTS = "ENABLE_VEDIC_ASPECTS"
    ENABLE_YOGA_ENGINE = "ENABLE_YOGA_ENGINE"
    ENABLE_DASHA = "ENABLE_DASHA"
    ENABLE_CHART_LAYOUT = "ENABLE_CHART_LAYOUT"


@dataclass
class FeatureFlagState:
    # Analytics engines
    ENABLE_SHADBALA: bool = field(default_factory=lambda: _env_bool("ENABLE_SHADBALA", True))
    ENABLE_ASHTAKAVARGA: bool = field(
        default_factory=lambda: _env_bool("ENABLE_ASHTAKAVARGA", True)
    )
    ENABLE_VEDIC_ASPECTS: bool = field(
        default_factory=lambda: _env_bool("ENABLE_VEDIC_ASPECTS", True)
    )
    ENABLE_YOGA_ENGINE: bool = field(
        default_factory=lambda: _env_bool("ENABLE_YOGA_ENGINE", True)
    )
    ENABLE_DASHA: bool = field(default_factory=lambda: _env_bool("ENABLE_DASHA", True))

    # Presentation geometry
    ENABLE_CHART_LAYOUT: bool = field(
        default_factory=lambda: _env_bool("ENABLE_CHART_LAYOUT", True)
    )

    def enabled_features(self) -> list[str]:
        """Return a list of feature names that are enabled."""
        return [name for name, value in self.to_dict().items() if value is True]

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# Module-level singleton
_FLAGS: FeatureFlagState | None = None


def get_feature_flags() -> FeatureFlagState:
    global _FLAGS
    if _FLAGS is None:
        _FLAGS = FeatureFlagState()
    return _FLAGS


def reset_feature_flags() -> None:
    """Drop the cached flag state so the environment is read again."""
    global _FLAGS
    _FLAGS = None


# Mapping for string-based require_feature usage
_STRING_FLAG_MAP: dict[str, str] = {
    "shadbala": "ENABLE_SHADBALA",
    "ashtakavarga": "ENABLE_ASHTAKAVARGA",
    "vedic_aspects": "ENABLE_VEDIC_ASPECTS",
    "yoga_engine": "ENABLE_YOGA_ENGINE",
    "dasha": "ENABLE_DASHA",
    "chart_layout": "ENABLE_CHART_LAYOUT",
}


def is_feature_enabled(flag: FeatureFlags | str) -> bool:
    flags = get_feature_flags()

    if isinstance(flag, FeatureFlags):
        return getattr(flags, flag.value, False) is True

    attr = _STRING_FLAG_MAP.get(flag, None)
    if attr is None:
        # Unknown string flag
        return False
    return getattr(flags, attr, False) is True


def require_feature(flag: FeatureFlags | str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to gate a function by feature flag.

    Raises FeatureDisabledError (a RuntimeError) when the flag is off.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not is_feature_enabled(flag):
                name = flag.value if isinstance(flag, FeatureFlags) else flag
                raise FeatureDisabledError(f"Feature disabled: {name}")
            return func(*args, **kwargs)

        return wrapper

    return decorator
