#!/usr/bin/env python3
"""
Engine configuration

Defaults for ayanamsa, house system, node type and aspect mode, each
overridable through ASTROSTORM_* environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from astrostorm.config.feature_flags import _env_bool

AYANAMSA_CHOICES = (
    "LAHIRI",
    "RAMAN",
    "KRISHNAMURTI",
    "TRUE_CHITRAPAKSHA",
    "YUKTESHWAR",
    "FAGAN_BRADLEY",
)

HOUSE_SYSTEM_CHOICES = (
    "PLACIDUS",
    "KOCH",
    "PORPHYRY",
    "REGIOMONTANUS",
    "CAMPANUS",
    "EQUAL",
    "WHOLE_SIGN",
)

NODE_TYPE_CHOICES = ("MEAN", "TRUE")
ASPECT_MODE_CHOICES = ("SIGN", "DEGREE", "HYBRID")


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    v = v.strip().upper().replace("-", "_")
    if v not in choices:
        raise ValueError(f"{name}={v!r} is not one of {', '.join(choices)}")
    return v


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return int(v)


@dataclass(frozen=True)
class EngineSettings:
    ayanamsa: str = field(
        default_factory=lambda: _env_choice("ASTROSTORM_AYANAMSA", "LAHIRI", AYANAMSA_CHOICES)
    )
    house_system: str = field(
        default_factory=lambda: _env_choice(
            "ASTROSTORM_HOUSE_SYSTEM", "PLACIDUS", HOUSE_SYSTEM_CHOICES
        )
    )
    # Latitude-independent system substituted when cusps are undefined
    fallback_house_system: str = field(
        default_factory=lambda: _env_choice(
            "ASTROSTORM_FALLBACK_HOUSE_SYSTEM", "WHOLE_SIGN", HOUSE_SYSTEM_CHOICES
        )
    )
    node_type: str = field(
        default_factory=lambda: _env_choice("ASTROSTORM_NODE_TYPE", "MEAN", NODE_TYPE_CHOICES)
    )
    aspect_mode: str = field(
        default_factory=lambda: _env_choice(
            "ASTROSTORM_ASPECT_MODE", "HYBRID", ASPECT_MODE_CHOICES
        )
    )
    ephe_path: str | None = field(
        default_factory=lambda: os.getenv("ASTROSTORM_EPHE_PATH") or None
    )
    include_outer_planets: bool = field(
        default_factory=lambda: _env_bool("ASTROSTORM_INCLUDE_OUTER_PLANETS", False)
    )
    dasha_depth: int = field(default_factory=lambda: _env_int("ASTROSTORM_DASHA_DEPTH", 3))
    log_level: str = field(
        default_factory=lambda: os.getenv("ASTROSTORM_LOG_LEVEL", "INFO").upper()
    )
    log_json: bool = field(default_factory=lambda: _env_bool("ASTROSTORM_LOG_JSON", True))

    def __post_init__(self) -> None:
        if not 1 <= self.dasha_depth <= 6:
            raise ValueError(f"dasha_depth must be 1..6, got {self.dasha_depth}")


_SETTINGS: EngineSettings | None = None


def get_settings() -> EngineSettings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = EngineSettings()
    return _SETTINGS


def reset_settings() -> None:
    global _SETTINGS
    _SETTINGS = None
