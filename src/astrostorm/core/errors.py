"""
Error taxonomy and partial-result aggregate.

Failures that make a whole computation impossible are raised. Failures that
only affect one body or one sub-component are recorded as ComputationIssue
entries on a PartialResult so the rest of the analysis still reaches the
caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class AstroStormError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(AstroStormError, ValueError):
    """Out-of-range coordinates, unknown timezone or unparseable date."""


class EphemerisUnavailableError(AstroStormError):
    """The ephemeris adapter cannot supply a body's position for an instant."""

    def __init__(self, body: Any, jd: float, reason: str = ""):
        self.body = body
        self.jd = jd
        self.reason = reason
        name = getattr(body, "name", str(body))
        msg = f"Ephemeris unavailable for {name} at JD {jd:.6f}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class DegenerateGeometryError(AstroStormError, ValueError):
    """House cusps are undefined for the requested latitude."""

    def __init__(self, house_system: str, latitude: float, reason: str = ""):
        self.house_system = house_system
        self.latitude = latitude
        msg = f"{house_system} cusps undefined at latitude {latitude:.4f}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class FeatureDisabledError(AstroStormError, RuntimeError):
    """A feature-flag gated engine was called while disabled."""


class IssueKind(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    EPHEMERIS_UNAVAILABLE = "EPHEMERIS_UNAVAILABLE"
    DEGENERATE_GEOMETRY = "DEGENERATE_GEOMETRY"
    PARTIAL_STRENGTH_INPUT = "PARTIAL_STRENGTH_INPUT"


@dataclass(frozen=True)
class ComputationIssue:
    """A recorded, non-fatal problem in one part of a computation."""

    kind: IssueKind
    component: str
    message: str
    body: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "component": self.component,
            "message": self.message,
            "body": self.body,
        }


@dataclass(frozen=True)
class PartialResult(Generic[T]):
    """Value plus the issues collected while producing it."""

    value: T
    issues: tuple[ComputationIssue, ...] = field(default_factory=tuple)

    @property
    def is_partial(self) -> bool:
        return bool(self.issues)

    def issues_of(self, kind: IssueKind) -> list[ComputationIssue]:
        return [i for i in self.issues if i.kind is kind]
