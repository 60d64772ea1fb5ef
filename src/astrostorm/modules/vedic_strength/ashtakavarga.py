"""
Ashtakavarga scoring module for transit and strength evaluation.
Based on Parashari system of benefic points.

Each of the seven planets has a Bhinnashtakavarga: eight contributors
(the seven planets and the ascendant) vote for signs counted from their own
sign. Votes are kept as a contributor x sign matrix (prastara); its column
sums are the bindus and the sum over all tables is the Sarvashtakavarga.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from astrostorm.config.feature_flags import require_feature
from astrostorm.constants.ashtakavarga_points import (
    ASCENDANT,
    BENEFIC_POINTS,
    BHINNA_FAVOURABLE_THRESHOLD,
    CLASSICAL_TOTALS,
    KAKSHA_LORDS,
    KAKSHA_SPAN,
    SARVA_STRONG_THRESHOLD,
    SARVA_WEAK_THRESHOLD,
)
from astrostorm.core.errors import ComputationIssue, IssueKind
from astrostorm.core.logging import get_engine_logger
from astrostorm.ephemeris.constants import SEVEN_PLANETS, Body, ZodiacSign
from astrostorm.ephemeris.core_types import VedicChart
from astrostorm.ephemeris.numerics import normalize_angle

logger = get_engine_logger("ashtakavarga")

PointTables = Mapping[Body, Mapping[int, tuple[int, ...]]]

# Row order of every prastara matrix
CONTRIBUTORS: tuple[int, ...] = (*SEVEN_PLANETS, ASCENDANT)


def contributor_name(contributor: int) -> str:
    return "Ascendant" if contributor == ASCENDANT else Body(contributor).display_name


def target_sign(reference: int, place: int) -> int:
    """Sign (1-12) lying `place` signs from `reference`, counting it as 1."""
    return ((reference - 1 + place - 1) % 12) + 1


def prastara(
    table: Mapping[int, tuple[int, ...]], signs: Mapping[int, int]
) -> np.ndarray:
    """Contributor x sign vote matrix for one table.

    Args:
        table: {contributor: places} benefic places of the table
        signs: {contributor: sign} signs of the available contributors

    Returns:
        int array of shape (8, 12); row order is CONTRIBUTORS, column i is
        sign i + 1. Rows of missing contributors stay zero.
    """
    matrix = np.zeros((len(CONTRIBUTORS), 12), dtype=np.int64)
    for row, contributor in enumerate(CONTRIBUTORS):
        sign = signs.get(contributor)
        if sign is None:
            continue
        for place in table.get(contributor, ()):
            matrix[row, target_sign(sign, place) - 1] = 1
    return matrix


@dataclass(frozen=True, eq=False)
class AshtakavargaResult:
    """Container for Ashtakavarga calculations."""

    prastara: dict[Body, np.ndarray]
    issues: tuple[ComputationIssue, ...] = field(default_factory=tuple)

    @property
    def bhinna(self) -> dict[Body, np.ndarray]:
        """Bindus (0-8) per sign for each table body."""
        return {body: m.sum(axis=0) for body, m in self.prastara.items()}

    @property
    def sarva(self) -> np.ndarray:
        """Combined bindus per sign across every table."""
        total = np.zeros(12, dtype=np.int64)
        for m in self.prastara.values():
            total += m.sum(axis=0)
        return total

    @property
    def sarva_total(self) -> int:
        return int(self.sarva.sum())

    @property
    def is_partial(self) -> bool:
        return bool(self.issues)

    def bindus(self, body: Body, sign: ZodiacSign | int) -> int:
        return int(self.prastara[body][:, int(sign) - 1].sum())

    def sarva_bindus(self, sign: ZodiacSign | int) -> int:
        return int(self.sarva[int(sign) - 1])

    def totals(self) -> dict[Body, int]:
        return {body: int(m.sum()) for body, m in self.prastara.items()}

    def matches_classical_totals(self) -> bool:
        return all(CLASSICAL_TOTALS.get(b) == t for b, t in self.totals().items())

    def strongest_signs(self) -> list[ZodiacSign]:
        sarva = self.sarva
        return [ZodiacSign(i + 1) for i in np.flatnonzero(sarva == sarva.max())]

    def weakest_signs(self) -> list[ZodiacSign]:
        sarva = self.sarva
        return [ZodiacSign(i + 1) for i in np.flatnonzero(sarva == sarva.min())]

    def sign_quality(self, sign: ZodiacSign | int) -> str:
        points = self.sarva_bindus(sign)
        if points >= SARVA_STRONG_THRESHOLD:
            return "strong"
        if points >= SARVA_WEAK_THRESHOLD:
            return "average"
        return "weak"

    def favourable_signs(self, body: Body, min_bindus: int = BHINNA_FAVOURABLE_THRESHOLD) -> list[ZodiacSign]:
        return [
            ZodiacSign(i + 1)
            for i, b in enumerate(self.prastara[body].sum(axis=0))
            if b >= min_bindus
        ]

    def transit_score(self, body: Body, sign: ZodiacSign | int) -> dict[str, Any]:
        """Transit quality of `body` moving through `sign`.

        Args:
            body: Transiting planet (one of the seven table bodies)
            sign: Sign being transited

        Returns:
            Bindus, Sarva points, favourable flag and a 0-100 score
        """
        bindus = self.bindus(body, sign)
        sarva = self.sarva_bindus(sign)
        score = 100.0 * (0.6 * bindus / 8.0 + 0.4 * min(sarva, 40) / 40.0)
        return {
            "body": body.display_name,
            "sign": ZodiacSign(int(sign)).display_name,
            "bindus": bindus,
            "sarva": sarva,
            "favourable": bindus >= BHINNA_FAVOURABLE_THRESHOLD,
            "sign_quality": self.sign_quality(sign),
            "score": round(score, 1),
        }

    def kaksha_has_bindu(self, body: Body, longitude: float) -> bool:
        """Whether the kaksha lord at `longitude` voted for that sign in body's table."""
        lord = kaksha_lord(longitude)
        sign = int(normalize_angle(longitude) // 30.0)
        return bool(self.prastara[body][CONTRIBUTORS.index(lord), sign])

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "bhinna": {b.value: v.tolist() for b, v in self.bhinna.items()},
            "sarva": self.sarva.tolist(),
            "sarva_total": self.sarva_total,
            "totals": {b.value: t for b, t in self.totals().items()},
            "prastara": {
                b.value: {contributor_name(c): m[i].tolist() for i, c in enumerate(CONTRIBUTORS)}
                for b, m in self.prastara.items()
            },
            "strongest_signs": [s.value for s in self.strongest_signs()],
            "weakest_signs": [s.value for s in self.weakest_signs()],
            "issues": [i.to_dict() for i in self.issues],
        }


def kaksha_lord(longitude: float) -> int:
    """Lord of the kaksha (eighth of a sign) containing a longitude.

    Returns a Body, or ASCENDANT for the last kaksha.
    """
    within = normalize_angle(longitude) % 30.0
    return KAKSHA_LORDS[min(int(within // KAKSHA_SPAN), 7)]


def ashtakavarga_from_signs(
    signs: Mapping[int, int], tables: PointTables = BENEFIC_POINTS
) -> AshtakavargaResult:
    """Ashtakavarga from contributor signs alone.

    Args:
        signs: {contributor: sign} for the seven planets and ASCENDANT
        tables: Benefic place tables to vote with

    Returns:
        AshtakavargaResult with one prastara per table body
    """
    return AshtakavargaResult(
        prastara={body: prastara(table, signs) for body, table in tables.items()}
    )


@require_feature("ashtakavarga")
def compute_ashtakavarga(
    chart: VedicChart, tables: PointTables = BENEFIC_POINTS
) -> AshtakavargaResult:
    """Compute Bhinnashtakavarga and Sarvashtakavarga.

    Args:
        chart: Computed chart
        tables: Benefic place tables (classical BPHS by default)

    Returns:
        AshtakavargaResult; contributors missing from the chart are
        recorded as issues and cast no votes
    """
    signs: dict[int, int] = {ASCENDANT: int(chart.ascendant_sign)}
    issues: list[ComputationIssue] = []
    for body in SEVEN_PLANETS:
        pos = chart.position(body)
        if pos is None:
            issues.append(
                ComputationIssue(
                    kind=IssueKind.EPHEMERIS_UNAVAILABLE,
                    component="ashtakavarga",
                    message=f"{body.display_name} casts no votes",
                    body=body.name,
                )
            )
            continue
        signs[body] = int(pos.sign)

    base = ashtakavarga_from_signs(signs, tables)
    result = AshtakavargaResult(prastara=base.prastara, issues=tuple(issues))

    if result.is_partial:
        logger.warning("Ashtakavarga computed with missing contributors", extra={"issues": len(issues)})
    else:
        logger.debug("Ashtakavarga computed", extra={"sarva_total": result.sarva_total})
    return result
