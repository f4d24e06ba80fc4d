"""Structural CVSS gate for amplification-style vulnerabilities"""

import logging
from typing import Iterable

from ..core.models import (
    AttackComplexity, AttackVector, CvssVersion, GateResult, Impact, NormalizedMetric,
    PrivilegesRequired, UserInteraction,
)


REMOTE_VECTORS = frozenset({AttackVector.NETWORK, AttackVector.ADJACENT})
HIGH_AVAILABILITY = frozenset({Impact.HIGH, Impact.COMPLETE})
# Absent C/I data does not disqualify an entry
LOW_SIDE_IMPACT = frozenset({Impact.NONE, Impact.LOW, Impact.UNKNOWN})


def _label(value) -> str:
    return 'N/A' if value.value == 'UNKNOWN' else value.value


def _impact_label(impact: Impact, version: CvssVersion) -> str:
    """Impact as written in the source schema; v2 LOW came from PARTIAL"""
    if version == CvssVersion.V2 and impact == Impact.LOW:
        return 'PARTIAL'
    return _label(impact)


def matches_profile(metric: NormalizedMetric) -> bool:
    """Network/adjacent vector, high availability impact, low C/I impact"""
    return (
        metric.attack_vector in REMOTE_VECTORS
        and metric.availability_impact in HIGH_AVAILABILITY
        and metric.confidentiality_impact in LOW_SIDE_IMPACT
        and metric.integrity_impact in LOW_SIDE_IMPACT
    )


def evaluate_gate(metrics: Iterable[NormalizedMetric]) -> GateResult:
    """Check metrics in order and stop at the first one matching the profile"""
    for metric in metrics:
        if not matches_profile(metric):
            continue

        reasons = [
            f"CVSS gate: AV={_label(metric.attack_vector)}, A={_label(metric.availability_impact)}, "
            f"C={_impact_label(metric.confidentiality_impact, metric.version)}, "
            f"I={_impact_label(metric.integrity_impact, metric.version)}"
        ]
        bonus = 0
        if metric.privileges_required == PrivilegesRequired.NONE:
            bonus += 1
            reasons.append('PR:N')
        if metric.user_interaction == UserInteraction.NONE:
            bonus += 1
            reasons.append('UI:N')
        if metric.attack_complexity == AttackComplexity.LOW:
            bonus += 1
            reasons.append('AC:L')

        logging.debug(f"CVSS gate passed on v{metric.version.value} metric with bonus {bonus}")
        return GateResult(passed=True, bonus=bonus, reasons=reasons)

    return GateResult(passed=False)
