"""CVSS metric normalization across v2, v3.0, v3.1 and v4.0 schemas"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from ..core.models import (
    AttackComplexity, AttackVector, CvssVersion, Impact, NormalizedMetric,
    PrivilegesRequired, UserInteraction,
)


_ATTACK_VECTORS = {
    'NETWORK': AttackVector.NETWORK, 'N': AttackVector.NETWORK,
    'ADJACENT': AttackVector.ADJACENT, 'ADJACENT_NETWORK': AttackVector.ADJACENT,
    'A': AttackVector.ADJACENT,
    'LOCAL': AttackVector.LOCAL, 'L': AttackVector.LOCAL,
    'PHYSICAL': AttackVector.PHYSICAL, 'P': AttackVector.PHYSICAL,
}

_COMPLEXITIES = {
    'LOW': AttackComplexity.LOW, 'L': AttackComplexity.LOW,
    'HIGH': AttackComplexity.HIGH, 'H': AttackComplexity.HIGH,
}

_PRIVILEGES = {
    'NONE': PrivilegesRequired.NONE, 'N': PrivilegesRequired.NONE,
    'LOW': PrivilegesRequired.LOW, 'L': PrivilegesRequired.LOW,
    'HIGH': PrivilegesRequired.HIGH, 'H': PrivilegesRequired.HIGH,
}

# v4 splits "required" into passive and active interaction
_INTERACTIONS = {
    'NONE': UserInteraction.NONE, 'N': UserInteraction.NONE,
    'REQUIRED': UserInteraction.REQUIRED, 'R': UserInteraction.REQUIRED,
    'PASSIVE': UserInteraction.REQUIRED, 'P': UserInteraction.REQUIRED,
    'ACTIVE': UserInteraction.REQUIRED, 'A': UserInteraction.REQUIRED,
}

_IMPACTS = {
    'NONE': Impact.NONE, 'N': Impact.NONE,
    'LOW': Impact.LOW, 'L': Impact.LOW,
    'PARTIAL': Impact.LOW, 'P': Impact.LOW,
    'HIGH': Impact.HIGH, 'H': Impact.HIGH,
    'COMPLETE': Impact.COMPLETE, 'C': Impact.COMPLETE,
}

# Candidate cvssData keys per canonical field, full name first
_V2_KEYS = {
    'attack_vector': ('accessVector', 'AV'),
    'attack_complexity': ('accessComplexity', 'AC'),
    'privileges_required': (),
    'user_interaction': (),
    'availability_impact': ('availabilityImpact', 'A'),
    'confidentiality_impact': ('confidentialityImpact', 'C'),
    'integrity_impact': ('integrityImpact', 'I'),
}

_V3_KEYS = {
    'attack_vector': ('attackVector', 'AV'),
    'attack_complexity': ('attackComplexity', 'AC'),
    'privileges_required': ('privilegesRequired', 'PR'),
    'user_interaction': ('userInteraction', 'UI'),
    'availability_impact': ('availabilityImpact', 'A'),
    'confidentiality_impact': ('confidentialityImpact', 'C'),
    'integrity_impact': ('integrityImpact', 'I'),
}

_V4_KEYS = {
    'attack_vector': ('attackVector', 'AV'),
    'attack_complexity': ('attackComplexity', 'AC'),
    'privileges_required': ('privilegesRequired', 'PR'),
    'user_interaction': ('userInteraction', 'UI'),
    'availability_impact': ('vulnAvailabilityImpact', 'availabilityImpact', 'VA'),
    'confidentiality_impact': ('vulnConfidentialityImpact', 'confidentialityImpact', 'VC'),
    'integrity_impact': ('vulnIntegrityImpact', 'integrityImpact', 'VI'),
}

FIELD_KEYS = {
    CvssVersion.V2: _V2_KEYS,
    CvssVersion.V30: _V3_KEYS,
    CvssVersion.V31: _V3_KEYS,
    CvssVersion.V40: _V4_KEYS,
}


def _parse(value: Any, table: Dict[str, Any], unknown):
    if not isinstance(value, str):
        return unknown
    return table.get(value.strip().upper(), unknown)


def _lookup(data: Mapping, keys: Tuple[str, ...]) -> Any:
    """Return the first non-empty value among case-insensitive keys"""
    for key in keys:
        value = data.get(key.lower())
        if value not in (None, ''):
            return value
    return None


def normalize_metric(entry: Any, version: CvssVersion) -> NormalizedMetric:
    """Map one raw metric entry onto a NormalizedMetric

    Unrecognized or missing values become UNKNOWN; this never raises.
    """
    cvss_data = entry.get('cvssData') if isinstance(entry, Mapping) else None
    if not isinstance(cvss_data, Mapping):
        return NormalizedMetric(version=version)

    data = {str(k).lower(): v for k, v in cvss_data.items()}
    keys = FIELD_KEYS[version]

    return NormalizedMetric(
        version=version,
        attack_vector=_parse(_lookup(data, keys['attack_vector']), _ATTACK_VECTORS, AttackVector.UNKNOWN),
        attack_complexity=_parse(_lookup(data, keys['attack_complexity']), _COMPLEXITIES, AttackComplexity.UNKNOWN),
        privileges_required=_parse(_lookup(data, keys['privileges_required']), _PRIVILEGES, PrivilegesRequired.UNKNOWN),
        user_interaction=_parse(_lookup(data, keys['user_interaction']), _INTERACTIONS, UserInteraction.UNKNOWN),
        availability_impact=_parse(_lookup(data, keys['availability_impact']), _IMPACTS, Impact.UNKNOWN),
        confidentiality_impact=_parse(_lookup(data, keys['confidentiality_impact']), _IMPACTS, Impact.UNKNOWN),
        integrity_impact=_parse(_lookup(data, keys['integrity_impact']), _IMPACTS, Impact.UNKNOWN),
    )


def _metric_lists(record: Mapping) -> List[Tuple[CvssVersion, list]]:
    metrics = record.get('metrics')
    if not isinstance(metrics, Mapping):
        return []

    lists = []
    for version in CvssVersion:
        entries = metrics.get(version.metric_key)
        if isinstance(entries, list) and entries:
            lists.append((version, entries))
    return lists


def collect_metrics(record: Mapping) -> List[NormalizedMetric]:
    """Normalize every metric entry of a record, v4.0 first and v2 last"""
    normalized = [
        normalize_metric(entry, version)
        for version, entries in _metric_lists(record)
        for entry in entries
    ]
    logging.debug(f"Normalized {len(normalized)} CVSS metric entries")
    return normalized


def select_preferred_metric(entries: Any) -> Optional[Dict]:
    """Pick the primary entry, else the secondary one, else the first"""
    if not isinstance(entries, list):
        return None

    candidates = [e for e in entries if isinstance(e, Mapping)]
    if not candidates:
        return None

    def entry_type(entry):
        return str(entry.get('type') or '').lower()

    for wanted in ('primary', 'secondary'):
        for entry in candidates:
            if entry_type(entry) == wanted:
                return entry
    return candidates[0]


def representative_metric(record: Mapping) -> Optional[Tuple[CvssVersion, Dict]]:
    """Preferred metric entry of the most authoritative version present"""
    for version, entries in _metric_lists(record):
        picked = select_preferred_metric(entries)
        if picked is not None:
            return version, picked
    return None
