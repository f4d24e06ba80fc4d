"""JSON format output formatter"""

import json
from dataclasses import asdict
from typing import Dict, List

from ...core.models import ClassifiedEntry, Confidence
from .table import passes


class JSONFormatter:
    """JSON format output formatter"""

    @staticmethod
    def result_dict(entry: ClassifiedEntry, minimum: Confidence = Confidence.LOW,
                    include_reasons: bool = False) -> Dict:
        """Compact per-record result; failed records carry `ddos: null`"""
        if entry.verdict is None:
            return {'id': entry.cve_id, 'ddos': None, 'error': entry.error or 'unknown error'}

        data = {
            'id': entry.cve_id,
            'ddos': passes(entry, minimum),
            'confidence': entry.verdict.confidence.value,
        }
        if include_reasons:
            data['reasons'] = list(entry.verdict.reasons)
        return data

    @staticmethod
    def format_results(entries: List[ClassifiedEntry], minimum: Confidence = Confidence.LOW,
                       include_reasons: bool = False) -> str:
        return json.dumps(
            [JSONFormatter.result_dict(e, minimum, include_reasons) for e in entries],
            indent=2,
        )

    @staticmethod
    def format_single(entry: ClassifiedEntry) -> str:
        """Full entry as JSON"""
        data = asdict(entry)

        # Convert datetime objects to strings
        data['published'] = entry.published.isoformat() if entry.published else None
        data['last_modified'] = entry.last_modified.isoformat() if entry.last_modified else None

        # Convert enums to strings
        data['metric_version'] = entry.metric_version.value if entry.metric_version else None
        if entry.verdict:
            data['verdict']['confidence'] = entry.verdict.confidence.value

        return json.dumps(data, indent=2)
