"""CSV format output formatter"""

import csv
import sys
from typing import List, Optional

from ...core.models import ClassifiedEntry, Confidence
from .table import passes


class CSVFormatter:
    """CSV format output formatter"""

    @staticmethod
    def get_headers() -> List[str]:
        """Get CSV headers"""
        return [
            'cve_id', 'ddos', 'confidence', 'score', 'published', 'metric_version',
            'base_score', 'base_severity', 'attack_vector', 'cwe_ids', 'reasons', 'error'
        ]

    @staticmethod
    def format_row(entry: ClassifiedEntry, minimum: Confidence = Confidence.LOW) -> List[str]:
        """Format single result as CSV row"""
        verdict = entry.verdict
        if verdict is None:
            ddos = ''
        else:
            ddos = str(passes(entry, minimum)).lower()
        return [
            entry.cve_id,
            ddos,
            verdict.confidence.value if verdict else '',
            str(verdict.score) if verdict and verdict.score is not None else '',
            entry.published.strftime('%Y-%m-%d %H:%M:%S') if entry.published else '',
            entry.metric_version.value if entry.metric_version else '',
            str(entry.base_score) if entry.base_score is not None else '',
            entry.base_severity,
            entry.attack_vector,
            ';'.join(entry.cwe_ids),
            ' | '.join(verdict.reasons) if verdict else '',
            entry.error or '',
        ]

    @staticmethod
    def write(entries: List[ClassifiedEntry], stream=None, minimum: Confidence = Confidence.LOW):
        """Write header and rows to a stream (stdout by default)"""
        writer = csv.writer(stream or sys.stdout)
        writer.writerow(CSVFormatter.get_headers())
        for entry in entries:
            writer.writerow(CSVFormatter.format_row(entry, minimum))

    @staticmethod
    def save(entries: List[ClassifiedEntry], output_path: Optional[str] = None,
             minimum: Confidence = Confidence.LOW):
        """Save results to CSV file or stdout"""
        if output_path:
            with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
                CSVFormatter.write(entries, csvfile, minimum)
        else:
            CSVFormatter.write(entries, minimum=minimum)
