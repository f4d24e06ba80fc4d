"""Table format output formatter"""

import textwrap
from typing import List, Optional

from ...core.models import ClassifiedEntry, Confidence
from ...scoring.ddos_scorer import DdosScorer


def passes(entry: ClassifiedEntry, minimum: Confidence) -> bool:
    """Classified as DDoS-related at or above the minimum confidence"""
    return entry.verdict is not None and DdosScorer.meets_minimum(entry.verdict, minimum)


class TableFormatter:
    """Plain text formatter, one tab-separated line per record"""

    @staticmethod
    def format_line(entry: ClassifiedEntry, minimum: Confidence = Confidence.LOW,
                    show_reasons: bool = False) -> Optional[str]:
        """Format one record, None when it should not be shown

        Records below the minimum only appear when reasons are requested.
        Records that could not be classified always appear.
        """
        if entry.verdict is None:
            return f"{entry.cve_id}\tclassification failed\t{entry.error or 'unknown error'}"

        passed = passes(entry, minimum)
        if not passed and not show_reasons:
            return None

        lines = [f"{entry.cve_id}\tddos={'true' if passed else 'false'}\tconfidence={entry.verdict.confidence.value}"]
        if show_reasons:
            lines.extend(f"  - {reason}" for reason in entry.verdict.reasons)
        return "\n".join(lines)

    @staticmethod
    def format_results(entries: List[ClassifiedEntry], minimum: Confidence = Confidence.LOW,
                       show_reasons: bool = False) -> str:
        lines = [TableFormatter.format_line(e, minimum, show_reasons) for e in entries]
        return "\n".join(line for line in lines if line is not None)

    @staticmethod
    def format_single(entry: ClassifiedEntry) -> str:
        """Detailed view of one classified CVE"""
        lines = [f"[{entry.cve_id}]"]
        if entry.description:
            desc = entry.description[:80] + "..." if len(entry.description) > 80 else entry.description
            lines[0] += f" - {desc}"
        lines.append("")

        lines.append("DDOS CLASSIFICATION:")
        if entry.verdict is None:
            lines.append(f"  Classification failed: {entry.error or 'unknown error'}")
        else:
            lines.append(f"  DDoS related: {'YES' if entry.verdict.is_ddos_related else 'NO'}")
            lines.append(f"  Confidence: {entry.verdict.confidence.value}")
            score = entry.verdict.score if entry.verdict.score is not None else "n/a (gate failed)"
            lines.append(f"  Score: {score}")
            lines.append("")
            lines.append("REASONS:")
            for reason in entry.verdict.reasons:
                lines.append(f"  - {reason}")
        lines.append("")

        lines.append("CVSS:")
        if entry.metric_version:
            lines.append(f"  Version: {entry.metric_version.value}")
            lines.append(f"  Base Score: {entry.base_score if entry.base_score is not None else 'Not Available'}"
                         f" ({entry.base_severity or 'Unknown'})")
            lines.append(f"  Attack Vector: {entry.attack_vector or 'Unknown'}")
        else:
            lines.append("  Not Available")

        if entry.cwe_ids:
            lines.append(f"  CWEs: {', '.join(entry.cwe_ids)}")

        lines.append("")
        lines.append("METADATA:")
        lines.append(f"  Published: {entry.published.strftime('%Y-%m-%d') if entry.published else 'Unknown'}")
        if entry.last_modified:
            lines.append(f"  Last Modified: {entry.last_modified.strftime('%Y-%m-%d')}")
        if entry.vuln_status:
            lines.append(f"  Status: {entry.vuln_status}")

        if entry.description:
            lines.append("")
            lines.append("DESCRIPTION:")
            lines.append(textwrap.fill(entry.description, width=76, initial_indent="  ", subsequent_indent="  "))

        return "\n".join(lines)

    @staticmethod
    def format_summary(entries: List[ClassifiedEntry], minimum: Confidence = Confidence.LOW) -> str:
        """Counts per verdict and confidence"""
        if not entries:
            return "No records processed"

        classified = [e for e in entries if e.verdict is not None]
        ddos = [e for e in entries if passes(e, minimum)]

        lines = ["-" * 50, f"Records processed: {len(entries)}"]
        lines.append(f"DDoS-related (>= {minimum.value}): {len(ddos)}")
        for level in (Confidence.HIGH, Confidence.MEDIUM):
            count = sum(1 for e in ddos if e.verdict.confidence == level)
            if count:
                lines.append(f"  {level.value}: {count}")
        lines.append(f"Not DDoS-related: {len(classified) - len(ddos)}")

        failed = len(entries) - len(classified)
        if failed:
            lines.append(f"Classification failed: {failed}")
        return "\n".join(lines)
