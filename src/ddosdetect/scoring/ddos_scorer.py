"""DDoS scoring and decision engine"""

import logging
from collections.abc import Mapping
from typing import Any

from ..core.exceptions import MalformedRecordError
from ..core.models import Confidence, Verdict
from . import evidence, rules
from .cvss_normalizer import collect_metrics
from .gate import evaluate_gate


class DdosScorer:
    """Rule-based DDoS classifier combining the CVSS gate with text/CWE/reference evidence"""

    @staticmethod
    def calculate_confidence(score: int) -> Confidence:
        """Map a numeric score onto a confidence level"""
        if score >= rules.HIGH_CONFIDENCE_SCORE:
            return Confidence.HIGH
        elif score >= rules.MEDIUM_CONFIDENCE_SCORE:
            return Confidence.MEDIUM
        else:
            return Confidence.LOW

    @staticmethod
    def meets_minimum(verdict: Verdict, minimum: Confidence) -> bool:
        """True when the record is DDoS-related at or above the given confidence"""
        return verdict.is_ddos_related and verdict.confidence.rank >= minimum.rank

    @staticmethod
    def classify(record: Any) -> Verdict:
        """Classify one NVD CVE record

        Raises MalformedRecordError only when the record is not a mapping;
        missing or malformed inner fields count as absent evidence.
        """
        if not isinstance(record, Mapping):
            raise MalformedRecordError(
                f"Expected a CVE record object, got {type(record).__name__}",
                record_type=type(record).__name__,
            )

        gate = evaluate_gate(collect_metrics(record))
        if not gate.passed:
            return Verdict(
                is_ddos_related=False,
                confidence=Confidence.LOW,
                reasons=[rules.GATE_FAILURE_REASON],
            )

        score = rules.BASE_SCORE + gate.bonus
        reasons = list(gate.reasons)

        description = evidence.english_description(record)

        lexicon = evidence.match_amplification_lexicon(description)
        if lexicon.matched:
            score += rules.LEXICON_WEIGHT
            reasons.append(lexicon.reason)

        negative = evidence.match_negative_signals(description)
        if negative.matched:
            score -= rules.NEGATIVE_PENALTY
            reasons.append(negative.reason)

        cwe = evidence.match_strong_cwe(evidence.cwe_ids(record))
        if cwe.matched:
            score += rules.CWE_WEIGHT
            reasons.append(cwe.reason)

        references = evidence.match_reference_hints(evidence.reference_strings(record))
        if references.matched:
            score += rules.REFERENCE_WEIGHT
            reasons.append(references.reason)

        confidence = DdosScorer.calculate_confidence(score)
        verdict = Verdict(
            is_ddos_related=confidence != Confidence.LOW,
            confidence=confidence,
            reasons=reasons,
            score=score,
        )

        if logging.getLogger().isEnabledFor(logging.DEBUG):
            DdosScorer._log_breakdown(record.get('id'), gate.bonus, lexicon.matched,
                                      negative.matched, cwe.matched, references.matched, verdict)
        return verdict

    @staticmethod
    def _log_breakdown(cve_id, bonus, lexicon, negative, cwe, references, verdict: Verdict):
        """Log the score breakdown for one record"""
        logging.debug(f"DDoS score breakdown for {cve_id or 'UNKNOWN'}:")
        logging.debug(f"   Base: {rules.BASE_SCORE} + gate bonus: {bonus}")
        logging.debug(f"   Lexicon: {'+' + str(rules.LEXICON_WEIGHT) if lexicon else '0'}")
        logging.debug(f"   Negative: {'-' + str(rules.NEGATIVE_PENALTY) if negative else '0'}")
        logging.debug(f"   CWE: {'+' + str(rules.CWE_WEIGHT) if cwe else '0'}")
        logging.debug(f"   References: {'+' + str(rules.REFERENCE_WEIGHT) if references else '0'}")
        logging.debug(f"   Final score: {verdict.score} -> {verdict.confidence.value}")


def classify(record: Any) -> Verdict:
    """Classify one NVD CVE record (see DdosScorer.classify)"""
    return DdosScorer.classify(record)
