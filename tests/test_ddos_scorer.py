"""Tests for the DDoS scorer and decision policy"""

import copy

import pytest

from ddosdetect import MalformedRecordError, classify
from ddosdetect.core.models import Confidence, Verdict
from ddosdetect.scoring import rules
from ddosdetect.scoring.ddos_scorer import DdosScorer

from conftest import make_record, v31_metric


NEUTRAL_DESCRIPTION = "Flaw in the packet handler lets remote attackers degrade availability."


def neutral_record(**overrides):
    fields = dict(description=NEUTRAL_DESCRIPTION, metrics={"cvssMetricV31": [v31_metric()]})
    fields.update(overrides)
    return make_record(**fields)


class TestScenarios:

    def test_ntp_amplification_is_medium(self, ntp_record):
        verdict = classify(ntp_record)

        assert verdict.is_ddos_related is True
        assert verdict.confidence == Confidence.MEDIUM
        assert verdict.score == 4
        assert verdict.reasons[0] == "CVSS gate: AV=NETWORK, A=HIGH, C=NONE, I=NONE"
        assert verdict.reasons[1].startswith("Amplification/reflection/spoofing lexicon found")

    def test_full_evidence_is_high(self):
        record = make_record(
            description="Reflection attack using open DNS resolver",
            metrics={"cvssMetricV31": [v31_metric(pr="NONE", ui="NONE", ac="LOW")]},
            cwes=["CWE-406"],
            references=[{"url": "https://blog.cloudflare.com/dns-amplification-ddos-attack/"}],
        )

        verdict = classify(record)

        assert verdict.score == 11
        assert verdict.confidence == Confidence.HIGH
        assert verdict.is_ddos_related is True
        assert verdict.reasons[1:4] == ["PR:N", "UI:N", "AC:L"]
        assert "Strong DDoS CWE present: CWE-406" in verdict.reasons

    def test_local_vector_fails_gate(self):
        record = make_record(
            description="NTP amplification",
            metrics={"cvssMetricV31": [v31_metric(av="LOCAL")]},
        )

        verdict = classify(record)

        assert verdict == Verdict(False, Confidence.LOW, [rules.GATE_FAILURE_REASON], score=None)

    def test_sql_injection_scores_below_zero(self):
        record = neutral_record(description="SQL injection causing denial of service")

        verdict = classify(record)

        assert verdict.score == -1
        assert verdict.confidence == Confidence.LOW
        assert verdict.is_ddos_related is False
        assert verdict.reasons[-1].startswith("Negative indicators")


class TestGate:

    def test_gate_failure_ignores_all_other_evidence(self):
        record = make_record(
            description="DDoS amplification via memcached reflection",
            metrics={"cvssMetricV31": [v31_metric(av="PHYSICAL", pr="NONE", ui="NONE", ac="LOW")]},
            cwes=["CWE-405", "CWE-406", "CWE-770"],
            references=[{"url": "https://www.akamai.com/ddos"}],
        )

        verdict = classify(record)

        assert verdict.is_ddos_related is False
        assert verdict.confidence == Confidence.LOW
        assert verdict.reasons == [rules.GATE_FAILURE_REASON]

    def test_high_confidentiality_impact_fails_gate(self):
        record = neutral_record(metrics={"cvssMetricV31": [v31_metric(c="HIGH")]})
        assert classify(record).reasons == [rules.GATE_FAILURE_REASON]

    def test_record_without_metrics_fails_gate(self):
        verdict = classify(make_record(description="NTP amplification", metrics={}))
        assert verdict.is_ddos_related is False
        assert verdict.score is None

    def test_low_availability_fails_gate(self):
        record = neutral_record(metrics={"cvssMetricV31": [v31_metric(a="LOW")]})
        assert classify(record).reasons == [rules.GATE_FAILURE_REASON]

    def test_v2_complete_availability_passes(self):
        metrics = {"cvssMetricV2": [{
            "type": "Primary",
            "cvssData": {"accessVector": "NETWORK", "accessComplexity": "LOW",
                         "availabilityImpact": "COMPLETE", "confidentialityImpact": "PARTIAL",
                         "integrityImpact": "NONE"},
        }]}
        verdict = classify(neutral_record(metrics=metrics))

        assert verdict.reasons[:2] == ["CVSS gate: AV=NETWORK, A=COMPLETE, C=PARTIAL, I=NONE", "AC:L"]
        assert verdict.score == 2


class TestMonotonicity:

    @pytest.mark.parametrize("keyword", rules.AMPLIFICATION_KEYWORDS)
    def test_amplification_keyword_never_lowers_score(self, keyword):
        base = classify(neutral_record())
        with_keyword = classify(neutral_record(description=f"{NEUTRAL_DESCRIPTION} Abused via {keyword}."))

        assert with_keyword.score >= base.score
        assert with_keyword.confidence.rank >= base.confidence.rank

    @pytest.mark.parametrize("keyword", rules.NEGATIVE_KEYWORDS)
    def test_negative_keyword_never_raises_score(self, keyword):
        description = "NTP amplification in the monlist handler."
        base = classify(neutral_record(description=description))
        with_keyword = classify(neutral_record(description=f"{description} Also a {keyword} issue."))

        assert with_keyword.score <= base.score
        assert with_keyword.score == base.score - rules.NEGATIVE_PENALTY

    def test_negative_signal_is_additive_not_a_veto(self):
        record = neutral_record(
            description="DNS amplification that can also crash the resolver",
            metrics={"cvssMetricV31": [v31_metric(pr="NONE", ui="NONE", ac="LOW")]},
            cwes=["CWE-406"],
        )
        verdict = classify(record)

        # 1 + 3 + 3 - 2 + 2
        assert verdict.score == 7
        assert verdict.is_ddos_related is True


class TestCweHandling:

    def test_cwe_order_does_not_matter(self):
        first = classify(neutral_record(cwes=["CWE-405", "CWE-79"]))
        second = classify(neutral_record(cwes=["CWE-79", "CWE-405"]))
        assert first == second

    def test_duplicate_cwes_count_once(self):
        single = classify(neutral_record(cwes=["CWE-405"]))
        duplicated = classify(neutral_record(cwes=["CWE-405", "CWE-405"]))

        assert duplicated == single
        assert single.score == rules.BASE_SCORE + rules.CWE_WEIGHT

    def test_unrelated_cwe_adds_nothing(self):
        assert classify(neutral_record(cwes=["CWE-79", "CWE-89"])).score == rules.BASE_SCORE


class TestRobustness:

    def test_classification_is_deterministic(self, ntp_record):
        snapshot = copy.deepcopy(ntp_record)

        assert classify(ntp_record) == classify(ntp_record)
        assert ntp_record == snapshot

    @pytest.mark.parametrize("record", ["CVE-2024-0001", None, 42, ["a", "b"]])
    def test_non_mapping_record_raises(self, record):
        with pytest.raises(MalformedRecordError):
            classify(record)

    def test_empty_record_is_classified_not_ddos(self):
        verdict = classify({})
        assert verdict.is_ddos_related is False
        assert verdict.confidence == Confidence.LOW

    def test_malformed_inner_fields_fall_back_to_defaults(self):
        record = {
            "id": "CVE-2024-9999",
            "descriptions": "not a list",
            "weaknesses": [None, {"description": "bad"}, {"description": [{"value": 405}]}],
            "references": [None, {"url": None}, "https://cloudflare.com"],
            "metrics": {
                "cvssMetricV31": [None, {"cvssData": "bad"}, v31_metric()],
                "cvssMetricV2": "not a list",
            },
        }

        verdict = classify(record)

        assert verdict.is_ddos_related is False
        assert verdict.score == rules.BASE_SCORE


class TestConfidence:

    @pytest.mark.parametrize("score,expected", [
        (-3, Confidence.LOW),
        (3, Confidence.LOW),
        (4, Confidence.MEDIUM),
        (5, Confidence.MEDIUM),
        (6, Confidence.HIGH),
        (11, Confidence.HIGH),
    ])
    def test_calculate_confidence(self, score, expected):
        assert DdosScorer.calculate_confidence(score) == expected

    def test_meets_minimum(self):
        medium = Verdict(True, Confidence.MEDIUM, [], 4)
        rejected = Verdict(False, Confidence.LOW, [], 1)

        assert DdosScorer.meets_minimum(medium, Confidence.LOW)
        assert DdosScorer.meets_minimum(medium, Confidence.MEDIUM)
        assert not DdosScorer.meets_minimum(medium, Confidence.HIGH)
        assert not DdosScorer.meets_minimum(rejected, Confidence.LOW)

    def test_parse_confidence(self):
        assert Confidence.parse(" high ") == Confidence.HIGH
        with pytest.raises(ValueError):
            Confidence.parse("extreme")
