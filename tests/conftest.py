"""Shared fixtures: builders for NVD 2.0 shaped CVE records"""

import json

import pytest


def v31_metric(av="NETWORK", a="HIGH", c="NONE", i="NONE", pr=None, ui=None, ac=None,
               metric_type="Primary", base_score=7.5):
    data = {
        "version": "3.1",
        "attackVector": av,
        "availabilityImpact": a,
        "confidentialityImpact": c,
        "integrityImpact": i,
        "baseScore": base_score,
        "baseSeverity": "HIGH",
    }
    if pr:
        data["privilegesRequired"] = pr
    if ui:
        data["userInteraction"] = ui
    if ac:
        data["attackComplexity"] = ac
    return {"source": "nvd@nist.gov", "type": metric_type, "cvssData": data}


def make_record(cve_id="CVE-2024-0001", description="", metrics=None, cwes=None, references=None,
                lang="en", published="2024-03-01T12:00:00.000"):
    record = {
        "id": cve_id,
        "published": published,
        "lastModified": "2024-03-05T08:30:00.000",
        "vulnStatus": "Analyzed",
        "descriptions": [{"lang": lang, "value": description}],
        "metrics": metrics if metrics is not None else {},
    }
    if cwes is not None:
        record["weaknesses"] = [
            {"source": "nvd@nist.gov", "type": "Primary",
             "description": [{"lang": "en", "value": cwe} for cwe in cwes]}
        ]
    if references is not None:
        record["references"] = references
    return record


@pytest.fixture
def network_high_metrics():
    return {"cvssMetricV31": [v31_metric()]}


@pytest.fixture
def ntp_record(network_high_metrics):
    return make_record(
        cve_id="CVE-2013-5211",
        description="The monlist feature in ntpd allows an NTP amplification attack.",
        metrics=network_high_metrics,
    )


@pytest.fixture
def feed_file(tmp_path, ntp_record):
    """Feed with a DDoS record, a local bug and a malformed item"""
    local_record = make_record(
        cve_id="CVE-2024-0002",
        description="A local user can trigger a kernel panic.",
        metrics={"cvssMetricV31": [v31_metric(av="LOCAL")]},
    )
    feed = {
        "resultsPerPage": 3,
        "format": "NVD_CVE",
        "version": "2.0",
        "vulnerabilities": [{"cve": ntp_record}, {"cve": local_record}, "not-a-record"],
    }
    path = tmp_path / "nvdcve-2.0-test.json"
    path.write_text(json.dumps(feed), encoding="utf-8")
    return path
