"""Evidence extractors over description, CWE and reference fields

Accessors pull plain values out of a raw NVD record and never raise on
missing or oddly typed fields. Extractors are pure functions of those values
and know nothing about each other.
"""

from collections.abc import Mapping
from typing import Iterable, List, Sequence

from ..core.models import Evidence
from . import rules


def description_text(record: Mapping) -> str:
    """English description, else the first non-empty one, else empty"""
    descriptions = record.get('descriptions')
    if not isinstance(descriptions, list):
        return ''

    entries = [d for d in descriptions if isinstance(d, Mapping) and d.get('value')]
    for desc in entries:
        if str(desc.get('lang') or '').lower() == 'en':
            return str(desc['value'])

    if entries:
        return str(entries[0]['value'])
    return ''


def english_description(record: Mapping) -> str:
    """Lower-cased description_text, the text the lexicons run against"""
    return description_text(record).lower()


def cwe_ids(record: Mapping) -> List[str]:
    """All CWE identifiers listed under weaknesses, duplicates included"""
    weaknesses = record.get('weaknesses')
    if not isinstance(weaknesses, list):
        return []

    result = []
    for weakness in weaknesses:
        if not isinstance(weakness, Mapping):
            continue
        descriptions = weakness.get('description')
        if not isinstance(descriptions, list):
            continue
        for desc in descriptions:
            if isinstance(desc, Mapping) and isinstance(desc.get('value'), str) and desc['value']:
                result.append(desc['value'])
    return result


def reference_strings(record: Mapping) -> List[str]:
    """Lower-cased reference URLs and names"""
    references = record.get('references')
    if not isinstance(references, list):
        return []

    result = []
    for ref in references:
        if not isinstance(ref, Mapping):
            continue
        for key in ('url', 'name'):
            if ref.get(key):
                result.append(str(ref[key]).lower())
    return result


def _found_in(text: str, keywords: Sequence[str]) -> List[str]:
    return [kw for kw in keywords if kw in text]


def match_amplification_lexicon(text: str) -> Evidence:
    """Amplification/reflection/spoofing terms and amplifiable protocols"""
    found = _found_in(text.lower(), rules.AMPLIFICATION_KEYWORDS) if text else []
    if not found:
        return Evidence(matched=False)
    return Evidence(True, f"Amplification/reflection/spoofing lexicon found ({', '.join(found)})")


def match_negative_signals(text: str) -> Evidence:
    """Terms pointing at memory-safety, injection or local DoS bugs"""
    found = _found_in(text.lower(), rules.NEGATIVE_KEYWORDS) if text else []
    if not found:
        return Evidence(matched=False)
    return Evidence(True, f"Negative indicators for generic/local DoS or non-DDoS web vulns ({', '.join(found)})")


def match_strong_cwe(ids: Iterable[str]) -> Evidence:
    strong = sorted({str(i).strip().upper() for i in ids} & rules.STRONG_DDOS_CWES)
    if not strong:
        return Evidence(matched=False)
    return Evidence(True, f"Strong DDoS CWE present: {', '.join(strong)}")


def match_reference_hints(refs: Iterable[str]) -> Evidence:
    """DDoS terms or mitigation vendor domains in reference URLs/names"""
    refs = [r.lower() for r in refs]
    hints = [
        hint for hint in rules.REFERENCE_TERMS + rules.MITIGATION_VENDORS
        if any(hint in ref for ref in refs)
    ]
    if not hints:
        return Evidence(matched=False)
    return Evidence(True, f"References indicate DDoS/amplification ({', '.join(hints)})")
