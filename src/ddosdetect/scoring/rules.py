"""Rule tables for DDoS classification

Keyword sets, CWE sets and score weights live here so they can be tuned
without touching the scoring flow. All keywords are lower-case and matched
as substrings of lower-cased text.
"""

from typing import FrozenSet, Tuple

# Amplification mechanics and amplification-capable protocols/services.
# Deliberately excludes plain "denial of service".
AMPLIFICATION_KEYWORDS: Tuple[str, ...] = (
    'amplification', 'amplify', 'reflect', 'reflection', 'reflected', 'drdos',
    'spoof', 'spoofed', 'spoofing', 'open resolver',
    'traffic amplification', 'packet amplification', 'bandwidth amplification',
    'bandwidth exhaustion', 'ddos', 'distributed denial of service', 'distributed denial',
    # Protocols and features
    'ntp', 'monlist', 'dns', 'open dns resolver', 'mdns', 'ssdp', 'ws-discovery',
    'cldap', 'ldap', 'snmp', 'chargen', 'qotd', 'mssql', 'memcached', 'coap',
    'ripv1', 'nbns', 'sntp',
)

# Generic/local DoS and unrelated vulnerability classes
NEGATIVE_KEYWORDS: Tuple[str, ...] = (
    'sql injection', 'sql-injection', 'sqli',
    'cross-site scripting', 'xss',
    'null pointer', 'use-after-free', 'use after free',
    'out-of-bounds', 'oob read', 'oob write',
    'integer overflow', 'race condition', 'infinite loop',
    'resource exhaustion', 'memory exhaustion', 'cpu exhaustion',
    'crash', 'kernel panic',
    'local attacker', 'local user', 'authenticated user',
)

# CWE-405 asymmetric resource consumption, CWE-406 insufficient control of
# network message volume, CWE-770 allocation without limits or throttling
STRONG_DDOS_CWES: FrozenSet[str] = frozenset({'CWE-405', 'CWE-406', 'CWE-770'})

REFERENCE_TERMS: Tuple[str, ...] = (
    'ddos', 'drdos', 'amplification', 'reflection', 'booter', 'stresser',
)

MITIGATION_VENDORS: Tuple[str, ...] = (
    'cloudflare', 'akamai', 'netscout', 'arbor', 'imperva', 'cisa.gov',
)

# Score weights
BASE_SCORE = 1
LEXICON_WEIGHT = 3
NEGATIVE_PENALTY = 2
CWE_WEIGHT = 2
REFERENCE_WEIGHT = 2

# Confidence thresholds (inclusive lower bounds)
HIGH_CONFIDENCE_SCORE = 6
MEDIUM_CONFIDENCE_SCORE = 4

GATE_FAILURE_REASON = 'CVSS gate failed (need AV: Network/Adjacent, A: High, C/I: Low)'
