"""Core data models for the DDoS classification engine"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class CvssVersion(Enum):
    """CVSS schema versions, most authoritative first"""
    V40 = "4.0"
    V31 = "3.1"
    V30 = "3.0"
    V2 = "2.0"

    @property
    def metric_key(self) -> str:
        """Key of this version's metric list in an NVD record"""
        return {
            CvssVersion.V40: "cvssMetricV40",
            CvssVersion.V31: "cvssMetricV31",
            CvssVersion.V30: "cvssMetricV30",
            CvssVersion.V2: "cvssMetricV2",
        }[self]


class AttackVector(Enum):
    NETWORK = "NETWORK"
    ADJACENT = "ADJACENT"
    LOCAL = "LOCAL"
    PHYSICAL = "PHYSICAL"
    UNKNOWN = "UNKNOWN"


class AttackComplexity(Enum):
    LOW = "LOW"
    HIGH = "HIGH"
    UNKNOWN = "UNKNOWN"


class PrivilegesRequired(Enum):
    NONE = "NONE"
    LOW = "LOW"
    HIGH = "HIGH"
    UNKNOWN = "UNKNOWN"


class UserInteraction(Enum):
    NONE = "NONE"
    REQUIRED = "REQUIRED"
    UNKNOWN = "UNKNOWN"


class Impact(Enum):
    """Impact level shared by availability, confidentiality and integrity"""
    NONE = "NONE"
    LOW = "LOW"
    HIGH = "HIGH"
    COMPLETE = "COMPLETE"
    UNKNOWN = "UNKNOWN"


class Confidence(Enum):
    """DDoS classification confidence levels"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}[self]

    @classmethod
    def parse(cls, value: str) -> 'Confidence':
        """Parse a confidence name case-insensitively"""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown confidence level: {value!r} (expected low, medium or high)")


@dataclass(frozen=True)
class NormalizedMetric:
    """One CVSS metric entry mapped onto version-independent fields"""
    version: CvssVersion
    attack_vector: AttackVector = AttackVector.UNKNOWN
    attack_complexity: AttackComplexity = AttackComplexity.UNKNOWN
    privileges_required: PrivilegesRequired = PrivilegesRequired.UNKNOWN
    user_interaction: UserInteraction = UserInteraction.UNKNOWN
    availability_impact: Impact = Impact.UNKNOWN
    confidentiality_impact: Impact = Impact.UNKNOWN
    integrity_impact: Impact = Impact.UNKNOWN


@dataclass
class GateResult:
    """Outcome of the structural CVSS gate"""
    passed: bool
    bonus: int = 0
    reasons: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Evidence:
    """Result of a single evidence extractor"""
    matched: bool
    reason: Optional[str] = None


@dataclass
class Verdict:
    """DDoS classification result for one record"""
    is_ddos_related: bool
    confidence: Confidence
    reasons: List[str] = field(default_factory=list)
    score: Optional[int] = None


@dataclass
class ClassifiedEntry:
    """Flat per-record row consumed by formatters and the verdict store"""
    cve_id: str
    published: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    vuln_status: str = ""
    description: str = ""
    metric_version: Optional[CvssVersion] = None
    base_score: Optional[float] = None
    base_severity: str = ""
    attack_vector: str = ""
    cwe_ids: List[str] = field(default_factory=list)
    verdict: Optional[Verdict] = None
    error: Optional[str] = None

    @property
    def classified(self) -> bool:
        return self.verdict is not None
