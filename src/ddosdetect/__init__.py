"""DDoS Detect - rule-based DDoS classification of CVE records"""

__version__ = "1.0.0"
__author__ = "DDoS Detect Development Team"
__description__ = "Classifies NVD CVE records as DDoS/amplification vulnerabilities with graded confidence"

from .core.exceptions import DdosDetectError, FeedError, MalformedRecordError
from .core.models import Confidence, Verdict
from .scoring.ddos_scorer import DdosScorer, classify

__all__ = [
    'DdosDetectError', 'FeedError', 'MalformedRecordError',
    'Confidence', 'Verdict', 'DdosScorer', 'classify',
]
