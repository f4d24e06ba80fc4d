"""Exception hierarchy for DDoS Detect"""


class DdosDetectError(Exception):
    """Base class for all DDoS Detect errors"""


class MalformedRecordError(DdosDetectError):
    """Top-level input is not a CVE record at all

    Callers must report this as "classification failed", never as a
    not-DDoS verdict.
    """

    def __init__(self, message: str, record_type: str = ""):
        super().__init__(message)
        self.record_type = record_type


class FeedError(DdosDetectError):
    """Feed file could not be read or parsed"""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
