"""Output formatters for DDoS Detect CLI"""

from .table import TableFormatter
from .json import JSONFormatter
from .csv import CSVFormatter

__all__ = ['TableFormatter', 'JSONFormatter', 'CSVFormatter']
