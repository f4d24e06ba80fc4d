"""CLI commands package"""

from .classify import classify
from .scan import scan
from .fetch import fetch
from .store import store
from .stats import stats
from .config import config_cmd
from .version import version

__all__ = ['classify', 'scan', 'fetch', 'store', 'stats', 'config_cmd', 'version']
