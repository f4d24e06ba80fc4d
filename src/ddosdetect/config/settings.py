"""DDoS Detect configuration management with .env file support"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..core.models import Confidence


DEFAULT_NVD_BASE_URL = "https://services.nvd.nist.gov/rest/json/cves/2.0"
DEFAULT_FEED_BASE_URL = "https://nvd.nist.gov/feeds/json/cve/2.0"

ENV_VARS = [
    'NVD_API_KEY',
    'DDOS_NVD_BASE_URL',
    'DDOS_FEED_BASE_URL',
    'DDOS_DATABASE_URL',
    'DDOS_RATE_LIMIT_DELAY',
    'DDOS_MAX_CONCURRENT',
    'DDOS_MAX_WORKERS',
    'DDOS_MIN_CONFIDENCE',
    'DDOS_LOG_LEVEL',
]


def _find_env_file(env_file: Optional[str]) -> Optional[Path]:
    if env_file:
        return Path(env_file)

    # Current directory and up to 3 parent directories
    current_dir = Path.cwd()
    for path in [current_dir] + list(current_dir.parents)[:3]:
        potential_env = path / ".env"
        if potential_env.exists():
            return potential_env
    return None


@dataclass
class DetectorConfig:
    """DDoS Detect configuration"""
    nvd_api_key: Optional[str] = None
    nvd_base_url: str = DEFAULT_NVD_BASE_URL
    feed_base_url: str = DEFAULT_FEED_BASE_URL
    database_url: Optional[str] = None
    rate_limit_delay: float = 6.0
    max_concurrent_requests: int = 5
    max_workers: int = 1
    min_confidence: Confidence = Confidence.LOW
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'DetectorConfig':
        """Load configuration from environment variables and .env file"""
        env_path = _find_env_file(env_file)
        if env_path and env_path.exists():
            load_dotenv(env_path)
            logging.debug(f"Loaded configuration from {env_path}")
        elif env_file:
            logging.warning(f"Specified .env file not found: {env_file}")

        return cls(
            nvd_api_key=os.getenv('NVD_API_KEY') or None,
            nvd_base_url=os.getenv('DDOS_NVD_BASE_URL', DEFAULT_NVD_BASE_URL),
            feed_base_url=os.getenv('DDOS_FEED_BASE_URL', DEFAULT_FEED_BASE_URL),
            database_url=os.getenv('DDOS_DATABASE_URL') or None,
            rate_limit_delay=float(os.getenv('DDOS_RATE_LIMIT_DELAY', '6.0')),
            max_concurrent_requests=int(os.getenv('DDOS_MAX_CONCURRENT', '5')),
            max_workers=int(os.getenv('DDOS_MAX_WORKERS', '1')),
            min_confidence=Confidence.parse(os.getenv('DDOS_MIN_CONFIDENCE', 'LOW')),
            log_level=os.getenv('DDOS_LOG_LEVEL', 'INFO'),
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues"""
        issues = []

        if not self.nvd_api_key:
            issues.append("NVD API key not set - will be rate limited to 5 requests/30s")

        if self.rate_limit_delay < 6.0 and not self.nvd_api_key:
            issues.append("Rate limit delay may be too aggressive for NVD API without a key")

        if self.rate_limit_delay < 0:
            issues.append("Rate limit delay must not be negative")

        if self.max_concurrent_requests <= 0:
            issues.append("Max concurrent requests must be positive")

        if self.max_workers <= 0:
            issues.append("Max workers must be positive")

        if not self.database_url:
            issues.append("Database URL not set - store and stats commands need --database-url")

        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            issues.append(f"Unknown log level: {self.log_level}")

        return issues
