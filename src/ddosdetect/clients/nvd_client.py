"""NVD API Client"""

import asyncio
import logging
import time
from typing import Dict, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config.settings import DetectorConfig


class NVDClient:
    """NVD 2.0 REST client for single CVE lookups"""

    def __init__(self, session: ClientSession, config: DetectorConfig):
        self.session = session
        self.config = config
        self.last_request_time = 0.0
        self._lock = asyncio.Lock()

    async def _rate_limit(self):
        """Enforce rate limiting for NVD API"""
        async with self._lock:
            elapsed = time.monotonic() - self.last_request_time
            if elapsed < self.config.rate_limit_delay:
                sleep_time = self.config.rate_limit_delay - elapsed
                logging.debug(f"Rate limiting: sleeping {sleep_time:.2f}s")
                await asyncio.sleep(sleep_time)
            self.last_request_time = time.monotonic()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type((ClientError, asyncio.TimeoutError)),
        reraise=True,
    )
    async def get_cve_data(self, cve_id: str) -> Optional[Dict]:
        """Get the inner `cve` object for one CVE, None when NVD has no record"""
        await self._rate_limit()

        headers = {}
        if self.config.nvd_api_key:
            headers['apiKey'] = self.config.nvd_api_key

        logging.info(f"Fetching CVE data for {cve_id} from NVD...")
        timeout = ClientTimeout(total=30, connect=10)

        try:
            async with self.session.get(self.config.nvd_base_url, params={'cveId': cve_id},
                                        headers=headers, timeout=timeout) as response:
                logging.debug(f"NVD API response status: {response.status}")

                if response.status == 200:
                    data = await response.json()
                    vulnerabilities = data.get('vulnerabilities') or []
                    if vulnerabilities and isinstance(vulnerabilities[0], dict):
                        logging.info(f"Found CVE data for {cve_id}")
                        return vulnerabilities[0].get('cve')
                    logging.warning(f"NVD returned empty result for {cve_id}")
                    return None

                elif response.status == 404:
                    logging.warning(f"CVE {cve_id} not found in NVD (404)")
                    return None

                elif response.status == 403:
                    error_text = await response.text()
                    logging.error(f"NVD API access forbidden (403): {error_text}")
                    raise ClientError(f"NVD API access forbidden: {error_text}")

                elif response.status == 429:
                    logging.warning("Rate limited by NVD API - will retry")
                    raise ClientError("Rate limited by NVD API")

                else:
                    error_text = await response.text()
                    logging.error(f"NVD API error {response.status}: {error_text}")
                    raise ClientError(f"NVD API error {response.status}")

        except asyncio.TimeoutError:
            logging.error(f"Timeout fetching CVE data for {cve_id} from NVD")
            raise
        except ClientError as e:
            logging.error(f"Network error for {cve_id}: {e}")
            raise
