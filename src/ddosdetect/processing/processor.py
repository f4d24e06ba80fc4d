"""DDoS classification processor for feeds and NVD lookups"""

import asyncio
import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Any, List, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from .. import __version__
from ..clients.feed_client import FeedClient
from ..clients.nvd_client import NVDClient
from ..config.settings import DetectorConfig
from ..core.exceptions import MalformedRecordError
from ..core.models import ClassifiedEntry
from ..scoring.ddos_scorer import DdosScorer
from .feed import build_entry, record_id, unwrap_cve


PROGRESS_INTERVAL = 10000


def classify_item(item: Any) -> ClassifiedEntry:
    """Classify one feed item, turning malformed records into failed entries"""
    record = unwrap_cve(item)
    try:
        verdict = DdosScorer.classify(record)
    except MalformedRecordError as e:
        logging.warning(f"Classification failed for {record_id(record)}: {e}")
        return build_entry(record, error=str(e))
    return build_entry(record, verdict=verdict)


class DdosProcessor:
    """DDoS processing engine

    Feed classification works without entering the context manager; NVD
    lookups need the HTTP session opened by `async with`.
    """

    def __init__(self, config: DetectorConfig):
        self.config = config
        self.session: Optional[ClientSession] = None
        self.nvd_client: Optional[NVDClient] = None
        self.feed_client: Optional[FeedClient] = None

    async def __aenter__(self):
        """Async context manager entry"""
        timeout = ClientTimeout(
            total=120,
            connect=10,
            sock_read=60
        )

        connector = aiohttp.TCPConnector(
            limit=self.config.max_concurrent_requests * 2,
            limit_per_host=self.config.max_concurrent_requests,
            ttl_dns_cache=300,
        )

        self.session = ClientSession(
            timeout=timeout,
            connector=connector,
            headers={'User-Agent': f'DDoS-Detect/{__version__}'}
        )

        self.nvd_client = NVDClient(self.session, self.config)
        self.feed_client = FeedClient(self.session, self.config)

        logging.info("DDoS processor initialized")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        if self.session:
            await self.session.close()
            logging.info("DDoS processor closed")

    def classify_records(self, items: List[Any], max_workers: Optional[int] = None) -> List[ClassifiedEntry]:
        """Classify feed items, in input order

        With more than one worker the items are fanned out over a process
        pool; each classification is independent.
        """
        workers = max_workers or self.config.max_workers
        total = len(items)
        logging.info(f"Classifying {total} records (workers: {workers})")

        if workers > 1 and total > 1:
            chunksize = max(1, total // (workers * 4))
            with ProcessPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(classify_item, items, chunksize=chunksize))
        else:
            results = []
            for processed, item in enumerate(items, 1):
                results.append(classify_item(item))
                if processed % PROGRESS_INTERVAL == 0:
                    logging.info(f"Processed {processed}/{total} records...")

        ddos_count = sum(1 for r in results if r.verdict and r.verdict.is_ddos_related)
        failed_count = sum(1 for r in results if not r.classified)
        logging.info(f"Classification complete: {len(results)} records, {ddos_count} DDoS-related, {failed_count} failed")
        return results

    async def process_single_cve(self, cve_id: str) -> ClassifiedEntry:
        """Fetch one CVE from NVD and classify it"""
        if not self.nvd_client:
            raise RuntimeError("DdosProcessor must be used as an async context manager for NVD lookups")

        logging.info(f"Processing {cve_id}...")
        cve_data = await self.nvd_client.get_cve_data(cve_id)

        if not cve_data:
            logging.warning(f"No CVE data found for {cve_id}")
            return ClassifiedEntry(cve_id=cve_id, error="CVE not found in NVD")

        entry = classify_item(cve_data)
        if entry.verdict:
            logging.info(f"{cve_id}: ddos={entry.verdict.is_ddos_related} confidence={entry.verdict.confidence.value}")
        return entry

    async def process_bulk_cves(self, cve_ids: List[str]) -> List[ClassifiedEntry]:
        """Fetch and classify several CVEs with bounded concurrency"""
        semaphore = asyncio.Semaphore(self.config.max_concurrent_requests)

        async def process_with_semaphore(cve_id: str) -> ClassifiedEntry:
            async with semaphore:
                return await self.process_single_cve(cve_id)

        logging.info(f"Starting bulk lookup of {len(cve_ids)} CVEs")

        tasks = [process_with_semaphore(cve_id) for cve_id in cve_ids]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        entries = []
        for cve_id, result in zip(cve_ids, results):
            if isinstance(result, Exception):
                logging.error(f"Failed to process {cve_id}: {result}")
                entries.append(ClassifiedEntry(cve_id=cve_id, error=str(result) or type(result).__name__))
            else:
                entries.append(result)

        logging.info(f"Bulk lookup complete: {len(entries)} results")
        return entries
