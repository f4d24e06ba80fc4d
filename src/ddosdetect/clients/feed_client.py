"""NVD 2.0 JSON feed downloader (yearly and rolling feeds)"""

import asyncio
import logging
import zipfile
from datetime import datetime
from pathlib import Path
from typing import List

from aiohttp import ClientError, ClientSession, ClientTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config.settings import DetectorConfig
from ..core.exceptions import FeedError


FIRST_FEED_YEAR = 2002
CHUNK_SIZE = 1024 * 64

# Rolling feeds: changes of the last eight days and newly published CVEs
NAMED_FEEDS = ('modified', 'recent')


def feed_file_name(feed) -> str:
    return f"nvdcve-2.0-{feed}.json.zip"


class FeedClient:
    """Downloads and extracts yearly, modified and recent NVD 2.0 feeds"""

    def __init__(self, session: ClientSession, config: DetectorConfig):
        self.session = session
        self.config = config

    def feed_url(self, feed) -> str:
        return f"{self.config.feed_base_url.rstrip('/')}/{feed_file_name(feed)}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type((ClientError, asyncio.TimeoutError)),
        reraise=True,
    )
    async def _download(self, url: str, target: Path):
        timeout = ClientTimeout(total=600, connect=15)
        async with self.session.get(url, timeout=timeout) as response:
            if response.status != 200:
                raise ClientError(f"Feed download failed with status {response.status}: {url}")
            with open(target, 'wb') as f:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    f.write(chunk)

    async def download_feed(self, feed: str, output_dir: str = "cveJsons") -> Path:
        """Download one feed by name (a year, `modified` or `recent`), extract it and return the JSON path"""
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)

        url = self.feed_url(feed)
        zip_path = out / feed_file_name(feed)

        logging.info(f"Downloading {feed} feed from {url}")
        await self._download(url, zip_path)
        logging.info(f"Downloaded zip file to: {zip_path}")

        return extract_feed(zip_path)

    async def download_year(self, year: int, output_dir: str = "cveJsons") -> Path:
        """Download one yearly feed"""
        current_year = datetime.now().year
        if year < FIRST_FEED_YEAR or year > current_year:
            raise ValueError(f"Year must be between {FIRST_FEED_YEAR} and {current_year}, got {year}")
        return await self.download_feed(str(year), output_dir)

    async def download_named(self, name: str, output_dir: str = "cveJsons") -> Path:
        """Download the rolling `modified` or `recent` feed"""
        if name not in NAMED_FEEDS:
            raise ValueError(f"Unknown feed: {name!r} (expected one of {', '.join(NAMED_FEEDS)})")
        return await self.download_feed(name, output_dir)


def feed_years() -> List[int]:
    """Every year with a published feed, oldest first"""
    return list(range(FIRST_FEED_YEAR, datetime.now().year + 1))


def extract_feed(zip_path: Path) -> Path:
    """Extract the first JSON member of a feed archive next to it"""
    try:
        with zipfile.ZipFile(zip_path) as archive:
            members = [name for name in archive.namelist() if name.lower().endswith('.json')]
            if not members:
                raise FeedError(f"No JSON file found in {zip_path}", path=str(zip_path))
            # Flatten to the archive's directory
            json_path = zip_path.parent / Path(members[0]).name
            json_path.write_bytes(archive.read(members[0]))
    except zipfile.BadZipFile as e:
        raise FeedError(f"Corrupt feed archive {zip_path}: {e}", path=str(zip_path)) from e

    logging.info(f"Extracted feed to: {json_path}")
    return json_path
