"""NVD 2.0 JSON feed loading and entry building"""

import json
import logging
import zipfile
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from dateutil import parser as date_parser

from ..core.exceptions import FeedError
from ..core.models import ClassifiedEntry, Verdict
from ..scoring.cvss_normalizer import representative_metric
from ..scoring.evidence import cwe_ids, description_text


def _read_feed_text(path: Path) -> str:
    if path.suffix.lower() == '.zip':
        with zipfile.ZipFile(path) as archive:
            members = [name for name in archive.namelist() if name.lower().endswith('.json')]
            if not members:
                raise FeedError(f"No JSON file found in {path}", path=str(path))
            logging.debug(f"Reading {members[0]} from {path}")
            return archive.read(members[0]).decode('utf-8')
    return path.read_text(encoding='utf-8')


def load_feed(feed_path: str) -> List[Any]:
    """Load a feed file and return its vulnerability items

    Accepts the NVD 2.0 `{"vulnerabilities": [...]}` wrapper, a bare list of
    items, or a single CVE object. `.json.zip` archives are read in place.
    """
    path = Path(feed_path)
    logging.info(f"Reading feed: {path.resolve()}")

    try:
        raw = _read_feed_text(path)
    except FeedError:
        raise
    except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as e:
        raise FeedError(f"Failed to read feed {path}: {e}", path=str(path)) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FeedError(f"Failed to parse JSON in {path}: {e}", path=str(path)) from e

    items = iter_feed_items(data)
    if items is None:
        raise FeedError(f"No vulnerabilities array found in {path}", path=str(path))

    logging.info(f"Vulnerabilities in feed: {len(items)}")
    return items


def feed_files(folder: Path) -> List[Path]:
    """Extracted `.json` feeds in a folder, sorted by name

    Archives are skipped so a folder holding both a zip and its extracted
    JSON is not read twice.
    """
    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == '.json')


def load_feeds(feed_path: str) -> List[Any]:
    """Load one feed file, or every JSON feed in a directory"""
    path = Path(feed_path)
    if not path.is_dir():
        return load_feed(feed_path)

    files = feed_files(path)
    if not files:
        logging.warning(f"No JSON feed files found in {path}")
        return []

    items: List[Any] = []
    for file in files:
        items.extend(load_feed(str(file)))
    logging.info(f"Loaded {len(items)} vulnerabilities from {len(files)} feed files")
    return items


def iter_feed_items(data: Any) -> Optional[List[Any]]:
    """Return the list of items in parsed feed data, None for unknown shapes"""
    if isinstance(data, Mapping):
        vulnerabilities = data.get('vulnerabilities')
        if isinstance(vulnerabilities, list):
            return vulnerabilities
        if 'id' in data or 'cve' in data:
            return [data]
        return None
    if isinstance(data, list):
        return data
    return None


def unwrap_cve(item: Any) -> Any:
    """Strip the `{"cve": {...}}` wrapper used by NVD feeds"""
    if isinstance(item, Mapping) and isinstance(item.get('cve'), Mapping):
        return item['cve']
    return item


def record_id(record: Any) -> str:
    if isinstance(record, Mapping):
        cve_id = record.get('id') or record.get('cveId')
        if cve_id:
            return str(cve_id)
    return 'UNKNOWN'


def _parse_date(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        logging.debug(f"Unparseable date: {value}")
        return None
    # NVD timestamps are UTC without an offset
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def build_entry(record: Any, verdict: Optional[Verdict] = None, error: Optional[str] = None) -> ClassifiedEntry:
    """Flatten a record and its verdict into a ClassifiedEntry"""
    entry = ClassifiedEntry(cve_id=record_id(record), verdict=verdict, error=error)
    if not isinstance(record, Mapping):
        return entry

    entry.published = _parse_date(record.get('published'))
    entry.last_modified = _parse_date(record.get('lastModified'))
    entry.vuln_status = str(record.get('vulnStatus') or '')

    entry.description = description_text(record)

    # De-duplicate while keeping the first-seen order
    entry.cwe_ids = list(dict.fromkeys(cwe_ids(record)))

    picked = representative_metric(record)
    if picked:
        version, metric = picked
        cvss_data = metric.get('cvssData') if isinstance(metric.get('cvssData'), Mapping) else {}
        entry.metric_version = version
        entry.base_score = _as_float(cvss_data.get('baseScore'))
        # v2 keeps baseSeverity on the metric entry rather than in cvssData
        entry.base_severity = str(cvss_data.get('baseSeverity') or metric.get('baseSeverity') or '')
        entry.attack_vector = str(cvss_data.get('attackVector') or cvss_data.get('accessVector') or '')

    return entry
