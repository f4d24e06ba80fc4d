"""PostgreSQL verdict store backed by asyncpg"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import asyncpg

from ..core.models import ClassifiedEntry, Confidence


STATUS_FILTERS = ('accepted', 'open-accepted', 'all')
ACCEPTED_STATUSES = ('Analyzed', 'Modified')
REJECTED_STATUS = 'Rejected'


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cve_entries (
    cve_id TEXT PRIMARY KEY,
    published TIMESTAMPTZ,
    last_modified TIMESTAMPTZ,
    vuln_status TEXT,
    description TEXT,
    metric_version TEXT,
    base_score DOUBLE PRECISION,
    base_severity TEXT,
    attack_vector TEXT,
    cwe_ids TEXT[],
    is_ddos_related BOOLEAN,
    ddos_confidence TEXT,
    ddos_confidence_rank SMALLINT,
    ddos_reasons TEXT[],
    classification_error TEXT
);
CREATE INDEX IF NOT EXISTS idx_cve_entries_ddos ON cve_entries (is_ddos_related, ddos_confidence_rank);
CREATE INDEX IF NOT EXISTS idx_cve_entries_published ON cve_entries (published);
CREATE INDEX IF NOT EXISTS idx_cve_entries_status ON cve_entries (vuln_status);
"""

UPSERT_SQL = """
INSERT INTO cve_entries (
    cve_id, published, last_modified, vuln_status, description, metric_version,
    base_score, base_severity, attack_vector, cwe_ids, is_ddos_related,
    ddos_confidence, ddos_confidence_rank, ddos_reasons, classification_error
) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15)
ON CONFLICT (cve_id) DO UPDATE SET
    published = EXCLUDED.published,
    last_modified = EXCLUDED.last_modified,
    vuln_status = EXCLUDED.vuln_status,
    description = EXCLUDED.description,
    metric_version = EXCLUDED.metric_version,
    base_score = EXCLUDED.base_score,
    base_severity = EXCLUDED.base_severity,
    attack_vector = EXCLUDED.attack_vector,
    cwe_ids = EXCLUDED.cwe_ids,
    is_ddos_related = EXCLUDED.is_ddos_related,
    ddos_confidence = EXCLUDED.ddos_confidence,
    ddos_confidence_rank = EXCLUDED.ddos_confidence_rank,
    ddos_reasons = EXCLUDED.ddos_reasons,
    classification_error = EXCLUDED.classification_error
"""


def entry_to_row(entry: ClassifiedEntry) -> Tuple:
    """Column values for one entry; failed classifications keep NULL verdict columns"""
    verdict = entry.verdict
    return (
        entry.cve_id,
        entry.published,
        entry.last_modified,
        entry.vuln_status,
        entry.description,
        entry.metric_version.value if entry.metric_version else None,
        entry.base_score,
        entry.base_severity,
        entry.attack_vector,
        list(entry.cwe_ids),
        verdict.is_ddos_related if verdict else None,
        verdict.confidence.value if verdict else None,
        verdict.confidence.rank if verdict else None,
        list(verdict.reasons) if verdict else None,
        entry.error,
    )


def _rank_condition(params: List, min_confidence: Optional[Confidence]) -> str:
    """Extra DDoS condition for a minimum confidence, appending its parameter"""
    if min_confidence is None:
        return ""
    params.append(min_confidence.rank)
    return f" AND ddos_confidence_rank >= ${len(params)}"


def _scope_clauses(params: List, status_filter: str = 'all',
                   published_after: Optional[datetime] = None,
                   published_before: Optional[datetime] = None) -> List[str]:
    """WHERE clauses for status and publication range, appending their parameters

    `accepted` keeps Analyzed and Modified entries, `open-accepted` drops
    Rejected ones and `all` keeps everything. Both range bounds are inclusive.
    """
    if status_filter not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status_filter!r} (expected one of {', '.join(STATUS_FILTERS)})")

    clauses = []
    if published_after is not None:
        params.append(published_after)
        clauses.append(f"published >= ${len(params)}")
    if published_before is not None:
        params.append(published_before)
        clauses.append(f"published <= ${len(params)}")

    if status_filter == 'accepted':
        params.append(list(ACCEPTED_STATUSES))
        clauses.append(f"vuln_status = ANY(${len(params)})")
    elif status_filter == 'open-accepted':
        params.append(REJECTED_STATUS)
        clauses.append(f"vuln_status <> ${len(params)}")
    return clauses


def _where(clauses: List[str]) -> str:
    return f" WHERE {' AND '.join(clauses)}" if clauses else ""


class VerdictStore:
    """Stores classified entries and answers aggregate queries"""

    def __init__(self, database_url: str, min_size: int = 1, max_size: int = 5):
        self.database_url = database_url
        self.min_size = min_size
        self.max_size = max_size
        self.pool: Optional[asyncpg.Pool] = None

    async def __aenter__(self):
        self.pool = await asyncpg.create_pool(self.database_url, min_size=self.min_size, max_size=self.max_size)
        logging.info("Verdict store connected")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.pool:
            await self.pool.close()
            logging.info("Verdict store closed")

    async def ensure_schema(self):
        async with self.pool.acquire() as conn:
            await conn.execute(SCHEMA_SQL)

    async def upsert_entries(self, entries: Sequence[ClassifiedEntry], batch_size: int = 1000) -> int:
        """Insert or update entries in batches, returns the number written"""
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        written = 0
        async with self.pool.acquire() as conn:
            for start in range(0, len(entries), batch_size):
                batch = entries[start:start + batch_size]
                async with conn.transaction():
                    await conn.executemany(UPSERT_SQL, [entry_to_row(e) for e in batch])
                written += len(batch)
                logging.info(f"Upserted {written}/{len(entries)} entries")
        return written

    async def count_by_ddos(self, min_confidence: Optional[Confidence] = None, status_filter: str = 'all',
                            published_after: Optional[datetime] = None,
                            published_before: Optional[datetime] = None) -> Dict[str, int]:
        """Counts of DDoS-related, other and unclassified entries"""
        params: List = []
        condition = _rank_condition(params, min_confidence)
        where = _where(_scope_clauses(params, status_filter, published_after, published_before))
        query = f"""
            SELECT
                COUNT(*) FILTER (WHERE is_ddos_related{condition}) AS ddos,
                COUNT(*) FILTER (WHERE is_ddos_related IS NOT NULL) AS classified,
                COUNT(*) FILTER (WHERE is_ddos_related IS NULL) AS failed,
                COUNT(*) AS total
            FROM cve_entries{where}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *params)

        return {
            'ddos': row['ddos'],
            'not_ddos': row['classified'] - row['ddos'],
            'failed': row['failed'],
            'total': row['total'],
        }

    async def yearly_ddos_trends(self, min_confidence: Optional[Confidence] = None, status_filter: str = 'all',
                                 published_after: Optional[datetime] = None,
                                 published_before: Optional[datetime] = None) -> List[Dict[str, int]]:
        """Per publication year (UTC): total entries and DDoS-related entries"""
        params: List = []
        condition = _rank_condition(params, min_confidence)
        clauses = ["published IS NOT NULL"]
        clauses.extend(_scope_clauses(params, status_filter, published_after, published_before))
        query = f"""
            SELECT
                EXTRACT(YEAR FROM published AT TIME ZONE 'UTC')::INT AS year,
                COUNT(*) AS total,
                COUNT(*) FILTER (WHERE is_ddos_related{condition}) AS ddos
            FROM cve_entries{_where(clauses)}
            GROUP BY year
            ORDER BY year
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *params)

        return [{'year': r['year'], 'total': r['total'], 'ddos': r['ddos']} for r in rows]

    async def fetch_entries(self, is_ddos_related: Optional[bool] = None,
                            min_confidence: Optional[Confidence] = None,
                            limit: int = 100, offset: int = 0, status_filter: str = 'all',
                            published_after: Optional[datetime] = None,
                            published_before: Optional[datetime] = None) -> List[Dict]:
        """Stored rows filtered by verdict, minimum certainty, status and publication date"""
        clauses = []
        params: List = []

        if is_ddos_related is not None:
            params.append(is_ddos_related)
            clauses.append(f"is_ddos_related = ${len(params)}")
        if min_confidence is not None:
            params.append(min_confidence.rank)
            clauses.append(f"ddos_confidence_rank >= ${len(params)}")
        clauses.extend(_scope_clauses(params, status_filter, published_after, published_before))

        params.extend([limit, offset])
        query = (
            f"SELECT * FROM cve_entries{_where(clauses)} ORDER BY published DESC NULLS LAST, cve_id "
            f"LIMIT ${len(params) - 1} OFFSET ${len(params)}"
        )

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *params)
        return [dict(r) for r in rows]
