"""Tests for the PostgreSQL verdict store"""

from datetime import datetime, timezone

import pytest

from ddosdetect.core.models import ClassifiedEntry, Confidence, CvssVersion, Verdict
from ddosdetect.storage import verdict_store
from ddosdetect.storage.verdict_store import UPSERT_SQL, VerdictStore, entry_to_row


class FakeTransaction:

    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        self.conn.transactions += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeConnection:

    def __init__(self, row=None, rows=None):
        self.row = row
        self.rows = rows or []
        self.executed = []
        self.batches = []
        self.queries = []
        self.transactions = 0

    async def execute(self, sql):
        self.executed.append(sql)

    async def executemany(self, sql, rows):
        self.batches.append((sql, rows))

    async def fetchrow(self, sql, *params):
        self.queries.append((sql, params))
        return self.row

    async def fetch(self, sql, *params):
        self.queries.append((sql, params))
        return self.rows

    def transaction(self):
        return FakeTransaction(self)


class FakeAcquire:

    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakePool:

    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    def acquire(self):
        return FakeAcquire(self.conn)

    async def close(self):
        self.closed = True


def store_with(conn):
    store = VerdictStore("postgresql://localhost/test")
    store.pool = FakePool(conn)
    return store


def make_entries(count):
    return [
        ClassifiedEntry(cve_id=f"CVE-2024-{i:04d}", verdict=Verdict(True, Confidence.HIGH, ["x"], 6))
        for i in range(count)
    ]


def test_entry_to_row_with_verdict():
    entry = ClassifiedEntry(
        cve_id="CVE-2013-5211",
        metric_version=CvssVersion.V31,
        base_score=5.3,
        cwe_ids=["CWE-406"],
        verdict=Verdict(True, Confidence.MEDIUM, ["CVSS gate: AV=NETWORK, A=HIGH, C=NONE, I=NONE"], 4),
    )

    row = entry_to_row(entry)

    assert len(row) == 15
    assert row[0] == "CVE-2013-5211"
    assert row[5] == "3.1"
    assert row[9] == ["CWE-406"]
    assert row[10:14] == (True, "MEDIUM", 1, ["CVSS gate: AV=NETWORK, A=HIGH, C=NONE, I=NONE"])
    assert row[14] is None


def test_failed_entry_has_null_verdict_columns():
    row = entry_to_row(ClassifiedEntry(cve_id="UNKNOWN", error="Expected a CVE record object, got str"))

    assert row[5] is None
    assert row[10:14] == (None, None, None, None)
    assert row[14] == "Expected a CVE record object, got str"


@pytest.mark.asyncio
async def test_upsert_in_batches():
    conn = FakeConnection()

    written = await store_with(conn).upsert_entries(make_entries(5), batch_size=2)

    assert written == 5
    assert [len(rows) for _, rows in conn.batches] == [2, 2, 1]
    assert all(sql == UPSERT_SQL for sql, _ in conn.batches)
    assert conn.transactions == 3


@pytest.mark.asyncio
async def test_upsert_rejects_bad_batch_size():
    with pytest.raises(ValueError):
        await store_with(FakeConnection()).upsert_entries(make_entries(1), batch_size=0)


@pytest.mark.asyncio
async def test_ensure_schema():
    conn = FakeConnection()
    await store_with(conn).ensure_schema()
    assert "CREATE TABLE IF NOT EXISTS cve_entries" in conn.executed[0]


@pytest.mark.asyncio
async def test_count_by_ddos():
    conn = FakeConnection(row={"ddos": 12, "classified": 90, "failed": 3, "total": 93})

    counts = await store_with(conn).count_by_ddos(Confidence.HIGH)

    assert counts == {"ddos": 12, "not_ddos": 78, "failed": 3, "total": 93}
    sql, params = conn.queries[0]
    assert "ddos_confidence_rank >= $1" in sql
    assert params == (2,)


@pytest.mark.asyncio
async def test_count_without_minimum_has_no_params():
    conn = FakeConnection(row={"ddos": 0, "classified": 0, "failed": 0, "total": 0})

    await store_with(conn).count_by_ddos()

    sql, params = conn.queries[0]
    assert "$1" not in sql
    assert params == ()


@pytest.mark.asyncio
async def test_yearly_trends():
    conn = FakeConnection(rows=[{"year": 2013, "total": 100, "ddos": 4}, {"year": 2014, "total": 50, "ddos": 1}])

    trends = await store_with(conn).yearly_ddos_trends()

    assert trends == [{"year": 2013, "total": 100, "ddos": 4}, {"year": 2014, "total": 50, "ddos": 1}]


@pytest.mark.asyncio
async def test_fetch_entries_numbers_parameters():
    conn = FakeConnection(rows=[{"cve_id": "CVE-2013-5211"}])

    rows = await store_with(conn).fetch_entries(is_ddos_related=True, min_confidence=Confidence.MEDIUM,
                                                limit=10, offset=20)

    assert rows == [{"cve_id": "CVE-2013-5211"}]
    sql, params = conn.queries[0]
    assert "is_ddos_related = $1" in sql
    assert "ddos_confidence_rank >= $2" in sql
    assert "LIMIT $3 OFFSET $4" in sql
    assert params == (True, 1, 10, 20)


@pytest.mark.asyncio
async def test_context_manager_creates_and_closes_pool(mocker):
    pool = FakePool(FakeConnection())
    create_pool = mocker.patch.object(verdict_store.asyncpg, "create_pool", mocker.AsyncMock(return_value=pool))

    async with VerdictStore("postgresql://localhost/test", max_size=3) as store:
        assert store.pool is pool

    create_pool.assert_awaited_once_with("postgresql://localhost/test", min_size=1, max_size=3)
    assert pool.closed


EMPTY_COUNTS = {"ddos": 0, "classified": 0, "failed": 0, "total": 0}


@pytest.mark.asyncio
async def test_count_accepted_status_only():
    conn = FakeConnection(row=EMPTY_COUNTS)

    await store_with(conn).count_by_ddos(Confidence.MEDIUM, status_filter="accepted")

    sql, params = conn.queries[0]
    assert "ddos_confidence_rank >= $1" in sql
    assert "WHERE vuln_status = ANY($2)" in sql
    assert params == (1, ["Analyzed", "Modified"])


@pytest.mark.asyncio
async def test_count_open_accepted_drops_rejected():
    conn = FakeConnection(row=EMPTY_COUNTS)

    await store_with(conn).count_by_ddos(status_filter="open-accepted")

    sql, params = conn.queries[0]
    assert "WHERE vuln_status <> $1" in sql
    assert params == ("Rejected",)


@pytest.mark.asyncio
async def test_count_publication_range():
    conn = FakeConnection(row=EMPTY_COUNTS)
    after = datetime(2020, 1, 1, tzinfo=timezone.utc)
    before = datetime(2020, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

    await store_with(conn).count_by_ddos(Confidence.HIGH, published_after=after, published_before=before)

    sql, params = conn.queries[0]
    assert "WHERE published >= $2 AND published <= $3" in sql
    assert "vuln_status" not in sql
    assert params == (2, after, before)


@pytest.mark.asyncio
async def test_yearly_trends_scope_and_utc_year():
    conn = FakeConnection(rows=[])
    after = datetime(2015, 1, 1, tzinfo=timezone.utc)

    await store_with(conn).yearly_ddos_trends(Confidence.HIGH, status_filter="accepted", published_after=after)

    sql, params = conn.queries[0]
    assert "AT TIME ZONE 'UTC'" in sql
    assert "WHERE published IS NOT NULL AND published >= $2 AND vuln_status = ANY($3)" in sql
    assert params == (2, after, ["Analyzed", "Modified"])


@pytest.mark.asyncio
async def test_fetch_entries_with_scope_numbers_parameters():
    conn = FakeConnection(rows=[])
    before = datetime(2019, 6, 30, tzinfo=timezone.utc)

    await store_with(conn).fetch_entries(is_ddos_related=True, limit=5, offset=0,
                                         status_filter="open-accepted", published_before=before)

    sql, params = conn.queries[0]
    assert "WHERE is_ddos_related = $1 AND published <= $2 AND vuln_status <> $3" in sql
    assert "LIMIT $4 OFFSET $5" in sql
    assert params == (True, before, "Rejected", 5, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["count_by_ddos", "yearly_ddos_trends", "fetch_entries"])
async def test_unknown_status_filter(method):
    conn = FakeConnection(row=EMPTY_COUNTS)

    with pytest.raises(ValueError, match="Unknown status filter"):
        await getattr(store_with(conn), method)(status_filter="published")
    assert conn.queries == []
