"""Classify feeds and persist the verdicts"""

import asyncio
import sys

import asyncpg
import click
from aiohttp import ClientError

from ...core.exceptions import FeedError
from ...processing.feed import load_feeds
from ...processing.processor import DdosProcessor
from ...storage.verdict_store import VerdictStore
from ..formatters.table import TableFormatter


@click.command()
@click.argument('feed_path', type=click.Path(), required=False)
@click.option('--modified', is_flag=True,
              help='Download the modified feed and upsert it instead of reading FEED_PATH')
@click.option('--output-dir', default='cveJsons', show_default=True, help='Directory for the downloaded feed')
@click.option('--database-url', help='PostgreSQL DSN (default: DDOS_DATABASE_URL)')
@click.option('--batch-size', type=click.IntRange(min=1), default=1000, show_default=True,
              help='Rows per upsert batch')
@click.option('--workers', type=click.IntRange(min=1), default=None, help='Worker processes for classification')
@click.pass_context
def store(ctx, feed_path, modified, output_dir, database_url, batch_size, workers):
    """Classify a feed file or folder of feeds and upsert the results into PostgreSQL

    Existing rows are updated in place, so re-running with the modified feed
    keeps the store current.

    Examples:
        ddosdetect store nvdcve-2.0-2024.json --database-url postgresql://localhost/cves
        ddosdetect store cveJsons/
        ddosdetect store --modified
    """
    config = ctx.obj['config']
    database_url = database_url or config.database_url
    if not database_url:
        raise click.UsageError("No database URL: pass --database-url or set DDOS_DATABASE_URL")
    if bool(feed_path) == modified:
        raise click.UsageError("Pass either FEED_PATH or --modified")

    if modified:
        async def download():
            async with DdosProcessor(config) as processor:
                return await processor.feed_client.download_named('modified', output_dir)

        try:
            feed_path = str(asyncio.run(download()))
        except (ClientError, asyncio.TimeoutError, FeedError, OSError) as e:
            click.echo(f"Error: feed download failed: {e}", err=True)
            sys.exit(1)
        click.echo(f"Feed ready: {feed_path}")

    try:
        items = load_feeds(feed_path)
    except FeedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    entries = DdosProcessor(config).classify_records(items, max_workers=workers)

    async def persist():
        async with VerdictStore(database_url) as verdict_store:
            await verdict_store.ensure_schema()
            return await verdict_store.upsert_entries(entries, batch_size=batch_size)

    try:
        written = asyncio.run(persist())
    except (asyncpg.PostgresError, OSError) as e:
        click.echo(f"Error: database write failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Stored {written} entries")
    click.echo(TableFormatter.format_summary(entries, config.min_confidence))
