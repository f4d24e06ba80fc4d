"""Aggregate DDoS statistics from the verdict store"""

import asyncio
import sys
from datetime import timezone

import asyncpg
import click
from rich.console import Console
from rich.table import Table

from ...core.models import Confidence
from ...storage.verdict_store import STATUS_FILTERS, VerdictStore


@click.command()
@click.option('--database-url', help='PostgreSQL DSN (default: DDOS_DATABASE_URL)')
@click.option('--min-confidence', type=click.Choice(['low', 'medium', 'high'], case_sensitive=False),
              default=None, help='Only count DDoS verdicts at or above this certainty')
@click.option('--status', 'status_filter', type=click.Choice(STATUS_FILTERS), default='accepted', show_default=True,
              help='accepted: Analyzed/Modified only; open-accepted: everything but Rejected; all: no filter')
@click.option('--since', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help='Only CVEs published on or after this date (UTC)')
@click.option('--until', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help='Only CVEs published on or before this date (UTC)')
@click.pass_context
def stats(ctx, database_url, min_confidence, status_filter, since, until):
    """Show DDoS counts and the yearly DDoS trend

    Examples:
        ddosdetect stats --database-url postgresql://localhost/cves
        ddosdetect stats --min-confidence high --status open-accepted
        ddosdetect stats --since 2020-01-01 --until 2023-12-31
    """
    config = ctx.obj['config']
    database_url = database_url or config.database_url
    if not database_url:
        raise click.UsageError("No database URL: pass --database-url or set DDOS_DATABASE_URL")
    minimum = Confidence.parse(min_confidence) if min_confidence else None

    published_after = since.replace(tzinfo=timezone.utc) if since else None
    # --until covers the whole day
    published_before = (
        until.replace(hour=23, minute=59, second=59, microsecond=999999, tzinfo=timezone.utc) if until else None
    )
    scope = dict(status_filter=status_filter, published_after=published_after, published_before=published_before)

    async def query():
        async with VerdictStore(database_url) as verdict_store:
            counts = await verdict_store.count_by_ddos(minimum, **scope)
            trends = await verdict_store.yearly_ddos_trends(minimum, **scope)
            return counts, trends

    try:
        counts, trends = asyncio.run(query())
    except (asyncpg.PostgresError, OSError) as e:
        click.echo(f"Error: database query failed: {e}", err=True)
        sys.exit(1)

    console = Console()
    label = f" (>= {minimum.value})" if minimum else ""
    console.print(f"Status filter: {status_filter}")
    console.print(f"Total entries: {counts['total']}")
    console.print(f"DDoS-related{label}: {counts['ddos']}")
    console.print(f"Not DDoS-related: {counts['not_ddos']}")
    if counts['failed']:
        console.print(f"Classification failed: {counts['failed']}")

    if trends:
        table = Table(title=f"Yearly DDoS trend{label}")
        table.add_column("Year", justify="right")
        table.add_column("CVEs", justify="right")
        table.add_column("DDoS", justify="right")
        table.add_column("Share", justify="right")
        for row in trends:
            share = row['ddos'] / row['total'] * 100 if row['total'] else 0.0
            table.add_row(str(row['year']), str(row['total']), str(row['ddos']), f"{share:.2f}%")
        console.print(table)
