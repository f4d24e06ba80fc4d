"""Feed download command"""

import asyncio
import sys

import click
from aiohttp import ClientError

from ...clients.feed_client import feed_years
from ...core.exceptions import FeedError
from ...processing.processor import DdosProcessor


@click.command()
@click.option('--year', '-y', type=int, multiple=True, help='Feed year (repeatable)')
@click.option('--all-years', is_flag=True, help='Every yearly feed from 2002 to the current year')
@click.option('--modified', is_flag=True, help='Feed of CVEs changed in the last eight days')
@click.option('--recent', is_flag=True, help='Feed of recently published CVEs')
@click.option('--output-dir', default='cveJsons', show_default=True, help='Directory for downloaded feeds')
@click.pass_context
def fetch(ctx, year, all_years, modified, recent, output_dir):
    """Download and extract NVD 2.0 JSON feeds

    Examples:
        ddosdetect fetch --year 2024
        ddosdetect fetch -y 2023 -y 2024 --output-dir feeds
        ddosdetect fetch --modified --recent
        ddosdetect fetch --all-years
    """
    config = ctx.obj['config']

    years = feed_years() if all_years else list(year)
    names = [name for name, wanted in (('modified', modified), ('recent', recent)) if wanted]
    if not years and not names:
        raise click.UsageError("Nothing to fetch: pass --year, --all-years, --modified or --recent")

    async def process():
        async with DdosProcessor(config) as processor:
            paths = []
            for feed_year in years:
                click.echo(f"Downloading feed for {feed_year}...")
                paths.append(await processor.feed_client.download_year(feed_year, output_dir))
            for name in names:
                click.echo(f"Downloading {name} feed...")
                paths.append(await processor.feed_client.download_named(name, output_dir))
            return paths

    try:
        paths = asyncio.run(process())
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--year')
    except (ClientError, asyncio.TimeoutError, FeedError, OSError) as e:
        click.echo(f"Error: feed download failed: {e}", err=True)
        sys.exit(1)

    for path in paths:
        click.echo(f"Feed ready: {path}")
