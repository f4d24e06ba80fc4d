"""Single CVE scan command"""

import asyncio
import logging
import sys

import click
from aiohttp import ClientError

from ...processing.processor import DdosProcessor
from ..formatters.json import JSONFormatter
from ..formatters.table import TableFormatter


@click.command()
@click.argument('cve_ids', nargs=-1, required=True)
@click.option('--json', 'as_json', is_flag=True, help='Emit JSON instead of the detailed table')
@click.option('--timeout', default=180, help='Timeout in seconds (default: 180)')
@click.option('--debug', is_flag=True, help='Enable debug logging (shows the score breakdown)')
@click.pass_context
def scan(ctx, cve_ids, as_json, timeout, debug):
    """Fetch CVEs from the NVD API and classify them

    Examples:
        ddosdetect scan CVE-2013-5211
        ddosdetect scan CVE-2018-1000115 CVE-2013-5211 --json
        ddosdetect scan CVE-2013-5211 --debug
    """
    config = ctx.obj['config']

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        config.log_level = 'DEBUG'

    ids = [cve_id.strip().upper() for cve_id in cve_ids]
    for cve_id in ids:
        if not cve_id.startswith('CVE-'):
            click.echo(f"Warning: '{cve_id}' doesn't follow CVE format (CVE-YYYY-NNNNN)", err=True)

    async def process():
        async with DdosProcessor(config) as processor:
            if len(ids) == 1:
                return [await processor.process_single_cve(ids[0])]
            return await processor.process_bulk_cves(ids)

    try:
        entries = asyncio.run(asyncio.wait_for(process(), timeout=timeout))
    except asyncio.TimeoutError:
        click.echo(f"Error: operation timed out after {timeout} seconds", err=True)
        sys.exit(1)
    except ClientError as e:
        click.echo(f"Error: NVD request failed: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo("[" + ",\n".join(JSONFormatter.format_single(e) for e in entries) + "]")
    else:
        click.echo(("\n\n" + "=" * 60 + "\n\n").join(TableFormatter.format_single(e) for e in entries))

    if any(e.verdict is None for e in entries):
        sys.exit(1)
