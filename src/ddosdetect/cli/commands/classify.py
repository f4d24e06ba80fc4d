"""Feed classification command"""

import sys
import time

import click

from ...core.exceptions import FeedError
from ...core.models import Confidence
from ...processing.feed import load_feeds
from ...processing.processor import DdosProcessor
from ..formatters.csv import CSVFormatter
from ..formatters.json import JSONFormatter
from ..formatters.table import TableFormatter


CONFIDENCE_CHOICES = click.Choice(['low', 'medium', 'high'], case_sensitive=False)


@click.command()
@click.argument('feed_path', type=click.Path())
@click.option('--min', 'min_confidence', type=CONFIDENCE_CHOICES, default=None,
              help='Minimum confidence to report as DDoS (default: DDOS_MIN_CONFIDENCE or low)')
@click.option('--reasons', is_flag=True, help='Show the reason trail for every record')
@click.option('--json', 'as_json', is_flag=True, help='Emit JSON (same as --format json)')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json', 'csv']), default='table',
              help='Output format')
@click.option('--output', '-o', help='Output file path')
@click.option('--workers', type=click.IntRange(min=1), default=None,
              help='Worker processes for classification (default: DDOS_MAX_WORKERS)')
@click.option('--summary', is_flag=True, help='Print verdict counts after table output')
@click.pass_context
def classify(ctx, feed_path, min_confidence, reasons, as_json, output_format, output, workers, summary):
    """Classify every CVE in an NVD 2.0 JSON feed file, or in every JSON feed of a folder

    Examples:
        ddosdetect classify nvdcve-2.0-2024.json
        ddosdetect classify nvdcve-2.0-2024.json.zip --min high --reasons
        ddosdetect classify feed.json --json --reasons -o results.json
        ddosdetect classify feed.json --format csv --workers 4
        ddosdetect classify cveJsons/ --summary
    """
    config = ctx.obj['config']
    minimum = Confidence.parse(min_confidence) if min_confidence else config.min_confidence
    if as_json:
        output_format = 'json'

    try:
        items = load_feeds(feed_path)
    except FeedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    start = time.monotonic()
    entries = DdosProcessor(config).classify_records(items, max_workers=workers)
    elapsed = time.monotonic() - start

    if output_format == 'csv':
        CSVFormatter.save(entries, output, minimum)
    else:
        if output_format == 'json':
            output_text = JSONFormatter.format_results(entries, minimum, include_reasons=reasons)
        else:
            output_text = TableFormatter.format_results(entries, minimum, show_reasons=reasons)
            if summary:
                output_text = "\n".join(filter(None, [output_text, TableFormatter.format_summary(entries, minimum)]))

        if output:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(output_text + "\n")
        elif output_text:
            click.echo(output_text)

    if output:
        click.echo(f"Results saved to {output} ({len(entries)} records in {elapsed:.1f}s)", err=True)
