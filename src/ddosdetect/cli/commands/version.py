"""Version information command"""

import platform
import sys
from importlib.metadata import PackageNotFoundError, version as package_version

import click

from ... import __version__
from ...scoring import rules


DEPENDENCIES = ['click', 'aiohttp', 'asyncpg', 'tenacity', 'python-dateutil', 'python-dotenv', 'rich']


@click.command()
def version():
    """Show DDoS Detect version and rule set information"""
    click.echo("DDOS DETECT")
    click.echo("=" * 50)

    click.echo("\nVersion Information:")
    click.echo(f"   DDoS Detect Version: {__version__}")

    click.echo("\nClassification Rules:")
    click.echo("   Gate: AV Network/Adjacent, A High/Complete, C/I None/Low")
    click.echo(f"   Score = {rules.BASE_SCORE} + gate bonus (PR:N, UI:N, AC:L)"
               f" + {rules.LEXICON_WEIGHT} lexicon - {rules.NEGATIVE_PENALTY} negative"
               f" + {rules.CWE_WEIGHT} CWE + {rules.REFERENCE_WEIGHT} references")
    click.echo(f"   Confidence: HIGH >= {rules.HIGH_CONFIDENCE_SCORE}, MEDIUM >= {rules.MEDIUM_CONFIDENCE_SCORE}, else LOW")
    click.echo(f"   Amplification keywords: {len(rules.AMPLIFICATION_KEYWORDS)}")
    click.echo(f"   Negative keywords: {len(rules.NEGATIVE_KEYWORDS)}")
    click.echo(f"   Strong CWEs: {', '.join(sorted(rules.STRONG_DDOS_CWES))}")

    click.echo("\nSystem Information:")
    click.echo(f"   Python Version: {sys.version.split()[0]}")
    click.echo(f"   Platform: {platform.platform()}")

    click.echo("\nDependencies:")
    for name in DEPENDENCIES:
        try:
            click.echo(f"   - {name}: {package_version(name)}")
        except PackageNotFoundError:
            click.echo(f"   - {name}: not installed")
