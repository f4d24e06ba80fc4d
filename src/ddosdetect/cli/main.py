"""DDoS Detect CLI Main Entry Point"""

import logging

import click

from ..config.settings import DetectorConfig
from .commands.classify import classify
from .commands.scan import scan
from .commands.fetch import fetch
from .commands.store import store
from .commands.stats import stats
from .commands.config import config_cmd
from .commands.version import version


def setup_logging(level: str):
    """Setup logging configuration"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


@click.group()
@click.option('--log-level', default=None, help='Logging level (default: DDOS_LOG_LEVEL or INFO)')
@click.option('--env-file', help='Path to a .env configuration file')
@click.pass_context
def cli(ctx, log_level, env_file):
    """DDoS Detect CLI

    Flags DDoS-class (amplification/reflection) vulnerabilities in NVD CVE
    records using a CVSS gate plus description, CWE and reference evidence.
    """
    try:
        config = DetectorConfig.from_env(env_file)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    if log_level:
        config.log_level = log_level
    setup_logging(config.log_level)

    ctx.ensure_object(dict)
    ctx.obj['config'] = config


# Register commands
cli.add_command(classify)
cli.add_command(scan)
cli.add_command(fetch)
cli.add_command(store)
cli.add_command(stats)
cli.add_command(config_cmd, name='config')
cli.add_command(version)


if __name__ == '__main__':
    cli()
