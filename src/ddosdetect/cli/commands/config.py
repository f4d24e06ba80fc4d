"""Configuration management commands"""

import os

import click

from ...config.settings import ENV_VARS, DetectorConfig


def _mask(value: str) -> str:
    return f"{value[:8]}..." if len(value) > 8 else "***"


@click.command('config')
@click.option('--show-env', is_flag=True, help='Show all environment variables')
@click.option('--validate', is_flag=True, help='Validate configuration')
@click.pass_context
def config_cmd(ctx, show_env, validate):
    """Show current DDoS Detect configuration

    Example:
        ddosdetect config
        ddosdetect config --show-env
        ddosdetect config --validate
        ddosdetect --env-file /path/to/custom.env config
    """
    config: DetectorConfig = ctx.obj['config']

    click.echo("DDOS DETECT CONFIGURATION")
    click.echo("=" * 50)

    click.echo("\nNVD Access:")
    api_key_status = f"Set ({_mask(config.nvd_api_key)})" if config.nvd_api_key else "Not Set"
    click.echo(f"   NVD API Key: {api_key_status}")
    click.echo(f"   NVD API: {config.nvd_base_url}")
    click.echo(f"   Feed Base URL: {config.feed_base_url}")
    click.echo(f"   Rate Limit Delay: {config.rate_limit_delay}s")
    click.echo(f"   Max Concurrent: {config.max_concurrent_requests}")

    click.echo("\nClassification:")
    click.echo(f"   Minimum Confidence: {config.min_confidence.value}")
    click.echo(f"   Worker Processes: {config.max_workers}")
    click.echo(f"   Log Level: {config.log_level}")

    click.echo("\nStorage:")
    click.echo(f"   Database URL: {'Set' if config.database_url else 'Not Set'}")

    if show_env:
        click.echo("\nEnvironment Variables:")
        for var in ENV_VARS:
            value = os.getenv(var)
            if value and var in ('NVD_API_KEY', 'DDOS_DATABASE_URL'):
                display_value = _mask(value)
            else:
                display_value = value or "Not Set"
            click.echo(f"   {var}: {display_value}")

    if validate:
        click.echo("\nConfiguration Validation:")
        issues = config.validate()
        if not issues:
            click.echo("   Configuration looks good!")
        else:
            click.echo("   Issues found:")
            for issue in issues:
                click.echo(f"      - {issue}")
