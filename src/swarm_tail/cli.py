"""Main CLI entry point"""

import click

from .config import ConfigManager, DEFAULT_CONFIG_PATH
from .commands import config_cmd, logs, sources
from .core.exceptions import AppException
from .core.logging_config import setup_logging
from .logs.providers import DockerSourceProvider


@click.group()
@click.option('--config', '-c', type=click.Path(dir_okay=False),
              default=str(DEFAULT_CONFIG_PATH),
              help='Config file location')
@click.option('--context', help='Override current context')
@click.option('--output', '-o', type=click.Choice(['table', 'json', 'yaml']),
              default='table', help='Output format')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                                               case_sensitive=False),
              default=None, help='Diagnostics level (written to stderr)')
@click.pass_context
def cli(ctx, config, context, output, log_level):
    """swarm-tail - follow the logs of many containers in one colored stream"""
    if log_level:
        setup_logging(log_level)

    # Initialize config
    config_manager = ConfigManager(config)
    try:
        cfg = config_manager.load()
    except AppException as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)

    # Override context if specified
    if context:
        if context not in cfg.contexts:
            raise click.BadParameter(f"Context '{context}' not found", param_hint='--context')
        cfg.current_context = context

    # Store in context
    ctx.ensure_object(dict)
    ctx.obj.setdefault('provider_factory', DockerSourceProvider)
    ctx.obj.update({
        'config': cfg,
        'config_manager': config_manager,
        'output_format': output
    })


# Add command groups
cli.add_command(logs.logs)
cli.add_command(sources.sources)
cli.add_command(config_cmd.config)


if __name__ == '__main__':
    cli()
