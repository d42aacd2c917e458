"""Configuration commands"""

import click
from tabulate import tabulate

from ..utils import error_handler


@click.group()
def config():
    """Manage CLI configuration"""
    pass


@config.command()
@click.pass_context
def view(ctx):
    """View current configuration"""
    config = ctx.obj['config']

    click.echo(f"Streams: {', '.join(config.streams)}")
    click.echo(f"Palette: {', '.join(config.palette)}")
    click.echo(f"Queue size: {config.queue_size}")
    click.echo()

    if not config.contexts:
        click.echo("No contexts configured")
        return

    # Prepare table data
    table_data = []
    for name, context in config.contexts.items():
        current = '*' if name == config.current_context else ''
        table_data.append([
            current,
            name,
            context.docker_host or '(environment)',
            context.namespace or '-',
            'Yes' if context.tls_verify else 'No'
        ])

    headers = ['CURRENT', 'NAME', 'DOCKER HOST', 'NAMESPACE', 'TLS']
    click.echo(tabulate(table_data, headers=headers, tablefmt='simple'))


@config.command()
@click.argument('name')
@click.option('--docker-host', help='Docker daemon URL, e.g. tcp://10.0.0.5:2376')
@click.option('--namespace', help='Only tail containers of this stack')
@click.option('--tls-verify/--no-tls-verify', default=False, help='Verify the daemon TLS certificate')
@click.option('--cert-path', type=click.Path(file_okay=False), help='Directory holding ca.pem, cert.pem and key.pem')
@click.pass_context
@error_handler
def add_context(ctx, name: str, docker_host: str, namespace: str, tls_verify: bool, cert_path: str):
    """Add a new context"""
    config_manager = ctx.obj['config_manager']

    if tls_verify and not cert_path:
        raise click.UsageError("--tls-verify requires --cert-path")

    config_manager.add_context(
        name=name,
        docker_host=docker_host,
        tls_verify=tls_verify,
        cert_path=cert_path,
        namespace=namespace
    )

    click.echo(f"Context '{name}' added successfully")

    # If it's the first context, it's automatically set as current
    config = config_manager.load()
    if config.current_context == name:
        click.echo(f"Switched to context '{name}'")


@config.command()
@click.argument('name')
@click.pass_context
@error_handler
def remove_context(ctx, name: str):
    """Remove a context"""
    config = ctx.obj['config']
    config_manager = ctx.obj['config_manager']

    if name not in config.contexts:
        click.echo(f"Context '{name}' not found", err=True)
        ctx.exit(1)

    # Confirm if it's the current context
    if config.current_context == name:
        if not click.confirm(f"'{name}' is the current context. Remove anyway?"):
            return

    config_manager.remove_context(name)
    click.echo(f"Context '{name}' removed")


@config.command()
@click.argument('name')
@click.pass_context
@error_handler
def use_context(ctx, name: str):
    """Switch to a different context"""
    config = ctx.obj['config']
    config_manager = ctx.obj['config_manager']

    if name not in config.contexts:
        click.echo(f"Context '{name}' not found", err=True)
        click.echo("\nAvailable contexts:")
        for ctx_name in config.contexts:
            click.echo(f"  - {ctx_name}")
        ctx.exit(1)

    if config_manager.use_context(name):
        click.echo(f"Switched to context '{name}'")
    else:
        click.echo("Failed to switch context", err=True)
        ctx.exit(1)


@config.command()
@click.pass_context
def current_context(ctx):
    """Display the current context"""
    config = ctx.obj['config']

    if not config.current_context:
        click.echo("No current context set")
        return

    context = config.context
    if not context:
        click.echo(f"Current context '{config.current_context}' not found in config", err=True)
        return

    click.echo(f"Current context: {config.current_context}")
    click.echo(f"Docker host: {context.docker_host or '(environment)'}")
    click.echo(f"Namespace: {context.namespace or '-'}")
    click.echo(f"TLS verify: {context.tls_verify}")
