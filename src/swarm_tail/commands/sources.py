"""Source listing command"""

import click

from ..utils import error_handler, print_output
from .logs import build_provider


@click.command()
@click.option('--label', '-l', 'labels', multiple=True, help='Label selector (key or key=value)')
@click.pass_context
@error_handler
def sources(ctx, labels):
    """List the sources and streams available for tailing"""
    provider = build_provider(ctx, labels)
    source_set = provider.list_sources()

    data = [
        {'source': entry.name, 'streams': list(entry.sub_sources)}
        for entry in source_set
    ]

    if ctx.obj['output_format'] in ['json', 'yaml']:
        print_output(ctx, data)
    else:
        rows = [{'source': item['source'], 'streams': ', '.join(item['streams'])} for item in data]
        print_output(ctx, rows, headers=['SOURCE', 'STREAMS'], fields=['source', 'streams'])
