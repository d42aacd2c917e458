"""Log tailing command"""

import asyncio
import os
import sys
from typing import Optional, Tuple

import click

from ..core.exceptions import SinkWriteError
from ..core.logging import logger
from ..logs import ColorPicker, LogMultiplexer, Selector
from ..logs.colors import palette_from_names
from ..utils import error_handler, parse_labels


def build_provider(ctx: click.Context, labels: Tuple[str, ...] = (), tail: int = 0,
                   timestamps: bool = False):
    """Create the log provider for the active context"""
    cfg = ctx.obj['config']
    factory = ctx.obj['provider_factory']
    try:
        return factory(
            context=cfg.context,
            labels=parse_labels(list(labels)),
            streams=cfg.streams,
            tail=tail,
            timestamps=timestamps
        )
    except ValueError as e:
        raise click.UsageError(str(e))


def silence_stdout() -> None:
    """Point stdout at devnull so the final flush at exit cannot hit the closed pipe again"""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        try:
            os.dup2(devnull, sys.stdout.fileno())
        finally:
            os.close(devnull)
    except (OSError, ValueError) as e:
        # stdout without a file descriptor has nothing to flush to the pipe
        logger.debug(f"Could not redirect stdout: {e}")


@click.command()
@click.argument('source', required=False)
@click.option('--stream', '-s', 'sub_source', help='Only tail this stream (stdout or stderr)')
@click.option('--label', '-l', 'labels', multiple=True, help='Label selector (key or key=value)')
@click.option('--tail', type=click.IntRange(min=0), default=0,
              help='Number of lines to replay from the end before following')
@click.option('--timestamps', '-t', is_flag=True, help='Show timestamps')
@click.option('--follow/--no-follow', default=True, help='Keep following new output')
@click.option('--color/--no-color', default=None, help='Colorize source prefixes (default: when stdout is a terminal)')
@click.pass_context
@error_handler
def logs(ctx, source: Optional[str], sub_source: Optional[str], labels, tail: int,
         timestamps: bool, follow: bool, color: Optional[bool]):
    """Print the logs of running containers, one colored prefix per stream"""
    cfg = ctx.obj['config']
    sink = sys.stdout

    if color is None:
        color = sink.isatty()

    provider = build_provider(ctx, labels, tail, timestamps)
    picker = ColorPicker(palette_from_names(cfg.palette), enabled=color)
    multiplexer = LogMultiplexer(
        provider,
        sink,
        color_picker=picker,
        queue_size=cfg.queue_size,
        follow=follow
    )

    try:
        asyncio.run(multiplexer.run(Selector(source, sub_source)))
    except KeyboardInterrupt:
        ctx.exit(130)
    except SinkWriteError as e:
        # Reader went away, e.g. piped into head
        if isinstance(e.__cause__, BrokenPipeError):
            silence_stdout()
        raise
