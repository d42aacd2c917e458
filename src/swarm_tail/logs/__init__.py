"""
Log multiplexing

This package fans the live logs of many sources into one colored output
stream: discovery, selection, per-source tailing and the single writer.
"""

from .base import (
    SourceDescriptor,
    SourceEntry,
    SourceSet,
    Selector,
    Selection,
    SourceProvider
)
from .colors import ColorPicker
from .multiplexer import LogMultiplexer
from .selection import resolve

__all__ = [
    'SourceDescriptor',
    'SourceEntry',
    'SourceSet',
    'Selector',
    'Selection',
    'SourceProvider',
    'ColorPicker',
    'LogMultiplexer',
    'resolve'
]
