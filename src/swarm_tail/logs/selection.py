"""Resolve a source/stream selector against the discovered sources."""

from typing import Optional

from swarm_tail.core.exceptions import NoSourcesAvailableError, SelectionNotFoundError
from .base import Selection, Selector, SourceSet


def resolve(selector: Selector, source_set: Optional[SourceSet]) -> Selection:
    """
    Resolve ``selector`` to a concrete selection.

    An empty selector tails everything. Otherwise the sources are scanned in
    order and the first source/stream pair matching both criteria wins.

    Raises:
        NoSourcesAvailableError: If there is nothing to select from
        SelectionNotFoundError: If no pair matches the selector
    """
    if source_set is None or len(source_set) == 0:
        raise NoSourcesAvailableError()

    if selector.is_empty:
        return Selection.unfiltered()

    source_name = selector.source or ""
    sub_source_name = selector.sub_source or ""

    for entry in source_set:
        if source_name and source_name != entry.name:
            continue
        for sub_source in entry.sub_sources:
            if not sub_source_name or sub_source_name == sub_source:
                return Selection.exact(entry.name, sub_source)

    # The whole set was scanned without a hit
    raise SelectionNotFoundError(sub_source_name, source_name)
