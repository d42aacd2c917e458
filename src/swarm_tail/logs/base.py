"""
Base classes and interfaces for the log multiplexer.

This module defines the data model shared by discovery, selection and tailing,
and the abstract provider every log backend (Docker, test fakes, ...) must
implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class SourceDescriptor:
    """One log-producing unit: a source and one of its sub-sources."""
    source: str
    sub_source: str

    @property
    def identifier(self) -> str:
        """Composite identifier used as the color key and line prefix."""
        return f"[{self.source} {self.sub_source}]"


@dataclass
class SourceEntry:
    """A discovered source with its ordered sub-sources."""
    name: str
    sub_sources: List[str] = field(default_factory=list)


@dataclass
class SourceSet:
    """
    Ordered collection of every source known at selection time.

    Populated once per run by discovery and never refreshed.
    """
    entries: List[SourceEntry] = field(default_factory=list)

    def __iter__(self) -> Iterator[SourceEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def descriptors(self) -> List[SourceDescriptor]:
        """Every (source, sub-source) pair in natural order."""
        return [
            SourceDescriptor(entry.name, sub_source)
            for entry in self.entries
            for sub_source in entry.sub_sources
        ]


@dataclass(frozen=True)
class Selector:
    """Raw selection criterion; an empty value means "any"."""
    source: Optional[str] = None
    sub_source: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.source and not self.sub_source


@dataclass(frozen=True)
class Selection:
    """Resolved selection: everything, or exactly one (source, sub-source) pair."""
    target: Optional[SourceDescriptor] = None

    @classmethod
    def unfiltered(cls) -> 'Selection':
        return cls()

    @classmethod
    def exact(cls, source: str, sub_source: str) -> 'Selection':
        return cls(SourceDescriptor(source, sub_source))

    @property
    def is_unfiltered(self) -> bool:
        return self.target is None

    def targets(self, source_set: SourceSet) -> List[SourceDescriptor]:
        """Descriptors to spawn a tailer for."""
        if self.is_unfiltered:
            return source_set.descriptors()
        return [self.target]


class SourceProvider(ABC):
    """
    Abstract base class for log backends.

    Both methods are blocking; the multiplexer calls them from worker threads.
    """

    @abstractmethod
    def list_sources(self) -> SourceSet:
        """
        Enumerate every source and its sub-sources.

        Raises:
            DiscoveryError: If the backend cannot be queried
        """
        pass

    @abstractmethod
    def open_stream(self, source: str, sub_source: str, follow: bool = True) -> Iterable[bytes]:
        """
        Open a live byte stream for one sub-source.

        The returned iterable yields raw chunks of bytes. If it has a
        ``close()`` method the tailer calls it once it is done.

        Raises:
            StreamOpenError: If the stream cannot be opened
        """
        pass
