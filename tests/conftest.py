"""
Pytest configuration and fixtures
"""

import threading
from typing import Dict, Iterable, List, Optional

import pytest

from swarm_tail.core.exceptions import DiscoveryError, StreamOpenError
from swarm_tail.logs.base import SourceEntry, SourceProvider, SourceSet


class FakeStream:
    """In-memory byte stream yielding fixed chunks, optionally failing midway"""

    def __init__(self, chunks: Iterable[bytes], error: Optional[Exception] = None,
                 wait_for: Optional[threading.Event] = None):
        self.chunks = list(chunks)
        self.error = error
        self.wait_for = wait_for
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        if self.wait_for is not None:
            self.wait_for.wait(5)
        if self.chunks:
            return self.chunks.pop(0)
        if self.error is not None:
            raise self.error
        raise StopIteration

    def close(self):
        self.closed = True


class BlockingStream:
    """Follow-mode stream that never produces data until it is closed"""

    def __init__(self):
        self.reading = threading.Event()
        self._closed = threading.Event()

    @property
    def closed(self):
        return self._closed.is_set()

    def __iter__(self):
        return self

    def __next__(self):
        self.reading.set()
        self._closed.wait(5)
        raise ConnectionError("stream closed")

    def close(self):
        self._closed.set()


class FakeProvider(SourceProvider):
    """Provider serving preconfigured streams"""

    def __init__(self, sources: Dict[str, List[str]], streams: Optional[dict] = None,
                 open_errors: Iterable[tuple] = (), discovery_error: Optional[Exception] = None):
        self.sources = sources
        self.streams = streams or {}
        self.open_errors = set(open_errors)
        self.discovery_error = discovery_error
        self.opened = []

    def list_sources(self) -> SourceSet:
        if self.discovery_error is not None:
            raise self.discovery_error
        return SourceSet([SourceEntry(name, list(subs)) for name, subs in self.sources.items()])

    def open_stream(self, source: str, sub_source: str, follow: bool = True):
        key = (source, sub_source)
        if key in self.open_errors:
            raise StreamOpenError(source, sub_source, "refused")
        stream = self.streams.get(key)
        if stream is None:
            stream = FakeStream([])
        elif isinstance(stream, list):
            stream = FakeStream(stream)
        self.opened.append((key, stream))
        return stream


def lines_for(name: str, count: int = 3) -> List[bytes]:
    return [f"{name} line {i}\n".encode() for i in range(1, count + 1)]


@pytest.fixture
def two_sources():
    """api and worker, each writing three lines to stdout"""
    return FakeProvider(
        {"api": ["stdout"], "worker": ["stdout"]},
        {
            ("api", "stdout"): lines_for("api"),
            ("worker", "stdout"): lines_for("worker"),
        }
    )


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def fake_stream():
    return FakeStream


@pytest.fixture
def blocking_stream():
    stream = BlockingStream()
    yield stream
    stream.close()


@pytest.fixture
def idle_streams():
    """Factory for follow streams that stay silent; all are closed on teardown"""
    created = []

    def make(count):
        streams = [BlockingStream() for _ in range(count)]
        created.extend(streams)
        return streams

    yield make
    for stream in created:
        stream.close()


@pytest.fixture
def discovery_error():
    return DiscoveryError("daemon unreachable")
