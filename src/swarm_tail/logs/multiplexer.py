"""
Fan-in of many container streams into one output.

The multiplexer discovers the sources, resolves the selector, spawns one
tailer task per selected stream and drains their shared queue into the sink.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, TextIO

from swarm_tail.core.exceptions import AppException, DiscoveryError
from swarm_tail.core.logging import logger
from .aggregator import CLOSED, Aggregator
from .base import Selector, SourceDescriptor, SourceProvider, SourceSet
from .colors import ColorPicker
from .selection import resolve
from .tailer import SourceTailer


DEFAULT_QUEUE_SIZE = 1000


class LogMultiplexer:
    """
    Runs one tailing session.

    This class ensures that:
    - Selection errors surface before any tailer starts
    - A failing stream never affects the others
    - The aggregator stops once every tailer has finished and the queue is drained
    - All tailers are stopped when the session ends for any reason
    """

    def __init__(
        self,
        provider: SourceProvider,
        sink: TextIO,
        color_picker: Optional[ColorPicker] = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        follow: bool = True
    ):
        """
        Initialize the multiplexer.

        Args:
            provider: Discovery and stream acquisition backend
            sink: Text stream receiving the formatted lines
            color_picker: Shared color table, a default one is created if omitted
            queue_size: Lines buffered between tailers and the writer (0 is unbounded)
            follow: Whether streams should keep following new output
        """
        self.provider = provider
        self.sink = sink
        self.color_picker = color_picker or ColorPicker()
        self.queue_size = queue_size
        self.follow = follow
        self.stop_event = asyncio.Event()
        self.tasks: List[asyncio.Task] = []
        self.executor: Optional[ThreadPoolExecutor] = None

    async def discover(self) -> SourceSet:
        """List the sources, mapping backend failures to DiscoveryError."""
        try:
            return await asyncio.to_thread(self.provider.list_sources)
        except AppException:
            raise
        except Exception as e:
            raise DiscoveryError(f"Failed to list log sources: {e}") from e

    async def select(self, selector: Selector) -> List[SourceDescriptor]:
        """Resolve ``selector`` to the descriptors that need a tailer."""
        source_set = await self.discover()
        selection = resolve(selector, source_set)
        targets = selection.targets(source_set)
        logger.info(f"Tailing {len(targets)} stream(s)")
        return targets

    async def run(self, selector: Optional[Selector] = None) -> int:
        """
        Tail the selected streams until they all end.

        Returns:
            Number of lines written to the sink

        Raises:
            DiscoveryError: If the sources cannot be listed
            SelectionError: If the selector cannot be satisfied
            SinkWriteError: If writing to the sink fails
        """
        targets = await self.select(selector or Selector())

        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self.stop_event.clear()
        # One worker per stream; an idle follow read holds its thread indefinitely
        self.executor = ThreadPoolExecutor(
            max_workers=max(1, len(targets)),
            thread_name_prefix="swarm-tail"
        )
        self.tasks = [
            asyncio.create_task(
                SourceTailer(
                    descriptor,
                    self.provider.open_stream,
                    self.color_picker,
                    queue,
                    self.stop_event,
                    follow=self.follow,
                    executor=self.executor
                ).run(),
                name=f"tail {descriptor.identifier}"
            )
            for descriptor in targets
        ]
        watcher = asyncio.create_task(self._close_when_done(queue))

        try:
            return await Aggregator(self.sink).drain(queue)
        finally:
            await self.stop(watcher)

    async def _close_when_done(self, queue: asyncio.Queue) -> None:
        await asyncio.gather(*self.tasks, return_exceptions=True)
        await queue.put(CLOSED)

    async def stop(self, watcher: Optional[asyncio.Task] = None) -> None:
        """Stop every tailer still running."""
        self.stop_event.set()

        pending = [task for task in self.tasks if not task.done()]
        if watcher is not None and not watcher.done():
            pending.append(watcher)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.debug(f"Cancelled {len(pending)} pending task(s)")

        self.tasks = []

        if self.executor is not None:
            # Closed streams release their readers; don't join stragglers
            self.executor.shutdown(wait=False, cancel_futures=True)
            self.executor = None
