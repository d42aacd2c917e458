"""
Per-source tailing.

A SourceTailer follows one container stream, splits it into lines and pushes
each line, prefixed with its colored identifier, onto the shared queue.
"""

import asyncio
from concurrent.futures import Executor
from typing import Any, Callable, Iterable, Optional

from swarm_tail.core.exceptions import StreamOpenError, StreamReadError
from swarm_tail.core.logging import logger
from .base import SourceDescriptor
from .colors import ColorPicker


LINE_TERMINATOR = b"\n"

OpenStream = Callable[[str, str, bool], Iterable[bytes]]


class LineReader:
    """Buffered line reader over an iterable of byte chunks"""

    def __init__(self, stream: Iterable[bytes], terminator: bytes = LINE_TERMINATOR,
                 executor: Optional[Executor] = None):
        self._chunks = iter(stream)
        self._buffer = bytearray()
        self.terminator = terminator
        self.executor = executor

    async def readline(self) -> bytes:
        """
        Return the next complete line, terminator included.

        Raises:
            EOFError: When the stream ends; an unterminated fragment is dropped
        """
        while True:
            index = self._buffer.find(self.terminator)
            if index >= 0:
                end = index + len(self.terminator)
                line = bytes(self._buffer[:end])
                del self._buffer[:end]
                return line

            # Chunk reads block on the socket
            loop = asyncio.get_running_loop()
            chunk = await loop.run_in_executor(self.executor, next, self._chunks, None)
            if chunk is None:
                raise EOFError(f"stream ended with {len(self._buffer)} unterminated bytes")

            if isinstance(chunk, str):
                chunk = chunk.encode('utf-8')
            self._buffer.extend(chunk)


def close_stream(stream: Any) -> None:
    """Close a stream handle, logging instead of raising on failure"""
    try:
        if hasattr(stream, 'close'):
            stream.close()
    except Exception as e:
        logger.error(f"Error closing stream: {e}")


def _close_opened(future: asyncio.Future) -> None:
    if not future.cancelled() and future.exception() is None:
        close_stream(future.result())


class SourceTailer:
    """
    Follows one (source, sub-source) stream into the shared queue.

    Errors stay local: a stream that cannot be opened or stops producing ends
    this tailer only. The queue is never closed from here.
    """

    def __init__(
        self,
        descriptor: SourceDescriptor,
        open_stream: OpenStream,
        color_picker: ColorPicker,
        queue: asyncio.Queue,
        stop_event: Optional[asyncio.Event] = None,
        follow: bool = True,
        executor: Optional[Executor] = None
    ):
        self.descriptor = descriptor
        self.open_stream = open_stream
        self.color_picker = color_picker
        self.queue = queue
        self.stop_event = stop_event or asyncio.Event()
        self.follow = follow
        self.executor = executor
        self.lines_sent = 0

    def format_line(self, line: bytes) -> str:
        """Prefix a raw line with the colored identifier"""
        prefix = self.color_picker.colorize(self.descriptor.identifier)
        return f"{prefix} {line.decode('utf-8', errors='replace')}"

    async def _open(self) -> Iterable[bytes]:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(
            self.executor,
            self.open_stream, self.descriptor.source, self.descriptor.sub_source, self.follow
        )
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError:
            # The open keeps running in its thread; close what it returns
            future.add_done_callback(_close_opened)
            raise

    async def run(self) -> int:
        """Tail until the stream ends, fails or the run is stopped."""
        source = self.descriptor.source
        sub_source = self.descriptor.sub_source

        try:
            stream = await self._open()
        except StreamOpenError as e:
            logger.warning(e.message)
            return self.lines_sent
        except Exception as e:
            logger.warning(StreamOpenError(source, sub_source, str(e)).message)
            return self.lines_sent

        logger.debug(f"Tailing {self.descriptor.identifier}")
        reader = LineReader(stream, executor=self.executor)

        try:
            while not self.stop_event.is_set():
                try:
                    line = await reader.readline()
                except Exception as e:
                    logger.debug(StreamReadError(source, sub_source, str(e)).message)
                    break

                await self.queue.put(self.format_line(line))
                self.lines_sent += 1
        finally:
            close_stream(stream)
            logger.debug(f"Stopped tailing {self.descriptor.identifier} "
                         f"after {self.lines_sent} lines")

        return self.lines_sent
