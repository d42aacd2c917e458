"""Single consumer writing the multiplexed lines to the output sink."""

import asyncio
from typing import TextIO

from swarm_tail.core.exceptions import SinkWriteError


# Closed-channel marker, put on the queue once every tailer has finished
CLOSED = object()


class Aggregator:
    """Drains the shared queue into ``sink`` in receive order."""

    def __init__(self, sink: TextIO):
        self.sink = sink
        self.lines_written = 0

    def write(self, line: str) -> None:
        try:
            self.sink.write(line)
            self.sink.flush()
        except (OSError, ValueError) as e:
            raise SinkWriteError(str(e)) from e
        self.lines_written += 1

    async def drain(self, queue: asyncio.Queue) -> int:
        """
        Write lines until the queue is closed.

        Returns:
            Number of lines written

        Raises:
            SinkWriteError: If the sink rejects a write
        """
        while True:
            line = await queue.get()
            try:
                if line is CLOSED:
                    return self.lines_written
                self.write(line)
            finally:
                queue.task_done()
