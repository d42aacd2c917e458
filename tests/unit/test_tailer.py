"""
Unit tests for the line reader and source tailer
"""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from swarm_tail.core.exceptions import StreamOpenError
from swarm_tail.logs.base import SourceDescriptor
from swarm_tail.logs.colors import ColorPicker
from swarm_tail.logs.tailer import LineReader, SourceTailer, close_stream


class TestLineReader:
    """Test cases for LineReader"""

    @pytest.mark.asyncio
    async def test_lines_across_chunks(self):
        """Lines split over several chunks are reassembled"""
        reader = LineReader([b"he", b"llo\nwor", b"ld\nsecond", b" half\n"])

        assert await reader.readline() == b"hello\n"
        assert await reader.readline() == b"world\n"
        assert await reader.readline() == b"second half\n"

    @pytest.mark.asyncio
    async def test_several_lines_in_one_chunk(self):
        reader = LineReader([b"a\nb\nc\n"])

        assert [await reader.readline() for _ in range(3)] == [b"a\n", b"b\n", b"c\n"]

    @pytest.mark.asyncio
    async def test_trailing_fragment_is_dropped(self):
        """End of stream without a terminator raises EOFError"""
        reader = LineReader([b"complete\n", b"partial"])

        assert await reader.readline() == b"complete\n"
        with pytest.raises(EOFError):
            await reader.readline()

    @pytest.mark.asyncio
    async def test_text_chunks(self):
        reader = LineReader(["déjà vu\n"])
        assert await reader.readline() == "déjà vu\n".encode('utf-8')

    @pytest.mark.asyncio
    async def test_read_error_propagates(self, fake_stream):
        reader = LineReader(fake_stream([b"one\n"], error=ConnectionError("reset")))

        assert await reader.readline() == b"one\n"
        with pytest.raises(ConnectionError):
            await reader.readline()


class TestSourceTailer:
    """Test cases for SourceTailer"""

    @pytest.fixture
    def descriptor(self):
        return SourceDescriptor("api", "stdout")

    @pytest.fixture
    def picker(self):
        return ColorPicker(enabled=False)

    def make_tailer(self, descriptor, stream, picker, queue, **kwargs):
        def open_stream(source, sub_source, follow):
            if isinstance(stream, Exception):
                raise stream
            return stream

        return SourceTailer(descriptor, open_stream, picker, queue, **kwargs)

    @staticmethod
    def drain(queue):
        lines = []
        while not queue.empty():
            lines.append(queue.get_nowait())
        return lines

    @pytest.mark.asyncio
    async def test_emits_formatted_lines(self, descriptor, picker, fake_stream):
        """Each line is prefixed with the identifier and keeps its terminator"""
        queue = asyncio.Queue()
        stream = fake_stream([b"first\n", b"second\n"])
        tailer = self.make_tailer(descriptor, stream, picker, queue)

        assert await tailer.run() == 2
        assert self.drain(queue) == ["[api stdout] first\n", "[api stdout] second\n"]
        assert stream.closed

    @pytest.mark.asyncio
    async def test_colored_prefix(self, descriptor, fake_stream):
        queue = asyncio.Queue()
        picker = ColorPicker()
        tailer = self.make_tailer(descriptor, fake_stream([b"hi\n"]), picker, queue)

        await tailer.run()

        (line,) = self.drain(queue)
        assert line == f"{picker.colorize('[api stdout]')} hi\n"
        assert "[api stdout]" in picker.assigned()

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_replaced(self, descriptor, picker, fake_stream):
        queue = asyncio.Queue()
        tailer = self.make_tailer(descriptor, fake_stream([b"bad \xff byte\n"]), picker, queue)

        await tailer.run()

        assert self.drain(queue) == ["[api stdout] bad � byte\n"]

    @pytest.mark.asyncio
    async def test_read_failure_ends_quietly(self, descriptor, picker, fake_stream):
        """A mid-stream error stops the tailer without raising"""
        queue = asyncio.Queue()
        stream = fake_stream([b"one\n"], error=ConnectionError("reset by peer"))
        tailer = self.make_tailer(descriptor, stream, picker, queue)

        assert await tailer.run() == 1
        assert self.drain(queue) == ["[api stdout] one\n"]
        assert stream.closed

    @pytest.mark.asyncio
    async def test_open_failure_ends_quietly(self, descriptor, picker):
        queue = asyncio.Queue()
        tailer = self.make_tailer(
            descriptor, StreamOpenError("api", "stdout", "container not found"), picker, queue
        )

        assert await tailer.run() == 0
        assert queue.empty()

    @pytest.mark.asyncio
    async def test_unexpected_open_failure_ends_quietly(self, descriptor, picker):
        queue = asyncio.Queue()
        tailer = self.make_tailer(descriptor, RuntimeError("boom"), picker, queue)

        assert await tailer.run() == 0

    @pytest.mark.asyncio
    async def test_stop_event(self, descriptor, picker, fake_stream):
        """A set stop event ends the loop before reading"""
        queue = asyncio.Queue()
        stop_event = asyncio.Event()
        stop_event.set()
        stream = fake_stream([b"never\n"])
        tailer = self.make_tailer(descriptor, stream, picker, queue, stop_event=stop_event)

        assert await tailer.run() == 0
        assert queue.empty()
        assert stream.closed

    @pytest.mark.asyncio
    async def test_cancellation_closes_stream(self, descriptor, picker, blocking_stream):
        """Cancelling a tailer blocked on a read closes its stream"""
        queue = asyncio.Queue()
        tailer = self.make_tailer(descriptor, blocking_stream, picker, queue)

        task = asyncio.create_task(tailer.run())
        assert await asyncio.to_thread(blocking_stream.reading.wait, 5)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert blocking_stream.closed

    @pytest.mark.asyncio
    async def test_reads_run_on_given_executor(self, descriptor, picker):
        """Open and reads go through the executor handed to the tailer"""
        queue = asyncio.Queue()
        threads = []

        def chunks():
            threads.append(threading.current_thread().name)
            yield b"one\n"

        def open_stream(source, sub_source, follow):
            threads.append(threading.current_thread().name)
            return chunks()

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="tail-test") as executor:
            tailer = SourceTailer(descriptor, open_stream, picker, queue, executor=executor)
            assert await tailer.run() == 1

        assert len(threads) == 2
        assert all(name.startswith("tail-test") for name in threads)

    @pytest.mark.asyncio
    async def test_full_queue_blocks(self, descriptor, picker, fake_stream):
        """Lines wait for room in the queue instead of being dropped"""
        queue = asyncio.Queue(maxsize=1)
        tailer = self.make_tailer(descriptor, fake_stream([b"1\n", b"2\n", b"3\n"]), picker, queue)

        task = asyncio.create_task(tailer.run())
        received = []
        while len(received) < 3:
            received.append(await asyncio.wait_for(queue.get(), 5))

        assert await task == 3
        assert received == ["[api stdout] 1\n", "[api stdout] 2\n", "[api stdout] 3\n"]


class FailingClose:
    def close(self):
        raise OSError("already closed")


def test_close_stream_swallows_errors():
    close_stream(FailingClose())
    close_stream(object())
