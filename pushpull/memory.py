"""
In-Memory Pipe

A connected pair of stream endpoints with no network underneath.
Each side gets an asyncio.StreamReader and a MemoryWriter; bytes written
on one side are fed straight into the other side's reader.

Flow control: each reader is given a transport stand-in, so the
StreamReader pauses it once more than ``2 * limit`` bytes are buffered
and resumes it when the buffer drains to ``limit``. The writer's
``drain()`` blocks while paused, as a socket writer would.

Must be created from inside a running event loop.
"""

import asyncio
from typing import Any, Tuple

# StreamReader default; pauses above 128KB buffered
DEFAULT_PIPE_LIMIT = 64 * 1024


class _FlowControl:
    """Transport stand-in that StreamReader pauses and resumes."""

    def __init__(self):
        self._resumed = asyncio.Event()
        self._resumed.set()

    def pause_reading(self):
        self._resumed.clear()

    def resume_reading(self):
        self._resumed.set()

    def is_reading(self) -> bool:
        return self._resumed.is_set()

    async def wait_resumed(self):
        await self._resumed.wait()


class MemoryWriter:
    """StreamWriter look-alike that feeds a peer's StreamReader."""

    def __init__(self, peer: asyncio.StreamReader, flow: _FlowControl):
        self._peer = peer
        self._flow = flow
        self._closed = False
        self.bytes_written = 0

    @property
    def paused(self) -> bool:
        """True while the peer has more buffered than it allows."""
        return not self._flow.is_reading()

    def write(self, data: bytes):
        if self._closed:
            raise BrokenPipeError("write to closed memory pipe")
        if data:
            self._peer.feed_data(data)
            self.bytes_written += len(data)

    async def drain(self):
        if self._closed:
            raise BrokenPipeError("drain on closed memory pipe")
        await self._flow.wait_resumed()

    def is_closing(self) -> bool:
        return self._closed

    def close(self):
        """Signal end of stream to the peer."""
        if not self._closed:
            self._closed = True
            self._flow.resume_reading()
            self._peer.feed_eof()

    async def wait_closed(self):
        return None

    def get_extra_info(self, name: str, default: Any = None) -> Any:
        return default


Endpoint = Tuple[asyncio.StreamReader, MemoryWriter]


def _half(limit: int) -> Tuple[asyncio.StreamReader, _FlowControl]:
    reader = asyncio.StreamReader(limit=limit)
    flow = _FlowControl()
    reader.set_transport(flow)
    return reader, flow


def memory_pipe(limit: int = DEFAULT_PIPE_LIMIT) -> Tuple[Endpoint, Endpoint]:
    """
    Create two connected endpoints.

    Args:
        limit: StreamReader limit; writers block in drain() once the
            peer holds more than twice this many unread bytes

    Returns:
        ((reader_a, writer_a), (reader_b, writer_b)) where writer_a feeds
        reader_b and writer_b feeds reader_a
    """
    reader_a, flow_a = _half(limit)
    reader_b, flow_b = _half(limit)
    return (reader_a, MemoryWriter(reader_b, flow_b)), (reader_b, MemoryWriter(reader_a, flow_a))
