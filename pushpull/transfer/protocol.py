"""
Wire Protocol

Design Decision: Framing
========================

Options Considered:
1. Stream until the connection closes
   - Simplest, no header at all
   - Connection cannot carry anything after the file

2. Delimiter-terminated payload
   - Needs escaping for binary files

3. Fixed-width length prefix
   - Receiver knows exactly where the payload ends
   - Connection stays usable afterwards

Decision: 8-byte big-endian length prefix + raw payload
- One frame per transfer, no magic number, no version field
- The receiver answers with a single completion byte once every
  payload byte is stored
- The transport below is trusted for ordering and reliability

Message Format:
```
Sender -> Receiver:
+-------------------+---------------------+
| Length (8B, >Q)   | Payload (L bytes)   |
+-------------------+---------------------+

Receiver -> Sender (after L bytes stored):
+-------------------+
| 0x00 (1B)         |
+-------------------+
```
"""

import asyncio
import logging
import struct
from typing import Awaitable, Callable, Protocol

from ..exceptions import HandshakeError

logger = logging.getLogger(__name__)

LENGTH_PREFIX_FORMAT = '>Q'
LENGTH_PREFIX_SIZE = struct.calcsize(LENGTH_PREFIX_FORMAT)  # 8 bytes

COMPLETION_SIGNAL = 0

# Copy buffer: 64KB
DEFAULT_BUFFER_SIZE = 64 * 1024


class ByteSource(Protocol):
    """Readable half of a duplex stream (asyncio.StreamReader compatible)."""

    async def read(self, n: int = -1) -> bytes:
        ...

    async def readexactly(self, n: int) -> bytes:
        ...


class ByteSink(Protocol):
    """Writable half of a duplex stream (asyncio.StreamWriter compatible)."""

    def write(self, data: bytes) -> None:
        ...

    async def drain(self) -> None:
        ...


class ChunkReader(Protocol):
    """Anything with an async ``read(n)`` that returns b'' at end of stream."""

    async def read(self, n: int = -1) -> bytes:
        ...


# Async callable that consumes one chunk
ChunkWriter = Callable[[bytes], Awaitable[object]]


def encode_length(length: int) -> bytes:
    """Pack a payload length into the 8-byte prefix."""
    return struct.pack(LENGTH_PREFIX_FORMAT, length)


async def write_length(sink: ByteSink, length: int):
    """Send the length prefix for a payload of ``length`` bytes."""
    sink.write(encode_length(length))
    await sink.drain()
    logger.debug(f"Sent length prefix: {length:,} bytes")


async def read_length(source: ByteSource) -> int:
    """
    Read the 8-byte length prefix.

    Raises:
        asyncio.IncompleteReadError: stream ended before 8 bytes arrived
    """
    raw = await source.readexactly(LENGTH_PREFIX_SIZE)
    length = struct.unpack(LENGTH_PREFIX_FORMAT, raw)[0]
    logger.debug(f"Received length prefix: {length:,} bytes")
    return length


async def send_completion(sink: ByteSink):
    """Tell the sender every payload byte has been stored."""
    sink.write(bytes([COMPLETION_SIGNAL]))
    await sink.drain()
    logger.debug("Sent completion signal")


async def wait_for_completion(source: ByteSource):
    """
    Block until the receiver confirms the transfer.

    Raises:
        HandshakeError: wrong byte value, or the stream closed first
    """
    try:
        raw = await source.readexactly(1)
    except asyncio.IncompleteReadError as e:
        raise HandshakeError("stream closed before completion signal") from e

    if raw[0] != COMPLETION_SIGNAL:
        raise HandshakeError(f"unexpected completion byte: 0x{raw[0]:02x}")

    logger.debug("Received completion signal")


def sink_writer(sink: ByteSink) -> ChunkWriter:
    """Adapt a stream sink into a chunk writer that respects backpressure."""
    async def write(chunk: bytes):
        sink.write(chunk)
        await sink.drain()
    return write


async def copy_stream(source: ChunkReader, write: ChunkWriter,
                      buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """
    Copy from ``source`` until it reports end of stream.

    Returns:
        Number of bytes copied
    """
    copied = 0
    while True:
        chunk = await source.read(buffer_size)
        if not chunk:
            return copied
        await write(chunk)
        copied += len(chunk)
