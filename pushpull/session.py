"""
Transfer Session - Push/Pull Orchestration

Runs one transfer end to end over an already established stream:
- Push: send the file frame, then wait for the completion signal
- Pull: receive the file frame, then send the completion signal

Both sides return a TransferResult holding the stats and the raw stream
halves, so the caller can keep using the connection.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .transfer.protocol import (
    ByteSink, ByteSource, DEFAULT_BUFFER_SIZE, send_completion, wait_for_completion,
)
from .transfer.puller import pull_file
from .transfer.pusher import push_file
from .transfer.stats import Stopwatch, TransferResult, TransferStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Push:
    """Send the file at ``source_path`` to the peer."""
    source_path: Path

    async def perform(self, reader: ByteSource, writer: ByteSink,
                      buffer_size: int = DEFAULT_BUFFER_SIZE) -> TransferResult:
        timer = Stopwatch()

        sent = await push_file(self.source_path, writer, buffer_size)
        await wait_for_completion(reader)

        stats = TransferStats.from_elapsed(sent, timer.elapsed_seconds)
        logger.info(f"Pushed {self.source_path}: {stats}")
        return TransferResult(stats=stats, reader=reader, writer=writer)


@dataclass(frozen=True)
class Pull:
    """Receive a file from the peer into ``destination_path``."""
    destination_path: Path

    async def perform(self, reader: ByteSource, writer: ByteSink,
                      buffer_size: int = DEFAULT_BUFFER_SIZE) -> TransferResult:
        timer = Stopwatch()

        received, reader = await pull_file(self.destination_path, reader, buffer_size)
        await send_completion(writer)

        stats = TransferStats.from_elapsed(received, timer.elapsed_seconds)
        logger.info(f"Pulled {self.destination_path}: {stats}")
        return TransferResult(stats=stats, reader=reader, writer=writer)


TransferRequest = Union[Push, Pull]


async def perform(request: TransferRequest, reader: ByteSource, writer: ByteSink,
                  buffer_size: int = DEFAULT_BUFFER_SIZE) -> TransferResult:
    """Run ``request`` over the given stream halves."""
    return await request.perform(reader, writer, buffer_size)


async def push(source_path: Union[str, Path], writer: ByteSink, reader: ByteSource,
               buffer_size: int = DEFAULT_BUFFER_SIZE) -> TransferStats:
    """Push a file and return only the stats."""
    result = await Push(Path(source_path)).perform(reader, writer, buffer_size)
    return result.stats


async def pull(destination_path: Union[str, Path], writer: ByteSink, reader: ByteSource,
               buffer_size: int = DEFAULT_BUFFER_SIZE) -> TransferStats:
    """Pull a file and return only the stats."""
    result = await Pull(Path(destination_path)).perform(reader, writer, buffer_size)
    return result.stats
