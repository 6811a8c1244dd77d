"""
Bounded Reader

Exposes only the next N bytes of a stream, then reports end of stream.

Pull copies the payload with a generic "read until EOF" loop. Without a
bound that loop would swallow whatever the peer sends after the payload,
so the reader is capped at the declared length and hands the raw stream
back once the frame is consumed.
"""

import logging

from .protocol import ByteSource

logger = logging.getLogger(__name__)


class BoundedReader:
    """
    Stream adapter limited to a fixed byte budget.

    States:
    - Active: remaining > 0, reads are served from the source
    - Exhausted: remaining == 0, every read returns b''

    The reader owns the source until ``into_inner()`` is called.
    """

    def __init__(self, source: ByteSource, limit: int):
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        self._source = source
        self._remaining = limit

    @property
    def remaining(self) -> int:
        """Bytes left before the frame boundary."""
        return self._remaining

    def at_eof(self) -> bool:
        return self._remaining == 0

    async def read(self, n: int = -1) -> bytes:
        """
        Read up to ``n`` bytes without crossing the frame boundary.

        A negative ``n`` reads everything that is left. Requests are
        served with an exact read, so a source that closes mid-frame
        fails the read instead of returning a short chunk.

        Raises:
            asyncio.IncompleteReadError: source ended before the boundary
        """
        if n < 0:
            n = self._remaining
        n = min(n, self._remaining)
        if n == 0:
            return b''

        data = await self._source.readexactly(n)
        self._remaining -= n

        if self._remaining == 0:
            logger.debug("Frame boundary reached")
        return data

    def into_inner(self) -> ByteSource:
        """Give the underlying stream back to the caller."""
        return self._source
