"""
TCP Connection Helpers

The protocol runs over any duplex stream; these helpers establish one
over TCP. One side listens and accepts a single peer, the other dials.
Which side pushes and which pulls is agreed out of band.
"""

import asyncio
import logging
from typing import Optional, Tuple

from .exceptions import ConnectionFailedError

logger = logging.getLogger(__name__)

Channel = Tuple[asyncio.StreamReader, asyncio.StreamWriter]


async def connect(host: str, port: int, timeout: float = 10.0) -> Channel:
    """
    Dial a listening peer.

    Raises:
        ConnectionFailedError: refused, unreachable, or timed out
    """
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise ConnectionFailedError(f"Timed out connecting to {host}:{port}") from e
    except OSError as e:
        raise ConnectionFailedError(f"Failed to connect to {host}:{port}: {e}") from e

    logger.debug(f"Connected to {host}:{port}")
    return reader, writer


class Listener:
    """
    TCP listener that hands out exactly one connection.

    Later connections are closed immediately.
    """

    def __init__(self, host: str = '0.0.0.0', port: int = 8470):
        self.host = host
        self.port = port
        self.server: Optional[asyncio.AbstractServer] = None
        self._accepted: Optional[asyncio.Future] = None

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); useful when listening on port 0."""
        if self.server is None:
            raise RuntimeError("Listener not started")
        return self.server.sockets[0].getsockname()[:2]

    async def start(self):
        """Start listening."""
        self._accepted = asyncio.get_running_loop().create_future()
        self.server = await asyncio.start_server(
            self._handle_connection,
            self.host,
            self.port
        )
        logger.info(f"Listening on {self.address}")

    def stop(self):
        """Stop accepting connections; the accepted one stays open."""
        # wait_closed() would block until the accepted connection closes
        if self.server:
            self.server.close()
            self.server = None
            logger.debug("Listener stopped")

    async def accept(self) -> Channel:
        """Wait for the first peer to connect."""
        if self._accepted is None:
            raise RuntimeError("Listener not started")
        return await self._accepted

    def _handle_connection(self, reader: asyncio.StreamReader,
                           writer: asyncio.StreamWriter):
        peer = writer.get_extra_info('peername')
        if self._accepted.done():
            logger.warning(f"Rejecting extra connection from {peer}")
            writer.close()
            return

        logger.debug(f"Accepted connection from {peer}")
        self._accepted.set_result((reader, writer))


async def accept_one(host: str, port: int) -> Channel:
    """Listen on ``host:port`` until one peer connects, then stop listening."""
    listener = Listener(host, port)
    await listener.start()
    try:
        return await listener.accept()
    finally:
        listener.stop()


async def close(writer: asyncio.StreamWriter):
    """Close a connection and wait for it to shut down."""
    writer.close()
    try:
        await writer.wait_closed()
    except ConnectionError as e:
        logger.debug(f"Connection already reset on close: {e}")
