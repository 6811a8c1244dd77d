"""
File Puller

Receives one length-prefixed frame into a local file.

Pull Flow:
1. Remove any old file at the destination
2. Create the destination
3. Read the length prefix
4. Copy through a BoundedReader until the frame boundary
5. Hand the raw stream back for the completion handshake
"""

import logging
from pathlib import Path
from typing import Tuple, Union

import aiofiles
import aiofiles.os

from .bounded import BoundedReader
from .protocol import ByteSource, DEFAULT_BUFFER_SIZE, copy_stream, read_length
from ..exceptions import LengthMismatchError

logger = logging.getLogger(__name__)


async def remove_if_exists(path: Union[str, Path]):
    """
    Delete ``path`` if present.

    Failures other than a missing file are logged and left for the
    following create to surface.
    """
    try:
        await aiofiles.os.remove(path)
        logger.debug(f"Removed existing file {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")


async def pull_file(destination_path: Union[str, Path], source: ByteSource,
                    buffer_size: int = DEFAULT_BUFFER_SIZE) -> Tuple[int, ByteSource]:
    """
    Store one frame from ``source`` at ``destination_path``.

    The file is closed (and flushed) before this returns.

    Returns:
        (bytes received, the raw source stream)

    Raises:
        OSError: destination cannot be created or written
        asyncio.IncompleteReadError: stream ended mid-prefix or mid-payload
        LengthMismatchError: copied byte count disagrees with the prefix
    """
    await remove_if_exists(destination_path)

    async with aiofiles.open(destination_path, 'wb') as f:
        length = await read_length(source)
        logger.debug(f"Pulling {length:,} bytes into {destination_path}")

        bounded = BoundedReader(source, length)
        received = await copy_stream(bounded, f.write, buffer_size)

    if received != length:
        raise LengthMismatchError(declared=length, received=received)

    return received, bounded.into_inner()
