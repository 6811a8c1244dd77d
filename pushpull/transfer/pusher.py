"""
File Pusher

Sends a local file as one length-prefixed frame.
"""

import logging
import os
from pathlib import Path
from typing import Union

import aiofiles

from .protocol import ByteSink, DEFAULT_BUFFER_SIZE, copy_stream, sink_writer, write_length
from ..exceptions import DataIntegrityError

logger = logging.getLogger(__name__)


async def push_file(source_path: Union[str, Path], sink: ByteSink,
                    buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """
    Frame a file onto ``sink``.

    The length is taken from the open file's metadata, not by reading
    the file twice.

    Returns:
        Number of payload bytes sent

    Raises:
        FileNotFoundError / PermissionError: source cannot be opened
        DataIntegrityError: file size changed while it was being sent
    """
    async with aiofiles.open(source_path, 'rb') as f:
        length = os.fstat(f.fileno()).st_size
        logger.debug(f"Pushing {source_path} ({length:,} bytes)")

        await write_length(sink, length)
        sent = await copy_stream(f, sink_writer(sink), buffer_size)

    if sent != length:
        raise DataIntegrityError(declared=length, sent=sent)

    return sent
