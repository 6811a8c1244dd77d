"""
Transfer Module - Push/Pull Streaming Protocol

Frames a file as [8-byte length][payload] over any duplex byte stream.
"""

from .bounded import BoundedReader
from .protocol import (
    ByteSink, ByteSource, COMPLETION_SIGNAL, DEFAULT_BUFFER_SIZE,
    LENGTH_PREFIX_SIZE, copy_stream,
)
from .puller import pull_file
from .pusher import push_file
from .stats import TransferResult, TransferStats

__all__ = [
    'BoundedReader',
    'ByteSink',
    'ByteSource',
    'COMPLETION_SIGNAL',
    'DEFAULT_BUFFER_SIZE',
    'LENGTH_PREFIX_SIZE',
    'copy_stream',
    'pull_file',
    'push_file',
    'TransferResult',
    'TransferStats',
]
