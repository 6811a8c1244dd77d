"""
pushpull - Point-to-point file transfer over any duplex byte stream.

One side pushes a local file, the other pulls it into a local file.
"""

from .exceptions import (
    ConnectionFailedError, DataIntegrityError, HandshakeError,
    LengthMismatchError, ProtocolViolation, TransferError,
)
from .session import Pull, Push, TransferRequest, perform, pull, push
from .transfer import BoundedReader, TransferResult, TransferStats

__version__ = '0.1.0'

__all__ = [
    'BoundedReader',
    'ConnectionFailedError',
    'DataIntegrityError',
    'HandshakeError',
    'LengthMismatchError',
    'ProtocolViolation',
    'Pull',
    'Push',
    'TransferError',
    'TransferRequest',
    'TransferResult',
    'TransferStats',
    'perform',
    'pull',
    'push',
]
