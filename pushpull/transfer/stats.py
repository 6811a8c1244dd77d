"""
Transfer Statistics

Timing covers the whole operation, handshake included, so latency is a
round-trip figure rather than raw payload time.
"""

import time
from dataclasses import dataclass, field
from typing import Generic, TypeVar

MIB = 1024 * 1024

R = TypeVar('R')
W = TypeVar('W')


@dataclass(frozen=True)
class TransferStats:
    """Outcome of one completed transfer."""
    bytes: int
    throughput_mib_per_sec: float
    latency_ms: float

    @classmethod
    def from_elapsed(cls, byte_count: int, elapsed_seconds: float) -> 'TransferStats':
        """Build stats from a byte count and wall-clock duration."""
        if elapsed_seconds > 0:
            throughput = byte_count / elapsed_seconds / MIB
        else:
            throughput = 0.0
        return cls(
            bytes=byte_count,
            throughput_mib_per_sec=throughput,
            latency_ms=elapsed_seconds * 1000,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'bytes': self.bytes,
            'throughput_mib_per_sec': self.throughput_mib_per_sec,
            'latency_ms': self.latency_ms,
        }

    def __str__(self) -> str:
        return (
            f"bytes: {self.bytes}; "
            f"throughput: {self.throughput_mib_per_sec:.2f} MiB/s; "
            f"latency: {self.latency_ms:.2f} ms;"
        )


@dataclass
class TransferResult(Generic[R, W]):
    """Stats plus the stream halves, returned so the connection can be reused."""
    stats: TransferStats
    reader: R
    writer: W


@dataclass
class Stopwatch:
    """Monotonic wall-clock timer."""
    start_time: float = field(default_factory=time.perf_counter)

    @property
    def elapsed_seconds(self) -> float:
        return time.perf_counter() - self.start_time
