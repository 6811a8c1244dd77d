"""Shared pytest fixtures for all tests."""

import os

import pytest


@pytest.fixture
def make_file(tmp_path):
    """
    Factory for source files with given content.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Callable (name, content) -> Path
    """
    def _make(name, content):
        path = tmp_path / name
        path.write_bytes(content)
        return path
    return _make


@pytest.fixture
def sample_file(make_file):
    """
    Create a sample binary file for push tests.

    Returns:
        Path to a 100KB file of random bytes
    """
    return make_file('sample.bin', os.urandom(100 * 1024))


class RecordingSink:
    """ByteSink that keeps everything written to it."""

    def __init__(self):
        self.data = bytearray()
        self.writes = []

    def write(self, data):
        self.data += data
        self.writes.append(bytes(data))

    async def drain(self):
        pass


@pytest.fixture
def recording_sink():
    """Create a sink that records writes instead of sending them."""
    return RecordingSink()
