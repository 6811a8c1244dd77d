"""End-to-end push/pull tests over the in-memory pipe."""

import asyncio
import logging
import os

import pytest

from pushpull.exceptions import DataIntegrityError, HandshakeError
from pushpull.memory import memory_pipe
from pushpull.session import Pull, Push, perform, pull, push
from pushpull.transfer.protocol import encode_length, read_length
from pushpull.transfer.stats import MIB


async def run_transfer(source, destination, buffer_size=4096):
    (push_reader, push_writer), (pull_reader, pull_writer) = memory_pipe()
    return await asyncio.gather(
        perform(Push(source), push_reader, push_writer, buffer_size),
        perform(Pull(destination), pull_reader, pull_writer, buffer_size),
    )


class TestRoundTrip:

    @pytest.mark.asyncio
    @pytest.mark.parametrize('size', [0, 1, 4096, 100_003])
    async def test_destination_matches_source(self, make_file, tmp_path, size):
        content = os.urandom(size)
        source = make_file('source.bin', content)
        destination = tmp_path / 'destination.bin'

        pushed, pulled = await run_transfer(source, destination)

        assert destination.read_bytes() == content
        assert pushed.stats.bytes == size
        assert pulled.stats.bytes == size

    @pytest.mark.asyncio
    async def test_zero_length_creates_empty_file(self, make_file, tmp_path):
        source = make_file('empty.bin', b'')
        destination = tmp_path / 'out.bin'

        pushed, pulled = await run_transfer(source, destination)

        assert destination.exists()
        assert destination.stat().st_size == 0
        assert pushed.stats.bytes == pulled.stats.bytes == 0

    @pytest.mark.asyncio
    async def test_overwrites_longer_existing_destination(self, make_file, tmp_path):
        source = make_file('short.bin', b'new content')
        destination = make_file('existing.bin', b'old' * 10_000)

        await run_transfer(source, destination)

        assert destination.read_bytes() == b'new content'

    @pytest.mark.asyncio
    async def test_result_returns_raw_streams(self, sample_file, tmp_path):
        (push_reader, push_writer), (pull_reader, pull_writer) = memory_pipe()

        pushed, pulled = await asyncio.gather(
            Push(sample_file).perform(push_reader, push_writer),
            Pull(tmp_path / 'out.bin').perform(pull_reader, pull_writer),
        )

        assert pushed.reader is push_reader
        assert pushed.writer is push_writer
        assert pulled.reader is pull_reader
        assert pulled.writer is pull_writer

    @pytest.mark.asyncio
    async def test_connection_reusable_after_transfer(self, make_file, tmp_path):
        first = make_file('first.bin', b'first file')
        second = make_file('second.bin', b'second, longer file')
        (a_reader, a_writer), (b_reader, b_writer) = memory_pipe()

        await asyncio.gather(
            Push(first).perform(a_reader, a_writer),
            Pull(tmp_path / 'one.bin').perform(b_reader, b_writer),
        )
        # Reverse direction on the same pipe
        await asyncio.gather(
            Push(second).perform(b_reader, b_writer),
            Pull(tmp_path / 'two.bin').perform(a_reader, a_writer),
        )

        assert (tmp_path / 'one.bin').read_bytes() == b'first file'
        assert (tmp_path / 'two.bin').read_bytes() == b'second, longer file'

    @pytest.mark.asyncio
    async def test_stats_only_helpers(self, sample_file, tmp_path):
        (push_reader, push_writer), (pull_reader, pull_writer) = memory_pipe()

        pushed, pulled = await asyncio.gather(
            push(sample_file, push_writer, push_reader),
            pull(tmp_path / 'out.bin', pull_writer, pull_reader),
        )

        assert pushed.bytes == pulled.bytes == sample_file.stat().st_size


class TestStatsSanity:

    @pytest.mark.asyncio
    async def test_throughput_consistent_with_latency(self, sample_file, tmp_path):
        pushed, pulled = await run_transfer(sample_file, tmp_path / 'out.bin')

        for stats in (pushed.stats, pulled.stats):
            assert stats.latency_ms > 0
            elapsed = stats.latency_ms / 1000
            assert stats.throughput_mib_per_sec == pytest.approx(
                stats.bytes / elapsed / MIB, rel=1e-9
            )


class TestHandshakeOrdering:

    @pytest.mark.asyncio
    async def test_pull_signals_after_file_is_complete(self, tmp_path):
        content = os.urandom(10_000)
        destination = tmp_path / 'out.bin'

        class SnapshotSink:
            def __init__(self):
                self.snapshots = []

            def write(self, data):
                self.snapshots.append((bytes(data), destination.read_bytes()))

            async def drain(self):
                pass

        reader = asyncio.StreamReader()
        reader.feed_data(encode_length(len(content)) + content + b'trailer')
        sink = SnapshotSink()

        result = await Pull(destination).perform(reader, sink, buffer_size=1024)

        assert sink.snapshots == [(b'\x00', content)]
        assert await result.reader.readexactly(7) == b'trailer'

    @pytest.mark.asyncio
    async def test_push_waits_for_completion_signal(self, sample_file):
        (push_reader, push_writer), (peer_reader, peer_writer) = memory_pipe()
        task = asyncio.create_task(Push(sample_file).perform(push_reader, push_writer))

        length = await read_length(peer_reader)
        payload = await peer_reader.readexactly(length)
        for _ in range(10):
            await asyncio.sleep(0)

        assert payload == sample_file.read_bytes()
        assert not task.done()

        peer_writer.write(b'\x00')
        result = await task
        assert result.stats.bytes == length


class TestFailures:

    @pytest.mark.asyncio
    async def test_wrong_handshake_byte(self, sample_file, recording_sink):
        reader = asyncio.StreamReader()
        reader.feed_data(b'\x01')

        with pytest.raises(HandshakeError):
            await Push(sample_file).perform(reader, recording_sink)

    @pytest.mark.asyncio
    async def test_peer_closes_before_handshake(self, sample_file, recording_sink):
        reader = asyncio.StreamReader()
        reader.feed_eof()

        with pytest.raises(HandshakeError):
            await Push(sample_file).perform(reader, recording_sink)

        # The whole frame went out before the handshake was awaited
        assert len(recording_sink.data) == 8 + sample_file.stat().st_size

    @pytest.mark.asyncio
    async def test_missing_source_file(self, tmp_path, recording_sink):
        reader = asyncio.StreamReader()

        with pytest.raises(FileNotFoundError):
            await Push(tmp_path / 'missing.bin').perform(reader, recording_sink)

        assert recording_sink.writes == []

    @pytest.mark.asyncio
    async def test_source_growing_during_push(self, make_file):
        source = make_file('growing.bin', b'a' * 100)

        class GrowingSink:
            def __init__(self):
                self.grown = False

            def write(self, data):
                if not self.grown:
                    with open(source, 'ab') as f:
                        f.write(b'b' * 5)
                    self.grown = True

            async def drain(self):
                pass

        with pytest.raises(DataIntegrityError) as exc_info:
            await Push(source).perform(asyncio.StreamReader(), GrowingSink(), buffer_size=10)

        assert exc_info.value.declared == 100
        assert exc_info.value.sent == 105

    @pytest.mark.asyncio
    async def test_pull_short_payload_sends_no_signal(self, tmp_path, recording_sink):
        reader = asyncio.StreamReader()
        reader.feed_data(encode_length(10) + b'abc')
        reader.feed_eof()

        with pytest.raises(asyncio.IncompleteReadError):
            await Pull(tmp_path / 'out.bin').perform(reader, recording_sink)

        assert recording_sink.writes == []

    @pytest.mark.asyncio
    async def test_pull_truncated_prefix(self, tmp_path, recording_sink):
        reader = asyncio.StreamReader()
        reader.feed_data(b'\x00\x00')
        reader.feed_eof()

        with pytest.raises(EOFError):
            await Pull(tmp_path / 'out.bin').perform(reader, recording_sink)

    @pytest.mark.asyncio
    async def test_pull_into_missing_directory(self, tmp_path, recording_sink):
        reader = asyncio.StreamReader()
        reader.feed_data(encode_length(0))

        with pytest.raises(FileNotFoundError):
            await Pull(tmp_path / 'no' / 'such' / 'dir.bin').perform(reader, recording_sink)

    @pytest.mark.asyncio
    async def test_write_to_closed_pipe(self, sample_file):
        (push_reader, push_writer), _ = memory_pipe()
        push_writer.close()

        with pytest.raises(BrokenPipeError):
            await Push(sample_file).perform(push_reader, push_writer)


class TestDestinationHandling:

    @pytest.mark.asyncio
    async def test_directory_destination_surfaces_create_error(
            self, tmp_path, recording_sink, caplog):
        destination = tmp_path / 'a_directory'
        destination.mkdir()
        reader = asyncio.StreamReader()
        reader.feed_data(encode_length(0))

        with caplog.at_level(logging.WARNING, logger='pushpull.transfer.puller'):
            with pytest.raises(IsADirectoryError):
                await Pull(destination).perform(reader, recording_sink)

        assert 'Could not remove' in caplog.text
        assert destination.is_dir()
        assert recording_sink.writes == []
