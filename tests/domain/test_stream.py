import gc

import pytest

from conftest import FakeAsyncByteStream, FakeByteStream, ndjson, split_every
from djelia.domain.errors import DjeliaError, ErrorKind
from djelia.domain.models import FrenchTranscription, TranscriptionSegment
from djelia.domain.records import AudioChunkPipeline, NdjsonRecordPipeline
from djelia.domain.stream import AsyncRecordStream, RecordStream


def ten_records() -> list[bytes]:
    return [ndjson({"text": f"segment {i}", "start": float(i), "end": float(i + 1)}) for i in range(10)]


class TestRecordStream:
    def test_yields_records_in_order(self, segment_lines):
        transport = FakeByteStream(split_every(ndjson(*segment_lines), 7))
        stream = RecordStream(transport, NdjsonRecordPipeline())

        records = list(stream)

        assert [r.text for r in records] == [line["text"] for line in segment_lines]
        assert transport.close_calls == 1
        assert stream.closed

    def test_end_to_end_object_split_across_fragments(self):
        transport = FakeByteStream([
            b'{"text":"hi","start":0.0,"end":1.0}\n{"text":"b',
            b'ye","start":1.0,"end":2.0}\n',
        ])
        stream = RecordStream(transport, NdjsonRecordPipeline())

        assert next(stream) == TranscriptionSegment(text="hi", start=0.0, end=1.0)
        assert transport.pulled == 1
        assert next(stream) == TranscriptionSegment(text="bye", start=1.0, end=2.0)
        assert transport.pulled == 2
        with pytest.raises(StopIteration):
            next(stream)

    def test_malformed_line_does_not_abort(self):
        transport = FakeByteStream([b'{"text":"a"}\nnot json\n{"text":"b"}\n'])
        records = list(RecordStream(transport, NdjsonRecordPipeline()))
        assert [r.text for r in records] == ["a", "b"]

    def test_last_line_without_terminator_is_flushed(self):
        transport = FakeByteStream([b'{"text":"a"}\n{"text"', b':"b"}'])
        records = list(RecordStream(transport, NdjsonRecordPipeline()))
        assert [r.text for r in records] == ["a", "b"]

    def test_mode_is_fixed_for_the_stream(self):
        line = b'{"text":"a","start":0,"end":1}\n'
        french = list(RecordStream(FakeByteStream([line, line]), NdjsonRecordPipeline(True)))
        plain = list(RecordStream(FakeByteStream([line, line]), NdjsonRecordPipeline(False)))
        assert all(isinstance(r, FrenchTranscription) for r in french)
        assert all(isinstance(r, TranscriptionSegment) for r in plain)

    def test_does_not_prefetch_beyond_one_fragment(self):
        transport = FakeByteStream(ten_records())
        stream = RecordStream(transport, NdjsonRecordPipeline())

        next(stream)
        next(stream)

        assert transport.pulled == 2

    def test_close_after_first_record_releases_transport(self):
        transport = FakeByteStream(ten_records())
        stream = RecordStream(transport, NdjsonRecordPipeline())

        assert next(stream).text == "segment 0"
        stream.close()

        assert transport.close_calls == 1
        assert transport.pulled == 1
        with pytest.raises(StopIteration):
            next(stream)

    def test_leaving_with_block_releases_transport(self):
        transport = FakeByteStream(ten_records())
        with RecordStream(transport, NdjsonRecordPipeline()) as stream:
            for record in stream:
                break
        assert record.text == "segment 0"
        assert transport.close_calls == 1

    def test_abandoned_stream_is_closed_when_collected(self):
        transport = FakeByteStream(ten_records())
        stream = RecordStream(transport, NdjsonRecordPipeline())
        next(stream)

        del stream
        gc.collect()

        assert transport.close_calls == 1

    def test_close_is_idempotent(self):
        transport = FakeByteStream(ten_records())
        stream = RecordStream(transport, NdjsonRecordPipeline())
        stream.close()
        stream.close()
        list(stream)
        assert transport.close_calls == 1

    def test_transport_error_is_terminal_and_releases_transport(self):
        error = DjeliaError(ErrorKind.GENERIC, "Request failed: connection reset")
        transport = FakeByteStream([b'{"text":"a"}\n'], error=error)
        stream = RecordStream(transport, NdjsonRecordPipeline())

        assert next(stream).text == "a"
        with pytest.raises(DjeliaError) as exc_info:
            next(stream)

        assert exc_info.value.kind is ErrorKind.GENERIC
        assert transport.close_calls == 1
        with pytest.raises(StopIteration):
            next(stream)

    def test_not_restartable(self):
        stream = RecordStream(FakeByteStream([b'{"text":"a"}\n']), NdjsonRecordPipeline())
        assert len(list(stream)) == 1
        assert list(stream) == []

    def test_audio_chunks_pass_through(self):
        transport = FakeByteStream([b"\x00\x01", b"", b"\n\x02"])
        chunks = list(RecordStream(transport, AudioChunkPipeline()))
        assert chunks == [b"\x00\x01", b"\n\x02"]
        assert transport.close_calls == 1


class TestAsyncRecordStream:
    @pytest.mark.asyncio
    async def test_yields_records_in_order(self, segment_lines):
        transport = FakeAsyncByteStream(split_every(ndjson(*segment_lines), 5))
        stream = AsyncRecordStream(transport, NdjsonRecordPipeline())

        records = [record async for record in stream]

        assert [r.text for r in records] == [line["text"] for line in segment_lines]
        assert transport.close_calls == 1

    @pytest.mark.asyncio
    async def test_array_line_expands(self):
        transport = FakeAsyncByteStream([b'[{"text":"x"},{"text":"y"}]'])
        records = [r async for r in AsyncRecordStream(transport, NdjsonRecordPipeline())]
        assert [r.text for r in records] == ["x", "y"]

    @pytest.mark.asyncio
    async def test_early_exit_in_async_with_releases_transport(self):
        transport = FakeAsyncByteStream(ten_records())
        async with AsyncRecordStream(transport, NdjsonRecordPipeline()) as stream:
            async for record in stream:
                break

        assert record.text == "segment 0"
        assert transport.pulled == 1
        assert transport.close_calls == 1

    @pytest.mark.asyncio
    async def test_transport_error_releases_transport(self):
        error = DjeliaError(ErrorKind.GENERIC, "Request failed: boom")
        transport = FakeAsyncByteStream([b'{"text":"a"}'], error=error)
        stream = AsyncRecordStream(transport, NdjsonRecordPipeline())

        with pytest.raises(DjeliaError):
            async for _ in stream:
                pass

        assert transport.close_calls == 1
        assert stream.closed
