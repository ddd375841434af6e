import json
import logging
from collections.abc import Callable
from typing import Any

from djelia.domain.line_decoder import LineBufferDecoder
from djelia.domain.models import FrenchTranscription, TranscriptionSegment, TranscriptRecord

logger = logging.getLogger(__name__)


class MalformedLineError(ValueError):
    def __init__(self, line: str) -> None:
        super().__init__(f"Line is not valid JSON: {line[:80]}")
        self.line = line


def parse_record(line: str) -> Any:
    try:
        return json.loads(line.strip())
    except json.JSONDecodeError as exc:
        raise MalformedLineError(line) from exc


def normalize_record(raw: Any, translate_to_french: bool) -> list[TranscriptRecord]:
    """Map one parsed line to domain records.

    Arrays expand element by element in order. Items that are not JSON
    objects (``null``, numbers, strings) produce no record. Missing fields
    become None; nothing here raises.
    """
    items = raw if isinstance(raw, list) else [raw]
    record_type = FrenchTranscription if translate_to_french else TranscriptionSegment
    return [record_type.from_dict(item) for item in items if isinstance(item, dict)]


class NdjsonRecordPipeline:
    """decode -> parse -> normalize for one transcription stream."""

    def __init__(self, translate_to_french: bool = False) -> None:
        self._translate_to_french = translate_to_french
        self._decoder = LineBufferDecoder()
        self._skipped_lines = 0

    @property
    def translate_to_french(self) -> bool:
        return self._translate_to_french

    @property
    def skipped_lines(self) -> int:
        return self._skipped_lines

    def feed(self, fragment: bytes | str) -> list[TranscriptRecord]:
        records: list[TranscriptRecord] = []
        for line in self._decoder.feed(fragment):
            records.extend(self._process_line(line))
        return records

    def finish(self) -> list[TranscriptRecord]:
        line = self._decoder.flush()
        if line is None:
            return []
        return self._process_line(line)

    def _process_line(self, line: str) -> list[TranscriptRecord]:
        if not line.strip():
            return []
        try:
            raw = parse_record(line)
        except MalformedLineError:
            self._skipped_lines += 1
            logger.debug("Skipping malformed line: %s", line[:80])
            return []
        return normalize_record(raw, self._translate_to_french)


class AudioChunkPipeline:
    """Forwards raw audio chunks untouched; no line splitting applies.

    When ``on_complete`` is given, the chunks are collected and handed to it
    once the stream reaches its end.
    """

    def __init__(self, on_complete: Callable[[bytes], Any] | None = None) -> None:
        self._on_complete = on_complete
        self._chunks: list[bytes] = []

    def feed(self, fragment: bytes) -> list[bytes]:
        if not fragment:
            return []
        if self._on_complete is not None:
            self._chunks.append(fragment)
        return [fragment]

    def finish(self) -> list[bytes]:
        if self._on_complete is not None:
            audio = b"".join(self._chunks)
            self._chunks = []
            self._on_complete(audio)
        return []
