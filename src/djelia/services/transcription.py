from typing import Any

from djelia.adapters.audio_source import AudioSource, audio_upload
from djelia.adapters.http_dispatcher import AsyncHttpDispatcher, HttpDispatcher, decode_json
from djelia.domain import endpoints
from djelia.domain.models import FrenchTranscription, TranscriptionSegment, TranscriptRecord, Versions
from djelia.domain.records import NdjsonRecordPipeline, normalize_record
from djelia.domain.stream import AsyncRecordStream, RecordStream

TRANSLATE_TO_FRENCH_PARAM = "translate_to_french"


def _transcription_result(data: Any, translate_to_french: bool) -> list[TranscriptionSegment] | FrenchTranscription:
    if translate_to_french:
        if isinstance(data, list):
            data = data[0] if data else {}
        return FrenchTranscription.from_dict(data if isinstance(data, dict) else {})
    return normalize_record(data, translate_to_french=False)


class TranscriptionService:
    def __init__(self, dispatcher: HttpDispatcher) -> None:
        self._dispatcher = dispatcher

    def transcribe(
        self,
        audio: AudioSource,
        translate_to_french: bool = False,
        version: int = Versions.v2,
    ) -> list[TranscriptionSegment] | FrenchTranscription:
        info = endpoints.TRANSCRIBE
        url = info.url(version)
        response = self._dispatcher.request(
            info.method,
            url,
            params={TRANSLATE_TO_FRENCH_PARAM: translate_to_french},
            files=audio_upload(audio),
        )
        return _transcription_result(decode_json(response), translate_to_french)

    def stream(
        self,
        audio: AudioSource,
        translate_to_french: bool = False,
        version: int = Versions.v2,
    ) -> RecordStream[TranscriptRecord]:
        info = endpoints.TRANSCRIBE_STREAM
        url = info.url(version)
        transport = self._dispatcher.open_stream(
            info.method,
            url,
            params={TRANSLATE_TO_FRENCH_PARAM: translate_to_french},
            files=audio_upload(audio),
        )
        return RecordStream(transport, NdjsonRecordPipeline(translate_to_french))


class AsyncTranscriptionService:
    def __init__(self, dispatcher: AsyncHttpDispatcher) -> None:
        self._dispatcher = dispatcher

    async def transcribe(
        self,
        audio: AudioSource,
        translate_to_french: bool = False,
        version: int = Versions.v2,
    ) -> list[TranscriptionSegment] | FrenchTranscription:
        info = endpoints.TRANSCRIBE
        url = info.url(version)
        response = await self._dispatcher.request(
            info.method,
            url,
            params={TRANSLATE_TO_FRENCH_PARAM: translate_to_french},
            files=audio_upload(audio),
        )
        return _transcription_result(decode_json(response), translate_to_french)

    async def stream(
        self,
        audio: AudioSource,
        translate_to_french: bool = False,
        version: int = Versions.v2,
    ) -> AsyncRecordStream[TranscriptRecord]:
        info = endpoints.TRANSCRIBE_STREAM
        url = info.url(version)
        transport = await self._dispatcher.open_stream(
            info.method,
            url,
            params={TRANSLATE_TO_FRENCH_PARAM: translate_to_french},
            files=audio_upload(audio),
        )
        return AsyncRecordStream(transport, NdjsonRecordPipeline(translate_to_french))
