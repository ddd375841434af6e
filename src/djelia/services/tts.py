import functools
import os

from djelia.adapters.audio_source import save_audio
from djelia.adapters.http_dispatcher import AsyncHttpDispatcher, HttpDispatcher
from djelia.domain import endpoints
from djelia.domain.errors import DjeliaError, ErrorKind
from djelia.domain.models import VALID_TTS_V2_SPEAKERS, TTSRequest, TTSRequestV2, Versions
from djelia.domain.records import AudioChunkPipeline
from djelia.domain.stream import AsyncRecordStream, RecordStream

TTS_STREAMING_V2_ONLY = "Streaming is only available for TTS V2"

TTSPayload = TTSRequest | TTSRequestV2


def check_tts_request(request: TTSPayload, version: int) -> None:
    if version == Versions.v1:
        if not isinstance(request, TTSRequest):
            raise DjeliaError(ErrorKind.VALIDATION, "TTSRequest required for V1")
        request.validate()
        return

    if not isinstance(request, TTSRequestV2):
        raise DjeliaError(ErrorKind.VALIDATION, "TTSRequestV2 required for V2")
    request.validate()
    if request.named_speaker() is None:
        raise DjeliaError(
            ErrorKind.SPEAKER,
            "Description must contain one of the supported speakers: " + ", ".join(VALID_TTS_V2_SPEAKERS),
        )


def _check_streaming_version(version: int) -> None:
    if version not in endpoints.TTS_STREAM.versions:
        raise DjeliaError(ErrorKind.VALIDATION, TTS_STREAMING_V2_ONLY)


def _audio_pipeline(output_file: str | os.PathLike | None) -> AudioChunkPipeline:
    if output_file is None:
        return AudioChunkPipeline()
    return AudioChunkPipeline(on_complete=functools.partial(save_audio, output_file))


def _deliver(audio: bytes, output_file: str | os.PathLike | None) -> bytes | str:
    if output_file is None:
        return audio
    return save_audio(output_file, audio)


class TTSService:
    def __init__(self, dispatcher: HttpDispatcher) -> None:
        self._dispatcher = dispatcher

    def text_to_speech(
        self,
        request: TTSPayload,
        output_file: str | os.PathLike | None = None,
        version: int = Versions.v1,
    ) -> bytes | str:
        info = endpoints.TTS
        url = info.url(version)
        check_tts_request(request, version)
        response = self._dispatcher.request(info.method, url, json=request.to_dict())
        return _deliver(response.content, output_file)

    def stream(
        self,
        request: TTSRequestV2,
        output_file: str | os.PathLike | None = None,
        version: int = Versions.v2,
    ) -> RecordStream[bytes]:
        _check_streaming_version(version)
        check_tts_request(request, version)
        info = endpoints.TTS_STREAM
        transport = self._dispatcher.open_stream(info.method, info.url(version), json=request.to_dict())
        return RecordStream(transport, _audio_pipeline(output_file))


class AsyncTTSService:
    def __init__(self, dispatcher: AsyncHttpDispatcher) -> None:
        self._dispatcher = dispatcher

    async def text_to_speech(
        self,
        request: TTSPayload,
        output_file: str | os.PathLike | None = None,
        version: int = Versions.v1,
    ) -> bytes | str:
        info = endpoints.TTS
        url = info.url(version)
        check_tts_request(request, version)
        response = await self._dispatcher.request(info.method, url, json=request.to_dict())
        return _deliver(response.content, output_file)

    async def stream(
        self,
        request: TTSRequestV2,
        output_file: str | os.PathLike | None = None,
        version: int = Versions.v2,
    ) -> AsyncRecordStream[bytes]:
        _check_streaming_version(version)
        check_tts_request(request, version)
        info = endpoints.TTS_STREAM
        transport = await self._dispatcher.open_stream(info.method, info.url(version), json=request.to_dict())
        return AsyncRecordStream(transport, _audio_pipeline(output_file))
