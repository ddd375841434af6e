import logging
import os

import httpx

from djelia.adapters.audio_source import AudioSource
from djelia.adapters.auth import Auth
from djelia.adapters.http_dispatcher import AsyncHttpDispatcher, HttpDispatcher
from djelia.config import DjeliaConfig
from djelia.domain.models import TranscriptRecord, TTSRequestV2, Versions
from djelia.domain.stream import AsyncRecordStream, RecordStream
from djelia.services.transcription import AsyncTranscriptionService, TranscriptionService
from djelia.services.translation import AsyncTranslationService, TranslationService
from djelia.services.tts import AsyncTTSService, TTSService

logger = logging.getLogger(__name__)


def _resolve_config(
    api_key: str | None,
    base_url: str | None,
    config: DjeliaConfig | None,
) -> tuple[DjeliaConfig, Auth]:
    config = config or DjeliaConfig()
    if base_url:
        config = config.model_copy(update={"base_url": base_url})
    auth = Auth(api_key or config.resolve_api_key())
    return config, auth


class Djelia:
    """Blocking client.

    Streaming calls return a :class:`RecordStream`; use it in a ``with`` block
    (or call ``close()``) when stopping before the end.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        config: DjeliaConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config, self.auth = _resolve_config(api_key, base_url, config)
        self._dispatcher = HttpDispatcher(self.auth, self.config, transport=transport)
        self.translation = TranslationService(self._dispatcher)
        self.transcription = TranscriptionService(self._dispatcher)
        self.tts = TTSService(self._dispatcher)
        logger.debug("Djelia client ready for %s", self.config.base_url)

    def stream_transcribe(
        self,
        audio: AudioSource,
        translate_to_french: bool = False,
        version: int = Versions.v2,
    ) -> RecordStream[TranscriptRecord]:
        return self.transcription.stream(audio, translate_to_french, version)

    def stream_text_to_speech(
        self,
        request: TTSRequestV2,
        output_file: str | os.PathLike | None = None,
        version: int = Versions.v2,
    ) -> RecordStream[bytes]:
        return self.tts.stream(request, output_file, version)

    def close(self) -> None:
        self._dispatcher.close()

    def __enter__(self) -> "Djelia":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class AsyncDjelia:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        config: DjeliaConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config, self.auth = _resolve_config(api_key, base_url, config)
        self._dispatcher = AsyncHttpDispatcher(self.auth, self.config, transport=transport)
        self.translation = AsyncTranslationService(self._dispatcher)
        self.transcription = AsyncTranscriptionService(self._dispatcher)
        self.tts = AsyncTTSService(self._dispatcher)
        logger.debug("AsyncDjelia client ready for %s", self.config.base_url)

    async def stream_transcribe(
        self,
        audio: AudioSource,
        translate_to_french: bool = False,
        version: int = Versions.v2,
    ) -> AsyncRecordStream[TranscriptRecord]:
        return await self.transcription.stream(audio, translate_to_french, version)

    async def stream_text_to_speech(
        self,
        request: TTSRequestV2,
        output_file: str | os.PathLike | None = None,
        version: int = Versions.v2,
    ) -> AsyncRecordStream[bytes]:
        return await self.tts.stream(request, output_file, version)

    async def aclose(self) -> None:
        await self._dispatcher.aclose()

    async def __aenter__(self) -> "AsyncDjelia":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
