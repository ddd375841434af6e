from djelia.client import AsyncDjelia, Djelia
from djelia.config import DjeliaConfig
from djelia.domain.errors import DjeliaError, ErrorKind
from djelia.domain.models import (
    FrenchTranscription,
    Language,
    SupportedLanguage,
    TranscriptionSegment,
    TranslationRequest,
    TranslationResponse,
    TTSRequest,
    TTSRequestV2,
    Versions,
)
from djelia.domain.stream import AsyncRecordStream, RecordStream

__all__ = [
    "AsyncDjelia",
    "AsyncRecordStream",
    "Djelia",
    "DjeliaConfig",
    "DjeliaError",
    "ErrorKind",
    "FrenchTranscription",
    "Language",
    "RecordStream",
    "SupportedLanguage",
    "TranscriptionSegment",
    "TranslationRequest",
    "TranslationResponse",
    "TTSRequest",
    "TTSRequestV2",
    "Versions",
]
