from dataclasses import dataclass
from enum import Enum
from typing import Any

from djelia.domain.errors import DjeliaError, ErrorKind

VALID_SPEAKER_IDS = [0, 1, 2, 3, 4]
DEFAULT_SPEAKER_ID = 1
VALID_TTS_V2_SPEAKERS = ["Moussa", "Sekou", "Seydou"]

MAX_TTS_V2_TEXT_LENGTH = 1000
MIN_CHUNK_SIZE = 0.1
MAX_CHUNK_SIZE = 2.0


class Language(str, Enum):
    FRENCH = "fra_Latn"
    ENGLISH = "eng_Latn"
    BAMBARA = "bam_Latn"


class Versions:
    v1 = 1
    v2 = 2

    @classmethod
    def all_versions(cls) -> list[int]:
        return sorted(v for k, v in vars(cls).items() if k.startswith("v") and isinstance(v, int))

    @classmethod
    def latest(cls) -> int:
        return max(cls.all_versions())

    @staticmethod
    def label(version: int) -> str:
        return f"v{version}"


def _require_text(text: Any) -> None:
    if not text or not isinstance(text, str):
        raise DjeliaError(ErrorKind.VALIDATION, "Text is required and must be a string")


@dataclass
class TranslationRequest:
    text: str
    source: Language | str
    target: Language | str

    def validate(self) -> None:
        _require_text(self.text)
        codes = [lang.value for lang in Language]
        if self.source not in codes:
            raise DjeliaError(
                ErrorKind.LANGUAGE,
                f"Source language '{self.source}' not supported. Must be one of {codes}",
            )
        if self.target not in codes:
            raise DjeliaError(
                ErrorKind.LANGUAGE,
                f"Target language '{self.target}' not supported. Must be one of {codes}",
            )

    def to_dict(self) -> dict[str, str]:
        return {
            "text": self.text,
            "source": Language(self.source).value,
            "target": Language(self.target).value,
        }


@dataclass
class TTSRequest:
    text: str
    speaker: int = DEFAULT_SPEAKER_ID

    def validate(self) -> None:
        _require_text(self.text)
        if isinstance(self.speaker, bool) or not isinstance(self.speaker, int) or self.speaker not in VALID_SPEAKER_IDS:
            raise DjeliaError(
                ErrorKind.SPEAKER,
                f"Speaker ID must be one of {VALID_SPEAKER_IDS}, got {self.speaker}",
            )

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "speaker": self.speaker}


@dataclass
class TTSRequestV2:
    text: str
    description: str
    chunk_size: float = 1.0

    def validate(self) -> None:
        _require_text(self.text)
        if len(self.text) > MAX_TTS_V2_TEXT_LENGTH:
            raise DjeliaError(
                ErrorKind.VALIDATION,
                f"Text must be {MAX_TTS_V2_TEXT_LENGTH} characters or less",
            )
        if not self.description or not isinstance(self.description, str):
            raise DjeliaError(ErrorKind.VALIDATION, "Description is required and must be a string")
        if (
            isinstance(self.chunk_size, bool)
            or not isinstance(self.chunk_size, (int, float))
            or not MIN_CHUNK_SIZE <= self.chunk_size <= MAX_CHUNK_SIZE
        ):
            raise DjeliaError(
                ErrorKind.VALIDATION,
                f"Chunk size must be a number between {MIN_CHUNK_SIZE} and {MAX_CHUNK_SIZE}",
            )

    def named_speaker(self) -> str | None:
        description = self.description.lower()
        for speaker in VALID_TTS_V2_SPEAKERS:
            if speaker.lower() in description:
                return speaker
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "description": self.description,
            "chunk_size": self.chunk_size,
        }


@dataclass(frozen=True)
class SupportedLanguage:
    code: str | None = None
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SupportedLanguage":
        return cls(code=data.get("code"), name=data.get("name"))


@dataclass(frozen=True)
class TranslationResponse:
    text: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranslationResponse":
        return cls(text=data.get("text"))


@dataclass(frozen=True)
class TranscriptionSegment:
    text: str | None = None
    start: float | None = None
    end: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranscriptionSegment":
        return cls(text=data.get("text"), start=data.get("start"), end=data.get("end"))


@dataclass(frozen=True)
class FrenchTranscription:
    text: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FrenchTranscription":
        return cls(text=data.get("text"))


TranscriptRecord = TranscriptionSegment | FrenchTranscription
