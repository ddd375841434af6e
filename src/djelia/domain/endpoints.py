from dataclasses import dataclass

from djelia.domain.errors import DjeliaError, ErrorKind

ENDPOINT_PREFIX = "/api/v{version}/models/"


@dataclass(frozen=True)
class HttpRequestInfo:
    path: str
    method: str
    versions: tuple[int, ...]

    def url(self, version: int) -> str:
        if version not in self.versions:
            raise DjeliaError(
                ErrorKind.VALIDATION,
                f"Version must be one of {list(self.versions)}",
            )
        return ENDPOINT_PREFIX.format(version=version) + self.path


SUPPORTED_LANGUAGES = HttpRequestInfo("translate/supported-languages", "GET", (1,))
TRANSLATE = HttpRequestInfo("translate", "POST", (1,))
TRANSCRIBE = HttpRequestInfo("transcribe", "POST", (1, 2))
TRANSCRIBE_STREAM = HttpRequestInfo("transcribe/stream", "POST", (1, 2))
TTS = HttpRequestInfo("tts", "POST", (1, 2))
TTS_STREAM = HttpRequestInfo("tts/stream", "POST", (2,))
