import os
from pathlib import Path
from typing import BinaryIO, Union

from djelia.domain.errors import DjeliaError, ErrorKind

FILE_FIELD = "file"
DEFAULT_FILENAME = "audio_file"

AudioSource = Union[str, os.PathLike, bytes, bytearray, BinaryIO]


def audio_upload(audio: AudioSource) -> dict[str, tuple[str, bytes]]:
    """Build the multipart ``files`` mapping for an upload.

    The audio is read up front so a retried request sends the same bytes.
    """
    if isinstance(audio, (bytes, bytearray)):
        return {FILE_FIELD: (DEFAULT_FILENAME, bytes(audio))}

    if isinstance(audio, (str, os.PathLike)):
        path = Path(audio)
        try:
            return {FILE_FIELD: (path.name, path.read_bytes())}
        except OSError as exc:
            raise DjeliaError(ErrorKind.GENERIC, f"Could not read audio file: {exc}") from exc

    if hasattr(audio, "read"):
        try:
            data = audio.read()
        except OSError as exc:
            raise DjeliaError(ErrorKind.GENERIC, f"Could not read audio file: {exc}") from exc
        if not isinstance(data, bytes):
            raise DjeliaError(ErrorKind.VALIDATION, "Audio file object must be opened in binary mode")
        name = getattr(audio, "name", None)
        filename = Path(name).name if isinstance(name, str) and name else DEFAULT_FILENAME
        return {FILE_FIELD: (filename, data)}

    raise DjeliaError(
        ErrorKind.VALIDATION,
        "Audio file must be a file path, bytes, or binary file object",
    )


def save_audio(path: str | os.PathLike, audio: bytes) -> str:
    try:
        Path(path).write_bytes(audio)
    except OSError as exc:
        raise DjeliaError(ErrorKind.GENERIC, f"Failed to save audio file: {exc}") from exc
    return str(path)
