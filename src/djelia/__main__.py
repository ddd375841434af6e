import argparse
import logging
import os
import sys
from pathlib import Path

from djelia.client import Djelia
from djelia.config import DjeliaConfig
from djelia.domain.errors import DjeliaError
from djelia.domain.models import (
    DEFAULT_SPEAKER_ID,
    FrenchTranscription,
    TranslationRequest,
    TTSRequest,
    TTSRequestV2,
    Versions,
)
from djelia.log_format import ColoredFormatter

ENV_FILE_PATH = Path.home() / ".config" / "djelia" / "env"


def _load_env_file(path: Path = ENV_FILE_PATH) -> None:
    if not path.exists():
        return
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key not in os.environ:
                os.environ[key] = value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="djelia", description="Djelia translation, transcription and TTS client")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--api-key", help="API key (defaults to DJELIA_API_KEY)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("languages", help="List supported languages")

    translate_parser = subparsers.add_parser("translate", help="Translate text")
    translate_parser.add_argument("text")
    translate_parser.add_argument("--source", required=True, help="Source language code, e.g. fra_Latn")
    translate_parser.add_argument("--target", required=True, help="Target language code, e.g. bam_Latn")

    transcribe_parser = subparsers.add_parser("transcribe", help="Transcribe an audio file")
    transcribe_parser.add_argument("file")
    transcribe_parser.add_argument("--french", action="store_true", help="Translate the transcription to French")
    transcribe_parser.add_argument("--stream", action="store_true", help="Print segments as they arrive")
    transcribe_parser.add_argument("--version", type=int, default=Versions.v2)

    tts_parser = subparsers.add_parser("tts", help="Synthesize speech")
    tts_parser.add_argument("text")
    tts_parser.add_argument("--output", "-o", required=True, help="Where to write the audio")
    tts_parser.add_argument("--speaker", type=int, default=DEFAULT_SPEAKER_ID, help="Speaker id (v1)")
    tts_parser.add_argument("--description", help="Voice description naming a speaker (v2)")
    tts_parser.add_argument("--chunk-size", type=float, default=1.0)
    tts_parser.add_argument("--version", type=int, default=Versions.v1)
    tts_parser.add_argument("--stream", action="store_true", help="Stream audio (v2 only)")

    return parser


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    if sys.stderr.isatty():
        for handler in logging.getLogger().handlers:
            handler.setFormatter(ColoredFormatter(datefmt="%H:%M:%S"))

    if verbose:
        logging.getLogger("httpcore").setLevel(logging.INFO)
        logging.getLogger("httpx").setLevel(logging.INFO)


def _format_record(record) -> str:
    if isinstance(record, FrenchTranscription):
        return f"{record.text}"
    return f"[{record.start} - {record.end}] {record.text}"


def run(args: argparse.Namespace, client: Djelia) -> None:
    if args.command == "languages":
        for language in client.translation.supported_languages():
            print(f"{language.code}\t{language.name}")

    elif args.command == "translate":
        request = TranslationRequest(text=args.text, source=args.source, target=args.target)
        print(client.translation.translate(request).text)

    elif args.command == "transcribe":
        if args.stream:
            with client.transcription.stream(args.file, args.french, args.version) as segments:
                for segment in segments:
                    print(_format_record(segment), flush=True)
            return
        result = client.transcription.transcribe(args.file, args.french, args.version)
        records = [result] if isinstance(result, FrenchTranscription) else result
        for record in records:
            print(_format_record(record))

    elif args.command == "tts":
        if args.version == Versions.v1:
            request = TTSRequest(text=args.text, speaker=args.speaker)
        else:
            request = TTSRequestV2(text=args.text, description=args.description or "", chunk_size=args.chunk_size)

        if args.stream:
            total_bytes = 0
            with client.tts.stream(request, args.output, args.version) as chunks:
                for chunk in chunks:
                    total_bytes += len(chunk)
            logging.info("Streamed %d bytes to %s", total_bytes, args.output)
        else:
            client.tts.text_to_speech(request, args.output, args.version)
            logging.info("Saved audio to %s", args.output)


def main(argv: list[str] | None = None) -> None:
    _load_env_file(ENV_FILE_PATH)
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        with Djelia(api_key=args.api_key, config=DjeliaConfig()) as client:
            run(args, client)
    except DjeliaError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
