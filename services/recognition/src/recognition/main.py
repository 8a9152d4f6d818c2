"""
Command-line entry point for the speech-metric recognition service.

Operates on the configured result store and engine registry.  Results
are printed to stdout as JSON; errors are reported on stderr with exit
status 1.

Usage:
    speech-metric init-db
    speech-metric upload --owner <uuid> --file recording.mp3
    speech-metric recognize --clip <uuid> --expected "hello world" [--engine vosk-small]
    speech-metric suite --owner <uuid> <clip-uuid>="one" <clip-uuid>="two"
    speech-metric overview [--engine whisper-base]
    speech-metric results --engine whisper-base | --owner <uuid>
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog
from pydantic import BaseModel

from sm_common.config import Settings, get_settings
from sm_common.db import build_engine, build_session_factory, create_schema
from sm_common.errors import SpeechMetricError
from sm_common.logging import configure_logging

from recognition.clip_service import ClipService
from recognition.engine_registry import EngineRegistry
from recognition.normalizer import AudioNormalizer
from recognition.orchestrator import RecognitionOrchestrator

logger = structlog.get_logger(__name__)


def _uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid UUID: {value!r}") from None


def _expectation(value: str) -> tuple[UUID, str]:
    clip, sep, expected = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected CLIP=TEXT, got {value!r}")
    return _uuid(clip), expected


def _expectations(pairs: Sequence[tuple[UUID, str]]) -> dict[UUID, str]:
    """Collect CLIP=EXPECTED pairs, rejecting a clip given more than once."""
    expectations: dict[UUID, str] = {}
    for clip_id, expected in pairs:
        if clip_id in expectations:
            raise ValueError(f"Clip {clip_id} given more than once")
        expectations[clip_id] = expected
    return expectations


def build_parser() -> argparse.ArgumentParser:
    """Return the ``speech-metric`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="speech-metric",
        description="Benchmark offline speech recognition engines",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create the result store schema")
    commands.add_parser("engines", help="List enabled engines in registry order")

    upload = commands.add_parser("upload", help="Normalise and store an audio clip")
    upload.add_argument("--owner", type=_uuid, required=True, help="Owner UUID")
    upload.add_argument("--file", type=Path, required=True, help="Audio file to upload")
    upload.add_argument("--name", type=str, default=None, help="Display name (defaults to the file name)")

    recognize = commands.add_parser("recognize", help="Transcribe a clip with one or all engines")
    recognize.add_argument("--clip", type=_uuid, required=True, help="Clip UUID")
    recognize.add_argument("--expected", type=str, required=True, help="Expected transcript")
    recognize.add_argument("--engine", type=str, default=None, help="Engine slug (default: all)")

    suite = commands.add_parser("suite", help="Run every engine over several clips")
    suite.add_argument("--owner", type=_uuid, required=True, help="Owner UUID of every clip")
    suite.add_argument("pairs", nargs="+", type=_expectation, metavar="CLIP=EXPECTED")

    overview = commands.add_parser("overview", help="Aggregate accuracy and timing per engine")
    overview.add_argument("--engine", type=str, default=None, help="Engine slug (default: all)")

    results = commands.add_parser("results", help="List stored results")
    selector = results.add_mutually_exclusive_group(required=True)
    selector.add_argument("--engine", type=str, help="Engine slug (case-insensitive)")
    selector.add_argument("--owner", type=_uuid, help="Owner UUID")

    return parser


def _dump(payload: Any) -> str:
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json", exclude={"data"})
    elif isinstance(payload, list):
        payload = [
            item.model_dump(mode="json", exclude={"data"}) if isinstance(item, BaseModel) else item
            for item in payload
        ]
    return json.dumps(payload, indent=2)


def run(args: argparse.Namespace, settings: Settings) -> Any:
    """Execute a parsed command and return its JSON-serialisable result."""
    engine = build_engine(settings.db_uri, echo=settings.db_echo)
    try:
        if args.command == "init-db":
            create_schema(engine)
            return {"status": "ok", "db_uri": engine.url.render_as_string(hide_password=True)}

        factory = build_session_factory(engine)

        if args.command == "upload":
            clips = ClipService(factory, AudioNormalizer(settings.ffmpeg_path))
            return clips.upload(args.owner, args.name or args.file.name, args.file.read_bytes())

        if args.command == "results" and args.owner is not None:
            return RecognitionOrchestrator(factory, EngineRegistry([])).results_by_owner(args.owner)
        if args.command == "results":
            return RecognitionOrchestrator(factory, EngineRegistry([])).results_by_engine(args.engine)
        if args.command == "overview" and args.engine:
            return RecognitionOrchestrator(factory, EngineRegistry([])).overview(args.engine)
        expectations = _expectations(args.pairs) if args.command == "suite" else {}

        registry = EngineRegistry.from_settings(settings)
        if args.command == "engines":
            return [{"name": b.name, "model_path": b.model_path} for b in registry.all_backends()]

        orchestrator = RecognitionOrchestrator(factory, registry)
        if args.command == "recognize" and args.engine:
            return orchestrator.recognize_one(args.clip, args.expected, args.engine)
        if args.command == "recognize":
            return orchestrator.recognize_all(args.clip, args.expected)
        if args.command == "suite":
            return orchestrator.run_suite(expectations, args.owner)
        if args.command == "overview":
            return orchestrator.overview_all()
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        engine.dispose()


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, run the command and print its result."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    try:
        result = run(args, settings)
    except (SpeechMetricError, ValueError, OSError) as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(_dump(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
