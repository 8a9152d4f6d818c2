"""Shared fixtures for recognition service tests."""

from __future__ import annotations

import os
import struct
import subprocess
from collections.abc import Callable, Iterator
from typing import Any
from uuid import UUID, uuid4

import pytest
import structlog

# Keep a developer's .env / SM_ variables from leaking into tests.
for _key in [k for k in os.environ if k.startswith("SM_")]:
    del os.environ[_key]
os.environ["SM_LOG_JSON"] = "false"

from sm_common.config import get_settings  # noqa: E402
from sm_common.db import build_engine, build_session_factory, create_schema  # noqa: E402

from recognition import wav_codec  # noqa: E402
from recognition.clip_service import ClipService  # noqa: E402
from recognition.engine_base import EngineBackend, Transcription  # noqa: E402
from recognition.engine_registry import EngineRegistry  # noqa: E402
from recognition.normalizer import AudioNormalizer  # noqa: E402
from recognition.orchestrator import RecognitionOrchestrator  # noqa: E402


class FakeBackend(EngineBackend):
    """Scripted backend: returns fixed text, or raises *error*."""

    def __init__(
        self,
        name: str,
        *,
        text: str = "",
        model_ms: int = 10,
        error: Exception | None = None,
    ) -> None:
        self._name = name
        self._text = text
        self._model_ms = model_ms
        self._error = error
        self.calls: list[bytes] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def model_path(self) -> str:
        return f"/models/{self._name}"

    def transcribe(self, wav: bytes) -> Transcription:
        self.calls.append(wav)
        if self._error is not None:
            raise self._error
        return Transcription(text=self._text, model_ms=self._model_ms)


# ─── Fixtures ────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Reset the cached settings around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Drop any structlog configuration a test installed (it binds the captured stderr)."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture()
def owner_id() -> UUID:
    return UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture()
def other_owner_id() -> UUID:
    return uuid4()


@pytest.fixture()
def silence_pcm() -> bytes:
    """One second of 16 kHz mono silence (16000 zero samples)."""
    return b"\x00\x00" * 16000


@pytest.fixture()
def silence_wav(silence_pcm: bytes) -> bytes:
    return wav_codec.encode_wav(silence_pcm)


@pytest.fixture()
def ramp_wav() -> bytes:
    """Short canonical WAV whose samples span the full int16 range."""
    samples = [-32768, -16384, 0, 16384, 32767]
    return wav_codec.encode_wav(struct.pack(f"<{len(samples)}h", *samples))


@pytest.fixture()
def make_backend() -> Callable[..., FakeBackend]:
    """Factory for :class:`FakeBackend` instances."""
    return FakeBackend


@pytest.fixture()
def backends() -> list[FakeBackend]:
    """Three scripted backends; the middle one always fails."""
    return [
        FakeBackend("vosk-small", text="hello world", model_ms=40),
        FakeBackend("whisper-base", error=RuntimeError("decoder crashed")),
        FakeBackend("whisper-small-q8", text="hello word", model_ms=120),
    ]


@pytest.fixture()
def registry(backends: list[FakeBackend]) -> EngineRegistry:
    return EngineRegistry(backends)


@pytest.fixture()
def db_engine() -> Iterator[Any]:
    """In-memory SQLite engine with the schema created."""
    engine = build_engine("sqlite://", echo=False)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine: Any) -> Any:
    return build_session_factory(db_engine)


@pytest.fixture()
def fake_runner() -> Callable[..., subprocess.CompletedProcess[bytes]]:
    """Transcoder stand-in that always emits one second of canonical silence."""
    output = wav_codec.encode_wav(b"\x00\x00" * 16000)

    def _run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[bytes]:
        return subprocess.CompletedProcess(command, 0, stdout=output, stderr=b"")

    return _run


@pytest.fixture()
def normalizer(fake_runner: Callable[..., Any]) -> AudioNormalizer:
    return AudioNormalizer("ffmpeg", runner=fake_runner)


@pytest.fixture()
def clip_service(session_factory: Any, normalizer: AudioNormalizer) -> ClipService:
    return ClipService(session_factory, normalizer)


@pytest.fixture()
def orchestrator(session_factory: Any, registry: EngineRegistry) -> RecognitionOrchestrator:
    return RecognitionOrchestrator(session_factory, registry)


@pytest.fixture()
def stored_clip(clip_service: ClipService, owner_id: UUID, silence_wav: bytes) -> Any:
    """A canonical clip already persisted for ``owner_id``."""
    return clip_service.upload(owner_id, "sample.wav", silence_wav)
