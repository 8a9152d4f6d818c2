"""
Vosk streaming recognition backend.

Feeds PCM to a Kaldi graph decoder in fixed-size chunks and reads the
final JSON hypothesis.  Models are loaded once per path and shared by
every backend instance; each ``transcribe`` call builds and releases its
own ``KaldiRecognizer``.
"""

from __future__ import annotations

import json
import time
from typing import Any, ClassVar

import structlog
from vosk import KaldiRecognizer, Model

from sm_common.config import engine_slug
from sm_common.errors import TranscriptionError

from recognition import wav_codec
from recognition.engine_base import EngineBackend, Transcription
from recognition.model_cache import ModelCache

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_BYTES = 4096


def parse_final_result(raw: str) -> str:
    """Return the ``text`` field of a decoder's final JSON.

    The raw string is returned unchanged when it is not a JSON object.
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        return raw
    if not isinstance(payload, dict):
        return raw
    return str(payload.get("text", ""))


class VoskStreamingBackend(EngineBackend):
    """Streaming backend over a shared ``vosk.Model``.

    Args:
        model_path: Vosk model directory.
        name: Explicit engine name; defaults to the slugified basename.
        chunk_bytes: PCM bytes per ``AcceptWaveform`` call.
        sample_rate: Rate announced to the recognizer.
    """

    _models: ClassVar[ModelCache] = ModelCache("vosk")

    def __init__(
        self,
        model_path: str,
        *,
        name: str | None = None,
        chunk_bytes: int = DEFAULT_CHUNK_BYTES,
        sample_rate: float = float(wav_codec.SAMPLE_RATE),
    ) -> None:
        if chunk_bytes <= 0:
            raise ValueError("chunk_bytes must be positive")
        self._model_path = model_path
        self._name = engine_slug(model_path, name)
        self._chunk_bytes = chunk_bytes
        self._sample_rate = sample_rate
        self._model = self._models.get_or_load(model_path, Model)

    # ── EngineBackend interface ──

    @property
    def name(self) -> str:
        return self._name

    @property
    def model_path(self) -> str:
        return self._model_path

    def transcribe(self, wav: bytes) -> Transcription:
        """Decode *wav* chunk by chunk and return the final hypothesis.

        ``model_ms`` covers feeding the first chunk through reading the
        final JSON; PCM extraction is excluded.
        """
        pcm = wav_codec.extract_pcm(wav)
        recognizer = self._new_recognizer()
        try:
            started = time.perf_counter()
            for offset in range(0, len(pcm), self._chunk_bytes):
                recognizer.AcceptWaveform(pcm[offset:offset + self._chunk_bytes])
            raw = recognizer.FinalResult()
            elapsed = time.perf_counter() - started
        except Exception as exc:
            raise TranscriptionError(self._name, str(exc)) from exc
        finally:
            # Last reference; vosk frees the native decoder in KaldiRecognizer.__del__.
            del recognizer

        text = parse_final_result(raw)
        model_ms = int(round(elapsed * 1000))
        logger.debug("vosk_transcribed", engine=self._name, pcm_bytes=len(pcm), model_ms=model_ms)
        return Transcription(text=text, model_ms=model_ms)

    # ── internal helpers ──

    def _new_recognizer(self) -> Any:
        try:
            return KaldiRecognizer(self._model, self._sample_rate)
        except Exception as exc:
            raise TranscriptionError(self._name, f"decoder init failed: {exc}") from exc
