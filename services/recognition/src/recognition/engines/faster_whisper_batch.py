"""
faster-whisper batch recognition backend.

Self-hosted Whisper inference using faster-whisper (CTranslate2-based).
The whole clip is converted to float32 samples and transcribed in one
call with beam search and a temperature fallback schedule.
"""

from __future__ import annotations

import time
from functools import partial
from typing import ClassVar

import structlog
from faster_whisper import WhisperModel

from sm_common.config import engine_slug
from sm_common.errors import TranscriptionError

from recognition import wav_codec
from recognition.engine_base import EngineBackend, Transcription
from recognition.model_cache import ModelCache

logger = structlog.get_logger(__name__)


def temperature_schedule(initial: float, increment: float) -> list[float]:
    """Return the fallback temperatures ``initial, initial+inc, ... <= 1.0``."""
    if increment <= 0:
        return [initial]
    temperatures: list[float] = []
    step = 0
    while True:
        value = round(initial + step * increment, 6)
        if value > 1.0:
            break
        temperatures.append(value)
        step += 1
    return temperatures or [initial]


class FasterWhisperBatchBackend(EngineBackend):
    """Batch backend over a shared ``faster_whisper.WhisperModel``.

    Args:
        model_path: CTranslate2 model directory.
        name: Explicit engine name; defaults to the slugified basename.
        device: ``"cpu"``, ``"cuda"`` or ``"auto"``.
        compute_type: CTranslate2 compute type.
        beam_size: Beam width.
        temperature: Initial sampling temperature.
        temperature_increment: Fallback temperature increment.
        language: Decoding language.
    """

    _models: ClassVar[ModelCache] = ModelCache("whisper")

    def __init__(
        self,
        model_path: str,
        *,
        name: str | None = None,
        device: str = "cpu",
        compute_type: str = "int8",
        beam_size: int = 5,
        temperature: float = 0.0,
        temperature_increment: float = 0.2,
        language: str = "en",
    ) -> None:
        self._model_path = model_path
        self._name = engine_slug(model_path, name)
        self._beam_size = beam_size
        self._temperatures = temperature_schedule(temperature, temperature_increment)
        self._language = language
        loader = partial(WhisperModel, device=device, compute_type=compute_type)
        self._model = self._models.get_or_load(model_path, loader)

    # ── EngineBackend interface ──

    @property
    def name(self) -> str:
        return self._name

    @property
    def model_path(self) -> str:
        return self._model_path

    def transcribe(self, wav: bytes) -> Transcription:
        """Transcribe *wav* in one batch call.

        ``model_ms`` covers the native call and draining its segment
        generator; WAV parsing is excluded.
        """
        audio = wav_codec.wav_to_float(wav)
        try:
            started = time.perf_counter()
            segments, _info = self._model.transcribe(
                audio,
                beam_size=self._beam_size,
                temperature=self._temperatures,
                language=self._language,
            )
            text = "".join(segment.text for segment in segments).strip()
            elapsed = time.perf_counter() - started
        except Exception as exc:
            raise TranscriptionError(self._name, str(exc)) from exc

        model_ms = int(round(elapsed * 1000))
        logger.debug("whisper_transcribed", engine=self._name, samples=len(audio), model_ms=model_ms)
        return Transcription(text=text, model_ms=model_ms)
