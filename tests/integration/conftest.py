"""
Integration test fixtures for speech-metric.

Patches the native decoder libraries at the adapter module boundary so
the real configuration → registry → adapter → orchestrator → store
path can run without model files on disk.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from sm_common.config import EngineSettings, Settings

from recognition import wav_codec
from recognition.engines import FasterWhisperBatchBackend, VoskStreamingBackend


def _whisper_segment(text: str) -> MagicMock:
    segment = MagicMock()
    segment.text = text
    return segment


@pytest.fixture()
def native_decoders() -> Iterator[dict[str, MagicMock]]:
    """Patched ``vosk`` and ``faster_whisper`` entry points.

    The streaming decoder hears "hello world"; the batch decoder hears
    "hello word" padded with a ``[BLANK_AUDIO]`` placeholder.
    """
    VoskStreamingBackend._models.clear()
    FasterWhisperBatchBackend._models.clear()

    recognizer = MagicMock(name="KaldiRecognizer()")
    recognizer.FinalResult.return_value = json.dumps({"text": "hello world"})

    with (
        patch("recognition.engines.vosk_streaming.Model") as vosk_model,
        patch("recognition.engines.vosk_streaming.KaldiRecognizer", return_value=recognizer) as kaldi,
        patch("recognition.engines.faster_whisper_batch.WhisperModel") as whisper_model,
    ):
        whisper_model.return_value.transcribe.side_effect = lambda *a, **kw: (
            iter([_whisper_segment(" [BLANK_AUDIO] hello"), _whisper_segment(" word")]),
            MagicMock(language="en"),
        )
        yield {
            "vosk_model": vosk_model,
            "kaldi": kaldi,
            "recognizer": recognizer,
            "whisper_model": whisper_model,
        }

    VoskStreamingBackend._models.clear()
    FasterWhisperBatchBackend._models.clear()


@pytest.fixture()
def settings() -> Settings:
    """Two streaming and two batch engines; two of them share a model path."""
    return Settings(
        engines=[
            EngineSettings(kind="vosk", name="vosk-small", model_path="/models/vosk-model-small-en-us-0.15"),
            EngineSettings(kind="vosk", model_path="/models/vosk-model-small-en-us-0.15-copy"),
            EngineSettings(kind="whisper", name="whisper-base", model_path="/models/faster-whisper-base.en"),
            EngineSettings(kind="whisper", name="whisper-base-alt", model_path="/models/faster-whisper-base.en"),
        ],
    )


@pytest.fixture()
def speech_wav() -> bytes:
    """Two seconds of a quiet square wave as canonical WAV."""
    period = b"\x00\x10" * 20 + b"\x00\xf0" * 20
    return wav_codec.encode_wav(period * 800)
