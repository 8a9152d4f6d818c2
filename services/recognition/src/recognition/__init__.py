"""
speech-metric Recognition Core.

Normalises uploaded audio to canonical WAV, runs it through pluggable
offline recognition backends (Vosk streaming, faster-whisper batch),
scores each transcript with a character-level accuracy metric and
aggregates the stored results per engine.
"""

from recognition.accuracy import accuracy
from recognition.clip_service import ClipService
from recognition.engine_base import EngineBackend, Transcription
from recognition.engine_registry import EngineRegistry
from recognition.normalizer import AudioNormalizer, wav_extension
from recognition.orchestrator import RecognitionOrchestrator

__all__ = [
    "AudioNormalizer",
    "ClipService",
    "EngineBackend",
    "EngineRegistry",
    "RecognitionOrchestrator",
    "Transcription",
    "accuracy",
    "wav_extension",
]
