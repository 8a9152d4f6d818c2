"""
Recognition backend implementations.

Contains the concrete EngineBackend adapters: a Vosk streaming decoder
and a faster-whisper batch decoder.
"""

from recognition.engines.faster_whisper_batch import FasterWhisperBatchBackend
from recognition.engines.vosk_streaming import VoskStreamingBackend

__all__ = ["FasterWhisperBatchBackend", "VoskStreamingBackend"]
