"""
Abstract base class for speech recognition engine backends.

Defines the EngineBackend interface every adapter implements: a stable
slug exposed to clients and a blocking ``transcribe`` call that turns
canonical WAV bytes into text plus the model-only wall time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple


class Transcription(NamedTuple):
    """Output of a single backend invocation.

    Attributes:
        text: Transcript produced by the native engine.
        model_ms: Wall time of the native call in milliseconds.
    """

    text: str
    model_ms: int


class EngineBackend(ABC):
    """Abstract base class that every recognition backend must implement.

    Subclasses provide :attr:`name`, :attr:`model_path` and
    :meth:`transcribe`.  Instances are shared by the registry; each
    ``transcribe`` call must use its own decoder context so that calls
    never share mutable decoder state.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the engine slug (e.g. ``'vosk-small'``)."""
        ...  # pragma: no cover

    @property
    @abstractmethod
    def model_path(self) -> str:
        """Return the model file or directory backing this engine."""
        ...  # pragma: no cover

    @abstractmethod
    def transcribe(self, wav: bytes) -> Transcription:
        """Transcribe canonical WAV bytes.

        Args:
            wav: Canonical WAV container (PCM s16le, mono, 16 kHz).

        Returns:
            The transcript and the model-only wall time.

        Raises:
            InvalidWav: If *wav* is not canonical.
            TranscriptionError: If the native engine fails.
        """
        ...  # pragma: no cover

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, model_path={self.model_path!r})"
