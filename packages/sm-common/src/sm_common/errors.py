"""
Error hierarchy for speech-metric.

Every error the recognition core surfaces derives from
:class:`SpeechMetricError`, so callers (CLI, request handlers) can catch a
single base type.  Lookup-style errors also derive from ``LookupError`` and
input-validation errors from ``ValueError``.
"""

from __future__ import annotations

from uuid import UUID


class SpeechMetricError(Exception):
    """Base class for all speech-metric errors."""


class ClipNotFound(SpeechMetricError, LookupError):
    """No audio clip exists with the requested id."""

    def __init__(self, clip_id: UUID | str) -> None:
        self.clip_id = clip_id
        super().__init__(f"Audio clip not found: {clip_id}")


class SuiteNotFound(SpeechMetricError, LookupError):
    """No recognition suite exists with the requested id."""

    def __init__(self, suite_id: UUID | str) -> None:
        self.suite_id = suite_id
        super().__init__(f"Recognition suite not found: {suite_id}")


class EngineNotFound(SpeechMetricError, LookupError):
    """No engine is registered under the requested name."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = list(available or [])
        message = f"Unknown engine '{name}'"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class InvalidWav(SpeechMetricError, ValueError):
    """Bytes are not a canonical PCM s16le / mono / 16 kHz WAV container."""


class NormalizationError(SpeechMetricError):
    """The external transcoder could not produce canonical WAV bytes.

    Attributes:
        exit_code: Transcoder exit status, ``None`` when it never started.
        stderr: Decoded transcoder diagnostics (may be empty).
    """

    def __init__(self, reason: str, *, exit_code: int | None = None, stderr: str = "") -> None:
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(reason)


class TranscriptionError(SpeechMetricError):
    """A backend failed while transcribing audio.

    Never surfaced by the orchestrator; converted to an empty transcript.
    """

    def __init__(self, engine: str, reason: str) -> None:
        self.engine = engine
        super().__init__(f"{engine}: {reason}")


class ModelLoadError(SpeechMetricError):
    """A native model could not be loaded from its configured path."""

    def __init__(self, model_path: str, reason: str = "") -> None:
        self.model_path = model_path
        message = f"Failed to load model at path: {model_path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class EmptyInput(SpeechMetricError, ValueError):
    """An operation received nothing to work on."""


class PersistenceError(SpeechMetricError):
    """The result store rejected or failed an operation."""
