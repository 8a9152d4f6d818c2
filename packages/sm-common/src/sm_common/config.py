"""
Environment-based configuration management for speech-metric.

Uses pydantic-settings to load configuration values from environment
variables and .env files. The recognition service and the scripts import
their settings from this module to ensure consistent configuration handling.

All environment variables are prefixed with ``SM_`` to avoid collisions.
The transcoder path additionally honours the conventional ``FFMPEG_PATH``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import PurePath
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sm_common.utils import slugify

EngineKind = Literal["vosk", "whisper"]

# Only model-file suffixes are stripped; model directories often carry
# dotted version numbers that belong in the slug.
_MODEL_SUFFIXES: tuple[str, ...] = (".bin", ".model")


def engine_slug(model_path: str, name: str | None = None) -> str:
    """Return the engine slug for a model path (or an explicit display name).

    Args:
        model_path: Filesystem path of the model file or directory.
        name: Optional explicit engine name; slugified when given.

    Returns:
        A lowercase ``[a-z0-9-]+`` slug, ``"model"`` when nothing usable remains.
    """
    if name is not None and name.strip():
        return slugify(name)
    base = PurePath(model_path.replace("\\", "/")).name
    for suffix in _MODEL_SUFFIXES:
        if base.lower().endswith(suffix):
            base = base[: -len(suffix)]
            break
    return slugify(base)


class EngineSettings(BaseModel):
    """Declaration of one engine backend to enable at startup.

    Attributes:
        kind: Backend family (``"vosk"`` streaming or ``"whisper"`` batch).
        model_path: Model file or directory handed to the native library.
        name: Optional explicit engine name (slugified); defaults to the
            model basename.
    """

    kind: EngineKind = Field(..., description="Backend family.")
    model_path: str = Field(..., min_length=1, description="Model file or directory.")
    name: str | None = Field(default=None, description="Explicit engine name.")

    @property
    def slug(self) -> str:
        """Engine name exposed to clients."""
        return engine_slug(self.model_path, self.name)


def _default_engines() -> list[EngineSettings]:
    return [
        EngineSettings(
            kind="vosk",
            name="vosk-large",
            model_path="/app/models/vosk-model-en-us-0.22-lgraph",
        ),
        EngineSettings(
            kind="vosk",
            name="vosk-small",
            model_path="/app/models/vosk-model-small-en-us-0.15",
        ),
        EngineSettings(
            kind="whisper",
            name="whisper-base",
            model_path="/app/models/faster-whisper-base.en",
        ),
        EngineSettings(
            kind="whisper",
            name="whisper-medium-en-q5",
            model_path="/app/models/faster-whisper-medium.en-q5",
        ),
        EngineSettings(
            kind="whisper",
            name="whisper-small-q51",
            model_path="/app/models/faster-whisper-small.en-q5_1",
        ),
        EngineSettings(
            kind="whisper",
            name="whisper-small-q8",
            model_path="/app/models/faster-whisper-small.en-q8_0",
        ),
    ]


class Settings(BaseSettings):
    """Central configuration loaded from ``SM_``-prefixed environment variables.

    Attributes:
        db_uri: SQLAlchemy connection string of the result store.
        db_echo: Echo emitted SQL (debugging).
        ffmpeg_path: Transcoder executable used by the audio normalizer.
        engines: Ordered engine declarations; order is registry order.
        vosk_chunk_bytes: PCM bytes fed to the streaming decoder per call.
        vosk_sample_rate: Sample rate announced to the streaming decoder.
        whisper_beam_size: Beam width for the batch decoder.
        whisper_temperature: Initial sampling temperature.
        whisper_temperature_inc: Temperature increment on decode fallback.
        whisper_device: Device for the batch decoder (``cpu``/``cuda``/``auto``).
        whisper_compute_type: CTranslate2 compute type for the batch decoder.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_json: Render logs as JSON lines instead of console output.
    """

    model_config = SettingsConfigDict(
        env_prefix="SM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Database ──
    db_uri: str = Field(
        default="sqlite:///speech_metric.db",
        description="SQLAlchemy connection string.",
    )
    db_echo: bool = Field(default=False, description="Echo emitted SQL.")

    # ── Transcoder ──
    ffmpeg_path: str = Field(
        default="ffmpeg",
        min_length=1,
        validation_alias=AliasChoices("SM_FFMPEG_PATH", "FFMPEG_PATH", "ffmpeg_path"),
        description="Transcoder executable.",
    )

    # ── Engines ──
    engines: list[EngineSettings] = Field(
        default_factory=_default_engines,
        description="Ordered engine declarations.",
    )
    vosk_chunk_bytes: int = Field(default=4096, gt=0, description="Streaming feed size.")
    vosk_sample_rate: float = Field(default=16000.0, gt=0, description="Streaming decoder rate.")
    whisper_beam_size: int = Field(default=5, ge=1, description="Batch decoder beam width.")
    whisper_temperature: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Initial sampling temperature.",
    )
    whisper_temperature_inc: float = Field(
        default=0.2, gt=0.0, le=1.0, description="Temperature fallback increment.",
    )
    whisper_device: str = Field(default="cpu", description="Batch decoder device.")
    whisper_compute_type: str = Field(default="int8", description="Batch decoder compute type.")

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Logging level.")
    log_json: bool = Field(default=True, description="Render logs as JSON.")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Returns:
        The global ``Settings`` instance.
    """
    return Settings()
