"""
Audio normalization for the recognition service.

Produces canonical WAV bytes (PCM s16le, mono, 16 kHz) from arbitrary
uploaded audio.  Input that already passes WAV validation is returned
unchanged; everything else is piped through the external ffmpeg
transcoder (stdin → stdout, no temporary files).
"""

from __future__ import annotations

import subprocess
from typing import Callable

import structlog

from sm_common.errors import NormalizationError

from recognition import wav_codec

logger = structlog.get_logger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]

DEFAULT_FILE_NAME = "audio.wav"


def transcoder_command(ffmpeg_path: str) -> list[str]:
    """Return the ffmpeg argv that converts stdin to canonical WAV on stdout."""
    return [
        ffmpeg_path,
        "-hide_banner",
        "-loglevel", "error",
        "-i", "pipe:0",
        "-f", "wav",
        "-acodec", "pcm_s16le",
        "-ac", str(wav_codec.CHANNELS),
        "-ar", str(wav_codec.SAMPLE_RATE),
        "pipe:1",
    ]


def wav_extension(name: str | None) -> str:
    """Return *name* with a ``.wav`` extension.

    Names already ending in ``.wav`` (any case) are kept; any other
    extension is replaced; blank or missing names become ``audio.wav``.
    """
    if name is None or not name.strip():
        return DEFAULT_FILE_NAME
    if name.lower().endswith(".wav"):
        return name
    dot = name.rfind(".")
    base = name[:dot] if dot > 0 else name
    return f"{base}.wav"


class AudioNormalizer:
    """Convert arbitrary audio bytes into canonical WAV bytes.

    Args:
        ffmpeg_path: Transcoder executable.
        runner: ``subprocess.run``-compatible callable (injected in tests).
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", *, runner: Runner = subprocess.run) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._runner = runner

    @property
    def ffmpeg_path(self) -> str:
        return self._ffmpeg_path

    def normalize(self, data: bytes) -> bytes:
        """Return canonical WAV bytes for *data*.

        Empty input is returned unchanged.  Already-canonical input is
        returned unchanged (idempotent).  Anything else is transcoded.

        Raises:
            NormalizationError: If the transcoder cannot be started, exits
                non-zero, or writes nothing.
        """
        if not data:
            return data
        if wav_codec.is_canonical(data):
            logger.debug("audio_already_canonical", bytes=len(data))
            return data
        return self._transcode(data)

    def _transcode(self, data: bytes) -> bytes:
        command = transcoder_command(self._ffmpeg_path)
        logger.info("audio_transcode_started", bytes=len(data), transcoder=self._ffmpeg_path)
        try:
            completed = self._runner(command, input=data, capture_output=True, check=False)
        except OSError as exc:
            logger.error("audio_transcoder_start_failed", transcoder=self._ffmpeg_path, error=str(exc))
            raise NormalizationError(
                f"Failed to start transcoder '{self._ffmpeg_path}'. "
                "Ensure ffmpeg is installed or set FFMPEG_PATH.",
            ) from exc

        stderr = (completed.stderr or b"").decode("utf-8", errors="replace").strip()
        output = completed.stdout or b""
        if completed.returncode != 0 or not output:
            logger.error(
                "audio_transcode_failed",
                exit_code=completed.returncode,
                output_bytes=len(output),
                stderr=stderr,
            )
            raise NormalizationError(
                f"Transcoder failed, exit={completed.returncode}",
                exit_code=completed.returncode,
                stderr=stderr,
            )

        logger.info("audio_transcode_completed", output_bytes=len(output))
        return output
