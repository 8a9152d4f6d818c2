"""
Canonical WAV codec for the recognition service.

Parses and validates RIFF/WAVE containers holding PCM s16le, mono,
16 kHz audio, locates the ``data`` chunk, and converts PCM samples to
normalised float32.  Also emits canonical containers from raw PCM.
"""

from __future__ import annotations

import struct
from typing import NamedTuple

import numpy as np
import structlog

from sm_common.errors import InvalidWav

logger = structlog.get_logger(__name__)

# Canonical target format.
SAMPLE_RATE: int = 16_000
CHANNELS: int = 1
BITS_PER_SAMPLE: int = 16
PCM_FORMAT: int = 1

_BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
_MIN_HEADER_BYTES = 44
_FMT_OFFSET = 12
_INT16_SCALE = 32767.0


class WavFormat(NamedTuple):
    """Fields of the ``fmt `` chunk that define the canonical format."""

    audio_format: int
    channels: int
    sample_rate: int
    bits_per_sample: int
    fmt_size: int


def _read_format(wav: bytes) -> WavFormat:
    if len(wav) < _MIN_HEADER_BYTES:
        raise InvalidWav(f"WAV too small: {len(wav)} bytes")
    if wav[0:4] != b"RIFF" or wav[8:12] != b"WAVE":
        raise InvalidWav("Not a RIFF/WAVE file")
    if wav[_FMT_OFFSET:_FMT_OFFSET + 4] != b"fmt ":
        raise InvalidWav("Missing fmt chunk at offset 12")

    (fmt_size,) = struct.unpack_from("<i", wav, 16)
    audio_format, channels, sample_rate = struct.unpack_from("<HHI", wav, 20)
    (bits_per_sample,) = struct.unpack_from("<H", wav, 34)
    return WavFormat(audio_format, channels, sample_rate, bits_per_sample, fmt_size)


def find_data_chunk(wav: bytes, start: int) -> int:
    """Return the offset of the ``data`` chunk header, or ``-1``.

    Walks chunk headers from *start*.  A chunk whose size is negative or
    runs past the buffer (typical for writers that could not seek back to
    patch sizes) switches the walk to a byte-wise scan.
    """
    i = max(start, _FMT_OFFSET)
    length = len(wav)
    while i + 8 <= length:
        if wav[i:i + 4] == b"data":
            return i
        (size,) = struct.unpack_from("<i", wav, i + 4)
        if size < 0 or i + 8 + size > length:
            i += 1
            continue
        i += 8 + size
    return -1


def extract_pcm(wav: bytes) -> bytes:
    """Return the PCM payload of a canonical WAV container.

    Args:
        wav: Full WAV container bytes.

    Returns:
        Raw PCM s16le bytes.

    Raises:
        InvalidWav: If the container is truncated, is not RIFF/WAVE, has no
            ``fmt `` chunk at offset 12, is not PCM/mono/16 kHz/16-bit, or
            has no usable ``data`` chunk.
    """
    fmt = _read_format(wav)
    if (
        fmt.audio_format != PCM_FORMAT
        or fmt.channels != CHANNELS
        or fmt.sample_rate != SAMPLE_RATE
        or fmt.bits_per_sample != BITS_PER_SAMPLE
    ):
        logger.warning(
            "wav_unexpected_format",
            audio_format=fmt.audio_format,
            channels=fmt.channels,
            sample_rate=fmt.sample_rate,
            bits_per_sample=fmt.bits_per_sample,
        )
        raise InvalidWav("Unexpected WAV format; expected PCM s16le mono 16k")

    data_offset = find_data_chunk(wav, _FMT_OFFSET + 8 + fmt.fmt_size)
    header_size = data_offset + 8
    if data_offset < 0 or header_size > len(wav):
        raise InvalidWav("WAV data chunk not found")

    (reported,) = struct.unpack_from("<i", wav, data_offset + 4)
    remaining = len(wav) - header_size
    data_size = reported
    if data_size < 0 or data_size > remaining:
        logger.debug("wav_data_size_clamped", reported=reported, remaining=remaining)
        data_size = remaining
    if data_size <= 0:
        raise InvalidWav(f"WAV data size invalid (reported={reported})")

    return wav[header_size:header_size + data_size]


def is_canonical(wav: bytes) -> bool:
    """Return ``True`` when *wav* passes :func:`extract_pcm` validation."""
    try:
        extract_pcm(wav)
    except InvalidWav:
        return False
    return True


def pcm_to_float(pcm: bytes) -> np.ndarray:
    """Convert little-endian signed 16-bit PCM to float32 in ``[-1, 1]``.

    Samples are divided by 32767 and clamped, so ``-32768`` maps to
    ``-1.0``.  A trailing odd byte is ignored.
    """
    usable = len(pcm) - (len(pcm) % _BYTES_PER_SAMPLE)
    samples = np.frombuffer(pcm[:usable], dtype="<i2").astype(np.float32) / _INT16_SCALE
    return np.clip(samples, -1.0, 1.0)


def wav_to_float(wav: bytes) -> np.ndarray:
    """Extract the PCM payload of *wav* and return it as float32 samples."""
    return pcm_to_float(extract_pcm(wav))


def encode_wav(pcm: bytes) -> bytes:
    """Wrap raw PCM s16le mono 16 kHz bytes in a canonical 44-byte-header WAV."""
    byte_rate = SAMPLE_RATE * CHANNELS * _BYTES_PER_SAMPLE
    block_align = CHANNELS * _BYTES_PER_SAMPLE
    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + len(pcm),
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT,
        CHANNELS,
        SAMPLE_RATE,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        len(pcm),
    )
    return header + pcm
