"""
Character-level accuracy scoring.

``accuracy = max(0, 1 - levenshtein(expected, recognized) / len(expected))``
computed over normalised text.  Normalisation lowercases, strips the
punctuation set ``? . , !``, trims and collapses whitespace.  The
recognized side additionally drops ``[BLANK_AUDIO]`` placeholders emitted
by the batch decoders for silent stretches.
"""

from __future__ import annotations

import re

_PUNCTUATION = re.compile(r"[?.,!]")
_WHITESPACE = re.compile(r"\s+")
_BLANK_AUDIO = re.compile(r"\[blank_audio\]", re.IGNORECASE)


def normalize_text(text: str) -> str:
    """Lowercase, strip ``?.,!``, trim and collapse whitespace."""
    lowered = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", lowered.strip())


def _normalize_recognized(text: str) -> str:
    return normalize_text(_BLANK_AUDIO.sub(" ", text))


def levenshtein(a: str, b: str) -> int:
    """Unit-cost edit distance between *a* and *b*."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[-1]


def accuracy(expected: str | None, recognized: str | None) -> float:
    """Score *recognized* against *expected*.

    Args:
        expected: Ground-truth transcript; ``None`` scores ``0.0``.
        recognized: Engine transcript; ``None`` is treated as empty.

    Returns:
        A value in ``[0.0, 1.0]``; ``0.0`` when the normalised expected
        text is empty.
    """
    if expected is None:
        return 0.0
    exp_norm = normalize_text(expected)
    if not exp_norm:
        return 0.0
    rec_norm = _normalize_recognized(recognized or "")
    distance = levenshtein(exp_norm, rec_norm)
    return max(0.0, 1.0 - distance / len(exp_norm))
