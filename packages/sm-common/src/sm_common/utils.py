"""
Shared utility functions for speech-metric.

Contains general-purpose helpers used across the shared library and the
recognition service: timezone-aware timestamps and the slug rules used
for engine names.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def utc_now() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def slugify(source: str | None, *, default: str = "model") -> str:
    """Turn *source* into a lowercase ``[a-z0-9-]+`` slug.

    Runs of non-alphanumeric characters collapse to a single ``-`` and
    leading/trailing hyphens are stripped.

    Args:
        source: Arbitrary text (typically a model file basename).
        default: Returned when *source* is ``None``, blank, or slugifies
            to nothing.

    Returns:
        The slug.
    """
    if source is None or not source.strip():
        return default
    slug = _NON_ALNUM_RUN.sub("-", source.strip().lower()).strip("-")
    return slug or default
