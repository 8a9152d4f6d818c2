"""
Audio clip data model for speech-metric.

An audio clip is an uploaded recording stored as canonical WAV bytes
(PCM s16le, mono, 16 kHz) together with its owner and display name.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from sm_common.utils import utc_now


class AudioClip(BaseModel):
    """A stored audio clip.

    Attributes:
        id: Unique identifier.
        owner_id: Owning user UUID.
        file_name: Display name; always ends in ``.wav`` once stored.
        created_at: Upload timestamp (UTC).
        data: Canonical WAV bytes.
        result_ids: Ids of the recognition results produced for this clip.
    """

    model_config = {"from_attributes": True}

    id: UUID = Field(default_factory=uuid4, description="Unique identifier.")
    owner_id: UUID = Field(..., description="Owning user UUID.")
    file_name: str = Field(..., min_length=1, max_length=255, description="Display name.")
    created_at: datetime = Field(default_factory=utc_now, description="Upload timestamp (UTC).")
    data: bytes = Field(..., repr=False, description="Canonical WAV bytes.")
    result_ids: list[UUID] = Field(
        default_factory=list,
        description="Recognition results produced for this clip.",
    )

    @property
    def size_bytes(self) -> int:
        """Length of the stored WAV container."""
        return len(self.data)
