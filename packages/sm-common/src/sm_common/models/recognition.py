"""
Recognition data models for speech-metric.

Defines the Pydantic models for a single persisted RecognitionResult,
the RecognitionSuite summary of a batch run, the SuiteRun view
returned to callers, and the derived per-engine EngineOverview.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from sm_common.utils import utc_now


class RecognitionResult(BaseModel):
    """One engine's transcription of one clip, scored against the expected text.

    Attributes:
        id: Unique identifier.
        clip_id: Source audio clip.
        owner_id: Owner of the source clip.
        engine_name: Engine slug that produced the transcript.
        recognized_text: Transcript produced by the engine (``""`` on failure).
        expected_text: Ground-truth transcript supplied by the caller.
        accuracy: Character-level accuracy (0.0–1.0).
        model_processing_ms: Wall time of the native model call only.
        suite_id: Grouping suite for batch runs, if any.
        created_at: Storage timestamp (UTC).
    """

    model_config = {"from_attributes": True}

    id: UUID = Field(default_factory=uuid4, description="Unique identifier.")
    clip_id: UUID = Field(..., description="Source audio clip.")
    owner_id: UUID = Field(..., description="Owner of the source clip.")
    engine_name: str = Field(..., min_length=1, max_length=100, description="Engine slug.")
    recognized_text: str = Field(default="", description="Engine transcript.")
    expected_text: str | None = Field(default=None, description="Ground-truth transcript.")
    accuracy: float = Field(..., ge=0.0, le=1.0, description="Character-level accuracy.")
    model_processing_ms: int = Field(default=0, ge=0, description="Model-only wall time.")
    suite_id: UUID | None = Field(default=None, description="Grouping suite.")
    created_at: datetime = Field(default_factory=utc_now, description="Storage timestamp (UTC).")


class RecognitionSuite(BaseModel):
    """A batch run grouping results over several clips and all engines.

    Attributes:
        id: Unique identifier.
        owner_id: Owner of every clip in the suite.
        created_at: Start of the batch run (UTC).
        result_ids: Results produced by the run, in production order.
    """

    model_config = {"from_attributes": True}

    id: UUID = Field(default_factory=uuid4, description="Unique identifier.")
    owner_id: UUID = Field(..., description="Owner of every clip in the suite.")
    created_at: datetime = Field(default_factory=utc_now, description="Run start (UTC).")
    result_ids: list[UUID] = Field(default_factory=list, description="Produced results.")


class SuiteRun(BaseModel):
    """A suite together with its complete, ordered list of results."""

    suite_id: UUID = Field(..., description="Suite identifier.")
    owner_id: UUID = Field(..., description="Suite owner.")
    created_at: datetime = Field(..., description="Run start (UTC).")
    results: list[RecognitionResult] = Field(default_factory=list, description="Suite results.")


class EngineOverview(BaseModel):
    """Aggregate statistics for one engine, computed on demand.

    Attributes:
        engine_name: Engine slug as requested.
        result_ids: Contributing results.
        avg_accuracy_pct: Mean accuracy as a percentage (0–100).
        count: Number of contributing results.
        avg_processing_ms: Mean model-only wall time.
    """

    engine_name: str = Field(..., description="Engine slug.")
    result_ids: list[UUID] = Field(default_factory=list, description="Contributing results.")
    avg_accuracy_pct: float = Field(default=0.0, ge=0.0, le=100.0, description="Mean accuracy %.")
    count: int = Field(default=0, ge=0, description="Number of results.")
    avg_processing_ms: float = Field(default=0.0, ge=0.0, description="Mean model-only time.")
