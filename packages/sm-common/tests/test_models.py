"""
Tests for sm-common Pydantic data models.

Validates construction, defaults, range constraints, and building the
models from ORM rows.
"""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from sm_common.db import AudioClipORM, RecognitionResultORM
from sm_common.models import (
    AudioClip,
    EngineOverview,
    RecognitionResult,
    RecognitionSuite,
    SuiteRun,
)


class TestAudioClip:
    """Tests for the AudioClip model."""

    def test_defaults(self, owner_id: UUID, wav_bytes: bytes) -> None:
        clip = AudioClip(owner_id=owner_id, file_name="a.wav", data=wav_bytes)
        assert isinstance(clip.id, UUID)
        assert clip.result_ids == []
        assert clip.created_at.tzinfo is not None
        assert clip.size_bytes == len(wav_bytes)

    def test_data_hidden_from_repr(self, owner_id: UUID, wav_bytes: bytes) -> None:
        clip = AudioClip(owner_id=owner_id, file_name="a.wav", data=wav_bytes)
        assert "RIFF" not in repr(clip)

    def test_empty_file_name_rejected(self, owner_id: UUID) -> None:
        with pytest.raises(ValidationError):
            AudioClip(owner_id=owner_id, file_name="", data=b"x")

    def test_from_orm(self, session_factory, owner_id: UUID, wav_bytes: bytes) -> None:
        with session_factory() as session:
            row = AudioClipORM(owner_id=owner_id, file_name="orm.wav", data=wav_bytes)
            session.add(row)
            session.flush()
            clip = AudioClip.model_validate(row)
        assert clip.id == row.id
        assert clip.file_name == "orm.wav"
        assert clip.result_ids == []


class TestRecognitionResult:
    """Tests for the RecognitionResult model."""

    def _make(self, **overrides) -> RecognitionResult:
        fields = {
            "clip_id": uuid4(),
            "owner_id": uuid4(),
            "engine_name": "vosk-small",
            "recognized_text": "hello",
            "expected_text": "hello",
            "accuracy": 1.0,
            "model_processing_ms": 12,
        }
        fields.update(overrides)
        return RecognitionResult(**fields)

    def test_valid(self) -> None:
        result = self._make()
        assert result.suite_id is None
        assert result.accuracy == 1.0

    @pytest.mark.parametrize("value", [-0.01, 1.01])
    def test_accuracy_out_of_range(self, value: float) -> None:
        with pytest.raises(ValidationError):
            self._make(accuracy=value)

    def test_negative_processing_time(self) -> None:
        with pytest.raises(ValidationError):
            self._make(model_processing_ms=-1)

    def test_empty_engine_name(self) -> None:
        with pytest.raises(ValidationError):
            self._make(engine_name="")

    def test_expected_text_optional(self) -> None:
        assert self._make(expected_text=None).expected_text is None

    def test_from_orm(self, session_factory, owner_id: UUID, wav_bytes: bytes) -> None:
        with session_factory() as session:
            clip = AudioClipORM(owner_id=owner_id, file_name="a.wav", data=wav_bytes)
            row = RecognitionResultORM(
                clip=clip,
                owner_id=owner_id,
                engine_name="whisper-base",
                recognized_text="hi",
                expected_text="hi",
                accuracy=1.0,
                model_processing_ms=5,
            )
            session.add(clip)
            session.flush()
            result = RecognitionResult.model_validate(row)
        assert result.clip_id == clip.id
        assert result.engine_name == "whisper-base"


class TestSuiteModels:
    """Tests for RecognitionSuite, SuiteRun and EngineOverview."""

    def test_suite_defaults(self, owner_id: UUID) -> None:
        suite = RecognitionSuite(owner_id=owner_id)
        assert suite.result_ids == []

    def test_suite_run_serialises(self, owner_id: UUID) -> None:
        suite = RecognitionSuite(owner_id=owner_id)
        run = SuiteRun(suite_id=suite.id, owner_id=owner_id, created_at=suite.created_at)
        dumped = run.model_dump(mode="json")
        assert dumped["suite_id"] == str(suite.id)
        assert dumped["results"] == []

    def test_overview_defaults(self) -> None:
        overview = EngineOverview(engine_name="vosk-small")
        assert (overview.avg_accuracy_pct, overview.count, overview.avg_processing_ms) == (0.0, 0, 0.0)

    def test_overview_percentage_bounds(self) -> None:
        with pytest.raises(ValidationError):
            EngineOverview(engine_name="x", avg_accuracy_pct=100.5)
