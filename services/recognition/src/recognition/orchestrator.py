"""
Recognition orchestrator for the speech-metric service.

The only component that writes recognition results.  Loads clips, runs
the registered backends, scores each transcript against the expected
text and persists one result per backend invocation.  Every public
operation runs inside a single unit of work: either all of its results
commit or none do.

Backend failures never abort a run: the failing invocation is logged
and stored with an empty transcript (accuracy ``0`` against non-empty
expected text) and the remaining backends still run.
"""

from __future__ import annotations

import statistics
from collections.abc import Mapping
from uuid import UUID

import structlog
from sqlalchemy.orm import Session, sessionmaker

from sm_common.db import (
    AudioClipORM,
    ClipRepository,
    RecognitionResultORM,
    RecognitionSuiteORM,
    ResultRepository,
    SuiteRepository,
    session_scope,
)
from sm_common.errors import ClipNotFound, EmptyInput, SuiteNotFound
from sm_common.models import EngineOverview, RecognitionResult, RecognitionSuite, SuiteRun

from recognition.accuracy import accuracy
from recognition.engine_base import EngineBackend, Transcription
from recognition.engine_registry import EngineRegistry

logger = structlog.get_logger(__name__)


def _to_result(row: RecognitionResultORM) -> RecognitionResult:
    return RecognitionResult.model_validate(row)


def _to_suite_run(suite: RecognitionSuiteORM) -> SuiteRun:
    return SuiteRun(
        suite_id=suite.id,
        owner_id=suite.owner_id,
        created_at=suite.created_at,
        results=[_to_result(row) for row in suite.results],
    )


def summarize(engine_name: str, rows: list[RecognitionResultORM]) -> EngineOverview:
    """Aggregate *rows* into an :class:`EngineOverview` for *engine_name*."""
    if not rows:
        return EngineOverview(engine_name=engine_name)
    mean_accuracy = statistics.fmean(row.accuracy for row in rows)
    return EngineOverview(
        engine_name=engine_name,
        result_ids=[row.id for row in rows],
        avg_accuracy_pct=min(100.0, mean_accuracy * 100.0),
        count=len(rows),
        avg_processing_ms=statistics.fmean(row.model_processing_ms for row in rows),
    )


class RecognitionOrchestrator:
    """Coordinates clip loading, transcription, scoring and persistence.

    Args:
        session_factory: Produces sessions for each unit of work.
        registry: Enabled backends.
    """

    def __init__(self, session_factory: sessionmaker[Session], registry: EngineRegistry) -> None:
        self._session_factory = session_factory
        self._registry = registry

    @property
    def registry(self) -> EngineRegistry:
        return self._registry

    # ── Recognition ──

    def recognize_one(self, clip_id: UUID, expected: str | None, engine_name: str) -> RecognitionResult:
        """Run one backend over one clip and persist the scored result.

        Raises:
            ClipNotFound: If the clip does not exist.
            EngineNotFound: If *engine_name* is not registered.
            PersistenceError: If the result cannot be stored.
        """
        with session_scope(self._session_factory) as session:
            clip = self._load_clip(session, clip_id)
            backend = self._registry.get(engine_name)
            row = self._recognize(session, clip, backend, expected)
            return _to_result(row)

    def recognize_all(self, clip_id: UUID, expected: str | None) -> list[RecognitionResult]:
        """Run every registered backend over one clip, in registry order.

        Returns exactly the results produced by this call.

        Raises:
            ClipNotFound: If the clip does not exist.
            PersistenceError: If the results cannot be stored.
        """
        with session_scope(self._session_factory) as session:
            clip = self._load_clip(session, clip_id)
            rows = [
                self._recognize(session, clip, backend, expected)
                for backend in self._registry.all_backends()
            ]
            return [_to_result(row) for row in rows]

    def run_suite(self, expected_by_clip: Mapping[UUID, str | None], owner_id: UUID) -> SuiteRun:
        """Run every backend over every clip and group the results in a new suite.

        Clips are processed in the iteration order of *expected_by_clip*;
        per clip, results follow registry order.

        Args:
            expected_by_clip: Expected transcript per clip id.
            owner_id: Owner of every clip in the suite.

        Returns:
            The suite with all of its results.

        Raises:
            EmptyInput: If *expected_by_clip* is empty.
            ClipNotFound: If any clip does not exist.
            ValueError: If any clip belongs to another owner.
            PersistenceError: If the suite cannot be stored.
        """
        if not expected_by_clip:
            raise EmptyInput("Suite run requires at least one clip")

        with session_scope(self._session_factory) as session:
            clips = [self._load_clip(session, clip_id) for clip_id in expected_by_clip]
            foreign = [str(clip.id) for clip in clips if clip.owner_id != owner_id]
            if foreign:
                raise ValueError(f"Clips not owned by {owner_id}: {', '.join(foreign)}")

            suite = SuiteRepository(session).save(RecognitionSuiteORM(owner_id=owner_id))
            logger.info("suite_started", suite_id=str(suite.id), owner_id=str(owner_id), clips=len(clips))
            for clip in clips:
                expected = expected_by_clip[clip.id]
                for backend in self._registry.all_backends():
                    self._recognize(session, clip, backend, expected, suite=suite)

            run = _to_suite_run(suite)
            logger.info("suite_completed", suite_id=str(suite.id), results=len(run.results))
            return run

    # ── Aggregation ──

    def overview(self, engine_name: str) -> EngineOverview:
        """Aggregate every stored result of *engine_name* (case-insensitive)."""
        if not engine_name or not engine_name.strip():
            return EngineOverview(engine_name=engine_name or "")
        with session_scope(self._session_factory) as session:
            rows = ResultRepository(session).find_by_engine(engine_name, case_insensitive=True)
            return summarize(engine_name, rows)

    def overview_all(self) -> list[EngineOverview]:
        """Return :meth:`overview` for every registered engine, in registry order."""
        with session_scope(self._session_factory) as session:
            results = ResultRepository(session)
            return [
                summarize(name, results.find_by_engine(name, case_insensitive=True))
                for name in self._registry.all_names()
            ]

    # ── Queries ──

    def results_by_engine(self, engine_name: str) -> list[RecognitionResult]:
        if not engine_name or not engine_name.strip():
            return []
        with session_scope(self._session_factory) as session:
            rows = ResultRepository(session).find_by_engine(engine_name, case_insensitive=True)
            return [_to_result(row) for row in rows]

    def results_by_owner(self, owner_id: UUID) -> list[RecognitionResult]:
        with session_scope(self._session_factory) as session:
            return [_to_result(row) for row in ResultRepository(session).find_by_owner(owner_id)]

    def get_suite(self, suite_id: UUID) -> SuiteRun:
        """Return a stored suite with its results.

        Raises:
            SuiteNotFound: If no suite has *suite_id*.
        """
        with session_scope(self._session_factory) as session:
            suite = SuiteRepository(session).load(suite_id)
            if suite is None:
                raise SuiteNotFound(suite_id)
            return _to_suite_run(suite)

    def list_suites(self, owner_id: UUID) -> list[RecognitionSuite]:
        """Summaries of every suite run for *owner_id*; use get_suite for the results."""
        with session_scope(self._session_factory) as session:
            suites = SuiteRepository(session).list_by_owner(owner_id)
            return [RecognitionSuite.model_validate(suite) for suite in suites]

    # ── internal helpers ──

    @staticmethod
    def _load_clip(session: Session, clip_id: UUID) -> AudioClipORM:
        clip = ClipRepository(session).load(clip_id)
        if clip is None:
            raise ClipNotFound(clip_id)
        return clip

    @staticmethod
    def _transcribe(backend: EngineBackend, clip: AudioClipORM) -> Transcription:
        try:
            return backend.transcribe(clip.data)
        except Exception:
            logger.exception("transcription_failed", engine=backend.name, clip_id=str(clip.id))
            return Transcription(text="", model_ms=0)

    def _recognize(
        self,
        session: Session,
        clip: AudioClipORM,
        backend: EngineBackend,
        expected: str | None,
        *,
        suite: RecognitionSuiteORM | None = None,
    ) -> RecognitionResultORM:
        transcription = self._transcribe(backend, clip)
        score = accuracy(expected, transcription.text)
        row = RecognitionResultORM(
            clip=clip,
            suite=suite,
            owner_id=clip.owner_id,
            engine_name=backend.name,
            recognized_text=transcription.text,
            expected_text=expected,
            accuracy=score,
            model_processing_ms=max(0, transcription.model_ms),
        )
        ResultRepository(session).add(row)
        logger.info(
            "recognition_completed",
            engine=backend.name,
            clip_id=str(clip.id),
            suite_id=str(suite.id) if suite is not None else None,
            accuracy=round(score, 4),
            model_ms=row.model_processing_ms,
        )
        return row
