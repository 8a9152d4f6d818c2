"""
Repositories over the speech-metric result store.

Each repository wraps a caller-owned ``Session``; transaction boundaries
belong to :func:`sm_common.db.connection.session_scope`, never to the
repository.  Listing queries return rows in insertion order.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sm_common.db.orm_models import AudioClipORM, RecognitionResultORM, RecognitionSuiteORM

logger = structlog.get_logger(__name__)


class ClipRepository:
    """Persistence operations for audio clips."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def load(self, clip_id: UUID) -> AudioClipORM | None:
        """Return the clip with *clip_id*, or ``None``."""
        return self._session.get(AudioClipORM, clip_id)

    def save(self, clip: AudioClipORM) -> AudioClipORM:
        """Add *clip* (and any pending results on it) to the session and flush."""
        self._session.add(clip)
        self._session.flush()
        return clip

    def delete(self, clip_id: UUID) -> bool:
        """Delete a clip and, by cascade, its results.

        Returns:
            ``True`` when a clip was deleted, ``False`` when none existed.
        """
        clip = self.load(clip_id)
        if clip is None:
            return False
        self._session.delete(clip)
        self._session.flush()
        return True

    def rename(self, clip_id: UUID, file_name: str) -> AudioClipORM | None:
        """Change the display name of a clip; ``None`` when it does not exist."""
        clip = self.load(clip_id)
        if clip is None:
            return None
        clip.file_name = file_name
        self._session.flush()
        return clip

    def list_ids_by_owner(self, owner_id: UUID) -> list[UUID]:
        stmt = (
            select(AudioClipORM.id)
            .where(AudioClipORM.owner_id == owner_id)
            .order_by(AudioClipORM.created_at)
        )
        return list(self._session.scalars(stmt))

    def list_by_owner(self, owner_id: UUID) -> list[AudioClipORM]:
        stmt = (
            select(AudioClipORM)
            .where(AudioClipORM.owner_id == owner_id)
            .order_by(AudioClipORM.created_at)
        )
        return list(self._session.scalars(stmt))


class ResultRepository:
    """Persistence operations for recognition results.

    Results are append-only.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, result: RecognitionResultORM) -> RecognitionResultORM:
        """Persist a new result and flush so its ``seq`` is assigned."""
        self._session.add(result)
        self._session.flush()
        return result

    def find_by_engine(
        self,
        engine_name: str,
        *,
        case_insensitive: bool = True,
    ) -> list[RecognitionResultORM]:
        """Return every result produced by *engine_name*."""
        if case_insensitive:
            condition = func.lower(RecognitionResultORM.engine_name) == engine_name.lower()
        else:
            condition = RecognitionResultORM.engine_name == engine_name
        stmt = select(RecognitionResultORM).where(condition).order_by(RecognitionResultORM.seq)
        return list(self._session.scalars(stmt))

    def find_by_owner(self, owner_id: UUID) -> list[RecognitionResultORM]:
        stmt = (
            select(RecognitionResultORM)
            .where(RecognitionResultORM.owner_id == owner_id)
            .order_by(RecognitionResultORM.seq)
        )
        return list(self._session.scalars(stmt))

    def find_by_clip(self, clip_id: UUID) -> list[RecognitionResultORM]:
        stmt = (
            select(RecognitionResultORM)
            .where(RecognitionResultORM.clip_id == clip_id)
            .order_by(RecognitionResultORM.seq)
        )
        return list(self._session.scalars(stmt))


class SuiteRepository:
    """Persistence operations for recognition suites."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, suite: RecognitionSuiteORM) -> RecognitionSuiteORM:
        self._session.add(suite)
        self._session.flush()
        return suite

    def load(self, suite_id: UUID) -> RecognitionSuiteORM | None:
        return self._session.get(RecognitionSuiteORM, suite_id)

    def list_by_owner(self, owner_id: UUID) -> list[RecognitionSuiteORM]:
        stmt = (
            select(RecognitionSuiteORM)
            .where(RecognitionSuiteORM.owner_id == owner_id)
            .order_by(RecognitionSuiteORM.created_at)
        )
        return list(self._session.scalars(stmt))
