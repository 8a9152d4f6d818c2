"""
Audio clip management for the recognition service.

Uploads are normalised to canonical WAV before anything is stored; a
clip whose bytes cannot be normalised or validated is never persisted.
Deleting a clip deletes its recognition results with it.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy.orm import Session, sessionmaker

from sm_common.db import AudioClipORM, ClipRepository, session_scope
from sm_common.errors import ClipNotFound, EmptyInput
from sm_common.models import AudioClip

from recognition import wav_codec
from recognition.normalizer import AudioNormalizer, wav_extension

logger = structlog.get_logger(__name__)


class ClipService:
    """Stores, retrieves and manages uploaded audio clips.

    Args:
        session_factory: Produces sessions for each unit of work.
        normalizer: Converts uploads to canonical WAV.
    """

    def __init__(self, session_factory: sessionmaker[Session], normalizer: AudioNormalizer) -> None:
        self._session_factory = session_factory
        self._normalizer = normalizer

    def upload(self, owner_id: UUID, file_name: str | None, data: bytes) -> AudioClip:
        """Normalise and store an uploaded recording.

        Args:
            owner_id: Owner of the new clip.
            file_name: Original file name; stored with a ``.wav`` extension.
            data: Uploaded audio bytes in any format ffmpeg understands.

        Returns:
            The stored clip.

        Raises:
            EmptyInput: If *data* is empty.
            NormalizationError: If the upload cannot be transcoded.
            InvalidWav: If the transcoder output is not canonical.
        """
        if not data:
            raise EmptyInput("Uploaded audio is empty")

        canonical = self._normalizer.normalize(data)
        wav_codec.extract_pcm(canonical)

        with session_scope(self._session_factory) as session:
            row = ClipRepository(session).save(
                AudioClipORM(owner_id=owner_id, file_name=wav_extension(file_name), data=canonical),
            )
            clip = AudioClip.model_validate(row)

        logger.info(
            "clip_uploaded",
            clip_id=str(clip.id),
            owner_id=str(owner_id),
            input_bytes=len(data),
            stored_bytes=clip.size_bytes,
            transcoded=canonical is not data,
        )
        return clip

    def get(self, clip_id: UUID) -> AudioClip:
        """Return a stored clip.

        Raises:
            ClipNotFound: If no clip has *clip_id*.
        """
        with session_scope(self._session_factory) as session:
            return AudioClip.model_validate(self._require(session, clip_id))

    def get_content(self, clip_id: UUID) -> bytes:
        with session_scope(self._session_factory) as session:
            return self._require(session, clip_id).data

    def get_file_name(self, clip_id: UUID) -> str:
        with session_scope(self._session_factory) as session:
            return self._require(session, clip_id).file_name

    def rename(self, clip_id: UUID, file_name: str | None) -> AudioClip:
        """Change the display name of a clip; the name keeps a ``.wav`` extension.

        Raises:
            ClipNotFound: If no clip has *clip_id*.
        """
        with session_scope(self._session_factory) as session:
            row = ClipRepository(session).rename(clip_id, wav_extension(file_name))
            if row is None:
                raise ClipNotFound(clip_id)
            logger.info("clip_renamed", clip_id=str(clip_id), file_name=row.file_name)
            return AudioClip.model_validate(row)

    def delete(self, clip_id: UUID) -> None:
        """Delete a clip and every recognition result produced for it.

        Raises:
            ClipNotFound: If no clip has *clip_id*.
        """
        with session_scope(self._session_factory) as session:
            if not ClipRepository(session).delete(clip_id):
                raise ClipNotFound(clip_id)
        logger.info("clip_deleted", clip_id=str(clip_id))

    def list_ids_by_owner(self, owner_id: UUID) -> list[UUID]:
        with session_scope(self._session_factory) as session:
            return ClipRepository(session).list_ids_by_owner(owner_id)

    def list_by_owner(self, owner_id: UUID) -> list[AudioClip]:
        with session_scope(self._session_factory) as session:
            return [AudioClip.model_validate(row) for row in ClipRepository(session).list_by_owner(owner_id)]

    @staticmethod
    def _require(session: Session, clip_id: UUID) -> AudioClipORM:
        clip = ClipRepository(session).load(clip_id)
        if clip is None:
            raise ClipNotFound(clip_id)
        return clip
