"""
SQLAlchemy ORM models for speech-metric.

Defines the table mappings for audio clips, recognition results and
recognition suites using SQLAlchemy 2.0 declarative style with
``Mapped`` / ``mapped_column``.

A result's ``clip_id`` is the authoritative clip ↔ result edge; the
``AudioClipORM.results`` collection is its back-reference and cascades
deletes.  Suites only reference results.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from sm_common.utils import utc_now


# ── Base class ──


class Base(DeclarativeBase):
    """Declarative base for all speech-metric ORM models."""


# ── ORM models ──


class AudioClipORM(Base):
    """ORM model for the ``audio_clips`` table."""

    __tablename__ = "audio_clips"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    # Relationships
    results: Mapped[list[RecognitionResultORM]] = relationship(
        back_populates="clip",
        cascade="all, delete-orphan",
        order_by="RecognitionResultORM.seq",
        passive_deletes=True,
    )

    @property
    def result_ids(self) -> list[uuid.UUID]:
        return [result.id for result in self.results]


class RecognitionSuiteORM(Base):
    """ORM model for the ``recognition_suites`` table."""

    __tablename__ = "recognition_suites"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )

    # Relationships
    results: Mapped[list[RecognitionResultORM]] = relationship(
        back_populates="suite",
        order_by="RecognitionResultORM.seq",
    )

    @property
    def result_ids(self) -> list[uuid.UUID]:
        return [result.id for result in self.results]


class RecognitionResultORM(Base):
    """ORM model for the ``recognition_results`` table.

    ``seq`` is the insertion-order key; ``id`` is the public identifier.
    """

    __tablename__ = "recognition_results"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, unique=True, index=True, default=uuid.uuid4,
    )
    clip_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("audio_clips.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    engine_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    recognized_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    expected_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    model_processing_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    suite_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("recognition_suites.id"), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )

    # Relationships
    clip: Mapped[AudioClipORM] = relationship(back_populates="results")
    suite: Mapped[RecognitionSuiteORM | None] = relationship(back_populates="results")
