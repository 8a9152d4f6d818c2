"""
Relational result store for speech-metric.

Exposes the ORM mapping, engine/session helpers and the repositories
used by the recognition service.
"""

from sm_common.db.connection import (
    build_engine,
    build_session_factory,
    check_database_health,
    create_schema,
    session_scope,
)
from sm_common.db.orm_models import (
    AudioClipORM,
    Base,
    RecognitionResultORM,
    RecognitionSuiteORM,
)
from sm_common.db.repositories import ClipRepository, ResultRepository, SuiteRepository

__all__ = [
    "AudioClipORM",
    "Base",
    "ClipRepository",
    "RecognitionResultORM",
    "RecognitionSuiteORM",
    "ResultRepository",
    "SuiteRepository",
    "build_engine",
    "build_session_factory",
    "check_database_health",
    "create_schema",
    "session_scope",
]
