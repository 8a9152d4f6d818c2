"""Shared pytest fixtures for the cross-package integration suite.

Provides an in-memory result store, canonical audio fixtures and a
settings object whose engines point at patched native libraries.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any

import pytest
import structlog

for _key in [k for k in os.environ if k.startswith("SM_")]:
    del os.environ[_key]

from sm_common.config import get_settings  # noqa: E402
from sm_common.db import build_engine, build_session_factory, create_schema  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Drop any structlog configuration a test installed (it binds the captured stderr)."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture()
def session_factory() -> Iterator[Any]:
    """Session factory over a fresh in-memory SQLite store."""
    engine = build_engine("sqlite://", echo=False)
    create_schema(engine)
    yield build_session_factory(engine)
    engine.dispose()
