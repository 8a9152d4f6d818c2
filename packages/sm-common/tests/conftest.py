"""Shared fixtures for sm-common tests."""

from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any
from uuid import UUID, uuid4

import pytest

# Keep a developer's SM_ variables from leaking into tests.
for _key in [k for k in os.environ if k.startswith("SM_")]:
    del os.environ[_key]

from sm_common.config import get_settings  # noqa: E402
from sm_common.db import build_engine, build_session_factory, create_schema  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Reset the cached settings around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture()
def db_engine() -> Iterator[Any]:
    """In-memory SQLite engine with the schema created."""
    engine = build_engine("sqlite://", echo=False)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine: Any) -> Any:
    return build_session_factory(db_engine)


@pytest.fixture()
def wav_bytes() -> bytes:
    """Minimal canonical WAV header plus four zero samples."""
    return (
        b"RIFF" + (36 + 8).to_bytes(4, "little") + b"WAVE"
        + b"fmt " + (16).to_bytes(4, "little")
        + (1).to_bytes(2, "little") + (1).to_bytes(2, "little")
        + (16000).to_bytes(4, "little") + (32000).to_bytes(4, "little")
        + (2).to_bytes(2, "little") + (16).to_bytes(2, "little")
        + b"data" + (8).to_bytes(4, "little") + b"\x00" * 8
    )
