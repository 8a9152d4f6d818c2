"""
Process-wide cache of loaded native models, keyed by model path.

Each backend family owns one :class:`ModelCache`.  Concurrent requests
for the same path result in exactly one load: the first caller runs the
loader, later callers block on the same future and receive either the
model or the load error.  Failed loads are evicted so a later call may
retry.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

import structlog

from sm_common.errors import ModelLoadError

logger = structlog.get_logger(__name__)


class ModelCache:
    """Thread-safe compute-if-absent map ``model_path → model``.

    Args:
        family: Backend family label used in log events.
    """

    def __init__(self, family: str) -> None:
        self._family = family
        self._lock = threading.Lock()
        self._entries: dict[str, Future[Any]] = {}

    def get_or_load(self, model_path: str, loader: Callable[[str], Any]) -> Any:
        """Return the model for *model_path*, loading it on first use.

        Args:
            model_path: Cache key handed to *loader*.
            loader: Callable that builds the model from its path.

        Returns:
            The shared model instance.

        Raises:
            ModelLoadError: If *loader* fails (for this caller and every
                caller waiting on the same load).
        """
        with self._lock:
            future = self._entries.get(model_path)
            owner = future is None
            if owner:
                future = Future()
                self._entries[model_path] = future

        if not owner:
            return future.result()

        logger.info("model_load_started", family=self._family, model_path=model_path)
        try:
            model = loader(model_path)
        except Exception as exc:
            error = exc if isinstance(exc, ModelLoadError) else ModelLoadError(model_path, str(exc))
            with self._lock:
                self._entries.pop(model_path, None)
            future.set_exception(error)
            logger.error("model_load_failed", family=self._family, model_path=model_path, error=str(exc))
            if error is exc:
                raise
            raise error from exc

        future.set_result(model)
        logger.info("model_load_completed", family=self._family, model_path=model_path)
        return model

    def __contains__(self, model_path: object) -> bool:
        with self._lock:
            future = self._entries.get(model_path)  # type: ignore[arg-type]
        return future is not None and future.done() and future.exception() is None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop every cached model (used in tests)."""
        with self._lock:
            self._entries.clear()
