"""
Engine registry for the recognition service.

Builds the ordered, read-only set of enabled backends from configuration
once at startup and resolves them by slug.  The registry is never
mutated after construction and may be shared across threads.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType

import structlog

from sm_common.config import EngineSettings, Settings
from sm_common.errors import EngineNotFound

from recognition.engine_base import EngineBackend

logger = structlog.get_logger(__name__)

BackendFactory = Callable[[EngineSettings, Settings], EngineBackend]


def _build_vosk(engine: EngineSettings, settings: Settings) -> EngineBackend:
    from recognition.engines.vosk_streaming import VoskStreamingBackend

    return VoskStreamingBackend(
        engine.model_path,
        name=engine.name,
        chunk_bytes=settings.vosk_chunk_bytes,
        sample_rate=settings.vosk_sample_rate,
    )


def _build_whisper(engine: EngineSettings, settings: Settings) -> EngineBackend:
    from recognition.engines.faster_whisper_batch import FasterWhisperBatchBackend

    return FasterWhisperBatchBackend(
        engine.model_path,
        name=engine.name,
        device=settings.whisper_device,
        compute_type=settings.whisper_compute_type,
        beam_size=settings.whisper_beam_size,
        temperature=settings.whisper_temperature,
        temperature_increment=settings.whisper_temperature_inc,
    )


DEFAULT_FACTORIES: Mapping[str, BackendFactory] = MappingProxyType({
    "vosk": _build_vosk,
    "whisper": _build_whisper,
})


class EngineRegistry:
    """Ordered mapping ``slug → EngineBackend``.

    Args:
        backends: Backends in registry order.

    Raises:
        ValueError: If two backends share a slug.
    """

    def __init__(self, backends: Iterable[EngineBackend]) -> None:
        by_name: dict[str, EngineBackend] = {}
        for backend in backends:
            if backend.name in by_name:
                raise ValueError(f"Duplicate engine name '{backend.name}'")
            by_name[backend.name] = backend
        self._by_name = MappingProxyType(by_name)
        self._backends = tuple(by_name.values())
        self._names = tuple(by_name.keys())

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        factories: Mapping[str, BackendFactory] = DEFAULT_FACTORIES,
    ) -> EngineRegistry:
        """Construct every backend declared in ``settings.engines``.

        Args:
            settings: Application settings; ``engines`` order is registry order.
            factories: Backend constructors keyed by ``EngineSettings.kind``.

        Returns:
            The populated registry.

        Raises:
            ValueError: On duplicate slugs or an unknown backend kind.
            ModelLoadError: If a model cannot be loaded.
        """
        seen: set[str] = set()
        backends: list[EngineBackend] = []
        for engine in settings.engines:
            slug = engine.slug
            if slug in seen:
                raise ValueError(f"Duplicate engine name '{slug}' in configuration")
            seen.add(slug)
            factory = factories.get(engine.kind)
            if factory is None:
                raise ValueError(f"Unsupported engine kind '{engine.kind}'")
            backends.append(factory(engine, settings))
            logger.info("engine_registered", engine=slug, kind=engine.kind, model_path=engine.model_path)
        return cls(backends)

    def get(self, name: str) -> EngineBackend:
        """Look up a backend by its exact slug.

        Raises:
            EngineNotFound: If *name* is not registered.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise EngineNotFound(name, list(self._names)) from None

    def all_backends(self) -> list[EngineBackend]:
        """Return every backend in registry order."""
        return list(self._backends)

    def all_names(self) -> list[str]:
        """Return every slug, parallel to :meth:`all_backends`."""
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[EngineBackend]:
        return iter(self._backends)

    def __len__(self) -> int:
        return len(self._backends)
