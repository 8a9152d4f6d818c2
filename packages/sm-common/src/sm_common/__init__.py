"""
sm-common: Shared library for speech-metric.

Provides configuration management, structured logging, the error
hierarchy, data models and the relational result store used by the
recognition service.
"""

from sm_common.config import EngineSettings, Settings, get_settings

__all__ = [
    "EngineSettings",
    "Settings",
    "get_settings",
]
