"""
Shared Pydantic data models for speech-metric.

This package contains the audio clip, recognition result, suite and
engine overview models exchanged between the store and the recognition
service.
"""

from sm_common.models.clip import AudioClip
from sm_common.models.recognition import (
    EngineOverview,
    RecognitionResult,
    RecognitionSuite,
    SuiteRun,
)

__all__ = [
    "AudioClip",
    "EngineOverview",
    "RecognitionResult",
    "RecognitionSuite",
    "SuiteRun",
]
