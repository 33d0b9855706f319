"""
Domain models for the K0s resolution pipeline.

Pure data structures with validation, no business logic.
"""

from .events import Collision, Track, V0Candidate, McParticle, EventRecord
from .statistics import ProcessingStatistics
from .config import (
    ConfigurationError,
    DetectorMode,
    TrackingPidHypothesis,
    MassMode,
    AxisConfig,
    TaskConfig,
    PreFilterConfig,
    V0SelectionConfig,
    HistogramConfig,
    InputConfig,
    OutputConfig,
    PipelineConfig,
)

__all__ = [
    "Collision",
    "Track",
    "V0Candidate",
    "McParticle",
    "EventRecord",
    "ProcessingStatistics",
    "ConfigurationError",
    "DetectorMode",
    "TrackingPidHypothesis",
    "MassMode",
    "AxisConfig",
    "TaskConfig",
    "PreFilterConfig",
    "V0SelectionConfig",
    "HistogramConfig",
    "InputConfig",
    "OutputConfig",
    "PipelineConfig",
]
