"""
Data models for the step counter.

Plain dataclasses and enums for the per-sample path. The Pydantic request and
response models live in ``api_models`` and depend on ``core.config``.
"""

from .samples import Sample, StepEvent, StepDetectionAlgorithm, DetectorPhase

__all__ = [
    "Sample",
    "StepEvent",
    "StepDetectionAlgorithm",
    "DetectorPhase",
]
