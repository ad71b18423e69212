"""
Streaming step detection algorithms.

This module provides the signal conditioner, the step detector strategies,
the per-stream pipeline that joins them, and cadence analysis of the result.
"""

from .conditioner import SignalConditioner, condition_array
from .step_detection import (
    StepDetector,
    StepDetectionResult,
    PeakValleyStrategy,
    ThresholdStrategy,
    HysteresisStrategy,
    compare_algorithms,
)
from .pipeline import StepPipeline
from .cadence import CadenceAnalyzer, CadenceMetrics

__all__ = [
    "SignalConditioner",
    "condition_array",
    "StepDetector",
    "StepDetectionResult",
    "PeakValleyStrategy",
    "ThresholdStrategy",
    "HysteresisStrategy",
    "compare_algorithms",
    "StepPipeline",
    "CadenceAnalyzer",
    "CadenceMetrics",
]
