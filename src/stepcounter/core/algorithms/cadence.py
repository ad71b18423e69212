"""
Cadence analysis from confirmed step timestamps.

Summarises a walk by step count and interval statistics. Distance and step
length are not estimated.
"""

from typing import Any, Dict, Optional, Sequence

import numpy as np
from pydantic import BaseModel, Field


class CadenceMetrics(BaseModel):
    """Container for cadence metrics."""

    step_count: int = Field(..., description="Number of steps taken")
    duration_ms: Optional[float] = Field(None, description="Time from first to last step")
    mean_interval_ms: Optional[float] = Field(None, description="Mean time between steps")
    step_variance: Optional[float] = Field(None, description="Variance of step intervals (ms^2)")
    cadence_spm: Optional[float] = Field(None, description="Steps per minute")
    step_regularity: Optional[float] = Field(None, description="Coefficient of variation of intervals")
    step_symmetry: Optional[float] = Field(None, description="Odd/even interval asymmetry")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, handling NaN values."""
        def clean_value(val):
            if val is None or isinstance(val, (int, str, bool)):
                return val
            if np.isnan(val) or np.isinf(val):
                return None
            return float(val)

        return {name: clean_value(value) for name, value in self.model_dump().items()}


class CadenceAnalyzer:
    """Interval statistics over a sequence of step timestamps (ms)."""

    def analyze(self, step_times_ms: Sequence[float]) -> CadenceMetrics:
        """
        Analyze cadence from step timestamps.

        Args:
            step_times_ms: Confirming timestamps of each step, ascending

        Returns:
            CadenceMetrics; interval metrics are None with fewer than two steps
        """
        step_times = np.asarray(step_times_ms, dtype=float)
        step_count = len(step_times)

        if step_count < 2:
            return CadenceMetrics(step_count=step_count)

        intervals = np.diff(step_times)
        mean_interval = float(np.mean(intervals))

        step_variance = float(np.var(intervals)) if len(intervals) > 1 else None
        step_regularity = (
            float(np.std(intervals) / mean_interval)
            if len(intervals) > 1 and mean_interval > 0
            else None
        )
        cadence = 60000.0 / mean_interval if mean_interval > 0 else None

        return CadenceMetrics(
            step_count=step_count,
            duration_ms=float(step_times[-1] - step_times[0]),
            mean_interval_ms=mean_interval,
            step_variance=step_variance,
            cadence_spm=cadence,
            step_regularity=step_regularity,
            step_symmetry=self._calculate_step_symmetry(intervals),
        )

    def _calculate_step_symmetry(self, intervals: np.ndarray) -> Optional[float]:
        """
        Compare alternating intervals, assuming left and right steps alternate.

        Returns:
            0 for perfect symmetry up to 1 for maximum asymmetry
        """
        if len(intervals) < 4:
            return None

        left_mean = np.mean(intervals[::2])
        right_mean = np.mean(intervals[1::2])
        total = left_mean + right_mean
        if total <= 0:
            return None
        return float(abs(left_mean - right_mean) / total)
