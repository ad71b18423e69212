"""
Sample and step event models.

Defines the immutable values flowing through the step pipeline.
"""

from dataclasses import dataclass
from enum import Enum


class StepDetectionAlgorithm(str, Enum):
    """Available step detection strategies."""
    PEAK_VALLEY = "peak_valley"
    THRESHOLD = "threshold"
    HYSTERESIS = "hysteresis"


class DetectorPhase(str, Enum):
    """Phase of the peak-valley-peak state machine."""
    IDLE = "idle"
    PEAK_PENDING = "peak_pending"
    VALLEY_SEEN = "valley_seen"


@dataclass(frozen=True)
class Sample:
    """One tri-axis accelerometer reading."""
    x: float
    y: float
    z: float
    timestamp_ms: int = 0


@dataclass(frozen=True)
class StepEvent:
    """A confirmed step. Only the confirming timestamp is carried."""
    timestamp_ms: int
