"""
Signal conditioning for tri-axis accelerometer samples.

Turns a raw (x, y, z) reading into a single "dynamic acceleration" scalar by
removing a slowly learned gravity magnitude. The magnitude is orientation
independent, so the device can be carried in any position.
"""

import logging
import math
from typing import Optional

import numpy as np
from scipy.signal import lfilter

from ..config import ConditionerConfig
from ..models.samples import Sample

logger = logging.getLogger(__name__)


class SignalConditioner:
    """
    Streaming gravity removal for one sensor stream.

    State is a single exponentially smoothed gravity estimate:

        gravity_t = alpha * gravity_{t-1} + (1 - alpha) * |a_t|
        dynamic_t = |a_t| - gravity_t

    Invalid samples (non-finite or out of range axes) are discarded without
    touching the estimate and yield ``nan``.
    """

    def __init__(self, config: Optional[ConditionerConfig] = None):
        """
        Initialize the conditioner.

        Args:
            config: Conditioner parameters. Defaults to ConditionerConfig().
        """
        self.config = config or ConditionerConfig()
        self.reset()

    @property
    def gravity(self) -> float:
        """Current gravity magnitude estimate."""
        return self._gravity

    def reset(self) -> None:
        """Restore the initial gravity estimate and clear counters."""
        self._gravity = float(self.config.initial_gravity)
        self._primed = False
        self.samples_accepted = 0
        self.samples_rejected = 0

    def _is_valid(self, x: float, y: float, z: float) -> bool:
        limit = self.config.max_axis_value
        for value in (x, y, z):
            if not math.isfinite(value) or abs(value) > limit:
                return False
        return True

    def process(self, x: float, y: float, z: float) -> float:
        """
        Condition one raw sample.

        Args:
            x, y, z: Axis readings in sensor units

        Returns:
            Dynamic acceleration, or nan when the sample was discarded
        """
        if not self._is_valid(x, y, z):
            self.samples_rejected += 1
            logger.debug("Discarding invalid sample (%s, %s, %s)", x, y, z)
            return math.nan

        magnitude = math.sqrt(x * x + y * y + z * z)

        if self.config.prime_gravity and not self._primed:
            self._gravity = magnitude
            self._primed = True

        alpha = self.config.gravity_alpha
        self._gravity = alpha * self._gravity + (1.0 - alpha) * magnitude
        self.samples_accepted += 1

        return magnitude - self._gravity

    def process_sample(self, sample: Sample) -> float:
        """Condition a Sample instance."""
        return self.process(sample.x, sample.y, sample.z)


def condition_array(
    x: np.ndarray,
    y: np.ndarray,
    z: np.ndarray,
    config: Optional[ConditionerConfig] = None,
) -> np.ndarray:
    """
    Vectorised equivalent of feeding every row through a fresh SignalConditioner.

    Invalid rows come out as nan and do not advance the gravity filter.

    Args:
        x, y, z: Axis arrays of equal length
        config: Conditioner parameters

    Returns:
        Array of dynamic acceleration values
    """
    config = config or ConditionerConfig()
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    z = np.asarray(z, dtype=float)

    axes = np.stack([x, y, z], axis=1)
    with np.errstate(invalid="ignore"):
        valid = np.all(np.isfinite(axes) & (np.abs(axes) <= config.max_axis_value), axis=1)

    dynamic = np.full(len(x), np.nan)
    if not np.any(valid):
        return dynamic

    magnitude = np.sqrt(np.sum(axes[valid] ** 2, axis=1))
    start = magnitude[0] if config.prime_gravity else config.initial_gravity

    alpha = config.gravity_alpha
    gravity, _ = lfilter([1.0 - alpha], [1.0, -alpha], magnitude, zi=[alpha * start])
    dynamic[valid] = magnitude - gravity
    return dynamic
