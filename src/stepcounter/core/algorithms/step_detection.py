"""
Streaming step detection on dynamic acceleration.

Every strategy consumes one conditioned scalar and its timestamp at a time and
returns a StepEvent or None. The canonical strategy is the adaptive
peak-valley-peak matcher; the threshold and hysteresis strategies are simpler
variants behind the same ``process`` contract.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..config import DetectorConfig
from ..models.samples import DetectorPhase, StepDetectionAlgorithm, StepEvent

logger = logging.getLogger(__name__)


@dataclass
class StepDetectionResult:
    """Result of running a detector over a recorded sequence."""
    algorithm: StepDetectionAlgorithm
    step_times: np.ndarray
    step_indices: np.ndarray
    processing_time: float = 0.0
    parameters: Optional[Dict[str, Any]] = None


class StepStrategy:
    """Base class for step strategies. Inputs are already finite and ordered."""

    def __init__(self, config: DetectorConfig):
        self.config = config
        self.reset()

    def reset(self) -> None:
        raise NotImplementedError

    def process(self, dyn: float, now_ms: int) -> Optional[StepEvent]:
        raise NotImplementedError


class PeakValleyStrategy(StepStrategy):
    """
    Adaptive peak-valley-peak matcher.

    A step is confirmed by a peak that follows a pending peak and an
    intervening valley, with the inter-peak time strictly inside
    (min_step_period_ms, max_step_period_ms). Extrema are judged on the middle
    of the last three accepted values, so detection lags one sample.
    """

    def reset(self) -> None:
        self.prev = 0.0
        self.prev_prev = 0.0
        self.energy = 0.0
        self.phase = DetectorPhase.IDLE
        self.last_peak_ms: Optional[int] = None

    @property
    def threshold(self) -> float:
        """Current adaptive peak threshold, never below the configured floor."""
        cfg = self.config
        return max(cfg.min_peak_threshold, self.energy * cfg.threshold_gain)

    def _expire(self, now_ms: int) -> None:
        if self.phase is DetectorPhase.IDLE or self.last_peak_ms is None:
            return
        if now_ms - self.last_peak_ms >= self.config.max_step_period_ms:
            logger.debug("Pending peak at %d ms expired at %d ms", self.last_peak_ms, now_ms)
            self.phase = DetectorPhase.IDLE

    def _on_peak(self, now_ms: int) -> Optional[StepEvent]:
        cfg = self.config
        event = None
        dt = None if self.last_peak_ms is None else now_ms - self.last_peak_ms

        if (
            self.phase is DetectorPhase.VALLEY_SEEN
            and dt is not None
            and cfg.min_step_period_ms < dt < cfg.max_step_period_ms
        ):
            event = StepEvent(timestamp_ms=now_ms)
            self.phase = DetectorPhase.IDLE
        else:
            # A lone peak only re-arms the matcher
            self.phase = DetectorPhase.PEAK_PENDING

        self.last_peak_ms = now_ms
        return event

    def process(self, dyn: float, now_ms: int) -> Optional[StepEvent]:
        cfg = self.config

        # Activity gate: rest and sensor noise leave the state untouched
        if abs(dyn) < cfg.activity_gate:
            return None

        self.energy = cfg.energy_alpha * self.energy + (1.0 - cfg.energy_alpha) * abs(dyn)
        threshold = self.threshold

        self._expire(now_ms)

        prev, prev_prev = self.prev, self.prev_prev
        is_valley = prev < prev_prev and prev < dyn and prev < -threshold / 2.0
        is_peak = prev > prev_prev and prev > dyn and prev > threshold

        if is_valley and self.phase is DetectorPhase.PEAK_PENDING:
            self.phase = DetectorPhase.VALLEY_SEEN

        event = self._on_peak(now_ms) if is_peak else None

        self.prev_prev = prev
        self.prev = dyn
        return event


class _StepBandStrategy(StepStrategy):
    """Shared step-band low-pass for the fixed-level strategies."""

    def reset(self) -> None:
        self.band = 0.0
        self.prev_band = 0.0
        self.last_step_ms: Optional[int] = None

    def _filter(self, dyn: float) -> float:
        alpha = self.config.step_band_alpha
        self.prev_band = self.band
        self.band = alpha * self.band + (1.0 - alpha) * dyn
        return self.band


class ThresholdStrategy(_StepBandStrategy):
    """Rising-edge crossing of a fixed threshold, re-armed after a debounce interval."""

    def process(self, dyn: float, now_ms: int) -> Optional[StepEvent]:
        cfg = self.config
        value = self._filter(dyn)

        rising = self.prev_band < cfg.step_threshold <= value
        debounced = self.last_step_ms is None or now_ms - self.last_step_ms > cfg.min_step_interval_ms
        if rising and debounced:
            self.last_step_ms = now_ms
            return StepEvent(timestamp_ms=now_ms)
        return None


class HysteresisStrategy(_StepBandStrategy):
    """Fires on reaching the high level; re-arms only after dropping to the low level."""

    def reset(self) -> None:
        super().reset()
        self.armed = True

    def process(self, dyn: float, now_ms: int) -> Optional[StepEvent]:
        cfg = self.config
        value = self._filter(dyn)

        if self.armed and value >= cfg.hysteresis_high:
            self.armed = False
            self.last_step_ms = now_ms
            return StepEvent(timestamp_ms=now_ms)
        if not self.armed and value <= cfg.hysteresis_low:
            self.armed = True
        return None


class StepDetector:
    """
    Step detection interface for one stream.

    Guards the selected strategy against non-finite values and timestamps that
    go backwards; both are dropped without touching any state.
    """

    def __init__(self, config: Optional[DetectorConfig] = None):
        """
        Initialize the step detector.

        Args:
            config: Detector parameters, including the strategy to use
        """
        self.config = config or DetectorConfig()
        strategy_class = self._get_strategy_class(self.config.algorithm)
        self.strategy = strategy_class(self.config)
        self.reset()

    @staticmethod
    def _get_strategy_class(algorithm: StepDetectionAlgorithm):
        """Get the strategy class for the specified algorithm."""
        strategy_map = {
            StepDetectionAlgorithm.PEAK_VALLEY: PeakValleyStrategy,
            StepDetectionAlgorithm.THRESHOLD: ThresholdStrategy,
            StepDetectionAlgorithm.HYSTERESIS: HysteresisStrategy,
        }

        if algorithm not in strategy_map:
            raise ValueError(f"Unknown algorithm: {algorithm}")

        return strategy_map[algorithm]

    @property
    def algorithm(self) -> StepDetectionAlgorithm:
        return self.config.algorithm

    def reset(self) -> None:
        """Clear strategy state and counters."""
        self.strategy.reset()
        self.last_timestamp_ms: Optional[int] = None
        self.step_count = 0
        self.samples_rejected = 0

    def accepts_timestamp(self, timestamp_ms: int) -> bool:
        """Return False, counting and logging the drop, when timestamp_ms goes backwards."""
        if self.last_timestamp_ms is not None and timestamp_ms < self.last_timestamp_ms:
            self.samples_rejected += 1
            logger.warning(
                "Dropping out-of-order sample at %d ms (last %d ms)", timestamp_ms, self.last_timestamp_ms
            )
            return False
        return True

    def process(self, dyn: float, timestamp_ms: int) -> Optional[StepEvent]:
        """
        Feed one dynamic acceleration value.

        Args:
            dyn: Dynamic acceleration from the conditioner
            timestamp_ms: Monotonic arrival time in milliseconds

        Returns:
            StepEvent when this sample confirms a step, otherwise None
        """
        if dyn is None or not math.isfinite(dyn):
            self.samples_rejected += 1
            return None
        if not self.accepts_timestamp(timestamp_ms):
            return None
        self.last_timestamp_ms = timestamp_ms

        event = self.strategy.process(dyn, timestamp_ms)
        if event is not None:
            self.step_count += 1
            logger.debug("Step %d at %d ms (%s)", self.step_count, event.timestamp_ms, self.algorithm.value)
        return event

    def detect_steps(
        self,
        values: Sequence[float],
        timestamps_ms: Sequence[int],
    ) -> StepDetectionResult:
        """
        Run the detector over a recorded dynamic acceleration sequence.

        The detector is reset first, so results do not depend on earlier use.

        Args:
            values: Dynamic acceleration values
            timestamps_ms: Matching timestamps in milliseconds

        Returns:
            StepDetectionResult with step times (ms) and sample indices
        """
        if len(values) != len(timestamps_ms):
            raise ValueError("values and timestamps_ms must have the same length")

        start_time = time.time()
        self.reset()

        step_times: List[int] = []
        step_indices: List[int] = []
        for index, (value, stamp) in enumerate(zip(values, timestamps_ms)):
            event = self.process(float(value), int(stamp))
            if event is not None:
                step_times.append(event.timestamp_ms)
                step_indices.append(index)

        return StepDetectionResult(
            algorithm=self.algorithm,
            step_times=np.asarray(step_times, dtype=np.int64),
            step_indices=np.asarray(step_indices, dtype=np.int64),
            processing_time=time.time() - start_time,
            parameters=self.config.model_dump(mode="json"),
        )


def compare_algorithms(
    values: Sequence[float],
    timestamps_ms: Sequence[int],
    config: Optional[DetectorConfig] = None,
    algorithms: Optional[List[StepDetectionAlgorithm]] = None,
) -> Dict[StepDetectionAlgorithm, StepDetectionResult]:
    """
    Compare several strategies on the same dynamic acceleration sequence.

    Args:
        values: Dynamic acceleration values
        timestamps_ms: Matching timestamps in milliseconds
        config: Shared detector parameters; only the algorithm is swapped
        algorithms: Strategies to compare (default: all available)

    Returns:
        Dictionary mapping algorithm to result
    """
    config = config or DetectorConfig()
    if algorithms is None:
        algorithms = list(StepDetectionAlgorithm)

    results = {}
    for algorithm in algorithms:
        detector = StepDetector(config.model_copy(update={"algorithm": algorithm}))
        results[algorithm] = detector.detect_steps(values, timestamps_ms)
    return results
