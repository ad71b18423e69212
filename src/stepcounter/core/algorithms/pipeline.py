"""
Step pipeline: one conditioner and one detector serving one sensor stream.
"""

import logging
import math
from typing import Callable, Iterable, Iterator, List, Optional

from ..config import PipelineConfig
from ..models.samples import Sample, StepEvent
from .conditioner import SignalConditioner
from .step_detection import StepDetector

logger = logging.getLogger(__name__)

StepCallback = Callable[[StepEvent], None]


class StepPipeline:
    """
    Synchronous per-sample pipeline.

    Samples must be delivered in arrival order. Consumers either pull events
    from ``run`` or register callbacks with ``subscribe``.
    """

    def __init__(self, config: Optional[PipelineConfig] = None, on_step: Optional[StepCallback] = None):
        self.config = config or PipelineConfig()
        self.conditioner = SignalConditioner(self.config.conditioner)
        self.detector = StepDetector(self.config.detector)
        self._callbacks: List[StepCallback] = []
        if on_step is not None:
            self.subscribe(on_step)

    @property
    def step_count(self) -> int:
        return self.detector.step_count

    @property
    def samples_rejected(self) -> int:
        """Invalid samples discarded by the conditioner plus out-of-order samples."""
        return self.conditioner.samples_rejected + self.detector.samples_rejected

    def subscribe(self, callback: StepCallback) -> None:
        """Register a callback invoked synchronously for every StepEvent."""
        self._callbacks.append(callback)

    def reset(self) -> None:
        """Forget all stream state, e.g. when sensing stops."""
        self.conditioner.reset()
        self.detector.reset()

    def process(self, sample: Sample) -> Optional[StepEvent]:
        # Stale samples must not reach the gravity estimate
        if not self.detector.accepts_timestamp(sample.timestamp_ms):
            return None
        dynamic = self.conditioner.process_sample(sample)
        if math.isnan(dynamic):
            return None
        event = self.detector.process(dynamic, sample.timestamp_ms)
        if event is not None:
            for callback in self._callbacks:
                callback(event)
        return event

    def run(self, samples: Iterable[Sample]) -> Iterator[StepEvent]:
        """Consume samples lazily and yield step events as they are confirmed."""
        for sample in samples:
            event = self.process(sample)
            if event is not None:
                yield event
