"""
Replay service for recorded accelerometer data.

This service loads recorded files, replays them sample by sample through a
step pipeline and summarises the detected steps.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ..algorithms.cadence import CadenceAnalyzer
from ..algorithms.conditioner import condition_array
from ..algorithms.pipeline import StepPipeline
from ..algorithms.step_detection import compare_algorithms
from ..config import PipelineConfig, data_processing_config, settings
from ..models.samples import Sample, StepDetectionAlgorithm

logger = logging.getLogger(__name__)


def clean_for_json(obj):
    """Clean data structure to be JSON-safe by replacing NaN/inf with None."""
    if obj is None:
        return None
    if isinstance(obj, (str, bool)):
        return obj
    if isinstance(obj, (int, np.integer)):
        return int(obj)
    if isinstance(obj, (float, np.floating)):
        if np.isnan(obj) or np.isinf(obj):
            return None
        return float(obj)
    if isinstance(obj, dict):
        return {k: clean_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, np.ndarray)):
        return [clean_for_json(item) for item in obj]
    return obj


class ReplayService:
    """Service for replaying recorded accelerometer data through the step pipeline."""

    def __init__(self, sample_period_ms: Optional[float] = None):
        """
        Initialize the replay service.

        Args:
            sample_period_ms: Period used when a recording has no time column
        """
        self.sample_period_ms = sample_period_ms or settings.sample_period_ms
        self.cadence_analyzer = CadenceAnalyzer()

    def load_data_file(self, file_path: Union[str, Path]) -> pd.DataFrame:
        """
        Load a recorded file and normalise it to columns x, y, z, timestamp_ms.

        Args:
            file_path: Path to the data file (absolute or relative to raw_data_directory)

        Returns:
            Normalised DataFrame
        """
        file_path = Path(file_path)
        if not file_path.is_absolute() and not file_path.exists():
            file_path = (Path(settings.raw_data_directory).resolve() / file_path).resolve()

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in data_processing_config.SUPPORTED_SUFFIXES:
            raise ValueError(f"Unsupported file type: {file_path.suffix}")

        if suffix == ".csv":
            data = pd.read_csv(file_path)
        else:
            data = pd.read_parquet(file_path)

        logger.info("Loaded %s: %d rows, %d columns", file_path.name, len(data), len(data.columns))
        return self.normalise_frame(data)

    def normalise_frame(self, data: pd.DataFrame) -> pd.DataFrame:
        """
        Map column aliases and derive a millisecond timestamp column.

        Args:
            data: Raw recording

        Returns:
            DataFrame with x, y, z (float) and timestamp_ms (int64)
        """
        data = data.copy()

        for old_name, new_name in data_processing_config.COLUMN_MAPPING.items():
            if old_name in data.columns and new_name not in data.columns:
                data[new_name] = data[old_name]

        missing_columns = [col for col in data_processing_config.REQUIRED_COLUMNS if col not in data.columns]
        if missing_columns:
            raise ValueError(
                f"Missing required columns: {missing_columns}. Available columns: {list(data.columns)}"
            )

        timestamps = None
        for column, factor in data_processing_config.TIME_COLUMNS:
            if column in data.columns:
                stamps = pd.to_numeric(data[column], errors='coerce').to_numpy(dtype=float) * factor
                if np.all(np.isfinite(stamps)):
                    timestamps = stamps - stamps[0] if len(stamps) else stamps
                    break
                logger.warning("Time column %s has non-numeric values; ignoring it", column)
        if timestamps is None:
            timestamps = np.arange(len(data)) * self.sample_period_ms

        frame = pd.DataFrame({
            'x': pd.to_numeric(data['x'], errors='coerce').astype(float),
            'y': pd.to_numeric(data['y'], errors='coerce').astype(float),
            'z': pd.to_numeric(data['z'], errors='coerce').astype(float),
        })
        frame['timestamp_ms'] = np.round(timestamps).astype(np.int64)
        return frame

    def iter_samples(self, frame: pd.DataFrame):
        """Yield Sample objects in row order."""
        for row in frame.itertuples(index=False):
            yield Sample(x=row.x, y=row.y, z=row.z, timestamp_ms=int(row.timestamp_ms))

    def replay(self, frame: pd.DataFrame, config: Optional[PipelineConfig] = None) -> Dict[str, Any]:
        """
        Replay a normalised recording through a fresh pipeline.

        Args:
            frame: Output of normalise_frame / load_data_file
            config: Pipeline configuration

        Returns:
            JSON-safe dictionary with step detection, cadence and data info
        """
        start_time = time.time()
        pipeline = StepPipeline(config)
        step_times = [event.timestamp_ms for event in pipeline.run(self.iter_samples(frame))]
        processing_time = time.time() - start_time

        cadence = self.cadence_analyzer.analyze(step_times)
        stamps = frame['timestamp_ms'].to_numpy()
        duration = float(stamps[-1] - stamps[0]) if len(stamps) else 0.0

        logger.info(
            "Replayed %d samples with %s: %d steps (%d rejected)",
            len(frame), pipeline.detector.algorithm.value, len(step_times), pipeline.samples_rejected,
        )

        results = {
            "step_detection": {
                "algorithm": pipeline.detector.algorithm.value,
                "step_count": len(step_times),
                "step_times_ms": step_times,
                "processing_time": processing_time,
                "parameters": pipeline.config.model_dump(mode="json"),
            },
            "cadence": cadence.to_dict(),
            "data_info": {
                "data_points": len(frame),
                "samples_rejected": pipeline.samples_rejected,
                "duration_ms": duration,
                "sample_rate_hz": (len(frame) - 1) * 1000.0 / duration if duration > 0 else None,
            },
        }
        return clean_for_json(results)

    def compare(
        self,
        frame: pd.DataFrame,
        config: Optional[PipelineConfig] = None,
        algorithms: Optional[List[StepDetectionAlgorithm]] = None,
    ) -> Dict[str, Any]:
        """
        Compare strategies on one recording.

        The recording is conditioned once in batch, then each strategy runs on
        the same dynamic acceleration sequence.
        """
        config = config or PipelineConfig()
        dynamic = condition_array(frame['x'], frame['y'], frame['z'], config.conditioner)
        results = compare_algorithms(dynamic, frame['timestamp_ms'].to_numpy(), config.detector, algorithms)

        comparison_results = {}
        for algorithm, result in results.items():
            comparison_results[algorithm.value] = {
                "step_count": len(result.step_times),
                "step_times_ms": result.step_times.tolist(),
                "processing_time": result.processing_time,
                "cadence": self.cadence_analyzer.analyze(result.step_times).to_dict(),
            }

        return clean_for_json({
            "algorithms": comparison_results,
            "data_info": {"data_points": len(frame)},
        })
