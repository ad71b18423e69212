"""
Tests for the recorded-data replay service.
"""

import numpy as np
import pandas as pd
import pytest

from stepcounter.core.config import ConditionerConfig, PipelineConfig
from stepcounter.core.models import StepDetectionAlgorithm
from stepcounter.core.services.replay_service import ReplayService, clean_for_json

PRIMED = PipelineConfig(conditioner=ConditionerConfig(prime_gravity=True))


def walk_frame(walk_samples):
    samples = walk_samples()
    frame = pd.DataFrame({
        "x": [s.x for s in samples],
        "y": [s.y for s in samples],
        "z": [s.z for s in samples],
        "timestamp_ms": [s.timestamp_ms for s in samples],
    })
    return frame


def test_normalise_maps_aliases_and_seconds():
    raw = pd.DataFrame({
        "accX": [0.0, 0.1],
        "accY": [0.0, 0.2],
        "accZ": [9.8, 9.7],
        "time": [12.5, 12.55],
    })
    frame = ReplayService().normalise_frame(raw)

    assert list(frame.columns) == ["x", "y", "z", "timestamp_ms"]
    assert frame["timestamp_ms"].tolist() == [0, 50]
    assert frame["z"].tolist() == [9.8, 9.7]


def test_normalise_synthesises_timestamps():
    raw = pd.DataFrame({"x": [0.0] * 4, "y": [0.0] * 4, "z": [9.8] * 4})
    frame = ReplayService(sample_period_ms=40).normalise_frame(raw)
    assert frame["timestamp_ms"].tolist() == [0, 40, 80, 120]


def test_normalise_requires_axes():
    raw = pd.DataFrame({"x": [0.0], "y": [0.0]})
    with pytest.raises(ValueError, match="Missing required columns"):
        ReplayService().normalise_frame(raw)


def test_non_numeric_axis_becomes_invalid_sample():
    raw = pd.DataFrame({"x": ["0.0", "oops"], "y": [0.0, 0.0], "z": [9.8, 9.8]})
    frame = ReplayService().normalise_frame(raw)
    assert np.isnan(frame["x"].iloc[1])


def test_load_csv_and_replay(tmp_path, walk_samples):
    path = tmp_path / "walk.csv"
    walk_frame(walk_samples).to_csv(path, index=False)

    service = ReplayService()
    frame = service.load_data_file(path)
    result = service.replay(frame, PRIMED)

    detection = result["step_detection"]
    assert detection["algorithm"] == "peak_valley"
    assert detection["step_count"] == 5
    assert detection["step_times_ms"] == [2160, 3600, 5040, 6480, 7920]
    assert result["cadence"]["step_count"] == 5
    assert result["cadence"]["mean_interval_ms"] == pytest.approx(1440)
    assert result["data_info"]["data_points"] == 70
    assert result["data_info"]["samples_rejected"] == 0
    assert result["data_info"]["sample_rate_hz"] == pytest.approx(1000 / 120)


def test_load_parquet(tmp_path, walk_samples):
    path = tmp_path / "walk.parquet"
    walk_frame(walk_samples).to_parquet(path, index=False)

    frame = ReplayService().load_data_file(path)
    assert len(frame) == 70
    assert frame["timestamp_ms"].iloc[-1] == 69 * 120


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ReplayService().load_data_file(tmp_path / "absent.csv")


def test_load_unsupported_suffix(tmp_path):
    path = tmp_path / "walk.txt"
    path.write_text("x,y,z\n0,0,9.8\n")
    with pytest.raises(ValueError, match="Unsupported file type"):
        ReplayService().load_data_file(path)


def test_replay_counts_rejected_rows(walk_samples):
    frame = walk_frame(walk_samples)
    frame.loc[30, "x"] = np.nan

    result = ReplayService().replay(frame, PRIMED)
    assert result["data_info"]["samples_rejected"] == 1


def test_compare_reports_every_strategy(walk_samples):
    frame = walk_frame(walk_samples)
    result = ReplayService().compare(frame, PRIMED)

    assert set(result["algorithms"]) == {algo.value for algo in StepDetectionAlgorithm}
    assert result["algorithms"]["peak_valley"]["step_times_ms"] == [2160, 3600, 5040, 6480, 7920]


def test_streaming_and_batch_replay_agree(walk_samples):
    service = ReplayService()
    frame = walk_frame(walk_samples)

    streamed = service.replay(frame, PRIMED)["step_detection"]["step_times_ms"]
    batched = service.compare(frame, PRIMED, [StepDetectionAlgorithm.PEAK_VALLEY])
    assert batched["algorithms"]["peak_valley"]["step_times_ms"] == streamed


def test_clean_for_json():
    cleaned = clean_for_json({"a": np.float64("nan"), "b": [np.int64(3), float("inf")], "c": "ok"})
    assert cleaned == {"a": None, "b": [3, None], "c": "ok"}
