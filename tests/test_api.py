"""
API tests for the step counter.

These tests verify that the API endpoints are working correctly.
"""

import io

import pandas as pd
from fastapi.testclient import TestClient

from stepcounter.main import app

client = TestClient(app)


def walk_payload(walk_samples, **extra):
    samples = [
        {"x": s.x, "y": s.y, "z": s.z, "timestamp_ms": s.timestamp_ms}
        for s in walk_samples()
    ]
    return {"samples": samples, "conditioner": {"prime_gravity": True}, **extra}


def walk_csv(walk_samples) -> bytes:
    samples = walk_samples()
    frame = pd.DataFrame({
        "accX": [s.x for s in samples],
        "accY": [s.y for s in samples],
        "accZ": [s.z for s in samples],
        "timestamp_ms": [s.timestamp_ms for s in samples],
    })
    buffer = io.StringIO()
    frame.to_csv(buffer, index=False)
    return buffer.getvalue().encode()


def test_health_check():
    """Test the health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_root_endpoint():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Step Counter API"


def test_get_algorithms():
    """Test getting available strategies."""
    response = client.get("/api/steps/algorithms")
    assert response.status_code == 200
    names = [algo["name"] for algo in response.json()["algorithms"]]
    assert names == ["peak_valley", "threshold", "hysteresis"]


def test_get_default_config():
    response = client.get("/api/steps/config")
    assert response.status_code == 200
    data = response.json()
    assert data["pipeline"]["conditioner"]["gravity_alpha"] == 0.9
    assert data["pipeline"]["detector"]["algorithm"] == "peak_valley"


def test_detect_steps(walk_samples):
    response = client.post("/api/steps/detect", json=walk_payload(walk_samples))
    assert response.status_code == 200
    data = response.json()
    assert data["algorithm"] == "peak_valley"
    assert data["step_count"] == 5
    assert data["step_times_ms"] == [2160, 3600, 5040, 6480, 7920]
    assert data["samples_processed"] == 70
    assert data["samples_rejected"] == 0
    assert data["cadence"]["cadence_spm"] > 0


def test_detect_steps_with_other_strategy(walk_samples):
    payload = walk_payload(walk_samples, algorithm="hysteresis")
    response = client.post("/api/steps/detect", json=payload)
    assert response.status_code == 200
    assert response.json()["algorithm"] == "hysteresis"


def test_detect_uses_algorithm_from_detector_overrides(walk_samples):
    payload = walk_payload(walk_samples, detector={"algorithm": "threshold"})
    response = client.post("/api/steps/detect", json=payload)
    assert response.status_code == 200
    assert response.json()["algorithm"] == "threshold"


def test_top_level_algorithm_wins_over_detector_overrides(walk_samples):
    payload = walk_payload(walk_samples, algorithm="hysteresis", detector={"algorithm": "threshold"})
    response = client.post("/api/steps/detect", json=payload)
    assert response.status_code == 200
    assert response.json()["algorithm"] == "hysteresis"


def test_detect_counts_invalid_sample_once(walk_samples):
    payload = walk_payload(walk_samples)
    payload["samples"][30]["x"] = 1000.0
    response = client.post("/api/steps/detect", json=payload)
    assert response.status_code == 200
    assert response.json()["samples_rejected"] == 1


def test_detect_rejects_invalid_config(walk_samples):
    payload = walk_payload(walk_samples, detector={"energy_alpha": 1.5})
    response = client.post("/api/steps/detect", json=payload)
    assert response.status_code == 422


def test_detect_rejects_unknown_algorithm(walk_samples):
    payload = walk_payload(walk_samples, algorithm="zero_crossing")
    response = client.post("/api/steps/detect", json=payload)
    assert response.status_code == 422


def test_upload_recording(walk_samples):
    response = client.post(
        "/api/steps/upload",
        files={"file": ("walk.csv", walk_csv(walk_samples), "text/csv")},
        data={"prime_gravity": "true"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["filename"] == "walk.csv"
    assert data["processing_results"]["step_detection"]["step_count"] == 5


def test_upload_recording_compare(walk_samples):
    response = client.post(
        "/api/steps/upload",
        files={"file": ("walk.csv", walk_csv(walk_samples), "text/csv")},
        data={"prime_gravity": "true", "compare": "true"},
    )
    assert response.status_code == 200
    algorithms = response.json()["processing_results"]["algorithms"]
    assert set(algorithms) == {"peak_valley", "threshold", "hysteresis"}


def test_upload_rejects_unsupported_type():
    response = client.post(
        "/api/steps/upload",
        files={"file": ("walk.txt", b"x,y,z\n0,0,9.8\n", "text/plain")},
    )
    assert response.status_code == 400


def test_upload_rejects_missing_columns():
    response = client.post(
        "/api/steps/upload",
        files={"file": ("walk.csv", b"x,y\n0,0\n", "text/csv")},
    )
    assert response.status_code == 400
    assert "Missing required columns" in response.json()["detail"]


def test_upload_rejects_unknown_algorithm(walk_samples):
    response = client.post(
        "/api/steps/upload",
        files={"file": ("walk.csv", walk_csv(walk_samples), "text/csv")},
        data={"algorithm": "zero_crossing"},
    )
    assert response.status_code == 400
