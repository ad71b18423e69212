"""
Step detection API endpoints.

This module provides endpoints for detecting steps in sample batches and
replaying uploaded recordings.
"""

import io
import logging
from pathlib import Path

import pandas as pd
from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from pydantic import ValidationError

from ..core.algorithms.cadence import CadenceAnalyzer
from ..core.algorithms.pipeline import StepPipeline
from ..core.config import (
    PipelineConfig,
    build_pipeline_config,
    data_processing_config,
    settings,
    step_detection_config,
)
from ..core.models.api_models import ReplayResponse, StepDetectionRequest, StepDetectionResponse
from ..core.models.samples import Sample, StepDetectionAlgorithm
from ..core.services import get_replay_service

logger = logging.getLogger(__name__)

router = APIRouter()


# Dependency to get replay service
def get_replay_service_instance():
    ReplayService = get_replay_service()
    return ReplayService()


def _parse_form_bool(value: str) -> bool:
    """Parse form string to bool so clients can send 'true'/'false' without 422."""
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("true", "1", "yes")


@router.get("/algorithms")
async def get_available_algorithms():
    """Get list of available step detection strategies."""
    algorithms = [
        {
            "name": algo.value,
            "description": step_detection_config.ALGORITHM_DESCRIPTIONS[algo.value],
            "parameters": step_detection_config.ALGORITHM_PARAMS[algo.value],
        }
        for algo in StepDetectionAlgorithm
    ]
    return {"algorithms": algorithms}


@router.get("/config")
async def get_default_config():
    """Get the pipeline configuration used when a request has no overrides."""
    return {
        "sample_period_ms": settings.sample_period_ms,
        "pipeline": settings.pipeline.model_dump(mode="json"),
    }


@router.post("/detect", response_model=StepDetectionResponse)
async def detect_steps(request: StepDetectionRequest):
    """Run a fresh pipeline over an ordered batch of samples."""
    base = settings.pipeline
    detector = request.detector or base.detector
    if request.algorithm is not None:
        detector = detector.model_copy(update={"algorithm": request.algorithm})
    config = PipelineConfig(conditioner=request.conditioner or base.conditioner, detector=detector)

    pipeline = StepPipeline(config)
    samples = (Sample(s.x, s.y, s.z, s.timestamp_ms) for s in request.samples)
    step_times = [event.timestamp_ms for event in pipeline.run(samples)]

    cadence = CadenceAnalyzer().analyze(step_times)
    return StepDetectionResponse(
        algorithm=detector.algorithm.value,
        step_count=len(step_times),
        step_times_ms=step_times,
        samples_processed=len(request.samples),
        samples_rejected=pipeline.samples_rejected,
        cadence=cadence.to_dict(),
    )


@router.post("/upload", response_model=ReplayResponse)
async def upload_recording(
    file: UploadFile = File(...),
    algorithm: str = Form("peak_valley"),
    prime_gravity: str = Form("false"),
    compare: str = Form("false"),
    service=Depends(get_replay_service_instance),
):
    """Replay an uploaded CSV or Parquet recording."""
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in data_processing_config.SUPPORTED_SUFFIXES:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {suffix or 'none'}")

    try:
        config = build_pipeline_config(
            algorithm=StepDetectionAlgorithm(algorithm),
            overrides={"prime_gravity": _parse_form_bool(prime_gravity)},
        )
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    content = await file.read()
    try:
        if suffix == ".csv":
            raw = pd.read_csv(io.BytesIO(content))
        else:
            raw = pd.read_parquet(io.BytesIO(content))
        frame = service.normalise_frame(raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Could not read upload %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=f"Could not read file: {e}")

    if _parse_form_bool(compare):
        result = service.compare(frame, config)
    else:
        result = service.replay(frame, config)

    return ReplayResponse(filename=file.filename, processing_results=result, status="completed")
