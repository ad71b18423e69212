"""
Step detection API models.

Defines Pydantic models for sample upload and step detection responses.
"""

from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field

from ..config import ConditionerConfig, DetectorConfig
from .samples import StepDetectionAlgorithm


class SampleIn(BaseModel):
    """A single accelerometer sample as sent by a client."""
    x: float = Field(..., description="X axis acceleration")
    y: float = Field(..., description="Y axis acceleration")
    z: float = Field(..., description="Z axis acceleration")
    timestamp_ms: int = Field(..., ge=0, description="Monotonic arrival time in milliseconds")


class StepDetectionRequest(BaseModel):
    """Model for a JSON step detection request."""
    samples: List[SampleIn] = Field(..., description="Ordered accelerometer samples")
    algorithm: Optional[StepDetectionAlgorithm] = Field(
        None, description="Step detection strategy; overrides detector.algorithm when set"
    )
    conditioner: Optional[ConditionerConfig] = Field(None, description="Conditioner overrides")
    detector: Optional[DetectorConfig] = Field(None, description="Detector overrides")


class StepDetectionResponse(BaseModel):
    """Response model for step detection."""
    algorithm: str = Field(..., description="Strategy used")
    step_count: int = Field(..., description="Number of confirmed steps")
    step_times_ms: List[int] = Field(..., description="Confirming timestamps of each step")
    samples_processed: int = Field(..., description="Samples fed to the pipeline")
    samples_rejected: int = Field(..., description="Samples dropped as invalid or out of order")
    cadence: Dict[str, Any] = Field(..., description="Cadence metrics")


class ReplayResponse(BaseModel):
    """Response model for a recorded file replay."""
    filename: str = Field(..., description="Uploaded filename")
    processing_results: Dict[str, Any] = Field(..., description="Replay results")
    status: str = Field(..., description="Processing status")
