"""
Configuration management for the step counter.

This module centralizes all configuration settings, including:
- Signal conditioner parameters
- Step detector parameters for every strategy
- Application settings (API, logging, data directories)
- Recorded-file conventions
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.samples import StepDetectionAlgorithm


class ConditionerConfig(BaseModel):
    """Parameters of the gravity-removing signal conditioner."""

    # Gravity low-pass coefficient, close to 1 so only slow changes pass
    gravity_alpha: float = Field(default=0.9, gt=0.0, lt=1.0, description="Gravity filter coefficient")
    initial_gravity: float = Field(default=0.0, ge=0.0, description="Starting gravity estimate")
    prime_gravity: bool = Field(default=False, description="Seed gravity with the first accepted magnitude")
    max_axis_value: float = Field(default=160.0, gt=0.0, description="Largest accepted absolute axis reading")


class DetectorConfig(BaseModel):
    """Parameters of the step detector strategies."""

    algorithm: StepDetectionAlgorithm = Field(
        default=StepDetectionAlgorithm.PEAK_VALLEY, description="Step detection strategy"
    )

    # Peak-valley-peak
    activity_gate: float = Field(default=0.03, gt=0.0, description="Minimum |dynamic| treated as motion")
    energy_alpha: float = Field(default=0.95, gt=0.0, lt=1.0, description="Energy filter decay")
    min_peak_threshold: float = Field(default=0.2, gt=0.0, description="Adaptive threshold floor")
    threshold_gain: float = Field(default=1.5, gt=0.0, description="Energy to threshold gain")
    min_step_period_ms: float = Field(default=500.0, gt=0.0, description="Shortest inter-peak period")
    max_step_period_ms: float = Field(default=1000.0, gt=0.0, description="Longest inter-peak period")

    # Threshold and hysteresis variants
    step_band_alpha: float = Field(default=0.5, gt=0.0, lt=1.0, description="Step-band filter coefficient")
    step_threshold: float = Field(default=0.3, gt=0.0, description="Fixed rising-edge threshold")
    min_step_interval_ms: float = Field(default=250.0, gt=0.0, description="Debounce after a step")
    hysteresis_low: float = Field(default=0.1, gt=0.0, description="Re-arm level")
    hysteresis_high: float = Field(default=0.3, gt=0.0, description="Trigger level")

    @model_validator(mode="after")
    def check_ranges(self) -> "DetectorConfig":
        if self.min_step_period_ms >= self.max_step_period_ms:
            raise ValueError("min_step_period_ms must be smaller than max_step_period_ms")
        if self.hysteresis_low >= self.hysteresis_high:
            raise ValueError("hysteresis_low must be smaller than hysteresis_high")
        return self


class PipelineConfig(BaseModel):
    """Conditioner and detector configuration for one sensor stream."""
    conditioner: ConditionerConfig = Field(default_factory=ConditionerConfig)
    detector: DetectorConfig = Field(default_factory=DetectorConfig)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Nested pipeline fields use ``__``, e.g.
    ``STEPCOUNTER_PIPELINE__DETECTOR__THRESHOLD_GAIN=2.0``.
    """

    model_config = SettingsConfigDict(
        env_prefix="STEPCOUNTER_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Recordings given as relative paths are looked up here
    raw_data_directory: str = "data/raw"

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Stream defaults
    sample_period_ms: float = Field(default=50.0, gt=0.0)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)


# Global settings instance
settings = Settings()


# Data Processing Configuration
class DataProcessingConfig:
    """Conventions for recorded accelerometer files."""

    SUPPORTED_SUFFIXES = (".csv", ".parquet")

    # Map common column names to expected format
    COLUMN_MAPPING = {
        'accX': 'x', 'accY': 'y', 'accZ': 'z',
        'acc_x': 'x', 'acc_y': 'y', 'acc_z': 'z',
        'acc_x_data': 'x', 'acc_y_data': 'y', 'acc_z_data': 'z',
        'X': 'x', 'Y': 'y', 'Z': 'z',
    }

    REQUIRED_COLUMNS = ['x', 'y', 'z']

    # Time columns in priority order, with the factor converting them to ms
    TIME_COLUMNS = [
        ('timestamp_ms', 1.0),
        ('timestamp', 1.0),
        ('time_ms', 1.0),
        ('time', 1000.0),
        ('seconds_elapsed', 1000.0),
    ]


# Step Detection Algorithm Configuration
class StepDetectionConfig:
    """Descriptions of the step detection strategies."""

    ALGORITHMS: List[str] = [algo.value for algo in StepDetectionAlgorithm]

    ALGORITHM_DESCRIPTIONS: Dict[str, str] = {
        'peak_valley': 'Adaptive threshold with peak-valley-peak confirmation inside a cadence window',
        'threshold': 'Step-band low-pass with a fixed rising-edge threshold and debounce',
        'hysteresis': 'Step-band low-pass with separate trigger and re-arm levels',
    }

    # Fields each strategy reads, for documentation endpoints
    ALGORITHM_PARAMS: Dict[str, List[str]] = {
        'peak_valley': [
            'activity_gate', 'energy_alpha', 'min_peak_threshold',
            'threshold_gain', 'min_step_period_ms', 'max_step_period_ms',
        ],
        'threshold': ['step_band_alpha', 'step_threshold', 'min_step_interval_ms'],
        'hysteresis': ['step_band_alpha', 'hysteresis_low', 'hysteresis_high'],
    }


def build_pipeline_config(
    algorithm: Optional[StepDetectionAlgorithm] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> PipelineConfig:
    """
    Build a pipeline configuration from the global settings.

    Args:
        algorithm: Strategy to select instead of the configured one
        overrides: Flat mapping of conditioner/detector field names to values

    Returns:
        Validated PipelineConfig
    """
    conditioner = settings.pipeline.conditioner.model_dump()
    detector = settings.pipeline.detector.model_dump()
    for key, value in (overrides or {}).items():
        if key in ConditionerConfig.model_fields:
            conditioner[key] = value
        elif key in DetectorConfig.model_fields:
            detector[key] = value
        else:
            raise ValueError(f"Unknown configuration field: {key}")
    if algorithm is not None:
        detector['algorithm'] = algorithm
    return PipelineConfig(
        conditioner=ConditionerConfig(**conditioner),
        detector=DetectorConfig(**detector),
    )


# Create global config instances
data_processing_config = DataProcessingConfig()
step_detection_config = StepDetectionConfig()
