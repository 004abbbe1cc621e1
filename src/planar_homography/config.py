"""Configuration schema and loader for the homography estimators."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

_METHODS = ("dlt", "least_squares")
_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    output: str = Field("stderr")

    @field_validator("level")
    @classmethod
    def ensure_known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


class DLTConfig(BaseModel):
    # Ratio of the 8th to the 1st singular value below which the null space
    # of the coefficient matrix is treated as more than one-dimensional.
    rank_tolerance: float = Field(1e-10, gt=0.0, lt=1.0)
    max_condition: float = Field(1e12, gt=1.0)


class LeastSquaresConfig(BaseModel):
    # Applies to the Jacobi-scaled normal equations.
    max_condition: float = Field(1e12, gt=1.0)


class RefinementConfig(BaseModel):
    enabled: bool = False
    tolerance: float = Field(1.49012e-08, gt=0.0)
    max_evaluations: Optional[int] = Field(None, ge=1)


class EstimatorConfig(BaseModel):
    method: str = Field("dlt")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dlt: DLTConfig = Field(default_factory=DLTConfig)
    least_squares: LeastSquaresConfig = Field(default_factory=LeastSquaresConfig)
    refinement: RefinementConfig = Field(default_factory=RefinementConfig)

    @field_validator("method")
    @classmethod
    def ensure_known_method(cls, value: str) -> str:
        method = value.lower()
        if method not in _METHODS:
            raise ValueError(f"Unsupported estimation method: {value}")
        return method


def load_config(path: str | Path) -> EstimatorConfig:
    """Load configuration from YAML file."""
    with open(path, "r", encoding="utf-8") as handle:
        raw: Dict[str, object] = yaml.safe_load(handle) or {}
    return EstimatorConfig.model_validate(raw)
