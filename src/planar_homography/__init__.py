"""Planar homography estimation from 2D point correspondences."""

from .config import EstimatorConfig, load_config  # noqa: F401
from .errors import HomographyError, NumericFailure, PreconditionViolation  # noqa: F401
from .estimation import (  # noqa: F401
    LMStatus,
    RefinementResult,
    estimate_dlt,
    estimate_least_squares,
    refine_homography,
)
from .estimator import EstimationMethod, EstimationResult, HomographyEstimator, estimate_homography  # noqa: F401
from .geometry import project_points, reprojection_errors  # noqa: F401
