"""Homography estimation strategies."""

from .dlt import build_dlt_system, estimate_dlt  # noqa: F401
from .least_squares import build_linear_system, estimate_least_squares  # noqa: F401
from .refinement import (  # noqa: F401
    LMStatus,
    RefinementContext,
    RefinementResult,
    homogeneous_residuals,
    refine_homography,
    reprojection_residuals,
)
