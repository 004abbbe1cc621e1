"""High-level entry point combining a linear estimate with optional refinement."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger

from planar_homography.config import EstimatorConfig
from planar_homography.errors import PreconditionViolation
from planar_homography.estimation import (
    RefinementResult,
    estimate_dlt,
    estimate_least_squares,
    refine_homography,
)
from planar_homography.geometry import check_correspondences, normalize_homography, reprojection_errors


class EstimationMethod(str, enum.Enum):
    DLT = "dlt"
    LEAST_SQUARES = "least_squares"


@dataclass(slots=True)
class EstimationResult:
    homography: np.ndarray
    method: EstimationMethod
    mean_reprojection_error: float
    refinement: Optional[RefinementResult] = None

    @property
    def refined(self) -> bool:
        return self.refinement is not None


class HomographyEstimator:
    """Runs one linear strategy and, if enabled, Levenberg-Marquardt on top.

    There is no fallback between strategies: a failing estimate raises.
    """

    def __init__(self, config: Optional[EstimatorConfig] = None) -> None:
        self._config = config or EstimatorConfig()

    @classmethod
    def from_config(cls, config: EstimatorConfig) -> "HomographyEstimator":
        logger.info(
            f"Homography estimator initialized: method={config.method} "
            f"refinement={'on' if config.refinement.enabled else 'off'}"
        )
        return cls(config)

    @property
    def config(self) -> EstimatorConfig:
        return self._config

    def estimate(
        self,
        source: object,
        target: object,
        method: EstimationMethod | str | None = None,
        refine: Optional[bool] = None,
    ) -> EstimationResult:
        """Estimate the homography taking ``source`` onto ``target``.

        Args:
            source: Array-like of shape (N, 2).
            target: Array-like of shape (N, 2).
            method: Linear strategy; defaults to ``config.method``.
            refine: Run refinement; defaults to ``config.refinement.enabled``.
                Refinement requires more than nine correspondences.
        """
        requested = method if method is not None else self._config.method
        if isinstance(requested, str) and not isinstance(requested, EstimationMethod):
            requested = requested.lower()
        try:
            chosen = EstimationMethod(requested)
        except ValueError as exc:
            raise PreconditionViolation(f"Unsupported estimation method: {method}") from exc
        do_refine = self._config.refinement.enabled if refine is None else refine
        src, dst = check_correspondences(source, target, minimum=1)

        if chosen is EstimationMethod.DLT:
            homography = estimate_dlt(src, dst, self._config.dlt)
        else:
            homography = estimate_least_squares(src, dst, self._config.least_squares)

        refinement: Optional[RefinementResult] = None
        if do_refine:
            refinement = refine_homography(
                homography,
                src,
                dst,
                config=self._config.refinement,
            )
            homography = normalize_homography(refinement.homography)

        mean_error = float(np.mean(reprojection_errors(homography, src, dst)))
        logger.info(
            f"Estimated homography via {chosen.value} from {src.shape[0]} correspondences: "
            f"mean reprojection error {mean_error:.4g}"
        )
        return EstimationResult(
            homography=homography,
            method=chosen,
            mean_reprojection_error=mean_error,
            refinement=refinement,
        )


def estimate_homography(
    source: object,
    target: object,
    method: EstimationMethod | str | None = None,
    refine: Optional[bool] = None,
    config: Optional[EstimatorConfig] = None,
) -> np.ndarray:
    """Convenience wrapper returning only the 3x3 matrix.

    ``method`` and ``refine`` fall back to ``config`` when left as None.
    """
    estimator = HomographyEstimator(config)
    return estimator.estimate(source, target, method=method, refine=refine).homography
