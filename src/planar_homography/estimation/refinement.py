"""Levenberg-Marquardt refinement of a linear homography estimate.

The nine entries of H are adjusted to minimise the per-correspondence
reprojection distance using MINPACK's ``lmdif`` through
:func:`scipy.optimize.leastsq`. Correspondences travel to the residual
callback inside a :class:`RefinementContext` passed through ``args``, so
refinements share no state and may run concurrently.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from loguru import logger
from scipy.optimize import leastsq

from planar_homography.config import RefinementConfig
from planar_homography.errors import PreconditionViolation
from planar_homography.geometry import as_homography, check_correspondences

PARAMETER_COUNT = 9


class LMStatus(enum.IntEnum):
    """MINPACK ``info`` codes as returned by ``leastsq``."""

    IMPROPER_INPUT = 0
    FTOL_REACHED = 1
    XTOL_REACHED = 2
    FTOL_AND_XTOL_REACHED = 3
    ORTHOGONAL_TO_JACOBIAN = 4
    MAX_EVALUATIONS = 5
    FTOL_TOO_SMALL = 6
    XTOL_TOO_SMALL = 7
    GTOL_TOO_SMALL = 8

    @property
    def converged(self) -> bool:
        return 1 <= self.value <= 4


@dataclass(frozen=True, slots=True)
class RefinementContext:
    """Correspondences bound to a single refinement call."""

    source: np.ndarray
    target: np.ndarray

    @property
    def count(self) -> int:
        return int(self.source.shape[0])


ResidualFn = Callable[[np.ndarray, RefinementContext], np.ndarray]


@dataclass(slots=True)
class RefinementResult:
    """Outcome of a refinement pass.

    ``status`` is the solver's code, untouched; see :class:`LMStatus`.
    Costs are sums of squared residuals, the quantity the solver minimises;
    distances are the total reprojection distance over all correspondences.
    """

    homography: np.ndarray
    status: int
    message: str
    evaluations: int
    initial_cost: float
    final_cost: float
    initial_distance: float
    final_distance: float

    @property
    def converged(self) -> bool:
        return 1 <= self.status <= 4

    @property
    def lm_status(self) -> Optional[LMStatus]:
        try:
            return LMStatus(self.status)
        except ValueError:
            return None


def reprojection_residuals(params: np.ndarray, context: RefinementContext) -> np.ndarray:
    """Distance between each mapped source point and its target.

    ``params`` holds H in row-major order; coordinates are used as given,
    without any normalizing similarity.
    """
    H = np.asarray(params, dtype=np.float64).reshape(3, 3)
    ones = np.ones((context.count, 1), dtype=np.float64)
    mapped = np.hstack([context.source, ones]) @ H.T
    with np.errstate(divide="ignore", invalid="ignore"):
        projected = mapped[:, :2] / mapped[:, 2:3]
    distances = np.linalg.norm(projected - context.target, axis=1)
    # Points sent to infinity get a large finite penalty so the solver can back off.
    return np.where(np.isfinite(distances), distances, 1e100)


def homogeneous_residuals(params: np.ndarray, context: RefinementContext) -> np.ndarray:
    """Distance between ``H @ (x, y, 1)`` and ``(u, v, 1)`` without perspective division.

    Cheaper and smooth everywhere, but biased towards solutions with w close
    to 1; pass it as ``residual_fn`` when that trade-off is acceptable.
    """
    H = np.asarray(params, dtype=np.float64).reshape(3, 3)
    ones = np.ones((context.count, 1), dtype=np.float64)
    mapped = np.hstack([context.source, ones]) @ H.T
    expected = np.hstack([context.target, ones])
    return np.linalg.norm(mapped - expected, axis=1)


def _sum_of_squares(
    residual_fn: ResidualFn, params: np.ndarray, context: RefinementContext
) -> float:
    residuals = np.asarray(residual_fn(params, context), dtype=np.float64)
    return float(residuals @ residuals)


def _total_distance(homography: np.ndarray, context: RefinementContext) -> float:
    return float(np.sum(reprojection_residuals(homography.ravel(), context)))


def refine_homography(
    homography: object,
    source: object,
    target: object,
    tolerance: Optional[float] = None,
    residual_fn: ResidualFn = reprojection_residuals,
    config: Optional[RefinementConfig] = None,
) -> RefinementResult:
    """Polish a homography estimate with Levenberg-Marquardt.

    Args:
        homography: Initial 3x3 estimate, e.g. from DLT or least squares.
            It is not modified.
        source: Array-like of shape (N, 2) with N > 9.
        target: Array-like of shape (N, 2).
        tolerance: Relative tolerance used for both ``ftol`` and ``xtol``;
            defaults to ``config.tolerance``.
        residual_fn: Callback ``(params, context) -> residuals`` returning
            one value per correspondence.
        config: Refinement settings; defaults to :class:`RefinementConfig`.

    Returns:
        RefinementResult whose ``status`` callers must inspect: only codes
        1-4 mean the solver converged.

    Raises:
        PreconditionViolation: nine or fewer correspondences, unequal sets,
            or an initial homography that is not a finite 3x3 matrix.
    """
    config = config or RefinementConfig()
    src, dst = check_correspondences(source, target, minimum=1)
    if src.shape[0] <= PARAMETER_COUNT:
        raise PreconditionViolation(
            f"Refinement needs more than {PARAMETER_COUNT} correspondences, got {src.shape[0]}"
        )
    initial = as_homography(homography)
    tol = config.tolerance if tolerance is None else float(tolerance)
    if tol <= 0.0:
        raise PreconditionViolation(f"Tolerance must be positive, got {tol}")

    context = RefinementContext(source=src, target=dst)
    buffer = np.array(initial.ravel(), dtype=np.float64)
    initial_cost = _sum_of_squares(residual_fn, buffer, context)
    initial_distance = _total_distance(buffer, context)

    options = {}
    if config.max_evaluations is not None:
        options["maxfev"] = config.max_evaluations

    params, _, info, message, status = leastsq(
        residual_fn,
        buffer,
        args=(context,),
        ftol=tol,
        xtol=tol,
        full_output=True,
        **options,
    )

    refined = np.array(params, dtype=np.float64).reshape(3, 3)
    final_cost = _sum_of_squares(residual_fn, refined.ravel(), context)
    final_distance = _total_distance(refined, context)
    evaluations = int(info.get("nfev", 0))

    logger.debug(
        f"LM refinement on {context.count} correspondences: status={status} "
        f"evaluations={evaluations} cost {initial_cost:.6g} -> {final_cost:.6g}"
        f" distance {initial_distance:.6g} -> {final_distance:.6g}"
    )
    if not 1 <= status <= 4:
        logger.warning(f"LM refinement stopped without converging (status {status}): {message}")

    return RefinementResult(
        homography=refined,
        status=int(status),
        message=str(message),
        evaluations=evaluations,
        initial_cost=initial_cost,
        final_cost=final_cost,
        initial_distance=initial_distance,
        final_distance=final_distance,
    )
