"""Linear least-squares homography estimation with H[2, 2] fixed to 1.

This parameterization cannot represent a homography whose true bottom-right
entry is zero, i.e. one that maps the source origin to infinity. Such inputs
are an accepted restriction of this estimator; use the DLT estimator instead.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import scipy.linalg
from loguru import logger

from planar_homography.config import LeastSquaresConfig
from planar_homography.errors import NumericFailure
from planar_homography.geometry import check_correspondences

FAILURE_MESSAGE = "failure occurred calculating homography"


def build_linear_system(source: np.ndarray, target: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Pack the overdetermined system A @ h = b for the eight free entries of H."""
    count = source.shape[0]
    x, y = source[:, 0], source[:, 1]
    u, v = target[:, 0], target[:, 1]

    A = np.zeros((2 * count, 8), dtype=np.float64)
    b = np.empty(2 * count, dtype=np.float64)
    b[0::2] = u
    b[1::2] = v

    A[0::2, 0] = x
    A[0::2, 1] = y
    A[0::2, 2] = 1.0
    A[1::2, 3] = x
    A[1::2, 4] = y
    A[1::2, 5] = 1.0

    A[0::2, 6] = -x * u
    A[0::2, 7] = -y * u
    A[1::2, 6] = -x * v
    A[1::2, 7] = -y * v
    return A, b


def _solve_normal_equations(A: np.ndarray, b: np.ndarray, max_condition: float) -> np.ndarray:
    normal = A.T @ A
    rhs = A.T @ b

    diagonal = np.diag(normal)
    if np.any(diagonal <= 0.0):
        raise NumericFailure(f"{FAILURE_MESSAGE}: normal equations have an empty column")
    # Jacobi scaling so the conditioning test does not depend on coordinate units.
    scale = 1.0 / np.sqrt(diagonal)
    scaled = normal * np.outer(scale, scale)

    condition = float(np.linalg.cond(scaled))
    logger.debug(f"Least-squares normal equations: scaled condition number {condition:.3e}")
    if not np.isfinite(condition) or condition > max_condition:
        raise NumericFailure(
            f"{FAILURE_MESSAGE}: normal equations are singular (condition number {condition:.3e})"
        )

    try:
        lu, piv = scipy.linalg.lu_factor(scaled)
        solution = scipy.linalg.lu_solve((lu, piv), rhs * scale)
    except (np.linalg.LinAlgError, ValueError) as exc:
        raise NumericFailure(FAILURE_MESSAGE) from exc

    params = solution * scale
    if not np.all(np.isfinite(params)):
        raise NumericFailure(f"{FAILURE_MESSAGE}: solution is not finite")
    return params


def estimate_least_squares(
    source: object,
    target: object,
    config: Optional[LeastSquaresConfig] = None,
) -> np.ndarray:
    """Estimate a homography by solving the normal equations (A^T A) h = A^T b.

    Returns:
        3x3 homography with H[2, 2] == 1.

    Raises:
        PreconditionViolation: empty or unequal correspondence sets.
        NumericFailure: singular or ill-conditioned normal equations.
    """
    config = config or LeastSquaresConfig()
    src, dst = check_correspondences(source, target, minimum=1)

    A, b = build_linear_system(src, dst)
    params = _solve_normal_equations(A, b, config.max_condition)

    H = np.append(params, 1.0).reshape(3, 3)
    logger.debug(f"Least-squares homography from {src.shape[0]} correspondences")
    return H
