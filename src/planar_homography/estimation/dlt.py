"""Normalized direct linear transform (DLT) homography estimation."""

from __future__ import annotations

from typing import Optional

import numpy as np
from loguru import logger

from planar_homography.config import DLTConfig
from planar_homography.errors import NumericFailure
from planar_homography.geometry import (
    check_correspondences,
    check_invertible,
    normalize_homography,
    similarity_transform,
    transform_points_inplace,
)

MIN_CORRESPONDENCES = 4


def build_dlt_system(source: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Pack the 2N x 9 coefficient matrix of the homogeneous DLT system.

    Each correspondence (x, y) -> (u, v) contributes

        [-x, -y, -1,  0,  0,  0, u*x, u*y, u]
        [ 0,  0,  0, -x, -y, -1, v*x, v*y, v]
    """
    count = source.shape[0]
    x, y = source[:, 0], source[:, 1]
    u, v = target[:, 0], target[:, 1]

    A = np.zeros((2 * count, 9), dtype=np.float64)
    A[0::2, 0] = -x
    A[0::2, 1] = -y
    A[0::2, 2] = -1.0
    A[0::2, 6] = u * x
    A[0::2, 7] = u * y
    A[0::2, 8] = u

    A[1::2, 3] = -x
    A[1::2, 4] = -y
    A[1::2, 5] = -1.0
    A[1::2, 6] = v * x
    A[1::2, 7] = v * y
    A[1::2, 8] = v
    return A


def estimate_dlt(
    source: object,
    target: object,
    config: Optional[DLTConfig] = None,
) -> np.ndarray:
    """Estimate the homography mapping ``source`` onto ``target``.

    Args:
        source: Array-like of shape (N, 2), N >= 4.
        target: Array-like of shape (N, 2).
        config: Degeneracy thresholds; defaults to :class:`DLTConfig`.

    Returns:
        3x3 homography scaled so that H[2, 2] == 1 where possible.

    Raises:
        PreconditionViolation: fewer than four or unequal correspondences,
            or a point set whose points all coincide.
        NumericFailure: degenerate configurations such as collinear points.
    """
    config = config or DLTConfig()
    src, dst = check_correspondences(source, target, minimum=MIN_CORRESPONDENCES)

    src_transform = similarity_transform(src)
    dst_transform = similarity_transform(dst)

    src_n = src.copy()
    dst_n = dst.copy()
    transform_points_inplace(src_n, src_transform)
    transform_points_inplace(dst_n, dst_transform)

    A = build_dlt_system(src_n, dst_n)
    try:
        _, singular_values, vt = np.linalg.svd(A)
    except np.linalg.LinAlgError as exc:
        raise NumericFailure("SVD of the DLT system did not converge") from exc

    # A has 2N >= 8 rows; a unique solution needs the 8th singular value clear of zero.
    ratio = float(singular_values[7] / singular_values[0]) if singular_values[0] > 0 else 0.0
    logger.debug(f"DLT on {src.shape[0]} correspondences: sigma_8 / sigma_1 = {ratio:.3e}")
    if ratio < config.rank_tolerance:
        raise NumericFailure(
            "DLT system is rank deficient; correspondences are degenerate (collinear or repeated)"
        )

    H_normalized = vt[-1].reshape(3, 3)

    try:
        dst_transform_inv = np.linalg.inv(dst_transform)
    except np.linalg.LinAlgError as exc:
        raise NumericFailure("Target normalization transform is singular") from exc
    H = dst_transform_inv @ H_normalized @ src_transform

    check_invertible(H, config.max_condition)
    return normalize_homography(H)
