"""Homography utilities for mapping points between planes."""

from __future__ import annotations

import cv2
import numpy as np

from planar_homography.errors import NumericFailure, PreconditionViolation
from planar_homography.geometry.points import as_points

_SCALE_EPS = 1e-12


def as_homography(homography: object) -> np.ndarray:
    """Return ``homography`` as a finite float64 3x3 array."""
    if homography is None:
        raise PreconditionViolation("Homography must not be None")
    matrix = np.array(homography, dtype=np.float64)
    if matrix.shape == (9,):
        matrix = matrix.reshape(3, 3)
    if matrix.shape != (3, 3):
        raise PreconditionViolation(f"Homography must be 3x3, got {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise PreconditionViolation("Homography contains non-finite entries")
    return matrix


def project_points(homography: object, points: object) -> np.ndarray:
    """Apply a homography to points, including the perspective division.

    Args:
        homography: 3x3 matrix.
        points: Array-like of shape (N, 2).

    Returns:
        Array of shape (N, 2). Points mapped to infinity come back as (0, 0),
        matching OpenCV's behaviour.
    """
    matrix = as_homography(homography)
    pts = as_points(points)
    if pts.shape[0] == 0:
        return pts
    warped = cv2.perspectiveTransform(pts.reshape(-1, 1, 2), matrix)
    return warped.reshape(-1, 2)


def reprojection_errors(homography: object, source: object, target: object) -> np.ndarray:
    """Euclidean distance between each projected source point and its target."""
    src = as_points(source, "source")
    dst = as_points(target, "target")
    if src.shape != dst.shape:
        raise PreconditionViolation("Source and target points must share shape")
    return np.linalg.norm(project_points(homography, src) - dst, axis=1)


def normalize_homography(homography: np.ndarray) -> np.ndarray:
    """Fix the arbitrary scale of a homography.

    Divides by H[2, 2] when that entry is usable, otherwise scales to unit
    Frobenius norm with a non-negative largest entry.
    """
    matrix = np.asarray(homography, dtype=np.float64)
    if not np.all(np.isfinite(matrix)):
        raise NumericFailure("Homography contains non-finite entries")
    norm = float(np.linalg.norm(matrix))
    if norm == 0.0:
        raise NumericFailure("Homography is identically zero")
    if abs(matrix[2, 2]) > _SCALE_EPS * norm:
        return matrix / matrix[2, 2]
    flat = matrix.ravel()
    sign = 1.0 if flat[np.argmax(np.abs(flat))] >= 0 else -1.0
    return matrix * (sign / norm)


def check_invertible(homography: np.ndarray, max_condition: float) -> None:
    """Raise NumericFailure unless the matrix is finite and well-conditioned."""
    matrix = np.asarray(homography, dtype=np.float64)
    if not np.all(np.isfinite(matrix)):
        raise NumericFailure("Homography contains non-finite entries")
    condition = float(np.linalg.cond(matrix))
    if not np.isfinite(condition) or condition > max_condition:
        raise NumericFailure(
            f"Homography is singular or ill-conditioned (condition number {condition:.3e})"
        )
