"""Isotropic normalization of point sets prior to DLT estimation.

The similarity transform first moves the centroid to the origin and then
scales the set so the mean distance from the origin is sqrt(2), following
Hartley & Zisserman, "Multiple View Geometry", section 4.4.4.
"""

from __future__ import annotations

import numpy as np

from planar_homography.errors import PreconditionViolation
from planar_homography.geometry.points import as_points

TARGET_MEAN_DISTANCE = np.sqrt(2.0)


def similarity_transform(points: object) -> np.ndarray:
    """Compute the 3x3 normalizing similarity for a point set.

    Args:
        points: Array-like of shape (N, 2), N >= 1.

    Returns:
        Matrix ``[[s, 0, -s*cx], [0, s, -s*cy], [0, 0, 1]]``.

    Raises:
        PreconditionViolation: if the set is empty or all points coincide.
    """
    pts = as_points(points)
    if pts.shape[0] == 0:
        raise PreconditionViolation("Cannot normalize an empty point set")

    centroid = pts.mean(axis=0)
    mean_distance = float(np.mean(np.linalg.norm(pts - centroid, axis=1)))
    if mean_distance == 0.0:
        raise PreconditionViolation("Cannot normalize a point set whose points all coincide")

    scale = TARGET_MEAN_DISTANCE / mean_distance
    transform = np.eye(3, dtype=np.float64)
    transform[0, 0] = scale
    transform[1, 1] = scale
    transform[0, 2] = -scale * centroid[0]
    transform[1, 2] = -scale * centroid[1]
    return transform


def transform_points_inplace(points: np.ndarray, transform: np.ndarray) -> None:
    """Overwrite each point with the first two coordinates of ``transform @ (x, y, 1)``.

    No perspective division is performed; for similarity transforms the third
    coordinate stays 1.
    """
    if transform is None:
        raise PreconditionViolation("Transform must not be None")
    matrix = np.asarray(transform, dtype=np.float64)
    if matrix.shape != (3, 3):
        raise PreconditionViolation(f"Transform must be 3x3, got {matrix.shape}")
    if not isinstance(points, np.ndarray) or points.ndim != 2 or points.shape[1] != 2:
        raise PreconditionViolation("Points must be a numpy array of shape (N, 2)")
    if not np.issubdtype(points.dtype, np.floating) or not points.flags.writeable:
        raise PreconditionViolation("Points must be a writable floating-point array")

    homogeneous = np.hstack([points, np.ones((points.shape[0], 1), dtype=points.dtype)])
    mapped = homogeneous @ matrix.T
    points[:, :] = mapped[:, :2]
