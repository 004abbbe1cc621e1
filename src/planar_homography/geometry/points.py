"""Validation of point arrays and correspondence sets."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from planar_homography.errors import PreconditionViolation


def as_points(points: object, name: str = "points") -> np.ndarray:
    """Return ``points`` as a float64 array of shape (N, 2)."""
    try:
        array = np.array(points, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise PreconditionViolation(f"{name} cannot be read as 2D coordinates") from exc
    if array.size == 0:
        array = array.reshape(0, 2)
    if array.ndim != 2 or array.shape[1] != 2:
        raise PreconditionViolation(f"{name} must have shape (N, 2), got {array.shape}")
    if not np.all(np.isfinite(array)):
        raise PreconditionViolation(f"{name} contains non-finite coordinates")
    return array


def check_correspondences(
    source: object,
    target: object,
    minimum: int = 1,
) -> Tuple[np.ndarray, np.ndarray]:
    """Validate a correspondence set and return both sides as (N, 2) arrays.

    Args:
        source: Points in the source plane.
        target: Points in the target plane, index-aligned with ``source``.
        minimum: Smallest acceptable number of correspondences.

    Raises:
        PreconditionViolation: on shape problems, unequal lengths, or fewer
            than ``minimum`` correspondences.
    """
    src = as_points(source, "source")
    dst = as_points(target, "target")
    if src.shape[0] != dst.shape[0]:
        raise PreconditionViolation(
            f"Correspondence sets differ in length: {src.shape[0]} source vs {dst.shape[0]} target"
        )
    required = max(1, minimum)
    if src.shape[0] < required:
        raise PreconditionViolation(
            f"Need at least {required} point correspondences, got {src.shape[0]}"
        )
    return src, dst
