"""Tests for the normalized DLT estimator."""

from __future__ import annotations

import cv2
import numpy as np
import pytest

from planar_homography.errors import NumericFailure, PreconditionViolation
from planar_homography.estimation import build_dlt_system, estimate_dlt
from planar_homography.geometry import project_points, reprojection_errors


def test_dlt_recovers_known_homography(exact_correspondences, true_homography) -> None:
    source, target = exact_correspondences

    H = estimate_dlt(source, target)

    np.testing.assert_allclose(H, true_homography, rtol=1e-9, atol=1e-12)


def test_dlt_unit_square_predicts_extra_point(true_homography, apply_homography) -> None:
    square = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    target = apply_homography(true_homography, square)

    H = estimate_dlt(square, target)

    extra = np.array([[2.0, 2.0]])
    expected = apply_homography(true_homography, extra)
    np.testing.assert_allclose(project_points(H, extra), expected, atol=1e-6)


def test_dlt_reprojection_scales_with_noise(noisy_correspondences) -> None:
    source, target = noisy_correspondences

    H = estimate_dlt(source, target)

    errors = reprojection_errors(H, source, target)
    # Noise sigma is 0.5 px per coordinate.
    assert float(np.mean(errors)) < 1.5
    assert float(np.max(errors)) < 5.0


def test_dlt_is_invariant_to_source_similarity(exact_correspondences, apply_homography, scaled) -> None:
    source, target = exact_correspondences
    angle = np.deg2rad(30.0)
    similarity = np.array(
        [
            [3.0 * np.cos(angle), -3.0 * np.sin(angle), 10.0],
            [3.0 * np.sin(angle), 3.0 * np.cos(angle), -5.0],
            [0.0, 0.0, 1.0],
        ]
    )
    moved = apply_homography(similarity, source)

    H = estimate_dlt(source, target)
    H_moved = estimate_dlt(moved, target)

    np.testing.assert_allclose(H_moved, scaled(H @ np.linalg.inv(similarity)), rtol=1e-8, atol=1e-12)


def test_dlt_agrees_with_opencv(exact_correspondences) -> None:
    source, target = exact_correspondences

    H = estimate_dlt(source, target)
    reference, _ = cv2.findHomography(source, target, 0)

    np.testing.assert_allclose(H, reference, rtol=1e-6, atol=1e-9)


def test_build_dlt_system_rows() -> None:
    A = build_dlt_system(np.array([[2.0, 3.0]]), np.array([[5.0, 7.0]]))

    np.testing.assert_allclose(
        A,
        [
            [-2.0, -3.0, -1.0, 0.0, 0.0, 0.0, 10.0, 15.0, 5.0],
            [0.0, 0.0, 0.0, -2.0, -3.0, -1.0, 14.0, 21.0, 7.0],
        ],
    )


def test_dlt_does_not_modify_inputs(exact_correspondences) -> None:
    source, target = exact_correspondences
    source_before, target_before = source.copy(), target.copy()

    estimate_dlt(source, target)

    np.testing.assert_array_equal(source, source_before)
    np.testing.assert_array_equal(target, target_before)


def test_dlt_requires_four_correspondences() -> None:
    with pytest.raises(PreconditionViolation):
        estimate_dlt([[0, 0], [1, 0], [1, 1]], [[0, 0], [2, 0], [2, 2]])


def test_dlt_rejects_mismatched_lengths(exact_correspondences) -> None:
    source, target = exact_correspondences
    with pytest.raises(PreconditionViolation):
        estimate_dlt(source, target[:-1])


def test_dlt_rejects_collinear_points(true_homography, apply_homography) -> None:
    source = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [3.0, 3.0], [5.0, 5.0]])
    target = apply_homography(true_homography, source)

    with pytest.raises(NumericFailure):
        estimate_dlt(source, target)


def test_dlt_rejects_coincident_target_points() -> None:
    source = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]
    with pytest.raises(PreconditionViolation):
        estimate_dlt(source, [[4.0, 4.0]] * 4)
