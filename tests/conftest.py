"""pytest configuration and fixtures for the planar_homography test suite."""

from __future__ import annotations

from typing import Tuple

import numpy as np
import pytest
from loguru import logger


def pytest_configure(config) -> None:
    """Hook called after command line options have been parsed."""
    # Keep estimator debug output out of the test report.
    logger.remove()
    logger.add(lambda message: None, level="WARNING")


def _apply_homography(homography: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Reference mapping used to synthesise target points."""
    ones = np.ones((points.shape[0], 1))
    mapped = np.hstack([points, ones]) @ homography.T
    return mapped[:, :2] / mapped[:, 2:3]


def _scaled(homography: np.ndarray) -> np.ndarray:
    return homography / homography[2, 2]


@pytest.fixture
def apply_homography():
    return _apply_homography


@pytest.fixture
def scaled():
    """Rescale a homography so H[2, 2] == 1."""
    return _scaled


@pytest.fixture
def true_homography() -> np.ndarray:
    """A mild perspective transform, with H[2, 2] == 1."""
    return np.array(
        [
            [1.2, 0.1, 3.0],
            [-0.05, 0.9, -2.0],
            [0.001, 0.002, 1.0],
        ],
        dtype=np.float64,
    )


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture
def exact_correspondences(
    true_homography: np.ndarray, rng: np.random.Generator
) -> Tuple[np.ndarray, np.ndarray]:
    source = rng.uniform(0.0, 100.0, size=(20, 2))
    return source, _apply_homography(true_homography, source)


@pytest.fixture
def noisy_correspondences(
    true_homography: np.ndarray, rng: np.random.Generator
) -> Tuple[np.ndarray, np.ndarray]:
    source = rng.uniform(0.0, 400.0, size=(60, 2))
    target = _apply_homography(true_homography, source)
    target += rng.normal(scale=0.5, size=target.shape)
    return source, target
