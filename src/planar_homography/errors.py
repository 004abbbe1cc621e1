"""Exception types raised by the homography estimators."""

from __future__ import annotations


class HomographyError(Exception):
    """Base class for all estimation failures."""


class PreconditionViolation(HomographyError, ValueError):
    """Input has the wrong shape, count or pairing for the requested operation."""


class NumericFailure(HomographyError, RuntimeError):
    """A linear system turned out singular or too ill-conditioned to trust."""
