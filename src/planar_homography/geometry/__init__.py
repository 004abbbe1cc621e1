"""Point handling and homography helpers shared by the estimators."""

from .homography import (  # noqa: F401
    as_homography,
    check_invertible,
    normalize_homography,
    project_points,
    reprojection_errors,
)
from .normalization import similarity_transform, transform_points_inplace  # noqa: F401
from .points import as_points, check_correspondences  # noqa: F401
