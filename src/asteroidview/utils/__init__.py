"""Utility modules."""

from asteroidview.utils.logging import setup_logging
from asteroidview.utils.transforms import (
    compose_poses,
    invert_pose,
    matrix_to_quat,
    matrix_to_rvec,
    quat_conjugate,
    quat_from_axis_angle,
    quat_multiply,
    quat_normalize,
    quat_to_matrix,
    quat_to_rvec,
    rotate_vector,
    rvec_to_matrix,
    rvec_to_quat,
)

__all__ = [
    # From transforms.py:
    "quat_from_axis_angle",
    "quat_multiply",
    "quat_normalize",
    "quat_conjugate",
    "quat_to_rvec",
    "rvec_to_quat",
    "quat_to_matrix",
    "matrix_to_quat",
    "rvec_to_matrix",
    "matrix_to_rvec",
    "rotate_vector",
    "compose_poses",
    "invert_pose",
    # From logging.py:
    "setup_logging",
]
