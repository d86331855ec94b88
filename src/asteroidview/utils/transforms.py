"""Rotation and coordinate transform utilities.

Quaternions are stored as numpy arrays in (w, x, y, z) order, matching the
half-angle form (cos(a/2), sin(a/2) * axis).
"""

import numpy as np
from numpy.typing import NDArray
import cv2

# Local type aliases (matches schema.py but no import needed)
Vec3 = NDArray[np.float64]
Mat3 = NDArray[np.float64]
Quat = NDArray[np.float64]

_EPS = 1e-12


def quat_from_axis_angle(axis: Vec3, angle: float) -> Quat:
    """
    Build a unit quaternion for a rotation of `angle` radians about `axis`.

    Args:
        axis: Rotation axis, shape (3,). Normalized internally.
        angle: Rotation angle in radians (right-hand rule)

    Returns:
        q: Unit quaternion (w, x, y, z)

    Example:
        >>> q = quat_from_axis_angle(np.array([0.0, 0.0, 1.0]), np.pi)
        >>> np.allclose(q, [0.0, 0.0, 0.0, 1.0])
        True
    """
    axis = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(axis)
    if norm < _EPS:
        raise ValueError("Rotation axis must be non-zero")
    half = 0.5 * angle
    xyz = np.sin(half) * axis / norm
    return np.array([np.cos(half), xyz[0], xyz[1], xyz[2]], dtype=np.float64)


def quat_multiply(q1: Quat, q2: Quat) -> Quat:
    """
    Hamilton product q1 * q2.

    The result rotates by q2 first and then by q1. The product is not
    commutative: swapping the operands gives a different rotation.

    Args:
        q1: Outer quaternion (w, x, y, z)
        q2: Inner quaternion (w, x, y, z)

    Returns:
        q: Product quaternion (w, x, y, z)

    Example:
        >>> qx = quat_from_axis_angle(np.array([1.0, 0, 0]), np.pi / 2)
        >>> qy = quat_from_axis_angle(np.array([0, 1.0, 0]), np.pi / 2)
        >>> np.allclose(quat_multiply(qx, qy), quat_multiply(qy, qx))
        False
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2
    return np.array(
        [
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        ],
        dtype=np.float64,
    )


def quat_normalize(q: Quat) -> Quat:
    """
    Scale a quaternion to unit norm.

    Raises:
        ValueError: If q has (near) zero norm
    """
    q = np.asarray(q, dtype=np.float64)
    norm = np.linalg.norm(q)
    if norm < _EPS:
        raise ValueError("Cannot normalize a zero quaternion")
    return q / norm


def quat_conjugate(q: Quat) -> Quat:
    """Conjugate (inverse, for unit quaternions)."""
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def quat_to_rvec(q: Quat) -> Vec3:
    """
    Convert a unit quaternion to a Rodrigues rotation vector.

    Args:
        q: Unit quaternion (w, x, y, z)

    Returns:
        rvec: Rotation vector, shape (3,), with angle in [0, pi]
    """
    q = quat_normalize(q)
    if q[0] < 0.0:
        q = -q
    xyz = q[1:]
    s = np.linalg.norm(xyz)
    if s < _EPS:
        return np.zeros(3, dtype=np.float64)
    angle = 2.0 * np.arctan2(s, q[0])
    return xyz / s * angle


def rvec_to_quat(rvec: Vec3) -> Quat:
    """
    Convert a Rodrigues rotation vector to a unit quaternion.

    Example:
        >>> q = rvec_to_quat(np.zeros(3))
        >>> np.allclose(q, [1.0, 0.0, 0.0, 0.0])
        True
    """
    rvec = np.asarray(rvec, dtype=np.float64).reshape(3)
    angle = np.linalg.norm(rvec)
    if angle < _EPS:
        return np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
    return quat_from_axis_angle(rvec / angle, angle)


def rvec_to_matrix(rvec: Vec3) -> Mat3:
    """
    Convert Rodrigues vector to rotation matrix.

    Args:
        rvec: Rotation vector, shape (3,). The axis is rvec/||rvec|| and
            the angle is ||rvec|| in radians.

    Returns:
        R: Rotation matrix, shape (3, 3)

    Example:
        >>> rvec = np.array([0.0, 0.0, np.pi/2])
        >>> R = rvec_to_matrix(rvec)
        >>> np.allclose(R @ np.array([1, 0, 0]), np.array([0, 1, 0]))
        True
    """
    R, _ = cv2.Rodrigues(np.asarray(rvec, dtype=np.float64))
    return np.asarray(R, dtype=np.float64)


def matrix_to_rvec(R: Mat3) -> Vec3:
    """
    Convert rotation matrix to Rodrigues vector.

    Args:
        R: Rotation matrix, shape (3, 3)

    Returns:
        rvec: Rotation vector, shape (3,)
    """
    rvec, _ = cv2.Rodrigues(np.asarray(R, dtype=np.float64))
    return np.asarray(rvec.flatten(), dtype=np.float64)


def quat_to_matrix(q: Quat) -> Mat3:
    """Rotation matrix for a unit quaternion."""
    return rvec_to_matrix(quat_to_rvec(q))


def matrix_to_quat(R: Mat3) -> Quat:
    """Unit quaternion (w >= 0) for a rotation matrix."""
    return rvec_to_quat(matrix_to_rvec(R))


def rotate_vector(q: Quat, v: Vec3) -> Vec3:
    """
    Rotate a 3D vector by a unit quaternion (q * v * q^-1).

    Example:
        >>> q = quat_from_axis_angle(np.array([0.0, 0.0, 1.0]), np.pi / 2)
        >>> np.allclose(rotate_vector(q, np.array([1.0, 0, 0])), [0, 1, 0])
        True
    """
    v = np.asarray(v, dtype=np.float64)
    p = np.array([0.0, v[0], v[1], v[2]], dtype=np.float64)
    return quat_multiply(quat_multiply(q, p), quat_conjugate(q))[1:]


def compose_poses(R1: Mat3, t1: Vec3, R2: Mat3, t2: Vec3) -> tuple[Mat3, Vec3]:
    """
    Compose two poses: T_combined = T1 @ T2.

    If T1 places frame B in frame A, and T2 places frame C in frame B, then
    T_combined places frame C in frame A.

    Args:
        R1: First rotation matrix, shape (3, 3)
        t1: First translation vector, shape (3,)
        R2: Second rotation matrix, shape (3, 3)
        t2: Second translation vector, shape (3,)

    Returns:
        R_combined: Combined rotation matrix, shape (3, 3)
        t_combined: Combined translation vector, shape (3,)

    Example:
        >>> R1, t1 = np.eye(3), np.array([1, 0, 0])
        >>> R2, t2 = np.eye(3), np.array([0, 1, 0])
        >>> R, t = compose_poses(R1, t1, R2, t2)
        >>> np.allclose(t, np.array([1, 1, 0]))
        True
    """
    R_combined = R1 @ R2
    t_combined = R1 @ t2 + t1
    return R_combined, t_combined


def invert_pose(R: Mat3, t: Vec3) -> tuple[Mat3, Vec3]:
    """
    Invert a pose transformation.

    Args:
        R: Rotation matrix, shape (3, 3)
        t: Translation vector, shape (3,)

    Returns:
        R_inv: Inverted rotation matrix, shape (3, 3)
        t_inv: Inverted translation vector, shape (3,)
    """
    R_inv = R.T
    t_inv = -R.T @ t
    return R_inv, t_inv
