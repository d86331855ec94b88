"""Asteroid spin motion model."""

from __future__ import annotations

import numpy as np

from asteroidview.config.schema import Pose, Quat
from asteroidview.core.clock import Clock, WallClock
from asteroidview.utils.transforms import quat_from_axis_angle, quat_multiply

UNIT_X = np.array([1.0, 0.0, 0.0])
UNIT_Y = np.array([0.0, 1.0, 0.0])


def spin_orientation(omega: float, dt: float, pitch: float = -np.pi / 2.0) -> Quat:
    """
    Orientation of the asteroid dt seconds after start.

    roll = omega * dt about X, composed inside a fixed pitch about Y:
    q = R_y(pitch) * R_x(roll). Swapping the factors turns the spin about the
    tilted axis into a precession, so the order is fixed.

    Args:
        omega: Spin rate (rad/s)
        dt: Elapsed time (s)
        pitch: Fixed tilt about Y (radians)

    Returns:
        Unit quaternion (w, x, y, z)
    """
    roll = omega * dt
    q_pitch = quat_from_axis_angle(UNIT_Y, pitch)
    q_roll = quat_from_axis_angle(UNIT_X, roll)
    return quat_multiply(q_pitch, q_roll)


class SpinModel:
    """
    Deterministic spin of the asteroid about its tilted X axis.

    The start time is captured at construction. Every call re-derives the pose
    from the elapsed time, so nothing is integrated between ticks.

    Args:
        omega: Spin rate (rad/s)
        pitch: Fixed tilt about Y (radians)
        clock: Time source (default: wall clock)
    """

    def __init__(self, omega: float, pitch: float = -np.pi / 2.0, clock: Clock | None = None):
        self.omega = omega
        self.pitch = pitch
        self._clock = clock if clock is not None else WallClock()
        self.t0 = self._clock.now()

    def elapsed(self) -> float:
        return self._clock.now() - self.t0

    def orientation_at(self, dt: float) -> Quat:
        return spin_orientation(self.omega, dt, self.pitch)

    def pose_at(self, dt: float) -> Pose:
        """Pose of asteroid in world dt seconds after start (position at origin)."""
        return Pose(position=np.zeros(3, dtype=np.float64), orientation=self.orientation_at(dt))

    def pose(self) -> Pose:
        """Pose of asteroid in world at the current clock time."""
        return self.pose_at(self.elapsed())
