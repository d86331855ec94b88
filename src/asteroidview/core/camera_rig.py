"""Stereo camera rig: derives the lens frames from an external camera pose."""

from __future__ import annotations

import logging

import numpy as np

from asteroidview.config.schema import FrameUpdate, Pose, Quat
from asteroidview.core.frames import CAMERA, CAMERA_LEFT, CAMERA_RIGHT, WORLD, FrameBroadcaster
from asteroidview.utils.transforms import quat_multiply

logger = logging.getLogger(__name__)

_C = np.cos(np.pi / 4.0)
_S = np.sin(np.pi / 4.0)

# +90 deg about Y, then -90 deg about Z (half-angle form, w first)
Q_CAM1 = np.array([_C, 0.0, _S, 0.0])
Q_CAM2 = np.array([_C, 0.0, 0.0, -_S])


def lens_rotation() -> Quat:
    """
    Fixed rotation of each lens frame in the camera frame: q_cam1 * q_cam2.

    Maps the camera body convention (X forward) onto the optical convention
    (Z forward, X right, Y down).
    """
    return quat_multiply(Q_CAM1, Q_CAM2)


LENS_ROTATION = lens_rotation()


def compose_camera_rig(camera_pose: Pose, baseline: float) -> list[FrameUpdate]:
    """
    Frame updates for one camera pose event.

    Args:
        camera_pose: Pose of the camera in world, used verbatim
        baseline: Offset of the right lens along camera Y (meters)

    Returns:
        Updates in broadcast order: camera in world, camera-left in camera,
        camera-right in camera. Both lens orientations equal LENS_ROTATION
        regardless of camera_pose.
    """
    return [
        FrameUpdate(WORLD, CAMERA, camera_pose),
        FrameUpdate(
            CAMERA,
            CAMERA_LEFT,
            Pose(position=np.zeros(3), orientation=LENS_ROTATION.copy()),
        ),
        FrameUpdate(
            CAMERA,
            CAMERA_RIGHT,
            Pose(position=np.array([0.0, baseline, 0.0]), orientation=LENS_ROTATION.copy()),
        ),
    ]


class CameraRigComposer:
    """
    Broadcasts the camera and both lens frames whenever a camera pose arrives.

    Args:
        broadcaster: Frame broadcaster shared with the rest of the viewer
        baseline: Distance between lenses along camera Y (meters)
    """

    def __init__(self, broadcaster: FrameBroadcaster, baseline: float):
        self._broadcaster = broadcaster
        self.baseline = baseline

    def on_camera_pose(self, pose: Pose) -> list[float]:
        """
        Handle one inbound camera pose.

        All three broadcasts come from the same snapshot of `pose`.

        Returns:
            Emission stamps of the camera, camera-left and camera-right transforms
        """
        snapshot = Pose(
            position=np.array(pose.position, dtype=np.float64),
            orientation=np.array(pose.orientation, dtype=np.float64),
        )
        return [
            self._broadcaster.broadcast(
                update.pose.position,
                update.pose.orientation,
                update.parent_frame,
                update.child_frame,
            )
            for update in compose_camera_rig(snapshot, self.baseline)
        ]
