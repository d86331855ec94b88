"""Core pose-graph components: bus, clocks, frames, motion, camera rig, marker."""

from asteroidview.core.bus import TF_TOPIC, MessageBus, Publisher, Subscription
from asteroidview.core.camera_rig import (
    LENS_ROTATION,
    CameraRigComposer,
    compose_camera_rig,
    lens_rotation,
)
from asteroidview.core.clock import ManualClock, Rate, WallClock
from asteroidview.core.frames import (
    ASTEROID,
    CAMERA,
    CAMERA_LEFT,
    CAMERA_RIGHT,
    SCENE_TOPOLOGY,
    WORLD,
    FrameBroadcaster,
    FrameTree,
)
from asteroidview.core.marker import (
    AsteroidMarkerSynthesizer,
    MarkerState,
    make_mesh_marker,
    refresh,
)
from asteroidview.core.motion import SpinModel, spin_orientation

__all__ = [
    "TF_TOPIC",
    "MessageBus",
    "Publisher",
    "Subscription",
    "WallClock",
    "ManualClock",
    "Rate",
    "WORLD",
    "ASTEROID",
    "CAMERA",
    "CAMERA_LEFT",
    "CAMERA_RIGHT",
    "SCENE_TOPOLOGY",
    "FrameBroadcaster",
    "FrameTree",
    "SpinModel",
    "spin_orientation",
    "LENS_ROTATION",
    "lens_rotation",
    "compose_camera_rig",
    "CameraRigComposer",
    "make_mesh_marker",
    "MarkerState",
    "refresh",
    "AsteroidMarkerSynthesizer",
]
