"""Type definitions and schema for the asteroidview pose graph.

This module defines the dataclasses, type aliases, and custom exceptions used
throughout the package. Inbound poses are not validated at runtime; shapes are
documented in docstrings and type hints.

Frame conventions:
- world: root frame, fixed
- asteroid: child of world, spins about its tilted X axis
- camera: child of world, pose supplied externally
- camera-left / camera-right: children of camera, lens rotation applied
- Quaternions are (w, x, y, z)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from numpy.typing import NDArray

# Type aliases
Vec3 = NDArray[np.float64]  # shape (3,)
Mat3 = NDArray[np.float64]  # shape (3, 3)
Quat = NDArray[np.float64]  # shape (4,), (w, x, y, z)

DEFAULT_MESH_PREFIX = "package://view_asteroid/meshes/"


@dataclass
class Pose:
    """Position and orientation of one frame relative to another.

    Attributes:
        position: Translation, shape (3,)
        orientation: Unit quaternion (w, x, y, z)
    """
    position: Vec3
    orientation: Quat

    @classmethod
    def identity(cls) -> Pose:
        """Pose at the origin with no rotation."""
        return cls(
            position=np.zeros(3, dtype=np.float64),
            orientation=np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64),
        )


@dataclass
class TransformStamped:
    """One record on the coordinate-frame bus.

    Attributes:
        stamp: Wall-clock time of emission in seconds
        parent_frame: Frame the pose is expressed in
        child_frame: Frame being placed
        pose: Pose of child_frame in parent_frame
    """
    stamp: float
    parent_frame: str
    child_frame: str
    pose: Pose


@dataclass
class FrameUpdate:
    """Unstamped transform to be broadcast: pose of child in parent."""
    parent_frame: str
    child_frame: str
    pose: Pose


@dataclass(frozen=True)
class MeshMarker:
    """Renderable mesh entity riding on a frame of the pose graph.

    Only `stamp` changes after creation (see core.marker.refresh).

    Attributes:
        mesh_resource: Full resource URI of the mesh file
        scale: Per-axis scale (uniform for meshes built by make_mesh_marker)
        position: Offset of the mesh within frame_id, shape (3,)
        orientation: Orientation of the mesh within frame_id (w, x, y, z)
        frame_id: Owning frame
        ns: Marker namespace
        marker_id: Identifier the renderer uses to overwrite this entity
        stamp: Time the marker refers to (seconds)
        color: RGBA; all zeros defers appearance to embedded materials
        mesh_use_embedded_materials: Render with the mesh file's materials
        action: Renderer action ("add")
    """
    mesh_resource: str
    scale: tuple[float, float, float]
    position: tuple[float, float, float]
    orientation: tuple[float, float, float, float]
    frame_id: str
    ns: str
    marker_id: int
    stamp: float = 0.0
    color: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    mesh_use_embedded_materials: bool = True
    action: str = "add"


@dataclass(frozen=True)
class MarkerArray:
    """Marker collection published as a single message."""
    markers: tuple[MeshMarker, ...] = ()


@dataclass
class PublisherConfig:
    """Configuration for the periodic pose publisher.

    Attributes:
        object_pose_topic: Topic the asteroid pose is published on
        camera_pose_topic: Topic the camera pose is published on
        omega: Asteroid spin rate about its X axis (rad/s)
        pitch: Fixed tilt about Y (radians)
        rate_hz: Tick rate of the publisher loop
        camera_position: Camera position published every tick, shape (3,)
        camera_orientation: Camera orientation published every tick (w, x, y, z)
        broadcast_frames: Also broadcast world -> asteroid on the frame bus. Switched
            off when the viewer shares the bus, since the viewer owns that edge
    """
    object_pose_topic: str
    camera_pose_topic: str
    omega: float = 0.25  # rad/s
    pitch: float = -np.pi / 2.0
    rate_hz: float = 100.0
    camera_position: Vec3 = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    camera_orientation: Quat = field(
        default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
    )
    broadcast_frames: bool = True


@dataclass
class ViewerConfig:
    """Configuration for the reactive viewer (rig composer + marker).

    Attributes:
        object_pose_topic: Topic the asteroid pose is received on
        camera_pose_topic: Topic the camera pose is received on
        cam_baseline: Distance between the two lenses along camera Y (meters)
        file_3d: Mesh file name, appended to mesh_prefix
        scale_object: Uniform mesh scale factor
        offset_object: Mesh offset in mesh-local units, shape (3,)
        orientation_object: Mesh orientation within the asteroid frame (w, x, y, z)
        marker_topic: Topic the marker array is published on
        mesh_prefix: Resource prefix prepended to file_3d
        rate_hz: Idle loop rate used to service inbound events
    """
    object_pose_topic: str
    camera_pose_topic: str
    cam_baseline: float
    file_3d: str
    scale_object: float = 1.0
    offset_object: Vec3 = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    orientation_object: Quat = field(
        default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
    )
    marker_topic: str = "asteroid_marker"
    mesh_prefix: str = DEFAULT_MESH_PREFIX
    rate_hz: float = 200.0


@dataclass
class SceneConfig:
    """Complete configuration for both loops."""
    publisher: PublisherConfig
    viewer: ViewerConfig


# --- Custom Exceptions ---

class AsteroidViewError(Exception):
    """Base class for asteroidview errors."""
    pass


class ConfigError(AsteroidViewError, ValueError):
    """Raised when configuration is missing or malformed (fatal at startup)."""
    pass


class BusUnavailableError(AsteroidViewError):
    """Raised when publishing on a bus that has been closed."""
    pass


class FrameTreeError(AsteroidViewError):
    """Raised when a transform would orphan or re-parent a frame."""
    pass
