"""asteroidview: pose graph and mesh marker for a spinning asteroid and a stereo camera rig."""

from importlib.metadata import PackageNotFoundError, version as _get_version

try:
    __version__ = _get_version("asteroidview")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Core types
from asteroidview.config.schema import (  # noqa: E402
    MarkerArray,
    MeshMarker,
    Pose,
    PublisherConfig,
    SceneConfig,
    TransformStamped,
    ViewerConfig,
)

# Components
from asteroidview.core.bus import MessageBus  # noqa: E402
from asteroidview.core.camera_rig import CameraRigComposer, compose_camera_rig  # noqa: E402
from asteroidview.core.frames import FrameBroadcaster, FrameTree  # noqa: E402
from asteroidview.core.marker import AsteroidMarkerSynthesizer, refresh  # noqa: E402
from asteroidview.core.motion import SpinModel  # noqa: E402

# Loops and configuration
from asteroidview.io.config import load_config  # noqa: E402
from asteroidview.nodes import AsteroidViewerNode, PosePublisherNode  # noqa: E402

__all__ = [
    "__version__",
    # Core types
    "Pose",
    "TransformStamped",
    "MeshMarker",
    "MarkerArray",
    "PublisherConfig",
    "ViewerConfig",
    "SceneConfig",
    # Components
    "MessageBus",
    "FrameBroadcaster",
    "FrameTree",
    "SpinModel",
    "CameraRigComposer",
    "compose_camera_rig",
    "AsteroidMarkerSynthesizer",
    "refresh",
    # Loops and configuration
    "PosePublisherNode",
    "AsteroidViewerNode",
    "load_config",
]
