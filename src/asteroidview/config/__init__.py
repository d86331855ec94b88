"""Configuration and schema definitions."""

from asteroidview.config.schema import (
    AsteroidViewError,
    BusUnavailableError,
    ConfigError,
    FrameTreeError,
    FrameUpdate,
    MarkerArray,
    MeshMarker,
    Pose,
    PublisherConfig,
    Quat,
    SceneConfig,
    TransformStamped,
    Vec3,
    ViewerConfig,
)

__all__ = [
    # Type aliases:
    "Vec3",
    "Quat",
    # Dataclasses:
    "Pose",
    "TransformStamped",
    "FrameUpdate",
    "MeshMarker",
    "MarkerArray",
    "PublisherConfig",
    "ViewerConfig",
    "SceneConfig",
    # Exceptions:
    "AsteroidViewError",
    "ConfigError",
    "BusUnavailableError",
    "FrameTreeError",
]
