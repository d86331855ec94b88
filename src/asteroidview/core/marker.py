"""Asteroid mesh marker: built once, re-stamped on every asteroid pose."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

import numpy as np

from asteroidview.config.schema import (
    DEFAULT_MESH_PREFIX,
    MarkerArray,
    MeshMarker,
    Pose,
    Quat,
    Vec3,
    ViewerConfig,
)
from asteroidview.core.bus import Publisher
from asteroidview.core.frames import ASTEROID, WORLD, FrameBroadcaster

logger = logging.getLogger(__name__)

ASTEROID_NS = "asteroid"
ASTEROID_MARKER_ID = 1


def make_mesh_marker(
    offset: Vec3,
    orientation: Quat,
    frame_id: str,
    ns: str,
    mesh_file: str,
    scale: float,
    marker_id: int,
    stamp: float = 0.0,
    prefix: str = DEFAULT_MESH_PREFIX,
) -> MeshMarker:
    """
    Build a mesh marker whose placement is an offset within frame_id.

    The offset is given in mesh-local units and is multiplied by `scale` so it
    matches the rendered size. The color is fully transparent so the mesh's
    embedded materials decide its appearance.

    Args:
        offset: Mesh offset in mesh-local units, shape (3,)
        orientation: Mesh orientation within frame_id (w, x, y, z)
        frame_id: Owning frame
        ns: Marker namespace
        mesh_file: Mesh file name, appended to prefix
        scale: Uniform scale factor
        marker_id: Identifier the renderer uses to overwrite this entity
        stamp: Initial timestamp (seconds)
        prefix: Resource prefix for mesh_file

    Returns:
        The new MeshMarker

    Example:
        >>> m = make_mesh_marker(np.array([1.0, 0, 0]), np.array([1.0, 0, 0, 0]),
        ...                      "asteroid", "asteroid", "bennu.dae", 2.0, 1)
        >>> m.position
        (2.0, 0.0, 0.0)
    """
    offset = np.asarray(offset, dtype=np.float64).reshape(3)
    position = scale * offset
    return MeshMarker(
        mesh_resource=prefix + mesh_file,
        scale=(float(scale), float(scale), float(scale)),
        position=tuple(float(v) for v in position),
        orientation=tuple(float(v) for v in np.asarray(orientation).reshape(4)),
        frame_id=frame_id,
        ns=ns,
        marker_id=marker_id,
        stamp=float(stamp),
    )


@dataclass(frozen=True)
class MarkerState:
    """Marker collection owned by the viewer, replaced wholesale on refresh."""
    markers: MarkerArray


def refresh(state: MarkerState, stamp: float) -> MarkerState:
    """
    Return a copy of state with every marker re-stamped.

    No other field is touched: placement within the owning frame stays as
    built, and world placement comes from the frame transform.
    """
    return MarkerState(
        markers=MarkerArray(
            markers=tuple(dataclasses.replace(m, stamp=stamp) for m in state.markers.markers)
        )
    )


class AsteroidMarkerSynthesizer:
    """
    Keeps the asteroid mesh marker in step with the asteroid frame.

    Args:
        broadcaster: Frame broadcaster for world -> asteroid
        publisher: Publisher for the marker array topic
        config: Viewer configuration (mesh file, scale, offset, orientation)
        stamp: Timestamp of the initial marker
    """

    def __init__(
        self,
        broadcaster: FrameBroadcaster,
        publisher: Publisher,
        config: ViewerConfig,
        stamp: float = 0.0,
    ):
        self._broadcaster = broadcaster
        self._publisher = publisher
        marker = make_mesh_marker(
            offset=config.offset_object,
            orientation=config.orientation_object,
            frame_id=ASTEROID,
            ns=ASTEROID_NS,
            mesh_file=config.file_3d,
            scale=config.scale_object,
            marker_id=ASTEROID_MARKER_ID,
            stamp=stamp,
            prefix=config.mesh_prefix,
        )
        self.state = MarkerState(markers=MarkerArray(markers=(marker,)))
        logger.info(f"Asteroid mesh: {marker.mesh_resource} (scale {config.scale_object})")

    def on_asteroid_pose(self, pose: Pose) -> float:
        """
        Broadcast world -> asteroid and republish the marker with the same stamp.

        Returns:
            Stamp shared by the transform and the marker
        """
        stamp = self._broadcaster.broadcast(pose.position, pose.orientation, WORLD, ASTEROID)
        self.state = refresh(self.state, stamp)
        self._publisher.publish(self.state.markers)
        return stamp
