"""Coordinate-frame broadcasting and the latest-value frame tree.

The tree topology is fixed:

    world
    ├── asteroid
    └── camera
        ├── camera-left
        └── camera-right

Only the poses on the edges change at runtime.
"""

from __future__ import annotations

import logging

import numpy as np

from asteroidview.config.schema import (
    FrameTreeError,
    Mat3,
    Pose,
    Quat,
    TransformStamped,
    Vec3,
)
from asteroidview.core.bus import TF_TOPIC, MessageBus, Subscription
from asteroidview.core.clock import Clock, WallClock
from asteroidview.utils.transforms import (
    compose_poses,
    invert_pose,
    quat_multiply,
    quat_to_matrix,
    rotate_vector,
)

logger = logging.getLogger(__name__)

WORLD = "world"
ASTEROID = "asteroid"
CAMERA = "camera"
CAMERA_LEFT = "camera-left"
CAMERA_RIGHT = "camera-right"

# child -> parent
SCENE_TOPOLOGY: dict[str, str] = {
    ASTEROID: WORLD,
    CAMERA: WORLD,
    CAMERA_LEFT: CAMERA,
    CAMERA_RIGHT: CAMERA,
}


class FrameBroadcaster:
    """
    Publishes stamped transforms on the coordinate-frame bus.

    Holds no state besides the bus handle and the set of frames it has
    already placed, which it uses to refuse transforms that would orphan a
    child (parent never published) or re-parent an existing frame.

    Args:
        bus: Bus the TransformStamped records are published on
        clock: Source of emission timestamps (default: wall clock)
        topic: Frame topic name (default "tf")
        root_frame: Frame that exists without being published
    """

    def __init__(
        self,
        bus: MessageBus,
        clock: Clock | None = None,
        topic: str = TF_TOPIC,
        root_frame: str = WORLD,
    ):
        self._publisher = bus.advertise(topic)
        self._clock = clock if clock is not None else WallClock()
        self.root_frame = root_frame
        self._parents: dict[str, str] = {}

    @property
    def known_frames(self) -> set[str]:
        """Root frame plus every child frame broadcast so far."""
        return {self.root_frame} | set(self._parents)

    def broadcast(
        self,
        position: Vec3,
        orientation: Quat,
        parent_frame: str,
        child_frame: str,
    ) -> float:
        """
        Publish one transform placing child_frame in parent_frame.

        The orientation is forwarded as given; it is not renormalized.

        Args:
            position: Translation of the child in the parent, shape (3,)
            orientation: Rotation of the child in the parent (w, x, y, z)
            parent_frame: Name of the parent frame
            child_frame: Name of the child frame

        Returns:
            The emission timestamp, for stamping dependent artifacts

        Raises:
            FrameTreeError: If the parent does not exist yet, or the child
                already hangs from a different parent
            BusUnavailableError: If the bus is closed
        """
        if child_frame == parent_frame or child_frame == self.root_frame:
            raise FrameTreeError(
                f"Invalid transform {parent_frame} -> {child_frame}"
            )
        if parent_frame not in self.known_frames:
            raise FrameTreeError(
                f"Parent frame '{parent_frame}' of '{child_frame}' has not been published"
            )
        existing = self._parents.get(child_frame)
        if existing is not None and existing != parent_frame:
            raise FrameTreeError(
                f"Frame '{child_frame}' already has parent '{existing}', "
                f"cannot re-parent to '{parent_frame}'"
            )

        pose = Pose(
            position=np.array(position, dtype=np.float64).reshape(3),
            orientation=np.array(orientation, dtype=np.float64).reshape(4),
        )
        stamp = self._clock.now()
        self._publisher.publish(
            TransformStamped(
                stamp=stamp,
                parent_frame=parent_frame,
                child_frame=child_frame,
                pose=pose,
            )
        )
        self._parents[child_frame] = parent_frame
        logger.debug(f"Broadcast {parent_frame} -> {child_frame} @ {stamp:.6f}")
        return stamp


class FrameTree:
    """
    Latest transform per edge, fed from the coordinate-frame bus.

    Keeps no history: a new record for an edge replaces the previous one.
    """

    def __init__(self, root_frame: str = WORLD):
        self.root_frame = root_frame
        self._edges: dict[str, TransformStamped] = {}
        self._subscription: Subscription | None = None

    def attach(self, bus: MessageBus, topic: str = TF_TOPIC, queue_size: int = 100) -> Subscription:
        """Subscribe to the frame topic; records arrive on bus.spin_once."""
        self._subscription = bus.subscribe(topic, self.update, queue_size)
        return self._subscription

    def update(self, transform: TransformStamped) -> None:
        self._edges[transform.child_frame] = transform

    def has_frame(self, frame: str) -> bool:
        return frame == self.root_frame or frame in self._edges

    def parent_of(self, frame: str) -> str | None:
        edge = self._edges.get(frame)
        return edge.parent_frame if edge is not None else None

    def frames(self) -> list[str]:
        return [self.root_frame] + sorted(self._edges)

    def stamp_of(self, frame: str) -> float | None:
        edge = self._edges.get(frame)
        return edge.stamp if edge is not None else None

    def _chain(self, frame: str) -> list[TransformStamped]:
        """Edges from the root down to frame."""
        chain = []
        current = frame
        while current != self.root_frame:
            edge = self._edges.get(current)
            if edge is None:
                raise FrameTreeError(
                    f"Frame '{current}' is not connected to '{self.root_frame}'"
                )
            chain.append(edge)
            current = edge.parent_frame
            if len(chain) > len(self._edges):
                raise FrameTreeError(f"Cycle detected while resolving '{frame}'")
        chain.reverse()
        return chain

    def lookup(self, frame: str) -> Pose:
        """
        Pose of a frame in the root frame, composed along its chain.

        Raises:
            FrameTreeError: If any frame on the chain is unknown
        """
        pose = Pose.identity()
        for edge in self._chain(frame):
            pose = Pose(
                position=pose.position + rotate_vector(pose.orientation, edge.pose.position),
                orientation=quat_multiply(pose.orientation, edge.pose.orientation),
            )
        return pose

    def lookup_matrix(self, frame: str) -> tuple[Mat3, Vec3]:
        """Same as lookup, as a rotation matrix and translation."""
        R, t = np.eye(3), np.zeros(3)
        for edge in self._chain(frame):
            R, t = compose_poses(
                R, t, quat_to_matrix(edge.pose.orientation), edge.pose.position
            )
        return R, t

    def relative(self, target: str, source: str) -> tuple[Mat3, Vec3]:
        """
        Transform placing `source` in `target`.

        Returns:
            R: Rotation of source in target, shape (3, 3)
            t: Origin of source expressed in target, shape (3,)
        """
        R_t, t_t = self.lookup_matrix(target)
        R_s, t_s = self.lookup_matrix(source)
        R_inv, t_inv = invert_pose(R_t, t_t)
        return compose_poses(R_inv, t_inv, R_s, t_s)
