"""Reactive viewer: camera rig frames and the asteroid marker, driven by pose events.

The viewer only follows the pose bus. Its marker therefore trails the motion
model by up to one publisher tick plus one idle period of this loop; the two
loops are not otherwise synchronized.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from asteroidview.config.schema import Pose, ViewerConfig
from asteroidview.core.bus import MessageBus
from asteroidview.core.camera_rig import CameraRigComposer
from asteroidview.core.clock import Clock, Rate, WallClock
from asteroidview.core.frames import FrameBroadcaster
from asteroidview.core.marker import AsteroidMarkerSynthesizer

logger = logging.getLogger(__name__)

DEFAULT_POSE_QUEUE = 10


class AsteroidViewerNode:
    """
    Wires inbound pose topics to the marker synthesizer and the rig composer.

    Args:
        config: Viewer configuration
        bus: Bus carrying the pose topics, frames, and the marker topic
        clock: Time source for stamps and rate keeping
        sleep: Sleep function used by the idle loop
    """

    def __init__(
        self,
        config: ViewerConfig,
        bus: MessageBus,
        clock: Clock | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self._bus = bus
        self._clock = clock if clock is not None else WallClock()
        self._sleep = sleep

        self.broadcaster = FrameBroadcaster(bus, self._clock)
        self.marker = AsteroidMarkerSynthesizer(
            self.broadcaster,
            bus.advertise(config.marker_topic),
            config,
            stamp=self._clock.now(),
        )
        self.rig = CameraRigComposer(self.broadcaster, config.cam_baseline)

        self._subscriptions = [
            bus.subscribe(config.object_pose_topic, self._on_object_pose, DEFAULT_POSE_QUEUE),
            bus.subscribe(config.camera_pose_topic, self._on_camera_pose, DEFAULT_POSE_QUEUE),
        ]
        logger.info(f"Subscribing to: {config.object_pose_topic}")
        logger.info(f"Subscribing to: {config.camera_pose_topic}")

    def _on_object_pose(self, pose: Pose) -> None:
        stamp = self.marker.on_asteroid_pose(pose)
        logger.debug(f"Asteroid marker refreshed @ {stamp:.6f}")

    def _on_camera_pose(self, pose: Pose) -> None:
        self.rig.on_camera_pose(pose)

    def spin_once(self) -> int:
        """Service pending pose events. Returns the number handled."""
        return self._bus.spin_once(self._subscriptions)

    def run(self, stop_event: threading.Event, max_ticks: int | None = None) -> int:
        """
        Idle at config.rate_hz, servicing events, until stop_event is set.

        Returns:
            Number of idle ticks run
        """
        rate = Rate(self.config.rate_hz, self._clock, self._sleep)
        logger.info(f"Asteroid viewer started at {self.config.rate_hz:g} Hz")
        ticks = 0
        while not stop_event.is_set():
            self.spin_once()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            rate.sleep()
        dropped = sum(s.dropped for s in self._subscriptions)
        if dropped:
            logger.warning(f"Viewer dropped {dropped} pose message(s) on full queues")
        logger.info("Asteroid viewer stopped")
        return ticks
