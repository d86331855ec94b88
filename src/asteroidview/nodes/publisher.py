"""Periodic publisher: spins the asteroid and publishes both top-level poses."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

import numpy as np

from asteroidview.config.schema import Pose, PublisherConfig
from asteroidview.core.bus import MessageBus
from asteroidview.core.clock import Clock, Rate, WallClock
from asteroidview.core.frames import ASTEROID, WORLD, FrameBroadcaster
from asteroidview.core.motion import SpinModel

logger = logging.getLogger(__name__)


class PosePublisherNode:
    """
    Fixed-rate loop publishing the asteroid and camera poses.

    Args:
        config: Publisher configuration
        bus: Bus for pose topics (and frames, when broadcast_frames is set)
        clock: Time source for the motion model and rate keeping
        broadcaster: Frame broadcaster to use instead of creating one
        sleep: Sleep function used between ticks
    """

    def __init__(
        self,
        config: PublisherConfig,
        bus: MessageBus,
        clock: Clock | None = None,
        broadcaster: FrameBroadcaster | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self._clock = clock if clock is not None else WallClock()
        self._sleep = sleep
        self.model = SpinModel(config.omega, config.pitch, self._clock)
        self._asteroid_pub = bus.advertise(config.object_pose_topic)
        self._camera_pub = bus.advertise(config.camera_pose_topic)
        if broadcaster is None and config.broadcast_frames:
            broadcaster = FrameBroadcaster(bus, self._clock)
        self._broadcaster = broadcaster
        self.ticks = 0

    def camera_pose(self) -> Pose:
        return Pose(
            position=np.array(self.config.camera_position, dtype=np.float64),
            orientation=np.array(self.config.camera_orientation, dtype=np.float64),
        )

    def step(self) -> tuple[Pose, Pose]:
        """
        Run one tick: compute, broadcast, publish.

        Returns:
            (asteroid_pose, camera_pose) as published
        """
        asteroid = self.model.pose()
        if self._broadcaster is not None:
            self._broadcaster.broadcast(asteroid.position, asteroid.orientation, WORLD, ASTEROID)
        camera = self.camera_pose()
        self._asteroid_pub.publish(asteroid)
        self._camera_pub.publish(camera)
        self.ticks += 1
        return asteroid, camera

    def run(self, stop_event: threading.Event, max_ticks: int | None = None) -> int:
        """
        Tick at config.rate_hz until stop_event is set.

        Args:
            stop_event: Set by the owner to end the loop
            max_ticks: Optional tick limit

        Returns:
            Number of ticks run
        """
        rate = Rate(self.config.rate_hz, self._clock, self._sleep)
        logger.info(
            f"Pose publisher started at {self.config.rate_hz:g} Hz "
            f"(omega={self.config.omega:g} rad/s)"
        )
        start = self.ticks
        while not stop_event.is_set():
            asteroid, _ = self.step()
            logger.debug(f"Asteroid orientation: {np.round(asteroid.orientation, 6)}")
            if max_ticks is not None and self.ticks - start >= max_ticks:
                break
            rate.sleep()
        logger.info(f"Pose publisher stopped after {self.ticks - start} ticks")
        return self.ticks - start
