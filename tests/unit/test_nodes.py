"""Tests for the publisher and viewer loops."""

import threading

import numpy as np
import pytest

from asteroidview.config.schema import Pose, PublisherConfig, ViewerConfig
from asteroidview.core.bus import TF_TOPIC, MessageBus
from asteroidview.core.camera_rig import LENS_ROTATION
from asteroidview.core.clock import ManualClock
from asteroidview.core.frames import (
    ASTEROID,
    CAMERA,
    CAMERA_LEFT,
    CAMERA_RIGHT,
    WORLD,
    FrameTree,
)
from asteroidview.core.motion import spin_orientation
from asteroidview.nodes import AsteroidViewerNode, PosePublisherNode

OBJ_TOPIC = "/asteroid/pose"
CAM_TOPIC = "/camera/pose"
IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])


@pytest.fixture
def publisher_config():
    return PublisherConfig(object_pose_topic=OBJ_TOPIC, camera_pose_topic=CAM_TOPIC)


@pytest.fixture
def viewer_config():
    return ViewerConfig(
        object_pose_topic=OBJ_TOPIC,
        camera_pose_topic=CAM_TOPIC,
        cam_baseline=0.2,
        file_3d="bennu.dae",
        scale_object=1.0,
        offset_object=np.zeros(3),
    )


def _record(bus, topic, queue_size=1000):
    received = []
    bus.subscribe(topic, received.append, queue_size=queue_size)
    return received


class TestPosePublisherNode:
    """Tests for PosePublisherNode."""

    def test_step_publishes_both_poses(self, publisher_config):
        bus = MessageBus()
        clock = ManualClock(10.0)
        asteroid_msgs = _record(bus, OBJ_TOPIC)
        camera_msgs = _record(bus, CAM_TOPIC)
        tf_records = _record(bus, TF_TOPIC)
        node = PosePublisherNode(publisher_config, bus, clock)

        clock.advance(2.0)
        asteroid, camera = node.step()
        bus.spin_once()

        np.testing.assert_allclose(asteroid.orientation, spin_orientation(0.25, 2.0), atol=1e-12)
        np.testing.assert_allclose(asteroid.position, np.zeros(3))
        np.testing.assert_allclose(camera.position, np.zeros(3))
        np.testing.assert_allclose(camera.orientation, IDENTITY)
        assert len(asteroid_msgs) == 1 and len(camera_msgs) == 1
        assert len(tf_records) == 1
        assert (tf_records[0].parent_frame, tf_records[0].child_frame) == (WORLD, ASTEROID)
        assert tf_records[0].stamp == 12.0

    def test_broadcast_frames_off(self, publisher_config):
        publisher_config.broadcast_frames = False
        bus = MessageBus()
        tf_records = _record(bus, TF_TOPIC)
        PosePublisherNode(publisher_config, bus, ManualClock()).step()
        bus.spin_once()
        assert tf_records == []

    def test_configured_camera_pose(self, publisher_config):
        publisher_config.camera_position = np.array([-2.0, 0.0, 0.0])
        bus = MessageBus()
        camera_msgs = _record(bus, CAM_TOPIC)
        PosePublisherNode(publisher_config, bus, ManualClock()).step()
        bus.spin_once()
        np.testing.assert_allclose(camera_msgs[0].position, [-2.0, 0.0, 0.0])

    def test_run_ticks_at_rate(self, publisher_config):
        """Ticks should be 1/rate_hz apart on the injected clock."""
        bus = MessageBus()
        clock = ManualClock()
        asteroid_msgs = _record(bus, OBJ_TOPIC)
        node = PosePublisherNode(publisher_config, bus, clock, sleep=clock.sleep)

        ticks = node.run(threading.Event(), max_ticks=5)
        bus.spin_once()

        assert ticks == 5
        assert len(asteroid_msgs) == 5
        for i, pose in enumerate(asteroid_msgs):
            np.testing.assert_allclose(
                pose.orientation, spin_orientation(0.25, i * 0.01), atol=1e-9
            )

    def test_run_stops_on_event(self, publisher_config):
        stop = threading.Event()
        stop.set()
        node = PosePublisherNode(publisher_config, MessageBus(), ManualClock())
        assert node.run(stop) == 0


class TestAsteroidViewerNode:
    """Tests for AsteroidViewerNode."""

    def test_asteroid_event_refreshes_marker(self, viewer_config):
        bus = MessageBus()
        clock = ManualClock(1.0)
        tf_records = _record(bus, TF_TOPIC)
        markers = _record(bus, "asteroid_marker")
        viewer = AsteroidViewerNode(viewer_config, bus, clock)

        clock.advance(0.5)
        bus.publish(OBJ_TOPIC, Pose(np.zeros(3), spin_orientation(0.25, 3.0)))
        assert viewer.spin_once() == 1
        bus.spin_once()

        assert len(tf_records) == 1 and len(markers) == 1
        assert tf_records[0].stamp == markers[0].markers[0].stamp == 1.5

    def test_camera_event_scenario(self, viewer_config):
        """Camera at (1,2,3)/identity places both lenses with baseline 0.2."""
        bus = MessageBus()
        tf_records = _record(bus, TF_TOPIC)
        viewer = AsteroidViewerNode(viewer_config, bus, ManualClock())

        bus.publish(CAM_TOPIC, Pose(np.array([1.0, 2.0, 3.0]), IDENTITY.copy()))
        viewer.spin_once()
        bus.spin_once()

        by_child = {r.child_frame: r for r in tf_records}
        assert [r.child_frame for r in tf_records] == [CAMERA, CAMERA_LEFT, CAMERA_RIGHT]
        assert by_child[CAMERA].parent_frame == WORLD
        np.testing.assert_allclose(by_child[CAMERA].pose.position, [1.0, 2.0, 3.0])
        np.testing.assert_allclose(by_child[CAMERA].pose.orientation, IDENTITY)
        assert by_child[CAMERA_LEFT].parent_frame == CAMERA
        np.testing.assert_allclose(by_child[CAMERA_LEFT].pose.position, [0.0, 0.0, 0.0])
        np.testing.assert_allclose(by_child[CAMERA_LEFT].pose.orientation, LENS_ROTATION)
        assert by_child[CAMERA_RIGHT].parent_frame == CAMERA
        np.testing.assert_allclose(by_child[CAMERA_RIGHT].pose.position, [0.0, 0.2, 0.0])
        np.testing.assert_allclose(by_child[CAMERA_RIGHT].pose.orientation, LENS_ROTATION)

    def test_spin_only_services_own_topics(self, viewer_config):
        """Other subscribers on the shared bus keep their messages."""
        bus = MessageBus()
        other = _record(bus, OBJ_TOPIC)
        viewer = AsteroidViewerNode(viewer_config, bus, ManualClock())
        bus.publish(OBJ_TOPIC, Pose.identity())
        viewer.spin_once()
        assert other == []

    def test_run_services_events(self, viewer_config):
        bus = MessageBus()
        clock = ManualClock()
        markers = _record(bus, "asteroid_marker")
        viewer = AsteroidViewerNode(viewer_config, bus, clock, sleep=clock.sleep)
        bus.publish(OBJ_TOPIC, Pose.identity())
        assert viewer.run(threading.Event(), max_ticks=3) == 3
        bus.spin_once()
        assert len(markers) == 1


class TestEndToEnd:
    """Publisher and viewer sharing one bus, stepped by hand."""

    def test_pose_graph_follows_publisher(self, publisher_config, viewer_config):
        publisher_config.broadcast_frames = False
        bus = MessageBus()
        clock = ManualClock(0.0)
        tree = FrameTree()
        tree_sub = tree.attach(bus)
        markers = _record(bus, "asteroid_marker")
        viewer = AsteroidViewerNode(viewer_config, bus, clock)
        publisher = PosePublisherNode(publisher_config, bus, clock)

        clock.advance(2 * np.pi)
        publisher.step()
        viewer.spin_once()
        bus.spin_once([tree_sub])
        bus.spin_once()

        asteroid = tree.lookup(ASTEROID)
        np.testing.assert_allclose(asteroid.orientation, [0.5, 0.5, -0.5, 0.5], atol=1e-6)
        right = tree.lookup(CAMERA_RIGHT)
        np.testing.assert_allclose(right.position, [0.0, 0.2, 0.0], atol=1e-12)
        assert markers[-1].markers[0].stamp == tree.stamp_of(ASTEROID)

    def test_marker_lags_until_viewer_spins(self, publisher_config, viewer_config):
        """The viewer only sees publisher ticks when it services its queue."""
        publisher_config.broadcast_frames = False
        bus = MessageBus()
        clock = ManualClock()
        markers = []
        marker_sub = bus.subscribe("asteroid_marker", markers.append)
        viewer = AsteroidViewerNode(viewer_config, bus, clock)
        publisher = PosePublisherNode(publisher_config, bus, clock)

        for _ in range(3):
            clock.advance(0.01)
            publisher.step()
        bus.spin_once([marker_sub])
        assert markers == []

        assert viewer.spin_once() == 6
        bus.spin_once([marker_sub])
        assert len(markers) == 3
        stamps = [m.markers[0].stamp for m in markers]
        assert stamps == [clock.now()] * 3
