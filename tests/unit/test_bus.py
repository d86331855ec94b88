"""Tests for the in-process message bus and clocks."""

import threading

import pytest

from asteroidview.config.schema import BusUnavailableError
from asteroidview.core.bus import MessageBus, Publisher
from asteroidview.core.clock import ManualClock, Rate, WallClock


class TestMessageBus:
    """Tests for MessageBus."""

    def test_messages_wait_for_spin(self):
        """Handlers should only run inside spin_once."""
        bus = MessageBus()
        received = []
        bus.subscribe("a", received.append)
        bus.publish("a", 1)
        assert received == []
        assert bus.spin_once() == 1
        assert received == [1]

    def test_dispatch_in_publish_order_across_topics(self):
        bus = MessageBus()
        received = []
        bus.subscribe("a", lambda m: received.append(("a", m)))
        bus.subscribe("b", lambda m: received.append(("b", m)))
        bus.publish("b", 1)
        bus.publish("a", 2)
        bus.publish("b", 3)
        bus.spin_once()
        assert received == [("b", 1), ("a", 2), ("b", 3)]

    def test_full_queue_drops_oldest(self):
        """Latest messages win when a subscriber falls behind."""
        bus = MessageBus()
        received = []
        sub = bus.subscribe("a", received.append, queue_size=2)
        for i in range(5):
            bus.publish("a", i)
        bus.spin_once()
        assert received == [3, 4]
        assert sub.dropped == 3

    def test_invalid_queue_size(self):
        with pytest.raises(ValueError):
            MessageBus().subscribe("a", print, queue_size=0)

    def test_publish_without_subscribers(self):
        bus = MessageBus()
        bus.publish("nobody", object())
        assert bus.spin_once() == 0

    def test_messages_published_by_handlers_wait_for_next_spin(self):
        bus = MessageBus()
        received = []
        bus.subscribe("a", lambda m: bus.publish("b", m + 1))
        bus.subscribe("b", received.append)
        bus.publish("a", 1)
        bus.spin_once()
        assert received == []
        bus.spin_once()
        assert received == [2]

    def test_spin_selected_subscriptions(self):
        """Only the given subscriptions should be serviced."""
        bus = MessageBus()
        got_a, got_b = [], []
        sub_a = bus.subscribe("a", got_a.append)
        bus.subscribe("b", got_b.append)
        bus.publish("a", 1)
        bus.publish("b", 2)
        assert bus.spin_once([sub_a]) == 1
        assert got_a == [1]
        assert got_b == []
        bus.spin_once()
        assert got_b == [2]

    def test_unsubscribe(self):
        bus = MessageBus()
        received = []
        sub = bus.subscribe("a", received.append)
        bus.unsubscribe(sub)
        bus.publish("a", 1)
        bus.spin_once()
        assert received == []

    def test_advertise_returns_bound_publisher(self):
        bus = MessageBus()
        received = []
        bus.subscribe("pose", received.append)
        pub = bus.advertise("pose")
        assert isinstance(pub, Publisher)
        assert pub.topic == "pose"
        pub.publish("hello")
        bus.spin_once()
        assert received == ["hello"]

    def test_publish_after_close_raises(self):
        bus = MessageBus()
        pub = bus.advertise("a")
        bus.close()
        assert bus.closed
        with pytest.raises(BusUnavailableError):
            pub.publish(1)
        with pytest.raises(BusUnavailableError):
            bus.advertise("b")

    def test_close_drops_pending(self):
        bus = MessageBus()
        received = []
        bus.subscribe("a", received.append)
        bus.publish("a", 1)
        bus.close()
        assert bus.spin_once() == 0

    def test_concurrent_publishers(self):
        """Publishing from several threads should not lose messages."""
        bus = MessageBus()
        received = []
        bus.subscribe("a", received.append, queue_size=10_000)

        def worker(offset):
            for i in range(500):
                bus.publish("a", offset + i)

        threads = [threading.Thread(target=worker, args=(k * 1000,)) for k in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        bus.spin_once()
        assert sorted(received) == sorted(k * 1000 + i for k in range(4) for i in range(500))


class TestClocks:
    """Tests for WallClock, ManualClock and Rate."""

    def test_wall_clock_moves_forward(self):
        clock = WallClock()
        t1 = clock.now()
        t2 = clock.now()
        assert t2 >= t1

    def test_manual_clock(self):
        clock = ManualClock(10.0)
        assert clock.now() == 10.0
        assert clock.advance(0.5) == 10.5
        clock.sleep(0.25)
        assert clock.now() == pytest.approx(10.75)

    def test_manual_clock_rejects_backwards(self):
        with pytest.raises(ValueError):
            ManualClock().advance(-1.0)

    def test_rate_sleeps_remainder_of_period(self):
        clock = ManualClock()
        rate = Rate(10.0, clock, clock.sleep)
        assert rate.sleep() == pytest.approx(0.1)
        assert clock.now() == pytest.approx(0.1)
        clock.advance(0.04)  # work done during the tick
        assert rate.sleep() == pytest.approx(0.06)
        assert clock.now() == pytest.approx(0.2)

    def test_rate_overrun_restarts_schedule(self):
        clock = ManualClock()
        rate = Rate(10.0, clock, clock.sleep)
        clock.advance(0.5)
        assert rate.sleep() == 0.0
        assert rate.sleep() == pytest.approx(0.1)
        assert clock.now() == pytest.approx(0.6)

    def test_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            Rate(0.0)
