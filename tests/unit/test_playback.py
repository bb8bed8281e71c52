import threading
import time
import unittest

from layoutsmith.layout.room import FurnitureItem, LayoutState, Room
from layoutsmith.optimizer.playback import PlaybackBuffer, PlaybackTimer


def _state(x: float) -> LayoutState:
    return LayoutState(
        room=Room(width=100.0, height=100.0),
        objects=[FurnitureItem(id="a", p=[x, 50.0], width=2.0, height=2.0)],
    )


class _RecordingSink:
    def __init__(self):
        self.lock = threading.Lock()
        self.states: list[LayoutState] = []

    def __call__(self, state: LayoutState) -> None:
        with self.lock:
            self.states.append(state)

    @property
    def xs(self) -> list[float]:
        with self.lock:
            return [float(s.objects[0].p[0]) for s in self.states]


class TestPlaybackBuffer(unittest.TestCase):
    """Test the LIFO buffer and its tick."""

    def test_three_ticks_deliver_two_states_lifo(self):
        buffer = PlaybackBuffer()
        sink = _RecordingSink()
        buffer.push(_state(10.0))
        buffer.push(_state(20.0))

        delivered = [buffer.tick(sink) for _ in range(3)]

        self.assertEqual(delivered, [True, True, False])
        self.assertEqual(sink.xs, [20.0, 10.0])
        self.assertEqual(len(buffer), 0)

    def test_tick_on_empty_buffer_is_noop(self):
        buffer = PlaybackBuffer()
        sink = _RecordingSink()
        self.assertFalse(buffer.tick(sink))
        self.assertEqual(sink.states, [])

    def test_push_stores_independent_copy(self):
        buffer = PlaybackBuffer()
        state = _state(10.0)
        buffer.push(state)
        state.objects[0].p[0] = 99.0

        self.assertEqual(buffer.pop().objects[0].p[0], 10.0)
        self.assertIsNone(buffer.pop())

    def test_clear(self):
        buffer = PlaybackBuffer()
        buffer.push(_state(1.0))
        buffer.clear()
        self.assertEqual(len(buffer), 0)

    def test_concurrent_push_and_pop(self):
        buffer = PlaybackBuffer()
        popped = []

        def producer():
            for i in range(200):
                buffer.push(_state(float(i % 90)))

        def consumer():
            while len(popped) < 200:
                state = buffer.pop()
                if state is not None:
                    popped.append(state)

        threads = [threading.Thread(target=producer), threading.Thread(target=consumer)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        self.assertEqual(len(popped), 200)
        self.assertEqual(len(buffer), 0)


class TestPlaybackTimer(unittest.TestCase):
    """Test periodic delivery."""

    def test_drains_buffer_in_lifo_order(self):
        buffer = PlaybackBuffer()
        sink = _RecordingSink()
        buffer.push(_state(1.0))
        buffer.push(_state(2.0))

        with PlaybackTimer(buffer, sink, interval=0.01) as timer:
            self.assertTrue(timer.wait_until_drained(timeout=5.0))

        self.assertEqual(sink.xs, [2.0, 1.0])
        self.assertEqual(timer.delivered_count, 2)
        self.assertFalse(timer.is_running)

    def test_tolerates_empty_buffer(self):
        buffer = PlaybackBuffer()
        sink = _RecordingSink()

        with PlaybackTimer(buffer, sink, interval=0.01) as timer:
            time.sleep(0.1)
            self.assertTrue(timer.is_running)
            # States produced late are still delivered.
            buffer.push(_state(5.0))
            self.assertTrue(timer.wait_until_drained(timeout=5.0))

        self.assertEqual(sink.xs, [5.0])

    def test_no_delivery_after_stop(self):
        buffer = PlaybackBuffer()
        sink = _RecordingSink()
        timer = PlaybackTimer(buffer, sink, interval=0.01)
        timer.start()
        timer.stop()

        buffer.push(_state(3.0))
        time.sleep(0.1)

        self.assertEqual(sink.states, [])
        self.assertEqual(len(buffer), 1)

    def test_sink_error_does_not_stop_timer(self):
        buffer = PlaybackBuffer()
        delivered = []

        def flaky_sink(state):
            if not delivered:
                delivered.append(None)
                raise RuntimeError("viewer unavailable")
            delivered.append(state)

        buffer.push(_state(1.0))
        buffer.push(_state(2.0))

        with self.assertLogs("layoutsmith.optimizer.playback", level="ERROR"):
            with PlaybackTimer(buffer, flaky_sink, interval=0.01) as timer:
                self.assertTrue(timer.wait_until_drained(timeout=5.0))

        self.assertEqual(len(delivered), 2)
        self.assertEqual(delivered[1].objects[0].p[0], 1.0)

    def test_wait_until_drained_times_out(self):
        buffer = PlaybackBuffer()
        buffer.push(_state(1.0))
        timer = PlaybackTimer(buffer, _RecordingSink(), interval=10.0)

        # Never started, so nothing drains.
        self.assertFalse(timer.wait_until_drained(timeout=0.1))

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            PlaybackTimer(PlaybackBuffer(), _RecordingSink(), interval=0.0)

    def test_double_start_rejected(self):
        timer = PlaybackTimer(PlaybackBuffer(), _RecordingSink(), interval=0.01)
        timer.start()
        try:
            with self.assertRaises(RuntimeError):
                timer.start()
        finally:
            timer.stop()


if __name__ == "__main__":
    unittest.main()
