"""Fixed-cadence delivery of recorded layouts to a consumer.

The annealing run finishes in well under a second for typical rooms, while a
viewer wants to animate the result at a steady pace. Recorded states are
pushed onto a ``PlaybackBuffer`` and a ``PlaybackTimer`` hands one of them to a
sink callback per tick.
"""

import logging
import threading
import time

from typing import Callable

from layoutsmith.layout.room import LayoutState

console_logger = logging.getLogger(__name__)

LayoutSink = Callable[[LayoutState], None]


class PlaybackBuffer:
    """Thread-safe last-in-first-out store of layout snapshots."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        """Lock for thread-safe access to the stack."""

        self._states: list[LayoutState] = []
        """Recorded snapshots, most recent last."""

    def push(self, state: LayoutState) -> None:
        """Record an independent copy of ``state``."""
        snapshot = state.clone()
        with self._lock:
            self._states.append(snapshot)

    def pop(self) -> LayoutState | None:
        """Remove and return the most recently pushed snapshot, or None if empty."""
        with self._lock:
            if not self._states:
                return None
            return self._states.pop()

    def clear(self) -> None:
        with self._lock:
            self._states.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def tick(self, sink: LayoutSink) -> bool:
        """Deliver at most one snapshot to ``sink``.

        Returns:
            True if a snapshot was delivered, False if the buffer was empty.
        """
        state = self.pop()
        if state is None:
            return False
        sink(state)
        return True


class PlaybackTimer:
    """Background thread that drains a ``PlaybackBuffer`` at a fixed interval.

    The first tick happens one ``interval`` after ``start()``. An empty buffer
    makes the tick a no-op; the timer keeps running until ``stop()``.

    Example:
        buffer = PlaybackBuffer()
        with PlaybackTimer(buffer, sink=viewer.show, interval=1.0) as timer:
            AnnealingRun(state, config, buffer=buffer).run()
            timer.wait_until_drained(timeout=30.0)
    """

    def __init__(
        self, buffer: PlaybackBuffer, sink: LayoutSink, interval: float = 1.0
    ):
        if interval <= 0:
            raise ValueError(f"Playback interval must be positive, got {interval}")

        self.buffer = buffer
        self.sink = sink
        self.interval = interval

        self._stop_event = threading.Event()
        # Held for the whole tick so that stop() waits for an in-flight delivery.
        self._delivery_lock = threading.RLock()
        self._thread: threading.Thread | None = None
        self.delivered_count = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        # Event.wait returns True as soon as stop() is requested.
        while not self._stop_event.wait(self.interval):
            with self._delivery_lock:
                if self._stop_event.is_set():
                    break
                try:
                    if self.buffer.tick(self.sink):
                        self.delivered_count += 1
                except Exception as e:
                    console_logger.error(f"Playback sink failed: {e}", exc_info=True)

    def start(self) -> None:
        if self.is_running:
            raise RuntimeError("Playback timer is already running")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="LayoutPlayback"
        )
        self._thread.start()
        console_logger.debug(f"Playback timer started ({self.interval}s interval)")

    def stop(self, timeout: float | None = None) -> None:
        """Stop delivering. No sink call starts after this returns."""
        self._stop_event.set()
        # Wait for any delivery in progress to finish.
        with self._delivery_lock:
            pass
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None
        console_logger.debug(
            f"Playback timer stopped after {self.delivered_count} deliveries"
        )

    def wait_until_drained(self, timeout: float | None = None) -> bool:
        """Block until the buffer is empty or ``timeout`` seconds elapse.

        Returns:
            True if the buffer drained in time.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        poll = min(self.interval, 0.05)
        while len(self.buffer):
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(poll)
        # The last snapshot has been popped; let its delivery complete.
        with self._delivery_lock:
            pass
        return True

    def __enter__(self) -> "PlaybackTimer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
