"""
Fixed-interval frame pacing.

The host owns the animation callback (request_frame / cancel_frame). The
pacer only decides whether a given callback runs a tick, and runs it
synchronously, so there is never more than one tick in flight.
"""
import logging
import time
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

logger = logging.getLogger(__name__)

RequestFrame = Callable[[Callable[[], None]], Any]
CancelFrame = Callable[[Any], None]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FramePacer:
    def __init__(
        self,
        interval_ms: float,
        tick: Callable[[], None],
        request_frame: RequestFrame,
        cancel_frame: CancelFrame,
        clock: Callable[[], float] = monotonic_ms,
    ):
        if interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")
        self.interval_ms = float(interval_ms)
        self.tick = tick
        self.request_frame = request_frame
        self.cancel_frame = cancel_frame
        self.clock = clock
        self.then: Optional[float] = None
        self.ticks = 0
        self.skipped = 0
        self._handle = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        if self._running:
            return
        self._running = True
        self.then = self.clock()
        self._handle = self.request_frame(self.on_frame)

    def stop(self):
        self._running = False
        if self._handle is not None:
            self.cancel_frame(self._handle)
            self._handle = None

    def on_frame(self):
        """Host animation callback."""
        self._handle = None
        if not self._running:
            return
        self._handle = self.request_frame(self.on_frame)

        now = self.clock()
        elapsed = now - self.then
        if elapsed < self.interval_ms:
            self.skipped += 1
            return

        if self.interval_ms > 0:
            self.then = now - (elapsed % self.interval_ms)
        else:
            self.then = now
        self.ticks += 1
        self.tick()


class HeadlessFrameSource:
    """
    Cooperative frame queue for hosts without an animation loop.

    request_frame() queues a callback and returns a handle, cancel_frame()
    drops it, run() fires queued callbacks one frame at a time.
    """

    def __init__(self, frame_ms: float = 1000.0 / 60.0, sleep: Callable[[float], None] = time.sleep):
        self.frame_ms = frame_ms
        self.sleep = sleep
        self._queue: Deque[Tuple[int, Callable[[], None]]] = deque()
        self._cancelled = set()
        self._next_handle = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        self._next_handle += 1
        self._queue.append((self._next_handle, callback))
        return self._next_handle

    def cancel_frame(self, handle: int):
        self._cancelled.add(handle)

    def run(self, max_frames: Optional[int] = None) -> int:
        """Fire callbacks until the queue drains or max_frames callbacks ran."""
        frames = 0
        while self._queue and (max_frames is None or frames < max_frames):
            handle, callback = self._queue.popleft()
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            if frames and self.frame_ms > 0:
                self.sleep(self.frame_ms / 1000.0)
            callback()
            frames += 1
        logger.debug("Headless frame source ran %d frames", frames)
        return frames
