"""One-shot timers for the single-threaded explorer loop."""

import heapq
import itertools
import time
from collections.abc import Callable


class PollingScheduler:
    """Timer queue pumped by the owner's loop via ``run_due``.

    Callbacks run on the caller's thread, in due-time order; ties keep
    scheduling order.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._queue: list[tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self._clock() + delay, next(self._seq), callback))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run_due(self) -> int:
        """Run every callback whose time has come. Returns how many ran."""
        now = self._clock()
        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, callback = heapq.heappop(self._queue)
            callback()
            ran += 1
        return ran

    def run_all(self) -> int:
        """Run every pending callback regardless of due time."""
        ran = 0
        while self._queue:
            _, _, callback = heapq.heappop(self._queue)
            callback()
            ran += 1
        return ran
