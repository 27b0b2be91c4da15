"""Virtual-time scheduler driving the simulated backend.

Every "asynchronous" operation in the wizard (chat replies, upload progress,
document processing, ID lookups) is a timer on a `Scheduler`. Time only moves
when `advance()` or `run_until_idle()` is called, so tests step through an
upload second by second and the interactive CLI can replay the same timeline
in real time.

Strategies never talk to the scheduler directly; they own a `TimerGroup`
and cancel it on disposal, so no callback can fire into a discarded view.
"""

import heapq
import itertools
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Timer:
    """Handle for a pending one-shot or repeating callback."""

    def __init__(
        self,
        when: float,
        callback: Callable[[], None],
        interval: float | None = None,
    ):
        self.when = when
        self.callback = callback
        self.interval = interval
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        if self.cancelled:
            return False
        return self.interval is not None or not self.fired


class Scheduler:
    """Priority queue of timers over a virtual clock starting at 0."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, Timer]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> Timer:
        """Run *callback* once, *delay* seconds from now."""
        timer = Timer(self.now + max(delay, 0.0), callback)
        self._push(timer)
        return timer

    def call_every(self, interval: float, callback: Callable[[], None]) -> Timer:
        """Run *callback* every *interval* seconds until cancelled."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        timer = Timer(self.now + interval, callback, interval=interval)
        self._push(timer)
        return timer

    def _push(self, timer: Timer) -> None:
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if t.active)

    def next_due(self) -> float | None:
        """Time of the next live timer, or None when idle."""
        while self._queue and not self._queue[0][2].active:
            heapq.heappop(self._queue)
        return self._queue[0][0] if self._queue else None

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every timer due on the way."""
        target = self.now + max(seconds, 0.0)
        while True:
            due = self.next_due()
            # tolerance for accumulated float error on repeating timers
            if due is None or due > target + 1e-9:
                break
            _, _, timer = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if timer.interval is not None:
                timer.when = due + timer.interval
                self._push(timer)
            else:
                timer.fired = True
            timer.callback()
        self.now = max(self.now, target)

    def run_until_idle(
        self,
        on_step: Callable[[], None] | None = None,
        speed: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Fire timers in order until none remain.

        With ``speed > 0`` the real-time gap between timers is slept, scaled
        by *speed* (1.0 = real time). *on_step* runs after every firing and
        is used by the CLI to refresh progress bars.
        """
        while True:
            due = self.next_due()
            if due is None:
                return
            gap = max(due - self.now, 0.0)
            if speed > 0 and gap > 0:
                sleep(gap * speed)
            self.advance(gap)
            if on_step is not None:
                on_step()


class TimerGroup:
    """Timers owned by one component, cancelled together on teardown."""

    def __init__(self, scheduler: Scheduler, owner: str = ""):
        self.scheduler = scheduler
        self.owner = owner
        self._timers: list[Timer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> Timer:
        timer = self.scheduler.call_later(delay, callback)
        self._track(timer)
        return timer

    def call_every(self, interval: float, callback: Callable[[], None]) -> Timer:
        timer = self.scheduler.call_every(interval, callback)
        self._track(timer)
        return timer

    def _track(self, timer: Timer) -> None:
        self._timers = [t for t in self._timers if t.active]
        self._timers.append(timer)

    @property
    def active(self) -> bool:
        return any(t.active for t in self._timers)

    def cancel_all(self) -> int:
        """Cancel every live timer; returns how many were still pending."""
        live = [t for t in self._timers if t.active]
        for timer in live:
            timer.cancel()
        self._timers.clear()
        if live:
            logger.debug("Cancelled %d pending timer(s) for %s", len(live), self.owner or "component")
        return len(live)
