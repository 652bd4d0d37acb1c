"""
Single-threaded timer queue.

Every timed activity (polling, carousel, slideshow countdowns, drift) is a
Timer on one heap ordered by due time, ties broken by insertion order.
Callbacks run one at a time from `run_pending`, so they never overlap.
"""

import heapq
import itertools
import logging
from time import monotonic, sleep

LOGGER = logging.getLogger("skyframe")


class Timer:
    def __init__(self, scheduler, due: float, callback, args=(), interval: float | None = None, name: str | None = None):
        self._scheduler = scheduler
        self.due = due
        self.callback = callback
        self.args = args
        self.interval = interval
        self.name = name or getattr(callback, "__name__", "timer")
        self.cancelled = False

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def cancel(self):
        self.cancelled = True

    def __repr__(self):
        state = "cancelled" if self.cancelled else f"due={self.due:.3f}"
        return f"<Timer {self.name} {state}>"


class Scheduler:
    def __init__(self, clock_fn=None, sleep_fn=None):
        self.clock_fn = clock_fn or monotonic
        self.sleep_fn = sleep_fn or sleep
        self._queue: list = []
        self._counter = itertools.count()
        self._running = False

    def now(self) -> float:
        return self.clock_fn()

    def _push(self, timer: Timer) -> Timer:
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    def call_later(self, delay: float, callback, *args, name: str | None = None) -> Timer:
        return self._push(Timer(self, self.now() + max(0.0, float(delay)), callback, args, name=name))

    def call_every(self, interval: float, callback, *args, first_delay: float | None = None, name: str | None = None) -> Timer:
        interval = float(interval)
        if interval <= 0:
            raise ValueError(f"Repeating interval must be > 0 seconds: {interval!r}")
        delay = interval if first_delay is None else max(0.0, float(first_delay))
        return self._push(Timer(self, self.now() + delay, callback, args, interval=interval, name=name))

    @staticmethod
    def cancel(timer: Timer | None):
        if timer is not None:
            timer.cancel()

    def _prune(self):
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def next_due(self) -> float | None:
        self._prune()
        return self._queue[0][0] if self._queue else None

    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def _fire(self, timer: Timer):
        if timer.repeating:
            timer.due += timer.interval
            self._push(timer)
        timer.callback(*timer.args)

    def run_pending(self) -> int:
        """Run every timer due at the current time; return how many ran."""
        ran = 0
        now = self.now()
        while True:
            self._prune()
            if not self._queue or self._queue[0][0] > now:
                return ran
            _, _, timer = heapq.heappop(self._queue)
            self._fire(timer)
            ran += 1

    def advance(self, seconds: float) -> int:
        """
        Move time forward by `seconds`, firing timers in due order.

        With a virtual clock whose sleep_fn advances it this is deterministic;
        tests drive the whole display loop this way.
        """
        target = self.now() + float(seconds)
        ran = 0
        while True:
            due = self.next_due()
            if due is None or due > target:
                break
            wait = due - self.now()
            if wait > 0:
                self.sleep_fn(wait)
            ran += self.run_pending()
        remaining = target - self.now()
        if remaining > 0:
            self.sleep_fn(remaining)
        return ran

    def run_forever(self):
        self._running = True
        while self._running:
            due = self.next_due()
            if due is None:
                LOGGER.info("Scheduler queue empty; stopping.")
                break
            wait = due - self.now()
            if wait > 0:
                self.sleep_fn(wait)
            self.run_pending()
        self._running = False

    def stop(self):
        self._running = False

    def clear(self):
        for _, _, timer in self._queue:
            timer.cancel()
        self._queue.clear()


class VirtualClock:
    """Manual clock for tests and dry runs: `sleep` moves time forward instantly."""

    def __init__(self, start: float = 0.0):
        self.current = float(start)

    def __call__(self) -> float:
        return self.current

    def sleep(self, seconds: float):
        self.current += max(0.0, float(seconds))
