"""Injectable clocks, timers and tickers backed by real time."""

from __future__ import annotations

import queue
import threading
import time
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Union

Duration = Union[float, timedelta]


def _seconds(d: Duration) -> float:
    if isinstance(d, timedelta):
        return d.total_seconds()
    return float(d)


class PassiveClock(Protocol):
    """A clock that can only be read."""

    def now(self) -> datetime: ...

    def since(self, ts: datetime) -> timedelta: ...


class Timer:
    """A one-shot timer that delivers the firing time or runs a callback."""

    def __init__(self, d: Duration, func: Optional[Callable[[], None]] = None):
        self._func = func
        self._queue: Optional[queue.Queue] = None if func else queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._generation = 0
        self._active = False
        self._timer: Optional[threading.Timer] = None
        with self._lock:
            self._start(d)

    def _start(self, d: Duration) -> None:
        self._generation += 1
        self._active = True
        self._timer = threading.Timer(
            max(_seconds(d), 0.0), self._fire, args=(self._generation,)
        )
        self._timer.daemon = True
        self._timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or not self._active:
                return
            self._active = False
        if self._queue is not None:
            try:
                self._queue.put_nowait(datetime.now())
            except queue.Full:
                pass
        if self._func is not None:
            self._func()

    def c(self) -> Optional[queue.Queue]:
        """Return the queue that receives the firing time (None for callbacks)."""
        return self._queue

    def stop(self) -> bool:
        """Stop the timer; True if it had not fired yet."""
        with self._lock:
            was_active = self._active
            self._active = False
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
        return was_active

    def reset(self, d: Duration) -> bool:
        """Restart the timer to fire after d; True if it was still active."""
        with self._lock:
            was_active = self._active
            if self._timer is not None:
                self._timer.cancel()
            self._start(d)
        return was_active


class Ticker:
    """Delivers the current time at a fixed interval, dropping ticks for slow readers."""

    def __init__(self, d: Duration):
        interval = _seconds(d)
        if interval <= 0:
            raise ValueError("non-positive interval for ticker")
        self._interval = interval
        self._queue: queue.Queue = queue.Queue(maxsize=1)
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            try:
                self._queue.put_nowait(datetime.now())
            except queue.Full:
                pass

    def c(self) -> queue.Queue:
        """Return the queue that receives tick times."""
        return self._queue

    def stop(self) -> None:
        """Stop delivering ticks."""
        self._stopped.set()


class RealClock:
    """A clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now()

    def since(self, ts: datetime) -> timedelta:
        return datetime.now() - ts

    def after(self, d: Duration) -> queue.Queue:
        """Return a queue that receives the time once d has elapsed."""
        return Timer(d).c()

    def new_timer(self, d: Duration) -> Timer:
        return Timer(d)

    def after_func(self, d: Duration, f: Callable[[], None]) -> Timer:
        """Run f in its own thread after d; the timer can stop it."""
        return Timer(d, f)

    def tick(self, d: Duration) -> Optional[queue.Queue]:
        """Return the queue of a new ticker, or None for a non-positive interval."""
        if _seconds(d) <= 0:
            return None
        return Ticker(d).c()

    def new_ticker(self, d: Duration) -> Ticker:
        return Ticker(d)

    def sleep(self, d: Duration) -> None:
        time.sleep(max(_seconds(d), 0.0))