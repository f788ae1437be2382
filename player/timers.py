import threading
from typing import Callable, Optional


TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


class IdleTimer:
    """
    Single-owner cancellable delayed task.

    ``restart()`` cancels whatever is scheduled and schedules a fresh call,
    so at most one timer is live at any time. Each schedule carries a
    generation number which is handed to the callback; the owner confirms it
    with ``is_current(gen)`` under its own lock, so a timer that was already
    firing when it got replaced does nothing.

    ``timer_factory`` defaults to ``threading.Timer``; tests pass a fake with
    the same ``(interval, function)`` signature and ``start``/``cancel``.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[int], None],
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._factory = timer_factory or threading.Timer
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0

    @property
    def active(self) -> bool:
        with self._lock:
            return self._timer is not None

    def is_current(self, gen: int) -> bool:
        with self._lock:
            return gen == self._generation

    def restart(self) -> None:
        with self._lock:
            self._cancel_unlocked()
            self._generation += 1
            gen = self._generation
            timer = self._factory(self.delay, lambda: self._fire(gen))
            # don't keep the interpreter alive for a UI timeout
            if hasattr(timer, "daemon"):
                timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            self._cancel_unlocked()
            self._generation += 1

    def _cancel_unlocked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, gen: int) -> None:
        with self._lock:
            if gen != self._generation:
                return
            self._timer = None
        self._callback(gen)
