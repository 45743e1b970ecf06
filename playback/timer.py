"""
Cancellable periodic timers for playback auto-advance.

A TickScheduler arms a repeating callback and returns a handle whose
``stop()`` cancels it.  The production scheduler runs on the tornado IOLoop
of the calling thread.
"""

from abc import ABC, abstractmethod
from typing import Callable

from tornado.ioloop import PeriodicCallback


class TickHandle(ABC):
    """Handle of an armed periodic timer."""

    @abstractmethod
    def stop(self) -> None:
        """Cancel the timer; no callback runs after this returns."""
        ...

    @abstractmethod
    def is_running(self) -> bool:
        ...


class TickScheduler(ABC):
    """Arms periodic callbacks."""

    @abstractmethod
    def start(self, interval_ms: float, callback: Callable[[], None]) -> TickHandle:
        """Call ``callback`` every ``interval_ms`` milliseconds until stopped."""
        ...


class _PeriodicCallbackHandle(TickHandle):
    def __init__(self, periodic: PeriodicCallback):
        self._periodic = periodic

    def stop(self) -> None:
        self._periodic.stop()

    def is_running(self) -> bool:
        return self._periodic.is_running()


class TornadoTickScheduler(TickScheduler):
    """Schedules ticks with ``tornado.ioloop.PeriodicCallback``.

    Timers are armed on the IOLoop current at ``start()`` time, so the
    controller must be driven from that loop's thread.
    """

    def start(self, interval_ms: float, callback: Callable[[], None]) -> TickHandle:
        periodic = PeriodicCallback(callback, interval_ms)
        periodic.start()
        return _PeriodicCallbackHandle(periodic)
