from __future__ import annotations

import threading
from typing import Callable, Protocol


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        ...


class ThreadingScheduler:
    """Runs callbacks on daemon timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(max(0.0, delay), callback)
        timer.daemon = True
        timer.start()
