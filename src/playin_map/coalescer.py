from __future__ import annotations

import logging
from typing import Optional

from .geo_box import DEFAULT_PRECISION, quantize
from .schemas import BoundingBox

LOGGER = logging.getLogger(__name__)

_EDGE_TOLERANCE_S = 1e-6


class QueryCoalescer:
    """Decides whether a viewport's box warrants a new backend fetch.

    Boxes are compared by their quantized key, so sub-precision jitter from the
    map camera never causes a round trip. Boxes arriving inside the quiet
    interval are not queued: only the most recent one is kept and can be
    flushed with :meth:`take_pending` once the window closes.
    """

    def __init__(self, quiet_interval_s: float = 0.6, precision: int = DEFAULT_PRECISION):
        self.quiet_interval_s = quiet_interval_s
        self.precision = precision
        self.last_key: Optional[str] = None
        self.last_fetch_time: Optional[float] = None
        self.pending: Optional[BoundingBox] = None

    def key_for(self, box: BoundingBox) -> str:
        return quantize(box, self.precision)

    def remaining_quiet(self, now: float) -> float:
        if self.last_fetch_time is None:
            return 0.0
        remaining = self.quiet_interval_s - (now - self.last_fetch_time)
        # timer wakeups land within float error of the window edge
        return remaining if remaining > _EDGE_TOLERANCE_S else 0.0

    def should_fetch(self, box: BoundingBox, now: float) -> bool:
        key = self.key_for(box)
        if key == self.last_key:
            LOGGER.debug("Skipping viewport with unchanged key %s", key)
            self.pending = None
            return False
        if self.remaining_quiet(now) > 0:
            LOGGER.debug("Deferring viewport %s inside quiet interval", key)
            self.pending = box
            return False
        self._accept(key, now)
        return True

    def take_pending(self, now: float) -> Optional[BoundingBox]:
        """Return the trailing box if the quiet window has closed, else None."""
        box = self.pending
        if box is None or self.remaining_quiet(now) > 0:
            return None
        self.pending = None
        key = self.key_for(box)
        if key == self.last_key:
            return None
        self._accept(key, now)
        return box

    def invalidate(self) -> None:
        self.last_key = None

    def force(self, box: BoundingBox, now: float) -> str:
        """Accept ``box`` regardless of key and quiet interval (manual refresh)."""
        key = self.key_for(box)
        self._accept(key, now)
        return key

    def _accept(self, key: str, now: float) -> None:
        # Updated before dispatch so a re-entrant call for the same box is dropped
        self.last_key = key
        self.last_fetch_time = now
        self.pending = None
