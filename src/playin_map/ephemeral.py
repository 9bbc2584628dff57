from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, List, Optional

from .scheduling import Scheduler, ThreadingScheduler
from .schemas import EphemeralEntry

LOGGER = logging.getLogger(__name__)

DEFAULT_DELAY_S = 1.2


class EphemeralStateMachine:
    """Show-then-auto-hide state keyed by subject (e.g. an activity label).

    Every trigger mints a fresh token. The delayed clear only removes the key
    if the stored token is still the one it was scheduled with, so a clear
    scheduled by an earlier trigger does nothing once the key is re-triggered.
    """

    def __init__(self, delay_s: float = DEFAULT_DELAY_S, scheduler: Optional[Scheduler] = None):
        self.delay_s = delay_s
        self._scheduler = scheduler or ThreadingScheduler()
        self._entries: Dict[str, EphemeralEntry] = {}
        self._lock = threading.Lock()

    def trigger(self, key: str) -> uuid.UUID:
        token = uuid.uuid4()
        with self._lock:
            self._entries[key] = EphemeralEntry(key=key, token=token)
        self._scheduler.call_later(self.delay_s, lambda: self._expire(key, token))
        return token

    def _expire(self, key: str, token: uuid.UUID) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.token != token:
                LOGGER.debug("Ignoring superseded expiry for %r", key)
                return
            del self._entries[key]

    def clear(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def is_visible(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def token_for(self, key: str) -> Optional[uuid.UUID]:
        with self._lock:
            entry = self._entries.get(key)
        return entry.token if entry else None

    def visible_keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)
