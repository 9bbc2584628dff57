from __future__ import annotations

from typing import Callable, List, Tuple

import pytest


class ManualClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class ManualScheduler:
    """Collects callbacks and fires them as the shared clock advances."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self._calls: List[Tuple[float, int, Callable[[], None]]] = []
        self._counter = 0

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self._counter += 1
        self._calls.append((self.clock.now + delay, self._counter, callback))

    def advance(self, seconds: float) -> None:
        target = self.clock.now + seconds
        while True:
            due = sorted(c for c in self._calls if c[0] <= target + 1e-9)
            if not due:
                break
            call = due[0]
            self._calls.remove(call)
            self.clock.now = call[0]
            call[2]()
        self.clock.now = target

    @property
    def pending(self) -> int:
        return len(self._calls)


class DeferredExecutor:
    """Holds submitted jobs so tests control completion order."""

    def __init__(self):
        self.jobs: List[Tuple[Callable, tuple]] = []

    def submit(self, fn, *args):
        self.jobs.append((fn, args))

    def run(self, index: int) -> None:
        fn, args = self.jobs[index]
        fn(*args)


class InlineExecutor:
    def submit(self, fn, *args):
        fn(*args)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler(clock) -> ManualScheduler:
    return ManualScheduler(clock)


VENUE_A = "6f1c2a3e-1111-4c3b-9a1d-000000000001"
VENUE_B = "6f1c2a3e-1111-4c3b-9a1d-000000000002"
VENUE_C = "6f1c2a3e-1111-4c3b-9a1d-000000000003"


def venue_row(venue_id: str, **overrides) -> dict:
    row = {
        "id": venue_id,
        "name": "Urban Padel",
        "city": "Paris",
        "country": "France",
        "postal_code": "75011",
        "address_full": "12 rue Oberkampf, 75011 Paris",
        "bio": None,
        "website": "urbanpadel.fr",
        "phone": "+33 1 23 45 67 89",
        "latitude": 48.8647,
        "longitude": 2.3780,
        "photos": ["https://cdn.example.com/a.jpg"],
    }
    row.update(overrides)
    return row


def offer_row(venue_id: str, label, emoji) -> dict:
    return {"complex_id": venue_id, "activities": {"label": label, "emoji": emoji}}
