from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, NamedTuple, Optional, Sequence

from .assembler import assemble
from .coalescer import QueryCoalescer
from .backend import SupabaseBackend
from .config import AppConfig, MapConfig, TooltipConfig
from .ephemeral import EphemeralStateMachine
from .errors import RemoteError
from .fetcher import AggregationFetcher
from .geo_box import to_bounding_box, viewport_around
from .scheduling import Scheduler, ThreadingScheduler
from .schemas import BoundingBox, FetchStatus, MapState, Venue, Viewport

LOGGER = logging.getLogger(__name__)

Listener = Callable[[MapState], None]


class FetchTicket(NamedTuple):
    seq: int
    key: str
    box: BoundingBox


class MapSession:
    """Drives one map screen: viewport changes in, ``MapState`` snapshots out.

    Each dispatched fetch carries a ticket; a result is applied only if its
    ticket is still the most recently dispatched one, so a slow response for a
    box the user has already panned away from never replaces newer venues.
    A failed fetch keeps the previous venues and reports the error.
    """

    def __init__(
        self,
        fetcher: AggregationFetcher,
        config: Optional[MapConfig] = None,
        tooltip_config: Optional[TooltipConfig] = None,
        executor: Optional[Any] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or MapConfig()
        tooltip_config = tooltip_config or TooltipConfig()
        self.fetcher = fetcher
        self.coalescer = QueryCoalescer(self.config.quiet_interval_s, self.config.key_precision)
        self._scheduler = scheduler or ThreadingScheduler()
        self.tooltips = EphemeralStateMachine(tooltip_config.delay_s, self._scheduler)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="playin-map-fetch"
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        self._state = MapState()
        self._seq = 0
        self._latest: Optional[FetchTicket] = None
        self._last_box: Optional[BoundingBox] = None
        self._flush_scheduled = False

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "MapSession":
        fetcher = AggregationFetcher(SupabaseBackend(config.backend), config.map.max_venues)
        return cls(fetcher, config=config.map, tooltip_config=config.tooltip, **kwargs)

    @property
    def state(self) -> MapState:
        return self._state

    @property
    def venues(self) -> Sequence[Venue]:
        return self._state.venues

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_viewport_changed(self, viewport: Viewport) -> Optional[FetchTicket]:
        box = to_bounding_box(viewport)
        with self._lock:
            self._last_box = box
            accepted = self.coalescer.should_fetch(box, self._clock())
            ticket = self._new_ticket(box) if accepted else None
            if ticket is None and self.coalescer.pending is not None:
                self._schedule_flush_locked()
        if ticket is not None:
            self._dispatch(ticket)
        return ticket

    def load(self, viewport: Viewport) -> Optional[FetchTicket]:
        """Fetch ``viewport`` now, ignoring the quiet interval but not the key."""
        box = to_bounding_box(viewport)
        with self._lock:
            self._last_box = box
            ticket = self._load_locked(box)
        if ticket is not None:
            self._dispatch(ticket)
        return ticket

    def start(self) -> Optional[FetchTicket]:
        lat, lon = self.config.default_center
        return self.load(viewport_around(lat, lon, self.config.default_span))

    def recenter(self, lat: float, lon: float) -> Optional[FetchTicket]:
        return self.load(viewport_around(lat, lon, self.config.default_span))

    def refresh(self) -> Optional[FetchTicket]:
        """Re-fetch the last viewport even though its key has not changed."""
        with self._lock:
            box = self._last_box
            if box is None:
                return None
            self.coalescer.invalidate()
            ticket = self._load_locked(box)
        if ticket is not None:
            self._dispatch(ticket)
        return ticket

    def trigger_tooltip(self, label: str) -> None:
        self.tooltips.trigger(label)

    def is_tooltip_visible(self, label: str) -> bool:
        return self.tooltips.is_visible(label)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def _load_locked(self, box: BoundingBox) -> Optional[FetchTicket]:
        if self.coalescer.key_for(box) == self.coalescer.last_key:
            return None
        self.coalescer.force(box, self._clock())
        return self._new_ticket(box)

    def _new_ticket(self, box: BoundingBox) -> FetchTicket:
        self._seq += 1
        ticket = FetchTicket(seq=self._seq, key=self.coalescer.key_for(box), box=box)
        self._latest = ticket
        return ticket

    def _schedule_flush_locked(self) -> None:
        if self._flush_scheduled:
            return
        self._flush_scheduled = True
        delay = self.coalescer.remaining_quiet(self._clock())
        self._scheduler.call_later(delay, self._flush_pending)

    def _flush_pending(self) -> None:
        with self._lock:
            self._flush_scheduled = False
            box = self.coalescer.take_pending(self._clock())
            ticket = self._new_ticket(box) if box is not None else None
            if ticket is None and self.coalescer.pending is not None:
                self._schedule_flush_locked()
        if ticket is not None:
            self._dispatch(ticket)

    def _dispatch(self, ticket: FetchTicket) -> None:
        with self._lock:
            if not self._is_latest(ticket):
                LOGGER.debug("Not dispatching superseded box %s", ticket.key)
                return
            LOGGER.info("Fetching venues for box %s", ticket.key)
            state = self._state.model_copy(
                update={"status": FetchStatus.LOADING, "error_message": None}
            )
            self._state = state
        self._publish(state)
        self._executor.submit(self._run, ticket)

    def _is_latest(self, ticket: FetchTicket) -> bool:
        return self._latest is not None and ticket.seq == self._latest.seq

    def _run(self, ticket: FetchTicket) -> None:
        try:
            aggregate = self.fetcher.fetch(ticket.box)
            venues = assemble(
                aggregate.venues,
                aggregate.tags,
                default_name=self.config.default_venue_name,
                default_emoji=self.config.default_emoji,
            )
        except RemoteError as exc:
            LOGGER.warning("Venue fetch for box %s failed: %s", ticket.key, exc)
            self._complete(ticket, error=exc)
        except Exception as exc:
            LOGGER.exception("Loading venues for box %s failed", ticket.key)
            self._complete(ticket, error=exc)
        else:
            self._complete(ticket, venues=venues)

    def _complete(
        self,
        ticket: FetchTicket,
        venues: Optional[List[Venue]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        with self._lock:
            if not self._is_latest(ticket):
                LOGGER.debug("Discarding superseded result for box %s", ticket.key)
                return
            if error is not None:
                message = str(error) or type(error).__name__
                state = self._state.model_copy(
                    update={"status": FetchStatus.ERROR, "error_message": message}
                )
            else:
                state = MapState(
                    venues=tuple(venues or ()),
                    status=FetchStatus.IDLE,
                    box_key=ticket.key,
                )
                LOGGER.info("Publishing %d venues for box %s", len(state.venues), ticket.key)
            self._state = state
        self._publish(state)

    def _publish(self, state: MapState) -> None:
        if state is not self._state:
            # a newer snapshot was set while this one was on its way out
            return
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                LOGGER.exception("Map state listener failed")
