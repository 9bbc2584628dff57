from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional

from .backend import BackendProtocol
from .errors import RemoteError
from .schemas import ActivityTagRaw, BoundingBox, VenueRaw

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_VENUES = 400


class Aggregate(NamedTuple):
    venues: List[VenueRaw]
    tags: List[ActivityTagRaw]


class AggregationFetcher:
    """Runs the venues query, then the activity query for the returned ids."""

    def __init__(self, backend: BackendProtocol, max_venues: int = DEFAULT_MAX_VENUES):
        self.backend = backend
        self.max_venues = max_venues

    def fetch(self, box: BoundingBox, max_venues: Optional[int] = None) -> Aggregate:
        limit = self.max_venues if max_venues is None else max_venues
        try:
            venues = list(
                self.backend.query_venues_in_box(
                    box.min_lat, box.max_lat, box.min_lon, box.max_lon, limit
                )
            )[:limit]
            if not venues:
                LOGGER.info("No venues in box, skipping activity query")
                return Aggregate(venues=[], tags=[])

            tags = self.backend.query_active_tags_for_venues([venue.id for venue in venues])
        except RemoteError:
            raise
        except Exception as exc:
            raise RemoteError(str(exc) or type(exc).__name__) from exc

        LOGGER.info("Fetched %d venues and %d activity rows", len(venues), len(tags))
        return Aggregate(venues=list(venues), tags=list(tags))
