"""PostgREST client for the venue and activity-offer tables."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Sequence, Tuple, Type, TypeVar
from uuid import UUID

import requests
from pydantic import BaseModel, ValidationError

from .config import BackendConfig
from .errors import RemoteError
from .schemas import VENUE_COLUMNS, ActivityTagRaw, VenueRaw

LOGGER = logging.getLogger(__name__)

OFFER_SELECT = "complex_id,activities(label,emoji)"

RowT = TypeVar("RowT", bound=BaseModel)


class BackendProtocol(Protocol):
    def query_venues_in_box(
        self, min_lat: float, max_lat: float, min_lon: float, max_lon: float, limit: int
    ) -> List[VenueRaw]:
        ...

    def query_active_tags_for_venues(self, venue_ids: Sequence[UUID]) -> List[ActivityTagRaw]:
        ...


class SupabaseBackend:
    def __init__(self, config: BackendConfig, session: Optional[requests.Session] = None):
        self.config = config
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": config.anon_key,
                "Authorization": f"Bearer {config.anon_key}",
                "Accept": "application/json",
            }
        )

    def _table_url(self, table: str) -> str:
        return f"{self.config.url}/rest/v1/{table}"

    def query_venues_in_box(
        self, min_lat: float, max_lat: float, min_lon: float, max_lon: float, limit: int
    ) -> List[VenueRaw]:
        params = [
            ("select", ",".join(VENUE_COLUMNS)),
            ("latitude", f"gte.{min_lat}"),
            ("latitude", f"lte.{max_lat}"),
            ("longitude", f"gte.{min_lon}"),
            ("longitude", f"lte.{max_lon}"),
            ("limit", str(limit)),
        ]
        return self._get_rows(self.config.venues_table, params, VenueRaw)

    def query_active_tags_for_venues(self, venue_ids: Sequence[UUID]) -> List[ActivityTagRaw]:
        ids = ",".join(str(venue_id) for venue_id in venue_ids)
        params = [
            ("select", OFFER_SELECT),
            ("is_active", "eq.true"),
            ("complex_id", f"in.({ids})"),
        ]
        return self._get_rows(self.config.offers_table, params, ActivityTagRaw)

    def _get_rows(
        self, table: str, params: List[Tuple[str, str]], model: Type[RowT]
    ) -> List[RowT]:
        try:
            response = self._session.get(
                self._table_url(table), params=params, timeout=self.config.timeout_s
            )
            response.raise_for_status()
            payload: Any = response.json()
        except requests.RequestException as exc:
            raise RemoteError(f"request failed: {exc}", source=table) from exc
        except ValueError as exc:
            raise RemoteError("response is not valid JSON", source=table) from exc

        if not isinstance(payload, list):
            raise RemoteError(
                f"expected a list of rows, got {type(payload).__name__}", source=table
            )
        try:
            rows = [model.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise RemoteError(f"could not decode rows: {exc}", source=table) from exc

        LOGGER.debug("Fetched %d rows from %s", len(rows), table)
        return rows
