from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PHOTO_DELIMITERS = re.compile(r"[,;|\n]")

VENUE_COLUMNS = (
    "id",
    "name",
    "city",
    "country",
    "postal_code",
    "address_full",
    "bio",
    "website",
    "phone",
    "latitude",
    "longitude",
    "photos",
)


def split_photos(value: Any) -> List[str]:
    """Normalize a photos column into an ordered list of non-empty URLs.

    The column is loosely typed upstream: it may be a JSON array or a single
    string joined with ``,``, ``;``, ``|`` or newlines.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items: List[Any] = PHOTO_DELIMITERS.split(value)
    elif isinstance(value, (list, tuple)):
        items = [item for item in value if isinstance(item, str)]
    else:
        return []
    return [item.strip() for item in items if item.strip()]


class Viewport(BaseModel):
    center_lat: float
    center_lon: float
    lat_delta: float = Field(ge=0)
    lon_delta: float = Field(ge=0)


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @model_validator(mode="after")
    def _check_order(self) -> "BoundingBox":
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError("bounding box minimum exceeds maximum")
        return self


class VenueRaw(BaseModel):
    id: UUID
    name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    address_full: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    photos: List[str] = Field(default_factory=list)

    @field_validator("photos", mode="before")
    @classmethod
    def _normalize_photos(cls, value: Any) -> List[str]:
        return split_photos(value)


class ActivityTagRaw(BaseModel):
    venue_id: UUID
    label: Optional[str] = None
    emoji: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_join(cls, data: Any) -> Any:
        # Offer rows arrive as {"complex_id": ..., "activities": {"label", "emoji"}}
        if isinstance(data, dict) and "complex_id" in data:
            activity = data.get("activities")
            if not isinstance(activity, dict):
                activity = {}
            return {
                "venue_id": data["complex_id"],
                "label": activity.get("label"),
                "emoji": activity.get("emoji"),
            }
        return data


class ActivityTag(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    emoji: str


class Venue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    display_name: str
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    address_full: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    latitude: float
    longitude: float
    photos: Tuple[str, ...] = ()
    activities: Tuple[ActivityTag, ...] = ()


class EphemeralEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    token: UUID


class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class MapState(BaseModel):
    """Immutable snapshot of what the map should currently display."""

    model_config = ConfigDict(frozen=True)

    venues: Tuple[Venue, ...] = ()
    status: FetchStatus = FetchStatus.IDLE
    error_message: Optional[str] = None
    box_key: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status is FetchStatus.LOADING
