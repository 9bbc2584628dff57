from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set
from uuid import UUID

from .schemas import ActivityTag, ActivityTagRaw, Venue, VenueRaw

LOGGER = logging.getLogger(__name__)

DEFAULT_VENUE_NAME = "Complexe"
DEFAULT_EMOJI = "🏟️"


def _clean(text: Optional[str]) -> str:
    return (text or "").strip()


def group_activities(
    tags: Iterable[ActivityTagRaw], default_emoji: str = DEFAULT_EMOJI
) -> Dict[UUID, List[ActivityTag]]:
    """Group activity rows by venue, keeping the first occurrence of each tag."""
    grouped: Dict[UUID, List[ActivityTag]] = {}
    seen: Dict[UUID, Set[ActivityTag]] = {}
    labels: Dict[UUID, Set[str]] = {}

    for row in tags:
        label = _clean(row.label)
        if not label:
            continue
        emoji = _clean(row.emoji)
        venue_labels = labels.setdefault(row.venue_id, set())
        if not emoji:
            # A row without an emoji adds nothing to a label the venue already has
            if label in venue_labels:
                continue
            emoji = default_emoji

        activity = ActivityTag(label=label, emoji=emoji)
        bucket = seen.setdefault(row.venue_id, set())
        if activity in bucket:
            continue
        bucket.add(activity)
        venue_labels.add(label)
        grouped.setdefault(row.venue_id, []).append(activity)

    return grouped


def assemble(
    venues: Iterable[VenueRaw],
    tags: Iterable[ActivityTagRaw],
    default_name: str = DEFAULT_VENUE_NAME,
    default_emoji: str = DEFAULT_EMOJI,
) -> List[Venue]:
    activities = group_activities(tags, default_emoji)

    assembled: List[Venue] = []
    for raw in venues:
        if raw.latitude is None or raw.longitude is None:
            LOGGER.debug("Dropping venue %s without coordinates", raw.id)
            continue
        assembled.append(
            Venue(
                id=raw.id,
                display_name=_clean(raw.name) or default_name,
                city=raw.city,
                country=raw.country,
                postal_code=raw.postal_code,
                address_full=raw.address_full,
                bio=raw.bio,
                website=raw.website,
                phone=raw.phone,
                latitude=raw.latitude,
                longitude=raw.longitude,
                photos=tuple(raw.photos),
                activities=tuple(activities.get(raw.id, ())),
            )
        )
    return assembled
