"""Text and link helpers for the venue detail sheet."""

from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import quote

from .assembler import DEFAULT_EMOJI
from .schemas import Venue

PLACE_SEPARATOR = " • "
ELLIPSIS = "…"


def _trimmed(text: Optional[str]) -> Optional[str]:
    value = (text or "").strip()
    return value or None


def bio_text(venue: Venue) -> Optional[str]:
    return _trimmed(venue.bio)


def address_text(venue: Venue) -> Optional[str]:
    return _trimmed(venue.address_full)


def place_line(venue: Venue) -> Optional[str]:
    parts = [part for part in (venue.city, venue.postal_code, venue.country) if part]
    return PLACE_SEPARATOR.join(parts) or None


def website_url(venue: Venue) -> Optional[str]:
    raw = _trimmed(venue.website)
    if raw is None:
        return None
    if raw.lower().startswith(("http://", "https://")):
        return raw
    return f"https://{raw}"


def phone_url(venue: Venue) -> Optional[str]:
    raw = _trimmed(venue.phone)
    if raw is None:
        return None
    digits = "".join(ch for ch in raw if ch == "+" or ch in "0123456789")
    if not digits:
        return None
    return f"tel://{digits}"


def _encoded_destination(venue: Venue) -> str:
    address = address_text(venue)
    if address:
        return quote(address, safe="")
    return f"{venue.latitude},{venue.longitude}"


def directions_urls(venue: Venue) -> Dict[str, str]:
    """Deep links to the usual navigation apps, keyed by app."""
    destination = _encoded_destination(venue)
    return {
        "apple_maps": f"http://maps.apple.com/?daddr={destination}",
        "google_maps": f"comgooglemaps://?daddr={destination}&directionsmode=driving",
        "waze": f"waze://?q={destination}&navigate=yes",
    }


def emoji_line(venue: Venue, default_emoji: str = DEFAULT_EMOJI) -> str:
    """Pin label: the first two distinct emojis, with an ellipsis when there are more."""
    unique = list(dict.fromkeys(a.emoji for a in venue.activities if a.emoji))
    if not unique:
        return default_emoji
    line = "".join(unique[:2])
    if len(unique) > 2:
        line += ELLIPSIS
    return line


def travel_time_text(seconds: float) -> str:
    """Drive time as "25 min", or "1 h 5 min" from one hour up."""
    minutes = max(1, int(max(0.0, seconds) // 60))
    if seconds < 3600:
        return f"{minutes} min"
    hours, minutes = divmod(minutes, 60)
    if minutes == 0:
        return f"{hours} h"
    return f"{hours} h {minutes} min"


def eta_key(venue: Venue, user_lat: Optional[float], user_lon: Optional[float]) -> str:
    """Cache key for a drive-time estimate; moves under ~100 m reuse the last one."""
    lat = user_lat if user_lat is not None else 0.0
    lon = user_lon if user_lon is not None else 0.0
    return f"{str(venue.id).upper()}-{lat:.3f}-{lon:.3f}"
