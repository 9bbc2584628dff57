from __future__ import annotations

from .schemas import BoundingBox, Viewport

KEY_SEPARATOR = "_"
DEFAULT_PRECISION = 6
DEFAULT_SPAN = 0.10


def to_bounding_box(viewport: Viewport) -> BoundingBox:
    half_lat = viewport.lat_delta / 2
    half_lon = viewport.lon_delta / 2
    return BoundingBox(
        min_lat=viewport.center_lat - half_lat,
        max_lat=viewport.center_lat + half_lat,
        min_lon=viewport.center_lon - half_lon,
        max_lon=viewport.center_lon + half_lon,
    )


def _round(value: float, precision: int) -> float:
    rounded = round(value, precision)
    # round(-0.0000001, 6) gives -0.0, which would print differently from 0.0
    return rounded + 0.0


def quantize(box: BoundingBox, precision: int = DEFAULT_PRECISION) -> str:
    """Coarse cache key for a box: each bound rounded to ``precision`` decimals."""
    return KEY_SEPARATOR.join(
        f"{_round(bound, precision):.{precision}f}"
        for bound in (box.min_lat, box.max_lat, box.min_lon, box.max_lon)
    )


def viewport_around(lat: float, lon: float, delta: float = DEFAULT_SPAN) -> Viewport:
    return Viewport(center_lat=lat, center_lon=lon, lat_delta=delta, lon_delta=delta)
