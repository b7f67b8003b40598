# taste_trail/domains/restaurants/geo.py
"""Great-circle helpers for the nearby search."""
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0
LNG_MARGIN_DEGREES = 1e-6

T = TypeVar("T")


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: Optional[float]
    max_lng: Optional[float]


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """
    Degree box that contains every point within radius_km of (lat, lng).

    111 km per degree slightly undershoots the real length of a degree of
    latitude, which makes the box a little taller than the radius. The
    longitude half-width is the widest a great circle of that radius reaches,
    which lies poleward of the centre rather than on its parallel.
    """
    lat_delta = radius_km / KM_PER_DEGREE
    min_lat, max_lat = lat - lat_delta, lat + lat_delta
    if max_lat >= 90 or min_lat <= -90:
        # the circle touches a pole, so every longitude is in range
        return BoundingBox(min_lat, max_lat, None, None)
    ratio = math.sin(radius_km / EARTH_RADIUS_KM) / math.cos(math.radians(lat))
    if ratio >= 1:
        return BoundingBox(min_lat, max_lat, None, None)
    lng_delta = math.degrees(math.asin(ratio)) + LNG_MARGIN_DEGREES
    if abs(lng) + lng_delta > 180:
        # box would cross the antimeridian; drop the longitude bound
        return BoundingBox(min_lat, max_lat, None, None)
    return BoundingBox(min_lat, max_lat, lng - lng_delta, lng + lng_delta)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def within_radius(
    lat: float,
    lng: float,
    radius_km: float,
    candidates: Iterable[T],
    position: Callable[[T], Tuple[float, float]],
    limit: Optional[int] = None,
) -> List[Tuple[T, float]]:
    """Exact filter over box candidates: (item, distance) pairs, nearest first."""
    hits = []
    for item in candidates:
        item_lat, item_lng = position(item)
        distance = haversine_km(lat, lng, item_lat, item_lng)
        if distance <= radius_km:
            hits.append((item, distance))
    hits.sort(key=lambda pair: pair[1])
    return hits[:limit] if limit is not None else hits
