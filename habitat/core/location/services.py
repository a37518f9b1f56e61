"""Distance and proximity queries over the landmark catalogue."""

from __future__ import annotations

import math
from typing import Iterable, List, Mapping, Optional, Sequence, TypeVar

from habitat.core.location.catalogue import LANDMARKS, Landmark

EARTH_RADIUS_KM = 6371.0

P = TypeVar("P")


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres between two points in decimal degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Float rounding can push a slightly past 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def landmark(key: str, catalogue: Mapping[str, Landmark] = LANDMARKS) -> Optional[Landmark]:
    return catalogue.get(key)


def is_near(item, place: Landmark) -> bool:
    distance = haversine_km(float(item.lat), float(item.lng), place.lat, place.lng)
    return distance <= place.radius


def properties_near(
    properties: Iterable[P],
    key: str,
    catalogue: Mapping[str, Landmark] = LANDMARKS,
) -> List[P]:
    """Return the properties within the landmark's radius, keeping input order.

    ``properties`` may hold any objects exposing ``lat`` and ``lng``. An unknown
    key yields an empty list.
    """
    place = catalogue.get(key)
    if place is None:
        return []
    return [item for item in properties if is_near(item, place)]


def keys_by_priority(catalogue: Mapping[str, Landmark] = LANDMARKS) -> List[str]:
    """Catalogue keys ordered by ascending priority.

    Raises ``ValueError`` when the priorities are not a permutation of 1..N.
    """
    priorities: Sequence[int] = sorted(place.priority for place in catalogue.values())
    if priorities != list(range(1, len(catalogue) + 1)):
        raise ValueError(f"landmark priorities must be a permutation of 1..{len(catalogue)}: {priorities}")
    return sorted(catalogue, key=lambda k: catalogue[k].priority)
