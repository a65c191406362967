"""Great-circle distance helpers and the nearest-neighbour ordering."""

import math
from collections.abc import Sequence
from typing import TypeVar

from tripcore.models.optimization import OptimizationItem

EARTH_RADIUS_KM = 6371.0

ItemT = TypeVar("ItemT", bound=OptimizationItem)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def total_distance_km(items: Sequence[OptimizationItem]) -> float:
    """Sum of hops between consecutive items; hops touching an item without coordinates count 0."""
    total = 0.0
    for current, following in zip(items, items[1:]):
        if current.has_coordinates and following.has_coordinates:
            total += haversine_km(
                current.latitude,  # type: ignore[arg-type]
                current.longitude,  # type: ignore[arg-type]
                following.latitude,  # type: ignore[arg-type]
                following.longitude,  # type: ignore[arg-type]
            )
    return total


def nearest_neighbor(
    items: Sequence[ItemT], start: tuple[float, float] | None = None
) -> list[ItemT]:
    """Greedy nearest-neighbour tour over items with coordinates.

    Without a start point the first item stays first. Ties keep input order.
    """
    if len(items) <= 1:
        return list(items)

    remaining = list(items)
    result: list[ItemT] = []

    if start is not None:
        current = start
    else:
        first = remaining.pop(0)
        result.append(first)
        current = (first.latitude or 0.0, first.longitude or 0.0)

    while remaining:
        nearest_idx = 0
        nearest_dist = math.inf

        for idx, item in enumerate(remaining):
            if not item.has_coordinates:
                continue
            dist = haversine_km(current[0], current[1], item.latitude, item.longitude)  # type: ignore[arg-type]
            if dist < nearest_dist:
                nearest_dist = dist
                nearest_idx = idx

        nearest = remaining.pop(nearest_idx)
        result.append(nearest)
        current = (nearest.latitude or 0.0, nearest.longitude or 0.0)

    return result
