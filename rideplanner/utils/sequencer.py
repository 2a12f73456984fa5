"""Nearest-neighbour ordering of route stops."""

from collections.abc import Callable, Sequence
from typing import TypeVar

from rideplanner.models import GeoPoint

from .geo import haversine_distance

T = TypeVar("T")


def _as_point(item) -> GeoPoint:
    return item if isinstance(item, GeoPoint) else item.point


def order_waypoints(
    origin: GeoPoint,
    items: Sequence[T],
    locate: Callable[[T], GeoPoint] = _as_point,
) -> list[T]:
    """
    Order stops into a short visiting sequence starting at origin.
    
    Greedy nearest-neighbour: from the last visited point, always go to the
    closest remaining stop. O(n²), fine for the handful of stops a ride has,
    but not optimal.
    
    Items are moved around whole, so whatever identity they carry stays
    attached to its point. On exact distance ties the item earlier in the
    input wins.
    
    Args:
        origin: Where the ride starts
        items: Stops in any order (GeoPoints or objects with a `.point`)
        locate: Returns the position of an item
    
    Returns:
        A permutation of items
    """
    if len(items) <= 1:
        return list(items)
    
    remaining = list(items)
    ordered: list[T] = []
    current = origin
    
    while remaining:
        nearest_idx = 0
        nearest_dist = haversine_distance(current, locate(remaining[0]))
        
        for idx in range(1, len(remaining)):
            dist = haversine_distance(current, locate(remaining[idx]))
            if dist < nearest_dist:
                nearest_idx = idx
                nearest_dist = dist
        
        nearest = remaining.pop(nearest_idx)
        ordered.append(nearest)
        current = locate(nearest)
    
    return ordered
