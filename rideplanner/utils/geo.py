"""Geospatial and aggregation utility functions."""

from collections.abc import Hashable, Iterable, Sequence
from math import radians, sin, cos, sqrt, atan2, degrees
from typing import TypeVar

from rideplanner.errors import InvalidInput
from rideplanner.models import GeoPoint

EARTH_RADIUS_KM = 6371

T = TypeVar("T", bound=Hashable)


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """
    Calculate the great-circle distance between two points on Earth.
    
    Args:
        a, b: Points in degrees
    
    Returns:
        Distance in kilometers
    """
    lat1_rad, lon1_rad = radians(a.lat), radians(a.lng)
    lat2_rad, lon2_rad = radians(b.lat), radians(b.lng)
    
    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad
    
    h = sin(dlat/2)**2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon/2)**2
    c = 2 * atan2(sqrt(h), sqrt(1-h))
    
    return EARTH_RADIUS_KM * c


def centroid(points: Sequence[GeoPoint]) -> GeoPoint:
    """
    Geographic centre of a set of points.
    
    Each point is turned into a unit vector, the vectors are averaged and
    the mean is projected back to latitude/longitude. A single point is
    returned as is.
    
    Raises:
        InvalidInput: if points is empty
    """
    if not points:
        raise InvalidInput("Cannot calculate centroid of no points")
    
    if len(points) == 1:
        return points[0]
    
    x = y = z = 0.0
    for point in points:
        lat_rad, lng_rad = radians(point.lat), radians(point.lng)
        x += cos(lat_rad) * cos(lng_rad)
        y += cos(lat_rad) * sin(lng_rad)
        z += sin(lat_rad)
    
    n = len(points)
    x, y, z = x / n, y / n, z / n
    
    lng = atan2(y, x)
    lat = atan2(z, sqrt(x**2 + y**2))
    
    return GeoPoint(lat=degrees(lat), lng=degrees(lng))


def median(values: Sequence[float]) -> float:
    """Median of values; the mean of the two middle values for even counts."""
    if not values:
        raise InvalidInput("Cannot calculate median of no values")
    
    ordered = sorted(values)
    mid = len(ordered) // 2
    
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    
    return ordered[mid]


def count_occurrences(values: Iterable[T]) -> dict[T, int]:
    """Count values. Keys keep first-seen order."""
    counts: dict[T, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def majority_vote(values: Iterable[T], default: T) -> T:
    """Most frequent value; on ties the one seen first wins."""
    result = default
    max_count = 0
    
    for value, count in count_occurrences(values).items():
        if count > max_count:
            max_count = count
            result = value
    
    return result
