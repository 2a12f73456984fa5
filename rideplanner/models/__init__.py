"""Data models for ride planning."""

from .request import (
    GeoPoint,
    InterestItem,
    Preference,
    RouteShape,
    SelectedPOI,
    TimeWindow,
)
from .response import (
    AggregatedTarget,
    GeneratedRoute,
    POI,
    RouteGeometry,
    RouteWaypoint,
)

__all__ = [
    "GeoPoint",
    "InterestItem",
    "Preference",
    "RouteShape",
    "SelectedPOI",
    "TimeWindow",
    "AggregatedTarget",
    "GeneratedRoute",
    "POI",
    "RouteGeometry",
    "RouteWaypoint",
]
