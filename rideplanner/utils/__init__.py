"""Utility functions for ride planning."""

from .geo import (
    centroid,
    count_occurrences,
    haversine_distance,
    majority_vote,
    median,
)
from .gpx import route_to_gpx, save_gpx_file
from .sequencer import order_waypoints

__all__ = [
    "centroid",
    "count_occurrences",
    "haversine_distance",
    "majority_vote",
    "median",
    "order_waypoints",
    "route_to_gpx",
    "save_gpx_file",
]
