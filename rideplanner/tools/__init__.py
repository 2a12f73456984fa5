"""Adapters for the external routing and POI services."""

from .routing import GraphHopperRouter, RoutingProvider
from .poi import OverpassPOIProvider, POIProvider, TAG_TO_OVERPASS

__all__ = [
    "GraphHopperRouter",
    "RoutingProvider",
    "OverpassPOIProvider",
    "POIProvider",
    "TAG_TO_OVERPASS",
]
