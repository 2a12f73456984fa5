"""Points of Interest lookup using the OpenStreetMap Overpass API."""

import logging
from collections.abc import Iterable
from math import cos, radians
from typing import Protocol

import httpx

from rideplanner.config import Settings
from rideplanner.models import POI, GeoPoint

logger = logging.getLogger(__name__)

# Overpass filter per interest tag, with the element tag that identifies a match.
# Tags without an entry (low_traffic, gravel_ok, minimize_hills, maximize_hills)
# describe the road or terrain, not places, and cannot be queried.
TAG_TO_OVERPASS: dict[str, tuple[str, str, str]] = {
    "coffee_shop": ("node", "amenity", "cafe"),
    "scenic_views": ("node", "tourism", "viewpoint"),
    "waterfront": ("way", "natural", "water"),
}


class POIProvider(Protocol):
    """What the route synthesizer needs from a POI service."""

    async def query(
        self,
        center: GeoPoint,
        radius_km: float,
        categories: Iterable[str],
    ) -> list[POI]:
        """POIs matching categories around center. Never raises; failures give []."""
        ...


def queryable_tags(categories: Iterable[str]) -> list[str]:
    """Keep the tags Overpass can answer, in the given order, without duplicates."""
    return [tag for tag in dict.fromkeys(categories) if tag in TAG_TO_OVERPASS]


def build_bounding_box(center: GeoPoint, radius_km: float) -> tuple[float, float, float, float]:
    """(south, west, north, east) around center, about radius_km on each side."""
    lat_delta = radius_km / 111
    lng_delta = radius_km / (111 * cos(radians(center.lat)))
    return (
        center.lat - lat_delta,
        center.lng - lng_delta,
        center.lat + lat_delta,
        center.lng + lng_delta,
    )


def build_query(tags: list[str], bbox: tuple[float, float, float, float]) -> str:
    bbox_str = ",".join(f"{v:.6f}" for v in bbox)
    query_parts = []
    for tag in tags:
        element, key, value = TAG_TO_OVERPASS[tag]
        query_parts.append(f'{element}["{key}"="{value}"]({bbox_str});')
    
    return f"""
    [out:json][timeout:25];
    (
        {' '.join(query_parts)}
    );
    out center;
    """


def _match_tag(osm_tags: dict, requested: list[str]) -> str | None:
    for tag in requested:
        _, key, value = TAG_TO_OVERPASS[tag]
        if osm_tags.get(key) == value:
            return tag
    return None


def parse_elements(data: dict, requested: list[str]) -> list[POI]:
    """Convert Overpass elements to POIs, in response order, once per element."""
    pois = []
    seen = set()
    
    for element in data.get("elements", []):
        if not isinstance(element, dict):
            continue
        
        identity = (element.get("type"), element.get("id"))
        if element.get("id") is not None and identity in seen:
            continue
        
        # Ways only carry a computed center
        center = element.get("center") or {}
        tags = element.get("tags") or {}
        if not isinstance(center, dict) or not isinstance(tags, dict):
            continue
        
        lat = element.get("lat", center.get("lat"))
        lon = element.get("lon", center.get("lon"))
        if lat is None or lon is None:
            continue
        
        category = _match_tag(tags, requested)
        if category is None:
            continue
        
        seen.add(identity)
        kind = tags.get("amenity") or tags.get("tourism") or tags.get("natural") or "poi"
        pois.append(POI(
            id=f"{identity[0]}_{identity[1]}" if identity[1] is not None else None,
            name=tags.get("name", kind),
            category=category,
            type=kind,
            lat=float(lat),
            lng=float(lon),
        ))
    
    return pois


class OverpassPOIProvider:
    """
    Best-effort POI search.
    
    Only tags with an Overpass mapping are sent; when none are left no
    request is made. HTTP errors, timeouts and bad payloads are logged and
    return an empty list.
    """
    
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = settings.overpass_url
        self.timeout = settings.request_timeout_s
        self._transport = transport
    
    async def query(
        self,
        center: GeoPoint,
        radius_km: float,
        categories: Iterable[str],
    ) -> list[POI]:
        tags = queryable_tags(categories)
        if not tags:
            return []
        
        query = build_query(tags, build_bounding_box(center, radius_km))
        
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    self.url,
                    data={"data": query},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Overpass query failed: %s", e)
                return []
        
        if not isinstance(data, dict):
            logger.warning("Overpass returned an unexpected payload")
            return []
        
        try:
            pois = parse_elements(data, tags)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Overpass returned malformed elements: %s", e)
            return []

        logger.debug("Overpass returned %d POIs for %s", len(pois), tags)
        return pois
