"""Routing provider adapter for GraphHopper (bike profile)."""

import logging
from collections.abc import Sequence
from typing import Protocol

import httpx
from pydantic import ValidationError

from rideplanner.config import Settings
from rideplanner.errors import InvalidInput, ProviderError
from rideplanner.models import GeoPoint, RouteGeometry

logger = logging.getLogger(__name__)

PROVIDER = "graphhopper"


class RoutingProvider(Protocol):
    """What the route synthesizer needs from a routing service."""

    async def route(self, points: Sequence[GeoPoint]) -> RouteGeometry:
        """Route visiting points in the given order. Raises ProviderError."""
        ...

    async def round_trip(
        self,
        origin: GeoPoint,
        distance_km: float,
        seed: int | None = None,
    ) -> RouteGeometry:
        """Loop of roughly distance_km starting and ending at origin. Raises ProviderError."""
        ...


class GraphHopperRouter:
    """
    GraphHopper Routing API client.
    
    Both request shapes ask for GeoJSON geometry with elevation and no
    turn instructions. Every failure mode (network, timeout, HTTP status,
    provider-reported error, empty or malformed result) is raised as
    ProviderError.
    """
    
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = settings.graphhopper_url.rstrip("/")
        self.api_key = settings.graphhopper_api_key
        self.vehicle = settings.routing_vehicle
        self.timeout = settings.request_timeout_s
        self._transport = transport
    
    def _base_params(self) -> list[tuple[str, str]]:
        params = [
            ("vehicle", self.vehicle),
            ("points_encoded", "false"),  # GeoJSON coordinates instead of a polyline
            ("elevation", "true"),
            ("instructions", "false"),
        ]
        if self.api_key:
            params.append(("key", self.api_key))
        return params
    
    async def route(self, points: Sequence[GeoPoint]) -> RouteGeometry:
        """Calculate a cycling route through points, in order."""
        if len(points) < 2:
            raise InvalidInput("At least 2 points are required for routing")
        
        # GraphHopper takes one repeated 'point' param per stop, lat,lng order
        params = [("point", f"{p.lat},{p.lng}") for p in points]
        params.extend(self._base_params())
        
        logger.debug("Routing through %d points", len(points))
        return await self._request(params)
    
    async def round_trip(
        self,
        origin: GeoPoint,
        distance_km: float,
        seed: int | None = None,
    ) -> RouteGeometry:
        """Generate a loop route from origin using GraphHopper's round_trip algorithm."""
        params = [("point", f"{origin.lat},{origin.lng}")]
        params.extend(self._base_params())
        params.extend([
            ("algorithm", "round_trip"),
            ("round_trip.distance", str(round(distance_km * 1000))),
        ])
        if seed is not None:
            params.append(("round_trip.seed", str(seed)))
        
        logger.debug("Round trip of %.1f km from %s (seed=%s)", distance_km, origin.as_tuple(), seed)
        return await self._request(params)
    
    async def _request(self, params: list[tuple[str, str]]) -> RouteGeometry:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/route",
                    params=params,
                    timeout=self.timeout,
                )
        except httpx.TimeoutException as e:
            raise ProviderError(f"GraphHopper request timed out: {e}", PROVIDER) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"GraphHopper request failed: {e}", PROVIDER) from e
        
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"GraphHopper returned invalid JSON (status {response.status_code})",
                PROVIDER,
                response.status_code,
            ) from e
        
        if not isinstance(data, dict):
            raise ProviderError("GraphHopper returned an unexpected payload", PROVIDER, response.status_code)
        
        try:
            info = data.get("info") or {}
            errors = (info.get("errors") or []) if isinstance(info, dict) else []
            message = data.get("message") or "; ".join(
                str(err.get("message", err)) for err in errors if isinstance(err, dict)
            )
        except (AttributeError, TypeError) as e:
            raise ProviderError(
                f"GraphHopper returned a malformed error block: {e}",
                PROVIDER,
                response.status_code,
            ) from e
        
        if response.status_code != 200 or errors:
            raise ProviderError(
                f"GraphHopper error {response.status_code}: {message or response.text[:500]}",
                PROVIDER,
                response.status_code,
            )
        
        return _parse_path(data)


def _parse_path(data: dict) -> RouteGeometry:
    """Turn the first path of a GraphHopper response into a RouteGeometry."""
    try:
        paths = data.get("paths") or []
        if not paths:
            raise ProviderError("GraphHopper found no route", PROVIDER)
        
        path = paths[0]
        coords = (path.get("points") or {}).get("coordinates") or []
        
        # With elevation=true coordinates are [lng, lat, ele]
        return RouteGeometry(
            distance_m=float(path.get("distance", 0)),
            ascent_m=float(path["ascend"]) if path.get("ascend") is not None else None,
            path=[(float(c[0]), float(c[1])) for c in coords],
        )
    except (ValidationError, AttributeError, KeyError, TypeError, ValueError, IndexError) as e:
        raise ProviderError(f"GraphHopper returned a malformed path: {e}", PROVIDER) from e
