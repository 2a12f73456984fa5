"""Route synthesis.

Turns an aggregated target into concrete routes. Two modes:

- Waypoint mode: the organizer picked stops. They are ordered by
  nearest-neighbour from the centroid and routed as one closed loop.
  If the provider fails there is no fallback.
- Free variation mode: no stops. K round trips are requested
  concurrently with distinct seeds; whichever succeed are kept and
  annotated with the interest tags they satisfy.
"""

import asyncio
import logging
import secrets
from collections.abc import Callable, Sequence

from rideplanner.config import Settings
from rideplanner.errors import InvalidInput, ProviderError, RouteGenerationFailed
from rideplanner.models import (
    POI,
    AggregatedTarget,
    GeneratedRoute,
    Preference,
    RouteGeometry,
    RouteWaypoint,
)
from rideplanner.tools.poi import OverpassPOIProvider, POIProvider
from rideplanner.tools.routing import GraphHopperRouter, RoutingProvider
from rideplanner.utils.sequencer import order_waypoints

from .aggregator import aggregate

logger = logging.getLogger(__name__)

WAYPOINT_MODE = "waypoints"
VARIATION_MODE = "variations"

# Average gradient in metres of ascent per km
FLAT_MAX_GRADIENT = 10
HILLY_MIN_GRADIENT = 15

MAX_POIS_PER_ROUTE = 5
MIN_POI_RADIUS_KM = 5


def new_route_id() -> str:
    """Short URL-safe id (8 characters)."""
    return secrets.token_urlsafe(6)


def poi_search_radius(target_distance_km: float) -> float:
    """Half the ride distance, at least MIN_POI_RADIUS_KM."""
    return max(target_distance_km / 2, MIN_POI_RADIUS_KM)


def match_tags(
    geometry: RouteGeometry,
    requested: Sequence[str],
    pois: Sequence[POI],
) -> list[str]:
    """
    Which requested interest tags a route satisfies.
    
    Hill tags are judged from the average gradient, everything else
    from whether a POI of that category was found. Tags that can be
    judged neither way are never matched.
    """
    distance_km = geometry.distance_m / 1000
    gradient = None
    if geometry.ascent_m is not None and distance_km > 0:
        gradient = geometry.ascent_m / distance_km
    
    poi_categories = {poi.category for poi in pois}
    matched = []
    
    for tag in requested:
        if tag == "minimize_hills":
            if gradient is not None and gradient < FLAT_MAX_GRADIENT:
                matched.append(tag)
        elif tag == "maximize_hills":
            if gradient is not None and gradient > HILLY_MIN_GRADIENT:
                matched.append(tag)
        elif tag in poi_categories:
            matched.append(tag)
    
    return matched


class RouteSynthesizer:
    """
    Builds the routes for a ride from its preferences.
    
    Holds no state between calls; every synthesize() works only on the
    data it is given.
    """
    
    def __init__(
        self,
        router: RoutingProvider,
        poi_provider: POIProvider | None = None,
        *,
        variant_count: int = 2,
        seed_step: int = 12345,
        id_factory: Callable[[], str] = new_route_id,
    ):
        if variant_count < 1:
            raise InvalidInput("variant_count must be at least 1")
        self.router = router
        self.poi_provider = poi_provider
        self.variant_count = variant_count
        self.seed_step = seed_step
        self.id_factory = id_factory
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "RouteSynthesizer":
        """Synthesizer backed by GraphHopper and Overpass."""
        return cls(
            GraphHopperRouter(settings),
            OverpassPOIProvider(settings),
            variant_count=settings.variant_count,
            seed_step=settings.seed_step,
        )
    
    def aggregate(self, preferences: Sequence[Preference]) -> AggregatedTarget:
        return aggregate(preferences)
    
    async def synthesize(
        self,
        preferences: Sequence[Preference],
        organizer_waypoints: Sequence[RouteWaypoint] = (),
    ) -> list[GeneratedRoute]:
        """
        Generate the routes for a ride.
        
        Args:
            preferences: All preferences of the ride, non-empty, in submission order
            organizer_waypoints: Stops the route must visit; selects waypoint mode
        
        Returns:
            One route in waypoint mode, 1..K routes in free variation mode
        
        Raises:
            InvalidInput: if preferences is empty
            RouteGenerationFailed: if no route could be produced
        """
        target = aggregate(preferences)
        
        if organizer_waypoints:
            return [await self._route_with_stops(target, organizer_waypoints)]
        
        return await self._route_variations(target)
    
    async def _route_with_stops(
        self,
        target: AggregatedTarget,
        waypoints: Sequence[RouteWaypoint],
    ) -> GeneratedRoute:
        ordered = order_waypoints(target.centroid, waypoints)
        traversal = [target.centroid, *(wp.point for wp in ordered), target.centroid]
        
        try:
            geometry = await self.router.route(traversal)
        except ProviderError as e:
            logger.warning("Routing through %d stops failed: %s", len(ordered), e)
            raise RouteGenerationFailed(
                "Could not generate route through waypoints",
                mode=WAYPOINT_MODE,
                attempts=1,
                last_error=e,
            ) from e
        
        logger.info(
            "Generated route through %d stops: %.1f km",
            len(ordered),
            geometry.distance_m / 1000,
        )
        return GeneratedRoute(
            id=self.id_factory(),
            name="Route with Stops",
            distance_km=geometry.distance_m / 1000,
            elevation_gain_m=round(geometry.ascent_m) if geometry.ascent_m is not None else None,
            geometry=geometry.path,
            waypoints=ordered,
        )
    
    async def _round_trip(
        self,
        target: AggregatedTarget,
        seed: int,
    ) -> RouteGeometry | ProviderError:
        try:
            return await self.router.round_trip(
                target.centroid,
                target.target_distance_km,
                seed=seed,
            )
        except ProviderError as e:
            logger.warning("Round trip variant (seed=%d) failed: %s", seed, e)
            return e
    
    async def _find_pois(self, target: AggregatedTarget) -> list[POI]:
        if self.poi_provider is None or not target.ranked_categories:
            return []
        try:
            return await self.poi_provider.query(
                target.centroid,
                poi_search_radius(target.target_distance_km),
                target.category_tags,
            )
        except Exception as e:
            # POIs only annotate routes; never fail generation over them
            logger.warning("POI enrichment failed: %s", e)
            return []
    
    async def _route_variations(self, target: AggregatedTarget) -> list[GeneratedRoute]:
        seeds = [i * self.seed_step for i in range(self.variant_count)]
        
        # gather keeps request order, so "Alternative 1" is always the same seed
        results = await asyncio.gather(*(self._round_trip(target, seed) for seed in seeds))
        
        geometries = [r for r in results if isinstance(r, RouteGeometry)]
        if not geometries:
            errors = [r for r in results if isinstance(r, ProviderError)]
            raise RouteGenerationFailed(
                "Could not generate routes for this area",
                mode=VARIATION_MODE,
                attempts=len(seeds),
                last_error=errors[-1] if errors else None,
            )
        
        pois = await self._find_pois(target)
        requested = target.category_tags
        
        routes = []
        for index, geometry in enumerate(geometries):
            routes.append(GeneratedRoute(
                id=self.id_factory(),
                name="Recommended Route" if index == 0 else f"Alternative {index}",
                distance_km=geometry.distance_m / 1000,
                elevation_gain_m=round(geometry.ascent_m) if geometry.ascent_m is not None else None,
                geometry=geometry.path,
                matched_tags=match_tags(geometry, requested, pois),
                pois=pois[:MAX_POIS_PER_ROUTE],
            ))
        
        logger.info(
            "Generated %d of %d route variants around %.1f km",
            len(routes),
            len(seeds),
            target.target_distance_km,
        )
        return routes
