"""Shared fixtures: preference factory and stub providers."""

import asyncio
import itertools

import pytest

from rideplanner.config import Settings
from rideplanner.errors import ProviderError
from rideplanner.models import POI, GeoPoint, Preference, RouteGeometry, RouteShape


class StubRouter:
    """Routing provider that records calls and fails on demand."""
    
    def __init__(
        self,
        fail_seeds=(),
        fail_route=False,
        ascent_m=300.0,
        delays=None,
    ):
        self.fail_seeds = set(fail_seeds)
        self.fail_route = fail_route
        self.ascent_m = ascent_m
        self.delays = delays or {}
        self.calls = []
    
    async def route(self, points):
        self.calls.append(("route", list(points)))
        if self.fail_route:
            raise ProviderError("no route through stops", "stub", 400)
        return RouteGeometry(
            distance_m=42_000,
            ascent_m=self.ascent_m,
            path=[p.as_lnglat() for p in points],
        )
    
    async def round_trip(self, origin, distance_km, seed=None):
        self.calls.append(("round_trip", seed))
        await asyncio.sleep(self.delays.get(seed, 0))
        if seed in self.fail_seeds:
            raise ProviderError(f"seed {seed} failed", "stub", 500)
        # Distance carries the seed so tests can tell variants apart
        return RouteGeometry(
            distance_m=distance_km * 1000 + (seed or 0) / 10,
            ascent_m=self.ascent_m,
            path=[
                origin.as_lnglat(),
                (origin.lng + 0.1, origin.lat + 0.05),
                (origin.lng + 0.1, origin.lat - 0.05),
                origin.as_lnglat(),
            ],
        )


class StubPOIProvider:
    """POI provider returning a fixed list."""
    
    def __init__(self, pois=(), error=None):
        self.pois = list(pois)
        self.error = error
        self.calls = []
    
    async def query(self, center, radius_km, categories):
        self.calls.append((center, radius_km, list(categories)))
        if self.error is not None:
            raise self.error
        return list(self.pois)


@pytest.fixture
def make_preference():
    """Factory for preferences with sensible defaults."""
    def _make(
        lat=52.37,
        lng=4.90,
        distance_km=60.0,
        route_shape=RouteShape.LOOP,
        interests=(),
        **kwargs,
    ) -> Preference:
        return Preference(
            start=GeoPoint(lat=lat, lng=lng),
            distance_km=distance_km,
            route_shape=route_shape,
            interest_selections=list(interests),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_poi():
    def _make(category="coffee_shop", name="Cafe", lat=52.38, lng=4.91, type="cafe") -> POI:
        return POI(name=name, category=category, type=type, lat=lat, lng=lng)
    return _make


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"route-{next(counter)}"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        graphhopper_api_key="test-key",
        graphhopper_url="https://gh.test/api/1",
        overpass_url="https://overpass.test/api/interpreter",
        request_timeout_s=5,
        output_dir=tmp_path,
    )
