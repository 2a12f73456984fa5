"""Ride lifecycle around the synthesis engine.

The engine itself is stateless. This module is the caller side: it keeps
one preference per visitor, hands preferences to the synthesizer in
submission order, makes sure only one generation per ride runs at a time
and stores the resulting routes as a whole.
"""

import asyncio
import logging
import secrets
import weakref
from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

from rideplanner.errors import InvalidInput, RideNotFound
from rideplanner.models import AggregatedTarget, GeneratedRoute, Preference, RouteWaypoint
from rideplanner.pipeline.synthesizer import RouteSynthesizer

logger = logging.getLogger(__name__)


class RideStatus(str, Enum):
    """Collecting preferences until routes are generated."""
    COLLECTING = "collecting"
    GENERATED = "generated"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Ride(BaseModel):
    """A group ride being planned."""
    
    id: str = Field(default_factory=lambda: secrets.token_urlsafe(6))
    name: str
    status: RideStatus = RideStatus.COLLECTING
    categories: list[str] = Field(
        default_factory=list,
        description="POI categories the organizer offers to participants"
    )
    selected_waypoints: list[RouteWaypoint] = Field(default_factory=list)
    generated_routes: list[GeneratedRoute] | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class RideStore(Protocol):
    """Record store for rides and their preferences."""

    async def get_ride(self, ride_id: str) -> Ride | None: ...

    async def save_ride(self, ride: Ride) -> None: ...

    async def list_preferences(self, ride_id: str) -> list[Preference]: ...

    async def save_preference(self, ride_id: str, preference: Preference) -> None: ...


class InMemoryRideStore:
    """RideStore kept in dictionaries, for the CLI and tests."""
    
    def __init__(self):
        self._rides: dict[str, Ride] = {}
        self._preferences: dict[str, dict[str, Preference]] = {}
    
    async def get_ride(self, ride_id: str) -> Ride | None:
        return self._rides.get(ride_id)
    
    async def save_ride(self, ride: Ride) -> None:
        self._rides[ride.id] = ride
        self._preferences.setdefault(ride.id, {})
    
    async def list_preferences(self, ride_id: str) -> list[Preference]:
        return list(self._preferences.get(ride_id, {}).values())
    
    async def save_preference(self, ride_id: str, preference: Preference) -> None:
        self._preferences.setdefault(ride_id, {})[preference.id] = preference


class RideService:
    """Operations an organizer and participants perform on a ride."""
    
    def __init__(self, store: RideStore, synthesizer: RouteSynthesizer):
        self.store = store
        self.synthesizer = synthesizer
        # Entries vanish once no generation for the ride holds the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
    
    async def _get_ride(self, ride_id: str) -> Ride:
        ride = await self.store.get_ride(ride_id)
        if ride is None:
            raise RideNotFound(f"Ride not found: {ride_id}")
        return ride
    
    async def _ordered_preferences(self, ride_id: str) -> list[Preference]:
        preferences = await self.store.list_preferences(ride_id)
        # Aggregation tie-breaks follow this order
        return sorted(preferences, key=lambda p: p.submitted_at or datetime.min.replace(tzinfo=timezone.utc))
    
    async def create_ride(self, name: str, categories: Sequence[str] = ()) -> Ride:
        if not name.strip():
            raise InvalidInput("Ride name is required")
        ride = Ride(name=name.strip(), categories=list(categories))
        await self.store.save_ride(ride)
        logger.info("Created ride %s", ride.id)
        return ride
    
    async def submit_preference(self, ride_id: str, preference: Preference) -> Preference:
        """
        Store a participant's preference.
        
        A visitor that already submitted for this ride gets the earlier
        preference replaced: same id, new content, fresh timestamp. A first
        submission always gets a new id, whatever id the record carried.
        """
        await self._get_ride(ride_id)
        
        existing = None
        if preference.visitor_token:
            for stored in await self.store.list_preferences(ride_id):
                if stored.visitor_token == preference.visitor_token:
                    existing = stored
                    break
        
        stored = preference.model_copy(update={
            "id": existing.id if existing else secrets.token_urlsafe(12),
            "visitor_token": preference.visitor_token or secrets.token_urlsafe(12),
            "submitted_at": _utcnow(),
        })
        await self.store.save_preference(ride_id, stored)
        
        logger.info(
            "%s preference %s for ride %s",
            "Updated" if existing else "Added",
            stored.id,
            ride_id,
        )
        return stored
    
    async def set_waypoints(self, ride_id: str, waypoints: Sequence[RouteWaypoint]) -> Ride:
        """Replace the organizer's selected stops."""
        ride = await self._get_ride(ride_id)
        ride = ride.model_copy(update={"selected_waypoints": list(waypoints)})
        await self.store.save_ride(ride)
        return ride
    
    async def summarize(self, ride_id: str) -> AggregatedTarget:
        """Aggregation alone, for display before generating."""
        await self._get_ride(ride_id)
        preferences = await self._ordered_preferences(ride_id)
        if not preferences:
            raise InvalidInput("No preferences submitted yet")
        return self.synthesizer.aggregate(preferences)
    
    async def generate(self, ride_id: str) -> list[GeneratedRoute]:
        """
        Generate routes for a ride and store them.
        
        Runs one generation per ride at a time. A ride that already has
        routes gets the whole set replaced. On failure the stored ride is
        left untouched.
        """
        lock = self._locks.get(ride_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[ride_id] = lock
        async with lock:
            ride = await self._get_ride(ride_id)
            preferences = await self._ordered_preferences(ride_id)
            if not preferences:
                raise InvalidInput("No preferences submitted yet")
            
            if ride.status is RideStatus.GENERATED:
                logger.info("Regenerating routes for ride %s", ride_id)
            
            routes = await self.synthesizer.synthesize(preferences, ride.selected_waypoints)
            
            await self.store.save_ride(ride.model_copy(update={
                "status": RideStatus.GENERATED,
                "generated_routes": routes,
            }))
            return routes
