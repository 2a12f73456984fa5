"""Input models: participant preferences and organizer waypoints."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """GPS coordinates."""
    model_config = ConfigDict(frozen=True)
    
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    
    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)
    
    def as_lnglat(self) -> tuple[float, float]:
        """Coordinates in GeoJSON order."""
        return (self.lng, self.lat)
    
    @classmethod
    def from_tuple(cls, coords: tuple[float, float]) -> "GeoPoint":
        return cls(lat=coords[0], lng=coords[1])


class RouteShape(str, Enum):
    """Route shape a participant asks for."""
    LOOP = "loop"
    OUT_AND_BACK = "out_and_back"
    NO_PREFERENCE = "no_preference"


class SelectedPOI(BaseModel):
    """A point of interest picked by a participant or the organizer."""
    model_config = ConfigDict(frozen=True)
    
    id: str
    name: str
    category: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


# A free-form vibe tag ("coffee_shop") or a structured POI
InterestItem = SelectedPOI | str


class TimeWindow(BaseModel):
    """When a participant is available; carried through untouched."""
    earliest: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    latest: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class Preference(BaseModel):
    """One participant's submission for a ride."""
    
    id: str | None = None
    start: GeoPoint
    distance_km: float = Field(
        ...,
        gt=0,
        description="Desired ride distance; the caller enforces 10-150 km"
    )
    route_shape: RouteShape = RouteShape.NO_PREFERENCE
    interest_selections: list[InterestItem] = Field(default_factory=list)
    time_window: TimeWindow | None = None
    visitor_token: str | None = None
    submitted_at: datetime | None = None
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "start": {"lat": 52.3676, "lng": 4.9041},
                "distance_km": 60.0,
                "route_shape": "loop",
                "interest_selections": [
                    "coffee_shop",
                    {
                        "id": "node_123",
                        "name": "Windmill De Gooyer",
                        "category": "scenic_views",
                        "lat": 52.3667,
                        "lng": 4.9264,
                    },
                ],
                "time_window": {"earliest": "08:00", "latest": "13:00"},
            }
        }
    )
    
    def interest_tags(self) -> list[str]:
        """Selections reduced to tags: structured POIs count under their category."""
        return [
            item.category if isinstance(item, SelectedPOI) else item
            for item in self.interest_selections
        ]
