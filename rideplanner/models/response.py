"""Output models for aggregation and route synthesis."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .request import GeoPoint, RouteShape


class AggregatedTarget(BaseModel):
    """Single routing target derived from every preference of a ride."""
    model_config = ConfigDict(frozen=True)
    
    centroid: GeoPoint
    target_distance_km: float
    dominant_shape: RouteShape
    ranked_categories: list[tuple[str, int]] = Field(
        default_factory=list,
        description="(tag, count) sorted by count descending, first seen first on ties"
    )
    participant_count: int = 0
    
    @property
    def category_tags(self) -> list[str]:
        return [tag for tag, _ in self.ranked_categories]


class RouteWaypoint(BaseModel):
    """A stop on a generated route."""
    model_config = ConfigDict(frozen=True)
    
    id: str | None = None
    name: str
    category: str = "poi"
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    
    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class POI(BaseModel):
    """A point of interest returned by the POI provider."""
    model_config = ConfigDict(frozen=True)
    
    id: str | None = None
    name: str
    category: str = Field(..., description="Interest tag this POI satisfies")
    type: str = Field(default="poi", description="Provider's own kind, e.g. 'cafe'")
    lat: float
    lng: float


class RouteGeometry(BaseModel):
    """What a routing provider hands back for one request."""
    
    distance_m: float = Field(..., ge=0)
    ascent_m: float | None = None
    path: list[tuple[float, float]] = Field(
        ...,
        min_length=2,
        description="(lng, lat) pairs"
    )


class GeneratedRoute(BaseModel):
    """A synthesized route ready to be shown or persisted."""
    model_config = ConfigDict(frozen=True)
    
    id: str
    name: str
    distance_km: float = Field(..., ge=0)
    elevation_gain_m: int | None = None
    geometry: list[tuple[float, float]] = Field(
        ...,
        min_length=2,
        description="(lng, lat) pairs in travel order"
    )
    matched_tags: list[str] = Field(default_factory=list)
    waypoints: list[RouteWaypoint] = Field(default_factory=list)
    pois: list[POI] = Field(default_factory=list)
    
    @field_validator("distance_km")
    @classmethod
    def _one_decimal(cls, value: float) -> float:
        return round(value, 1)
    
    @field_validator("matched_tags")
    @classmethod
    def _unique_tags(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))
    
    def to_geojson(self) -> dict:
        """GeoJSON Feature with a LineString geometry."""
        return {
            "type": "Feature",
            "properties": {
                "id": self.id,
                "name": self.name,
                "distance_km": self.distance_km,
                "elevation_gain_m": self.elevation_gain_m,
                "matched_tags": self.matched_tags,
            },
            "geometry": {
                "type": "LineString",
                "coordinates": [list(coord) for coord in self.geometry],
            },
        }
