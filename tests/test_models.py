"""Tests for data models, serialization and GPX export."""

import gpxpy
import pytest
from pydantic import ValidationError

from rideplanner.models import POI, GeneratedRoute, GeoPoint, RouteGeometry, RouteWaypoint
from rideplanner.utils.gpx import route_to_gpx, save_gpx_file


@pytest.fixture
def route():
    return GeneratedRoute(
        id="abc12def",
        name="Route with Stops",
        distance_km=42.37,
        elevation_gain_m=211,
        geometry=[(4.9012345678, 52.3712345678), (5.1234567891, 52.0912345678), (4.9012345678, 52.3712345678)],
        matched_tags=["coffee_shop", "minimize_hills", "coffee_shop"],
        waypoints=[RouteWaypoint(id="n1", name="Bakery", category="coffee_shop", lat=52.2, lng=5.0)],
        pois=[POI(id="node_1", name="Koffie", category="coffee_shop", type="cafe", lat=52.3, lng=4.95)],
    )


class TestGeoPoint:
    
    def test_equality_and_hash(self):
        assert GeoPoint(lat=1.5, lng=2.5) == GeoPoint(lat=1.5, lng=2.5)
        assert len({GeoPoint(lat=1.5, lng=2.5), GeoPoint(lat=1.5, lng=2.5)}) == 1
    
    def test_immutable(self):
        p = GeoPoint(lat=1, lng=2)
        with pytest.raises(ValidationError):
            p.lat = 3
    
    @pytest.mark.parametrize("lat,lng", [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_out_of_range(self, lat, lng):
        with pytest.raises(ValidationError):
            GeoPoint(lat=lat, lng=lng)


class TestGeneratedRoute:
    """Test the route artifact."""
    
    def test_distance_rounded_to_one_decimal(self, route):
        assert route.distance_km == 42.4
    
    def test_matched_tags_unique(self, route):
        assert route.matched_tags == ["coffee_shop", "minimize_hills"]
    
    def test_json_round_trip_preserves_geometry(self, route):
        """Serialization keeps point order and precision."""
        restored = GeneratedRoute.model_validate_json(route.model_dump_json())
        
        assert restored.geometry == route.geometry
        assert restored == route
    
    def test_geometry_needs_two_points(self):
        with pytest.raises(ValidationError):
            GeneratedRoute(id="x", name="x", distance_km=1, geometry=[(4.9, 52.3)])
        with pytest.raises(ValidationError):
            RouteGeometry(distance_m=10, path=[(4.9, 52.3)])
    
    def test_geojson(self, route):
        feature = route.to_geojson()
        
        assert feature["geometry"]["type"] == "LineString"
        assert feature["geometry"]["coordinates"][1] == [5.1234567891, 52.0912345678]
        assert feature["properties"]["distance_km"] == 42.4


class TestGpxExport:
    """Test GPX generation."""
    
    def test_track_and_waypoints(self, route):
        gpx = gpxpy.parse(route_to_gpx(route))
        
        points = gpx.tracks[0].segments[0].points
        assert len(points) == 3
        assert points[1].latitude == pytest.approx(52.0912345678)
        assert points[1].longitude == pytest.approx(5.1234567891)
        assert [w.name for w in gpx.waypoints] == ["Bakery", "Koffie"]
        assert gpx.tracks[0].name == "Route with Stops"
    
    def test_without_waypoints(self, route):
        gpx = gpxpy.parse(route_to_gpx(route, include_waypoints=False))
        assert gpx.waypoints == []
    
    def test_save(self, route, tmp_path):
        path = tmp_path / "route.gpx"
        save_gpx_file(route_to_gpx(route), path)
        assert gpxpy.parse(path.read_text(encoding="utf-8")).tracks
