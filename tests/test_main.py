"""Tests for the command line ride file loader."""

import json

from main import load_ride_file
from rideplanner.models import Preference, RouteShape, RouteWaypoint


class TestLoadRideFile:
    """Test reading a ride file from disk."""

    def test_loads_preferences_and_waypoints(self, tmp_path):
        ride_file = tmp_path / "ride.json"
        ride_file.write_text(json.dumps({
            "preferences": [
                {"start": {"lat": 52.37, "lng": 4.90}, "distance_km": 60, "route_shape": "loop"},
                {"start_location": {"lat": 52.38, "lng": 4.91}, "distance_preference_km": 40},
            ],
            "waypoints": [{"id": "w1", "name": "Mill", "lat": 52.4, "lng": 4.95}],
        }), encoding="utf-8")

        preferences, waypoints = load_ride_file(ride_file)

        assert all(isinstance(p, Preference) for p in preferences)
        assert [p.distance_km for p in preferences] == [60, 40]
        assert preferences[0].route_shape is RouteShape.LOOP
        assert waypoints == [RouteWaypoint(id="w1", name="Mill", lat=52.4, lng=4.95)]

    def test_missing_sections_are_empty(self, tmp_path):
        ride_file = tmp_path / "ride.json"
        ride_file.write_text("{}", encoding="utf-8")

        assert load_ride_file(ride_file) == ([], [])
