"""GPX file generation utilities."""

from datetime import datetime, timezone
from pathlib import Path

import gpxpy
import gpxpy.gpx

from rideplanner.models import GeneratedRoute


def route_to_gpx(
    route: GeneratedRoute,
    include_waypoints: bool = True,
) -> str:
    """
    Create a GPX document from a generated route.
    
    Args:
        route: The route to export
        include_waypoints: Whether to add stops and POIs as GPX waypoints
    
    Returns:
        GPX XML string
    """
    gpx = gpxpy.gpx.GPX()
    gpx.name = route.name
    gpx.description = f"Distance: {route.distance_km} km"
    if route.elevation_gain_m is not None:
        gpx.description += f", elevation gain: {route.elevation_gain_m} m"
    gpx.creator = "Group Ride Planner"
    gpx.time = datetime.now(timezone.utc)
    
    if include_waypoints:
        for stop in route.waypoints:
            waypoint = gpxpy.gpx.GPXWaypoint(
                latitude=stop.lat,
                longitude=stop.lng,
                name=stop.name,
            )
            waypoint.type = stop.category
            gpx.waypoints.append(waypoint)
        
        for poi in route.pois:
            waypoint = gpxpy.gpx.GPXWaypoint(
                latitude=poi.lat,
                longitude=poi.lng,
                name=poi.name,
            )
            waypoint.type = poi.category
            waypoint.description = poi.type
            gpx.waypoints.append(waypoint)
    
    track = gpxpy.gpx.GPXTrack(name=route.name)
    track.type = "cycling"
    gpx.tracks.append(track)
    
    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)
    
    # Geometry is (lng, lat)
    for lng, lat in route.geometry:
        segment.points.append(gpxpy.gpx.GPXTrackPoint(latitude=lat, longitude=lng))
    
    return gpx.to_xml()


def save_gpx_file(gpx_content: str, filepath: str | Path) -> None:
    """Save GPX content to a file."""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(gpx_content)
