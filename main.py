"""Command line entry point for the group ride planner.

Reads a ride file with everyone's preferences (and optional organizer
stops), generates routes and prints a summary.

Usage:
    python main.py ride.json              # Print routes
    python main.py ride.json output/      # Also write one GPX file per route

Ride file format:
    {
        "preferences": [{"start": {"lat": .., "lng": ..}, "distance_km": 60, ...}],
        "waypoints": [{"id": "..", "name": "..", "category": "..", "lat": .., "lng": ..}]
    }
"""

import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from rideplanner.config import Settings, load_settings
from rideplanner.errors import InvalidInput, RouteGenerationFailed
from rideplanner.logging_config import configure
from rideplanner.models import AggregatedTarget, GeneratedRoute, Preference, RouteWaypoint
from rideplanner.pipeline import RouteSynthesizer, parse_preferences
from rideplanner.utils.gpx import route_to_gpx, save_gpx_file


console = Console()


def format_summary(target: AggregatedTarget, routes: list[GeneratedRoute]) -> str:
    """Format a human-readable summary of the generated routes."""
    lines = [
        f"## 🚴 Group Ride ({target.participant_count} participants)",
        "",
        f"**Start:** {target.centroid.lat:.5f}, {target.centroid.lng:.5f}",
        f"**Target distance:** {target.target_distance_km:.0f} km",
        f"**Preferred shape:** {target.dominant_shape.value}",
    ]
    if target.ranked_categories:
        vibes = ", ".join(f"{tag} ({count})" for tag, count in target.ranked_categories)
        lines.append(f"**Interests:** {vibes}")
    lines.extend(["", "### Routes", ""])
    
    for route in routes:
        lines.append(f"**{route.name}** `{route.id}`")
        lines.append(f"  - Distance: {route.distance_km} km")
        if route.elevation_gain_m is not None:
            lines.append(f"  - Elevation gain: {route.elevation_gain_m} m")
        if route.matched_tags:
            lines.append(f"  - Matches: {', '.join(route.matched_tags)}")
        for number, stop in enumerate(route.waypoints, start=1):
            lines.append(f"  - Stop {number}: {stop.name}")
        for poi in route.pois:
            lines.append(f"  - Nearby: {poi.name} ({poi.type})")
        lines.append("")
    
    return "\n".join(lines)


def load_ride_file(path: Path) -> tuple[list[Preference], list[RouteWaypoint]]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    
    preferences = parse_preferences(data.get("preferences", []))
    waypoints = [RouteWaypoint.model_validate(wp) for wp in data.get("waypoints", [])]
    return preferences, waypoints


async def plan_ride(settings: Settings, ride_file: Path, output_dir: Path | None) -> int:
    """Generate routes for a ride file. Returns the process exit code."""
    try:
        preferences, waypoints = load_ride_file(ride_file)
    except (OSError, json.JSONDecodeError, ValidationError, InvalidInput) as e:
        console.print(f"[red]Could not read {ride_file}: {e}[/red]")
        return 1
    
    if not preferences:
        console.print("[red]No preferences submitted yet[/red]")
        return 1
    
    synthesizer = RouteSynthesizer.from_settings(settings)
    target = synthesizer.aggregate(preferences)
    
    console.print(f"[dim]Generating routes for {len(preferences)} preferences...[/dim]")
    try:
        routes = await synthesizer.synthesize(preferences, waypoints)
    except RouteGenerationFailed as e:
        console.print(f"[red]❌ Route generation failed: {e}[/red]")
        return 1
    
    console.print()
    console.print(Markdown(format_summary(target, routes)))
    
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        for route in routes:
            filepath = output_dir / f"{route.id}.gpx"
            save_gpx_file(route_to_gpx(route), filepath)
            console.print(f"[green]✓[/green] Wrote {filepath}")
    
    return 0


def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        console.print(__doc__)
        sys.exit(2)
    
    settings = load_settings()
    configure(settings.log_level)
    
    missing = settings.validate_required()
    if missing:
        console.print(Panel(
            f"[red]Missing required configuration:[/red]\n" +
            "\n".join(f"  • {m}" for m in missing) +
            "\n\n[dim]Copy .env.example to .env and fill in your API keys.[/dim]",
            title="Configuration Error",
            border_style="red",
        ))
        sys.exit(1)
    
    ride_file = Path(sys.argv[1])
    output_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else None
    
    sys.exit(asyncio.run(plan_ride(settings, ride_file, output_dir)))


if __name__ == "__main__":
    main()
