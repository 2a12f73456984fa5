"""Preference aggregation.

Turns every preference submitted for a ride into one routing target:

1. Centroid of the start points
2. Median of the desired distances (robust to a few outliers)
3. Majority vote of the route shapes
4. Interest selections ranked by how often they were picked
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from pydantic import ValidationError

from rideplanner.errors import InvalidInput
from rideplanner.models import (
    AggregatedTarget,
    GeoPoint,
    Preference,
    RouteShape,
    SelectedPOI,
    TimeWindow,
)
from rideplanner.utils.geo import centroid, count_occurrences, majority_vote, median

logger = logging.getLogger(__name__)


def rank_categories(preferences: Iterable[Preference]) -> list[tuple[str, int]]:
    """
    Count interest tags across all preferences.
    
    Structured POIs count under their category, free-form tags under
    themselves. Sorted by count descending; sort is stable so ties keep
    first-seen order.
    """
    tags = [tag for pref in preferences for tag in pref.interest_tags()]
    counts = count_occurrences(tags)
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def aggregate(preferences: Sequence[Preference]) -> AggregatedTarget:
    """
    Aggregate a ride's preferences into a single target.
    
    Args:
        preferences: Every preference of the ride, in a stable order
            (submission time); tie-breaks follow this order.
    
    Returns:
        AggregatedTarget
    
    Raises:
        InvalidInput: if preferences is empty
    """
    if not preferences:
        raise InvalidInput("Cannot aggregate a ride without preferences")
    
    target = AggregatedTarget(
        centroid=centroid([p.start for p in preferences]),
        target_distance_km=median([p.distance_km for p in preferences]),
        dominant_shape=majority_vote(
            [p.route_shape for p in preferences],
            RouteShape.NO_PREFERENCE,
        ),
        ranked_categories=rank_categories(preferences),
        participant_count=len(preferences),
    )
    
    logger.debug(
        "Aggregated %d preferences: centroid=%s distance=%.1f km shape=%s",
        len(preferences),
        target.centroid.as_tuple(),
        target.target_distance_km,
        target.dominant_shape.value,
    )
    return target


def _parse_shape(value) -> RouteShape:
    try:
        return RouteShape(value)
    except ValueError:
        logger.debug("Unknown route shape %r, using no_preference", value)
        return RouteShape.NO_PREFERENCE


def _parse_selections(items) -> list[SelectedPOI | str]:
    if not isinstance(items, list):
        return []
    
    selections = []
    for item in items:
        if isinstance(item, str):
            if item.strip():
                selections.append(item)
            continue
        try:
            selections.append(SelectedPOI.model_validate(item))
        except ValidationError:
            logger.debug("Dropping malformed interest selection %r", item)
    return selections


def _parse_time_window(value) -> TimeWindow | None:
    if not isinstance(value, Mapping):
        return None
    try:
        return TimeWindow(
            earliest=value.get("earliest", value.get("earliest_start")),
            latest=value.get("latest", value.get("latest_end")),
        )
    except ValidationError:
        return None


def parse_preference(record: Mapping) -> Preference:
    """
    Build a Preference from a loosely typed stored record.
    
    Soft fields fall back to defaults: unknown route shapes become
    no_preference, malformed selections are dropped and a malformed time
    window is ignored. A missing or invalid start point or distance is
    the caller's fault and raises InvalidInput.
    
    Accepts both this package's field names and the storage names
    (start_location, distance_preference_km, route_type, selected_pois,
    time_availability).
    """
    start = record.get("start", record.get("start_location"))
    distance = record.get("distance_km", record.get("distance_preference_km"))
    
    try:
        return Preference(
            id=record.get("id"),
            start=GeoPoint.model_validate(start),
            distance_km=distance,
            route_shape=_parse_shape(record.get("route_shape", record.get("route_type"))),
            interest_selections=_parse_selections(
                record.get("interest_selections", record.get("selected_pois", []))
            ),
            time_window=_parse_time_window(
                record.get("time_window", record.get("time_availability"))
            ),
            visitor_token=record.get("visitor_token"),
            submitted_at=record.get("submitted_at"),
        )
    except ValidationError as e:
        raise InvalidInput(f"Invalid preference record: {e}") from e


def parse_preferences(records: Iterable[Mapping]) -> list[Preference]:
    """Parse stored records, keeping their order."""
    return [parse_preference(record) for record in records]
