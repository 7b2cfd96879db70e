"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from ...config import settings
from ...models.domain import Location
from ...schemas.routing import (
    DistanceMatrixRequest,
    DistanceMatrixResponse,
    LocationModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    RouteMetadataModel,
    ScheduledStopModel,
)
from .distance_matrix import DistanceMatrixClient, DistanceMatrixError, DurationMatrix
from .models import SequenceResult
from .pinning import resolve_pinning
from .sequencer import schedule_hierarchical, schedule_locations, sequence_two_tier
from .time_windows import format_clock

logger = logging.getLogger(__name__)


def _to_domain(model: LocationModel) -> Location:
    return Location(
        id=model.id,
        name=model.name,
        latitude=model.lat,
        longitude=model.lng,
        parent_id=model.parent_id,
        opening_time=model.opening_time,
        closing_time=model.closing_time,
        visit_duration=model.duration,
    )


def _to_model(location: Location) -> LocationModel:
    return LocationModel(
        id=location.id,
        name=location.name,
        lat=location.latitude,
        lng=location.longitude,
        parent_id=location.parent_id,
        opening_time=location.opening_time,
        closing_time=location.closing_time,
        duration=location.visit_duration,
    )


def _schedule_to_models(result: SequenceResult) -> list[ScheduledStopModel]:
    return [
        ScheduledStopModel(
            id=stop.location.id,
            name=stop.location.name,
            sequence=stop.sequence,
            travel_min=stop.travel_min,
            arrival=format_clock(stop.arrival_min),
            wait_min=stop.wait_min,
            departure=format_clock(stop.departure_min),
            late=stop.late,
            pinned=stop.pinned,
        )
        for stop in result.stops
    ]


def _fetch_matrix(locations: Sequence[Location], mode: str) -> Optional[DurationMatrix]:
    """Fetch real travel times, or return None so the sequencer falls back to haversine."""
    if len(locations) < 2 or not settings.google_maps_api_key:
        return None
    try:
        client = DistanceMatrixClient()
        matrix = client.durations([(location.latitude, location.longitude) for location in locations], mode=mode)
    except (DistanceMatrixError, ConnectionError, httpx.HTTPError, ValueError) as exc:
        logger.warning(f"Distance matrix unavailable, using haversine estimates: {exc}")
        return None
    if len(matrix) != len(locations) or any(len(row) != len(locations) for row in matrix):
        logger.warning("Distance matrix shape does not match the request, using haversine estimates")
        return None
    return matrix


def optimize_route(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    if len(payload.locations) < 2:
        raise ValueError("At least 2 locations are required.")

    mode = payload.mode or settings.default_travel_mode
    locations = [_to_domain(model) for model in payload.locations]
    pinned = resolve_pinning(locations, payload.config)
    ordered = pinned.locations
    lock_last = pinned.lock_last

    logger.info(
        f"Optimizing {len(ordered)} locations (strategy={payload.strategy}, mode={mode}, lock_last={lock_last})"
    )

    matrix: Optional[DurationMatrix] = None
    schedule: Optional[list[ScheduledStopModel]] = None

    if payload.strategy == "flat":
        matrix = _fetch_matrix(ordered, mode)
        result = schedule_locations(ordered, matrix, lock_first=pinned.lock_first, lock_last=lock_last)
        path = result.locations
        schedule = _schedule_to_models(result)
    elif payload.strategy == "two_tier":
        places = [location for location in ordered if not location.is_point_of_interest]
        matrix = _fetch_matrix(places, mode)
        if lock_last and ordered[-1].is_point_of_interest:
            # Only places can hold the final slot when places lead the order.
            logger.info("Pinned end is a point of interest; leaving place order unlocked")
            lock_last = False
        path = sequence_two_tier(ordered, matrix, lock_last=lock_last)
    else:
        if lock_last and not ordered[-1].is_point_of_interest:
            # The pinned end is a place, which this strategy does not output.
            logger.info("Pinned end is not a point of interest; leaving point-of-interest order unlocked")
            lock_last = False
        result = schedule_hierarchical(ordered, lock_last=lock_last)
        path = result.locations
        schedule = _schedule_to_models(result)

    logger.info(f"Optimized order: {[location.name for location in path]}")

    return OptimizeRouteResponse(
        optimized_path=[_to_model(location) for location in path],
        schedule=schedule,
        metadata=RouteMetadataModel(
            strategy=payload.strategy,
            mode=mode,
            matrix_source="distance_matrix" if matrix is not None else "haversine",
            lock_last=lock_last,
            location_count=len(ordered),
        ),
    )


def lookup_distance_matrix(payload: DistanceMatrixRequest) -> DistanceMatrixResponse:
    mode = payload.mode or settings.default_travel_mode
    client = DistanceMatrixClient()
    origins = [(point.lat, point.lng) for point in payload.origins]
    destinations = [(point.lat, point.lng) for point in payload.destinations] if payload.destinations else None
    durations = client.durations(origins, destinations, mode=mode)
    return DistanceMatrixResponse(durations=durations, mode=mode)
