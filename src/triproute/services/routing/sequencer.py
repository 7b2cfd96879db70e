"""Greedy visit sequencing with time-window scoring.

Given a day's stops, walk from the first stop and repeatedly move to the
unvisited stop with the lowest score, where

    score = travel minutes + minutes spent waiting for opening
            + LATE_PENALTY_MINUTES if the stop would already be closed

A late stop is never rejected outright. The penalty only ranks it behind
every stop that can still be reached in time, so the walk always yields a
complete ordering. Equal scores keep the earlier input position.

Travel minutes come from a duration matrix in seconds when one is supplied,
otherwise from haversine distance at roughly 30 km/h.

All functions here are pure and hold no state between calls.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ...models.domain import Location
from ..geospatial import location_distance_km
from .models import ScheduledStop, SequenceResult
from .time_windows import Minutes, parse_clock

DAY_START_MINUTES = 540  # 09:00
LATE_PENALTY_MINUTES = 10_000
MINUTES_PER_KM = 2
# Matrix entries for unreachable pairs come back as None or infinity.
UNREACHABLE_SECONDS = 999_999_999

DistanceMatrix = Sequence[Sequence[Optional[float]]]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Candidate:
    index: int
    travel: int
    arrival: Minutes
    wait: Minutes
    late: bool

    @property
    def score(self) -> Minutes:
        return self.travel + self.wait + (LATE_PENALTY_MINUTES if self.late else 0)


def _validate_matrix(matrix: DistanceMatrix, size: int) -> None:
    if len(matrix) != size:
        raise ValueError(f"Distance matrix has {len(matrix)} rows, expected {size}.")
    for row_index, row in enumerate(matrix):
        if len(row) != size:
            raise ValueError(f"Distance matrix row {row_index} has {len(row)} columns, expected {size}.")


def _matrix_seconds(value: Optional[float]) -> float:
    if value is None or not math.isfinite(value):
        return UNREACHABLE_SECONDS
    return value


def _travel_minutes(
    locations: Sequence[Location],
    distance_matrix: Optional[DistanceMatrix],
    origin: int,
    destination: int,
) -> int:
    if distance_matrix is not None:
        return math.ceil(_matrix_seconds(distance_matrix[origin][destination]) / 60)
    return math.ceil(location_distance_km(locations[origin], locations[destination]) * MINUTES_PER_KM)


def _evaluate(
    locations: Sequence[Location],
    distance_matrix: Optional[DistanceMatrix],
    current: int,
    candidate: int,
    clock: Minutes,
) -> _Candidate:
    travel = _travel_minutes(locations, distance_matrix, current, candidate)
    arrival = clock + travel
    opening = parse_clock(locations[candidate].opening_time)
    closing = parse_clock(locations[candidate].closing_time)

    wait = opening - arrival if opening is not None and arrival < opening else 0
    late = closing is not None and arrival + wait > closing
    return _Candidate(index=candidate, travel=travel, arrival=arrival, wait=wait, late=late)


def schedule_locations(
    locations: Sequence[Location],
    distance_matrix: Optional[DistanceMatrix] = None,
    lock_first: bool = True,
    lock_last: bool = False,
) -> SequenceResult:
    """Order ``locations`` and simulate the day's timings along that order.

    Args:
        locations: Stops in caller order. Index 0 is where the walk starts.
        distance_matrix: Optional travel durations in seconds, aligned to
            ``locations`` (row = origin, column = destination).
        lock_first: Index 0 is visited first and never reconsidered. The walk
            always originates there, so this holds for either value.
        lock_last: Keep the final input stop out of the walk and append it
            at the end, whatever its distance.

    Returns:
        SequenceResult with one ScheduledStop per input location.
    """
    n = len(locations)
    if n <= 2:
        return SequenceResult(
            stops=[ScheduledStop(location=location, sequence=seq) for seq, location in enumerate(locations, start=1)]
        )

    if distance_matrix is not None:
        _validate_matrix(distance_matrix, n)

    visited: set[int] = set()
    last_index = n - 1
    if lock_last:
        visited.add(last_index)

    current = 0
    visited.add(current)
    clock: Minutes = DAY_START_MINUTES
    result = SequenceResult(
        stops=[
            ScheduledStop(
                location=locations[current],
                sequence=1,
                departure_min=clock,
                pinned=lock_first,
            )
        ]
    )

    while len(visited) < n:
        best: Optional[_Candidate] = None
        for index in range(n):
            if index in visited:
                continue
            candidate = _evaluate(locations, distance_matrix, current, index, clock)
            if best is None or candidate.score < best.score:
                best = candidate

        if best is None:
            break
        location = locations[best.index]
        start = best.arrival + best.wait
        clock = start + location.dwell_minutes

        result.stops.append(
            ScheduledStop(
                location=location,
                sequence=len(result.stops) + 1,
                travel_min=best.travel,
                arrival_min=best.arrival,
                wait_min=best.wait,
                departure_min=clock,
                late=best.late,
            )
        )
        result.total_travel_min += best.travel
        result.total_wait_min += best.wait
        result.late_stops += int(best.late)
        visited.add(best.index)
        current = best.index
        logger.debug(
            "Selected %s (score=%s, arrival=%s, wait=%s, late=%s)",
            location.name,
            best.score,
            best.arrival,
            best.wait,
            best.late,
        )

    result.end_min = clock

    if lock_last:
        result.stops.append(
            ScheduledStop(location=locations[last_index], sequence=len(result.stops) + 1, pinned=True)
        )

    return result


def sequence_locations(
    locations: Sequence[Location],
    distance_matrix: Optional[DistanceMatrix] = None,
    lock_first: bool = True,
    lock_last: bool = False,
) -> list[Location]:
    """Return ``locations`` in visit order. See :func:`schedule_locations`."""
    return schedule_locations(locations, distance_matrix, lock_first, lock_last).locations


def points_of_interest(all_locations: Sequence[Location]) -> list[Location]:
    return [location for location in all_locations if location.is_point_of_interest]


def schedule_hierarchical(all_locations: Sequence[Location], lock_last: bool = False) -> SequenceResult:
    """Sequence only the points of interest in ``all_locations``.

    Places are dropped and travel is estimated with haversine distance. The
    first point of interest in list order starts the walk; the overall first
    entry of ``all_locations`` takes no part unless it is itself a point of
    interest.
    """
    pois = points_of_interest(all_locations)
    if not pois:
        logger.debug("No points of interest among %d locations", len(all_locations))
        return SequenceResult()
    return schedule_locations(pois, None, lock_first=True, lock_last=lock_last)


def sequence_hierarchical(all_locations: Sequence[Location], lock_last: bool = False) -> list[Location]:
    return schedule_hierarchical(all_locations, lock_last).locations


def sequence_two_tier(
    all_locations: Sequence[Location],
    place_matrix: Optional[DistanceMatrix] = None,
    lock_last: bool = False,
) -> list[Location]:
    """Order places, then the points of interest inside each place.

    Places are sequenced with ``place_matrix`` (aligned to the places in
    input order). Each place is followed by its own points of interest,
    ordered among themselves by haversine distance. Points of interest whose
    parent is not in the list are ordered together and placed last.
    """
    places = [location for location in all_locations if not location.is_point_of_interest]
    pois = points_of_interest(all_locations)

    ordered_places = sequence_locations(places, place_matrix, lock_first=True, lock_last=lock_last)

    by_parent: dict[str, list[Location]] = {}
    for poi in pois:
        by_parent.setdefault(poi.parent_id, []).append(poi)

    path: list[Location] = []
    for place in ordered_places:
        path.append(place)
        children = by_parent.pop(place.id, []) if place.id else []
        if children:
            path.extend(sequence_locations(children))

    orphans = [poi for poi in pois if poi.parent_id in by_parent]
    if orphans:
        logger.debug("Appending %d points of interest without a listed parent", len(orphans))
        path.extend(sequence_locations(orphans))

    return path
