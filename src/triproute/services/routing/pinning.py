"""Resolve a route's start/end policy into sequencer input.

The sequencer only knows "walk from index 0" and "keep the last index last".
Everything else (a chosen start, a return leg, a free-form coordinate) is
expressed by reordering or extending the location list before the call.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from ...models.domain import Location
from ...schemas.routing import CustomLocationModel, RouteConfigModel

CUSTOM_START_ID = "custom-start"
CUSTOM_END_ID = "custom-end"
RETURN_TO_START_ID = "return-to-start"


class PinningError(ValueError):
    """Raised when a route config cannot be applied to the given locations."""


@dataclass(slots=True)
class PinnedRoute:
    locations: list[Location]
    lock_first: bool
    lock_last: bool


def _custom_location(custom: CustomLocationModel | None, location_id: str, label: str) -> Location:
    if custom is None:
        raise PinningError(f"{label} point type 'custom' requires customLocation.")
    return Location(
        id=location_id,
        name=custom.name or location_id,
        latitude=custom.lat,
        longitude=custom.lng,
    )


def _move(locations: list[Location], location_id: str | None, *, to_end: bool, label: str) -> None:
    if not location_id:
        raise PinningError(f"{label} point type 'specific_location' requires locationId.")
    for position, location in enumerate(locations):
        if location.id == location_id:
            chosen = locations.pop(position)
            if to_end:
                locations.append(chosen)
            else:
                locations.insert(0, chosen)
            return
    raise PinningError(f"{label} location '{location_id}' is not in the route.")


def resolve_pinning(locations: Sequence[Location], config: RouteConfigModel | None) -> PinnedRoute:
    """Reorder ``locations`` for ``config`` and work out which ends are locked.

    ``last_location`` leaves the end free; only an explicit end (a specific
    location, a custom point or a return leg) is locked.
    """
    ordered = list(locations)
    if config is None:
        return PinnedRoute(locations=ordered, lock_first=True, lock_last=False)

    start = config.start_point
    if start.type == "specific_location":
        _move(ordered, start.location_id, to_end=False, label="Start")
    elif start.type == "custom":
        ordered.insert(0, _custom_location(start.custom_location, CUSTOM_START_ID, "Start"))

    end = config.end_point
    lock_last = True
    if end.type == "specific_location":
        _move(ordered, end.location_id, to_end=True, label="End")
    elif end.type == "custom":
        ordered.append(_custom_location(end.custom_location, CUSTOM_END_ID, "End"))
    elif end.type == "return_to_start":
        if not ordered:
            raise PinningError("Cannot return to start of an empty route.")
        ordered.append(replace(ordered[0], id=RETURN_TO_START_ID))
    else:
        lock_last = False

    return PinnedRoute(locations=ordered, lock_first=True, lock_last=lock_last)
