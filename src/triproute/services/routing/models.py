"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ...models.domain import Location
from .time_windows import Minutes


@dataclass(slots=True)
class ScheduledStop:
    """A location placed in the visit order with its simulated timings.

    Timings are minutes after midnight. They are ``None`` for stops whose
    timing is not simulated (a pinned final stop, or any stop of a route too
    short to reorder).
    """

    location: Location
    sequence: int
    travel_min: Optional[int] = None
    arrival_min: Optional[Minutes] = None
    wait_min: Optional[Minutes] = None
    departure_min: Optional[Minutes] = None
    late: bool = False
    pinned: bool = False


@dataclass(slots=True)
class SequenceResult:
    stops: List[ScheduledStop] = field(default_factory=list)
    total_travel_min: int = 0
    total_wait_min: Minutes = 0
    late_stops: int = 0
    end_min: Optional[Minutes] = None

    @property
    def locations(self) -> list[Location]:
        return [stop.location for stop in self.stops]
