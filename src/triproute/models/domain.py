"""Domain models for visit locations."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_VISIT_MINUTES = 60


@dataclass(slots=True)
class Location:
    """A stop to visit, optionally bounded by an opening/closing time window.

    Locations with ``parent_id`` set are points of interest belonging to the
    place whose ``id`` equals that value.
    """

    name: str
    latitude: float
    longitude: float
    id: Optional[str] = None
    parent_id: Optional[str] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    visit_duration: Optional[int] = None

    @property
    def is_point_of_interest(self) -> bool:
        return bool(self.parent_id)

    @property
    def dwell_minutes(self) -> int:
        # Zero counts as unset.
        return self.visit_duration or DEFAULT_VISIT_MINUTES
