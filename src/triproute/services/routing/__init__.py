"""Visit sequencing and travel-time lookup."""

from .sequencer import (
    schedule_hierarchical,
    schedule_locations,
    sequence_hierarchical,
    sequence_locations,
    sequence_two_tier,
)

__all__ = [
    "schedule_locations",
    "schedule_hierarchical",
    "sequence_locations",
    "sequence_hierarchical",
    "sequence_two_tier",
]
