"""Clock-string parsing for opening and closing times.

Times are ``"HH:MM"`` strings on a 24-hour clock, converted to minutes after
midnight. Each side of the colon is read as a plain number: blank counts as
zero, and a sign or decimal point is accepted, so ``"13:"`` is 13:00 and
``"1.5:00"`` is 90 minutes. A value with a non-numeric side, or no minutes
side at all, is treated the same as a missing one: the stop is simply
unconstrained on that side.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Union

Minutes = Union[int, float]

_NUMBER = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _clock_part(text: str) -> Optional[float]:
    text = text.strip()
    if not text:
        return 0.0
    if not _NUMBER.fullmatch(text):
        return None
    return float(text)


def parse_clock(value: Optional[str]) -> Optional[Minutes]:
    """Return minutes after midnight for ``value``, or ``None`` if absent or malformed.

    Anything after a second colon (``"10:30:00"``) is ignored.
    """
    if not value:
        return None
    parts = value.split(":")
    if len(parts) < 2:
        return None
    hours, minutes = _clock_part(parts[0]), _clock_part(parts[1])
    if hours is None or minutes is None:
        return None
    total = hours * 60 + minutes
    if not math.isfinite(total):
        return None
    return int(total) if total.is_integer() else total


def format_clock(minutes: Optional[Minutes]) -> Optional[str]:
    """Render minutes after midnight as ``"HH:MM"`` (hours may exceed 23)."""
    if minutes is None:
        return None
    whole = math.floor(minutes)
    return f"{whole // 60:02d}:{whole % 60:02d}"
