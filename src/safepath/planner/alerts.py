"""
Small alert formatting helpers.

Used by the planner, API and CLI to turn matched hazards into the short message a
driver hears (or reads), and to hand the route over to an external navigation app.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Sequence
from urllib.parse import urlencode

from safepath.domain.models import Hazard

NO_HAZARDS_MESSAGE = "No major hazards detected. Safe route."
NO_NEARBY_HAZARDS_MESSAGE = "No hazards nearby."

_SAFE_ROUTE_RE = re.compile(r"safe route from (.+) to (.+)")


def summarize_hazards(hazards: Sequence[Hazard], *, empty_message: str = NO_HAZARDS_MESSAGE) -> str:
    """Render the spoken-style alert for a list of hazards."""
    if not hazards:
        return empty_message
    return "Attention: " + ". ".join(f"{h.description} at {h.name}" for h in hazards)


def hazard_line(hazard: Hazard) -> str:
    """One list row: icon, description, name."""
    return f"{hazard.icon or '⚠️'} {hazard.description} ({hazard.name})"


def navigation_url(
    coordinates: Sequence[tuple[float, float]],
    *,
    base_url: str = "https://www.google.com/maps/dir/",
) -> str | None:
    """Directions URL from the first to the last route point (None for < 2 points)."""
    if len(coordinates) < 2:
        return None
    start = coordinates[0]
    end = coordinates[-1]
    query = urlencode(
        {"api": 1, "origin": f"{start[0]},{start[1]}", "destination": f"{end[0]},{end[1]}"},
        safe=",",
    )
    return f"{base_url}?{query}"


@dataclass(frozen=True)
class VoiceCommand:
    kind: Literal["plan", "navigate", "unknown"]
    from_place: str | None = None
    to_place: str | None = None


def parse_voice_command(text: str) -> VoiceCommand:
    """Interpret a transcribed voice command.

    Recognized phrases: "safe route from X to Y" and "start navigation".
    """
    lowered = text.strip().lower()
    if "safe route from" in lowered:
        match = _SAFE_ROUTE_RE.search(lowered)
        if match:
            return VoiceCommand(kind="plan", from_place=match.group(1).strip(), to_place=match.group(2).strip())
    elif "start navigation" in lowered:
        return VoiceCommand(kind="navigate")
    return VoiceCommand(kind="unknown")
