"""Shaping of computed robot positions for the referee link and for publishing."""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

from radarstation.map_mapping import MapLocation3D

ROBOTS_PER_SIDE = 6
DEFAULT_FRAME_ID = "radar2023"


def enemy_locations(locations: Sequence[MapLocation3D], enemy: int) -> list[list[float]]:
    """Return ``[x, y]`` for each robot of the enemy side.

    ``locations`` holds one slot per robot, six per side; ``enemy`` 0 takes
    the first six and 1 the second six. Half as many positions as there are
    slots are returned. Raises ``ValueError`` for another ``enemy`` or when
    the slots of that side are missing.
    """
    if enemy not in (0, 1):
        raise ValueError(f"enemy must be 0 or 1, got {enemy}")
    count = len(locations) // 2
    start = enemy * ROBOTS_PER_SIDE
    if start + count > len(locations):
        raise ValueError(
            f"{len(locations)} location slots are too few for enemy side {enemy}"
        )
    return [[loc.x, loc.y] for loc in locations[start:start + count]]


def locations_message(
    locations: Sequence[MapLocation3D], frame_id: str = DEFAULT_FRAME_ID
) -> dict[str, Any] | None:
    """Build the locations message to publish, or ``None`` when there is nothing to send.

    The message holds a header (``frame_id``, ``stamp`` in seconds and
    ``seq`` 1) and one ``{"id", "x", "y"}`` entry per location, in order.
    """
    if not locations:
        return None
    return {
        "header": {"frame_id": frame_id, "stamp": time.time(), "seq": 1},
        "locations": [{"id": loc.id, "x": loc.x, "y": loc.y} for loc in locations],
    }


def fps_label(elapsed_ns: int) -> str:
    """Return the ``FPS n`` overlay text for a frame that took ``elapsed_ns`` nanoseconds.

    Raises ``ValueError`` unless the time is positive.
    """
    elapsed_ns = int(elapsed_ns)
    if elapsed_ns <= 0:
        raise ValueError("elapsed time must be positive")
    return f"FPS {1_000_000_000 // elapsed_ns}"