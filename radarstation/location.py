"""Named field landmarks used for four-point camera calibration."""

from __future__ import annotations

import json
import logging
from os import PathLike
from typing import Any

logger = logging.getLogger("RadarLogger")

Point3 = tuple[float, float, float]


class Location:
    """Holds calibration landmarks and which of them to pick for each enemy colour."""

    def __init__(self) -> None:
        self.location_targets: dict[str, Point3] = {}
        self.targets_selected_enemy_red: list[str] = []
        self.targets_selected_enemy_blue: list[str] = []

    def decode_map_points(self, path: str | PathLike[str]) -> None:
        """Load landmarks and the per-enemy selections from a JSON file.

        The file holds ``Points`` (objects with ``name``, ``x``, ``y``, ``z``),
        ``when_enemy_red`` and ``when_enemy_blue`` (lists of landmark names).
        Raises ``ValueError`` when the file is not valid JSON.
        """
        self.location_targets.clear()
        self.targets_selected_enemy_red.clear()
        self.targets_selected_enemy_blue.clear()
        with open(path, encoding="utf-8") as handle:
            try:
                document: Any = json.load(handle)
            except json.JSONDecodeError as exc:
                logger.error("Json file read error !")
                raise ValueError(f"cannot parse map points file {path}: {exc}") from exc
        if not isinstance(document, dict):
            logger.error("Json file read error !")
            raise ValueError(f"map points file {path} does not hold a JSON object")
        for entry in document.get("Points") or []:
            name = str(entry.get("name", ""))
            self.location_targets[name] = (
                float(entry.get("x", 0.0)),
                float(entry.get("y", 0.0)),
                float(entry.get("z", 0.0)),
            )
        self.targets_selected_enemy_red.extend(
            str(name) for name in document.get("when_enemy_red") or []
        )
        self.targets_selected_enemy_blue.extend(
            str(name) for name in document.get("when_enemy_blue") or []
        )

    def object_points(self, enemy: int) -> list[Point3]:
        """Return the field coordinates of the landmarks to pick against ``enemy``.

        ``enemy`` 0 selects the red list, anything else the blue list.
        Raises ``ValueError`` when no landmarks are loaded and ``KeyError``
        when a selected name is not a known landmark.
        """
        if not self.location_targets:
            logger.error("Empty MapPoints !")
            raise ValueError("no map points loaded")
        names = self.targets_selected_enemy_red if enemy == 0 else self.targets_selected_enemy_blue
        points = []
        for name in names:
            if name not in self.location_targets:
                raise KeyError(f"unknown map point {name!r}")
            points.append(self.location_targets[name])
        return points