"""Per-frame processing steps: picking one armor per robot and measuring its depth."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TypeVar

import numpy as np

from radarstation.map_mapping import EPSILON, ArmorBoundingBox, BboxAndRect

logger = logging.getLogger("RadarLogger")

_Item = TypeVar("_Item", BboxAndRect, ArmorBoundingBox)


def armor_filter(pred: Iterable[BboxAndRect], ids: Iterable[int]) -> list[BboxAndRect]:
    """Keep, for each class id in ``ids``, the detection with the highest confidence.

    The result follows the order of ``ids``; a class whose best confidence
    is not above zero is dropped, and among equal confidences the first wins.
    """
    detections = list(pred)
    results: list[BboxAndRect] = []
    for class_id in ids:
        best: BboxAndRect | None = None
        best_conf = 0.0
        for item in detections:
            if int(item.armor.cls) == class_id and item.armor.conf - best_conf > EPSILON:
                best = item
                best_conf = item.armor.conf
        if best is not None and abs(best_conf) > EPSILON:
            results.append(best)
    return results


def _box_values(armor: ArmorBoundingBox, depth: np.ndarray) -> np.ndarray | None:
    height, width = depth.shape
    if (
        armor.x0 > width
        or armor.y0 > height
        or armor.x0 + armor.w > width
        or armor.y0 + armor.h > height
    ):
        return None
    cx = armor.x0 + armor.w / 2.0
    cy = armor.y0 + armor.h / 2.0
    row_start = int(max(cy - armor.h / 2.0, 0.0))
    row_end = int(min(cy + armor.h / 2.0, float(height)))
    col_start = int(max(cx - armor.w / 2.0, 0.0))
    col_end = int(min(cx + armor.w / 2.0, float(width)))
    region = depth[row_start:max(row_end, row_start), col_start:max(col_end, col_start)]
    return region[region != 0]


def detect_depth(armors: Sequence[_Item], depth_map: Sequence[Sequence[float]]) -> Sequence[_Item]:
    """Set each armor's depth to the mean of the non-zero depths inside its box.

    Items may be ``BboxAndRect`` (plain mean) or ``ArmorBoundingBox``, whose
    running sum is truncated to an integer after every value. Boxes reaching
    beyond the map keep their depth; a box with no depth points gets 0.
    The items are updated in place and returned.
    """
    if not armors:
        return armors
    depth = np.asarray(depth_map, dtype=float)
    if depth.ndim != 2 or depth.size == 0:
        raise ValueError("depth map must be a non-empty two-dimensional grid")
    for item in armors:
        truncating = isinstance(item, ArmorBoundingBox)
        armor = item if truncating else item.armor
        values = _box_values(armor, depth)
        if values is None:
            continue
        if values.size == 0:
            armor.depth = 0.0
        elif truncating:
            total = 0
            for value in values.tolist():
                total = int(total + value)
            armor.depth = total / values.size
        else:
            armor.depth = float(values.sum()) / values.size
        logger.info("Depth: [CLS] %f [Depth] %f", armor.cls, armor.depth)
    return armors