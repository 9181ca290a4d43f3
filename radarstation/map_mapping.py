"""Camera-to-field coordinate mapping of detected robots, with short-term prediction."""

from __future__ import annotations

import copy
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

logger = logging.getLogger("RadarLogger")

EPSILON = 1e-6
IMAGE_H = 2064
IMAGE_W = 3088

Z_ADJUST = True
LOCATION_PREDICTION = True
Z_THRESHOLD = 0.2
PRE_TIME = 10
PRE_RATIO = 0.1
REAL_SIZE_W = 15.0
REAL_SIZE_H = 28.0
IOU_THRESHOLD = 0.8

ROBOT_SLOTS = {0: 6, 1: 7, 2: 8, 3: 9, 4: 10, 5: 11, 6: 0, 7: 1, 8: 2, 9: 3, 10: 4, 11: 5}


@dataclass
class ArmorBoundingBox:
    """An armor plate detected in the image."""

    flag: bool = False
    x0: float = 0.0
    y0: float = 0.0
    w: float = 0.0
    h: float = 0.0
    cls: float = 0.0
    conf: float = 0.0
    depth: float = 0.0


@dataclass
class DetectBox:
    """A detected vehicle, given by its corners."""

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    confidence: float = 0.0
    class_id: float = 0.0
    track_id: int = 0


@dataclass
class BboxAndRect:
    """An armor detection together with the vehicle box it was found in."""

    armor: ArmorBoundingBox = field(default_factory=ArmorBoundingBox)
    rect: DetectBox = field(default_factory=DetectBox)


@dataclass
class MapLocation3D:
    """A robot position in field coordinates."""

    id: int = -1
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    flag: bool = False


def rodrigues(rvec: Sequence[float]) -> np.ndarray:
    """Convert a rotation vector into a 3x3 rotation matrix."""
    r = np.asarray(rvec, dtype=float).reshape(3)
    theta = float(np.linalg.norm(r))
    if theta < EPSILON:
        return np.eye(3)
    kx, ky, kz = r / theta
    k = np.array([[0.0, -kz, ky], [kz, 0.0, -kx], [-ky, kx, 0.0]])
    return np.eye(3) + math.sin(theta) * k + (1.0 - math.cos(theta)) * (k @ k)


def undistort_point(
    point: Sequence[float],
    camera_matrix: Sequence[Sequence[float]],
    dist_coeffs: Sequence[float],
) -> tuple[float, float]:
    """Map a pixel to normalised, undistorted camera coordinates.

    ``dist_coeffs`` holds k1, k2, p1, p2[, k3[, k4, k5, k6]].
    """
    k_mat = np.asarray(camera_matrix, dtype=float).reshape(3, 3)
    coeffs = [float(c) for c in np.asarray(dist_coeffs, dtype=float).ravel()]
    if len(coeffs) not in (0, 4, 5, 8):
        raise ValueError("distortion coefficients must number 4, 5 or 8")
    k1, k2, p1, p2, k3, k4, k5, k6 = (coeffs + [0.0] * 8)[:8]
    fx, fy = k_mat[0, 0], k_mat[1, 1]
    cx, cy = k_mat[0, 2], k_mat[1, 2]
    x0 = (float(point[0]) - cx) / fx
    y0 = (float(point[1]) - cy) / fy
    x, y = x0, y0
    for _ in range(5):
        r2 = x * x + y * y
        icdist = (1 + ((k6 * r2 + k5) * r2 + k4) * r2) / (1 + ((k3 * r2 + k2) * r2 + k1) * r2)
        if icdist < 0:
            x, y = x0, y0
            break
        delta_x = 2 * p1 * x * y + p2 * (r2 + 2 * x * x)
        delta_y = p1 * (r2 + 2 * y * y) + 2 * p2 * x * y
        x = (x0 - delta_x) * icdist
        y = (y0 - delta_y) * icdist
    return x, y


class MapMapping:
    """Turns armor detections with depth into field positions using a calibrated pose."""

    def __init__(self) -> None:
        self.ids = dict(ROBOT_SLOTS)
        self._location3d = [MapLocation3D() for _ in self.ids]
        self._cached_location3d: list[MapLocation3D] = []
        self._location_cache = [[MapLocation3D() for _ in self.ids] for _ in range(2)]
        self._location_pred_time = [0] * len(self.ids)
        self._iou_pred_cache: list[BboxAndRect] = []
        self._transform = np.eye(4)
        self._inverse = np.eye(4)
        self.camera_position = np.zeros(3)
        self.rvec = np.zeros(3)
        self.tvec = np.zeros(3)
        self._pass_flag = False

    def is_pass(self) -> bool:
        """Return whether the camera pose has been set."""
        return self._pass_flag

    def push_transform(self, rvec: Sequence[float], tvec: Sequence[float]) -> None:
        """Set the camera pose from a rotation vector and a translation vector."""
        self.rvec = np.asarray(rvec, dtype=float).reshape(3).copy()
        self.tvec = np.asarray(tvec, dtype=float).reshape(3).copy()
        logger.info("rvec= %s", self.rvec.tolist())
        logger.info("tvec= %s", self.tvec.tolist())
        transform = np.eye(4)
        transform[:3, :3] = rodrigues(self.rvec)
        transform[:3, 3] = self.tvec
        self._transform = transform
        self._inverse = np.linalg.inv(transform)
        self.camera_position = (self._inverse @ np.array([0.0, 0.0, 0.0, 1.0]))[:3]
        self._pass_flag = True

    def locations(self) -> list[MapLocation3D]:
        """Return copies of the current field positions, one slot per robot."""
        return [copy.copy(loc) for loc in self._location3d]

    def iou_prediction(
        self, pred: Sequence[BboxAndRect], sepboxs: Sequence[DetectBox]
    ) -> list[ArmorBoundingBox]:
        """Guess armor boxes for robots seen last frame by overlap with vehicle boxes."""
        pred_bbox: list[ArmorBoundingBox] = []
        if self._iou_pred_cache:
            for key in self.ids:
                cached = next((c.armor for c in self._iou_pred_cache if c.armor.cls == key), None)
                pred_check = any(p.armor.cls != key for p in pred)
                if cached is None or not pred_check or not sepboxs:
                    continue
                area = cached.w * cached.h
                ious = []
                for box in sepboxs:
                    x1 = max(cached.x0, box.x1)
                    x2 = min(cached.x0 + cached.w, box.x2)
                    y1 = max(cached.y0, box.y1)
                    y2 = min(cached.y0 + cached.h, box.y2)
                    overlap = max(0.0, x2 - x1) * max(0.0, y2 - y1)
                    ious.append(overlap / area if area else math.nan)
                best = max(range(len(ious)), key=ious.__getitem__)
                if ious[best] > IOU_THRESHOLD:
                    box = sepboxs[best]
                    x, y = int(box.x1), int(box.y1)
                    width = math.floor(int(box.x2 - box.x1) / 3.0)
                    height = math.floor(int(box.y2 - box.y1) / 5.0)
                    x += width
                    y += height * 3
                    pred_bbox.append(
                        ArmorBoundingBox(True, float(x), float(y), float(width), float(height), float(key))
                    )
        self._iou_pred_cache = copy.deepcopy(list(pred))
        return pred_bbox

    def merge_update(
        self,
        pred: Sequence[BboxAndRect],
        iou_bboxes: Sequence[ArmorBoundingBox],
        camera_matrix: Sequence[Sequence[float]],
        dist_coeffs: Sequence[float],
    ) -> None:
        """Compute field positions from detections that carry a depth.

        Sets ``flag`` on each detection to say whether it was used.
        """
        if not self._pass_flag:
            logger.error("Can't get _T !")
            raise RuntimeError("camera pose has not been set")
        self._location3d = [MapLocation3D() for _ in self.ids]
        used: list[ArmorBoundingBox] = []
        for item in pred:
            armor = item.armor
            armor.flag = armor.depth != 0 and not math.isnan(armor.depth)
            if armor.flag:
                used.append(armor)
        for box in iou_bboxes:
            if any(int(a.cls) == int(box.cls) for a in used):
                continue
            box.flag = abs(box.depth) > EPSILON and not math.isnan(box.depth)
            if box.flag:
                used.append(box)
        if used:
            pred_loc: list[MapLocation3D] = []
            for key in self.ids:
                armor = next((a for a in used if int(a.cls) == key), None)
                if armor is None:
                    continue
                center = (armor.x0 + armor.w / 2.0, armor.y0 + armor.h / 2.0)
                nx, ny = undistort_point(center, camera_matrix, dist_coeffs)
                d = armor.depth
                dst = self._inverse @ np.array([nx * d, ny * d, d, 1.0])
                loc = MapLocation3D(int(armor.cls), float(dst[0]), float(dst[1]), float(dst[2]), True)
                if Z_ADJUST:
                    self._adjust_z(loc)
                pred_loc.append(loc)
            if Z_ADJUST and pred_loc:
                self._cached_location3d = [copy.copy(loc) for loc in pred_loc]
            for loc in pred_loc:
                loc.y += REAL_SIZE_W
                self._location3d[self.ids[loc.id]] = loc
                logger.info("LOC: [CLS] %d [x] %f [y] %f [z] %f", loc.id, loc.x, loc.y, loc.z)
        if LOCATION_PREDICTION:
            self._location_prediction()

    def _adjust_z(self, loc: MapLocation3D) -> None:
        previous = MapLocation3D()
        for cached in self._cached_location3d:
            if cached.id == loc.id:
                previous = cached
        if not previous.flag or loc.z - previous.z <= Z_THRESHOLD:
            return
        cam = self.camera_position
        line = np.array([loc.x, loc.y, loc.z]) - cam
        ratio = (previous.z - cam[2]) / line[2]
        loc.x, loc.y, loc.z = (float(v) for v in ratio * line + cam)

    def _location_prediction(self) -> None:
        older, newer = self._location_cache
        for i, current in enumerate(self._location3d):
            do_pre = (
                all(abs(v) > EPSILON for v in (current.x, current.y, older[i].x, older[i].y, newer[i].x, newer[i].y))
                and self._location_pred_time[i] != 1
            )
            if do_pre:
                current.x = newer[i].x + PRE_RATIO * (newer[i].x - older[i].x)
                current.y = newer[i].y + PRE_RATIO * (newer[i].y - older[i].y)
            if abs(current.x) > EPSILON and abs(current.y) > EPSILON and self._location_pred_time[i] == 1:
                self._location_pred_time[i] = 0
            if do_pre and self._location_pred_time[i] == 0:
                self._location_pred_time[i] = PRE_TIME + 1
            if do_pre:
                self._location_pred_time[i] -= 1
        self._location_cache = [newer, [copy.copy(loc) for loc in self._location3d]]