"""Reading recorded point clouds from text files, one point per line."""

from __future__ import annotations

from collections.abc import Iterator
from os import PathLike

FRAME_END = "-e-"

Point = tuple[float, float, float]


def parse_point_line(line: str) -> Point:
    """Parse ``[x y z]`` (brackets optional) into a point.

    Extra fields are ignored; raises ``ValueError`` if three numbers
    cannot be read.
    """
    fields = line.replace("[", "").replace("]", "").split()
    if len(fields) < 3:
        raise ValueError(f"point line needs three coordinates: {line!r}")
    try:
        x, y, z = (float(value) for value in fields[:3])
    except ValueError as exc:
        raise ValueError(f"invalid point line: {line!r}") from exc
    return x, y, z


def read_frames(path: str | PathLike[str]) -> Iterator[list[Point]]:
    """Yield each frame of points in the file.

    A line ``-e-`` ends a frame. An empty line or the end of the file ends
    the data; points after the last ``-e-`` do not form a frame.
    """
    with open(path, encoding="utf-8") as handle:
        cloud: list[Point] = []
        for raw in handle:
            line = raw.rstrip("\n")
            if line == "":
                return
            if line == FRAME_END:
                yield cloud
                cloud = []
            else:
                cloud.append(parse_point_line(line))