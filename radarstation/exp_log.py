"""CSV output of per-frame recognition statistics for experiments."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterable
from os import PathLike
from typing import TextIO

logger = logging.getLogger("RadarLogger")

HEADER = ("识别数", "推理识别数", "平均置信度", "推理平均置信度", "耗时(ns)")


class ExpLog:
    """Writes experiment rows to a timestamped CSV file."""

    def __init__(self) -> None:
        self._file: TextIO | None = None
        self.path: str | None = None

    def __enter__(self) -> ExpLog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def init(self, output_dir: str | PathLike[str]) -> str:
        """Create ``ExpData<date time>.csv`` in ``output_dir`` and write the header.

        Returns the file path. Raises ``FileNotFoundError`` when the
        directory does not exist.
        """
        output_dir = os.fspath(output_dir)
        if not os.path.exists(output_dir):
            logger.error("[ERR] ExpOutputDir, non-existent")
            raise FileNotFoundError(f"experiment output directory {output_dir} does not exist")
        self.close()
        separator = "" if output_dir.endswith("/") else "/"
        stamp = time.strftime("%Y%m%d %H%M%S")
        self.path = f"{output_dir}{separator}ExpData{stamp}.csv"
        self._file = open(self.path, "w", encoding="utf-8", newline="")
        self._file.write(",".join(HEADER) + "\n")
        self._file.flush()
        return self.path

    def write_row(self, row: Iterable[object]) -> None:
        """Append one row, each field followed by a comma; ignored when not open."""
        if self._file is None:
            return
        self._file.write("".join(f"{item}," for item in row) + "\n")
        self._file.flush()

    def close(self) -> None:
        """Flush and close the file if it is open."""
        if self._file is not None:
            try:
                self._file.flush()
                self._file.close()
            finally:
                self._file = None