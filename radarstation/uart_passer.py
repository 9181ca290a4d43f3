"""State kept from referee-system frames: game stage, robot HP and locations."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import Any

MAX_BO = 3
STAGES = ("NOT START", "PREPARING", "CHECKING", "5S", "PLAYING", "END")

logger = logging.getLogger("RadarLogger")


@dataclass
class BOData:
    """Outcome of checking whether a single match has ended."""

    game_end_flag: bool = False
    remain_bo: int = 0


def bytes_to_int(a: int, b: int) -> int:
    """Combine a low byte and a high byte into an integer."""
    return (a & 0xFF) | ((b & 0xFF) << 8)


def bytes_to_float(data: bytes) -> float:
    """Decode a little-endian 32-bit float from the first four bytes."""
    if len(data) < 4:
        raise ValueError("a float needs four bytes")
    return struct.unpack("<f", bytes(data[:4]))[0]


def _leading(value: int, size: int) -> list[int]:
    return [value] + [0] * (size - 1)


@dataclass
class UARTPasser:
    """Keeps the game data decoded from the referee serial link."""

    hp_up: list[int] = field(default_factory=lambda: [100, 150, 200, 250, 300, 350, 400, 450, 500])
    init_hp: list[int] = field(default_factory=lambda: _leading(500, 12))
    last_hp: list[int] = field(default_factory=lambda: _leading(500, 12))
    hp: list[int] = field(default_factory=lambda: _leading(500, 16))
    max_hp: list[int] = field(default_factory=lambda: _leading(500, 12))
    set_max_flag: bool = False
    robot_location: list[list[float]] = field(default_factory=lambda: [[0.0, 0.0] for _ in range(6)])
    bo: int = 0
    now_stage: int = 0
    game_start_flag: bool = False
    game_end_flag: bool = False
    remain_time: int = 1
    hp_thres: int = 10
    prevent_time: list[float] = field(default_factory=lambda: [2.0] * 6)
    event_prevent: list[float] = field(default_factory=lambda: [0.0] * 6)
    loop_send: int = 0
    self_location_messages: int = 0

    @property
    def stage_name(self) -> str:
        if 0 <= self.now_stage < len(STAGES):
            return STAGES[self.now_stage]
        return "UNKNOWN"

    def push_loc(self, location: list[list[float]]) -> None:
        """Replace the robot locations to be sent."""
        self.robot_location = [list(row) for row in location]

    def get_position(self) -> list[list[float]]:
        """Return a copy of the robot locations."""
        return [list(row) for row in self.robot_location]

    def get_message(self) -> dict[str, Any]:
        """Return a snapshot of the current game information."""
        return {
            "stage": self.stage_name,
            "remain_time": self.remain_time,
            "hp": list(self.hp),
            "bo": self.bo,
        }

    def refree_map_location_self_message(self) -> None:
        """Record that a self-location frame arrived."""
        self.self_location_messages += 1

    def update_game_data(self, buffer: bytes) -> None:
        """Update the game stage from a game-state frame."""
        stage = buffer[7] >> 4
        if self.now_stage < 2 and stage in (2, 3, 4):
            self.game_start_flag = True
            self.set_max_flag = True
            self.remain_time = 420
            logger.critical("GAME START !")
        if self.now_stage < 5 and stage == 5:
            self.game_end_flag = True
            logger.critical("GAME FINISH !")
            self.max_hp = list(self.init_hp)
            self.remain_time = 0
        self.now_stage = stage

    def update_robot_hp(self, buffer: bytes) -> None:
        """Decode the sixteen HP values of a robot-HP frame."""
        self.hp = [
            bytes_to_int(buffer[(i + 4) * 2 - 1], buffer[(i + 4) * 2]) for i in range(16)
        ]

    def one_compete_end(self) -> BOData:
        """Report, once, that a match has finished."""
        if not self.game_end_flag:
            return BOData()
        self.game_end_flag = False
        self.bo += 1
        return BOData(game_end_flag=True, remain_bo=self.bo - MAX_BO)

    def one_compete_start(self) -> bool:
        """Report, once, that a match has started."""
        if self.game_start_flag:
            self.game_start_flag = False
            return True
        return False

    def receive_robot_data(self, buffer: bytes) -> bool:
        """Note an inter-robot data frame; return whether it was recognised."""
        recognised = bool(buffer[7]) or (buffer[8] << 8) == 0x0200
        if recognised:
            logger.debug("Receive_Robot_Data")
        return recognised