"""Game information records received from the referee system."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GameState:
    game_type: int = 4
    game_progress: int = 4
    stage_remain_time: bytes = bytes(2)


@dataclass
class GameResult:
    winner: int = 0


@dataclass
class GameRobotHP:
    red_1_robot_hp: bytes = bytes(2)
    red_2_robot_hp: bytes = bytes(2)
    red_3_robot_hp: bytes = bytes(2)
    red_4_robot_hp: bytes = bytes(2)
    red_5_robot_hp: bytes = bytes(2)
    red_7_robot_hp: bytes = bytes(2)
    red_outpost_hp: bytes = bytes(2)
    red_base_hp: bytes = bytes(2)
    blue_1_robot_hp: bytes = bytes(2)
    blue_2_robot_hp: bytes = bytes(2)
    blue_3_robot_hp: bytes = bytes(2)
    blue_4_robot_hp: bytes = bytes(2)
    blue_5_robot_hp: bytes = bytes(2)
    blue_7_robot_hp: bytes = bytes(2)
    blue_outpost_hp: bytes = bytes(2)
    blue_base_hp: bytes = bytes(2)


@dataclass
class DartStatus:
    dart_belong: int = 0
    stage_remaining_time: bytes = bytes(2)


@dataclass
class EventData:
    event_type: bytes = bytes(4)


@dataclass
class SupplyProjectileAction:
    supply_projectile_id: int = 0
    supply_robot_id: int = 0
    supply_projectile_step: int = 0
    supply_projectile_num: int = 0


@dataclass
class RefereeWarning:
    level: int = 0
    foul_robot_id: int = 0


@dataclass
class DartRemainingTime:
    time: int = 0


@dataclass
class CustomData:
    data1: bytes = bytes(4)
    data2: bytes = bytes(4)
    data3: bytes = bytes(4)
    masks: int = 0


@dataclass
class GraphicData:
    data: list[int] = field(default_factory=list)
    datalength: int = 0
    graphic_name: bytes = bytes(4)
    operate_type: bytes = bytes(4)
    graphic_type: bytes = bytes(4)
    layer: bytes = bytes(4)
    color: bytes = bytes(4)
    start_angle: bytes = bytes(4)
    end_angle: bytes = bytes(4)
    width: bytes = bytes(4)
    start_x: bytes = bytes(4)
    start_y: bytes = bytes(4)
    radius: bytes = bytes(4)
    end_x: bytes = bytes(4)
    end_y: bytes = bytes(4)

    def add(self) -> None:
        """Reset the payload and mark the record as an add operation."""
        self.data = []
        self.datalength = 15


@dataclass
class RobotLocation:
    loc: list[list[float]] = field(default_factory=lambda: [[0.0] * 5 for _ in range(2)])

    def push(self, loc: list[list[float]]) -> None:
        """Replace the stored locations."""
        self.loc = [list(row) for row in loc]