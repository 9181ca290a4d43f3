"""Referee-system serial protocol: frame decoding and location reporting."""

from __future__ import annotations

import logging
import struct
import time
from collections.abc import Callable
from typing import Protocol

from radarstation.game_data import (
    DartRemainingTime,
    DartStatus,
    EventData,
    GameResult,
    GameRobotHP,
    GameState,
    RefereeWarning,
    SupplyProjectileAction,
)
from radarstation.judge_crc import append_crc16, crc8, verify_crc8, verify_crc16
from radarstation.uart_passer import UARTPasser

logger = logging.getLogger("RadarLogger")

SOF = 0xA5
MAP_CMD_ID = 0x0305
BETWEEN_CAR_DATA_ID = 0x0201
BETWEEN_CAR_PAYLOAD = 48
MAX_BUFFER_INDEX = 50


class SerialLink(Protocol):
    def read(self, size: int) -> bytes: ...

    def write(self, data: bytes) -> int: ...


def _header(data_length: int) -> bytes:
    head = bytes([SOF]) + data_length.to_bytes(2, "little") + bytes([0])
    return head + bytes([crc8(head)])


def map_frame(cmd_id: int, target_id: int, x: float, y: float) -> bytes:
    """Build the 23-byte frame reporting one robot's position on the map."""
    body = (
        _header(14)
        + (cmd_id & 0xFFFF).to_bytes(2, "little")
        + bytes([target_id & 0xFF, 0])
        + struct.pack("<ff", x, y)
        + bytes(4)
    )
    return append_crc16(body + bytes(2))


def between_car_frame(data_id: int, sender_id: int, receiver_id: int, data: bytes) -> bytes:
    """Build the 63-byte inter-robot frame carrying 48 bytes of ``data``."""
    data = bytes(data)
    if len(data) != BETWEEN_CAR_PAYLOAD:
        raise ValueError(f"inter-robot data must be {BETWEEN_CAR_PAYLOAD} bytes, got {len(data)}")
    body = (
        _header(54)
        + bytes([0x01, 0x03])
        + (data_id & 0xFFFF).to_bytes(2, "little")
        + bytes([sender_id & 0xFF, 0, receiver_id & 0xFF, 0])
        + data
    )
    return append_crc16(body + bytes(2))


class UART:
    """Decodes referee frames byte by byte and sends locations to the referee."""

    def __init__(self, enemy: int) -> None:
        self.enemy = enemy
        self.ind = 0
        self.id_red = 1
        self.id_blue = 101
        self.buffer_count = 0
        self.buffer = bytearray(1000)
        self.cmd_id = 0
        self.write_interval = 0.01
        self.passer = UARTPasser()
        self.game_state = GameState()
        self.game_result = GameResult()
        self.game_robot_hp = GameRobotHP()
        self.dart_status = DartStatus()
        self.event_data = EventData()
        self.supply_projectile_action = SupplyProjectileAction()
        self.referee_warning = RefereeWarning()
        self.dart_remaining_time = DartRemainingTime()
        ignore: Callable[[bytes], None] = lambda _buf: None
        self._handlers: dict[tuple[int, int], Callable[[bytes], None]] = {
            (25, 0x0203): lambda _buf: self.passer.refree_map_location_self_message(),
            (10, 0x0002): self._game_result,
            (20, 0x0001): self.passer.update_game_data,
            (41, 0x0003): self.passer.update_robot_hp,
            (12, 0x0004): self._dart_status,
            (13, 0x0101): self._event_data,
            (13, 0x0102): self._supply_projectile_action,
            (11, 0x0104): self._referee_warning,
            (10, 0x0105): self._dart_remaining_time,
            (17, 0x0301): self.passer.receive_robot_data,
            (25, 0x0202): ignore,
            (27, 0x0201): ignore,
            (10, 0x0204): ignore,
            (10, 0x0206): ignore,
            (13, 0x0209): ignore,
            (20, 0x0301): ignore,
            (36, 0x020B): ignore,
            (4, 0x0104): ignore,
        }

    def _game_result(self, buf: bytes) -> None:
        self.game_result.winner = buf[7]

    def _dart_status(self, buf: bytes) -> None:
        self.dart_status.dart_belong = buf[7]
        self.dart_status.stage_remaining_time = bytes(buf[8:10])

    def _event_data(self, buf: bytes) -> None:
        self.event_data.event_type = bytes(buf[7:11])

    def _supply_projectile_action(self, buf: bytes) -> None:
        action = self.supply_projectile_action
        action.supply_projectile_id = buf[7]
        action.supply_robot_id = buf[8]
        action.supply_projectile_step = buf[9]
        action.supply_projectile_num = buf[10]

    def _referee_warning(self, buf: bytes) -> None:
        self.referee_warning.level = buf[7]
        self.referee_warning.foul_robot_id = buf[8]

    def _dart_remaining_time(self, buf: bytes) -> None:
        self.dart_remaining_time.time = buf[8]

    def _restart(self) -> None:
        self.buffer_count = 1 if self.buffer[0] == SOF else 0

    def feed(self, byte: int) -> int | None:
        """Take one received byte; return the command id of a frame it completes."""
        if self.buffer_count > MAX_BUFFER_INDEX:
            self.buffer_count = 0
        count = self.buffer_count
        self.buffer[count] = byte & 0xFF
        if count == 0 and self.buffer[0] != SOF:
            return None
        if count == 5 and not verify_crc8(bytes(self.buffer[:5])):
            self.buffer_count = 0
            self._restart()
            return None
        if count == 7:
            self.cmd_id = self.buffer[5] | (self.buffer[6] << 8)
        handler = self._handlers.get((count, self.cmd_id))
        if handler is not None and verify_crc16(bytes(self.buffer[:count])):
            handler(bytes(self.buffer))
            self._restart()
            return self.cmd_id
        self.buffer_count += 1
        return None

    def read(self, ser: SerialLink) -> int | None:
        """Read one byte from ``ser`` and feed it to the decoder."""
        data = ser.read(1)
        if not data:
            return None
        return self.feed(data[0])

    def control_loop_red(self) -> None:
        """Advance to the next red robot id: 1..5, then 7, then back to 1."""
        if self.id_red == 5:
            self.id_red = 7
        elif self.id_red == 7:
            self.id_red = 1
        else:
            self.id_red += 1

    def control_loop_blue(self) -> None:
        """Advance to the next blue robot id: 101..105, then 107, then back to 101."""
        if self.id_blue == 105:
            self.id_blue = 107
        elif self.id_blue == 107:
            self.id_blue = 101
        else:
            self.id_blue += 1

    def _transmit_map(self, ser: SerialLink) -> None:
        x, y = self.passer.get_position()[self.ind][:2]
        if x != 0 or y != 0:
            target = self.id_blue if self.enemy else self.id_red
            ser.write(map_frame(MAP_CMD_ID, target, x, y))
            self.passer.loop_send += 1
        self.control_loop_red()
        self.control_loop_blue()
        self.ind = (self.ind + 1) % 6

    def write(self, ser: SerialLink) -> None:
        """Send one robot's map position and all six positions to the partner robot."""
        self._transmit_map(ser)
        receiver_id = 7 if self.enemy else 107
        sender_id = 9 if self.enemy else 109
        positions = self.passer.get_position()
        if len(positions) < 6:
            raise ValueError("six robot positions are needed")
        data = b"".join(struct.pack("<ff", pos[0], pos[1]) for pos in positions[:6])
        ser.write(between_car_frame(BETWEEN_CAR_DATA_ID, sender_id, receiver_id, data))
        if self.write_interval > 0:
            time.sleep(self.write_interval)