import struct

import pytest

from radarstation.judge_crc import append_crc16, crc8, verify_crc8, verify_crc16
from radarstation.uart import UART, between_car_frame, map_frame


def build_frame(cmd_id, payload):
    head = bytes([0xA5]) + len(payload).to_bytes(2, "little") + bytes([0])
    head += bytes([crc8(head)])
    body = head + cmd_id.to_bytes(2, "little") + bytes(payload)
    return append_crc16(body + bytes(2))


def feed_all(uart, data):
    return [uart.feed(b) for b in data]


class FakeSerial:
    def __init__(self, incoming=b""):
        self.incoming = bytearray(incoming)
        self.written = []

    def read(self, size):
        chunk = bytes(self.incoming[:size])
        del self.incoming[:size]
        return chunk

    def write(self, data):
        self.written.append(bytes(data))
        return len(data)


def test_map_frame_layout():
    frame = map_frame(0x0305, 1, 3.5, -2.25)
    assert len(frame) == 23
    assert frame[:4] == bytes([0xA5, 14, 0, 0])
    assert verify_crc8(frame[:5])
    assert verify_crc16(frame)
    assert frame[5:7] == bytes([0x05, 0x03])
    assert frame[7] == 1
    assert struct.unpack("<ff", frame[9:17]) == (3.5, -2.25)
    assert frame[17:21] == bytes(4)


def test_between_car_frame_layout():
    data = bytes(range(48))
    frame = between_car_frame(0x0201, 109, 107, data)
    assert len(frame) == 63
    assert frame[:4] == bytes([0xA5, 54, 0, 0])
    assert verify_crc8(frame[:5])
    assert verify_crc16(frame)
    assert frame[5:7] == bytes([0x01, 0x03])
    assert frame[7:9] == bytes([0x01, 0x02])
    assert frame[9] == 109
    assert frame[11] == 107
    assert frame[13:61] == data


def test_between_car_frame_rejects_wrong_size():
    with pytest.raises(ValueError):
        between_car_frame(0x0201, 9, 7, bytes(47))


def test_control_loops_cycle():
    uart = UART(0)
    reds = []
    blues = []
    for _ in range(6):
        uart.control_loop_red()
        uart.control_loop_blue()
        reds.append(uart.id_red)
        blues.append(uart.id_blue)
    assert reds == [2, 3, 4, 5, 7, 1]
    assert blues == [102, 103, 104, 105, 107, 101]


def test_garbage_bytes_are_skipped():
    uart = UART(0)
    assert feed_all(uart, b"\x00\x11\x22") == [None, None, None]
    assert uart.buffer_count == 0


def test_game_result_frame_decoded():
    uart = UART(0)
    frame = build_frame(0x0002, [2])
    assert len(frame) == 10
    results = feed_all(uart, frame + b"\xa5")
    assert results[-1] == 0x0002
    assert uart.game_result.winner == 2
    assert uart.buffer_count == 1


def test_game_state_frame_starts_game():
    uart = UART(0)
    payload = [4 << 4] + [0] * 10
    frame = build_frame(0x0001, payload)
    assert len(frame) == 20
    feed_all(uart, frame + b"\xa5")
    assert uart.passer.now_stage == 4
    assert uart.passer.one_compete_start() is True


def test_robot_hp_frame_decoded():
    uart = UART(1)
    hps = [100 * (i + 1) for i in range(16)]
    payload = b"".join(hp.to_bytes(2, "little") for hp in hps)
    frame = build_frame(0x0003, payload)
    assert len(frame) == 41
    feed_all(uart, frame + b"\xa5")
    assert uart.passer.hp == hps


def test_consecutive_frames_decoded():
    uart = UART(0)
    warning = build_frame(0x0104, [3, 5])
    result = build_frame(0x0002, [1])
    # The trailing byte of each frame is the next frame's start byte.
    stream = warning + result[1:] + b"\xa5"
    handled = [r for r in feed_all(uart, stream) if r is not None]
    assert handled == [0x0104, 0x0002]
    assert uart.referee_warning.level == 3
    assert uart.referee_warning.foul_robot_id == 5
    assert uart.game_result.winner == 1


def test_bad_header_checksum_rejected():
    uart = UART(0)
    frame = bytearray(build_frame(0x0002, [2]))
    frame[4] ^= 0xFF
    results = feed_all(uart, bytes(frame) + b"\xa5")
    assert all(r is None for r in results)
    assert uart.game_result.winner == 0


def test_bad_body_checksum_rejected():
    uart = UART(0)
    frame = bytearray(build_frame(0x0004, [1, 2, 3]))
    frame[-1] ^= 0xFF
    results = feed_all(uart, bytes(frame) + b"\xa5")
    assert all(r is None for r in results)
    assert uart.dart_status.dart_belong == 0


def test_read_uses_serial_bytes():
    frame = build_frame(0x0101, [1, 2, 3, 4])
    ser = FakeSerial(frame + b"\xa5")
    uart = UART(0)
    results = [uart.read(ser) for _ in range(len(frame) + 1)]
    assert results[-1] == 0x0101
    assert uart.event_data.event_type == bytes([1, 2, 3, 4])
    assert uart.read(ser) is None


def test_write_sends_map_and_partner_frames():
    uart = UART(0)
    uart.write_interval = 0
    positions = [[float(i + 1), float(i + 2)] for i in range(6)]
    uart.passer.push_loc(positions)
    ser = FakeSerial()
    uart.write(ser)
    assert len(ser.written) == 2
    map_msg, car_msg = ser.written
    assert map_msg == map_frame(0x0305, 1, 1.0, 2.0)
    assert len(car_msg) == 63
    assert verify_crc16(car_msg)
    assert car_msg[9] == 109 and car_msg[11] == 107
    decoded = [list(struct.unpack("<ff", car_msg[13 + 8 * i:21 + 8 * i])) for i in range(6)]
    assert decoded == positions
    assert uart.ind == 1
    assert uart.id_red == 2
    assert uart.passer.loop_send == 1


def test_write_skips_map_frame_for_empty_location():
    uart = UART(1)
    uart.write_interval = 0
    ser = FakeSerial()
    uart.write(ser)
    assert len(ser.written) == 1
    assert ser.written[0][9] == 9 and ser.written[0][11] == 7
    assert uart.passer.loop_send == 0
    assert uart.id_blue == 102


def test_blue_target_used_when_enemy_is_red():
    uart = UART(1)
    uart.write_interval = 0
    uart.passer.push_loc([[5.0, 6.0]] * 6)
    ser = FakeSerial()
    uart.write(ser)
    assert ser.written[0] == map_frame(0x0305, 101, 5.0, 6.0)