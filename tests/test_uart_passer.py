import struct

import pytest

from radarstation.uart_passer import BOData, UARTPasser, bytes_to_float, bytes_to_int


def _frame(stage_byte, size=20):
    buffer = bytearray(size)
    buffer[0] = 0xA5
    buffer[7] = stage_byte
    return bytes(buffer)


def test_bytes_to_int_low_byte_first():
    assert bytes_to_int(0x34, 0x12) == 0x1234
    assert bytes_to_int(0xFF, 0x00) == 0xFF


@pytest.mark.parametrize("value", [0.0, 1.5, -12.25, 28.0])
def test_bytes_to_float_round_trip(value):
    assert bytes_to_float(struct.pack("<f", value)) == value


def test_bytes_to_float_needs_four_bytes():
    with pytest.raises(ValueError):
        bytes_to_float(b"\x00\x01")


def test_game_start_detected_once():
    passer = UARTPasser()
    passer.update_game_data(_frame(4 << 4))
    assert passer.now_stage == 4
    assert passer.remain_time == 420
    assert passer.set_max_flag
    assert passer.stage_name == "PLAYING"
    assert passer.one_compete_start() is True
    assert passer.one_compete_start() is False


def test_start_not_triggered_from_late_stage():
    passer = UARTPasser(now_stage=3)
    passer.update_game_data(_frame(4 << 4))
    assert passer.one_compete_start() is False
    assert passer.remain_time == 1


def test_game_end_counts_bo():
    passer = UARTPasser(now_stage=4)
    passer.max_hp = [1] * 12
    passer.update_game_data(_frame(5 << 4))
    assert passer.remain_time == 0
    assert passer.max_hp == passer.init_hp
    result = passer.one_compete_end()
    assert result.game_end_flag is True
    assert result.remain_bo == -2
    assert passer.bo == 1
    assert passer.one_compete_end() == BOData()


def test_robot_hp_decoding():
    values = [i * 100 + 1 for i in range(16)]
    buffer = bytearray(41)
    buffer[7:39] = struct.pack("<16H", *values)
    passer = UARTPasser()
    passer.update_robot_hp(bytes(buffer))
    assert passer.hp == values


def test_push_and_get_position_are_copies():
    passer = UARTPasser()
    location = [[float(i), float(i) + 0.5] for i in range(6)]
    passer.push_loc(location)
    position = passer.get_position()
    assert position == location
    position[0][0] = 100.0
    assert passer.get_position()[0][0] == 0.0


def test_get_message_reflects_state():
    passer = UARTPasser()
    passer.update_game_data(_frame(2 << 4))
    message = passer.get_message()
    assert message["stage"] == "CHECKING"
    assert message["remain_time"] == 420
    assert len(message["hp"]) == 16


def test_self_location_message_counted():
    passer = UARTPasser()
    passer.refree_map_location_self_message()
    passer.refree_map_location_self_message()
    assert passer.self_location_messages == 2


def test_receive_robot_data_condition():
    passer = UARTPasser()
    assert passer.receive_robot_data(bytes(7) + b"\x00\x02") is True
    assert passer.receive_robot_data(bytes(7) + b"\x01\x00") is True
    assert passer.receive_robot_data(bytes(9)) is False