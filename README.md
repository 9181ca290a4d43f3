# radarstation

The non-hardware core of a field radar station: it turns armour detections
and depth maps into field coordinates and reports them to the referee
system over a serial link.

Install with `pip install .` (add `.[test]` for pytest). NumPy is the only
runtime dependency. The serial port support uses `termios` and `fcntl`, so
it needs a POSIX system.

## Modules

| Module | Purpose |
| --- | --- |
| `radarstation.judge_crc` | CRC-8 and CRC-16 used by referee frames: `crc8`, `crc16`, `verify_crc8`, `verify_crc16`, `append_crc8`, `append_crc16` |
| `radarstation.game_data` | Dataclasses for referee data: `GameState`, `GameResult`, `GameRobotHP`, `DartStatus`, `EventData`, `SupplyProjectileAction`, `RefereeWarning`, `DartRemainingTime`, `CustomData`, `GraphicData`, `RobotLocation` |
| `radarstation.uart_passer` | `UARTPasser`, the game state kept from referee frames (stage, HP, positions to send), `BOData`, and the helpers `bytes_to_int` and `bytes_to_float` |
| `radarstation.serial_port` | `SerialPort`: opens a device at 115200 8N1, non-blocking `read` and `write`, `close`; usable as a context manager |
| `radarstation.uart` | `UART`: byte-by-byte frame decoder and sender of map and robot-to-robot frames; `map_frame` and `between_car_frame` build those frames on their own |
| `radarstation.map_mapping` | `MapMapping`: camera-to-field transform, IoU-based box prediction, height correction and position prediction; the records `ArmorBoundingBox`, `DetectBox`, `BboxAndRect`, `MapLocation3D`; `rodrigues` and `undistort_point` |
| `radarstation.location` | `Location`: loads the calibration landmark file and returns the object points for a side |
| `radarstation.exp_log` | `ExpLog`: CSV output of recognition statistics |
| `radarstation.pointcloud_file` | `parse_point_line` and `read_frames` for recorded point-cloud text files |
| `radarstation.pipeline` | `armor_filter` and `detect_depth` for per-frame detections |
| `radarstation.radar_output` | `enemy_locations`, `locations_message` and `fps_label` for reporting results |

All modules log through the standard `logging` logger named `RadarLogger`;
configure handlers for it as you like.

## Checksums

Referee frames carry a CRC-8 over the five-byte header and a CRC-16 over
the whole frame, stored low byte first in the last two bytes.

```python
from radarstation.judge_crc import append_crc16, verify_crc8, verify_crc16

header_ok = verify_crc8(frame[:5])
frame_ok = verify_crc16(frame)
sealed = append_crc16(body + bytes(2))  # last two bytes replaced by the CRC
```

## Decoding referee traffic

`UART.feed` takes one byte at a time. When the byte completes a known
frame whose checksums match, the frame is applied (game result, game
stage, robot HP, dart status, events, supply actions, warnings, ...) and
`feed` returns the frame's command id; otherwise it returns `None`.

```python
from radarstation.uart import UART

uart = UART(enemy=0)
for byte in received:
    cmd_id = uart.feed(byte)

stage = uart.passer.stage_name
started = uart.passer.one_compete_start()
```

With a `SerialPort`, `uart.read(port)` reads the next byte from the port
and feeds it. `uart.write(port)` sends the map position of one robot (a
different one on each call, skipping positions at the origin) followed by
a robot-to-robot frame with all six positions, then pauses for
`uart.write_interval` seconds.

```python
from radarstation.serial_port import SerialPort

password = "password"
with SerialPort() as port:
    if port.open("/dev/ttyUSB0", password):
        uart.read(port)
        uart.write(port)
```

When a password is given, `open` first runs `sudo -S chmod a+rw` on the
device with that password on standard input.

## From detections to field positions

```python
from radarstation.map_mapping import MapMapping
from radarstation.pipeline import armor_filter, detect_depth
from radarstation.radar_output import enemy_locations

mapping = MapMapping()
mapping.push_transform(rvec, tvec)          # camera pose from calibration

pred = armor_filter(pred, range(12))        # best detection per class
detect_depth(pred, depth_map)               # mean non-zero depth in each box
guessed = mapping.iou_prediction(pred, car_boxes)
detect_depth(guessed, depth_map)
mapping.merge_update(pred, guessed, camera_matrix, dist_coeffs)

uart.passer.push_loc(enemy_locations(mapping.locations(), enemy=0))
```

`merge_update` raises `RuntimeError` until a pose has been set.
`locations()` returns twelve slots, one per robot; `locations_message`
turns them into a plain dictionary with a header and `id`/`x`/`y`
entries, and `fps_label` gives the `FPS n` overlay text for a frame time
in nanoseconds.

## Calibration landmarks

`Location.decode_map_points` reads a JSON file with a `Points` list
(`name`, `x`, `y`, `z`) and the landmark names to use when the enemy is red
(`when_enemy_red`) or blue (`when_enemy_blue`); it raises `ValueError` for
a file that is not a JSON object. `Location.object_points(enemy)` returns
the coordinates for the chosen side in that order.

## Experiment statistics

`ExpLog.init(directory)` creates `ExpData<YYYYmmdd HHMMSS>.csv` with a
header row and returns its path (`FileNotFoundError` if the directory is
missing); `write_row` appends a row, each field followed by a comma.

## Recorded point clouds

A recording holds one point per line, `x y z` with optional square
brackets, and a line `-e-` ends each frame. `read_frames` yields the frames
in order; an empty line ends the data, and points after the last `-e-` are
not yielded.

## What this package does not do

It has no command-line program or main loop. It does not capture camera
images, run detection or tracking models, receive lidar data or build
depth maps, publish messages to a robot middleware, record video, or
provide the interactive point picking and pose solving that produce the
calibration vectors: `rvec` and `tvec` must come from elsewhere. It does
not set up log handlers either.