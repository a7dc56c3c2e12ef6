# variolog

Offline tools for the binary data logs written by a GPS variometer, plus
altitude/climb-rate Kalman filters for analysing them. Everything is pure
Python and needs nothing outside the standard library.

A flash dump holds two kinds of little-endian, packed records:

* **IBG records** (magic `0xA55A`): a 4-byte header, nine IMU floats
  (gyro in deg/s, accelerometer in milli-g, magnetometer, all in NED axes),
  then a barometric altitude block whenever the baro or GPS flag is set,
  and a GPS navigation block when the GPS flag is set.
* **GPS track records** (magic `0x9043`): a 4-byte header and a UTC time
  stamped track point.

## Installation

```
pip install variolog
```

## Command-line tools

| Command | What it does |
|---|---|
| `variolog-ibginfo <ibglog>` | Prints the record sizes, counts the IMU, baro and GPS records of an IBG log, then prints one line per IMU, baro and GPS block. |
| `variolog-gpslog2gpx <gpslog>` | Converts a GPS track log to `<gpslog>.gpx`. |
| `variolog-ibglog2gpx <log> <year> <month> <day> <hour24> <minute>` | Converts a log of fixed 80-byte records (flags word, GPS solution, baro altitude, nine IMU words) to `<log>.gpx`, timing the points from the given start time. |
| `variolog-ibgsplit <ibglog> <maxDropoutMs>` | Splits an IBG log into `<ibglog>_00`, `<ibglog>_01`, ... wherever the GPS time of week jumps by more than the dropout. |
| `variolog-logsplit <log> <maxIBGDropoutSecs> <maxGpsDropoutSecs>` | Splits a mixed flash dump into `<log>_ibg_NN` and `<log>_gps_NN` files. |
| `variolog-route <formatgeo.wpt>` | Loads a FormatGEO waypoint file, lists the waypoints and prints the total route distance in km. |

Examples:

```
variolog-ibginfo datalog
variolog-ibgsplit datalog 200
variolog-logsplit datalog 1 10
variolog-gpslog2gpx datalog_gps_00
variolog-route task.wpt
```

`variolog-ibgsplit` exits with status 2 when the input is a GPS track log
and 3 on an unknown record magic; `variolog-logsplit` exits with 3 on an
unknown magic. Both exit with 1 when the input cannot be opened.

## Library use

### Reading logs (`variolog.records`)

```python
from variolog.records import parse_ibg_records, parse_log, read_track_records

with open("datalog_ibg_00", "rb") as stream:
    for record in parse_ibg_records(stream):
        print(record.header, record.imu, record.baro, record.gps)

with open("datalog_gps_00", "rb") as stream:
    for record in read_track_records(stream):
        print(record.trkpt)
```

* `parse_ibg_records(stream)` yields `IbgRecord`s and raises
  `LogFormatError` on a header without the IBG magic or on a record cut
  short by the end of the stream.
* `parse_log(stream)` yields both `IbgRecord`s and `GpsTrackRecord`s from a
  mixed dump, raising `LogFormatError` on an unknown magic.
* `read_track_records(stream)` yields complete `GpsTrackRecord`s and
  ignores a short tail.

The record classes (`IbgHeader`, `ImuRecord`, `BaroRecord`, `GpsRecord`,
`IbgRecord`, `GpsHeader`, `TrackPoint`, `GpsTrackRecord`) are frozen
dataclasses. `IbgRecord.to_bytes()` and `GpsTrackRecord.to_bytes()` write
records back in their binary form; `IbgRecord.to_bytes()` raises
`ValueError` when the header flags call for a baro or GPS block that is
missing.

### Record summaries (`variolog.ibginfo`)

`count_records(stream)` returns `(imu, baro, gps)` counts, counting a baro
record only when its baro flag is set. `format_records(stream)` yields the
text lines that `variolog-ibginfo` prints.

### GPX export (`variolog.gpx`)

```python
from variolog.gpx import track_to_gpx
from variolog.records import read_track_records

with open("datalog_gps_00", "rb") as stream:
    gpx_text = track_to_gpx(read_track_records(stream))
```

`ibg_to_gpx(records, start)` renders `GpsRecord`s, which carry only a GPS
time of week. Times are built from `start` (year to minute) by adding the
intervals between successive fixes; fixes with an unchanged time of week
are skipped. The hour is not wrapped into the next day.

### Splitting logs (`variolog.split`)

`split_ibg_log(path, max_dropout_ms)` and
`split_log(path, max_ibg_dropout_secs, max_gps_dropout_secs)` write the
split files next to the input and return their paths in order. Records
that come before the first detected stream start are not written.
`split_ibg_log` raises `NotAnIbgLogError` (a `LogFormatError`) when it meets
a GPS track record.

### Routes (`variolog.route`)

```python
from variolog.route import load_route, haversine_distance_m

route = load_route("task.wpt")
for waypoint in route.waypoints:
    print(waypoint.id, waypoint.lat_deg, waypoint.lon_deg, waypoint.alt_m, waypoint.radius_m)
print(route.total_distance_m() / 1000.0, "km")
```

A waypoint line is `ID N|S deg min sec E|W deg min sec altitude [radius]`.
IDs are cut to 9 characters, southern latitudes and western longitudes are
negative, and a missing radius gets the default of 50 m. Malformed waypoint
lines are skipped. A file without the `$FormatGEO` header, or with more than
100 waypoints, raises `RouteFormatError`. `parse_route(lines)` parses lines
already in memory; `haversine_distance_m` returns whole metres using the
WGS-84 mean earth radius.

### u-blox message configuration (`variolog.ubx`)

```python
from variolog.ubx import MessageType, enable_message, disable_message

packet = disable_message(MessageType.GLL)
```

`cfg_msg_packet(msg_class, msg_id, rate)` builds a UBX CFG-MSG packet for
any message (values must be 0..255), `ubx_checksum(data)` returns the
`(CK_A, CK_B)` pair, and `key_command(key)` maps `a`..`g` (disable) and
`A`..`G` (enable) to packets for GLL, RMC, VTG, GSV, GSA, GGA and NAV-PVT,
returning `None` for any other key.

### Kalman filters

Each filter estimates altitude and climb rate; `update(...)` returns
`(z, v)`:

* `variolog.kalman2.KalmanFilter2` — altitude and velocity from altitude
  measurements only. This module also holds the shared filter constants
  (`KF_ACCEL_VARIANCE`, `KF_Z_MEAS_VARIANCE`, `KF_SAMPLE_PERIOD_SECS`, ...).
* `variolog.kalman3.KalmanFilter3` — adds an accelerometer bias;
  acceleration drives `predict(a, dt)`.
* `variolog.kalman4.KalmanFilter4` — altitude and acceleration are both
  measurements, `update(zm, am)`; the full covariance is available as
  `covariance`.
* `variolog.kalman4d.KalmanFilter4D` — as above, injecting extra
  acceleration noise in proportion to the square of the external
  acceleration.

```python
from variolog.kalman4d import KalmanFilter4D

kf = KalmanFilter4D(100_000.0, 1.0, 50_000.0, 0.0, 0.0)
kf.predict(0.02)
altitude_cm, climbrate_cps = kf.update(50_010.0, 0.0)
```

Each update logs its state at DEBUG level through the `logging` module.

## What this package does not do

* It does not talk to a GPS receiver: `variolog.ubx` only builds packets,
  there is no serial terminal or keyboard loop to send them.
* No command runs the Kalman filters over a log, and there is no attitude
  (quaternion / yaw-pitch-roll) estimation from the IMU samples.

## Running the tests

```
pip install "variolog[test]"
pytest
```