"""Convert GPS track logs and IBG logs to GPX track files."""

from __future__ import annotations

import argparse
import struct
import sys
from datetime import datetime
from typing import BinaryIO, Iterable, Iterator

from .records import GpsRecord, GpsTrackRecord, read_track_records

GPX_HEADER = '<?xml version="1.0"?>\n<gpx version="1.1">\r\n'
GPX_OPEN = "<trk><trkseg>\r\n"
GPX_CLOSE = "</trkseg></trk></gpx>\r\n"

# Legacy IBG record layout: flags, GPS solution, baro altitude and 9 IMU words.
_LEGACY_IBG = struct.Struct("<IIiiiIiiiIi9i")


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _position(lat_deg7: int, lon_deg7: int, height_mm: int):
    lat = _f32(_f32(lat_deg7) / 10000000.0)
    lon = _f32(_f32(lon_deg7) / 10000000.0)
    alt = _f32(_f32(height_mm) / 1000.0)
    return lat, lon, alt


def track_to_gpx(records: Iterable[GpsTrackRecord]) -> str:
    """Render GPS track records as a GPX document."""
    parts = [GPX_HEADER, GPX_OPEN]
    for record in records:
        t = record.trkpt
        lat, lon, alt = _position(t.lat_deg7, t.lon_deg7, t.height_msl_mm)
        parts.append(
            f'<trkpt lat="{lat:f}" lon="{lon:f}"> <ele>{alt:f}</ele> '
            f"<time>{t.utc_year}-{t.utc_month:02d}-{t.utc_day:02d}T"
            f"{t.utc_hour:02d}:{t.utc_minute:02d}:{t.utc_second}Z</time> </trkpt>\r\n"
        )
    parts.append(GPX_CLOSE)
    return "".join(parts)


def ibg_to_gpx(records: Iterable[GpsRecord], start: datetime) -> str:
    """Render GPS solutions as a GPX document.

    Time stamps are reconstructed from ``start`` (year to minute) by adding
    the time-of-week intervals between successive records; records with an
    unchanged time of week are skipped.
    """
    year, month, day = start.year, start.month, start.day
    hour, minute = start.hour, start.minute
    second = 0.0
    towms = 0
    parts = [GPX_HEADER, GPX_OPEN]
    for gps in records:
        interval_ms = abs(gps.time_of_week_ms - towms)
        if not interval_ms:
            continue
        lat, lon, alt = _position(gps.lat_deg7, gps.lon_deg7, gps.height_msl_mm)
        if towms:
            second = _f32(second + _f32(interval_ms / 1000.0))
        towms = gps.time_of_week_ms
        while second > 60.0:
            second = _f32(second - 60.0)
            minute += 1
        while minute > 59:
            minute -= 60
            hour += 1
        parts.append(
            f'<trkpt lat="{lat:f}" lon="{lon:f}"> <ele>{alt:f}</ele> '
            f"<time>{year}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:f}Z"
            f"</time> </trkpt>\r\n"
        )
    parts.append(GPX_CLOSE)
    return "".join(parts)


def _read_legacy_ibg(stream: BinaryIO) -> Iterator[GpsRecord]:
    while True:
        data = stream.read(_LEGACY_IBG.size)
        if len(data) != _LEGACY_IBG.size:
            return
        fields = _LEGACY_IBG.unpack(data)
        yield GpsRecord(*fields[1:10])


def _write_gpx(path: str, text: str) -> None:
    with open(path, "w", newline="") as out:
        out.write(text)


def gpslog_main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="gpslog2gpx", description="Convert a GPS track log to GPX."
    )
    parser.add_argument("path", help="binary GPS track log")
    args = parser.parse_args(argv)
    out_path = f"{args.path}.gpx"
    try:
        with open(args.path, "rb") as stream:
            print(f"\nSaving to {out_path}")
            _write_gpx(out_path, track_to_gpx(read_track_records(stream)))
    except OSError as exc:
        print(f"error converting {args.path}: {exc}", file=sys.stderr)
        return 1
    return 0


def ibglog_main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="ibglog2gpx", description="Convert an IBG log to GPX."
    )
    parser.add_argument("path", help="binary IBG log")
    for name in ("year", "month", "day", "hour24", "minute"):
        parser.add_argument(name, type=int)
    args = parser.parse_args(argv)
    try:
        start = datetime(args.year, args.month, args.day, args.hour24, args.minute)
    except ValueError as exc:
        print(f"invalid start time: {exc}", file=sys.stderr)
        return 1
    out_path = f"{args.path}.gpx"
    try:
        with open(args.path, "rb") as stream:
            print(
                f"\nSaving to {out_path}, log starts at {start.year}/{start.month:02d}/"
                f"{start.day:02d} {start.hour:02d}:{start.minute:02d}:00"
            )
            _write_gpx(out_path, ibg_to_gpx(_read_legacy_ibg(stream), start))
    except OSError as exc:
        print(f"error converting {args.path}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(gpslog_main())