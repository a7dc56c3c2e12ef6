import struct
from datetime import datetime

import pytest

from variolog.gpx import gpslog_main, ibg_to_gpx, ibglog_main, track_to_gpx
from variolog.records import (
    GPS_MAGIC,
    GpsHeader,
    GpsRecord,
    GpsTrackRecord,
    TrackPoint,
)

HEADER = '<?xml version="1.0"?>\n<gpx version="1.1">\r\n<trk><trkseg>\r\n'
CLOSE = "</trkseg></trk></gpx>\r\n"


def _track():
    return GpsTrackRecord(
        GpsHeader(GPS_MAGIC, 3, 9),
        TrackPoint(150, 2021, 3, 4, 5, 6, 7, 0, 15000000, -25000000, 100000),
    )


def _gps(tow):
    return GpsRecord(tow, 15000000, -25000000, 2000)


def test_empty_track():
    assert track_to_gpx([]) == HEADER + CLOSE


def test_track_point_line():
    text = track_to_gpx([_track()])
    assert text.startswith(HEADER) and text.endswith(CLOSE)
    assert 'lat="-2.500000" lon="1.500000"' in text
    assert "<time>2021-03-04T05:06:7Z</time>" in text


def test_ibg_skips_repeated_time_of_week():
    text = ibg_to_gpx([_gps(1000), _gps(2000), _gps(2000)], datetime(2020, 1, 2, 3, 4))
    assert text.count("<trkpt") == 2


def test_ibg_first_point_at_start_time():
    text = ibg_to_gpx([_gps(1000)], datetime(2020, 1, 2, 3, 4))
    assert "<time>2020-01-02T03:04:0.000000Z</time>" in text


def test_ibg_minute_and_hour_rollover():
    records = [_gps(1000), _gps(2000), _gps(62000)]
    text = ibg_to_gpx(records, datetime(2020, 1, 2, 23, 59))
    assert "T24:00:1.000000Z" in text


def test_gpslog_main_writes_file(tmp_path):
    path = tmp_path / "trk"
    path.write_bytes(_track().to_bytes() * 2)
    assert gpslog_main([str(path)]) == 0
    with open(str(path) + ".gpx", newline="") as f:
        assert f.read() == track_to_gpx([_track(), _track()])


def test_gpslog_main_missing_file(tmp_path):
    assert gpslog_main([str(tmp_path / "absent")]) == 1


def test_gpslog_main_usage():
    with pytest.raises(SystemExit):
        gpslog_main([])


def test_ibglog_main_reads_legacy_records(tmp_path):
    legacy = struct.Struct("<IIiiiIiiiIi9i")
    data = b"".join(
        legacy.pack(0, tow, 15000000, -25000000, 2000, 0, 0, 0, 0, 0, 0, *([0] * 9))
        for tow in (1000, 2000)
    )
    path = tmp_path / "ibg"
    path.write_bytes(data)
    assert ibglog_main([str(path), "2020", "1", "2", "3", "4"]) == 0
    with open(str(path) + ".gpx", newline="") as f:
        expected = ibg_to_gpx([_gps(1000), _gps(2000)], datetime(2020, 1, 2, 3, 4))
        assert f.read() == expected


def test_ibglog_main_invalid_date(tmp_path):
    path = tmp_path / "ibg"
    path.write_bytes(b"")
    assert ibglog_main([str(path), "2020", "13", "2", "3", "4"]) == 1