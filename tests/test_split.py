import io

import pytest

from variolog.records import (
    BaroRecord,
    GpsHeader,
    GpsRecord,
    GpsTrackRecord,
    IbgHeader,
    IbgRecord,
    ImuRecord,
    LogFormatError,
    TrackPoint,
    parse_ibg_records,
    parse_log,
)
from variolog.split import (
    NotAnIbgLogError,
    ibgsplit_main,
    logsplit_main,
    split_ibg_log,
    split_log,
)


def ibg(tow=None, gx=0.0):
    if tow is None:
        return IbgRecord(IbgHeader(), ImuRecord(gx_ned_dps=gx))
    return IbgRecord(
        IbgHeader(gps_flags=1, baro_flags=1),
        ImuRecord(gx_ned_dps=gx),
        BaroRecord(height_msl_cm=12345),
        GpsRecord(time_of_week_ms=tow),
    )


def track(day, hour, minute, second):
    return GpsTrackRecord(
        GpsHeader(fix_type=3, num_sv=8),
        TrackPoint(
            utc_year=2021,
            utc_month=6,
            utc_day=day,
            utc_hour=hour,
            utc_minute=minute,
            utc_second=second,
        ),
    )


def write_log(path, records, tail=b""):
    path.write_bytes(b"".join(r.to_bytes() for r in records) + tail)
    return str(path)


IBG_RECORDS = [ibg(1000), ibg(gx=1.5), ibg(1100), ibg(5000), ibg(5100)]


def test_split_ibg_log_starts_new_file_at_dropout(tmp_path):
    path = write_log(tmp_path / "datalog", IBG_RECORDS)
    paths = split_ibg_log(path, 200)
    assert paths == [f"{path}_00", f"{path}_01"]
    with open(paths[0], "rb") as f:
        assert f.read() == b"".join(r.to_bytes() for r in IBG_RECORDS[:3])
    with open(paths[1], "rb") as f:
        assert f.read() == b"".join(r.to_bytes() for r in IBG_RECORDS[3:])


def test_split_ibg_log_round_trips_records(tmp_path):
    path = write_log(tmp_path / "datalog", IBG_RECORDS)
    paths = split_ibg_log(path, 200)
    recovered = []
    for out_path in paths:
        with open(out_path, "rb") as f:
            recovered.extend(parse_ibg_records(f))
    assert recovered == IBG_RECORDS


def test_split_ibg_log_large_dropout_keeps_one_file(tmp_path):
    path = write_log(tmp_path / "datalog", IBG_RECORDS)
    assert split_ibg_log(path, 10000) == []  # first tow within dropout of zero
    path2 = write_log(tmp_path / "other", IBG_RECORDS)
    assert split_ibg_log(path2, 500) == [f"{path2}_00", f"{path2}_01"]


def test_split_ibg_log_ignores_short_tail(tmp_path):
    path = write_log(tmp_path / "datalog", IBG_RECORDS, tail=b"\x5a")
    paths = split_ibg_log(path, 200)
    assert len(paths) == 2


def test_split_ibg_log_rejects_gps_track_file(tmp_path):
    path = write_log(tmp_path / "track", [track(1, 10, 0, 0)])
    with pytest.raises(NotAnIbgLogError):
        split_ibg_log(path, 200)


def test_split_ibg_log_rejects_unknown_magic(tmp_path):
    path = tmp_path / "junk"
    path.write_bytes(b"\x00\x00\x00\x00" + bytes(36))
    with pytest.raises(LogFormatError):
        split_ibg_log(str(path), 200)


def test_split_log_separates_ibg_and_gps(tmp_path):
    records = [
        ibg(5000),
        ibg(5500),
        track(1, 10, 0, 0),
        track(1, 10, 0, 5),
        track(1, 10, 1, 0),
    ]
    path = write_log(tmp_path / "datalog", records)
    paths = split_log(path, 1, 10)
    assert paths == [f"{path}_ibg_00", f"{path}_gps_00", f"{path}_gps_01"]
    with open(paths[0], "rb") as f:
        assert list(parse_log(f)) == records[:2]
    with open(paths[1], "rb") as f:
        assert list(parse_log(f)) == records[2:4]
    with open(paths[2], "rb") as f:
        assert list(parse_log(f)) == records[4:]


def test_split_log_rejects_unknown_magic(tmp_path):
    path = tmp_path / "junk"
    path.write_bytes(b"\x11\x22\x00\x00" + bytes(36))
    with pytest.raises(LogFormatError):
        split_log(str(path), 1, 10)


def test_ibgsplit_main_writes_files(tmp_path, capsys):
    path = write_log(tmp_path / "datalog", IBG_RECORDS)
    assert ibgsplit_main([path, "200"]) == 0
    assert (tmp_path / "datalog_01").exists()
    assert "new stream found" in capsys.readouterr().out


def test_ibgsplit_main_reports_gps_log(tmp_path):
    path = write_log(tmp_path / "track", [track(1, 10, 0, 0)])
    assert ibgsplit_main([path, "200"]) == 2


def test_logsplit_main_missing_file(tmp_path):
    assert logsplit_main([str(tmp_path / "missing"), "1", "10"]) == 1


def test_split_ibg_log_accepts_stream_free_path_object(tmp_path):
    path = tmp_path / "datalog"
    write_log(path, IBG_RECORDS)
    paths = split_ibg_log(path, 200)
    data = open(paths[0], "rb").read()
    assert list(parse_ibg_records(io.BytesIO(data))) == IBG_RECORDS[:3]