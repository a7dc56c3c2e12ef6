"""Split a binary flash dump into separate IBG and GPS track log files.

A new output file is started whenever the time stamps of successive records
jump by more than the allowed dropout.
"""

from __future__ import annotations

import argparse
import os
import sys
from itertools import count
from typing import BinaryIO, List, Optional, Union

from .records import GpsTrackRecord, LogFormatError, TrackPoint, parse_log


class NotAnIbgLogError(LogFormatError):
    """Raised when a GPS track log is given where an IBG log is expected."""


class _Output:
    """The output file that records are currently written to."""

    def __init__(self) -> None:
        self._file: Optional[BinaryIO] = None
        self.paths: List[str] = []

    def __enter__(self) -> "_Output":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def start(self, path: str) -> None:
        self.close()
        self._file = open(path, "wb")
        self.paths.append(path)

    def write(self, data: bytes) -> None:
        # Records that come before the first stream start belong to no file.
        if self._file is not None:
            self._file.write(data)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


def _track_seconds(trkpt: TrackPoint) -> int:
    return (
        trkpt.utc_day * 86400
        + trkpt.utc_hour * 3600
        + trkpt.utc_minute * 60
        + trkpt.utc_second
    )


def split_ibg_log(path: Union[str, os.PathLike], max_dropout_ms: int) -> List[str]:
    """Split an IBG log into ``<path>_NN`` files at GPS time-of-week gaps.

    Returns the paths of the files written, in order.
    """
    path = os.fspath(path)
    counter = count()
    towms = 0
    with open(path, "rb") as stream, _Output() as out:
        for record in parse_log(stream):
            if isinstance(record, GpsTrackRecord):
                raise NotAnIbgLogError(
                    "data log is a GPS track file, not an IBG log file"
                )
            if record.gps is not None:
                tow = record.gps.time_of_week_ms
                if abs(tow - towms) > max_dropout_ms:
                    out.start(f"{path}_{next(counter):02d}")
                towms = tow
            out.write(record.to_bytes())
    return out.paths


def split_log(
    path: Union[str, os.PathLike],
    max_ibg_dropout_secs: int,
    max_gps_dropout_secs: int,
) -> List[str]:
    """Split a mixed flash dump into ``<path>_ibg_NN`` and ``<path>_gps_NN`` files.

    Returns the paths of the files written, in order.
    """
    path = os.fspath(path)
    ibg_counter = count()
    gps_counter = count()
    ibg_time = 0
    gps_time = 0
    with open(path, "rb") as stream, _Output() as out:
        for record in parse_log(stream):
            if isinstance(record, GpsTrackRecord):
                new_time = _track_seconds(record.trkpt)
                if abs(new_time - gps_time) > max_gps_dropout_secs:
                    out.start(f"{path}_gps_{next(gps_counter):02d}")
                gps_time = new_time
            elif record.gps is not None:
                tow = record.gps.time_of_week_ms
                if abs(tow - ibg_time) > max_ibg_dropout_secs * 1000:
                    out.start(f"{path}_ibg_{next(ibg_counter):02d}")
                ibg_time = tow
            out.write(record.to_bytes())
    return out.paths


def ibgsplit_main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="ibglogsplit", description="Split an IBG log at GPS dropouts."
    )
    parser.add_argument("path", help="binary IBG log file")
    parser.add_argument("max_dropout_ms", type=int, help="maximum dropout in ms")
    args = parser.parse_args(argv)
    try:
        paths = split_ibg_log(args.path, args.max_dropout_ms)
    except NotAnIbgLogError:
        print("\nData log is a GPS track file, not an IBG log file")
        return 2
    except LogFormatError as exc:
        print(f"\nError : {exc}, unknown type of file")
        return 3
    except OSError as exc:
        print(f"error opening {args.path}: {exc}", file=sys.stderr)
        return 1
    for out_path in paths:
        print(f"new stream found {out_path}")
    return 0


def logsplit_main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="logsplit", description="Split a flash dump into IBG and GPS logs."
    )
    parser.add_argument("path", help="binary log file")
    parser.add_argument("max_ibg_dropout_secs", type=int)
    parser.add_argument("max_gps_dropout_secs", type=int)
    args = parser.parse_args(argv)
    try:
        paths = split_log(
            args.path, args.max_ibg_dropout_secs, args.max_gps_dropout_secs
        )
    except LogFormatError as exc:
        print(f"\nError : {exc}")
        return 3
    except OSError as exc:
        print(f"error opening {args.path}: {exc}", file=sys.stderr)
        return 1
    for out_path in paths:
        print(f"new log {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(logsplit_main())