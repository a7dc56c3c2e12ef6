"""Summarise and list the records of an IBG binary log."""

from __future__ import annotations

import argparse
import struct
import sys
from typing import BinaryIO, Iterator, Tuple

from .records import (
    HEADER_SIZE,
    IBG_RECORD_MAX_SIZE,
    ImuRecord,
    LogFormatError,
    parse_ibg_records,
)


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _deg7(value: int) -> float:
    return _f32(_f32(value) / 10000000.0)


def _trunc_div(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


def count_records(stream: BinaryIO) -> Tuple[int, int, int]:
    """Return the numbers of (imu, baro, gps) records in the log.

    A baro record is counted only when its baro flag is set.
    """
    imu = baro = gps = 0
    for record in parse_ibg_records(stream):
        imu += 1
        if record.header.baro_flags:
            baro += 1
        if record.header.gps_flags:
            gps += 1
    return imu, baro, gps


def format_records(stream: BinaryIO) -> Iterator[str]:
    """Yield one text line per IMU, baro and GPS block in the log."""
    for record in parse_ibg_records(stream):
        imu = record.imu
        yield (
            f"IMU : {imu.gx_ned_dps:f} {imu.gy_ned_dps:f} {imu.gz_ned_dps:f} "
            f"{imu.ax_ned_mg:f} {imu.ay_ned_mg:f} {imu.az_ned_mg:f}"
        )
        if record.baro is not None:
            yield f"BARO : {record.baro.height_msl_cm}"
        if record.gps is not None:
            gps = record.gps
            yield (
                f"GPS : {gps.time_of_week_ms} {_deg7(gps.lon_deg7):f} "
                f"{_deg7(gps.lat_deg7):f} {_trunc_div(gps.height_msl_mm, 10)}"
            )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="ibginfo", description="Count and list the records of an IBG log."
    )
    parser.add_argument("path", help="IBG binary log file")
    args = parser.parse_args(argv)

    print(f"sizeof IBG_HDR = {HEADER_SIZE}")
    print(f"sizeof I_RECORD = {ImuRecord.FORMAT.size}")
    print(f"sizeof FLASHLOG_IBG_RECORD = {IBG_RECORD_MAX_SIZE}\n")

    try:
        with open(args.path, "rb") as stream:
            try:
                imu, baro, gps = count_records(stream)
            except LogFormatError as exc:
                print(f"Error : {exc}")
            else:
                print(f"Found {imu} imu records")
                print(f"Found {baro} baro records")
                print(f"Found {gps} gps records\n")

            stream.seek(0)
            try:
                for line in format_records(stream):
                    print(line)
            except LogFormatError as exc:
                print(f"\nError : {exc}")
                return 1
    except OSError as exc:
        print(f"error opening {args.path}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())