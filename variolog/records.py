"""Binary flash log records: IMU/baro/GPS (IBG) samples and GPS track points.

All records are little-endian and packed, exactly as they are stored in the
data logger's flash.
"""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass
from typing import BinaryIO, ClassVar, Iterator, Optional, Union

IBG_MAGIC = 0xA55A
GPS_MAGIC = 0x9043


class LogFormatError(ValueError):
    """Raised when a binary log does not have the expected layout."""


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise LogFormatError(
            f"truncated {what}: expected {size} bytes, got {len(data)}"
        )
    return data


class _Packed:
    """Mixin for flat dataclasses that map onto one struct layout."""

    FORMAT: ClassVar[struct.Struct]

    @classmethod
    def from_bytes(cls, data: bytes):
        return cls(*cls.FORMAT.unpack(data))

    def to_bytes(self) -> bytes:
        return self.FORMAT.pack(*astuple(self))


@dataclass(frozen=True)
class IbgHeader(_Packed):
    """Header that precedes every IBG record."""

    magic: int = IBG_MAGIC
    gps_flags: int = 0
    baro_flags: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<HBB")


@dataclass(frozen=True)
class ImuRecord(_Packed):
    """Gyro (deg/s), accelerometer (milli-g) and magnetometer samples in NED axes."""

    gx_ned_dps: float = 0.0
    gy_ned_dps: float = 0.0
    gz_ned_dps: float = 0.0
    ax_ned_mg: float = 0.0
    ay_ned_mg: float = 0.0
    az_ned_mg: float = 0.0
    mx_ned: float = 0.0
    my_ned: float = 0.0
    mz_ned: float = 0.0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<9f")


@dataclass(frozen=True)
class BaroRecord(_Packed):
    """Barometric altitude above mean sea level, in centimetres."""

    height_msl_cm: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<i")


@dataclass(frozen=True)
class GpsRecord(_Packed):
    """GPS navigation solution stored inside an IBG record."""

    time_of_week_ms: int = 0
    lon_deg7: int = 0
    lat_deg7: int = 0
    height_msl_mm: int = 0
    vert_accuracy_mm: int = 0
    vel_north_mmps: int = 0
    vel_east_mmps: int = 0
    vel_down_mmps: int = 0
    vel_accuracy_mmps: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<IiiiIiiiI")


@dataclass(frozen=True)
class IbgRecord:
    """One IBG sample: header, IMU data and optional baro and GPS blocks.

    A baro block is stored whenever either flag is set; a GPS block only when
    the GPS flag is set.
    """

    header: IbgHeader
    imu: ImuRecord
    baro: Optional[BaroRecord] = None
    gps: Optional[GpsRecord] = None

    @property
    def has_baro_block(self) -> bool:
        return bool(self.header.baro_flags or self.header.gps_flags)

    @property
    def has_gps_block(self) -> bool:
        return bool(self.header.gps_flags)

    def to_bytes(self) -> bytes:
        parts = [self.header.to_bytes(), self.imu.to_bytes()]
        if self.has_baro_block:
            if self.baro is None:
                raise ValueError("header flags require a baro block")
            parts.append(self.baro.to_bytes())
        if self.has_gps_block:
            if self.gps is None:
                raise ValueError("header flags require a gps block")
            parts.append(self.gps.to_bytes())
        return b"".join(parts)


@dataclass(frozen=True)
class GpsHeader(_Packed):
    """Header of a GPS track record; the same size as an IBG header."""

    magic: int = GPS_MAGIC
    fix_type: int = 0
    num_sv: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<HBB")


@dataclass(frozen=True)
class TrackPoint(_Packed):
    """A GPS track point with UTC time stamp."""

    pos_dop: int = 0
    utc_year: int = 0
    utc_month: int = 0
    utc_day: int = 0
    utc_hour: int = 0
    utc_minute: int = 0
    utc_second: int = 0
    nanoseconds: int = 0
    lon_deg7: int = 0
    lat_deg7: int = 0
    height_msl_mm: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<HHBBBBBiiii")


@dataclass(frozen=True)
class GpsTrackRecord:
    """A GPS track log entry: header followed by a track point."""

    header: GpsHeader
    trkpt: TrackPoint

    SIZE: ClassVar[int] = GpsHeader.FORMAT.size + TrackPoint.FORMAT.size

    @classmethod
    def from_bytes(cls, data: bytes) -> "GpsTrackRecord":
        split = GpsHeader.FORMAT.size
        return cls(
            GpsHeader.from_bytes(data[:split]),
            TrackPoint.from_bytes(data[split:cls.SIZE]),
        )

    def to_bytes(self) -> bytes:
        return self.header.to_bytes() + self.trkpt.to_bytes()


HEADER_SIZE = IbgHeader.FORMAT.size
IBG_RECORD_MAX_SIZE = (
    HEADER_SIZE
    + ImuRecord.FORMAT.size
    + BaroRecord.FORMAT.size
    + GpsRecord.FORMAT.size
)


def _read_ibg_body(stream: BinaryIO, header: IbgHeader) -> IbgRecord:
    imu = ImuRecord.from_bytes(_read_exact(stream, ImuRecord.FORMAT.size, "imu record"))
    baro = gps = None
    if header.baro_flags or header.gps_flags:
        baro = BaroRecord.from_bytes(
            _read_exact(stream, BaroRecord.FORMAT.size, "baro record")
        )
    if header.gps_flags:
        gps = GpsRecord.from_bytes(_read_exact(stream, GpsRecord.FORMAT.size, "gps record"))
    return IbgRecord(header, imu, baro, gps)


def parse_ibg_records(stream: BinaryIO) -> Iterator[IbgRecord]:
    """Yield IBG records until the stream ends.

    Raises LogFormatError on a header without the IBG magic or on a record
    cut short by the end of the stream.
    """
    while True:
        data = stream.read(HEADER_SIZE)
        if len(data) < HEADER_SIZE:
            return
        header = IbgHeader.from_bytes(data)
        if header.magic != IBG_MAGIC:
            raise LogFormatError(f"magic not found: 0x{header.magic:04X}")
        yield _read_ibg_body(stream, header)


def parse_log(stream: BinaryIO) -> Iterator[Union[IbgRecord, GpsTrackRecord]]:
    """Yield IBG records and GPS track records from a mixed flash dump."""
    while True:
        data = stream.read(HEADER_SIZE)
        if len(data) < HEADER_SIZE:
            return
        magic = struct.unpack_from("<H", data)[0]
        if magic == IBG_MAGIC:
            yield _read_ibg_body(stream, IbgHeader.from_bytes(data))
        elif magic == GPS_MAGIC:
            trkpt = TrackPoint.from_bytes(
                _read_exact(stream, TrackPoint.FORMAT.size, "track point")
            )
            yield GpsTrackRecord(GpsHeader.from_bytes(data), trkpt)
        else:
            raise LogFormatError(f"unknown magic value in header: 0x{magic:04X}")


def read_track_records(stream: BinaryIO) -> Iterator[GpsTrackRecord]:
    """Yield every complete GPS track record; a short tail is ignored."""
    while True:
        data = stream.read(GpsTrackRecord.SIZE)
        if len(data) != GpsTrackRecord.SIZE:
            return
        yield GpsTrackRecord.from_bytes(data)