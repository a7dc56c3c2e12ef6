"""Waypoint routes read from FormatGEO ``.wpt`` files, and route distances."""

from __future__ import annotations

import argparse
import math
import os
import re
import struct
import sys
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

MAX_WAYPOINTS = 100
MAX_ID_CHARS = 10
WAYPT_RADIUS_MIN = 5
WAYPT_RADIUS_MAX = 99999
WAYPT_RADIUS_DFLT = 50

PI_DIV_180 = 0.017453292
EARTH_RADIUS_M = 6371009.0

_INT = re.compile(r"\s*([+-]?\d+)")
_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class RouteFormatError(ValueError):
    """Raised when a route file is not in FormatGEO format."""


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


@dataclass(frozen=True)
class Waypoint:
    """A named turn point with a cylinder radius in metres."""

    id: str
    lat_deg: float
    lon_deg: float
    alt_m: float
    radius_m: float = float(WAYPT_RADIUS_DFLT)


@dataclass
class Route:
    """An ordered list of waypoints."""

    waypoints: List[Waypoint] = field(default_factory=list)

    def total_distance_m(self) -> int:
        """Sum of great-circle distances between successive waypoints."""
        return sum(
            haversine_distance_m(a.lat_deg, a.lon_deg, b.lat_deg, b.lon_deg)
            for a, b in zip(self.waypoints, self.waypoints[1:])
        )


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> int:
    """Great-circle distance in whole metres using the WGS-84 mean earth radius."""
    lat1, lon1, lat2, lon2 = (_f32(v) for v in (lat1, lon1, lat2, lon2))
    dlat = _f32(_f32(lat2 - lat1) * _f32(PI_DIV_180))
    dlon = _f32(_f32(lon2 - lon1) * _f32(PI_DIV_180))
    lat1rad = _f32(lat1 * _f32(PI_DIV_180))
    lat2rad = _f32(lat2 * _f32(PI_DIV_180))
    sindlat = _f32(math.sin(_f32(dlat / 2.0)))
    sindlon = _f32(math.sin(_f32(dlon / 2.0)))
    a = _f32(
        _f32(sindlat * sindlat)
        + math.cos(lat1rad) * math.cos(lat2rad) * sindlon * sindlon
    )
    c = _f32(2 * math.atan2(math.sqrt(a), math.sqrt(_f32(1 - a))))
    distance = _f32(_f32(EARTH_RADIUS_M) * c)
    return int(_f32(distance + 0.5))


class _Fields:
    """Successive fields of a line, each split on its own set of delimiters."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def next(self, delims: str) -> Optional[str]:
        match = re.compile(f"[^{re.escape(delims)}]+").search(self._text, self._pos)
        if match is None:
            self._pos = len(self._text)
            return None
        self._pos = match.end() + 1
        return match.group()


def _scan_int(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    match = _INT.match(text)
    return int(match.group(1)) if match else None


def _scan_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    match = _FLOAT.match(text)
    return _f32(float(match.group(1))) if match else None


def _parse_coordinate(fields: _Fields, negative: str) -> Optional[float]:
    hemisphere = fields.next(" \t")
    if hemisphere is None or len(hemisphere) != 1:
        return None
    deg = _scan_int(fields.next(" \t"))
    if deg is None:
        return None
    minutes = _scan_int(fields.next(" \t"))
    if minutes is None:
        return None
    sec = _scan_float(fields.next(" \t"))
    if sec is None:
        return None
    value = _f32(_f32(_f32(sec / 3600.0) + _f32(minutes / 60.0)) + deg)
    return -value if hemisphere in negative else value


def _parse_waypoint(line: str) -> Optional[Waypoint]:
    fields = _Fields(line)
    ident = fields.next(" ")
    if ident is None:
        return None
    lat = _parse_coordinate(fields, "Ss")
    if lat is None:
        return None
    lon = _parse_coordinate(fields, "Ww")
    if lon is None:
        return None
    alt = _scan_float(fields.next(" \t\r\n"))
    if alt is None:
        return None
    radius_text = fields.next(" \t\r\n")
    if radius_text is None:
        radius = float(WAYPT_RADIUS_DFLT)
    else:
        radius = _scan_float(radius_text)
        if radius is None:
            return None
    return Waypoint(ident[: MAX_ID_CHARS - 1], lat, lon, alt, radius)


def parse_route(lines: Iterable[str]) -> Route:
    """Parse the lines of a FormatGEO waypoint file.

    Malformed waypoint lines are skipped; a waypoint without a radius gets
    the default radius.
    """
    it = iter(lines)
    first = next(it, "")
    if _Fields(first).next(" \r\n") != "$FormatGEO":
        raise RouteFormatError("incorrect format")
    route = Route()
    for line in it:
        waypoint = _parse_waypoint(line)
        if waypoint is None:
            continue
        if len(route.waypoints) >= MAX_WAYPOINTS:
            raise RouteFormatError(f"more than {MAX_WAYPOINTS} waypoints")
        route.waypoints.append(waypoint)
    return route


def load_route(path: Union[str, os.PathLike]) -> Route:
    """Read a FormatGEO waypoint file."""
    with open(path, encoding="latin-1", newline="") as f:
        return parse_route(f)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="testroute", description="List a route and its total distance."
    )
    parser.add_argument("path", help="FormatGEO .wpt file")
    args = parser.parse_args(argv)
    try:
        route = load_route(args.path)
    except OSError as exc:
        print(f"error opening file {args.path}: {exc}")
        return 1
    except RouteFormatError as exc:
        print(exc)
        return 2
    for index, w in enumerate(route.waypoints):
        print(
            f"{index} : ID {w.id} lat {w.lat_deg:f} lon {w.lon_deg:f} "
            f"alt {w.alt_m:f} radius {w.radius_m:f}"
        )
    print(f"Route distance : {route.total_distance_m() / 1000.0:.1f}km")
    return 0


if __name__ == "__main__":
    sys.exit(main())