"""Binary variometer log parsing, GPX export, log splitting, routes, UBX packets and altitude Kalman filters."""

__version__ = "0.1.0"

__all__ = [
    "records",
    "ibginfo",
    "gpx",
    "split",
    "route",
    "ubx",
    "kalman2",
    "kalman3",
    "kalman4",
    "kalman4d",
]