"""Geodetic coordinate systems and transformations.

This module converts geodetic coordinates on the WGS84 ellipsoid to:
- ECEF (Earth-Centered Earth-Fixed) Cartesian coordinates
- ENU (East-North-Up) local tangent plane coordinates
"""

from slamgeo.coords.geodetic import (
    WGS84_A,
    WGS84_B,
    GeodeticCoordinate,
    geodetic_to_ecef,
    geodetic_to_enu,
    geodetic_to_enu_batch,
)

__all__ = [
    "GeodeticCoordinate",
    "geodetic_to_ecef",
    "geodetic_to_enu",
    "geodetic_to_enu_batch",
    "WGS84_A",
    "WGS84_B",
]
