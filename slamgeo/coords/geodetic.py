"""Geodetic coordinate conversions on the WGS84 ellipsoid.

This module converts geodetic coordinates (latitude, longitude, altitude)
to Earth-Centered Earth-Fixed (ECEF) Cartesian coordinates and to a local
East-North-Up (ENU) frame anchored at an origin coordinate.

WGS84 ellipsoid parameters:
- Semi-major axis (a): 6378137.0 m
- Semi-minor axis (b): 6356752.3142 m
- Angular eccentricity (ae): acos(b / a)

Angles are given in decimal degrees and altitudes in meters. All
computations are closed form in double precision; there is no iteration and
no branching on input magnitude.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from ..exceptions import ContractViolation

# WGS84 ellipsoid parameters
WGS84_A = 6378137.0  # Semi-major axis (m)
WGS84_B = 6356752.3142  # Semi-minor axis (m)
WGS84_ANGULAR_ECCENTRICITY = np.arccos(WGS84_B / WGS84_A)
WGS84_COS2_AE = np.cos(WGS84_ANGULAR_ECCENTRICITY) ** 2
WGS84_SIN2_AE = np.sin(WGS84_ANGULAR_ECCENTRICITY) ** 2


@dataclass(frozen=True)
class GeodeticCoordinate:
    """
    Geodetic position on the WGS84 ellipsoid.

    Attributes:
        latitude: Latitude in degrees, positive north, in [-90, 90].
        longitude: Longitude in degrees, positive east.
        altitude: Height above the ellipsoid in meters.

    Examples:
        >>> origin = GeodeticCoordinate(45.0, -73.0, 0.0)
        >>> point = GeodeticCoordinate(45.0001, -73.0, 0.0)
        >>> east, north, up = point.to_enu(origin)  # north ≈ 11.1 m
    """

    latitude: float
    longitude: float
    altitude: float = 0.0

    def __post_init__(self) -> None:
        """Validate coordinate values after initialization."""
        for name in ("latitude", "longitude", "altitude"):
            if not np.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite, got {getattr(self, name)}")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be in [-90, 90], got {self.latitude}")

    def to_array(self) -> NDArray[np.float64]:
        """Return [latitude, longitude, altitude]."""
        return np.array([self.latitude, self.longitude, self.altitude], dtype=np.float64)

    def to_geocentric(self) -> NDArray[np.float64]:
        """ECEF coordinates of this position, see ``geodetic_to_ecef``."""
        return geodetic_to_ecef(self)

    def to_enu(self, origin: "GeodeticCoordinate") -> NDArray[np.float64]:
        """ENU coordinates of this position relative to ``origin``."""
        return geodetic_to_enu(self, origin)


def _ecef(lat_deg, lon_deg, alt):
    """Vectorised WGS84 geodetic -> ECEF kernel (inputs broadcast)."""
    lat = np.deg2rad(lat_deg)
    lon = np.deg2rad(lon_deg)

    # Radius of curvature in the prime vertical
    N = WGS84_A / np.sqrt(1.0 - WGS84_SIN2_AE * np.sin(lat) ** 2)

    x = (N + alt) * np.cos(lat) * np.cos(lon)
    y = (N + alt) * np.cos(lat) * np.sin(lon)
    z = (WGS84_COS2_AE * N + alt) * np.sin(lat)
    return np.stack([x, y, z], axis=-1)


def _ecef_delta_to_enu(d: np.ndarray, origin: GeodeticCoordinate) -> np.ndarray:
    """Rotate ECEF displacements (..., 3) into the ENU frame of ``origin``."""
    lat = np.deg2rad(origin.latitude)
    lon = np.deg2rad(origin.longitude)
    clat, slat = np.cos(lat), np.sin(lat)
    clon, slon = np.cos(lon), np.sin(lon)

    dx, dy, dz = d[..., 0], d[..., 1], d[..., 2]

    # Transpose of the ENU -> ECEF rotation, expanded
    east = -slon * dx + clon * dy
    north = -clon * slat * dx - slon * slat * dy + clat * dz
    up = clon * clat * dx + slon * clat * dy + slat * dz
    return np.stack([east, north, up], axis=-1)


def _require_origin(origin: Optional[GeodeticCoordinate]) -> GeodeticCoordinate:
    if origin is None:
        raise ContractViolation("ENU conversion requires an origin coordinate")
    if not isinstance(origin, GeodeticCoordinate):
        raise ContractViolation(
            f"origin must be a GeodeticCoordinate, got {type(origin).__name__}"
        )
    return origin


def geodetic_to_ecef(coord: GeodeticCoordinate) -> NDArray[np.float64]:
    """
    Convert a geodetic coordinate to ECEF Cartesian coordinates.

    With lat, lon in radians and N the prime-vertical radius of curvature,
        N = a / sqrt(1 - sin²(ae) sin²(lat))
        x = (N + alt) cos(lat) cos(lon)
        y = (N + alt) cos(lat) sin(lon)
        z = (cos²(ae) N + alt) sin(lat)

    Args:
        coord: Geodetic position.

    Returns:
        ECEF coordinates as numpy array [x, y, z] in meters.

    Example:
        >>> geodetic_to_ecef(GeodeticCoordinate(0.0, 0.0, 0.0))
        array([6378137.,       0.,       0.])
    """
    return _ecef(coord.latitude, coord.longitude, coord.altitude).astype(np.float64)


def geodetic_to_enu(
    coord: GeodeticCoordinate,
    origin: Optional[GeodeticCoordinate],
) -> NDArray[np.float64]:
    """
    Convert a geodetic coordinate to local ENU coordinates.

    Both positions are converted to ECEF and differenced first so that the
    rotation works on small numbers. The difference is then rotated into the
    tangent frame at the origin:
        east  = -slon dx + clon dy
        north = -clon slat dx - slon slat dy + clat dz
        up    =  clon clat dx + slon clat dy + slat dz

    Args:
        coord: Position to convert.
        origin: Origin of the ENU frame. Mandatory.

    Returns:
        ENU coordinates as numpy array [east, north, up] in meters.

    Raises:
        ContractViolation: If origin is None.
    """
    origin = _require_origin(origin)
    d = geodetic_to_ecef(coord) - geodetic_to_ecef(origin)
    return _ecef_delta_to_enu(d, origin)


def geodetic_to_enu_batch(
    coords: np.ndarray,
    origin: Optional[GeodeticCoordinate],
) -> NDArray[np.float64]:
    """
    Convert many geodetic coordinates (e.g. a GPS track) to ENU at once.

    Uses the same formulas as ``geodetic_to_enu``, vectorised over rows.

    Args:
        coords: Array of shape (N, 3) with rows [latitude, longitude, altitude].
        origin: Origin of the ENU frame. Mandatory.

    Returns:
        ENU coordinates, shape (N, 3).

    Raises:
        ContractViolation: If origin is None or coords has an invalid shape.
    """
    origin = _require_origin(origin)
    coords = np.asarray(coords, dtype=np.float64)
    if coords.ndim != 2 or coords.shape[1] != 3:
        raise ContractViolation(f"coords must have shape (N, 3), got {coords.shape}")
    if coords.shape[0] == 0:
        return np.empty((0, 3), dtype=np.float64)

    ecef = _ecef(coords[:, 0], coords[:, 1], coords[:, 2])
    d = ecef - geodetic_to_ecef(origin)
    return _ecef_delta_to_enu(d, origin)
