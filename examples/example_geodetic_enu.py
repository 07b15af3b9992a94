"""Example: Expressing a GPS track in a local ENU frame.

This example demonstrates the geodetic conversions used to bring GPS
fixes into the metric frame of a mapping session:
1. Convert geodetic coordinates (WGS84) to ECEF
2. Convert geodetic coordinates to ENU relative to a session origin
3. Convert a whole GPS track at once

Usage:
    python -m examples.example_geodetic_enu
"""

import numpy as np

from slamgeo.coords import (
    WGS84_A,
    WGS84_B,
    GeodeticCoordinate,
    geodetic_to_ecef,
    geodetic_to_enu,
    geodetic_to_enu_batch,
)


def main() -> None:
    """Run geodetic conversion examples."""
    print("=" * 70)
    print("Geodetic Conversion Examples")
    print("=" * 70)

    # Example 1: Geodetic to ECEF
    print("\n1. Geodetic to ECEF")
    print("-" * 70)

    print(f"WGS84 semi-major axis: {WGS84_A:,.4f} m")
    print(f"WGS84 semi-minor axis: {WGS84_B:,.4f} m")

    # Session origin: where the mapping run started
    origin = GeodeticCoordinate(46.7794, -71.2750, 90.0)
    xyz = geodetic_to_ecef(origin)
    print(f"\nOrigin: {origin.latitude:.4f}°, {origin.longitude:.4f}°, {origin.altitude:.1f} m")
    print(f"  X: {xyz[0]:,.2f} m")
    print(f"  Y: {xyz[1]:,.2f} m")
    print(f"  Z: {xyz[2]:,.2f} m")

    # Example 2: Single fixes in the local ENU frame
    print("\n2. GPS Fixes in the Local ENU Frame")
    print("-" * 70)

    fixes = [
        ("Origin", origin),
        ("~100 m East", GeodeticCoordinate(46.7794, -71.2750 + 100 / 76200, 90.0)),
        ("~100 m North", GeodeticCoordinate(46.7794 + 100 / 111150, -71.2750, 90.0)),
        ("10 m Up", GeodeticCoordinate(46.7794, -71.2750, 100.0)),
    ]

    for name, fix in fixes:
        enu = geodetic_to_enu(fix, origin)
        print(f"{name:>14}: ENU = [{enu[0]:8.3f}, {enu[1]:8.3f}, {enu[2]:8.3f}] m")

    # Example 3: Whole track
    print("\n3. GPS Track Conversion")
    print("-" * 70)

    # Straight walk north-east, 1 fix per second at ~1.4 m/s
    n_fixes = 60
    steps = np.arange(n_fixes)
    track = np.column_stack(
        [
            origin.latitude + steps * 1.0e-5 / np.sqrt(2),
            origin.longitude + steps * 1.35e-5 / np.sqrt(2),
            np.full(n_fixes, origin.altitude),
        ]
    )

    enu_track = geodetic_to_enu_batch(track, origin)
    path_length = np.sum(np.linalg.norm(np.diff(enu_track, axis=0), axis=1))

    print(f"Number of fixes: {n_fixes}")
    print(f"Last fix ENU:    [{enu_track[-1, 0]:.2f}, {enu_track[-1, 1]:.2f}, "
          f"{enu_track[-1, 2]:.2f}] m")
    print(f"Path length:     {path_length:.2f} m")
    print(f"Heading:         {np.rad2deg(np.arctan2(enu_track[-1, 0], enu_track[-1, 1])):.1f}° "
          f"(from north)")

    print("\n" + "=" * 70)
    print("Examples completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
