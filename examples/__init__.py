"""Runnable examples.

Examples:
    - example_geodetic_enu.py: GPS fixes and tracks in a local ENU frame
    - example_trajectory_alignment.py: Align an odometry trajectory on ground
      truth, report errors, and transform clouds / scans with the result
"""

__all__ = []
