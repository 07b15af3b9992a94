"""Geometric transforms and trajectory alignment for localization and mapping.

This package contains the reusable geometry components of a SLAM pipeline:
- coords: Geodetic coordinates (WGS84) to ECEF and local ENU frames
- slam: Rigid transforms applied to points, point clouds and laser scans,
  and rigid alignment of estimated trajectories onto ground truth
- eval: Per-pose trajectory error metrics and plots
"""

from slamgeo.exceptions import ContractViolation

__version__ = "0.1.0"

__all__ = ["ContractViolation", "__version__"]
