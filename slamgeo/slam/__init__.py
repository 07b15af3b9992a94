"""Rigid 3D transforms and trajectory alignment.

This module provides the geometric building blocks shared by odometry,
mapping and benchmarking code. It is NOT a SLAM framework: it only
consumes and produces value-typed geometric data.

Main components:
    - RigidTransform: SE(3) transform [R | t]; None means "no transform"
    - transform_point, transform_point_cloud: points with optional color /
      normal attributes
    - transform_laser_scan: flat scan buffers (XY, XYZ, XYZI, XYZ+normal)
    - align_trajectories, apply_alignment: register an estimated trajectory
      onto ground truth

Example usage:
    >>> from slamgeo.slam import RigidTransform, PointCloud, transform_point_cloud
    >>> import numpy as np
    >>>
    >>> T = RigidTransform.from_xyz_rpy(1.0, 0.0, 0.0, 0.0, 0.0, np.pi / 2)
    >>> cloud = PointCloud(points=np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]))
    >>> moved = transform_point_cloud(cloud, T)
"""

from .alignment import (
    AlignmentConfig,
    AlignmentResult,
    align_svd_3d,
    align_trajectories,
    apply_alignment,
)
from .point_transforms import transform_point, transform_point_cloud
from .scan_transforms import resolve_scan_encoding, transform_laser_scan
from .se3 import se3_apply, se3_compose, se3_inverse, se3_rotate
from .types import (
    PointCloud,
    PointNormal,
    PointXYZ,
    PointXYZRGB,
    PointXYZRGBNormal,
    RigidTransform,
    ScanEncoding,
    is_noop,
    is_null,
)

__all__ = [
    # Core types
    "RigidTransform",
    "is_null",
    "is_noop",
    "PointXYZ",
    "PointXYZRGB",
    "PointNormal",
    "PointXYZRGBNormal",
    "PointCloud",
    "ScanEncoding",
    # SE(3) kernels
    "se3_compose",
    "se3_inverse",
    "se3_apply",
    "se3_rotate",
    # Transform application
    "transform_point",
    "transform_point_cloud",
    "transform_laser_scan",
    "resolve_scan_encoding",
    # Trajectory alignment
    "AlignmentConfig",
    "AlignmentResult",
    "align_svd_3d",
    "align_trajectories",
    "apply_alignment",
]
