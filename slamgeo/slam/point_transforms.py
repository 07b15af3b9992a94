"""Rigid transformation of points and point clouds.

Key functions:
    - transform_point: Transform one point of any supported attribute shape
    - transform_point_cloud: Transform an ordered collection, optionally a
      subset given by indices

Positions are rotated and translated; normals are only rotated; colors are
copied unchanged. A null (None) or identity transform is a copy fast path
that never touches coordinate values.
"""

from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Type, Union

import numpy as np

from ..exceptions import ContractViolation
from .types import (
    POINT_VARIANTS,
    PointCloud,
    PointNormal,
    PointVariant,
    PointXYZ,
    PointXYZRGB,
    PointXYZRGBNormal,
    RigidTransform,
    check_indices,
    is_noop,
)

CloudLike = Union[PointCloud, np.ndarray, Sequence[PointVariant]]


def _transform_position(point: PointVariant, transform: RigidTransform) -> PointVariant:
    x, y, z = transform.apply(point.position)
    return replace(point, x=float(x), y=float(y), z=float(z))


def _transform_position_and_normal(
    point: PointVariant, transform: RigidTransform
) -> PointVariant:
    x, y, z = transform.apply(point.position)
    nx, ny, nz = transform.rotate(point.normal)
    return replace(
        point,
        x=float(x),
        y=float(y),
        z=float(z),
        normal_x=float(nx),
        normal_y=float(ny),
        normal_z=float(nz),
    )


_POINT_HANDLERS: Dict[Type, Callable[[PointVariant, RigidTransform], PointVariant]] = {
    PointXYZ: _transform_position,
    PointXYZRGB: _transform_position,
    PointNormal: _transform_position_and_normal,
    PointXYZRGBNormal: _transform_position_and_normal,
}


def transform_point(
    point: PointVariant, transform: Optional[RigidTransform]
) -> PointVariant:
    """
    Apply a rigid transform to a single point.

    Args:
        point: One of PointXYZ, PointXYZRGB, PointNormal, PointXYZRGBNormal.
        transform: Transform to apply, or None to skip.

    Returns:
        Transformed point of the same type. Color is preserved exactly and
        normals are rotated without translation.

    Raises:
        ContractViolation: If point is not one of the supported variants.

    Examples:
        >>> T = RigidTransform.from_translation(np.array([1.0, 0.0, 0.0]))
        >>> transform_point(PointNormal(0, 0, 0, 0, 0, 1), T)
        PointNormal(x=1.0, y=0.0, z=0.0, normal_x=0.0, normal_y=0.0, normal_z=1.0)
    """
    handler = _POINT_HANDLERS.get(type(point))
    if handler is None:
        raise ContractViolation(
            f"Unsupported point type {type(point).__name__}, expected one of "
            f"{[t.__name__ for t in POINT_VARIANTS]}"
        )
    if is_noop(transform):
        # Frozen dataclass: returning the value itself is an exact copy.
        return point
    return handler(point, transform)


def transform_point_cloud(
    cloud: CloudLike,
    transform: Optional[RigidTransform],
    indices: Optional[Sequence[int]] = None,
) -> CloudLike:
    """
    Apply a rigid transform to every point of a cloud.

    The input is never modified. Each point is transformed independently and
    the output keeps the input order, so downstream consumers relying on scan
    or time ordering are unaffected.

    Args:
        cloud: PointCloud, an (N, 3) array of positions, or a sequence of
               point variants.
        transform: Transform to apply, or None to skip.
        indices: Optional subset of point indices. When given, the output
                 holds only those points, in the order of ``indices``.

    Returns:
        A new collection of the same kind as ``cloud``, with length
        ``len(cloud)`` or ``len(indices)``.

    Raises:
        ContractViolation: If indices are out of range or the input has an
                           invalid shape.
    """
    if isinstance(cloud, PointCloud):
        return _transform_cloud(cloud, transform, indices)

    if isinstance(cloud, np.ndarray):
        points = np.asarray(cloud, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ContractViolation(
                f"Point array must have shape (N, 3), got {points.shape}"
            )
        result = _transform_cloud(PointCloud(points=points), transform, indices)
        return np.array(result.points)

    items: List[PointVariant] = list(cloud)
    if indices is not None:
        idx = check_indices(indices, len(items))
        items = [items[i] for i in idx]
    return [transform_point(p, transform) for p in items]


def _transform_cloud(
    cloud: PointCloud,
    transform: Optional[RigidTransform],
    indices: Optional[Sequence[int]],
) -> PointCloud:
    if indices is not None:
        cloud = cloud.select(indices)

    if is_noop(transform) or len(cloud) == 0:
        return PointCloud(points=cloud.points, colors=cloud.colors, normals=cloud.normals)

    return PointCloud(
        points=transform.apply(cloud.points),
        colors=cloud.colors,
        normals=None if cloud.normals is None else transform.rotate(cloud.normals),
    )
