"""Rigid transformation of flat laser scan buffers.

A laser scan is an array of fixed-width float records whose layout is one of
the ScanEncoding members:

    XY          [x, y]                  z is taken as 0, only x, y written back
    XYZ         [x, y, z]
    XYZI        [x, y, z, intensity]    intensity copied unchanged
    XYZ_NORMAL  [x, y, z, nx, ny, nz]   normal rotated, not translated

The encoding is resolved from the record width. Widths outside {2, 3, 4, 6}
are rejected instead of being read with the wrong stride.
"""

import logging
from typing import Callable, Dict, Optional

import numpy as np

from ..exceptions import ContractViolation
from .types import RigidTransform, ScanEncoding, is_noop

logger = logging.getLogger(__name__)


def _transform_xy(out: np.ndarray, records: np.ndarray, transform: RigidTransform) -> None:
    xyz = np.zeros((records.shape[0], 3), dtype=np.float64)
    xyz[:, :2] = records[:, :2]
    out[:, :2] = transform.apply(xyz)[:, :2]


def _transform_xyz(out: np.ndarray, records: np.ndarray, transform: RigidTransform) -> None:
    out[:, :3] = transform.apply(records[:, :3])


def _transform_xyz_normal(
    out: np.ndarray, records: np.ndarray, transform: RigidTransform
) -> None:
    out[:, :3] = transform.apply(records[:, :3])
    out[:, 3:6] = transform.rotate(records[:, 3:6])


_SCAN_HANDLERS: Dict[
    ScanEncoding, Callable[[np.ndarray, np.ndarray, RigidTransform], None]
] = {
    ScanEncoding.XY: _transform_xy,
    ScanEncoding.XYZ: _transform_xyz,
    # Intensity (field 3) is left as copied.
    ScanEncoding.XYZI: _transform_xyz,
    ScanEncoding.XYZ_NORMAL: _transform_xyz_normal,
}


def _require_float(scan: np.ndarray) -> None:
    # Writing transformed coordinates back into an integer buffer would truncate them.
    if not np.issubdtype(scan.dtype, np.floating):
        raise ContractViolation(
            f"Scan records must be floating point, got dtype {scan.dtype}"
        )


def resolve_scan_encoding(
    scan: np.ndarray, encoding: Optional[ScanEncoding] = None
) -> ScanEncoding:
    """
    Determine the record layout of a scan buffer.

    Args:
        scan: (N, C) array of records, or a flat (N*C,) buffer.
        encoding: Expected encoding. Required for flat buffers; for 2D
                  arrays it must agree with the observed width.

    Returns:
        The resolved ScanEncoding.

    Raises:
        ContractViolation: If the scan is not a floating-point array, the
                           width is unsupported, disagrees with
                           ``encoding``, or a flat buffer's length is not a
                           multiple of the record width.
    """
    scan = np.asarray(scan)
    _require_float(scan)

    if scan.ndim == 2:
        observed = ScanEncoding.from_width(scan.shape[1])
        if encoding is not None and encoding is not observed:
            raise ContractViolation(
                f"Scan records have width {scan.shape[1]} ({observed.name}) "
                f"but encoding {encoding.name} was requested"
            )
        return observed

    if scan.ndim == 1:
        if encoding is None:
            raise ContractViolation("A flat scan buffer needs an explicit encoding")
        if scan.size % encoding.num_fields:
            raise ContractViolation(
                f"Flat scan of {scan.size} values is not a whole number of "
                f"{encoding.name} records ({encoding.num_fields} fields each)"
            )
        return encoding

    raise ContractViolation(f"Scan must be 1D or 2D, got shape {scan.shape}")


def transform_laser_scan(
    scan: np.ndarray,
    transform: Optional[RigidTransform],
    encoding: Optional[ScanEncoding] = None,
) -> np.ndarray:
    """
    Apply a rigid transform to every record of a laser scan.

    Args:
        scan: (N, C) array of records with C in {2, 3, 4, 6}, or a flat
              buffer together with ``encoding``. Usually float32.
        transform: Transform to apply, or None to skip.
        encoding: Optional explicit encoding (mandatory for flat buffers).

    Returns:
        New array with the same shape and dtype as ``scan``. Positional
        fields are transformed, normals rotated, and every other field
        copied unchanged.

    Raises:
        ContractViolation: If the scan is not a floating-point array or the
                           record layout cannot be resolved.

    Examples:
        >>> scan = np.array([[1.0, 0.0, 0.0, 0.7]], dtype=np.float32)
        >>> T = RigidTransform.from_translation(np.array([0.0, 0.0, 1.0]))
        >>> transform_laser_scan(scan, T)
        array([[1. , 0. , 1. , 0.7]], dtype=float32)
    """
    scan = np.asarray(scan)
    _require_float(scan)
    if scan.ndim == 1 and scan.size == 0 and encoding is None:
        return scan.copy()

    resolved = resolve_scan_encoding(scan, encoding)
    records = scan.reshape(-1, resolved.num_fields)

    output = records.copy()
    if is_noop(transform) or records.shape[0] == 0:
        return output.reshape(scan.shape)

    logger.debug(
        "Transforming %d %s scan records", records.shape[0], resolved.name
    )
    _SCAN_HANDLERS[resolved](output, records, transform)
    return output.reshape(scan.shape)
