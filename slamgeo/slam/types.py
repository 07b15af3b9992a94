"""Type definitions and data structures for 3D transform operations.

This module defines the value types consumed and produced by the transform
and alignment code:

Key types:
    - RigidTransform: SE(3) transform stored as a 3x4 matrix [R | t]
    - PointXYZ, PointXYZRGB, PointNormal, PointXYZRGBNormal: the closed set
      of point attribute shapes
    - PointCloud: ordered point collection with optional colors / normals
    - ScanEncoding: closed set of laser scan record layouts

"No transform known" is expressed as ``None`` (``Optional[RigidTransform]``)
rather than as a special matrix value; see ``is_null``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple, Type, Union

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation

from ..exceptions import ContractViolation
from .se3 import (
    IDENTITY_3X4,
    se3_apply,
    se3_compose,
    se3_from_matrix4,
    se3_inverse,
    se3_rotate,
    se3_to_matrix4,
)

# Tolerance on R^T R = I when validating rotation blocks. Poses exported as
# text with ~7 significant digits must still be accepted.
ORTHONORMAL_TOL = 1e-5


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """
    Rigid 3D transform (rotation + translation), an element of SE(3).

    The transform is stored as a read-only 3x4 float64 matrix [R | t].
    Instances are immutable values: every operation returns a new
    RigidTransform and the stored matrix can never be modified in place.

    Attributes:
        matrix: 3x4 matrix. The 3x3 rotation block must be orthonormal with
                determinant +1.

    Examples:
        >>> T = RigidTransform.from_xyz_rpy(1.0, 0.0, 0.0, 0.0, 0.0, np.pi / 2)
        >>> T.apply(np.array([1.0, 0.0, 0.0]))  # -> [1, 1, 0]
        >>> T.inverse().compose(T).is_identity(atol=1e-12)
        True
    """

    matrix: np.ndarray = field(default_factory=lambda: IDENTITY_3X4.copy())

    def __post_init__(self) -> None:
        """Validate and freeze the matrix."""
        M = np.array(self.matrix, dtype=np.float64)
        if M.shape != (3, 4):
            raise ContractViolation(
                f"RigidTransform matrix must have shape (3, 4), got {M.shape}"
            )
        if not np.all(np.isfinite(M)):
            raise ContractViolation("RigidTransform matrix must be finite")

        R = M[:, :3]
        if not np.allclose(R.T @ R, np.eye(3), atol=ORTHONORMAL_TOL):
            raise ContractViolation(f"Rotation block is not orthonormal:\n{R}")
        if np.linalg.det(R) <= 0.0:
            raise ContractViolation("Rotation block must have determinant +1")

        M.setflags(write=False)
        object.__setattr__(self, "matrix", M)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls) -> "RigidTransform":
        """Create the identity transform."""
        return cls(IDENTITY_3X4.copy())

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "RigidTransform":
        """
        Create a transform from a 3x4 or 4x4 homogeneous matrix.

        Raises:
            ContractViolation: If the shape is neither (3, 4) nor (4, 4), or
                               the rotation block is not a proper rotation.
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape == (4, 4):
            try:
                matrix = se3_from_matrix4(matrix)
            except ValueError as exc:
                raise ContractViolation(str(exc)) from exc
        return cls(matrix)

    @classmethod
    def from_rotation_translation(
        cls, rotation: np.ndarray, translation: np.ndarray
    ) -> "RigidTransform":
        """Create a transform from a 3x3 rotation and a 3-vector translation."""
        rotation = np.asarray(rotation, dtype=np.float64)
        translation = np.asarray(translation, dtype=np.float64)
        if rotation.shape != (3, 3):
            raise ContractViolation(
                f"Rotation must have shape (3, 3), got {rotation.shape}"
            )
        if translation.shape != (3,):
            raise ContractViolation(
                f"Translation must have shape (3,), got {translation.shape}"
            )
        return cls(np.column_stack([rotation, translation]))

    @classmethod
    def from_translation(cls, translation: np.ndarray) -> "RigidTransform":
        """Create a pure translation."""
        return cls.from_rotation_translation(np.eye(3), translation)

    @classmethod
    def from_xyz_rpy(
        cls,
        x: float,
        y: float,
        z: float,
        roll: float,
        pitch: float,
        yaw: float,
    ) -> "RigidTransform":
        """
        Create a transform from a position and roll-pitch-yaw angles.

        The rotation follows the ZYX convention R = Rz(yaw) Ry(pitch) Rx(roll).

        Args:
            x, y, z: Translation in meters.
            roll, pitch, yaw: Euler angles in radians.
        """
        R = Rotation.from_euler("xyz", [roll, pitch, yaw]).as_matrix()
        return cls.from_rotation_translation(R, np.array([x, y, z]))

    @classmethod
    def from_quaternion(
        cls,
        q: Sequence[float],
        translation: Optional[Sequence[float]] = None,
    ) -> "RigidTransform":
        """
        Create a transform from a scalar-first quaternion [qw, qx, qy, qz].

        The quaternion is normalised before use.

        Raises:
            ContractViolation: If q does not have 4 elements or has zero norm.
        """
        q = np.asarray(q, dtype=np.float64)
        if q.shape != (4,):
            raise ContractViolation(f"Quaternion must have shape (4,), got {q.shape}")
        if np.linalg.norm(q) == 0.0:
            raise ContractViolation("Quaternion must have non-zero norm")

        R = Rotation.from_quat([q[1], q[2], q[3], q[0]]).as_matrix()
        t = np.zeros(3) if translation is None else translation
        return cls.from_rotation_translation(R, t)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def rotation(self) -> NDArray[np.float64]:
        """Copy of the 3x3 rotation block."""
        return self.matrix[:, :3].copy()

    @property
    def translation(self) -> NDArray[np.float64]:
        """Copy of the translation vector."""
        return self.matrix[:, 3].copy()

    @property
    def x(self) -> float:
        return float(self.matrix[0, 3])

    @property
    def y(self) -> float:
        return float(self.matrix[1, 3])

    @property
    def z(self) -> float:
        return float(self.matrix[2, 3])

    def to_matrix4(self) -> NDArray[np.float64]:
        """Return the 4x4 homogeneous matrix."""
        return se3_to_matrix4(self.matrix)

    def to_euler(self) -> NDArray[np.float64]:
        """Return [roll, pitch, yaw] in radians (ZYX convention)."""
        return Rotation.from_matrix(self.matrix[:, :3]).as_euler("xyz")

    # ------------------------------------------------------------------
    # Group operations
    # ------------------------------------------------------------------

    def is_identity(self, atol: float = 0.0) -> bool:
        """
        Check whether this is the identity transform.

        Args:
            atol: Absolute tolerance. The default of 0.0 requires an exact
                  match, which is what the copy fast paths rely on.
        """
        if atol == 0.0:
            return bool(np.array_equal(self.matrix, IDENTITY_3X4))
        return bool(np.allclose(self.matrix, IDENTITY_3X4, rtol=0.0, atol=atol))

    def compose(self, other: "RigidTransform") -> "RigidTransform":
        """Return self ∘ other (other is applied first)."""
        return RigidTransform(se3_compose(self.matrix, other.matrix))

    def __mul__(self, other: "RigidTransform") -> "RigidTransform":
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return self.compose(other)

    def inverse(self) -> "RigidTransform":
        return RigidTransform(se3_inverse(self.matrix))

    def apply(self, points: np.ndarray) -> NDArray[np.float64]:
        """Transform a point (3,) or points (N, 3), translation included."""
        try:
            return se3_apply(self.matrix, points)
        except ValueError as exc:
            raise ContractViolation(str(exc)) from exc

    def rotate(self, vectors: np.ndarray) -> NDArray[np.float64]:
        """Rotate a direction (3,) or directions (N, 3), translation excluded."""
        try:
            return se3_rotate(self.matrix, vectors)
        except ValueError as exc:
            raise ContractViolation(str(exc)) from exc

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def distance(self, other: "RigidTransform") -> float:
        """Euclidean distance between the two translations (meters)."""
        return float(np.linalg.norm(self.matrix[:, 3] - other.matrix[:, 3]))

    def angle_to(self, other: "RigidTransform") -> float:
        """Geodesic angle (radians) of the relative rotation R_self^T R_other."""
        R_rel = self.matrix[:, :3].T @ other.matrix[:, :3]
        return float(Rotation.from_matrix(R_rel).magnitude())

    def allclose(self, other: "RigidTransform", atol: float = 1e-9) -> bool:
        return bool(np.allclose(self.matrix, other.matrix, rtol=0.0, atol=atol))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return bool(np.array_equal(self.matrix, other.matrix))

    def __hash__(self) -> int:
        return hash(self.matrix.tobytes())

    def __repr__(self) -> str:
        t = self.matrix[:, 3]
        roll, pitch, yaw = self.to_euler()
        return (
            f"RigidTransform(xyz=[{t[0]:.4f}, {t[1]:.4f}, {t[2]:.4f}], "
            f"rpy=[{roll:.4f}, {pitch:.4f}, {yaw:.4f}])"
        )


def is_null(transform: Optional[RigidTransform]) -> bool:
    """Return True when no transform is available (``transform is None``)."""
    return transform is None


def is_noop(transform: Optional[RigidTransform]) -> bool:
    """Return True when applying ``transform`` can be skipped (null or identity)."""
    return transform is None or transform.is_identity()


# ----------------------------------------------------------------------
# Point attribute shapes
# ----------------------------------------------------------------------

Color = Tuple[int, int, int]


def _check_color(rgb: Color) -> None:
    if len(rgb) != 3 or not all(0 <= int(c) <= 255 for c in rgb):
        raise ValueError(f"rgb must be three integers in [0, 255], got {rgb}")


@dataclass(frozen=True)
class PointXYZ:
    """Position-only point (meters)."""

    x: float
    y: float
    z: float

    @property
    def position(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@dataclass(frozen=True)
class PointXYZRGB(PointXYZ):
    """Point with an 8-bit (r, g, b) color."""

    rgb: Color

    def __post_init__(self) -> None:
        _check_color(self.rgb)
        object.__setattr__(self, "rgb", tuple(int(c) for c in self.rgb))


@dataclass(frozen=True)
class PointNormal(PointXYZ):
    """Point with a surface normal (nx, ny, nz)."""

    normal_x: float
    normal_y: float
    normal_z: float

    @property
    def normal(self) -> NDArray[np.float64]:
        return np.array([self.normal_x, self.normal_y, self.normal_z], dtype=np.float64)


@dataclass(frozen=True)
class PointXYZRGBNormal(PointXYZRGB):
    """Point with both a color and a surface normal."""

    normal_x: float
    normal_y: float
    normal_z: float

    @property
    def normal(self) -> NDArray[np.float64]:
        return np.array([self.normal_x, self.normal_y, self.normal_z], dtype=np.float64)


PointVariant = Union[PointXYZ, PointXYZRGB, PointNormal, PointXYZRGBNormal]
POINT_VARIANTS: Tuple[Type, ...] = (PointXYZ, PointXYZRGB, PointNormal, PointXYZRGBNormal)


def _frozen_array(values: np.ndarray, name: str, dtype) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ContractViolation(f"{name} must have shape (N, 3), got {arr.shape}")
    arr.setflags(write=False)
    return arr


def _check_colors(values: np.ndarray) -> None:
    colors = np.asarray(values)
    if colors.size == 0:
        return
    if not (np.issubdtype(colors.dtype, np.integer) or np.issubdtype(colors.dtype, np.floating)):
        raise ContractViolation(f"colors must be numeric, got dtype {colors.dtype}")
    if not np.all(np.mod(colors, 1) == 0) or colors.min() < 0 or colors.max() > 255:
        raise ContractViolation("colors must be integers in [0, 255]")


def check_indices(indices: Sequence[int], size: int) -> NDArray[np.intp]:
    """
    Validate point indices against a collection of ``size`` elements.

    Raises:
        ContractViolation: If indices is not a 1D integer sequence or holds an
                           index outside [0, size).
    """
    idx = np.asarray(indices)
    if idx.size == 0:
        return idx.astype(np.intp).reshape(0)
    if idx.ndim != 1 or not np.issubdtype(idx.dtype, np.integer):
        raise ContractViolation(f"indices must be a 1D integer sequence, got {idx!r}")
    if idx.min() < 0 or idx.max() >= size:
        raise ContractViolation(f"indices out of range for a collection of {size} points")
    return idx.astype(np.intp)


@dataclass(frozen=True, eq=False)
class PointCloud:
    """
    Ordered point collection with optional per-point colors and normals.

    Order is meaningful (scan order, time order) and is preserved by every
    operation. The attribute shape of the cloud (see ``point_type``) is one
    of the four point variants.

    Attributes:
        points: Positions, shape (N, 3), meters.
        colors: Optional 8-bit colors, integers in [0, 255], shape (N, 3).
        normals: Optional surface normals, shape (N, 3).
    """

    points: np.ndarray
    colors: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        points = _frozen_array(self.points, "points", np.float64)
        object.__setattr__(self, "points", points)

        for name, dtype in (("colors", np.uint8), ("normals", np.float64)):
            values = getattr(self, name)
            if values is None:
                continue
            if name == "colors":
                _check_colors(values)
            arr = _frozen_array(values, name, dtype)
            if arr.shape[0] != points.shape[0]:
                raise ContractViolation(
                    f"{name} has {arr.shape[0]} rows but points has {points.shape[0]}"
                )
            object.__setattr__(self, name, arr)

    @property
    def point_type(self) -> Type:
        """The point variant describing this cloud's attributes."""
        if self.colors is None:
            return PointXYZ if self.normals is None else PointNormal
        return PointXYZRGB if self.normals is None else PointXYZRGBNormal

    def __len__(self) -> int:
        return self.points.shape[0]

    def __getitem__(self, index: int) -> PointVariant:
        x, y, z = (float(v) for v in self.points[index])
        kind = self.point_type
        if kind is PointXYZ:
            return PointXYZ(x, y, z)
        if kind is PointNormal:
            return PointNormal(x, y, z, *(float(v) for v in self.normals[index]))
        rgb = tuple(int(c) for c in self.colors[index])
        if kind is PointXYZRGB:
            return PointXYZRGB(x, y, z, rgb)
        return PointXYZRGBNormal(x, y, z, rgb, *(float(v) for v in self.normals[index]))

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def select(self, indices: Sequence[int]) -> "PointCloud":
        """
        Return a new cloud holding the points at ``indices``, in that order.

        Raises:
            ContractViolation: If indices is not 1D or contains an index
                               outside [0, len(self)).
        """
        idx = check_indices(indices, len(self))
        return PointCloud(
            points=self.points[idx],
            colors=None if self.colors is None else self.colors[idx],
            normals=None if self.normals is None else self.normals[idx],
        )

    @classmethod
    def from_points(cls, points: Sequence[PointVariant]) -> "PointCloud":
        """
        Build a cloud from point variants of one single type.

        Raises:
            ContractViolation: If the points mix attribute shapes.
        """
        points = list(points)
        if not points:
            return cls(points=np.empty((0, 3)))

        kind = type(points[0])
        if kind not in POINT_VARIANTS or any(type(p) is not kind for p in points):
            raise ContractViolation("All points of a cloud must share one point type")

        xyz = np.array([[p.x, p.y, p.z] for p in points], dtype=np.float64)
        colors = None
        normals = None
        if kind in (PointXYZRGB, PointXYZRGBNormal):
            colors = np.array([p.rgb for p in points], dtype=np.uint8)
        if kind in (PointNormal, PointXYZRGBNormal):
            normals = np.array([p.normal for p in points], dtype=np.float64)
        return cls(points=xyz, colors=colors, normals=normals)


# ----------------------------------------------------------------------
# Laser scan layouts
# ----------------------------------------------------------------------


class ScanEncoding(Enum):
    """
    Closed set of laser scan record layouts.

    The value of each member is its number of float fields per record.

    Attributes:
        XY: Planar scan [x, y].
        XYZ: 3D scan [x, y, z].
        XYZI: 3D scan with intensity [x, y, z, i].
        XYZ_NORMAL: 3D scan with normals [x, y, z, nx, ny, nz].
    """

    XY = 2
    XYZ = 3
    XYZI = 4
    XYZ_NORMAL = 6

    @property
    def num_fields(self) -> int:
        return self.value

    @property
    def stride(self) -> int:
        """Bytes per record for float32 buffers."""
        return self.value * np.dtype(np.float32).itemsize

    @property
    def position_fields(self) -> slice:
        return slice(0, 2) if self is ScanEncoding.XY else slice(0, 3)

    @property
    def normal_fields(self) -> Optional[slice]:
        return slice(3, 6) if self is ScanEncoding.XYZ_NORMAL else None

    @classmethod
    def from_width(cls, width: int) -> "ScanEncoding":
        """
        Resolve the encoding of records holding ``width`` float fields.

        Raises:
            ContractViolation: If width is not 2, 3, 4 or 6.
        """
        try:
            return cls(int(width))
        except ValueError:
            supported = sorted(e.value for e in cls)
            raise ContractViolation(
                f"Unsupported scan record width {width}, expected one of {supported}"
            ) from None
