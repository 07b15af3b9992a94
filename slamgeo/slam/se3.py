"""SE(3) operations on 3x4 rigid transform matrices.

This module implements the array-level kernels behind RigidTransform. A rigid
transform is stored as a 3x4 matrix [R | t] where R is a 3x3 rotation block
(orthonormal, det = +1) and t is the 3x1 translation.

Key functions:
    - se3_compose: Compose two transforms (T1 ∘ T2)
    - se3_inverse: Invert a transform
    - se3_apply: Transform points (rotation + translation)
    - se3_rotate: Transform direction vectors such as normals (rotation only)
    - se3_to_matrix4 / se3_from_matrix4: Homogeneous 4x4 conversion

All functions accept a single (3,) vector or an (N, 3) array where points
are involved and always return newly allocated float64 arrays.
"""

import numpy as np
from numpy.typing import NDArray

IDENTITY_3X4 = np.hstack([np.eye(3), np.zeros((3, 1))])


def _check_matrix(T: np.ndarray, name: str = "T") -> None:
    if T.shape != (3, 4):
        raise ValueError(f"{name} must have shape (3, 4), got {T.shape}")


def se3_compose(T1: np.ndarray, T2: np.ndarray) -> NDArray[np.float64]:
    """
    Compose two SE(3) transforms: T = T1 ∘ T2.

    Applying the result to a point is equivalent to applying T2 first and
    then T1:
        R = R1 @ R2
        t = R1 @ t2 + t1

    Args:
        T1: Left transform, shape (3, 4).
        T2: Right transform, shape (3, 4).

    Returns:
        Composed transform, shape (3, 4).

    Raises:
        ValueError: If either input does not have shape (3, 4).

    Examples:
        >>> T = np.hstack([np.eye(3), [[1.0], [2.0], [3.0]]])
        >>> np.allclose(se3_compose(T, IDENTITY_3X4), T)
        True
    """
    T1 = np.asarray(T1, dtype=np.float64)
    T2 = np.asarray(T2, dtype=np.float64)
    _check_matrix(T1, "T1")
    _check_matrix(T2, "T2")

    R1, t1 = T1[:, :3], T1[:, 3]
    R2, t2 = T2[:, :3], T2[:, 3]

    out = np.empty((3, 4), dtype=np.float64)
    out[:, :3] = R1 @ R2
    out[:, 3] = R1 @ t2 + t1
    return out


def se3_inverse(T: np.ndarray) -> NDArray[np.float64]:
    """
    Invert an SE(3) transform.

    Uses the closed form for rigid transforms instead of a general matrix
    inverse:
        R_inv = R^T
        t_inv = -R^T @ t

    Args:
        T: Transform to invert, shape (3, 4).

    Returns:
        Inverted transform, shape (3, 4).

    Raises:
        ValueError: If T does not have shape (3, 4).
    """
    T = np.asarray(T, dtype=np.float64)
    _check_matrix(T)

    R_t = T[:, :3].T
    out = np.empty((3, 4), dtype=np.float64)
    out[:, :3] = R_t
    out[:, 3] = -R_t @ T[:, 3]
    return out


def se3_apply(T: np.ndarray, points: np.ndarray) -> NDArray[np.float64]:
    """
    Transform points by an SE(3) transform: p' = R @ p + t.

    Args:
        T: Transform, shape (3, 4).
        points: Single point (3,) or points (N, 3).

    Returns:
        Transformed points with the same shape as the input.

    Raises:
        ValueError: If T or points have an invalid shape.

    Examples:
        >>> T = np.hstack([np.eye(3), [[1.0], [0.0], [0.0]]])
        >>> se3_apply(T, np.array([0.0, 0.0, 0.0]))
        array([1., 0., 0.])
    """
    T = np.asarray(T, dtype=np.float64)
    _check_matrix(T)
    points = np.asarray(points, dtype=np.float64)

    if points.ndim == 1:
        if points.shape != (3,):
            raise ValueError(f"Point must have shape (3,), got {points.shape}")
        return T[:, :3] @ points + T[:, 3]

    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Points must have shape (N, 3), got {points.shape}")

    return points @ T[:, :3].T + T[:, 3]


def se3_rotate(T: np.ndarray, vectors: np.ndarray) -> NDArray[np.float64]:
    """
    Rotate direction vectors by the rotation block of an SE(3) transform.

    Translation is excluded: v' = R @ v. Used for surface normals and other
    directions.

    Args:
        T: Transform, shape (3, 4).
        vectors: Single vector (3,) or vectors (N, 3).

    Returns:
        Rotated vectors with the same shape as the input.

    Raises:
        ValueError: If T or vectors have an invalid shape.
    """
    T = np.asarray(T, dtype=np.float64)
    _check_matrix(T)
    vectors = np.asarray(vectors, dtype=np.float64)

    if vectors.ndim == 1:
        if vectors.shape != (3,):
            raise ValueError(f"Vector must have shape (3,), got {vectors.shape}")
        return T[:, :3] @ vectors

    if vectors.ndim != 2 or vectors.shape[1] != 3:
        raise ValueError(f"Vectors must have shape (N, 3), got {vectors.shape}")

    return vectors @ T[:, :3].T


def se3_to_matrix4(T: np.ndarray) -> NDArray[np.float64]:
    """Return the 4x4 homogeneous form of a 3x4 transform."""
    T = np.asarray(T, dtype=np.float64)
    _check_matrix(T)
    out = np.eye(4, dtype=np.float64)
    out[:3, :] = T
    return out


def se3_from_matrix4(M: np.ndarray) -> NDArray[np.float64]:
    """
    Extract the 3x4 block of a 4x4 homogeneous transform.

    Raises:
        ValueError: If M is not 4x4 or its last row is not [0, 0, 0, 1].
    """
    M = np.asarray(M, dtype=np.float64)
    if M.shape != (4, 4):
        raise ValueError(f"Matrix must have shape (4, 4), got {M.shape}")
    if not np.allclose(M[3], [0.0, 0.0, 0.0, 1.0]):
        raise ValueError(f"Last row must be [0, 0, 0, 1], got {M[3]}")
    return M[:3, :].copy()
