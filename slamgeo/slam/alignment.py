"""Rigid alignment of an estimated trajectory onto ground truth.

Before drift errors can be reported, an estimated trajectory (odometry or
SLAM output) has to be expressed in the ground-truth frame. This module
computes the rigid transform T minimising

    sum_i || A_i - T B_i ||²

between a reference trajectory A and an estimate B with index-wise
correspondence, and applies it to the whole estimate.

Key functions:
    - align_svd_3d: Closed-form SVD (Kabsch) alignment of corresponding points
    - align_trajectories: Alignment policy (SVD / anchor fallback / identity)
    - apply_alignment: Apply the result to an entire trajectory

A trajectory is either an (N, 3) array of positions or a sequence of
RigidTransform poses. ``None`` entries (or NaN rows) mark samples without a
valid correspondence, e.g. frames with no ground truth, and are skipped when
estimating the transform.
"""

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Tuple, Union

import numpy as np

from ..exceptions import ContractViolation
from .point_transforms import transform_point_cloud
from .types import RigidTransform, is_noop

logger = logging.getLogger(__name__)

Trajectory = Union[np.ndarray, Sequence[Optional[RigidTransform]]]
AlignmentMethod = Literal["svd", "anchor", "identity"]


@dataclass
class AlignmentConfig:
    """
    Policy constants for trajectory alignment.

    Attributes:
        min_svd_correspondences: Minimum number of valid correspondences for
            the SVD solution. Below it the transform is anchored on the
            first valid correspondence. Default 6.
    """

    min_svd_correspondences: int = 6

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.min_svd_correspondences < 3:
            raise ValueError(
                "min_svd_correspondences must be >= 3 to determine a 3D rotation, "
                f"got {self.min_svd_correspondences}"
            )


@dataclass(frozen=True)
class AlignmentResult:
    """
    Outcome of ``align_trajectories``.

    Attributes:
        transform: Transform mapping the estimate frame onto the reference
                   frame.
        method: "svd", "anchor" or "identity" (no valid correspondence).
        num_correspondences: Number of valid correspondences used.
    """

    transform: RigidTransform
    method: AlignmentMethod
    num_correspondences: int


def align_svd_3d(source: np.ndarray, target: np.ndarray) -> RigidTransform:
    """
    Compute the optimal rigid alignment of corresponding 3D points via SVD.

    The algorithm:
        1. Compute centroids of both point sets.
        2. Center the point sets.
        3. Cross-covariance H = sum_i (source_i)(target_i)^T.
        4. SVD: H = U Σ V^T.
        5. R = V diag(1, 1, det(V U^T)) U^T, the diagonal term preventing a
           reflection.
        6. t = centroid_target - R centroid_source.

    Args:
        source: Source points, shape (N, 3).
        target: Corresponding target points, shape (N, 3).

    Returns:
        RigidTransform T such that T.apply(source) ≈ target.

    Raises:
        ContractViolation: If shapes differ, are not (N, 3), or N < 3.

    Examples:
        >>> source = np.random.default_rng(0).normal(size=(10, 3))
        >>> T_true = RigidTransform.from_xyz_rpy(1.0, 2.0, 3.0, 0.1, 0.2, 0.3)
        >>> T = align_svd_3d(source, T_true.apply(source))
        >>> T.allclose(T_true, atol=1e-9)
        True
    """
    source = np.asarray(source, dtype=np.float64)
    target = np.asarray(target, dtype=np.float64)

    if source.shape != target.shape:
        raise ContractViolation(
            f"Point sets must have same shape. "
            f"Got source={source.shape}, target={target.shape}"
        )
    if source.ndim != 2 or source.shape[1] != 3:
        raise ContractViolation(f"Point sets must have shape (N, 3), got {source.shape}")
    if source.shape[0] < 3:
        raise ContractViolation(
            f"Need at least 3 correspondences for 3D SVD alignment, got {source.shape[0]}"
        )

    centroid_source = source.mean(axis=0)
    centroid_target = target.mean(axis=0)

    H = (source - centroid_source).T @ (target - centroid_target)  # (3, 3)
    U, _, Vt = np.linalg.svd(H)
    V = Vt.T

    D = np.eye(3)
    D[2, 2] = 1.0 if np.linalg.det(V @ U.T) >= 0.0 else -1.0
    R = V @ D @ U.T

    t = centroid_target - R @ centroid_source
    return RigidTransform.from_rotation_translation(R, t)


def _as_trajectory(
    trajectory: Trajectory, name: str
) -> Tuple[np.ndarray, Optional[List[Optional[RigidTransform]]]]:
    """Return (positions with NaN rows for missing samples, poses or None)."""
    if isinstance(trajectory, np.ndarray):
        positions = np.asarray(trajectory, dtype=np.float64)
        if positions.size == 0:
            return np.empty((0, 3)), None
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ContractViolation(f"{name} must have shape (N, 3), got {positions.shape}")
        return positions, None

    items = list(trajectory)
    if all(p is None or isinstance(p, RigidTransform) for p in items):
        positions = np.full((len(items), 3), np.nan)
        for i, pose in enumerate(items):
            if pose is not None:
                positions[i] = pose.matrix[:, 3]
        return positions, items

    if any(p is None or isinstance(p, RigidTransform) for p in items):
        raise ContractViolation(f"{name} mixes poses and bare points")
    return _as_trajectory(np.asarray(items, dtype=np.float64), name)


def align_trajectories(
    reference: Trajectory,
    estimate: Trajectory,
    config: Optional[AlignmentConfig] = None,
) -> AlignmentResult:
    """
    Compute the rigid transform registering ``estimate`` onto ``reference``.

    Policy, with n the number of valid correspondences:
        - n >= config.min_svd_correspondences (6): SVD alignment of the
          corresponding positions.
        - 1 <= n < 6: anchor transform T = A_k B_k^-1 on the first valid
          correspondence k. Exact at the anchor, approximate elsewhere.
          With poses on both sides the full poses are used, otherwise only
          the positions (pure translation).
        - n = 0: identity; the caller should leave the estimate as is.

    Args:
        reference: Ground-truth trajectory A.
        estimate: Estimated trajectory B, same length as A.
        config: Alignment policy. Defaults to AlignmentConfig().

    Returns:
        AlignmentResult holding the transform and the method used.

    Raises:
        ContractViolation: If the trajectories have different lengths or an
                           invalid shape.
    """
    if config is None:
        config = AlignmentConfig()

    ref_positions, ref_poses = _as_trajectory(reference, "reference")
    est_positions, est_poses = _as_trajectory(estimate, "estimate")

    if ref_positions.shape[0] != est_positions.shape[0]:
        raise ContractViolation(
            f"Trajectories must have the same length, got "
            f"reference={ref_positions.shape[0]}, estimate={est_positions.shape[0]}"
        )

    valid = np.flatnonzero(
        np.isfinite(ref_positions).all(axis=1) & np.isfinite(est_positions).all(axis=1)
    )
    n = int(valid.size)

    if n == 0:
        logger.debug("No valid correspondences, alignment is the identity")
        return AlignmentResult(RigidTransform.identity(), "identity", 0)

    if n >= config.min_svd_correspondences:
        transform = align_svd_3d(est_positions[valid], ref_positions[valid])
        logger.debug("SVD alignment on %d correspondences: %r", n, transform)
        return AlignmentResult(transform, "svd", n)

    anchor = int(valid[0])
    if ref_poses is not None and est_poses is not None:
        transform = ref_poses[anchor] * est_poses[anchor].inverse()
    else:
        transform = RigidTransform.from_translation(
            ref_positions[anchor] - est_positions[anchor]
        )
    logger.info(
        "Only %d correspondences (< %d), anchoring alignment on index %d",
        n,
        config.min_svd_correspondences,
        anchor,
    )
    return AlignmentResult(transform, "anchor", n)


def apply_alignment(
    transform: Optional[RigidTransform], trajectory: Trajectory
) -> Trajectory:
    """
    Apply an alignment transform to an entire trajectory.

    Every sample is transformed, not only those used to compute the
    alignment. Poses are left-multiplied (T ∘ pose); positions are
    transformed as points. ``None`` entries stay ``None``.

    Args:
        transform: Alignment transform, or None to return a copy.
        trajectory: (N, 3) positions (array or nested sequence) or a
                    sequence of poses.

    Returns:
        Positions come back as a new (N, 3) array, whatever sequence type
        held them. Poses come back as a new list.
    """
    positions, poses = _as_trajectory(trajectory, "trajectory")
    if poses is None:
        return transform_point_cloud(positions, transform)
    if is_noop(transform):
        return list(poses)
    return [None if pose is None else transform * pose for pose in poses]
