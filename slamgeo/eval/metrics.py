"""
Trajectory error metrics after ground-truth alignment.

This module computes per-pose absolute errors between an estimated
trajectory and ground truth, together with summary statistics.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..exceptions import ContractViolation
from ..slam.alignment import (
    AlignmentConfig,
    AlignmentResult,
    align_trajectories,
    apply_alignment,
)
from ..slam.types import RigidTransform

_X_AXIS = np.array([1.0, 0.0, 0.0])


def compute_translational_errors(
    reference: np.ndarray, estimate: np.ndarray
) -> np.ndarray:
    """
    Compute per-sample translational errors.

    Args:
        reference: True positions, shape (N, 3)
        estimate: Estimated positions, shape (N, 3)

    Returns:
        errors: Euclidean distances, shape (N,), meters

    Raises:
        ContractViolation: If inputs have incompatible shapes
    """
    reference = np.asarray(reference, dtype=np.float64)
    estimate = np.asarray(estimate, dtype=np.float64)

    if reference.shape != estimate.shape:
        raise ContractViolation(
            f"Shape mismatch: reference {reference.shape} vs estimate {estimate.shape}"
        )

    return np.linalg.norm(estimate - reference, axis=-1)


def compute_rotational_errors(
    reference_poses: Sequence[RigidTransform],
    estimate_poses: Sequence[RigidTransform],
) -> np.ndarray:
    """
    Compute per-pose rotational errors in degrees.

    The error is the angle between the x-axes of the two poses once rotated
    into the world frame, i.e. how far the estimated heading points away
    from the true one.

    Args:
        reference_poses: True poses
        estimate_poses: Estimated poses, same length

    Returns:
        errors: Angles in degrees, shape (N,)
    """
    if len(reference_poses) != len(estimate_poses):
        raise ContractViolation(
            f"Length mismatch: reference {len(reference_poses)} vs "
            f"estimate {len(estimate_poses)}"
        )

    errors = np.zeros(len(reference_poses))
    for i, (ref, est) in enumerate(zip(reference_poses, estimate_poses)):
        v_ref = ref.rotate(_X_AXIS)
        v_est = est.rotate(_X_AXIS)
        cos_angle = v_ref @ v_est / (np.linalg.norm(v_ref) * np.linalg.norm(v_est))
        errors[i] = np.rad2deg(np.arccos(np.clip(cos_angle, -1.0, 1.0)))

    return errors


def compute_error_stats(errors: np.ndarray) -> Dict[str, float]:
    """
    Compute error statistics.

    Args:
        errors: Error magnitudes, shape (N,), N >= 1

    Returns:
        stats: Dictionary with keys:
               - 'rmse': Root mean square error
               - 'mean': Mean error
               - 'median': Median error
               - 'std': Standard deviation
               - 'min': Minimum error
               - 'max': Maximum error
    """
    errors = np.abs(np.asarray(errors, dtype=np.float64).ravel())
    if errors.size == 0:
        raise ContractViolation("Cannot compute statistics of an empty error set")

    return {
        "rmse": float(np.sqrt(np.mean(errors**2))),
        "mean": float(np.mean(errors)),
        "median": float(np.median(errors)),
        "std": float(np.std(errors)),
        "min": float(np.min(errors)),
        "max": float(np.max(errors)),
    }


@dataclass
class TrajectoryErrorReport:
    """
    Result of ``evaluate_trajectory``.

    Attributes:
        alignment: Alignment applied to the estimate before measuring errors.
        aligned_estimate: The whole estimate after alignment.
        translational_errors: Per-pose errors (m) on valid correspondences.
        rotational_errors: Per-pose errors (deg) on valid correspondences.
        translational: Statistics of translational_errors.
        rotational: Statistics of rotational_errors.
    """

    alignment: AlignmentResult
    aligned_estimate: List[Optional[RigidTransform]]
    translational_errors: np.ndarray
    rotational_errors: np.ndarray
    translational: Dict[str, float]
    rotational: Dict[str, float]


def evaluate_trajectory(
    reference_poses: Sequence[Optional[RigidTransform]],
    estimate_poses: Sequence[Optional[RigidTransform]],
    config: Optional[AlignmentConfig] = None,
) -> TrajectoryErrorReport:
    """
    Align an estimated trajectory on ground truth and measure its errors.

    The alignment transform is applied to every estimated pose before the
    errors are computed. Samples whose reference or estimate is None are
    skipped.

    Args:
        reference_poses: Ground-truth poses, None where unavailable
        estimate_poses: Estimated poses, same length
        config: Alignment policy

    Returns:
        report: TrajectoryErrorReport

    Raises:
        ContractViolation: If lengths differ or no valid pair exists
    """
    if isinstance(reference_poses, np.ndarray) or isinstance(estimate_poses, np.ndarray):
        raise ContractViolation("evaluate_trajectory needs poses, not position arrays")

    alignment = align_trajectories(reference_poses, estimate_poses, config)
    aligned = apply_alignment(alignment.transform, estimate_poses)

    pairs = [
        (ref, est)
        for ref, est in zip(reference_poses, aligned)
        if ref is not None and est is not None
    ]
    if not pairs:
        raise ContractViolation("No pose has both a reference and an estimate")

    refs = [ref for ref, _ in pairs]
    ests = [est for _, est in pairs]

    translational_errors = compute_translational_errors(
        np.array([p.translation for p in refs]),
        np.array([p.translation for p in ests]),
    )
    rotational_errors = compute_rotational_errors(refs, ests)

    return TrajectoryErrorReport(
        alignment=alignment,
        aligned_estimate=aligned,
        translational_errors=translational_errors,
        rotational_errors=rotational_errors,
        translational=compute_error_stats(translational_errors),
        rotational=compute_error_stats(rotational_errors),
    )
