"""Unit tests for slamgeo.eval.metrics module."""

import numpy as np
import pytest

from slamgeo.eval import (
    compute_error_stats,
    compute_rotational_errors,
    compute_translational_errors,
    evaluate_trajectory,
)
from slamgeo.exceptions import ContractViolation
from slamgeo.slam import RigidTransform

S = RigidTransform.from_xyz_rpy(-3.0, 8.0, 0.5, 0.02, 0.03, -1.1)


def helix_poses(n: int):
    t = np.linspace(0.0, 4.0 * np.pi, n)
    return [
        RigidTransform.from_xyz_rpy(
            10.0 * np.cos(ti), 10.0 * np.sin(ti), 0.5 * ti, 0.0, 0.0, ti + np.pi / 2
        )
        for ti in t
    ]


class TestComputeErrorStats:
    """Test suite for compute_error_stats function."""

    def test_known_values(self):
        stats = compute_error_stats(np.array([1.0, 2.0, 3.0, 4.0]))

        assert stats["rmse"] == pytest.approx(np.sqrt(7.5))
        assert stats["mean"] == pytest.approx(2.5)
        assert stats["median"] == pytest.approx(2.5)
        assert stats["std"] == pytest.approx(np.sqrt(1.25))
        assert stats["min"] == 1.0
        assert stats["max"] == 4.0

    def test_median_independent_of_order(self):
        stats = compute_error_stats(np.array([9.0, 1.0, 5.0]))

        assert stats["median"] == 5.0

    def test_single_value(self):
        stats = compute_error_stats(np.array([0.3]))

        assert stats["rmse"] == pytest.approx(0.3)
        assert stats["std"] == 0.0

    def test_empty_rejected(self):
        with pytest.raises(ContractViolation):
            compute_error_stats(np.array([]))


class TestPerPoseErrors:
    """Test suite for translational and rotational errors."""

    def test_translational(self):
        ref = np.zeros((2, 3))
        est = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, -2.0]])

        np.testing.assert_allclose(compute_translational_errors(ref, est), [5.0, 2.0])

    def test_translational_shape_mismatch(self):
        with pytest.raises(ContractViolation):
            compute_translational_errors(np.zeros((2, 3)), np.zeros((3, 3)))

    def test_rotational_yaw(self):
        """Test that a 90° heading difference is a 90° error."""
        ref = [RigidTransform.identity()]
        est = [RigidTransform.from_xyz_rpy(0.0, 0.0, 0.0, 0.0, 0.0, np.pi / 2)]

        np.testing.assert_allclose(compute_rotational_errors(ref, est), [90.0], atol=1e-9)

    def test_rotational_ignores_roll(self):
        """Test that a rotation about the x axis leaves the heading unchanged."""
        ref = [RigidTransform.identity()]
        est = [RigidTransform.from_xyz_rpy(5.0, 0.0, 0.0, 0.7, 0.0, 0.0)]

        np.testing.assert_allclose(compute_rotational_errors(ref, est), [0.0], atol=1e-6)

    def test_rotational_length_mismatch(self):
        with pytest.raises(ContractViolation):
            compute_rotational_errors([RigidTransform.identity()], [])


class TestEvaluateTrajectory:
    """Test suite for evaluate_trajectory function."""

    def test_rigidly_displaced_estimate_has_no_error(self):
        reference = helix_poses(30)
        estimate = [S * pose for pose in reference]

        report = evaluate_trajectory(reference, estimate)

        assert report.alignment.method == "svd"
        assert len(report.aligned_estimate) == 30
        assert report.translational["rmse"] < 1e-6
        assert report.rotational["max"] < 1e-4

    def test_short_trajectory_uses_anchor(self):
        reference = helix_poses(3)
        estimate = [S * pose for pose in reference]

        report = evaluate_trajectory(reference, estimate)

        assert report.alignment.method == "anchor"
        assert report.translational_errors[0] == pytest.approx(0.0, abs=1e-9)
        assert report.translational["max"] < 1e-6

    def test_noisy_estimate(self):
        reference = helix_poses(40)
        offsets = np.random.default_rng(2).normal(scale=0.1, size=(40, 3))
        estimate = [
            S * RigidTransform.from_rotation_translation(p.rotation, p.translation + d)
            for p, d in zip(reference, offsets)
        ]

        report = evaluate_trajectory(reference, estimate)

        assert 0.05 < report.translational["rmse"] < 0.3
        assert report.translational["min"] <= report.translational["median"]
        assert report.translational["median"] <= report.translational["max"]

    def test_missing_reference_skipped(self):
        reference = helix_poses(10)
        estimate = [S * pose for pose in reference]
        reference[0] = None
        reference[4] = None

        report = evaluate_trajectory(reference, estimate)

        assert report.alignment.num_correspondences == 8
        assert len(report.translational_errors) == 8
        assert len(report.aligned_estimate) == 10

    def test_no_reference_rejected(self):
        with pytest.raises(ContractViolation):
            evaluate_trajectory([None, None], helix_poses(2))

    def test_position_arrays_rejected(self):
        with pytest.raises(ContractViolation):
            evaluate_trajectory(np.zeros((5, 3)), np.zeros((5, 3)))
