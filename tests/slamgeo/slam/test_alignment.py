"""Unit tests for slamgeo.slam.alignment module.

Tests SVD alignment of corresponding points, the alignment policy
(SVD / anchor / identity) and application of the result to a trajectory.
"""

import logging

import numpy as np
import pytest

from slamgeo.exceptions import ContractViolation
from slamgeo.slam import (
    AlignmentConfig,
    RigidTransform,
    align_svd_3d,
    align_trajectories,
    apply_alignment,
)

S = RigidTransform.from_xyz_rpy(12.0, -4.0, 1.5, 0.05, -0.1, 0.8)


def helix(n: int) -> np.ndarray:
    """Non-degenerate 3D curve (positions spread over all three axes)."""
    t = np.linspace(0.0, 4.0 * np.pi, n)
    return np.column_stack([10.0 * np.cos(t), 10.0 * np.sin(t), 0.5 * t])


def helix_poses(n: int):
    positions = helix(n)
    yaws = np.linspace(0.0, 4.0 * np.pi, n) + np.pi / 2
    return [
        RigidTransform.from_xyz_rpy(*p, 0.0, 0.0, yaw) for p, yaw in zip(positions, yaws)
    ]


class TestAlignSVD3D:
    """Test suite for align_svd_3d function."""

    def test_recovers_known_transform(self):
        source = np.random.default_rng(0).normal(size=(30, 3))

        T = align_svd_3d(source, S.apply(source))

        assert T.allclose(S, atol=1e-9)

    def test_exactly_three_points(self):
        source = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 2.0, 0.0]])

        T = align_svd_3d(source, S.apply(source))

        np.testing.assert_allclose(T.apply(source), S.apply(source), atol=1e-9)

    def test_reflected_target_gives_proper_rotation(self):
        """Test that a mirrored target still yields det(R) = +1."""
        source = np.random.default_rng(1).normal(size=(20, 3))
        mirrored = source * np.array([1.0, 1.0, -1.0])

        T = align_svd_3d(source, mirrored)

        assert np.linalg.det(T.rotation) == pytest.approx(1.0, abs=1e-9)

    def test_too_few_points(self):
        with pytest.raises(ContractViolation, match="at least 3"):
            align_svd_3d(np.zeros((2, 3)), np.zeros((2, 3)))

    def test_shape_mismatch(self):
        with pytest.raises(ContractViolation, match="same shape"):
            align_svd_3d(np.zeros((4, 3)), np.zeros((5, 3)))

    def test_not_3d(self):
        with pytest.raises(ContractViolation):
            align_svd_3d(np.zeros((4, 2)), np.zeros((4, 2)))


class TestAlignTrajectories:
    """Test suite for align_trajectories function."""

    def test_svd_recovers_inverse(self):
        """Test estimate = S(reference): the alignment is S⁻¹ and registers exactly."""
        reference = helix(20)
        estimate = S.apply(reference)

        result = align_trajectories(reference, estimate)

        assert result.method == "svd"
        assert result.num_correspondences == 20
        assert result.transform.allclose(S.inverse(), atol=1e-9)
        np.testing.assert_allclose(
            apply_alignment(result.transform, estimate), reference, atol=1e-6
        )

    def test_svd_on_poses(self):
        reference = helix_poses(10)
        estimate = [S * pose for pose in reference]

        result = align_trajectories(reference, estimate)

        assert result.method == "svd"
        aligned = apply_alignment(result.transform, estimate)
        for ref, est in zip(reference, aligned):
            assert est.allclose(ref, atol=1e-6)

    def test_anchor_on_points(self):
        """Test that with few correspondences the first one is matched exactly."""
        reference = helix(4)
        estimate = S.apply(reference)

        result = align_trajectories(reference, estimate)

        assert result.method == "anchor"
        assert result.num_correspondences == 4
        np.testing.assert_allclose(
            result.transform.apply(estimate[0]), reference[0], atol=1e-9
        )

    def test_anchor_on_poses(self):
        """Test that the anchor pose is reproduced in full (rotation included)."""
        reference = helix_poses(5)
        estimate = [S * pose for pose in reference]

        result = align_trajectories(reference, estimate)

        assert result.method == "anchor"
        assert (result.transform * estimate[0]).allclose(reference[0], atol=1e-9)
        # Estimate differs from reference by a constant rigid transform, so the
        # anchor transform registers every pose.
        for ref, est in zip(reference, apply_alignment(result.transform, estimate)):
            assert est.allclose(ref, atol=1e-6)

    def test_threshold_boundary(self):
        """Test that 5 correspondences anchor and 6 use SVD."""
        assert align_trajectories(helix(5), S.apply(helix(5))).method == "anchor"
        assert align_trajectories(helix(6), S.apply(helix(6))).method == "svd"

    def test_custom_threshold(self):
        config = AlignmentConfig(min_svd_correspondences=3)

        result = align_trajectories(helix(4), S.apply(helix(4)), config)

        assert result.method == "svd"

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            AlignmentConfig(min_svd_correspondences=2)

    def test_no_correspondence_is_identity(self):
        result = align_trajectories(np.empty((0, 3)), np.empty((0, 3)))

        assert result.method == "identity"
        assert result.num_correspondences == 0
        assert result.transform.is_identity()

    def test_all_missing_is_identity(self):
        reference = [None, None, None]
        estimate = helix_poses(3)

        result = align_trajectories(reference, estimate)

        assert result.method == "identity"

    def test_length_mismatch(self):
        with pytest.raises(ContractViolation, match="same length"):
            align_trajectories(helix(5), helix(6))

    def test_missing_samples_skipped(self):
        """Test that the anchor moves to the first sample with ground truth."""
        reference = helix_poses(4)
        estimate = [S * pose for pose in reference]
        reference_with_gap = [None, None] + reference[2:]

        result = align_trajectories(reference_with_gap, estimate)

        assert result.method == "anchor"
        assert result.num_correspondences == 2
        assert (result.transform * estimate[2]).allclose(reference[2], atol=1e-9)

    def test_nan_rows_skipped(self):
        reference = helix(12)
        estimate = S.apply(reference)
        reference[[0, 5, 7]] = np.nan

        result = align_trajectories(reference, estimate)

        assert result.method == "svd"
        assert result.num_correspondences == 9
        assert result.transform.allclose(S.inverse(), atol=1e-9)

    def test_mixed_points_and_poses_rejected(self):
        with pytest.raises(ContractViolation, match="mixes"):
            align_trajectories(
                [RigidTransform.identity(), np.zeros(3)], helix(2)
            )

    def test_anchor_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="slamgeo.slam.alignment"):
            align_trajectories(helix(3), S.apply(helix(3)))

        assert "anchoring alignment" in caplog.text


class TestApplyAlignment:
    """Test suite for apply_alignment function."""

    def test_applies_to_every_sample(self):
        """Test that samples not used for the alignment are transformed too."""
        reference = [None] + helix_poses(3)[1:]
        estimate = helix_poses(3)
        T = RigidTransform.from_translation(np.array([1.0, 0.0, 0.0]))

        aligned = apply_alignment(T, estimate)

        assert aligned[0].allclose(T * estimate[0], atol=1e-12)
        assert len(aligned) == len(reference)

    def test_none_entries_kept(self):
        T = RigidTransform.from_translation(np.array([0.0, 1.0, 0.0]))

        aligned = apply_alignment(T, [None, RigidTransform.identity()])

        assert aligned[0] is None
        np.testing.assert_allclose(aligned[1].translation, [0.0, 1.0, 0.0])

    def test_nested_list_positions_return_array(self):
        T = RigidTransform.from_translation(np.array([1.0, 0.0, 0.0]))

        aligned = apply_alignment(T, [[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]])

        assert isinstance(aligned, np.ndarray)
        np.testing.assert_allclose(aligned, [[1.0, 0.0, 0.0], [2.0, 2.0, 3.0]])

    def test_points(self):
        T = RigidTransform.from_translation(np.array([0.0, 0.0, 2.0]))

        aligned = apply_alignment(T, np.zeros((3, 3)))

        np.testing.assert_allclose(aligned, [[0.0, 0.0, 2.0]] * 3)

    def test_null_transform_copies(self):
        positions = helix(5)

        aligned = apply_alignment(None, positions)

        assert aligned is not positions
        np.testing.assert_array_equal(aligned, positions)
