"""Unit tests for slamgeo.slam.se3 module.

Tests the array-level SE(3) kernels behind RigidTransform.
"""

import numpy as np
import pytest

from slamgeo.slam.se3 import (
    IDENTITY_3X4,
    se3_apply,
    se3_compose,
    se3_from_matrix4,
    se3_inverse,
    se3_rotate,
    se3_to_matrix4,
)


def rot_z(theta: float) -> np.ndarray:
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def make_T(theta: float, t) -> np.ndarray:
    return np.column_stack([rot_z(theta), np.asarray(t, dtype=float)])


class TestSE3Compose:
    """Test suite for se3_compose function."""

    def test_compose_identity(self):
        """Test that T ∘ I = I ∘ T = T."""
        T = make_T(0.3, [1.0, 2.0, 3.0])

        np.testing.assert_allclose(se3_compose(T, IDENTITY_3X4), T, atol=1e-12)
        np.testing.assert_allclose(se3_compose(IDENTITY_3X4, T), T, atol=1e-12)

    def test_compose_translations(self):
        """Test composing two pure translations."""
        T1 = make_T(0.0, [1.0, 0.0, 0.0])
        T2 = make_T(0.0, [2.0, 3.0, 4.0])

        result = se3_compose(T1, T2)
        np.testing.assert_allclose(result, make_T(0.0, [3.0, 3.0, 4.0]), atol=1e-12)

    def test_compose_matches_sequential_apply(self):
        """Test that (T1 ∘ T2) p = T1 (T2 p)."""
        T1 = make_T(np.pi / 2, [1.0, 0.0, 0.0])
        T2 = make_T(-0.4, [0.0, 2.0, 1.0])
        p = np.array([0.5, -1.0, 2.0])

        expected = se3_apply(T1, se3_apply(T2, p))
        np.testing.assert_allclose(se3_apply(se3_compose(T1, T2), p), expected, atol=1e-12)

    def test_invalid_shape(self):
        with pytest.raises(ValueError, match="shape"):
            se3_compose(np.eye(3), IDENTITY_3X4)


class TestSE3Inverse:
    """Test suite for se3_inverse function."""

    def test_inverse_of_identity(self):
        np.testing.assert_allclose(se3_inverse(IDENTITY_3X4), IDENTITY_3X4, atol=1e-12)

    def test_compose_with_inverse_is_identity(self):
        """Test that T ∘ T⁻¹ = identity."""
        T = make_T(1.1, [4.0, -2.0, 0.5])

        np.testing.assert_allclose(se3_compose(T, se3_inverse(T)), IDENTITY_3X4, atol=1e-12)
        np.testing.assert_allclose(se3_compose(se3_inverse(T), T), IDENTITY_3X4, atol=1e-12)

    def test_matches_matrix_inverse(self):
        T = make_T(0.7, [1.0, 2.0, 3.0])

        expected = np.linalg.inv(se3_to_matrix4(T))[:3, :]
        np.testing.assert_allclose(se3_inverse(T), expected, atol=1e-12)


class TestSE3ApplyRotate:
    """Test suite for se3_apply and se3_rotate functions."""

    def test_apply_single_point(self):
        """Test rotation by 90° about z then translation."""
        T = make_T(np.pi / 2, [1.0, 0.0, 0.0])

        result = se3_apply(T, np.array([1.0, 0.0, 0.0]))
        np.testing.assert_allclose(result, [1.0, 1.0, 0.0], atol=1e-12)

    def test_apply_batch(self):
        """Test that batch application matches per-point application."""
        T = make_T(0.3, [1.0, 2.0, 3.0])
        points = np.random.default_rng(0).normal(size=(20, 3))

        batch = se3_apply(T, points)
        single = np.array([se3_apply(T, p) for p in points])

        assert batch.shape == (20, 3)
        np.testing.assert_allclose(batch, single, atol=1e-12)

    def test_apply_empty(self):
        out = se3_apply(make_T(0.3, [1.0, 2.0, 3.0]), np.empty((0, 3)))

        assert out.shape == (0, 3)

    def test_rotate_ignores_translation(self):
        """Test that directions are not translated."""
        T = make_T(np.pi / 2, [10.0, 20.0, 30.0])

        result = se3_rotate(T, np.array([1.0, 0.0, 0.0]))
        np.testing.assert_allclose(result, [0.0, 1.0, 0.0], atol=1e-12)

    def test_apply_does_not_modify_input(self):
        points = np.array([[1.0, 2.0, 3.0]])
        original = points.copy()

        se3_apply(make_T(0.5, [1.0, 1.0, 1.0]), points)

        np.testing.assert_array_equal(points, original)

    @pytest.mark.parametrize("shape", [(2,), (4,), (5, 2), (2, 3, 3)])
    def test_invalid_point_shapes(self, shape):
        with pytest.raises(ValueError):
            se3_apply(IDENTITY_3X4, np.zeros(shape))
        with pytest.raises(ValueError):
            se3_rotate(IDENTITY_3X4, np.zeros(shape))


class TestSE3Matrix4:
    """Test suite for homogeneous 4x4 conversions."""

    def test_round_trip(self):
        T = make_T(0.2, [1.0, -1.0, 2.0])

        M = se3_to_matrix4(T)
        np.testing.assert_array_equal(M[3], [0.0, 0.0, 0.0, 1.0])
        np.testing.assert_array_equal(se3_from_matrix4(M), T)

    def test_invalid_last_row(self):
        M = np.eye(4)
        M[3, 0] = 1.0

        with pytest.raises(ValueError, match="Last row"):
            se3_from_matrix4(M)
