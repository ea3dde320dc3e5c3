"""Tests for seedable random sampling."""

import numpy as np
import pytest

from src.utils.random_sampling import RandomSampler


class TestUniform:
    def test_reproducible(self):
        a = RandomSampler(7).uniform([0.0, -1.0], [1.0, 1.0])
        b = RandomSampler(7).uniform([0.0, -1.0], [1.0, 1.0])
        np.testing.assert_array_equal(a, b)

    def test_scalar(self):
        v = RandomSampler(1).uniform(2.0, 3.0)
        assert isinstance(v, float)
        assert 2.0 <= v < 3.0

    def test_vector_within_bounds(self):
        s = RandomSampler(2)
        low, high = np.array([-1.0, 0.0, 5.0]), np.array([1.0, 0.5, 6.0])
        for _ in range(200):
            v = s.uniform(low, high)
            assert v.shape == (3,)
            assert np.all(v >= low) and np.all(v < high)

    def test_shared_generator(self):
        rng = np.random.default_rng(3)
        assert RandomSampler(rng).rng is rng


class TestRotations:
    def test_unit_sphere(self):
        s = RandomSampler(4)
        pts = np.array([s.unit_sphere() for _ in range(500)])
        np.testing.assert_allclose(np.linalg.norm(pts, axis=1), 1.0)
        # roughly centered
        assert np.all(np.abs(pts.mean(axis=0)) < 0.15)

    def test_unit_quaternion(self):
        s = RandomSampler(5)
        for _ in range(20):
            q = s.unit_quaternion()
            assert q.shape == (4,)
            assert np.linalg.norm(q) == pytest.approx(1.0)

    def test_orientation_normal_zero_sigma(self):
        mean = np.array([0.0, 0.0, np.sin(0.3), np.cos(0.3)])
        q = RandomSampler(6).orientation_normal(mean, 0.0)
        assert abs(float(q @ mean)) == pytest.approx(1.0)

    def test_orientation_normal_spread(self):
        s = RandomSampler(8)
        mean = np.array([0.0, 0.0, 0.0, 1.0])
        dots = [abs(float(s.orientation_normal(mean, 0.05) @ mean)) for _ in range(100)]
        assert min(dots) > 0.99
