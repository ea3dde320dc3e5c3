"""
Seedable random sampling primitives.

Every sampler owns its own ``numpy.random.Generator`` so that map
generation and tests are reproducible and no process-wide random state
is shared between call sites.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from scipy.spatial.transform import Rotation


class RandomSampler:
    """Uniform, spherical and orientation sampling from an owned generator.

    Parameters
    ----------
    seed : int | numpy.random.Generator | None
        Seed or an existing generator.  None draws fresh OS entropy.
    """

    def __init__(self, seed: int | np.random.Generator | None = None):
        if isinstance(seed, np.random.Generator):
            self.rng = seed
        else:
            self.rng = np.random.default_rng(seed)

    def uniform(self, low: Sequence[float] | float, high: Sequence[float] | float) -> np.ndarray | float:
        """Draw uniformly from [low, high); element-wise for vectors."""
        if np.isscalar(low) and np.isscalar(high):
            return float(self.rng.uniform(low, high))
        low = np.asarray(low, dtype=np.float64)
        high = np.asarray(high, dtype=np.float64)
        return self.rng.uniform(low, high)

    def unit_sphere(self) -> np.ndarray:
        """Uniform point on the unit 2-sphere."""
        v = self.rng.normal(size=3)
        norm = np.linalg.norm(v)
        while norm < 1e-12:
            v = self.rng.normal(size=3)
            norm = np.linalg.norm(v)
        return v / norm

    def unit_quaternion(self) -> np.ndarray:
        """Uniform random rotation as a unit quaternion (x, y, z, w)."""
        return Rotation.random(None, self.rng).as_quat()

    def orientation_normal(self, mean_quat: Sequence[float], sigma: float) -> np.ndarray:
        """Perturb *mean_quat* (x, y, z, w) by a normally distributed angle.

        The rotation axis is uniform on the sphere; the angle is drawn from
        N(0, sigma).  The delta is applied in the frame of the mean rotation.
        """
        angle = self.rng.normal(0.0, sigma)
        axis = self.unit_sphere()
        mean = Rotation.from_quat(mean_quat)
        delta = Rotation.from_rotvec(axis * angle)
        return (mean * delta).as_quat()
