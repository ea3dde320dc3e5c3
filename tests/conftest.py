"""
Shared test fixtures and configuration for the planner test suite.

Every test gets an isolated PlannerConfig singleton backed by a temporary
directory, so nothing reads or writes the repository's data/ folder.
"""

from typing import Iterable, Sequence

import numpy as np
import pytest

import src.config.planner_config as planner_config_mod
from src.planning.reachability_map import ReachabilityMap
from src.utils.random_sampling import RandomSampler


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_planner_config(tmp_path, monkeypatch):
    """Point the config singleton at tmp_path and reset it around each test."""
    monkeypatch.setattr(planner_config_mod, "_CONFIG_DIR", tmp_path)
    monkeypatch.setattr(planner_config_mod, "_CONFIG_FILE", tmp_path / "planner_config.json")
    planner_config_mod.PlannerConfig._instance = None
    yield tmp_path
    planner_config_mod.PlannerConfig._instance = None


# ---------------------------------------------------------------------------
# Oracle doubles
# ---------------------------------------------------------------------------

class PointKinematics:
    """Two-frame chain whose effector sits at (q0, q1, q2...) directly."""

    link_names = ["base_link", "tool0"]

    def compute_link_poses(self, joint_angles: Sequence[float]):
        tool = np.eye(4)
        q = np.asarray(joint_angles, dtype=float)
        tool[: min(3, q.size), 3] = q[:3]
        return [np.eye(4), tool]


class ThresholdCollision:
    """Reports a collision whenever the effector x coordinate exceeds `x_max`."""

    def __init__(self, x_max: float = float("inf"), env_index: int | None = 7):
        self.x_max = x_max
        self.env_index = env_index
        self.excluded_seen: list[set] = []

    def get_link_index(self, name: str) -> int:
        if name == "env_link" and self.env_index is not None:
            return self.env_index
        raise KeyError(name)

    def has_collision(self, link_poses, excluded_link_indices: Iterable[int]) -> bool:
        self.excluded_seen.append(set(excluded_link_indices))
        return bool(link_poses[-1][0, 3] > self.x_max)


@pytest.fixture
def point_kinematics():
    return PointKinematics()


@pytest.fixture
def sampler():
    return RandomSampler(seed=1234)


@pytest.fixture
def grid_3x3():
    """Empty 2-D map with 3x3 unit voxels covering [0, 3) x [0, 3)."""
    rmap = ReachabilityMap(voxel_size=1.0, dimension=2)
    rmap.set_bounds([0.0, 0.0], [3.0, 3.0])
    return rmap


@pytest.fixture
def make_collision():
    """Factory for threshold collision oracles."""
    return ThresholdCollision
