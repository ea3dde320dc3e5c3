"""
Reachability map for an arm's end-effector.

A dense 2-D or 3-D voxel grid counting how often the end-effector lands
in each cell when joint configurations are drawn uniformly from the
joint limits and self-colliding samples are discarded.  The normalized
count is used by planners as a spatial score:

    score(x) = (reach_count[x] - penalty[x]) / max_value

Typical usage:
    rmap = ReachabilityMap(voxel_size=0.05, dimension=3)
    rmap.generate(chain, collision_model, "tool0", 6, lower, upper)
    rmap.grow()
    score = rmap.get_value([0.3, 0.1, 0.4])
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

import numpy as np

from shared.messages.reachability import ReachabilityMapMessage
from src.planning.voxel_indexer import VoxelIndexer
from src.utils.random_sampling import RandomSampler

logger = logging.getLogger(__name__)

SUPPORTED_DIMENSIONS = (2, 3)
DEFAULT_SAMPLE_COUNT = 100_000
DEFAULT_EXCLUDED_LINKS = ("env_link",)


class ReachabilityMapError(Exception):
    """Raised when a reachability map invariant is violated."""
    pass


class GeometryMismatchError(ReachabilityMapError):
    """Raised when combining maps whose grids do not line up."""
    pass


class KinematicsOracle(Protocol):
    """Anything that can compute the pose of every link of a chain."""

    link_names: list[str]

    def compute_link_poses(self, joint_angles: np.ndarray) -> Sequence[np.ndarray]: ...


class CollisionOracle(Protocol):
    """Anything that can check a set of link poses for self-collision."""

    def get_link_index(self, name: str) -> int: ...

    def has_collision(self, link_poses: Sequence[np.ndarray], excluded_link_indices: Iterable[int]) -> bool: ...


class ReachabilityMap:
    """Monte-Carlo reachability density over an N-D voxel grid.

    Parameters
    ----------
    voxel_size : float
        Edge length of each voxel (m).
    dimension : int
        2 (planar, uses x/y of the effector) or 3.
    """

    def __init__(self, voxel_size: float, dimension: int):
        if dimension not in SUPPORTED_DIMENSIONS:
            raise ValueError(f"dimension should be 2 or 3, got {dimension}")
        if voxel_size <= 0.0:
            raise ValueError(f"voxel_size must be positive, got {voxel_size}")
        self.voxel_size = float(voxel_size)
        self.dimension = int(dimension)
        zeros = np.zeros(self.dimension)
        self._indexer = VoxelIndexer(self.voxel_size, zeros, zeros)
        self.reach_count = np.zeros(self._indexer.size, dtype=np.int64)
        self.penalty = np.zeros(self._indexer.size, dtype=np.int64)
        self.max_value = 0
        self.attempted_samples = 0
        self.accepted_samples = 0

    @classmethod
    def from_config(cls, config=None) -> ReachabilityMap:
        """Create an empty map from the ``reachability`` config section."""
        if config is None:
            from src.config.planner_config import get_planner_config
            config = get_planner_config()
        section = config.get("reachability")
        return cls(voxel_size=section["voxel_size"], dimension=section["dimension"])

    # ----- geometry -----

    @property
    def indexer(self) -> VoxelIndexer:
        return self._indexer

    @property
    def lower(self) -> np.ndarray:
        return self._indexer.lower.copy()

    @property
    def upper(self) -> np.ndarray:
        return self._indexer.upper.copy()

    @property
    def steps(self) -> np.ndarray:
        return self._indexer.steps.copy()

    def get_index(self, point: Sequence[float]) -> Optional[int]:
        """Flat cell index of *point*, or None if outside the grid."""
        return self._indexer.index(point)

    def set_bounds(self, lower_bound: Sequence[float], upper_bound: Sequence[float]) -> None:
        """Rebind the spatial extent explicitly, skipping sampling.

        Both grids are reset to zero and max_value to 0.
        """
        lower_bound = np.asarray(lower_bound, dtype=np.float64).reshape(-1)
        upper_bound = np.asarray(upper_bound, dtype=np.float64).reshape(-1)
        if lower_bound.size != self.dimension or upper_bound.size != self.dimension:
            raise ValueError(
                f"Expected {self.dimension}-D bounds, got {lower_bound.size} and {upper_bound.size}"
            )
        self._indexer.set_bounds(lower_bound, upper_bound)
        self.reach_count = np.zeros(self._indexer.size, dtype=np.int64)
        self.penalty = np.zeros(self._indexer.size, dtype=np.int64)
        self.max_value = 0

    # ----- generation -----

    def generate(
        self,
        kinematics: KinematicsOracle,
        collision: CollisionOracle,
        effector_link: str,
        dof: int,
        lower_joint_limit: Sequence[float],
        upper_joint_limit: Sequence[float],
        *,
        sample_count: int = DEFAULT_SAMPLE_COUNT,
        sampler: Optional[RandomSampler] = None,
        excluded_links: Iterable[str] = DEFAULT_EXCLUDED_LINKS,
    ) -> int:
        """Build the map by sampling joint configurations.

        Draws *sample_count* configurations uniformly within the joint
        limits, discards self-colliding ones, sizes the grid to the
        extent of the accepted effector positions and bins them.

        Returns the number of accepted samples.
        """
        lower_joint_limit = np.asarray(lower_joint_limit, dtype=np.float64)
        upper_joint_limit = np.asarray(upper_joint_limit, dtype=np.float64)
        if lower_joint_limit.shape != (dof,) or upper_joint_limit.shape != (dof,):
            raise ValueError(
                f"Expected {dof} joint limits, got {lower_joint_limit.shape} and {upper_joint_limit.shape}"
            )
        if sample_count < 0:
            raise ValueError(f"sample_count must be non-negative, got {sample_count}")
        sampler = sampler if sampler is not None else RandomSampler()

        excluded: set[int] = set()
        for name in excluded_links:
            try:
                excluded.add(collision.get_link_index(name))
            except KeyError:
                logger.debug("Excluded link %s not in collision model, ignoring", name)

        effector_idx = kinematics.link_names.index(effector_link)

        positions = []
        for _ in range(sample_count):
            q = sampler.uniform(lower_joint_limit, upper_joint_limit)
            link_poses = kinematics.compute_link_poses(q)
            if collision.has_collision(link_poses, excluded):
                continue
            positions.append(np.asarray(link_poses[effector_idx])[: self.dimension, 3])

        self.attempted_samples = sample_count
        self.accepted_samples = len(positions)

        if not positions:
            logger.warning(
                "Reachability generation accepted none of %d samples; map is empty", sample_count
            )
            self.set_bounds(np.zeros(self.dimension), np.zeros(self.dimension))
            return 0

        points = np.vstack(positions)
        ep_min = points.min(axis=0)
        ep_max = points.max(axis=0)
        # One extra cell past the largest sample so that it bins inside the grid
        cells = np.floor((ep_max - ep_min) / self.voxel_size) + 1
        self.set_bounds(ep_min, ep_min + cells * self.voxel_size)

        for x in points:
            idx = self._indexer.index(x)
            if idx is None:
                logger.error("Sample %s fell outside its own extent %s..%s", x, ep_min, ep_max)
                raise ReachabilityMapError(f"Sample {x.tolist()} maps outside the generated grid")
            self.reach_count[idx] += 1
        self.max_value = int(self.reach_count.max())

        logger.info(
            "Generated reachability map: %d/%d samples accepted, steps=%s, max_value=%d",
            self.accepted_samples, sample_count, self._indexer.steps.tolist(), self.max_value,
        )
        return self.accepted_samples

    # ----- queries -----

    def get_value(self, point: Sequence[float]) -> float:
        """Normalized net score at *point*; 0 outside the grid or for an empty map.

        Penalized cells may return negative values.
        """
        idx = self._indexer.index(point)
        if idx is None or self.max_value == 0:
            return 0.0
        return float(self.reach_count[idx] - self.penalty[idx]) / float(self.max_value)

    def get_max_value(self) -> float:
        return float(self.max_value)

    def active_cell_centers(self) -> np.ndarray:
        """Centers of all cells with a positive reach count, as (N, D)."""
        flat = np.flatnonzero(self.reach_count > 0)
        if flat.size == 0:
            return np.zeros((0, self.dimension))
        return np.vstack([self._indexer.cell_center(int(i)) for i in flat])

    # ----- mutators -----

    def set_value(self, point: Sequence[float], value: int) -> bool:
        """Overwrite the reach count of the cell at *point*.

        max_value only ever grows.  Returns False if *point* is outside.
        """
        idx = self._indexer.index(point)
        if idx is None:
            return False
        self.reach_count[idx] = int(value)
        self.max_value = max(self.max_value, int(value))
        return True

    def clear(self) -> None:
        """Zero all reach counts and max_value; penalties are kept."""
        self.reach_count[:] = 0
        self.max_value = 0

    def grow(self) -> int:
        """Dilate the reachable region by one voxel along each axis.

        Every empty cell with an active axis-aligned neighbour gains a
        count of 1; already active cells are unchanged.  Neighbours are
        taken from a snapshot so cells activated in this pass do not
        spread further.  Returns the number of newly active cells.
        """
        active = (self.reach_count > 0).reshape(self._indexer.shape)
        reached = np.zeros_like(active)
        for axis in range(self.dimension):
            lo = [slice(None)] * self.dimension
            hi = [slice(None)] * self.dimension
            lo[axis] = slice(None, -1)
            hi[axis] = slice(1, None)
            reached[tuple(hi)] |= active[tuple(lo)]
            reached[tuple(lo)] |= active[tuple(hi)]
        newly_active = (reached & ~active).reshape(-1)

        self.reach_count += newly_active.astype(np.int64)
        if self.reach_count.size:
            self.max_value = max(self.max_value, int(self.reach_count.max()))
        added = int(newly_active.sum())
        logger.debug("grow(): %d cells newly active", added)
        return added

    def add_map(self, other: ReachabilityMap) -> None:
        """Add *other*'s reach counts cell by cell.

        Raises GeometryMismatchError unless both maps share the same grid.
        """
        if self.dimension != other.dimension or not self._indexer.same_geometry(other._indexer):
            raise GeometryMismatchError(
                f"Cannot add map with steps={other._indexer.steps.tolist()} "
                f"lower={other._indexer.lower.tolist()} voxel={other.voxel_size} to map with "
                f"steps={self._indexer.steps.tolist()} lower={self._indexer.lower.tolist()} "
                f"voxel={self.voxel_size}"
            )
        self.reach_count += other.reach_count
        if self.reach_count.size:
            self.max_value = max(self.max_value, int(self.reach_count.max()))

    def add_penalty(self, point: Sequence[float]) -> bool:
        """Penalize the cell at *point* by the current max_value.

        Each call lowers that cell's score by 1.0; penalties stack.
        Returns False if *point* is outside.
        """
        idx = self._indexer.index(point)
        if idx is None:
            return False
        self.penalty[idx] += self.max_value
        return True

    def reset_penalty(self) -> None:
        self.penalty[:] = 0

    # ----- persistence -----

    def to_message(self) -> ReachabilityMapMessage:
        return ReachabilityMapMessage(
            voxel_size=self.voxel_size,
            dimension=self.dimension,
            lower=self._indexer.lower.tolist(),
            upper=self._indexer.upper.tolist(),
            steps=self._indexer.steps.tolist(),
            reach_count=self.reach_count.tolist(),
            penalty=self.penalty.tolist(),
            max_value=self.max_value,
            attempted_samples=self.attempted_samples,
            accepted_samples=self.accepted_samples,
        )

    @classmethod
    def from_message(cls, msg: ReachabilityMapMessage) -> ReachabilityMap:
        rmap = cls(voxel_size=msg.voxel_size, dimension=msg.dimension)
        rmap.set_bounds(msg.lower, msg.upper)
        if rmap._indexer.steps.tolist() != list(msg.steps):
            raise ReachabilityMapError(
                f"Stored steps {msg.steps} disagree with bounds (expected {rmap._indexer.steps.tolist()})"
            )
        rmap.reach_count = np.asarray(msg.reach_count, dtype=np.int64)
        rmap.penalty = np.asarray(msg.penalty, dtype=np.int64)
        rmap.max_value = msg.max_value
        rmap.attempted_samples = msg.attempted_samples
        rmap.accepted_samples = msg.accepted_samples
        return rmap

    def save(self, path: str | Path) -> Path:
        """Write the map as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_message().model_dump_json())
        logger.info("Saved reachability map (%d cells) to %s", self.reach_count.size, path)
        return path

    @classmethod
    def load(cls, path: str | Path) -> ReachabilityMap:
        path = Path(path)
        msg = ReachabilityMapMessage.model_validate(json.loads(path.read_text()))
        logger.info("Loaded reachability map from %s", path)
        return cls.from_message(msg)
