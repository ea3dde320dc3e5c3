"""
Voxel indexing for N-dimensional axis-aligned grids.

Maps continuous points to flat cell indices (row-major, axis 0 most
significant) and back.  Points outside the grid map to None, which is
distinct from the valid index 0.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

import numpy as np

# Tolerance (in voxels) applied before ceil() so that an extent that is an
# exact multiple of the voxel size does not gain a cell from float error.
_STEP_ROUNDING = 1e-9


def compute_steps(lower: np.ndarray, upper: np.ndarray, voxel_size: float) -> np.ndarray:
    """Per-axis cell counts: ceil((upper - lower) / voxel_size), at least 1."""
    extent = (np.asarray(upper, dtype=np.float64) - np.asarray(lower, dtype=np.float64)) / voxel_size
    steps = np.ceil(extent - _STEP_ROUNDING).astype(np.int64)
    return np.maximum(steps, 1)


class VoxelIndexer:
    """Flat indexing over a fixed-size voxel grid.

    Parameters
    ----------
    voxel_size : float
        Edge length of each voxel, > 0.
    lower, upper : array-like
        Per-axis bounds.  The grid covers [lower, lower + steps * voxel_size).
    """

    def __init__(self, voxel_size: float, lower: Sequence[float], upper: Sequence[float]):
        if voxel_size <= 0.0:
            raise ValueError(f"voxel_size must be positive, got {voxel_size}")
        self.voxel_size = float(voxel_size)
        self.set_bounds(lower, upper)

    def set_bounds(self, lower: Sequence[float], upper: Sequence[float]) -> None:
        """Rebind the grid extent and recompute the step counts."""
        lower = np.asarray(lower, dtype=np.float64).reshape(-1)
        upper = np.asarray(upper, dtype=np.float64).reshape(-1)
        if lower.shape != upper.shape or lower.size == 0:
            raise ValueError(
                f"Bounds must be non-empty and of equal length, got {lower.shape} and {upper.shape}"
            )
        if np.any(upper < lower):
            raise ValueError(f"Upper bound {upper.tolist()} below lower bound {lower.tolist()}")
        self.lower = lower
        self.upper = upper
        self.steps = compute_steps(lower, upper, self.voxel_size)

    @property
    def dimension(self) -> int:
        return int(self.lower.size)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(int(s) for s in self.steps)

    @property
    def size(self) -> int:
        """Total number of cells."""
        return int(np.prod(self.steps))

    def cell_coords(self, point: Sequence[float]) -> Optional[tuple[int, ...]]:
        """Per-axis cell indices of a point, or None if it lies outside the grid."""
        point = np.asarray(point, dtype=np.float64).reshape(-1)
        if point.size < self.dimension:
            raise ValueError(f"Expected a {self.dimension}-D point, got {point.size} values")
        with np.errstate(invalid="ignore", over="ignore"):
            ratios = (point[: self.dimension] - self.lower) / self.voxel_size
        # inf and nan lie outside every grid
        if not np.all(np.isfinite(ratios)):
            return None
        coords = []
        for axis in range(self.dimension):
            idx = math.floor(ratios[axis])
            if idx < 0 or idx >= self.steps[axis]:
                return None
            coords.append(idx)
        return tuple(coords)

    def index(self, point: Sequence[float]) -> Optional[int]:
        """Flat index of the cell containing *point*, or None if outside."""
        coords = self.cell_coords(point)
        if coords is None:
            return None
        return self.flat_index(coords)

    def flat_index(self, coords: Sequence[int]) -> int:
        """Compose per-axis indices into a flat index (row-major)."""
        total = 0
        for axis, c in enumerate(coords):
            total = total * int(self.steps[axis]) + int(c)
        return total

    def unravel(self, flat: int) -> tuple[int, ...]:
        """Inverse of flat_index()."""
        if flat < 0 or flat >= self.size:
            raise IndexError(f"Flat index {flat} out of range for {self.size} cells")
        return tuple(int(c) for c in np.unravel_index(flat, self.shape))

    def cell_center(self, flat: int) -> np.ndarray:
        """Continuous coordinates of the center of cell *flat*."""
        coords = np.asarray(self.unravel(flat), dtype=np.float64)
        return self.lower + (coords + 0.5) * self.voxel_size

    def neighbours(self, cell_coord: Iterable[int]) -> set[int]:
        """Flat indices of the axis-aligned neighbours of a cell.

        Only the +-1 step along each axis is considered (4 cells in 2-D,
        6 in 3-D), clipped at the grid boundary.
        """
        coord = list(cell_coord)
        result: set[int] = set()
        for axis in range(self.dimension):
            for delta in (-1, 1):
                moved = coord[axis] + delta
                if 0 <= moved < self.steps[axis]:
                    neighbour = list(coord)
                    neighbour[axis] = moved
                    result.add(self.flat_index(neighbour))
        return result

    def same_geometry(self, other: VoxelIndexer) -> bool:
        """True if both indexers describe the same cells."""
        return (
            self.dimension == other.dimension
            and self.voxel_size == other.voxel_size
            and np.array_equal(self.steps, other.steps)
            and np.allclose(self.lower, other.lower, rtol=0.0, atol=1e-9 * self.voxel_size)
        )
