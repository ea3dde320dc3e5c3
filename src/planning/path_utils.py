"""Arc-length helpers for polyline paths of N-D waypoints."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def path_length(path: Sequence[Sequence[float]]) -> float:
    """Total Euclidean length of a polyline; 0 for fewer than two points."""
    if len(path) < 2:
        return 0.0
    pts = np.asarray(path, dtype=np.float64)
    return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))


def point_on_path(path: Sequence[Sequence[float]], f: float) -> np.ndarray:
    """Point at fraction *f* of the arc length along *path*.

    f < 0 returns the first waypoint, f > 1 the last one.

    Raises:
        ValueError: if *path* is empty.
    """
    if len(path) == 0:
        raise ValueError("point_on_path: path is empty")
    pts = np.asarray(path, dtype=np.float64)
    if len(pts) == 1 or f < 0.0:
        return pts[0].copy()
    if f > 1.0:
        return pts[-1].copy()

    pos = path_length(pts) * f
    for a, b in zip(pts[:-1], pts[1:]):
        v = b - a
        dist = float(np.linalg.norm(v))
        if pos - dist > 0.0:
            pos -= dist
        elif dist > 0.0:
            return a + pos * v / dist
        else:
            return a.copy()
    return pts[-1].copy()
