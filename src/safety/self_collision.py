"""
Capsule-based self-collision checking for serial arms.

Each link is modeled as a capsule (cylinder with hemispherical endcaps)
spanning two kinematic frames.  Two links collide when the distance
between their axis segments is below the sum of their radii.  Links that
are adjacent in the chain always touch at the joint and are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

logger = logging.getLogger(__name__)

_EPS = 1e-12


@dataclass(frozen=True)
class LinkCapsule:
    """Collision geometry of one link."""

    name: str
    start_frame: int  # index into the link pose list
    end_frame: int
    radius: float  # m


def segment_distance(p1: np.ndarray, q1: np.ndarray, p2: np.ndarray, q2: np.ndarray) -> float:
    """Minimum distance between segments [p1, q1] and [p2, q2]."""
    d1 = q1 - p1
    d2 = q2 - p2
    r = p1 - p2
    a = float(d1 @ d1)
    e = float(d2 @ d2)
    f = float(d2 @ r)

    if a <= _EPS and e <= _EPS:
        return float(np.linalg.norm(r))
    if a <= _EPS:
        s = 0.0
        t = min(max(f / e, 0.0), 1.0)
    else:
        c = float(d1 @ r)
        if e <= _EPS:
            t = 0.0
            s = min(max(-c / a, 0.0), 1.0)
        else:
            b = float(d1 @ d2)
            denom = a * e - b * b
            # Parallel segments: any s works, start from p1
            s = min(max((b * f - c * e) / denom, 0.0), 1.0) if denom > _EPS else 0.0
            t = (b * s + f) / e
            if t < 0.0:
                t = 0.0
                s = min(max(-c / a, 0.0), 1.0)
            elif t > 1.0:
                t = 1.0
                s = min(max((b - c) / a, 0.0), 1.0)

    closest1 = p1 + d1 * s
    closest2 = p2 + d2 * t
    return float(np.linalg.norm(closest1 - closest2))


class CapsuleCollisionModel:
    """Self-collision oracle over a list of link capsules.

    Parameters
    ----------
    links : list[LinkCapsule]
        Collision geometry, in chain order.
    adjacency_gap : int
        Capsule pairs whose indices differ by at most this value are
        never checked against each other.
    """

    def __init__(self, links: Sequence[LinkCapsule], adjacency_gap: int = 1):
        self.links: List[LinkCapsule] = list(links)
        self.adjacency_gap = adjacency_gap
        names = [link.name for link in self.links]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate link names in collision model: {names}")
        self._pairs = [
            (i, j)
            for i in range(len(self.links))
            for j in range(i + 1, len(self.links))
            if j - i > adjacency_gap
        ]

    @property
    def links_count(self) -> int:
        return len(self.links)

    def get_link_index(self, name: str) -> int:
        for idx, link in enumerate(self.links):
            if link.name == name:
                return idx
        raise KeyError(f"Unknown collision link {name!r}")

    def has_link(self, name: str) -> bool:
        return any(link.name == name for link in self.links)

    def has_collision(
        self,
        link_poses: Sequence[np.ndarray],
        excluded_link_indices: Iterable[int] = (),
    ) -> bool:
        """True if any pair of checked, non-excluded capsules intersect."""
        excluded = set(excluded_link_indices)
        for i, j in self._pairs:
            if i in excluded or j in excluded:
                continue
            li, lj = self.links[i], self.links[j]
            dist = segment_distance(
                link_poses[li.start_frame][:3, 3],
                link_poses[li.end_frame][:3, 3],
                link_poses[lj.start_frame][:3, 3],
                link_poses[lj.end_frame][:3, 3],
            )
            if dist < li.radius + lj.radius:
                logger.debug("Self-collision between %s and %s (%.4f m)", li.name, lj.name, dist)
                return True
        return False


def planar_3r_collision_model() -> CapsuleCollisionModel:
    """Collision model matching `planar_3r_chain()`; env_link is a floor slab under the base."""
    return CapsuleCollisionModel(
        [
            LinkCapsule("env_link", 0, 0, 0.08),
            LinkCapsule("link_1", 1, 2, 0.03),
            LinkCapsule("link_2", 2, 3, 0.03),
            LinkCapsule("link_3", 3, 4, 0.03),
        ]
    )


def arm_6dof_collision_model() -> CapsuleCollisionModel:
    """Collision model matching `arm_6dof_chain()`."""
    return CapsuleCollisionModel(
        [
            LinkCapsule("env_link", 0, 0, 0.10),
            LinkCapsule("base_link", 0, 1, 0.05),
            LinkCapsule("upper_arm", 2, 3, 0.04),
            LinkCapsule("forearm", 3, 4, 0.035),
            LinkCapsule("wrist", 5, 6, 0.03),
            LinkCapsule("tool0", 6, 7, 0.02),
        ]
    )
