"""
Forward kinematics for serial chains described by a DH table.

`KinematicChain` is the kinematics oracle consumed by the reachability
map generator: given a joint vector it returns the pose of every link
frame, base first.
"""

import math
from typing import List, Optional, Sequence

import numpy as np

from src.kinematics.dh_params import DHParam


def _dh_transform(param: DHParam, theta_var: float) -> np.ndarray:
    """Compute the 4x4 homogeneous transform for one DH link (modified DH).

    Args:
        param: DH parameters for this link.
        theta_var: Variable joint angle (radians).

    Returns:
        4x4 homogeneous transformation matrix.
    """
    theta = theta_var + param.theta
    ct, st = math.cos(theta), math.sin(theta)
    ca, sa = math.cos(param.alpha), math.sin(param.alpha)
    a, d = param.a, param.d

    return np.array([
        [ct,     -st,     0.0,   a],
        [st*ca,  ct*ca,  -sa,   -sa*d],
        [st*sa,  ct*sa,   ca,    ca*d],
        [0.0,    0.0,     0.0,   1.0],
    ], dtype=np.float64)


class KinematicChain:
    """Serial chain of revolute joints with an optional fixed tool frame.

    Link frames are ordered ``[base, link_1, ..., link_n, (tool)]``.

    Parameters
    ----------
    dh_params : list[DHParam]
        One row per joint.
    tool : DHParam, optional
        Fixed transform appended after the last joint.
    link_names : list[str], optional
        Names for every frame.  Defaults to ``base_link``, ``link_1`` ...
        ``link_n`` and ``tool0``.
    """

    def __init__(
        self,
        dh_params: Sequence[DHParam],
        tool: Optional[DHParam] = None,
        link_names: Optional[Sequence[str]] = None,
    ):
        self.dh_params = list(dh_params)
        self.tool = tool
        self.n_joints = len(self.dh_params)
        n_frames = self.n_joints + 1 + (1 if tool is not None else 0)
        if link_names is None:
            link_names = ["base_link"] + [f"link_{i + 1}" for i in range(self.n_joints)]
            if tool is not None:
                link_names.append("tool0")
        if len(link_names) != n_frames:
            raise ValueError(f"Expected {n_frames} link names, got {len(link_names)}")
        self.link_names = list(link_names)

    def link_index(self, name: str) -> int:
        try:
            return self.link_names.index(name)
        except ValueError:
            raise KeyError(f"Unknown link {name!r}") from None

    def compute_link_poses(self, joint_angles: Sequence[float]) -> List[np.ndarray]:
        """Cumulative base-frame pose of every link.

        Args:
            joint_angles: Array of joint angles (radians), exactly n_joints long.

        Returns:
            List of 4x4 homogeneous transforms.  poses[0] is the identity
            (base frame); poses[i] is T_0_i.
        """
        joint_angles = np.asarray(joint_angles, dtype=np.float64)
        if joint_angles.shape != (self.n_joints,):
            raise ValueError(
                f"Expected {self.n_joints} joint angles, got shape {joint_angles.shape}"
            )

        T = np.eye(4, dtype=np.float64)
        poses: List[np.ndarray] = [T.copy()]
        for param, q in zip(self.dh_params, joint_angles):
            T = T @ _dh_transform(param, q)
            poses.append(T.copy())
        if self.tool is not None:
            T = T @ _dh_transform(self.tool, 0.0)
            poses.append(T.copy())
        return poses

    def end_effector_pose(self, joint_angles: Sequence[float]) -> np.ndarray:
        return self.compute_link_poses(joint_angles)[-1]

    def end_effector_position(self, joint_angles: Sequence[float]) -> np.ndarray:
        """Convenience: return the 3D position (x, y, z) of the last frame."""
        return self.end_effector_pose(joint_angles)[:3, 3].copy()
