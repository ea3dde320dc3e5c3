"""
Joint-Limit Avoidance Task

Reactive joint-space task that pushes joints out of a margin band next to
their position limits.  Each control tick it produces:

- a repulsion torque per joint (quadratic in the penetration depth,
  max_torque at the hard limit, zero with zero slope at the margin edge),
- velocity damping that is critically damped with respect to the caller's
  inertia-like weighting matrix (generalized eigendecomposition of the
  repulsion stiffness against that matrix),
- a nullspace projector N = I - J^T J, J = diag(activation), to be
  applied to lower-priority task commands so they do not act along
  joints currently held off their limits.

Update loop (call at control rate):
    N = task.compute(q, dq, M, torque)
    torque += N @ tau_lower_priority
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence

import numpy as np
from scipy.linalg import eigh

from shared.messages.joint_limits import JointLimitStateMessage

logger = logging.getLogger(__name__)

STIFFNESS_EPSILON = 0.001  # keeps the stiffness matrix positive definite
TORQUE_EPSILON = 1e-6
ACTIVATION_THRESHOLD = 0.001
DAMPING_RATIO = 0.7


class ActivationFunction:
    """Smooth saturating transfer f: [0, 1] -> [0, 1].

    f(x) = 0 for x <= x_pos, otherwise tanh(y_mul * s) / tanh(y_mul) with
    s = (x - x_pos) / (1 - x_pos).  f is monotonic with f(0) = 0 and
    f(1) = 1.  Joint activation is computed as 1 - f(1 - depth), so it
    stays near 0 through most of the margin band and saturates at 1 over
    the last x_pos of it.
    """

    def __init__(self, x_pos: float = 0.2, y_mul: float = 4.0):
        if not 0.0 <= x_pos < 1.0:
            raise ValueError(f"x_pos must be in [0, 1), got {x_pos}")
        if y_mul <= 0.0:
            raise ValueError(f"y_mul must be positive, got {y_mul}")
        self.x_pos = x_pos
        self.y_mul = y_mul
        self._norm = math.tanh(y_mul)

    def __call__(self, x: float) -> float:
        if x <= self.x_pos:
            return 0.0
        if x >= 1.0:
            return 1.0
        s = (x - self.x_pos) / (1.0 - self.x_pos)
        return math.tanh(self.y_mul * s) / self._norm


def joint_limit_torque(
    upper: float,
    lower: float,
    margin: float,
    max_torque: float,
    position: float,
) -> tuple[float, float]:
    """Limit repulsion for one joint.

    The position is clamped into [lower, upper] first.  Inside the margin
    band next to the upper limit the torque is negative, next to the lower
    limit positive.

    Returns
    -------
    (torque, depth) where depth in [0, 1] is the normalized penetration
    into the margin band (1 at the hard limit).
    """
    q = min(max(position, lower), upper)
    if q > upper - margin:
        depth = abs((q - upper + margin) / margin)
        return -depth * depth * max_torque, depth
    if q < lower + margin:
        depth = abs((lower + margin - q) / margin)
        return depth * depth * max_torque, depth
    return 0.0, 0.0


class JointLimitAvoidanceTask:
    """Joint-limit repulsion with generalized critical damping.

    Parameters
    ----------
    lower_limit, upper_limit : array-like
        Joint position limits (rad).
    limit_range : array-like
        Width of the margin band inside each limit (rad).
    max_torque : array-like
        Repulsion torque at the hard limit (Nm).
    excluded_joints : iterable of int
        Joints whose limits are ignored.
    activation_fn : ActivationFunction, optional
        Transfer applied to the raw penetration depth.
    damping_ratio : float
        Fraction of critical damping (0.7 = slightly under-damped).
    """

    def __init__(
        self,
        lower_limit: Sequence[float],
        upper_limit: Sequence[float],
        limit_range: Sequence[float],
        max_torque: Sequence[float],
        excluded_joints: Iterable[int] = (),
        activation_fn: Optional[ActivationFunction] = None,
        damping_ratio: float = DAMPING_RATIO,
        stiffness_epsilon: float = STIFFNESS_EPSILON,
        torque_epsilon: float = TORQUE_EPSILON,
        activation_threshold: float = ACTIVATION_THRESHOLD,
    ):
        self.lower_limit = np.asarray(lower_limit, dtype=np.float64)
        self.upper_limit = np.asarray(upper_limit, dtype=np.float64)
        self.limit_range = np.asarray(limit_range, dtype=np.float64)
        self.max_torque = np.asarray(max_torque, dtype=np.float64)
        self.n_joints = self.lower_limit.size

        for name, arr in (
            ("upper_limit", self.upper_limit),
            ("limit_range", self.limit_range),
            ("max_torque", self.max_torque),
        ):
            if arr.shape != (self.n_joints,):
                raise ValueError(f"{name} has shape {arr.shape}, expected ({self.n_joints},)")
        if np.any(self.limit_range <= 0.0):
            raise ValueError("limit_range entries must be positive")
        if np.any(self.upper_limit < self.lower_limit):
            raise ValueError("upper_limit below lower_limit")

        self.excluded_joints = frozenset(int(i) for i in excluded_joints)
        bad = [i for i in self.excluded_joints if not 0 <= i < self.n_joints]
        if bad:
            raise ValueError(f"Excluded joint indices out of range: {sorted(bad)}")

        self.activation_fn = activation_fn if activation_fn is not None else ActivationFunction()
        self.damping_ratio = damping_ratio
        self.stiffness_epsilon = stiffness_epsilon
        self.torque_epsilon = torque_epsilon
        self.activation_threshold = activation_threshold

        n = self.n_joints
        self._activation = np.zeros(n)
        self._stiffness = np.full(n, stiffness_epsilon)
        self._repulsion = np.zeros(n)
        # Scratch reused across ticks; eigh still allocates its own results
        self._stiffness_matrix = np.zeros((n, n))
        self._damping = np.zeros((n, n))
        self._nullspace = np.eye(n)
        self._modal = np.zeros((n, n))
        self._modal_scaled = np.zeros((n, n))
        self._damping_torque = np.zeros(n)

    @classmethod
    def from_config(
        cls,
        lower_limit: Sequence[float],
        upper_limit: Sequence[float],
        limit_range: Sequence[float],
        max_torque: Sequence[float],
        excluded_joints: Iterable[int] = (),
        config=None,
    ) -> JointLimitAvoidanceTask:
        """Build a task with tuning taken from the ``joint_limits`` config section."""
        if config is None:
            from src.config.planner_config import get_planner_config
            config = get_planner_config()
        section = config.get("joint_limits")
        return cls(
            lower_limit,
            upper_limit,
            limit_range,
            max_torque,
            excluded_joints=excluded_joints,
            activation_fn=ActivationFunction(section["activation_x_pos"], section["activation_y_mul"]),
            damping_ratio=section["damping_ratio"],
            stiffness_epsilon=section["stiffness_epsilon"],
            torque_epsilon=section["torque_epsilon"],
            activation_threshold=section["activation_threshold"],
        )

    def compute(
        self,
        position: np.ndarray,
        velocity: np.ndarray,
        weight_matrix: np.ndarray,
        torque: np.ndarray,
        nullspace: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Run one control tick.

        Parameters
        ----------
        position, velocity : (n,) joint state
        weight_matrix : (n, n) symmetric positive definite inertia-like matrix
        torque : (n,) float array, modified in place: each entry is set to
            the joint's repulsion torque, then the damping term D @ velocity
            is subtracted.
        nullspace : (n, n) float array, optional
            Written in place when given; otherwise a copy of the internal
            projector is returned.

        Returns
        -------
        The (n, n) nullspace projector.
        """
        q = np.asarray(position, dtype=np.float64)
        dq = np.asarray(velocity, dtype=np.float64)
        M = np.asarray(weight_matrix, dtype=np.float64)
        n = self.n_joints
        if q.shape != (n,) or dq.shape != (n,) or torque.shape != (n,):
            raise ValueError(f"Expected ({n},) position/velocity/torque")
        if M.shape != (n, n):
            raise ValueError(f"weight_matrix has shape {M.shape}, expected ({n}, {n})")

        for i in range(n):
            if i in self.excluded_joints:
                self._repulsion[i] = 0.0
                self._activation[i] = 0.0
                self._stiffness[i] = self.stiffness_epsilon
                continue

            trq, depth = joint_limit_torque(
                self.upper_limit[i], self.lower_limit[i], self.limit_range[i],
                self.max_torque[i], q[i],
            )
            self._repulsion[i] = trq
            self._activation[i] = 1.0 - self.activation_fn(1.0 - depth)
            if abs(trq) > self.torque_epsilon:
                self._stiffness[i] = self.max_torque[i] / self.limit_range[i]
            else:
                self._stiffness[i] = self.stiffness_epsilon

        torque[:] = self._repulsion

        # K v = lambda M v with V^T M V = I, so V^-1 = V^T M
        self._stiffness_matrix.fill(0.0)
        np.fill_diagonal(self._stiffness_matrix, self._stiffness)
        eigvals, eigvecs = eigh(self._stiffness_matrix, M)
        Q = np.matmul(eigvecs.T, M, out=self._modal)
        gains = 2.0 * self.damping_ratio * np.sqrt(np.maximum(eigvals, 0.0))
        np.multiply(Q.T, gains, out=self._modal_scaled)
        np.matmul(self._modal_scaled, Q, out=self._damping)

        torque -= np.matmul(self._damping, dq, out=self._damping_torque)

        out = nullspace if nullspace is not None else self._nullspace
        out[:] = 0.0
        np.fill_diagonal(out, 1.0 - self._activation * self._activation)

        logger.debug("Joint-limit task: %d active joints", self.activation_count())
        return out if nullspace is not None else out.copy()

    def activation_count(self, threshold: Optional[float] = None) -> int:
        """Number of joints whose activation exceeds *threshold* (default 0.001)."""
        thr = self.activation_threshold if threshold is None else threshold
        return int(np.count_nonzero(self._activation > thr))

    @property
    def activation(self) -> np.ndarray:
        return self._activation.copy()

    @property
    def stiffness(self) -> np.ndarray:
        return self._stiffness.copy()

    @property
    def repulsion_torque(self) -> np.ndarray:
        """Per-joint repulsion from the last tick, before damping."""
        return self._repulsion.copy()

    @property
    def damping_matrix(self) -> np.ndarray:
        return self._damping.copy()

    def to_message(self) -> JointLimitStateMessage:
        return JointLimitStateMessage(
            activation=self._activation.tolist(),
            repulsion_torque=self._repulsion.tolist(),
            stiffness=self._stiffness.tolist(),
            active_count=self.activation_count(),
            excluded_joints=sorted(self.excluded_joints),
        )
