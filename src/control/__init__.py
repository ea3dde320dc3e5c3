"""Control module: reactive joint-space tasks."""

from src.control.joint_limit_avoidance import (
    ActivationFunction,
    JointLimitAvoidanceTask,
    joint_limit_torque,
)

__all__ = ["ActivationFunction", "JointLimitAvoidanceTask", "joint_limit_torque"]
