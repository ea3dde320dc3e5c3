"""Pydantic message schemas for persisted maps and task state."""

from shared.messages.joint_limits import JointLimitStateMessage
from shared.messages.reachability import ReachabilityMapMessage
