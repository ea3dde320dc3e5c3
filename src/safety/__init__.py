"""
Safety module.

Provides capsule-based self-collision checking used to reject samples
during reachability map generation.
"""

from src.safety.self_collision import (
    CapsuleCollisionModel,
    LinkCapsule,
    arm_6dof_collision_model,
    planar_3r_collision_model,
    segment_distance,
)

__all__ = [
    "CapsuleCollisionModel",
    "LinkCapsule",
    "arm_6dof_collision_model",
    "planar_3r_collision_model",
    "segment_distance",
]
