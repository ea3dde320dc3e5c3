"""
Kinematics module.

Provides DH tables for the example chains and a forward-kinematics
oracle returning every link pose.
"""

from src.kinematics.dh_params import (
    ARM_6DOF_DH_PARAMS,
    ARM_6DOF_TOOL,
    PLANAR_3R_DH_PARAMS,
    PLANAR_3R_TOOL,
    DHParam,
)
from src.kinematics.forward import KinematicChain


def planar_3r_chain() -> KinematicChain:
    """The example planar 3R arm with its tool frame."""
    return KinematicChain(PLANAR_3R_DH_PARAMS, tool=PLANAR_3R_TOOL)


def arm_6dof_chain() -> KinematicChain:
    """The example 6-DOF arm with its tool frame."""
    return KinematicChain(ARM_6DOF_DH_PARAMS, tool=ARM_6DOF_TOOL)


__all__ = [
    "ARM_6DOF_DH_PARAMS",
    "ARM_6DOF_TOOL",
    "PLANAR_3R_DH_PARAMS",
    "PLANAR_3R_TOOL",
    "DHParam",
    "KinematicChain",
    "arm_6dof_chain",
    "planar_3r_chain",
]
