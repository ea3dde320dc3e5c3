"""
Denavit-Hartenberg tables for the example chains.

Convention: Modified DH (Craig convention)
  - a      : link length (m), along x_{i-1}
  - alpha  : link twist (rad), about x_{i-1}
  - d      : link offset (m), along z_i
  - theta  : joint angle offset (rad), added to the variable joint angle

Each chain also has a fixed tool row, applied with a zero joint angle
after the last joint, which places the "tool0" frame.
"""

import math
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DHParam:
    """A single row of the DH parameter table."""
    a: float      # link length (m)
    alpha: float  # link twist (rad)
    d: float      # link offset (m)
    theta: float  # joint angle offset (rad)


# Planar 3R arm moving in the base XY plane (0.4 / 0.3 / 0.2 m links).
PLANAR_3R_DH_PARAMS: List[DHParam] = [
    DHParam(a=0.0, alpha=0.0, d=0.0, theta=0.0),
    DHParam(a=0.4, alpha=0.0, d=0.0, theta=0.0),
    DHParam(a=0.3, alpha=0.0, d=0.0, theta=0.0),
]
PLANAR_3R_TOOL = DHParam(a=0.2, alpha=0.0, d=0.0, theta=0.0)

PLANAR_3R_LOWER_LIMITS = [-math.pi, -2.5, -2.5]
PLANAR_3R_UPPER_LIMITS = [math.pi, 2.5, 2.5]

# 6-DOF spatial arm, roughly 550 mm reach.
ARM_6DOF_DH_PARAMS: List[DHParam] = [
    # Joint 0: base rotation
    DHParam(a=0.0,    alpha=0.0,           d=0.1215,  theta=0.0),
    # Joint 1: shoulder pitch
    DHParam(a=0.0,    alpha=-math.pi / 2,  d=0.0,     theta=0.0),
    # Joint 2: elbow pitch
    DHParam(a=0.2130, alpha=0.0,           d=0.0,     theta=0.0),
    # Joint 3: forearm roll
    DHParam(a=0.0,    alpha=-math.pi / 2,  d=0.2130,  theta=0.0),
    # Joint 4: wrist pitch
    DHParam(a=0.0,    alpha=math.pi / 2,   d=0.0,     theta=0.0),
    # Joint 5: wrist roll
    DHParam(a=0.0,    alpha=-math.pi / 2,  d=0.0870,  theta=0.0),
]
ARM_6DOF_TOOL = DHParam(a=0.0, alpha=0.0, d=0.05, theta=0.0)

ARM_6DOF_LOWER_LIMITS = [-3.1, -2.0, -2.6, -3.1, -2.0, -3.1]
ARM_6DOF_UPPER_LIMITS = [3.1, 2.0, 2.6, 3.1, 2.0, 3.1]
