"""Pydantic model for joint-limit avoidance state."""

from pydantic import BaseModel, Field


class JointLimitStateMessage(BaseModel):
    """Snapshot of the joint-limit avoidance task after one control tick."""

    activation: list[float] = Field(description="Per-joint activation in [0, 1]")
    repulsion_torque: list[float] = Field(description="Per-joint limit repulsion in Nm, before damping")
    stiffness: list[float] = Field(description="Per-joint stiffness used for damping in Nm/rad")
    active_count: int = Field(ge=0, description="Joints whose activation exceeds the threshold")
    excluded_joints: list[int] = Field(default_factory=list, description="Joints whose limits are ignored")

    class Config:
        json_schema_extra = {
            "example": {
                "activation": [0.0, 0.0, 0.93],
                "repulsion_torque": [0.0, 0.0, -4.2],
                "stiffness": [0.001, 0.001, 50.0],
                "active_count": 1,
                "excluded_joints": [0],
            }
        }
