"""Pydantic model for persisted reachability maps."""

from pydantic import BaseModel, Field, model_validator


class ReachabilityMapMessage(BaseModel):
    """Complete state of a reachability map, round-trippable through JSON."""

    voxel_size: float = Field(gt=0.0, description="Voxel edge length in m")
    dimension: int = Field(description="Grid dimensionality (2 or 3)")
    lower: list[float] = Field(description="Per-axis lower bound in m")
    upper: list[float] = Field(description="Per-axis upper bound in m")
    steps: list[int] = Field(description="Per-axis cell count")
    reach_count: list[int] = Field(description="Flat row-major reach counts")
    penalty: list[int] = Field(description="Flat row-major penalties")
    max_value: int = Field(ge=0, description="Largest reach count seen since the last reset")
    attempted_samples: int = Field(default=0, ge=0)
    accepted_samples: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_sizes(self):
        if not (len(self.lower) == len(self.upper) == len(self.steps) == self.dimension):
            raise ValueError("lower/upper/steps must all have `dimension` entries")
        cells = 1
        for s in self.steps:
            cells *= s
        if len(self.reach_count) != cells or len(self.penalty) != cells:
            raise ValueError(f"Grid arrays must have {cells} cells")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "voxel_size": 1.0,
                "dimension": 2,
                "lower": [0.0, 0.0],
                "upper": [2.0, 2.0],
                "steps": [2, 2],
                "reach_count": [0, 3, 1, 0],
                "penalty": [0, 0, 0, 0],
                "max_value": 3,
                "attempted_samples": 10,
                "accepted_samples": 4,
            }
        }
