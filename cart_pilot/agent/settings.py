from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AgentSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_steps: int = Field(10, ge=1, description="Step budget per task; reaching it ends the task as a step-limit failure.")
    step_delay_seconds: float = Field(1.0, ge=0.0, description="Pause between loop iterations.")
    history_window: int = Field(10, ge=1, description="Number of past decisions kept in the task's action history.")
    guard_window: int = Field(2, ge=1, description="How many recent decisions the loop guard compares against.")
    max_failures_before_finish: int = Field(
        2,
        ge=1,
        description="Consecutive failed actions after which the planner is told to finish.",
    )
    submit_settle_seconds: float = Field(
        3.0,
        ge=0.0,
        description="Extra wait after a submit-like click, which often triggers navigation.",
    )
    observation_data_preview: int = Field(100, ge=0, description="Characters of extracted data shown in observation events.")
