# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Normalized finding models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from qlscan.core.constants import Severity


class Location(BaseModel):
    """An absolute file path and a 1-based region within it."""

    model_config = ConfigDict(frozen=True)

    file: str
    start_line: int = Field(default=1, ge=1)
    start_column: int = Field(default=1, ge=1)
    end_line: int = Field(default=1, ge=1)
    end_column: int = Field(default=1, ge=1)


class FlowStep(BaseModel):
    """One point on a source-to-sink trace. Index 0 is the source."""

    model_config = ConfigDict(frozen=True)

    file: str
    start_line: int = Field(default=1, ge=1)
    start_column: int = Field(default=1, ge=1)
    end_line: int = Field(default=1, ge=1)
    end_column: int = Field(default=1, ge=1)
    message: str | None = None
    step_index: int = Field(ge=0)


class Finding(BaseModel):
    """A single normalized result reported by the analysis engine."""

    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(default="unknown", min_length=1)
    severity: Severity
    language: str
    message: str
    location: Location
    flow_steps: tuple[FlowStep, ...] | None = None

    @field_validator("flow_steps")
    @classmethod
    def _check_flow_steps(
        cls, v: tuple[FlowStep, ...] | None
    ) -> tuple[FlowStep, ...] | None:
        if v is None:
            return v
        if not v:
            raise ValueError("flow_steps must be absent or hold at least one step")
        for expected, step in enumerate(v):
            if step.step_index != expected:
                raise ValueError(
                    f"flow step indices must be contiguous from 0, got {step.step_index} at {expected}"
                )
        return v

    @property
    def source(self) -> FlowStep | None:
        return self.flow_steps[0] if self.flow_steps else None

    @property
    def sink(self) -> FlowStep | None:
        return self.flow_steps[-1] if self.flow_steps else None
