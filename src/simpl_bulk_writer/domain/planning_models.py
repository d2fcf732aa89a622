"""Request and response payloads of the planning API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from simpl_bulk_writer.domain.job_models import JobConfig, TaskConfig

MAX_PLAN_PARALLELISM = 10_000


class PlanningModel(BaseModel):
    """Base model for planning routes."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class JobValidateRequest(PlanningModel):
    """Raw job description to normalize."""

    job: dict[str, Any]


class JobValidateResponse(PlanningModel):
    """Normalized job description."""

    job: JobConfig


class JobPlanRequest(PlanningModel):
    """Raw job description and the number of writer tasks wanted."""

    job: dict[str, Any]
    parallelism: int = Field(default=1, ge=1, le=MAX_PLAN_PARALLELISM)


class JobPlanResponse(PlanningModel):
    """Normalized job plus one configuration per writer task."""

    job: JobConfig
    tasks: list[TaskConfig]
    output_uris: list[str] = Field(default_factory=list, alias="outputUris")


__all__ = [
    "MAX_PLAN_PARALLELISM",
    "JobPlanRequest",
    "JobPlanResponse",
    "JobValidateRequest",
    "JobValidateResponse",
    "PlanningModel",
]
