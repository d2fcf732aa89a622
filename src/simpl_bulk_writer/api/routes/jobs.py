"""Job validation and planning routes."""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException

from simpl_bulk_writer.api.dependencies import get_planning_service
from simpl_bulk_writer.application.services import JobPlanningService
from simpl_bulk_writer.domain.errors import (
    ConfigurationError,
    PartitioningError,
    ReconciliationError,
)
from simpl_bulk_writer.domain.planning_models import (
    JobPlanRequest,
    JobPlanResponse,
    JobValidateRequest,
    JobValidateResponse,
)

router = APIRouter(prefix="/jobs", tags=["job planning"])

logger = logging.getLogger(__name__)


def _raise_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, ConfigurationError):
        raise HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ReconciliationError):
        raise HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, PartitioningError):
        raise HTTPException(status_code=500, detail=str(exc))
    logger.exception("Unexpected job planning error.")
    raise HTTPException(status_code=500, detail="Unexpected job planning error")


@router.post("/validate", response_model=JobValidateResponse, status_code=200)
async def validate_job(
    request: JobValidateRequest,
    service: JobPlanningService = Depends(get_planning_service),
) -> JobValidateResponse:
    """Normalize a job description without touching storage."""

    try:
        job = await service.validate(request.job)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)
    return JobValidateResponse(job=job)


@router.post("/plan", response_model=JobPlanResponse, status_code=200)
async def plan_job(
    request: JobPlanRequest,
    service: JobPlanningService = Depends(get_planning_service),
) -> JobPlanResponse:
    """Validate, reconcile the target directory and split into writer tasks."""

    try:
        plan = await service.plan(request.job, request.parallelism)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)
    return JobPlanResponse(
        job=plan.job,
        tasks=plan.tasks,
        output_uris=[task.output_uri for task in plan.tasks],
    )


__all__ = ["router"]
