"""Endpoints that run a pipeline entry point for a posted trigger event."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.encoders import jsonable_encoder

from sensorflow.core.exceptions import (
    InvalidEventError,
    LookupFailure,
    PartialCompletion,
    RowWriteFailure,
)
from sensorflow.models.pipeline import PipelineResult
from sensorflow.pipeline.entrypoints import ENTRYPOINTS

router = APIRouter(tags=["pipelines"])


def _status_code(error: Any) -> int:
    if isinstance(error, InvalidEventError):
        return 422
    if isinstance(error, LookupFailure):
        return 404
    if isinstance(error, PartialCompletion):
        return 409
    return 502


def _error_detail(result: PipelineResult) -> dict[str, Any]:
    error = result.error
    detail: dict[str, Any] = {
        "pipeline": result.pipeline,
        "failed_stage": result.failed_stage,
        "error_type": type(error).__name__,
        "error": str(error),
    }
    if isinstance(error, PartialCompletion):
        detail["phases_completed"] = error.phases_completed
        detail["failed_phase"] = error.failed_phase
        detail.update(error.details)
    elif isinstance(error, RowWriteFailure):
        detail["rows_written"] = error.rows_written
        detail["failures"] = error.failures
    return detail


@router.get("")
async def list_pipelines() -> dict[str, list[str]]:
    return {"pipelines": sorted(ENTRYPOINTS)}


@router.post("/{name}")
async def run_pipeline(name: str, request: Request,
                       event: dict[str, Any] = Body(...)) -> dict[str, Any]:
    """Run pipeline ``name`` for ``event`` and report every stage."""
    entrypoint = ENTRYPOINTS.get(name)
    if entrypoint is None:
        raise HTTPException(status_code=404, detail=f"Unknown pipeline {name!r}")

    result = await entrypoint(
        event, backends=request.app.state.backends, settings=request.app.state.settings,
    )
    stages = jsonable_encoder(result.stages)
    if not result.succeeded:
        raise HTTPException(
            status_code=_status_code(result.error),
            detail={**_error_detail(result), "stages": stages},
        )
    return {
        "pipeline": result.pipeline,
        "status": result.status,
        "result": jsonable_encoder(result.value, by_alias=True),
        "stages": stages,
    }
