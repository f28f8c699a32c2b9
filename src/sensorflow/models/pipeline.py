"""Stage and pipeline execution state models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field

from sensorflow.core.exceptions import PipelineFailedError


class StageStatus(StrEnum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class StageOutcome(BaseModel):
    """Tagged result a stage may return instead of raising."""

    succeeded: bool
    value: Any = None
    error: Any = None

    @classmethod
    def success(cls, value: Any = None) -> StageOutcome:
        return cls(succeeded=True, value=value)

    @classmethod
    def failure(cls, error: Any) -> StageOutcome:
        return cls(succeeded=False, error=error)


class StageReport(BaseModel):
    """Execution state for a single stage."""

    name: str
    status: StageStatus = StageStatus.PENDING
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
    error: str = ""

    def mark_running(self) -> None:
        self.status = StageStatus.RUNNING
        self.started_at = datetime.now(timezone.utc)

    def mark_finished(self, status: StageStatus, error: Any = None) -> None:
        self.status = status
        self.ended_at = datetime.now(timezone.utc)
        if self.started_at is not None:
            self.duration_ms = int((self.ended_at - self.started_at).total_seconds() * 1000)
        if error is not None:
            self.error = str(error)


class PipelineResult(BaseModel):
    """Terminal signal of a pipeline run."""

    pipeline: str
    status: StageStatus
    value: Any = None
    error: Any = None
    failed_stage: Optional[str] = None
    stages: list[StageReport] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == StageStatus.SUCCEEDED

    def unwrap(self) -> Any:
        """Return the final value, or raise the failure that stopped the chain."""
        if self.succeeded:
            return self.value
        if isinstance(self.error, Exception):
            raise self.error
        raise PipelineFailedError(self.pipeline, self.failed_stage, self.error)
