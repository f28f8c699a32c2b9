"""sensorflow exception hierarchy."""

from __future__ import annotations

from typing import Any


class SensorFlowError(Exception):
    """Base exception for all sensorflow errors."""


class InvalidEventError(SensorFlowError):
    """Trigger event does not have a shape the entry point accepts."""


class LookupFailure(SensorFlowError):
    """A named resource could not be resolved."""


class WorkflowNotFoundError(LookupFailure):
    """No workflow with the requested name exists in the engine listing."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Workflow {name!r} doesn't exist")


class TransientStoreFailure(SensorFlowError):
    """A store, engine or notification call was rejected or timed out."""


class PartialCompletion(SensorFlowError):
    """A multi-phase protocol stopped after some, but not all, phases succeeded."""

    def __init__(
        self,
        operation: str,
        phases_completed: list[str],
        failed_phase: str,
        cause: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.operation = operation
        self.phases_completed = phases_completed
        self.failed_phase = failed_phase
        self.cause = cause
        self.details = details or {}
        done = ", ".join(phases_completed) or "none"
        super().__init__(
            f"{operation} stopped at phase {failed_phase!r} (completed: {done}): {cause}"
        )


class RowWriteFailure(SensorFlowError):
    """One or more decoded rows could not be written to the table store."""

    def __init__(self, failures: list[dict[str, Any]], rows_written: int) -> None:
        self.failures = failures
        self.rows_written = rows_written
        super().__init__(
            f"{len(failures)} row(s) failed to write ({rows_written} written)"
        )


class PipelineError(SensorFlowError):
    """Error during pipeline execution."""


class PipelineFailedError(PipelineError):
    """A pipeline stage failed with a payload that is not an exception."""

    def __init__(self, pipeline: str, stage: str | None, payload: Any) -> None:
        self.pipeline = pipeline
        self.stage = stage
        self.payload = payload
        super().__init__(f"Pipeline {pipeline!r} failed at stage {stage!r}: {payload}")
