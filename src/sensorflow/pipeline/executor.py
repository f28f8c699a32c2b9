"""
StageExecutor — runs an ordered list of stages as a short-circuiting fold.

Each stage receives the previous stage's result. A stage fails either by
raising or by returning ``StageOutcome.failure(payload)``; the payload may be
anything (an exception, a plain string, a dict). The first failure stops the
chain and later stages never run. Exactly one PipelineResult is returned per
run. Stages that already ran are not compensated.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from sensorflow.core.logging import get_logger
from sensorflow.models.pipeline import PipelineResult, StageOutcome, StageReport, StageStatus


@dataclass(frozen=True)
class Stage:
    """A named unit of work: ``run(previous_result) -> next_result``.

    ``run`` may be a plain function or a coroutine function.
    """

    name: str
    run: Callable[[Any], Any]


class StageExecutor:
    """
    Executes stages strictly in order.

    Usage::

        executor = StageExecutor("move_file")
        result = await executor.run([
            Stage("parse_event", parse_file_event),
            Stage("relocate", relocator.relocate),
        ], initial=event)
        value = result.unwrap()
    """

    def __init__(self, pipeline: str) -> None:
        self.pipeline = pipeline
        self.logger = get_logger("pipeline.executor")

    async def run(self, stages: Sequence[Stage], initial: Any = None) -> PipelineResult:
        reports = [StageReport(name=stage.name) for stage in stages]
        log = self.logger.bind(pipeline=self.pipeline, total_stages=len(stages))
        log.info("Pipeline started")

        value = initial
        for index, (stage, report) in enumerate(zip(stages, reports), start=1):
            stage_log = log.bind(stage=stage.name, stage_index=index)
            report.mark_running()
            stage_log.debug("Stage running")

            outcome = await self._invoke(stage, value)

            if not outcome.succeeded:
                report.mark_finished(StageStatus.FAILED, outcome.error)
                stage_log.error(
                    "Stage failed, pipeline stopping",
                    error=str(outcome.error),
                    error_type=type(outcome.error).__name__,
                    duration_ms=report.duration_ms,
                )
                return PipelineResult(
                    pipeline=self.pipeline,
                    status=StageStatus.FAILED,
                    error=outcome.error,
                    failed_stage=stage.name,
                    stages=reports,
                )

            report.mark_finished(StageStatus.SUCCEEDED)
            stage_log.info("Stage completed", duration_ms=report.duration_ms)
            value = outcome.value

        log.info("Pipeline succeeded")
        return PipelineResult(
            pipeline=self.pipeline,
            status=StageStatus.SUCCEEDED,
            value=value,
            stages=reports,
        )

    @staticmethod
    async def _invoke(stage: Stage, value: Any) -> StageOutcome:
        try:
            result = stage.run(value)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            return StageOutcome.failure(exc)
        if isinstance(result, StageOutcome):
            return result
        return StageOutcome.success(result)
