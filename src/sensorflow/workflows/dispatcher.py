"""
WorkflowDispatcher — maps an S3 notification to Step Functions executions.

The named workflow is resolved against the engine listing on every
invocation (never cached) and must resolve before any execution starts.
One execution is started per record in the event; no idempotency key is
sent, so dispatching the same event twice starts two executions.
"""

from __future__ import annotations

import asyncio
from typing import Any

from sensorflow.core.config import PipelineConfig
from sensorflow.core.exceptions import WorkflowNotFoundError
from sensorflow.core.logging import get_logger
from sensorflow.core.protocols import IWorkflowEngine
from sensorflow.models.events import (
    DispatchPlan,
    ExecutionHandle,
    ObjectRef,
    WorkflowDescriptor,
    WorkflowInput,
    parse_records_event,
)
from sensorflow.models.pipeline import PipelineResult
from sensorflow.pipeline.executor import Stage, StageExecutor


class WorkflowDispatcher:
    """Resolves the configured workflow by name and starts executions of it."""

    def __init__(self, engine: IWorkflowEngine, config: PipelineConfig) -> None:
        self._engine = engine
        self._config = config
        self.logger = get_logger("workflows.dispatcher")

    async def resolve_workflow(self, name: str) -> WorkflowDescriptor:
        self.logger.info("Fetching the list of available workflows", workflow_name=name)
        listing = await asyncio.to_thread(self._engine.list_workflows)

        for item in listing:
            descriptor = WorkflowDescriptor.model_validate(item)
            if descriptor.name == name:
                self.logger.info("Found the workflow", workflow_name=name, workflow_arn=descriptor.arn)
                return descriptor

        raise WorkflowNotFoundError(name)

    async def start_workflow(self, descriptor: WorkflowDescriptor,
                             workflow_input: WorkflowInput) -> ExecutionHandle:
        payload = workflow_input.to_payload()
        self.logger.info("Starting workflow execution", workflow_arn=descriptor.arn, input=payload)
        resp = await asyncio.to_thread(self._engine.start_execution, descriptor.arn, payload)
        return ExecutionHandle.model_validate(resp)

    # ---- stages ----

    async def _plan(self, targets: list[ObjectRef]) -> DispatchPlan:
        descriptor = await self.resolve_workflow(self._config.workflow_name)
        return DispatchPlan(descriptor=descriptor, targets=targets)

    async def _start_all(self, plan: DispatchPlan) -> list[ExecutionHandle]:
        handles = []
        for target in plan.targets:
            handles.append(await self.start_workflow(plan.descriptor, WorkflowInput.from_ref(target)))
        return handles

    def stages(self) -> list[Stage]:
        return [
            Stage("parse_event", parse_records_event),
            Stage("resolve_workflow", self._plan),
            Stage("start_executions", self._start_all),
        ]

    async def dispatch(self, event: Any) -> PipelineResult:
        """Run ``parse_event → resolve_workflow → start_executions`` for ``event``."""
        return await StageExecutor("execute_workflow").run(self.stages(), initial=event)
