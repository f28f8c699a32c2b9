"""
Pipeline entry points, one async function per trigger.

Each takes the raw trigger event plus the collaborator backends and
settings, assembles its stage list, and returns the single PipelineResult
of the run. The Lambda handlers and the API routes are thin wrappers
around these.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from sensorflow.core.config import AppSettings
from sensorflow.core.logging import get_logger
from sensorflow.ingest.ingester import StreamingRecordIngester
from sensorflow.models.events import IngestReport, ObjectRef, RelocationResult, parse_file_event
from sensorflow.models.pipeline import PipelineResult
from sensorflow.persistence import Backends
from sensorflow.pipeline.executor import Stage, StageExecutor
from sensorflow.steps.notification import Notifier
from sensorflow.steps.relocation import Relocator
from sensorflow.workflows.dispatcher import WorkflowDispatcher

logger = get_logger("pipeline.entrypoints")


def _wait_for_object(backends: Backends) -> Callable[[ObjectRef], Awaitable[ObjectRef]]:
    async def wait(ref: ObjectRef) -> ObjectRef:
        logger.info("Waiting until the uploaded object becomes available", source=str(ref))
        await asyncio.to_thread(backends.object_store.wait_until_exists, ref.bucket_name, ref.object_key)
        return ref
    return wait


def _ingest_rows(backends: Backends, settings: AppSettings) -> Callable[[ObjectRef], Awaitable[IngestReport]]:
    ingester = StreamingRecordIngester(backends.table_store, settings.ingest)

    async def ingest(ref: ObjectRef) -> IngestReport:
        logger.info("Downloading the CSV file", source=str(ref))
        stream = await asyncio.to_thread(
            backends.object_store.open_read_stream, ref.bucket_name, ref.object_key
        )
        try:
            rows_written = await ingester.ingest(stream)
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()
        return IngestReport(source=ref, rows_written=rows_written)
    return ingest


async def execute_workflow(event: Any, *, backends: Backends, settings: AppSettings) -> PipelineResult:
    dispatcher = WorkflowDispatcher(backends.workflow_engine, settings.pipeline)
    return await dispatcher.dispatch(event)


async def process_file(event: Any, *, backends: Backends, settings: AppSettings) -> PipelineResult:
    stages = [
        Stage("parse_event", parse_file_event),
        Stage("wait_for_object", _wait_for_object(backends)),
        Stage("ingest_rows", _ingest_rows(backends, settings)),
    ]
    return await StageExecutor("process_file").run(stages, initial=event)


async def move_file(event: Any, *, backends: Backends, settings: AppSettings) -> PipelineResult:
    relocator = Relocator(backends.object_store, settings.pipeline)
    stages = [
        Stage("parse_event", parse_file_event),
        Stage("relocate", relocator.relocate),
    ]
    return await StageExecutor("move_file").run(stages, initial=event)


async def send_email(event: Any, *, backends: Backends, settings: AppSettings) -> PipelineResult:
    notifier = Notifier(backends.notifier, settings.pipeline)
    stages = [
        Stage("parse_event", parse_file_event),
        Stage("notify", lambda ref: notifier.notify(ref.object_key)),
    ]
    return await StageExecutor("send_email").run(stages, initial=event)


async def process_and_archive(event: Any, *, backends: Backends, settings: AppSettings) -> PipelineResult:
    """Ingest, relocate and notify for one object in a single chain."""
    relocator = Relocator(backends.object_store, settings.pipeline)
    notifier = Notifier(backends.notifier, settings.pipeline)

    async def notify(moved: RelocationResult) -> RelocationResult:
        await notifier.notify(moved.object_key)
        return moved

    stages = [
        Stage("parse_event", parse_file_event),
        Stage("wait_for_object", _wait_for_object(backends)),
        Stage("ingest_rows", _ingest_rows(backends, settings)),
        Stage("relocate", lambda report: relocator.relocate(report.source)),
        Stage("notify", notify),
    ]
    return await StageExecutor("process_and_archive").run(stages, initial=event)


ENTRYPOINTS: dict[str, Callable[..., Awaitable[PipelineResult]]] = {
    "execute_workflow": execute_workflow,
    "process_file": process_file,
    "move_file": move_file,
    "send_email": send_email,
    "process_and_archive": process_and_archive,
}
