"""
AWS Lambda handlers.

Each handler runs one pipeline entry point to completion and either returns
a JSON-able value or raises the error that stopped the chain, so Lambda
(and the Step Functions state that invoked it) sees exactly one terminal
signal per invocation.
"""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any

from sensorflow.core.config import AppSettings
from sensorflow.core.logging import configure_logging, get_logger
from sensorflow.core.types import JsonDict
from sensorflow.models.events import IngestReport, RelocationResult
from sensorflow.persistence import Backends, create_backends
from sensorflow.pipeline import entrypoints

logger = get_logger("handlers")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    configure_logging(settings.log_level, json_logs=settings.log_json)
    return settings


@lru_cache(maxsize=1)
def get_backends() -> Backends:
    return create_backends(get_settings())


def _run(name: str, event: Any, context: Any) -> Any:
    settings = get_settings()
    request_id = getattr(context, "aws_request_id", None)
    logger.info("Invocation started", handler=name, request_id=request_id)
    result = asyncio.run(
        entrypoints.ENTRYPOINTS[name](event, backends=get_backends(), settings=settings)
    )
    if not result.succeeded:
        logger.error("Failed execution", handler=name, request_id=request_id,
                     failed_stage=result.failed_stage, error=str(result.error))
    else:
        logger.info("Successful execution", handler=name, request_id=request_id)
    return result.unwrap()


def execute_workflow(event: JsonDict, context: Any) -> JsonDict:
    handles = _run("execute_workflow", event, context)
    return {"status": "OK", "executions": [h.execution_arn for h in handles]}


def process_file(event: JsonDict, context: Any) -> JsonDict:
    report: IngestReport = _run("process_file", event, context)
    return {**report.source.to_event(), "rowsWritten": report.rows_written}


def move_file(event: JsonDict, context: Any) -> JsonDict:
    moved: RelocationResult = _run("move_file", event, context)
    return moved.to_event()


def send_email(event: JsonDict, context: Any) -> JsonDict:
    message_id = _run("send_email", event, context)
    return {"status": "OK", "messageId": message_id}


def process_and_archive(event: JsonDict, context: Any) -> JsonDict:
    moved: RelocationResult = _run("process_and_archive", event, context)
    return moved.to_event()
