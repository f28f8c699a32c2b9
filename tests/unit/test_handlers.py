"""Tests for the Lambda handlers' success values and failure signalling."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from sensorflow import handlers
from sensorflow.core.exceptions import InvalidEventError, PipelineFailedError, WorkflowNotFoundError
from sensorflow.models.pipeline import StageOutcome
from sensorflow.pipeline.executor import Stage, StageExecutor
from tests.unit.conftest import WORKFLOW_NAME, s3_event


class _Context:
    aws_request_id = "req-123"


@pytest.fixture(autouse=True)
def wired(backends, settings):
    with patch("sensorflow.handlers.get_backends", return_value=backends), \
         patch("sensorflow.handlers.get_settings", return_value=settings):
        yield backends


class TestExecuteWorkflow:
    def test_returns_execution_arns(self, wired):
        wired.workflow_engine.add_workflow(WORKFLOW_NAME)
        result = handlers.execute_workflow(s3_event("b", "k.csv"), _Context())
        assert result["status"] == "OK"
        assert result["executions"] == [wired.workflow_engine.executions[0]["executionArn"]]

    def test_raises_when_workflow_missing(self, wired):
        with pytest.raises(WorkflowNotFoundError):
            handlers.execute_workflow(s3_event("b", "k.csv"), _Context())

    def test_raises_for_event_without_records(self, wired):
        with pytest.raises(InvalidEventError):
            handlers.execute_workflow({"foo": "bar"}, None)


class TestFileHandlers:
    def test_process_file_output_feeds_move_file(self, wired):
        wired.object_store.put("src", "f.csv", b"s1,100,3.5\n")

        processed = handlers.process_file({"bucketName": "src", "objectKey": "f.csv"}, _Context())
        assert processed == {"bucketName": "src", "objectKey": "f.csv", "rowsWritten": 1}

        moved = handlers.move_file(processed, _Context())
        assert moved == {
            "bucketName": "src", "objectKey": "f.csv",
            "newLocation": "processed/f.csv", "targetBucket": "dst",
        }

    def test_send_email(self, wired):
        result = handlers.send_email({"sourceBucket": "src", "objectKey": "f.csv"}, _Context())
        assert result["status"] == "OK"
        assert result["messageId"] == wired.notifier.outbox[0]["message_id"]

    def test_process_and_archive(self, wired):
        wired.object_store.put("src", "f.csv", b"s1,100,3.5\n")
        result = handlers.process_and_archive({"bucketName": "src", "objectKey": "f.csv"}, _Context())
        assert result["newLocation"] == "processed/f.csv"


def test_non_exception_failure_is_wrapped(wired):
    async def failing(event, *, backends, settings):
        return await StageExecutor("custom").run([Stage("s", lambda _: StageOutcome.failure("bare"))])

    with patch.dict("sensorflow.pipeline.entrypoints.ENTRYPOINTS", {"send_email": failing}):
        with pytest.raises(PipelineFailedError, match="bare"):
            handlers.send_email({}, None)


def test_settings_load_before_first_log_line(backends, settings):
    order = []

    def load_settings():
        order.append("settings")
        return settings

    with patch("sensorflow.handlers.get_settings", side_effect=load_settings), \
         patch("sensorflow.handlers.get_backends", return_value=backends), \
         patch("sensorflow.handlers.logger") as logger:
        logger.info.side_effect = lambda event, **kw: order.append(event)
        backends.workflow_engine.add_workflow(WORKFLOW_NAME)
        handlers.execute_workflow(s3_event("b", "k.csv"), _Context())

    assert order[:2] == ["settings", "Invocation started"]
