"""Unit test fixtures — in-memory backends and explicit settings."""

from __future__ import annotations

import pytest

from sensorflow.core.config import AppSettings, IngestConfig, PipelineConfig
from sensorflow.persistence import Backends
from tests.fakes import (
    MemoryNotificationService,
    MemoryObjectStore,
    MemoryTableStore,
    MemoryWorkflowEngine,
)

WORKFLOW_NAME = "sensor-file-workflow"
TARGET_BUCKET = "dst"
DEST_EMAIL = "a@b.com"


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        workflow_name=WORKFLOW_NAME,
        target_bucket=TARGET_BUCKET,
        destination_email=DEST_EMAIL,
    )


@pytest.fixture
def settings(pipeline_config) -> AppSettings:
    return AppSettings(pipeline=pipeline_config, ingest=IngestConfig(max_in_flight=2))


@pytest.fixture
def backends() -> Backends:
    return Backends(
        object_store=MemoryObjectStore(),
        table_store=MemoryTableStore(),
        workflow_engine=MemoryWorkflowEngine(),
        notifier=MemoryNotificationService(),
    )


def s3_event(bucket: str, *keys: str) -> dict:
    """Build an S3 notification with one record per key."""
    return {
        "Records": [
            {"s3": {"bucket": {"name": bucket}, "object": {"key": key}}} for key in keys
        ]
    }
