"""Pluggable collaborator backends behind Protocol interfaces."""

from __future__ import annotations

from dataclasses import dataclass

from sensorflow.core.config import AppSettings
from sensorflow.core.protocols import (
    INotificationService,
    IObjectStore,
    ITableStore,
    IWorkflowEngine,
)
from sensorflow.persistence.dynamodb_backend import DynamoDBTableStore
from sensorflow.persistence.s3_backend import S3ObjectStore
from sensorflow.persistence.ses_backend import SESNotificationService
from sensorflow.persistence.stepfunctions_backend import StepFunctionsEngine


@dataclass(frozen=True)
class Backends:
    """The four external collaborators a pipeline may talk to."""

    object_store: IObjectStore
    table_store: ITableStore
    workflow_engine: IWorkflowEngine
    notifier: INotificationService


def create_backends(settings: AppSettings | None = None) -> Backends:
    """Create wired-up AWS backends from application settings."""
    if settings is None:
        settings = AppSettings()

    object_store = S3ObjectStore(
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
        waiter_delay=settings.s3.waiter_delay,
        waiter_max_attempts=settings.s3.waiter_max_attempts,
    )

    table_store = DynamoDBTableStore(
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    workflow_engine = StepFunctionsEngine(
        region=settings.stepfunctions.region,
        endpoint_url=settings.stepfunctions.endpoint_url,
    )

    notifier = SESNotificationService(
        region=settings.ses.region,
        endpoint_url=settings.ses.endpoint_url,
    )

    return Backends(object_store, table_store, workflow_engine, notifier)
