"""Integration test fixtures — LocalStack S3, DynamoDB, Step Functions, SES."""

from __future__ import annotations

import os
import sys
import uuid

import boto3
import pytest

from sensorflow.core.config import (
    AppSettings,
    DynamoDBConfig,
    PipelineConfig,
    S3Config,
    SESConfig,
    StepFunctionsConfig,
)
from sensorflow.persistence import create_backends

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
REGION = "us-east-1"
EMAIL = "ops@example.com"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("s3", region_name=REGION, endpoint_url=LOCALSTACK_URL)
        client.list_buckets()
        return True
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_clients():
    return {
        name: boto3.client(name, region_name=REGION, endpoint_url=LOCALSTACK_URL)
        for name in ("s3", "dynamodb", "stepfunctions", "ses")
    }


@pytest.fixture(scope="session")
def provisioned(localstack_clients):
    """Provision uniquely named resources via the seed script."""
    sys.path.insert(0, str(os.path.join(os.path.dirname(__file__), "..", "..", "scripts")))
    from seed_localstack import create_buckets, create_sensor_table, create_workflow, verify_email

    suffix = uuid.uuid4().hex[:8]
    names = {
        "bucket": f"sensorflow-uploads-{suffix}",
        "target_bucket": f"sensorflow-archive-{suffix}",
        "workflow": f"sensorflow-workflow-{suffix}",
    }
    create_buckets(localstack_clients["s3"], names["bucket"], names["target_bucket"])
    create_sensor_table(localstack_clients["dynamodb"])
    names["workflow_arn"] = create_workflow(localstack_clients["stepfunctions"], names["workflow"])
    verify_email(localstack_clients["ses"], EMAIL)
    return names


@pytest.fixture(scope="session")
def settings(provisioned):
    return AppSettings(
        pipeline=PipelineConfig(
            workflow_name=provisioned["workflow"],
            target_bucket=provisioned["target_bucket"],
            destination_email=EMAIL,
        ),
        s3=S3Config(region=REGION, endpoint_url=LOCALSTACK_URL, waiter_delay=1, waiter_max_attempts=5),
        dynamodb=DynamoDBConfig(region=REGION, endpoint_url=LOCALSTACK_URL),
        stepfunctions=StepFunctionsConfig(region=REGION, endpoint_url=LOCALSTACK_URL),
        ses=SESConfig(region=REGION, endpoint_url=LOCALSTACK_URL),
    )


@pytest.fixture(scope="session")
def backends(settings):
    return create_backends(settings)
