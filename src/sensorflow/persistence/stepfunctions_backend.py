"""Step Functions backend implementing IWorkflowEngine."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import ClientError

from sensorflow.core.exceptions import TransientStoreFailure


class StepFunctionsEngine:
    """Production IWorkflowEngine backed by AWS Step Functions."""

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("stepfunctions", **kwargs)

    def list_workflows(self) -> list[dict[str, Any]]:
        try:
            machines: list[dict[str, Any]] = []
            paginator = self._client.get_paginator("list_state_machines")
            for page in paginator.paginate():
                machines.extend(page.get("stateMachines", []))
            return machines
        except ClientError as exc:
            raise TransientStoreFailure(f"Step Functions listing failed: {exc}") from exc

    def start_execution(self, workflow_arn: str, payload: str) -> dict[str, Any]:
        try:
            return self._client.start_execution(stateMachineArn=workflow_arn, input=payload)
        except ClientError as exc:
            raise TransientStoreFailure(
                f"Step Functions start_execution failed for {workflow_arn!r}: {exc}"
            ) from exc
