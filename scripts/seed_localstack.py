"""Provision the bucket, table, state machine and SES identity a pipeline run needs.

Intended for LocalStack and integration tests, not production deployment.

Usage:
    python scripts/seed_localstack.py --endpoint-url http://localhost:4566 \
        --bucket sensor-uploads --target-bucket sensor-archive \
        --workflow-name sensor-file-workflow --email ops@example.com
"""

from __future__ import annotations

import argparse
import json
from typing import Any

import boto3

SENSOR_TABLE = "sensor_data"
ROLE_ARN = "arn:aws:iam::000000000000:role/sensorflow-states"

PASS_DEFINITION = json.dumps({
    "Comment": "Placeholder workflow for local runs",
    "StartAt": "Done",
    "States": {"Done": {"Type": "Pass", "End": True}},
})


def _clients(region: str, endpoint_url: str | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"region_name": region}
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return {name: boto3.client(name, **kwargs) for name in ("s3", "dynamodb", "stepfunctions", "ses")}


def create_buckets(s3: Any, *buckets: str) -> None:
    """Create each bucket. Skips buckets that already exist."""
    existing = {b["Name"] for b in s3.list_buckets().get("Buckets", [])}
    for bucket in buckets:
        if bucket in existing:
            print(f"  Bucket {bucket} already exists, skipping")
            continue
        s3.create_bucket(Bucket=bucket)
        print(f"  Created bucket {bucket}")


def create_sensor_table(ddb: Any, table_name: str = SENSOR_TABLE) -> None:
    """Create the sensor readings table keyed on sensor_id + timestamp."""
    if table_name in ddb.list_tables().get("TableNames", []):
        print(f"  Table {table_name} already exists, skipping")
        return
    ddb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "sensor_id", "KeyType": "HASH"},
            {"AttributeName": "timestamp", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "sensor_id", "AttributeType": "S"},
            {"AttributeName": "timestamp", "AttributeType": "N"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    print(f"  Created table {table_name}")


def create_workflow(sfn: Any, name: str) -> str:
    """Create a pass-through state machine; return its ARN."""
    for machine in sfn.list_state_machines().get("stateMachines", []):
        if machine["name"] == name:
            print(f"  Workflow {name} already exists, skipping")
            return machine["stateMachineArn"]
    resp = sfn.create_state_machine(name=name, definition=PASS_DEFINITION, roleArn=ROLE_ARN)
    print(f"  Created workflow {name}")
    return resp["stateMachineArn"]


def verify_email(ses: Any, address: str) -> None:
    ses.verify_email_identity(EmailAddress=address)
    print(f"  Verified email identity {address}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Provision LocalStack resources for sensorflow")
    parser.add_argument("--endpoint-url", default=None, help="AWS endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--bucket", required=True, help="Upload bucket")
    parser.add_argument("--target-bucket", required=True, help="Bucket receiving processed/ objects")
    parser.add_argument("--workflow-name", required=True, help="State machine name")
    parser.add_argument("--email", required=True, help="Notification address to verify")
    parser.add_argument("--table", default=SENSOR_TABLE, help="Sensor table name")
    args = parser.parse_args()

    clients = _clients(args.region, args.endpoint_url)

    print("Creating buckets...")
    create_buckets(clients["s3"], args.bucket, args.target_bucket)

    print("Creating table...")
    create_sensor_table(clients["dynamodb"], args.table)

    print("Creating workflow...")
    create_workflow(clients["stepfunctions"], args.workflow_name)

    print("Verifying email...")
    verify_email(clients["ses"], args.email)

    print("Done!")


if __name__ == "__main__":
    main()
