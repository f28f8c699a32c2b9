"""DynamoDB backend implementing ITableStore."""

from __future__ import annotations

import boto3
from botocore.exceptions import ClientError

from sensorflow.core.exceptions import TransientStoreFailure
from sensorflow.core.types import AttributeMap


class DynamoDBTableStore:
    """Production ITableStore issuing one low-level PutItem per call."""

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("dynamodb", **kwargs)

    def put_item(self, table: str, item: AttributeMap) -> None:
        try:
            self._client.put_item(TableName=table, Item=item)
        except ClientError as exc:
            raise TransientStoreFailure(f"DynamoDB put_item failed for table={table!r}: {exc}") from exc
