"""S3 object store backend implementing IObjectStore."""

from __future__ import annotations

from typing import BinaryIO

import boto3
from botocore.exceptions import ClientError, WaiterError

from sensorflow.core.exceptions import TransientStoreFailure


class S3ObjectStore:
    """Production IObjectStore backed by S3."""

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None,
                 waiter_delay: int = 5, waiter_max_attempts: int = 20) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        self._waiter_config = {"Delay": waiter_delay, "MaxAttempts": waiter_max_attempts}
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def exists(self, bucket: str, key: str) -> bool:
        try:
            self._client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise TransientStoreFailure(f"S3 head failed for s3://{bucket}/{key}: {exc}") from exc

    def wait_until_exists(self, bucket: str, key: str) -> None:
        try:
            waiter = self._client.get_waiter("object_exists")
            waiter.wait(Bucket=bucket, Key=key, WaiterConfig=self._waiter_config)
        except WaiterError as exc:
            raise TransientStoreFailure(
                f"s3://{bucket}/{key} did not appear after {self._waiter_config['MaxAttempts']} checks: {exc}"
            ) from exc

    def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        try:
            self._client.copy_object(
                Bucket=dst_bucket,
                CopySource={"Bucket": src_bucket, "Key": src_key},
                Key=dst_key,
            )
        except ClientError as exc:
            raise TransientStoreFailure(
                f"S3 copy s3://{src_bucket}/{src_key} -> s3://{dst_bucket}/{dst_key} failed: {exc}"
            ) from exc

    def delete(self, bucket: str, key: str) -> None:
        try:
            self._client.delete_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            raise TransientStoreFailure(f"S3 delete failed for s3://{bucket}/{key}: {exc}") from exc

    def open_read_stream(self, bucket: str, key: str) -> BinaryIO:
        try:
            resp = self._client.get_object(Bucket=bucket, Key=key)
            return resp["Body"]
        except ClientError as exc:
            raise TransientStoreFailure(f"S3 read failed for s3://{bucket}/{key}: {exc}") from exc
