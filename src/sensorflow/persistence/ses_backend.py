"""SES backend implementing INotificationService."""

from __future__ import annotations

import boto3
from botocore.exceptions import ClientError

from sensorflow.core.exceptions import TransientStoreFailure


class SESNotificationService:
    """Production INotificationService sending plain-text email through SES."""

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("ses", **kwargs)

    def send(self, to_address: str, from_address: str, subject: str, body: str) -> str:
        try:
            resp = self._client.send_email(
                Destination={"ToAddresses": [to_address]},
                Message={
                    "Body": {"Text": {"Data": body}},
                    "Subject": {"Data": subject},
                },
                Source=from_address,
            )
            return resp["MessageId"]
        except ClientError as exc:
            raise TransientStoreFailure(f"SES send_email to {to_address!r} failed: {exc}") from exc
