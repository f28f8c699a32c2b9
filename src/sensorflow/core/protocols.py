"""Protocol interfaces for the external collaborators.

Structural typing: the AWS backends and the in-memory fakes both satisfy these
without inheriting from them.
"""

from __future__ import annotations

from typing import Any, BinaryIO, Protocol, runtime_checkable

from sensorflow.core.types import AttributeMap


# ---------------------------------------------------------------------------
# Object Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IObjectStore(Protocol):
    """Blob storage addressed by bucket + key (S3)."""

    def exists(self, bucket: str, key: str) -> bool: ...

    def wait_until_exists(self, bucket: str, key: str) -> None: ...

    def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None: ...

    def delete(self, bucket: str, key: str) -> None: ...

    def open_read_stream(self, bucket: str, key: str) -> BinaryIO: ...


# ---------------------------------------------------------------------------
# Table Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ITableStore(Protocol):
    """Single-item writes against a key-attribute table (DynamoDB)."""

    def put_item(self, table: str, item: AttributeMap) -> None: ...


# ---------------------------------------------------------------------------
# Workflow Engine
# ---------------------------------------------------------------------------

@runtime_checkable
class IWorkflowEngine(Protocol):
    """External state-machine runtime (Step Functions)."""

    def list_workflows(self) -> list[dict[str, Any]]: ...

    def start_execution(self, workflow_arn: str, payload: str) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# Notification Service
# ---------------------------------------------------------------------------

@runtime_checkable
class INotificationService(Protocol):
    """Outbound email (SES)."""

    def send(self, to_address: str, from_address: str, subject: str, body: str) -> str: ...
