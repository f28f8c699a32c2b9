"""In-memory backends for unit tests and local runs: dict-backed fakes.

Every fake accepts injected failures: ``store.fail("copy", exc)`` makes every
later ``copy`` call raise ``exc`` until the fake is replaced.
"""

from __future__ import annotations

import io
import threading
import uuid
from typing import Any, BinaryIO

from sensorflow.core.exceptions import TransientStoreFailure


class _FailureInjection:
    def __init__(self) -> None:
        self._failures: dict[str, Exception] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._lock = threading.Lock()

    def fail(self, operation: str, exc: Exception) -> None:
        """Make every subsequent call to ``operation`` raise ``exc``."""
        self._failures[operation] = exc

    def _record(self, operation: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((operation, args))
        exc = self._failures.get(operation)
        if exc is not None:
            raise exc


class MemoryObjectStore(_FailureInjection):
    """Dict-backed IObjectStore."""

    def __init__(self) -> None:
        super().__init__()
        self.objects: dict[tuple[str, str], bytes] = {}

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self.objects[(bucket, key)] = data

    def exists(self, bucket: str, key: str) -> bool:
        self._record("exists", bucket, key)
        return (bucket, key) in self.objects

    def wait_until_exists(self, bucket: str, key: str) -> None:
        self._record("wait_until_exists", bucket, key)
        if (bucket, key) not in self.objects:
            raise TransientStoreFailure(f"s3://{bucket}/{key} did not appear")

    def copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        self._record("copy", src_bucket, src_key, dst_bucket, dst_key)
        try:
            self.objects[(dst_bucket, dst_key)] = self.objects[(src_bucket, src_key)]
        except KeyError:
            raise TransientStoreFailure(f"NoSuchKey: s3://{src_bucket}/{src_key}") from None

    def delete(self, bucket: str, key: str) -> None:
        self._record("delete", bucket, key)
        self.objects.pop((bucket, key), None)

    def open_read_stream(self, bucket: str, key: str) -> BinaryIO:
        self._record("open_read_stream", bucket, key)
        try:
            return io.BytesIO(self.objects[(bucket, key)])
        except KeyError:
            raise TransientStoreFailure(f"NoSuchKey: s3://{bucket}/{key}") from None


class MemoryTableStore(_FailureInjection):
    """List-backed ITableStore; ``reject`` makes writes for matching items fail."""

    def __init__(self) -> None:
        super().__init__()
        self.items: dict[str, list[dict[str, dict[str, str]]]] = {}
        self._reject: dict[str, str] = {}

    def reject(self, attribute: str, value: str) -> None:
        """Fail writes whose ``attribute`` holds ``value``."""
        self._reject[attribute] = value

    def put_item(self, table: str, item: dict[str, dict[str, str]]) -> None:
        self._record("put_item", table, item)
        for attribute, value in self._reject.items():
            if value in item.get(attribute, {}).values():
                raise TransientStoreFailure(f"ValidationException: rejected {attribute}={value!r}")
        with self._lock:
            self.items.setdefault(table, []).append(item)


class MemoryWorkflowEngine(_FailureInjection):
    """Canned-listing IWorkflowEngine recording every started execution."""

    def __init__(self, workflows: list[dict[str, Any]] | None = None) -> None:
        super().__init__()
        self.workflows = list(workflows or [])
        self.executions: list[dict[str, Any]] = []

    def add_workflow(self, name: str, arn: str | None = None) -> str:
        arn = arn or f"arn:aws:states:us-east-1:123456789012:stateMachine:{name}"
        self.workflows.append({"name": name, "stateMachineArn": arn})
        return arn

    def list_workflows(self) -> list[dict[str, Any]]:
        self._record("list_workflows")
        return list(self.workflows)

    def start_execution(self, workflow_arn: str, payload: str) -> dict[str, Any]:
        self._record("start_execution", workflow_arn, payload)
        execution_arn = f"{workflow_arn.replace(':stateMachine:', ':execution:')}:{uuid.uuid4()}"
        self.executions.append(
            {"stateMachineArn": workflow_arn, "input": payload, "executionArn": execution_arn}
        )
        return {"executionArn": execution_arn}


class MemoryNotificationService(_FailureInjection):
    """Outbox-backed INotificationService."""

    def __init__(self) -> None:
        super().__init__()
        self.outbox: list[dict[str, str]] = []

    def send(self, to_address: str, from_address: str, subject: str, body: str) -> str:
        self._record("send", to_address, from_address, subject, body)
        message_id = str(uuid.uuid4())
        self.outbox.append({
            "to": to_address, "from": from_address,
            "subject": subject, "body": body, "message_id": message_id,
        })
        return message_id
