"""Trigger events and the values that flow between pipeline stages."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from urllib.parse import unquote_plus

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from sensorflow.core.exceptions import InvalidEventError


class ObjectRef(BaseModel):
    """Bucket + key of an object (the flat ``FileEvent`` shape)."""

    model_config = {"populate_by_name": True, "frozen": True}

    bucket_name: str = Field(
        validation_alias=AliasChoices("bucketName", "sourceBucket", "bucket_name"),
        serialization_alias="bucketName",
        min_length=1,
    )
    object_key: str = Field(
        validation_alias=AliasChoices("objectKey", "object_key"),
        serialization_alias="objectKey",
        min_length=1,
    )

    def to_event(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"s3://{self.bucket_name}/{self.object_key}"


# ---------------------------------------------------------------------------
# S3 notification records
# ---------------------------------------------------------------------------

class _S3Bucket(BaseModel):
    name: str


class _S3Object(BaseModel):
    key: str


class _S3Entity(BaseModel):
    bucket: _S3Bucket
    object_: _S3Object = Field(alias="object")


class S3EventRecord(BaseModel):
    """One entry of the ``Records`` array of an S3 notification."""

    s3: _S3Entity

    def to_ref(self) -> ObjectRef:
        # S3 notifications URL-encode object keys
        return ObjectRef(
            bucket_name=self.s3.bucket.name,
            object_key=unquote_plus(self.s3.object_.key),
        )


def parse_records_event(event: Any) -> list[ObjectRef]:
    """Return one ObjectRef per record of a ``RecordsEvent``."""
    if not isinstance(event, dict) or "Records" not in event:
        raise InvalidEventError('Incoming message doesn\'t contain "Records", it will be ignored')
    records = event["Records"]
    if not isinstance(records, list) or not records:
        raise InvalidEventError('Incoming message has an empty "Records" list')
    try:
        return [S3EventRecord.model_validate(r).to_ref() for r in records]
    except ValidationError as exc:
        raise InvalidEventError(f"Malformed S3 event record: {exc}") from exc


def parse_file_event(event: Any) -> ObjectRef:
    """Return the single object a ``FileEvent`` (or one-record ``RecordsEvent``) refers to.

    Multi-record events are rejected rather than truncated to the first record.
    """
    if isinstance(event, dict) and "Records" in event:
        refs = parse_records_event(event)
        if len(refs) > 1:
            raise InvalidEventError(
                f"Event carries {len(refs)} records; this entry point handles exactly one"
            )
        return refs[0]
    try:
        return ObjectRef.model_validate(event)
    except ValidationError as exc:
        raise InvalidEventError(f"Event is missing bucketName/objectKey: {exc}") from exc


# ---------------------------------------------------------------------------
# Workflow engine values
# ---------------------------------------------------------------------------

class WorkflowDescriptor(BaseModel):
    """A workflow (state machine) as listed by the engine."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    name: str
    arn: str = Field(validation_alias=AliasChoices("stateMachineArn", "executionArn", "arn"))


class WorkflowInput(BaseModel):
    """Payload handed to a started workflow execution."""

    model_config = {"populate_by_name": True}

    object_key: str = Field(serialization_alias="objectKey")
    bucket_name: str = Field(serialization_alias="bucketName")

    @classmethod
    def from_ref(cls, ref: ObjectRef) -> WorkflowInput:
        return cls(object_key=ref.object_key, bucket_name=ref.bucket_name)

    def to_payload(self) -> str:
        return self.model_dump_json(by_alias=True)


class ExecutionHandle(BaseModel):
    """Handle of a started workflow execution."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    execution_arn: str = Field(validation_alias=AliasChoices("executionArn", "execution_arn"))
    start_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("startDate", "start_date")
    )


class DispatchPlan(BaseModel):
    """Resolved workflow plus the objects to start it for."""

    descriptor: WorkflowDescriptor
    targets: list[ObjectRef]


# ---------------------------------------------------------------------------
# Ingestion and relocation values
# ---------------------------------------------------------------------------

class Row(BaseModel):
    """One decoded line of a sensor CSV: ``sensor_id,timestamp,value``."""

    sensor_id: str
    timestamp: str
    value: str

    @classmethod
    def from_fields(cls, fields: list[str]) -> Row:
        if len(fields) < 3:
            raise ValueError(f"expected 3 fields, got {len(fields)}")
        sensor_id, timestamp, value = (f.strip() for f in fields[:3])
        return cls(sensor_id=sensor_id, timestamp=timestamp, value=value)

    def to_item(self) -> dict[str, dict[str, str]]:
        return {
            "sensor_id": {"S": self.sensor_id},
            "timestamp": {"N": self.timestamp},
            "value": {"N": self.value},
        }


class IngestReport(BaseModel):
    """Outcome of a fully drained ingestion."""

    source: ObjectRef
    rows_written: int = 0


class RelocationResult(BaseModel):
    """Outcome of a completed copy → verify → delete relocation."""

    model_config = {"populate_by_name": True}

    bucket_name: str = Field(serialization_alias="bucketName")
    object_key: str = Field(serialization_alias="objectKey")
    new_location: str = Field(serialization_alias="newLocation")
    target_bucket: str = Field(serialization_alias="targetBucket")

    def to_event(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)
