"""
Relocator: copy, verify, then delete the processed object.

Copy lands the object under ``<target_bucket>/<processed_prefix><key>``.
If the copy itself fails nothing has changed and the error propagates as is.
A failure while verifying or deleting leaves both objects in place and is
raised as PartialCompletion naming the phases that did complete.
"""

from __future__ import annotations

import asyncio

from sensorflow.core.config import PipelineConfig
from sensorflow.core.exceptions import PartialCompletion
from sensorflow.core.logging import get_logger
from sensorflow.core.protocols import IObjectStore
from sensorflow.models.events import ObjectRef, RelocationResult
from sensorflow.models.pipeline import StageStatus
from sensorflow.pipeline.executor import Stage, StageExecutor


class Relocator:
    """Moves objects into the processed area of the target bucket."""

    PHASES = ("copy", "wait_for_copy", "delete_source")

    def __init__(self, object_store: IObjectStore, config: PipelineConfig) -> None:
        self._store = object_store
        self._config = config
        self.logger = get_logger("steps.relocation")

    def destination_key(self, object_key: str) -> str:
        return f"{self._config.processed_prefix}{object_key}"

    async def relocate(self, ref: ObjectRef) -> RelocationResult:
        target_bucket = self._config.target_bucket
        new_location = self.destination_key(ref.object_key)
        log = self.logger.bind(source=str(ref), target_bucket=target_bucket, new_location=new_location)
        log.info("Moving object to new location")

        copy, wait, delete = self.PHASES
        phases = [
            Stage(copy, lambda _: asyncio.to_thread(
                self._store.copy, ref.bucket_name, ref.object_key, target_bucket, new_location)),
            Stage(wait, lambda _: asyncio.to_thread(
                self._store.wait_until_exists, target_bucket, new_location)),
            Stage(delete, lambda _: asyncio.to_thread(
                self._store.delete, ref.bucket_name, ref.object_key)),
        ]
        result = await StageExecutor("relocate").run(phases)

        if not result.succeeded:
            completed = [s.name for s in result.stages if s.status == StageStatus.SUCCEEDED]
            log.error("Failed to move object", failed_phase=result.failed_stage, phases_completed=completed)
            if not completed:
                result.unwrap()  # copy failed, nothing changed
            raise PartialCompletion(
                "relocate",
                phases_completed=completed,
                failed_phase=result.failed_stage,
                cause=result.error,
                details={
                    "source": ref.to_event(),
                    "destination": {"bucketName": target_bucket, "objectKey": new_location},
                },
            )

        return RelocationResult(
            bucket_name=ref.bucket_name,
            object_key=ref.object_key,
            new_location=new_location,
            target_bucket=target_bucket,
        )
