"""Notifier: one email telling the recipient a file was processed."""

from __future__ import annotations

import asyncio

from sensorflow.core.config import PipelineConfig
from sensorflow.core.logging import get_logger
from sensorflow.core.protocols import INotificationService

SUBJECT = "File processed"


class Notifier:
    def __init__(self, service: INotificationService, config: PipelineConfig) -> None:
        self._service = service
        self._config = config
        self.logger = get_logger("steps.notification")

    async def notify(self, object_key: str) -> str:
        """Send one message about ``object_key``; return the provider message id."""
        to_address = self._config.destination_email
        from_address = self._config.source_email or to_address
        self.logger.info("Sending an email", object_key=object_key, to=to_address)
        return await asyncio.to_thread(
            self._service.send, to_address, from_address, SUBJECT, f"Processed file {object_key}"
        )
