"""Shared test doubles — re-export memory backends."""

from __future__ import annotations

from sensorflow.persistence.memory_backend import (
    MemoryNotificationService,
    MemoryObjectStore,
    MemoryTableStore,
    MemoryWorkflowEngine,
)

__all__ = [
    "MemoryNotificationService",
    "MemoryObjectStore",
    "MemoryTableStore",
    "MemoryWorkflowEngine",
]
