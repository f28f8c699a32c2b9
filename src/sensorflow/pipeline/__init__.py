"""Stage sequencing and the pipeline entry points."""

from __future__ import annotations

from sensorflow.pipeline.executor import Stage, StageExecutor

__all__ = ["Stage", "StageExecutor"]
