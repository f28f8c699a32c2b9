"""Type aliases used across sensorflow."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
AttributeMap = dict[str, dict[str, str]]  # DynamoDB low-level item, e.g. {"sensor_id": {"S": "s1"}}
