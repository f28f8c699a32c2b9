"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class PipelineConfig(BaseSettings):
    """Per-invocation pipeline parameters.

    The legacy variable names (``STEP_FUNCTION_NAME``, ``TARGET_BUCKET``,
    ``DEST_EMAIL``) are read when the prefixed ones are absent.
    """

    model_config = {"env_prefix": "SENSORFLOW_", "populate_by_name": True}

    workflow_name: str = Field(
        default="",
        validation_alias=AliasChoices("SENSORFLOW_WORKFLOW_NAME", "STEP_FUNCTION_NAME", "workflow_name"),
    )
    target_bucket: str = Field(
        default="",
        validation_alias=AliasChoices("SENSORFLOW_TARGET_BUCKET", "TARGET_BUCKET", "target_bucket"),
    )
    destination_email: str = Field(
        default="",
        validation_alias=AliasChoices("SENSORFLOW_DESTINATION_EMAIL", "DEST_EMAIL", "destination_email"),
    )
    source_email: str | None = None  # defaults to destination_email
    processed_prefix: str = "processed/"


class IngestConfig(BaseSettings):
    """CSV ingestion configuration."""

    model_config = {"env_prefix": "SENSORFLOW_INGEST_"}

    table_name: str = "sensor_data"
    max_in_flight: int = Field(default=16, ge=1)
    encoding: str = "utf-8"
    delimiter: str = ","


class S3Config(BaseSettings):
    """S3 object store configuration."""

    model_config = {"env_prefix": "SENSORFLOW_S3_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    waiter_delay: int = 5
    waiter_max_attempts: int = 20


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "SENSORFLOW_DYNAMO_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class StepFunctionsConfig(BaseSettings):
    """Step Functions configuration."""

    model_config = {"env_prefix": "SENSORFLOW_SFN_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class SESConfig(BaseSettings):
    """SES configuration."""

    model_config = {"env_prefix": "SENSORFLOW_SES_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "SENSORFLOW_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    s3: S3Config = Field(default_factory=S3Config)
    dynamodb: DynamoDBConfig = Field(default_factory=DynamoDBConfig)
    stepfunctions: StepFunctionsConfig = Field(default_factory=StepFunctionsConfig)
    ses: SESConfig = Field(default_factory=SESConfig)
