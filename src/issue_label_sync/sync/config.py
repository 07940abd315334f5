"""Configuration for the label reconciliation run.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The tracker credential uses the dedicated `LINEAR_API_KEY` variable. A run
without it must not start, so validation fails loudly instead of defaulting.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from issue_label_sync.sync.logging import resolve_level

LabelMode = Literal["static", "mapping"]


class SyncSettings(BaseSettings):
    """Settings for a reconciliation run.

    Environment variables:
    - LINEAR_API_KEY           (required)
    - LINEAR_API_URL           (optional)
    - LOG_LEVEL                (optional)
    - LABEL_MODE               (optional, "static" or "mapping")
    - LABEL_MAPPING_PATH       (optional, used in "mapping" mode)
    - RETRY_ATTEMPTS           (optional)
    - RETRY_DELAY_SECONDS      (optional)
    - ISSUE_PAGE_SIZE          (optional)
    - LABEL_PAGE_SIZE          (optional)
    - REQUEST_TIMEOUT_SECONDS  (optional)

    Notes:
        Tests can point at a different env file via
        `SyncSettings(_env_file=path_to_env)`.
    """

    api_key: str = Field(
        default="",
        validation_alias="LINEAR_API_KEY",
        description="API key sent with every tracker request",
    )
    api_url: str = Field(
        default="https://api.linear.app/graphql",
        validation_alias="LINEAR_API_URL",
        description="GraphQL endpoint of the issue tracker",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    label_mode: LabelMode = Field(
        default="static",
        validation_alias="LABEL_MODE",
        description="How canonical labels are inferred: numeric ranges or a mapping document",
    )
    label_mapping_path: Path = Field(
        default=Path("label_mapping.json"),
        validation_alias="LABEL_MAPPING_PATH",
        description="JSON document mapping project names to canonical label names",
    )

    retry_attempts: int = Field(
        default=3,
        ge=1,
        validation_alias="RETRY_ATTEMPTS",
        description="Total attempts per tracker call (including the first)",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        validation_alias="RETRY_DELAY_SECONDS",
        description="Fixed delay between attempts",
    )

    issue_page_size: int = Field(
        default=50,
        gt=0,
        le=250,
        validation_alias="ISSUE_PAGE_SIZE",
    )
    label_page_size: int = Field(
        default=100,
        gt=0,
        le=250,
        validation_alias="LABEL_PAGE_SIZE",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        validation_alias="REQUEST_TIMEOUT_SECONDS",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_api_key(self) -> SyncSettings:
        if not self.api_key.strip():
            raise ValueError("LINEAR_API_KEY is required")
        return self

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        return logging.getLevelName(resolve_level(value))
