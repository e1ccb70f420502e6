# src/registry_reports/config/settings.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Registry Reports Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the registry reports service. Only
    adapters, dependencies and bootstrap code read it; the domain receives
    plain values (timezone name, vocabularies) through constructors.

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown env.
    - Explicit field declarations with constrained ranges.
    - Environment enumeration for behavior toggles (includes TEST).
    - Singleton accessor `get_settings()` with LRU cache.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for the registry reports service."""

    # ---------------------------
    # Core environment & service
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )
    service_name: str = Field(
        default="registry-reports",
        description="Service name reported in logs and OpenAPI.",
        validation_alias="SERVICE_NAME",
    )
    service_version: str | None = Field(
        default=None,
        description="Service version string (falls back to the package version).",
        validation_alias="SERVICE_VERSION",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level.",
        validation_alias="LOG_LEVEL",
    )
    docs_url: str | None = Field(
        default="/docs",
        description="Swagger UI path (None disables).",
        validation_alias="DOCS_URL",
    )
    openapi_url: str | None = Field(
        default="/openapi.json",
        description="OpenAPI schema path (None disables).",
        validation_alias="OPENAPI_URL",
    )

    # Raw env for CORS; the parsed list is computed in a model validator.
    cors_allow_origins_raw: str | None = Field(
        default=None,
        description="Raw env for allowed CORS origins (comma-separated).",
        validation_alias="ALLOWED_ORIGINS",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=list,
        description=(
            "Allowed CORS origins. Derived from ALLOWED_ORIGINS. "
            "'*' is allowed only in development/test."
        ),
    )

    # ---------------------------
    # Reporting
    # ---------------------------
    report_timezone: str = Field(
        default="Asia/Manila",
        description="IANA timezone used for every period computation.",
        validation_alias="REPORT_TIMEZONE",
    )
    vocabulary_path: str | None = Field(
        default=None,
        description="Optional path to a vocabulary JSON document (defaults to the packaged one).",
        validation_alias="VOCABULARY_PATH",
    )
    facts_seed_path: str | None = Field(
        default=None,
        description="Optional JSON file of facts loaded into the in-memory store at startup.",
        validation_alias="FACTS_SEED_PATH",
    )
    report_default_page_size: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Default page size for paginated period listings.",
        validation_alias="REPORT_DEFAULT_PAGE_SIZE",
    )
    report_max_facts: int = Field(
        default=100_000,
        ge=1,
        le=5_000_000,
        description="Maximum number of facts accepted in one aggregate request.",
        validation_alias="REPORT_MAX_FACTS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @field_validator("report_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        """Reject timezone names unknown to the IANA database."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @model_validator(mode="after")
    def _compute_cors(self) -> Settings:
        """Compute the CORS origin list.

        Raises:
            ValueError: If '*' is configured outside development/test.
        """
        raw = (self.cors_allow_origins_raw or "").strip()
        entries = [e.strip() for e in raw.split(",") if e.strip()] if raw else []
        if any(e == "*" for e in entries) and self.environment not in (
            Environment.DEVELOPMENT,
            Environment.TEST,
        ):
            raise ValueError("'*' CORS origin is only allowed in development/test environments.")
        self.cors_allow_origins = entries
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
        logger.info(
            "Settings initialized",
            extra={
                "extra": {
                    "environment": settings.environment.value,
                    "report_timezone": settings.report_timezone,
                    "vocabulary_path_set": bool(settings.vocabulary_path),
                    "facts_seed_path_set": bool(settings.facts_seed_path),
                    "cors_count": len(settings.cors_allow_origins),
                    "report_default_page_size": settings.report_default_page_size,
                    "report_max_facts": settings.report_max_facts,
                }
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid application configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
