"""Application settings with Pydantic v2 patterns."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.config import (
    ContentTypeConfig,
    DeduplicationOptions,
    PipelineOptions,
    ReadabilityConfig,
    RelevanceConfig,
)

DEFAULT_MODULE_ORDER = ["deduplication", "content-type", "readability", "relevance"]


class AppSettings(BaseSettings):
    """Settings for building result pipelines.

    Nested option bags can be set from the environment with ``__`` as the
    delimiter, e.g. ``DEDUPLICATION__THRESHOLD=0.7`` or
    ``PIPELINE__MAX_CONCURRENT=10``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
        validate_default=True,
    )

    log_level: str = Field(default="INFO", description="Logging level")

    deduplication: DeduplicationOptions = Field(
        default_factory=DeduplicationOptions,
        description="Default deduplication options",
    )
    preserve_duplicate_groups: bool = Field(
        default=True,
        description="Include duplicate groups in deduplication metadata",
    )
    pipeline: PipelineOptions = Field(
        default_factory=PipelineOptions, description="Enrichment pipeline options"
    )
    readability: ReadabilityConfig = Field(default_factory=ReadabilityConfig)
    content_type: ContentTypeConfig = Field(default_factory=ContentTypeConfig)
    relevance: RelevanceConfig = Field(default_factory=RelevanceConfig)

    enrichment_modules: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MODULE_ORDER),
        description="Enrichment module ids in execution order",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("enrichment_modules")
    @classmethod
    def validate_enrichment_modules(cls, v: list[str]) -> list[str]:
        unknown = [module_id for module_id in v if module_id not in DEFAULT_MODULE_ORDER]
        if unknown:
            raise ValueError(
                f"Unknown enrichment modules: {unknown}. "
                f"Must be among {DEFAULT_MODULE_ORDER}"
            )
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate enrichment modules: {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
