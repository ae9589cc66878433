"""Configuration models.

This module defines the option bags consumed by the processing core. They are
built with Pydantic to provide validation, serialization, and documentation.
Option snapshots are frozen: updates go through ``merge_options`` which
shallow-merges a partial mapping and re-validates, returning a new snapshot.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..utils.errors import ConfigurationError
from .base import FieldType, SortDirection

ModelT = TypeVar("ModelT", bound=BaseModel)


class OptionsModel(BaseModel):
    """Base class for immutable option snapshots."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def merge_options(
    options: ModelT, partial: dict[str, Any] | None, component: str | None = None
) -> ModelT:
    """Shallow-merge ``partial`` over ``options`` and validate the result."""
    if not partial:
        return options
    try:
        return type(options).model_validate({**options.model_dump(), **partial})
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid options for {component or type(options).__name__}: {e}",
            component=component,
            original_error=e,
        ) from e


class DeduplicationOptions(OptionsModel):
    """Configuration snapshot for a deduplication run."""

    threshold: float = Field(
        0.8, ge=0, le=1, description="Composite similarity threshold (strict >)"
    )
    enable_url_normalization: bool = Field(
        True, description="Treat normalized-equal URLs as duplicates"
    )
    enable_title_matching: bool = Field(
        True, description="Match same-domain records by composite similarity"
    )
    log_duplicates: bool = Field(True, description="Capture duplicate audit logs")
    treat_subdomains_as_same: bool = Field(
        False, description="Collapse hostnames to their last two labels"
    )
    ignore_protocol: bool = Field(True, description="Drop the scheme")
    ignore_www: bool = Field(True, description="Strip a leading www.")
    ignore_trailing_slash: bool = Field(True, description="Strip trailing slashes")
    ignore_query_params: bool = Field(True, description="Drop the query string")
    ignore_case_in_path: bool = Field(True, description="Lower-case the path")
    strip_tracking_params: bool = Field(
        True, description="Remove tracking parameters when the query is kept"
    )
    enable_merging: bool = Field(
        False, description="Merge duplicates into the kept record"
    )
    merge_strategy: str = Field("conservative", description="Merge strategy name")
    title_weight: float = Field(0.3, ge=0, description="Composite title weight")
    url_weight: float = Field(0.7, ge=0, description="Composite URL weight")


class MergeStrategy(OptionsModel):
    """Declarative rule set for combining two duplicate records."""

    name: str = Field(..., description="Registry name of the strategy")
    field_priorities: dict[str, list[str]] = Field(
        ..., description="Per-field ordered list of preferred provider identifiers"
    )
    combine_fields: list[str] = Field(
        default_factory=list, description="Fields concatenated instead of replaced"
    )
    separator: str = Field(" | ", description="Separator for combined fields")

    @model_validator(mode="after")
    def check_combine_fields(self) -> "MergeStrategy":
        unknown = [f for f in self.combine_fields if f not in self.field_priorities]
        if unknown:
            raise ValueError(f"combine_fields not in field_priorities: {unknown}")
        return self


class PipelineOptions(OptionsModel):
    """Enrichment pipeline execution options."""

    parallel_processing: bool = Field(
        True, description="Fan out per-item processing in bounded chunks"
    )
    max_concurrent: int = Field(5, gt=0, description="Chunk size for fan-out")
    timeout_ms: int = Field(
        30000, gt=0, description="Timeout per module invocation in milliseconds"
    )
    measure_performance: bool = Field(True, description="Record per-module metrics")


class ReadabilityThresholds(OptionsModel):
    easy: float = 80
    moderate: float = 50
    difficult: float = 30


class ReadabilityConfig(OptionsModel):
    """Readability module configuration."""

    min_characters_for_analysis: int = Field(
        50, ge=0, description="Shorter texts are not analyzed"
    )
    apply_to_snippets_only: bool = Field(
        True, description="Analyze the snippet only, or title and snippet"
    )
    score_thresholds: ReadabilityThresholds = Field(
        default_factory=ReadabilityThresholds
    )


class ContentTypeConfig(OptionsModel):
    """Content type module configuration."""

    detect_from_url: bool = True
    detect_from_snippet: bool = True
    extract_dates: bool = True
    identify_academic: bool = True
    detect_language: bool = True
    identify_organization_type: bool = True


class RelevanceConfig(OptionsModel):
    """Relevance module configuration."""

    weight_keyword_match: float = Field(0.4, ge=0)
    weight_title_match: float = Field(0.3, ge=0)
    weight_url_match: float = Field(0.1, ge=0)
    weight_recency: float = Field(0.1, ge=0)
    weight_rank: float = Field(0.1, ge=0)
    normalize_scores: bool = Field(
        True, description="Scale batch scores so the top score is 1"
    )
    extract_keywords: bool = True
    max_age_days: float = Field(365, gt=0)
    minimum_relevance_threshold: float = Field(0.01, ge=0, le=1)


class SortOptions(OptionsModel):
    """Sorting options for pipeline results."""

    field: str = Field(..., description="Dotted path of the value to sort by")
    direction: SortDirection = SortDirection.ASC
    type: FieldType | None = Field(
        None, description="Value type; detected from the data when omitted"
    )
