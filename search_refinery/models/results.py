"""Result models."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .base import MatchReason, OrganizationType, ReadabilityLevel


class SearchResult(BaseModel):
    """A single search result.

    Results are immutable value objects: every stage produces a new instance
    with ``model_copy`` and writes metadata through ``with_metadata`` so keys
    written by earlier stages are preserved.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Result title")
    url: str = Field(..., description="Result URL")
    snippet: str = Field("", description="Result snippet or summary")
    provider: str | None = Field(
        None,
        validation_alias=AliasChoices("provider", "searchEngine", "search_engine", "source"),
        description="Search engine or provider the result came from",
    )
    rank: int | None = Field(
        None,
        validation_alias=AliasChoices("rank", "position"),
        description="Position of the result in its provider's ordering",
    )
    timestamp: datetime | None = Field(None, description="When the result was produced")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Namespaced enrichment metadata"
    )

    def with_metadata(self, key: str, value: Any) -> "SearchResult":
        """Return a copy with ``key`` merged into the metadata map."""
        return self.model_copy(update={"metadata": {**self.metadata, key: value}})


# Deduplication models


class SimilarityBreakdown(BaseModel):
    """Per-field scores behind a composite similarity judgement."""

    score: float = Field(..., description="Weighted composite score (0-1)")
    title_score: float | None = Field(
        None, description="Jaccard title score, absent when a title is missing"
    )
    url_score: float = Field(..., description="URL score (1.0 for normalized-equal)")
    weights: dict[str, float] = Field(
        default_factory=dict, description="Weights actually applied per component"
    )


class DuplicateMatch(BaseModel):
    """A record folded into a duplicate group."""

    result: SearchResult
    reason: MatchReason
    similarity: float
    match_details: SimilarityBreakdown | None = None


class DuplicateGroup(BaseModel):
    """One kept record plus the records judged to be the same entity."""

    original: SearchResult
    duplicates: list[DuplicateMatch] = Field(default_factory=list)


class DuplicateLog(BaseModel):
    """Audit record for a single duplicate decision."""

    original: SearchResult
    duplicate: SearchResult
    reason: MatchReason
    similarity: float | None = None
    normalized_urls: dict[str, str] | None = None
    match_details: SimilarityBreakdown | None = None


class DeduplicationResult(BaseModel):
    """Output of a deduplication run."""

    results: list[SearchResult] = Field(..., description="Kept results in input order")
    duplicates_removed: int = Field(0, description="Number of records folded away")
    duplicate_groups: list[DuplicateGroup] = Field(default_factory=list)
    logs: list[DuplicateLog] | None = Field(
        None, description="Duplicate audit logs when logging is enabled"
    )


# Enrichment namespaces


class ReadabilityInfo(BaseModel):
    """Metadata written under ``metadata["readability"]``."""

    score: float | None = None
    level: ReadabilityLevel = ReadabilityLevel.UNKNOWN
    analyzed: bool = False
    reason: str | None = None
    text_length: int | None = None
    sentence_count: int | None = None
    word_count: int | None = None


class ContentTypeInfo(BaseModel):
    """Metadata written under ``metadata["content_type"]``."""

    calculated_at: datetime
    file_type: str | None = None
    content_type: str | None = None
    is_academic: bool | None = None
    publication_date: datetime | None = None
    publication_year: int | None = None
    language: str | None = None
    organization_type: OrganizationType | None = None
    confidence: dict[str, float] = Field(default_factory=dict)


class RelevanceComponents(BaseModel):
    keyword_match_score: float | None = None
    title_match_score: float | None = None
    url_match_score: float | None = None
    recency_score: float | None = None
    rank_score: float | None = None


class RelevanceInfo(BaseModel):
    """Metadata written under ``metadata["relevance"]``."""

    calculated_at: datetime
    query: str = ""
    relevance_score: float = 0.0
    components: RelevanceComponents = Field(default_factory=RelevanceComponents)
    keywords: list[str] | None = None


class DuplicateGroupSummary(BaseModel):
    original: str
    duplicates: list[str]


class DeduplicationInfo(BaseModel):
    """Metadata written under ``metadata["deduplication"]``."""

    timestamp: datetime
    original_count: int
    unique_count: int
    duplicates_removed: int
    duplicate_groups: list[DuplicateGroupSummary] | None = None


# Pipeline models


class ModuleMetrics(BaseModel):
    """Timing and throughput for one enrichment module in one run."""

    module_id: str
    module_name: str
    processing_time_ms: float = 0.0
    items_processed: int = 0


class EnrichmentResult(BaseModel):
    """Output of the enrichment pipeline."""

    results: list[SearchResult]
    total_processed: int = 0
    total_enriched: int = 0
    module_metrics: dict[str, ModuleMetrics] = Field(default_factory=dict)


class RuleStats(BaseModel):
    rule_id: str
    rule_name: str
    matches: int = 0


class FilterStats(BaseModel):
    total_processed: int = 0
    total_included: int = 0
    total_excluded: int = 0
    rule_stats: dict[str, RuleStats] = Field(default_factory=dict)


class FilterResult(BaseModel):
    """Output of the filter service."""

    filtered: list[SearchResult]
    excluded: list[SearchResult] = Field(default_factory=list)
    stats: FilterStats = Field(default_factory=FilterStats)


class PipelineResult(BaseModel):
    """Complete result pipeline output."""

    results: list[SearchResult]
    original_count: int
    filtered_count: int
    enriched_count: int = 0
    duplicates_removed: int = 0
    filter_stats: FilterStats | None = None
    module_metrics: dict[str, ModuleMetrics] = Field(default_factory=dict)
    processing_time_ms: float = 0.0


class ProcessingResult(BaseModel):
    """Output of the results processor."""

    unique_results: list[SearchResult]
    duplicates_removed: int = 0
    duplicate_logs: list[DuplicateLog] | None = None
    cache_hit: bool = False
