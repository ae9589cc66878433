"""Result pipeline: filtering, enrichment and sorting in one call."""

import re
import time
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

import dateparser

from .config.settings import AppSettings, get_settings
from .enrichment.content_type import ContentTypeModule
from .enrichment.deduplication_adapter import DeduplicationAdapter
from .enrichment.pipeline import EnrichmentPipeline
from .enrichment.readability import ReadabilityModule
from .enrichment.relevance import RelevanceModule
from .filtering.filter_service import FilterService
from .filtering.rules import FilterSet
from .models.base import FieldType, SortDirection
from .models.component import EnrichmentModule
from .models.config import PipelineOptions, SortOptions
from .models.results import FilterResult, PipelineResult, SearchResult
from .result_processing.deduplication import DeduplicationEngine
from .utils.logging import get_logger, log_pipeline_result

logger = get_logger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def get_field_value(result: SearchResult, path: str) -> Any:
    """Resolve a dotted path through attributes and mapping keys."""
    value: Any = result
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _parse_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            parsed = dateparser.parse(value)
        if parsed is None:
            return None
    else:
        return None

    # Naive values are compared as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def detect_field_type(value: Any) -> FieldType:
    """Infer the sort type of a value."""
    if isinstance(value, bool):
        return FieldType.STRING
    if isinstance(value, int | float):
        return FieldType.NUMBER
    if isinstance(value, date):
        return FieldType.DATE
    if isinstance(value, str) and value.strip():
        if ISO_DATE_RE.match(value) and _parse_date(value) is not None:
            return FieldType.DATE
        if _parse_number(value) is not None:
            return FieldType.NUMBER
    return FieldType.STRING


def _sort_key(value: Any, field_type: FieldType) -> Any:
    """Comparable key for ``value``, or None when it cannot be converted."""
    if value is None:
        return None
    if field_type == FieldType.NUMBER:
        return _parse_number(value)
    if field_type == FieldType.DATE:
        parsed = _parse_date(value)
        return parsed.timestamp() if parsed else None
    return str(value).casefold()


def sort_results(
    results: list[SearchResult], options: SortOptions
) -> list[SearchResult]:
    """
    Sort results by a dotted-path field.

    The type comes from ``options.type`` or is detected from the first
    non-null value. Null and unconvertible values sort last ascending and
    first descending; the sort is stable.
    """
    values = [get_field_value(result, options.field) for result in results]

    field_type = options.type
    if field_type is None:
        first = next((value for value in values if value is not None), None)
        field_type = detect_field_type(first) if first is not None else FieldType.STRING

    keyed = [(_sort_key(value, field_type), result) for value, result in zip(values, results)]
    present = [item for item in keyed if item[0] is not None]
    missing = [result for key, result in keyed if key is None]

    descending = options.direction == SortDirection.DESC
    present.sort(key=lambda item: item[0], reverse=descending)
    ordered = [result for _, result in present]

    return missing + ordered if descending else ordered + missing


class ResultPipeline:
    """
    Filters, enriches and sorts a batch of results.

    Filtering runs only when a filter set id is given, sorting only when
    sort options are given. Each stage can also be switched off.
    """

    def __init__(
        self,
        options: PipelineOptions | dict[str, Any] | None = None,
        filter_service: FilterService | None = None,
    ):
        self.filter_service = filter_service or FilterService()
        self.enrichment_pipeline = EnrichmentPipeline(options)
        self.filtering_enabled = True
        self.enrichment_enabled = True
        self.sorting_enabled = True

    async def process(
        self,
        results: list[SearchResult],
        filter_set_id: str | None = None,
        sort_options: SortOptions | dict[str, Any] | None = None,
    ) -> PipelineResult:
        """
        Run the pipeline.

        Args:
            results: Results to process
            filter_set_id: Filter set to apply before enrichment
            sort_options: Final ordering of the results

        Returns:
            Final results with aggregate counts and timing
        """
        start_time = time.time()
        original_count = len(results)

        filter_result: FilterResult | None = None
        filtered = list(results)
        if self.filtering_enabled and filter_set_id:
            filter_result = self.filter_service.apply_filter_set(filter_set_id, results)
            filtered = filter_result.filtered

        enriched = filtered
        enriched_count = 0
        module_metrics = {}
        if self.enrichment_enabled:
            enrichment = await self.enrichment_pipeline.process(filtered)
            enriched = enrichment.results
            enriched_count = enrichment.total_enriched
            module_metrics = enrichment.module_metrics

        if self.sorting_enabled and sort_options:
            if isinstance(sort_options, dict):
                sort_options = SortOptions.model_validate(sort_options)
            enriched = sort_results(enriched, sort_options)

        pipeline_result = PipelineResult(
            results=enriched,
            original_count=original_count,
            filtered_count=(
                filter_result.stats.total_included if filter_result else original_count
            ),
            enriched_count=enriched_count,
            duplicates_removed=max(0, len(filtered) - len(enriched)),
            filter_stats=filter_result.stats if filter_result else None,
            module_metrics=module_metrics,
            processing_time_ms=(time.time() - start_time) * 1000,
        )
        log_pipeline_result(logger, pipeline_result)
        return pipeline_result

    # Filter sets

    def add_filter_set(self, filter_set: FilterSet) -> None:
        self.filter_service.add_filter_set(filter_set)

    def get_filter_set(self, filter_set_id: str) -> FilterSet | None:
        return self.filter_service.get_filter_set(filter_set_id)

    # Enrichment modules

    def register_enrichment_module(
        self, module: EnrichmentModule, position: int | None = None
    ) -> None:
        self.enrichment_pipeline.register_module(module, position)

    def remove_enrichment_module(self, module_id: str) -> bool:
        return self.enrichment_pipeline.remove_module(module_id)

    def get_enrichment_module(self, module_id: str) -> EnrichmentModule | None:
        return self.enrichment_pipeline.get_module(module_id)

    def get_all_enrichment_modules(self) -> list[EnrichmentModule]:
        return self.enrichment_pipeline.get_all_modules()

    def get_module_order(self) -> list[str]:
        return self.enrichment_pipeline.get_module_order()

    def reorder_enrichment_modules(self, module_ids: list[str]) -> bool:
        return self.enrichment_pipeline.reorder_modules(module_ids)

    # Stage toggles

    def set_filtering_enabled(self, enabled: bool) -> None:
        self.filtering_enabled = enabled

    def set_enrichment_enabled(self, enabled: bool) -> None:
        self.enrichment_enabled = enabled

    def set_sorting_enabled(self, enabled: bool) -> None:
        self.sorting_enabled = enabled


def create_result_pipeline(
    settings: AppSettings | None = None, query: str | None = None
) -> ResultPipeline:
    """
    Build a result pipeline with the standard enrichment modules.

    Args:
        settings: Application settings (defaults to ``get_settings()``)
        query: Query the relevance module scores against

    Returns:
        Pipeline with modules registered in ``settings.enrichment_modules`` order
    """
    settings = settings or get_settings()

    factories: dict[str, Callable[[], EnrichmentModule]] = {
        "deduplication": lambda: DeduplicationAdapter(
            DeduplicationEngine(settings.deduplication),
            preserve_metadata=settings.preserve_duplicate_groups,
        ),
        "content-type": lambda: ContentTypeModule(settings.content_type),
        "readability": lambda: ReadabilityModule(settings.readability),
        "relevance": lambda: RelevanceModule(settings.relevance, query=query),
    }

    pipeline = ResultPipeline(settings.pipeline)
    for module_id in settings.enrichment_modules:
        pipeline.register_enrichment_module(factories[module_id]())

    return pipeline
