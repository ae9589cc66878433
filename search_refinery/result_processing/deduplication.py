"""Duplicate detection, grouping and merging for search results."""

from datetime import UTC, datetime
from typing import Any

from ..models.base import MatchReason
from ..models.config import DeduplicationOptions, MergeStrategy, merge_options
from ..models.results import (
    DeduplicationResult,
    DuplicateGroup,
    DuplicateLog,
    DuplicateMatch,
    SearchResult,
    SimilarityBreakdown,
)
from ..utils.logging import get_logger, log_deduplication
from .merge_strategies import MergeStrategyRegistry
from .similarity import SimilarityScorer
from .url_normalizer import UrlNormalizer, extract_hostname, hostnames_match

logger = get_logger(__name__)

# Record fields a merge strategy may decide
MERGEABLE_FIELDS = frozenset(
    name for name in SearchResult.model_fields if name != "metadata"
)


def _has_value(value: Any) -> bool:
    return value is not None and value != ""


def _merge_metadata(
    target: dict[str, Any], source: dict[str, Any]
) -> dict[str, Any]:
    """Return ``target`` extended with the keys only ``source`` carries."""
    merged = dict(target)
    for key, value in source.items():
        if key not in merged:
            merged[key] = value
    return merged


class DeduplicationEngine:
    """
    Single-pass duplicate detection over a batch of results.

    Records are processed in input order. A record is a duplicate of an
    already-kept record when their normalized URLs are equal, or when both
    live on the same site and their composite similarity is strictly above the
    threshold. The earliest kept record always acts as the original.

    The engine holds one active option set. Per-call overrides are passed to
    ``deduplicate`` by value and never change the stored options. Logs of the
    most recent run are kept for ``get_logs``; a single engine instance should
    not run ``deduplicate`` concurrently with itself.
    """

    def __init__(self, options: DeduplicationOptions | None = None):
        self._options = options or DeduplicationOptions()
        self._merge_strategies = MergeStrategyRegistry()
        self._last_logs: list[DuplicateLog] = []

    def get_options(self) -> DeduplicationOptions:
        """Get the active option set."""
        return self._options

    def update_options(self, options: dict[str, Any]) -> DeduplicationOptions:
        """Shallow-merge ``options`` over the active option set."""
        self._options = merge_options(self._options, options, component="deduplication")
        return self._options

    def resolve_options(
        self, overrides: DeduplicationOptions | dict[str, Any] | None = None
    ) -> DeduplicationOptions:
        """Compute effective options for one call without storing them."""
        if overrides is None:
            return self._options
        if isinstance(overrides, DeduplicationOptions):
            return overrides
        return merge_options(self._options, overrides, component="deduplication")

    def get_logs(self) -> list[DuplicateLog]:
        """Get a copy of the logs captured by the most recent run."""
        return list(self._last_logs)

    def register_merge_strategy(self, strategy: MergeStrategy) -> None:
        self._merge_strategies.register(strategy)

    def get_merge_strategy(self, name: str | None) -> MergeStrategy:
        return self._merge_strategies.get(name)

    def deduplicate(
        self,
        results: list[SearchResult],
        options: DeduplicationOptions | dict[str, Any] | None = None,
        *,
        should_merge: bool | None = None,
        merge_strategy: str | None = None,
    ) -> DeduplicationResult:
        """
        Remove duplicate results.

        Args:
            results: Results in provider order
            options: Effective options for this call, or a partial mapping
                merged over the active options
            should_merge: Overrides ``enable_merging`` for this call
            merge_strategy: Overrides ``merge_strategy`` for this call

        Returns:
            Kept results in input order with duplicate groups and, when
            ``log_duplicates`` is enabled, the audit logs
        """
        effective = self.resolve_options(options)
        if should_merge is None:
            should_merge = effective.enable_merging
        if merge_strategy is None:
            merge_strategy = effective.merge_strategy

        normalizer = UrlNormalizer(effective)
        scorer = SimilarityScorer(effective, normalizer)

        kept: list[SearchResult] = []
        kept_normalized: list[str] = []
        kept_hostnames: list[str | None] = []
        url_index: dict[str, int] = {}
        groups: dict[int, DuplicateGroup] = {}
        logs: list[DuplicateLog] = []

        for result in results:
            normalized_url = normalizer.normalize(result.url)
            hostname = extract_hostname(result.url)

            match_index = None
            reason = None
            similarity = 1.0
            breakdown: SimilarityBreakdown | None = None

            # 1. Exact normalized-URL match
            if effective.enable_url_normalization and normalized_url in url_index:
                match_index = url_index[normalized_url]
                reason = MatchReason.URL_MATCH

            # 2. First same-site record above the similarity threshold
            elif effective.enable_title_matching and result.title.strip() and hostname:
                for index, candidate in enumerate(kept):
                    if not hostnames_match(
                        hostname,
                        kept_hostnames[index],
                        effective.treat_subdomains_as_same,
                    ):
                        continue

                    candidate_breakdown = scorer.compare(
                        candidate, result, kept_normalized[index], normalized_url
                    )
                    if candidate_breakdown.score > effective.threshold:
                        match_index = index
                        reason = MatchReason.TITLE_SIMILARITY
                        similarity = candidate_breakdown.score
                        breakdown = candidate_breakdown
                        break

            # 3. New kept record
            if match_index is None:
                url_index.setdefault(normalized_url, len(kept))
                kept.append(result)
                kept_normalized.append(normalized_url)
                kept_hostnames.append(hostname)
                continue

            # 4. Fold into the matched group
            original = kept[match_index]
            group = groups.setdefault(match_index, DuplicateGroup(original=original))
            group.duplicates.append(
                DuplicateMatch(
                    result=result,
                    reason=reason,
                    similarity=similarity,
                    match_details=breakdown,
                )
            )

            if effective.log_duplicates:
                logs.append(
                    DuplicateLog(
                        original=original,
                        duplicate=result,
                        reason=reason,
                        similarity=similarity,
                        normalized_urls={
                            "original": kept_normalized[match_index],
                            "duplicate": normalized_url,
                        },
                        match_details=breakdown,
                    )
                )

            if should_merge:
                merged = self.merge_results(original, result, merge_strategy)
                kept[match_index] = merged
                group.original = merged
                merged_normalized = normalizer.normalize(merged.url)
                kept_normalized[match_index] = merged_normalized
                kept_hostnames[match_index] = extract_hostname(merged.url)
                url_index.setdefault(merged_normalized, match_index)

        self._last_logs = logs

        duplicates_removed = len(results) - len(kept)
        log_deduplication(logger, len(results), len(kept), len(groups))

        return DeduplicationResult(
            results=kept,
            duplicates_removed=duplicates_removed,
            duplicate_groups=[groups[index] for index in sorted(groups)],
            logs=logs if effective.log_duplicates else None,
        )

    def merge_results(
        self,
        original: SearchResult,
        duplicate: SearchResult,
        strategy_name: str | None = None,
    ) -> SearchResult:
        """
        Merge a duplicate into the original according to a named strategy.

        Combine fields present on both sides are concatenated with the
        strategy separator. Other fields come from the first side whose
        provider matches a preferred source and has a value, falling back to
        the original, then the duplicate.

        Args:
            original: The kept record
            duplicate: The record being folded into it
            strategy_name: Registered strategy name; unknown names fall back
                to the default strategy

        Returns:
            The merged record, stamped with merge provenance
        """
        strategy = self.get_merge_strategy(strategy_name)
        sides = [("original", original), ("duplicate", duplicate)]

        updates: dict[str, Any] = {}
        provenance: dict[str, str] = {}

        for field, sources in strategy.field_priorities.items():
            if field not in MERGEABLE_FIELDS:
                continue

            original_value = getattr(original, field, None)
            duplicate_value = getattr(duplicate, field, None)

            if (
                field in strategy.combine_fields
                and isinstance(original_value, str)
                and isinstance(duplicate_value, str)
                and original_value
                and duplicate_value
            ):
                if original_value != duplicate_value:
                    updates[field] = (
                        f"{original_value}{strategy.separator}{duplicate_value}"
                    )
                    provenance[field] = "combined"
                else:
                    provenance[field] = original.provider or "original"
                continue

            chosen = None
            for source in sources:
                for label, side in sides:
                    if (
                        side.provider
                        and side.provider.lower() == source.lower()
                        and _has_value(getattr(side, field, None))
                    ):
                        chosen = (label, side)
                        break
                if chosen:
                    break

            if chosen is None:
                chosen = (
                    sides[0] if _has_value(original_value) or not _has_value(duplicate_value)
                    else sides[1]
                )

            label, side = chosen
            updates[field] = getattr(side, field, None)
            provenance[field] = side.provider or label

        metadata = _merge_metadata(original.metadata, duplicate.metadata)
        metadata["merge_provenance"] = provenance
        metadata["merge_strategy"] = strategy.name
        metadata["merged_at"] = datetime.now(UTC).isoformat()
        updates["metadata"] = metadata

        return original.model_copy(update=updates)
