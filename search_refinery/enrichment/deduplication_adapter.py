"""Deduplication engine exposed as an enrichment module."""

from datetime import UTC, datetime
from typing import Any

from ..models.component import EnrichmentModule
from ..models.config import DeduplicationOptions
from ..models.results import (
    DeduplicationInfo,
    DuplicateGroupSummary,
    SearchResult,
)
from ..result_processing.deduplication import DeduplicationEngine


class DeduplicationAdapter(EnrichmentModule[DeduplicationOptions]):
    """
    Runs the deduplication engine as a pipeline stage.

    Unlike the other modules this one changes the batch size: only kept
    results are returned, each stamped with run statistics under
    ``metadata["deduplication"]``.
    """

    batch_processing = True

    def __init__(
        self,
        engine: DeduplicationEngine | None = None,
        preserve_metadata: bool = True,
    ):
        self.engine = engine or DeduplicationEngine()
        super().__init__(
            module_id="deduplication",
            name="Deduplication",
            config=self.engine.get_options(),
            description=(
                "Removes duplicate search results based on URL and title similarity"
            ),
        )
        self.preserve_metadata = preserve_metadata

    def get_config(self) -> dict[str, Any]:
        return {
            **self.engine.get_options().model_dump(),
            "preserve_metadata": self.preserve_metadata,
        }

    def configure(self, config: DeduplicationOptions) -> None:
        self.engine.update_options(config.model_dump())
        self.config = self.engine.get_options()

    def update_config(self, config: dict[str, Any]) -> None:
        """Apply ``preserve_metadata`` and forward engine options."""
        if "preserve_metadata" in config:
            self.preserve_metadata = bool(config["preserve_metadata"])

        options = {
            key: value
            for key, value in config.items()
            if key in DeduplicationOptions.model_fields
        }
        if options:
            self.config = self.engine.update_options(options)

    def _stamp(
        self, result: SearchResult, info: DeduplicationInfo
    ) -> SearchResult:
        return result.with_metadata("deduplication", info.model_dump(mode="json"))

    async def process(self, result: SearchResult) -> SearchResult:
        # A single record cannot have duplicates
        info = DeduplicationInfo(
            timestamp=datetime.now(UTC),
            original_count=1,
            unique_count=1,
            duplicates_removed=0,
        )
        return self._stamp(result, info)

    async def process_batch(self, results: list[SearchResult]) -> list[SearchResult]:
        if len(results) <= 1:
            info = DeduplicationInfo(
                timestamp=datetime.now(UTC),
                original_count=len(results),
                unique_count=len(results),
                duplicates_removed=0,
            )
            return [self._stamp(result, info) for result in results]

        outcome = self.engine.deduplicate(results)

        groups = None
        if self.preserve_metadata:
            groups = [
                DuplicateGroupSummary(
                    original=group.original.url,
                    duplicates=[match.result.url for match in group.duplicates],
                )
                for group in outcome.duplicate_groups
            ]

        info = DeduplicationInfo(
            timestamp=datetime.now(UTC),
            original_count=len(results),
            unique_count=len(outcome.results),
            duplicates_removed=outcome.duplicates_removed,
            duplicate_groups=groups,
        )
        return [self._stamp(result, info) for result in outcome.results]
