"""Post-fetch processing: cache lookup, deduplication, storage and caching."""

from typing import Any

from .models.config import DeduplicationOptions
from .models.interfaces import ResultCache, ResultStorage
from .models.query import SearchRequest
from .models.results import DuplicateLog, ProcessingResult, SearchResult
from .result_processing.deduplication import DeduplicationEngine
from .utils.errors import ConfigurationError
from .utils.logging import get_logger

logger = get_logger(__name__)


class ResultsProcessor:
    """
    Processes the results fetched for a search request.

    Per-request deduplication overrides are merged with the engine's options
    into an effective option set passed to the engine by value, so concurrent
    requests never see each other's overrides.
    """

    def __init__(
        self,
        options: DeduplicationOptions | dict[str, Any] | None = None,
        cache: ResultCache | None = None,
        storage: ResultStorage | None = None,
        engine: DeduplicationEngine | None = None,
    ):
        if isinstance(options, dict):
            options = DeduplicationOptions.model_validate(options)
        if engine is None:
            engine = DeduplicationEngine(options)
        elif options is not None:
            engine.update_options(options.model_dump())
        self.engine = engine
        self.cache = cache
        self.storage = storage

    @property
    def default_options(self) -> DeduplicationOptions:
        """The engine's stored options, used as the base for every request."""
        return self.engine.get_options()

    def effective_options(self, request: SearchRequest) -> DeduplicationOptions:
        """Merge a request's deduplication overrides over the defaults."""
        overrides = (
            dict(request.deduplication) if isinstance(request.deduplication, dict) else {}
        )
        # Per-call merge flag
        if "should_merge" in overrides:
            overrides["enable_merging"] = overrides.pop("should_merge")
        return self.engine.resolve_options(overrides)

    async def process(
        self,
        results: list[SearchResult],
        request: SearchRequest,
        search_request_id: str | None = None,
    ) -> ProcessingResult:
        """
        Process results for a request.

        Args:
            results: Canonical results from the provider collaborators
            request: The originating request
            search_request_id: Identifier linking stored results to the request

        Returns:
            Unique results with deduplication statistics
        """
        use_cache = self.cache is not None and request.use_cache

        # 1. Cache lookup
        if use_cache:
            try:
                cached = await self.cache.get(request)
            except Exception as e:
                logger.error(f"Error reading cached results: {e}")
                cached = None
            if cached is not None:
                logger.info(f"Cache hit for query '{request.query}'")
                return ProcessingResult(unique_results=cached, cache_hit=True)
            logger.debug(f"Cache miss for query '{request.query}'")

        # 2. Deduplication
        unique_results = list(results)
        duplicates_removed = 0
        duplicate_logs: list[DuplicateLog] | None = None

        if request.deduplication is not False:
            try:
                options = self.effective_options(request)
            except ConfigurationError as e:
                logger.warning(f"Ignoring invalid deduplication overrides: {e}")
                options = self.default_options
            outcome = self.engine.deduplicate(results, options)
            unique_results = outcome.results
            duplicates_removed = outcome.duplicates_removed
            duplicate_logs = outcome.logs
        else:
            logger.debug("Deduplication skipped for this request")

        # 3. Link results back to the request
        if search_request_id:
            unique_results = [
                result.with_metadata("search_request_id", search_request_id)
                for result in unique_results
            ]

        # 4. Storage
        await self._store(search_request_id, unique_results, duplicate_logs)

        # 5. Cache update
        if use_cache:
            try:
                await self.cache.set(request, unique_results)
            except Exception as e:
                logger.error(f"Error storing processed results in cache: {e}")

        return ProcessingResult(
            unique_results=unique_results,
            duplicates_removed=duplicates_removed,
            duplicate_logs=duplicate_logs,
        )

    async def _store(
        self,
        search_request_id: str | None,
        results: list[SearchResult],
        duplicate_logs: list[DuplicateLog] | None,
    ) -> None:
        if self.storage is None:
            return
        if not search_request_id:
            logger.warning("Skipping result storage: missing search request id")
            return

        try:
            await self.storage.save_results(search_request_id, results)
            if duplicate_logs:
                await self.storage.save_duplicates(search_request_id, duplicate_logs)
            logger.info(f"Stored {len(results)} unique results for {search_request_id}")
        except Exception as e:
            logger.error(f"Error storing search results: {e}")
