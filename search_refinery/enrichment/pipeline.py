"""Ordered execution of enrichment modules over a batch of results."""

import asyncio
import time
from typing import Any

from ..models.component import EnrichmentModule
from ..models.config import PipelineOptions, merge_options
from ..models.results import EnrichmentResult, ModuleMetrics, SearchResult
from ..utils.errors import EnrichmentError, ModuleProcessingError, ModuleTimeoutError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class EnrichmentPipeline:
    """
    Runs registered enrichment modules in order over a batch of results.

    The output of each module is the input of the next. Batch-capable modules
    get the whole batch in a single call; other modules are invoked per record,
    either in chunks of ``max_concurrent`` concurrent calls or sequentially.

    Failures are isolated: a record whose ``process`` call raises or times out
    keeps its pre-module form, and a failing ``process_batch`` call passes the
    whole batch through unchanged. Errors are logged, never raised.

    Timeouts rely on ``asyncio.wait_for`` and are cooperative: the timed-out
    coroutine is cancelled at its next ``await``, but synchronous work already
    running is not interrupted and side effects it performed are not undone.
    """

    def __init__(self, options: PipelineOptions | dict[str, Any] | None = None):
        if isinstance(options, dict):
            options = PipelineOptions.model_validate(options)
        self._options = options or PipelineOptions()
        self._modules: dict[str, EnrichmentModule] = {}
        self._module_order: list[str] = []

    # Module registry

    def register_module(
        self, module: EnrichmentModule, position: int | None = None
    ) -> None:
        """
        Register a module.

        Re-registering an existing id replaces the module in place unless a
        valid ``position`` is given, in which case it is moved there. New
        modules are inserted at ``position`` when valid, else appended.
        """
        valid_position = position is not None and 0 <= position <= len(
            self._module_order
        )

        if module.id in self._modules:
            self._modules[module.id] = module
            if valid_position:
                self._module_order.remove(module.id)
                self._module_order.insert(
                    min(position, len(self._module_order)), module.id
                )
            logger.debug(f"Replaced enrichment module '{module.id}'")
            return

        self._modules[module.id] = module
        if valid_position:
            self._module_order.insert(position, module.id)
        else:
            self._module_order.append(module.id)
        logger.debug(f"Registered enrichment module '{module.id}'")

    def remove_module(self, module_id: str) -> bool:
        if module_id not in self._modules:
            return False
        del self._modules[module_id]
        self._module_order.remove(module_id)
        return True

    def get_module(self, module_id: str) -> EnrichmentModule | None:
        return self._modules.get(module_id)

    def get_all_modules(self) -> list[EnrichmentModule]:
        """Get all registered modules in execution order."""
        return [self._modules[module_id] for module_id in self._module_order]

    def get_module_order(self) -> list[str]:
        return list(self._module_order)

    def reorder_modules(self, module_ids: list[str]) -> bool:
        """
        Replace the execution order.

        Returns:
            False, leaving the order untouched, unless ``module_ids`` is a
            permutation of exactly the registered module ids
        """
        if len(module_ids) != len(self._module_order) or set(module_ids) != set(
            self._modules
        ):
            logger.warning(f"Rejected module order {module_ids}")
            return False
        self._module_order = list(module_ids)
        return True

    # Options

    def get_options(self) -> PipelineOptions:
        return self._options

    def update_options(self, options: dict[str, Any]) -> PipelineOptions:
        """Shallow-merge ``options`` over the current pipeline options."""
        self._options = merge_options(self._options, options, component="pipeline")
        return self._options

    # Processing

    async def process(self, results: list[SearchResult]) -> EnrichmentResult:
        """
        Run all enabled modules over ``results``.

        Args:
            results: Results to enrich

        Returns:
            Enriched results with per-module metrics
        """
        modules = [module for module in self.get_all_modules() if module.enabled]
        if not results or not modules:
            return EnrichmentResult(
                results=list(results), total_processed=len(results)
            )

        options = self._options
        module_metrics: dict[str, ModuleMetrics] = {}
        processed = list(results)
        total_enriched = 0

        for module in modules:
            start_time = time.time()

            if module.batch_processing:
                processed, items_processed = await self._process_batch(
                    module, processed
                )
            elif options.parallel_processing:
                processed, items_processed = await self._process_parallel(
                    module, processed
                )
            else:
                processed, items_processed = await self._process_sequential(
                    module, processed
                )

            total_enriched += items_processed
            if options.measure_performance:
                module_metrics[module.id] = ModuleMetrics(
                    module_id=module.id,
                    module_name=module.name,
                    processing_time_ms=(time.time() - start_time) * 1000,
                    items_processed=items_processed,
                )

        return EnrichmentResult(
            results=processed,
            total_processed=len(results),
            total_enriched=total_enriched,
            module_metrics=module_metrics,
        )

    async def _invoke(self, module: EnrichmentModule, operation: str, payload: Any):
        """Call a module operation under the pipeline timeout."""
        timeout_ms = self._options.timeout_ms
        try:
            if not module.initialized:
                await module.initialize()
            call = getattr(module, operation)
            return await asyncio.wait_for(call(payload), timeout=timeout_ms / 1000)
        except TimeoutError as e:
            raise ModuleTimeoutError(module.id, timeout_ms, operation) from e
        except Exception as e:
            raise ModuleProcessingError(module.id, operation, original_error=e) from e

    async def _process_batch(
        self, module: EnrichmentModule, results: list[SearchResult]
    ) -> tuple[list[SearchResult], int]:
        try:
            processed = await self._invoke(module, "process_batch", results)
        except EnrichmentError as e:
            logger.error(f"Error in enrichment module {module.id}: {e}")
            return results, 0
        return processed, len(processed)

    async def _process_item(
        self, module: EnrichmentModule, result: SearchResult, index: int
    ) -> tuple[SearchResult, bool]:
        try:
            return await self._invoke(module, "process", result), True
        except EnrichmentError as e:
            logger.error(f"Error processing item {index} with module {module.id}: {e}")
            # Keep the original result on error
            return result, False

    async def _process_parallel(
        self, module: EnrichmentModule, results: list[SearchResult]
    ) -> tuple[list[SearchResult], int]:
        chunk_size = self._options.max_concurrent
        processed: list[SearchResult] = []
        succeeded = 0

        for chunk_start in range(0, len(results), chunk_size):
            chunk = results[chunk_start : chunk_start + chunk_size]
            outcomes = await asyncio.gather(
                *(
                    self._process_item(module, result, chunk_start + offset)
                    for offset, result in enumerate(chunk)
                )
            )
            for result, ok in outcomes:
                processed.append(result)
                succeeded += ok

        return processed, succeeded

    async def _process_sequential(
        self, module: EnrichmentModule, results: list[SearchResult]
    ) -> tuple[list[SearchResult], int]:
        processed: list[SearchResult] = []
        succeeded = 0
        for index, result in enumerate(results):
            result, ok = await self._process_item(module, result, index)
            processed.append(result)
            succeeded += ok
        return processed, succeeded
