"""Test the results processor with in-memory collaborators."""

import pytest

from search_refinery.models.interfaces import ResultCache, ResultStorage
from search_refinery.models.query import SearchRequest
from search_refinery.processor import ResultsProcessor
from search_refinery.result_processing.deduplication import DeduplicationEngine
from search_refinery.utils.errors import ConfigurationError


class InMemoryCache:
    def __init__(self, fail_on_set: bool = False, fail_on_get: bool = False):
        self.entries = {}
        self.fail_on_set = fail_on_set
        self.fail_on_get = fail_on_get

    async def get(self, request):
        if self.fail_on_get:
            raise ConnectionError("cache unavailable")
        return self.entries.get(request.query)

    async def set(self, request, results):
        if self.fail_on_set:
            raise RuntimeError("cache unavailable")
        self.entries[request.query] = results


class InMemoryStorage:
    def __init__(self, fail: bool = False):
        self.results = {}
        self.duplicates = {}
        self.fail = fail

    async def save_results(self, search_request_id, results):
        if self.fail:
            raise RuntimeError("storage unavailable")
        self.results[search_request_id] = results

    async def save_duplicates(self, search_request_id, logs):
        self.duplicates[search_request_id] = logs


@pytest.fixture
def results(make_result):
    return [
        make_result(title="A", url="https://example.com/x"),
        make_result(title="B", url="http://www.example.com/x/"),
        make_result(title="C", url="https://other.com/page"),
    ]


def test_collaborators_satisfy_protocols():
    assert isinstance(InMemoryCache(), ResultCache)
    assert isinstance(InMemoryStorage(), ResultStorage)


@pytest.mark.asyncio
async def test_deduplicates_and_stores(results):
    storage = InMemoryStorage()
    processor = ResultsProcessor(storage=storage)

    outcome = await processor.process(
        results, SearchRequest(query="test"), search_request_id="req-1"
    )

    assert [r.title for r in outcome.unique_results] == ["A", "C"]
    assert outcome.duplicates_removed == 1
    assert outcome.cache_hit is False
    assert all(
        r.metadata["search_request_id"] == "req-1" for r in outcome.unique_results
    )
    assert storage.results["req-1"] == outcome.unique_results
    assert len(storage.duplicates["req-1"]) == 1


@pytest.mark.asyncio
async def test_cache_hit_short_circuits(results, make_result):
    cache = InMemoryCache()
    cached = [make_result(title="Cached")]
    cache.entries["test"] = cached
    storage = InMemoryStorage()
    processor = ResultsProcessor(cache=cache, storage=storage)

    outcome = await processor.process(
        results, SearchRequest(query="test"), search_request_id="req-1"
    )

    assert outcome.cache_hit is True
    assert outcome.unique_results == cached
    assert storage.results == {}


@pytest.mark.asyncio
async def test_cache_populated_on_miss(results):
    cache = InMemoryCache()
    processor = ResultsProcessor(cache=cache)

    outcome = await processor.process(results, SearchRequest(query="test"))
    assert cache.entries["test"] == outcome.unique_results


@pytest.mark.asyncio
async def test_cache_bypassed_when_disabled(results, make_result):
    cache = InMemoryCache()
    cache.entries["test"] = [make_result(title="Cached")]
    processor = ResultsProcessor(cache=cache)

    outcome = await processor.process(
        results, SearchRequest(query="test", use_cache=False)
    )
    assert outcome.cache_hit is False
    assert len(outcome.unique_results) == 2


@pytest.mark.asyncio
async def test_deduplication_can_be_skipped(results):
    processor = ResultsProcessor()
    outcome = await processor.process(
        results, SearchRequest(query="test", deduplication=False)
    )

    assert outcome.unique_results == results
    assert outcome.duplicates_removed == 0
    assert outcome.duplicate_logs is None


@pytest.mark.asyncio
async def test_request_overrides_do_not_leak(make_result):
    """Test that per-request options never change the processor defaults."""
    similar = [
        make_result(title="The Quick Brown Fox Jumps Over", url="https://example.com/aaaa"),
        make_result(title="The Quick Brown Fox Jumped Over", url="https://example.com/bbbb"),
    ]
    processor = ResultsProcessor()

    loose = await processor.process(
        similar, SearchRequest(query="fox", deduplication={"threshold": 0.5})
    )
    default = await processor.process(similar, SearchRequest(query="fox"))

    assert len(loose.unique_results) == 1
    assert len(default.unique_results) == 2
    assert processor.engine.get_options().threshold == 0.8


def test_invalid_request_overrides():
    processor = ResultsProcessor({"threshold": 0.7})
    assert processor.default_options.threshold == 0.7
    with pytest.raises(ConfigurationError):
        processor.effective_options(
            SearchRequest(query="q", deduplication={"threshold": "high"})
        )


@pytest.mark.asyncio
async def test_collaborator_failures_are_logged(results):
    processor = ResultsProcessor(
        cache=InMemoryCache(fail_on_set=True), storage=InMemoryStorage(fail=True)
    )
    outcome = await processor.process(
        results, SearchRequest(query="test"), search_request_id="req-1"
    )
    assert len(outcome.unique_results) == 2


@pytest.mark.asyncio
async def test_storage_skipped_without_request_id(results):
    storage = InMemoryStorage()
    processor = ResultsProcessor(storage=storage)

    await processor.process(results, SearchRequest(query="test"))
    assert storage.results == {}


@pytest.mark.asyncio
async def test_cache_read_failure_is_a_miss(results):
    cache = InMemoryCache(fail_on_get=True)
    processor = ResultsProcessor(cache=cache)

    outcome = await processor.process(results, SearchRequest(query="test"))

    assert outcome.cache_hit is False
    assert [r.title for r in outcome.unique_results] == ["A", "C"]
    assert cache.entries["test"] == outcome.unique_results


def test_should_merge_override_maps_to_enable_merging():
    processor = ResultsProcessor()
    options = processor.effective_options(
        SearchRequest(query="q", deduplication={"should_merge": True})
    )
    assert options.enable_merging is True
    assert processor.default_options.enable_merging is False


@pytest.mark.asyncio
async def test_invalid_overrides_fall_back_to_defaults(results):
    processor = ResultsProcessor()

    outcome = await processor.process(
        results, SearchRequest(query="test", deduplication={"threshold": "high"})
    )

    assert [r.title for r in outcome.unique_results] == ["A", "C"]
    assert outcome.duplicates_removed == 1


@pytest.mark.asyncio
async def test_injected_engine_options_are_used(make_result):
    similar = [
        make_result(title="The Quick Brown Fox Jumps Over", url="https://example.com/aaaa"),
        make_result(title="The Quick Brown Fox Jumped Over", url="https://example.com/bbbb"),
    ]
    engine = DeduplicationEngine()
    processor = ResultsProcessor(engine=engine)
    engine.update_options({"threshold": 0.5})

    outcome = await processor.process(similar, SearchRequest(query="fox"))

    assert processor.default_options.threshold == 0.5
    assert len(outcome.unique_results) == 1


def test_options_applied_to_injected_engine():
    engine = DeduplicationEngine()
    processor = ResultsProcessor({"threshold": 0.7}, engine=engine)
    assert engine.get_options().threshold == 0.7
    assert processor.default_options.threshold == 0.7
