"""Test relevance scoring."""

from datetime import UTC, datetime, timedelta

import pytest

from search_refinery.enrichment.relevance import RelevanceModule, extract_keywords


def test_extract_keywords():
    assert extract_keywords("How to learn Python programming the python way") == [
        "learn",
        "python",
        "programming",
        "way",
    ]


class TestComponentScores:
    def test_title_match(self, make_result):
        module = RelevanceModule(query="python tutorial")
        assert module.title_match_score(make_result(title="Python Tutorial")) == 1.0
        assert (
            module.title_match_score(make_result(title="Python tutorial for beginners"))
            == 0.9
        )
        assert module.title_match_score(make_result(title="Python")) == 0.8
        assert module.title_match_score(make_result(title="The python tutorial")) == 0.7
        assert module.title_match_score(
            make_result(title="Tutorial on Python")
        ) == pytest.approx(0.5)

    def test_keyword_match(self, make_result):
        module = RelevanceModule(query="python tutorial")
        result = make_result(
            title="Python Tutorial", snippet="A python tutorial. More python here."
        )
        # python x2 -> 1.5, tutorial x1 -> 1.0, both in the title
        assert module.keyword_match_score(result) == 1.0

        unrelated = make_result(title="Cooking", snippet="Pasta recipes")
        assert module.keyword_match_score(unrelated) == 0.0

    def test_url_match(self, make_result):
        module = RelevanceModule(query="python tutorial")
        result = make_result(url="https://python.org/tutorial")
        # hostname 0.5, path 0.3, shallow path 0.2
        assert module.url_match_score(result) == pytest.approx(1.0)

        deep = make_result(url="https://example.com/a/b/c")
        assert module.url_match_score(deep) == 0.0

    def test_rank_score(self, make_result):
        assert RelevanceModule.rank_score(make_result(rank=1)) == 1.0
        assert RelevanceModule.rank_score(make_result(rank=6)) == pytest.approx(0.5)
        assert RelevanceModule.rank_score(make_result(rank=20)) == 0.0
        assert RelevanceModule.rank_score(make_result()) == 0.0

    def test_recency_score(self, make_result):
        module = RelevanceModule(query="anything")
        fresh = make_result(timestamp=datetime.now(UTC))
        old = make_result(timestamp=datetime.now(UTC) - timedelta(days=730))

        assert module.recency_score(fresh) == pytest.approx(1.0, abs=1e-3)
        assert module.recency_score(old) == 0.0

    def test_future_timestamp_scores_as_fresh(self, make_result):
        module = RelevanceModule(query="python")
        future = make_result(
            title="Python",
            url="https://python.org",
            timestamp=datetime.now(UTC) + timedelta(days=3650),
        )

        assert module.recency_score(future) == 1.0
        assert module.calculate(future).relevance_score <= 1.0


def test_missing_components_are_skipped(make_result):
    module = RelevanceModule(query="python")
    info = module.calculate(make_result(title="Python", url="https://python.org"))

    assert info.components.recency_score is None
    assert info.components.rank_score is None
    assert info.keywords == ["python"]
    assert 0 < info.relevance_score <= 1


def test_scores_below_minimum_are_zeroed(make_result):
    module = RelevanceModule(
        {"minimum_relevance_threshold": 0.9}, query="python"
    )
    info = module.calculate(make_result(title="Cooking", url="https://food.com/a/b/c"))
    assert info.relevance_score == 0.0


def test_update_config_reextracts_keywords():
    module = RelevanceModule(query="python tutorial")
    assert module.keywords == ["python", "tutorial"]

    module.update_config({"extract_keywords": False})
    assert module.keywords == []
    assert module.query == "python tutorial"


@pytest.mark.asyncio
async def test_batch_normalized_to_top_score(make_result):
    module = RelevanceModule(query="python tutorial")
    results = [
        make_result(
            title="Python Tutorial",
            url="https://python.org/tutorial",
            snippet="A python tutorial for beginners",
            rank=1,
        ),
        make_result(
            title="Cooking recipes",
            url="https://food.com/pasta",
            snippet="Pasta",
            rank=5,
        ),
    ]
    processed = await module.process_batch(results)

    scores = [r.metadata["relevance"]["relevance_score"] for r in processed]
    assert scores[0] == pytest.approx(1.0)
    assert 0 < scores[1] < scores[0]
    assert processed[0].metadata["relevance"]["query"] == "python tutorial"


@pytest.mark.asyncio
async def test_batch_without_normalization(make_result):
    module = RelevanceModule({"normalize_scores": False}, query="python tutorial")
    result = make_result(title="Python", url="https://example.com/a/b/c")

    [processed] = await module.process_batch([result])
    single = await module.process(result)

    assert (
        processed.metadata["relevance"]["relevance_score"]
        == single.metadata["relevance"]["relevance_score"]
    )


@pytest.mark.asyncio
async def test_empty_batch():
    assert await RelevanceModule(query="python").process_batch([]) == []
