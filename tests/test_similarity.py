"""Test title, edit-distance and composite similarity."""

import pytest

from search_refinery.models.config import DeduplicationOptions
from search_refinery.result_processing.similarity import (
    SimilarityScorer,
    edit_similarity,
    jaccard_similarity,
    levenshtein_distance,
    tokenize,
)


def test_tokenize_drops_single_characters():
    assert tokenize("A Guide to Python a b") == {"guide", "to", "python"}


class TestJaccardSimilarity:
    def test_identical_strings(self):
        assert jaccard_similarity("Same title", "Same title") == 1.0
        assert jaccard_similarity("a", "a") == 1.0

    def test_partial_overlap(self):
        score = jaccard_similarity(
            "Complete Guide to Python Programming",
            "Complete Guide to Python Coding Basics",
        )
        # 4 shared tokens out of 7 distinct ones
        assert score == pytest.approx(4 / 7)

    def test_case_insensitive(self):
        assert jaccard_similarity("Python Guide", "python guide extra") == pytest.approx(
            2 / 3
        )

    def test_empty_token_set(self):
        assert jaccard_similarity("a b c", "python guide") == 0.0
        assert jaccard_similarity("", "python") == 0.0


def test_levenshtein_distance():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("same", "same") == 0


class TestEditSimilarity:
    def test_equal_ignoring_case(self):
        assert edit_similarity("Example", "example") == 1.0

    def test_one_side_empty(self):
        assert edit_similarity("", "abc") == 0.0

    def test_normalized_by_longer_string(self):
        assert edit_similarity("example.com/aaaa", "example.com/bbbb") == pytest.approx(
            1 - 4 / 16
        )


class TestSimilarityScorer:
    def test_identical_urls_score_one(self, make_result):
        scorer = SimilarityScorer()
        a = make_result(title="Python Guide", url="https://example.com/a")
        b = make_result(title="Python Guide", url="https://www.example.com/a/")
        breakdown = scorer.compare(a, b)

        assert breakdown.url_score == 1.0
        assert breakdown.title_score == 1.0
        assert breakdown.score == pytest.approx(1.0)
        assert breakdown.weights == {"title": 0.3, "url": 0.7}

    def test_weighted_composite(self, make_result):
        scorer = SimilarityScorer()
        a = make_result(
            title="The Quick Brown Fox Jumps Over",
            url="https://example.com/aaaa",
        )
        b = make_result(
            title="The Quick Brown Fox Jumped Over",
            url="https://example.com/bbbb",
        )
        breakdown = scorer.compare(a, b)

        assert breakdown.title_score == pytest.approx(5 / 7)
        assert breakdown.url_score == pytest.approx(0.75)
        assert breakdown.score == pytest.approx(0.3 * 5 / 7 + 0.7 * 0.75)

    def test_missing_title_renormalizes_weights(self, make_result):
        scorer = SimilarityScorer()
        a = make_result(title="", url="https://example.com/aaaa")
        b = make_result(title="Something", url="https://example.com/bbbb")
        breakdown = scorer.compare(a, b)

        assert breakdown.title_score is None
        assert breakdown.weights == {"url": 0.7}
        assert breakdown.score == pytest.approx(0.75)

    def test_custom_weights(self, make_result):
        scorer = SimilarityScorer(DeduplicationOptions(title_weight=1.0, url_weight=1.0))
        a = make_result(title="alpha beta", url="https://example.com/x")
        b = make_result(title="gamma delta", url="https://example.com/x")
        breakdown = scorer.compare(a, b)

        assert breakdown.score == pytest.approx(0.5)

    def test_zero_weights_score_zero(self, make_result):
        scorer = SimilarityScorer(DeduplicationOptions(title_weight=0, url_weight=0))
        a = make_result(url="https://example.com/x")
        assert scorer.compare(a, a).score == 0.0
