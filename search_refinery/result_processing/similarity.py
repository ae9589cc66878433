"""Title, string-edit and composite similarity between search results."""

from rapidfuzz.distance import Levenshtein

from ..models.config import DeduplicationOptions
from ..models.results import SearchResult, SimilarityBreakdown
from .url_normalizer import UrlNormalizer


def tokenize(text: str) -> set[str]:
    """Lower-case, whitespace-split tokens longer than one character."""
    return {token for token in text.lower().split() if len(token) > 1}


def jaccard_similarity(text_a: str, text_b: str) -> float:
    """
    Token-set (Jaccard) similarity between two strings.

    Identical strings score 1.0 before tokenization; an empty token set on
    either side scores 0.0.
    """
    if text_a == text_b:
        return 1.0

    tokens_a = tokenize(text_a)
    tokens_b = tokenize(text_b)
    if not tokens_a or not tokens_b:
        return 0.0

    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def levenshtein_distance(text_a: str, text_b: str) -> int:
    return Levenshtein.distance(text_a, text_b)


def edit_similarity(text_a: str, text_b: str) -> float:
    """Case-insensitive ``1 - distance / max(len)`` similarity."""
    text_a = text_a.lower()
    text_b = text_b.lower()
    if text_a == text_b:
        return 1.0
    if not text_a or not text_b:
        return 0.0
    return Levenshtein.normalized_similarity(text_a, text_b)


class SimilarityScorer:
    """Weighted title/URL similarity between two records."""

    def __init__(
        self,
        options: DeduplicationOptions | None = None,
        normalizer: UrlNormalizer | None = None,
    ):
        self.options = options or DeduplicationOptions()
        self.normalizer = normalizer or UrlNormalizer(self.options)

    def url_similarity(self, normalized_a: str, normalized_b: str) -> float:
        """1.0 for normalized-equal URLs, otherwise their edit similarity."""
        if normalized_a == normalized_b:
            return 1.0
        return edit_similarity(normalized_a, normalized_b)

    def compare(
        self,
        result_a: SearchResult,
        result_b: SearchResult,
        normalized_a: str | None = None,
        normalized_b: str | None = None,
    ) -> SimilarityBreakdown:
        """
        Compute the composite similarity of two results.

        Weights are renormalized over the components actually computed: a
        missing title on either side drops the title component.

        Args:
            result_a: First result
            result_b: Second result
            normalized_a: Precomputed normalized URL of ``result_a``
            normalized_b: Precomputed normalized URL of ``result_b``

        Returns:
            Composite score with its per-field breakdown
        """
        if normalized_a is None:
            normalized_a = self.normalizer.normalize(result_a.url)
        if normalized_b is None:
            normalized_b = self.normalizer.normalize(result_b.url)

        weighted_sum = 0.0
        weights: dict[str, float] = {}

        title_score = None
        if result_a.title.strip() and result_b.title.strip():
            title_score = jaccard_similarity(result_a.title, result_b.title)
            weights["title"] = self.options.title_weight
            weighted_sum += title_score * self.options.title_weight

        url_score = self.url_similarity(normalized_a, normalized_b)
        weights["url"] = self.options.url_weight
        weighted_sum += url_score * self.options.url_weight

        total_weight = sum(weights.values())
        score = weighted_sum / total_weight if total_weight > 0 else 0.0

        return SimilarityBreakdown(
            score=score,
            title_score=title_score,
            url_score=url_score,
            weights=weights,
        )
