"""Query relevance scoring for search results."""

from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

from ..models.component import EnrichmentModule
from ..models.config import RelevanceConfig
from ..models.results import RelevanceComponents, RelevanceInfo, SearchResult

STOP_WORDS = frozenset(
    [
        "the",
        "and",
        "for",
        "from",
        "with",
        "that",
        "have",
        "this",
        "are",
        "not",
        "what",
        "when",
        "where",
        "who",
        "why",
        "how",
        "does",
        "which",
    ]
)

# Typical provider page size used to decay rank scores
RESULTS_PER_PAGE = 10


def extract_keywords(query: str) -> list[str]:
    """Unique lower-cased query words, without stop words and short words."""
    keywords: list[str] = []
    for word in query.lower().split():
        if len(word) <= 2 or word in STOP_WORDS or word in keywords:
            continue
        keywords.append(word)
    return keywords


class RelevanceModule(EnrichmentModule[RelevanceConfig]):
    """
    Scores results against the current query.

    Five weighted components are combined: keyword matches in snippet and
    title, title/query overlap, keywords in the URL, recency and provider
    rank. Weights are renormalized over the components that could be
    computed for a result. Batch processing additionally divides every score
    by the batch maximum when ``normalize_scores`` is set, so the top result
    scores 1.0.
    """

    batch_processing = True

    def __init__(
        self,
        config: RelevanceConfig | dict[str, Any] | None = None,
        query: str | None = None,
    ):
        if isinstance(config, dict):
            config = RelevanceConfig.model_validate(config)
        super().__init__(
            module_id="relevance",
            name="Relevance Scorer",
            config=config or RelevanceConfig(),
            description="Calculates relevance scores for search results",
        )
        self.query = ""
        self.keywords: list[str] = []
        if query:
            self.set_query(query)

    def set_query(self, query: str) -> None:
        """Set the query that subsequent results are scored against."""
        self.query = query
        self.keywords = extract_keywords(query) if self.config.extract_keywords else []

    def update_config(self, config: dict[str, Any]) -> None:
        super().update_config(config)
        # Keyword extraction may have been toggled
        self.set_query(self.query)

    def keyword_match_score(self, result: SearchResult) -> float:
        if not self.keywords or not result.snippet:
            return 0.0

        snippet = result.snippet.lower()
        title = result.title.lower()
        matches = 0.0
        title_matches = 0

        for keyword in self.keywords:
            occurrences = snippet.count(keyword)
            if occurrences:
                # Diminishing returns for repeated mentions
                matches += 1 + min(occurrences - 1, 2) * 0.5
            if keyword in title:
                title_matches += 1

        base_score = matches / (len(self.keywords) * 2)
        title_boost = title_matches / len(self.keywords) * 0.5
        return min(1.0, base_score + title_boost)

    def title_match_score(self, result: SearchResult) -> float:
        if not result.title or not self.query:
            return 0.0

        title = result.title.lower()
        query = self.query.lower()

        if title == query:
            return 1.0
        if title.startswith(query):
            return 0.9
        if query.startswith(title):
            return 0.8
        if query in title:
            return 0.7

        title_words = set(title.split())
        query_words = query.split()
        if not query_words:
            return 0.0

        matched = sum(
            1 for word in query_words if len(word) > 2 and word in title_words
        )
        return 0.5 * (matched / len(query_words))

    def url_match_score(self, result: SearchResult) -> float:
        if not result.url or not self.keywords:
            return 0.0

        try:
            parts = urlsplit(result.url)
            hostname = (parts.hostname or "").lower()
        except ValueError:
            return 0.0
        path = parts.path.lower()

        score = 0.0
        for keyword in self.keywords:
            if keyword in hostname:
                score += 0.5
            if keyword in path:
                score += 0.3

        # Bonus for shallow paths
        if len([segment for segment in path.split("/") if segment]) <= 2:
            score += 0.2

        return min(1.0, score)

    def recency_score(self, result: SearchResult) -> float:
        if result.timestamp is None:
            return 0.0
        now = datetime.now(result.timestamp.tzinfo)
        age_days = (now - result.timestamp).total_seconds() / 86400
        return max(0.0, min(1.0, 1 - age_days / self.config.max_age_days))

    @staticmethod
    def rank_score(result: SearchResult) -> float:
        if result.rank is None or result.rank <= 0:
            return 0.0
        return max(0.0, 1 - (result.rank - 1) / RESULTS_PER_PAGE)

    def calculate(self, result: SearchResult) -> RelevanceInfo:
        """Compute the relevance score and its components for one result."""
        config = self.config
        components = RelevanceComponents()
        weighted: list[tuple[float, float]] = []

        if config.weight_keyword_match > 0:
            components.keyword_match_score = self.keyword_match_score(result)
            weighted.append((components.keyword_match_score, config.weight_keyword_match))

        if config.weight_title_match > 0 and result.title:
            components.title_match_score = self.title_match_score(result)
            weighted.append((components.title_match_score, config.weight_title_match))

        if config.weight_url_match > 0 and result.url:
            components.url_match_score = self.url_match_score(result)
            weighted.append((components.url_match_score, config.weight_url_match))

        if config.weight_recency > 0 and result.timestamp is not None:
            components.recency_score = self.recency_score(result)
            weighted.append((components.recency_score, config.weight_recency))

        if config.weight_rank > 0 and result.rank is not None:
            components.rank_score = self.rank_score(result)
            weighted.append((components.rank_score, config.weight_rank))

        weight_sum = sum(weight for _, weight in weighted)
        score = sum(value * weight for value, weight in weighted)
        if weight_sum > 0:
            score /= weight_sum

        if score < config.minimum_relevance_threshold:
            score = 0.0

        return RelevanceInfo(
            calculated_at=datetime.now(UTC),
            query=self.query,
            relevance_score=score,
            components=components,
            keywords=list(self.keywords) or None,
        )

    async def process(self, result: SearchResult) -> SearchResult:
        info = self.calculate(result)
        return result.with_metadata("relevance", info.model_dump(mode="json"))

    async def process_batch(self, results: list[SearchResult]) -> list[SearchResult]:
        if not results:
            return []

        infos = [self.calculate(result) for result in results]

        if self.config.normalize_scores:
            max_score = max(info.relevance_score for info in infos)
            if max_score > 0:
                infos = [
                    info.model_copy(
                        update={"relevance_score": info.relevance_score / max_score}
                    )
                    for info in infos
                ]

        return [
            result.with_metadata("relevance", info.model_dump(mode="json"))
            for result, info in zip(results, infos)
        ]
