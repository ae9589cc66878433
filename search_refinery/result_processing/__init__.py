"""Result processing package for search results.

This package contains the deduplication core:
- url_normalizer: Canonicalize URLs for identity comparison
- similarity: Title, edit-distance and composite similarity scoring
- merge_strategies: Named rules for merging duplicate results
- deduplication: Detect, group and optionally merge duplicates
"""

from .deduplication import DeduplicationEngine
from .merge_strategies import MergeStrategyRegistry
from .similarity import SimilarityScorer, edit_similarity, jaccard_similarity
from .url_normalizer import UrlNormalizer, normalize_url

__all__ = [
    "DeduplicationEngine",
    "MergeStrategyRegistry",
    "SimilarityScorer",
    "UrlNormalizer",
    "edit_similarity",
    "jaccard_similarity",
    "normalize_url",
]
