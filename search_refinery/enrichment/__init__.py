"""Enrichment modules and the pipeline that runs them."""

from .content_type import ContentTypeModule
from .deduplication_adapter import DeduplicationAdapter
from .pipeline import EnrichmentPipeline
from .readability import ReadabilityModule
from .relevance import RelevanceModule

__all__ = [
    "ContentTypeModule",
    "DeduplicationAdapter",
    "EnrichmentPipeline",
    "ReadabilityModule",
    "RelevanceModule",
]
