"""Search result deduplication and enrichment."""

from .models.config import DeduplicationOptions, PipelineOptions, SortOptions
from .models.results import PipelineResult, SearchResult
from .pipeline import ResultPipeline, create_result_pipeline
from .processor import ResultsProcessor
from .result_processing.deduplication import DeduplicationEngine

__all__ = [
    "DeduplicationEngine",
    "DeduplicationOptions",
    "PipelineOptions",
    "PipelineResult",
    "ResultPipeline",
    "ResultsProcessor",
    "SearchResult",
    "SortOptions",
    "create_result_pipeline",
]
