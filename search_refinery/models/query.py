"""Query models."""

from typing import Any

from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    """A search request as seen by the results processor."""

    query: str = Field(..., description="The search query")
    deduplication: bool | dict[str, Any] = Field(
        True,
        description="False to skip deduplication, or per-request option overrides",
    )
    use_cache: bool = Field(True, description="Whether the cache may be consulted")
