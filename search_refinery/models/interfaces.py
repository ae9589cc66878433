"""Protocol definitions for external collaborators.

The processing core works over in-memory data. Caching and persistence belong
to collaborators supplied by the surrounding service; these protocols describe
the only operations the core calls on them. They use Python's typing.Protocol
for structural subtyping, so any object with matching methods can be passed.
"""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from .query import SearchRequest
from .results import DuplicateLog, SearchResult


@runtime_checkable
class ResultCache(Protocol):
    """Cache of already-deduplicated result batches keyed by request."""

    @abstractmethod
    async def get(self, request: SearchRequest) -> list[SearchResult] | None:
        """
        Look up processed results for a request.

        Returns:
            The cached results, or None on a miss
        """
        ...

    @abstractmethod
    async def set(self, request: SearchRequest, results: list[SearchResult]) -> None:
        """Store processed results for a request."""
        ...


@runtime_checkable
class ResultStorage(Protocol):
    """Persistence for final results and duplicate relationships."""

    @abstractmethod
    async def save_results(
        self, search_request_id: str, results: list[SearchResult]
    ) -> None:
        """Persist the unique results of a request."""
        ...

    @abstractmethod
    async def save_duplicates(
        self, search_request_id: str, logs: list[DuplicateLog]
    ) -> None:
        """Persist duplicate relationships found for a request."""
        ...
