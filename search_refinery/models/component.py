"""Base component implementation classes.

This module provides the abstract base classes shared by the processing
components. ``EnrichmentModule`` is the contract every enrichment stage
implements: a required single-record ``process`` and a provided
``process_batch`` that maps ``process`` sequentially. Modules that override
``process_batch`` set ``batch_processing = True`` so the pipeline hands them the
whole batch in one call instead of fanning out per record.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from .config import merge_options
from .results import SearchResult

ConfigT = TypeVar("ConfigT", bound=BaseModel)


class Component(ABC):
    """Base class for all components with a name and lifecycle state."""

    def __init__(self, name: str):
        """Initialize component with a name."""
        self.name = name
        self.initialized = False

    async def initialize(self) -> None:
        """Initialize the component, setting up required resources."""
        self.initialized = True


class ConfigurableComponentBase(Component, Generic[ConfigT]):
    """Base class for components holding a validated configuration snapshot."""

    def __init__(self, name: str, config: ConfigT):
        super().__init__(name)
        self.config = config

    def configure(self, config: ConfigT) -> None:
        """Replace the configuration wholesale."""
        self.config = config

    def get_config(self) -> dict[str, Any]:
        """Get the current configuration as a plain mapping."""
        return self.config.model_dump()

    def update_config(self, config: dict[str, Any]) -> None:
        """Shallow-merge ``config`` over the current configuration."""
        self.config = merge_options(self.config, config, component=self.name)


class EnrichmentModule(ConfigurableComponentBase[ConfigT]):
    """A pluggable unit that adds namespaced metadata to search results."""

    # Set by modules that override process_batch with batch semantics
    batch_processing: ClassVar[bool] = False

    def __init__(
        self,
        module_id: str,
        name: str,
        config: ConfigT,
        description: str = "",
        enabled: bool = True,
    ):
        super().__init__(name, config)
        self.id = module_id
        self.description = description
        self.enabled = enabled

    @abstractmethod
    async def process(self, result: SearchResult) -> SearchResult:
        """Process a search result and return the enriched copy."""
        ...

    async def process_batch(self, results: list[SearchResult]) -> list[SearchResult]:
        """Process a batch of results, one at a time, in order."""
        return [await self.process(result) for result in results]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, enabled={self.enabled})"
