"""Merge strategy registry."""

from ..models.config import MergeStrategy
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MERGE_STRATEGY = "conservative"

_PREFERRED_SOURCES = ["serper", "serpapi"]

CONSERVATIVE = MergeStrategy(
    name="conservative",
    field_priorities={
        "title": _PREFERRED_SOURCES,
        "url": _PREFERRED_SOURCES,
        "snippet": _PREFERRED_SOURCES,
        "rank": _PREFERRED_SOURCES,
        "timestamp": _PREFERRED_SOURCES,
    },
)

COMPREHENSIVE = MergeStrategy(
    name="comprehensive",
    field_priorities={
        "title": _PREFERRED_SOURCES,
        "url": _PREFERRED_SOURCES,
        "snippet": _PREFERRED_SOURCES,
        "rank": _PREFERRED_SOURCES,
        "timestamp": _PREFERRED_SOURCES,
    },
    combine_fields=["snippet"],
)


class MergeStrategyRegistry:
    """Named merge strategies, seeded with the built-in ones."""

    def __init__(self):
        self._strategies: dict[str, MergeStrategy] = {
            CONSERVATIVE.name: CONSERVATIVE,
            COMPREHENSIVE.name: COMPREHENSIVE,
        }

    def register(self, strategy: MergeStrategy) -> None:
        """Register a strategy, replacing any existing one with the same name."""
        self._strategies[strategy.name] = strategy
        logger.debug(f"Registered merge strategy '{strategy.name}'")

    def get(self, name: str | None) -> MergeStrategy:
        """Get a strategy by name, falling back to the default strategy."""
        strategy = self._strategies.get(name or DEFAULT_MERGE_STRATEGY)
        if strategy is None:
            logger.warning(
                f"Unknown merge strategy '{name}', "
                f"falling back to '{DEFAULT_MERGE_STRATEGY}'"
            )
            strategy = self._strategies[DEFAULT_MERGE_STRATEGY]
        return strategy

    def names(self) -> list[str]:
        return list(self._strategies)

    def __contains__(self, name: str) -> bool:
        return name in self._strategies
