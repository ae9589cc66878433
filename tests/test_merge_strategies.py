"""Test merge strategy definitions and registry."""

import pytest
from pydantic import ValidationError

from search_refinery.models.config import MergeStrategy
from search_refinery.result_processing.merge_strategies import (
    DEFAULT_MERGE_STRATEGY,
    MergeStrategyRegistry,
)


def test_builtin_strategies_registered():
    registry = MergeStrategyRegistry()
    assert "conservative" in registry
    assert "comprehensive" in registry
    assert registry.names() == ["conservative", "comprehensive"]


def test_comprehensive_combines_snippet_only():
    strategy = MergeStrategyRegistry().get("comprehensive")
    assert strategy.combine_fields == ["snippet"]
    assert strategy.separator == " | "


def test_get_default_and_unknown():
    registry = MergeStrategyRegistry()
    assert registry.get(None).name == DEFAULT_MERGE_STRATEGY
    assert registry.get("missing").name == DEFAULT_MERGE_STRATEGY


def test_register_replaces_existing():
    registry = MergeStrategyRegistry()
    custom = MergeStrategy(
        name="conservative", field_priorities={"title": ["exa"]}
    )
    registry.register(custom)
    assert registry.get("conservative") is custom


def test_combine_fields_must_have_priorities():
    with pytest.raises(ValidationError):
        MergeStrategy(
            name="broken",
            field_priorities={"title": ["serper"]},
            combine_fields=["snippet"],
        )
