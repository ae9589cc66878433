"""Rule-based result filtering."""

from .filter_service import FilterService
from .rules import (
    CompositeOperator,
    CompositeRule,
    CustomRule,
    DomainRule,
    FileTypeRule,
    FilterRule,
    FilterSet,
    KeywordRule,
    MatchStrategy,
    RuleMode,
    UrlPatternRule,
)

__all__ = [
    "CompositeOperator",
    "CompositeRule",
    "CustomRule",
    "DomainRule",
    "FileTypeRule",
    "FilterRule",
    "FilterService",
    "FilterSet",
    "KeywordRule",
    "MatchStrategy",
    "RuleMode",
    "UrlPatternRule",
]
