"""Filter rule models.

Rules form a closed set discriminated on ``type``. Domain and keyword rules
carry their effect in the type (``*_block`` excludes matching results,
``domain_allow``/``keyword_require`` exclude non-matching ones); the remaining
rule kinds take an explicit ``mode``.
"""

from collections.abc import Callable
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.results import SearchResult


class MatchStrategy(str, Enum):
    """Matching strategy for text-based rules."""

    EXACT = "exact"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX = "regex"


class CompositeOperator(str, Enum):
    AND = "and"
    OR = "or"
    NOT = "not"


class RuleMode(str, Enum):
    """Whether a match excludes a result or is required to keep it."""

    BLOCK = "block"
    REQUIRE = "require"


class FilterRuleBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique rule identifier")
    name: str = Field(..., description="Human-readable rule name")
    enabled: bool = True


class DomainRule(FilterRuleBase):
    type: Literal["domain_block", "domain_allow"]
    domains: list[str]
    match_subdomains: bool = Field(
        True, description="Also match subdomains of the listed domains"
    )


class KeywordRule(FilterRuleBase):
    type: Literal["keyword_block", "keyword_require"]
    keywords: list[str]
    match_strategy: MatchStrategy = MatchStrategy.CONTAINS
    case_sensitive: bool = False
    fields: list[Literal["title", "snippet", "url"]] = Field(
        default_factory=lambda: ["title", "snippet"]
    )


class ModalRule(FilterRuleBase):
    """Base for rule kinds whose effect is configured with ``mode``."""

    mode: RuleMode = RuleMode.BLOCK


class UrlPatternRule(ModalRule):
    type: Literal["url_pattern"] = "url_pattern"
    patterns: list[str]
    match_strategy: MatchStrategy = MatchStrategy.CONTAINS


class FileTypeRule(ModalRule):
    type: Literal["file_type"] = "file_type"
    file_types: list[str] = Field(..., description="Extensions, with or without dot")


class CustomRule(ModalRule):
    type: Literal["custom"] = "custom"
    predicate: Callable[[SearchResult], bool] = Field(
        ..., exclude=True, description="Returns True when the result matches"
    )


class CompositeRule(ModalRule):
    type: Literal["composite"] = "composite"
    operator: CompositeOperator
    rules: list["FilterRule"]


FilterRule = Annotated[
    Union[DomainRule, KeywordRule, UrlPatternRule, FileTypeRule, CustomRule, CompositeRule],
    Field(discriminator="type"),
]

CompositeRule.model_rebuild()


class FilterSet(BaseModel):
    """A named, toggleable collection of rules."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    rules: list[FilterRule] = Field(default_factory=list)
    enabled: bool = True
