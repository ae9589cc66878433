"""Rule-based filtering of search results."""

import re
from collections.abc import Callable
from urllib.parse import urlsplit

from ..models.results import FilterResult, FilterStats, RuleStats, SearchResult
from ..utils.logging import get_logger
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

logger = get_logger(__name__)


def rule_mode(rule: FilterRule) -> RuleMode:
    """Effect of a rule: block matching results or require a match."""
    if isinstance(rule, DomainRule | KeywordRule):
        return RuleMode.BLOCK if rule.type.endswith("_block") else RuleMode.REQUIRE
    return rule.mode


def match_text(
    value: str, pattern: str, strategy: MatchStrategy, case_sensitive: bool = True
) -> bool:
    """Match ``value`` against ``pattern``; an invalid regex never matches."""
    if strategy == MatchStrategy.REGEX:
        try:
            return re.search(pattern, value, 0 if case_sensitive else re.I) is not None
        except re.error:
            return False

    if not case_sensitive:
        value = value.lower()
        pattern = pattern.lower()

    if strategy == MatchStrategy.EXACT:
        return value == pattern
    if strategy == MatchStrategy.STARTS_WITH:
        return value.startswith(pattern)
    if strategy == MatchStrategy.ENDS_WITH:
        return value.endswith(pattern)
    return pattern in value


def _unfiltered(results: list[SearchResult]) -> FilterResult:
    return FilterResult(
        filtered=list(results),
        stats=FilterStats(
            total_processed=len(results), total_included=len(results)
        ),
    )


class FilterService:
    """Holds filter sets and applies their rules to result batches."""

    def __init__(self):
        self._filter_sets: dict[str, FilterSet] = {}

    def add_filter_set(self, filter_set: FilterSet) -> None:
        """Add or replace a filter set."""
        self._filter_sets[filter_set.id] = filter_set

    def get_filter_set(self, filter_set_id: str) -> FilterSet | None:
        return self._filter_sets.get(filter_set_id)

    def remove_filter_set(self, filter_set_id: str) -> bool:
        return self._filter_sets.pop(filter_set_id, None) is not None

    def get_all_filter_sets(self) -> list[FilterSet]:
        return list(self._filter_sets.values())

    def apply_filter_set(
        self, filter_set_id: str, results: list[SearchResult]
    ) -> FilterResult:
        """Apply a filter set; unknown or disabled sets pass everything through."""
        filter_set = self._filter_sets.get(filter_set_id)
        if filter_set is None:
            logger.warning(f"Filter set '{filter_set_id}' not found, skipping filters")
            return _unfiltered(results)
        if not filter_set.enabled:
            return _unfiltered(results)
        return self.apply_filters(filter_set.rules, results)

    def apply_filters(
        self, rules: list[FilterRule], results: list[SearchResult]
    ) -> FilterResult:
        """
        Apply rules to results.

        Rules are evaluated in order for each result and evaluation stops at
        the first rule that excludes it.

        Args:
            rules: Rules to apply; disabled rules are ignored
            results: Results to filter

        Returns:
            Included and excluded results with per-rule match counts
        """
        enabled_rules = [rule for rule in rules if rule.enabled]
        if not enabled_rules:
            return _unfiltered(results)

        matches = {rule.id: 0 for rule in enabled_rules}
        filtered: list[SearchResult] = []
        excluded: list[SearchResult] = []

        for result in results:
            exclude = False
            for rule in enabled_rules:
                matched = self.matches(rule, result)
                if matched:
                    matches[rule.id] += 1
                if matched == (rule_mode(rule) == RuleMode.BLOCK):
                    exclude = True
                    break
            (excluded if exclude else filtered).append(result)

        return FilterResult(
            filtered=filtered,
            excluded=excluded,
            stats=FilterStats(
                total_processed=len(results),
                total_included=len(filtered),
                total_excluded=len(excluded),
                rule_stats={
                    rule.id: RuleStats(
                        rule_id=rule.id, rule_name=rule.name, matches=matches[rule.id]
                    )
                    for rule in enabled_rules
                },
            ),
        )

    def matches(self, rule: FilterRule, result: SearchResult) -> bool:
        """Check whether a single rule matches a result."""
        if isinstance(rule, DomainRule):
            return self._match_domain(rule, result)
        if isinstance(rule, KeywordRule):
            return self._match_keyword(rule, result)
        if isinstance(rule, UrlPatternRule):
            return any(
                match_text(result.url, pattern, rule.match_strategy)
                for pattern in rule.patterns
            )
        if isinstance(rule, FileTypeRule):
            return self._match_file_type(rule, result)
        if isinstance(rule, CustomRule):
            return self._match_custom(rule, result)
        if isinstance(rule, CompositeRule):
            return self._match_composite(rule, result)
        raise TypeError(f"Unsupported filter rule: {type(rule).__name__}")

    def _match_domain(self, rule: DomainRule, result: SearchResult) -> bool:
        try:
            hostname = urlsplit(result.url).hostname
        except ValueError:
            return False
        if not hostname:
            return False

        for domain in rule.domains:
            domain = domain.lower()
            if hostname == domain:
                return True
            if rule.match_subdomains and hostname.endswith(f".{domain}"):
                return True
        return False

    def _match_keyword(self, rule: KeywordRule, result: SearchResult) -> bool:
        for field in rule.fields:
            value = getattr(result, field)
            if not value:
                continue
            for keyword in rule.keywords:
                if match_text(value, keyword, rule.match_strategy, rule.case_sensitive):
                    return True
        return False

    def _match_file_type(self, rule: FileTypeRule, result: SearchResult) -> bool:
        try:
            path = urlsplit(result.url).path.lower()
        except ValueError:
            return False
        for file_type in rule.file_types:
            extension = file_type.lower()
            if not extension.startswith("."):
                extension = f".{extension}"
            if path.endswith(extension):
                return True
        return False

    def _match_custom(self, rule: CustomRule, result: SearchResult) -> bool:
        try:
            return bool(rule.predicate(result))
        except Exception as e:
            logger.error(f"Error in custom filter rule {rule.id}: {e}")
            return False

    def _match_composite(self, rule: CompositeRule, result: SearchResult) -> bool:
        enabled_rules = [child for child in rule.rules if child.enabled]
        if not enabled_rules:
            return False

        if rule.operator == CompositeOperator.AND:
            return all(self.matches(child, result) for child in enabled_rules)
        if rule.operator == CompositeOperator.OR:
            return any(self.matches(child, result) for child in enabled_rules)
        return not any(self.matches(child, result) for child in enabled_rules)

    # Factory helpers

    @staticmethod
    def create_domain_block_rule(
        rule_id: str, name: str, domains: list[str], match_subdomains: bool = True
    ) -> DomainRule:
        return DomainRule(
            id=rule_id,
            name=name,
            type="domain_block",
            domains=domains,
            match_subdomains=match_subdomains,
        )

    @staticmethod
    def create_domain_allow_rule(
        rule_id: str, name: str, domains: list[str], match_subdomains: bool = True
    ) -> DomainRule:
        return DomainRule(
            id=rule_id,
            name=name,
            type="domain_allow",
            domains=domains,
            match_subdomains=match_subdomains,
        )

    @staticmethod
    def create_keyword_block_rule(
        rule_id: str,
        name: str,
        keywords: list[str],
        fields: list[str] | None = None,
        match_strategy: MatchStrategy = MatchStrategy.CONTAINS,
        case_sensitive: bool = False,
    ) -> KeywordRule:
        return KeywordRule(
            id=rule_id,
            name=name,
            type="keyword_block",
            keywords=keywords,
            fields=fields or ["title", "snippet"],
            match_strategy=match_strategy,
            case_sensitive=case_sensitive,
        )

    @staticmethod
    def create_keyword_require_rule(
        rule_id: str,
        name: str,
        keywords: list[str],
        fields: list[str] | None = None,
        match_strategy: MatchStrategy = MatchStrategy.CONTAINS,
        case_sensitive: bool = False,
    ) -> KeywordRule:
        return KeywordRule(
            id=rule_id,
            name=name,
            type="keyword_require",
            keywords=keywords,
            fields=fields or ["title", "snippet"],
            match_strategy=match_strategy,
            case_sensitive=case_sensitive,
        )

    @staticmethod
    def create_custom_rule(
        rule_id: str,
        name: str,
        predicate: Callable[[SearchResult], bool],
        mode: RuleMode = RuleMode.BLOCK,
    ) -> CustomRule:
        return CustomRule(id=rule_id, name=name, predicate=predicate, mode=mode)

    @staticmethod
    def create_filter_set(
        filter_set_id: str,
        name: str,
        rules: list[FilterRule],
        description: str = "",
    ) -> FilterSet:
        return FilterSet(
            id=filter_set_id, name=name, description=description, rules=rules
        )
