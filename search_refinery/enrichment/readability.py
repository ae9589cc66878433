"""Readability scoring for result snippets."""

import re
from typing import Any

from ..models.base import ReadabilityLevel
from ..models.component import EnrichmentModule
from ..models.config import ReadabilityConfig
from ..models.results import ReadabilityInfo, SearchResult

SENTENCE_END_RE = re.compile(r"[.!?]+\s")
WORD_RE = re.compile(r"\b\w+\b")
VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")


def count_sentences(text: str) -> int:
    return len(SENTENCE_END_RE.findall(text)) + 1


def count_words(text: str) -> int:
    return len(WORD_RE.findall(text))


def estimate_syllables(text: str) -> int:
    """Estimate syllables as vowel groups per word, ignoring a silent final e."""
    total = 0
    for word in WORD_RE.findall(text.lower()):
        syllables = len(VOWEL_GROUP_RE.findall(word))
        if word.endswith("e") and syllables > 1:
            syllables -= 1
        total += max(1, syllables)
    return total


def flesch_reading_ease(text: str) -> float:
    """Flesch Reading Ease score clamped to [0, 100]."""
    sentences = count_sentences(text)
    words = count_words(text)
    if words == 0:
        return 0.0

    syllables = estimate_syllables(text)
    score = 206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)
    return max(0.0, min(100.0, score))


class ReadabilityModule(EnrichmentModule[ReadabilityConfig]):
    """Scores how easy a result's text is to read."""

    batch_processing = True

    def __init__(self, config: ReadabilityConfig | dict[str, Any] | None = None):
        if isinstance(config, dict):
            config = ReadabilityConfig.model_validate(config)
        super().__init__(
            module_id="readability",
            name="Readability Analysis",
            config=config or ReadabilityConfig(),
            description="Analyzes content readability and provides scoring",
        )

    def level_for(self, score: float) -> ReadabilityLevel:
        thresholds = self.config.score_thresholds
        if score >= thresholds.easy:
            return ReadabilityLevel.EASY
        if score >= thresholds.moderate:
            return ReadabilityLevel.MODERATE
        if score >= thresholds.difficult:
            return ReadabilityLevel.DIFFICULT
        return ReadabilityLevel.VERY_DIFFICULT

    def _text_to_analyze(self, result: SearchResult) -> str:
        if self.config.apply_to_snippets_only or not result.title:
            return result.snippet
        if not result.snippet:
            return result.title
        return f"{result.title}. {result.snippet}"

    async def process(self, result: SearchResult) -> SearchResult:
        text = self._text_to_analyze(result)

        if len(text) < self.config.min_characters_for_analysis:
            info = ReadabilityInfo(analyzed=False, reason="insufficient content")
        else:
            score = flesch_reading_ease(text)
            info = ReadabilityInfo(
                score=score,
                level=self.level_for(score),
                analyzed=True,
                text_length=len(text),
                sentence_count=count_sentences(text),
                word_count=count_words(text),
            )

        return result.with_metadata("readability", info.model_dump(mode="json"))
