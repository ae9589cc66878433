"""Content type, file type, date, language and organization detection."""

import re
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

import dateparser

from ..models.base import OrganizationType
from ..models.component import EnrichmentModule
from ..models.config import ContentTypeConfig
from ..models.results import ContentTypeInfo, SearchResult

FILE_TYPE_EXTENSIONS = {
    "pdf": [".pdf"],
    "word": [".doc", ".docx"],
    "excel": [".xls", ".xlsx"],
    "powerpoint": [".ppt", ".pptx"],
    "image": [".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp"],
    "video": [".mp4", ".mov", ".avi", ".wmv", ".webm"],
    "audio": [".mp3", ".wav", ".ogg", ".aac"],
    "html": [".html", ".htm"],
    "text": [".txt", ".md", ".rtf"],
    "xml": [".xml"],
    "json": [".json"],
    "archive": [".zip", ".rar", ".tar", ".gz", ".7z"],
}

# Substrings of a URL path that hint at a file type without an extension
FILE_TYPE_HINTS = [
    (("pdf", "document"), "pdf"),
    (("presentation", "slides"), "powerpoint"),
    (("spreadsheet", "excel"), "excel"),
]

CONTENT_TYPE_PATTERNS = {
    "research_paper": {
        "url": [
            re.compile(r"/doi/", re.I),
            re.compile(r"/abs/", re.I),
            re.compile(r"/article/", re.I),
            re.compile(r"/(pdf|pdfx)$", re.I),
            re.compile(r"research|paper|journal|study|publication", re.I),
        ],
        "snippet": [
            re.compile(
                r"abstract|conclusion|methodology|doi:|cited by|references|\d+\s*citations",
                re.I,
            ),
            re.compile(r"published in|volume|issue|pages|journal of|research in", re.I),
        ],
    },
    "clinical_guideline": {
        "url": [
            re.compile(r"guideline|recommendation|standard|protocol|clinical|medical", re.I),
            re.compile(r"/guidelines?/|/recommendations?/|/standards?/", re.I),
        ],
        "snippet": [
            re.compile(
                r"clinical guideline|practice guideline|recommendation|standard of care", re.I
            ),
            re.compile(
                r"treatment protocol|clinical protocol|care pathway|best practice", re.I
            ),
        ],
    },
    "government_report": {
        "url": [
            re.compile(r"\.gov/"),
            re.compile(r"/report/|/reports/|/publication/|/documents/", re.I),
            re.compile(r"government|agency|department|ministry|commission|authority", re.I),
        ],
        "snippet": [
            re.compile(
                r"official report|government publication|public document|whitepaper", re.I
            ),
            re.compile(r"agency|department|ministry|commission|federal|state|policy", re.I),
        ],
    },
    "case_study": {
        "url": [re.compile(r"case[-\s]?study|case[-\s]?report|case[-\s]?series", re.I)],
        "snippet": [
            re.compile(
                r"case study|case report|case series|case presentation|patient case", re.I
            ),
            re.compile(
                r"year-old|presented with|diagnosed with|treatment of|follow-up", re.I
            ),
        ],
    },
    "news_article": {
        "url": [
            re.compile(r"news|article|press|release|story", re.I),
            re.compile(r"/\d{4}/\d{1,2}/\d{1,2}/"),
        ],
        "snippet": [
            re.compile(
                r"published on|posted on|by reporter|news|article|today|yesterday", re.I
            ),
            re.compile(
                r"according to|reports?|announced|stated|disclosed|revealed", re.I
            ),
        ],
    },
    "blog_post": {
        "url": [re.compile(r"blog|post|article", re.I)],
        "snippet": [
            re.compile(r"blog post|posted by|written by|author|comment|opinion", re.I)
        ],
    },
}

ACADEMIC_URL_PATTERNS = [
    re.compile(r"\.edu/", re.I),
    re.compile(r"\.ac\.(uk|jp|nz|au|in)/", re.I),
    re.compile(r"/doi/", re.I),
    re.compile(r"/article/", re.I),
    re.compile(r"/abs/", re.I),
    re.compile(r"/publication/", re.I),
    re.compile(r"/journals?/", re.I),
    re.compile(r"/proceedings/", re.I),
    re.compile(r"/conference/", re.I),
    re.compile(r"/papers?/", re.I),
    re.compile(r"/research/", re.I),
]

ACADEMIC_SNIPPET_PATTERNS = [
    re.compile(r"abstract|methodology|conclusion|references|bibliography", re.I),
    re.compile(r"doi:|cited by|citations?|et al\.", re.I),
    re.compile(
        r"journal of|university|professor|researcher|academic|study|published in", re.I
    ),
    re.compile(r"volume \d+|issue \d+|pp\. \d+(-\d+)?", re.I),
]

LANGUAGE_PATTERNS = {
    "en": re.compile(r"\b(the|and|in|to|of|a|for|is|that|this|you|are)\b", re.I),
    "es": re.compile(r"\b(el|la|los|las|de|en|y|por|que|es|con|para)\b", re.I),
    "fr": re.compile(r"\b(le|la|les|des|en|du|un|une|et|pour|est|dans)\b", re.I),
    "de": re.compile(r"\b(der|die|das|und|in|zu|den|für|ist|auf|dem|von)\b", re.I),
}

ORGANIZATION_PATTERNS = {
    OrganizationType.ACADEMIC: {
        "url": [re.compile(r"\.edu|\.ac\.|university|college|academy|institute|school", re.I)],
        "snippet": [
            re.compile(r"university|college|faculty|professor|student|academic|research", re.I)
        ],
    },
    OrganizationType.GOVERNMENT: {
        "url": [
            re.compile(r"\.gov|government|agency|department|ministry|commission|authority", re.I)
        ],
        "snippet": [
            re.compile(
                r"government|agency|department|ministry|federal|state|policy|regulation|law",
                re.I,
            )
        ],
    },
    OrganizationType.HEALTHCARE: {
        "url": [re.compile(r"hospital|clinic|medical|health|care|patient|doctor|physician", re.I)],
        "snippet": [
            re.compile(
                r"hospital|clinic|patient|doctor|medical|health|care|treatment|diagnosis", re.I
            )
        ],
    },
    OrganizationType.COMMERCIAL: {
        "url": [
            re.compile(
                r"\.com|company|business|corporate|enterprise|industry|product|service", re.I
            )
        ],
        "snippet": [
            re.compile(
                r"company|business|product|service|market|customer|price|commercial|industry",
                re.I,
            )
        ],
    },
    OrganizationType.NONPROFIT: {
        "url": [
            re.compile(
                r"\.org|nonprofit|non-profit|organization|foundation|charity|association", re.I
            )
        ],
        "snippet": [
            re.compile(
                r"nonprofit|non-profit|organization|foundation|charity|donation|volunteer", re.I
            )
        ],
    },
    OrganizationType.NEWS: {
        "url": [
            re.compile(r"news|times|herald|post|gazette|journal|tribune|daily|weekly", re.I)
        ],
        "snippet": [
            re.compile(
                r"reported|journalist|article|news|story|editor|press|media|publication", re.I
            )
        ],
    },
    OrganizationType.BLOG: {
        "url": [re.compile(r"blog|wordpress|blogger|medium|post|article", re.I)],
        "snippet": [
            re.compile(r"blog|post|author|comment|opinion|my thoughts|personal", re.I)
        ],
    },
}

_MONTHS = (
    "January|February|March|April|May|June|July|August|September|October|"
    "November|December"
)
_SHORT_MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"

# (kind, pattern, confidence), tried in order
DATE_PATTERNS = [
    ("iso", re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b"), 0.9),
    (
        "month_name",
        re.compile(rf"\b({_MONTHS})\s+(\d{{1,2}})(?:st|nd|rd|th)?,\s+(\d{{4}})\b", re.I),
        0.8,
    ),
    (
        "month_name",
        re.compile(
            rf"\b({_SHORT_MONTHS})\s+(\d{{1,2}})(?:st|nd|rd|th)?,\s+(\d{{4}})\b", re.I
        ),
        0.8,
    ),
    (
        "published_on",
        re.compile(
            r"\b(?:published|posted|updated)\s+on\s+(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})\b",
            re.I,
        ),
        0.7,
    ),
    ("year", re.compile(r"\b(20\d{2})\b"), 0.3),
]


def _pattern_confidence(score: int, total: int) -> float:
    return min(0.9, score / total * 0.9 + 0.1)


def _score_patterns(
    url: str, snippet: str, patterns: dict[str, list[re.Pattern]]
) -> tuple[int, int]:
    """Count pattern hits over URL and snippet, returning (hits, total patterns)."""
    score = 0
    if url:
        score += sum(1 for pattern in patterns["url"] if pattern.search(url))
    if snippet:
        score += sum(1 for pattern in patterns["snippet"] if pattern.search(snippet))
    return score, len(patterns["url"]) + len(patterns["snippet"])


def detect_file_type(url: str) -> tuple[str, float] | None:
    """Detect a file type from the URL path."""
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return None

    for file_type, extensions in FILE_TYPE_EXTENSIONS.items():
        if path.endswith(tuple(extensions)):
            return file_type, 0.9

    for hints, file_type in FILE_TYPE_HINTS:
        if any(hint in path for hint in hints):
            return file_type, 0.6

    # Extensionless paths are regular web pages
    if "." not in path:
        return "html", 0.5

    return None


def detect_content_type(url: str, snippet: str) -> tuple[str, float] | None:
    best = None
    for content_type, patterns in CONTENT_TYPE_PATTERNS.items():
        score, total = _score_patterns(url, snippet, patterns)
        if score > 0:
            confidence = _pattern_confidence(score, total)
            if best is None or confidence > best[1]:
                best = (content_type, confidence)
    return best


def detect_academic(url: str, snippet: str) -> tuple[bool, float] | None:
    """Flag academic content; at least two indicator hits are required."""
    patterns = {"url": ACADEMIC_URL_PATTERNS, "snippet": ACADEMIC_SNIPPET_PATTERNS}
    score, total = _score_patterns(url, snippet, patterns)
    if score == 0:
        return None
    return score >= 2, _pattern_confidence(score, total)


def _build_date(kind: str, groups: tuple[str, ...]) -> datetime | None:
    if kind == "iso":
        year, month, day = (int(g) for g in groups)
        return datetime(year, month, day)

    if kind == "month_name":
        month, day, year = groups
        parsed = dateparser.parse(
            f"{month} {day} {year}", languages=["en"], settings={"STRICT_PARSING": True}
        )
        if parsed is None:
            return None
        return datetime(parsed.year, parsed.month, parsed.day)

    if kind == "published_on":
        first, second, year = (int(g) for g in groups)
        # Read as MM/DD/YYYY unless the first part cannot be a month
        if first <= 12:
            return datetime(year, first, second)
        return datetime(year, second, first)

    return datetime(int(groups[0]), 1, 1)


def extract_publication_date(title: str, snippet: str) -> tuple[datetime, float] | None:
    """Extract the first plausible publication date from title and snippet."""
    text = f"{title} {snippet}"
    current_year = datetime.now().year

    for kind, pattern, confidence in DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            date = _build_date(kind, match.groups())
        except ValueError:
            continue
        if date is not None and 1900 <= date.year <= current_year:
            return date, confidence

    return None


def detect_language(title: str, snippet: str) -> tuple[str, float] | None:
    """Guess the language from stop-word frequency."""
    text = f"{title} {snippet}"
    best = None
    for language, pattern in LANGUAGE_PATTERNS.items():
        matches = len(pattern.findall(text))
        if matches > 0:
            confidence = min(0.9, matches / 10 * 0.8 + 0.1)
            if best is None or confidence > best[1]:
                best = (language, confidence)
    return best


def identify_organization_type(url: str, snippet: str) -> tuple[OrganizationType, float]:
    best = None
    for organization_type, patterns in ORGANIZATION_PATTERNS.items():
        score, total = _score_patterns(url, snippet, patterns)
        if score > 0:
            confidence = _pattern_confidence(score, total)
            if best is None or confidence > best[1]:
                best = (organization_type, confidence)
    return best or (OrganizationType.UNKNOWN, 0.1)


class ContentTypeModule(EnrichmentModule[ContentTypeConfig]):
    """Detects file types, content types and publication details."""

    batch_processing = True

    def __init__(self, config: ContentTypeConfig | dict[str, Any] | None = None):
        if isinstance(config, dict):
            config = ContentTypeConfig.model_validate(config)
        super().__init__(
            module_id="content-type",
            name="Content Type Detector",
            config=config or ContentTypeConfig(),
            description=(
                "Detects file types, content types, and other metadata "
                "from search results"
            ),
        )

    async def process(self, result: SearchResult) -> SearchResult:
        config = self.config
        url = result.url
        snippet = result.snippet
        info = ContentTypeInfo(calculated_at=datetime.now(UTC))

        if config.detect_from_url and url:
            file_type = detect_file_type(url)
            if file_type:
                info.file_type, info.confidence["file_type"] = file_type

        content_url = url if config.detect_from_url else ""
        content_snippet = snippet if config.detect_from_snippet else ""
        if content_url or content_snippet:
            content_type = detect_content_type(content_url, content_snippet)
            if content_type:
                info.content_type, info.confidence["content_type"] = content_type

        if config.identify_academic and (url or snippet):
            academic = detect_academic(url, snippet)
            if academic:
                info.is_academic, info.confidence["is_academic"] = academic

        if config.extract_dates and (snippet or result.title):
            publication = extract_publication_date(result.title, snippet)
            if publication:
                info.publication_date, info.confidence["publication_date"] = publication
                info.publication_year = info.publication_date.year

        if config.detect_language and (snippet or result.title):
            language = detect_language(result.title, snippet)
            if language:
                info.language, info.confidence["language"] = language

        if config.identify_organization_type and (url or snippet):
            organization = identify_organization_type(url, snippet)
            info.organization_type, info.confidence["organization_type"] = organization

        return result.with_metadata("content_type", info.model_dump(mode="json"))
