"""Base model definitions."""

from enum import Enum


class MatchReason(str, Enum):
    """Why a record was judged a duplicate of a kept record."""

    URL_MATCH = "url_match"
    TITLE_SIMILARITY = "title_similarity"


class SortDirection(str, Enum):
    """Sort directions."""

    ASC = "asc"
    DESC = "desc"


class FieldType(str, Enum):
    """Value types understood by the sort stage."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class ReadabilityLevel(str, Enum):
    """Readability bands derived from a reading-ease score."""

    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"
    VERY_DIFFICULT = "very difficult"
    UNKNOWN = "unknown"


class OrganizationType(str, Enum):
    """Organization types for content classification."""

    ACADEMIC = "academic"
    GOVERNMENT = "government"
    HEALTHCARE = "healthcare"
    COMMERCIAL = "commercial"
    NONPROFIT = "nonprofit"
    NEWS = "news"
    BLOG = "blog"
    UNKNOWN = "unknown"
