"""Keywords: tracked search terms for collection runs."""

from trend_monitor.keywords.repository import KeywordsRepository
from trend_monitor.keywords.schemas import VALID_CATEGORIES, Keyword, KeywordCategory

__all__ = [
    "Keyword",
    "KeywordCategory",
    "KeywordsRepository",
    "VALID_CATEGORIES",
]
