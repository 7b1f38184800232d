"""Search error types and classification into the user-facing taxonomy.

Providers raise the exceptions defined here (or whatever their HTTP client
raises); classify_error() maps any exception onto one ErrorKind, and each kind
has exactly one notification message.

Kinds:
- quota-exceeded: HTTP 402 or a points/daily-limit message. Never retried.
- ai-search-unavailable: the natural-language provider or its model failed.
  Retried once in keyword mode.
- generic-search-failure: everything else. Never retried.
"""

from typing import Optional

from src.models.models import ErrorKind, SearchFailure
from src.utils.logger import logger


class SearchProviderError(Exception):
    """A provider call failed.

    Attributes:
        status_code: HTTP status or API error code, if the provider reported one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class QuotaExceededError(SearchProviderError):
    """Spoonacular answered 402: the daily points limit is spent."""

    def __init__(self, message: str = "All API keys have reached their daily limit") -> None:
        super().__init__(message, status_code=402)


class AISearchError(SearchProviderError):
    """The natural-language search provider failed (model call or parsing)."""


QUOTA_PHRASES = ("points limit", "daily limit", "quota", "limit reached")
AI_PHRASES = ("ai search", "openrouter", "gemini")

USER_MESSAGES = {
    ErrorKind.QUOTA_EXCEEDED: "Daily API limit reached. Please try again later or upgrade your plan.",
    ErrorKind.AI_SEARCH_UNAVAILABLE: "AI search unavailable. Using regular search instead.",
    ErrorKind.GENERIC_SEARCH_FAILURE: "Failed to search recipes. Please try again.",
}


def _status_code(error: BaseException) -> Optional[int]:
    # SearchProviderError.status_code, aiohttp.ClientResponseError.status
    for attr in ("status_code", "status", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_error(error: BaseException) -> ErrorKind:
    """Map a raised provider error onto the closed error taxonomy.

    A 402 always wins: Spoonacular quota errors raised from inside the
    natural-language provider are still quota errors. An AISearchError without
    402 (e.g. a Gemini rate limit) stays ai-search-unavailable.
    """
    message = str(error).lower()

    if _status_code(error) == 402:
        return ErrorKind.QUOTA_EXCEEDED
    if isinstance(error, AISearchError):
        return ErrorKind.AI_SEARCH_UNAVAILABLE
    if any(phrase in message for phrase in QUOTA_PHRASES):
        return ErrorKind.QUOTA_EXCEEDED
    if any(phrase in message for phrase in AI_PHRASES):
        return ErrorKind.AI_SEARCH_UNAVAILABLE
    return ErrorKind.GENERIC_SEARCH_FAILURE


def user_message(kind: ErrorKind) -> str:
    return USER_MESSAGES[kind]


def should_fallback_to_keyword(kind: ErrorKind) -> bool:
    """Only a natural-language failure is retried, once, as a keyword search."""
    return kind is ErrorKind.AI_SEARCH_UNAVAILABLE


def to_failure(error: BaseException) -> SearchFailure:
    """Classify an error and build the Failure outcome shown to the user."""
    kind = classify_error(error)
    logger.warning(f"Search failed ({kind.value}): {error}")
    return SearchFailure(kind=kind, message=user_message(kind), detail=str(error) or type(error).__name__)
