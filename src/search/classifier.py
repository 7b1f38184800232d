"""Query classification: keyword search vs natural-language (AI) search.

Heuristic, not ML. A trimmed query uses natural-language search when it is
longer than NL_LENGTH_THRESHOLD or contains one of the NL_INDICATORS tokens.
Queries shorter than NL_MIN_QUERY_LENGTH always use keyword search.

The indicator tokens are space-delimited (" for ", " with ", ...), so they only
match inside a query, never at its first or last word.
"""

from typing import Iterable, Optional

from src.models.models import SearchMode
from src.utils.config import config


def classify(
    query: str,
    length_threshold: Optional[int] = None,
    min_length: Optional[int] = None,
    indicators: Optional[Iterable[str]] = None,
) -> SearchMode:
    """Map a raw query string to a search mode.

    Pure and deterministic; call it on every query change.

    Args:
        query: Raw user input (trimmed here).
        length_threshold: Override for config.NL_LENGTH_THRESHOLD.
        min_length: Override for config.NL_MIN_QUERY_LENGTH.
        indicators: Override for config.NL_INDICATORS.

    Returns:
        SearchMode.NATURAL_LANGUAGE or SearchMode.KEYWORD.
    """
    if length_threshold is None:
        length_threshold = config.NL_LENGTH_THRESHOLD
    if min_length is None:
        min_length = config.NL_MIN_QUERY_LENGTH
    if indicators is None:
        indicators = config.NL_INDICATORS

    trimmed = (query or "").strip()
    if not trimmed or len(trimmed) < min_length:
        return SearchMode.KEYWORD

    if len(trimmed) > length_threshold:
        return SearchMode.NATURAL_LANGUAGE

    lowered = trimmed.lower()
    if any(indicator.lower() in lowered for indicator in indicators):
        return SearchMode.NATURAL_LANGUAGE

    return SearchMode.KEYWORD

