"""Configuration management for Recipe Search Engine.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


DEFAULT_NL_INDICATORS = (
    " for ",
    " with ",
    " without ",
    " healthy ",
    " quick ",
    " easy ",
    " dinner ",
    " lunch ",
    " breakfast ",
    " snack ",
    " vegetarian ",
    " vegan ",
    " gluten-free ",
    " under ",
    " less than ",
    " minutes ",
)


def _split_csv(value: Optional[str]) -> list[str]:
    """Split a comma-separated env value, dropping blanks and surrounding quotes."""
    if not value:
        return []
    return [item.strip().strip("\"'") for item in value.split(",") if item.strip().strip("\"'")]


def _parse_indicators(value: Optional[str]) -> tuple[str, ...]:
    """Parse NL_INDICATORS override. Each word is padded with spaces to match whole tokens."""
    words = _split_csv(value)
    if not words:
        return DEFAULT_NL_INDICATORS
    return tuple(f" {word.lower()} " for word in words)


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Spoonacular API Key: primary key for keyword search
        self.SPOONACULAR_API_KEY: str = os.getenv("SPOONACULAR_API_KEY", "").strip("\"'")
        # Fallback keys used once the primary key hits its daily points limit.
        # Accepts SPOONACULAR_FALLBACK_KEYS (comma separated) and SPOONACULAR_API_KEY_2..10
        self.SPOONACULAR_FALLBACK_KEYS: list[str] = self._load_fallback_keys()
        self.SPOONACULAR_BASE_URL: str = os.getenv("SPOONACULAR_BASE_URL", "https://api.spoonacular.com")
        # Recipes per keyword page. Default: 24 (6 rows of 4 cards)
        self.RECIPES_PER_PAGE: int = int(os.getenv("RECIPES_PER_PAGE", "24"))
        # HTTP timeout for every provider call, in seconds. Default: 10
        self.REQUEST_TIMEOUT_SECONDS: int = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

        # Natural-language search (Gemini extracts search parameters from the sentence)
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite")
        # Maximum recipes returned by one natural-language search. Default: 24
        self.AI_SEARCH_MAX_RESULTS: int = int(os.getenv("AI_SEARCH_MAX_RESULTS", "24"))

        # Favourites endpoint of the app backend and the bearer token used to call it
        self.FAVORITES_API_URL: Optional[str] = os.getenv("FAVORITES_API_URL")
        self.FAVORITES_API_TOKEN: Optional[str] = os.getenv("FAVORITES_API_TOKEN")

        # Query classification heuristic
        # NL_LENGTH_THRESHOLD: trimmed queries longer than this use natural-language search
        self.NL_LENGTH_THRESHOLD: int = int(os.getenv("NL_LENGTH_THRESHOLD", "15"))
        # NL_MIN_QUERY_LENGTH: trimmed queries shorter than this always use keyword search
        self.NL_MIN_QUERY_LENGTH: int = int(os.getenv("NL_MIN_QUERY_LENGTH", "3"))
        # NL_INDICATORS: comma separated words that mark a natural-language query
        self.NL_INDICATORS: tuple[str, ...] = _parse_indicators(os.getenv("NL_INDICATORS"))
        # Keyword used when only filters are applied (the provider rejects an empty query)
        self.FILTER_ONLY_PLACEHOLDER: str = os.getenv("FILTER_ONLY_PLACEHOLDER", "recipes")

    @staticmethod
    def _load_fallback_keys() -> list[str]:
        keys = _split_csv(os.getenv("SPOONACULAR_FALLBACK_KEYS"))
        for index in range(2, 11):
            key = os.getenv(f"SPOONACULAR_API_KEY_{index}", "").strip().strip("\"'")
            if key and key not in keys:
                keys.append(key)
        return keys

    def validate(self) -> None:
        """Validate configuration values.

        API keys are not required here: providers check their own credentials
        when they are constructed.

        Raises:
            ValueError: If invalid values provided.
        """
        if self.RECIPES_PER_PAGE < 1:
            raise ValueError(f"RECIPES_PER_PAGE must be at least 1, got: {self.RECIPES_PER_PAGE}")
        if self.REQUEST_TIMEOUT_SECONDS < 1:
            raise ValueError(
                f"REQUEST_TIMEOUT_SECONDS must be at least 1 second, got: {self.REQUEST_TIMEOUT_SECONDS}"
            )
        if self.AI_SEARCH_MAX_RESULTS < 1:
            raise ValueError(f"AI_SEARCH_MAX_RESULTS must be at least 1, got: {self.AI_SEARCH_MAX_RESULTS}")
        if self.NL_MIN_QUERY_LENGTH < 0:
            raise ValueError(f"NL_MIN_QUERY_LENGTH must not be negative, got: {self.NL_MIN_QUERY_LENGTH}")
        if self.NL_MIN_QUERY_LENGTH > self.NL_LENGTH_THRESHOLD:
            raise ValueError(
                f"NL_MIN_QUERY_LENGTH ({self.NL_MIN_QUERY_LENGTH}) must not exceed "
                f"NL_LENGTH_THRESHOLD ({self.NL_LENGTH_THRESHOLD})"
            )
        if not self.FILTER_ONLY_PLACEHOLDER.strip():
            raise ValueError("FILTER_ONLY_PLACEHOLDER must not be empty")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
