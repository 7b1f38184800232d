"""Spoonacular keyword search provider with API key rotation.

This module provides the SpoonacularClient class used as the keyword search
provider: complexSearch with pagination and advanced filters, plus
informationBulk for loading recipes by id.

The free Spoonacular plan allows a small number of points per day. When a key
answers HTTP 402 it is marked exhausted and the request is replayed with the
next fallback key; once every key is spent QuotaExceededError is raised.
"""

import asyncio
from typing import Any, Iterable, Mapping, Optional

import aiohttp

from src.search.errors import QuotaExceededError, SearchProviderError
from src.search.filters import to_query_params
from src.utils.config import config
from src.utils.logger import logger


class ApiKeyPool:
    """Primary + fallback Spoonacular keys with per-key usage and exhaustion tracking.

    Tracking is in memory only and resets with the process, like the daily
    points window it approximates.
    """

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys: list[str] = []
        for key in keys:
            if key and key not in self.keys:
                self.keys.append(key)
        self.usage: dict[str, int] = {key: 0 for key in self.keys}
        self.exhausted: set[str] = set()

    def current(self) -> Optional[str]:
        """First key that has not hit its limit, or None when all are spent."""
        for key in self.keys:
            if key not in self.exhausted:
                return key
        return None

    def mark_used(self, key: str) -> None:
        self.usage[key] = self.usage.get(key, 0) + 1

    def mark_exhausted(self, key: str) -> None:
        self.exhausted.add(key)

    def reset(self) -> None:
        self.exhausted.clear()
        self.usage = {key: 0 for key in self.keys}

    @property
    def all_exhausted(self) -> bool:
        return self.current() is None


class SpoonacularClient:
    """Async client for the Spoonacular recipe API (keyword search provider)."""

    def __init__(
        self,
        api_key: str,
        fallback_keys: Optional[list[str]] = None,
        base_url: Optional[str] = None,
        recipes_per_page: Optional[int] = None,
        timeout_seconds: Optional[int] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Initialize SpoonacularClient with configuration.

        Args:
            api_key: Primary Spoonacular API key.
            fallback_keys: Keys tried in order once the primary key hits its limit.
            base_url: API root. Defaults to config.SPOONACULAR_BASE_URL.
            recipes_per_page: Results per keyword page. Defaults to config.RECIPES_PER_PAGE.
            timeout_seconds: Total timeout per HTTP call. Defaults to config.REQUEST_TIMEOUT_SECONDS.
            session: Optional shared aiohttp session; a short-lived one is used per call otherwise.

        Raises:
            ValueError: If api_key is None or empty string.
        """
        if not api_key:
            raise ValueError("SPOONACULAR_API_KEY is required")

        self.keys = ApiKeyPool([api_key, *(fallback_keys or [])])
        self.base_url = (base_url or config.SPOONACULAR_BASE_URL).rstrip("/")
        self.recipes_per_page = recipes_per_page or config.RECIPES_PER_PAGE
        self.timeout_seconds = timeout_seconds or config.REQUEST_TIMEOUT_SECONDS
        self._session = session

    @classmethod
    def from_config(cls) -> "SpoonacularClient":
        return cls(api_key=config.SPOONACULAR_API_KEY, fallback_keys=config.SPOONACULAR_FALLBACK_KEYS)

    async def _request(self, path: str, params: Mapping[str, str]) -> tuple[int, Any]:
        """Single GET request. Returns (HTTP status, decoded JSON body)."""
        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        async def _send(session: aiohttp.ClientSession) -> tuple[int, Any]:
            async with session.get(url, params=dict(params), timeout=timeout) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = {"message": (await response.text())[:200]}
                return response.status, body

        try:
            if self._session is not None:
                return await _send(self._session)
            async with aiohttp.ClientSession() as session:
                return await _send(session)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SearchProviderError(f"Spoonacular request failed: {str(e) or type(e).__name__}") from e

    async def _get(self, path: str, params: Mapping[str, str]) -> Any:
        """GET with key rotation on HTTP 402.

        Raises:
            QuotaExceededError: If every configured key has reached its daily limit.
            SearchProviderError: For any other HTTP or transport failure.
        """
        while True:
            key = self.keys.current()
            if key is None:
                logger.error("All Spoonacular API keys have reached their daily limit")
                raise QuotaExceededError()

            status, body = await self._request(path, {**params, "apiKey": key})
            error_code = body.get("code") if isinstance(body, dict) else None

            if status == 402 or error_code == 402:
                self.keys.mark_exhausted(key)
                remaining = len(self.keys.keys) - len(self.keys.exhausted)
                logger.warning(f"Spoonacular key hit its daily limit, {remaining} fallback key(s) left")
                continue

            if status >= 400:
                message = body.get("message") if isinstance(body, dict) else None
                raise SearchProviderError(
                    message or f"Spoonacular request failed with HTTP {status}",
                    status_code=status,
                )

            self.keys.mark_used(key)
            return body

    def build_search_params(
        self,
        query: str,
        page: int = 1,
        filters: Optional[Mapping[str, Any]] = None,
        number: Optional[int] = None,
    ) -> dict[str, str]:
        """complexSearch parameters for one page (page 1 = offset 0)."""
        number = number or self.recipes_per_page
        params = {
            "query": query,
            "number": str(number),
            "offset": str((page - 1) * number),
            "fillIngredients": "true",
            "addRecipeInformation": "true",
            "addRecipeNutrition": "true",
        }
        params.update(to_query_params(filters))
        return params

    async def search(self, query: str, page: int = 1, filters: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Keyword search, one page of results.

        Returns:
            complexSearch body: {"results": [...], "totalResults": int, "offset": int, "number": int}
        """
        if page < 1:
            raise ValueError(f"page must be at least 1, got: {page}")
        return await self._get("/recipes/complexSearch", self.build_search_params(query, page, filters))

    async def complex_search(self, params: Mapping[str, Any], number: Optional[int] = None) -> dict[str, Any]:
        """First page of complexSearch with already-built parameters (natural-language search)."""
        query = str(params.get("query") or "")
        extra = {key: str(value) for key, value in params.items() if key != "query" and value is not None}
        request_params = self.build_search_params(query, 1, None, number)
        request_params.update(extra)
        return await self._get("/recipes/complexSearch", request_params)

    async def get_recipes_by_ids(self, recipe_ids: Iterable[int]) -> list[dict[str, Any]]:
        """Load full recipe information for several ids in one informationBulk call."""
        ids = [str(recipe_id) for recipe_id in recipe_ids]
        if not ids:
            return []
        body = await self._get("/recipes/informationBulk", {"ids": ",".join(ids)})
        return body if isinstance(body, list) else []
