"""Favourites provider backed by the app's /api/recipes/favourite endpoint.

The endpoint returns {"results": [recipe, ...]} for the authenticated user.
Only the recipe ids are needed for reconciliation, but full recipes are kept so
callers can show a favourites list.
"""

import asyncio
from typing import Any, Optional

import aiohttp
from pydantic import ValidationError

from src.models.models import Recipe
from src.search.errors import SearchProviderError
from src.utils.config import config
from src.utils.logger import logger


def parse_favorites(body: Any) -> list[Recipe]:
    """Read recipes from a favourites response; malformed entries are skipped."""
    results = body.get("results") if isinstance(body, dict) else body
    if not isinstance(results, list):
        return []

    recipes: list[Recipe] = []
    for raw in results:
        if isinstance(raw, dict) and "id" not in raw and "recipeId" in raw:
            raw = {**raw, "id": raw["recipeId"]}
        try:
            recipes.append(Recipe.model_validate(raw))
        except ValidationError:
            logger.debug(f"Skipping malformed favourite entry: {raw!r}")
    return recipes


class FavoritesClient:
    """Loads the signed-in user's favourite recipes over HTTP."""

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ) -> None:
        """Initialize FavoritesClient.

        Raises:
            ValueError: If no favourites URL is configured.
        """
        self.url = url or config.FAVORITES_API_URL
        if not self.url:
            raise ValueError("FAVORITES_API_URL is required")
        self.token = token if token is not None else config.FAVORITES_API_TOKEN
        self.timeout_seconds = timeout_seconds or config.REQUEST_TIMEOUT_SECONDS

    async def list_favorites(self) -> list[Recipe]:
        """Fetch favourites.

        Raises:
            SearchProviderError: On HTTP error status or transport failure.
        """
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(self.url, headers=headers, timeout=timeout) as response:
                    if response.status >= 400:
                        raise SearchProviderError(
                            f"Favourites request failed with HTTP {response.status}",
                            status_code=response.status,
                        )
                    body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SearchProviderError(f"Favourites request failed: {str(e) or type(e).__name__}") from e

        return parse_favorites(body)
