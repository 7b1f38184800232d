"""Favourite reconciliation.

annotate() flags each accumulated recipe with whether it is a favourite. It is
recomputed on every call because favourites load on their own cadence (right
after login) independently of search results.

FavoritesStore is the single writer of the favourite id set.
"""

from typing import Callable, Iterable, Optional, Protocol

from src.models.models import FavoriteAnnotation, Recipe
from src.utils.logger import logger

FAVORITES_LOAD_FAILED = "Failed to load favourite recipes."


class FavoritesProvider(Protocol):
    async def list_favorites(self) -> list[Recipe]: ...


def annotate(items: Iterable[Recipe], favorites: Iterable[int]) -> list[FavoriteAnnotation]:
    """Pair each recipe with its is-favourite flag. Order is preserved."""
    favorite_ids = favorites if isinstance(favorites, (set, frozenset)) else set(favorites)
    return [FavoriteAnnotation(recipe, recipe.id in favorite_ids) for recipe in items]


class FavoritesStore:
    """Holds the user's favourite recipe ids, loaded from a FavoritesProvider."""

    def __init__(
        self,
        provider: Optional[FavoritesProvider] = None,
        notify: Optional[Callable[[str, str], None]] = None,
    ) -> None:
        self.provider = provider
        self._notify = notify
        self._ids: frozenset[int] = frozenset()
        self._loaded = False

    @property
    def ids(self) -> frozenset[int]:
        return self._ids

    @property
    def loaded(self) -> bool:
        return self._loaded

    def is_favorite(self, recipe_id: int) -> bool:
        return recipe_id in self._ids

    def replace(self, recipe_ids: Iterable[int]) -> None:
        self._ids = frozenset(recipe_ids)
        self._loaded = True

    async def load(self) -> frozenset[int]:
        """Fetch favourites from the provider.

        On failure the previous set is kept and the user is notified once.

        Returns:
            The favourite id set after loading.
        """
        if self.provider is None:
            logger.debug("No favourites provider configured, skipping load")
            return self._ids

        try:
            recipes = await self.provider.list_favorites()
        except Exception as e:
            logger.warning(f"Favourites load failed: {e}")
            if self._notify:
                self._notify("error", FAVORITES_LOAD_FAILED)
            return self._ids

        self.replace(recipe.id for recipe in recipes)
        logger.info(f"Loaded {len(self._ids)} favourite recipes")
        return self._ids
