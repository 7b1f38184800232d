"""Unit tests for favourite reconciliation and the favourites store."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.models import Recipe
from src.search.favorites import FAVORITES_LOAD_FAILED, FavoritesStore, annotate


def recipes(*ids):
    return [Recipe(id=recipe_id, title=f"Recipe {recipe_id}") for recipe_id in ids]


class TestAnnotate:
    """Test annotate()."""

    def test_flags_favourites_in_order(self):
        annotated = annotate(recipes(3, 1, 2), {1})

        assert [(a.recipe.id, a.is_favorite) for a in annotated] == [(3, False), (1, True), (2, False)]

    def test_accepts_any_iterable_of_ids(self):
        annotated = annotate(recipes(1, 2), [2])

        assert [a.is_favorite for a in annotated] == [False, True]

    def test_empty_inputs(self):
        assert annotate([], {1, 2}) == []
        assert [a.is_favorite for a in annotate(recipes(1), set())] == [False]

    def test_annotation_unpacks(self):
        recipe, is_favorite = annotate(recipes(7), {7})[0]

        assert recipe.id == 7
        assert is_favorite is True


class TestFavoritesStore:
    """Test FavoritesStore loading."""

    @pytest.mark.asyncio
    async def test_load_replaces_ids(self):
        provider = MagicMock()
        provider.list_favorites = AsyncMock(return_value=recipes(1, 2))
        store = FavoritesStore(provider)

        ids = await store.load()

        assert ids == frozenset({1, 2})
        assert store.loaded is True
        assert store.is_favorite(1)
        assert not store.is_favorite(3)

    @pytest.mark.asyncio
    async def test_failed_load_keeps_previous_ids_and_notifies(self):
        provider = MagicMock()
        provider.list_favorites = AsyncMock(side_effect=RuntimeError("HTTP 500"))
        notify = MagicMock()
        store = FavoritesStore(provider, notify=notify)
        store.replace([5])

        ids = await store.load()

        assert ids == frozenset({5})
        notify.assert_called_once_with("error", FAVORITES_LOAD_FAILED)

    @pytest.mark.asyncio
    async def test_no_provider_is_noop(self):
        store = FavoritesStore()

        assert await store.load() == frozenset()
        assert store.loaded is False

    @pytest.mark.asyncio
    async def test_second_load_replaces_ids(self):
        provider = MagicMock()
        provider.list_favorites = AsyncMock(side_effect=[recipes(1), recipes(1, 2)])
        store = FavoritesStore(provider)

        await store.load()
        await store.load()

        assert store.ids == frozenset({1, 2})
        assert provider.list_favorites.await_count == 2
