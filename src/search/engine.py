"""Recipe search session: the state container the UI talks to.

RecipeSearchEngine owns the live query, filters, page and selected tab, and
wires QueryClassifier, SearchRequestCoordinator, ResultAccumulator and
FavoritesStore together:

    set_query / update_filter  ->  page back to 1, accumulator epoch reset
    search / load_more         ->  classify -> coordinator -> accumulator.merge
    results                    ->  accumulated recipes annotated with favourites

Every merge uses the query, filters and accumulator generation captured when
the request was issued, so a response that arrives after the user changed the
query is discarded by the accumulator instead of leaking into the new result
list, including when the user has typed their way back to the same query.
"""

from typing import Any, Callable, Mapping, Optional

from src.models.models import AccumulatedState, FavoriteAnnotation, SearchFailure, SearchMode
from src.search.accumulator import ResultAccumulator
from src.search.classifier import classify
from src.search.coordinator import (
    SEARCH_TAB,
    KeywordSearchProvider,
    NaturalLanguageSearchProvider,
    SearchRequestCoordinator,
)
from src.search.favorites import FavoritesProvider, FavoritesStore, annotate
from src.search.filters import FilterState
from src.utils.logger import logger

Notifier = Callable[[str, str], None]


def log_notifier(level: str, message: str) -> None:
    """Default notifier: user notifications go to the log."""
    if level == "error":
        logger.error(message)
    elif level == "warning":
        logger.warning(message)
    else:
        logger.info(message)


class RecipeSearchEngine:
    """Incremental recipe search with accumulation, favourites and error notifications."""

    def __init__(
        self,
        keyword_provider: KeywordSearchProvider,
        ai_provider: Optional[NaturalLanguageSearchProvider] = None,
        favorites_provider: Optional[FavoritesProvider] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.notify: Notifier = notifier or log_notifier
        self.filters = FilterState()
        self.accumulator = ResultAccumulator()
        self.coordinator = SearchRequestCoordinator(
            keyword_provider,
            ai_provider,
            on_failure=self._on_failure,
        )
        self.favorites = FavoritesStore(favorites_provider, notify=self.notify)
        self._query = ""
        self._page = 1
        self._tab = SEARCH_TAB

    @property
    def query(self) -> str:
        return self._query

    @property
    def page(self) -> int:
        return self._page

    @property
    def tab(self) -> str:
        return self._tab

    @property
    def mode(self) -> SearchMode:
        return classify(self._query)

    @property
    def state(self) -> AccumulatedState:
        return self.accumulator.state

    @property
    def is_loading(self) -> bool:
        return self.coordinator.is_loading

    @property
    def is_enabled(self) -> bool:
        return self.coordinator.is_enabled(self._query, self.filters.as_dict(), self._tab)

    def _on_failure(self, failure: SearchFailure) -> None:
        self.notify("error", failure.message)

    def _criteria_changed(self) -> None:
        self._page = 1
        self.accumulator.reset(self._query, self.filters.as_dict())

    def set_query(self, query: str) -> None:
        """Change the search term. A different term starts a new result list."""
        trimmed = (query or "").strip()
        if trimmed == self._query:
            return
        self._query = trimmed
        logger.debug(f"Query changed to {trimmed!r} ({self.mode.value})")
        self._criteria_changed()

    def update_filter(self, key: str, value: Any) -> None:
        before = self.filters.as_dict()
        self.filters.update_filter(key, value)
        if self.filters.as_dict() != before:
            self._criteria_changed()

    def set_filters(self, filters: Mapping[str, Any]) -> None:
        before = self.filters.as_dict()
        self.filters.set_filters(filters)
        if self.filters.as_dict() != before:
            self._criteria_changed()

    def clear_filters(self) -> None:
        if self.filters.has_active_filters:
            self.filters.clear()
            self._criteria_changed()
            self.notify("info", "Filters cleared")

    def select_tab(self, tab: str) -> None:
        self._tab = tab

    async def search(self) -> AccumulatedState:
        """Fetch the current page for the current query and filters and merge it.

        Returns:
            Accumulated state after the merge (unchanged when nothing was requested
            or the response turned out to be stale).
        """
        query, filters, page = self._query, self.filters.as_dict(), self._page
        generation = self.accumulator.generation
        outcome = await self.coordinator.search(classify(query), query, page, filters, self._tab)
        if outcome is None:
            return self.accumulator.state
        return self.accumulator.merge(outcome, query, filters, page, generation)

    async def load_more(self) -> AccumulatedState:
        """Fetch the page after the last accumulated one ("View more")."""
        state = self.accumulator.state
        if self.mode is SearchMode.NATURAL_LANGUAGE or state.ai_optimized:
            logger.debug("Natural-language results are a single batch, nothing more to load")
            return state
        self._page = max(state.last_page, 0) + 1
        return await self.search()

    async def load_favorites(self) -> frozenset[int]:
        return await self.favorites.load()

    def results(self) -> list[FavoriteAnnotation]:
        """Accumulated recipes with their is-favourite flag, recomputed on every call."""
        return annotate(self.accumulator.items, self.favorites.ids)
