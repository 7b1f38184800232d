"""Search request coordination.

SearchRequestCoordinator turns (mode, query, page, filters) into one provider
call and a SearchOutcome:

- keyword: keyword provider with (effective_query, page, filters). An empty
  query with active filters is sent as FILTER_ONLY_PLACEHOLDER.
- natural-language: natural-language provider with the raw query only. Page
  and filters are not part of that provider's contract.

Identical requests that overlap share one in-flight task. Provider errors are
classified (see errors.py); an ai-search-unavailable failure is retried once as
a keyword search for the same query.
"""

import asyncio
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from pydantic import ValidationError

from src.models.models import Recipe, SearchFailure, SearchMode, SearchSuccess
from src.search.errors import AISearchError, SearchProviderError, should_fallback_to_keyword, to_failure
from src.search.filters import filters_key, has_active_filters, normalize_filters
from src.utils.config import config
from src.utils.logger import logger, search_context

Outcome = Union[SearchSuccess, SearchFailure]
RequestKey = tuple[SearchMode, str, int, tuple[tuple[str, Any], ...]]

SEARCH_TAB = "search"
FAVOURITES_TAB = "favourites"


class KeywordSearchProvider(Protocol):
    async def search(self, query: str, page: int, filters: Mapping[str, Any]) -> dict[str, Any]: ...


class NaturalLanguageSearchProvider(Protocol):
    async def ai_search(self, query: str) -> dict[str, Any]: ...


def parse_provider_response(payload: Mapping[str, Any], ai_optimized: bool = False) -> SearchSuccess:
    """Convert a provider response body into a SearchSuccess.

    Error bodies (status "failure" or code 402) raise SearchProviderError so
    they are classified like thrown errors.

    Raises:
        SearchProviderError: If the body describes a failure.
    """
    code = payload.get("code")
    if payload.get("status") == "failure" or code == 402:
        message = payload.get("message") or "Search provider returned a failure"
        raise SearchProviderError(message, status_code=code if isinstance(code, int) else None)

    items: list[Recipe] = []
    for raw in payload.get("results") or []:
        try:
            items.append(Recipe.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed recipe in search results: {e.errors()[0].get('msg')}")

    total = payload.get("totalResults")
    return SearchSuccess(
        items=items,
        total_results=total if isinstance(total, int) and total >= 0 else len(items),
        ai_optimized=ai_optimized or bool(payload.get("aiOptimized")),
        api_limit_reached=bool(payload.get("apiLimitReached")),
        message=payload.get("message"),
    )


class SearchRequestCoordinator:
    """Issues search requests and exposes loading / error / data state."""

    def __init__(
        self,
        keyword_provider: KeywordSearchProvider,
        ai_provider: Optional[NaturalLanguageSearchProvider] = None,
        on_failure: Optional[Callable[[SearchFailure], None]] = None,
        placeholder: Optional[str] = None,
    ) -> None:
        self.keyword_provider = keyword_provider
        self.ai_provider = ai_provider
        self.on_failure = on_failure
        self.placeholder = placeholder or config.FILTER_ONLY_PLACEHOLDER
        self._in_flight: dict[RequestKey, asyncio.Task] = {}
        self.last_outcome: Optional[Outcome] = None
        self.last_error: Optional[SearchFailure] = None

    @property
    def is_loading(self) -> bool:
        return bool(self._in_flight)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    @staticmethod
    def is_enabled(query: str, filters: Optional[Mapping[str, Any]], tab: str = SEARCH_TAB) -> bool:
        """A request is issued only on the search tab, for a query or active filters."""
        return tab == SEARCH_TAB and (bool((query or "").strip()) or has_active_filters(filters))

    def effective_query(self, query: str, filters: Optional[Mapping[str, Any]]) -> str:
        trimmed = (query or "").strip()
        if not trimmed and has_active_filters(filters):
            return self.placeholder
        return trimmed

    async def search(
        self,
        mode: SearchMode,
        query: str,
        page: int = 1,
        filters: Optional[Mapping[str, Any]] = None,
        tab: str = SEARCH_TAB,
    ) -> Optional[Outcome]:
        """Run one search, sharing the provider call with identical in-flight requests.

        Args:
            mode: Search mode from classify().
            query: Query as typed (trimmed here).
            page: Page number, >= 1. Ignored by natural-language search.
            filters: Active filters. Ignored by natural-language search.
            tab: Currently selected tab; only "search" issues requests.

        Returns:
            SearchSuccess or SearchFailure, or None when the request is not enabled.
        """
        if not self.is_enabled(query, filters, tab):
            logger.debug(f"Search not enabled (tab={tab!r}, query={query!r})")
            return None
        if page < 1:
            raise ValueError(f"page must be at least 1, got: {page}")

        key: RequestKey = (mode, (query or "").strip(), page, filters_key(filters))
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._execute(mode, key[1], page, normalize_filters(filters)))
            self._in_flight[key] = task
            task.add_done_callback(lambda _done, request_key=key: self._in_flight.pop(request_key, None))
        else:
            logger.debug(f"Joining in-flight {mode.value} search for {key[1]!r} page {page}")

        # Shield so one cancelled caller does not cancel the shared request
        return await asyncio.shield(task)

    async def _execute(self, mode: SearchMode, query: str, page: int, filters: dict[str, Any]) -> Outcome:
        try:
            outcome: Outcome = await self._call(mode, query, page, filters)
        except Exception as e:
            failure = self._record_failure(e)
            if mode is SearchMode.NATURAL_LANGUAGE and should_fallback_to_keyword(failure.kind):
                logger.info(f"Retrying {query!r} as keyword search after AI search failure")
                try:
                    outcome = await self._call(SearchMode.KEYWORD, query, page, filters)
                except Exception as retry_error:
                    outcome = self._record_failure(retry_error)
            else:
                outcome = failure

        self.last_outcome = outcome
        if isinstance(outcome, SearchSuccess):
            self.last_error = None
        return outcome

    def _record_failure(self, error: Exception) -> SearchFailure:
        failure = to_failure(error)
        self.last_error = failure
        if self.on_failure:
            self.on_failure(failure)
        return failure

    async def _call(self, mode: SearchMode, query: str, page: int, filters: dict[str, Any]) -> SearchSuccess:
        if mode is SearchMode.NATURAL_LANGUAGE:
            if self.ai_provider is None:
                raise AISearchError("AI search provider is not configured")
            if filters:
                logger.debug(f"Natural-language search ignores filters: {filters}")
            logger.info("AI search", extra=search_context(mode, query))
            payload = await self.ai_provider.ai_search(query)
            return parse_provider_response(payload, ai_optimized=True)

        effective = self.effective_query(query, filters)
        logger.info("Keyword search", extra=search_context(mode, effective, page))
        payload = await self.keyword_provider.search(effective, page, filters)
        return parse_provider_response(payload)
