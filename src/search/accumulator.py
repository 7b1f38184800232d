"""Result accumulation across paginated search responses.

ResultAccumulator is the single owner of the current AccumulationEpoch: the
accumulated recipe list plus the (query, filters, last_page) that produced it.
merge() and reset() are its only mutators.

Every epoch has a generation number. reset() and a merge for a new
(query, filters) key start the next generation. Callers record the generation
when they issue a request and pass it back to merge(), so a response issued
for an earlier epoch is recognised even when the user has since returned to
the same query:

1. Generation of an earlier epoch   -> stale, discarded.
2. New key, or page == 1            -> reset: list replaced by outcome items
                                       (empty on failure), last_page = page.
3. Natural-language (ai_optimized)  -> list replaced wholesale.
4. page > last_page                 -> items appended, last_page = page.
5. Otherwise                        -> no-op (late low-numbered page).

A merge without a generation skips step 1; a different key then simply starts
a fresh epoch for that key. A failed "load more" keeps the pages already
accumulated.
"""

from typing import Any, Mapping, Optional, Union

from src.models.models import AccumulatedState, Recipe, SearchFailure, SearchSuccess
from src.search.filters import filters_key, normalize_filters
from src.utils.logger import logger

EpochKey = tuple[str, tuple[tuple[str, Any], ...]]


def epoch_key(query: str, filters: Optional[Mapping[str, Any]]) -> EpochKey:
    """Structural key of a (query, filters) pair. Unset filter values are ignored."""
    return ((query or "").strip(), filters_key(filters))


class ResultAccumulator:
    """State machine that merges search pages into one ordered list."""

    def __init__(self) -> None:
        self._key: Optional[EpochKey] = None
        self._generation = 0
        self._state = AccumulatedState()

    @property
    def state(self) -> AccumulatedState:
        return self._state

    @property
    def generation(self) -> int:
        """Token of the current epoch; pass it back to merge() with the response."""
        return self._generation

    @property
    def last_page(self) -> int:
        return self._state.last_page

    @property
    def items(self) -> tuple[Recipe, ...]:
        return self._state.items

    def is_current(self, query: str, filters: Optional[Mapping[str, Any]]) -> bool:
        return self._key == epoch_key(query, filters)

    def _start_epoch(self, key: EpochKey) -> None:
        self._generation += 1
        self._key = key

    def reset(self, query: str, filters: Optional[Mapping[str, Any]] = None) -> AccumulatedState:
        """Start a new, empty epoch for (query, filters).

        Called when the live query or filters change. Responses still in flight
        for the previous generation are discarded when they arrive, even if the
        new (query, filters) equals an earlier one.
        """
        key = epoch_key(query, filters)
        self._start_epoch(key)
        self._state = AccumulatedState(query=key[0], filters=normalize_filters(filters))
        logger.debug(f"Accumulator reset for query={key[0]!r} filters={dict(key[1])} (generation {self._generation})")
        return self._state

    def merge(
        self,
        outcome: Union[SearchSuccess, SearchFailure],
        query: str,
        filters: Optional[Mapping[str, Any]],
        page: int,
        generation: Optional[int] = None,
    ) -> AccumulatedState:
        """Merge one provider outcome into the accumulated list.

        Args:
            outcome: Success or Failure returned for the request.
            query: Query the request was issued with.
            filters: Filters the request was issued with.
            page: Page the request was issued for (>= 1).
            generation: Value of `generation` when the request was issued.

        Returns:
            The accumulated state after the merge.
        """
        if page < 1:
            raise ValueError(f"page must be at least 1, got: {page}")

        key = epoch_key(query, filters)
        failure = outcome if isinstance(outcome, SearchFailure) else None

        if generation is not None and generation != self._generation:
            logger.debug(
                f"Discarding stale response for query={key[0]!r} page={page} "
                f"(generation {generation}, current {self._generation})"
            )
            return self._state

        if key != self._key or page == 1:
            if key != self._key:
                self._start_epoch(key)
            self._state = AccumulatedState(
                items=tuple(outcome.items),
                query=key[0],
                filters=normalize_filters(filters),
                last_page=page,
                total_results=0 if failure else outcome.total_results,
                ai_optimized=outcome.ai_optimized,
                api_limit_reached=False if failure else outcome.api_limit_reached,
                error=failure,
            )
            logger.debug(f"Epoch reset: {len(self._state.items)} recipes, last_page={page}")
            return self._state

        if failure:
            # Keep what we already have; last_page stays so the page can be retried
            self._state = self._state.model_copy(update={"error": failure})
            logger.debug(f"Kept {len(self._state.items)} recipes after failed page {page}")
            return self._state

        if outcome.ai_optimized:
            self._state = self._state.model_copy(
                update={
                    "items": tuple(outcome.items),
                    "total_results": outcome.total_results,
                    "ai_optimized": True,
                    "api_limit_reached": outcome.api_limit_reached,
                    "error": None,
                }
            )
            logger.debug(f"Natural-language results replaced list: {len(self._state.items)} recipes")
            return self._state

        if page > self._state.last_page:
            self._state = self._state.model_copy(
                update={
                    "items": self._state.items + tuple(outcome.items),
                    "last_page": page,
                    "total_results": outcome.total_results,
                    "ai_optimized": False,
                    "api_limit_reached": outcome.api_limit_reached,
                    "error": None,
                }
            )
            logger.debug(f"Appended page {page}: {len(self._state.items)} recipes total")
            return self._state

        logger.debug(f"Ignoring page {page}, already at page {self._state.last_page}")
        return self._state
