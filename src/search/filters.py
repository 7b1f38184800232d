"""Advanced search filters (diet, cuisine, meal type, time, nutrition, ingredients).

FilterState is the single owner of the active filter set. Keys follow the
app's filter names; to_query_params() translates them to Spoonacular
complexSearch parameters.
"""

import math
from typing import Any, Mapping, Optional

from src.utils.logger import logger

# Select inputs send this value for their "Any" option
NONE_SENTINEL = "__none__"

FILTER_KEYS = (
    "diet",
    "cuisine",
    "mealType",
    "maxReadyTime",
    "minCalories",
    "maxCalories",
    "minProtein",
    "maxProtein",
    "minCarbs",
    "maxCarbs",
    "minFat",
    "maxFat",
    "intolerances",
    "excludeIngredients",
    "includeIngredients",
)

NUMERIC_FILTER_KEYS = frozenset(
    {
        "maxReadyTime",
        "minCalories",
        "maxCalories",
        "minProtein",
        "maxProtein",
        "minCarbs",
        "maxCarbs",
        "minFat",
        "maxFat",
    }
)

NUTRIENT_FILTER_KEYS = NUMERIC_FILTER_KEYS - {"maxReadyTime"}

# Filter key -> complexSearch parameter, where they differ
_QUERY_PARAM_NAMES = {"mealType": "type"}

# Min/max pairs of one nutrient count as a single active filter
_FILTER_GROUPS = (
    ("diet",),
    ("cuisine",),
    ("mealType",),
    ("maxReadyTime",),
    ("minCalories", "maxCalories"),
    ("minProtein", "maxProtein"),
    ("minCarbs", "maxCarbs"),
    ("minFat", "maxFat"),
    ("intolerances",),
    ("excludeIngredients",),
    ("includeIngredients",),
)


def _is_set(value: Any) -> bool:
    return value is not None and value != ""


def has_active_filters(filters: Optional[Mapping[str, Any]]) -> bool:
    """Return True iff at least one filter value is neither None nor an empty string."""
    if not filters:
        return False
    return any(_is_set(value) for value in filters.values())


def normalize_filters(filters: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Drop unset values so that {"diet": ""} and {} compare equal."""
    if not filters:
        return {}
    return {key: value for key, value in filters.items() if _is_set(value)}


def filters_key(filters: Optional[Mapping[str, Any]]) -> tuple[tuple[str, Any], ...]:
    """Hashable, order-independent form of a filter set, used in request and epoch keys."""
    return tuple(sorted(normalize_filters(filters).items()))


def to_query_params(filters: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """Translate a filter set into Spoonacular complexSearch query parameters."""
    params: dict[str, str] = {}
    for key, value in normalize_filters(filters).items():
        params[_QUERY_PARAM_NAMES.get(key, key)] = str(value)
    return params


class FilterState:
    """Currently active filter set.

    update_filter() removes a key rather than storing a falsy value, so the
    set never carries empty entries.
    """

    def __init__(self, filters: Optional[Mapping[str, Any]] = None) -> None:
        self._filters: dict[str, Any] = {}
        if filters:
            self.set_filters(filters)

    @staticmethod
    def _validate_key(key: str) -> None:
        if key not in FILTER_KEYS:
            raise ValueError(f"Unknown filter '{key}'. Expected one of: {', '.join(FILTER_KEYS)}")

    @staticmethod
    def _coerce(key: str, value: Any) -> Any:
        if key not in NUMERIC_FILTER_KEYS or not isinstance(value, str):
            return value
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        # Nutrient ranges accept decimals (minProtein=12.5); maxReadyTime is whole minutes
        if key in NUTRIENT_FILTER_KEYS:
            try:
                number = float(text)
            except ValueError:
                number = None
            if number is not None and math.isfinite(number):
                return number
        raise ValueError(f"Filter '{key}' must be a number, got: {value!r}")

    def update_filter(self, key: str, value: Any) -> None:
        """Set one filter. The "__none__" sentinel or any falsy value removes it."""
        self._validate_key(key)
        if value == NONE_SENTINEL or not value:
            if self._filters.pop(key, None) is not None:
                logger.debug(f"Filter cleared: {key}")
            return
        self._filters[key] = self._coerce(key, value)
        logger.debug(f"Filter set: {key}={self._filters[key]!r}")

    def clear_filter(self, key: str) -> None:
        self._filters.pop(key, None)

    def set_filters(self, filters: Mapping[str, Any]) -> None:
        """Replace the whole filter set (e.g. from a saved preset)."""
        self._filters = {}
        for key, value in filters.items():
            self.update_filter(key, value)

    def clear(self) -> None:
        self._filters = {}
        logger.debug("Filters cleared")

    @property
    def has_active_filters(self) -> bool:
        return has_active_filters(self._filters)

    @property
    def active_filter_count(self) -> int:
        return sum(1 for group in _FILTER_GROUPS if any(_is_set(self._filters.get(key)) for key in group))

    def as_dict(self) -> dict[str, Any]:
        return dict(self._filters)

    def to_query_params(self) -> dict[str, str]:
        return to_query_params(self._filters)

    def __repr__(self) -> str:
        return f"FilterState({self._filters!r})"
