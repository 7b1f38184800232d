"""Unit tests for advanced search filters."""

import pytest

from src.search.filters import (
    NONE_SENTINEL,
    FilterState,
    filters_key,
    has_active_filters,
    normalize_filters,
    to_query_params,
)


class TestHasActiveFilters:
    """Test has_active_filters()."""

    @pytest.mark.parametrize(
        "filters",
        [None, {}, {"diet": None}, {"diet": ""}, {"diet": "", "cuisine": None}],
    )
    def test_inactive(self, filters):
        assert has_active_filters(filters) is False

    @pytest.mark.parametrize(
        "filters",
        [{"maxReadyTime": 30}, {"diet": "vegan"}, {"diet": "", "cuisine": "thai"}, {"minCalories": 0}],
    )
    def test_active(self, filters):
        assert has_active_filters(filters) is True


class TestFilterHelpers:
    """Test normalization and parameter translation."""

    def test_normalize_drops_unset_values(self):
        assert normalize_filters({"diet": "", "cuisine": None, "maxReadyTime": 30}) == {"maxReadyTime": 30}

    def test_filters_key_ignores_order_and_blanks(self):
        first = filters_key({"diet": "vegan", "cuisine": "thai"})
        second = filters_key({"cuisine": "thai", "diet": "vegan", "mealType": ""})

        assert first == second
        assert hash(first) == hash(second)

    def test_filters_key_of_empty(self):
        assert filters_key(None) == ()
        assert filters_key({"diet": ""}) == ()

    def test_to_query_params_renames_meal_type(self):
        params = to_query_params({"mealType": "dessert", "maxReadyTime": 30, "diet": ""})

        assert params == {"type": "dessert", "maxReadyTime": "30"}


class TestFilterState:
    """Test FilterState mutations."""

    def test_update_filter_sets_value(self):
        state = FilterState()

        state.update_filter("diet", "vegan")

        assert state.as_dict() == {"diet": "vegan"}
        assert state.has_active_filters is True

    def test_sentinel_removes_key(self):
        state = FilterState({"diet": "vegan"})

        state.update_filter("diet", NONE_SENTINEL)

        assert state.as_dict() == {}
        assert state.has_active_filters is False

    @pytest.mark.parametrize("value", ["", None, 0])
    def test_falsy_value_removes_key(self, value):
        state = FilterState({"maxReadyTime": 30, "diet": "vegan"})

        state.update_filter("maxReadyTime", value)

        assert state.as_dict() == {"diet": "vegan"}

    def test_falsy_value_for_unset_key_is_noop(self):
        state = FilterState()

        state.update_filter("cuisine", "")

        assert state.as_dict() == {}

    def test_numeric_strings_are_coerced(self):
        state = FilterState()

        state.update_filter("maxReadyTime", "30")

        assert state.as_dict() == {"maxReadyTime": 30}

    @pytest.mark.parametrize("key", ["minProtein", "maxCalories", "minFat", "maxCarbs"])
    def test_decimal_nutrient_values_accepted(self, key):
        state = FilterState()

        state.update_filter(key, "12.5")

        assert state.as_dict() == {key: 12.5}
        assert state.to_query_params() == {key: "12.5"}

    def test_ready_time_must_be_whole_minutes(self):
        with pytest.raises(ValueError, match="maxReadyTime"):
            FilterState().update_filter("maxReadyTime", "12.5")

    @pytest.mark.parametrize("value", ["nan", "inf", "lots"])
    def test_non_finite_nutrient_values_rejected(self, value):
        with pytest.raises(ValueError, match="minProtein"):
            FilterState().update_filter("minProtein", value)

    def test_non_numeric_value_for_numeric_filter_rejected(self):
        with pytest.raises(ValueError, match="maxReadyTime"):
            FilterState().update_filter("maxReadyTime", "soon")

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown filter"):
            FilterState().update_filter("color", "red")

    def test_clear(self):
        state = FilterState({"diet": "vegan", "cuisine": "thai"})

        state.clear()

        assert state.as_dict() == {}
        assert state.active_filter_count == 0

    def test_clear_filter(self):
        state = FilterState({"diet": "vegan", "cuisine": "thai"})

        state.clear_filter("diet")
        state.clear_filter("mealType")

        assert state.as_dict() == {"cuisine": "thai"}

    def test_set_filters_replaces_and_drops_blanks(self):
        state = FilterState({"diet": "vegan"})

        state.set_filters({"cuisine": "thai", "mealType": NONE_SENTINEL, "maxCalories": ""})

        assert state.as_dict() == {"cuisine": "thai"}

    def test_active_filter_count_groups_ranges(self):
        state = FilterState({"diet": "vegan", "minCalories": 200, "maxCalories": 600, "maxProtein": 40})

        assert state.active_filter_count == 3

    def test_as_dict_is_a_copy(self):
        state = FilterState({"diet": "vegan"})

        state.as_dict()["diet"] = "paleo"

        assert state.as_dict() == {"diet": "vegan"}

    def test_to_query_params(self):
        state = FilterState({"mealType": "soup", "intolerances": "dairy"})

        assert state.to_query_params() == {"type": "soup", "intolerances": "dairy"}
