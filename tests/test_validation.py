"""Tests for the request parameter parse step."""

from datetime import datetime

import pytest

from finboard.enums import Category, SortField, SortOrder, Status
from finboard.errors import ParameterValidationError
from finboard.validation import (
    parse_analytics_params,
    parse_export_params,
    parse_filter_set,
    parse_listing_params,
)


def _field_of(params: dict) -> str:
    with pytest.raises(ParameterValidationError) as exc_info:
        parse_listing_params(params)
    return exc_info.value.field


def test_defaults_when_nothing_is_supplied() -> None:
    params = parse_listing_params({})

    assert params.pagination.page == 1
    assert params.pagination.limit == 10
    assert params.sort.sort_by == SortField.DATE
    assert params.sort.order == SortOrder.DESC
    assert params.filters.category is None
    assert params.filters.search is None


def test_empty_strings_count_as_absent() -> None:
    params = parse_listing_params({"page": "", "category": "", "minAmount": "", "search": ""})

    assert params.pagination.page == 1
    assert params.filters.category is None
    assert params.filters.min_amount is None
    assert params.filters.search is None


def test_fully_typed_bundle() -> None:
    params = parse_listing_params({
        "page": "3",
        "limit": "25",
        "sortBy": "amount",
        "order": "asc",
        "category": "Expense",
        "status": "Pending",
        "user_id": "  user_007  ",
        "minAmount": "10.5",
        "maxAmount": "99",
        "startDate": "2024-01-01",
        "endDate": "2024-01-31",
        "search": "  user  ",
    })

    assert params.pagination.page == 3
    assert params.pagination.limit == 25
    assert params.pagination.skip == 50
    assert params.sort.sort_by == SortField.AMOUNT
    assert params.sort.order == SortOrder.ASC
    assert params.filters.category == Category.EXPENSE
    assert params.filters.status == Status.PENDING
    assert params.filters.user_id == "user_007"
    assert params.filters.min_amount == 10.5
    assert params.filters.max_amount == 99.0
    assert params.filters.start_date == datetime(2024, 1, 1)
    assert params.filters.end_date == datetime(2024, 1, 31, 23, 59, 59, 999999)
    assert params.filters.search == "user"


@pytest.mark.parametrize(
    ("params", "field"),
    [
        ({"limit": "0"}, "limit"),
        ({"limit": "101"}, "limit"),
        ({"page": "0"}, "page"),
        ({"page": "-2"}, "page"),
        ({"page": "1.5"}, "page"),
        ({"limit": "ten"}, "limit"),
        ({"sortBy": "foo"}, "sortBy"),
        ({"sortBy": "user_profile"}, "sortBy"),
        ({"order": "sideways"}, "order"),
        ({"category": "Other"}, "category"),
        ({"category": "revenue"}, "category"),
        ({"status": "Refunded"}, "status"),
        ({"minAmount": "500", "maxAmount": "100"}, "minAmount"),
        ({"minAmount": "abc"}, "minAmount"),
        ({"maxAmount": "nan"}, "maxAmount"),
        ({"maxAmount": "inf"}, "maxAmount"),
        ({"minAmount": "1_000"}, "minAmount"),
        ({"maxAmount": "0x10"}, "maxAmount"),
        ({"startDate": "2024-02-01", "endDate": "2024-01-01"}, "startDate"),
        ({"startDate": "not-a-date"}, "startDate"),
        ({"endDate": "2024-13-01"}, "endDate"),
        ({"user_id": "   "}, "user_id"),
        ({"search": "   "}, "search"),
        ({"search": "x" * 101}, "search"),
    ],
)
def test_invalid_inputs_are_rejected(params: dict, field: str) -> None:
    assert _field_of(params) == field


def test_limit_is_rejected_not_clamped() -> None:
    with pytest.raises(ParameterValidationError) as exc_info:
        parse_listing_params({"limit": "500"})

    assert exc_info.value.message == "Limit must be between 1 and 100"


def test_plain_decimal_and_exponent_amounts_are_accepted() -> None:
    params = parse_listing_params({"minAmount": ".5", "maxAmount": "1e3"})

    assert params.filters.min_amount == 0.5
    assert params.filters.max_amount == 1000.0


def test_search_of_exactly_one_hundred_characters_is_accepted() -> None:
    params = parse_listing_params({"search": "y" * 100})

    assert params.filters.search == "y" * 100


def test_first_failure_wins_in_rule_order() -> None:
    # page is checked before sortBy, sortBy before category
    assert _field_of({"page": "0", "sortBy": "foo", "category": "Other"}) == "page"
    assert _field_of({"sortBy": "foo", "category": "Other"}) == "sortBy"
    assert _field_of({"category": "Other", "minAmount": "x"}) == "minAmount"
    assert _field_of({"status": "Nope", "search": ""}) == "status"


def test_same_day_range_is_valid() -> None:
    filters = parse_filter_set({"startDate": "2024-05-05", "endDate": "2024-05-05"})

    assert filters.start_date < filters.end_date


def test_timezone_aware_datetimes_are_normalised_to_utc() -> None:
    filters = parse_filter_set({"startDate": "2024-05-05T10:00:00+02:00", "endDate": "2024-05-06T00:00:00Z"})

    assert filters.start_date == datetime(2024, 5, 5, 8, 0)
    assert filters.end_date == datetime(2024, 5, 6, 0, 0)


def test_single_bounds_are_kept() -> None:
    filters = parse_filter_set({"minAmount": "-20", "endDate": "2024-03-01"})

    assert filters.min_amount == -20.0
    assert filters.max_amount is None
    assert filters.start_date is None
    assert filters.end_date == datetime(2024, 3, 1, 23, 59, 59, 999999)


def test_export_params_accept_numbers_as_text() -> None:
    filters, sort = parse_export_params({"minAmount": 100, "order": "asc", "sortBy": "id"})

    assert filters.min_amount == 100.0
    assert sort.sort_by == SortField.ID
    assert sort.order == SortOrder.ASC


def test_analytics_params_echo_raw_values() -> None:
    date_range = parse_analytics_params({"startDate": "2024-01-01", "endDate": "2024-06-30"})

    assert date_range.raw_start == "2024-01-01"
    assert date_range.raw_end == "2024-06-30"
    assert date_range.start == datetime(2024, 1, 1)


def test_analytics_rejects_inverted_range() -> None:
    with pytest.raises(ParameterValidationError) as exc_info:
        parse_analytics_params({"startDate": "2024-06-30", "endDate": "2024-01-01"})

    assert exc_info.value.to_dict() == {
        "error": "Start date cannot be after end date",
        "field": "startDate",
    }
