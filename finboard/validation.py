"""Typed parse step between untyped request parameters and the query layer.

Every value the listing, analytics and export operations use passes through
here first. Rules are checked in a fixed order and the first failure is raised
as a ``ParameterValidationError`` naming the offending field. Out-of-range
values are rejected, never clamped.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Mapping, Optional

from finboard.enums import (
    Category,
    Status,
    SortField,
    SortOrder,
    values,
    DEFAULT_PAGE,
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_SEARCH_LENGTH,
)
from finboard.errors import ParameterValidationError

_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_DATE_ONLY_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class SortSpec:
    sort_by: SortField = SortField.DATE
    order: SortOrder = SortOrder.DESC


@dataclass(frozen=True)
class PaginationParams:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    # Values as the client sent them, echoed back by analytics
    raw_start: Optional[str] = None
    raw_end: Optional[str] = None


@dataclass(frozen=True)
class FilterSet:
    category: Optional[Category] = None
    status: Optional[Status] = None
    user_id: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None


@dataclass(frozen=True)
class ListingParams:
    pagination: PaginationParams = field(default_factory=PaginationParams)
    sort: SortSpec = field(default_factory=SortSpec)
    filters: FilterSet = field(default_factory=FilterSet)


def _raw(params: Mapping[str, Any], key: str) -> Optional[str]:
    """Fetch a parameter as text; missing and empty values count as absent."""
    value = params.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    if value == "":
        return None
    return value


def _parse_int(field_name: str, raw: Optional[str], default: int, message: str) -> int:
    if raw is None:
        return default
    text = raw.strip()
    if not _INTEGER_RE.fullmatch(text):
        raise ParameterValidationError(field_name, message)
    return int(text)


def _parse_amount(field_name: str, raw: Optional[str], message: str) -> Optional[float]:
    if raw is None:
        return None
    text = raw.strip()
    if not _NUMBER_RE.fullmatch(text):
        raise ParameterValidationError(field_name, message)
    amount = float(text)
    if not math.isfinite(amount):
        raise ParameterValidationError(field_name, message)
    return amount


def _parse_datetime(field_name: str, raw: str, message: str, end_of_day: bool = False) -> datetime:
    """Parse an ISO date or datetime into a naive UTC datetime.

    A bare date used as an upper bound covers the whole day.
    """
    text = raw.strip()
    try:
        if _DATE_ONLY_RE.fullmatch(text):
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end_of_day else time.min)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ParameterValidationError(field_name, message)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_pagination(page: Optional[str], limit: Optional[str]) -> PaginationParams:
    page_num = _parse_int("page", page, DEFAULT_PAGE, "Page must be a positive number")
    if page_num < 1:
        raise ParameterValidationError("page", "Page must be a positive number")

    limit_num = _parse_int("limit", limit, DEFAULT_LIMIT, f"Limit must be between 1 and {MAX_LIMIT}")
    if limit_num < 1 or limit_num > MAX_LIMIT:
        raise ParameterValidationError("limit", f"Limit must be between 1 and {MAX_LIMIT}")

    return PaginationParams(page=page_num, limit=limit_num)


def parse_sort_spec(sort_by: Optional[str], order: Optional[str]) -> SortSpec:
    if sort_by is None:
        field_value = SortField.DATE
    elif sort_by in values(SortField):
        field_value = SortField(sort_by)
    else:
        raise ParameterValidationError(
            "sortBy",
            f"Invalid sort field. Must be one of: {', '.join(values(SortField))}"
        )

    if order is None:
        order_value = SortOrder.DESC
    elif order in values(SortOrder):
        order_value = SortOrder(order)
    else:
        raise ParameterValidationError("order", "Sort order must be 'asc' or 'desc'")

    return SortSpec(sort_by=field_value, order=order_value)


def parse_date_range(start: Optional[str], end: Optional[str]) -> DateRange:
    start_dt = None
    end_dt = None
    if start is not None:
        start_dt = _parse_datetime("startDate", start, "Invalid start date format")
    if end is not None:
        end_dt = _parse_datetime("endDate", end, "Invalid end date format", end_of_day=True)
    if start_dt is not None and end_dt is not None and start_dt > end_dt:
        raise ParameterValidationError("startDate", "Start date cannot be after end date")
    return DateRange(start=start_dt, end=end_dt, raw_start=start, raw_end=end)


def parse_amount_range(min_amount: Optional[str], max_amount: Optional[str]):
    low = _parse_amount("minAmount", min_amount, "Invalid minimum amount")
    high = _parse_amount("maxAmount", max_amount, "Invalid maximum amount")
    if low is not None and high is not None and low > high:
        raise ParameterValidationError(
            "minAmount",
            "Minimum amount cannot be greater than maximum amount"
        )
    return low, high


def _parse_enum(field_name: str, raw: Optional[str], enum_cls, label: str):
    if raw is None:
        return None
    if raw not in values(enum_cls):
        raise ParameterValidationError(
            field_name,
            f"Invalid {label}. Must be one of: {', '.join(values(enum_cls))}"
        )
    return enum_cls(raw)


def _parse_user_id(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    user_id = raw.strip()
    if not user_id:
        raise ParameterValidationError("user_id", "User ID must be a non-empty string")
    return user_id


def _parse_search(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    term = raw.strip()
    if not term:
        raise ParameterValidationError("search", "Search term cannot be empty")
    if len(term) > MAX_SEARCH_LENGTH:
        raise ParameterValidationError(
            "search",
            f"Search term too long (max {MAX_SEARCH_LENGTH} characters)"
        )
    return term


def parse_filter_set(params: Mapping[str, Any]) -> FilterSet:
    """Validate the filter dimensions of a request.

    Dates are checked before amounts, amounts before the enum fields, and
    ``user_id``/``search`` last.
    """
    date_range = parse_date_range(_raw(params, "startDate"), _raw(params, "endDate"))
    min_amount, max_amount = parse_amount_range(_raw(params, "minAmount"), _raw(params, "maxAmount"))
    category = _parse_enum("category", _raw(params, "category"), Category, "category")
    status = _parse_enum("status", _raw(params, "status"), Status, "status")
    user_id = _parse_user_id(_raw(params, "user_id"))
    search = _parse_search(_raw(params, "search"))

    return FilterSet(
        category=category,
        status=status,
        user_id=user_id,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=date_range.start,
        end_date=date_range.end,
        search=search,
    )


def parse_listing_params(params: Mapping[str, Any]) -> ListingParams:
    """Validate a full listing request: pagination, sort, then filters."""
    pagination = parse_pagination(_raw(params, "page"), _raw(params, "limit"))
    sort = parse_sort_spec(_raw(params, "sortBy"), _raw(params, "order"))
    filters = parse_filter_set(params)
    return ListingParams(pagination=pagination, sort=sort, filters=filters)


def parse_export_params(params: Mapping[str, Any]):
    """Validate the sort and filter fields of an export request body."""
    sort = parse_sort_spec(_raw(params, "sortBy"), _raw(params, "order"))
    filters = parse_filter_set(params)
    return filters, sort


def parse_analytics_params(params: Mapping[str, Any]) -> DateRange:
    return parse_date_range(_raw(params, "startDate"), _raw(params, "endDate"))
