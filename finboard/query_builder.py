from dataclasses import dataclass
from typing import List, Tuple

from sqlalchemy import and_, or_, true, select, func
from sqlalchemy.sql.elements import ColumnElement

from finboard.enums import SortOrder, SEARCHABLE_FIELDS
from finboard.models import Transaction
from finboard.validation import FilterSet, SortSpec, DateRange


@dataclass(frozen=True)
class TransactionQuery:
    """A fully built predicate plus its ordering; holds no session."""

    predicate: ColumnElement
    order_by: Tuple[ColumnElement, ...] = ()

    def select(self):
        return select(Transaction).where(self.predicate).order_by(*self.order_by)

    def count(self):
        return select(func.count()).select_from(Transaction).where(self.predicate)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _range(column, low, high) -> List[ColumnElement]:
    clauses = []
    if low is not None:
        clauses.append(column >= low)
    if high is not None:
        clauses.append(column <= high)
    return clauses


def search_clause(term: str) -> ColumnElement:
    pattern = f"%{_escape_like(term)}%"
    return or_(*[
        getattr(Transaction, name).ilike(pattern, escape="\\")
        for name in SEARCHABLE_FIELDS
    ])


def build_predicate(filters: FilterSet) -> ColumnElement:
    clauses: List[ColumnElement] = []

    if filters.category is not None:
        clauses.append(Transaction.category == filters.category.value)
    if filters.status is not None:
        clauses.append(Transaction.status == filters.status.value)
    if filters.user_id is not None:
        clauses.append(Transaction.user_id == filters.user_id)

    clauses.extend(_range(Transaction.date, filters.start_date, filters.end_date))
    clauses.extend(_range(Transaction.amount, filters.min_amount, filters.max_amount))

    if filters.search is not None:
        clauses.append(search_clause(filters.search))

    if not clauses:
        return true()
    return and_(*clauses)


def build_date_predicate(date_range: DateRange) -> ColumnElement:
    clauses = _range(Transaction.date, date_range.start, date_range.end)
    if not clauses:
        return true()
    return and_(*clauses)


def build_order_by(sort: SortSpec) -> Tuple[ColumnElement, ...]:
    column = getattr(Transaction, sort.sort_by.value)
    primary = column.asc() if sort.order == SortOrder.ASC else column.desc()
    # Insertion order breaks ties so every page window is reproducible
    return (primary, Transaction.row_id.asc())


def build_query(filters: FilterSet, sort: SortSpec) -> TransactionQuery:
    return TransactionQuery(predicate=build_predicate(filters), order_by=build_order_by(sort))


def applied_filters(filters: FilterSet) -> List[str]:
    """Names of the constrained dimensions, excluding the search term."""
    applied = []
    if filters.category is not None:
        applied.append("category")
    if filters.status is not None:
        applied.append("status")
    if filters.user_id is not None:
        applied.append("user_id")
    if filters.start_date is not None or filters.end_date is not None:
        applied.append("date")
    if filters.min_amount is not None or filters.max_amount is not None:
        applied.append("amount")
    return applied
