"""Closed value sets shared by the listing, analytics and export paths."""

from enum import Enum
from typing import List


class Category(str, Enum):
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class Status(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"


class SortField(str, Enum):
    ID = "id"
    DATE = "date"
    AMOUNT = "amount"
    CATEGORY = "category"
    STATUS = "status"
    USER_ID = "user_id"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def values(enum_cls) -> List[str]:
    """Return the wire values of an enum in declaration order."""
    return [member.value for member in enum_cls]


EXPORT_COLUMNS: List[str] = ["id", "date", "amount", "category", "status", "user_id", "user_profile"]

DEFAULT_EXPORT_COLUMNS: List[str] = ["id", "date", "amount", "category", "status", "user_id"]

SEARCHABLE_FIELDS: List[str] = ["category", "status", "user_id", "user_profile"]

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_SEARCH_LENGTH = 100
