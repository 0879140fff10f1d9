from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from finboard.enums import DEFAULT_EXPORT_COLUMNS

class TransactionOut(BaseModel):
    id: int
    date: datetime
    amount: float
    category: str
    status: str
    user_id: str
    user_profile: str

    model_config = ConfigDict(from_attributes=True)

class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool

class AppliedFilters(BaseModel):
    applied: List[str]
    search: Optional[str] = None

class TransactionPage(BaseModel):
    data: List[TransactionOut]
    pagination: PaginationMeta
    filters: AppliedFilters

class GroupTotal(BaseModel):
    key: str = Field(serialization_alias="_id")
    total: float
    count: int

class MonthKey(BaseModel):
    year: int
    month: int

class MonthlyTrend(BaseModel):
    key: MonthKey = Field(serialization_alias="_id")
    revenue: float
    expenses: float
    count: int

class DateRangeEcho(BaseModel):
    startDate: Optional[str] = None
    endDate: Optional[str] = None

class AnalyticsResponse(BaseModel):
    revenueExpenses: List[GroupTotal]
    statusBreakdown: List[GroupTotal]
    monthlyTrends: List[MonthlyTrend]
    topUsers: List[GroupTotal]
    dateRange: DateRangeEcho

class FilterOptions(BaseModel):
    categories: List[str]
    statuses: List[str]
    users: List[str]

class ExportRequest(BaseModel):
    columns: List[str] = Field(default_factory=lambda: list(DEFAULT_EXPORT_COLUMNS))
    # Filter and sort values are checked after the columns, by the validation layer
    category: Any = None
    status: Any = None
    user_id: Any = None
    minAmount: Any = None
    maxAmount: Any = None
    startDate: Any = None
    endDate: Any = None
    search: Any = None
    sortBy: Any = None
    order: Any = None

class UserCredentials(BaseModel):
    username: Any = None
    password: Any = None

class UserOut(BaseModel):
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)

class RegisterResponse(BaseModel):
    message: str
    user: UserOut

class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserOut

class ProfileResponse(BaseModel):
    message: str
    user: UserOut

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenData(BaseModel):
    user_id: Optional[str] = None
