import logging
from typing import Awaitable, Callable, Dict, Any, List, Optional

from sqlalchemy import select, func, case, extract
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.enums import Category
from finboard.errors import AnalyticsCancelled
from finboard.models import Transaction
from finboard.query_builder import build_date_predicate
from finboard.schemas import (
    AnalyticsResponse,
    DateRangeEcho,
    GroupTotal,
    MonthKey,
    MonthlyTrend,
)
from finboard.validation import DateRange

logger = logging.getLogger(__name__)

MAX_TREND_BUCKETS = 12
TOP_USERS_LIMIT = 5

CancelCheck = Callable[[], Awaitable[bool]]

class AnalyticsService:
    """Dashboard aggregations over the optionally date-filtered dataset"""

    async def category_totals(self, db: AsyncSession, date_range: DateRange) -> List[GroupTotal]:
        return await self._group_totals(db, Transaction.category, date_range)

    async def status_totals(self, db: AsyncSession, date_range: DateRange) -> List[GroupTotal]:
        return await self._group_totals(db, Transaction.status, date_range)

    async def monthly_trends(self, db: AsyncSession, date_range: DateRange) -> List[MonthlyTrend]:
        """Revenue and expenses per (year, month), earliest buckets first.

        Only the first twelve buckets of the range are kept; callers wanting
        the most recent months must narrow the date range themselves.
        Any failure degrades to an empty series.
        """
        try:
            year = extract("year", Transaction.date).label("year")
            month = extract("month", Transaction.date).label("month")
            revenue = func.sum(
                case((Transaction.category == Category.REVENUE.value, Transaction.amount), else_=0.0)
            ).label("revenue")
            expenses = func.sum(
                case((Transaction.category == Category.EXPENSE.value, Transaction.amount), else_=0.0)
            ).label("expenses")

            query = (
                select(year, month, revenue, expenses, func.count().label("tx_count"))
                .where(build_date_predicate(date_range))
                .group_by(year, month)
                .order_by(year.asc(), month.asc())
                .limit(MAX_TREND_BUCKETS)
            )
            result = await db.execute(query)

            return [
                MonthlyTrend(
                    key=MonthKey(year=int(row.year), month=int(row.month)),
                    revenue=float(row.revenue or 0.0),
                    expenses=float(row.expenses or 0.0),
                    count=row.tx_count,
                )
                for row in result.all()
            ]
        except Exception:
            logger.exception("Monthly trends aggregation failed, returning empty series")
            return []

    async def top_users(self, db: AsyncSession, date_range: DateRange) -> List[GroupTotal]:
        """Top users by summed amount; equal totals are ordered by user_id."""
        total = func.sum(Transaction.amount).label("total")
        query = (
            select(Transaction.user_id.label("key"), total, func.count().label("tx_count"))
            .where(build_date_predicate(date_range))
            .group_by(Transaction.user_id)
            .order_by(total.desc(), Transaction.user_id.asc())
            .limit(TOP_USERS_LIMIT)
        )
        result = await db.execute(query)
        return [self._to_group_total(row) for row in result.all()]

    async def get_analytics(
        self,
        db: AsyncSession,
        date_range: DateRange,
        is_cancelled: Optional[CancelCheck] = None
    ) -> AnalyticsResponse:
        """Run the four aggregation passes and combine them into one payload.

        The passes share no state. They run one after another on the request
        session, polling `is_cancelled` in between so a disconnected caller
        stops the remaining work. Monthly trends run last.
        """
        passes = [
            ("revenueExpenses", self.category_totals),
            ("statusBreakdown", self.status_totals),
            ("topUsers", self.top_users),
            ("monthlyTrends", self.monthly_trends),
        ]

        results: Dict[str, Any] = {}
        for name, aggregation in passes:
            if is_cancelled is not None and await is_cancelled():
                logger.info(f"Analytics request cancelled before '{name}'")
                raise AnalyticsCancelled("Client disconnected")
            results[name] = await aggregation(db, date_range)

        return AnalyticsResponse(
            revenueExpenses=results["revenueExpenses"],
            statusBreakdown=results["statusBreakdown"],
            monthlyTrends=results["monthlyTrends"],
            topUsers=results["topUsers"],
            dateRange=DateRangeEcho(startDate=date_range.raw_start, endDate=date_range.raw_end),
        )

    async def _group_totals(self, db: AsyncSession, column, date_range: DateRange) -> List[GroupTotal]:
        query = (
            select(column.label("key"), func.sum(Transaction.amount).label("total"), func.count().label("tx_count"))
            .where(build_date_predicate(date_range))
            .group_by(column)
            .order_by(column)
        )
        result = await db.execute(query)
        return [self._to_group_total(row) for row in result.all()]

    @staticmethod
    def _to_group_total(row) -> GroupTotal:
        return GroupTotal(key=row.key, total=float(row.total or 0.0), count=row.tx_count)

# Shared service instance
analytics_service = AnalyticsService()
