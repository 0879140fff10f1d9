import math
import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from finboard.models import Transaction
from finboard.query_builder import TransactionQuery
from finboard.schemas import PaginationMeta
from finboard.validation import PaginationParams

logger = logging.getLogger(__name__)


@dataclass
class Page:
    data: List[Transaction]
    pagination: PaginationMeta


def build_page_meta(page: int, limit: int, total: int) -> PaginationMeta:
    """Compute page metadata; pages past the end are valid and simply empty."""
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        totalPages=total_pages,
        hasNext=page < total_pages,
        hasPrev=page > 1,
    )


async def paginate(db: AsyncSession, query: TransactionQuery, params: PaginationParams) -> Page:
    """Fetch one window of `query` together with the unwindowed total.

    Both statements are derived from the same predicate. A window that
    starts past the last row is empty and is not queried.
    """
    total = (await db.execute(query.count())).scalar_one()

    rows: List[Transaction] = []
    if params.skip < total:
        window = query.select().offset(params.skip).limit(params.limit)
        result = await db.execute(window)
        rows = list(result.scalars().all())

    logger.debug(f"Page {params.page} of {total} matching transactions returned {len(rows)} rows")
    return Page(data=rows, pagination=build_page_meta(params.page, params.limit, total))
