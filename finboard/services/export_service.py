import csv
import io
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Iterator, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from finboard.enums import EXPORT_COLUMNS
from finboard.errors import InvalidColumnsError, NoDataError, ParameterValidationError
from finboard.models import Transaction
from finboard.query_builder import build_query
from finboard.validation import FilterSet, SortSpec

logger = logging.getLogger(__name__)


@dataclass
class CsvExport:
    filename: str
    columns: List[str]
    rows: List[Transaction]

    def iter_lines(self) -> Iterator[str]:
        return iter_csv(self.rows, self.columns)


def validate_columns(columns: Optional[Iterable[Any]]) -> List[str]:
    """Check requested export columns against the closed column set.

    Every unknown column is reported at once, in request order.
    """
    columns = list(columns or [])
    if not columns:
        raise ParameterValidationError("columns", "At least one column must be selected")

    invalid = [str(column) for column in columns if column not in EXPORT_COLUMNS]
    if invalid:
        raise InvalidColumnsError(invalid, EXPORT_COLUMNS)
    return columns


def column_title(column: str) -> str:
    return column[:1].upper() + column[1:]


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _render_line(values: List[str]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(values)
    return buffer.getvalue()


def iter_csv(rows: Iterable[Any], columns: List[str]) -> Iterator[str]:
    """Yield the header line and then one line per record.

    Only the requested columns are emitted, in the requested order.
    """
    yield _render_line([column_title(column) for column in columns])
    for row in rows:
        yield _render_line([format_value(getattr(row, column)) for column in columns])


def render_csv(rows: Iterable[Any], columns: List[str]) -> str:
    return "".join(iter_csv(rows, columns))


class ExportService:
    """Builds CSV exports of the filtered, sorted, unpaginated transaction set"""

    async def export(
        self,
        db: AsyncSession,
        filters: FilterSet,
        sort: SortSpec,
        columns: List[str]
    ) -> CsvExport:
        query = build_query(filters, sort)
        result = await db.execute(query.select())
        rows = list(result.scalars().all())

        if not rows:
            raise NoDataError("No data found matching the specified filters")

        filename = f"transactions_{date.today().isoformat()}.csv"
        logger.info(f"Exporting {len(rows)} transactions with columns {columns}")
        return CsvExport(filename=filename, columns=columns, rows=rows)

# Shared service instance
export_service = ExportService()
