"""
Host-facing element that owns one connection for a simulation run.

The element opens its connection when constructed and closes it on
`shutdown()`. Every operation reports failures through the host's
`Reporter` and re-raises them; successful operations emit one trace line.
If the connection could not be opened, every later operation fails with
`NoConnection` without trying to connect again.
"""
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, Self, TypeVar

from dbrows.connection import Connection, connect
from dbrows.exceptions import BadParameterFormat, ConnectionFailure, DatabaseError
from dbrows.exceptions import NoConnection
from dbrows.executor import QueryExecutor, ReadResult
from dbrows.grid import RowGrid
from dbrows.options import ConnectionProfile, ExchangeOptions, load_profile
from dbrows.sql import WhereTerm
from dbrows.types import ColumnKind, TypedValue, coerce_row, serialize_row

__all__ = [
    'Reporter',
    'LoggingReporter',
    'LoadResult',
    'RowExchangeElement',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Reporter(Protocol):
    """Sink for host-visible error and trace messages."""

    def report_error(self, message: str) -> None: ...

    def trace(self, message: str) -> None: ...


class LoggingReporter:
    """Reporter that delivers messages through the logging module."""

    def __init__(self, name: str = 'dbrows.host') -> None:
        self.logger = logging.getLogger(name)

    def report_error(self, message: str) -> None:
        self.logger.error(message)

    def trace(self, message: str) -> None:
        self.logger.info(message)


@dataclass(frozen=True)
class LoadResult:
    """Typed rows loaded for a destination, with the count of cells read."""
    rows: list[list[TypedValue | None]]
    cells_read: int

    @property
    def row_count(self) -> int:
        return len(self.rows)


class RowExchangeElement:
    """One database connection shared by read, write and execute requests.

    Not thread-safe; the host must serialize calls into an instance.
    """

    def __init__(self, profile: ConnectionProfile | dict[str, Any],
                 reporter: Reporter | None = None,
                 options: ExchangeOptions | None = None) -> None:
        self.profile = load_profile(profile)
        self.reporter = reporter or LoggingReporter()
        self.options = options or ExchangeOptions()
        self.connection: Connection | None = None
        self._executor: QueryExecutor | None = None
        self._shut_down = False

        try:
            self.connection = connect(self.profile)
        except ConnectionFailure as e:
            self.reporter.report_error(str(e))
        else:
            self._executor = QueryExecutor(self.connection, self.options)

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and self.connection.is_open

    def _run(self, action: Callable[[QueryExecutor], T]) -> T:
        try:
            if self._executor is None or not self.is_connected:
                raise NoConnection(f'No database connection for provider {self.profile.provider_name!r}')
            return action(self._executor)
        except DatabaseError as e:
            self.reporter.report_error(str(e))
            raise

    def execute(self, sql_template: str, values: Sequence[Any] = ()) -> int:
        """Run a statement with `@n` markers replaced by `values`."""
        def action(executor: QueryExecutor) -> tuple[str, int]:
            sql = executor.prepare(sql_template, values)
            return sql, executor.execute_sql(sql)

        sql, rowcount = self._run(action)
        self.reporter.trace(f'DbExecute ran using the SQL statement {sql} affecting {rowcount} rows')
        return rowcount

    def read(self, table: str, where: Iterable[WhereTerm | tuple[str, str]],
             column_count: int) -> ReadResult:
        """Read rows of `table` matching literal WHERE terms into a grid."""
        result = self._run(lambda executor: executor.read(table, list(where), column_count))
        self.reporter.trace(f'DbRead has read {result.row_count} rows from table {table}')
        return result

    def read_rows(self, table: str, kinds: Sequence[ColumnKind],
                  where: Iterable[tuple[str, Any]] = ()) -> LoadResult:
        """Read rows of `table` and coerce them to destination column kinds.

        `where` holds (column, value) pairs; values are rendered as SQL
        literals by kind. Cells that cannot be coerced are left as None.
        """
        terms = [WhereTerm.from_value(column, value) for column, value in where]
        result = self.read(table, terms, len(kinds))
        rows, cells_read = [], 0
        for cells in result.grid:
            values, count = coerce_row(kinds, cells, self.options.epoch)
            rows.append(values)
            cells_read += count
        return LoadResult(rows, cells_read)

    def write(self, table: str, grid: RowGrid, row_count: int | None = None) -> int:
        """Insert the first `row_count` grid rows into `table`."""
        inserted = self._run(lambda executor: executor.write(table, grid, row_count))
        self.reporter.trace(f'DbWrite inserted {inserted} rows into table {table}')
        return inserted

    def write_rows(self, table: str, rows: Sequence[Sequence[Any]]) -> int:
        """Serialize arbitrary source rows to cells and insert them."""
        try:
            grid = RowGrid.from_rows(serialize_row(row) for row in rows)
        except ValueError as e:
            error = BadParameterFormat(f'Bad format provided in DbWrite step: {e}')
            self.reporter.report_error(str(error))
            raise error from e
        return self.write(table, grid, grid.rows)

    def shutdown(self) -> None:
        """Close the connection at the end of the run."""
        if self._shut_down:
            return
        self._shut_down = True
        if self.connection is not None:
            logger.debug(f'Shutting down after {self.connection.calls} statements')
            self.connection.close()
        self._executor = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.shutdown()
