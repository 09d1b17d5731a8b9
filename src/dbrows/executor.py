"""
Read, write and raw execute operations over a live connection.

Each call is one-shot: SQL is built, issued through the connection's
provider objects, and the result is returned. Nothing is retained between
calls and nothing is retried. Driver and SQLAlchemy errors surface as
`QueryFailed`, or as `BadParameterFormat` for data conversion errors.
"""
import logging
from collections.abc import Iterable, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import sqlalchemy.exc as sa_exc

from dbrows.connection import Connection
from dbrows.exceptions import BadParameterFormat, DatabaseError, QueryFailed
from dbrows.grid import RowGrid
from dbrows.options import ExchangeOptions
from dbrows.sql import WhereTerm, assemble_where, build_select_sql
from dbrows.sql import substitute_parameters
from dbrows.types import render_parameter, stringify

__all__ = [
    'QueryExecutor',
    'ReadResult',
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadResult:
    """Rows read from a table."""
    grid: RowGrid
    row_count: int


@contextmanager
def translate_errors(action: str):
    """Re-raise SQLAlchemy errors as dbrows errors."""
    try:
        yield
    except DatabaseError:
        raise
    except sa_exc.DataError as e:
        raise BadParameterFormat(f'Bad format provided in {action}: {e.orig}') from e
    except sa_exc.DBAPIError as e:
        raise QueryFailed(f'{action} failed: {e.orig}') from e
    except sa_exc.StatementError as e:
        raise BadParameterFormat(f'Bad format provided in {action}: {e.orig}') from e
    except sa_exc.SQLAlchemyError as e:
        raise QueryFailed(f'{action} failed: {e}') from e


def _bind_cell(cell: str | None) -> str | None:
    """Empty cells are written as NULL."""
    if cell is None or cell == '':
        return None
    return cell


class QueryExecutor:
    """Runs row exchange operations on one connection.
    """

    def __init__(self, connection: Connection, options: ExchangeOptions | None = None) -> None:
        self.connection = connection
        self.options = options or ExchangeOptions()

    @property
    def provider(self):
        return self.connection.provider

    def prepare(self, sql_template: str, values: Sequence[Any]) -> str:
        """Substitute `@n` markers with rendered values.

        Raises BadParameterFormat if a value cannot be rendered.
        """
        rendered = [render_parameter(value) for value in values]
        return substitute_parameters(sql_template, rendered)

    def execute_sql(self, sql: str) -> int:
        """Run a complete statement and return the affected row count."""
        db = self.connection.require()
        command = self.provider.create_command(db, sql)
        with translate_errors('execute'):
            rowcount = command.execute_non_query()
        logger.debug(f'Statement affected {rowcount} rows')
        return rowcount

    def execute(self, sql_template: str, values: Sequence[Any] = ()) -> int:
        """Substitute positional markers, run the statement, return affected rows.

        Substitution is textual; values are not bound as driver parameters.
        """
        self.connection.require()
        return self.execute_sql(self.prepare(sql_template, values))

    def read(self, table: str, where: Iterable[WhereTerm | tuple[str, str]],
             column_count: int) -> ReadResult:
        """Select rows from `table` into a grid of `column_count` columns.

        Each cell holds the string form of the database value. Extra result
        columns are dropped; missing ones stay unset.
        """
        if column_count < 0:
            raise BadParameterFormat(f'column_count must be non-negative, got {column_count}')
        db = self.connection.require()

        sql = build_select_sql(table, assemble_where(where))
        adapter = self.provider.create_data_adapter(db)
        adapter.select_command = self.provider.create_command(db, sql)
        with translate_errors('read'):
            columns, rows = adapter.fill()

        if len(columns) > column_count:
            logger.warning(f'{table} returned {len(columns)} columns, keeping the first {column_count}')
        width = min(len(columns), column_count)

        grid = RowGrid(len(rows), column_count)
        for i, row in enumerate(rows):
            for j in range(width):
                grid[i, j] = stringify(row[j])

        logger.debug(f'Read {len(rows)} rows from {table}')
        return ReadResult(grid, len(rows))

    def write(self, table: str, grid: RowGrid, row_count: int | None = None) -> int:
        """Insert the first `row_count` rows of `grid` into `table`.

        Grid column j is written to the table's column j; column names are
        never matched. Trailing table columns beyond the grid width get
        their defaults. All rows are inserted in one transaction.

        Returns the number of inserted rows.
        """
        row_count = grid.rows if row_count is None else row_count
        if not 0 <= row_count <= grid.rows:
            raise BadParameterFormat(f'row_count {row_count} outside grid of {grid.rows} rows')
        db = self.connection.require()
        if row_count == 0:
            logger.debug(f'Skipping write of empty grid to {table}')
            return 0

        adapter = self.provider.create_data_adapter(db)
        adapter.select_command = self.provider.create_command(db, build_select_sql(table))
        builder = self.provider.create_command_builder(adapter)
        with translate_errors('write'):
            adapter.insert_command = builder.get_insert_command(table, column_count=grid.cols)

        if grid.cols > len(builder.columns):
            raise BadParameterFormat(
                f'Grid has {grid.cols} columns but table {table} has {len(builder.columns)}')

        rows = [[_bind_cell(cell) for cell in grid.row(i)] for i in range(row_count)]
        with translate_errors('write'):
            inserted = adapter.update(rows, batch_size=self.options.batch_size)
        logger.debug(f'Inserted {inserted} rows into {table}')
        return inserted
