"""
Row exchange between a host runtime and any supported relational database.

All operations can be called either as:
- Module functions: dbrows.read(cn, table, where, column_count)
- QueryExecutor methods: QueryExecutor(cn).read(table, where, column_count)

Hosts that want error reporting and a run-scoped connection use
`RowExchangeElement`.
"""
__version__ = '0.1.0'

from collections.abc import Iterable, Sequence
from typing import Any

from dbrows.connection import Connection, connect
from dbrows.element import LoadResult, LoggingReporter, Reporter
from dbrows.element import RowExchangeElement
from dbrows.exceptions import BadParameterFormat, ConnectionCreateFailed
from dbrows.exceptions import ConnectionFailure, ConnectionOpenFailed
from dbrows.exceptions import ConnectionStringInvalid, DatabaseError
from dbrows.exceptions import DbConnectionError, NoConnection, ProviderNotFound
from dbrows.exceptions import QueryError, QueryFailed, TypeConversionError
from dbrows.executor import QueryExecutor, ReadResult
from dbrows.grid import RowGrid
from dbrows.options import ConnectionProfile, ExchangeOptions, load_profile
from dbrows.provider import get_available_providers, register_provider
from dbrows.provider import resolve_provider
from dbrows.sql import ParameterizedStatement, WhereTerm, assemble_where
from dbrows.sql import substitute_parameters
from dbrows.types import ColumnKind, TypedValue, coerce_cell, serialize_row, to_cell
from dbrows.types import to_literal


def execute(cn: Connection, sql: str, *args: Any) -> int:
    """Substitute `@n` markers with args, run the statement, return affected rows.
    """
    return QueryExecutor(cn).execute(sql, args)


def read(cn: Connection, table: str, where: Iterable[WhereTerm | tuple[str, str]],
         column_count: int) -> ReadResult:
    """Read rows of a table matching WHERE terms into a grid.
    """
    return QueryExecutor(cn).read(table, where, column_count)


def write(cn: Connection, table: str, grid: RowGrid, row_count: int | None = None,
          batch_size: int = 500) -> int:
    """Insert grid rows into a table, mapping columns by position.
    """
    return QueryExecutor(cn, ExchangeOptions(batch_size=batch_size)).write(table, grid, row_count)


def write_rows(cn: Connection, table: str, rows: Sequence[Sequence[Any]]) -> int:
    """Serialize arbitrary rows to cells and insert them.
    """
    grid = RowGrid.from_rows(serialize_row(row) for row in rows)
    return write(cn, table, grid)


__all__ = [
    'connect',
    'Connection',
    'ConnectionProfile',
    'ExchangeOptions',
    'load_profile',
    'QueryExecutor',
    'ReadResult',
    'RowExchangeElement',
    'Reporter',
    'LoggingReporter',
    'LoadResult',
    'RowGrid',
    'WhereTerm',
    'ParameterizedStatement',
    'ColumnKind',
    'TypedValue',
    'execute',
    'read',
    'write',
    'write_rows',
    'assemble_where',
    'substitute_parameters',
    'coerce_cell',
    'to_cell',
    'to_literal',
    'resolve_provider',
    'get_available_providers',
    'register_provider',
    'DatabaseError',
    'ConnectionFailure',
    'ProviderNotFound',
    'ConnectionCreateFailed',
    'ConnectionStringInvalid',
    'ConnectionOpenFailed',
    'NoConnection',
    'QueryError',
    'QueryFailed',
    'TypeConversionError',
    'BadParameterFormat',
    'DbConnectionError',
]
