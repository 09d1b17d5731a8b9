"""
Provider client objects: connection, command, data adapter, command builder.

These are created through a `ProviderFactory` and are shared by every
provider; backend differences are looked up on the factory.
"""
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Self

import sqlalchemy as sa
from sqlalchemy.pool import NullPool

from dbrows.cursor import Cursor
from dbrows.exceptions import NoConnection
from dbrows.sql import build_insert_sql

if TYPE_CHECKING:
    from dbrows.provider.base import ProviderFactory

logger = logging.getLogger(__name__)


class DbConnection:
    """A single provider connection.

    Created unopened; assign `connection_string`, then call `open()`. The
    engine does no pooling, so closing the connection releases the
    underlying driver handle.
    """

    def __init__(self, provider: 'ProviderFactory') -> None:
        self.provider = provider
        self._connection_string: str | None = None
        self.url: sa.URL | None = None
        self.engine: sa.Engine | None = None
        self.sa_connection: sa.Connection | None = None
        self.calls = 0
        self.time = 0.0

    @property
    def connection_string(self) -> str | None:
        return self._connection_string

    @connection_string.setter
    def connection_string(self, value: str) -> None:
        self.url = self.provider.build_url(value)
        self._connection_string = value

    @property
    def is_open(self) -> bool:
        return self.sa_connection is not None and not self.sa_connection.closed

    def open(self) -> Self:
        """Create the engine and open the connection."""
        if self.url is None:
            raise ValueError('Connection string has not been set')
        engine_kwargs: dict[str, Any] = {'poolclass': NullPool, 'echo': False}
        engine_kwargs.update(self.provider.get_engine_kwargs())
        self.engine = sa.create_engine(self.url, **engine_kwargs)
        try:
            self.sa_connection = self.engine.connect()
        except Exception:
            self.engine.dispose()
            self.engine = None
            raise
        logger.debug(f'Opened {self.provider.display_name} connection to {self.url!r}')
        return self

    def require(self) -> sa.Connection:
        """Return the live SQLAlchemy connection or raise NoConnection."""
        if not self.is_open:
            raise NoConnection('No open database connection')
        return self.sa_connection

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def commit(self) -> None:
        self.require().commit()

    def rollback(self) -> None:
        """Roll back the pending transaction, if any."""
        if self.is_open and self.sa_connection.in_transaction():
            self.sa_connection.rollback()

    def close(self) -> None:
        """Release the connection and dispose the engine. Safe to repeat."""
        if self.sa_connection is not None:
            try:
                self.rollback()
            finally:
                self.sa_connection.close()
                self.sa_connection = None
                logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s '
                             f'(avg: {self.time/max(1,self.calls):.3f}s per query)')
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    def cursor(self) -> Cursor:
        return Cursor(self)


class Command:
    """SQL text bound to a connection."""

    def __init__(self, connection: DbConnection, sql: str = '') -> None:
        self.connection = connection
        self.sql = sql

    def execute_non_query(self) -> int:
        """Run the statement, commit, and return the affected row count."""
        try:
            result = self.connection.cursor().execute(self.sql)
            rowcount = result.rowcount
            result.close()
            self.connection.commit()
        except Exception:
            self.connection.rollback()
            raise
        return rowcount

    def execute_reader(self, max_rows: int | None = None) -> tuple[list[str], list[tuple]]:
        """Run a query and return its column names and rows.

        Fetches at most `max_rows` rows when given; the read transaction is
        ended before returning.
        """
        try:
            result = self.connection.cursor().execute(self.sql)
            columns = list(result.keys())
            if max_rows is None:
                rows = [tuple(row) for row in result.fetchall()]
            else:
                rows = [tuple(row) for row in result.fetchmany(max_rows)] if max_rows else []
            result.close()
        finally:
            self.connection.rollback()
        return columns, rows


class DataAdapter:
    """Moves rows between a table and the caller.

    `select_command` defines the rows to fill; `insert_command` is used by
    `update` to append new rows.
    """

    def __init__(self, connection: DbConnection) -> None:
        self.connection = connection
        self.select_command: Command | None = None
        self.insert_command: Command | None = None

    def _require_select(self) -> Command:
        if self.select_command is None:
            raise ValueError('DataAdapter has no select command')
        return self.select_command

    def fill(self) -> tuple[list[str], list[tuple]]:
        """Run the select command and return column names and all rows."""
        return self._require_select().execute_reader()

    def fill_schema(self) -> list[str]:
        """Column names of the select command's result, without reading rows."""
        columns, _ = self._require_select().execute_reader(max_rows=0)
        return columns

    def update(self, rows: Sequence[Sequence[Any]], batch_size: int = 500) -> int:
        """Insert all rows with the insert command in one transaction.

        Returns the number of rows inserted.
        """
        if self.insert_command is None:
            raise ValueError('DataAdapter has no insert command')
        if not rows:
            return 0
        try:
            rowcount = self.connection.cursor().executemany(
                self.insert_command.sql, rows, batch_size=batch_size)
            self.connection.commit()
        except Exception:
            self.connection.rollback()
            raise
        return rowcount


class CommandBuilder:
    """Derives an INSERT command from a data adapter's select layout."""

    def __init__(self, provider: 'ProviderFactory', adapter: DataAdapter) -> None:
        self.provider = provider
        self.adapter = adapter
        self.columns: list[str] = []

    def get_insert_command(self, table: str, column_count: int | None = None) -> Command:
        """Build the INSERT for `table` from the select command's columns.

        Only the first `column_count` columns are targeted when given.
        """
        self.columns = self.adapter.fill_schema()
        columns = self.columns if column_count is None else self.columns[:column_count]
        sql = build_insert_sql(table, columns, self.provider.placeholder,
                               self.provider.dialect_name)
        return Command(self.adapter.connection, sql)
