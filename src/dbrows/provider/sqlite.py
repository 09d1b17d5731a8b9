"""
SQLite provider.

Accepts a SQLAlchemy `sqlite://` URL, an ADO-style string naming the file
(`Data Source=app.db;Version=3`), or a bare file path. `:memory:` opens a
private in-memory database that lives as long as the connection.
"""
import logging

import sqlalchemy as sa

from dbrows.provider.base import ProviderFactory, parse_connection_string, pick
from dbrows.provider.base import register_provider

logger = logging.getLogger(__name__)

_FILE_KEYS = ('data source', 'datasource', 'database', 'filename')


@register_provider('SQLite Data Provider')
class SQLiteProvider(ProviderFactory):
    """SQLite through the standard library sqlite3 driver.
    """

    placeholder = '?'

    @property
    def dialect_name(self) -> str:
        return 'sqlite'

    @property
    def driver_module(self) -> str:
        return 'sqlite3'

    def build_url(self, connection_string: str) -> sa.URL:
        """Build the SQLAlchemy URL for SQLite."""
        connection_string = connection_string.strip()
        if not connection_string:
            raise ValueError('SQLite connection string is empty')

        url = self._url_from_string(connection_string, 'sqlite+pysqlite')
        if url is not None:
            return url

        if '=' in connection_string:
            pairs = parse_connection_string(connection_string)
            database = pick(pairs, *_FILE_KEYS)
            if not database:
                raise ValueError(f'SQLite connection string needs one of: {", ".join(_FILE_KEYS)}')
        else:
            database = connection_string

        logger.debug(f'SQLite database: {database}')
        return sa.URL.create(drivername='sqlite+pysqlite', database=database)
