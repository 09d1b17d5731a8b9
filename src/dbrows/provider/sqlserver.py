"""
SQL Server provider.

Accepts a SQLAlchemy `mssql://` URL or an ADO/ODBC connection string
(`Server=...;Database=...;Trusted_Connection=yes`), which is handed to
pyodbc unchanged through `odbc_connect`. A default ODBC driver is added
when the string does not name one.
"""
import logging

import sqlalchemy as sa

from dbrows.provider.base import ProviderFactory, parse_connection_string
from dbrows.provider.base import register_provider

logger = logging.getLogger(__name__)

DEFAULT_ODBC_DRIVER = 'ODBC Driver 18 for SQL Server'


@register_provider('SqlClient Data Provider')
class SQLServerProvider(ProviderFactory):
    """SQL Server through pyodbc.
    """

    placeholder = '?'

    @property
    def dialect_name(self) -> str:
        return 'mssql'

    @property
    def driver_module(self) -> str:
        return 'pyodbc'

    def build_url(self, connection_string: str) -> sa.URL:
        """Build the SQLAlchemy URL for SQL Server."""
        connection_string = connection_string.strip()
        url = self._url_from_string(connection_string, 'mssql+pyodbc')
        if url is not None:
            return url

        pairs = parse_connection_string(connection_string)
        if not any(key in pairs for key in ('server', 'data source', 'dsn')):
            raise ValueError('SQL Server connection string needs a Server or DSN')

        odbc_connect = connection_string
        if 'driver' not in pairs and 'dsn' not in pairs:
            logger.debug(f'No ODBC driver given, using {DEFAULT_ODBC_DRIVER}')
            odbc_connect = f'Driver={{{DEFAULT_ODBC_DRIVER}}};{connection_string}'

        return sa.URL.create(drivername='mssql+pyodbc', query={'odbc_connect': odbc_connect})
