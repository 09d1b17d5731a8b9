"""
PostgreSQL provider.

Accepts a SQLAlchemy/libpq `postgresql://` URL or an ADO-style string such
as `Host=localhost;Port=5432;Database=sim;Username=app;Password=secret`.
The psycopg 3 driver is always used.
"""
import logging

import sqlalchemy as sa

from dbrows.provider.base import ProviderFactory, parse_connection_string, pick
from dbrows.provider.base import register_provider

logger = logging.getLogger(__name__)


@register_provider('PostgreSQL Data Provider')
class PostgresProvider(ProviderFactory):
    """PostgreSQL through psycopg.
    """

    placeholder = '%s'

    @property
    def dialect_name(self) -> str:
        return 'postgresql'

    @property
    def driver_module(self) -> str:
        return 'psycopg'

    def build_url(self, connection_string: str) -> sa.URL:
        """Build the SQLAlchemy URL for PostgreSQL."""
        connection_string = connection_string.strip()
        url = self._url_from_string(connection_string, 'postgresql+psycopg')
        if url is not None:
            return url

        pairs = parse_connection_string(connection_string)
        host = pick(pairs, 'host', 'server', 'data source')
        database = pick(pairs, 'database', 'initial catalog', 'dbname')
        if not host or not database:
            raise ValueError('PostgreSQL connection string needs a host and a database')

        port = pick(pairs, 'port')
        if port is not None and not port.isdigit():
            raise ValueError(f'Invalid port: {port!r}')
        logger.debug(f'PostgreSQL database {database} on {host}')

        query = {}
        timeout = pick(pairs, 'timeout', 'connect timeout', 'connection timeout')
        if timeout:
            query['connect_timeout'] = timeout
        appname = pick(pairs, 'application name', 'applicationname')
        if appname:
            query['application_name'] = appname

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=pick(pairs, 'username', 'user id', 'user', 'uid'),
            password=pick(pairs, 'password', 'pwd'),
            host=host,
            port=int(port) if port else None,
            database=database,
            query=query
        )
