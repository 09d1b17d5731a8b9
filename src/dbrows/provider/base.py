"""
Base provider interface for database families.

A provider is selected by its display name and knows how to turn an opaque
connection string into a SQLAlchemy URL for one backend. It is also the
factory for the objects used to talk to that backend: connections,
commands, data adapters and command builders.

Each concrete provider only supplies backend details (URL mapping, driver
module, placeholder style, identifier quoting); the shared client objects
in `dbrows.provider.client` do the work.
"""
import importlib
import logging
from abc import ABC, abstractmethod
from typing import Any

import sqlalchemy as sa

from dbrows.provider.client import Command, CommandBuilder, DataAdapter
from dbrows.provider.client import DbConnection
from dbrows.sql import quote_identifier as sql_quote_identifier

logger = logging.getLogger(__name__)

# Registry of display name -> provider class, in registration order
_PROVIDER_REGISTRY: dict[str, type['ProviderFactory']] = {}


def register_provider(display_name: str):
    """Decorator to register a provider class under a display name.

    Usage:
        @register_provider('SQLite Data Provider')
        class SQLiteProvider(ProviderFactory):
            ...
    """
    def decorator(cls: type['ProviderFactory']) -> type['ProviderFactory']:
        cls.display_name = display_name
        _PROVIDER_REGISTRY[display_name] = cls
        return cls
    return decorator


def parse_connection_string(connection_string: str) -> dict[str, str]:
    """Parse an ADO-style `Key=Value;Key=Value` string.

    Keys are lower-cased with surrounding whitespace removed; values may be
    wrapped in single or double quotes.

    Raises
        ValueError: If a segment has no `=` or an empty key
    """
    pairs = {}
    for segment in connection_string.split(';'):
        if not segment.strip():
            continue
        key, sep, value = segment.partition('=')
        key = key.strip().lower()
        if not sep or not key:
            raise ValueError(f'Malformed connection string segment: {segment.strip()!r}')
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        pairs[key] = value
    return pairs


def pick(pairs: dict[str, str], *keys: str) -> str | None:
    """First value present for any of the given (lower-case) keys."""
    for key in keys:
        if key in pairs:
            return pairs[key]
    return None


class ProviderFactory(ABC):
    """Base class for database provider families.
    """

    display_name: str = ''
    placeholder: str = '?'

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the SQLAlchemy backend name for this provider."""

    @property
    @abstractmethod
    def driver_module(self) -> str:
        """Return the import name of the DBAPI driver."""

    @abstractmethod
    def build_url(self, connection_string: str) -> sa.URL:
        """Build the SQLAlchemy URL for a connection string.

        Raises
            ValueError: If the connection string cannot be used by this provider
        """

    def get_engine_kwargs(self) -> dict[str, Any]:
        """Return extra SQLAlchemy create_engine kwargs."""
        return {}

    def load_driver(self) -> Any:
        """Import the DBAPI driver module, failing if it is not installed."""
        return importlib.import_module(self.driver_module)

    def quote_identifier(self, identifier: str) -> str:
        """Quote a column name for this backend."""
        return sql_quote_identifier(identifier, self.dialect_name)

    def _url_from_string(self, connection_string: str, drivername: str) -> sa.URL | None:
        """Parse a SQLAlchemy URL if the string is one, forcing our driver.

        Returns None for strings that are not URLs.
        """
        if '://' not in connection_string:
            return None
        url = sa.make_url(connection_string)
        if url.get_backend_name() != self.dialect_name:
            raise ValueError(f'URL backend {url.get_backend_name()!r} does not match '
                             f'provider {self.display_name!r}')
        return url.set(drivername=drivername)

    def create_connection(self) -> DbConnection:
        """Create an unopened connection for this provider."""
        driver = self.load_driver()
        logger.debug(f'{self.display_name} using driver {driver.__name__}')
        return DbConnection(self)

    def create_command(self, connection: DbConnection, sql: str = '') -> Command:
        """Create a command bound to a connection."""
        return Command(connection, sql)

    def create_data_adapter(self, connection: DbConnection) -> DataAdapter:
        """Create a data adapter bound to a connection."""
        return DataAdapter(connection)

    def create_command_builder(self, adapter: DataAdapter) -> CommandBuilder:
        """Create a command builder deriving statements from an adapter."""
        return CommandBuilder(self, adapter)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.display_name!r})'
