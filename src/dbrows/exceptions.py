"""
Row exchange exception classes.
"""
import sqlite3

import psycopg
import sqlalchemy.exc as sa_exc


class DatabaseError(Exception):
    """Base class for all dbrows errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining the live connection.
    """


class ProviderNotFound(ConnectionFailure):
    """No registered provider matches the requested display name.
    """

    def __init__(self, provider_name: str, available: list[str]) -> None:
        self.provider_name = provider_name
        self.available = list(available)
        names = '\n'.join(self.available)
        super().__init__(f'Provider {provider_name!r} not found. Available providers are :\n{names}')


class ConnectionCreateFailed(ConnectionFailure):
    """The provider could not create a connection object.
    """


class ConnectionStringInvalid(ConnectionFailure):
    """The provider rejected the connection string.
    """


class ConnectionOpenFailed(ConnectionFailure):
    """Opening the connection failed (auth, unreachable host, ...).
    """


class NoConnection(ConnectionFailure):
    """Operation attempted without a live connection.
    """


class QueryError(DatabaseError):
    """Error in query syntax or execution.
    """


class QueryFailed(QueryError):
    """The database client failed to run a statement.
    """


class TypeConversionError(DatabaseError):
    """Error converting values between cells and database types.
    """


class BadParameterFormat(TypeConversionError):
    """A value could not be rendered or bound for a statement.
    """


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    ConnectionFailure,
    )
