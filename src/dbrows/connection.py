"""
Live connection lifecycle.

This module provides:
1. The `connect()` function, which resolves the provider, creates the
   connection object, applies the connection string and opens it
2. The `Connection` class, which owns that one live connection until
   `close()` is called

Each step of `connect()` maps its failure to a distinct error, and any
failure leaves nothing open. A `Connection` is opened once, used for any
number of operations, and closed once; it is not safe for concurrent use.
"""
import logging
from typing import Any, Self

from dbrows.exceptions import ConnectionCreateFailed, ConnectionOpenFailed
from dbrows.exceptions import ConnectionStringInvalid, NoConnection
from dbrows.options import ConnectionProfile, load_profile
from dbrows.provider import ProviderFactory, resolve_provider
from dbrows.provider.client import DbConnection

__all__ = [
    'Connection',
    'connect',
]

logger = logging.getLogger(__name__)


class Connection:
    """Owns a single provider connection for its lifetime.

    Supports the context manager protocol; leaving the block closes the
    connection.
    """

    def __init__(self, profile: ConnectionProfile, provider: ProviderFactory,
                 db: DbConnection) -> None:
        self.profile = profile
        self.provider = provider
        self.db: DbConnection | None = db

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self.db is not None and self.db.is_open

    @property
    def dialect(self) -> str:
        return self.provider.dialect_name

    @property
    def calls(self) -> int:
        return self.db.calls if self.db else 0

    @property
    def time(self) -> float:
        return self.db.time if self.db else 0.0

    def require(self) -> DbConnection:
        """Return the open provider connection or raise NoConnection."""
        if not self.is_open:
            raise NoConnection(f'No open connection for provider {self.provider.display_name!r}')
        return self.db

    def close(self) -> None:
        """Release the connection. Closing twice, or after a failure, is a no-op.
        """
        if self.db is None:
            return
        db, self.db = self.db, None
        db.close()
        logger.debug(f'Released {self.provider.display_name} connection')

    def __repr__(self) -> str:
        state = 'open' if self.is_open else 'closed'
        return f'Connection({self.provider.display_name!r}, {state})'


def connect(profile: ConnectionProfile | dict[str, Any] | None = None,
            **kw: Any) -> Connection:
    """Open a connection described by a profile.

    Args:
        profile: ConnectionProfile, or a dict of its fields
        **kw: Profile fields given as keyword arguments

    Raises
        ProviderNotFound: No provider has the profile's display name
        ConnectionCreateFailed: The provider could not create a connection
        ConnectionStringInvalid: The provider rejected the connection string
        ConnectionOpenFailed: Opening the connection failed
    """
    profile = load_profile(profile, **kw)
    provider = resolve_provider(profile.provider_name)

    try:
        db = provider.create_connection()
    except Exception as e:
        raise ConnectionCreateFailed(
            f"Exception trying to create the connection object. Message: '{e}'") from e

    try:
        db.connection_string = profile.connection_string
    except Exception as e:
        raise ConnectionStringInvalid(
            f"Exception trying to set connection string. Message: '{e}'") from e

    try:
        db.open()
    except Exception as e:
        db.close()
        raise ConnectionOpenFailed(
            f"Exception trying to open database connection. Message: '{e}'") from e

    logger.info(f'Connected using {provider.display_name}')
    return Connection(profile, provider, db)
