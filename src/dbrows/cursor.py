"""
Raw SQL execution over a live SQLAlchemy connection.

Statements are sent to the driver as-is (`exec_driver_sql`); nothing is
parsed for bind markers, so literal colons and percent signs in the SQL
text are preserved.
"""
import logging
import time
from collections.abc import Sequence
from functools import wraps
from typing import TYPE_CHECKING, Any

from more_itertools import chunked
from sqlalchemy.engine import CursorResult

if TYPE_CHECKING:
    from dbrows.provider.client import DbConnection

logger = logging.getLogger(__name__)

_NO_PARAMETERS = {'no_parameters': True}


def dumpsql(func):
    """Decorator for logging SQL statements."""
    @wraps(func)
    def wrapper(self, operation: str, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{operation}\nargs: {args}')
        try:
            return func(self, operation, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{operation}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            self.connection.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


def dumpsql_many(func):
    """Decorator for logging executemany operations."""
    @wraps(func)
    def wrapper(self, operation: str, seq_of_parameters: Sequence, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{operation}\nparams: {len(seq_of_parameters)} rows')
        try:
            return func(self, operation, seq_of_parameters, *args, **kwargs)
        except Exception:
            logger.error(f'Error with executemany:\nSQL:\n{operation}')
            raise
        finally:
            elapsed = time.time() - start
            self.connection.addcall(elapsed)
            logger.debug(f'Executemany time: {elapsed:.4f}s')
    return wrapper


class Cursor:
    """Executes driver-level SQL on a provider connection."""

    def __init__(self, connection: 'DbConnection') -> None:
        self.connection = connection

    @property
    def sa_connection(self) -> Any:
        return self.connection.require()

    @dumpsql
    def execute(self, operation: str, params: Sequence | None = None) -> CursorResult:
        """Execute a statement, binding `params` when given."""
        if params:
            return self.sa_connection.exec_driver_sql(operation, tuple(params))
        return self.sa_connection.exec_driver_sql(operation, execution_options=_NO_PARAMETERS)

    @dumpsql_many
    def executemany(self, operation: str, seq_of_parameters: Sequence[Sequence],
                    batch_size: int = 500) -> int:
        """Execute against all parameter rows in chunks of `batch_size`.

        Returns the total affected row count.
        """
        if not seq_of_parameters:
            logger.warning('executemany called with no parameter sequences')
            return 0

        if len(seq_of_parameters) > batch_size:
            logger.debug(f'Batching {len(seq_of_parameters)} rows into chunks of {batch_size}')

        total_rowcount = 0
        for chunk in chunked(seq_of_parameters, batch_size):
            result = self.sa_connection.exec_driver_sql(operation, [tuple(p) for p in chunk])
            total_rowcount += result.rowcount if result.rowcount >= 0 else len(chunk)
        return total_rowcount
