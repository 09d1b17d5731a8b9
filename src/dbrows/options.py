import datetime
from dataclasses import dataclass, fields
from typing import Any

__all__ = [
    'ConnectionProfile',
    'ExchangeOptions',
    'load_profile',
]


@dataclass(frozen=True)
class ConnectionProfile:
    """Connection settings supplied once when an element is constructed.

    The connection string is opaque to this package; its format is whatever
    the selected provider accepts.
    """
    connection_string: str
    provider_name: str

    def __post_init__(self):
        for field in fields(self):
            value = getattr(self, field.name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f'{field.name} is required')

    def __repr__(self) -> str:
        return f'ConnectionProfile(provider_name={self.provider_name!r})'


@dataclass
class ExchangeOptions:
    """Options

    - batch_size: Rows per executemany chunk when writing (default: 500)
    - epoch: Simulation start time; numeric cells read into date-time
      columns are taken as hours from this instant (default: None, such
      cells are left unread)
    """
    batch_size: int = 500
    epoch: datetime.datetime | None = None

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError('batch_size must be positive')


def load_profile(options: ConnectionProfile | dict[str, Any] | None = None,
                 **kw: Any) -> ConnectionProfile:
    """Build a ConnectionProfile from a profile, a dict, or keyword arguments.

    Keyword arguments override values taken from a dict.
    """
    if isinstance(options, ConnectionProfile):
        return options

    values = dict(options or {})
    values.update(kw)
    known = {field.name for field in fields(ConnectionProfile)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f'Unknown profile options: {sorted(unknown)}')
    missing = known - set(values)
    if missing:
        raise ValueError(f'Missing profile options: {sorted(missing)}')
    return ConnectionProfile(**values)
