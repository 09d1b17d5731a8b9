"""
Type coercion between untyped grid cells and typed column values.

Two directions are supported:

Cell -> typed column (`coerce_cell`). A destination column declares a
`ColumnKind`; the raw string is tried as numeric, then date-time, then text.
A branch whose kind does not match the destination is skipped, and the
first successful branch wins. A cell no branch accepts is left unread.

Typed value -> string (`to_literal`, `to_cell`). `to_literal` renders SQL
literals for WHERE terms (text and dates single-quoted). `to_cell` renders
the unquoted cell form used when serializing a source row for a write;
values of unknown static kind are tested as number, then date-time, then
fall back to text.

Database values returned by a query are stringified with `stringify`.
"""
import datetime
import decimal
import enum
import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd

from dbrows.exceptions import BadParameterFormat

logger = logging.getLogger(__name__)

__all__ = [
    'ColumnKind',
    'TypedValue',
    'parse_number',
    'parse_datetime',
    'format_number',
    'format_datetime',
    'coerce_cell',
    'coerce_row',
    'to_literal',
    'to_cell',
    'serialize_row',
    'render_parameter',
    'stringify',
]

DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'

_NUMBER = re.compile(r'^[+-]?(\d+(,\d{3})*(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
_SPECIAL_NUMBERS = {'nan', '+nan', '-nan', 'infinity', '+infinity', '-infinity'}

# Two defaults differing in every date field: a string parsed identically
# under both carries its own year, month and day.
_DEFAULT_A = datetime.datetime(1900, 1, 1)
_DEFAULT_B = datetime.datetime(2000, 2, 2)


class ColumnKind(enum.Enum):
    """Declared kind of a destination column."""
    NUMERIC = 'numeric'
    DATETIME = 'datetime'
    TEXT = 'text'


@dataclass(frozen=True, slots=True)
class TypedValue:
    """A value tagged with the column kind it was coerced to."""
    kind: ColumnKind
    value: float | datetime.datetime | str

    @classmethod
    def numeric(cls, value: float) -> 'TypedValue':
        return cls(ColumnKind.NUMERIC, float(value))

    @classmethod
    def timestamp(cls, value: datetime.datetime) -> 'TypedValue':
        return cls(ColumnKind.DATETIME, value)

    @classmethod
    def text(cls, value: str) -> 'TypedValue':
        return cls(ColumnKind.TEXT, value)


# Parsing

def parse_number(raw: str) -> float | None:
    """Parse a culture-invariant floating point number.

    Accepts surrounding whitespace, a sign, exponents, `,` thousands
    separators, and NaN/Infinity. Returns None when the text is not a number.
    """
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None
    if text.lower() in _SPECIAL_NUMBERS:
        return float(text.lower().replace('infinity', 'inf'))
    if not _NUMBER.match(text):
        return None
    return float(text.replace(',', ''))


def parse_datetime(raw: str) -> datetime.datetime | None:
    """Parse a culture-invariant (month first) date-time.

    Numeric-looking text is never a date, and the text must name a year,
    month and day. Timezone-aware results are converted to naive UTC.
    """
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text or parse_number(text) is not None:
        return None

    try:
        return _naive(datetime.datetime.fromisoformat(text))
    except ValueError:
        pass

    try:
        first = dateutil.parser.parse(text, default=_DEFAULT_A)
        second = dateutil.parser.parse(text, default=_DEFAULT_B)
    except (ValueError, OverflowError) as e:
        logger.debug(f'Not a date-time: {text!r} ({e})')
        return None
    if first.date() != second.date():
        return None
    return _naive(first)


def _naive(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is not None:
        return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


# Formatting

def format_number(value: float | int | decimal.Decimal) -> str:
    """Invariant decimal string; integral floats drop the fractional part."""
    if isinstance(value, bool | np.bool_):
        return '1' if value else '0'
    if isinstance(value, int | np.integer):
        return str(int(value))
    if isinstance(value, decimal.Decimal):
        return format(value, 'f')
    number = float(value)
    if math.isnan(number):
        return 'NaN'
    if math.isinf(number):
        return 'Infinity' if number > 0 else '-Infinity'
    if number.is_integer() and abs(number) < 1e15:
        return str(int(number))
    return repr(number)


def format_datetime(value: datetime.datetime | datetime.date) -> str:
    """Format as `yyyy-MM-dd HH:mm:ss`."""
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime(value.year, value.month, value.day)
    return value.strftime(DATETIME_FORMAT)


# Cell -> typed column

def _try_numeric(raw: str) -> TypedValue | None:
    number = parse_number(raw)
    if number is not None:
        return TypedValue.numeric(number)
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered == 'true':
            return TypedValue.numeric(1.0)
        if lowered == 'false':
            return TypedValue.numeric(0.0)
    return None


def _try_datetime(raw: str, epoch: datetime.datetime | None) -> TypedValue | None:
    value = parse_datetime(raw)
    if value is not None:
        return TypedValue.timestamp(value)

    hours = parse_number(raw)
    if hours is None or epoch is None or not math.isfinite(hours):
        return None
    try:
        return TypedValue.timestamp(epoch + datetime.timedelta(hours=hours))
    except OverflowError:
        return None


def coerce_cell(kind: ColumnKind, raw: str | None,
                epoch: datetime.datetime | None = None) -> TypedValue | None:
    """Coerce a raw cell into a value for a column of the given kind.

    Precedence is numeric, date-time, text; branches for other kinds are
    skipped. For date-time columns a plain number is read as hours after
    `epoch`, and left unread when no epoch is given. Returns None when the
    cell cannot be read.
    """
    if raw is None:
        return None
    if kind is ColumnKind.NUMERIC:
        return _try_numeric(raw)
    if kind is ColumnKind.DATETIME:
        return _try_datetime(raw, epoch)
    if kind is ColumnKind.TEXT:
        return TypedValue.text(raw)
    return None


def coerce_row(kinds: Sequence[ColumnKind], cells: Sequence[str | None],
               epoch: datetime.datetime | None = None) -> tuple[list[TypedValue | None], int]:
    """Coerce a row of cells against destination column kinds.

    Returns the typed values (None where unread) and the count of cells read.
    """
    values = [coerce_cell(kind, cell, epoch) for kind, cell in zip(kinds, cells)]
    values.extend([None] * (len(kinds) - len(values)))
    return values, sum(1 for v in values if v is not None)


# Typed value -> string

def _is_absent(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, np.datetime64 | np.timedelta64) and bool(np.isnat(value))


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float | decimal.Decimal | np.integer | np.floating | np.bool_)


def _is_finite_number(value: Any) -> bool:
    if not _is_number(value):
        return False
    if isinstance(value, decimal.Decimal):
        return value.is_finite()
    return math.isfinite(float(value))


def to_literal(value: Any) -> str:
    """Render a typed value as a SQL literal for a WHERE term.

    Numbers are bare, date-times and text are single-quoted, and an absent
    value renders as an empty string. Embedded quotes are not escaped.
    """
    if isinstance(value, TypedValue):
        value = value.value
    if _is_absent(value):
        return ''
    if _is_number(value):
        return format_number(value)
    if isinstance(value, datetime.datetime | datetime.date):
        return f"'{format_datetime(value)}'"
    return f"'{value}'"


def to_cell(value: Any) -> str:
    """Render an arbitrary source value as an unquoted grid cell.

    Finite numbers, and strings that read as a finite number, use the
    numeric form. Otherwise date-times (objects or parseable strings) use
    `yyyy-MM-dd HH:mm:ss`, and anything else is text.
    """
    if isinstance(value, TypedValue):
        value = value.value
    if _is_absent(value):
        return ''
    if _is_finite_number(value):
        return format_number(value)
    if isinstance(value, datetime.datetime | datetime.date):
        return format_datetime(value)
    if isinstance(value, np.datetime64):
        return format_datetime(pd.Timestamp(value).to_pydatetime())

    text = value if isinstance(value, str) else str(value)
    number = parse_number(text)
    if number is not None and math.isfinite(number):
        return format_number(number)
    parsed = parse_datetime(text)
    if parsed is not None:
        return format_datetime(parsed)
    return text


def serialize_row(values: Sequence[Any]) -> list[str]:
    """Render a source row as grid cells."""
    return [to_cell(value) for value in values]


def render_parameter(value: Any) -> str:
    """Render an execute parameter as the text substituted for its marker.

    Raises
        BadParameterFormat: For absent or non-finite values, or values
        whose string conversion fails
    """
    if isinstance(value, TypedValue):
        value = value.value
    if _is_absent(value):
        raise BadParameterFormat('Parameter value is missing')
    if _is_number(value):
        if not _is_finite_number(value):
            raise BadParameterFormat(f'Parameter value {value!r} is not a finite number')
        return format_number(value)
    if isinstance(value, datetime.datetime | datetime.date):
        return format_datetime(value)
    try:
        return str(value)
    except Exception as e:
        raise BadParameterFormat(f'Cannot render parameter of type {type(value).__name__}: {e}') from e


# Database value -> cell

def stringify(value: Any) -> str:
    """Literal string form of a value returned by the database."""
    if value is None:
        return ''
    if isinstance(value, bool | np.bool_):
        return 'True' if value else 'False'
    if isinstance(value, float | np.floating | decimal.Decimal):
        return format_number(value)
    if isinstance(value, datetime.datetime):
        text = format_datetime(value)
        if value.microsecond:
            text += f'.{value.microsecond:06d}'
        return text
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).hex()
    return str(value)
