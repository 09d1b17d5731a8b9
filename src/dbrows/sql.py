"""
SQL text construction for row exchange.

This module only builds strings; nothing here touches a connection:
- `assemble_where()` - Join column/literal pairs into a WHERE body
- `substitute_parameters()` - Replace `@n` markers with positional values
- `build_select_sql()` / `build_insert_sql()` - Statement templates
- `quote_identifier()` - Quote column names for a dialect

WHERE literals are inserted exactly as supplied. Callers must pass tokens
that are already SQL-safe (numbers bare, text and dates single-quoted, see
`dbrows.types.to_literal`). Untrusted input reaching a WHERE term or an
execute template is an injection risk.
"""
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from dbrows.types import to_literal

__all__ = [
    'WhereTerm',
    'ParameterizedStatement',
    'assemble_where',
    'substitute_parameters',
    'build_select_sql',
    'build_insert_sql',
    'make_placeholders',
    'quote_identifier',
]


@dataclass(frozen=True, slots=True)
class WhereTerm:
    """One `column = literal` equality condition."""
    column: str
    literal: str

    @classmethod
    def from_value(cls, column: str, value: Any) -> 'WhereTerm':
        """Build a term whose literal is rendered from a typed value."""
        return cls(column, to_literal(value))


@dataclass(frozen=True, slots=True)
class ParameterizedStatement:
    """SQL template with `@1`, `@2`, ... markers and their values."""
    template: str
    values: tuple[Any, ...] = ()

    def render(self) -> str:
        return substitute_parameters(self.template, self.values)


def assemble_where(terms: Iterable[WhereTerm | tuple[str, str]]) -> str:
    """Join terms with `and`, preserving input order.

    Returns an empty string when there are no terms.
    """
    parts = []
    for term in terms:
        column, literal = (term.column, term.literal) if isinstance(term, WhereTerm) else term
        parts.append(f'{column} = {literal}')
    return ' and '.join(parts)


def substitute_parameters(template: str, values: Sequence[Any]) -> str:
    """Replace each `@i` marker with the string form of ``values[i - 1]``.

    Markers are replaced from the highest index down so that `@1` never
    rewrites the prefix of `@10`. Markers without a value are left as-is.
    """
    sql = template
    for index in range(len(values), 0, -1):
        sql = sql.replace(f'@{index}', str(values[index - 1]))
    return sql


def build_select_sql(table: str, where: str = '') -> str:
    """Generate `SELECT * FROM <table>` with an optional WHERE body.

    The table name is used verbatim so schema-qualified names pass through.
    """
    sql = f'SELECT * FROM {table}'
    if where:
        sql += f' WHERE {where}'
    return sql


def make_placeholders(count: int, placeholder: str = '?') -> str:
    """Comma separated list of `count` driver placeholders."""
    return ', '.join([placeholder] * count)


def build_insert_sql(table: str, columns: Sequence[str], placeholder: str = '?',
                     dialect: str = 'sqlite') -> str:
    """Generate an INSERT template with one placeholder per column.

    Column names come from the database and are quoted; the table name is
    used verbatim, as in `build_select_sql`.
    """
    quoted_columns = ', '.join(quote_identifier(col, dialect) for col in columns)
    placeholders = make_placeholders(len(columns), placeholder)
    return f'INSERT INTO {table} ({quoted_columns}) VALUES ({placeholders})'


def quote_identifier(identifier: str, dialect: str = 'sqlite') -> str:
    """Safely quote database identifiers.

    Raises
        ValueError: If dialect is unsupported
    """
    if dialect in {'postgresql', 'sqlite'}:
        return '"' + identifier.replace('"', '""') + '"'

    if dialect == 'mssql':
        return '[' + identifier.replace(']', ']]') + ']'

    raise ValueError(f'Unknown dialect: {dialect}')
