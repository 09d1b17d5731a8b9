"""
Rectangular grid of string cells exchanged between the database and the host.

Cells are kept in one flat row-major list. Column identity is positional
only; a grid knows how many columns it has, not what they are called.
"""
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Self

import pandas as pd

from dbrows.types import to_cell

__all__ = ['RowGrid']

Cell = str | None


class RowGrid:
    """A `rows x cols` grid of optional string cells.

    Every row has exactly `cols` cells. Unset cells are None. A grid with
    zero rows is valid and means there is no data.
    """

    __slots__ = ('rows', 'cols', '_cells')

    def __init__(self, rows: int, cols: int) -> None:
        if rows < 0 or cols < 0:
            raise ValueError(f'Grid dimensions must be non-negative, got {rows}x{cols}')
        self.rows = rows
        self.cols = cols
        self._cells: list[Cell] = [None] * (rows * cols)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Cell]], cols: int | None = None) -> Self:
        """Build a grid from row sequences.

        Raises ValueError if any row length differs from `cols` (or from the
        first row when `cols` is not given).
        """
        materialized = [list(row) for row in rows]
        if cols is None:
            cols = len(materialized[0]) if materialized else 0
        grid = cls(len(materialized), cols)
        for i, row in enumerate(materialized):
            if len(row) != cols:
                raise ValueError(f'Row {i} has {len(row)} cells, expected {cols}')
            grid._cells[i * cols:(i + 1) * cols] = row
        return grid

    @classmethod
    def from_dataframe(cls, frame: pd.DataFrame) -> Self:
        """Build a grid from a DataFrame, rendering each value as a cell.

        Missing values (None, NaN, NaT) become empty cells.
        """
        rows = [
            ['' if _is_missing(value) else to_cell(value) for value in record]
            for record in frame.itertuples(index=False, name=None)
        ]
        return cls.from_rows(rows, cols=len(frame.columns))

    def to_dataframe(self, columns: Sequence[str] | None = None) -> pd.DataFrame:
        """Return the grid as a DataFrame of string cells."""
        if columns is not None and len(columns) != self.cols:
            raise ValueError(f'Expected {self.cols} column names, got {len(columns)}')
        return pd.DataFrame(list(self), columns=list(columns) if columns is not None else None,
                            dtype=object)

    def _offset(self, key: tuple[int, int]) -> int:
        row, col = key
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f'Cell ({row}, {col}) outside {self.rows}x{self.cols} grid')
        return row * self.cols + col

    def __getitem__(self, key: tuple[int, int]) -> Cell:
        return self._cells[self._offset(key)]

    def __setitem__(self, key: tuple[int, int], value: Cell) -> None:
        self._cells[self._offset(key)] = value

    def row(self, index: int) -> list[Cell]:
        """Copy of one row."""
        if not 0 <= index < self.rows:
            raise IndexError(f'Row {index} outside grid of {self.rows} rows')
        start = index * self.cols
        return self._cells[start:start + self.cols]

    def __iter__(self) -> Iterator[list[Cell]]:
        for index in range(self.rows):
            yield self.row(index)

    def __len__(self) -> int:
        return self.rows

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.cols

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RowGrid):
            return NotImplemented
        return self.shape == other.shape and self._cells == other._cells

    def __repr__(self) -> str:
        return f'RowGrid(rows={self.rows}, cols={self.cols})'


def _is_missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
