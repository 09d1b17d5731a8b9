"""Unit tests for RowGrid."""

import datetime

import numpy as np
import pandas as pd
import pytest
from dbrows.grid import RowGrid


def test_new_grid_cells_are_unset():
    grid = RowGrid(2, 3)
    assert grid.shape == (2, 3)
    assert len(grid) == 2
    assert list(grid) == [[None, None, None], [None, None, None]]


def test_zero_rows_is_valid():
    grid = RowGrid(0, 4)
    assert len(grid) == 0
    assert list(grid) == []


def test_negative_dimensions():
    with pytest.raises(ValueError):
        RowGrid(-1, 2)
    with pytest.raises(ValueError):
        RowGrid(1, -2)


def test_set_and_get():
    grid = RowGrid(2, 2)
    grid[1, 0] = 'x'
    assert grid[1, 0] == 'x'
    assert grid.row(1) == ['x', None]


def test_out_of_bounds():
    grid = RowGrid(2, 2)
    with pytest.raises(IndexError):
        grid[2, 0]
    with pytest.raises(IndexError):
        grid[0, 2] = 'x'
    with pytest.raises(IndexError):
        grid.row(5)


def test_row_is_a_copy():
    grid = RowGrid.from_rows([['a', 'b']])
    grid.row(0)[0] = 'changed'
    assert grid[0, 0] == 'a'


class TestFromRows:

    def test_infers_width(self):
        grid = RowGrid.from_rows([['1', 'a'], ['2', 'b']])
        assert grid.shape == (2, 2)
        assert grid[1, 1] == 'b'

    def test_explicit_width_for_no_rows(self):
        assert RowGrid.from_rows([], cols=3).shape == (0, 3)

    def test_ragged_rows(self):
        with pytest.raises(ValueError, match='Row 1 has 1 cells'):
            RowGrid.from_rows([['1', 'a'], ['2']])

    def test_equality(self):
        assert RowGrid.from_rows([['1']]) == RowGrid.from_rows([['1']])
        assert RowGrid.from_rows([['1']]) != RowGrid.from_rows([['2']])
        assert RowGrid(1, 2) != RowGrid(2, 1)


class TestDataFrame:

    def test_from_dataframe_renders_cells(self):
        frame = pd.DataFrame({
            'id': [1, 2],
            'weight': [0.25, np.nan],
            'received': [pd.Timestamp('2024-03-01 08:00'), pd.NaT],
            'name': ['bolt', None],
        })
        grid = RowGrid.from_dataframe(frame)
        assert grid.shape == (2, 4)
        assert grid.row(0) == ['1', '0.25', '2024-03-01 08:00:00', 'bolt']
        assert grid.row(1) == ['2', '', '', '']

    def test_to_dataframe(self):
        grid = RowGrid.from_rows([['1', 'bolt'], ['2', None]])
        frame = grid.to_dataframe(['id', 'name'])
        assert list(frame.columns) == ['id', 'name']
        assert frame.iloc[0].tolist() == ['1', 'bolt']
        assert frame.iloc[1, 1] is None

    def test_to_dataframe_column_mismatch(self):
        with pytest.raises(ValueError):
            RowGrid(1, 2).to_dataframe(['only'])

    def test_datetime_objects(self):
        frame = pd.DataFrame({'at': [datetime.datetime(2024, 3, 1, 8, 0)]}, dtype=object)
        assert RowGrid.from_dataframe(frame)[0, 0] == '2024-03-01 08:00:00'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
