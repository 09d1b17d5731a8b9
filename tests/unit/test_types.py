"""Unit tests for cell and value type coercion."""

import datetime
import decimal
import math

import numpy as np
import pandas as pd
import pytest
from dbrows.exceptions import BadParameterFormat
from dbrows.types import ColumnKind, TypedValue, coerce_cell, coerce_row
from dbrows.types import format_datetime, format_number, parse_datetime
from dbrows.types import parse_number, render_parameter, serialize_row
from dbrows.types import stringify, to_cell, to_literal

EPOCH = datetime.datetime(2024, 1, 1)

# =============================================================================
# Parsing
# =============================================================================


class TestParseNumber:

    @pytest.mark.parametrize(('text', 'expected'), [
        ('3.14', 3.14),
        ('  42 ', 42.0),
        ('-7', -7.0),
        ('+.5', 0.5),
        ('1e3', 1000.0),
        ('2.5E-1', 0.25),
        ('1,234,567.5', 1234567.5),
    ])
    def test_numbers(self, text, expected):
        assert parse_number(text) == expected

    @pytest.mark.parametrize('text', ['abc', '', '   ', '1_000', '1,23', '12abc', '0x1F', '1.2.3'])
    def test_not_numbers(self, text):
        assert parse_number(text) is None

    def test_special_values(self):
        assert math.isnan(parse_number('NaN'))
        assert parse_number('Infinity') == math.inf
        assert parse_number('-Infinity') == -math.inf

    def test_non_string(self):
        assert parse_number(None) is None


class TestParseDatetime:

    def test_iso_date_time(self):
        assert parse_datetime('2024-03-01 08:00:00') == datetime.datetime(2024, 3, 1, 8, 0)

    def test_iso_date_only(self):
        assert parse_datetime('2024-03-01') == datetime.datetime(2024, 3, 1)

    def test_month_first(self):
        """Slash dates are read month first."""
        assert parse_datetime('03/01/2024 17:45') == datetime.datetime(2024, 3, 1, 17, 45)

    def test_aware_converted_to_utc(self):
        assert parse_datetime('2024-03-01T08:00:00+02:00') == datetime.datetime(2024, 3, 1, 6, 0)

    @pytest.mark.parametrize('text', ['12', '3.5', '20240301', 'abc', '', 'March 2024', '10:30'])
    def test_not_dates(self, text):
        """Numbers, junk and partial dates are rejected."""
        assert parse_datetime(text) is None


# =============================================================================
# Formatting
# =============================================================================


class TestFormatNumber:

    def test_integral_float_drops_fraction(self):
        assert format_number(3.0) == '3'
        assert format_number(-0.0) == '0'

    def test_fractional_float(self):
        assert format_number(0.1) == '0.1'
        assert format_number(3.14) == '3.14'

    def test_large_float_uses_exponent(self):
        assert format_number(1e20) == '1e+20'

    def test_integers(self):
        assert format_number(12) == '12'
        assert format_number(np.int64(12)) == '12'
        assert format_number(True) == '1'
        assert format_number(np.bool_(False)) == '0'

    def test_decimal(self):
        assert format_number(decimal.Decimal('1.50')) == '1.50'

    def test_non_finite(self):
        assert format_number(math.nan) == 'NaN'
        assert format_number(math.inf) == 'Infinity'
        assert format_number(-math.inf) == '-Infinity'


def test_format_datetime():
    assert format_datetime(datetime.datetime(2024, 3, 1, 8, 5, 9, 123)) == '2024-03-01 08:05:09'
    assert format_datetime(datetime.date(2024, 3, 1)) == '2024-03-01 00:00:00'


# =============================================================================
# Cell -> typed column
# =============================================================================


class TestCoerceCell:

    def test_numeric(self):
        assert coerce_cell(ColumnKind.NUMERIC, '3.14') == TypedValue.numeric(3.14)

    def test_numeric_booleans(self):
        assert coerce_cell(ColumnKind.NUMERIC, 'true') == TypedValue.numeric(1.0)
        assert coerce_cell(ColumnKind.NUMERIC, 'False') == TypedValue.numeric(0.0)

    def test_numeric_rejects_text(self):
        assert coerce_cell(ColumnKind.NUMERIC, 'abc') is None

    def test_numeric_rejects_date(self):
        assert coerce_cell(ColumnKind.NUMERIC, '2024-03-01') is None

    def test_datetime(self):
        assert coerce_cell(ColumnKind.DATETIME, '2024-03-01 08:00:00') == \
            TypedValue.timestamp(datetime.datetime(2024, 3, 1, 8, 0))

    def test_datetime_number_without_epoch_is_unread(self):
        assert coerce_cell(ColumnKind.DATETIME, '12') is None

    def test_datetime_number_is_hours_after_epoch(self):
        assert coerce_cell(ColumnKind.DATETIME, '12', EPOCH) == \
            TypedValue.timestamp(datetime.datetime(2024, 1, 1, 12, 0))
        assert coerce_cell(ColumnKind.DATETIME, '1.5', EPOCH) == \
            TypedValue.timestamp(datetime.datetime(2024, 1, 1, 1, 30))

    def test_datetime_non_finite_hours_unread(self):
        assert coerce_cell(ColumnKind.DATETIME, 'NaN', EPOCH) is None

    def test_datetime_rejects_text(self):
        assert coerce_cell(ColumnKind.DATETIME, 'abc', EPOCH) is None

    def test_text_takes_anything(self):
        assert coerce_cell(ColumnKind.TEXT, '3.14') == TypedValue.text('3.14')
        assert coerce_cell(ColumnKind.TEXT, '') == TypedValue.text('')

    def test_unset_cell(self):
        for kind in ColumnKind:
            assert coerce_cell(kind, None) is None


def test_coerce_row_counts_cells_read():
    kinds = [ColumnKind.NUMERIC, ColumnKind.TEXT, ColumnKind.DATETIME]
    values, read = coerce_row(kinds, ['1', 'bolt', 'not a date'])
    assert values == [TypedValue.numeric(1.0), TypedValue.text('bolt'), None]
    assert read == 2


def test_coerce_row_pads_short_rows():
    values, read = coerce_row([ColumnKind.NUMERIC, ColumnKind.NUMERIC], ['5'])
    assert values == [TypedValue.numeric(5.0), None]
    assert read == 1


# =============================================================================
# Typed value -> string
# =============================================================================


class TestToLiteral:

    def test_numbers_are_bare(self):
        assert to_literal(5) == '5'
        assert to_literal(2.5) == '2.5'
        assert to_literal(TypedValue.numeric(4.0)) == '4'

    def test_text_is_quoted(self):
        assert to_literal('bolt') == "'bolt'"

    def test_datetime_is_quoted(self):
        assert to_literal(datetime.datetime(2024, 3, 1, 8, 0)) == "'2024-03-01 08:00:00'"

    def test_absent(self):
        assert to_literal(None) == ''
        assert to_literal(pd.NaT) == ''
        assert to_literal(np.datetime64('NaT')) == ''

    def test_numpy_bool_is_bare(self):
        assert to_literal(np.bool_(False)) == '0'
        assert to_literal(np.bool_(True)) == '1'


class TestToCell:

    def test_numbers(self):
        assert to_cell(3.0) == '3'
        assert to_cell(0.25) == '0.25'
        assert to_cell(np.float64(1.5)) == '1.5'

    def test_numeric_string_uses_numeric_form(self):
        assert to_cell('1,000') == '1000'
        assert to_cell(' 2.5 ') == '2.5'
        assert to_cell('1e3') == '1000'

    def test_numpy_bool(self):
        assert to_cell(np.bool_(True)) == '1'
        assert to_cell(np.bool_(False)) == '0'

    def test_datetimes(self):
        assert to_cell(datetime.datetime(2024, 3, 1, 8, 0)) == '2024-03-01 08:00:00'
        assert to_cell(np.datetime64('2024-03-01T08:00')) == '2024-03-01 08:00:00'

    def test_date_string_is_normalized(self):
        assert to_cell('03/01/2024') == '2024-03-01 00:00:00'

    def test_text(self):
        assert to_cell('bolt') == 'bolt'

    def test_non_finite_number_is_text(self):
        assert to_cell(math.nan) == 'nan'

    def test_absent(self):
        assert to_cell(None) == ''
        assert to_cell(pd.NaT) == ''
        assert to_cell(np.datetime64('NaT')) == ''


def test_serialize_row():
    row = [1, 'bolt', 0.25, datetime.datetime(2024, 3, 1, 8, 0), None]
    assert serialize_row(row) == ['1', 'bolt', '0.25', '2024-03-01 08:00:00', '']


class TestRenderParameter:

    def test_values(self):
        assert render_parameter(5) == '5'
        assert render_parameter(2.5) == '2.5'
        assert render_parameter("'bolt'") == "'bolt'"
        assert render_parameter(datetime.datetime(2024, 3, 1)) == '2024-03-01 00:00:00'
        assert render_parameter(np.bool_(True)) == '1'

    def test_missing(self):
        with pytest.raises(BadParameterFormat, match='missing'):
            render_parameter(None)
        with pytest.raises(BadParameterFormat, match='missing'):
            render_parameter(np.datetime64('NaT'))

    def test_non_finite(self):
        with pytest.raises(BadParameterFormat, match='finite'):
            render_parameter(math.inf)

    def test_failing_str(self):
        class Unprintable:
            def __str__(self):
                raise RuntimeError('no')

        with pytest.raises(BadParameterFormat, match='Unprintable'):
            render_parameter(Unprintable())


class TestStringify:

    def test_scalars(self):
        assert stringify(None) == ''
        assert stringify(7) == '7'
        assert stringify(2.0) == '2'
        assert stringify(0.25) == '0.25'
        assert stringify(decimal.Decimal('1.5')) == '1.5'
        assert stringify(True) == 'True'
        assert stringify('bolt') == 'bolt'

    def test_datetimes(self):
        assert stringify(datetime.datetime(2024, 3, 1, 8, 0)) == '2024-03-01 08:00:00'
        assert stringify(datetime.datetime(2024, 3, 1, 8, 0, 0, 5)) == '2024-03-01 08:00:00.000005'
        assert stringify(datetime.date(2024, 3, 1)) == '2024-03-01'

    def test_bytes(self):
        assert stringify(b'\x01\xff') == '01ff'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
