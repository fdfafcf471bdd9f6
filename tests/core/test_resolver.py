"""Tests for value tag classification and value comparison."""

import datetime

import pytest

from keepyaml.error import UnknownValueType
from keepyaml.resolver import (
    resolve_value_tag, values_equal,
    NULL_TAG, BOOL_TAG, STR_TAG, INT_TAG, FLOAT_TAG, TIMESTAMP_TAG,
    MAP_TAG, SEQ_TAG,
)


class TestResolveValueTag:
    """Test resolve_value_tag()."""

    @pytest.mark.parametrize('value,tag', [
        ([], SEQ_TAG),
        ([1, 2], SEQ_TAG),
        ({}, MAP_TAG),
        ({'a': 1}, MAP_TAG),
        (None, NULL_TAG),
        ('', STR_TAG),
        ('text', STR_TAG),
        (True, BOOL_TAG),
        (False, BOOL_TAG),
        (datetime.date(2024, 1, 2), TIMESTAMP_TAG),
        (datetime.datetime(2024, 1, 2, 3, 4, 5), TIMESTAMP_TAG),
    ])
    def test_kinds(self, value, tag):
        """Each kind of value maps to its tag."""
        assert resolve_value_tag(value) == tag

    @pytest.mark.parametrize('value,tag', [
        (0, INT_TAG),
        (10, INT_TAG),
        (-20, INT_TAG),
        (30.0, INT_TAG),
        (7, FLOAT_TAG),
        (15, FLOAT_TAG),
        (2.5, FLOAT_TAG),
    ])
    def test_numbers_divisible_by_ten(self, value, tag):
        """Numbers divisible by 10 are int, the rest float."""
        assert resolve_value_tag(value) == tag

    @pytest.mark.parametrize('value', [object(), (1, 2), {1, 2}, b'raw'])
    def test_unknown(self, value):
        """Other types raise UnknownValueType."""
        with pytest.raises(UnknownValueType) as info:
            resolve_value_tag(value)
        assert info.value.value is value
        assert type(value).__name__ in str(info.value)


class TestValuesEqual:
    """Test values_equal()."""

    def test_bool_is_not_int(self):
        """True differs from 1, False from 0."""
        assert not values_equal(True, 1)
        assert not values_equal(0, False)
        assert values_equal(True, True)

    def test_int_equals_float(self):
        """1 and 1.0 are the same number."""
        assert values_equal(1, 1.0)

    def test_nan(self):
        """NaN equals NaN."""
        assert values_equal(float('nan'), float('nan'))

    def test_mapping_order_irrelevant(self):
        """Key order does not matter."""
        assert values_equal({'a': 1, 'b': 2}, {'b': 2, 'a': 1})

    def test_nested(self):
        """Comparison is deep."""
        assert values_equal({'a': [1, {'b': None}]}, {'a': [1, {'b': None}]})
        assert not values_equal({'a': [1, {'b': None}]}, {'a': [1, {'b': 0}]})
        assert not values_equal({'a': [True]}, {'a': [1]})

    def test_kind_mismatch(self):
        """A list is not a dict, a str is not a number."""
        assert not values_equal([], {})
        assert not values_equal('1', 1)
        assert not values_equal(None, 0)
        assert not values_equal([1], [1, 2])
