"""Unit tests for filter context evaluation."""

import numpy as np
import pandas as pd
import pytest

from semantic_metrics.application.services.filter_context import (
    apply_filter_context,
    build_predicate,
    is_missing,
    value_kind,
    values_match,
)
from semantic_metrics.domain.errors import InvalidFilterError

SALES_GRAIN = ("year", "month", "regionId", "productId")


@pytest.fixture
def sales_rows(sales_records):
    """Sales rows as an object-dtype frame."""
    return pd.DataFrame(sales_records, dtype=object)


def test_out_of_grain_keys_are_ignored(sales_rows):
    """Test that filters on keys outside the grain have no effect."""
    result = apply_filter_context(sales_rows, {"year": 2025, "productId": 1}, grain=("year",))

    assert len(result) == 4
    assert set(result["productId"]) == {1, 2}


def test_in_grain_filters_are_anded(sales_rows):
    """Test that all applicable filters must pass."""
    result = apply_filter_context(sales_rows, {"year": 2025, "regionId": "NA"}, SALES_GRAIN)

    assert result["amount"].tolist() == [100, 200, 300]


def test_output_preserves_input_order(sales_rows):
    """Test that filtering is stable."""
    result = apply_filter_context(sales_rows, {"year": 2025}, SALES_GRAIN)

    assert result["amount"].tolist() == [100, 200, 300, 350]


def test_scalar_equality_does_not_coerce_strings(sales_rows):
    """Test that "2025" does not match 2025."""
    result = apply_filter_context(sales_rows, {"year": "2025"}, SALES_GRAIN)

    assert result.empty


def test_scalar_equality_matches_int_and_float(sales_rows):
    """Test that numeric values compare numerically."""
    result = apply_filter_context(sales_rows, {"productId": 1.0}, SALES_GRAIN)

    assert len(result) == 5


def test_bool_does_not_match_int():
    """Test that True does not match 1."""
    rows = pd.DataFrame([{"flag": True}, {"flag": 1}], dtype=object)

    result = apply_filter_context(rows, {"flag": 1}, ("flag",))

    assert len(result) == 1
    assert result["flag"].iloc[0] is not True


def test_range_filter_is_inclusive(sales_rows):
    """Test range filter with both bounds."""
    result = apply_filter_context(sales_rows, {"month": {"from": 1, "to": 2}}, SALES_GRAIN)

    assert result["amount"].tolist() == [100, 200, 50]


def test_range_filter_open_bounds(sales_rows):
    """Test range filter with missing or None bounds."""
    lower_only = apply_filter_context(sales_rows, {"month": {"from": 6}}, SALES_GRAIN)
    unbounded = apply_filter_context(sales_rows, {"month": {"from": None, "to": None}}, SALES_GRAIN)

    assert lower_only["amount"].tolist() == [300, 350, 150]
    assert len(unbounded) == 6


def test_range_filter_with_mismatched_kind_excludes_rows(sales_rows):
    """Test that a string bound never matches numeric values."""
    result = apply_filter_context(sales_rows, {"month": {"from": "1"}}, SALES_GRAIN)

    assert result.empty


def test_comparison_filters(sales_rows):
    """Test lt/lte/gt/gte comparison filters."""
    greater = apply_filter_context(sales_rows, {"month": {"gt": 1}}, SALES_GRAIN)
    between = apply_filter_context(sales_rows, {"month": {"gte": 2, "lt": 6}}, SALES_GRAIN)
    at_most = apply_filter_context(sales_rows, {"month": {"lte": 1}}, SALES_GRAIN)

    assert len(greater) == 4
    assert between["amount"].tolist() == [200]
    assert at_most["amount"].tolist() == [100, 50]


def test_missing_row_field_fails_filter():
    """Test that rows lacking a filtered field are excluded."""
    rows = pd.DataFrame(
        [
            {"year": 2025, "regionId": "NA", "amount": 1},
            {"year": 2025, "amount": 2},
        ],
        dtype=object,
    )

    result = apply_filter_context(rows, {"regionId": "NA"}, ("year", "regionId"))

    assert result["amount"].tolist() == [1]


def test_missing_column_excludes_all_rows(sales_rows):
    """Test filtering on a grain key that no row carries."""
    result = apply_filter_context(sales_rows, {"channel": "web"}, SALES_GRAIN + ("channel",))

    assert result.empty


def test_none_filter_value_is_no_constraint(sales_rows):
    """Test that None-valued filters are skipped."""
    result = apply_filter_context(sales_rows, {"regionId": None}, SALES_GRAIN)

    assert len(result) == 6


def test_empty_rows():
    """Test filtering an empty frame."""
    result = apply_filter_context(pd.DataFrame(), {"year": 2025}, ("year",))

    assert result.empty


def test_unsupported_filter_shapes():
    """Test that unknown dict keys and lists are rejected."""
    with pytest.raises(InvalidFilterError):
        build_predicate({"between": [1, 2]})
    with pytest.raises(InvalidFilterError):
        build_predicate({"from": 1, "lt": 3})
    with pytest.raises(InvalidFilterError):
        build_predicate([1, 2])


def test_invalid_filter_raises_even_without_rows():
    """Test that a malformed in-grain filter is reported."""
    with pytest.raises(InvalidFilterError):
        apply_filter_context(pd.DataFrame(), {"year": {"eq": 1}}, ("year",))


def test_values_match_and_kinds():
    """Test value kind classification and matching."""
    assert value_kind(True) == "bool"
    assert value_kind(np.bool_(True)) == "bool"
    assert value_kind(3) == "number"
    assert value_kind(np.int64(3)) == "number"
    assert value_kind("3") == "str"
    assert values_match(np.int64(3), 3)
    assert not values_match("3", 3)
    assert not values_match(None, None)
    assert is_missing(float("nan"))
    assert is_missing(None)
    assert not is_missing(0)
