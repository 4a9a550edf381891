"""Unit tests for built-in context transforms."""

from semantic_metrics.application.services.context_transforms import (
    compose,
    default_context_transforms,
    last_year,
    prior_month,
    quarter_to_date,
    year_to_date,
)


def test_year_to_date():
    """Test that ytd widens month to a 1..m range."""
    context = {"year": 2025, "month": 6, "regionId": "NA"}

    result = year_to_date()(context)

    assert result == {"year": 2025, "month": {"from": 1, "to": 6}, "regionId": "NA"}
    assert context == {"year": 2025, "month": 6, "regionId": "NA"}


def test_year_to_date_without_month_is_noop():
    """Test that ytd leaves a context without a scalar month unchanged."""
    context = {"year": 2025, "month": {"from": 1, "to": 3}}

    assert year_to_date()(context) == context
    assert year_to_date()({"year": 2025}) == {"year": 2025}


def test_quarter_to_date():
    """Test quarter start computation."""
    transform = quarter_to_date()

    assert transform({"month": 1})["month"] == {"from": 1, "to": 1}
    assert transform({"month": 5})["month"] == {"from": 4, "to": 5}
    assert transform({"month": 12})["month"] == {"from": 10, "to": 12}


def test_last_year_scalar_and_range():
    """Test shifting scalar years and year ranges."""
    transform = last_year()

    assert transform({"year": 2025, "month": 6}) == {"year": 2024, "month": 6}
    assert transform({"year": {"from": 2023, "to": 2025}})["year"] == {"from": 2022, "to": 2024}
    assert transform({"year": {"from": 2023}})["year"] == {"from": 2022}


def test_last_year_ignores_bool_and_strings():
    """Test that non-integer years are left alone."""
    transform = last_year()

    assert transform({"year": True}) == {"year": True}
    assert transform({"year": "2025"}) == {"year": "2025"}


def test_prior_month_wraps_january():
    """Test prior month inside a year and across the year boundary."""
    transform = prior_month()

    assert transform({"year": 2025, "month": 6}) == {"year": 2025, "month": 5}
    assert transform({"year": 2025, "month": 1}) == {"year": 2024, "month": 12}
    assert transform({"month": 1}) == {"month": 1}


def test_custom_keys():
    """Test transforms over differently named time dimensions."""
    transform = year_to_date(month_key="fiscalMonth")

    assert transform({"fiscalMonth": 3}) == {"fiscalMonth": {"from": 1, "to": 3}}


def test_compose_applies_left_to_right():
    """Test composed ytd then last year."""
    transform = compose(year_to_date(), last_year())

    assert transform({"year": 2025, "month": 6}) == {"year": 2024, "month": {"from": 1, "to": 6}}


def test_default_transform_table():
    """Test built-in transform names."""
    transforms = default_context_transforms()

    assert set(transforms) == {"ytd", "qtd", "last_year", "ytd_last_year", "prior_month"}
    assert transforms["ytd_last_year"]({"year": 2025, "month": 3}) == {
        "year": 2024,
        "month": {"from": 1, "to": 3},
    }
