from __future__ import annotations

import math

import pytest

from workforce_table.domain.models import MonthRate, RateField, UtilisationAggregate
from workforce_table.domain.transform.utilisation import (
    InvalidRatePolicy,
    format_number,
    format_percent,
    month_rate,
    parse_rate,
    period_rate,
)


def _months(*pairs: tuple[str, str]) -> UtilisationAggregate:
    return UtilisationAggregate(
        last_three_months_individually=tuple(MonthRate(month=m, utilisation_rate=r) for m, r in pairs)
    )


def test_period_rate_defaults_to_zero():
    assert period_rate(None, RateField.LAST_TWELVE_MONTHS) == "0"
    assert period_rate(UtilisationAggregate(), RateField.YEAR_TO_DATE) == "0"


def test_period_rate_returns_raw_value():
    aggregate = UtilisationAggregate(
        utilisation_rate_last_twelve_months="80.50",
        utilisation_rate_year_to_date="65",
    )
    assert period_rate(aggregate, RateField.LAST_TWELVE_MONTHS) == "80.50"
    assert period_rate(aggregate, RateField.YEAR_TO_DATE) == "65"


def test_month_rate_finds_month_in_any_position():
    aggregate = _months(("July", "70"), ("May", "75"), ("June", "72"))
    assert month_rate(aggregate, "May") == "75"
    assert month_rate(aggregate, "June") == "72"
    assert month_rate(aggregate, "July") == "70"


def test_month_rate_is_exact_and_case_sensitive():
    aggregate = _months(("may", "75"), ("Jun", "72"))
    assert month_rate(aggregate, "May") == "0"
    assert month_rate(aggregate, "June") == "0"


def test_month_rate_first_match_wins():
    aggregate = _months(("May", "10"), ("May", "20"))
    assert month_rate(aggregate, "May") == "10"


def test_month_rate_missing_list_or_aggregate():
    assert month_rate(None, "May") == "0"
    assert month_rate(UtilisationAggregate(), "May") == "0"
    assert month_rate(_months(), "May") == "0"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("42.5", 42.5),
        ("  12", 12.0),
        ("42.5abc", 42.5),
        (".5", 0.5),
        ("-3", -3.0),
        ("1e3", 1000.0),
        ("1e", 1.0),
        ("Infinity", math.inf),
    ],
)
def test_parse_rate_numeric_prefix(raw, expected):
    assert parse_rate(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "-", "n/a", None, "\u0664\u0662", "\uff14\uff12", "\x1c42"])
def test_parse_rate_not_a_number(raw):
    assert math.isnan(parse_rate(raw))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (80.0, "80"),
        (42.5, "42.5"),
        (0.0, "0"),
        (-0.0, "0"),
        (0.1, "0.1"),
        (-12.25, "-12.25"),
        (0.000001, "0.000001"),
        (1e-7, "1e-7"),
        (1e21, "1e+21"),
        (123456789012345680000.0, "123456789012345680000"),
        (1.5e-10, "1.5e-10"),
        (math.nan, "NaN"),
        (math.inf, "Infinity"),
        (-math.inf, "-Infinity"),
    ],
)
def test_format_number_matches_js_rendering(value, expected):
    assert format_number(value) == expected


def test_format_percent():
    assert format_percent("42.5") == "42.5%"
    assert format_percent("0") == "0%"
    assert format_percent("80.00") == "80%"


def test_format_percent_invalid_rate_policy():
    assert format_percent("abc") == "NaN%"
    assert format_percent("") == "NaN%"
    assert format_percent("abc", InvalidRatePolicy.ZERO) == "0%"


@pytest.mark.parametrize("raw", ["\u00a042", "\u300042", "\ufeff42", "\u2028\t42"])
def test_parse_rate_skips_js_whitespace(raw):
    assert parse_rate(raw) == 42
