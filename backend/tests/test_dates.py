from datetime import date, datetime

import pytest

from portal.core.dates import (
    calculate_age,
    format_date_with_month_name,
    parse_date,
    parse_date_or_default,
    to_display,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-04-01", date(2024, 4, 1)),
        ("01/04/2024", date(2024, 4, 1)),
        ("5/1/1985", date(1985, 1, 5)),
        ("2024-04-01 00:00:00", date(2024, 4, 1)),
        (datetime(2024, 4, 1, 9, 30), date(2024, 4, 1)),
        (date(2024, 4, 1), date(2024, 4, 1)),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", [None, "", "   "])
def test_parse_date_empty(value):
    assert parse_date(value) is None


@pytest.mark.parametrize("value", ["31/02/2024", "2024-13-01", "yesterday"])
def test_parse_date_rejects_bad_input(value):
    with pytest.raises(ValueError):
        parse_date(value)


def test_parse_date_or_default():
    fallback = date(2024, 4, 1)
    assert parse_date_or_default("not a date", fallback) == fallback
    assert parse_date_or_default("", fallback) == fallback
    assert parse_date_or_default("15/06/2024", fallback) == date(2024, 6, 15)


def test_calculate_age_counts_completed_years():
    dob = date(1985, 6, 16)
    assert calculate_age(dob, date(2024, 6, 15)) == 38
    assert calculate_age(dob, date(2024, 6, 16)) == 39


def test_leap_day_birthday():
    assert calculate_age(date(2000, 2, 29), date(2024, 2, 28)) == 23
    assert calculate_age(date(2000, 2, 29), date(2024, 2, 29)) == 24


def test_display_formats():
    assert format_date_with_month_name(date(1985, 1, 5)) == "05/Jan/1985"
    assert to_display(date(2024, 4, 1)) == "01/04/2024"
    assert format_date_with_month_name(None) == ""
    assert to_display(None) == ""
