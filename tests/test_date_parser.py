"""Tests for date parser with relative dates and named periods."""

import pytest
from datetime import date, timedelta
from tallybook.utils.date_parser import (
    get_date_range,
    iter_months,
    month_end,
    month_label,
    month_start,
    parse_date,
)

# A Wednesday in the middle of a quarter
TODAY = date(2024, 5, 15)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()
    assert parse_date("today", today=TODAY) == TODAY


def test_parse_yesterday_and_tomorrow():
    """Test parsing 'yesterday' and 'tomorrow'."""
    assert parse_date("yesterday", today=TODAY) == date(2024, 5, 14)
    assert parse_date("tomorrow", today=TODAY) == date(2024, 5, 16)


def test_parse_last_month():
    """Test parsing 'last month' gives the first day of last month."""
    assert parse_date("last month", today=TODAY) == date(2024, 4, 1)
    assert parse_date("last month", today=date(2024, 1, 10)) == date(2023, 12, 1)


def test_parse_last_week():
    """Test parsing 'last week'."""
    result = parse_date("last week", today=TODAY)
    assert result == date(2024, 5, 6)
    # Verify it's a Monday (weekday 0)
    assert result.weekday() == 0


def test_parse_last_weekday():
    """Test parsing 'last friday' and the same weekday as today."""
    assert parse_date("last friday", today=TODAY) == date(2024, 5, 10)
    assert parse_date("last wednesday", today=TODAY) == date(2024, 5, 8)


def test_parse_this_and_next():
    """Test parsing 'this ...' and 'next ...'."""
    assert parse_date("this month", today=TODAY) == date(2024, 5, 1)
    assert parse_date("this year", today=TODAY) == date(2024, 1, 1)
    assert parse_date("this week", today=TODAY) == date(2024, 5, 13)
    assert parse_date("next month", today=TODAY) == date(2024, 6, 1)
    assert parse_date("next year", today=TODAY) == date(2025, 1, 1)
    assert parse_date("next week", today=TODAY) == date(2024, 5, 20)


def test_parse_last_year():
    """Test parsing 'last year'."""
    assert parse_date("last year", today=TODAY) == date(2023, 1, 1)


def test_parse_invalid_relative():
    """Test parsing invalid relative date."""
    with pytest.raises(ValueError):
        parse_date("last invalid")


def test_parse_standard_formats():
    """Test parsing various standard date formats."""
    # These should all work via dateutil parser
    assert parse_date("January 15, 2024") == date(2024, 1, 15)
    assert parse_date("15/01/2024") == date(2024, 1, 15)


def test_get_date_range_this_month():
    """Test get_date_range for this-month."""
    today = date.today()
    start, end = get_date_range("this-month")
    assert start == date(today.year, today.month, 1)
    assert end == today


def test_get_date_range_this_quarter():
    """Test get_date_range for this-quarter."""
    assert get_date_range("this-quarter", today=TODAY) == (date(2024, 4, 1), TODAY)
    assert get_date_range("this-quarter", today=date(2024, 12, 31)) == (
        date(2024, 10, 1),
        date(2024, 12, 31),
    )


def test_get_date_range_this_year():
    """Test get_date_range for this-year."""
    assert get_date_range("this-year", today=TODAY) == (date(2024, 1, 1), TODAY)


def test_get_date_range_this_week():
    """Test get_date_range for this-week."""
    start, end = get_date_range("this-week", today=TODAY)
    assert start == date(2024, 5, 13)
    assert start.weekday() == 0  # Should be Monday
    assert end == TODAY


def test_get_date_range_last_month():
    """Test get_date_range for last-month, including a leap year February."""
    assert get_date_range("last-month", today=date(2024, 3, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert get_date_range("last-month", today=date(2024, 1, 10)) == (date(2023, 12, 1), date(2023, 12, 31))


def test_get_date_range_last_quarter():
    """Test get_date_range for last-quarter across a year boundary."""
    assert get_date_range("last-quarter", today=TODAY) == (date(2024, 1, 1), date(2024, 3, 31))
    assert get_date_range("last-quarter", today=date(2024, 2, 1)) == (date(2023, 10, 1), date(2023, 12, 31))


def test_get_date_range_last_year():
    """Test get_date_range for last-year."""
    assert get_date_range("last-year", today=TODAY) == (date(2023, 1, 1), date(2023, 12, 31))


def test_get_date_range_last_week():
    """Test get_date_range for last-week."""
    start, end = get_date_range("last-week", today=TODAY)
    assert start == date(2024, 5, 6)
    assert end == date(2024, 5, 12)
    assert start.weekday() == 0  # Monday
    assert end.weekday() == 6  # Sunday
    assert (end - start).days == 6


def test_get_date_range_last_12_months():
    """The twelve-month window starts on the first of the month eleven months back."""
    assert get_date_range("last-12-months", today=TODAY) == (date(2023, 6, 1), TODAY)


def test_get_date_range_invalid_period():
    """Test get_date_range with invalid period."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("invalid-period")


def test_month_helpers():
    assert month_start(date(2024, 2, 17)) == date(2024, 2, 1)
    assert month_end(date(2024, 2, 17)) == date(2024, 2, 29)
    assert month_end(date(2023, 12, 5)) == date(2023, 12, 31)
    assert month_label(date(2024, 1, 20)) == "Jan 2024"


def test_iter_months_clips_first_and_last_month():
    """Partial months at either end are clipped to the range."""
    months = list(iter_months(date(2024, 1, 15), date(2024, 3, 10)))
    assert months == [
        (date(2024, 1, 15), date(2024, 1, 31)),
        (date(2024, 2, 1), date(2024, 2, 29)),
        (date(2024, 3, 1), date(2024, 3, 10)),
    ]


def test_iter_months_single_day():
    assert list(iter_months(date(2024, 6, 30), date(2024, 6, 30))) == [(date(2024, 6, 30), date(2024, 6, 30))]


def test_iter_months_rejects_reversed_range():
    with pytest.raises(ValueError):
        list(iter_months(date(2024, 2, 1), date(2024, 1, 1)))


def test_iter_months_crosses_year():
    months = list(iter_months(date(2023, 11, 1), date(2024, 1, 31)))
    assert [first for first, _ in months] == [date(2023, 11, 1), date(2023, 12, 1), date(2024, 1, 1)]
    assert months[-1][1] - months[0][0] == timedelta(days=91)
