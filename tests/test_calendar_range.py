from datetime import date, datetime, time, timedelta

import pytest

from backend.calendar_range import (
    MONDAY,
    SUNDAY,
    add_months,
    format_clock,
    hour_label,
    parse_view_mode,
    parse_week_start,
    resolve_window,
    shift_reference,
    window_title,
)


def test_daily_window_spans_whole_day():
    window = resolve_window(datetime(2024, 3, 6, 15, 30), 'daily')
    assert window.start == datetime(2024, 3, 6, 0, 0)
    assert window.end == datetime.combine(date(2024, 3, 6), time.max)
    assert window.days() == [date(2024, 3, 6)]


def test_weekly_window_is_seven_days_starting_sunday():
    day = date(2024, 1, 1)
    for offset in range(400):
        window = resolve_window(day + timedelta(days=offset), 'weekly')
        days = window.days()
        assert len(days) == 7
        assert days[0].weekday() == SUNDAY
        assert days[0] <= day + timedelta(days=offset) <= days[-1]


def test_weekly_window_honours_configured_week_start():
    window = resolve_window(date(2024, 3, 6), 'weekly', week_start=MONDAY)
    assert window.start == datetime(2024, 3, 4)
    assert window.end.date() == date(2024, 3, 10)


def test_monthly_window_is_whole_weeks_containing_month():
    for year in (2023, 2024):
        for month in range(1, 13):
            window = resolve_window(date(year, month, 15), 'monthly')
            days = window.days()
            assert len(days) % 7 == 0
            assert days[0].weekday() == SUNDAY
            assert days[0] <= date(year, month, 1)
            assert date(year, month, 28) <= days[-1]
            assert any(d.month == month for d in days[-7:])


def test_monthly_window_for_march_2024():
    window = resolve_window(date(2024, 3, 20), 'monthly')
    assert window.start == datetime(2024, 2, 25)
    assert window.end.date() == date(2024, 4, 6)
    assert len(window.days()) == 42


def test_parse_view_mode():
    assert parse_view_mode(None) == 'monthly'
    assert parse_view_mode('Weekly') == 'weekly'
    with pytest.raises(ValueError):
        parse_view_mode('yearly')


def test_parse_week_start():
    assert parse_week_start('monday') == MONDAY
    assert parse_week_start('6') == SUNDAY
    assert parse_week_start('nonsense') == SUNDAY


def test_shift_reference_by_mode():
    assert shift_reference(date(2024, 3, 6), 'daily', 1) == date(2024, 3, 7)
    assert shift_reference(date(2024, 3, 6), 'weekly', 'prev') == date(2024, 2, 28)
    assert shift_reference(date(2024, 3, 6), 'monthly', 'next') == date(2024, 4, 6)


def test_month_navigation_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)


def test_hour_label_uses_twelve_hour_clock():
    assert hour_label(0) == '12 AM'
    assert hour_label(9) == '9 AM'
    assert hour_label(12) == '12 PM'
    assert hour_label(14) == '2 PM'
    assert format_clock(datetime(2024, 3, 6, 13, 5)) == '1:05 PM'


def test_window_titles():
    assert window_title(date(2024, 3, 4), 'daily') == 'Monday, March 4, 2024'
    assert window_title(date(2024, 3, 6), 'weekly') == 'Mar 3 - Mar 9, 2024'
    assert window_title(date(2024, 3, 6), 'monthly') == 'March 2024'
