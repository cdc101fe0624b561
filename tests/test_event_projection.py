import copy
from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytz

from backend.calendar_range import resolve_window
from backend.event_projection import event_start, overflow_label, project


def ev(title, start, end=None, event_id=None):
    return {'id': event_id or title, 'title': title, 'startTime': start, 'endTime': end or start}


def test_daily_scenario_groups_by_hour_in_chronological_order():
    events = [
        ev('C', '2024-03-06T14:00:00'),
        ev('B', '2024-03-06T09:30:00'),
        ev('A', '2024-03-06T09:00:00'),
    ]
    window = resolve_window(date(2024, 3, 6), 'daily')
    projection = project(events, window)

    assert projection.keys() == ['9 AM', '2 PM']
    assert [e['title'] for e in projection.get('9 AM').events] == ['A', 'B']
    assert [e['title'] for e in projection.get('2 PM').events] == ['C']


def test_daily_projection_drops_events_outside_the_day():
    events = [ev('yesterday', '2024-03-05T23:59:00'), ev('today', '2024-03-06T00:00:00')]
    projection = project(events, resolve_window(date(2024, 3, 6), 'daily'))
    assert projection.keys() == ['12 AM']
    assert projection.get('12 AM').events[0]['title'] == 'today'


def test_window_bounds_are_inclusive():
    window = resolve_window(date(2024, 3, 6), 'daily')
    events = [ev('first', window.start), ev('last', window.end)]
    projection = project(events, window)
    assert sum(b.total for b in projection.buckets) == 2


def test_weekly_projection_has_all_seven_days_even_when_empty():
    window = resolve_window(date(2024, 3, 6), 'weekly')
    projection = project([ev('mid', '2024-03-06T10:00:00')], window)
    assert projection.keys() == [
        '2024-03-03', '2024-03-04', '2024-03-05', '2024-03-06',
        '2024-03-07', '2024-03-08', '2024-03-09',
    ]
    assert projection.get('2024-03-06').total == 1
    assert [b.total for b in projection.buckets].count(0) == 6


def test_monthly_scenario_caps_display_and_reports_overflow():
    events = [ev(f'E{h}', f'2024-03-12T{h:02d}:00:00') for h in (16, 8, 12, 10, 14)]
    window = resolve_window(date(2024, 3, 12), 'monthly')
    bucket = project(events, window, reference=date(2024, 3, 12)).get('2024-03-12')

    assert bucket.total == 5
    assert [e['title'] for e in bucket.events] == ['E8', 'E10']
    assert bucket.overflow == 3
    assert bucket.to_dict()['overflow_label'] == '+3 more events'


def test_monthly_overflow_invariant():
    window = resolve_window(date(2024, 3, 1), 'monthly')
    for n in range(0, 6):
        events = [ev(f'E{i}', f'2024-03-20T{i:02d}:00:00') for i in range(n)]
        bucket = project(events, window).get('2024-03-20')
        assert len(bucket.events) == min(n, 2)
        assert bucket.overflow == max(0, n - 2)


def test_monthly_projection_marks_lead_and_trail_days():
    window = resolve_window(date(2024, 3, 12), 'monthly')
    projection = project([], window, reference=date(2024, 3, 12))
    assert projection.get('2024-02-25').in_month is False
    assert projection.get('2024-03-01').in_month is True
    assert projection.get('2024-04-06').in_month is False
    assert all(b.total == 0 for b in projection.buckets)


def test_within_bucket_order_is_non_decreasing():
    window = resolve_window(date(2024, 3, 6), 'weekly')
    events = [ev(str(i), f'2024-03-0{3 + i % 7}T{(i * 7) % 24:02d}:{i % 60:02d}:00') for i in range(30)]
    for bucket in project(events, window).buckets:
        starts = [event_start(e) for e in bucket.events]
        assert starts == sorted(starts)


def test_projection_is_idempotent_and_does_not_mutate_input():
    events = [ev('b', '2024-03-06T11:00:00'), ev('a', '2024-03-06T09:00:00')]
    snapshot = copy.deepcopy(events)
    window = resolve_window(date(2024, 3, 6), 'monthly')

    first = project(events, window).to_dict()
    second = project(events, window).to_dict()

    assert first == second
    assert events == snapshot


def test_empty_and_missing_input_never_errors():
    daily = resolve_window(date(2024, 3, 6), 'daily')
    weekly = resolve_window(date(2024, 3, 6), 'weekly')
    monthly = resolve_window(date(2024, 3, 6), 'monthly')

    assert project(None, daily).buckets == []
    assert all(b.total == 0 for b in project([], weekly).buckets)
    assert len(project([], weekly).buckets) == 7
    assert all(b.total == 0 for b in project([], monthly).buckets)


def test_accepts_model_like_objects_and_aware_datetimes():
    window = resolve_window(date(2024, 3, 6), 'daily')
    row = SimpleNamespace(id=1, title='row', start_time=datetime(2024, 3, 6, 9, 15))
    aware = ev('aware', datetime(2024, 3, 6, 14, 0, tzinfo=timezone.utc))
    projection = project([row, aware], window, tz=timezone.utc)
    assert projection.keys() == ['9 AM', '2 PM']


def test_events_without_start_are_skipped():
    window = resolve_window(date(2024, 3, 6), 'daily')
    projection = project([{'title': 'broken'}, ev('bad', 'not-a-date')], window)
    assert projection.buckets == []


def test_overflow_label():
    assert overflow_label(0) == ''
    assert overflow_label(3) == '+3 more events'


def test_utc_instants_land_on_their_local_day():
    # 02:00Z on Mar 7 is 21:00 on Mar 6 in New York
    window = resolve_window(date(2024, 3, 6), 'weekly')
    projection = project([ev('late', '2024-03-07T02:00:00Z')], window, tz=pytz.timezone('America/New_York'))
    assert projection.get('2024-03-06').total == 1
    assert projection.get('2024-03-07').total == 0

    monthly = project([ev('late', '2024-03-07T02:00:00Z')], resolve_window(date(2024, 3, 6), 'monthly'),
                      tz=pytz.timezone('America/New_York'))
    assert [e['title'] for e in monthly.get('2024-03-06').events] == ['late']
