"""Group a flat list of events into the buckets each calendar view renders.

Input events are either ORM rows or serialized dicts; nothing passed in is
modified. Output buckets keep references to the original event objects.
"""

from dataclasses import dataclass, field
from datetime import datetime

from backend.calendar_range import DAILY, MONTHLY, WEEKLY, hour_label

DEFAULT_MONTH_CAP = 2


def overflow_label(count):
    return f"+{count} more events" if count > 0 else ''


def _read(event, name, alt=None):
    if isinstance(event, dict):
        if name in event:
            return event[name]
        return event.get(alt) if alt else None
    value = getattr(event, name, None)
    if value is None and alt:
        value = getattr(event, alt, None)
    return value


def event_start(event, tz=None):
    """Naive local start of an event, or None when it has no usable start."""
    raw = _read(event, 'start_time', 'startTime')
    if isinstance(raw, str):
        text = raw.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            raw = datetime.fromisoformat(text)
        except ValueError:
            return None
    if not isinstance(raw, datetime):
        return None
    if raw.tzinfo is not None:
        raw = raw.astimezone(tz).replace(tzinfo=None)
    return raw


@dataclass
class Bucket:
    key: str
    label: str
    events: list = field(default_factory=list)
    hour: int = None
    day: object = None
    in_month: bool = None
    total: int = 0
    overflow: int = 0

    def to_dict(self, serialize=None):
        serialize = serialize or (lambda ev: ev)
        data = {
            'key': self.key,
            'label': self.label,
            'events': [serialize(ev) for ev in self.events],
            'total': self.total,
        }
        if self.hour is not None:
            data['hour'] = self.hour
        if self.day is not None:
            data['date'] = self.day.isoformat()
        if self.in_month is not None:
            data['in_month'] = self.in_month
            data['overflow'] = self.overflow
            data['overflow_label'] = overflow_label(self.overflow)
        return data


@dataclass
class Projection:
    mode: str
    start: datetime
    end: datetime
    buckets: list = field(default_factory=list)

    def keys(self):
        return [b.key for b in self.buckets]

    def get(self, key):
        for bucket in self.buckets:
            if bucket.key == key:
                return bucket
        return None

    def to_dict(self, serialize=None):
        return {
            'mode': self.mode,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'buckets': [b.to_dict(serialize) for b in self.buckets],
        }


def _in_window(events, window, tz):
    timed = []
    for event in events or []:
        start = event_start(event, tz)
        if start is None or not window.contains(start):
            continue
        timed.append((start, event))
    # sorted() returns a new list and is stable for equal starts
    return sorted(timed, key=lambda pair: pair[0])


def _group_by_day(timed):
    by_day = {}
    for start, event in timed:
        by_day.setdefault(start.date(), []).append(event)
    return by_day


def project_daily(events, window, tz=None):
    by_hour = {}
    for start, event in _in_window(events, window, tz):
        by_hour.setdefault(start.hour, []).append(event)
    buckets = []
    for hour in sorted(by_hour):
        label = hour_label(hour)
        bucket_events = by_hour[hour]
        buckets.append(Bucket(key=label, label=label, events=bucket_events,
                              hour=hour, total=len(bucket_events)))
    return Projection(mode=DAILY, start=window.start, end=window.end, buckets=buckets)


def project_weekly(events, window, tz=None):
    by_day = _group_by_day(_in_window(events, window, tz))
    buckets = []
    for day in window.days():
        bucket_events = by_day.get(day, [])
        buckets.append(Bucket(key=day.isoformat(), label=f"{day:%a} {day.day}",
                              events=bucket_events, day=day, total=len(bucket_events)))
    return Projection(mode=WEEKLY, start=window.start, end=window.end, buckets=buckets)


def project_monthly(events, window, reference=None, tz=None, max_per_day=DEFAULT_MONTH_CAP):
    by_day = _group_by_day(_in_window(events, window, tz))
    if reference is None:
        # The middle of a whole-week grid always falls inside the month shown
        days = window.days()
        reference = days[len(days) // 2]
    buckets = []
    for day in window.days():
        day_events = by_day.get(day, [])
        total = len(day_events)
        buckets.append(Bucket(
            key=day.isoformat(),
            label=str(day.day),
            events=day_events[:max_per_day],
            day=day,
            in_month=(day.year, day.month) == (reference.year, reference.month),
            total=total,
            overflow=max(0, total - max_per_day),
        ))
    return Projection(mode=MONTHLY, start=window.start, end=window.end, buckets=buckets)


def project(events, window, reference=None, tz=None, max_per_day=DEFAULT_MONTH_CAP):
    """Bucket ``events`` for ``window.mode``. Never raises on empty input."""
    if window.mode == DAILY:
        return project_daily(events, window, tz)
    if window.mode == WEEKLY:
        return project_weekly(events, window, tz)
    return project_monthly(events, window, reference=reference, tz=tz, max_per_day=max_per_day)
