"""Window arithmetic for the daily, weekly and monthly calendar views.

All values are naive local datetimes. A window is closed on both ends:
``end`` is the last representable instant of its final day.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

DAILY = 'daily'
WEEKLY = 'weekly'
MONTHLY = 'monthly'
VIEW_MODES = (DAILY, WEEKLY, MONTHLY)

# Python weekday numbers (Monday == 0)
MONDAY = 0
SUNDAY = 6

WEEKDAY_NAMES = {
    'monday': 0, 'tuesday': 1, 'wednesday': 2, 'thursday': 3,
    'friday': 4, 'saturday': 5, 'sunday': 6,
}


@dataclass(frozen=True)
class ViewWindow:
    start: datetime
    end: datetime
    mode: str

    def days(self):
        """Calendar dates covered by the window, in order."""
        current = self.start.date()
        last = self.end.date()
        out = []
        while current <= last:
            out.append(current)
            current += timedelta(days=1)
        return out

    def contains(self, moment):
        return self.start <= moment <= self.end

    def to_dict(self):
        return {
            'mode': self.mode,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
        }


def parse_view_mode(raw, default=MONTHLY):
    if raw is None or str(raw).strip() == '':
        return default
    mode = str(raw).strip().lower()
    if mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {raw}")
    return mode


def parse_week_start(raw, default=SUNDAY):
    """Accept a weekday name or a Python weekday number."""
    if raw is None or str(raw).strip() == '':
        return default
    value = str(raw).strip().lower()
    if value in WEEKDAY_NAMES:
        return WEEKDAY_NAMES[value]
    try:
        number = int(value)
    except ValueError:
        return default
    return number if 0 <= number <= 6 else default


def _as_date(reference):
    if isinstance(reference, datetime):
        return reference.date()
    if isinstance(reference, date):
        return reference
    raise TypeError(f"Expected date or datetime, got {type(reference).__name__}")


def start_of_day(day):
    return datetime.combine(_as_date(day), time.min)


def end_of_day(day):
    return datetime.combine(_as_date(day), time.max)


def start_of_week(day, week_start=SUNDAY):
    day = _as_date(day)
    offset = (day.weekday() - week_start) % 7
    return day - timedelta(days=offset)


def end_of_week(day, week_start=SUNDAY):
    return start_of_week(day, week_start) + timedelta(days=6)


def start_of_month(day):
    return _as_date(day).replace(day=1)


def end_of_month(day):
    day = _as_date(day)
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def resolve_window(reference, mode, week_start=SUNDAY):
    """Compute the window a view of ``mode`` needs around ``reference``."""
    mode = parse_view_mode(mode)
    if mode == DAILY:
        first = last = _as_date(reference)
    elif mode == WEEKLY:
        first = start_of_week(reference, week_start)
        last = end_of_week(reference, week_start)
    else:
        first = start_of_week(start_of_month(reference), week_start)
        last = end_of_week(end_of_month(reference), week_start)
    return ViewWindow(start=start_of_day(first), end=end_of_day(last), mode=mode)


def add_months(day, months):
    """Shift by whole months, clamping to the last day of the target month."""
    day = _as_date(day)
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def shift_reference(reference, mode, direction):
    """Previous/next navigation: direction is +1 or -1 (or 'next'/'prev')."""
    if isinstance(direction, str):
        direction = 1 if direction.lower() in ('next', '+', '1') else -1
    step = 1 if direction >= 0 else -1
    day = _as_date(reference)
    mode = parse_view_mode(mode)
    if mode == DAILY:
        return day + timedelta(days=step)
    if mode == WEEKLY:
        return day + timedelta(days=7 * step)
    return add_months(day, step)


def hour_label(hour):
    suffix = 'AM' if hour < 12 else 'PM'
    return f"{hour % 12 or 12} {suffix}"


def format_clock(moment):
    suffix = 'AM' if moment.hour < 12 else 'PM'
    return f"{moment.hour % 12 or 12}:{moment.minute:02d} {suffix}"


def window_title(reference, mode, week_start=SUNDAY):
    day = _as_date(reference)
    mode = parse_view_mode(mode)
    if mode == DAILY:
        return f"{day:%A}, {day:%B} {day.day}, {day.year}"
    if mode == WEEKLY:
        first = start_of_week(day, week_start)
        last = end_of_week(day, week_start)
        return f"{first:%b} {first.day} - {last:%b} {last.day}, {last.year}"
    return f"{day:%B} {day.year}"
