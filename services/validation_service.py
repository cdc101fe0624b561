import re
from datetime import date, datetime

import pytz

from backend.event_types import EventType

TITLE_MAX_LENGTH = 255
USERNAME_MAX_LENGTH = 80
PASSWORD_MIN_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# payload key -> accepted aliases
EVENT_FIELDS = {
    'title': ('title',),
    'start_time': ('startTime', 'start_time'),
    'end_time': ('endTime', 'end_time'),
    'location': ('location',),
    'type': ('type',),
}
REQUIRED_EVENT_FIELDS = ('title', 'start_time', 'end_time')


class EventValidationError(ValueError):
    """Raised when a write would leave an event in an invalid state."""

    def __init__(self, errors):
        self.errors = dict(errors)
        super().__init__('; '.join(f"{k}: {v}" for k, v in self.errors.items()))


def resolve_timezone_name(name, default='UTC'):
    """Return name when pytz knows it, otherwise default."""
    try:
        pytz.timezone(name)
    except (pytz.UnknownTimeZoneError, AttributeError):
        return default
    return name


def to_local_naive(moment, tz_name):
    """Convert an aware datetime into tz_name and drop tzinfo; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    tz = pytz.timezone(tz_name or 'UTC')
    return moment.astimezone(tz).replace(tzinfo=None)


def parse_datetime_value(raw, tz_name=None):
    """Parse an ISO-8601 string (trailing 'Z' allowed) or datetime; None on failure."""
    if raw is None or raw == '':
        return None
    if isinstance(raw, datetime):
        return to_local_naive(raw, tz_name)
    if isinstance(raw, date):
        return datetime.combine(raw, datetime.min.time())
    s = str(raw).strip()
    if s.endswith('Z') or s.endswith('z'):
        s = s[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(s)
    except (TypeError, ValueError):
        return None
    return to_local_naive(parsed, tz_name)


def parse_day_value(raw):
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return datetime.strptime(str(raw), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def _pick(data, aliases):
    for alias in aliases:
        if alias in data:
            return True, data[alias]
    return False, None


def validate_event_payload(data, tz_name=None, partial=False):
    """
    Validate a create (or, with partial=True, update) payload.

    Returns (cleaned, errors). cleaned uses model column names; errors maps
    payload field names to messages and is empty when the payload is valid.
    """
    if not isinstance(data, dict):
        return {}, {'body': 'Expected a JSON object'}

    cleaned = {}
    errors = {}

    for field_name, aliases in EVENT_FIELDS.items():
        present, value = _pick(data, aliases)
        error_key = aliases[0]
        if not present:
            if not partial and field_name in REQUIRED_EVENT_FIELDS:
                errors[error_key] = 'Required'
            continue

        if field_name == 'title':
            title = str(value or '').strip()
            if not title:
                errors[error_key] = 'Title is required'
            elif len(title) > TITLE_MAX_LENGTH:
                errors[error_key] = f'Title must be at most {TITLE_MAX_LENGTH} characters'
            else:
                cleaned['title'] = title
        elif field_name in ('start_time', 'end_time'):
            parsed = parse_datetime_value(value, tz_name)
            if parsed is None:
                errors[error_key] = 'Invalid date/time'
            else:
                cleaned[field_name] = parsed
        elif field_name == 'location':
            cleaned['location'] = (str(value).strip() or None) if value is not None else None
        elif field_name == 'type':
            cleaned['type'] = EventType.coerce(value).value

    if not partial and 'type' not in cleaned:
        cleaned['type'] = EventType.OTHER.value

    start = cleaned.get('start_time')
    end = cleaned.get('end_time')
    if start and end and end < start:
        errors['endTime'] = 'End time must be on/after start time'

    return cleaned, errors


def validate_registration(data):
    data = data if isinstance(data, dict) else {}
    errors = {}
    username = str(data.get('username') or '').strip()
    email = str(data.get('email') or '').strip().lower()
    password = str(data.get('password') or '')

    if not username:
        errors['username'] = 'Username is required'
    elif len(username) > USERNAME_MAX_LENGTH:
        errors['username'] = f'Username must be at most {USERNAME_MAX_LENGTH} characters'
    if not email:
        errors['email'] = 'Email is required'
    elif not EMAIL_PATTERN.match(email):
        errors['email'] = 'Invalid email address'
    if len(password) < PASSWORD_MIN_LENGTH:
        errors['password'] = f'Password must be at least {PASSWORD_MIN_LENGTH} characters'

    return {'username': username, 'email': email, 'password': password}, errors


def validate_login(data):
    data = data if isinstance(data, dict) else {}
    errors = {}
    username = str(data.get('username') or '').strip()
    password = str(data.get('password') or '')
    if not username:
        errors['username'] = 'Username is required'
    if not password:
        errors['password'] = 'Password is required'
    return {'username': username, 'password': password}, errors
