"""Per-user event persistence on top of Flask-SQLAlchemy."""

from flask import current_app

from backend.event_cache import EventCache
from backend.event_types import EventType
from models import db, CalendarEvent
from services.validation_service import EventValidationError

UPDATABLE_FIELDS = ('title', 'start_time', 'end_time', 'location', 'type')


def _cache():
    cache = current_app.extensions.get('event_cache')
    if cache is None:
        cache = EventCache(current_app.config.get('EVENT_CACHE_MAX_ENTRIES', 256))
        current_app.extensions['event_cache'] = cache
    return cache


def _invalidate(user_id):
    cache = _cache()
    dropped = cache.invalidate_user(user_id)
    if dropped:
        current_app.logger.debug("Dropped %s cached windows for user %s (cache: %s)",
                                 dropped, user_id, cache.stats())


def list_events(user_id, start=None, end=None):
    """
    Events owned by user_id, ordered by start time.

    The range is a closed interval on start_time only; an event that starts
    before ``start`` is excluded even if it runs into the window.
    """
    query = CalendarEvent.query.filter(CalendarEvent.user_id == user_id)
    if start is not None:
        query = query.filter(CalendarEvent.start_time >= start)
    if end is not None:
        query = query.filter(CalendarEvent.start_time <= end)
    return query.order_by(CalendarEvent.start_time.asc(), CalendarEvent.id.asc()).all()


def load_window(user_id, window):
    """Serialized events for a view window, served from the cache when possible."""
    def _load():
        return [ev.to_dict() for ev in list_events(user_id, window.start, window.end)]

    return _cache().get_or_load(user_id, window.start, window.end, _load)


def get_event(event_id, user_id):
    return CalendarEvent.query.filter_by(id=event_id, user_id=user_id).first()


def create_event(user_id, draft):
    event = CalendarEvent(
        user_id=user_id,
        title=draft['title'],
        start_time=draft['start_time'],
        end_time=draft['end_time'],
        location=draft.get('location'),
        type=EventType.coerce(draft.get('type')).value,
    )
    db.session.add(event)
    db.session.commit()
    _invalidate(user_id)
    current_app.logger.info("Created event %s for user %s", event.id, user_id)
    return event


def update_event(event_id, user_id, patch):
    event = get_event(event_id, user_id)
    if not event:
        return None

    start = patch.get('start_time', event.start_time)
    end = patch.get('end_time', event.end_time)
    if start and end and end < start:
        raise EventValidationError({'endTime': 'End time must be on/after start time'})

    for field_name in UPDATABLE_FIELDS:
        if field_name not in patch:
            continue
        value = patch[field_name]
        if field_name == 'type':
            value = EventType.coerce(value).value
        setattr(event, field_name, value)

    db.session.commit()
    _invalidate(user_id)
    current_app.logger.info("Updated event %s for user %s", event.id, user_id)
    return event


def delete_event(event_id, user_id):
    event = get_event(event_id, user_id)
    if not event:
        return False
    db.session.delete(event)
    db.session.commit()
    _invalidate(user_id)
    current_app.logger.info("Deleted event %s for user %s", event_id, user_id)
    return True
