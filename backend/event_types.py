from enum import Enum


class EventType(str, Enum):
    """Closed set of event categories. Anything else displays as OTHER."""

    MEETING = 'meeting'
    PERSONAL = 'personal'
    WORK = 'work'
    HEALTH = 'health'
    OTHER = 'other'

    @classmethod
    def coerce(cls, raw):
        if isinstance(raw, cls):
            return raw
        key = str(raw or '').strip().lower()
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER

    @property
    def color(self):
        return EVENT_TYPE_COLORS[self]

    @property
    def label(self):
        return self.value.capitalize()

    def to_dict(self):
        return {'type': self.value, 'label': self.label, 'color': self.color}


EVENT_TYPE_COLORS = {
    EventType.MEETING: 'blue',
    EventType.PERSONAL: 'purple',
    EventType.WORK: 'amber',
    EventType.HEALTH: 'green',
    EventType.OTHER: 'red',
}

ALLOWED_EVENT_TYPES = {t.value for t in EventType}
DEFAULT_EVENT_TYPE = EventType.OTHER


def event_type_catalog():
    """Display contract for the renderer: known types in declaration order."""
    return [t.to_dict() for t in EventType]
