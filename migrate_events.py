"""
Ensure the calendar_event table matches the current model.
Usage:  python migrate_events.py

Idempotent:
- Create calendar_event if it does not exist
- Add location TEXT and type VARCHAR(50) to older tables
- Normalize unknown/blank type values to 'other'
"""
from backend.event_types import ALLOWED_EVENT_TYPES, DEFAULT_EVENT_TYPE
from models import db, CalendarEvent


def ensure_event_schema(engine):
    """Apply pending column changes; return the list of actions taken."""
    actions = []
    CalendarEvent.__table__.create(engine, checkfirst=True)
    with engine.begin() as conn:
        cols = {row[1] for row in conn.execute(db.text("PRAGMA table_info(calendar_event)"))}
        if 'location' not in cols:
            conn.execute(db.text("ALTER TABLE calendar_event ADD COLUMN location TEXT"))
            actions.append("Added calendar_event.location column")
        if 'type' not in cols:
            conn.execute(db.text(
                f"ALTER TABLE calendar_event ADD COLUMN type VARCHAR(50) NOT NULL DEFAULT '{DEFAULT_EVENT_TYPE.value}'"
            ))
            actions.append("Added calendar_event.type column")

        allowed = sorted(ALLOWED_EVENT_TYPES)
        placeholders = ', '.join(f':t{i}' for i in range(len(allowed)))
        params = {f't{i}': value for i, value in enumerate(allowed)}
        params['fallback'] = DEFAULT_EVENT_TYPE.value
        result = conn.execute(
            db.text(
                f"UPDATE calendar_event SET type = :fallback "
                f"WHERE type IS NULL OR lower(type) NOT IN ({placeholders})"
            ),
            params,
        )
        if result.rowcount:
            actions.append(f"Normalized {result.rowcount} event types to '{DEFAULT_EVENT_TYPE.value}'")
    return actions


def main():
    from app import app

    with app.app_context():
        for line in ensure_event_schema(db.engine):
            print(line)
        print("calendar_event table is ensured.")


if __name__ == '__main__':
    main()
