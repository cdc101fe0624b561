from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime

from backend.calendar_range import format_clock
from backend.event_types import EventType

db = SQLAlchemy()

class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    events = db.relationship('CalendarEvent', backref='owner', lazy=True, cascade="all, delete-orphan")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
        }


class CalendarEvent(db.Model):
    """
    Time-bound calendar entry owned by a single user.
    start_time/end_time are naive datetimes in the server's DEFAULT_TIMEZONE.
    """
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False, index=True)
    end_time = db.Column(db.DateTime, nullable=False)
    location = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(50), nullable=False, default=EventType.OTHER.value)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def event_type(self):
        return EventType.coerce(self.type)

    def time_label(self):
        return f"{format_clock(self.start_time)} - {format_clock(self.end_time)}"

    def to_dict(self):
        event_type = self.event_type
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'startTime': self.start_time.isoformat() if self.start_time else None,
            'endTime': self.end_time.isoformat() if self.end_time else None,
            'location': self.location,
            'type': event_type.value,
            'color': event_type.color,
            'timeLabel': self.time_label() if self.start_time and self.end_time else None,
        }
