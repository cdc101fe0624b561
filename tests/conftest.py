import os

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('SECRET_KEY', 'test-secret')

import pytest

from app import app as flask_app
from models import db


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True, DEFAULT_TIMEZONE='UTC', WEEK_STARTS_ON='sunday', MONTH_VIEW_MAX_EVENTS=2)
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        flask_app.extensions['event_cache'].clear()
        yield flask_app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username='alice', email=None, password='secret123'):
    return client.post('/api/register', json={
        'username': username,
        'email': email or f'{username}@example.com',
        'password': password,
    })


@pytest.fixture
def user_client(client):
    resp = register(client)
    assert resp.status_code == 201
    return client


def make_event(client, title, start, end=None, **extra):
    payload = {'title': title, 'startTime': start, 'endTime': end or start}
    payload.update(extra)
    resp = client.post('/api/events', json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()
