import os
import time
from datetime import datetime, timedelta

import pytz
from dotenv import load_dotenv
from flask import Flask, request, jsonify, session, g, make_response
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

from backend.event_cache import EventCache
from models import db, User
from services import calendar_routes, user_routes
from services.validation_service import resolve_timezone_name

app = Flask(__name__)
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///calendar.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=int(os.environ.get('SESSION_LIFETIME_DAYS', 30)))
app.config['DEFAULT_TIMEZONE'] = os.environ.get('DEFAULT_TIMEZONE', 'America/New_York')
app.config['WEEK_STARTS_ON'] = os.environ.get('WEEK_STARTS_ON', 'sunday')
app.config['MONTH_VIEW_MAX_EVENTS'] = int(os.environ.get('MONTH_VIEW_MAX_EVENTS', 2))
app.config['EVENT_CACHE_MAX_ENTRIES'] = int(os.environ.get('EVENT_CACHE_MAX_ENTRIES', 256))
app.config['FRONTEND_URL'] = os.environ.get('FRONTEND_URL')
app.config['CORS_DEV_ORIGIN'] = 'http://localhost:5173'

app.logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

configured_tz = app.config['DEFAULT_TIMEZONE']
app.config['DEFAULT_TIMEZONE'] = resolve_timezone_name(configured_tz)
if app.config['DEFAULT_TIMEZONE'] != configured_tz:
    app.logger.warning("Unknown DEFAULT_TIMEZONE %r, falling back to UTC", configured_tz)

db.init_app(app)
app.extensions['event_cache'] = EventCache(app.config['EVENT_CACHE_MAX_ENTRIES'])

LOG_LINE_MAX = 80


def get_current_user():
    """Resolve the signed-in user from the session cookie."""
    user_id = session.get('user_id')
    if user_id:
        return db.session.get(User, user_id)
    return None


def local_timezone():
    return pytz.timezone(app.config.get('DEFAULT_TIMEZONE', 'America/New_York'))


def now_local():
    return datetime.now(local_timezone()).replace(tzinfo=None)


with app.app_context():
    db.create_all()


def _allowed_origins():
    return {origin for origin in (app.config.get('FRONTEND_URL'), app.config.get('CORS_DEV_ORIGIN')) if origin}


@app.before_request
def _start_request_timer():
    g.request_started = time.perf_counter()
    if request.method == 'OPTIONS':
        return make_response('', 200)


@app.after_request
def _apply_cors_headers(response):
    origin = request.headers.get('Origin')
    if origin and origin in _allowed_origins():
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Vary'] = 'Origin'
    response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, PATCH, DELETE, OPTIONS'
    response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
    response.headers['Access-Control-Allow-Credentials'] = 'true'
    return response


@app.after_request
def _log_api_request(response):
    if not request.path.startswith('/api'):
        return response
    started = g.get('request_started')
    duration_ms = int((time.perf_counter() - started) * 1000) if started else 0
    log_line = f"{request.method} {request.path} {response.status_code} in {duration_ms}ms"
    if response.is_json:
        log_line += f" :: {response.get_data(as_text=True).strip()}"
    if len(log_line) > LOG_LINE_MAX:
        log_line = log_line[:LOG_LINE_MAX - 1] + "…"
    app.logger.info(log_line)
    return response


@app.errorhandler(SQLAlchemyError)
def _handle_storage_error(exc):
    db.session.rollback()
    app.logger.exception("Storage failure on %s %s", request.method, request.path)
    return jsonify({'error': 'Storage unavailable'}), 500


@app.errorhandler(404)
def _handle_not_found(exc):
    if request.path.startswith('/api'):
        return jsonify({'error': 'Not found'}), 404
    return exc


@app.errorhandler(405)
def _handle_method_not_allowed(exc):
    if request.path.startswith('/api'):
        return jsonify({'error': 'Method not allowed'}), 405
    return exc


# Account routes
@app.route('/api/register', methods=['POST'])
def register():
    return user_routes.register()


@app.route('/api/login', methods=['POST'])
def login():
    return user_routes.login()


@app.route('/api/logout', methods=['POST'])
def logout():
    return user_routes.logout()


@app.route('/api/user')
def current_user_info():
    return user_routes.current_user_info()


# Calendar API
@app.route('/api/events', methods=['GET', 'POST'])
def events_collection():
    return calendar_routes.events_collection()


@app.route('/api/events/<int:event_id>', methods=['GET', 'PUT', 'PATCH', 'DELETE'])
def event_detail(event_id):
    return calendar_routes.event_detail(event_id)


@app.route('/api/calendar/view')
def calendar_view():
    return calendar_routes.calendar_view()


@app.route('/api/event-types')
def event_types():
    return calendar_routes.event_types()


if __name__ == '__main__':
    is_dev = os.environ.get('FLASK_ENV', 'development') != 'production'
    app.run(
        host='127.0.0.1' if is_dev else '0.0.0.0',
        port=int(os.environ.get('PORT', 5001)),
        debug=is_dev,
    )
