"""Event CRUD and calendar view routes extracted from app.py for readability."""

from backend import calendar_range
from backend.event_projection import project
from backend.event_types import event_type_catalog
from services import event_store
from services.validation_service import (
    EventValidationError,
    parse_datetime_value,
    parse_day_value,
    validate_event_payload,
)


def _unauthorized(jsonify):
    return jsonify({'error': 'Unauthorized'}), 401


def _invalid(jsonify, errors):
    return jsonify({'error': 'Invalid event data', 'errors': errors}), 400


def events_collection():
    import app as a

    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request
    tz_name = a.app.config['DEFAULT_TIMEZONE']

    user = get_current_user()
    if not user:
        return _unauthorized(jsonify)

    if request.method == 'POST':
        data = request.get_json(silent=True)
        cleaned, errors = validate_event_payload(data, tz_name=tz_name)
        if errors:
            return _invalid(jsonify, errors)
        event = event_store.create_event(user.id, cleaned)
        return jsonify(event.to_dict()), 201

    start_raw = request.args.get('startDate') or request.args.get('start')
    end_raw = request.args.get('endDate') or request.args.get('end')
    if start_raw and end_raw:
        start = parse_datetime_value(start_raw, tz_name)
        if not start:
            return jsonify({'error': 'Invalid startDate'}), 400
        end = parse_datetime_value(end_raw, tz_name)
        if not end:
            return jsonify({'error': 'Invalid endDate'}), 400
        if end < start:
            return jsonify({'error': 'endDate must be on/after startDate'}), 400
        events = event_store.list_events(user.id, start, end)
    else:
        events = event_store.list_events(user.id)
    return jsonify([ev.to_dict() for ev in events])


def event_detail(event_id):
    import app as a

    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request
    tz_name = a.app.config['DEFAULT_TIMEZONE']

    user = get_current_user()
    if not user:
        return _unauthorized(jsonify)

    if request.method == 'DELETE':
        if not event_store.delete_event(event_id, user.id):
            return jsonify({'error': 'Event not found'}), 404
        return '', 204

    if request.method == 'GET':
        event = event_store.get_event(event_id, user.id)
        if not event:
            return jsonify({'error': 'Event not found'}), 404
        return jsonify(event.to_dict())

    data = request.get_json(silent=True)
    cleaned, errors = validate_event_payload(data, tz_name=tz_name, partial=True)
    if errors:
        return _invalid(jsonify, errors)
    try:
        event = event_store.update_event(event_id, user.id, cleaned)
    except EventValidationError as exc:
        return _invalid(jsonify, exc.errors)
    if not event:
        return jsonify({'error': 'Event not found'}), 404
    return jsonify(event.to_dict())


def calendar_view():
    import app as a

    app = a.app
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = get_current_user()
    if not user:
        return _unauthorized(jsonify)

    try:
        mode = calendar_range.parse_view_mode(request.args.get('mode'))
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400

    today = a.now_local().date()
    day_raw = request.args.get('date')
    reference = parse_day_value(day_raw) if day_raw else today
    if not reference:
        return jsonify({'error': 'Invalid date'}), 400

    week_start = calendar_range.parse_week_start(app.config.get('WEEK_STARTS_ON'))
    window = calendar_range.resolve_window(reference, mode, week_start)
    events = event_store.load_window(user.id, window)
    projection = project(
        events,
        window,
        reference=reference,
        tz=a.local_timezone(),
        max_per_day=app.config.get('MONTH_VIEW_MAX_EVENTS', 2),
    )

    return jsonify({
        'mode': mode,
        'reference': reference.isoformat(),
        'today': today.isoformat(),
        'title': calendar_range.window_title(reference, mode, week_start),
        'previous': calendar_range.shift_reference(reference, mode, -1).isoformat(),
        'next': calendar_range.shift_reference(reference, mode, 1).isoformat(),
        'window': window.to_dict(),
        'projection': projection.to_dict(),
        'types': event_type_catalog(),
    })


def event_types():
    import app as a

    return a.jsonify(event_type_catalog())
