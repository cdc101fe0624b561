"""Account/session routes extracted from app.py for readability."""

from services.validation_service import validate_login, validate_registration


def _start_session(session, user):
    session.clear()
    session['user_id'] = user.id
    session.permanent = True


def register():
    import app as a

    User = a.User
    app = a.app
    db = a.db
    jsonify = a.jsonify
    request = a.request
    session = a.session

    data, errors = validate_registration(request.get_json(silent=True))
    if errors:
        return jsonify({'error': 'Invalid registration data', 'errors': errors}), 400

    if User.query.filter_by(username=data['username']).first():
        return jsonify({'error': 'Username already exists', 'errors': {'username': 'Username already exists'}}), 400
    if User.query.filter_by(email=data['email']).first():
        return jsonify({'error': 'Email already registered', 'errors': {'email': 'Email already registered'}}), 400

    user = User(username=data['username'], email=data['email'])
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()

    _start_session(session, user)
    app.logger.info("Registered user %s (%s)", user.id, user.username)
    return jsonify(user.to_dict()), 201


def login():
    import app as a

    User = a.User
    app = a.app
    jsonify = a.jsonify
    request = a.request
    session = a.session

    data, errors = validate_login(request.get_json(silent=True))
    if errors:
        return jsonify({'error': 'Invalid login data', 'errors': errors}), 400

    user = User.query.filter_by(username=data['username']).first()
    if not user or not user.check_password(data['password']):
        app.logger.warning("Rejected login for username %r", data['username'])
        return jsonify({'error': 'Invalid username or password'}), 401

    _start_session(session, user)
    return jsonify(user.to_dict())


def logout():
    import app as a

    jsonify = a.jsonify
    session = a.session

    session.pop('user_id', None)
    return jsonify({'success': True})


def current_user_info():
    import app as a

    get_current_user = a.get_current_user
    jsonify = a.jsonify

    user = get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401
    return jsonify(user.to_dict())
