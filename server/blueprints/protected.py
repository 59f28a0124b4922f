"""
Mock Authy API Blueprint

Serves the /protected/json endpoints used by authy_client with in-memory
users, so the client and authy-cli can be exercised without the real
service.

To register this blueprint in your Flask app:
    from blueprints.protected import protected_bp
    app.register_blueprint(protected_bp)

Endpoints:
    POST /protected/json/users/new            - Register a user
    POST /protected/json/users/<id>/remove    - Remove a user
    GET  /protected/json/verify/<token>/<id>  - Verify a token
    GET  /protected/json/sms/<id>             - Send a token by SMS
    GET  /protected/json/call/<id>            - Send a token by phone call

Settings (app.config, defaults from the environment):
    MOCK_AUTHY_API_KEY      - accepted api_key (default: test-api-key)
    MOCK_AUTHY_VALID_TOKEN  - the token that verifies (default: 0000000)
    MOCK_AUTHY_UNAVAILABLE  - answer every request with 503
    MOCK_AUTHY_APP_USER_EMAILS - users registered with these emails have the
                             mobile app; SMS and calls are skipped unless forced
"""

import itertools
import logging
import threading

from flask import Blueprint, current_app, jsonify, request

logger = logging.getLogger(__name__)

protected_bp = Blueprint('protected', __name__, url_prefix='/protected/json')


class UserStore:
    """Registered users, keyed by Authy id"""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._users = {}

    def register(self, email, cellphone, country_code):
        with self._lock:
            for user_id, user in self._users.items():
                if user['email'] == email:
                    return user_id
            user_id = next(self._ids)
            self._users[user_id] = {
                'email': email,
                'cellphone': cellphone,
                'country_code': country_code,
            }
            return user_id

    def get(self, user_id):
        with self._lock:
            return self._users.get(user_id)

    def remove(self, user_id):
        with self._lock:
            return self._users.pop(user_id, None) is not None


def get_store() -> UserStore:
    return current_app.extensions['mock_authy_users']


def error_response(status_code, message, error_code, **extra):
    body = {
        "success": False,
        "message": message,
        "errors": {"message": message},
        "error_code": error_code,
    }
    body.update(extra)
    return jsonify(body), status_code


def masked_cellphone(user):
    digits = user['cellphone'][-2:]
    return f"+{user['country_code']}-XXX-XXX-XX{digits}"


def uses_app(user):
    return user['email'] in current_app.config.get('MOCK_AUTHY_APP_USER_EMAILS', ())


def forced():
    return request.args.get('force') == 'true'


def lookup_user(raw_id):
    try:
        user_id = int(raw_id)
    except ValueError:
        return None, None
    return user_id, get_store().get(user_id)


@protected_bp.before_request
def check_service():
    """Reject everything while unavailable, then requests with a wrong api_key"""
    if current_app.config.get('MOCK_AUTHY_UNAVAILABLE'):
        logger.warning(f"Mock unavailable, rejecting {request.method} {request.path}")
        return error_response(503, "Service unavailable", "60000")

    if request.args.get('api_key') != current_app.config['MOCK_AUTHY_API_KEY']:
        logger.warning(f"Invalid API key on {request.method} {request.path} from {request.remote_addr}")
        return error_response(401, "Invalid API key", "60001")

    return None


@protected_bp.route("/users/new", methods=["POST"])
def register_user():
    email = request.form.get('user[email]', '').strip()
    cellphone = request.form.get('user[cellphone]', '').strip()
    country_code = request.form.get('user[country_code]', '1').strip()

    errors = {}
    if '@' not in email:
        errors['email'] = "is invalid"
    if not cellphone.isdigit():
        errors['cellphone'] = "is invalid"
    if errors:
        logger.info(f"Rejected registration: {errors}")
        return jsonify({
            "success": False,
            "message": "User was not valid",
            "errors": dict(errors, message="User was not valid"),
            "error_code": "60027",
        }), 400

    user_id = get_store().register(email, cellphone, country_code)
    logger.info(f"Registered user {user_id}")
    return jsonify({"success": True, "message": "User created successfully.", "user": {"id": user_id}})


@protected_bp.route("/users/<raw_id>/remove", methods=["POST"])
def remove_user(raw_id):
    user_id, user = lookup_user(raw_id)
    if user is None or not get_store().remove(user_id):
        return error_response(404, "User not found.", "60026")

    logger.info(f"Removed user {user_id}")
    return jsonify({"success": True, "message": "User was added to remove."})


@protected_bp.route("/verify/<token>/<raw_id>", methods=["GET"])
def verify_token(token, raw_id):
    _, user = lookup_user(raw_id)
    if user is None:
        return error_response(404, "User not found.", "60026")

    if token != current_app.config['MOCK_AUTHY_VALID_TOKEN']:
        return error_response(401, "Token is invalid", "60020", token="is invalid")

    return jsonify({"success": True, "message": "Token is valid.", "token": "is valid"})


@protected_bp.route("/sms/<raw_id>", methods=["GET"])
def send_sms(raw_id):
    _, user = lookup_user(raw_id)
    if user is None:
        return error_response(404, "User not found.", "60026")

    if uses_app(user) and not forced():
        logger.info(f"SMS skipped (mock) for app user {raw_id}")
        return jsonify({
            "success": True,
            "message": "Ignored: SMS is not needed for smartphones. Pass force=true if you want to actually send it anyway.",
            "cellphone": masked_cellphone(user),
            "ignored": True,
        })

    locale = request.args.get('locale', 'en')
    logger.info(f"SMS token sent (mock) to user {raw_id}, locale={locale}")
    return jsonify({"success": True, "message": "SMS token was sent", "cellphone": masked_cellphone(user)})


@protected_bp.route("/call/<raw_id>", methods=["GET"])
def start_phone_call(raw_id):
    _, user = lookup_user(raw_id)
    if user is None:
        return error_response(404, "User not found.", "60026")

    if uses_app(user) and not forced():
        logger.info(f"Phone call skipped (mock) for app user {raw_id}")
        return jsonify({
            "success": True,
            "message": "Ignored: Call is not needed for smartphones. Pass force=true if you want to actually call anyway.",
            "cellphone": masked_cellphone(user),
            "ignored": True,
        })

    logger.info(f"Phone call started (mock) for user {raw_id}")
    return jsonify({"success": True, "message": "Call started...", "cellphone": masked_cellphone(user)})
