"""
Mock Authy API server for local development

Run it and point the client at it:
    python server/mock_authy.py
    authy-cli init --api-key test-api-key --base-url http://localhost:5000
"""

import os

from flask import Flask, jsonify

from authy_client.logging_config import get_logger, setup_logging
from blueprints.protected import UserStore, protected_bp


def create_app(config=None):
    """Create and configure the mock Flask application"""
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = get_logger(__name__)

    app = Flask(__name__)
    app.config.update(
        MOCK_AUTHY_API_KEY=os.environ.get('MOCK_AUTHY_API_KEY', 'test-api-key'),
        MOCK_AUTHY_VALID_TOKEN=os.environ.get('MOCK_AUTHY_VALID_TOKEN', '0000000'),
        MOCK_AUTHY_UNAVAILABLE=os.environ.get('MOCK_AUTHY_UNAVAILABLE', 'false').lower() == 'true',
        MOCK_AUTHY_APP_USER_EMAILS=[e.strip() for e in os.environ.get('MOCK_AUTHY_APP_USER_EMAILS', '').split(',') if e.strip()],
    )
    if config:
        app.config.update(config)

    app.extensions['mock_authy_users'] = UserStore()
    app.register_blueprint(protected_bp)

    @app.route('/health')
    def health_check():
        return jsonify({"status": "healthy"})

    logger.info("Mock Authy application created")
    return app


if __name__ == '__main__':
    app = create_app()
    logger = get_logger(__name__)

    host = os.environ.get('HOST', '127.0.0.1')
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('DEBUG', 'false').lower() == 'true'

    logger.info(f"Starting mock Authy server on {host}:{port} (debug={debug})")
    app.run(host=host, port=port, debug=debug)
