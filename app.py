"""
Task Manager application factory.

Wires configuration, the database, sessions/login, CSRF protection and the
blueprints together. `run.py` serves the app in development.
"""

import logging
import time

from flask import Flask, g, request
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect

from config import get_config
from models import db, User
from utils.auth import unauthorized_response
from utils.startup_validation import run_startup_validation

logger = logging.getLogger(__name__)

login_manager = LoginManager()
csrf = CSRFProtect()
migrate = Migrate()


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, user_id)


login_manager.unauthorized_handler(unauthorized_response)


def _configure_logging(app):
    logging.basicConfig(
        level=getattr(logging, app.config.get("LOG_LEVEL", "INFO")),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_request_logging(app):
    """Per-request access log, development only."""

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.get("request_started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.debug(f"{request.method} {request.full_path.rstrip('?')} {response.status_code} {elapsed_ms:.1f}ms")
        return response


def _register_csrf_check(app):
    """
    Require a CSRF token on form posts only.

    JSON bodies and PUT/DELETE cannot be sent cross-site without a CORS
    preflight, so API clients need no token.
    """

    @app.before_request
    def _csrf_protect():
        if not app.config.get("WTF_CSRF_ENABLED") or not request.endpoint:
            return None
        if request.method != "POST" or request.is_json:
            return None
        csrf.protect()


def _register_blueprints(app):
    from routes.pages import pages_bp
    from routes.auth import auth_bp
    from routes.google_auth import google_auth_bp
    from routes.tasks import tasks_bp
    from routes.users import users_bp
    from routes.errors import errors_bp

    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(google_auth_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(errors_bp)


def create_app(config_overrides=None):
    """
    Build a configured Flask application.

    Args:
        config_overrides: optional mapping applied on top of the
            environment's config class (tests use this)
    """
    app = Flask(__name__)
    app.config.from_object(get_config())
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    _register_csrf_check(app)

    login_manager.init_app(app)

    _register_blueprints(app)

    if app.config.get("ENV_NAME") == "development":
        _register_request_logging(app)

    with app.app_context():
        engine = None if app.config.get("TESTING") else db.engine
        run_startup_validation(app, engine=engine)

    logger.info(f"Task Manager initialised ({app.config.get('ENV_NAME')})")
    return app
