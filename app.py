# app.py

import logging
import os
from http import HTTPStatus

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify
from flask_login import LoginManager
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402
from config.monitoring import (  # noqa: E402
    DevelopmentMonitoringConfig,
    ProductionMonitoringConfig,
    TestingMonitoringConfig,
)
from config.validation import validate_and_exit  # noqa: E402
from ats_app.models import User, db  # noqa: E402
from ats_app.routes import init_routes  # noqa: E402
from ats_app.utils.error_handler import alert_unhandled_error, init_error_alerting  # noqa: E402
from ats_app.utils.logging_config import setup_logging  # noqa: E402
from ats_app.utils.monitoring import init_monitoring  # noqa: E402

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Validate environment variables (only in production)
flask_env = os.environ.get("FLASK_ENV", "development")
if flask_env == "production":
    validate_and_exit(flask_env)

# Load configuration based on the environment
if flask_env == "production":
    app.config.from_object(ProductionConfig)
    app.config.from_object(ProductionMonitoringConfig)
elif flask_env == "testing":
    app.config.from_object(TestingConfig)
    app.config.from_object(TestingMonitoringConfig)
else:
    app.config.from_object(DevelopmentConfig)
    app.config.from_object(DevelopmentMonitoringConfig)

# Initialize extensions
db.init_app(app)
login_manager = LoginManager()
login_manager.init_app(app)

# Initialize monitoring and logging systems
setup_logging(app)
init_error_alerting(app)
init_monitoring(app)


def _configure_sqlite_connection_factory(*, enable_foreign_keys: bool):
    """Return a connection hook applying SQLite pragmas."""

    def _configure_sqlite_connection(dbapi_connection, connection_record):  # pragma: no cover - instrumentation
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA busy_timeout=5000")
            if enable_foreign_keys:
                cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    return _configure_sqlite_connection


with app.app_context():
    engine = db.engine
    if engine.url.drivername.startswith("sqlite"):
        if not getattr(engine, "_sqlite_pragmas_configured", False):
            event.listen(engine, "connect", _configure_sqlite_connection_factory(enable_foreign_keys=True))
            engine._sqlite_pragmas_configured = True  # type: ignore[attr-defined]
    # Create the database tables only if not in testing mode
    if not app.config.get("TESTING", False):
        db.create_all()


# User loader callback for Flask-Login
@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (ValueError, TypeError):
        # Invalid user_id format
        return None
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error loading user {user_id}: {str(e)}")
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"success": False, "message": "Authentication required"}), HTTPStatus.UNAUTHORIZED


# Initialize routes
init_routes(app)


# Register error handlers
@app.errorhandler(404)
def not_found_error(error):
    return jsonify({"success": False, "message": "Not found"}), HTTPStatus.NOT_FOUND


@app.errorhandler(500)
def internal_error(error):
    db.session.rollback()
    original = getattr(error, "original_exception", None) or error
    current_app.logger.error(f"Unhandled error: {original}", exc_info=original)
    alert_unhandled_error(original)

    body = {"success": False, "message": "Internal server error"}
    if current_app.config.get("ENV_NAME") != "production":
        body["error"] = str(original)
    return jsonify(body), HTTPStatus.INTERNAL_SERVER_ERROR


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
