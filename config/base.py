# config/base.py
import os
from datetime import timedelta


def _coerce_bool(value, default=False):
    """Convert environment-style truthy/falsey values to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_int(value, default, *, minimum=None):
    """Parse an integer setting, falling back to ``default`` on bad input."""
    if value is None or str(value).strip() == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if minimum is not None and number < minimum:
        return default
    return number


class Config:
    # SECRET_KEY must be set via environment variable for security
    # Generate with: python -c "import secrets; print(secrets.token_hex(32))"
    _flask_env = os.environ.get("FLASK_ENV", "development")
    _is_testing = _flask_env == "testing"
    _is_production = _flask_env == "production"

    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Only require SECRET_KEY in production mode
    if not SECRET_KEY and _is_production:
        raise ValueError(
            "SECRET_KEY environment variable is required in production. "
            'Generate with: python -c "import secrets; print(secrets.token_hex(32))"'
        )

    if not SECRET_KEY and not _is_testing:
        import warnings

        warnings.warn(
            "SECRET_KEY not set. Using default for development only. "
            "This is insecure and should not be used in production.",
            UserWarning,
        )
        SECRET_KEY = "dev-secret-key-change-in-production"

    if not SECRET_KEY:
        SECRET_KEY = "test-secret-key-placeholder"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Transfer workflow
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000").rstrip("/")
    TRANSFER_REVIEWER_EMAIL = os.environ.get("TRANSFER_REVIEWER_EMAIL", "payroll@example.com")
    ARCHIVE_CLEANUP_DELAY_DAYS = _coerce_int(os.environ.get("ARCHIVE_CLEANUP_DELAY_DAYS"), 7, minimum=0)
    TRANSFER_PROFILE_PATH = os.environ.get("TRANSFER_PROFILE_PATH")

    # Outbound mail (transactional notifications and error alerts)
    MAIL_SERVER = os.environ.get("MAIL_SERVER")
    MAIL_PORT = _coerce_int(os.environ.get("MAIL_PORT"), 587, minimum=1)
    MAIL_USE_TLS = _coerce_bool(os.environ.get("MAIL_USE_TLS"), default=True)
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_FROM = os.environ.get("MAIL_FROM", "noreply@example.com")
    MAIL_TIMEOUT_SECONDS = _coerce_int(os.environ.get("MAIL_TIMEOUT_SECONDS"), 10, minimum=1)
    MAIL_SUPPRESS_SEND = _coerce_bool(os.environ.get("MAIL_SUPPRESS_SEND"), default=False)

    EMAIL_VALIDATION_CHECK_DELIVERABILITY = _coerce_bool(
        os.environ.get("EMAIL_VALIDATION_CHECK_DELIVERABILITY"), default=False
    )

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"


class DevelopmentConfig(Config):
    ENV_NAME = "development"
    DEBUG = True
    _config_dir = os.path.dirname(os.path.abspath(__file__))
    _project_root = os.path.dirname(_config_dir)
    instance_path = os.path.join(_project_root, "instance")

    if not os.path.exists(instance_path):
        os.makedirs(instance_path, exist_ok=True)

    # SQLite URI format: sqlite:///absolute/path (3 slashes for absolute path)
    db_path = os.path.join(instance_path, "ats_dev.db").replace("\\", "/")
    db_uri = f"sqlite:///{db_path}"

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", db_uri)
    SQLALCHEMY_ECHO = _coerce_bool(os.environ.get("SQLALCHEMY_ECHO"), default=False)
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": 5,
            }
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {}
    MAIL_SUPPRESS_SEND = _coerce_bool(os.environ.get("MAIL_SUPPRESS_SEND"), default=True)


class TestingConfig(Config):
    ENV_NAME = "testing"
    TESTING = True
    SECRET_KEY = os.environ.get("SECRET_KEY", "test-secret-key-for-testing-only")
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": 5,
        }
    }
    MAIL_SUPPRESS_SEND = True
    TRANSFER_REVIEWER_EMAIL = "reviewer@example.com"
    FRONTEND_URL = "http://frontend.test"


class ProductionConfig(Config):
    ENV_NAME = "production"
    DEBUG = False
    uri = os.environ.get("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_ECHO = False
    SESSION_COOKIE_SECURE = True
