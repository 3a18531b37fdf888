# config/monitoring.py

import os

from prometheus_client import Counter, Histogram


class MonitoringConfig:
    """Monitoring and alerting configuration"""

    # Monitoring Configuration
    MONITORING_ENABLED = os.environ.get("MONITORING_ENABLED", "false").lower() == "true"
    METRICS_ENDPOINT = os.environ.get("METRICS_ENDPOINT", "/metrics")
    HEALTH_CHECK_ENDPOINT = os.environ.get("HEALTH_CHECK_ENDPOINT", "/health")

    # Error Alerting Configuration
    ERROR_ALERTING_ENABLED = os.environ.get("ERROR_ALERTING_ENABLED", "false").lower() == "true"

    # Logging Configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")  # 'json' or 'text'
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_FILE_MAX_BYTES = int(os.environ.get("LOG_FILE_MAX_BYTES", 10485760))  # 10MB
    LOG_FILE_BACKUP_COUNT = int(os.environ.get("LOG_FILE_BACKUP_COUNT", 10))

    # Console and File Logging
    ENABLE_FILE_LOGGING = os.environ.get("ENABLE_FILE_LOGGING", "true").lower() == "true"
    ENABLE_CONSOLE_LOGGING = os.environ.get("ENABLE_CONSOLE_LOGGING", "true").lower() == "true"

    # Email Alerting (uses the MAIL_* transport settings)
    ENABLE_EMAIL_ALERTS = os.environ.get("ENABLE_EMAIL_ALERTS", "false").lower() == "true"
    ADMIN_EMAILS = (
        os.environ.get("ADMIN_EMAILS", "").split(",") if os.environ.get("ADMIN_EMAILS") else []
    )

    # Rate Limiting for Alerts (per hour)
    EMAIL_ALERT_RATE_LIMIT = int(os.environ.get("EMAIL_ALERT_RATE_LIMIT", 5))
    SLACK_ALERT_RATE_LIMIT = int(os.environ.get("SLACK_ALERT_RATE_LIMIT", 10))

    # Slack Integration
    ENABLE_SLACK_ALERTS = os.environ.get("ENABLE_SLACK_ALERTS", "false").lower() == "true"
    SLACK_WEBHOOK_URL = os.environ.get("SLACK_WEBHOOK_URL")

    # Application Info
    APP_NAME = os.environ.get("APP_NAME", "ATS Transfers")
    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")


class DevelopmentMonitoringConfig(MonitoringConfig):
    """Development-specific monitoring configuration"""

    LOG_LEVEL = "DEBUG"
    LOG_FORMAT = "text"  # More readable in development
    ENABLE_FILE_LOGGING = True
    ENABLE_CONSOLE_LOGGING = True
    ENABLE_EMAIL_ALERTS = False  # Don't spam emails in development
    ENABLE_SLACK_ALERTS = False


class ProductionMonitoringConfig(MonitoringConfig):
    """Production-specific monitoring configuration"""

    LOG_LEVEL = "INFO"
    LOG_FORMAT = "json"  # Structured logging for production
    ENABLE_FILE_LOGGING = True
    ENABLE_CONSOLE_LOGGING = False  # Usually handled by container orchestration
    ENABLE_EMAIL_ALERTS = True
    ENABLE_SLACK_ALERTS = True

    EMAIL_ALERT_RATE_LIMIT = 3
    SLACK_ALERT_RATE_LIMIT = 5


class TestingMonitoringConfig(MonitoringConfig):
    """Testing-specific monitoring configuration"""

    MONITORING_ENABLED = False
    ERROR_ALERTING_ENABLED = False
    LOG_LEVEL = "WARNING"
    LOG_FORMAT = "text"
    ENABLE_FILE_LOGGING = False
    ENABLE_CONSOLE_LOGGING = False
    ENABLE_EMAIL_ALERTS = False
    ENABLE_SLACK_ALERTS = False


class TransferMonitoring:
    """Prometheus metric helpers for the record transfer workflow."""

    REQUESTS_COUNTER = Counter(
        "transfer_requests_total",
        "Total transfer requests created.",
        labelnames=("kind",),
    )
    REVIEWS_COUNTER = Counter(
        "transfer_reviews_total",
        "Total transfer reviews by outcome.",
        labelnames=("kind", "outcome"),
    )
    EXECUTION_LATENCY = Histogram(
        "transfer_execution_seconds",
        "Latency histogram for approval plus merge execution.",
        labelnames=("kind", "status"),
        buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
    )
    NOTIFICATION_FAILURES = Counter(
        "transfer_notification_failures_total",
        "Transfer notification emails that could not be delivered.",
        labelnames=("kind", "notification"),
    )

    @classmethod
    def record_request(cls, kind: str) -> None:
        cls.REQUESTS_COUNTER.labels(kind=kind).inc()

    @classmethod
    def record_review(cls, kind: str, outcome: str) -> None:
        cls.REVIEWS_COUNTER.labels(kind=kind, outcome=outcome).inc()

    @classmethod
    def observe_execution(cls, kind: str, status: str, seconds: float) -> None:
        cls.EXECUTION_LATENCY.labels(kind=kind, status=status).observe(seconds)

    @classmethod
    def record_notification_failure(cls, kind: str, notification: str) -> None:
        cls.NOTIFICATION_FAILURES.labels(kind=kind, notification=notification).inc()
