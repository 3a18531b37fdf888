# ats_app/utils/monitoring.py

"""
Health check and Prometheus metrics endpoints.
"""

import time
from datetime import datetime, timezone

from flask import Response, g, jsonify, request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ats_app.models import db

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests handled",
    ["method", "endpoint", "status"],
)
HTTP_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)


class HealthChecker:
    """Database-backed liveness/health check"""

    def __init__(self, app=None):
        self.app = app

    def basic_health_check(self):
        timestamp = datetime.now(timezone.utc).isoformat()
        try:
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            return jsonify({"status": "unhealthy", "error": str(e), "timestamp": timestamp}), 503
        return jsonify({"status": "healthy", "database": "ok", "timestamp": timestamp}), 200


class PerformanceMonitor:
    """Records per-request counts and latency into Prometheus metrics"""

    def __init__(self, app=None):
        self.app = app

    def init_app(self, app):
        self.app = app

        @app.before_request
        def _start_timer():
            g.request_started = time.perf_counter()

        @app.after_request
        def _record(response):
            started = g.pop("request_started", None)
            if started is not None:
                self.record_request(
                    time.perf_counter() - started,
                    response.status_code,
                    request.url_rule.rule if request.url_rule else "unmatched",
                    request.method,
                )
            return response

    def record_request(self, duration, status_code, endpoint, method="GET"):
        endpoint = endpoint or "unknown"
        HTTP_REQUESTS.labels(method=method, endpoint=endpoint, status=str(status_code)).inc()
        if duration is not None and duration >= 0:
            HTTP_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)


def init_monitoring(app):
    """Register the health endpoint, and metrics collection when enabled"""
    health_checker = HealthChecker(app)
    app.add_url_rule(
        app.config.get("HEALTH_CHECK_ENDPOINT", "/health"),
        "health_check",
        health_checker.basic_health_check,
    )

    if not app.config.get("MONITORING_ENABLED", False):
        return health_checker

    PerformanceMonitor().init_app(app)

    def metrics():
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    app.add_url_rule(app.config.get("METRICS_ENDPOINT", "/metrics"), "metrics", metrics)
    return health_checker
