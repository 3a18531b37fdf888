# ats_app/utils/logging_config.py

"""
Application logging setup: console and rotating-file handlers with either a
JSON or a plain-text line format.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from flask import has_request_context, request

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line; request details are added inside a request"""

    def __init__(self, app_name="ATS Transfers", app_version="1.0.0"):
        super().__init__()
        self.app_name = app_name
        self.app_version = app_version

    def format(self, record):
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
            "app": self.app_name,
            "version": self.app_version,
        }
        if has_request_context():
            payload["request"] = {
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
            }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_formatter(app):
    if str(app.config.get("LOG_FORMAT", "text")).lower() == "json":
        return JSONFormatter(app.config.get("APP_NAME", "ATS Transfers"), app.config.get("APP_VERSION", "1.0.0"))
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(app):
    """
    (Re)configure ``app.logger`` from the LOG_* / ENABLE_*_LOGGING settings.

    Safe to call repeatedly: handlers installed by a previous call are removed
    first.
    """
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _build_formatter(app)

    for handler in list(app.logger.handlers):
        if getattr(handler, "_ats_handler", False):
            app.logger.removeHandler(handler)
            handler.close()

    if app.config.get("ENABLE_CONSOLE_LOGGING", True):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console.setLevel(level)
        console._ats_handler = True
        app.logger.addHandler(console)

    if app.config.get("ENABLE_FILE_LOGGING", False):
        log_dir = app.config.get("LOG_DIR", "logs")
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, "app.log"),
                maxBytes=app.config.get("LOG_FILE_MAX_BYTES", 10485760),
                backupCount=app.config.get("LOG_FILE_BACKUP_COUNT", 10),
            )
        except OSError as e:
            app.logger.warning(f"File logging disabled, cannot write to {log_dir}: {str(e)}")
        else:
            file_handler.setFormatter(formatter)
            file_handler.setLevel(level)
            file_handler._ats_handler = True
            app.logger.addHandler(file_handler)

    app.logger.setLevel(level)
    return app.logger
