"""
Logging configuration.

- JSON lines for the server in production
- Human-readable text for development
- Request ID and access log line for every API request
- Rich console output for the terminal front-end
"""
import json
import logging
import time
import uuid

from flask import Flask, g, request
from rich.logging import RichHandler

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "request_id"):
            entry["request_id"] = record.request_id
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def _level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


def init_logging(app: Flask) -> None:
    """Configure server logging from the app config and add request logging."""
    root = logging.getLogger()
    root.setLevel(_level(app.config.get("LOG_LEVEL", "INFO")))
    root.handlers.clear()

    handler = logging.StreamHandler()
    if app.config.get("LOG_FORMAT", "text") == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    @app.before_request
    def _attach_request_id():
        g.request_id = uuid.uuid4().hex[:12]
        g.request_start = time.time()

    @app.after_request
    def _log_request(response):
        duration_ms = (time.time() - getattr(g, "request_start", time.time())) * 1000
        app.logger.info(
            "%s %s %s %.0fms",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
            extra={"request_id": getattr(g, "request_id", "-")},
        )
        response.headers["X-Request-ID"] = getattr(g, "request_id", "-")
        return response


def init_cli_logging(level: str = "WARNING") -> None:
    """Route log records through rich so they do not break the dashboard layout."""
    root = logging.getLogger()
    root.setLevel(_level(level))
    root.handlers.clear()
    root.addHandler(RichHandler(show_path=False, rich_tracebacks=True))
    logging.getLogger("urllib3").setLevel(logging.WARNING)
