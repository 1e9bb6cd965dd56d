"""
Logging setup shared by the identity and team services.

Both services run from this package, so every record carries the name of the
service that emitted it as well as the id of the request being handled. The
request id travels between services in the X-Request-ID header: the
middleware adopts an incoming one, and the identity client forwards the
current one with request_id_headers().

    from scrims.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Team created", extra={"team_id": str(team.id)})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# LogRecord attributes that are not extra= fields
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "request_id", "service",
}


def get_request_id() -> Optional[str]:
    """Get the current request ID from context, if set."""
    return request_id_var.get()


def request_id_headers() -> Dict[str, str]:
    """Headers that carry the current request id to another service."""
    request_id = get_request_id()
    return {REQUEST_ID_HEADER: request_id} if request_id else {}


class ContextFilter(logging.Filter):
    """Stamp records with the service name and the current request id."""

    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.request_id = get_request_id() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", None),
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            log_obj["request_id"] = request_id
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or value is None:
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            log_obj[key] = value

        return json.dumps(log_obj)


DEV_FORMAT = "%(asctime)s %(levelname)-5s %(service)s [%(name)s] req=%(request_id)s %(message)s"


def configure_logging(
    *,
    service: str,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> logging.Handler:
    """
    Install the process-wide log handler for one service.

    Args:
        service: 'identity' or 'team'; added to every record
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'production' logs JSON, anything else readable lines
        debug: If True, use DEBUG level regardless of log_level

    Returns:
        The installed handler
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ContextFilter(service))
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
