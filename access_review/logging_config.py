"""
Central logging configuration for the review service.

Every record carries the request id set by the middleware and, inside
``workflow_context``, the application id, state and action being worked on.
Production emits JSON lines; development emits one readable line.

Usage:
    from access_review.logging_config import get_logger, workflow_context
    logger = get_logger(__name__)
    with workflow_context(application_id=app.id, action=action):
        logger.info("Action recorded")
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_workflow_context_var: ContextVar[Optional[Dict[str, str]]] = ContextVar("workflow_context", default=None)

WORKFLOW_FIELDS = ("application_id", "state", "action")
UNSET = "-"

_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def get_workflow_context() -> Dict[str, str]:
    return dict(_workflow_context_var.get() or {})


def _plain(value: Any) -> str:
    return str(getattr(value, "value", value))


@contextmanager
def workflow_context(
    application_id: Any = None,
    state: Any = None,
    action: Any = None,
) -> Iterator[None]:
    """
    Attach workflow fields to every record logged inside the block.

    Nested blocks add to the enclosing context; fields left as None keep the
    outer value.
    """
    fields = get_workflow_context()
    for key, value in zip(WORKFLOW_FIELDS, (application_id, state, action)):
        if value is not None:
            fields[key] = _plain(value)
    token = _workflow_context_var.set(fields)
    try:
        yield
    finally:
        _workflow_context_var.reset(token)


class LogContextFilter(logging.Filter):
    """Copies the request id and workflow fields from context onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or UNSET  # type: ignore[attr-defined]
        context = _workflow_context_var.get() or {}
        for key in WORKFLOW_FIELDS:
            # an explicit extra= wins over the context
            if getattr(record, key, None) is None:
                setattr(record, key, context.get(key, UNSET))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or value is None or value == UNSET:
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = _plain(value)

        return json.dumps(log_obj)


def _create_dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s "
        "app=%(application_id)s state=%(state)s action=%(action)s %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(LogContextFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else _create_dev_formatter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
