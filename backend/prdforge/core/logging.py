"""structlog setup.

JSON lines in production, ConsoleRenderer when ``debug`` is on. Stdlib
loggers (uvicorn, SQLAlchemy, httpx) are routed through the same formatter
so every line carries the request's correlation id. Credentials that end up
in an event dict are masked before rendering.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

SECRET_KEYS = frozenset({"api_key", "anthropic_api_key", "notion_api_key", "access_token", "authorization"})
MASK = "***"

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "anthropic", "sqlalchemy.engine")


def add_correlation_id(logger, method, event_dict):
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def redact_secrets(logger, method, event_dict):
    """Mask values logged under a credential-like key."""
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = MASK
    return event_dict


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def configure_structlog(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog and the stdlib bridge.

    Must run before any module calls ``structlog.get_logger`` with
    ``cache_logger_on_first_use`` in effect, so main.py calls it first.

    Args:
        log_level: root level name, e.g. "INFO"
        json_logs: JSONRenderer when True, ConsoleRenderer otherwise
    """
    shared = _shared_processors()
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
                    "foreign_pre_chain": shared,
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"handlers": ["stdout"], "level": log_level},
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        }
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
