from __future__ import annotations

import logging
from typing import Any, MutableMapping

import structlog

APP_NAME = "smartsplit"


def add_app_context(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def _resolve_level(level: str) -> int:
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        return logging.INFO
    return log_level


def configure_logging(level: str = "INFO") -> None:
    log_level = _resolve_level(level)

    logging.basicConfig(level=log_level, format="%(message)s")

    structlog.configure(
        processors=[
            add_app_context,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for a smartsplit module; names outside the package are prefixed."""
    if name != APP_NAME and not name.startswith(f"{APP_NAME}."):
        name = f"{APP_NAME}.{name}"
    return structlog.get_logger(name)
