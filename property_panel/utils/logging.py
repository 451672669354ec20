"""Logging for the property panel service.

Every record is one line of ``key=value`` pairs so provider degradations can
be grepped out of the service logs. ``bind_logger`` prefixes a fixed context
(for example a per-panel request id) onto each message of a build.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Any, MutableMapping, Optional, Tuple

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(namespace: str = "property_panel") -> logging.Logger:
    logger = logging.getLogger(namespace)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    logger.addHandler(handler)
    logger.setLevel(_LOG_LEVEL)
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    base = configure_logging()
    if child:
        return base.getChild(child)
    return base


class ContextLogger(logging.LoggerAdapter):
    """Prefix bound ``key=value`` pairs onto every message."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        prefix = " ".join(f"{key}={value}" for key, value in self.extra.items())
        return (f"{prefix} {msg}" if prefix else msg), kwargs


def bind_logger(logger: logging.Logger, **context: Any) -> ContextLogger:
    return ContextLogger(logger, context)


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


__all__ = ["configure_logging", "get_logger", "ContextLogger", "bind_logger", "new_request_id"]
