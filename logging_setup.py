"""Logging configuration for the gridkit command line."""

import logging
import os
import sys

import structlog

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def resolve_level(value, debug: bool = False) -> int:
    if debug:
        return logging.DEBUG
    if value is None:
        return logging.WARNING
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    return _LEVELS.get(str(value).upper(), logging.WARNING)


def _resolve_bool(value):
    if value is None:
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def configure_logging(level=None, debug: bool = False, json=None, force: bool = False):
    """Route stdlib logging through structlog's formatter on stderr."""
    resolved_level = resolve_level(level or os.environ.get("GRIDKIT_LOG_LEVEL"), debug)
    env_json = _resolve_bool(os.environ.get("GRIDKIT_LOG_JSON"))
    resolved_json = env_json if json is None else json

    if resolved_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
    )

    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved_level)
        return

    if force:
        root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(resolved_level)
