"""Logging setup shared by the backend modules."""

from __future__ import annotations

import logging
from logging import Logger

_ROOT_LOGGER_NAME = "creative_writer"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> Logger:
    """Attach a stream handler to the package logger once and return it."""

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if level:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(getattr(handler, "_creative_writer", False) for handler in logger.handlers):
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._creative_writer = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    if not level:
        logger.setLevel(logging.INFO)
    return logger


__all__ = ["configure_logging"]
