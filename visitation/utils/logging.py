"""Logging setup for the API and the scripts."""

import logging
import os
import sys

from pydantic import BaseModel


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    # HTTP stack loggers that log every request at INFO
    quiet_loggers: tuple[str, ...] = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(config: LogConfig | None = None) -> None:
    """Configure the root logger to write to stdout.

    Without a config the level comes from ``LOG_LEVEL``.
    """
    if config is None:
        config = LogConfig(level=os.getenv("LOG_LEVEL", "INFO"))

    logging.basicConfig(
        level=config.level.upper(),
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a module logger.

    Args:
        name: Module name, usually ``__name__``
        level: Explicit level, overrides ``LOG_LEVEL``
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    return logger
