"""Centralized logging configuration for metaloader.

Load runs execute on worker threads, so the log format carries the thread
name alongside the logger name.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "metaloader"

LOG_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Configure application-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        verbose: If True, sets level to DEBUG (per-record processing detail)

    Returns:
        Configured ``metaloader`` logger

    Example:
        >>> logger = setup_logging(verbose=True)
        >>> logger.info("Load started")
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    # setup_logging may run once per CLI invocation; drop stale handlers
    logger.handlers = []

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``metaloader`` namespace.

    Accepts either a short name (``"reader"``) or a module ``__name__``
    (``"metaloader.pipeline.reader"``); both end up below the root logger.

    Args:
        name: Short component name or module name

    Returns:
        Logger instance
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
