"""Logging setup for LuxeFinder.

Handlers live on the ``luxefinder`` package logger and are attached once;
``get_logger`` hands out children of it, so the API, the scraper, the UI and
the CLI all share one colored console stream and one rotating log file.
"""

import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import colorlog


ROOT_LOGGER = "luxefinder"
LOG_FILE_NAME = "luxefinder.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

CONSOLE_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s%(reset)s %(cyan)s%(name)s%(reset)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def _resolve_level(level: Optional[str]) -> int:
    """Explicit level, else LOG_LEVEL, else INFO."""
    name = (level or os.environ.get('LOG_LEVEL') or 'INFO').upper()
    return getattr(logging, name, logging.INFO)


def _resolve_log_dir(log_dir: Optional[Path]) -> Path:
    if log_dir is not None:
        return Path(log_dir)
    env_log_dir = os.environ.get('LUXEFINDER_LOG_DIR')
    if env_log_dir:
        return Path(env_log_dir)
    return Path(__file__).resolve().parent.parent.parent / "logs"


def _console_handler() -> logging.Handler:
    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT, log_colors=LEVEL_COLORS))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8',
    )
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def configure_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> logging.Logger:
    """Attach the console and file handlers to the package logger.

    Safe to call repeatedly; handlers are only added the first time.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: LOG_LEVEL or INFO)
        log_dir: Directory for the rotating log file
            (default: LUXEFINDER_LOG_DIR, else ``logs/`` at the project root)

    Returns:
        The ``luxefinder`` package logger
    """
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    log_level = _resolve_level(level)
    root.setLevel(log_level)
    for handler in (_console_handler(), _file_handler(_resolve_log_dir(log_dir))):
        handler.setLevel(log_level)
        root.addHandler(handler)
    root.propagate = False
    return root


def get_logger(name: str, log_dir: Optional[Path] = None, level: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``luxefinder`` hierarchy.

    Names outside the package (e.g. ``__main__`` when Streamlit runs the UI
    script) are nested under it so they reach the same handlers.

    Args:
        name: Usually ``__name__``
        log_dir: Passed to configure_logging on first use
        level: Passed to configure_logging on first use
    """
    configure_logging(level, log_dir)
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def log_performance(logger: logging.Logger, operation: str, duration: float) -> None:
    logger.info(f"Performance: {operation} took {duration:.3f}s")


@contextmanager
def log_execution_time(logger: logging.Logger, operation: str):
    """Time the enclosed block and report it through log_performance.

    Usage:
        with log_execution_time(logger, "eBay fan-out"):
            items = await aggregator.search(request)
    """
    logger.debug(f"Starting: {operation}")
    started = time.perf_counter()
    try:
        yield
    finally:
        log_performance(logger, operation, time.perf_counter() - started)


def set_log_level(logger: logging.Logger, level: str) -> None:
    """Change the level of the package logger and its handlers.

    ``logger`` is any logger from get_logger; the change applies to the
    whole ``luxefinder`` hierarchy.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = configure_logging()
    root.setLevel(log_level)
    for handler in root.handlers:
        handler.setLevel(log_level)
    logger.info(f"Log level changed to {logging.getLevelName(log_level)}")


def log_exception(logger: logging.Logger, operation: str, exception: Exception) -> None:
    """Log a failure with its traceback.

    Application exceptions carry a context dict; it is written alongside
    the traceback so upstream details stay in the logs only.

    Args:
        logger: Logger instance
        operation: What was being attempted
        exception: The exception that was raised
    """
    context = getattr(exception, "context", None)
    suffix = f" context={context}" if context else ""
    logger.error(f"Failed: {operation} ({exception}){suffix}", exc_info=exception)
