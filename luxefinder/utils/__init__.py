"""Utility modules for configuration, logging, errors and parsing."""

from .config import get_config, load_config, reset_config
from .logger import (
    configure_logging,
    get_logger,
    log_exception,
    log_execution_time,
    log_performance,
    set_log_level,
)
from .validators import parse_price, validate_url

__all__ = [
    # Configuration
    "get_config",
    "load_config",
    "reset_config",
    # Logging
    "configure_logging",
    "get_logger",
    "log_execution_time",
    "log_performance",
    "set_log_level",
    "log_exception",
    # Parsing
    "parse_price",
    "validate_url",
]
