import logging
import os

logger = logging.getLogger(__name__)

_log_levels = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def get_log_level(env_variable_name: str = "LOG_LEVEL") -> int:
    """Get the logging level from an environment variable.

    If the variable is not set, or is set to ``none``, returns a value higher than
    CRITICAL to effectively disable logging. If the value is unrecognized, defaults
    to DEBUG.

    Args:
        env_variable_name: Name of the environment variable holding the level.
            Defaults to ``LOG_LEVEL``.

    Returns:
        int: Logging level constant (e.g., logging.DEBUG, logging.INFO, etc.).

    Example:
        >>> os.environ["LOG_LEVEL"] = "info"
        >>> get_log_level() == logging.INFO
        True

    Note:
        Recognized values (case-insensitive): none, debug, info, warning, warn, error, critical.
    """
    log_level = os.getenv(env_variable_name)

    if log_level is None or log_level.lower() == "none":
        return logging.CRITICAL + 1

    level = _log_levels.get(log_level.lower())
    if level is None:
        logger.warning(f"Did not recognize log level string {log_level}. Using DEBUG")
        return logging.DEBUG
    logger.info(f"Log level set to {logging.getLevelName(level)}")
    return level


def is_blank(value: str | None) -> bool:
    """Is ``value`` None, empty, or whitespace only?"""
    return value is None or not value.strip()
