"""
Central logging configuration for vcal_lite.

The parser itself only emits debug records through module loggers and never
configures logging. Applications embedding it call ``configure_lite_logging``
once at startup.
"""

import logging
import os
import sys
from typing import Optional

LITE_LOGGER_NAME = "vcal_lite"

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_COLOR_LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def _build_formatter(use_color: bool) -> logging.Formatter:
    if use_color:
        from colorlog import ColoredFormatter  # noqa: PLC0415

        return ColoredFormatter(_COLOR_LOG_FORMAT, datefmt="%H:%M:%S", log_colors=_LOG_COLORS)
    return logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S")


def configure_lite_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    use_color: Optional[bool] = None,
) -> logging.Logger:
    """
    Configure the ``vcal_lite`` logger for console output.

    Args:
        debug_mode: Whether to enable debug logging for vcal_lite modules
        force_debug: Override debug mode setting (None to use env var detection)
        use_color: Colorize level names with colorlog (None: only when stderr is a TTY)

    Returns:
        The configured ``vcal_lite`` logger

    Environment Variables:
        VCAL_LITE_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        VCAL_LITE_LOG_LEVEL: Override the level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("VCAL_LITE_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("VCAL_LITE_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = getattr(logging, env_log_level)

    if use_color is None:
        use_color = sys.stderr.isatty()

    lite_logger = logging.getLogger(LITE_LOGGER_NAME)
    lite_logger.setLevel(level)

    # Only add a handler once so repeated calls don't duplicate output.
    if not any(getattr(h, "_vcal_lite_handler", False) for h in lite_logger.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(_build_formatter(use_color))
        handler._vcal_lite_handler = True  # type: ignore[attr-defined]
        lite_logger.addHandler(handler)

    lite_logger.debug("Logging initialized at level %s", logging.getLevelName(level))
    return lite_logger


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    return {
        "root": logging.getLevelName(logging.getLogger().level),
        LITE_LOGGER_NAME: logging.getLevelName(logging.getLogger(LITE_LOGGER_NAME).level),
    }
