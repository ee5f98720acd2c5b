"""
Logging setup.

All modules log through loguru's shared ``logger``; this only configures the
sink. Structured context is passed as keyword arguments on each call and ends
up in the record's ``extra`` dict (and in the JSON output when LOG_JSON=true).
"""

import sys
from loguru import logger
from .config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)


def setup_logging(level: str | None = None, json_output: bool | None = None):
    """
    Replace loguru's default sink with one configured from settings.

    Args:
        level: Minimum level to emit (default: settings.log_level)
        json_output: Emit one JSON object per line (default: settings.log_json)

    Returns:
        The configured loguru logger
    """
    level = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.log_json

    logger.remove()
    if json_output:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=False)
    return logger
