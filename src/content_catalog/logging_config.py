"""Logging configuration for the content catalog."""

import sys

from loguru import logger

_FORMAT = "{level.icon} {message}"
_VERBOSE_FORMAT = "{time:HH:mm:ss} {level.icon} {name}: {message}"


def configure_logging(*, verbose: bool = False) -> None:
    """Route loguru output to stderr; DEBUG with module names when verbose."""
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format=_VERBOSE_FORMAT)
    else:
        logger.add(sys.stderr, level="INFO", format=_FORMAT)
