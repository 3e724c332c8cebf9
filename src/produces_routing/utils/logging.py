"""Logging setup for produces-routing applications."""

import logging
import sys

_LOGGING_CONFIGURED = False


def setup_logging(level: str = "INFO") -> None:
    """Set up a single stdout handler on the root logger.

    Uses a singleton guard to prevent duplicate handlers when called
    more than once.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    :return: None
    :rtype: None
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger(__name__).debug("Logging already configured, skipping")
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,  # Override any existing configuration
    )
    _LOGGING_CONFIGURED = True
