"""
Logging setup for the CLI.

Engine modules log to the "stemsplit" logger hierarchy; the CLI renders
those records with rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "stemsplit"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Send stemsplit log records to stderr through a RichHandler.

    Args:
        verbose: Log per-event details (DEBUG) instead of progress (INFO)

    Returns:
        The configured "stemsplit" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
