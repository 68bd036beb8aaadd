"""Logging configuration for applications embedding ekstre.

Library modules only call ``logging.getLogger(__name__)``; hosts call
``setup_logging`` once at startup.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(verbose: bool = False, debug: bool = False) -> int:
    """Map verbosity flags to a logging level."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False, debug: bool = False) -> int:
    """Configure logging. Returns the level that was applied."""
    level = resolve_level(verbose, debug)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("ekstre").setLevel(level)
    return level
