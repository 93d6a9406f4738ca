from __future__ import annotations

import logging

LOGGER_NAME = "starstruct"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stream handler to the package logger if none is configured."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[starstruct] %(message)s"))
        logger.addHandler(h)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
