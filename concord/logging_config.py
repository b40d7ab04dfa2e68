import logging
import sys
from typing import TextIO

LOGGER_NAME = "concord"


def setup_logging(level: int | str = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Configure the ``concord`` logger and return it.

    The handler is installed once; later calls only change the level, so a
    level read from ``Settings.log_level`` always takes effect.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return logger  # already configured
    handler = logging.StreamHandler(stream or sys.stdout)
    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    return logger
