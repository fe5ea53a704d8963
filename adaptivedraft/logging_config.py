"""Logging setup for hosts embedding the drafting core.

Modules log to children of the ``adaptivedraft`` logger
(``adaptivedraft.tools``, ``adaptivedraft.kernel``, ``adaptivedraft.measure``)
and never configure handlers themselves.
"""
import logging
import sys
from typing import Optional

LOGGER_NAME = "adaptivedraft"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the ``adaptivedraft`` logger with a console handler and an
    optional file handler.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Calling twice must not duplicate output
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
