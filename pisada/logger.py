"""Module loggers: one stream handler per logger, root configuration untouched."""

import logging


def get_logger(name: str) -> logging.Logger:
    """
    Logger for the analysis pipeline.

    - Attaches a stream handler only once
    - Does not touch the root logger configuration
    """

    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

        logger.propagate = False

    return logger
