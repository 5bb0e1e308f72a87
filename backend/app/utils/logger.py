import logging

from app.core.config import settings


def get_logger(name: str = "document-converter") -> logging.Logger:
    """Logger writing to stderr at LOG_LEVEL, one handler per name."""
    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL.upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
